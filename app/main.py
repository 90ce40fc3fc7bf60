from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api_routers.v1 import api_router
from app.features.waitlist.models.subscriber import Subscriber  # noqa: F401  (registers the table)
from app.platform.config import Settings, get_settings
from app.platform.db.session import Database
from app.platform.exceptions import add_exception_handlers


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = Database.from_settings(settings)
        if settings.AUTO_CREATE_TABLES:
            await db.create_all()
        app.state.db = db
        try:
            yield
        finally:
            await db.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Waitlist signups with referral codes",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Root endpoint for basic info
    @app.get("/", tags=["Info"])
    def root():
        return {
            "app_name": settings.APP_NAME,
            "description": "Join the waitlist and track your referrals.",
            "version": settings.APP_VERSION,
            "docs_url": "/docs",
            "api_base": settings.API_PREFIX or "/",
        }

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    add_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    return app


app = create_app()
