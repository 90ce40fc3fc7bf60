from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.exc import SQLAlchemyError

from app.platform.db.session import Database, get_database
from app.platform.logger import get_logger
from app.platform.response import api_response

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health", tags=["health"])
async def health_check(request: Request, database: Database = Depends(get_database)):
    service_name = request.app.state.settings.APP_NAME
    try:
        await database.ping()
    except SQLAlchemyError as exc:
        logger.error(f"Health check failed to reach the database: {exc}")
        return api_response(
            message="Service is unhealthy",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            status="degraded",
            service=service_name,
            database="unreachable",
        )

    return api_response(
        message="Service is healthy",
        status_code=status.HTTP_200_OK,
        status="ok",
        service=service_name,
        database="ok",
    )
