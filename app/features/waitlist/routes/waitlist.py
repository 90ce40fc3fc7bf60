from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.waitlist.schemas.waitlist import WaitlistIn
from app.features.waitlist.services.waitlist import WaitlistService
from app.platform.db.session import get_db
from app.platform.response import api_response

router = APIRouter(prefix="/waitlist", tags=["Waitlist"])


def get_waitlist_service(request: Request, db: AsyncSession = Depends(get_db)) -> WaitlistService:
    settings = request.app.state.settings
    return WaitlistService(
        db,
        code_length=settings.REFERRAL_CODE_LENGTH,
        max_code_attempts=settings.REFERRAL_CODE_MAX_ATTEMPTS,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def join_waitlist(
    payload: WaitlistIn,
    service: WaitlistService = Depends(get_waitlist_service),
):
    subscriber = await service.join_waitlist(payload)
    return api_response(
        message="Thank you for joining our waitlist! We'll notify you when we launch.",
        status_code=status.HTTP_201_CREATED,
        referralCode=subscriber.referral_code,
    )


@router.get("/count")
async def get_waitlist_count(service: WaitlistService = Depends(get_waitlist_service)):
    count = await service.count_subscribers()
    return api_response(count=count)


@router.get("/referrals")
async def get_referral_stats(
    code: Optional[str] = None,
    service: WaitlistService = Depends(get_waitlist_service),
):
    stats = await service.get_referral_stats(code)
    return api_response(stats=stats.model_dump(by_alias=True))
