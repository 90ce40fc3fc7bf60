from typing import Optional

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.waitlist.exceptions import (
    DuplicateEmailError,
    InvalidReferralCodeError,
    ReferralCodeGenerationError,
    ReferralCodeNotFoundError,
)
from app.features.waitlist.models.subscriber import Subscriber
from app.features.waitlist.schemas.waitlist import (
    ReferralCodeQuery,
    ReferralOut,
    ReferralStatsOut,
    WaitlistIn,
)
from app.features.waitlist.utils.masking import mask_email
from app.features.waitlist.utils.referral_code import generate_referral_code
from app.platform.exceptions import InputValidationError, StoreUnavailableError, field_errors
from app.platform.logger import get_logger

logger = get_logger(__name__)


class WaitlistService:
    """Signup, referral lookup and counting over the ``subscribers`` table."""

    def __init__(self, db: AsyncSession, code_length: int = 8, max_code_attempts: int = 5):
        self.db = db
        self.code_length = code_length
        self.max_code_attempts = max_code_attempts

    async def get_by_referral_code(self, code: str) -> Optional[Subscriber]:
        result = await self.db.execute(select(Subscriber).where(Subscriber.referral_code == code))
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        result = await self.db.execute(select(Subscriber.id).where(Subscriber.email == email))
        return result.first() is not None

    async def join_waitlist(self, payload: WaitlistIn) -> Subscriber:
        """
        Add a subscriber, linking it to the owner of ``payload.referral_code``.

        Raises:
            DuplicateEmailError: the email is already on the waitlist.
            InvalidReferralCodeError: no subscriber owns the supplied code.
            ReferralCodeGenerationError: no free code within the attempt budget.
            StoreUnavailableError: any other database failure.
        """
        try:
            if await self.email_exists(payload.email):
                raise DuplicateEmailError()

            referrer_id = None
            if payload.referral_code:
                referrer = await self.get_by_referral_code(payload.referral_code)
                if referrer is None:
                    logger.info(f"Signup rejected, unknown referral code {payload.referral_code}")
                    raise InvalidReferralCodeError()
                referrer_id = referrer.id

            for attempt in range(1, self.max_code_attempts + 1):
                code = generate_referral_code(self.code_length)
                if await self.get_by_referral_code(code) is not None:
                    logger.warning(f"Referral code collision on attempt {attempt}: {code}")
                    continue

                subscriber = Subscriber(
                    email=payload.email,
                    name=payload.name,
                    referral_code=code,
                    referred_by=referrer_id,
                )
                self.db.add(subscriber)
                try:
                    await self.db.commit()
                except IntegrityError:
                    await self.db.rollback()
                    # Lost a race: either the email or the code was taken meanwhile.
                    if await self.email_exists(payload.email):
                        raise DuplicateEmailError()
                    logger.warning(f"Referral code taken during insert on attempt {attempt}: {code}")
                    continue

                await self.db.refresh(subscriber)
                logger.info(
                    f"Subscriber {mask_email(subscriber.email)} joined the waitlist "
                    f"(code={subscriber.referral_code}, referred_by={subscriber.referred_by})"
                )
                return subscriber
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception("Failed to store waitlist signup", exc_info=exc)
            raise StoreUnavailableError() from exc

        logger.error(f"Gave up generating a referral code after {self.max_code_attempts} attempts")
        raise ReferralCodeGenerationError()

    async def count_subscribers(self) -> int:
        try:
            result = await self.db.execute(select(func.count()).select_from(Subscriber))
            return result.scalar_one()
        except SQLAlchemyError as exc:
            logger.exception("Failed to count subscribers", exc_info=exc)
            raise StoreUnavailableError() from exc

    async def get_referral_stats(self, code: Optional[str]) -> ReferralStatsOut:
        """
        Referral totals for the owner of ``code``, oldest referral first.

        Emails in the result are masked.
        """
        try:
            query = ReferralCodeQuery(code=code)
        except ValidationError as exc:
            raise InputValidationError(
                "Invalid referral code format", errors=field_errors(exc.errors())
            ) from exc

        try:
            referrer = await self.get_by_referral_code(query.code.upper())
            if referrer is None:
                logger.info(f"Referral stats requested for unknown code {query.code}")
                raise ReferralCodeNotFoundError()

            result = await self.db.execute(
                select(Subscriber.email, Subscriber.created_at)
                .where(Subscriber.referred_by == referrer.id)
                .order_by(Subscriber.created_at.asc(), Subscriber.id.asc())
            )
            rows = result.all()
        except SQLAlchemyError as exc:
            logger.exception("Failed to load referral stats", exc_info=exc)
            raise StoreUnavailableError() from exc

        return ReferralStatsOut(
            total_referrals=len(rows),
            referrals=[ReferralOut(date=row.created_at, email=mask_email(row.email)) for row in rows],
        )
