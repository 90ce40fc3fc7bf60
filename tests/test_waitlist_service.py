from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.features.waitlist.exceptions import (
    DuplicateEmailError,
    InvalidReferralCodeError,
    ReferralCodeGenerationError,
    ReferralCodeNotFoundError,
)
from app.features.waitlist.models.subscriber import Subscriber
from app.features.waitlist.schemas.waitlist import WaitlistIn
from app.features.waitlist.services.waitlist import WaitlistService
from app.platform.exceptions import InputValidationError, StoreUnavailableError

GENERATOR = "app.features.waitlist.services.waitlist.generate_referral_code"


async def add_subscriber(session, email, code, referred_by=None, created_at=None) -> Subscriber:
    subscriber = Subscriber(email=email, referral_code=code, referred_by=referred_by)
    if created_at is not None:
        subscriber.created_at = created_at
    session.add(subscriber)
    await session.commit()
    await session.refresh(subscriber)
    return subscriber


@pytest.mark.asyncio
async def test_join_waitlist_links_referrer(db_session):
    service = WaitlistService(db_session)
    referrer = await service.join_waitlist(WaitlistIn(email="johnsmith@example.com", name="John"))

    referred = await service.join_waitlist(
        WaitlistIn(email="janedoe@example.com", referralCode=referrer.referral_code)
    )

    assert referrer.referred_by is None
    assert referred.referred_by == referrer.id
    assert referred.verified is False
    assert referred.created_at is not None

    stats = await service.get_referral_stats(referrer.referral_code)
    assert stats.total_referrals == 1
    assert stats.referrals[0].email == "ja*****@example.com"
    assert stats.referrals[0].date == referred.created_at
    assert await service.count_subscribers() == 2


@pytest.mark.asyncio
async def test_join_waitlist_rejects_duplicate_before_referral_check(db_session):
    await add_subscriber(db_session, "alice@example.com", "ALICE001")
    service = WaitlistService(db_session)

    with pytest.raises(DuplicateEmailError):
        await service.join_waitlist(WaitlistIn(email="alice@example.com", referralCode="MISSING1"))

    assert await service.count_subscribers() == 1


@pytest.mark.asyncio
async def test_join_waitlist_unknown_referral_code_creates_nothing(db_session):
    service = WaitlistService(db_session)

    with pytest.raises(InvalidReferralCodeError):
        await service.join_waitlist(WaitlistIn(email="bob@example.com", referralCode="MISSING1"))

    assert await service.count_subscribers() == 0


@pytest.mark.asyncio
async def test_join_waitlist_regenerates_taken_code(db_session):
    await add_subscriber(db_session, "alice@example.com", "AAAA1111")
    service = WaitlistService(db_session)

    with patch(GENERATOR, side_effect=["AAAA1111", "BBBB2222"]) as generator:
        subscriber = await service.join_waitlist(WaitlistIn(email="bob@example.com"))

    assert subscriber.referral_code == "BBBB2222"
    assert generator.call_count == 2


@pytest.mark.asyncio
async def test_join_waitlist_gives_up_after_max_attempts(db_session):
    await add_subscriber(db_session, "alice@example.com", "AAAA1111")
    service = WaitlistService(db_session, max_code_attempts=3)

    with patch(GENERATOR, return_value="AAAA1111") as generator:
        with pytest.raises(ReferralCodeGenerationError):
            await service.join_waitlist(WaitlistIn(email="bob@example.com"))

    assert generator.call_count == 3
    assert await service.count_subscribers() == 1


@pytest.mark.asyncio
async def test_join_waitlist_retries_when_code_taken_during_insert(db_session):
    await add_subscriber(db_session, "alice@example.com", "AAAA1111")
    service = WaitlistService(db_session)
    # Pretend the pre-insert check saw the code as free, as in a concurrent signup
    service.get_by_referral_code = AsyncMock(return_value=None)

    with patch(GENERATOR, side_effect=["AAAA1111", "CCCC3333"]):
        subscriber = await service.join_waitlist(WaitlistIn(email="bob@example.com"))

    assert subscriber.referral_code == "CCCC3333"
    assert await service.count_subscribers() == 2


@pytest.mark.asyncio
async def test_join_waitlist_duplicate_email_race(db_session):
    await add_subscriber(db_session, "alice@example.com", "AAAA1111")
    service = WaitlistService(db_session)
    # First check misses the row, as if it was inserted after the check ran
    service.email_exists = AsyncMock(side_effect=[False, True])

    with pytest.raises(DuplicateEmailError):
        await service.join_waitlist(WaitlistIn(email="alice@example.com"))

    result = await db_session.execute(select(Subscriber))
    assert len(result.scalars().all()) == 1


@pytest.mark.asyncio
async def test_join_waitlist_store_failure(db_session):
    service = WaitlistService(db_session)
    service.email_exists = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))

    with pytest.raises(StoreUnavailableError):
        await service.join_waitlist(WaitlistIn(email="bob@example.com"))


@pytest.mark.asyncio
async def test_referral_stats_are_ordered_by_signup_time(db_session):
    referrer = await add_subscriber(db_session, "owner@example.com", "OWNER001")
    await add_subscriber(db_session, "charlie@example.com", "REF00003", referrer.id, datetime(2026, 3, 1, 12, 0))
    await add_subscriber(db_session, "alice@example.com", "REF00001", referrer.id, datetime(2026, 1, 1, 12, 0))
    await add_subscriber(db_session, "bob@example.com", "REF00002", referrer.id, datetime(2026, 2, 1, 12, 0))
    await add_subscriber(db_session, "stranger@example.com", "OTHER001")

    stats = await WaitlistService(db_session).get_referral_stats("OWNER001")

    assert stats.total_referrals == 3
    assert [r.email for r in stats.referrals] == [
        "al***@example.com",
        "bo*@example.com",
        "ch*****@example.com",
    ]
    assert [r.date.month for r in stats.referrals] == [1, 2, 3]


@pytest.mark.asyncio
async def test_referral_stats_unknown_code(db_session):
    with pytest.raises(ReferralCodeNotFoundError):
        await WaitlistService(db_session).get_referral_stats("UNKNOWN1")


@pytest.mark.asyncio
@pytest.mark.parametrize("code", [None, "", "  ab  ", "X" * 21])
async def test_referral_stats_rejects_malformed_code(db_session, code):
    with pytest.raises(InputValidationError) as exc_info:
        await WaitlistService(db_session).get_referral_stats(code)

    assert exc_info.value.message == "Invalid referral code format"
    assert "code" in exc_info.value.errors


@pytest.mark.asyncio
async def test_count_subscribers(db_session):
    service = WaitlistService(db_session)
    assert await service.count_subscribers() == 0

    await add_subscriber(db_session, "alice@example.com", "AAAA1111")
    await add_subscriber(db_session, "bob@example.com", "BBBB2222")

    assert await service.count_subscribers() == 2
