import pytest
from sqlalchemy import func, select

from app.features.waitlist.models.subscriber import Subscriber
from scripts.seed_waitlist import seed_data


async def total(session) -> int:
    return (await session.execute(select(func.count()).select_from(Subscriber))).scalar_one()


async def referral_count(session, email) -> int:
    referrer = (
        await session.execute(select(Subscriber).where(Subscriber.email == email))
    ).scalar_one()
    result = await session.execute(
        select(func.count()).select_from(Subscriber).where(Subscriber.referred_by == referrer.id)
    )
    return result.scalar_one()


@pytest.mark.asyncio
async def test_seed_fresh_database(database):
    await seed_data(database)

    async with database.session_factory() as session:
        assert await total(session) == 5
        assert await referral_count(session, "user1@example.com") == 2
        assert await referral_count(session, "user2@example.com") == 1


@pytest.mark.asyncio
async def test_seed_twice_skips_existing_rows(database):
    await seed_data(database)
    await seed_data(database)

    async with database.session_factory() as session:
        assert await total(session) == 5
        assert await referral_count(session, "user1@example.com") == 2


@pytest.mark.asyncio
async def test_seed_over_referrer_with_different_code(database):
    async with database.session_factory() as session:
        session.add(Subscriber(email="user1@example.com", referral_code="RANDOM12"))
        await session.commit()

    await seed_data(database)

    async with database.session_factory() as session:
        assert await total(session) == 5
        assert await referral_count(session, "user1@example.com") == 2
        assert await referral_count(session, "user2@example.com") == 1
