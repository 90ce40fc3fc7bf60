"""
Seed the waitlist with a couple of referrers and their referrals.

Usage:
    python -m scripts.seed_waitlist
"""

import asyncio

from sqlalchemy import func, select

from app.features.waitlist.models.subscriber import Subscriber
from app.platform.config import get_settings
from app.platform.db.session import Database

REFERRERS = [
    {"email": "user1@example.com", "name": "John Doe", "referral_code": "USER1CODE"},
    {"email": "user2@example.com", "name": "Jane Smith", "referral_code": "USER2CODE"},
]

# referrer code -> people who signed up with it
REFERRALS = {
    "USER1CODE": [
        {"email": "referred1@example.com", "name": "Alex Johnson", "referral_code": "REFERRED1"},
        {"email": "referred2@example.com", "name": "Taylor Swift", "referral_code": "REFERRED2"},
    ],
    "USER2CODE": [
        {"email": "referred3@example.com", "name": "Sam Wilson", "referral_code": "REFERRED3"},
    ],
}


async def get_or_create(session, referred_by=None, **fields) -> Subscriber:
    result = await session.execute(select(Subscriber).where(Subscriber.email == fields["email"]))
    subscriber = result.scalar_one_or_none()
    if subscriber:
        print(f"Skipping {fields['email']}, already on the waitlist")
        return subscriber

    subscriber = Subscriber(referred_by=referred_by, verified=True, **fields)
    session.add(subscriber)
    await session.flush()
    return subscriber


async def seed_data(db: Database) -> None:
    async with db.session_factory() as session:
        referrers = {}
        for fields in REFERRERS:
            referrers[fields["referral_code"]] = await get_or_create(session, **fields)

        for code, referrals in REFERRALS.items():
            for fields in referrals:
                await get_or_create(session, referred_by=referrers[code].id, **fields)

        await session.commit()

        total = (await session.execute(select(func.count()).select_from(Subscriber))).scalar_one()
        print(f"Total subscribers: {total}")

        for code, referrer in referrers.items():
            result = await session.execute(
                select(func.count()).select_from(Subscriber).where(Subscriber.referred_by == referrer.id)
            )
            print(f"{referrer.email} ({code}) has {result.scalar_one()} referrals")


async def main() -> None:
    db = Database.from_settings(get_settings())
    try:
        await db.create_all()
        await seed_data(db)
    finally:
        await db.dispose()


if __name__ == "__main__":
    asyncio.run(main())
