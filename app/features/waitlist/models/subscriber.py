from sqlalchemy import Boolean, Column, ForeignKey, Index, String, false

from app.platform.db.base import BaseModel


class Subscriber(BaseModel):
    """
    A waitlist signup.

    ``referred_by`` points at the subscriber whose referral code was used at
    signup. It is written once, on insert, and never re-parented.
    """
    __tablename__ = "subscribers"

    email = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=True)
    referral_code = Column(String(20), unique=True, nullable=False, index=True)
    referred_by = Column(String(36), ForeignKey("subscribers.id"), nullable=True, index=True)
    verified = Column(Boolean, nullable=False, default=False, server_default=false())

    __table_args__ = (
        Index("ix_subscribers_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Subscriber(email='{self.email}', referral_code='{self.referral_code}')>"
