from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.features.waitlist.utils.referral_code import normalize_referral_code


class WaitlistIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    email: EmailStr
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    referral_code: Optional[str] = Field(None, alias="referralCode")

    @field_validator("email", mode="before")
    @classmethod
    def check_email_length(cls, value):
        if isinstance(value, str):
            value = value.strip()
            if len(value) < 5:
                raise ValueError("Email must be at least 5 characters")
            if len(value) > 100:
                raise ValueError("Email must be less than 100 characters")
        return value

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("referral_code")
    @classmethod
    def clean_referral_code(cls, value: Optional[str]) -> Optional[str]:
        return normalize_referral_code(value)


class ReferralCodeQuery(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    code: str = Field(..., min_length=3, max_length=20)


class ReferralOut(BaseModel):
    date: datetime
    email: str


class ReferralStatsOut(BaseModel):
    total_referrals: int = Field(serialization_alias="totalReferrals")
    referrals: list[ReferralOut]
