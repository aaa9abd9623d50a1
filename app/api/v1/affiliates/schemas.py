from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class AffiliateCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    instagram: Optional[str] = Field(None, max_length=255)  # Optional; empty string means no handle

    @field_validator("instagram")
    @classmethod
    def empty_instagram_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class AffiliateCreateResponse(BaseModel):
    success: bool = True
    code: str
