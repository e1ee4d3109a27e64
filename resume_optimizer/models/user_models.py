"""Pydantic models for user records."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from resume_optimizer.models import validators


class UserCreate(BaseModel):
    """Request model for creating a user record."""
    full_name: str = Field(..., alias="fullName")
    email: EmailStr
    phone: Optional[str] = None
    location: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator("full_name", mode="before")
    @classmethod
    def validate_full_name(cls, v):
        return validators.required_text(v, "Full name", 100)

    @field_validator("email", mode="after")
    @classmethod
    def lowercase_email(cls, v):
        return v.lower()

    @field_validator("phone", mode="before")
    @classmethod
    def validate_phone(cls, v):
        return validators.phone_number(v)

    @field_validator("location", mode="before")
    @classmethod
    def validate_location(cls, v):
        return validators.optional_text(v, "Location", 200)


class UserResponse(BaseModel):
    user_uuid: str
    full_name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserUpdate(BaseModel):
    """Request model for updating the caller's own user record."""
    full_name: str = Field(..., alias="fullName")
    phone: Optional[str] = None
    location: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator("full_name", mode="before")
    @classmethod
    def validate_full_name(cls, v):
        return validators.required_text(v, "Full name", 100)

    @field_validator("phone", mode="before")
    @classmethod
    def validate_phone(cls, v):
        return validators.phone_number(v)

    @field_validator("location", mode="before")
    @classmethod
    def validate_location(cls, v):
        return validators.optional_text(v, "Location", 200)
