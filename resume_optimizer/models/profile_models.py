"""Pydantic models for contact profiles."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from resume_optimizer.config import settings
from resume_optimizer.models import validators


class ProfileCreate(BaseModel):
    """Request model for creating or replacing a profile."""
    profile_name: str = Field(..., alias="profileName")
    full_name: str = Field(..., alias="fullName")
    email: str
    mobile_numbers: List[str] = Field(default_factory=list, alias="mobileNumbers")
    linkedin_url: Optional[str] = Field(None, alias="linkedinUrl")
    location: Optional[str] = None
    is_default: bool = Field(False, alias="isDefault")

    class Config:
        populate_by_name = True

    @field_validator("profile_name", mode="before")
    @classmethod
    def validate_profile_name(cls, v):
        return validators.required_text(v, "Profile name", settings.profile_name_max_length)

    @field_validator("full_name", mode="before")
    @classmethod
    def validate_full_name(cls, v):
        return validators.required_text(v, "Full name", 100)

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v):
        return validators.email_address(v)

    @field_validator("mobile_numbers", mode="before")
    @classmethod
    def validate_mobile_numbers(cls, v):
        return validators.mobile_numbers(v)

    @field_validator("linkedin_url", mode="before")
    @classmethod
    def validate_linkedin_url(cls, v):
        return validators.linkedin_url(v)

    @field_validator("location", mode="before")
    @classmethod
    def validate_location(cls, v):
        return validators.optional_text(v, "Location", 200)

    @field_validator("is_default", mode="before")
    @classmethod
    def none_is_false(cls, v):
        return False if v is None else v


class ProfileResponse(BaseModel):
    """Profile as returned by the API."""
    id: int
    profile_uuid: str
    profile_name: str
    full_name: str
    email: str
    mobile_numbers: List[str] = Field(default_factory=list)
    linkedin_url: Optional[str] = None
    location: Optional[str] = None
    is_default: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("mobile_numbers", mode="before")
    @classmethod
    def none_is_empty(cls, v):
        return v or []
