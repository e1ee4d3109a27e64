"""Pydantic models for resume templates."""
from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, Field, field_validator

from resume_optimizer.config import settings
from resume_optimizer.models import validators


class TemplateCreate(BaseModel):
    """Request model for creating or replacing a template."""
    template_name: str = Field(..., alias="templateName")
    resume_content: str = Field(..., alias="resumeContent")
    professional_summary: Optional[str] = Field(None, alias="professionalSummary")
    skills: List[Any] = Field(default_factory=list)
    experience: List[Any] = Field(default_factory=list)
    education: List[Any] = Field(default_factory=list)
    is_default: bool = Field(False, alias="isDefault")

    class Config:
        populate_by_name = True

    @field_validator("template_name", mode="before")
    @classmethod
    def validate_template_name(cls, v):
        return validators.required_text(v, "Template name", settings.template_name_max_length)

    @field_validator("resume_content", mode="before")
    @classmethod
    def validate_resume_content(cls, v):
        return validators.required_text(v, "Resume content")

    @field_validator("professional_summary", mode="before")
    @classmethod
    def validate_summary(cls, v):
        return validators.optional_text(v, "Professional summary")

    @field_validator("skills", "experience", "education", mode="before")
    @classmethod
    def validate_arrays(cls, v, info):
        return validators.json_array(v, info.field_name.capitalize())

    @field_validator("is_default", mode="before")
    @classmethod
    def none_is_false(cls, v):
        return False if v is None else v


class TemplateResponse(BaseModel):
    """Template as returned by the API."""
    id: int
    template_uuid: str
    template_name: str
    resume_content: str
    professional_summary: Optional[str] = None
    skills: List[Any] = Field(default_factory=list)
    experience: List[Any] = Field(default_factory=list)
    education: List[Any] = Field(default_factory=list)
    is_default: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("skills", "experience", "education", mode="before")
    @classmethod
    def none_is_empty(cls, v):
        return v or []


class TemplatePreview(BaseModel):
    """Short content summary of a template."""
    templateName: str
    professionalSummary: str
    contentPreview: str
    createdAt: Optional[datetime] = None
    wordCount: int
