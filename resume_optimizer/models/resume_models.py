"""Pydantic models for saved resumes and optimization requests."""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from resume_optimizer.config import settings
from resume_optimizer.constants.resume_status import VALID_STATUSES
from resume_optimizer.models import validators


class ResumeFields(BaseModel):
    """Job and content fields shared by create and update requests."""
    resume_title: Optional[str] = Field(None, alias="resumeTitle")
    company_name: Optional[str] = Field(None, alias="companyName")
    job_id: Optional[str] = Field(None, alias="jobId")
    job_url: Optional[str] = Field(None, alias="jobUrl")
    job_posting_company: Optional[str] = Field(None, alias="jobPostingCompany")
    job_description: Optional[str] = Field(None, alias="jobDescription")
    original_resume_content: Optional[str] = Field(None, alias="originalResumeContent")
    profile_uuid: Optional[str] = Field(None, alias="profileUuid")
    template_uuid: Optional[str] = Field(None, alias="templateUuid")

    class Config:
        populate_by_name = True

    @field_validator("resume_title", mode="before")
    @classmethod
    def validate_title(cls, v):
        return validators.optional_text(v, "Resume title", settings.resume_title_max_length)

    @field_validator("company_name", "job_posting_company", mode="before")
    @classmethod
    def validate_company(cls, v):
        return validators.optional_text(v, "Company name", 200)

    @field_validator("job_id", mode="before")
    @classmethod
    def validate_job_id(cls, v):
        return validators.optional_text(v, "Job ID", 100)

    @field_validator("job_url", mode="before")
    @classmethod
    def validate_job_url(cls, v):
        return validators.web_url(v)

    @field_validator("job_description", "original_resume_content", "profile_uuid", "template_uuid", mode="before")
    @classmethod
    def validate_text(cls, v):
        return validators.optional_text(v, "Field")

    def missing_required(self) -> List[str]:
        required = {
            "resumeTitle": self.resume_title,
            "companyName": self.company_name,
            "jobDescription": self.job_description,
            "originalResumeContent": self.original_resume_content,
        }
        return [name for name, value in required.items() if not value]

    def column_values(self) -> Dict[str, Any]:
        return {
            "resume_title": self.resume_title,
            "company_name": self.company_name,
            "job_id": self.job_id,
            "job_url": self.job_url,
            "job_posting_company": self.job_posting_company or self.company_name,
            "job_description": self.job_description,
            "original_resume_content": self.original_resume_content,
        }


class ResumeCreate(ResumeFields):
    """Request model for creating a draft resume."""

    @model_validator(mode="after")
    def validate_required_fields(self):
        missing = self.missing_required()
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")
        return self


class ResumeUpdate(ResumeFields):
    """Either optimized content (with optional status) or a full set of basic fields."""
    optimized_resume_content: Optional[Any] = Field(None, alias="optimizedResumeContent")
    status: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in VALID_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(VALID_STATUSES)}")
        return v

    @model_validator(mode="after")
    def validate_required_fields(self):
        if self.optimized_resume_content:
            return self
        missing = self.missing_required()
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")
        return self


class PersonalInfo(BaseModel):
    """Ad-hoc contact details supplied with an optimize request."""
    full_name: Optional[str] = Field(None, alias="fullName")
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin_url: Optional[str] = Field(None, alias="linkedinUrl")

    class Config:
        populate_by_name = True


class OptimizeRequest(BaseModel):
    resume_uuid: Optional[str] = Field(None, alias="resumeUuid")
    job_description: Optional[str] = Field(None, alias="jobDescription")
    resume_text: Optional[str] = Field(None, alias="resumeText")
    personal_info: Optional[PersonalInfo] = Field(None, alias="personalInfo")
    profile_uuid: Optional[str] = Field(None, alias="profileUuid")
    template_uuid: Optional[str] = Field(None, alias="templateUuid")
    save_as_new: bool = Field(False, alias="saveAsNew")

    class Config:
        populate_by_name = True


class SaveStructuredRequest(BaseModel):
    resume_uuid: Optional[str] = Field(None, alias="resumeUuid")
    structured_data: Optional[Dict[str, Any]] = Field(None, alias="structuredData")

    class Config:
        populate_by_name = True


class ResumeSummary(BaseModel):
    """List item for GET /resumes."""
    id: int
    resume_uuid: str
    resume_title: str
    company_name: Optional[str] = None
    job_posting_company: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ResumeResponse(ResumeSummary):
    job_id: Optional[str] = None
    job_url: Optional[str] = None
    job_description: Optional[str] = None
    original_resume_content: str
    optimized_resume_content: Optional[Any] = None
    profile_id: Optional[int] = None
    template_id: Optional[int] = None
