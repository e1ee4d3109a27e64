"""Pydantic models for request/response validation."""
from resume_optimizer.models.completion_models import (
    ContactInfo,
    CompletionRequest,
    ExperienceEntry,
    SkillGroup,
    EducationEntry,
    StructuredResume,
)
from resume_optimizer.models.user_models import UserCreate, UserResponse, UserUpdate
from resume_optimizer.models.profile_models import ProfileCreate, ProfileResponse
from resume_optimizer.models.template_models import TemplateCreate, TemplateResponse, TemplatePreview
from resume_optimizer.models.resume_models import (
    ResumeCreate,
    ResumeUpdate,
    ResumeSummary,
    ResumeResponse,
    OptimizeRequest,
    PersonalInfo,
    SaveStructuredRequest,
)

__all__ = [
    "ContactInfo",
    "CompletionRequest",
    "ExperienceEntry",
    "SkillGroup",
    "EducationEntry",
    "StructuredResume",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
    "ProfileCreate",
    "ProfileResponse",
    "TemplateCreate",
    "TemplateResponse",
    "TemplatePreview",
    "ResumeCreate",
    "ResumeUpdate",
    "ResumeSummary",
    "ResumeResponse",
    "OptimizeRequest",
    "PersonalInfo",
    "SaveStructuredRequest",
]
