"""Pydantic models exchanged with the resume optimizer."""
from typing import List, Optional
from pydantic import BaseModel, Field


class ContactInfo(BaseModel):
    """Candidate contact details embedded in the prompt and used for defaults."""
    full_name: str = Field(..., alias="fullName")
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    profile_url: Optional[str] = Field(None, alias="profileUrl")

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def first_name(self) -> str:
        parts = self.full_name.split()
        return parts[0] if parts else self.full_name


class CompletionRequest(BaseModel):
    """One optimization attempt: job description, current resume text and contact."""
    job_description: str = Field(..., alias="jobDescription")
    resume_text: str = Field("", alias="resumeText")
    contact_info: ContactInfo = Field(..., alias="contactInfo")

    class Config:
        populate_by_name = True
        frozen = True


class ExperienceEntry(BaseModel):
    organization: str
    term: str
    title: str
    bullets: List[str]


class SkillGroup(BaseModel):
    group_name: str = Field(..., alias="groupName")
    skills: List[str]

    class Config:
        populate_by_name = True


class EducationEntry(BaseModel):
    degree: str
    institution: str
    term: str


class StructuredResume(BaseModel):
    """Fully populated optimized resume; ``to_dict()`` gives the camelCase JSON form."""
    name: str
    email: str
    mobile_numbers: List[str] = Field(..., alias="mobileNumbers")
    profile_url: str = Field(..., alias="profileUrl")
    summary: str
    experience: List[ExperienceEntry]
    skill_groups: List[SkillGroup] = Field(..., alias="skillGroups")
    education: List[EducationEntry]

    class Config:
        populate_by_name = True

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)
