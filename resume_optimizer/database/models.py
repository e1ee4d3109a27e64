"""SQLAlchemy database models."""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, ForeignKey, Integer, JSON, String, Text, TIMESTAMP
from sqlalchemy.sql import func

from resume_optimizer.constants.resume_status import STATUS_DRAFT
from resume_optimizer.database.connection import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_uuid() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    created_at = Column(
        TIMESTAMP,
        nullable=False,
        default=utcnow,
        server_default=func.current_timestamp(),
    )
    updated_at = Column(
        TIMESTAMP,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.current_timestamp(),
    )


class User(TimestampMixin, Base):
    """Account record; identity is established upstream and passed as X-User-Id."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_uuid = Column(String(36), nullable=False, unique=True, index=True, default=new_uuid)
    full_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(50), nullable=True)
    location = Column(String(200), nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, user_uuid={self.user_uuid}, email={self.email})>"


class UserProfile(TimestampMixin, Base):
    """Contact profile used to fill personal info in optimized resumes."""
    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    profile_uuid = Column(String(36), nullable=False, unique=True, index=True, default=new_uuid)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    profile_name = Column(String(100), nullable=False)
    full_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    mobile_numbers = Column(JSON, nullable=False, default=list)
    linkedin_url = Column(String(500), nullable=True)
    location = Column(String(200), nullable=True)
    is_default = Column(Boolean, nullable=False, default=False, server_default="0")

    def __repr__(self) -> str:
        return f"<UserProfile(id={self.id}, profile_name={self.profile_name}, is_default={self.is_default})>"


class ResumeTemplate(TimestampMixin, Base):
    """Reusable base resume content."""
    __tablename__ = "resume_templates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    template_uuid = Column(String(36), nullable=False, unique=True, index=True, default=new_uuid)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    template_name = Column(String(100), nullable=False)
    resume_content = Column(Text, nullable=False)
    professional_summary = Column(Text, nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    experience = Column(JSON, nullable=False, default=list)
    education = Column(JSON, nullable=False, default=list)
    is_default = Column(Boolean, nullable=False, default=False, server_default="0")

    def __repr__(self) -> str:
        return f"<ResumeTemplate(id={self.id}, template_name={self.template_name}, is_default={self.is_default})>"


class Resume(TimestampMixin, Base):
    """Job-specific resume, optionally holding the optimized structured output."""
    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    resume_uuid = Column(String(36), nullable=False, unique=True, index=True, default=new_uuid)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    profile_id = Column(Integer, ForeignKey("user_profiles.id", ondelete="SET NULL"), nullable=True)
    template_id = Column(Integer, ForeignKey("resume_templates.id", ondelete="SET NULL"), nullable=True)
    resume_title = Column(String(200), nullable=False)
    company_name = Column(String(200), nullable=True)
    job_id = Column(String(100), nullable=True)
    job_url = Column(String(500), nullable=True)
    job_posting_company = Column(String(200), nullable=True)
    job_description = Column(Text, nullable=True)
    original_resume_content = Column(Text, nullable=False)
    optimized_resume_content = Column(JSON, nullable=True)
    status = Column(String(20), nullable=False, default=STATUS_DRAFT, server_default=STATUS_DRAFT)

    def __repr__(self) -> str:
        return f"<Resume(id={self.id}, resume_title={self.resume_title}, status={self.status})>"
