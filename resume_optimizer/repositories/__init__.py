"""Data access repositories."""
from resume_optimizer.repositories.default_flag_repo import DefaultFlagRepository
from resume_optimizer.repositories.profile_repo import ProfileRepository
from resume_optimizer.repositories.template_repo import TemplateRepository
from resume_optimizer.repositories.resume_repo import ResumeRepository
from resume_optimizer.repositories.user_repo import UserRepository

__all__ = [
    "DefaultFlagRepository",
    "ProfileRepository",
    "TemplateRepository",
    "ResumeRepository",
    "UserRepository",
]
