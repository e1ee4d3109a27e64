"""Repository for resume templates."""
from resume_optimizer.config import settings
from resume_optimizer.database.models import ResumeTemplate
from resume_optimizer.repositories.default_flag_repo import DefaultFlagRepository


class TemplateRepository(DefaultFlagRepository):
    model = ResumeTemplate
    uuid_field = "template_uuid"
    name_field = "template_name"
    name_max_length = settings.template_name_max_length
