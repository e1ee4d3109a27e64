"""Repository for contact profiles."""
from resume_optimizer.config import settings
from resume_optimizer.database.models import UserProfile
from resume_optimizer.repositories.default_flag_repo import DefaultFlagRepository


class ProfileRepository(DefaultFlagRepository):
    model = UserProfile
    uuid_field = "profile_uuid"
    name_field = "profile_name"
    name_max_length = settings.profile_name_max_length
