"""Controller for contact profile operations."""
from typing import Any, Dict

from resume_optimizer.database.models import User
from resume_optimizer.models.profile_models import ProfileCreate, ProfileResponse
from resume_optimizer.repositories.profile_repo import ProfileRepository
from resume_optimizer.utils.errors import AppError


def _profile_not_found() -> AppError:
    return AppError("Profile not found", 404, "PROFILE_NOT_FOUND")


class ProfileController:
    """Controller for the current user's contact profiles."""

    def __init__(self, profile_repo: ProfileRepository, user: User):
        self.profile_repo = profile_repo
        self.user = user

    async def list_profiles(self) -> Dict[str, Any]:
        profiles = await self.profile_repo.list_for_user(self.user.id)
        return {
            "success": True,
            "profiles": [ProfileResponse.model_validate(p) for p in profiles],
        }

    async def get_profile(self, profile_uuid: str) -> Dict[str, Any]:
        profile = await self.profile_repo.get_by_uuid(self.user.id, profile_uuid)
        if profile is None:
            raise _profile_not_found()
        return {"success": True, "profile": ProfileResponse.model_validate(profile)}

    async def create_profile(self, payload: ProfileCreate) -> Dict[str, Any]:
        profile = await self.profile_repo.create(self.user.id, payload.model_dump())
        return {
            "success": True,
            "message": "Profile created successfully",
            "profileUuid": profile.profile_uuid,
            "profileId": profile.id,
        }

    async def update_profile(self, profile_uuid: str, payload: ProfileCreate) -> Dict[str, Any]:
        profile = await self.profile_repo.update(self.user.id, profile_uuid, payload.model_dump())
        if profile is None:
            raise _profile_not_found()
        return {"success": True, "message": "Profile updated successfully"}

    async def delete_profile(self, profile_uuid: str) -> Dict[str, Any]:
        if not await self.profile_repo.delete(self.user.id, profile_uuid):
            raise _profile_not_found()
        return {"success": True, "message": "Profile deleted successfully"}

    async def set_default(self, profile_uuid: str) -> Dict[str, Any]:
        if not await self.profile_repo.set_default(self.user.id, profile_uuid):
            raise _profile_not_found()
        return {"success": True, "message": "Profile set as default successfully"}

    async def duplicate_profile(self, profile_uuid: str) -> Dict[str, Any]:
        copy = await self.profile_repo.duplicate(self.user.id, profile_uuid)
        if copy is None:
            raise _profile_not_found()
        return {
            "success": True,
            "message": "Profile duplicated successfully",
            "profileUuid": copy.profile_uuid,
            "profileId": copy.id,
        }
