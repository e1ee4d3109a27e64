"""Controller for saved resumes and AI optimization."""
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from resume_optimizer.constants.resume_status import STATUS_OPTIMIZED, VALID_STATUSES, is_valid_status
from resume_optimizer.database.models import User
from resume_optimizer.models.completion_models import CompletionRequest, ContactInfo
from resume_optimizer.models.resume_models import (
    OptimizeRequest,
    ResumeCreate,
    ResumeFields,
    ResumeResponse,
    ResumeSummary,
    ResumeUpdate,
    SaveStructuredRequest,
)
from resume_optimizer.optimization.optimizer_service import ResumeOptimizer
from resume_optimizer.repositories.profile_repo import ProfileRepository
from resume_optimizer.repositories.resume_repo import ResumeRepository
from resume_optimizer.repositories.template_repo import TemplateRepository
from resume_optimizer.utils.cleaning import UUID_PATTERN, clean_optional
from resume_optimizer.utils.errors import AppError
from resume_optimizer.utils.logging import get_logger

logger = get_logger(__name__)

SKELETON_RESUME = """{full_name}

Professional Summary:
Experienced professional seeking new opportunities in a challenging role.

Experience:
[Previous work experience to be enhanced based on job requirements]

Skills:
[Technical and soft skills relevant to the position]

Education:
[Educational background and certifications]
"""


def _resume_not_found() -> AppError:
    return AppError("Resume not found", 404, "RESUME_NOT_FOUND")


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ResumeController:
    """Controller for the current user's resumes."""

    def __init__(
        self,
        resume_repo: ResumeRepository,
        profile_repo: ProfileRepository,
        template_repo: TemplateRepository,
        optimizer: ResumeOptimizer,
        user: User,
    ):
        self.resume_repo = resume_repo
        self.profile_repo = profile_repo
        self.template_repo = template_repo
        self.optimizer = optimizer
        self.user = user

    async def list_resumes(self, status: Optional[str], limit: int, offset: int) -> Dict[str, Any]:
        if status and not is_valid_status(status):
            raise AppError(f"Status must be one of: {', '.join(VALID_STATUSES)}", 400, "INVALID_STATUS")

        resumes, total = await self.resume_repo.list_for_user(self.user.id, status, limit, offset)
        return {
            "success": True,
            "resumes": [ResumeSummary.model_validate(r) for r in resumes],
            "pagination": {
                "total": total,
                "limit": limit,
                "offset": offset,
                "hasMore": total > offset + limit,
            },
        }

    async def get_resume(self, resume_uuid: str) -> Dict[str, Any]:
        resume = await self.resume_repo.get_by_uuid(self.user.id, resume_uuid)
        if resume is None:
            raise _resume_not_found()
        return {"success": True, "resume": ResumeResponse.model_validate(resume)}

    async def _linked_ids(self, payload: ResumeFields) -> Dict[str, Optional[int]]:
        """Resolve profile/template UUIDs from the payload into row ids."""
        ids: Dict[str, Optional[int]] = {"profile_id": None, "template_id": None}
        if payload.profile_uuid:
            profile = await self.profile_repo.get_by_uuid(self.user.id, payload.profile_uuid)
            if profile is None:
                raise AppError("Profile not found", 404, "PROFILE_NOT_FOUND")
            ids["profile_id"] = profile.id
        if payload.template_uuid:
            template = await self.template_repo.get_by_uuid(self.user.id, payload.template_uuid)
            if template is None:
                raise AppError("Template not found", 404, "TEMPLATE_NOT_FOUND")
            ids["template_id"] = template.id
        return ids

    async def create_resume(self, payload: ResumeCreate) -> Dict[str, Any]:
        values = {**payload.column_values(), **await self._linked_ids(payload)}
        resume = await self.resume_repo.create(self.user.id, values)
        return {
            "success": True,
            "message": "Resume created successfully",
            "resumeUuid": resume.resume_uuid,
            "resumeId": resume.id,
        }

    async def update_resume(self, resume_uuid: str, payload: ResumeUpdate) -> Dict[str, Any]:
        if payload.optimized_resume_content:
            content = payload.optimized_resume_content
            if isinstance(content, str):
                try:
                    content = json.loads(content)
                except ValueError:
                    logger.warning("Optimized content is not JSON, storing as text", extra={"resume_uuid": resume_uuid})
            saved = await self.resume_repo.save_optimized(
                self.user.id, resume_uuid, content, payload.status or STATUS_OPTIMIZED
            )
        else:
            values = {**payload.column_values(), **await self._linked_ids(payload)}
            saved = await self.resume_repo.update_fields(self.user.id, resume_uuid, values)

        if not saved:
            raise _resume_not_found()
        return {"success": True, "message": "Resume updated successfully"}

    async def delete_resume(self, resume_uuid: str) -> Dict[str, Any]:
        if not await self.resume_repo.delete(self.user.id, resume_uuid):
            raise _resume_not_found()
        return {"success": True, "message": "Resume deleted successfully"}

    async def duplicate_resume(self, resume_uuid: str) -> Dict[str, Any]:
        copy = await self.resume_repo.duplicate(self.user.id, resume_uuid)
        if copy is None:
            raise _resume_not_found()
        return {
            "success": True,
            "message": "Resume duplicated successfully",
            "resumeUuid": copy.resume_uuid,
            "resumeId": copy.id,
        }

    async def save_structured(self, payload: SaveStructuredRequest) -> Dict[str, Any]:
        if not payload.resume_uuid or not payload.structured_data:
            raise AppError("Resume UUID and structured data are required", 400, "MISSING_REQUIRED_DATA")
        if not UUID_PATTERN.match(payload.resume_uuid):
            raise AppError("Invalid Resume UUID format", 400, "INVALID_UUID")

        if not await self.resume_repo.save_optimized(self.user.id, payload.resume_uuid, payload.structured_data):
            raise _resume_not_found()
        return {
            "success": True,
            "message": "Structured resume saved successfully",
            "timestamp": _timestamp(),
        }

    async def stats(self) -> Dict[str, Any]:
        return {"success": True, "stats": await self.resume_repo.stats(self.user.id)}

    async def _contact_info(self, payload: OptimizeRequest) -> Optional[ContactInfo]:
        fields: Dict[str, Any] = {}
        if payload.personal_info is not None:
            info = payload.personal_info
            fields = {
                "full_name": clean_optional(info.full_name),
                "email": clean_optional(info.email),
                "phone": clean_optional(info.phone),
                "location": clean_optional(info.location),
                "profile_url": clean_optional(info.linkedin_url),
            }

        if payload.profile_uuid:
            profile = await self.profile_repo.get_by_uuid(self.user.id, payload.profile_uuid)
            if profile is not None:
                numbers = profile.mobile_numbers or []
                fields = {
                    "full_name": profile.full_name,
                    "email": profile.email,
                    "phone": numbers[0] if numbers else None,
                    "location": profile.location,
                    "profile_url": profile.linkedin_url,
                }

        if not fields.get("full_name") or not fields.get("email"):
            return None
        return ContactInfo(**fields)

    async def _resume_text(self, payload: OptimizeRequest, contact: ContactInfo) -> str:
        resume_text = payload.resume_text or ""
        if payload.template_uuid and not resume_text.strip():
            template = await self.template_repo.get_by_uuid(self.user.id, payload.template_uuid)
            if template is not None and template.resume_content:
                resume_text = template.resume_content

        if not resume_text.strip():
            resume_text = SKELETON_RESUME.format(full_name=contact.full_name)
        return resume_text

    async def optimize(self, payload: OptimizeRequest) -> Dict[str, Any]:
        """Generate an optimized resume and optionally store it on an existing resume."""
        job_description = (payload.job_description or "").strip()
        if not job_description:
            raise AppError("Job description is required", 400, "JOB_DESCRIPTION_REQUIRED")

        contact = await self._contact_info(payload)
        if contact is None:
            raise AppError(
                "Personal information with full name and email are required. Please select a profile.",
                400,
                "PERSONAL_INFO_REQUIRED",
            )

        save_to = payload.resume_uuid if payload.resume_uuid and not payload.save_as_new else None
        if save_to and await self.resume_repo.get_by_uuid(self.user.id, save_to) is None:
            raise _resume_not_found()

        resume_text = await self._resume_text(payload, contact)
        logger.info(
            "Processing resume optimization",
            extra={
                "user_id": self.user.id,
                "profile_uuid": payload.profile_uuid,
                "template_uuid": payload.template_uuid,
                "resume_text_length": len(resume_text),
                "job_description_length": len(job_description),
            },
        )

        structured = await self.optimizer.generate(
            CompletionRequest(
                job_description=job_description,
                resume_text=resume_text,
                contact_info=contact,
            )
        )
        optimized = structured.to_dict()

        if save_to is None:
            return {"success": True, "optimizedResumeData": optimized, "timestamp": _timestamp()}

        if not await self.resume_repo.save_optimized(self.user.id, save_to, optimized):
            raise _resume_not_found()
        return {
            "success": True,
            "optimizedResumeData": optimized,
            "resumeUuid": save_to,
            "timestamp": _timestamp(),
            "message": "Resume optimized and saved successfully",
        }
