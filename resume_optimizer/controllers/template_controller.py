"""Controller for resume template operations."""
from typing import Any, Dict

from resume_optimizer.database.models import User
from resume_optimizer.models.template_models import TemplateCreate, TemplatePreview, TemplateResponse
from resume_optimizer.repositories.template_repo import TemplateRepository
from resume_optimizer.utils.cleaning import content_preview, word_count
from resume_optimizer.utils.errors import AppError

PREVIEW_LENGTH = 300


def _template_not_found() -> AppError:
    return AppError("Template not found", 404, "TEMPLATE_NOT_FOUND")


class TemplateController:
    """Controller for the current user's resume templates."""

    def __init__(self, template_repo: TemplateRepository, user: User):
        self.template_repo = template_repo
        self.user = user

    async def list_templates(self) -> Dict[str, Any]:
        templates = await self.template_repo.list_for_user(self.user.id)
        return {
            "success": True,
            "templates": [TemplateResponse.model_validate(t) for t in templates],
        }

    async def get_template(self, template_uuid: str) -> Dict[str, Any]:
        template = await self.template_repo.get_by_uuid(self.user.id, template_uuid)
        if template is None:
            raise _template_not_found()
        return {"success": True, "template": TemplateResponse.model_validate(template)}

    async def create_template(self, payload: TemplateCreate) -> Dict[str, Any]:
        template = await self.template_repo.create(self.user.id, payload.model_dump())
        return {
            "success": True,
            "message": "Template created successfully",
            "templateUuid": template.template_uuid,
            "templateId": template.id,
        }

    async def update_template(self, template_uuid: str, payload: TemplateCreate) -> Dict[str, Any]:
        template = await self.template_repo.update(self.user.id, template_uuid, payload.model_dump())
        if template is None:
            raise _template_not_found()
        return {"success": True, "message": "Template updated successfully"}

    async def delete_template(self, template_uuid: str) -> Dict[str, Any]:
        if not await self.template_repo.delete(self.user.id, template_uuid):
            raise _template_not_found()
        return {"success": True, "message": "Template deleted successfully"}

    async def set_default(self, template_uuid: str) -> Dict[str, Any]:
        if not await self.template_repo.set_default(self.user.id, template_uuid):
            raise _template_not_found()
        return {"success": True, "message": "Template set as default successfully"}

    async def duplicate_template(self, template_uuid: str) -> Dict[str, Any]:
        copy = await self.template_repo.duplicate(self.user.id, template_uuid)
        if copy is None:
            raise _template_not_found()
        return {
            "success": True,
            "message": "Template duplicated successfully",
            "templateUuid": copy.template_uuid,
            "templateId": copy.id,
        }

    async def preview_template(self, template_uuid: str) -> Dict[str, Any]:
        template = await self.template_repo.get_by_uuid(self.user.id, template_uuid)
        if template is None:
            raise _template_not_found()
        preview = TemplatePreview(
            templateName=template.template_name,
            professionalSummary=template.professional_summary or "No summary provided",
            contentPreview=content_preview(template.resume_content, PREVIEW_LENGTH),
            createdAt=template.created_at,
            wordCount=word_count(template.resume_content),
        )
        return {"success": True, "preview": preview}
