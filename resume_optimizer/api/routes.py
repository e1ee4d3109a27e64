"""API route definitions."""
from typing import Optional

from fastapi import APIRouter, Body, Depends, Path, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from resume_optimizer.api.dependencies import (
    get_completion_client,
    get_current_user,
    get_resume_optimizer,
    get_transport_provider,
)
from resume_optimizer.config import settings
from resume_optimizer.controllers.health_controller import HealthController
from resume_optimizer.controllers.profile_controller import ProfileController
from resume_optimizer.controllers.resume_controller import ResumeController
from resume_optimizer.controllers.template_controller import TemplateController
from resume_optimizer.database.connection import get_db_session
from resume_optimizer.database.models import User
from resume_optimizer.models.profile_models import ProfileCreate
from resume_optimizer.models.resume_models import (
    OptimizeRequest,
    ResumeCreate,
    ResumeUpdate,
    SaveStructuredRequest,
)
from resume_optimizer.models.template_models import TemplateCreate
from resume_optimizer.models.user_models import UserCreate, UserResponse, UserUpdate
from resume_optimizer.optimization.optimizer_service import ResumeOptimizer
from resume_optimizer.repositories.profile_repo import ProfileRepository
from resume_optimizer.repositories.resume_repo import ResumeRepository
from resume_optimizer.repositories.template_repo import TemplateRepository
from resume_optimizer.repositories.user_repo import UserRepository
from resume_optimizer.services.completion_client import CompletionClient
from resume_optimizer.services.http_transport import TransportProvider
from resume_optimizer.utils.errors import AppError
from resume_optimizer.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

# Older frontend paths mounted under /api without the version prefix
legacy_router = APIRouter()

UUID_PATH_PATTERN = (
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[1-5][0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}$"
)


def uuid_path(description: str):
    return Path(..., pattern=UUID_PATH_PATTERN, description=description)


# Dependency factories
async def get_profile_controller(
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> ProfileController:
    """Create ProfileController with dependencies."""
    return ProfileController(ProfileRepository(session), user)


async def get_template_controller(
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> TemplateController:
    """Create TemplateController with dependencies."""
    return TemplateController(TemplateRepository(session), user)


async def get_resume_controller(
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    optimizer: ResumeOptimizer = Depends(get_resume_optimizer),
) -> ResumeController:
    """Create ResumeController with dependencies."""
    return ResumeController(
        ResumeRepository(session),
        ProfileRepository(session),
        TemplateRepository(session),
        optimizer,
        user,
    )


async def get_health_controller(
    session: AsyncSession = Depends(get_db_session),
    client: CompletionClient = Depends(get_completion_client),
) -> HealthController:
    """Create HealthController with dependencies."""
    return HealthController(session, client, settings)


def _json(status_code: int, content: dict) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


# Users
@router.post("/users", status_code=201, tags=["Users"])
async def create_user(
    payload: UserCreate,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Create a user record.

    The returned userUuid is sent as the X-User-Id header on every other call.
    """
    repo = UserRepository(session)
    if await repo.get_by_email(payload.email) is not None:
        raise AppError("User with this email already exists", 409, "USER_EXISTS")
    try:
        user = await repo.create(payload.model_dump())
    except IntegrityError:
        raise AppError("User with this email already exists", 409, "USER_EXISTS")
    return {
        "success": True,
        "message": "User created successfully",
        "userUuid": user.user_uuid,
        "user": UserResponse.model_validate(user),
    }


@router.get("/users/me", tags=["Users"])
async def get_me(user: User = Depends(get_current_user)):
    """Return the caller's user record."""
    return {"success": True, "user": UserResponse.model_validate(user)}


@router.put("/users/me", tags=["Users"])
async def update_me(
    payload: UserUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Update the caller's name, phone and location."""
    if not await UserRepository(session).update(user.id, payload.model_dump()):
        raise AppError("User not found", 404, "USER_NOT_FOUND")
    return {"success": True, "message": "User profile updated successfully"}


# Profiles
@router.get("/profiles", tags=["Profiles"])
async def list_profiles(controller: ProfileController = Depends(get_profile_controller)):
    """List profiles, default first then by name."""
    return await controller.list_profiles()


@router.get("/profiles/{profile_uuid}", tags=["Profiles"])
async def get_profile(
    profile_uuid: str = uuid_path("Profile UUID"),
    controller: ProfileController = Depends(get_profile_controller),
):
    return await controller.get_profile(profile_uuid)


@router.post("/profiles", status_code=201, tags=["Profiles"])
async def create_profile(
    payload: ProfileCreate,
    controller: ProfileController = Depends(get_profile_controller),
):
    """Create a profile. isDefault=true clears the previous default."""
    return await controller.create_profile(payload)


@router.put("/profiles/{profile_uuid}", tags=["Profiles"])
async def update_profile(
    payload: ProfileCreate,
    profile_uuid: str = uuid_path("Profile UUID"),
    controller: ProfileController = Depends(get_profile_controller),
):
    return await controller.update_profile(profile_uuid, payload)


@router.delete("/profiles/{profile_uuid}", tags=["Profiles"])
async def delete_profile(
    profile_uuid: str = uuid_path("Profile UUID"),
    controller: ProfileController = Depends(get_profile_controller),
):
    """Delete a profile; if it was the default the oldest remaining one becomes default."""
    return await controller.delete_profile(profile_uuid)


@router.patch("/profiles/{profile_uuid}/set-default", tags=["Profiles"])
async def set_default_profile(
    profile_uuid: str = uuid_path("Profile UUID"),
    controller: ProfileController = Depends(get_profile_controller),
):
    return await controller.set_default(profile_uuid)


@router.post("/profiles/{profile_uuid}/duplicate", status_code=201, tags=["Profiles"])
async def duplicate_profile(
    profile_uuid: str = uuid_path("Profile UUID"),
    controller: ProfileController = Depends(get_profile_controller),
):
    return await controller.duplicate_profile(profile_uuid)


# Templates
@router.get("/templates", tags=["Templates"])
async def list_templates(controller: TemplateController = Depends(get_template_controller)):
    """List templates, default first then by name."""
    return await controller.list_templates()


@router.get("/templates/{template_uuid}", tags=["Templates"])
async def get_template(
    template_uuid: str = uuid_path("Template UUID"),
    controller: TemplateController = Depends(get_template_controller),
):
    return await controller.get_template(template_uuid)


@router.post("/templates", status_code=201, tags=["Templates"])
async def create_template(
    payload: TemplateCreate,
    controller: TemplateController = Depends(get_template_controller),
):
    """Create a template. isDefault=true clears the previous default."""
    return await controller.create_template(payload)


@router.put("/templates/{template_uuid}", tags=["Templates"])
async def update_template(
    payload: TemplateCreate,
    template_uuid: str = uuid_path("Template UUID"),
    controller: TemplateController = Depends(get_template_controller),
):
    return await controller.update_template(template_uuid, payload)


@router.delete("/templates/{template_uuid}", tags=["Templates"])
async def delete_template(
    template_uuid: str = uuid_path("Template UUID"),
    controller: TemplateController = Depends(get_template_controller),
):
    return await controller.delete_template(template_uuid)


@router.patch("/templates/{template_uuid}/set-default", tags=["Templates"])
async def set_default_template(
    template_uuid: str = uuid_path("Template UUID"),
    controller: TemplateController = Depends(get_template_controller),
):
    return await controller.set_default(template_uuid)


@router.post("/templates/{template_uuid}/duplicate", status_code=201, tags=["Templates"])
async def duplicate_template(
    template_uuid: str = uuid_path("Template UUID"),
    controller: TemplateController = Depends(get_template_controller),
):
    return await controller.duplicate_template(template_uuid)


@router.get("/templates/{template_uuid}/preview", tags=["Templates"])
async def preview_template(
    template_uuid: str = uuid_path("Template UUID"),
    controller: TemplateController = Depends(get_template_controller),
):
    """First 300 characters of the template content plus a word count."""
    return await controller.preview_template(template_uuid)


# Resumes
@router.get("/resumes", tags=["Resumes"])
async def list_resumes(
    status: Optional[str] = Query(None, description="draft or optimized"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    controller: ResumeController = Depends(get_resume_controller),
):
    """List resumes, most recently updated first."""
    return await controller.list_resumes(status, limit, offset)


@router.get("/resumes/stats/overview", tags=["Resumes"])
async def resume_stats(controller: ResumeController = Depends(get_resume_controller)):
    """Status breakdown, activity in the last 30 days and top companies."""
    return await controller.stats()


@router.post("/resumes/optimize", tags=["Resumes"])
async def optimize_resume(
    payload: OptimizeRequest,
    controller: ResumeController = Depends(get_resume_controller),
):
    """
    Optimize a resume for a job description with the AI service.

    Contact info comes from profileUuid when given, otherwise from personalInfo.
    Resume text comes from resumeText, then the template, then a skeleton.
    The result is stored on resumeUuid unless saveAsNew is true.
    """
    return await controller.optimize(payload)


@router.post("/resumes/save-structured", tags=["Resumes"])
async def save_structured_resume(
    payload: SaveStructuredRequest = Body(...),
    controller: ResumeController = Depends(get_resume_controller),
):
    return await controller.save_structured(payload)


@router.get("/resumes/{resume_uuid}", tags=["Resumes"])
async def get_resume(
    resume_uuid: str = uuid_path("Resume UUID"),
    controller: ResumeController = Depends(get_resume_controller),
):
    return await controller.get_resume(resume_uuid)


@router.post("/resumes", status_code=201, tags=["Resumes"])
async def create_resume(
    payload: ResumeCreate,
    controller: ResumeController = Depends(get_resume_controller),
):
    return await controller.create_resume(payload)


@router.put("/resumes/{resume_uuid}", tags=["Resumes"])
async def update_resume(
    payload: ResumeUpdate,
    resume_uuid: str = uuid_path("Resume UUID"),
    controller: ResumeController = Depends(get_resume_controller),
):
    """Store optimized content, or replace the basic resume fields."""
    return await controller.update_resume(resume_uuid, payload)


@router.delete("/resumes/{resume_uuid}", tags=["Resumes"])
async def delete_resume(
    resume_uuid: str = uuid_path("Resume UUID"),
    controller: ResumeController = Depends(get_resume_controller),
):
    return await controller.delete_resume(resume_uuid)


@router.post("/resumes/{resume_uuid}/duplicate", status_code=201, tags=["Resumes"])
async def duplicate_resume(
    resume_uuid: str = uuid_path("Resume UUID"),
    controller: ResumeController = Depends(get_resume_controller),
):
    return await controller.duplicate_resume(resume_uuid)


# Legacy aliases
@legacy_router.post("/optimize-resume-json", tags=["Legacy"])
async def legacy_optimize_resume(
    payload: OptimizeRequest,
    controller: ResumeController = Depends(get_resume_controller),
):
    """Same as POST /api/v1/resumes/optimize."""
    return await controller.optimize(payload)


@legacy_router.post("/save-structured-resume", tags=["Legacy"])
async def legacy_save_structured_resume(
    payload: SaveStructuredRequest = Body(...),
    controller: ResumeController = Depends(get_resume_controller),
):
    """Same as POST /api/v1/resumes/save-structured."""
    return await controller.save_structured(payload)


# Health
@router.get("/health", tags=["Health"])
async def health(controller: HealthController = Depends(get_health_controller)):
    """Database and AI service status."""
    status_code, report = await controller.health()
    return _json(status_code, report)


@router.get("/health/live", tags=["Health"])
async def health_live():
    """Liveness check."""
    return HealthController.live()


@router.get("/health/ready", tags=["Health"])
async def health_ready(controller: HealthController = Depends(get_health_controller)):
    """Readiness check: database reachable and AI key configured."""
    status_code, report = await controller.ready()
    return _json(status_code, report)


@router.get("/health/database", tags=["Health"])
async def health_database(controller: HealthController = Depends(get_health_controller)):
    status_code, report = await controller.database()
    return _json(status_code, report)


@router.get("/health/ai", tags=["Health"])
async def health_ai(controller: HealthController = Depends(get_health_controller)):
    """Single short request against the AI backend."""
    status_code, report = await controller.ai()
    return _json(status_code, report)


@router.get("/health/system", tags=["Health"])
async def health_system(
    controller: HealthController = Depends(get_health_controller),
    provider: TransportProvider = Depends(get_transport_provider),
):
    return await controller.system(provider.describe())
