"""Request-scoped dependencies: identity, repositories and the completion stack."""
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from resume_optimizer.config import settings
from resume_optimizer.database.connection import get_db_session
from resume_optimizer.database.models import User
from resume_optimizer.optimization.optimizer_service import ResumeOptimizer
from resume_optimizer.repositories.user_repo import UserRepository
from resume_optimizer.services.completion_client import CompletionClient
from resume_optimizer.services.http_transport import TransportProvider
from resume_optimizer.utils.errors import AppError


async def get_transport_provider(request: Request) -> TransportProvider:
    """Provider bound once at startup and kept on app.state."""
    return request.app.state.transport_provider


async def get_completion_client(
    provider: TransportProvider = Depends(get_transport_provider),
) -> CompletionClient:
    return CompletionClient.from_settings(provider, settings)


async def get_resume_optimizer(
    client: CompletionClient = Depends(get_completion_client),
) -> ResumeOptimizer:
    return ResumeOptimizer(client, temperature=settings.ai_temperature, max_tokens=settings.ai_max_tokens)


async def get_current_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    """Resolve the caller from the X-User-Id header set by the upstream gateway."""
    if not x_user_id or not x_user_id.strip():
        raise AppError("User identity required", 401, "USER_ID_REQUIRED")

    user = await UserRepository(session).get_by_uuid(x_user_id.strip())
    if user is None:
        raise AppError("User not found", 401, "USER_NOT_FOUND")
    return user
