"""Repository for saved resumes."""
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select, update, Table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from resume_optimizer.constants.resume_status import STATUS_DRAFT, STATUS_OPTIMIZED
from resume_optimizer.database.models import Resume, utcnow
from resume_optimizer.utils.logging import get_logger

logger = get_logger(__name__)

RECENT_ACTIVITY_DAYS = 30
TOP_COMPANIES_LIMIT = 5


class ResumeRepository:
    """
    Resume CRUD scoped to a user.

    Content updates go through Core UPDATE statements and report whether a
    row matched.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.table: Table = Resume.__table__

    async def list_for_user(
        self,
        user_id: int,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Resume], int]:
        """Most recently updated first, with the unpaginated total."""
        conditions = [Resume.user_id == user_id]
        if status:
            conditions.append(Resume.status == status)

        result = await self.session.execute(
            select(Resume)
            .where(*conditions)
            .order_by(Resume.updated_at.desc(), Resume.id.desc())
            .limit(limit)
            .offset(offset)
        )
        total = await self.session.execute(
            select(func.count()).select_from(Resume).where(*conditions)
        )
        return list(result.scalars().all()), int(total.scalar_one())

    async def get_by_uuid(self, user_id: int, resume_uuid: str) -> Optional[Resume]:
        result = await self.session.execute(
            select(Resume).where(Resume.user_id == user_id, Resume.resume_uuid == resume_uuid)
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: int, resume_data: Dict[str, Any]) -> Resume:
        """Create a new resume record (draft unless a status is given)."""
        try:
            resume = Resume(user_id=user_id, **resume_data)
            if resume.status is None:
                resume.status = STATUS_DRAFT
            self.session.add(resume)
            await self.session.flush()
            await self.session.commit()
            await self.session.refresh(resume)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to create resume: {e}", extra={"error": str(e), "user_id": user_id})
            raise

        logger.info(
            f"Created resume record: id={resume.id}",
            extra={"resume_id": resume.id, "user_id": user_id, "status": resume.status},
        )
        return resume

    async def _update(self, user_id: int, resume_uuid: str, values: Dict[str, Any]) -> bool:
        values = {**values, "updated_at": utcnow()}
        try:
            result = await self.session.execute(
                update(self.table)
                .where(self.table.c.user_id == user_id, self.table.c.resume_uuid == resume_uuid)
                .values(**values)
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to update resume {resume_uuid}: {e}", extra={"error": str(e)})
            raise

        if result.rowcount == 0:
            logger.warning(f"Resume not found for update: {resume_uuid}", extra={"user_id": user_id})
            return False
        return True

    async def update_fields(self, user_id: int, resume_uuid: str, values: Dict[str, Any]) -> bool:
        return await self._update(user_id, resume_uuid, values)

    async def save_optimized(
        self,
        user_id: int,
        resume_uuid: str,
        content: Any,
        status: str = STATUS_OPTIMIZED,
    ) -> bool:
        """Store structured optimized content and mark the resume's status."""
        saved = await self._update(
            user_id,
            resume_uuid,
            {"optimized_resume_content": content, "status": status},
        )
        if saved:
            logger.info("Saved optimized resume content", extra={"resume_uuid": resume_uuid, "status": status})
        return saved

    async def delete(self, user_id: int, resume_uuid: str) -> bool:
        try:
            result = await self.session.execute(
                delete(self.table).where(
                    self.table.c.user_id == user_id,
                    self.table.c.resume_uuid == resume_uuid,
                )
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to delete resume {resume_uuid}: {e}", extra={"error": str(e)})
            raise
        return result.rowcount > 0

    async def duplicate(self, user_id: int, resume_uuid: str) -> Optional[Resume]:
        """Copy a resume as a new draft titled '<title> (Copy)'."""
        original = await self.get_by_uuid(user_id, resume_uuid)
        if original is None:
            return None

        return await self.create(user_id, {
            "profile_id": original.profile_id,
            "template_id": original.template_id,
            "resume_title": f"{original.resume_title} (Copy)",
            "company_name": original.company_name,
            "job_id": original.job_id,
            "job_url": original.job_url,
            "job_posting_company": original.job_posting_company,
            "job_description": original.job_description,
            "original_resume_content": original.original_resume_content,
            "optimized_resume_content": original.optimized_resume_content,
            "status": STATUS_DRAFT,
        })

    async def stats(self, user_id: int) -> Dict[str, Any]:
        """Status breakdown, resumes created in the last 30 days and top companies."""
        status_rows = await self.session.execute(
            select(Resume.status, func.count().label("count"))
            .where(Resume.user_id == user_id)
            .group_by(Resume.status)
        )
        recent = await self.session.execute(
            select(func.count()).select_from(Resume).where(
                Resume.user_id == user_id,
                Resume.created_at >= utcnow() - timedelta(days=RECENT_ACTIVITY_DAYS),
            )
        )
        count_column = func.count().label("count")
        company_rows = await self.session.execute(
            select(Resume.company_name, count_column)
            .where(Resume.user_id == user_id)
            .group_by(Resume.company_name)
            .order_by(count_column.desc())
            .limit(TOP_COMPANIES_LIMIT)
        )

        return {
            "statusBreakdown": [
                {"status": status, "count": count} for status, count in status_rows.all()
            ],
            "recentActivity": int(recent.scalar_one()),
            "topCompanies": [
                {"company_name": company, "count": count} for company, count in company_rows.all()
            ],
        }
