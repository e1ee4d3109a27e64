"""Base repository for per-user records carrying an is_default flag."""
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update, Table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from resume_optimizer.utils.logging import get_logger
from resume_optimizer.utils.safe_logger import safe_extra

logger = get_logger(__name__)

COPY_SUFFIX = " (Copy)"


class DefaultFlagRepository:
    """
    CRUD for profiles and templates, keeping at most one default row per user.

    Each mutating operation clears and sets the flag inside a single
    transaction and rolls back if anything fails.
    """

    model: Any = None
    uuid_field: str = ""
    name_field: str = ""
    name_max_length: int = 100
    # Columns not carried over by duplicate()
    copy_excluded = {"id", "created_at", "updated_at", "is_default"}

    def __init__(self, session: AsyncSession):
        self.session = session
        self.table: Table = self.model.__table__

    @property
    def entity(self) -> str:
        return self.model.__tablename__

    def _uuid_column(self):
        return getattr(self.model, self.uuid_field)

    async def list_for_user(self, user_id: int) -> List[Any]:
        """Default first, then alphabetical by name."""
        result = await self.session.execute(
            select(self.model)
            .where(self.model.user_id == user_id)
            .order_by(self.model.is_default.desc(), getattr(self.model, self.name_field).asc())
        )
        return list(result.scalars().all())

    async def get_by_uuid(self, user_id: int, record_uuid: str) -> Optional[Any]:
        result = await self.session.execute(
            select(self.model).where(
                self.model.user_id == user_id,
                self._uuid_column() == record_uuid,
            )
        )
        return result.scalar_one_or_none()

    async def _clear_defaults(self, user_id: int, exclude_id: Optional[int] = None) -> None:
        stmt = update(self.model).where(self.model.user_id == user_id).values(is_default=False)
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        await self.session.execute(stmt)

    async def _commit(self, record: Any) -> Any:
        await self.session.flush()
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def create(self, user_id: int, data: Dict[str, Any]) -> Any:
        """Insert a record; when it is the default, clear the others first."""
        try:
            if data.get("is_default"):
                await self._clear_defaults(user_id)
            record = self.model(user_id=user_id, **data)
            self.session.add(record)
            await self._commit(record)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to create {self.entity} record: {e}", extra={"error": str(e), "user_id": user_id})
            raise

        logger.info(
            f"Created {self.entity} record: id={record.id}",
            extra=safe_extra({
                "record_id": record.id,
                "user_id": user_id,
                "name": getattr(record, self.name_field),
                "is_default": record.is_default,
            }),
        )
        return record

    async def update(self, user_id: int, record_uuid: str, data: Dict[str, Any]) -> Optional[Any]:
        """Replace fields of an existing record; None when it does not exist."""
        record = await self.get_by_uuid(user_id, record_uuid)
        if record is None:
            return None

        try:
            if data.get("is_default"):
                await self._clear_defaults(user_id, exclude_id=record.id)
            for key, value in data.items():
                setattr(record, key, value)
            await self._commit(record)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to update {self.entity} record: {e}", extra={"error": str(e), "record_id": record.id})
            raise

        logger.info(f"Updated {self.entity} record: id={record.id}", extra={"record_id": record.id})
        return record

    async def set_default(self, user_id: int, record_uuid: str) -> bool:
        """Make one record the user's default; False when it does not exist."""
        record = await self.get_by_uuid(user_id, record_uuid)
        if record is None:
            return False

        try:
            await self._clear_defaults(user_id)
            await self.session.execute(
                update(self.model).where(self.model.id == record.id).values(is_default=True)
            )
            await self._commit(record)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to set default {self.entity}: {e}", extra={"error": str(e), "record_id": record.id})
            raise

        logger.info(f"Set default {self.entity}: id={record.id}", extra={"record_id": record.id, "user_id": user_id})
        return True

    async def delete(self, user_id: int, record_uuid: str) -> bool:
        """Delete a record, promoting the oldest remaining one if it was the default."""
        record = await self.get_by_uuid(user_id, record_uuid)
        if record is None:
            return False

        try:
            if record.is_default:
                result = await self.session.execute(
                    select(self.model)
                    .where(self.model.user_id == user_id, self.model.id != record.id)
                    .order_by(self.model.created_at.asc(), self.model.id.asc())
                    .limit(1)
                )
                successor = result.scalar_one_or_none()
                if successor is not None:
                    successor.is_default = True
                    logger.info(
                        f"Promoting {self.entity} id={successor.id} to default",
                        extra={"record_id": successor.id, "user_id": user_id},
                    )
            await self.session.delete(record)
            await self.session.flush()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to delete {self.entity} record: {e}", extra={"error": str(e), "record_id": record.id})
            raise

        logger.info(f"Deleted {self.entity} record: id={record.id}", extra={"record_id": record.id})
        return True

    async def duplicate(self, user_id: int, record_uuid: str) -> Optional[Any]:
        """Copy a record under '<name> (Copy)'; the copy is never the default."""
        original = await self.get_by_uuid(user_id, record_uuid)
        if original is None:
            return None

        excluded = self.copy_excluded | {self.uuid_field, "user_id"}
        data = {
            column.key: getattr(original, column.key)
            for column in self.table.columns
            if column.key not in excluded
        }
        base_name = data[self.name_field][: self.name_max_length - len(COPY_SUFFIX)]
        data[self.name_field] = f"{base_name}{COPY_SUFFIX}"
        data["is_default"] = False
        return await self.create(user_id, data)
