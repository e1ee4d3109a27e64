"""Repository for user records."""
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from resume_optimizer.database.models import User, utcnow
from resume_optimizer.utils.logging import get_logger

logger = get_logger(__name__)


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user_data: dict) -> User:
        """Create a new user record."""
        try:
            user = User(**user_data)
            self.session.add(user)
            await self.session.flush()
            await self.session.commit()
            await self.session.refresh(user)
            logger.info(f"Created user record: id={user.id}", extra={"user_id": user.id})
            return user
        except IntegrityError as e:
            await self.session.rollback()
            logger.error(f"Failed to create user: {e}", extra={"error": str(e)})
            raise

    async def get_by_uuid(self, user_uuid: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.user_uuid == user_uuid))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def update(self, user_id: int, values: dict) -> bool:
        """Update name, phone and location; False when no row matched."""
        try:
            result = await self.session.execute(
                update(User)
                .where(User.id == user_id)
                .values(**values, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to update user {user_id}: {e}", extra={"error": str(e), "user_id": user_id})
            raise

        if result.rowcount == 0:
            logger.warning(f"User not found for update: {user_id}", extra={"user_id": user_id})
            return False
        logger.info(f"Updated user record: id={user_id}", extra={"user_id": user_id})
        return True
