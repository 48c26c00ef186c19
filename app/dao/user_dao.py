from typing import Dict, Iterable
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.dao.base_dao import BaseDAO
from app.models.user import User
import structlog

logger = structlog.get_logger()


class UserDAO(BaseDAO[User]):
    def __init__(self):
        super().__init__(User)

    async def get_by_ids(self, db: AsyncSession, ids: Iterable[str]) -> Dict[str, User]:
        """Resolve a set of user references in one query. Unknown ids are absent."""
        wanted = {user_id for user_id in ids if user_id}
        if not wanted:
            return {}
        try:
            result = await db.execute(select(User).where(User.id.in_(wanted)))
            return {user.id: user for user in result.scalars().all()}
        except Exception as e:
            logger.error("Error getting users by ids", count=len(wanted), error=str(e))
            raise


user_dao = UserDAO()
