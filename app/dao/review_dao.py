from typing import List
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.dao.base_dao import BaseDAO
from app.models.review import Review
import structlog

logger = structlog.get_logger()


class ReviewDAO(BaseDAO[Review]):
    def __init__(self):
        super().__init__(Review)

    async def get_by_product_id(self, db: AsyncSession, product_id: str) -> List[Review]:
        try:
            result = await db.execute(
                select(Review)
                .where(Review.product_id == product_id)
                .order_by(Review.created_at.desc())
            )
            return result.scalars().all()
        except Exception as e:
            logger.error("Error getting reviews by product", product_id=product_id, error=str(e))
            raise


review_dao = ReviewDAO()
