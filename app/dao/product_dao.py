from typing import List, Optional
from sqlmodel import select
from sqlalchemy import delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from app.dao.base_dao import BaseDAO
from app.entities.product_query import PageRequest, ProductFilter
from app.models.product import Product
from app.models.review import Review
import structlog

logger = structlog.get_logger()


class ProductDAO(BaseDAO[Product]):
    def __init__(self):
        super().__init__(Product)

    @staticmethod
    def _apply_filter(statement, product_filter: ProductFilter):
        if product_filter.category is not None:
            statement = statement.where(Product.category == product_filter.category)
        if product_filter.color is not None:
            statement = statement.where(Product.color == product_filter.color)
        if product_filter.price_range is not None:
            low, high = product_filter.price_range
            statement = statement.where(Product.price >= low).where(Product.price <= high)
        return statement

    async def count_filtered(self, db: AsyncSession, product_filter: ProductFilter) -> int:
        try:
            statement = self._apply_filter(select(func.count()).select_from(Product), product_filter)
            result = await db.execute(statement)
            return result.scalar_one()
        except Exception as e:
            logger.error("Error counting products", filter=str(product_filter), error=str(e))
            raise

    async def get_page(self, db: AsyncSession, product_filter: ProductFilter, page: PageRequest) -> List[Product]:
        try:
            statement = (
                self._apply_filter(select(Product), product_filter)
                .order_by(Product.created_at.desc())
                .offset(page.offset)
                .limit(page.limit)
            )
            result = await db.execute(statement)
            return result.scalars().all()
        except Exception as e:
            logger.error("Error getting products page", filter=str(product_filter), page=page.page, error=str(e))
            raise

    async def get_related(self, db: AsyncSession, product: Product, tokens: List[str]) -> List[Product]:
        """Products other than ``product`` sharing its category or whose name
        contains any of ``tokens`` (case-insensitive, literal match)."""
        try:
            conditions = [Product.category == product.category]
            conditions.extend(Product.name.icontains(token, autoescape=True) for token in tokens)
            result = await db.execute(
                select(Product)
                .where(Product.id != product.id)
                .where(or_(*conditions))
                .order_by(Product.created_at.desc())
            )
            return result.scalars().all()
        except Exception as e:
            logger.error("Error getting related products", product_id=product.id, error=str(e))
            raise

    async def delete_with_reviews(self, db: AsyncSession, product_id: str) -> Optional[Product]:
        """Delete a product and its reviews in one transaction."""
        try:
            product = await self.get_by_id(db, product_id)
            if not product:
                return None
            result = await db.execute(delete(Review).where(Review.product_id == product_id))
            await db.delete(product)
            await db.commit()
            logger.info("Deleted product with reviews", product_id=product_id, reviews_deleted=result.rowcount)
            return product
        except Exception as e:
            await db.rollback()
            logger.error("Error deleting product with reviews", product_id=product_id, error=str(e))
            raise


product_dao = ProductDAO()
