from typing import Dict, List, Optional
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.exceptions import NotFoundError, UpstreamFailure, ValidationError, missing_fields_error
from app.dao.product_dao import product_dao
from app.dao.review_dao import review_dao
from app.dao.user_dao import user_dao
from app.entities.product_query import PageRequest, ProductDefaults, ProductFilter
from app.models.product import Product, ProductCreate, ProductDetail, ProductListItem, ProductUpdate
from app.models.review import ReviewRead
from app.models.user import AuthorEmail, User, UserSummary
from app.schemas.product_schemas import ProductDetailResponse, ProductListResponse
from app.services.image_service import image_service
from datetime import datetime, timezone
import structlog

logger = structlog.get_logger()

REQUIRED_FIELDS = ("name", "description", "image", "author")
NON_NULLABLE_FIELDS = REQUIRED_FIELDS + ("category", "price", "quantity")


def name_tokens(name: str) -> List[str]:
    """Whitespace tokens of ``name`` longer than one character, deduplicated
    case-insensitively in order of appearance."""
    seen = set()
    tokens = []
    for word in name.split():
        key = word.lower()
        if len(word) > 1 and key not in seen:
            seen.add(key)
            tokens.append(word)
    return tokens


def _check_product_fields(data: dict) -> None:
    missing = [field for field in REQUIRED_FIELDS if not data.get(field)]
    if missing:
        raise missing_fields_error(missing)
    if any(not isinstance(location, str) or not location.strip() for location in data["image"]):
        raise ValidationError("Image locations must be non-empty strings")
    if data.get("price") is not None and data["price"] < 0:
        raise ValidationError("Price must not be negative")
    if data.get("quantity") is not None and data["quantity"] < 0:
        raise ValidationError("Quantity must not be negative")


def _summary(user: Optional[User]) -> Optional[UserSummary]:
    if user is None:
        return None
    return UserSummary(id=user.id, email=user.email, username=user.username)


class ProductService:
    def __init__(self):
        self.product_dao = product_dao
        self.review_dao = review_dao
        self.user_dao = user_dao

    async def create_product(self, db: AsyncSession, product_create: ProductCreate) -> Product:
        product_data = product_create.model_dump()
        try:
            _check_product_fields(product_data)
        except ValidationError as e:
            logger.warning("Rejected product creation", reason=e.detail)
            raise

        defaults = ProductDefaults.from_settings()
        if not product_data.get("category"):
            product_data["category"] = defaults.category
        if product_data.get("price") is None:
            product_data["price"] = defaults.price
        if product_data.get("quantity") is None:
            product_data["quantity"] = defaults.quantity
        now = datetime.now(timezone.utc)
        product_data["created_at"] = now
        product_data["updated_at"] = now

        try:
            product = await self.product_dao.create(db, obj_in=product_data)
            logger.info("Product created successfully", product_id=product.id, author=product.author)
            return product
        except Exception as e:
            logger.error("Error creating product", author=product_data.get("author"), error=str(e))
            raise UpstreamFailure("Failed to create product")

    async def list_products(
        self, db: AsyncSession, product_filter: ProductFilter, page: PageRequest
    ) -> ProductListResponse:
        try:
            total = await self.product_dao.count_filtered(db, product_filter)
            products = await self.product_dao.get_page(db, product_filter, page)
            authors = await self.user_dao.get_by_ids(db, (product.author for product in products))
        except Exception as e:
            logger.error("Error listing products", filter=str(product_filter), error=str(e))
            raise UpstreamFailure("Failed to fetch products")

        items = []
        for product in products:
            author = authors.get(product.author)
            items.append(ProductListItem(
                **product.model_dump(exclude={"author"}),
                author=AuthorEmail(id=author.id, email=author.email) if author else None,
            ))

        logger.info("Retrieved products", count=len(items), total=total, page=page.page, limit=page.limit)
        return ProductListResponse(
            products=items,
            totalPages=page.total_pages(total),
            totalProducts=total,
        )

    async def get_product(self, db: AsyncSession, product_id: str) -> Product:
        try:
            product = await self.product_dao.get_by_id(db, product_id)
        except Exception as e:
            logger.error("Error getting product", product_id=product_id, error=str(e))
            raise UpstreamFailure("Failed to fetch the product")
        if not product:
            logger.warning("Product not found", product_id=product_id)
            raise NotFoundError()
        return product

    async def get_product_detail(self, db: AsyncSession, product_id: str) -> ProductDetailResponse:
        product = await self.get_product(db, product_id)
        try:
            reviews = await self.review_dao.get_by_product_id(db, product_id)
            users: Dict[str, User] = await self.user_dao.get_by_ids(
                db, [product.author] + [review.user_id for review in reviews]
            )
        except Exception as e:
            logger.error("Error getting product reviews", product_id=product_id, error=str(e))
            raise UpstreamFailure("Failed to fetch the product")

        return ProductDetailResponse(
            product=ProductDetail(
                **product.model_dump(exclude={"author"}),
                author=_summary(users.get(product.author)),
            ),
            reviews=[
                ReviewRead(**review.model_dump(), user=_summary(users.get(review.user_id)))
                for review in reviews
            ],
        )

    async def update_product(
        self,
        db: AsyncSession,
        product_id: str,
        product_update: ProductUpdate,
        image_upload: Optional[UploadFile] = None,
    ) -> Product:
        """Apply a partial update. An ``image_upload`` is stored only after the
        product resolves and the payload passes validation, and it replaces
        the image list."""
        product = await self.get_product(db, product_id)

        update_data = product_update.model_dump(exclude_unset=True)
        explicit_nulls = [field for field in NON_NULLABLE_FIELDS if field in update_data and update_data[field] is None]
        if explicit_nulls:
            logger.warning("Rejected product update", product_id=product_id, null_fields=explicit_nulls)
            raise ValidationError(f"Fields cannot be null: {', '.join(explicit_nulls)}")
        if image_upload is not None:
            update_data.pop("image", None)

        merged = product.model_dump()
        merged.update(update_data)
        try:
            _check_product_fields(merged)
        except ValidationError as e:
            logger.warning("Rejected product update", product_id=product_id, reason=e.detail)
            raise

        stored_location = None
        if image_upload is not None:
            stored_location = await image_service.store_upload(image_upload, field_name="image")
            update_data["image"] = [stored_location]

        if not update_data:
            return product

        update_data["updated_at"] = datetime.now(timezone.utc)
        try:
            product = await self.product_dao.update(db, db_obj=product, obj_in=update_data)
            logger.info("Product updated successfully", product_id=product_id, fields=sorted(update_data))
            return product
        except Exception as e:
            logger.error("Error updating product", product_id=product_id, error=str(e))
            if stored_location:
                image_service.discard(stored_location)
            raise UpstreamFailure("Failed to update the product")

    async def delete_product(self, db: AsyncSession, product_id: str) -> None:
        try:
            deleted_product = await self.product_dao.delete_with_reviews(db, product_id)
        except Exception as e:
            logger.error("Error deleting product", product_id=product_id, error=str(e))
            raise UpstreamFailure("Failed to delete the product")
        if not deleted_product:
            logger.warning("Product not found for deletion", product_id=product_id)
            raise NotFoundError()
        logger.info("Product deleted successfully", product_id=product_id)

    async def get_related_products(self, db: AsyncSession, product_id: Optional[str]) -> List[Product]:
        if not product_id or not product_id.strip():
            raise ValidationError("Product ID is required")

        product = await self.get_product(db, product_id)
        tokens = name_tokens(product.name)
        try:
            candidates = await self.product_dao.get_related(db, product, tokens)
        except Exception as e:
            logger.error("Error fetching related products", product_id=product_id, error=str(e))
            raise UpstreamFailure("Failed to fetch related products")

        lowered = [token.lower() for token in tokens]

        def score(candidate: Product) -> int:
            name = candidate.name.lower()
            hits = sum(1 for token in lowered if token in name)
            return hits + (1 if candidate.category == product.category else 0)

        # sorted() is stable, so equal scores keep the newest-first order
        related = sorted(candidates, key=score, reverse=True)
        if settings.related_products_limit:
            related = related[:settings.related_products_limit]

        logger.info("Retrieved related products", product_id=product_id, tokens=tokens, count=len(related))
        return related


product_service = ProductService()
