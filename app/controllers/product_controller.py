from typing import List, Optional, Tuple
from fastapi import APIRouter, Body, Depends, Query, Request, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile
from app.core.database import get_async_session
from app.core.exceptions import ValidationError
from app.core.security import require_admin
from app.entities.product_query import PageRequest, ProductFilter
from app.models.product import ProductCreate, ProductRead, ProductUpdate
from app.schemas.product_schemas import (
    MessageResponse,
    ProductDetailResponse,
    ProductListResponse,
    ProductUpdateResponse,
    UploadImagesRequest,
)
from app.services.image_service import image_service
from app.services.product_service import product_service
import structlog

logger = structlog.get_logger()

router = APIRouter(tags=["Products"])


@router.post("/uploadImages", response_model=List[str])
async def upload_images(payload: Optional[UploadImagesRequest] = Body(default=None)):
    """Store a batch of images and return their locations"""
    images = payload.images if payload else None
    if images is None or not isinstance(images, list):
        raise ValidationError("Request body must contain an array of images")
    return await image_service.store_images(images)


@router.post("/create-product", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
async def create_product(
    product: ProductCreate,
    db: AsyncSession = Depends(get_async_session),
):
    return await product_service.create_product(db, product)


@router.get("/", response_model=ProductListResponse)
async def list_products(
    category: Optional[str] = None,
    color: Optional[str] = None,
    min_price: Optional[str] = Query(default=None, alias="minPrice"),
    max_price: Optional[str] = Query(default=None, alias="maxPrice"),
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db: AsyncSession = Depends(get_async_session),
):
    """List products, newest first, with optional filters and pagination"""
    product_filter = ProductFilter.from_query(category, color, min_price, max_price)
    page_request = PageRequest.from_query(page, limit)
    return await product_service.list_products(db, product_filter, page_request)


@router.get("/related/", response_model=List[ProductRead])
async def related_products_without_id(db: AsyncSession = Depends(get_async_session)):
    return await product_service.get_related_products(db, None)


@router.get("/related/{product_id}", response_model=List[ProductRead])
async def related_products(product_id: str, db: AsyncSession = Depends(get_async_session)):
    return await product_service.get_related_products(db, product_id)


@router.get("/{product_id}", response_model=ProductDetailResponse)
async def get_product(product_id: str, db: AsyncSession = Depends(get_async_session)):
    return await product_service.get_product_detail(db, product_id)


async def _read_update_payload(request: Request) -> Tuple[dict, Optional[UploadFile]]:
    """Collect a partial update from a JSON body or a multipart form.

    An uploaded ``image`` file is returned separately and is not stored here.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data") or content_type.startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        payload = {}
        for key in form.keys():
            if key == "image":
                continue
            payload[key] = form.get(key)

        upload = form.get("image")
        if isinstance(upload, UploadFile):
            return payload, upload
        if form.getlist("image"):
            payload["image"] = [value for value in form.getlist("image") if isinstance(value, str)]
        return payload, None

    body = await request.body()
    if not body:
        return {}, None
    try:
        payload = await request.json()
    except ValueError:
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be an object")
    return payload, None


@router.patch("/update-product/{product_id}", response_model=ProductUpdateResponse)
async def update_product(
    product_id: str,
    request: Request,
    current_user=Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
):
    """Partially update a product (admins only)"""
    payload, image_upload = await _read_update_payload(request)
    try:
        product_update = ProductUpdate.model_validate(payload)
    except PydanticValidationError as e:
        fields = sorted({str(error["loc"][0]) for error in e.errors() if error.get("loc")})
        raise ValidationError(f"Invalid values for fields: {', '.join(fields)}")

    product = await product_service.update_product(db, product_id, product_update, image_upload=image_upload)
    logger.info("Product updated via API", product_id=product_id, user_id=current_user.get("user_id"))
    return ProductUpdateResponse(message="Product updated successfully", product=ProductRead.model_validate(product))


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(product_id: str, db: AsyncSession = Depends(get_async_session)):
    await product_service.delete_product(db, product_id)
    return MessageResponse(message="Product deleted successfully")
