from pydantic import BaseModel
from typing import Any, List, Optional

from app.models.product import ProductDetail, ProductListItem, ProductRead
from app.models.review import ReviewRead


class UploadImagesRequest(BaseModel):
    images: Optional[Any] = None


class ProductListResponse(BaseModel):
    products: List[ProductListItem]
    totalPages: int
    totalProducts: int


class ProductDetailResponse(BaseModel):
    product: ProductDetail
    reviews: List[ReviewRead]


class ProductUpdateResponse(BaseModel):
    message: str
    product: ProductRead


class MessageResponse(BaseModel):
    message: str
