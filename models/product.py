"""
Product schemas for validation and serialization.

Field names on the wire are camelCase and must match the product creation
contract used by the web frontend (name, stockQuantity, imageUrls, ...).
"""

from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime

from models.base import CamelSchema


class ProductDimensions(CamelSchema):
    """Physical size and weight. Missing values are sent as 0."""

    length: float = Field(0, ge=0)
    width: float = Field(0, ge=0)
    height: float = Field(0, ge=0)
    weight: float = Field(0, ge=0)


class ProductCreate(CamelSchema):
    """
    Create a new product listing.

    Required: name, description, category, price, stockQuantity
    """

    name: str = Field(..., min_length=3, max_length=100)
    description: str = Field(..., min_length=10, max_length=5000)
    category: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)
    currency: str = Field("INR", min_length=3, max_length=3)
    stock_quantity: int = Field(..., ge=0)
    materials: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    dimensions: ProductDimensions = Field(default_factory=ProductDimensions)
    image_urls: list[str] = Field(default_factory=list, max_length=10)
    customizable: bool = False
    seo_title: Optional[str] = Field(None, max_length=120)
    meta_description: Optional[str] = Field(None, max_length=320)

    @field_validator("currency")
    @classmethod
    def currency_uppercase(cls, v: str) -> str:
        return v.upper()

    @field_validator("materials", "tags")
    @classmethod
    def drop_blank_entries(cls, v: list[str]) -> list[str]:
        return [item.strip() for item in v if item and item.strip()]


class ProductUpdate(CamelSchema):
    """
    Update existing product.

    All fields optional - only provided fields are updated.
    """

    name: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, min_length=10, max_length=5000)
    category: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    materials: Optional[list[str]] = None
    tags: Optional[list[str]] = None
    dimensions: Optional[ProductDimensions] = None
    customizable: Optional[bool] = None
    is_active: Optional[bool] = None


class ProductResponse(CamelSchema):
    """
    Product response with all fields.

    Used for GET responses.
    """

    id: str
    artisan_id: Optional[str] = None
    name: str
    description: str
    category: str
    price: float
    currency: str = "INR"
    stock_quantity: int = 0
    materials: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    dimensions: Optional[ProductDimensions] = None
    image_urls: list[str] = Field(default_factory=list)
    thumbnail_url: Optional[str] = None
    customizable: bool = False
    seo_title: Optional[str] = None
    meta_description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductListResponse(CamelSchema):
    """List of products with pagination."""

    data: list[ProductResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class ProductCreatedData(CamelSchema):
    product_id: str
    product: ProductResponse


class ProductCreatedResponse(CamelSchema):
    success: bool = True
    message: str = "Product created successfully"
    data: ProductCreatedData


class FieldErrorDetail(CamelSchema):
    """One entry of a validation error list: {field, message}."""

    field: str
    message: str


class UploadedImage(CamelSchema):
    file_name: str
    url: str
    size: int
    mimetype: str


class ImageUploadData(CamelSchema):
    urls: list[str]
    files: list[UploadedImage]


class ImageUploadResponse(CamelSchema):
    success: bool = True
    message: str
    data: ImageUploadData
