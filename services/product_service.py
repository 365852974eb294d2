"""
Product service for catalog operations.

Products are stored in the `products` table with snake_case columns; the
API layer exposes them in camelCase.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from config import get_supabase_client
from models.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
)
from exceptions import (
    ProductNotFoundError,
    ProductRejectedError,
    DatabaseError
)

logger = structlog.get_logger(__name__)


# Placeholder owner until authentication is wired in
DEFAULT_ARTISAN_ID = "test-artisan-id"


def to_field_errors(error: PydanticValidationError) -> list[dict]:
    """Flatten a pydantic error into [{field, message}] using wire names."""
    errors = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"] if part != "body")
        errors.append({"field": field or "body", "message": item["msg"]})
    return errors


class ProductService:
    """
    Product business logic.

    Handles CRUD operations for products.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "products"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(
        self,
        page: int = 1,
        page_size: int = 20,
        category: Optional[str] = None,
        artisan_id: Optional[str] = None,
        active_only: bool = True
    ) -> tuple[list[ProductResponse], int]:
        """
        Get all products with optional filters.

        Args:
            page: Page number (1-indexed)
            page_size: Items per page
            category: Filter by craft category
            artisan_id: Filter by owner
            active_only: Only return active products

        Returns:
            Tuple of (products list, total count)
        """
        logger.info(
            "getting_products",
            page=page,
            page_size=page_size,
            category=category
        )

        try:
            query = self.db.table(self.table).select("*", count="exact")

            if active_only:
                query = query.eq("is_active", True)
            if category:
                query = query.eq("category", category)
            if artisan_id:
                query = query.eq("artisan_id", artisan_id)

            offset = (page - 1) * page_size
            query = query.range(offset, offset + page_size - 1)

            # Newest first
            query = query.order("created_at", desc=True)

            result = query.execute()

            products = [ProductResponse(**row) for row in result.data]
            total = result.count or 0

            logger.info(
                "products_retrieved",
                count=len(products),
                total=total
            )

            return products, total

        except Exception as e:
            logger.error("get_products_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def get_by_id(self, product_id: str) -> ProductResponse:
        """
        Get a single product by ID.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.debug("getting_product", product_id=product_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", product_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_product_failed", product_id=product_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ProductNotFoundError(product_id)

        return ProductResponse(**result.data[0])

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, data: ProductCreate, artisan_id: str = DEFAULT_ARTISAN_ID) -> ProductResponse:
        """
        Create a new product.

        The first image URL becomes the thumbnail.

        Returns:
            Created ProductResponse
        """
        logger.info("creating_product", name=data.name, image_count=len(data.image_urls))

        now = datetime.now(timezone.utc).isoformat()
        insert_data = {
            "artisan_id": artisan_id,
            "name": data.name,
            "description": data.description,
            "category": data.category,
            "price": data.price,
            "currency": data.currency,
            "stock_quantity": data.stock_quantity,
            "materials": data.materials,
            "tags": data.tags,
            "dimensions": data.dimensions.model_dump(),
            "image_urls": data.image_urls,
            "thumbnail_url": data.image_urls[0] if data.image_urls else None,
            "customizable": data.customizable,
            "seo_title": data.seo_title,
            "meta_description": data.meta_description,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }

        try:
            result = (
                self.db.table(self.table)
                .insert(insert_data)
                .execute()
            )
        except Exception as e:
            logger.error("create_product_failed", name=data.name, error=str(e))
            raise DatabaseError("insert", str(e))

        product = ProductResponse(**result.data[0])
        logger.info("product_created", product_id=product.id, name=product.name)
        return product

    def create_product(self, payload: dict) -> str:
        """
        Create a product from a raw creation payload.

        Lets the wizard publish in process instead of over HTTP.

        Returns:
            New product id

        Raises:
            ProductRejectedError: Payload failed validation
        """
        try:
            data = ProductCreate.model_validate(payload)
        except PydanticValidationError as e:
            raise ProductRejectedError("Invalid request data", to_field_errors(e))
        return self.create(data).id

    def update(self, product_id: str, data: ProductUpdate) -> ProductResponse:
        """
        Update an existing product.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.info("updating_product", product_id=product_id)

        self.get_by_id(product_id)

        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            return self.get_by_id(product_id)
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            result = (
                self.db.table(self.table)
                .update(update_data)
                .eq("id", product_id)
                .execute()
            )
        except Exception as e:
            logger.error("update_product_failed", product_id=product_id, error=str(e))
            raise DatabaseError("update", str(e))

        if not result.data:
            raise ProductNotFoundError(product_id)

        logger.info("product_updated", product_id=product_id, fields=sorted(update_data))
        return ProductResponse(**result.data[0])

    def delete(self, product_id: str) -> ProductResponse:
        """
        Soft delete a product (set is_active=False).

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.info("deleting_product", product_id=product_id)
        return self.update(product_id, ProductUpdate(is_active=False))


# Singleton instance
_service: Optional[ProductService] = None


def get_product_service() -> ProductService:
    """Get or create ProductService instance."""
    global _service
    if _service is None:
        _service = ProductService()
    return _service
