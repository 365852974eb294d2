"""
Product API routes.

Keeps the wire contract of the web frontend: camelCase JSON, and
validation failures answered as HTTP 400 with a details list of
{field, message} pairs.
"""

from fastapi import APIRouter, File, Query, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError as PydanticValidationError
from typing import Optional
import structlog

from exceptions import AppError, TooManyFilesError
from models.marketing import AutoDescribeRequest
from models.product import (
    ImageUploadData,
    ImageUploadResponse,
    ProductCreate,
    ProductCreatedData,
    ProductCreatedResponse,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    UploadedImage,
)
from models.wizard import ImageFile
from services.image_upload_client import ImageUploadClient
from services.marketing_service import get_marketing_service, suggest_tags
from services.product_service import get_product_service, to_field_errors
from services.storage_service import get_storage_service

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def validation_error_response(details: list[dict], message: str = "Invalid request data") -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation Error",
            "message": message,
            "details": details
        }
    )


# ===================
# IMAGES
# ===================

@router.post("/upload-images", response_model=ImageUploadResponse)
async def upload_images(images: list[UploadFile] = File(...)):
    """
    Store product images and return one public URL per file.

    Raises:
        400: No files, too many files, or a file of the wrong type/size
    """
    if not images:
        return validation_error_response(
            [{"field": "images", "message": "Please select images to upload"}],
            message="No images"
        )

    client = ImageUploadClient(storage=get_storage_service())

    try:
        files = [
            ImageFile(
                filename=upload.filename or "image",
                content_type=upload.content_type,
                data=await upload.read()
            )
            for upload in images
        ]

        client.validate_batch(files)
        rejected = []
        for file in files:
            try:
                client.validate(file)
            except AppError as e:
                rejected.append({"field": file.filename, "message": e.message})
        if rejected:
            return validation_error_response(rejected)

        stored = []
        for file in files:
            url = await client.upload(file)
            stored.append(UploadedImage(
                file_name=file.filename,
                url=url,
                size=file.size,
                mimetype=file.content_type or ""
            ))

        logger.info("images_uploaded", count=len(stored))
        return ImageUploadResponse(
            message=f"{len(stored)} image(s) uploaded successfully",
            data=ImageUploadData(urls=[s.url for s in stored], files=stored)
        )

    except TooManyFilesError as e:
        return validation_error_response([{"field": "images", "message": e.message}])
    except Exception as e:
        return handle_error(e)


# ===================
# PRODUCTS
# ===================

@router.post("/create", response_model=ProductCreatedResponse, status_code=201)
async def create_product(request: Request):
    """
    Create a new product listing.

    Raises:
        400: Validation error with field details
    """
    try:
        payload = await request.json()
    except ValueError:
        return validation_error_response([{"field": "body", "message": "Body must be JSON"}])

    try:
        data = ProductCreate.model_validate(payload)
    except PydanticValidationError as e:
        details = to_field_errors(e)
        logger.info("product_validation_failed", fields=[d["field"] for d in details])
        return validation_error_response(details)

    try:
        service = get_product_service()
        product = service.create(data)
        return ProductCreatedResponse(
            message="Product created successfully",
            data=ProductCreatedData(product_id=product.id, product=product)
        )
    except Exception as e:
        return handle_error(e)


@router.post("/auto-describe")
async def auto_describe(body: AutoDescribeRequest):
    """Generate a listing description for the wizard's description step."""
    try:
        content = get_marketing_service().describe_product(body)
        return {
            "success": True,
            "message": f"Product description generated successfully using {content.source.value}",
            "data": {
                "description": content.text,
                "productName": body.product_name,
                "category": body.category,
                "tags": suggest_tags(body.category),
                "source": content.source.value,
            }
        }
    except Exception as e:
        return handle_error(e)


@router.get("", response_model=ProductListResponse)
async def list_products(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    category: Optional[str] = Query(None, description="Filter by craft category"),
    include_inactive: bool = Query(False, description="Include inactive products")
):
    """
    List products with optional filters.

    Returns paginated list of products.
    """
    try:
        service = get_product_service()

        products, total = service.get_all(
            page=page,
            page_size=page_size,
            category=category,
            active_only=not include_inactive
        )

        total_pages = (total + page_size - 1) // page_size

        return ProductListResponse(
            data=products,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages
        )

    except Exception as e:
        return handle_error(e)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str):
    """
    Get a single product by ID.

    Raises:
        404: Product not found
    """
    try:
        return get_product_service().get_by_id(product_id)
    except Exception as e:
        return handle_error(e)


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(product_id: str, data: ProductUpdate):
    """
    Update an existing product.

    Raises:
        404: Product not found
    """
    try:
        return get_product_service().update(product_id, data)
    except Exception as e:
        return handle_error(e)


@router.delete("/{product_id}", status_code=204, response_class=Response)
async def delete_product(product_id: str):
    """
    Deactivate a product.

    Raises:
        404: Product not found
    """
    try:
        get_product_service().delete(product_id)
    except Exception as e:
        return handle_error(e)
