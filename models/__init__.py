"""
Pydantic models for validation and serialization.

Request and response models use camelCase aliases on the wire.
"""

from models.base import (
    BaseSchema,
    CamelSchema
)
from models.product import (
    ProductDimensions,
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    ProductCreatedData,
    ProductCreatedResponse,
    FieldErrorDetail,
    UploadedImage,
    ImageUploadData,
    ImageUploadResponse,
)
from models.marketing import (
    ContentType,
    Tone,
    Platform,
    ContentSource,
    ContentGenerationRequest,
    AutoDescribeRequest,
    GeneratedContent,
)
from models.wizard import (
    STEP_BASIC_INFO,
    STEP_DESCRIPTION,
    STEP_SEO,
    STEP_PREVIEW,
    TOTAL_STEPS,
    CraftCategory,
    PhotoStatus,
    ItemDimensions,
    BasicInfo,
    SeoData,
    PhotoItem,
    WizardSession,
    ImageFile,
    RejectedFile,
    AddPhotosResponse,
    WizardStateResponse,
    PublishResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "CamelSchema",
    # Product
    "ProductDimensions",
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ProductListResponse",
    "ProductCreatedData",
    "ProductCreatedResponse",
    "FieldErrorDetail",
    "UploadedImage",
    "ImageUploadData",
    "ImageUploadResponse",
    # Marketing
    "ContentType",
    "Tone",
    "Platform",
    "ContentSource",
    "ContentGenerationRequest",
    "AutoDescribeRequest",
    "GeneratedContent",
    # Wizard
    "STEP_BASIC_INFO",
    "STEP_DESCRIPTION",
    "STEP_SEO",
    "STEP_PREVIEW",
    "TOTAL_STEPS",
    "CraftCategory",
    "PhotoStatus",
    "ItemDimensions",
    "BasicInfo",
    "SeoData",
    "PhotoItem",
    "WizardSession",
    "ImageFile",
    "RejectedFile",
    "AddPhotosResponse",
    "WizardStateResponse",
    "PublishResponse",
]
