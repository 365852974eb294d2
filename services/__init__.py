"""
Business logic services.

Each service handles one domain area.
"""

from services.product_service import ProductService, get_product_service
from services.storage_service import StorageService, get_storage_service
from services.marketing_service import MarketingService, get_marketing_service
from services.image_upload_client import ImageUploadClient, HttpImageStorage
from services.draft_store import DraftStore, JsonFileStore, MemoryStore, SupabaseKeyValueStore
from services.wizard_controller import WizardController, UploadOutcome, AddPhotosResult
from services.publish_service import PublishSubmitter, ProductApiClient, build_product_payload
from services.wizard_session_service import WizardSessionService, get_wizard_session_service

__all__ = [
    "ProductService",
    "get_product_service",
    "StorageService",
    "get_storage_service",
    "MarketingService",
    "get_marketing_service",
    "ImageUploadClient",
    "HttpImageStorage",
    "DraftStore",
    "JsonFileStore",
    "MemoryStore",
    "SupabaseKeyValueStore",
    "WizardController",
    "UploadOutcome",
    "AddPhotosResult",
    "PublishSubmitter",
    "ProductApiClient",
    "build_product_payload",
    "WizardSessionService",
    "get_wizard_session_service",
]
