"""
Publish submitter for the product upload wizard.

Turns a finished WizardSession into the product creation payload and
hands it to a product creator. A creator is any object with a blocking
`create_product(payload) -> product_id` method:

    ProductApiClient    posts to the product creation endpoint over HTTP
    ProductService      writes straight to the products table
"""

import asyncio
from typing import Optional

import requests
import structlog

from config import settings
from exceptions import (
    ExternalServiceError,
    NotReadyError,
    ProductRejectedError,
    PublishFailedError,
    WizardValidationError,
)
from models.wizard import STEP_PREVIEW, PhotoStatus, WizardSession
from services.wizard_validators import parse_number, validate_step

logger = structlog.get_logger(__name__)


DEFAULT_CURRENCY = "INR"
GENERIC_PUBLISH_ERROR = "Error publishing product. Please try again."

# Server payload field -> key used in the wizard errors map
SERVER_FIELD_TO_SESSION_KEY = {
    "stockQuantity": "quantity",
    "imageUrls": "photos",
    "seoTitle": "seoTitle",
    "metaDescription": "metaDescription",
}


def _split_list(value) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [item.strip() for item in value if item and item.strip()]


def _number_or_zero(value) -> float:
    number = parse_number(value)
    return number if number is not None else 0


def build_product_payload(session: WizardSession) -> dict:
    """
    Assemble the product creation payload.

    Only photos that finished uploading are included, in their current
    order, so the first uploaded photo is the cover image.
    """
    info = session.basic_info
    seo = session.seo

    quantity = parse_number(info.quantity)
    payload = {
        "name": info.name,
        "description": session.description or info.short_description or "",
        "category": info.category,
        "price": parse_number(info.price),
        "currency": DEFAULT_CURRENCY,
        "stockQuantity": int(quantity) if quantity is not None else 0,
        "materials": _split_list(info.materials),
        "tags": _split_list(seo.keywords),
        "dimensions": {
            "length": _number_or_zero(info.dimensions.length),
            "width": _number_or_zero(info.dimensions.width),
            "height": _number_or_zero(info.dimensions.height),
            "weight": _number_or_zero(info.weight),
        },
        "imageUrls": [photo.remote_url for photo in session.uploaded_photos()],
    }

    if seo.title:
        payload["seoTitle"] = seo.title
        payload["metaDescription"] = seo.meta_description

    return payload


class ProductApiClient:
    """
    Client for the product creation endpoint.

    Success: {"data": {"productId": ...}}
    Rejection: {"message": ..., "details": [{"field": ..., "message": ...}]}
    """

    def __init__(self, url: Optional[str] = None, timeout: float = 30):
        self.url = url or settings.product_api_url
        self.timeout = timeout

    def create_product(self, payload: dict) -> str:
        """
        Raises:
            ProductRejectedError: Endpoint answered with a 4xx
            ExternalServiceError: Transport failure, 5xx or unreadable body
        """
        try:
            response = requests.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise ExternalServiceError("product_api", f"Product API unreachable: {e}")

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.ok:
            message = body.get("message") if isinstance(body, dict) else None
            if 400 <= response.status_code < 500:
                details = body.get("details") if isinstance(body, dict) else None
                raise ProductRejectedError(
                    message or f"Product rejected (HTTP {response.status_code})",
                    _normalize_field_errors(details)
                )
            raise ExternalServiceError(
                "product_api",
                message or f"Product API returned HTTP {response.status_code}"
            )

        product_id = _extract_product_id(body)
        if not product_id:
            raise ExternalServiceError("product_api", "Product API response had no product id")
        return product_id


def _normalize_field_errors(details) -> list[dict]:
    if not isinstance(details, list):
        return []
    errors = []
    for item in details:
        if isinstance(item, dict) and item.get("field") and item.get("message"):
            errors.append({"field": str(item["field"]), "message": str(item["message"])})
    return errors


def _extract_product_id(body) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    data = body.get("data")
    if isinstance(data, dict):
        if data.get("productId"):
            return str(data["productId"])
        product = data.get("product")
        if isinstance(product, dict) and product.get("id"):
            return str(product["id"])
    if body.get("id"):
        return str(body["id"])
    return None


class PublishSubmitter:
    """
    Final submission of the wizard.

    Failures are written into session.errors before being raised, so the
    caller can render them and retry without losing any data.
    """

    def __init__(self, creator, draft_store=None):
        self.creator = creator
        self.draft_store = draft_store

    async def publish(self, session: WizardSession) -> str:
        """
        Publish the session as a product.

        Returns:
            Created product id

        Raises:
            NotReadyError: A photo is still uploading
            WizardValidationError: Preview validation failed, or no photo
                finished uploading
            PublishFailedError: The creator rejected or failed the request
        """
        pending = len(session.photos_with_status(PhotoStatus.UPLOADING))
        if pending:
            raise NotReadyError(pending)

        errors = validate_step(session, STEP_PREVIEW)
        if not errors and not session.uploaded_photos():
            errors = {"photos": "Please upload at least one photo before publishing"}
        if errors:
            session.errors = errors
            raise WizardValidationError(errors, step=STEP_PREVIEW)

        payload = build_product_payload(session)
        logger.info(
            "publishing_product",
            name=payload["name"],
            image_count=len(payload["imageUrls"])
        )

        try:
            product_id = await asyncio.to_thread(self.creator.create_product, payload)
        except ProductRejectedError as e:
            field_errors = {
                SERVER_FIELD_TO_SESSION_KEY.get(item["field"], item["field"]): item["message"]
                for item in e.field_errors
            }
            logger.warning("publish_rejected", message=e.message, fields=sorted(field_errors))
            if field_errors:
                session.errors = field_errors
                raise PublishFailedError(e.message, field_errors) from e
            session.errors = {"publish": e.message or GENERIC_PUBLISH_ERROR}
            raise PublishFailedError(session.errors["publish"]) from e
        except Exception as e:
            logger.error("publish_failed", error=str(e), error_type=type(e).__name__)
            session.errors = {"publish": GENERIC_PUBLISH_ERROR}
            raise PublishFailedError(GENERIC_PUBLISH_ERROR) from e

        session.errors = {}
        if self.draft_store is not None:
            try:
                self.draft_store.clear_draft()
            except Exception as e:
                logger.error("draft_clear_failed", error=str(e))

        logger.info("product_published", product_id=product_id)
        return product_id
