"""
Custom exception classes for the application.

Every error carries a stable code so the wizard and the API can turn it
into user-visible state without parsing messages.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PRODUCT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# PRODUCT ERRORS
# ===================

class ProductNotFoundError(NotFoundError):
    """Product not found."""

    def __init__(self, product_id: str):
        super().__init__(
            resource="Product",
            identifier=product_id,
            code="PRODUCT_NOT_FOUND"
        )


class ProductRejectedError(ValidationError):
    """
    Product creation endpoint refused the payload.

    field_errors holds the {field, message} pairs reported by the server,
    empty when it gave no field-level detail.
    """

    def __init__(self, message: str, field_errors: Optional[list[dict]] = None):
        self.field_errors = field_errors or []
        super().__init__(
            code="PRODUCT_REJECTED",
            message=message,
            details={"errors": self.field_errors}
        )


# ===================
# IMAGE UPLOAD ERRORS
# ===================

class InvalidFileTypeError(ValidationError):
    """Image MIME type not accepted."""

    def __init__(self, filename: str, content_type: Optional[str], allowed: list[str]):
        super().__init__(
            code="INVALID_FILE_TYPE",
            message=f"{filename}: only JPG, PNG and WebP images are supported",
            details={"filename": filename, "provided": content_type, "valid": allowed}
        )


class FileTooLargeError(ValidationError):
    """Image exceeds the per-file size limit."""

    def __init__(self, filename: str, size: int, max_size: int):
        super().__init__(
            code="FILE_TOO_LARGE",
            message=f"{filename}: file exceeds {max_size // (1024 * 1024)}MB",
            details={"filename": filename, "size": size, "max_size": max_size}
        )


class TooManyFilesError(ValidationError):
    """Batch would push the listing over its photo limit."""

    def __init__(self, requested: int, existing: int, max_files: int):
        super().__init__(
            code="TOO_MANY_FILES",
            message=f"A listing can have at most {max_files} photos",
            details={"requested": requested, "existing": existing, "max": max_files}
        )


class UploadFailedError(ExternalServiceError):
    """Transfer to the image storage endpoint failed."""

    def __init__(self, reason: str, filename: Optional[str] = None):
        self.reason = reason
        super().__init__(
            service="image_storage",
            message=f"Upload failed: {reason}",
            details={"filename": filename} if filename else None
        )
        self.code = "UPLOAD_FAILED"


# ===================
# WIZARD ERRORS
# ===================

class WizardValidationError(ValidationError):
    """One or more wizard fields failed validation."""

    def __init__(self, errors: dict[str, str], step: Optional[int] = None):
        self.errors = errors
        super().__init__(
            code="WIZARD_VALIDATION_FAILED",
            message=f"Validation failed with {len(errors)} errors",
            details={"step": step, "errors": errors}
        )


class NotReadyError(AppError):
    """Publish attempted while photo uploads are still in flight (409)."""

    def __init__(self, pending: int):
        super().__init__(
            code="UPLOADS_PENDING",
            message="Please wait for all photos to finish uploading",
            status_code=409,
            details={"pending": pending}
        )


class PublishFailedError(AppError):
    """Final submission rejected or failed; the session is left intact."""

    def __init__(self, message: str, field_errors: Optional[dict[str, str]] = None):
        self.field_errors = field_errors or {}
        super().__init__(
            code="PUBLISH_FAILED",
            message=message,
            status_code=502 if not self.field_errors else 422,
            details={"errors": self.field_errors}
        )


class WizardSessionNotFoundError(NotFoundError):
    """Wizard session not found."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="Wizard session",
            identifier=session_id,
            code="WIZARD_SESSION_NOT_FOUND"
        )


class PhotoNotFoundError(NotFoundError):
    """Photo not present in the wizard session."""

    def __init__(self, photo_id: str):
        super().__init__(
            resource="Photo",
            identifier=photo_id,
            code="PHOTO_NOT_FOUND"
        )
