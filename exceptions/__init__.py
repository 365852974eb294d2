"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Product
    ProductNotFoundError,
    ProductRejectedError,

    # Image upload
    InvalidFileTypeError,
    FileTooLargeError,
    TooManyFilesError,
    UploadFailedError,

    # Wizard
    WizardValidationError,
    NotReadyError,
    PublishFailedError,
    WizardSessionNotFoundError,
    PhotoNotFoundError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Product
    "ProductNotFoundError",
    "ProductRejectedError",

    # Image upload
    "InvalidFileTypeError",
    "FileTooLargeError",
    "TooManyFilesError",
    "UploadFailedError",

    # Wizard
    "WizardValidationError",
    "NotReadyError",
    "PublishFailedError",
    "WizardSessionNotFoundError",
    "PhotoNotFoundError",
]
