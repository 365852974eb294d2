"""
Per-step validation for the product upload wizard.

Pure functions: given a WizardSession, return a field -> message map.
An empty map means the step passes.
"""

import math
from typing import Optional, Union

from models.wizard import (
    CRAFT_CATEGORIES,
    STEP_BASIC_INFO,
    STEP_DESCRIPTION,
    STEP_SEO,
    STEP_PREVIEW,
    PhotoStatus,
    WizardSession,
)


MSG_UPLOADS_PENDING = "Please wait for uploads to finish"
MSG_UPLOADS_FAILED = "Remove or retry failed uploads"


def parse_number(value: Optional[Union[int, float, str]]) -> Optional[float]:
    """Interpret a form value as a finite number, or None when it is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(value.strip())
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def _is_blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def validate_basic_info(session: WizardSession) -> dict[str, str]:
    errors: dict[str, str] = {}
    info = session.basic_info

    if _is_blank(info.name):
        errors["name"] = "Product name is required"

    if not info.category:
        errors["category"] = "Category is required"
    elif info.category not in CRAFT_CATEGORIES:
        errors["category"] = "Select a valid craft category"

    price = parse_number(info.price)
    if price is None or price <= 0:
        errors["price"] = "Valid price is required"

    quantity = parse_number(info.quantity)
    if quantity is None or quantity <= 0:
        errors["quantity"] = "Quantity is required"

    if not session.photos:
        errors["photos"] = "At least one photo is required"
    elif session.photos_with_status(PhotoStatus.FAILED):
        errors["photos"] = MSG_UPLOADS_FAILED
    elif session.photos_with_status(PhotoStatus.UPLOADING):
        errors["photos"] = MSG_UPLOADS_PENDING

    return errors


def validate_description(session: WizardSession) -> dict[str, str]:
    if _is_blank(session.description):
        return {"description": "Product description is required"}
    return {}


def validate_seo(session: WizardSession) -> dict[str, str]:
    errors: dict[str, str] = {}
    if _is_blank(session.seo.title):
        errors["seoTitle"] = "SEO title is required"
    if _is_blank(session.seo.meta_description):
        errors["metaDescription"] = "Meta description is required"
    return errors


_STEP_VALIDATORS = {
    STEP_BASIC_INFO: validate_basic_info,
    STEP_DESCRIPTION: validate_description,
    STEP_SEO: validate_seo,
}


def validate_through(session: WizardSession, step: int) -> dict[str, str]:
    """Merge the errors of every step from 1 up to and including `step`."""
    errors: dict[str, str] = {}
    for number in range(STEP_BASIC_INFO, step + 1):
        validator = _STEP_VALIDATORS.get(number)
        if validator:
            errors.update(validator(session))
    return errors


def validate_step(session: WizardSession, step: int) -> dict[str, str]:
    """
    Validate a single wizard step.

    The preview step re-validates every earlier step, since it gates publish.

    Args:
        session: Current wizard state
        step: Step number (1-4)

    Returns:
        Field -> message map, empty when the step passes

    Raises:
        ValueError: If step is outside the wizard
    """
    if step == STEP_PREVIEW:
        return validate_through(session, STEP_SEO)
    validator = _STEP_VALIDATORS.get(step)
    if validator is None:
        raise ValueError(f"Unknown wizard step: {step}")
    return validator(session)
