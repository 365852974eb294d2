"""
Product upload wizard API routes.

A session id identifies one in-progress listing. Photo uploads started
here keep running in the background; poll GET /sessions/{id} to see
their status change.
"""

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import Response
from typing import Optional
import structlog

from exceptions import PhotoNotFoundError, ValidationError
from models.wizard import (
    AddPhotosResponse,
    BasicInfo,
    DescriptionUpdate,
    ImageFile,
    JumpRequest,
    PublishResponse,
    ReorderRequest,
    SeoData,
    WizardStateResponse,
)
from routes.products import handle_error
from services.wizard_controller import WizardController
from services.wizard_session_service import get_wizard_session_service

logger = structlog.get_logger(__name__)

router = APIRouter()


def state_response(session_id: str, controller: WizardController) -> WizardStateResponse:
    return WizardStateResponse(
        session_id=session_id,
        session=controller.session,
        can_publish=controller.can_publish
    )


# ===================
# SESSIONS
# ===================

@router.post("/sessions", response_model=WizardStateResponse, status_code=201)
async def open_session(session_id: Optional[str] = None):
    """
    Start a wizard session, or resume one from its saved draft.
    """
    try:
        service = get_wizard_session_service()
        session_id, controller = service.create(session_id)
        return state_response(session_id, controller)
    except Exception as e:
        return handle_error(e)


@router.get("/sessions/{session_id}", response_model=WizardStateResponse)
async def get_session(session_id: str):
    """
    Get the current wizard state.

    Raises:
        404: Unknown session
    """
    try:
        controller = get_wizard_session_service().get(session_id)
        return state_response(session_id, controller)
    except Exception as e:
        return handle_error(e)


@router.delete("/sessions/{session_id}", status_code=204, response_class=Response)
async def discard_session(session_id: str):
    """Discard a session and its draft."""
    try:
        await get_wizard_session_service().discard(session_id)
    except Exception as e:
        return handle_error(e)


# ===================
# FORM STEPS
# ===================

@router.patch("/sessions/{session_id}/basic-info", response_model=WizardStateResponse)
async def update_basic_info(session_id: str, body: BasicInfo):
    """Merge step 1 fields. Only fields present in the body are changed."""
    try:
        controller = get_wizard_session_service().get(session_id)
        controller.update_basic_info(**body.model_dump(exclude_unset=True))
        return state_response(session_id, controller)
    except Exception as e:
        return handle_error(e)


@router.put("/sessions/{session_id}/description", response_model=WizardStateResponse)
async def set_description(session_id: str, body: DescriptionUpdate):
    try:
        controller = get_wizard_session_service().get(session_id)
        controller.set_description(body.description)
        return state_response(session_id, controller)
    except Exception as e:
        return handle_error(e)


@router.patch("/sessions/{session_id}/seo", response_model=WizardStateResponse)
async def update_seo(session_id: str, body: SeoData):
    try:
        controller = get_wizard_session_service().get(session_id)
        controller.update_seo(**body.model_dump(exclude_unset=True))
        return state_response(session_id, controller)
    except Exception as e:
        return handle_error(e)


# ===================
# PHOTOS
# ===================

@router.post("/sessions/{session_id}/photos", response_model=AddPhotosResponse, status_code=202)
async def add_photos(session_id: str, images: list[UploadFile] = File(...)):
    """
    Add photos and start uploading them.

    Accepted photos are returned with status `uploading`; rejected files
    come back with the reason and are not added.

    Raises:
        422: Batch would exceed the photo limit
    """
    try:
        controller = get_wizard_session_service().get(session_id)
        files = [
            ImageFile(
                filename=upload.filename or "image",
                content_type=upload.content_type,
                data=await upload.read()
            )
            for upload in images
        ]
        result = controller.add_photos(files)
        return AddPhotosResponse(accepted=result.accepted, rejected=result.rejected)
    except Exception as e:
        return handle_error(e)


@router.delete("/sessions/{session_id}/photos/{photo_id}", response_model=WizardStateResponse)
async def remove_photo(session_id: str, photo_id: str):
    """
    Raises:
        404: Photo not in session
    """
    try:
        controller = get_wizard_session_service().get(session_id)
        if not controller.remove_photo(photo_id):
            raise PhotoNotFoundError(photo_id)
        return state_response(session_id, controller)
    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/photos/{photo_id}/retry", response_model=WizardStateResponse)
async def retry_photo(session_id: str, photo_id: str):
    """
    Re-upload a failed photo.

    Raises:
        404: Photo not in session
        422: Photo is not in failed state, or its file is gone
    """
    try:
        controller = get_wizard_session_service().get(session_id)
        if not controller.retry_upload(photo_id):
            raise ValidationError(
                "Photo cannot be retried; remove it and add it again",
                code="PHOTO_NOT_RETRYABLE",
                details={"photo_id": photo_id}
            )
        return state_response(session_id, controller)
    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/photos/reorder", response_model=WizardStateResponse)
async def reorder_photos(session_id: str, body: ReorderRequest):
    try:
        controller = get_wizard_session_service().get(session_id)
        try:
            controller.reorder(body.from_index, body.to_index)
        except IndexError as e:
            raise ValidationError(str(e), code="PHOTO_INDEX_OUT_OF_RANGE")
        return state_response(session_id, controller)
    except Exception as e:
        return handle_error(e)


# ===================
# NAVIGATION
# ===================

@router.post("/sessions/{session_id}/next", response_model=WizardStateResponse)
async def next_step(session_id: str):
    """Advance if the current step validates; otherwise `errors` is filled in."""
    try:
        controller = get_wizard_session_service().get(session_id)
        controller.next()
        return state_response(session_id, controller)
    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/previous", response_model=WizardStateResponse)
async def previous_step(session_id: str):
    try:
        controller = get_wizard_session_service().get(session_id)
        controller.previous()
        return state_response(session_id, controller)
    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/jump", response_model=WizardStateResponse)
async def jump_to_step(session_id: str, body: JumpRequest):
    try:
        controller = get_wizard_session_service().get(session_id)
        controller.jump_to(body.step)
        return state_response(session_id, controller)
    except Exception as e:
        return handle_error(e)


# ===================
# DRAFT & PUBLISH
# ===================

@router.post("/sessions/{session_id}/draft", response_model=WizardStateResponse)
async def save_draft(session_id: str):
    try:
        controller = get_wizard_session_service().get(session_id)
        controller.save_draft()
        return state_response(session_id, controller)
    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/publish", response_model=PublishResponse, status_code=201)
async def publish(session_id: str):
    """
    Publish the listing.

    Raises:
        409: Photos still uploading
        422: Validation failed or the product was rejected
        502: Product creation failed
    """
    try:
        service = get_wizard_session_service()
        controller = service.get(session_id)
        product_id = await controller.publish(service.submitter_for(session_id))
        return PublishResponse(product_id=product_id)
    except Exception as e:
        return handle_error(e)
