"""
Wizard state controller for the product upload workflow.

Owns one WizardSession and drives it: step navigation gated by the
per-step validators, the photo list with background uploads, auto-saved
drafts, and publish.

Uploads run as asyncio tasks, one per file. Each task reports an
UploadOutcome on a queue; a single consumer applies outcomes to the
session by photo id. An outcome for a photo that was removed (or retried
since) is dropped. Methods that start uploads must be called from inside
the running event loop.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_snake

from exceptions import (
    AppError,
    FileTooLargeError,
    InvalidFileTypeError,
    PhotoNotFoundError,
    TooManyFilesError,
    UploadFailedError,
)
from models.wizard import (
    STEP_BASIC_INFO,
    STEP_PREVIEW,
    TOTAL_STEPS,
    BasicInfo,
    ImageFile,
    PhotoItem,
    PhotoStatus,
    RejectedFile,
    SeoData,
    WizardSession,
)
from services.wizard_validators import validate_step, validate_through

logger = structlog.get_logger(__name__)

INTERRUPTED_UPLOAD_MESSAGE = "Upload interrupted. Remove the photo and add it again"


# Edited form field -> key used in the errors map
SEO_ERROR_KEYS = {
    "title": "seoTitle",
    "meta_description": "metaDescription",
}


@dataclass
class UploadOutcome:
    """Completion message for one upload attempt."""

    photo_id: str
    attempt: int
    remote_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and bool(self.remote_url)


@dataclass
class AddPhotosResult:
    accepted: list[PhotoItem]
    rejected: list[RejectedFile]


class WizardController:
    """
    Product upload wizard.

    Usage:
        controller = WizardController(ImageUploadClient(), draft_store=DraftStore())
        controller.update_basic_info(name="Clay Pot", category="pottery")
        controller.add_photos(files)
        await controller.wait_for_uploads()
        controller.next()
    """

    def __init__(
        self,
        upload_client,
        session: Optional[WizardSession] = None,
        draft_store=None
    ):
        self.upload_client = upload_client
        self.session = session if session is not None else WizardSession()
        self.draft_store = draft_store

        self._files: dict[str, ImageFile] = {}
        self._attempts: dict[str, int] = {}
        self._tasks: set[asyncio.Task] = set()
        self._outcomes: asyncio.Queue = asyncio.Queue()
        self._consumer: Optional[asyncio.Task] = None

    @classmethod
    def from_draft(cls, upload_client, draft_store) -> "WizardController":
        """
        Resume from the saved draft, or start empty.

        A new controller holds no file bytes, so photos saved mid-upload
        can never finish. They are marked failed.
        """
        session = draft_store.load_draft()
        for photo in session.photos_with_status(PhotoStatus.UPLOADING):
            photo.status = PhotoStatus.FAILED
            photo.error = INTERRUPTED_UPLOAD_MESSAGE
        return cls(upload_client, session=session, draft_store=draft_store)

    # ===================
    # NAVIGATION
    # ===================

    @property
    def current_step(self) -> int:
        return self.session.current_step

    def next(self) -> bool:
        """
        Advance one step if the current step validates.

        Returns:
            True if the step changed
        """
        step = self.session.current_step
        errors = validate_step(self.session, step)
        if errors:
            self.session.errors = errors
            logger.info("wizard_step_blocked", step=step, fields=sorted(errors))
            self._autosave()
            return False

        self.session.errors = {}
        if step < TOTAL_STEPS:
            self.session.current_step = step + 1
        logger.info("wizard_step_advanced", step=self.session.current_step)
        self._autosave()
        return self.session.current_step != step

    def previous(self) -> bool:
        """Go back one step without validating."""
        if self.session.current_step <= STEP_BASIC_INFO:
            return False
        self.session.current_step -= 1
        self._autosave()
        return True

    def jump_to(self, step: int) -> bool:
        """
        Jump to a step.

        Backward jumps are always allowed; forward jumps only when every
        step before the target validates. A refused jump changes nothing.
        """
        if not STEP_BASIC_INFO <= step <= TOTAL_STEPS:
            raise ValueError(f"Unknown wizard step: {step}")

        if step > self.session.current_step:
            if validate_through(self.session, step - 1):
                logger.info("wizard_jump_refused", step=step, current=self.session.current_step)
                return False
            self.session.errors = {}

        self.session.current_step = step
        self._autosave()
        return True

    # ===================
    # FORM FIELDS
    # ===================

    def update_basic_info(self, **fields) -> BasicInfo:
        """
        Merge step 1 form fields and clear their errors.

        Raises:
            ValueError: Unknown field name
        """
        unknown = set(fields) - set(BasicInfo.model_fields)
        if unknown:
            raise ValueError(f"Unknown basic info fields: {sorted(unknown)}")

        data = self.session.basic_info.model_dump()
        if isinstance(fields.get("dimensions"), dict):
            fields["dimensions"] = {**data["dimensions"], **fields["dimensions"]}
        data.update(fields)
        try:
            info = BasicInfo.model_validate(data)
        except PydanticValidationError as e:
            self._record_field_errors(e)
            return self.session.basic_info
        self.session.basic_info = info

        for name in fields:
            self.session.errors.pop(name, None)
        self._autosave()
        return self.session.basic_info

    def _record_field_errors(self, error: PydanticValidationError, keys: Optional[dict] = None) -> None:
        """Keep the previous values and report each rejected field in `session.errors`."""
        keys = keys or {}
        rejected = []
        for item in error.errors():
            field = to_snake(str(item["loc"][0])) if item["loc"] else "form"
            rejected.append(keys.get(field, field))
            self.session.errors[rejected[-1]] = item["msg"]
        logger.info("form_update_rejected", fields=rejected)

    def set_description(self, description: str) -> None:
        """Set the description, whether typed or generated."""
        self.session.description = description
        self.session.errors.pop("description", None)
        self._autosave()

    def update_seo(self, **fields) -> SeoData:
        unknown = set(fields) - set(SeoData.model_fields)
        if unknown:
            raise ValueError(f"Unknown SEO fields: {sorted(unknown)}")

        data = self.session.seo.model_dump()
        data.update(fields)
        try:
            seo = SeoData.model_validate(data)
        except PydanticValidationError as e:
            self._record_field_errors(e, SEO_ERROR_KEYS)
            return self.session.seo
        self.session.seo = seo

        for name in fields:
            self.session.errors.pop(SEO_ERROR_KEYS.get(name, name), None)
        self._autosave()
        return self.session.seo

    # ===================
    # PHOTOS
    # ===================

    def add_photos(self, files: list[ImageFile]) -> AddPhotosResult:
        """
        Accept a batch of files and start uploading them.

        Files failing type or size checks are returned as rejected and
        never enter `uploading`. Accepted files appear in the photo list
        right away with status `uploading`.

        Raises:
            TooManyFilesError: Batch would exceed the photo limit
        """
        try:
            self.upload_client.validate_batch(files, len(self.session.photos))
        except TooManyFilesError as e:
            self.session.errors["photos"] = e.message
            raise

        accepted: list[PhotoItem] = []
        rejected: list[RejectedFile] = []

        for file in files:
            try:
                self.upload_client.validate(file)
            except (InvalidFileTypeError, FileTooLargeError) as e:
                logger.info("photo_rejected", filename=file.filename, code=e.code)
                rejected.append(RejectedFile(filename=file.filename, code=e.code, message=e.message))
                continue

            photo = PhotoItem(
                name=file.filename,
                content_type=file.content_type,
                size=file.size,
                local_preview_ref=file.preview_ref,
            )
            self.session.photos.append(photo)
            self._files[photo.id] = file
            accepted.append(photo)

        if accepted:
            self.session.errors.pop("photos", None)
            for photo in accepted:
                self._start_upload(photo.id)
            self._autosave()

        logger.info("photos_added", accepted=len(accepted), rejected=len(rejected))
        return AddPhotosResult(accepted=accepted, rejected=rejected)

    def remove_photo(self, photo_id: str) -> bool:
        """
        Remove a photo whatever its status.

        An in-flight upload is not cancelled; its result is discarded.
        """
        photo = self.session.find_photo(photo_id)
        if photo is None:
            return False

        self.session.photos.remove(photo)
        self._files.pop(photo_id, None)
        self._attempts.pop(photo_id, None)
        logger.info("photo_removed", photo_id=photo_id, status=photo.status.value)
        self._autosave()
        return True

    def reorder(self, from_index: int, to_index: int) -> None:
        """Move a photo. Whatever ends up at index 0 is the cover image."""
        photos = self.session.photos
        if not 0 <= from_index < len(photos) or not 0 <= to_index < len(photos):
            raise IndexError(f"Photo index out of range: {from_index} -> {to_index}")

        photo = photos.pop(from_index)
        photos.insert(to_index, photo)
        self._autosave()

    def retry_upload(self, photo_id: str) -> bool:
        """
        Re-upload a failed photo.

        Returns:
            True if an upload was started. False when the photo is not in
            `failed` state or its bytes are no longer available (e.g. it
            came back from a draft).

        Raises:
            PhotoNotFoundError: No photo with this id
        """
        photo = self.session.find_photo(photo_id)
        if photo is None:
            raise PhotoNotFoundError(photo_id)
        if photo.status != PhotoStatus.FAILED:
            return False
        if photo_id not in self._files:
            logger.warning("photo_retry_unavailable", photo_id=photo_id)
            return False

        photo.status = PhotoStatus.UPLOADING
        photo.error = None
        self.session.errors.pop("photos", None)
        self._start_upload(photo_id)
        self._autosave()
        return True

    @property
    def pending_uploads(self) -> int:
        return len(self.session.photos_with_status(PhotoStatus.UPLOADING))

    async def wait_for_uploads(self) -> None:
        """Wait until every started upload has finished and been applied."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
        await self._outcomes.join()

    def _start_upload(self, photo_id: str) -> None:
        attempt = self._attempts.get(photo_id, 0) + 1
        self._attempts[photo_id] = attempt

        self._ensure_consumer()
        task = asyncio.create_task(self._run_upload(photo_id, attempt, self._files[photo_id]))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_upload(self, photo_id: str, attempt: int, file: ImageFile) -> None:
        try:
            url = await self.upload_client.upload(file)
        except UploadFailedError as e:
            outcome = UploadOutcome(photo_id, attempt, error=e.reason)
        except AppError as e:
            outcome = UploadOutcome(photo_id, attempt, error=e.message)
        except Exception as e:
            logger.error(
                "photo_upload_crashed",
                photo_id=photo_id,
                error=str(e),
                error_type=type(e).__name__
            )
            outcome = UploadOutcome(photo_id, attempt, error=str(e) or type(e).__name__)
        else:
            outcome = UploadOutcome(photo_id, attempt, remote_url=url)

        await self._outcomes.put(outcome)

    def _ensure_consumer(self) -> None:
        if self._consumer is None or self._consumer.done():
            self._consumer = asyncio.create_task(self._consume_outcomes())

    async def _consume_outcomes(self) -> None:
        while True:
            outcome = await self._outcomes.get()
            try:
                self._apply_outcome(outcome)
            finally:
                self._outcomes.task_done()

    def _apply_outcome(self, outcome: UploadOutcome) -> None:
        photo = self.session.find_photo(outcome.photo_id)
        if photo is None or self._attempts.get(outcome.photo_id) != outcome.attempt:
            logger.info("upload_result_discarded", photo_id=outcome.photo_id)
            return

        if outcome.succeeded:
            photo.remote_url = outcome.remote_url
            photo.status = PhotoStatus.UPLOADED
            photo.error = None
            self._files.pop(outcome.photo_id, None)
        else:
            photo.status = PhotoStatus.FAILED
            photo.error = outcome.error or "Upload failed"
        self._autosave()

    # ===================
    # DRAFT & PUBLISH
    # ===================

    def save_draft(self) -> None:
        """
        Explicitly save the draft.

        Raises:
            RuntimeError: No draft store attached
        """
        if self.draft_store is None:
            raise RuntimeError("No draft store configured")
        self.draft_store.save_draft(self.session)

    def discard(self) -> None:
        """Drop the session and its draft."""
        if self.draft_store is not None:
            self.draft_store.clear_draft()
        self._files.clear()
        self._attempts.clear()
        self.session = WizardSession()

    @property
    def can_publish(self) -> bool:
        return (
            self.pending_uploads == 0
            and bool(self.session.uploaded_photos())
            and not validate_step(self.session, STEP_PREVIEW)
        )

    async def publish(self, submitter) -> str:
        """
        Publish the listing and start a fresh session.

        Raises:
            NotReadyError, WizardValidationError, PublishFailedError: The
            session is left untouched (apart from `errors`) for a retry
        """
        product_id = await submitter.publish(self.session)
        self._files.clear()
        self._attempts.clear()
        self.session = WizardSession()
        return product_id

    async def close(self) -> None:
        """Stop the outcome consumer. In-flight uploads are left to finish."""
        if self._consumer is not None:
            self._consumer.cancel()
            try:
                await self._consumer
            except asyncio.CancelledError:
                pass
            self._consumer = None

    def _autosave(self) -> None:
        if self.draft_store is None:
            return
        try:
            self.draft_store.save_draft(self.session)
        except Exception as e:
            logger.error("draft_autosave_failed", error=str(e), error_type=type(e).__name__)
