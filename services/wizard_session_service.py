"""
Server-side wizard sessions.

Keeps one WizardController per session id for the lifetime of the
process. Each session's draft lives in the shared key-value table under
`product-draft:{session_id}`, so a session evicted by a restart resumes
from its last auto-save.
"""

from typing import Optional
from uuid import uuid4

import structlog

from exceptions import WizardSessionNotFoundError
from services.draft_store import DRAFT_KEY, DraftStore, SupabaseKeyValueStore
from services.image_upload_client import ImageUploadClient
from services.product_service import get_product_service
from services.publish_service import PublishSubmitter
from services.storage_service import get_storage_service
from services.wizard_controller import WizardController

logger = structlog.get_logger(__name__)


class WizardSessionService:
    """Registry of live wizard controllers."""

    def __init__(self, kv_store=None, upload_client=None, creator=None):
        self.kv_store = kv_store
        self.upload_client = upload_client
        self.creator = creator
        self._controllers: dict[str, WizardController] = {}

    def _kv(self):
        if self.kv_store is None:
            self.kv_store = SupabaseKeyValueStore()
        return self.kv_store

    def _uploads(self) -> ImageUploadClient:
        if self.upload_client is None:
            self.upload_client = ImageUploadClient(storage=get_storage_service())
        return self.upload_client

    def draft_store_for(self, session_id: str) -> DraftStore:
        return DraftStore(self._kv(), key=f"{DRAFT_KEY}:{session_id}")

    def create(self, session_id: Optional[str] = None) -> tuple[str, WizardController]:
        """
        Start a session, or resume it from its draft when the id is known.

        Returns:
            (session_id, controller)
        """
        session_id = session_id or uuid4().hex
        if session_id in self._controllers:
            return session_id, self._controllers[session_id]

        controller = WizardController.from_draft(self._uploads(), self.draft_store_for(session_id))
        self._controllers[session_id] = controller
        logger.info(
            "wizard_session_opened",
            session_id=session_id,
            step=controller.current_step,
            resumed=bool(controller.session.photos or controller.session.basic_info.name)
        )
        return session_id, controller

    def get(self, session_id: str) -> WizardController:
        """
        Raises:
            WizardSessionNotFoundError: Unknown session and no saved draft
        """
        controller = self._controllers.get(session_id)
        if controller is not None:
            return controller

        if self.draft_store_for(session_id).has_draft():
            return self.create(session_id)[1]
        raise WizardSessionNotFoundError(session_id)

    def submitter_for(self, session_id: str) -> PublishSubmitter:
        creator = self.creator or get_product_service()
        return PublishSubmitter(creator, draft_store=self.draft_store_for(session_id))

    async def discard(self, session_id: str) -> None:
        controller = self.get(session_id)
        controller.discard()
        await controller.close()
        self._controllers.pop(session_id, None)
        logger.info("wizard_session_discarded", session_id=session_id)

    async def close_all(self) -> None:
        """Stop every controller's outcome consumer. Drafts are kept for resume."""
        for controller in self._controllers.values():
            await controller.close()
        if self._controllers:
            logger.info("wizard_sessions_closed", count=len(self._controllers))
        self._controllers.clear()


# Singleton instance
_service: Optional[WizardSessionService] = None


def get_wizard_session_service() -> WizardSessionService:
    """Get or create WizardSessionService instance."""
    global _service
    if _service is None:
        _service = WizardSessionService()
    return _service
