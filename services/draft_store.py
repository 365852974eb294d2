"""
Draft persistence for the product upload wizard.

A draft is the whole WizardSession (photo metadata included, raw bytes
excluded) stored as one JSON string under a fixed key in a key-value store.
Stores follow localStorage semantics: string values, get/set/remove, no
schema. Writes are last-write-wins.
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from config import get_supabase_client, settings
from exceptions import DatabaseError
from models.wizard import WizardSession

logger = structlog.get_logger(__name__)


DRAFT_KEY = "product-draft"
DRAFT_VERSION = 1


# ===================
# KEY-VALUE STORES
# ===================

class MemoryStore:
    """In-process store. Lost on restart."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """
    Durable local store backed by a single JSON object on disk.

    The file is rewritten atomically on every set/remove. A corrupt file
    reads as empty so the wizard can always start.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or settings.draft_file_path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("kv_file_unreadable", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("kv_file_unreadable", path=str(self.path), error="not an object")
            return {}
        return data

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except OSError:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class SupabaseKeyValueStore:
    """Store backed by the `kv_store` table (columns: key, value, updated_at)."""

    def __init__(self, table: str = "kv_store"):
        self.db = get_supabase_client()
        self.table = table

    def get(self, key: str) -> Optional[str]:
        try:
            result = (
                self.db.table(self.table)
                .select("value")
                .eq("key", key)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("kv_get_failed", key=key, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            return None
        return result.data[0].get("value")

    def set(self, key: str, value: str) -> None:
        try:
            self.db.table(self.table).upsert({
                "key": key,
                "value": value,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }).execute()
        except Exception as e:
            logger.error("kv_set_failed", key=key, error=str(e))
            raise DatabaseError("upsert", str(e))

    def remove(self, key: str) -> None:
        try:
            self.db.table(self.table).delete().eq("key", key).execute()
        except Exception as e:
            logger.error("kv_remove_failed", key=key, error=str(e))
            raise DatabaseError("delete", str(e))


# ===================
# DRAFT STORE
# ===================

class DraftStore:
    """
    Save, load and clear the wizard draft.

    Loading never fails: absent or malformed data yields an empty session.
    """

    def __init__(self, store=None, key: str = DRAFT_KEY):
        self.store = store if store is not None else JsonFileStore()
        self.key = key

    def save_draft(self, session: WizardSession) -> None:
        """Serialize the session under the draft key, replacing any prior draft."""
        envelope = {
            "version": DRAFT_VERSION,
            "savedAt": datetime.now(timezone.utc).isoformat(),
            "session": session.to_storage(),
        }
        self.store.set(self.key, json.dumps(envelope))
        logger.debug(
            "draft_saved",
            key=self.key,
            step=session.current_step,
            photo_count=len(session.photos)
        )

    def load_draft(self) -> WizardSession:
        """
        Rehydrate the saved session exactly as it was written.

        Returns:
            Saved session, or an empty one when there is no usable draft
        """
        raw = self.store.get(self.key)
        if raw is None:
            return WizardSession()

        try:
            envelope = json.loads(raw)
            session = WizardSession.model_validate(envelope["session"])
        except (ValueError, KeyError, TypeError, PydanticValidationError) as e:
            logger.warning(
                "draft_load_failed",
                key=self.key,
                error=str(e),
                error_type=type(e).__name__
            )
            return WizardSession()

        logger.info(
            "draft_loaded",
            key=self.key,
            step=session.current_step,
            photo_count=len(session.photos)
        )
        return session

    def clear_draft(self) -> None:
        self.store.remove(self.key)
        logger.info("draft_cleared", key=self.key)

    def has_draft(self) -> bool:
        return self.store.get(self.key) is not None
