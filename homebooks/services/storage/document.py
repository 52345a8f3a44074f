"""
JSON Document Storage Base

Both adapters keep one JSON document under one key and rewrite the
whole document on every mutation. This base class owns the parts
they share: reading, decoding, per-record validation and writing.

ERROR POLICY (same for both adapters):
- Absent key, undecodable JSON, or malformed records: logged, treated
  as "no data". Malformed records are skipped individually.
- Backend read failure: degrades to "no data" on read-only calls,
  raised on mutations so a blind rewrite cannot clobber the document
- Any write failure: logged, raised as StorageWriteError
"""

import json
from typing import Any, Optional, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from homebooks.audit import AuditLogger
from homebooks.services.storage.interface import (
    KeyValueStore,
    StorageReadError,
    StorageWriteError,
    validate_key,
)


ModelT = TypeVar("ModelT", bound=BaseModel)

logger = structlog.get_logger(__name__)


class JsonDocumentStorage:
    """Read/decode/write one JSON document under a fixed key."""

    def __init__(
        self,
        store: KeyValueStore,
        storage_key: str,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._key = validate_key(storage_key)
        self._audit = audit_logger

    @property
    def storage_key(self) -> str:
        return self._key

    def _load_failed(self, message: str) -> None:
        logger.warning("storage_load_failed", storage_key=self._key, error=message)
        if self._audit:
            self._audit.log_storage_load_failed(self._key, message)

    def _read_document(self, strict: bool = False) -> Optional[Any]:
        """
        Return the decoded document, or None if absent/unreadable.

        strict=True re-raises backend read errors (used before writes).
        """
        try:
            raw = self._store.get_item(self._key)
        except StorageReadError as e:
            if strict:
                raise
            self._load_failed(str(e))
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except ValueError as e:
            self._load_failed(f"Invalid JSON: {e}")
            return None

    def _parse_records(
        self,
        model: type[ModelT],
        items: Any,
        collection: str,
    ) -> list[ModelT]:
        """Validate a list of raw dicts, skipping the malformed ones."""
        if not isinstance(items, list):
            if items is not None:
                self._load_failed(f"'{collection}' is not a list")
            return []

        records = []
        for index, item in enumerate(items):
            try:
                records.append(model.model_validate(item))
            except ValidationError as e:
                self._load_failed(
                    f"Skipping malformed {collection}[{index}]: "
                    f"{e.error_count()} validation error(s)"
                )
        return records

    def _write_document(self, document: Any) -> None:
        """Serialize and store the whole document in one set_item call."""
        try:
            payload = json.dumps(document, ensure_ascii=False)
            self._store.set_item(self._key, payload)
        except StorageWriteError as e:
            self._write_failed(e)
            raise
        except (TypeError, ValueError, OSError) as e:
            self._write_failed(e)
            raise StorageWriteError(f"Failed to write '{self._key}': {e}") from e

    def _write_failed(self, error: Exception) -> None:
        logger.error("storage_write_failed", storage_key=self._key, error=str(error))
        if self._audit:
            self._audit.log_storage_write_failed(self._key, str(error))
