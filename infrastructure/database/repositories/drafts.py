"""Draft snapshot persistence for the entry form."""

from __future__ import annotations

import logging
from typing import Any

from app.constants import StorageKeys
from app.domain.exceptions import MalformedDraftError, StorageWriteError
from app.utils.persistent_store import LocalKeyValueStore
from infrastructure.utils.structured_fields import dump_json_field, parse_json_object

logger = logging.getLogger(__name__)


class DraftRepository:
    """Keeps the unsaved form record under one well-known key."""

    def __init__(self, kv_store: LocalKeyValueStore, key: str = StorageKeys.DRAFT):
        self.kv = kv_store
        self.key = key

    def save(self, payload: dict[str, Any]) -> None:
        try:
            blob = dump_json_field(payload)
        except (TypeError, ValueError) as e:
            raise StorageWriteError("Draft could not be serialized", detail={"key": self.key, "error": str(e)}) from e
        self.kv.set_item(self.key, blob)
        logger.debug("Draft saved under %s", self.key)

    def load(self) -> dict[str, Any] | None:
        """
        Load the stored draft.

        Returns:
            The draft record, or None when no draft was saved

        Raises:
            MalformedDraftError: stored text is not a JSON object
        """
        raw = self.kv.get_item(self.key)
        if raw is None:
            return None
        try:
            return parse_json_object(raw)
        except ValueError as e:
            raise MalformedDraftError("Stored draft is unreadable", detail={"key": self.key, "error": str(e)}) from e

    def clear(self) -> None:
        self.kv.remove_item(self.key)
