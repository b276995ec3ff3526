"""
Service availability flags ("app" open/closed, "delivery" on/off).

Advisory only: order creation does not consult them, clients read them and
decide what to show.
"""

import logging
from typing import Any, Optional

from orderdesk.core.config import Settings
from orderdesk.core.errors import NotFound, ValidationFailed
from orderdesk.store import SettingsStore

logger = logging.getLogger(__name__)

STATUS_KINDS = ("app", "delivery")


class AvailabilityGate:

    def __init__(self, settings_store: SettingsStore, settings: Settings):
        self._store = settings_store
        self._settings = settings

    @staticmethod
    def _check_kind(kind: str) -> None:
        if kind not in STATUS_KINDS:
            raise ValidationFailed(f"Unknown status kind {kind!r}; expected one of {list(STATUS_KINDS)}")

    async def read_status(self, kind: str) -> dict[str, Any]:
        self._check_kind(kind)
        doc = await self._store.get_status(kind)
        if doc is None:
            raise NotFound(f"No {kind} status set")
        return doc.to_dict()

    async def read_all(self) -> dict[str, dict[str, Any]]:
        """Both flags keyed by kind; kinds never written are left out."""
        docs = await self._store.list_statuses()
        return {doc.kind: doc.to_dict() for doc in docs if doc.kind in STATUS_KINDS}

    async def write_status(self, kind: str, enabled: bool, message: Optional[str] = None) -> None:
        self._check_kind(kind)
        if not isinstance(enabled, bool):
            raise ValidationFailed("enabled must be true or false")

        if message is None or not str(message).strip():
            message = self._settings.default_status_message(kind)

        await self._store.merge_status(kind, enabled, message)
        logger.info(f"{kind} status -> enabled={enabled} ({message!r})")
