"""
Log Book Service
================
Application call boundary for the greenhouse daily log.

The service holds collaborators only. Per-session editing state (which
entry is being edited, the cached history) lives in an ``EditingContext``
owned by the caller. Every operation returns an ``OperationResult`` with a
German notification; storage and parsing errors are logged and turned into
error notifications instead of propagating.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from app.domain.chronology import sort_chronologically, sort_history
from app.domain.exceptions import (
    MalformedDraftError,
    StorageError,
    StorageInitError,
    StorageReadError,
    ValidationError,
)
from app.domain.log_record import build_export_file_name, export_payload, normalize_payload
from app.enums.common import NotificationLevel
from app.models.log_entry import LogEntry, build_entry
from app.services.application.change_statistics_service import ChangeStatistics, ChangeStatisticsService
from app.services.application.trend_analytics_service import TrendAnalyticsService, TrendResult
from app.utils.time import format_display_date
from infrastructure.utils.structured_fields import parse_json_object

if TYPE_CHECKING:
    from infrastructure.database.repositories.base import EntryStore
    from infrastructure.database.repositories.drafts import DraftRepository
    from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str


@dataclass(frozen=True)
class HistorySnapshot:
    """History listing plus the analytics derived from it.

    ``history_available`` is False when the store could not be read, which
    is not the same as an empty history.
    """

    entries: list[LogEntry] = field(default_factory=list)
    statistics: ChangeStatistics | None = None
    trends: list[TrendResult] = field(default_factory=list)
    history_available: bool = True

    @property
    def is_empty(self) -> bool:
        return self.history_available and not self.entries


@dataclass(frozen=True)
class ExportArtifact:
    file_name: str
    content: str


@dataclass(frozen=True)
class OperationResult:
    ok: bool
    notification: Notification | None = None
    payload: Any = None

    @classmethod
    def success(cls, message: str | None = None, payload: Any = None) -> "OperationResult":
        notification = Notification(NotificationLevel.INFO, message) if message else None
        return cls(ok=True, notification=notification, payload=payload)

    @classmethod
    def failure(cls, message: str | None = None, payload: Any = None) -> "OperationResult":
        notification = Notification(NotificationLevel.ERROR, message) if message else None
        return cls(ok=False, notification=notification, payload=payload)


@dataclass
class EditingContext:
    """Per-session state: the entry under edit and the cached history."""

    entry_id: str | None = None
    created_at: str | None = None
    entries: list[LogEntry] = field(default_factory=list)
    snapshot: HistorySnapshot | None = None

    @property
    def is_update(self) -> bool:
        return bool(self.entry_id)

    def set_target(self, entry: LogEntry | None) -> None:
        if entry is None:
            self.clear_target()
            return
        self.entry_id = entry.id
        self.created_at = entry.created_at or entry.meta.created_at

    def clear_target(self) -> None:
        self.entry_id = None
        self.created_at = None

    def cached(self, entry_id: str) -> LogEntry | None:
        return next((entry for entry in self.entries if entry.id == entry_id), None)


class LogBookService:
    """Save, load, delete and analyze daily log entries."""

    def __init__(
        self,
        store: "EntryStore",
        drafts: "DraftRepository",
        statistics: ChangeStatisticsService | None = None,
        trends: TrendAnalyticsService | None = None,
        audit_logger: "AuditLogger" | None = None,
    ):
        """
        Initialize service.

        Args:
            store: Entry store, already selected by the store factory
            drafts: Draft snapshot repository
            statistics: Change statistics service
            trends: Trend analytics service
            audit_logger: Optional audit trail for entry mutations
        """
        self.store = store
        self.drafts = drafts
        self.statistics = statistics or ChangeStatisticsService()
        self.trends = trends or TrendAnalyticsService()
        self.audit_logger = audit_logger

    def _audit(self, action: str, entry_id: str, outcome: str, **metadata: Any) -> None:
        if self.audit_logger is not None:
            self.audit_logger.log_entry_change(action, entry_id, outcome, **metadata)

    # ========================================================================
    # Startup
    # ========================================================================

    async def initialize(self, context: EditingContext) -> OperationResult:
        """Prepare the store and load the initial history."""
        try:
            await self.store.ready()
        except StorageInitError as e:
            logger.error("Entry store initialization failed: %s (%s)", e, e.detail)
            return OperationResult.failure("Datenbank konnte nicht initialisiert werden.")
        return await self.refresh_history(context)

    # ========================================================================
    # Entries
    # ========================================================================

    async def save_entry(self, context: EditingContext, payload: dict[str, Any]) -> OperationResult:
        """
        Save the form payload as a new entry or as an update of the edited one.

        Returns:
            OperationResult with the saved LogEntry as payload
        """
        is_update = context.is_update
        try:
            entry = build_entry(payload, entry_id=context.entry_id, created_at=context.created_at)
        except ValidationError as e:
            logger.warning("Entry rejected: %s", e)
            return OperationResult.failure("Bitte Datum eintragen, bevor der Eintrag gespeichert wird.")

        try:
            await self.store.save(entry)
        except StorageInitError as e:
            logger.error("Save attempted before store was ready: %s", e)
            return OperationResult.failure("Datenbank nicht bereit.")
        except StorageError as e:
            logger.error("Failed to save entry %s: %s (%s)", entry.id, e, e.detail)
            self._audit("update" if is_update else "create", entry.id, "failure", error=str(e))
            return OperationResult.failure("Eintrag konnte nicht gespeichert werden.")

        self._audit("update" if is_update else "create", entry.id, "success", date=entry.business_date)
        await self.refresh_history(context)
        saved = context.cached(entry.id) or entry
        context.set_target(saved)
        logger.info("%s entry %s", "Updated" if is_update else "Created", saved.id)
        return OperationResult.success("Eintrag aktualisiert." if is_update else "Eintrag gespeichert.", saved)

    async def load_entry(self, context: EditingContext, entry_id: str) -> OperationResult:
        """Load a stored entry for editing; the LogEntry is the result payload."""
        try:
            entry = await self.store.get(entry_id)
        except StorageInitError as e:
            logger.error("Load attempted before store was ready: %s", e)
            return OperationResult.failure("Datenbank nicht bereit.")
        except StorageError as e:
            logger.error("Failed to load entry %s: %s (%s)", entry_id, e, e.detail)
            return OperationResult.failure("Eintrag konnte nicht geladen werden.")

        if entry is None:
            return OperationResult.failure("Eintrag nicht gefunden.")

        context.set_target(entry)
        date = entry.meta.date or "Unbekannt"
        return OperationResult.success(f"Eintrag vom {date} zur Bearbeitung geladen.", entry)

    async def delete_entry(self, context: EditingContext, entry_id: str) -> OperationResult:
        entry = context.cached(entry_id)
        if entry is None:
            try:
                entry = await self.store.get(entry_id)
            except StorageError as e:
                logger.warning("Could not look up entry %s before delete: %s", entry_id, e)

        formatted_date = format_display_date(entry.meta.date) if entry is not None else ""

        try:
            await self.store.delete(entry_id)
        except StorageInitError as e:
            logger.error("Delete attempted before store was ready: %s", e)
            return OperationResult.failure("Datenbank nicht bereit.")
        except StorageError as e:
            logger.error("Failed to delete entry %s: %s (%s)", entry_id, e, e.detail)
            self._audit("delete", entry_id, "failure", error=str(e))
            return OperationResult.failure("Eintrag konnte nicht geloescht werden.")

        self._audit("delete", entry_id, "success")
        if context.entry_id == entry_id:
            context.clear_target()
        await self.refresh_history(context)

        label = f"Eintrag vom {formatted_date}" if formatted_date else "Eintrag"
        return OperationResult.success(f"{label} geloescht.", entry_id)

    async def refresh_history(self, context: EditingContext) -> OperationResult:
        """
        Reload all entries and recompute statistics and trends.

        On a read failure the cached entries are kept and the returned
        snapshot is marked unavailable.
        """
        try:
            entries = await self.store.get_all()
        except StorageError as e:
            logger.error("History could not be loaded: %s (%s)", e, e.detail)
            snapshot = HistorySnapshot(entries=list(context.entries), history_available=False)
            context.snapshot = snapshot
            return OperationResult.failure("Historie konnte nicht geladen werden.", snapshot)

        context.entries = sort_history(entries)
        snapshot = self.build_snapshot(context.entries)
        context.snapshot = snapshot
        return OperationResult.success(payload=snapshot)

    def build_snapshot(self, entries: list[LogEntry]) -> HistorySnapshot:
        chronological = sort_chronologically(entries)
        return HistorySnapshot(
            entries=list(entries),
            statistics=self.statistics.aggregate(chronological),
            trends=self.trends.analyze(chronological),
        )

    # ========================================================================
    # Drafts, samples & export
    # ========================================================================

    def save_draft(self, payload: dict[str, Any]) -> OperationResult:
        try:
            self.drafts.save(normalize_payload(payload))
        except StorageError as e:
            logger.error("Failed to save draft: %s (%s)", e, e.detail)
            return OperationResult.failure("Speichern fehlgeschlagen. Bitte Datenverzeichnis pruefen.")
        return OperationResult.success("Entwurf lokal gespeichert.")

    def load_draft(self, context: EditingContext) -> OperationResult:
        """Load the draft snapshot; the record is the result payload."""
        try:
            payload = self.drafts.load()
        except (MalformedDraftError, StorageReadError) as e:
            logger.error("Failed to load draft: %s (%s)", e, e.detail)
            return OperationResult.failure("Daten konnten nicht geladen werden.")

        if not payload:
            return OperationResult.failure("Keine gespeicherten Daten gefunden.")

        context.clear_target()
        return OperationResult.success("Gespeicherte Daten geladen.", normalize_payload(payload))

    def restore_draft(self, context: EditingContext) -> OperationResult:
        """Silent start-up restore of the draft snapshot."""
        try:
            payload = self.drafts.load()
        except (MalformedDraftError, StorageReadError) as e:
            logger.warning("Automatic draft restore not possible: %s", e)
            return OperationResult.failure()

        if not payload:
            return OperationResult.success()

        context.clear_target()
        return OperationResult.success("Automatisch wiederhergestellt (lokaler Speicher).", normalize_payload(payload))

    def load_sample(self, context: EditingContext, raw_json: str | None) -> OperationResult:
        """Parse bundled sample data; malformed JSON leaves the context unchanged."""
        if not raw_json:
            return OperationResult.failure("Keine Musterdaten gefunden.")

        try:
            payload = parse_json_object(raw_json)
        except ValueError as e:
            error = MalformedDraftError("Sample data is not a JSON object", detail={"error": str(e)})
            logger.error("Failed to load sample data: %s (%s)", error, error.detail)
            return OperationResult.failure("Musterdaten konnten nicht geladen werden.")

        context.clear_target()
        return OperationResult.success("Musterdaten geladen.", normalize_payload(payload))

    def export(self, payload: dict[str, Any], today: str | None = None) -> OperationResult:
        data = normalize_payload(payload)
        file_name = build_export_file_name(data.get("meta_date") or None, today=today)
        try:
            content = export_payload(data)
        except (TypeError, ValueError) as e:
            logger.error("Export of %s failed: %s", file_name, e)
            return OperationResult.failure("Export fehlgeschlagen.")
        return OperationResult.success(f"Export als {file_name}.", ExportArtifact(file_name=file_name, content=content))

    def reset(self, context: EditingContext) -> OperationResult:
        context.clear_target()
        return OperationResult.success("Formular zurueckgesetzt.")


__all__ = [
    "EditingContext",
    "ExportArtifact",
    "HistorySnapshot",
    "LogBookService",
    "Notification",
    "OperationResult",
]
