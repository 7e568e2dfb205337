from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from app.config import AppConfig
from app.services.application.change_statistics_service import ChangeStatisticsService
from app.services.application.log_book_service import EditingContext, LogBookService, OperationResult
from app.services.application.trend_analytics_service import TrendAnalyticsService
from app.utils.persistent_store import LocalKeyValueStore
from infrastructure.database.repositories.base import EntryStore
from infrastructure.database.repositories.drafts import DraftRepository
from infrastructure.database.repositories.log_entries import SQLiteEntryStore
from infrastructure.database.store_factory import create_entry_store
from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate and manage the log book's stores and services."""

    config: AppConfig
    kv_store: LocalKeyValueStore
    entry_store: EntryStore
    draft_repo: DraftRepository
    audit_logger: Optional[AuditLogger]
    statistics_service: ChangeStatisticsService
    trend_service: TrendAnalyticsService
    log_book_service: LogBookService

    @classmethod
    def build(cls, config: AppConfig) -> "ServiceContainer":
        """Construct the service container with all dependencies.

        The entry store backend is chosen here, once; ``start()`` must be
        awaited before the store is used.
        """
        logger.info("Building ServiceContainer (backend=%s)", config.store_backend.value)
        kv_store = LocalKeyValueStore(config.data_dir)
        entry_store = create_entry_store(config, kv_store=kv_store)
        draft_repo = DraftRepository(kv_store)
        audit_logger = AuditLogger(config.audit_log_path) if config.audit_log_path else None
        statistics_service = ChangeStatisticsService()
        trend_service = TrendAnalyticsService()
        log_book_service = LogBookService(
            store=entry_store,
            drafts=draft_repo,
            statistics=statistics_service,
            trends=trend_service,
            audit_logger=audit_logger,
        )
        container = cls(
            config=config,
            kv_store=kv_store,
            entry_store=entry_store,
            draft_repo=draft_repo,
            audit_logger=audit_logger,
            statistics_service=statistics_service,
            trend_service=trend_service,
            log_book_service=log_book_service,
        )
        logger.info("ServiceContainer built successfully.")
        return container

    async def start(self, context: EditingContext) -> OperationResult:
        """Initialize the entry store and load the first history snapshot."""
        result = await self.log_book_service.initialize(context)
        if result.ok:
            logger.info("Entry store ready (%s)", self.entry_store.backend_name)
        return result

    def shutdown(self) -> None:
        """Release external resources before process exit."""
        if isinstance(self.entry_store, SQLiteEntryStore):
            self.entry_store.db.close_db()
        if self.audit_logger is not None:
            self.audit_logger.close()
        logger.info("ServiceContainer shutdown complete.")
