"""
Tests for LogBookService, the application call boundary.

Every operation returns an OperationResult; storage and parsing failures
become error notifications and leave the editing context consistent.
"""

from __future__ import annotations

import json

import pytest

from app.domain.exceptions import StorageReadError, StorageWriteError
from app.enums.common import NotificationLevel
from app.services.application.log_book_service import EditingContext, ExportArtifact, LogBookService


class _BrokenStore:
    """Entry store whose writes or reads fail on demand."""

    backend_name = "broken"

    def __init__(self, *, fail_writes=False, fail_reads=False):
        self.fail_writes = fail_writes
        self.fail_reads = fail_reads
        self.saved = []

    async def ready(self):
        return None

    async def save(self, entry):
        if self.fail_writes:
            raise StorageWriteError("disk full")
        self.saved.append(entry)
        return entry

    async def get_all(self):
        if self.fail_reads:
            raise StorageReadError("unreadable")
        return list(self.saved)

    async def get(self, entry_id):
        return next((e for e in self.saved if e.id == entry_id), None)

    async def delete(self, entry_id):
        if self.fail_writes:
            raise StorageWriteError("disk full")
        return True


def _message(result):
    return result.notification.message if result.notification else None


# ========================== Entries ========================================


@pytest.mark.asyncio
async def test_save_without_date_is_rejected_before_storage(draft_repo, context):
    store = _BrokenStore()
    service = LogBookService(store=store, drafts=draft_repo)
    result = await service.save_entry(context, {"meta_zone": "Haus 1"})
    assert not result.ok
    assert result.notification.level is NotificationLevel.ERROR
    assert _message(result) == "Bitte Datum eintragen, bevor der Eintrag gespeichert wird."
    assert store.saved == []


@pytest.mark.asyncio
async def test_save_creates_then_updates(log_book, context):
    await log_book.initialize(context)

    created = await log_book.save_entry(context, {"meta_date": "2024-03-01", "pest_traps_count": "3"})
    assert created.ok
    assert _message(created) == "Eintrag gespeichert."
    entry = created.payload
    assert context.entry_id == entry.id
    assert context.created_at == entry.created_at
    assert [e.id for e in context.entries] == [entry.id]

    updated = await log_book.save_entry(context, {"meta_date": "2024-03-01", "pest_traps_count": "5"})
    assert _message(updated) == "Eintrag aktualisiert."
    assert updated.payload.id == entry.id
    assert updated.payload.created_at == entry.created_at
    assert updated.payload.data["pest_traps_count"] == "5"
    assert len(context.entries) == 1


@pytest.mark.asyncio
async def test_write_failure_keeps_context(draft_repo):
    service = LogBookService(store=_BrokenStore(fail_writes=True), drafts=draft_repo)
    context = EditingContext(entry_id="old", created_at="2024-03-01T08:00:00.000Z")
    result = await service.save_entry(context, {"meta_date": "2024-03-02"})
    assert not result.ok
    assert _message(result) == "Eintrag konnte nicht gespeichert werden."
    assert context.entry_id == "old"
    assert context.created_at == "2024-03-01T08:00:00.000Z"


@pytest.mark.asyncio
async def test_store_used_before_ready(log_book, context):
    result = await log_book.save_entry(context, {"meta_date": "2024-03-01"})
    assert not result.ok
    assert _message(result) == "Datenbank nicht bereit."


@pytest.mark.asyncio
async def test_load_entry(log_book, context):
    await log_book.initialize(context)
    saved = (await log_book.save_entry(context, {"meta_date": "2024-03-01"})).payload
    log_book.reset(context)

    result = await log_book.load_entry(context, saved.id)
    assert result.ok
    assert _message(result) == "Eintrag vom 2024-03-01 zur Bearbeitung geladen."
    assert result.payload == saved
    assert context.entry_id == saved.id

    missing = await log_book.load_entry(context, "nope")
    assert not missing.ok
    assert _message(missing) == "Eintrag nicht gefunden."


@pytest.mark.asyncio
async def test_delete_clears_editing_target(log_book, context):
    await log_book.initialize(context)
    saved = (await log_book.save_entry(context, {"meta_date": "2024-03-05"})).payload

    result = await log_book.delete_entry(context, saved.id)
    assert result.ok
    assert _message(result) == "Eintrag vom 05.03.2024 geloescht."
    assert context.entry_id is None
    assert context.entries == []

    again = await log_book.delete_entry(context, saved.id)
    assert again.ok
    assert _message(again) == "Eintrag geloescht."


# ========================== History ========================================


@pytest.mark.asyncio
async def test_history_snapshot_with_analytics(log_book, context):
    await log_book.initialize(context)
    for date, temp in [("2024-03-01", "20.0"), ("2024-03-02", "20.5"), ("2024-03-03", "19.0")]:
        log_book.reset(context)
        await log_book.save_entry(context, {"meta_date": date, "climate_inside_temp_avg": temp})

    result = await log_book.refresh_history(context)
    snapshot = result.payload
    assert result.ok
    assert snapshot.history_available
    assert [e.business_date for e in snapshot.entries] == ["2024-03-03", "2024-03-02", "2024-03-01"]
    assert snapshot.statistics.compared_pairs == 2
    trend = next(t for t in snapshot.trends if t.key == "climate_inside_temp_avg")
    assert trend.delta == pytest.approx(-1.0)
    assert trend.step_delta == pytest.approx(-1.5)


@pytest.mark.asyncio
async def test_empty_history_is_available(log_book, context):
    result = await log_book.initialize(context)
    assert result.ok
    assert result.payload.is_empty
    assert result.payload.statistics is None
    assert result.payload.trends == []


@pytest.mark.asyncio
async def test_read_failure_is_not_an_empty_history(draft_repo, context):
    service = LogBookService(store=_BrokenStore(fail_reads=True), drafts=draft_repo)
    result = await service.refresh_history(context)
    assert not result.ok
    assert _message(result) == "Historie konnte nicht geladen werden."
    assert result.payload.history_available is False
    assert not result.payload.is_empty


# ========================== Drafts, samples & export =======================


def test_draft_round_trip(log_book, context):
    payload = {"meta_date": "2024-03-01", "irrigation": [{"time": ""}, {"time": "06:00"}]}
    assert log_book.save_draft(payload).ok

    context.entry_id = "editing"
    result = log_book.load_draft(context)
    assert result.ok
    assert _message(result) == "Gespeicherte Daten geladen."
    assert result.payload == {"meta_date": "2024-03-01", "irrigation": [{"time": "06:00"}]}
    assert context.entry_id is None


def test_missing_draft(log_book, context):
    result = log_book.load_draft(context)
    assert not result.ok
    assert _message(result) == "Keine gespeicherten Daten gefunden."


def test_malformed_draft(log_book, kv_store):
    kv_store.set_item("greenhouse-log", "{not json")
    context = EditingContext(entry_id="editing")
    result = log_book.load_draft(context)
    assert not result.ok
    assert _message(result) == "Daten konnten nicht geladen werden."
    assert context.entry_id == "editing"
    assert not log_book.restore_draft(context).ok


def test_restore_draft_is_silent_without_draft(log_book, context):
    result = log_book.restore_draft(context)
    assert result.ok
    assert result.notification is None


def test_load_sample(log_book):
    context = EditingContext(entry_id="editing")
    bad = log_book.load_sample(context, "[1, 2")
    assert not bad.ok
    assert _message(bad) == "Musterdaten konnten nicht geladen werden."
    assert context.entry_id == "editing"

    good = log_book.load_sample(context, json.dumps({"meta_date": "2024-03-01"}))
    assert good.ok
    assert good.payload == {"meta_date": "2024-03-01"}
    assert context.entry_id is None

    assert _message(log_book.load_sample(context, "")) == "Keine Musterdaten gefunden."


def test_export(log_book):
    result = log_book.export({"meta_date": "2024-03-01", "meta_zone": "Gewächshaus 2"})
    artifact = result.payload
    assert isinstance(artifact, ExportArtifact)
    assert artifact.file_name == "tagesprotokoll-2024-03-01.json"
    assert json.loads(artifact.content)["meta_zone"] == "Gewächshaus 2"
    assert _message(result) == "Export als tagesprotokoll-2024-03-01.json."

    undated = log_book.export({}, today="2024-04-02")
    assert undated.payload.file_name == "tagesprotokoll-2024-04-02.json"


def test_reset(log_book):
    context = EditingContext(entry_id="x", created_at="2024-03-01T00:00:00Z")
    result = log_book.reset(context)
    assert _message(result) == "Formular zurueckgesetzt."
    assert context.entry_id is None and context.created_at is None
