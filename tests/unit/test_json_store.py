"""Unit tests for the JSON document store and the load/save cycle"""

import json
from datetime import datetime
from unittest.mock import patch

import pytest
from loandash.domain.exceptions import StorageError
from loandash.domain.models import AppDocument, Debt
from loandash.infrastructure.storage.json_store import JsonDocumentStore
from loandash.infrastructure.storage.sync import load_document, save_document


def test_missing_file_is_initialized(store: JsonDocumentStore):
    document = store.load()

    assert store.path.exists()
    assert document.debts == []
    assert document.auto_archive == "never"
    on_disk = json.loads(store.path.read_text())
    assert on_disk["loandash-dark-mode"] is True
    assert on_disk["loandash-default-currency"] == "MAD"
    assert on_disk["loandash-notification-settings"]["defaultReminderDays"] == 3


def test_empty_file_is_reinitialized(store: JsonDocumentStore):
    store.path.parent.mkdir(parents=True)
    store.path.write_text("   ")

    document = store.load()

    assert document.loans == []
    assert json.loads(store.path.read_text())["loandash-loans"] == []


def test_corrupt_file_is_quarantined(store: JsonDocumentStore):
    store.path.parent.mkdir(parents=True)
    store.path.write_text("{not json")

    document = store.load()

    assert document.debts == []
    backup = store.path.with_name("db.json.corrupt")
    assert backup.read_text() == "{not json"


def test_save_then_load_preserves_document(store: JsonDocumentStore, bank_loan: Debt):
    store.save(AppDocument(debts=[bank_loan], auto_archive="7days"))

    loaded = store.load()

    assert loaded.auto_archive == "7days"
    assert loaded.debts[0].payment_automation == "Auto"
    assert "totalAmount" in json.loads(store.path.read_text())["loandash-debts"][0]


def test_save_failure_raises_storage_error(store: JsonDocumentStore):
    with patch("loandash.infrastructure.storage.json_store.tempfile.mkstemp", side_effect=PermissionError("denied")):
        with pytest.raises(StorageError):
            store.save(AppDocument())


def test_load_document_persists_only_on_change(store: JsonDocumentStore, bank_loan: Debt, id_factory):
    store.save(AppDocument(debts=[bank_loan]))

    before_due = datetime(2023, 12, 31, 23, 0)

    first = load_document(store, before_due, id_factory)
    with patch.object(store, "save", wraps=store.save) as spy:
        repeat = load_document(store, before_due, id_factory)
        due = load_document(store, datetime(2024, 1, 1, 0, 5), id_factory)

    # First pass only fills in nextPaymentDate
    assert first.persisted is True
    assert repeat.report.changed is False
    assert repeat.persisted is False
    assert due.persisted is True
    assert spy.call_count == 1
    assert len(store.load().debts[0].payments) == 1


def test_load_document_survives_write_failure(store: JsonDocumentStore, bank_loan: Debt, id_factory):
    store.save(AppDocument(debts=[bank_loan]))

    with patch.object(store, "save", side_effect=StorageError("disk full")):
        result = load_document(store, datetime(2024, 1, 1, 0, 5), id_factory)

    assert result.persisted is False
    assert isinstance(result.error, StorageError)
    assert len(result.document.debts[0].payments) == 1


def test_save_document_raises_on_write_failure(store: JsonDocumentStore, id_factory):
    with patch.object(store, "save", side_effect=StorageError("disk full")):
        with pytest.raises(StorageError):
            save_document(store, AppDocument(), datetime(2024, 1, 1), id_factory)
