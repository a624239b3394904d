"""Pytest fixtures for testing"""

import itertools
from datetime import datetime
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from loandash.api.dependencies import get_document_store, get_id_factory, get_now
from loandash.api.main import create_app
from loandash.domain.models import Debt, Loan, RecurrenceSettings
from loandash.infrastructure.storage.json_store import JsonDocumentStore

FIXED_NOW = datetime(2024, 3, 15, 12, 0)


@pytest.fixture
def now() -> datetime:
    """Fixed clock reading shared by the API overrides"""
    return FIXED_NOW


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Deterministic payment ids: pay-1, pay-2, ..."""
    counter = itertools.count(1)
    return lambda: f"pay-{next(counter)}"


@pytest.fixture
def store(tmp_path) -> JsonDocumentStore:
    """Document store backed by a temporary file"""
    return JsonDocumentStore(tmp_path / "data" / "db.json")


@pytest.fixture
def client(store: JsonDocumentStore, now: datetime, id_factory) -> TestClient:
    """Create FastAPI test client with a temporary store and fixed clock"""
    app = create_app()
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_now] = lambda: now
    app.dependency_overrides[get_id_factory] = lambda: id_factory
    return TestClient(app)


@pytest.fixture
def bank_loan() -> Debt:
    """Auto-paid bank loan: 1200 over 2024, no fixed amount"""
    return Debt(
        id="bank-1",
        type="Bank Loan",
        name="Car loan",
        total_amount=1200,
        start_date="2024-01-01",
        due_date="2024-12-31",
        payment_automation="Auto",
        recurrence_settings=RecurrenceSettings(first_payment_date="2024-01-01"),
    )


@pytest.fixture
def recurring_debt() -> Debt:
    """Friend/Family debt repaid 100 per week from 2024-03-01"""
    return Debt(
        id="friend-1",
        type="Friend/Family Credit",
        name="Borrowed from Sam",
        total_amount=300,
        start_date="2024-03-01",
        due_date="2024-12-31",
        is_recurring=True,
        recurrence_settings=RecurrenceSettings(type="weekly", payment_amount=100, first_payment_date="2024-03-01"),
    )


@pytest.fixture
def recurring_loan() -> Loan:
    """Loan repaid monthly in four derived installments"""
    return Loan(
        id="loan-1",
        name="Lent to Alex",
        total_amount=400,
        start_date="2024-01-01",
        due_date="2024-04-30",
        is_recurring=True,
        recurrence_settings=RecurrenceSettings(type="monthly"),
    )
