"""Integration tests for API endpoints"""

from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient
from loandash.api.dependencies import get_release_client
from loandash.domain.exceptions import StorageError
from loandash.domain.models import AppDocument, Loan
from loandash.infrastructure.clients.releases import ReleaseClient
from loandash.infrastructure.storage.json_store import JsonDocumentStore

pytestmark = pytest.mark.integration


@pytest.fixture
def plain_loan() -> Loan:
    """Non-recurring loan of 100 owed to the user"""
    return Loan(id="loan-2", name="Concert tickets", total_amount=100, start_date="2024-03-01", due_date="2024-04-01")


@pytest.fixture
def recurring_payload() -> dict:
    """Client document with one monthly loan starting today (2024-03-15)"""
    return {
        "loandash-loans": [
            {
                "id": "loan-1",
                "name": "Alex",
                "totalAmount": 400,
                "startDate": "2024-03-15",
                "dueDate": "2024-07-13",
                "status": "active",
                "isRecurring": True,
                "recurrenceSettings": {"type": "monthly"},
                "repayments": [],
            }
        ],
        "loandash-auto-archive": "never",
    }


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "loandash"}


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    client.get("/api/data")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "loandash_document_pass_seconds" in response.text
    assert "http_request_duration_seconds" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert client.get("/health").headers["X-Request-ID"]


def test_get_data_initializes_store(client: TestClient, store: JsonDocumentStore):
    """Test first read creates the default document"""
    response = client.get("/api/data")

    assert response.status_code == 200
    body = response.json()
    assert body["loandash-debts"] == []
    assert body["loandash-auto-archive"] == "never"
    assert body["loandash-default-currency"] == "MAD"
    assert store.path.exists()


def test_get_data_read_failure(client: TestClient, store: JsonDocumentStore):
    with patch.object(store, "load", side_effect=StorageError("unreadable")):
        response = client.get("/api/data")

    assert response.status_code == 500
    assert response.json()["detail"] == "Could not read data file."


def test_post_data_runs_scheduler(client: TestClient, recurring_payload: dict):
    """Test saving a document records the payment due today"""
    response = client.post("/api/data", json=recurring_payload)
    assert response.status_code == 200
    assert response.json() == {"message": "Data saved successfully."}

    loan = client.get("/api/data").json()["loandash-loans"][0]
    assert len(loan["repayments"]) == 1
    repayment = loan["repayments"][0]
    assert repayment["id"] == "pay-1"
    assert repayment["amount"] == 100
    assert repayment["date"] == "2024-03-15T00:00:00.000Z"
    assert repayment["autoPaymentSequenceNumber"] == 1
    assert loan["nextPaymentDate"] == "2024-04-14T00:00:00.000Z"
    assert loan["suggestedPaymentAmount"] == 100


def test_post_data_rejects_invalid_document(client: TestClient):
    response = client.post("/api/data", json={"loandash-debts": [{"id": "d1"}]})
    assert response.status_code == 422


def test_post_data_write_failure(client: TestClient, store: JsonDocumentStore, recurring_payload: dict):
    with patch.object(store, "save", side_effect=StorageError("disk full")):
        response = client.post("/api/data", json=recurring_payload)

    assert response.status_code == 500
    assert response.json()["detail"] == "Could not save data."


def test_add_payment_until_completed(client: TestClient, store: JsonDocumentStore, plain_loan: Loan):
    store.save(AppDocument(loans=[plain_loan]))

    response = client.post("/api/loans/loan-2/payments", json={"amount": 60, "date": "2024-03-10", "method": "Cash"})
    assert response.status_code == 201
    loan = response.json()["loandash-loans"][0]
    assert loan["status"] == "active"
    assert loan["repayments"][0]["isPartial"] is True

    response = client.post("/api/loans/loan-2/payments", json={"amount": 40, "date": "2024-03-12"})
    loan = response.json()["loandash-loans"][0]
    assert loan["status"] == "completed"
    assert [r["id"] for r in loan["repayments"]] == ["pay-1", "pay-2"]


def test_edit_payment(client: TestClient, store: JsonDocumentStore, plain_loan: Loan):
    store.save(AppDocument(loans=[plain_loan]))
    client.post("/api/loans/loan-2/payments", json={"amount": 100, "date": "2024-03-10"})

    response = client.put("/api/loans/loan-2/payments/pay-1", json={"amount": 30, "date": "2024-03-11"})

    assert response.status_code == 200
    loan = response.json()["loandash-loans"][0]
    assert loan["repayments"][0]["amount"] == 30
    assert loan["status"] == "active"


def test_payment_not_found(client: TestClient, store: JsonDocumentStore, plain_loan: Loan):
    store.save(AppDocument(loans=[plain_loan]))

    assert client.post("/api/debts/nope/payments", json={"amount": 5, "date": "2024-03-10"}).status_code == 404
    assert client.put("/api/loans/loan-2/payments/nope", json={"amount": 5, "date": "2024-03-10"}).status_code == 404


@pytest.mark.parametrize(
    "body",
    [
        {"amount": 0, "date": "2024-03-10"},
        {"amount": 10, "date": "10/03/2024"},
        {"date": "2024-03-10"},
    ],
)
def test_payment_validation(client: TestClient, store: JsonDocumentStore, plain_loan: Loan, body: dict):
    store.save(AppDocument(loans=[plain_loan]))
    assert client.post("/api/loans/loan-2/payments", json=body).status_code == 422


def test_unknown_kind_is_rejected(client: TestClient):
    assert client.post("/api/savings/x/payments", json={"amount": 5, "date": "2024-03-10"}).status_code == 422


def test_archive_and_delete(client: TestClient, store: JsonDocumentStore, plain_loan: Loan):
    store.save(AppDocument(loans=[plain_loan]))

    response = client.post("/api/loans/loan-2/archive", json={"status": "defaulted"})
    assert response.status_code == 200
    body = response.json()
    assert body["loandash-loans"] == []
    archived = body["loandash-archived-loans"][0]
    assert archived["status"] == "defaulted"
    assert archived["archivedDate"] == "2024-03-15T12:00:00.000Z"
    assert archived["autoArchived"] is False

    response = client.delete("/api/archive/loans/loan-2")
    assert response.status_code == 200
    assert response.json()["loandash-archived-loans"] == []

    assert client.delete("/api/archive/loans/loan-2").status_code == 404


def test_archive_rejects_unknown_status(client: TestClient, store: JsonDocumentStore, plain_loan: Loan):
    store.save(AppDocument(loans=[plain_loan]))
    assert client.post("/api/loans/loan-2/archive", json={"status": "forgotten"}).status_code == 422


def test_summary_endpoint(client: TestClient, store: JsonDocumentStore, plain_loan: Loan):
    plain_loan.due_date = "2024-03-01"
    store.save(AppDocument(loans=[plain_loan]))

    response = client.get("/api/summary")

    assert response.status_code == 200
    body = response.json()
    assert body["total_owed_to_me"] == 100
    assert body["active_loans"] == 1
    assert body["overdue_count"] == 1
    assert body["has_overdue_loans"] is True


def test_version_endpoint(client: TestClient):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"tag_name": "v2.0.0"}))
    client.app.dependency_overrides[get_release_client] = lambda: ReleaseClient(
        api_url="https://releases.test/latest", current_version="1.2.0", transport=transport
    )

    response = client.get("/api/version")

    assert response.status_code == 200
    body = response.json()
    assert body["current"] == "1.2.0"
    assert body["latest"] == "2.0.0"
    assert body["has_update"] is True


def test_summary_tolerates_malformed_dates(client: TestClient, store: JsonDocumentStore, plain_loan: Loan):
    """Test a record the pass skips does not break the dashboard"""
    plain_loan.due_date = "31/12/2024"
    store.save(AppDocument(loans=[plain_loan]))

    assert client.get("/api/data").status_code == 200
    response = client.get("/api/summary")

    assert response.status_code == 200
    body = response.json()
    assert body["total_owed_to_me"] == 100
    assert body["overdue_count"] == 0
