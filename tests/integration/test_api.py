"""Integration tests for API endpoints"""

import pytest
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from discount_gateway.infrastructure.database.models import Invoice


def _import(client: TestClient, content: bytes, user_id: str = "user_1"):
    return client.post(
        "/v1/invoices/import",
        data={"user_id": user_id},
        files={"file": ("invoices.csv", content, "text/csv")},
    )


def _by_number(client: TestClient, user_id: str = "user_1") -> dict:
    response = client.get("/v1/invoices", params={"user_id": user_id})
    assert response.status_code == 200
    return {item["invoice_number"]: item for item in response.json()["items"]}


@pytest.fixture
def imported(client: TestClient, sample_csv: bytes) -> dict:
    response = _import(client, sample_csv)
    assert response.status_code == 200
    return _by_number(client)


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "discount_recommendation" in response.text


def test_unmatched_path_uses_fixed_metric_label(client: TestClient):
    """Unknown paths share one label instead of one series each"""
    assert client.get("/v1/does-not-exist").status_code == 404

    metrics = client.get("/metrics").text
    assert 'endpoint="unmatched"' in metrics
    assert "/v1/does-not-exist" not in metrics


def test_request_id_is_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_import_counts_skipped_rows(client: TestClient, sample_csv: bytes):
    """Malformed terms and invalid rates skip the row, not the batch"""
    response = _import(client, sample_csv)

    assert response.status_code == 200
    assert response.json() == {"imported": 4, "skipped": 3}


def test_import_rejects_unreadable_file(client: TestClient):
    response = _import(client, b"vendor,amount\nAcme,100\n")
    assert response.status_code == 400


def test_imported_recommendations(imported: dict):
    """Initial recommendations follow the refresh policy as of today"""
    assert set(imported) == {"INV-1", "INV-2", "INV-3", "INV-4"}

    take = imported["INV-1"]
    assert take["recommendation"] == "TAKE"
    assert "200.00" in take["reason"] and "13.70" in take["reason"]
    assert Decimal(take["discount_savings"]) == Decimal("200.00")
    assert Decimal(take["investment_return"]) == Decimal("13.70")
    assert take["borrowing_cost"] is None
    assert Decimal(take["implied_apr_pct"]).quantize(Decimal("0.01")) == Decimal("37.24")

    borrow = imported["INV-2"]
    assert borrow["recommendation"] == "BORROW"
    assert Decimal(borrow["borrowing_cost"]) == Decimal("109.59")

    assert imported["INV-3"]["recommendation"] == "HOLD"
    assert "deadline passed" in imported["INV-3"]["reason"].lower()

    assert imported["INV-4"]["recommendation"] == "HOLD"
    assert "no rate provided" in imported["INV-4"]["reason"].lower()


def test_invoice_deadlines_and_urgency(imported: dict):
    """Today is pinned to 2025-03-01"""
    assert imported["INV-1"]["discount_deadline"] == "2025-03-06"
    assert imported["INV-1"]["days_until_deadline"] == 5
    assert imported["INV-1"]["urgency"] == "warning"

    assert imported["INV-3"]["days_until_deadline"] == -9
    assert imported["INV-3"]["urgency"] == "expired"

    # No discount: no deadline
    assert imported["INV-4"]["discount_deadline"] is None
    assert imported["INV-4"]["days_until_deadline"] == 0
    assert imported["INV-4"]["currency"] == "USD"


def test_list_invoices_is_scoped_by_user(client: TestClient, imported: dict):
    response = client.get("/v1/invoices", params={"user_id": "someone_else"})
    assert response.status_code == 200
    assert response.json()["items"] == []


def test_list_invoices_pagination(client: TestClient, imported: dict):
    first = client.get("/v1/invoices", params={"user_id": "user_1", "limit": 3}).json()
    second = client.get("/v1/invoices", params={"user_id": "user_1", "limit": 3, "offset": 3}).json()

    assert len(first["items"]) == 3
    assert len(second["items"]) == 1
    numbers = {i["invoice_number"] for i in first["items"] + second["items"]}
    assert numbers == {"INV-1", "INV-2", "INV-3", "INV-4"}


def test_get_invoice(client: TestClient, imported: dict):
    invoice_id = imported["INV-1"]["id"]

    response = client.get(f"/v1/invoices/{invoice_id}", params={"user_id": "user_1"})

    assert response.status_code == 200
    assert response.json()["invoice_number"] == "INV-1"


def test_get_invoice_not_found(client: TestClient):
    fake_uuid = "00000000-0000-0000-0000-000000000000"
    response = client.get(f"/v1/invoices/{fake_uuid}", params={"user_id": "user_1"})
    assert response.status_code == 404


def test_get_invoice_bad_id(client: TestClient):
    response = client.get("/v1/invoices/not-a-uuid", params={"user_id": "user_1"})
    assert response.status_code == 400


def test_update_rate_recomputes_recommendation(client: TestClient, imported: dict):
    """Setting a 60% borrowing rate makes borrowing too expensive"""
    invoice_id = imported["INV-1"]["id"]

    response = client.patch(
        f"/v1/invoices/{invoice_id}/rate",
        json={"user_id": "user_1", "user_rate": 60, "rate_type": "BORROWING"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["recommendation"] == "HOLD"
    assert "328.77" in data["reason"]
    assert data["rate_type"] == "BORROWING"
    assert Decimal(data["user_rate"]) == Decimal(60)
    assert Decimal(data["borrowing_cost"]) == Decimal("328.77")


def test_update_rate_on_expired_discount_still_holds(client: TestClient, imported: dict):
    invoice_id = imported["INV-3"]["id"]

    response = client.patch(
        f"/v1/invoices/{invoice_id}/rate",
        json={"user_id": "user_1", "user_rate": 5, "rate_type": "INVESTMENT"},
    )

    assert response.status_code == 200
    assert response.json()["recommendation"] == "HOLD"
    assert "deadline passed" in response.json()["reason"].lower()


@pytest.mark.parametrize(
    "body",
    [
        {"user_id": "user_1", "user_rate": -1, "rate_type": "INVESTMENT"},
        {"user_id": "user_1", "user_rate": 10000, "rate_type": "INVESTMENT"},
        {"user_id": "user_1", "user_rate": 5, "rate_type": "SAVINGS"},
    ],
)
def test_update_rate_validation(client: TestClient, imported: dict, body: dict):
    invoice_id = imported["INV-1"]["id"]
    response = client.patch(f"/v1/invoices/{invoice_id}/rate", json=body)
    assert response.status_code == 422


def test_refresh_updates_pending_invoices(client: TestClient, db: Session, imported: dict):
    """Refresh re-derives every PENDING recommendation from stored terms"""
    # Simulate a stale recommendation
    invoice = db.query(Invoice).filter(Invoice.invoice_number == "INV-4").one()
    invoice.recommendation = "TAKE"
    invoice.reason = "stale"
    db.commit()

    response = client.post("/v1/invoices/refresh", params={"user_id": "user_1"})

    assert response.status_code == 200
    assert response.json() == {"updated": 4, "skipped": 0}
    refreshed = _by_number(client)
    assert refreshed["INV-4"]["recommendation"] == "HOLD"
    assert "no rate provided" in refreshed["INV-4"]["reason"].lower()


def test_refresh_reproduces_imported_recommendation(client: TestClient):
    """A rate below storage precision must not flip the action on refresh"""
    content = (
        b"vendor,invoice_number,amount,invoice_date,due_date,terms,currency,user_rate,rate_type\n"
        b"Acme,INV-9,36500,2025-02-24,2025-04-10,1/10 net 45,USD,36.49996,INVESTMENT\n"
    )
    assert _import(client, content).json() == {"imported": 1, "skipped": 0}
    before = _by_number(client)["INV-9"]

    # 36.5000% stored: 365.00 earned over 10 days ties the 365.00 discount
    assert Decimal(before["user_rate"]) == Decimal("36.5")
    assert before["recommendation"] == "HOLD"

    response = client.post("/v1/invoices/refresh", params={"user_id": "user_1"})

    assert response.json() == {"updated": 1, "skipped": 0}
    after = _by_number(client)["INV-9"]
    assert after["recommendation"] == before["recommendation"]
    assert after["reason"] == before["reason"]


def test_refresh_skips_unparseable_terms(client: TestClient, db: Session, imported: dict):
    invoice = db.query(Invoice).filter(Invoice.invoice_number == "INV-4").one()
    invoice.terms = "net whenever"
    db.commit()

    response = client.post("/v1/invoices/refresh", params={"user_id": "user_1"})

    assert response.json() == {"updated": 3, "skipped": 1}


def test_decision_take_records_savings(client: TestClient, imported: dict):
    """Approving TAKE locks in the full discount and leaves PENDING"""
    response = client.post(
        "/v1/decisions",
        json={
            "user_id": "user_1",
            "invoice_ids": [imported["INV-1"]["id"]],
            "action": "APPROVE_TAKE",
            "note": "pay this week",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["saved"] == 1
    assert Decimal(data["estimated_savings"]) == Decimal("200.00")

    assert _by_number(client)["INV-1"]["status"] == "APPROVED_TAKE"

    # Decided invoices drop out of the refresh batch
    refresh = client.post("/v1/invoices/refresh", params={"user_id": "user_1"})
    assert refresh.json()["updated"] == 3


def test_decision_borrow_nets_borrowing_cost(client: TestClient, imported: dict):
    response = client.post(
        "/v1/decisions",
        json={"user_id": "user_1", "invoice_ids": [imported["INV-2"]["id"]], "action": "APPROVE_BORROW"},
    )

    assert response.status_code == 200
    assert Decimal(response.json()["estimated_savings"]) == Decimal("90.41")


def test_decision_borrow_requires_borrowing_rate(client: TestClient, imported: dict):
    """INV-1 carries an investment rate, so there is no borrowing cost to net"""
    response = client.post(
        "/v1/decisions",
        json={"user_id": "user_1", "invoice_ids": [imported["INV-1"]["id"]], "action": "APPROVE_BORROW"},
    )

    assert response.status_code == 422
    assert _by_number(client)["INV-1"]["status"] == "PENDING"
    audit = client.get("/v1/decisions/audit", params={"user_id": "user_1"}).json()
    assert audit["items"] == []


def test_decision_dismiss_saves_nothing(client: TestClient, imported: dict):
    response = client.post(
        "/v1/decisions",
        json={
            "user_id": "user_1",
            "invoice_ids": [imported["INV-3"]["id"], imported["INV-4"]["id"]],
            "action": "DISMISS",
        },
    )

    assert response.status_code == 200
    assert response.json()["saved"] == 2
    assert Decimal(response.json()["estimated_savings"]) == 0
    dismissed = client.get("/v1/invoices", params={"user_id": "user_1", "status": "DISMISSED"}).json()
    assert len(dismissed["items"]) == 2


def test_decision_unknown_invoice(client: TestClient, imported: dict):
    response = client.post(
        "/v1/decisions",
        json={
            "user_id": "someone_else",
            "invoice_ids": [imported["INV-1"]["id"]],
            "action": "APPROVE_TAKE",
        },
    )
    assert response.status_code == 404


def test_decision_audit(client: TestClient, imported: dict):
    client.post(
        "/v1/decisions",
        json={"user_id": "user_1", "invoice_ids": [imported["INV-1"]["id"]], "action": "APPROVE_TAKE"},
    )
    client.post(
        "/v1/decisions",
        json={"user_id": "user_1", "invoice_ids": [imported["INV-4"]["id"]], "action": "APPROVE_HOLD"},
    )

    response = client.get("/v1/decisions/audit", params={"user_id": "user_1"})

    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == "user_1"
    assert {item["action"] for item in data["items"]} == {"APPROVE_TAKE", "APPROVE_HOLD"}
    take = next(item for item in data["items"] if item["action"] == "APPROVE_TAKE")
    assert take["invoice_ids"] == [imported["INV-1"]["id"]]

    # Window that ends before any decision was made
    empty = client.get(
        "/v1/decisions/audit",
        params={"user_id": "user_1", "date_to": date(2000, 1, 1).isoformat()},
    )
    assert empty.json()["items"] == []
