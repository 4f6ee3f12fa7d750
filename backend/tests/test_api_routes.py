# backend/tests/test_api_routes.py
from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from tenancy.clients.cloudinary import StoredObject
from tenancy.main import create_app
from tenancy.routers.deposits import get_deposit_service
from tenancy.services.deposit_service import DepositService


class FakeStore:
    def upload(self, data, *, file_name, mime_type, resource_type, folder, public_id):
        return StoredObject(url=f"https://cdn.test/{public_id}", public_id=f"{folder}/{public_id}", raw={})


def _headers(org_slug: str = "acme", role: str = "owner") -> dict[str, str]:
    return {
        "X-Org-Slug": org_slug,
        "X-User-Email": f"landlord@{org_slug}.local",
        "X-User-Role": role,
    }


@pytest.fixture
def client():
    app = create_app()
    app.dependency_overrides[get_deposit_service] = lambda: DepositService(store=FakeStore())
    with TestClient(app) as c:
        yield c


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert r.headers.get("X-Request-ID")


def test_request_id_echoed_when_well_formed(client):
    r = client.get("/api/health", headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"

    r = client.get("/api/health", headers={"X-Request-ID": "bad id\twith spaces"})
    assert r.headers["X-Request-ID"] != "bad id\twith spaces"


def test_missing_org_header_is_401(client):
    r = client.get("/api/leases/1")
    assert r.status_code == 401


def test_analyst_cannot_write(client, make_tenancy):
    t = make_tenancy()
    r = client.post(
        "/api/departures",
        json={"lease_id": t.lease_id, "departure_type": "voluntary", "departure_date": "2024-06-30"},
        headers={"X-Org-Slug": "acme", "X-User-Email": "viewer@acme.local", "X-User-Role": "analyst"},
    )
    assert r.status_code == 403


def test_disposition_roundtrip(client, make_tenancy):
    t = make_tenancy()
    r = client.post(
        "/api/deposits/dispositions",
        json={
            "lease_id": t.lease_id,
            "original_amount": "1000.00",
            "deductions": [{"category": "cleaning", "amount": "125.00", "description": "oven"}],
            "refund_method": "check",
        },
        headers=_headers(),
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert Decimal(body["refund_amount"]) == Decimal("875.00")
    assert len(body["deductions"]) == 1

    r = client.get(f"/api/deposits/dispositions/{body['id']}", headers=_headers())
    assert r.status_code == 200
    r = client.get(f"/api/deposits/leases/{t.lease_id}/dispositions", headers=_headers())
    assert [d["id"] for d in r.json()] == [body["id"]]


def test_exceeding_deposit_is_400(client, make_tenancy):
    t = make_tenancy()
    r = client.post(
        "/api/deposits/dispositions",
        json={
            "lease_id": t.lease_id,
            "original_amount": "100",
            "deductions": [{"category": "damages", "amount": "101", "description": "door"}],
        },
        headers=_headers(),
    )
    assert r.status_code == 400
    assert r.json()["error"] == "EXCEEDS_DEPOSIT"


def test_unknown_disposition_is_404(client, make_tenancy):
    make_tenancy()
    r = client.get("/api/deposits/dispositions/999", headers=_headers())
    assert r.status_code == 404
    assert r.json()["error"] == "NOT_FOUND"


def test_refund_status_backwards_is_409(client, make_tenancy):
    t = make_tenancy()
    d = client.post(
        "/api/deposits/dispositions",
        json={"lease_id": t.lease_id, "original_amount": "500"},
        headers=_headers(),
    ).json()

    r = client.post(f"/api/deposits/dispositions/{d['id']}/process-refund", headers=_headers())
    assert r.status_code == 200
    assert r.json()["refund_status"] == "completed"

    r = client.patch(
        f"/api/deposits/dispositions/{d['id']}/refund-status", json={"status": "pending"}, headers=_headers()
    )
    assert r.status_code == 409
    assert r.json()["error"] == "INVALID_TRANSITION"


def test_evidence_upload(client, make_tenancy):
    make_tenancy()
    r = client.post(
        "/api/deposits/evidence",
        files={"file": ("stain.jpg", b"\xff\xd8\xff", "image/jpeg")},
        headers=_headers(),
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["resource_type"] == "image"
    assert body["public_id"].startswith("deposit-evidence/evidence_")
    assert body["file_name"] == "stain.jpg"


def test_refund_after_balance(client):
    r = client.post(
        "/api/deposits/refund-after-balance",
        json={"original_deposit": 1000, "deductions": 200, "outstanding_balance": 500, "apply_to_balance": True},
        headers=_headers(),
    )
    assert r.status_code == 200
    assert Decimal(r.json()["refund_amount"]) == Decimal("300")
    assert Decimal(r.json()["applied_to_balance"]) == Decimal("500")


def test_eviction_notice_flow(client, make_tenancy):
    t = make_tenancy()
    r = client.post(
        "/api/evictions/notices",
        json={"lease_id": t.lease_id, "notice_type": "7-day", "reason": "lease violation", "serve_date": "2024-01-01"},
        headers=_headers(),
    )
    assert r.status_code == 200, r.text
    notice = r.json()
    assert notice["deadline_date"] == "2024-01-08"

    r = client.get(f"/api/evictions/notices/{notice['id']}/transitions", headers=_headers())
    assert r.json()["allowed_next"] == ["cure_period", "cured", "expired"]

    r = client.patch(
        f"/api/evictions/notices/{notice['id']}/status", json={"status": "completed"}, headers=_headers()
    )
    assert r.status_code == 409


def test_availability_conflict_reports_tenant(client, make_tenancy):
    t = make_tenancy()
    r = client.put(f"/api/turnovers/units/{t.unit_id}/availability", json={"is_available": True}, headers=_headers())
    assert r.status_code == 409
    body = r.json()
    assert body["error"] == "TENANT_DETECTED"
    assert body["requires_confirmation"] is True


def test_offboarding_endpoint_reports_partial(client, make_tenancy):
    t = make_tenancy()
    r = client.post(
        "/api/offboarding",
        json={
            "lease_id": t.lease_id,
            "departure_type": "voluntary",
            "departure_date": "2024-09-30",
            "deposit": {
                "original_amount": "100",
                "deductions": [{"category": "damages", "amount": "200", "description": "floor"}],
            },
        },
        headers=_headers(),
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["status"] == "partial"
    assert body["success"] is False
    assert body["lease_terminated"] is True
    assert body["departure_recorded"] is True
    assert body["errors"]

    r = client.get(f"/api/offboarding/leases/{t.lease_id}", headers=_headers())
    assert r.json()["lease_terminated"] is True
    assert r.json()["deposit_disposition_created"] is False

    r = client.get("/api/history/tenants", params={"departure_type": "voluntary"}, headers=_headers())
    assert r.status_code == 200
    assert r.json()["total"] == 1
    assert r.json()["items"][0]["lease_id"] == t.lease_id


def test_terminate_lease_endpoint(client, make_tenancy):
    t = make_tenancy()
    r = client.post(
        f"/api/leases/{t.lease_id}/terminate",
        json={"reason": "mutual_agreement", "termination_date": "2024-10-31"},
        headers=_headers(),
    )
    assert r.status_code == 200
    assert r.json()["status"] == "terminated"

    r = client.post(
        f"/api/leases/{t.lease_id}/terminate",
        json={"reason": "mutual_agreement", "termination_date": "2024-10-31"},
        headers=_headers(),
    )
    assert r.status_code == 409
    assert r.json()["error"] == "LEASE_STATE"


def test_cross_org_lease_is_404(client, make_tenancy):
    a = make_tenancy(org_slug="org-a")
    make_tenancy(org_slug="org-b")
    r = client.get(f"/api/leases/{a.lease_id}", headers=_headers("org-b"))
    assert r.status_code == 404
