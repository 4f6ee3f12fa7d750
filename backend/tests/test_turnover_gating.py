from __future__ import annotations

from datetime import date

import pytest

from tenancy.domain.errors import ChecklistIncompleteError, NotFoundError, TenantStillActiveError, ValidationError
from tenancy.domain.lifecycle import CHECKLIST_ITEMS
from tenancy.services import turnover_service
from tenancy.services.lease_rules import terminate_lease


def _vacate(db, t):
    terminate_lease(db, org_id=t.org_id, lease_id=t.lease_id, reason="lease_end", termination_date=date(2024, 12, 31))


def test_active_lease_blocks_availability(db, make_tenancy):
    t = make_tenancy()
    with pytest.raises(TenantStillActiveError) as ei:
        turnover_service.set_unit_availability(db, org_id=t.org_id, unit_id=t.unit_id, is_available=True)

    body = ei.value.as_dict()
    assert body["requires_confirmation"] is True
    assert body["tenant_detected"]["lease_id"] == t.lease_id
    assert ei.value.http_status == 409


def test_force_overrides_active_lease(db, make_tenancy):
    t = make_tenancy()
    unit = turnover_service.set_unit_availability(
        db, org_id=t.org_id, unit_id=t.unit_id, is_available=True, force=True, available_from=date(2025, 1, 1)
    )
    assert unit.is_available is True
    assert unit.available_from == date(2025, 1, 1)


def test_incomplete_checklist_blocks_availability(db, make_tenancy):
    t = make_tenancy()
    _vacate(db, t)
    cl = turnover_service.create_checklist(db, org_id=t.org_id, unit_id=t.unit_id, lease_id=t.lease_id)
    turnover_service.update_checklist_item(db, org_id=t.org_id, checklist_id=cl.id, item="keys_collected", completed=True)

    with pytest.raises(ChecklistIncompleteError) as ei:
        turnover_service.set_unit_availability(db, org_id=t.org_id, unit_id=t.unit_id, is_available=True)
    assert "keys_collected" not in ei.value.missing
    assert "repairs_completed" in ei.value.missing


def test_complete_checklist_allows_availability(db, make_tenancy):
    t = make_tenancy()
    _vacate(db, t)
    cl = turnover_service.create_checklist(db, org_id=t.org_id, unit_id=t.unit_id, lease_id=t.lease_id)
    for item in CHECKLIST_ITEMS:
        cl = turnover_service.update_checklist_item(db, org_id=t.org_id, checklist_id=cl.id, item=item, completed=True)

    assert cl.completed_at is not None
    assert cl.unit_inspected_at is not None

    unit = turnover_service.set_unit_availability(db, org_id=t.org_id, unit_id=t.unit_id, is_available=True)
    assert unit.is_available is True


def test_vacant_unit_without_checklist_can_be_listed(db, make_tenancy):
    t = make_tenancy()
    _vacate(db, t)
    unit = turnover_service.set_unit_availability(db, org_id=t.org_id, unit_id=t.unit_id, is_available=True)
    assert unit.is_available is True


def test_unchecking_an_item_clears_completion(db, make_tenancy):
    t = make_tenancy()
    cl = turnover_service.create_checklist(db, org_id=t.org_id, unit_id=t.unit_id)
    for item in CHECKLIST_ITEMS:
        cl = turnover_service.update_checklist_item(db, org_id=t.org_id, checklist_id=cl.id, item=item, completed=True)

    cl = turnover_service.update_checklist_item(
        db, org_id=t.org_id, checklist_id=cl.id, item="cleaning_completed", completed=False, notes="redo"
    )
    assert cl.cleaning_completed is False
    assert cl.cleaning_completed_at is None
    assert cl.completed_at is None
    assert cl.notes == "redo"


def test_taking_unit_off_market_is_never_gated(db, make_tenancy):
    t = make_tenancy(unit_available=True)
    unit = turnover_service.set_unit_availability(db, org_id=t.org_id, unit_id=t.unit_id, is_available=False)
    assert unit.is_available is False
    assert unit.available_from is None


def test_unknown_checklist_item(db, make_tenancy):
    t = make_tenancy()
    cl = turnover_service.create_checklist(db, org_id=t.org_id, unit_id=t.unit_id)
    with pytest.raises(ValidationError):
        turnover_service.update_checklist_item(db, org_id=t.org_id, checklist_id=cl.id, item="paint", completed=True)


def test_checklist_lease_must_be_on_unit(db, make_tenancy):
    a = make_tenancy()
    b = make_tenancy()
    with pytest.raises(NotFoundError):
        turnover_service.create_checklist(db, org_id=a.org_id, unit_id=a.unit_id, lease_id=b.lease_id)


def test_latest_checklist_wins(db, make_tenancy):
    t = make_tenancy()
    _vacate(db, t)
    old = turnover_service.create_checklist(db, org_id=t.org_id, unit_id=t.unit_id)
    new = turnover_service.create_checklist(db, org_id=t.org_id, unit_id=t.unit_id)
    assert turnover_service.latest_checklist(db, org_id=t.org_id, unit_id=t.unit_id).id == new.id

    for item in CHECKLIST_ITEMS:
        turnover_service.update_checklist_item(db, org_id=t.org_id, checklist_id=old.id, item=item, completed=True)
    with pytest.raises(ChecklistIncompleteError):
        turnover_service.set_unit_availability(db, org_id=t.org_id, unit_id=t.unit_id, is_available=True)
