from __future__ import annotations

from datetime import date

import pytest

from tenancy.domain.errors import LeaseStateError, ValidationError
from tenancy.models import Lease, Unit
from tenancy.services.lease_rules import activate_lease, ensure_single_active_lease, terminate_lease


def test_terminate_sets_reason_and_dates(db, make_tenancy):
    t = make_tenancy()
    lease = terminate_lease(
        db, org_id=t.org_id, lease_id=t.lease_id, reason="mutual_agreement", termination_date=date(2024, 8, 31)
    )
    assert lease.status == "terminated"
    assert lease.termination_reason == "mutual_agreement"
    assert lease.terminated_at == date(2024, 8, 31)
    assert lease.end_date == date(2024, 8, 31)


def test_terminate_twice_is_rejected(db, make_tenancy):
    t = make_tenancy()
    terminate_lease(db, org_id=t.org_id, lease_id=t.lease_id, reason="voluntary", termination_date="2024-08-31")
    with pytest.raises(LeaseStateError):
        terminate_lease(db, org_id=t.org_id, lease_id=t.lease_id, reason="voluntary", termination_date="2024-09-01")


def test_terminate_before_start_is_rejected(db, make_tenancy):
    t = make_tenancy(start_date=date(2024, 5, 1))
    with pytest.raises(ValidationError):
        terminate_lease(db, org_id=t.org_id, lease_id=t.lease_id, reason="voluntary", termination_date=date(2024, 4, 1))


def test_terminate_requires_a_date(db, make_tenancy):
    t = make_tenancy()
    with pytest.raises(ValidationError):
        terminate_lease(db, org_id=t.org_id, lease_id=t.lease_id, reason="voluntary", termination_date="soon")


def test_single_active_lease_per_unit(db, make_tenancy):
    t = make_tenancy()
    pending = Lease(
        org_id=t.org_id,
        unit_id=t.unit_id,
        tenant_id=t.tenant_id,
        start_date=date(2025, 1, 1),
        status="pending",
    )
    db.add(pending)
    db.commit()

    with pytest.raises(LeaseStateError):
        activate_lease(db, org_id=t.org_id, lease_id=pending.id)

    terminate_lease(db, org_id=t.org_id, lease_id=t.lease_id, reason="lease_end", termination_date=date(2024, 12, 31))
    activated = activate_lease(db, org_id=t.org_id, lease_id=pending.id)
    assert activated.status == "active"
    assert db.get(Unit, t.unit_id).is_available is False
    ensure_single_active_lease(db, org_id=t.org_id, unit_id=t.unit_id, ignore_lease_id=pending.id)
