from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from tenancy.domain.audit import audit_write, snapshot
from tenancy.domain.errors import LeaseStateError, ValidationError
from tenancy.domain.events import emit_workflow_event
from tenancy.domain.lifecycle import LeaseStatus, parse_departure_type
from tenancy.models import Lease
from tenancy.services.ownership import must_get_lease

log = logging.getLogger("tenancy.leases")


def _as_date(v: Any) -> Optional[date]:
    if v is None:
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    try:
        return date.fromisoformat(str(v))
    except ValueError:
        return None


def find_active_lease(db: Session, *, org_id: int, unit_id: int, ignore_lease_id: Optional[int] = None) -> Optional[Lease]:
    q = select(Lease).where(
        Lease.org_id == int(org_id),
        Lease.unit_id == int(unit_id),
        Lease.status == LeaseStatus.ACTIVE.value,
    )
    if ignore_lease_id is not None:
        q = q.where(Lease.id != int(ignore_lease_id))
    return db.scalars(q.order_by(Lease.id.desc())).first()


def ensure_single_active_lease(
    db: Session,
    *,
    org_id: int,
    unit_id: int,
    ignore_lease_id: Optional[int] = None,
) -> None:
    """Raise LeaseStateError if the unit already has an active lease."""
    other = find_active_lease(db, org_id=org_id, unit_id=unit_id, ignore_lease_id=ignore_lease_id)
    if other is not None:
        raise LeaseStateError(f"unit {unit_id} already has active lease id={other.id}")


def activate_lease(
    db: Session,
    *,
    org_id: int,
    lease_id: int,
    actor_user_id: Optional[int] = None,
) -> Lease:
    lease = must_get_lease(db, org_id=org_id, lease_id=lease_id)
    if lease.status != LeaseStatus.PENDING.value:
        raise LeaseStateError(f"lease {lease.id} is {lease.status}; only pending leases can be activated")

    ensure_single_active_lease(db, org_id=org_id, unit_id=lease.unit_id, ignore_lease_id=lease.id)

    before = snapshot(lease)
    lease.status = LeaseStatus.ACTIVE.value
    lease.unit.is_available = False

    audit_write(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        action="lease.activate",
        entity_type="Lease",
        entity_id=lease.id,
        before=before,
        after=snapshot(lease),
    )
    emit_workflow_event(
        db, org_id=org_id, actor_user_id=actor_user_id, event_type="lease.activated", lease_id=lease.id
    )
    db.commit()
    return lease


def terminate_lease(
    db: Session,
    *,
    org_id: int,
    lease_id: int,
    reason: Any,
    termination_date: Any,
    notes: Optional[str] = None,
    actor_user_id: Optional[int] = None,
) -> Lease:
    """
    status=terminated, termination_reason, terminated_at and end_date all set
    from the termination date. Terminated leases stay terminated.
    """
    why = parse_departure_type(reason)
    when = _as_date(termination_date)
    if when is None:
        raise ValidationError("termination_date is required and must be a date")

    lease = must_get_lease(db, org_id=org_id, lease_id=lease_id)
    if lease.status == LeaseStatus.TERMINATED.value:
        raise LeaseStateError(f"lease {lease.id} is already terminated")
    if when < lease.start_date:
        raise ValidationError("termination_date cannot be before lease start_date")

    before = snapshot(lease)
    lease.status = LeaseStatus.TERMINATED.value
    lease.termination_reason = why.value
    lease.terminated_at = when
    lease.end_date = when
    if notes:
        lease.notes = f"{lease.notes}\n{notes}" if lease.notes else notes

    audit_write(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        action="lease.terminate",
        entity_type="Lease",
        entity_id=lease.id,
        before=before,
        after=snapshot(lease),
    )
    emit_workflow_event(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        event_type="lease.terminated",
        lease_id=lease.id,
        payload={"reason": why.value, "termination_date": when.isoformat()},
    )
    db.commit()

    log.info("lease terminated reason=%s", why.value, extra={"org_id": org_id, "lease_id": lease.id})
    return lease
