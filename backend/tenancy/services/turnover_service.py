# backend/tenancy/services/turnover_service.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..domain.audit import audit_write, snapshot
from ..domain.errors import ChecklistIncompleteError, NotFoundError, TenantStillActiveError
from ..domain.events import emit_workflow_event
from ..domain.lifecycle import checklist_is_complete, missing_checklist_items, parse_checklist_item
from ..models import Lease, Property, Unit, UnitTurnoverChecklist
from .lease_rules import find_active_lease
from .ownership import must_get_checklist, must_get_lease, must_get_unit

log = logging.getLogger("tenancy.turnover")


def create_checklist(
    db: Session,
    *,
    org_id: int,
    unit_id: int,
    lease_id: Optional[int] = None,
    actor_user_id: Optional[int] = None,
) -> UnitTurnoverChecklist:
    unit = must_get_unit(db, org_id=org_id, unit_id=unit_id)
    if lease_id is not None:
        lease = must_get_lease(db, org_id=org_id, lease_id=lease_id)
        if lease.unit_id != unit.id:
            raise NotFoundError("lease", lease_id, message=f"Lease {lease_id} is not on unit {unit.id}")

    prop = db.get(Property, unit.property_id)
    row = UnitTurnoverChecklist(
        org_id=org_id,
        unit_id=unit.id,
        lease_id=lease_id,
        landlord_id=prop.landlord_id if prop is not None else None,
    )
    db.add(row)
    db.flush()

    audit_write(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        action="turnover_checklist.create",
        entity_type="UnitTurnoverChecklist",
        entity_id=row.id,
        after=snapshot(row),
    )
    emit_workflow_event(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        event_type="turnover.checklist_created",
        lease_id=lease_id,
        payload={"checklist_id": row.id, "unit_id": unit.id},
    )
    db.commit()
    return row


def latest_checklist(db: Session, *, org_id: int, unit_id: int) -> Optional[UnitTurnoverChecklist]:
    q = (
        select(UnitTurnoverChecklist)
        .where(UnitTurnoverChecklist.org_id == org_id, UnitTurnoverChecklist.unit_id == unit_id)
        .order_by(UnitTurnoverChecklist.created_at.desc(), UnitTurnoverChecklist.id.desc())
    )
    return db.scalars(q).first()


def update_checklist_item(
    db: Session,
    *,
    org_id: int,
    checklist_id: int,
    item: Any,
    completed: bool,
    notes: Optional[str] = None,
    actor_user_id: Optional[int] = None,
) -> UnitTurnoverChecklist:
    key = parse_checklist_item(item).value
    row = must_get_checklist(db, org_id=org_id, checklist_id=checklist_id)
    before = snapshot(row)
    now = datetime.utcnow()

    setattr(row, key, bool(completed))
    setattr(row, f"{key}_at", now if completed else None)
    if notes is not None:
        row.notes = notes

    if checklist_is_complete(row):
        if row.completed_at is None:
            row.completed_at = now
    else:
        row.completed_at = None

    audit_write(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        action="turnover_checklist.update",
        entity_type="UnitTurnoverChecklist",
        entity_id=row.id,
        before=before,
        after=snapshot(row),
    )
    if row.completed_at is not None and before.get("completed_at") is None:
        emit_workflow_event(
            db,
            org_id=org_id,
            actor_user_id=actor_user_id,
            event_type="turnover.checklist_completed",
            lease_id=row.lease_id,
            payload={"checklist_id": row.id, "unit_id": row.unit_id},
        )
    db.commit()
    return row


def _tenant_info(lease: Lease, unit: Unit) -> dict[str, Any]:
    return {
        "tenant_id": lease.tenant_id,
        "tenant_name": lease.tenant.full_name if lease.tenant is not None else None,
        "tenant_email": lease.tenant.email if lease.tenant is not None else None,
        "lease_id": lease.id,
        "unit_id": unit.id,
        "unit_name": unit.name,
    }


def set_unit_availability(
    db: Session,
    *,
    org_id: int,
    unit_id: int,
    is_available: bool,
    force: bool = False,
    available_from: Optional[date] = None,
    actor_user_id: Optional[int] = None,
) -> Unit:
    """
    Listing a unit requires no active lease on it and a complete latest
    turnover checklist (when one exists). force=True skips both gates.
    Taking a unit off the market is never gated.
    """
    unit = must_get_unit(db, org_id=org_id, unit_id=unit_id)

    if is_available and not force:
        active = find_active_lease(db, org_id=org_id, unit_id=unit.id)
        if active is not None:
            raise TenantStillActiveError(_tenant_info(active, unit))

        checklist = latest_checklist(db, org_id=org_id, unit_id=unit.id)
        if checklist is not None and not checklist_is_complete(checklist):
            raise ChecklistIncompleteError(checklist.id, missing_checklist_items(checklist))

    before = snapshot(unit)
    unit.is_available = bool(is_available)
    unit.available_from = (available_from or date.today()) if is_available else None

    audit_write(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        action="unit.availability",
        entity_type="Unit",
        entity_id=unit.id,
        before=before,
        after={**snapshot(unit), "forced": bool(force)},
    )
    db.commit()

    log.info(
        "unit availability=%s forced=%s",
        unit.is_available,
        bool(force),
        extra={"org_id": org_id},
    )
    return unit
