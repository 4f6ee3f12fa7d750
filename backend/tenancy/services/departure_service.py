# backend/tenancy/services/departure_service.py
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..domain.audit import audit_write, snapshot
from ..domain.errors import NotFoundError, ValidationError
from ..domain.events import emit_workflow_event
from ..domain.lifecycle import parse_departure_type
from ..models import TenantDeparture
from .ownership import must_get_lease, must_get_notice

log = logging.getLogger("tenancy.departures")


def record_departure(
    db: Session,
    *,
    org_id: int,
    lease_id: int,
    departure_type: Any,
    departure_date: date,
    notes: Optional[str] = None,
    eviction_notice_id: Optional[int] = None,
    actor_user_id: Optional[int] = None,
) -> TenantDeparture:
    """
    Insert one TenantDeparture row. Rows are never updated afterwards.

    A supplied eviction notice must belong to the same lease; its status is
    not checked.
    """
    dt = parse_departure_type(departure_type)
    if departure_date is None:
        raise ValidationError("departure_date is required")

    lease = must_get_lease(db, org_id=org_id, lease_id=lease_id)
    if eviction_notice_id is not None:
        notice = must_get_notice(db, org_id=org_id, notice_id=eviction_notice_id)
        if notice.lease_id != lease.id:
            raise NotFoundError(
                "eviction notice",
                eviction_notice_id,
                message=f"Eviction notice {eviction_notice_id} does not belong to lease {lease.id}",
            )

    prop = lease.unit.property if lease.unit is not None else None
    row = TenantDeparture(
        org_id=org_id,
        lease_id=lease.id,
        tenant_id=lease.tenant_id,
        unit_id=lease.unit_id,
        landlord_id=prop.landlord_id if prop is not None else None,
        departure_type=dt.value,
        departure_date=departure_date,
        eviction_notice_id=eviction_notice_id,
        notes=notes,
    )
    db.add(row)
    db.flush()

    audit_write(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        action="tenant_departure.create",
        entity_type="TenantDeparture",
        entity_id=row.id,
        after=snapshot(row),
    )
    emit_workflow_event(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        event_type="tenant.departed",
        lease_id=lease.id,
        payload={"departure_id": row.id, "departure_type": dt.value},
    )
    db.commit()

    log.info("departure recorded type=%s", dt.value, extra={"org_id": org_id, "lease_id": lease.id})
    return row


def list_departures(db: Session, *, org_id: int, lease_id: int) -> list[TenantDeparture]:
    q = (
        select(TenantDeparture)
        .where(TenantDeparture.org_id == org_id, TenantDeparture.lease_id == lease_id)
        .order_by(TenantDeparture.departure_date.desc(), TenantDeparture.id.desc())
    )
    return list(db.scalars(q).all())
