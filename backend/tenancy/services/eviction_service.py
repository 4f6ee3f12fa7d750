# backend/tenancy/services/eviction_service.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..domain.audit import audit_write, snapshot
from ..domain.deposits import to_money
from ..domain.errors import LeaseStateError, ValidationError
from ..domain.events import emit_workflow_event
from ..domain.eviction import (
    EvictionStatus,
    calculate_deadline_date,
    ensure_status_transition,
    parse_notice_type,
)
from ..domain.lifecycle import LeaseStatus
from ..models import EvictionNotice
from .ownership import must_get_lease, must_get_notice

log = logging.getLogger("tenancy.evictions")


def create_notice(
    db: Session,
    *,
    org_id: int,
    lease_id: int,
    notice_type: Any,
    reason: str,
    amount_owed: Any = None,
    additional_notes: Optional[str] = None,
    serve_date: Optional[date] = None,
    actor_user_id: Optional[int] = None,
) -> EvictionNotice:
    nt = parse_notice_type(notice_type)
    if not (reason or "").strip():
        raise ValidationError("reason is required")
    owed = to_money(amount_owed, field_name="amount_owed") if amount_owed is not None else None
    if owed is not None and owed < 0:
        raise ValidationError("amount_owed cannot be negative")

    lease = must_get_lease(db, org_id=org_id, lease_id=lease_id)
    if lease.status == LeaseStatus.TERMINATED.value:
        raise LeaseStateError(f"Lease {lease.id} is terminated; notices cannot be served")

    served = serve_date or date.today()
    row = EvictionNotice(
        org_id=org_id,
        lease_id=lease.id,
        notice_type=nt.value,
        status=EvictionStatus.SERVED.value,
        serve_date=served,
        deadline_date=calculate_deadline_date(served, nt),
        amount_owed=owed,
        reason=reason.strip(),
        additional_notes=additional_notes,
        status_changed_at=datetime.utcnow(),
    )
    db.add(row)
    db.flush()

    audit_write(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        action="eviction_notice.create",
        entity_type="EvictionNotice",
        entity_id=row.id,
        after=snapshot(row),
    )
    emit_workflow_event(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        event_type="eviction_notice.served",
        lease_id=lease.id,
        payload={"notice_id": row.id, "notice_type": nt.value, "deadline_date": row.deadline_date.isoformat()},
    )
    db.commit()

    log.info("eviction notice served", extra={"org_id": org_id, "lease_id": lease.id})
    return row


def update_status(
    db: Session,
    *,
    org_id: int,
    notice_id: int,
    new_status: Any,
    notes: Optional[str] = None,
    actor_user_id: Optional[int] = None,
) -> EvictionNotice:
    row = must_get_notice(db, org_id=org_id, notice_id=notice_id)
    # rejected before anything is written
    nxt = ensure_status_transition(row.status, new_status)

    before = snapshot(row)
    prev = row.status
    row.status = nxt.value
    row.status_changed_at = datetime.utcnow()
    if notes:
        row.additional_notes = f"{row.additional_notes}\n{notes}" if row.additional_notes else notes

    audit_write(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        action="eviction_notice.status",
        entity_type="EvictionNotice",
        entity_id=row.id,
        before=before,
        after=snapshot(row),
    )
    emit_workflow_event(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        event_type=f"eviction_notice.{nxt.value}",
        lease_id=row.lease_id,
        payload={"notice_id": row.id, "from": prev, "to": nxt.value},
    )
    db.commit()
    return row


def list_for_lease(db: Session, *, org_id: int, lease_id: int) -> list[EvictionNotice]:
    must_get_lease(db, org_id=org_id, lease_id=lease_id)
    q = (
        select(EvictionNotice)
        .where(EvictionNotice.org_id == org_id, EvictionNotice.lease_id == lease_id)
        .order_by(EvictionNotice.created_at.desc(), EvictionNotice.id.desc())
    )
    return list(db.scalars(q).all())
