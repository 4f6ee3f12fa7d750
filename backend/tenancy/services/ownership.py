# backend/tenancy/services/ownership.py
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..domain.errors import NotFoundError
from ..models import (
    DepositDisposition,
    EvictionNotice,
    Lease,
    Property,
    Unit,
    UnitTurnoverChecklist,
)


def must_get_lease(db: Session, *, org_id: int, lease_id: int) -> Lease:
    row = db.scalar(
        select(Lease)
        .where(Lease.id == lease_id, Lease.org_id == org_id)
        .options(selectinload(Lease.unit).selectinload(Unit.property), selectinload(Lease.tenant))
    )
    if not row:
        raise NotFoundError("lease", lease_id)
    return row


def must_get_unit(db: Session, *, org_id: int, unit_id: int) -> Unit:
    row = db.scalar(select(Unit).where(Unit.id == unit_id, Unit.org_id == org_id))
    if not row:
        raise NotFoundError("unit", unit_id)
    return row


def must_get_notice(db: Session, *, org_id: int, notice_id: int) -> EvictionNotice:
    row = db.scalar(select(EvictionNotice).where(EvictionNotice.id == notice_id, EvictionNotice.org_id == org_id))
    if not row:
        raise NotFoundError("eviction notice", notice_id)
    return row


def must_get_disposition(db: Session, *, org_id: int, disposition_id: int) -> DepositDisposition:
    row = db.scalar(
        select(DepositDisposition)
        .where(DepositDisposition.id == disposition_id, DepositDisposition.org_id == org_id)
        .options(selectinload(DepositDisposition.deductions))
    )
    if not row:
        raise NotFoundError("deposit disposition", disposition_id)
    return row


def must_get_checklist(db: Session, *, org_id: int, checklist_id: int) -> UnitTurnoverChecklist:
    row = db.scalar(
        select(UnitTurnoverChecklist).where(
            UnitTurnoverChecklist.id == checklist_id, UnitTurnoverChecklist.org_id == org_id
        )
    )
    if not row:
        raise NotFoundError("turnover checklist", checklist_id)
    return row


def resolve_landlord_id(lease: Lease) -> int:
    """lease -> unit -> property -> landlord; every link must exist."""
    unit = lease.unit
    prop: Property | None = unit.property if unit is not None else None
    if prop is None:
        raise NotFoundError("property", message="Lease has no associated property")
    if not prop.landlord_id:
        raise NotFoundError("landlord", message="Property has no associated landlord")
    return int(prop.landlord_id)
