# backend/tenancy/services/tenant_history.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from ..config import settings
from ..domain.audit import audit_write, snapshot
from ..domain.lifecycle import DepartureType, parse_departure_type
from ..models import DepositDisposition, Lease, TenantDeparture, TenantHistory
from .ownership import resolve_landlord_id


@dataclass(frozen=True)
class HistoryPage:
    rows: list[TenantHistory]
    total: int
    page: int
    limit: int


def create_history(
    db: Session,
    *,
    org_id: int,
    lease: Lease,
    departure_type: Any,
    departure_date: date,
    departure: Optional[TenantDeparture] = None,
    disposition: Optional[DepositDisposition] = None,
    actor_user_id: Optional[int] = None,
) -> TenantHistory:
    """Append-only snapshot of a finished tenancy."""
    dt = parse_departure_type(departure_type)
    landlord_id = resolve_landlord_id(lease)
    tenant = lease.tenant

    row = TenantHistory(
        org_id=org_id,
        unit_id=lease.unit_id,
        property_id=lease.unit.property_id,
        landlord_id=landlord_id,
        tenant_id=lease.tenant_id,
        lease_id=lease.id,
        departure_id=departure.id if departure is not None else None,
        deposit_disposition_id=disposition.id if disposition is not None else None,
        tenant_name=tenant.full_name,
        tenant_email=tenant.email,
        tenant_phone=tenant.phone,
        lease_start_date=lease.start_date,
        lease_end_date=lease.end_date or departure_date,
        rent_amount=lease.rent_amount,
        departure_type=dt.value,
        departure_date=departure_date,
        deposit_amount=disposition.original_amount if disposition is not None else None,
        deposit_refunded=disposition.refund_amount if disposition is not None else None,
        deposit_deducted=disposition.total_deductions if disposition is not None else None,
        was_evicted=dt == DepartureType.EVICTION,
    )
    db.add(row)
    db.flush()

    audit_write(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        action="tenant_history.create",
        entity_type="TenantHistory",
        entity_id=row.id,
        after=snapshot(row),
    )
    db.commit()
    return row


def query_history(
    db: Session,
    *,
    org_id: int,
    page: int = 1,
    limit: Optional[int] = None,
    departure_type: Any = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
    unit_id: Optional[int] = None,
    property_id: Optional[int] = None,
) -> HistoryPage:
    page = max(1, int(page or 1))
    limit = int(limit or settings.history_default_limit)
    limit = max(1, min(limit, settings.history_max_limit))

    conds = [TenantHistory.org_id == org_id]
    if departure_type:
        conds.append(TenantHistory.departure_type == parse_departure_type(departure_type).value)
    if date_from is not None:
        conds.append(TenantHistory.departure_date >= date_from)
    if date_to is not None:
        conds.append(TenantHistory.departure_date <= date_to)
    if unit_id is not None:
        conds.append(TenantHistory.unit_id == int(unit_id))
    if property_id is not None:
        conds.append(TenantHistory.property_id == int(property_id))
    if search and search.strip():
        pat = f"%{search.strip().lower()}%"
        conds.append(
            or_(
                func.lower(TenantHistory.tenant_name).like(pat),
                func.lower(func.coalesce(TenantHistory.tenant_email, "")).like(pat),
            )
        )

    total = int(db.scalar(select(func.count()).select_from(TenantHistory).where(*conds)) or 0)
    q = (
        select(TenantHistory)
        .where(*conds)
        .order_by(TenantHistory.departure_date.desc(), TenantHistory.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return HistoryPage(rows=list(db.scalars(q).all()), total=total, page=page, limit=limit)
