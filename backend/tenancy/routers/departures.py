# backend/tenancy/routers/departures.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_principal, require_operator
from ..db import get_db
from ..schemas import DepartureCreate, DepartureOut
from ..services import departure_service

router = APIRouter(prefix="/departures", tags=["departures"])


@router.post("", response_model=DepartureOut)
def record_departure(payload: DepartureCreate, db: Session = Depends(get_db), p=Depends(require_operator)):
    return departure_service.record_departure(
        db,
        org_id=p.org_id,
        lease_id=payload.lease_id,
        departure_type=payload.departure_type,
        departure_date=payload.departure_date,
        notes=payload.notes,
        eviction_notice_id=payload.eviction_notice_id,
        actor_user_id=p.user_id,
    )


@router.get("/leases/{lease_id}", response_model=list[DepartureOut])
def list_departures(lease_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return departure_service.list_departures(db, org_id=p.org_id, lease_id=lease_id)
