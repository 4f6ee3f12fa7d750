# backend/tenancy/routers/leases.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_principal, require_operator
from ..db import get_db
from ..schemas import LeaseOut, LeaseTerminateIn
from ..services.lease_rules import activate_lease, terminate_lease
from ..services.ownership import must_get_lease

router = APIRouter(prefix="/leases", tags=["leases"])


@router.get("/{lease_id}", response_model=LeaseOut)
def get_lease(lease_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return must_get_lease(db, org_id=p.org_id, lease_id=lease_id)


@router.post("/{lease_id}/activate", response_model=LeaseOut)
def activate(lease_id: int, db: Session = Depends(get_db), p=Depends(require_operator)):
    return activate_lease(db, org_id=p.org_id, lease_id=lease_id, actor_user_id=p.user_id)


@router.post("/{lease_id}/terminate", response_model=LeaseOut)
def terminate(
    lease_id: int,
    payload: LeaseTerminateIn,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    return terminate_lease(
        db,
        org_id=p.org_id,
        lease_id=lease_id,
        reason=payload.reason,
        termination_date=payload.termination_date,
        notes=payload.notes,
        actor_user_id=p.user_id,
    )
