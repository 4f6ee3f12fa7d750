# backend/tenancy/routers/evictions.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_principal, require_operator
from ..db import get_db
from ..domain.eviction import allowed_next_statuses, is_terminal
from ..schemas import EvictionNoticeCreate, EvictionNoticeOut, EvictionStatusUpdate, EvictionTransitionsOut
from ..services import eviction_service
from ..services.ownership import must_get_notice

router = APIRouter(prefix="/evictions", tags=["evictions"])


@router.post("/notices", response_model=EvictionNoticeOut)
def create_notice(payload: EvictionNoticeCreate, db: Session = Depends(get_db), p=Depends(require_operator)):
    return eviction_service.create_notice(
        db,
        org_id=p.org_id,
        lease_id=payload.lease_id,
        notice_type=payload.notice_type,
        reason=payload.reason,
        amount_owed=payload.amount_owed,
        additional_notes=payload.additional_notes,
        serve_date=payload.serve_date,
        actor_user_id=p.user_id,
    )


@router.get("/notices/{notice_id}", response_model=EvictionNoticeOut)
def get_notice(notice_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return must_get_notice(db, org_id=p.org_id, notice_id=notice_id)


@router.get("/notices/{notice_id}/transitions", response_model=EvictionTransitionsOut)
def notice_transitions(notice_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    row = must_get_notice(db, org_id=p.org_id, notice_id=notice_id)
    return EvictionTransitionsOut(
        notice_id=row.id,
        status=row.status,
        allowed_next=[s.value for s in allowed_next_statuses(row.status)],
        terminal=is_terminal(row.status),
    )


@router.patch("/notices/{notice_id}/status", response_model=EvictionNoticeOut)
def update_notice_status(
    notice_id: int,
    payload: EvictionStatusUpdate,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    return eviction_service.update_status(
        db,
        org_id=p.org_id,
        notice_id=notice_id,
        new_status=payload.status,
        notes=payload.notes,
        actor_user_id=p.user_id,
    )


@router.get("/leases/{lease_id}/notices", response_model=list[EvictionNoticeOut])
def list_notices(lease_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return eviction_service.list_for_lease(db, org_id=p.org_id, lease_id=lease_id)
