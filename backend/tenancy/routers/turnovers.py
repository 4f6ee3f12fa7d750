# backend/tenancy/routers/turnovers.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_principal, require_operator
from ..db import get_db
from ..domain.errors import NotFoundError
from ..schemas import ChecklistCreate, ChecklistItemUpdate, TurnoverChecklistOut, UnitAvailabilityIn, UnitOut
from ..services import turnover_service
from ..services.ownership import must_get_checklist, must_get_unit

router = APIRouter(prefix="/turnovers", tags=["turnovers"])


@router.post("/checklists", response_model=TurnoverChecklistOut)
def create_checklist(payload: ChecklistCreate, db: Session = Depends(get_db), p=Depends(require_operator)):
    return turnover_service.create_checklist(
        db,
        org_id=p.org_id,
        unit_id=payload.unit_id,
        lease_id=payload.lease_id,
        actor_user_id=p.user_id,
    )


@router.get("/checklists/{checklist_id}", response_model=TurnoverChecklistOut)
def get_checklist(checklist_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return must_get_checklist(db, org_id=p.org_id, checklist_id=checklist_id)


@router.get("/units/{unit_id}/checklist", response_model=TurnoverChecklistOut)
def latest_checklist(unit_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    must_get_unit(db, org_id=p.org_id, unit_id=unit_id)
    row = turnover_service.latest_checklist(db, org_id=p.org_id, unit_id=unit_id)
    if row is None:
        raise NotFoundError("turnover checklist", message=f"Unit {unit_id} has no turnover checklist")
    return row


@router.patch("/checklists/{checklist_id}/items", response_model=TurnoverChecklistOut)
def update_checklist_item(
    checklist_id: int,
    payload: ChecklistItemUpdate,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    return turnover_service.update_checklist_item(
        db,
        org_id=p.org_id,
        checklist_id=checklist_id,
        item=payload.item,
        completed=payload.completed,
        notes=payload.notes,
        actor_user_id=p.user_id,
    )


@router.put("/units/{unit_id}/availability", response_model=UnitOut)
def set_unit_availability(
    unit_id: int,
    payload: UnitAvailabilityIn,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    return turnover_service.set_unit_availability(
        db,
        org_id=p.org_id,
        unit_id=unit_id,
        is_available=payload.is_available,
        force=payload.force,
        available_from=payload.available_from,
        actor_user_id=p.user_id,
    )
