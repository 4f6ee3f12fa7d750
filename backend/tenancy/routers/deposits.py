# backend/tenancy/routers/deposits.py
from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from ..auth import get_principal, require_operator
from ..db import get_db
from ..domain.errors import NotFoundError
from ..schemas import (
    DispositionCreate,
    DispositionOut,
    DispositionSummaryOut,
    EvidenceOut,
    RefundAfterBalanceIn,
    RefundAfterBalanceOut,
    RefundStatusUpdate,
)
from ..services.deposit_service import DepositService

router = APIRouter(prefix="/deposits", tags=["deposits"])


def get_deposit_service() -> DepositService:
    """Overridden in tests through app.dependency_overrides."""
    return DepositService.from_settings()


@router.post("/dispositions", response_model=DispositionOut)
def create_disposition(
    payload: DispositionCreate,
    db: Session = Depends(get_db),
    svc: DepositService = Depends(get_deposit_service),
    p=Depends(require_operator),
):
    return svc.create_disposition(
        db,
        org_id=p.org_id,
        lease_id=payload.lease_id,
        original_amount=payload.original_amount,
        deductions=[d.model_dump() for d in payload.deductions],
        refund_method=payload.refund_method,
        notes=payload.notes,
        actor_user_id=p.user_id,
    )


@router.get("/dispositions/{disposition_id}", response_model=DispositionOut)
def get_disposition(
    disposition_id: int,
    db: Session = Depends(get_db),
    svc: DepositService = Depends(get_deposit_service),
    p=Depends(get_principal),
):
    row = svc.get_disposition_by_id(db, org_id=p.org_id, disposition_id=disposition_id)
    if row is None:
        raise NotFoundError("deposit disposition", disposition_id)
    return row


@router.get("/leases/{lease_id}/dispositions", response_model=list[DispositionOut])
def list_dispositions_for_lease(
    lease_id: int,
    db: Session = Depends(get_db),
    svc: DepositService = Depends(get_deposit_service),
    p=Depends(get_principal),
):
    return svc.get_dispositions_for_lease(db, org_id=p.org_id, lease_id=lease_id)


@router.patch("/dispositions/{disposition_id}/refund-status", response_model=DispositionOut)
def update_refund_status(
    disposition_id: int,
    payload: RefundStatusUpdate,
    db: Session = Depends(get_db),
    svc: DepositService = Depends(get_deposit_service),
    p=Depends(require_operator),
):
    return svc.update_refund_status(
        db,
        org_id=p.org_id,
        disposition_id=disposition_id,
        status=payload.status,
        processed_at=payload.processed_at,
        actor_user_id=p.user_id,
    )


@router.post("/dispositions/{disposition_id}/process-refund", response_model=DispositionOut)
def process_refund(
    disposition_id: int,
    db: Session = Depends(get_db),
    svc: DepositService = Depends(get_deposit_service),
    p=Depends(require_operator),
):
    return svc.process_refund(db, org_id=p.org_id, disposition_id=disposition_id, actor_user_id=p.user_id)


@router.post("/dispositions/{disposition_id}/send-summary", response_model=DispositionSummaryOut)
def send_summary(
    disposition_id: int,
    db: Session = Depends(get_db),
    svc: DepositService = Depends(get_deposit_service),
    p=Depends(require_operator),
):
    return svc.send_disposition_summary(db, org_id=p.org_id, disposition_id=disposition_id)


@router.post("/evidence", response_model=EvidenceOut)
def upload_evidence(
    file: UploadFile = File(...),
    svc: DepositService = Depends(get_deposit_service),
    p=Depends(require_operator),
):
    data = file.file.read()
    return svc.upload_evidence(
        data,
        file.filename or "evidence",
        file.content_type or "application/octet-stream",
    )


@router.post("/refund-after-balance", response_model=RefundAfterBalanceOut)
def refund_after_balance(payload: RefundAfterBalanceIn, p=Depends(get_principal)):
    return DepositService.calculate_refund_after_balance(
        payload.original_deposit,
        payload.deductions,
        payload.outstanding_balance,
        payload.apply_to_balance,
    )
