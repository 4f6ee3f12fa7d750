# backend/tenancy/routers/offboarding.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_principal, require_operator
from ..db import get_db
from ..domain.offboarding import DepositPlan, OffboardingParams
from ..schemas import OffboardingIn, OffboardingResultOut, OffboardingStatusOut
from ..services.deposit_service import DepositService
from ..services.offboarding_service import OffboardingService
from .deposits import get_deposit_service

router = APIRouter(prefix="/offboarding", tags=["offboarding"])


def get_offboarding_service(deposits: DepositService = Depends(get_deposit_service)) -> OffboardingService:
    return OffboardingService(deposits=deposits)


@router.post("", response_model=OffboardingResultOut)
def execute_offboarding(
    payload: OffboardingIn,
    db: Session = Depends(get_db),
    svc: OffboardingService = Depends(get_offboarding_service),
    p=Depends(require_operator),
):
    """
    Always answers 200 with the step report; callers read ``status`` and
    ``errors`` to tell success from partial or failed runs.
    """
    deposit = None
    if payload.deposit is not None:
        deposit = DepositPlan(
            original_amount=payload.deposit.original_amount,
            deductions=[d.model_dump() for d in payload.deposit.deductions],
            refund_method=payload.deposit.refund_method,
            notes=payload.deposit.notes,
        )

    params = OffboardingParams(
        lease_id=payload.lease_id,
        departure_type=payload.departure_type,
        departure_date=payload.departure_date,
        notes=payload.notes,
        mark_unit_available=payload.mark_unit_available,
        force_unit_available=payload.force_unit_available,
        deposit=deposit,
    )
    result = svc.execute_offboarding(db, org_id=p.org_id, params=params, actor_user_id=p.user_id)
    return result.as_dict()


@router.get("/leases/{lease_id}", response_model=OffboardingStatusOut)
def offboarding_status(
    lease_id: int,
    db: Session = Depends(get_db),
    svc: OffboardingService = Depends(get_offboarding_service),
    p=Depends(get_principal),
):
    return svc.get_offboarding_status(db, org_id=p.org_id, lease_id=lease_id).as_dict()
