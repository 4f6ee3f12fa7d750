# backend/tenancy/services/offboarding_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..domain.errors import LifecycleError
from ..domain.lifecycle import LeaseStatus, parse_departure_type
from ..domain.offboarding import OffboardingParams, OffboardingResult, StepName
from ..models import DepositDisposition, TenantDeparture, TenantHistory, UnitTurnoverChecklist
from . import departure_service, tenant_history, turnover_service
from .deposit_service import DepositService
from .lease_rules import terminate_lease
from .ownership import must_get_lease, resolve_landlord_id

log = logging.getLogger("tenancy.offboarding")


@dataclass(frozen=True)
class OffboardingStatus:
    lease_terminated: bool
    departure_recorded: bool
    deposit_disposition_created: bool
    history_created: bool
    checklist_created: bool

    def as_dict(self) -> dict:
        return {
            "lease_terminated": self.lease_terminated,
            "departure_recorded": self.departure_recorded,
            "deposit_disposition_created": self.deposit_disposition_created,
            "history_created": self.history_created,
            "checklist_created": self.checklist_created,
        }


_FAILURE_LABELS = {
    StepName.TERMINATE_LEASE: "terminate lease",
    StepName.RECORD_DEPARTURE: "record departure",
    StepName.DEPOSIT_DISPOSITION: "create deposit disposition",
    StepName.TURNOVER_CHECKLIST: "create turnover checklist",
    StepName.UNIT_AVAILABILITY: "mark unit available",
    StepName.TENANT_HISTORY: "create tenant history",
}


class OffboardingService:
    """
    Runs the offboarding steps in order:

        terminate lease -> record departure -> deposit disposition (optional)
        -> unit availability (optional) -> turnover checklist -> tenant history

    Availability runs before this run's checklist exists, so it is gated on
    the unit's prior turnover state only. Every step commits on its own. A failing step is rolled back alone,
    reported in the result, and the next step still runs.
    """

    def __init__(self, *, deposits: Optional[DepositService] = None) -> None:
        self.deposits = deposits or DepositService()

    def _run_step(
        self,
        db: Session,
        result: OffboardingResult,
        step: StepName,
        fn: Callable[[], Any],
    ) -> Any:
        try:
            out = fn()
        except LifecycleError as e:
            db.rollback()
            log.warning("offboarding step failed: %s", e, extra={"lease_id": result.lease_id, "step": step.value})
            result.record_failed(step, f"Failed to {_FAILURE_LABELS[step]}: {e}")
            return None
        except Exception as e:
            db.rollback()
            log.exception("offboarding step crashed", extra={"lease_id": result.lease_id, "step": step.value})
            result.record_failed(step, f"Failed to {_FAILURE_LABELS[step]}: {e}")
            return None
        result.record_ok(step, getattr(out, "id", None))
        return out

    def execute_offboarding(
        self,
        db: Session,
        *,
        org_id: int,
        params: OffboardingParams,
        actor_user_id: Optional[int] = None,
    ) -> OffboardingResult:
        result = OffboardingResult(lease_id=params.lease_id)

        try:
            departure_type = parse_departure_type(params.departure_type)
            lease = must_get_lease(db, org_id=org_id, lease_id=params.lease_id)
            resolve_landlord_id(lease)
        except LifecycleError as e:
            result.record_failed(StepName.LOAD_LEASE, str(e))
            log.warning("offboarding aborted: %s", e, extra={"org_id": org_id, "lease_id": params.lease_id})
            return result

        lease_id = lease.id
        unit_id = lease.unit_id

        self._run_step(
            db,
            result,
            StepName.TERMINATE_LEASE,
            lambda: terminate_lease(
                db,
                org_id=org_id,
                lease_id=lease_id,
                reason=departure_type,
                termination_date=params.departure_date,
                actor_user_id=actor_user_id,
            ),
        )

        departure = self._run_step(
            db,
            result,
            StepName.RECORD_DEPARTURE,
            lambda: departure_service.record_departure(
                db,
                org_id=org_id,
                lease_id=lease_id,
                departure_type=departure_type,
                departure_date=params.departure_date,
                notes=params.notes,
                actor_user_id=actor_user_id,
            ),
        )

        disposition = None
        if params.deposit is not None:
            plan = params.deposit
            disposition = self._run_step(
                db,
                result,
                StepName.DEPOSIT_DISPOSITION,
                lambda: self.deposits.create_disposition(
                    db,
                    org_id=org_id,
                    lease_id=lease_id,
                    original_amount=plan.original_amount,
                    deductions=plan.deductions,
                    refund_method=plan.refund_method,
                    notes=plan.notes,
                    actor_user_id=actor_user_id,
                ),
            )
        else:
            result.record_skipped(StepName.DEPOSIT_DISPOSITION)

        if params.mark_unit_available:
            self._run_step(
                db,
                result,
                StepName.UNIT_AVAILABILITY,
                lambda: turnover_service.set_unit_availability(
                    db,
                    org_id=org_id,
                    unit_id=unit_id,
                    is_available=True,
                    force=params.force_unit_available,
                    available_from=params.departure_date,
                    actor_user_id=actor_user_id,
                ),
            )
        else:
            result.record_skipped(StepName.UNIT_AVAILABILITY)

        self._run_step(
            db,
            result,
            StepName.TURNOVER_CHECKLIST,
            lambda: turnover_service.create_checklist(
                db, org_id=org_id, unit_id=unit_id, lease_id=lease_id, actor_user_id=actor_user_id
            ),
        )

        self._run_step(
            db,
            result,
            StepName.TENANT_HISTORY,
            lambda: tenant_history.create_history(
                db,
                org_id=org_id,
                lease=must_get_lease(db, org_id=org_id, lease_id=lease_id),
                departure_type=departure_type,
                departure_date=params.departure_date,
                departure=departure,
                disposition=disposition,
                actor_user_id=actor_user_id,
            ),
        )

        log.info(
            "offboarding finished status=%s errors=%d",
            result.status.value,
            len(result.errors),
            extra={"org_id": org_id, "lease_id": lease_id},
        )
        return result

    def get_offboarding_status(self, db: Session, *, org_id: int, lease_id: int) -> OffboardingStatus:
        lease = must_get_lease(db, org_id=org_id, lease_id=lease_id)

        def _exists(model) -> bool:
            q = select(model.id).where(model.org_id == org_id, model.lease_id == lease.id).limit(1)
            return db.scalar(q) is not None

        return OffboardingStatus(
            lease_terminated=lease.status == LeaseStatus.TERMINATED.value,
            departure_recorded=_exists(TenantDeparture),
            deposit_disposition_created=_exists(DepositDisposition),
            history_created=_exists(TenantHistory),
            checklist_created=_exists(UnitTurnoverChecklist),
        )
