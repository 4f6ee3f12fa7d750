# backend/tenancy/domain/offboarding.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional, Sequence

from .lifecycle import DepartureType


class StepName(str, Enum):
    LOAD_LEASE = "load_lease"
    TERMINATE_LEASE = "terminate_lease"
    RECORD_DEPARTURE = "record_departure"
    DEPOSIT_DISPOSITION = "deposit_disposition"
    UNIT_AVAILABILITY = "unit_availability"
    TURNOVER_CHECKLIST = "turnover_checklist"
    TENANT_HISTORY = "tenant_history"


class StepStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


class ResultStatus(str, Enum):
    SUCCESS = "success"  # every attempted step succeeded
    PARTIAL = "partial"  # some steps committed, some failed; nothing rolled back
    FAILURE = "failure"  # no step committed


@dataclass(frozen=True)
class DepositPlan:
    original_amount: Any
    deductions: Sequence[Any] = ()
    refund_method: str = "pending"
    notes: Optional[str] = None


@dataclass(frozen=True)
class OffboardingParams:
    lease_id: int
    departure_type: DepartureType | str
    departure_date: date
    notes: Optional[str] = None
    mark_unit_available: bool = False
    force_unit_available: bool = False
    deposit: Optional[DepositPlan] = None


@dataclass(frozen=True)
class StepOutcome:
    step: StepName
    status: StepStatus
    entity_id: Optional[int] = None
    error: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "step": self.step.value,
            "status": self.status.value,
            "entity_id": self.entity_id,
            "error": self.error,
        }


@dataclass
class OffboardingResult:
    """
    Aggregate of a best-effort offboarding run.

    Steps commit independently. A failed step is reported here and never
    undoes the steps that already committed.
    """

    lease_id: int
    steps: list[StepOutcome] = field(default_factory=list)

    def record_ok(self, step: StepName, entity_id: Optional[int] = None) -> None:
        self.steps.append(StepOutcome(step=step, status=StepStatus.OK, entity_id=entity_id))

    def record_failed(self, step: StepName, error: str) -> None:
        self.steps.append(StepOutcome(step=step, status=StepStatus.FAILED, error=error))

    def record_skipped(self, step: StepName) -> None:
        self.steps.append(StepOutcome(step=step, status=StepStatus.SKIPPED))

    def _outcome(self, step: StepName) -> Optional[StepOutcome]:
        for s in self.steps:
            if s.step == step:
                return s
        return None

    def _ok_id(self, step: StepName) -> Optional[int]:
        s = self._outcome(step)
        return s.entity_id if s is not None and s.status == StepStatus.OK else None

    @property
    def status(self) -> ResultStatus:
        failed = any(s.status == StepStatus.FAILED for s in self.steps)
        succeeded = any(s.status == StepStatus.OK for s in self.steps)
        if not failed:
            return ResultStatus.SUCCESS if succeeded else ResultStatus.FAILURE
        return ResultStatus.PARTIAL if succeeded else ResultStatus.FAILURE

    @property
    def success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @property
    def errors(self) -> list[str]:
        return [s.error for s in self.steps if s.status == StepStatus.FAILED and s.error]

    @property
    def lease_terminated(self) -> bool:
        s = self._outcome(StepName.TERMINATE_LEASE)
        return s is not None and s.status == StepStatus.OK

    @property
    def departure_recorded(self) -> bool:
        s = self._outcome(StepName.RECORD_DEPARTURE)
        return s is not None and s.status == StepStatus.OK

    @property
    def departure_id(self) -> Optional[int]:
        return self._ok_id(StepName.RECORD_DEPARTURE)

    @property
    def deposit_disposition_id(self) -> Optional[int]:
        return self._ok_id(StepName.DEPOSIT_DISPOSITION)

    @property
    def turnover_checklist_id(self) -> Optional[int]:
        return self._ok_id(StepName.TURNOVER_CHECKLIST)

    @property
    def tenant_history_id(self) -> Optional[int]:
        return self._ok_id(StepName.TENANT_HISTORY)

    @property
    def unit_marked_available(self) -> bool:
        s = self._outcome(StepName.UNIT_AVAILABILITY)
        return s is not None and s.status == StepStatus.OK

    def as_dict(self) -> dict:
        return {
            "lease_id": self.lease_id,
            "status": self.status.value,
            "success": self.success,
            "lease_terminated": self.lease_terminated,
            "departure_recorded": self.departure_recorded,
            "deposit_disposition_id": self.deposit_disposition_id,
            "tenant_history_id": self.tenant_history_id,
            "turnover_checklist_id": self.turnover_checklist_id,
            "unit_marked_available": self.unit_marked_available,
            "errors": self.errors,
            "steps": [s.as_dict() for s in self.steps],
        }
