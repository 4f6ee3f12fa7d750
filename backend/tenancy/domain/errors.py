"""
Typed errors for the tenancy lifecycle.

Every error carries a machine-readable ``code`` and the HTTP status the web
layer answers with. Services raise these; routers never translate messages.

    LifecycleError
    +-- ValidationError
    |   +-- ExceedsDepositError
    +-- NotFoundError
    +-- UploadError
    +-- ConflictError
        +-- InvalidTransitionError
        +-- LeaseStateError
        +-- ChecklistIncompleteError
        +-- TenantStillActiveError
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional


class LifecycleError(Exception):
    code: str = "LIFECYCLE_ERROR"
    http_status: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def as_dict(self) -> dict[str, Any]:
        return {"error": self.code, "detail": self.message}


class ValidationError(LifecycleError):
    code = "VALIDATION_ERROR"
    http_status = 400


class ExceedsDepositError(ValidationError):
    code = "EXCEEDS_DEPOSIT"

    def __init__(self, total_deductions: Decimal, original_amount: Decimal):
        self.total_deductions = total_deductions
        self.original_amount = original_amount
        super().__init__(
            f"Total deductions {total_deductions} cannot exceed original deposit amount {original_amount}"
        )

    def as_dict(self) -> dict[str, Any]:
        d = super().as_dict()
        d["total_deductions"] = str(self.total_deductions)
        d["original_amount"] = str(self.original_amount)
        return d


class NotFoundError(LifecycleError):
    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, entity: str, entity_id: Any = None, message: Optional[str] = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(message or f"{entity} not found")


class UploadError(LifecycleError):
    code = "UPLOAD_FAILED"
    http_status = 502


class ConflictError(LifecycleError):
    code = "CONFLICT"
    http_status = 409


class InvalidTransitionError(ConflictError):
    code = "INVALID_TRANSITION"

    def __init__(self, entity: str, current: str, requested: str):
        self.entity = entity
        self.current = current
        self.requested = requested
        super().__init__(f"Invalid {entity} transition: {current} -> {requested}")


class LeaseStateError(ConflictError):
    code = "LEASE_STATE"


class ChecklistIncompleteError(ConflictError):
    code = "CHECKLIST_INCOMPLETE"

    def __init__(self, checklist_id: int, missing: list[str]):
        self.checklist_id = checklist_id
        self.missing = list(missing)
        super().__init__(f"Turnover checklist {checklist_id} incomplete: {', '.join(self.missing)}")

    def as_dict(self) -> dict[str, Any]:
        d = super().as_dict()
        d["checklist_id"] = self.checklist_id
        d["missing"] = self.missing
        return d


class TenantStillActiveError(ConflictError):
    code = "TENANT_DETECTED"

    def __init__(self, tenant: dict[str, Any]):
        self.tenant = dict(tenant)
        super().__init__(f"Unit still has an active lease for tenant {self.tenant.get('tenant_name')}")

    def as_dict(self) -> dict[str, Any]:
        d = super().as_dict()
        d["tenant_detected"] = self.tenant
        d["requires_confirmation"] = True
        return d
