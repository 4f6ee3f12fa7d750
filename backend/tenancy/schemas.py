# backend/tenancy/schemas.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, Field, ConfigDict


# -------------------- Leases --------------------

class LeaseOut(BaseModel):
    id: int
    unit_id: int
    tenant_id: int
    start_date: date
    end_date: Optional[date] = None
    rent_amount: Decimal
    deposit_amount: Decimal
    status: str
    termination_reason: Optional[str] = None
    terminated_at: Optional[date] = None
    notes: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class LeaseTerminateIn(BaseModel):
    reason: str
    termination_date: date
    notes: Optional[str] = None


# -------------------- Eviction notices --------------------

class EvictionNoticeCreate(BaseModel):
    lease_id: int
    notice_type: str  # 3-day | 7-day | 30-day
    reason: str
    amount_owed: Optional[Decimal] = None
    additional_notes: Optional[str] = None
    serve_date: Optional[date] = None


class EvictionStatusUpdate(BaseModel):
    status: str
    notes: Optional[str] = None


class EvictionNoticeOut(BaseModel):
    id: int
    lease_id: int
    notice_type: str
    status: str
    serve_date: date
    deadline_date: date
    amount_owed: Optional[Decimal] = None
    reason: str
    additional_notes: Optional[str] = None
    status_changed_at: Optional[datetime] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class EvictionTransitionsOut(BaseModel):
    notice_id: int
    status: str
    allowed_next: list[str]
    terminal: bool


# -------------------- Departures --------------------

class DepartureCreate(BaseModel):
    lease_id: int
    departure_type: str
    departure_date: date
    notes: Optional[str] = None
    eviction_notice_id: Optional[int] = None


class DepartureOut(BaseModel):
    id: int
    lease_id: int
    tenant_id: int
    unit_id: int
    landlord_id: Optional[int] = None
    departure_type: str
    departure_date: date
    eviction_notice_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# -------------------- Deposit dispositions --------------------

class DeductionIn(BaseModel):
    category: str
    amount: Decimal
    description: str
    evidence_urls: list[str] = Field(default_factory=list)


class DeductionOut(DeductionIn):
    id: int
    disposition_id: int
    model_config = ConfigDict(from_attributes=True)


class DispositionCreate(BaseModel):
    lease_id: int
    original_amount: Decimal
    deductions: list[DeductionIn] = Field(default_factory=list)
    refund_method: str = "pending"
    notes: Optional[str] = None


class DispositionOut(BaseModel):
    id: int
    lease_id: int
    tenant_id: int
    landlord_id: int
    original_amount: Decimal
    total_deductions: Decimal
    refund_amount: Decimal
    refund_method: str
    refund_status: str
    processed_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    deductions: List[DeductionOut] = Field(default_factory=list)
    model_config = ConfigDict(from_attributes=True)


class RefundStatusUpdate(BaseModel):
    status: str
    processed_at: Optional[datetime] = None


class EvidenceOut(BaseModel):
    url: str
    public_id: str
    resource_type: str
    file_name: str
    model_config = ConfigDict(from_attributes=True)


class DispositionSummaryOut(BaseModel):
    disposition_id: int
    tenant_email: Optional[str] = None
    tenant_name: str
    property_name: str
    original_amount: Decimal
    total_deductions: Decimal
    refund_amount: Decimal
    lines: list[str]
    model_config = ConfigDict(from_attributes=True)


class RefundAfterBalanceIn(BaseModel):
    original_deposit: Decimal
    deductions: Decimal = Decimal("0")
    outstanding_balance: Decimal = Decimal("0")
    apply_to_balance: bool = False


class RefundAfterBalanceOut(BaseModel):
    refund_amount: Decimal
    applied_to_balance: Decimal
    model_config = ConfigDict(from_attributes=True)


# -------------------- Turnover --------------------

class ChecklistCreate(BaseModel):
    unit_id: int
    lease_id: Optional[int] = None


class ChecklistItemUpdate(BaseModel):
    item: str
    completed: bool = True
    notes: Optional[str] = None


class TurnoverChecklistOut(BaseModel):
    id: int
    unit_id: int
    lease_id: Optional[int] = None
    landlord_id: Optional[int] = None

    deposit_processed: bool
    deposit_processed_at: Optional[datetime] = None
    keys_collected: bool
    keys_collected_at: Optional[datetime] = None
    unit_inspected: bool
    unit_inspected_at: Optional[datetime] = None
    cleaning_completed: bool
    cleaning_completed_at: Optional[datetime] = None
    repairs_completed: bool
    repairs_completed_at: Optional[datetime] = None

    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class UnitAvailabilityIn(BaseModel):
    is_available: bool
    force: bool = False
    available_from: Optional[date] = None


class UnitOut(BaseModel):
    id: int
    property_id: int
    name: str
    is_available: bool
    available_from: Optional[date] = None
    model_config = ConfigDict(from_attributes=True)


# -------------------- Offboarding --------------------

class OffboardingDepositIn(BaseModel):
    original_amount: Decimal
    deductions: list[DeductionIn] = Field(default_factory=list)
    refund_method: str = "pending"
    notes: Optional[str] = None


class OffboardingIn(BaseModel):
    lease_id: int
    departure_type: str
    departure_date: date
    notes: Optional[str] = None
    mark_unit_available: bool = False
    force_unit_available: bool = False
    deposit: Optional[OffboardingDepositIn] = None


class StepOutcomeOut(BaseModel):
    step: str
    status: str  # ok | failed | skipped
    entity_id: Optional[int] = None
    error: Optional[str] = None


class OffboardingResultOut(BaseModel):
    lease_id: int
    status: str  # success | partial | failure
    success: bool
    lease_terminated: bool
    departure_recorded: bool
    deposit_disposition_id: Optional[int] = None
    tenant_history_id: Optional[int] = None
    turnover_checklist_id: Optional[int] = None
    unit_marked_available: bool
    errors: list[str] = Field(default_factory=list)
    steps: list[StepOutcomeOut] = Field(default_factory=list)


class OffboardingStatusOut(BaseModel):
    lease_terminated: bool
    departure_recorded: bool
    deposit_disposition_created: bool
    history_created: bool
    checklist_created: bool


# -------------------- Tenant history --------------------

class TenantHistoryOut(BaseModel):
    id: int
    unit_id: int
    property_id: int
    landlord_id: int
    tenant_id: int
    lease_id: int
    departure_id: Optional[int] = None
    deposit_disposition_id: Optional[int] = None

    tenant_name: str
    tenant_email: Optional[str] = None
    tenant_phone: Optional[str] = None

    lease_start_date: date
    lease_end_date: date
    rent_amount: Decimal

    departure_type: str
    departure_date: date

    deposit_amount: Optional[Decimal] = None
    deposit_refunded: Optional[Decimal] = None
    deposit_deducted: Optional[Decimal] = None
    was_evicted: bool
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class TenantHistoryPageOut(BaseModel):
    items: list[TenantHistoryOut]
    total: int
    page: int
    limit: int
