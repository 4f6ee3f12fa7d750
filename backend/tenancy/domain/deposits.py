# backend/tenancy/domain/deposits.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Optional, Sequence

from .errors import ExceedsDepositError, InvalidTransitionError, ValidationError

CENT = Decimal("0.01")


class DeductionCategory(str, Enum):
    DAMAGES = "damages"
    UNPAID_RENT = "unpaid_rent"
    CLEANING = "cleaning"
    REPAIRS = "repairs"
    OTHER = "other"


class RefundMethod(str, Enum):
    CHECK = "check"
    ACH = "ach"
    PENDING = "pending"


class RefundStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"


REFUND_STATUS_ORDER = [RefundStatus.PENDING, RefundStatus.PROCESSING, RefundStatus.COMPLETED]


def to_money(v: Any, *, field_name: str = "amount") -> Decimal:
    """Coerce int/float/str/Decimal to a 2-place Decimal."""
    if isinstance(v, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        d = v if isinstance(v, Decimal) else Decimal(str(v))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field_name} must be a number") from None
    if not d.is_finite():
        raise ValidationError(f"{field_name} must be finite")
    return d.quantize(CENT)


@dataclass(frozen=True)
class DeductionInput:
    category: str
    amount: Any
    description: str
    evidence_urls: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class ValidDeduction:
    category: DeductionCategory
    amount: Decimal
    description: str
    evidence_urls: tuple[str, ...]


@dataclass(frozen=True)
class DispositionTotals:
    original_amount: Decimal
    total_deductions: Decimal
    refund_amount: Decimal
    deductions: tuple[ValidDeduction, ...]


def _field(d: Any, name: str) -> Any:
    if isinstance(d, dict):
        return d.get(name)
    return getattr(d, name, None)


def validate_deduction(d: Any) -> ValidDeduction:
    category = _field(d, "category")
    amount = _field(d, "amount")
    description = _field(d, "description")

    if not category or amount is None or not (description or "").strip():
        raise ValidationError("Each deduction requires category, amount, and description")

    try:
        cat = DeductionCategory(getattr(category, "value", category))
    except ValueError:
        raise ValidationError(f"Unknown deduction category: {category!r}") from None

    amt = to_money(amount)
    if amt <= 0:
        raise ValidationError("Deduction amount must be positive")

    urls = _field(d, "evidence_urls") or ()
    return ValidDeduction(
        category=cat,
        amount=amt,
        description=str(description).strip(),
        evidence_urls=tuple(str(u) for u in urls),
    )


def compute_disposition_totals(original_amount: Any, deductions: Iterable[Any]) -> DispositionTotals:
    """
    Validate every deduction, then:
        total_deductions = sum(amounts)
        refund_amount    = original_amount - total_deductions   (never negative)
    Raises before anything is persisted.
    """
    original = to_money(original_amount, field_name="original_amount")
    if original < 0:
        raise ValidationError("original_amount cannot be negative")

    items = tuple(validate_deduction(d) for d in deductions)
    total = sum((i.amount for i in items), Decimal("0")).quantize(CENT)

    if total > original:
        raise ExceedsDepositError(total, original)

    return DispositionTotals(
        original_amount=original,
        total_deductions=total,
        refund_amount=(original - total).quantize(CENT),
        deductions=items,
    )


@dataclass(frozen=True)
class RefundAfterBalance:
    refund_amount: Decimal
    applied_to_balance: Decimal

    def as_dict(self) -> dict:
        return {"refund_amount": self.refund_amount, "applied_to_balance": self.applied_to_balance}


def calculate_refund_after_balance(
    original_deposit: Any,
    deductions: Any,
    outstanding_balance: Any,
    apply_to_balance: bool,
) -> RefundAfterBalance:
    available = to_money(original_deposit) - to_money(deductions)
    balance = to_money(outstanding_balance)

    if not apply_to_balance or balance <= 0:
        return RefundAfterBalance(refund_amount=available, applied_to_balance=Decimal("0.00"))

    applied = min(available, balance)
    return RefundAfterBalance(refund_amount=available - applied, applied_to_balance=applied)


def parse_refund_status(value: Any) -> RefundStatus:
    try:
        return RefundStatus(getattr(value, "value", value))
    except ValueError:
        raise ValidationError(f"Unknown refund status: {value!r}") from None


def ensure_refund_progression(current: Any, new: Any) -> Optional[RefundStatus]:
    """
    Refund status only moves forward: pending -> processing -> completed.
    Returns the target status, or None when it equals the current one.
    """
    cur = parse_refund_status(current)
    nxt = parse_refund_status(new)
    if nxt == cur:
        return None
    if REFUND_STATUS_ORDER.index(nxt) < REFUND_STATUS_ORDER.index(cur):
        raise InvalidTransitionError("refund status", cur.value, nxt.value)
    return nxt
