from __future__ import annotations

from decimal import Decimal

import pytest

from tenancy.domain.deposits import (
    DeductionInput,
    calculate_refund_after_balance,
    compute_disposition_totals,
    ensure_refund_progression,
    RefundStatus,
)
from tenancy.domain.errors import ExceedsDepositError, InvalidTransitionError, ValidationError


def test_refund_after_balance_applies_to_balance():
    r = calculate_refund_after_balance(1000, 200, 500, True)
    assert r.refund_amount == Decimal("300")
    assert r.applied_to_balance == Decimal("500")


def test_refund_after_balance_no_balance_owed():
    r = calculate_refund_after_balance(1000, 200, 0, True)
    assert r.refund_amount == Decimal("800")
    assert r.applied_to_balance == Decimal("0")


def test_refund_after_balance_not_applied():
    r = calculate_refund_after_balance(1000, 200, 500, False)
    assert r.refund_amount == Decimal("800")
    assert r.applied_to_balance == Decimal("0")


def test_refund_after_balance_balance_exceeds_available():
    r = calculate_refund_after_balance(1000, 200, 5000, True)
    assert r.refund_amount == Decimal("0")
    assert r.applied_to_balance == Decimal("800")


def test_totals_refund_is_original_minus_deductions():
    t = compute_disposition_totals(
        "1500.00",
        [
            {"category": "cleaning", "amount": "150.25", "description": "deep clean"},
            DeductionInput(category="damages", amount=Decimal("349.75"), description="door"),
        ],
    )
    assert t.total_deductions == Decimal("500.00")
    assert t.refund_amount == Decimal("1000.00")
    assert [d.category.value for d in t.deductions] == ["cleaning", "damages"]


def test_totals_deductions_equal_to_deposit_leave_zero_refund():
    t = compute_disposition_totals(800, [{"category": "unpaid_rent", "amount": 800, "description": "March"}])
    assert t.refund_amount == Decimal("0.00")


def test_totals_no_deductions():
    t = compute_disposition_totals(1000, [])
    assert t.total_deductions == Decimal("0.00")
    assert t.refund_amount == Decimal("1000.00")


def test_totals_exceeding_deposit():
    with pytest.raises(ExceedsDepositError) as ei:
        compute_disposition_totals(
            500,
            [
                {"category": "damages", "amount": 300, "description": "wall"},
                {"category": "repairs", "amount": 300, "description": "sink"},
            ],
        )
    assert ei.value.total_deductions == Decimal("600.00")
    assert ei.value.original_amount == Decimal("500.00")
    assert ei.value.http_status == 400


@pytest.mark.parametrize(
    "bad",
    [
        {"category": "damages", "amount": 10},
        {"category": "damages", "amount": 10, "description": "   "},
        {"category": "", "amount": 10, "description": "x"},
        {"category": "damages", "description": "x"},
        {"category": "pets", "amount": 10, "description": "x"},
        {"category": "damages", "amount": 0, "description": "x"},
        {"category": "damages", "amount": -5, "description": "x"},
        {"category": "damages", "amount": "ten", "description": "x"},
    ],
)
def test_malformed_deductions_are_rejected(bad):
    with pytest.raises(ValidationError):
        compute_disposition_totals(1000, [bad])


def test_negative_original_amount_rejected():
    with pytest.raises(ValidationError):
        compute_disposition_totals(-1, [])


def test_refund_progression_forward_and_same():
    assert ensure_refund_progression("pending", "processing") == RefundStatus.PROCESSING
    assert ensure_refund_progression("pending", "completed") == RefundStatus.COMPLETED
    assert ensure_refund_progression("processing", "processing") is None


def test_refund_progression_backwards_rejected():
    with pytest.raises(InvalidTransitionError):
        ensure_refund_progression("completed", "pending")
