# backend/tenancy/domain/lifecycle.py
from __future__ import annotations

from enum import Enum
from typing import Any

from .errors import ValidationError


class LeaseStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    TERMINATED = "terminated"


class DepartureType(str, Enum):
    EVICTION = "eviction"
    VOLUNTARY = "voluntary"
    LEASE_END = "lease_end"
    MUTUAL_AGREEMENT = "mutual_agreement"


class ChecklistItem(str, Enum):
    DEPOSIT_PROCESSED = "deposit_processed"
    KEYS_COLLECTED = "keys_collected"
    UNIT_INSPECTED = "unit_inspected"
    CLEANING_COMPLETED = "cleaning_completed"
    REPAIRS_COMPLETED = "repairs_completed"


CHECKLIST_ITEMS: tuple[ChecklistItem, ...] = tuple(ChecklistItem)


def parse_departure_type(value: Any) -> DepartureType:
    try:
        return DepartureType(getattr(value, "value", value))
    except ValueError:
        raise ValidationError(f"Unknown departure type: {value!r}") from None


def parse_checklist_item(value: Any) -> ChecklistItem:
    try:
        return ChecklistItem(getattr(value, "value", value))
    except ValueError:
        raise ValidationError(f"Unknown checklist item: {value!r}") from None


def missing_checklist_items(checklist: Any) -> list[str]:
    """Names of checklist flags that are still false (works on rows or plain objects)."""
    return [i.value for i in CHECKLIST_ITEMS if not bool(getattr(checklist, i.value, False))]


def checklist_is_complete(checklist: Any) -> bool:
    return not missing_checklist_items(checklist)
