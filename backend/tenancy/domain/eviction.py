# backend/tenancy/domain/eviction.py
from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Union

from .errors import InvalidTransitionError, ValidationError


class NoticeType(str, Enum):
    THREE_DAY = "3-day"
    SEVEN_DAY = "7-day"
    THIRTY_DAY = "30-day"


class EvictionStatus(str, Enum):
    SERVED = "served"
    CURE_PERIOD = "cure_period"
    CURED = "cured"
    EXPIRED = "expired"
    FILED_WITH_COURT = "filed_with_court"
    COMPLETED = "completed"


NOTICE_DAYS: dict[NoticeType, int] = {
    NoticeType.THREE_DAY: 3,
    NoticeType.SEVEN_DAY: 7,
    NoticeType.THIRTY_DAY: 30,
}

# Adjacency list; states with no successors are terminal.
EVICTION_STATUS_FLOW: dict[EvictionStatus, frozenset[EvictionStatus]] = {
    EvictionStatus.SERVED: frozenset(
        {EvictionStatus.CURE_PERIOD, EvictionStatus.CURED, EvictionStatus.EXPIRED}
    ),
    EvictionStatus.CURE_PERIOD: frozenset({EvictionStatus.CURED, EvictionStatus.EXPIRED}),
    EvictionStatus.CURED: frozenset(),
    EvictionStatus.EXPIRED: frozenset({EvictionStatus.FILED_WITH_COURT}),
    EvictionStatus.FILED_WITH_COURT: frozenset({EvictionStatus.COMPLETED}),
    EvictionStatus.COMPLETED: frozenset(),
}

if set(EVICTION_STATUS_FLOW) != set(EvictionStatus) or set(NOTICE_DAYS) != set(NoticeType):
    raise RuntimeError("eviction tables must cover every status and notice type")


StatusLike = Union[EvictionStatus, str]


def parse_status(value: StatusLike) -> EvictionStatus:
    try:
        return EvictionStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown eviction status: {value!r}") from None


def parse_notice_type(value: Union[NoticeType, str]) -> NoticeType:
    try:
        return NoticeType(value)
    except ValueError:
        raise ValidationError(f"Unknown notice type: {value!r}") from None


def is_terminal(status: StatusLike) -> bool:
    return not EVICTION_STATUS_FLOW[parse_status(status)]


def allowed_next_statuses(status: StatusLike) -> list[EvictionStatus]:
    nxt = EVICTION_STATUS_FLOW[parse_status(status)]
    return [s for s in EvictionStatus if s in nxt]


def is_valid_status_transition(current: StatusLike, new: StatusLike) -> bool:
    """
    Pure lookup in EVICTION_STATUS_FLOW.
    Unknown status strings are never valid transitions.
    """
    try:
        cur = EvictionStatus(current)
        nxt = EvictionStatus(new)
    except ValueError:
        return False
    return nxt in EVICTION_STATUS_FLOW[cur]


def ensure_status_transition(current: StatusLike, new: StatusLike) -> EvictionStatus:
    """Return the parsed target status or raise InvalidTransitionError."""
    nxt = parse_status(new)
    if not is_valid_status_transition(current, nxt):
        raise InvalidTransitionError("eviction notice", str(getattr(current, "value", current)), nxt.value)
    return nxt


def calculate_deadline_date(serve_date: Union[date, datetime], notice_type: Union[NoticeType, str]) -> date:
    """
    Calendar-day addition: serve_date + NOTICE_DAYS[notice_type].
    A datetime is reduced to its date first; no timezone handling.
    """
    d = serve_date.date() if isinstance(serve_date, datetime) else serve_date
    return d + timedelta(days=NOTICE_DAYS[parse_notice_type(notice_type)])
