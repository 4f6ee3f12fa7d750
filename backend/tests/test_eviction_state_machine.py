from __future__ import annotations

from datetime import date, datetime

import pytest

from tenancy.domain.errors import InvalidTransitionError, ValidationError
from tenancy.domain.eviction import (
    EVICTION_STATUS_FLOW,
    EvictionStatus,
    NoticeType,
    allowed_next_statuses,
    calculate_deadline_date,
    ensure_status_transition,
    is_terminal,
    is_valid_status_transition,
)


def test_served_to_cure_period_is_valid():
    assert is_valid_status_transition("served", "cure_period") is True


def test_completed_to_served_is_rejected():
    assert is_valid_status_transition("completed", "served") is False


@pytest.mark.parametrize(
    "current,new",
    [
        ("served", "cured"),
        ("served", "expired"),
        ("cure_period", "cured"),
        ("cure_period", "expired"),
        ("expired", "filed_with_court"),
        ("filed_with_court", "completed"),
    ],
)
def test_listed_transitions_are_valid(current, new):
    assert is_valid_status_transition(current, new)


@pytest.mark.parametrize(
    "current,new",
    [
        ("served", "completed"),
        ("served", "served"),
        ("cure_period", "served"),
        ("expired", "cured"),
        ("filed_with_court", "served"),
        ("cured", "expired"),
    ],
)
def test_unlisted_transitions_are_rejected(current, new):
    assert not is_valid_status_transition(current, new)


def test_unknown_status_is_never_valid():
    assert is_valid_status_transition("served", "appealed") is False
    assert is_valid_status_transition("nope", "served") is False


def test_every_status_has_an_entry():
    assert set(EVICTION_STATUS_FLOW) == set(EvictionStatus)


def test_terminal_states():
    assert is_terminal("cured")
    assert is_terminal(EvictionStatus.COMPLETED)
    assert not is_terminal("served")
    assert allowed_next_statuses("cured") == []


def test_ensure_status_transition_raises_with_context():
    with pytest.raises(InvalidTransitionError) as ei:
        ensure_status_transition("completed", "served")
    assert ei.value.current == "completed"
    assert ei.value.requested == "served"
    assert ei.value.http_status == 409


def test_ensure_status_transition_rejects_unknown_target():
    with pytest.raises(ValidationError):
        ensure_status_transition("served", "appealed")


def test_deadline_seven_day():
    assert calculate_deadline_date(date(2024, 1, 1), "7-day") == date(2024, 1, 8)


def test_deadline_crosses_month_and_leap_day():
    assert calculate_deadline_date(date(2024, 2, 27), NoticeType.THREE_DAY) == date(2024, 3, 1)
    assert calculate_deadline_date(date(2024, 2, 1), "30-day") == date(2024, 3, 2)


def test_deadline_accepts_datetime():
    assert calculate_deadline_date(datetime(2024, 1, 1, 23, 59), "3-day") == date(2024, 1, 4)


def test_deadline_unknown_notice_type():
    with pytest.raises(ValidationError):
        calculate_deadline_date(date(2024, 1, 1), "14-day")
