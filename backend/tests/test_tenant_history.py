from __future__ import annotations

from datetime import date

import pytest

from tenancy.domain.errors import ValidationError
from tenancy.domain.offboarding import OffboardingParams
from tenancy.services.offboarding_service import OffboardingService
from tenancy.services.tenant_history import query_history


def _offboard(db, t, departure_type: str, when: date):
    OffboardingService().execute_offboarding(
        db,
        org_id=t.org_id,
        params=OffboardingParams(lease_id=t.lease_id, departure_type=departure_type, departure_date=when),
    )


@pytest.fixture
def history(db, make_tenancy):
    a = make_tenancy()
    b = make_tenancy()
    c = make_tenancy()
    _offboard(db, a, "voluntary", date(2024, 1, 31))
    _offboard(db, b, "eviction", date(2024, 3, 15))
    _offboard(db, c, "lease_end", date(2024, 6, 30))
    return a, b, c


def test_newest_departure_first(db, history):
    a, b, c = history
    page = query_history(db, org_id=a.org_id)
    assert page.total == 3
    assert [r.lease_id for r in page.rows] == [c.lease_id, b.lease_id, a.lease_id]


def test_filter_by_departure_type(db, history):
    a, b, _ = history
    page = query_history(db, org_id=a.org_id, departure_type="eviction")
    assert page.total == 1
    assert page.rows[0].lease_id == b.lease_id
    assert page.rows[0].was_evicted is True


def test_filter_by_date_range(db, history):
    a, b, _ = history
    page = query_history(db, org_id=a.org_id, date_from=date(2024, 1, 1), date_to=date(2024, 3, 15))
    assert {r.lease_id for r in page.rows} == {a.lease_id, b.lease_id}


def test_search_matches_name_or_email(db, history):
    a, _, _ = history
    page = query_history(db, org_id=a.org_id, search="TENANT 1")
    assert [r.lease_id for r in page.rows] == [a.lease_id]
    page = query_history(db, org_id=a.org_id, search="example.com")
    assert page.total == 3


def test_paging(db, history):
    a, b, c = history
    p1 = query_history(db, org_id=a.org_id, page=1, limit=2)
    p2 = query_history(db, org_id=a.org_id, page=2, limit=2)
    assert p1.total == p2.total == 3
    assert [r.lease_id for r in p1.rows] == [c.lease_id, b.lease_id]
    assert [r.lease_id for r in p2.rows] == [a.lease_id]


def test_limit_is_capped(db, history):
    a, _, _ = history
    assert query_history(db, org_id=a.org_id, limit=10_000).limit == 200


def test_filter_by_unit(db, history):
    a, _, _ = history
    page = query_history(db, org_id=a.org_id, unit_id=a.unit_id)
    assert [r.lease_id for r in page.rows] == [a.lease_id]


def test_scoped_to_org(db, history, make_tenancy):
    other = make_tenancy(org_slug="other")
    assert query_history(db, org_id=other.org_id).total == 0


def test_unknown_departure_type_filter(db, history):
    a, _, _ = history
    with pytest.raises(ValidationError):
        query_history(db, org_id=a.org_id, departure_type="vanished")
