from __future__ import annotations

from datetime import date

import pytest

from tenancy.domain.errors import NotFoundError, ValidationError
from tenancy.services import departure_service, eviction_service


def test_record_departure_copies_lease_links(db, make_tenancy):
    t = make_tenancy()
    row = departure_service.record_departure(
        db,
        org_id=t.org_id,
        lease_id=t.lease_id,
        departure_type="voluntary",
        departure_date=date(2024, 6, 30),
        notes="moved for work",
    )
    assert row.tenant_id == t.tenant_id
    assert row.unit_id == t.unit_id
    assert row.landlord_id == t.landlord_id
    assert row.departure_type == "voluntary"


def test_record_departure_with_notice_from_same_lease(db, make_tenancy):
    t = make_tenancy()
    notice = eviction_service.create_notice(
        db, org_id=t.org_id, lease_id=t.lease_id, notice_type="3-day", reason="rent"
    )
    row = departure_service.record_departure(
        db,
        org_id=t.org_id,
        lease_id=t.lease_id,
        departure_type="eviction",
        departure_date=date(2024, 6, 30),
        eviction_notice_id=notice.id,
    )
    assert row.eviction_notice_id == notice.id


def test_record_departure_rejects_notice_from_other_lease(db, make_tenancy):
    a = make_tenancy()
    b = make_tenancy()
    notice = eviction_service.create_notice(
        db, org_id=a.org_id, lease_id=a.lease_id, notice_type="3-day", reason="rent"
    )
    with pytest.raises(NotFoundError):
        departure_service.record_departure(
            db,
            org_id=b.org_id,
            lease_id=b.lease_id,
            departure_type="eviction",
            departure_date=date(2024, 6, 30),
            eviction_notice_id=notice.id,
        )


def test_record_departure_unknown_type(db, make_tenancy):
    t = make_tenancy()
    with pytest.raises(ValidationError):
        departure_service.record_departure(
            db, org_id=t.org_id, lease_id=t.lease_id, departure_type="abandoned", departure_date=date(2024, 1, 2)
        )


def test_list_departures(db, make_tenancy):
    t = make_tenancy()
    for d in (date(2024, 1, 5), date(2024, 2, 5)):
        departure_service.record_departure(
            db, org_id=t.org_id, lease_id=t.lease_id, departure_type="lease_end", departure_date=d
        )
    rows = departure_service.list_departures(db, org_id=t.org_id, lease_id=t.lease_id)
    assert [r.departure_date for r in rows] == [date(2024, 2, 5), date(2024, 1, 5)]
