# backend/tests/conftest.py
from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

import pytest

_DB_PATH = os.path.join(tempfile.gettempdir(), f"tenancy_test_{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ.setdefault("APP_ENV", "test")

from tenancy.db import Base, SessionLocal, engine  # noqa: E402
from tenancy.models import AppUser, Lease, OrgMembership, Organization, Property, Tenant, Unit  # noqa: E402


@dataclass
class Tenancy:
    org_id: int
    org_slug: str
    landlord_id: Optional[int]
    property_id: int
    unit_id: int
    tenant_id: int
    lease_id: int


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def make_tenancy(db) -> Callable[..., Tenancy]:
    """
    Builds org -> landlord -> property -> unit -> tenant -> lease.
    with_landlord=False leaves the property without a landlord.
    """
    counter = {"n": 0}

    def _make(
        *,
        org_slug: str = "acme",
        with_landlord: bool = True,
        lease_status: str = "active",
        start_date: date = date(2024, 1, 1),
        deposit_amount: str = "1000.00",
        unit_available: bool = False,
    ) -> Tenancy:
        counter["n"] += 1
        n = counter["n"]

        org = db.query(Organization).filter(Organization.slug == org_slug).one_or_none()
        if org is None:
            org = Organization(slug=org_slug, name=org_slug)
            db.add(org)
            db.commit()

        landlord_id = None
        if with_landlord:
            email = f"landlord@{org_slug}.local"
            user = db.query(AppUser).filter(AppUser.email == email).one_or_none()
            if user is None:
                user = AppUser(email=email, display_name="Landlord")
                db.add(user)
                db.commit()
                db.add(OrgMembership(org_id=org.id, user_id=user.id, role="owner"))
                db.commit()
            landlord_id = user.id

        prop = Property(
            org_id=org.id,
            landlord_id=landlord_id,
            name=f"Property {n}",
            address=f"{n} Main St",
            city="Detroit",
            state="MI",
            zip="48201",
        )
        db.add(prop)
        db.commit()

        unit = Unit(org_id=org.id, property_id=prop.id, name=f"U{n}", is_available=unit_available)
        tenant = Tenant(org_id=org.id, full_name=f"Tenant {n}", email=f"tenant{n}@example.com", phone="555-0100")
        db.add_all([unit, tenant])
        db.commit()

        lease = Lease(
            org_id=org.id,
            unit_id=unit.id,
            tenant_id=tenant.id,
            start_date=start_date,
            rent_amount=Decimal("1200.00"),
            deposit_amount=Decimal(deposit_amount),
            status=lease_status,
        )
        db.add(lease)
        db.commit()

        return Tenancy(
            org_id=org.id,
            org_slug=org.slug,
            landlord_id=landlord_id,
            property_id=prop.id,
            unit_id=unit.id,
            tenant_id=tenant.id,
            lease_id=lease.id,
        )

    return _make

