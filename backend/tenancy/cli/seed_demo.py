# backend/tenancy/cli/seed_demo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from tenancy.db import Base, SessionLocal, engine
from tenancy.domain.lifecycle import LeaseStatus
from tenancy.models import AppUser, Lease, OrgMembership, Organization, Property, Tenant, Unit


@dataclass(frozen=True)
class SeedResult:
    org_slug: str
    user_email: str
    property_id: Optional[int]
    unit_id: Optional[int]
    lease_id: Optional[int]


def _get_or_create_org(db: Session, slug: str, name: str) -> Organization:
    row = db.query(Organization).filter(Organization.slug == slug).one_or_none()
    if row:
        return row
    row = Organization(slug=slug, name=name)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _get_or_create_user(db: Session, email: str, display_name: str) -> AppUser:
    row = db.query(AppUser).filter(AppUser.email == email).one_or_none()
    if row:
        return row
    row = AppUser(email=email, display_name=display_name)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _ensure_membership(db: Session, org_id: int, user_id: int, role: str = "owner") -> None:
    existing = db.query(OrgMembership).filter(
        OrgMembership.org_id == int(org_id),
        OrgMembership.user_id == int(user_id),
    ).one_or_none()
    if existing:
        return
    db.add(OrgMembership(org_id=int(org_id), user_id=int(user_id), role=str(role)))
    db.commit()


def _seed_tenancy(db: Session, *, org_id: int, landlord_id: int) -> tuple[int, int, int]:
    prop = (
        db.query(Property)
        .filter(Property.org_id == int(org_id), Property.address == "123 Demo St")
        .one_or_none()
    )
    if prop is None:
        prop = Property(
            org_id=int(org_id),
            landlord_id=int(landlord_id),
            name="Demo Duplex",
            address="123 Demo St",
            city="Detroit",
            state="MI",
            zip="48201",
        )
        db.add(prop)
        db.commit()
        db.refresh(prop)

    unit = db.query(Unit).filter(Unit.property_id == prop.id, Unit.name == "A").one_or_none()
    if unit is None:
        unit = Unit(org_id=int(org_id), property_id=prop.id, name="A", is_available=False)
        db.add(unit)
        db.commit()
        db.refresh(unit)

    lease = (
        db.query(Lease)
        .filter(Lease.unit_id == unit.id, Lease.status == LeaseStatus.ACTIVE.value)
        .one_or_none()
    )
    if lease is None:
        tenant = Tenant(org_id=int(org_id), full_name="Jordan Demo", email="jordan@demo.local", phone="555-0100")
        db.add(tenant)
        db.commit()
        db.refresh(tenant)

        lease = Lease(
            org_id=int(org_id),
            unit_id=unit.id,
            tenant_id=tenant.id,
            start_date=date(date.today().year, 1, 1),
            rent_amount=Decimal("1200.00"),
            deposit_amount=Decimal("1200.00"),
            status=LeaseStatus.ACTIVE.value,
        )
        db.add(lease)
        db.commit()
        db.refresh(lease)

    return int(prop.id), int(unit.id), int(lease.id)


def seed_demo(
    *,
    org_slug: str = "demo",
    org_name: str = "demo",
    user_email: str = "owner@demo.local",
    user_name: str = "Owner",
    create_tables: bool = False,
    create_sample_tenancy: bool = True,
) -> SeedResult:
    """
    Idempotent local bootstrap: org, owner (who is also the landlord), and
    optionally one property with a unit under an active lease.
    """
    if create_tables:
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        org = _get_or_create_org(db, org_slug, org_name)
        user = _get_or_create_user(db, user_email, user_name)
        _ensure_membership(db, org.id, user.id, role="owner")

        prop_id = unit_id = lease_id = None
        if create_sample_tenancy:
            prop_id, unit_id, lease_id = _seed_tenancy(db, org_id=org.id, landlord_id=user.id)

        return SeedResult(
            org_slug=org.slug,
            user_email=user.email,
            property_id=prop_id,
            unit_id=unit_id,
            lease_id=lease_id,
        )
    finally:
        db.close()
