from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

revision = "0001_tenancy_lifecycle"
down_revision = None
branch_labels = None
depends_on = None

MONEY = sa.Numeric(12, 2)


def _insp():
    return inspect(op.get_bind())


def _has_table(name: str) -> bool:
    return name in _insp().get_table_names()


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    # -------------------------
    # Orgs / users / RBAC
    # -------------------------
    if not _has_table("organizations"):
        op.create_table(
            "organizations",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("slug", sa.String(length=80), nullable=False),
            sa.Column("name", sa.String(length=160), nullable=False),
            _created_at(),
        )
        op.create_index("ix_organizations_slug", "organizations", ["slug"], unique=True)

    if not _has_table("app_users"):
        op.create_table(
            "app_users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String(length=200), nullable=False),
            sa.Column("display_name", sa.String(length=160), nullable=True),
            _created_at(),
        )
        op.create_index("ix_app_users_email", "app_users", ["email"], unique=True)

    if not _has_table("org_memberships"):
        op.create_table(
            "org_memberships",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=False),
            sa.Column("role", sa.String(length=20), nullable=False, server_default="owner"),
            _created_at(),
            sa.UniqueConstraint("org_id", "user_id", name="uq_org_memberships_org_user"),
        )
        op.create_index("ix_org_memberships_org_id", "org_memberships", ["org_id"])
        op.create_index("ix_org_memberships_user_id", "org_memberships", ["user_id"])

    if not _has_table("audit_events"):
        op.create_table(
            "audit_events",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
            sa.Column("actor_user_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=True),
            sa.Column("action", sa.String(length=80), nullable=False),
            sa.Column("entity_type", sa.String(length=80), nullable=False),
            sa.Column("entity_id", sa.String(length=80), nullable=False),
            sa.Column("before_json", sa.Text(), nullable=True),
            sa.Column("after_json", sa.Text(), nullable=True),
            _created_at(),
        )
        op.create_index("ix_audit_events_org_id", "audit_events", ["org_id"])

    # -------------------------
    # Portfolio
    # -------------------------
    if not _has_table("properties"):
        op.create_table(
            "properties",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
            sa.Column(
                "landlord_id", sa.Integer(), sa.ForeignKey("app_users.id", ondelete="SET NULL"), nullable=True
            ),
            sa.Column("name", sa.String(length=160), nullable=False),
            sa.Column("address", sa.String(length=255), nullable=False),
            sa.Column("city", sa.String(length=120), nullable=False),
            sa.Column("state", sa.String(length=2), nullable=False, server_default="MI"),
            sa.Column("zip", sa.String(length=10), nullable=False),
            _created_at(),
        )
        op.create_index("ix_properties_org_id", "properties", ["org_id"])
        op.create_index("ix_properties_landlord_id", "properties", ["landlord_id"])

    if not _has_table("units"):
        op.create_table(
            "units",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
            sa.Column(
                "property_id", sa.Integer(), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
            ),
            sa.Column("name", sa.String(length=80), nullable=False),
            sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.text("false")),
            sa.Column("available_from", sa.Date(), nullable=True),
            _created_at(),
            sa.UniqueConstraint("property_id", "name", name="uq_units_property_name"),
        )
        op.create_index("ix_units_org_id", "units", ["org_id"])
        op.create_index("ix_units_property_id", "units", ["property_id"])

    if not _has_table("tenants"):
        op.create_table(
            "tenants",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
            sa.Column("full_name", sa.String(length=200), nullable=False),
            sa.Column("phone", sa.String(length=40), nullable=True),
            sa.Column("email", sa.String(length=200), nullable=True),
            _created_at(),
        )
        op.create_index("ix_tenants_org_id", "tenants", ["org_id"])

    if not _has_table("leases"):
        op.create_table(
            "leases",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
            sa.Column("unit_id", sa.Integer(), sa.ForeignKey("units.id", ondelete="CASCADE"), nullable=False),
            sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False),
            sa.Column("start_date", sa.Date(), nullable=False),
            sa.Column("end_date", sa.Date(), nullable=True),
            sa.Column("rent_amount", MONEY, nullable=False, server_default="0"),
            sa.Column("deposit_amount", MONEY, nullable=False, server_default="0"),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
            sa.Column("termination_reason", sa.String(length=40), nullable=True),
            sa.Column("terminated_at", sa.Date(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            _created_at(),
        )
        op.create_index("ix_leases_org_id", "leases", ["org_id"])
        op.create_index("ix_leases_unit_id", "leases", ["unit_id"])
        op.create_index("ix_leases_tenant_id", "leases", ["tenant_id"])
        op.create_index("ix_leases_unit_status", "leases", ["unit_id", "status"])

    if not _has_table("workflow_events"):
        op.create_table(
            "workflow_events",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
            sa.Column("lease_id", sa.Integer(), sa.ForeignKey("leases.id"), nullable=True),
            sa.Column("actor_user_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=True),
            sa.Column("event_type", sa.String(length=80), nullable=False),
            sa.Column("payload_json", sa.Text(), nullable=True),
            _created_at(),
        )
        op.create_index("ix_workflow_events_org_id", "workflow_events", ["org_id"])
        op.create_index("ix_workflow_events_lease_id", "workflow_events", ["lease_id"])
        op.create_index("ix_workflow_events_event_type", "workflow_events", ["event_type"])

    # -------------------------
    # Move-out lifecycle
    # -------------------------
    if not _has_table("eviction_notices"):
        op.create_table(
            "eviction_notices",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
            sa.Column("lease_id", sa.Integer(), sa.ForeignKey("leases.id", ondelete="CASCADE"), nullable=False),
            sa.Column("notice_type", sa.String(length=10), nullable=False),
            sa.Column("status", sa.String(length=30), nullable=False, server_default="served"),
            sa.Column("serve_date", sa.Date(), nullable=False),
            sa.Column("deadline_date", sa.Date(), nullable=False),
            sa.Column("amount_owed", MONEY, nullable=True),
            sa.Column("reason", sa.Text(), nullable=False),
            sa.Column("additional_notes", sa.Text(), nullable=True),
            sa.Column("status_changed_at", sa.DateTime(), nullable=True),
            _created_at(),
        )
        op.create_index("ix_eviction_notices_org_id", "eviction_notices", ["org_id"])
        op.create_index("ix_eviction_notices_lease_id", "eviction_notices", ["lease_id"])
        op.create_index("ix_eviction_notices_status", "eviction_notices", ["status"])

    if not _has_table("tenant_departures"):
        op.create_table(
            "tenant_departures",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
            sa.Column("lease_id", sa.Integer(), sa.ForeignKey("leases.id", ondelete="CASCADE"), nullable=False),
            sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id"), nullable=False),
            sa.Column("unit_id", sa.Integer(), sa.ForeignKey("units.id"), nullable=False),
            sa.Column("landlord_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=True),
            sa.Column("departure_type", sa.String(length=30), nullable=False),
            sa.Column("departure_date", sa.Date(), nullable=False),
            sa.Column(
                "eviction_notice_id",
                sa.Integer(),
                sa.ForeignKey("eviction_notices.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("notes", sa.Text(), nullable=True),
            _created_at(),
        )
        op.create_index("ix_tenant_departures_org_id", "tenant_departures", ["org_id"])
        op.create_index("ix_tenant_departures_lease_id", "tenant_departures", ["lease_id"])
        op.create_index("ix_tenant_departures_tenant_id", "tenant_departures", ["tenant_id"])
        op.create_index("ix_tenant_departures_unit_id", "tenant_departures", ["unit_id"])

    if not _has_table("deposit_dispositions"):
        op.create_table(
            "deposit_dispositions",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
            sa.Column("lease_id", sa.Integer(), sa.ForeignKey("leases.id", ondelete="CASCADE"), nullable=False),
            sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id"), nullable=False),
            sa.Column("landlord_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=False),
            sa.Column("original_amount", MONEY, nullable=False),
            sa.Column("total_deductions", MONEY, nullable=False, server_default="0"),
            sa.Column("refund_amount", MONEY, nullable=False),
            sa.Column("refund_method", sa.String(length=20), nullable=False, server_default="pending"),
            sa.Column("refund_status", sa.String(length=20), nullable=False, server_default="pending"),
            sa.Column("processed_at", sa.DateTime(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            _created_at(),
        )
        op.create_index("ix_deposit_dispositions_org_id", "deposit_dispositions", ["org_id"])
        op.create_index("ix_deposit_dispositions_lease_id", "deposit_dispositions", ["lease_id"])
        op.create_index("ix_deposit_dispositions_tenant_id", "deposit_dispositions", ["tenant_id"])
        op.create_index("ix_deposit_dispositions_landlord_id", "deposit_dispositions", ["landlord_id"])

    if not _has_table("deposit_deduction_items"):
        op.create_table(
            "deposit_deduction_items",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "disposition_id",
                sa.Integer(),
                sa.ForeignKey("deposit_dispositions.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("category", sa.String(length=20), nullable=False),
            sa.Column("amount", MONEY, nullable=False),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("evidence_urls", sa.JSON(), nullable=False),
            _created_at(),
        )
        op.create_index("ix_deposit_deduction_items_disposition_id", "deposit_deduction_items", ["disposition_id"])

    if not _has_table("unit_turnover_checklists"):
        flags = ("deposit_processed", "keys_collected", "unit_inspected", "cleaning_completed", "repairs_completed")
        cols = []
        for f in flags:
            cols.append(sa.Column(f, sa.Boolean(), nullable=False, server_default=sa.text("false")))
            cols.append(sa.Column(f"{f}_at", sa.DateTime(), nullable=True))

        op.create_table(
            "unit_turnover_checklists",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
            sa.Column("unit_id", sa.Integer(), sa.ForeignKey("units.id", ondelete="CASCADE"), nullable=False),
            sa.Column("lease_id", sa.Integer(), sa.ForeignKey("leases.id", ondelete="SET NULL"), nullable=True),
            sa.Column("landlord_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=True),
            *cols,
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("completed_at", sa.DateTime(), nullable=True),
            _created_at(),
        )
        op.create_index("ix_unit_turnover_checklists_org_id", "unit_turnover_checklists", ["org_id"])
        op.create_index("ix_unit_turnover_checklists_unit_id", "unit_turnover_checklists", ["unit_id"])
        op.create_index("ix_unit_turnover_checklists_lease_id", "unit_turnover_checklists", ["lease_id"])

    if not _has_table("tenant_history"):
        op.create_table(
            "tenant_history",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
            sa.Column("unit_id", sa.Integer(), sa.ForeignKey("units.id"), nullable=False),
            sa.Column("property_id", sa.Integer(), sa.ForeignKey("properties.id"), nullable=False),
            sa.Column("landlord_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=False),
            sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id"), nullable=False),
            sa.Column("lease_id", sa.Integer(), sa.ForeignKey("leases.id"), nullable=False),
            sa.Column("departure_id", sa.Integer(), sa.ForeignKey("tenant_departures.id"), nullable=True),
            sa.Column(
                "deposit_disposition_id", sa.Integer(), sa.ForeignKey("deposit_dispositions.id"), nullable=True
            ),
            sa.Column("tenant_name", sa.String(length=200), nullable=False),
            sa.Column("tenant_email", sa.String(length=200), nullable=True),
            sa.Column("tenant_phone", sa.String(length=40), nullable=True),
            sa.Column("lease_start_date", sa.Date(), nullable=False),
            sa.Column("lease_end_date", sa.Date(), nullable=False),
            sa.Column("rent_amount", MONEY, nullable=False),
            sa.Column("departure_type", sa.String(length=30), nullable=False),
            sa.Column("departure_date", sa.Date(), nullable=False),
            sa.Column("deposit_amount", MONEY, nullable=True),
            sa.Column("deposit_refunded", MONEY, nullable=True),
            sa.Column("deposit_deducted", MONEY, nullable=True),
            sa.Column("was_evicted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
            _created_at(),
        )
        op.create_index("ix_tenant_history_org_id", "tenant_history", ["org_id"])
        op.create_index("ix_tenant_history_unit_id", "tenant_history", ["unit_id"])
        op.create_index("ix_tenant_history_property_id", "tenant_history", ["property_id"])
        op.create_index("ix_tenant_history_lease_id", "tenant_history", ["lease_id"])
        op.create_index("ix_tenant_history_departure_type", "tenant_history", ["departure_type"])
        op.create_index("ix_tenant_history_departure_date", "tenant_history", ["departure_date"])


def downgrade() -> None:
    for t in (
        "tenant_history",
        "unit_turnover_checklists",
        "deposit_deduction_items",
        "deposit_dispositions",
        "tenant_departures",
        "eviction_notices",
        "workflow_events",
        "leases",
        "tenants",
        "units",
        "properties",
        "audit_events",
        "org_memberships",
        "app_users",
        "organizations",
    ):
        if _has_table(t):
            op.drop_table(t)
