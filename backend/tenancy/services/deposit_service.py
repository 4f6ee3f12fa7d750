# backend/tenancy/services/deposit_service.py
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..clients.cloudinary import CloudinaryStore, StoredObject
from ..config import Settings, settings as default_settings
from ..domain.audit import audit_write, snapshot
from ..domain.deposits import (
    RefundAfterBalance,
    RefundMethod,
    RefundStatus,
    calculate_refund_after_balance,
    compute_disposition_totals,
    ensure_refund_progression,
)
from ..domain.errors import UploadError, ValidationError
from ..domain.events import emit_workflow_event
from ..models import DepositDeductionItem, DepositDisposition
from .ownership import must_get_disposition, must_get_lease, resolve_landlord_id

log = logging.getLogger("tenancy.deposits")


# -----------------------------------------------------------------------------
# Collaborators
# -----------------------------------------------------------------------------
class EvidenceStore(Protocol):
    def upload(
        self,
        data: bytes,
        *,
        file_name: str,
        mime_type: str,
        resource_type: str,
        folder: str,
        public_id: str,
    ) -> StoredObject: ...


class RefundGateway(Protocol):
    def transfer(self, *, amount: Decimal, disposition: DepositDisposition) -> None: ...


class DispositionNotifier(Protocol):
    def send_summary(self, summary: "DispositionSummary") -> None: ...


class NoopRefundGateway:
    """Placeholder until refunds are wired to a payment provider."""

    def transfer(self, *, amount: Decimal, disposition: DepositDisposition) -> None:
        log.info(
            "refund transfer skipped (no payment provider)",
            extra={"disposition_id": disposition.id, "lease_id": disposition.lease_id},
        )


class LoggingNotifier:
    def send_summary(self, summary: "DispositionSummary") -> None:
        log.info(
            "deposit disposition summary to=%s property=%s original=%s deducted=%s refund=%s items=%d",
            summary.tenant_email,
            summary.property_name,
            summary.original_amount,
            summary.total_deductions,
            summary.refund_amount,
            len(summary.lines),
            extra={"disposition_id": summary.disposition_id},
        )


@dataclass(frozen=True)
class UploadedEvidence:
    url: str
    public_id: str
    resource_type: str  # image|video
    file_name: str


@dataclass(frozen=True)
class DispositionSummary:
    disposition_id: int
    tenant_email: Optional[str]
    tenant_name: str
    property_name: str
    original_amount: Decimal
    total_deductions: Decimal
    refund_amount: Decimal
    lines: tuple[str, ...]


def evidence_resource_type(mime_type: str) -> str:
    return "video" if (mime_type or "").lower().startswith("video/") else "image"


def evidence_public_id(file_name: str, *, now_ms: Optional[int] = None) -> str:
    stem = os.path.splitext(os.path.basename(file_name or ""))[0] or "file"
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"evidence_{ts}_{stem}"


# -----------------------------------------------------------------------------
# Service
# -----------------------------------------------------------------------------
class DepositService:
    def __init__(
        self,
        *,
        store: Optional[EvidenceStore] = None,
        gateway: Optional[RefundGateway] = None,
        notifier: Optional[DispositionNotifier] = None,
        evidence_folder: str = "deposit-evidence",
    ) -> None:
        self.store = store
        self.gateway = gateway or NoopRefundGateway()
        self.notifier = notifier or LoggingNotifier()
        self.evidence_folder = evidence_folder

    @classmethod
    def from_settings(cls, s: Settings = default_settings) -> "DepositService":
        return cls(store=CloudinaryStore.from_settings(s), evidence_folder=s.evidence_folder)

    # ---- create ----

    def create_disposition(
        self,
        db: Session,
        *,
        org_id: int,
        lease_id: int,
        original_amount: Any,
        deductions: Iterable[Any],
        refund_method: str = RefundMethod.PENDING.value,
        notes: Optional[str] = None,
        actor_user_id: Optional[int] = None,
    ) -> DepositDisposition:
        """
        Validates and totals the deductions, resolves the landlord through
        lease -> unit -> property, then writes the disposition and all of its
        deduction items in a single commit.
        """
        totals = compute_disposition_totals(original_amount, deductions)
        try:
            method = RefundMethod(getattr(refund_method, "value", refund_method))
        except ValueError:
            raise ValidationError(f"Unknown refund method: {refund_method!r}") from None

        lease = must_get_lease(db, org_id=org_id, lease_id=lease_id)
        landlord_id = resolve_landlord_id(lease)

        try:
            row = DepositDisposition(
                org_id=org_id,
                lease_id=lease.id,
                tenant_id=lease.tenant_id,
                landlord_id=landlord_id,
                original_amount=totals.original_amount,
                total_deductions=totals.total_deductions,
                refund_amount=totals.refund_amount,
                refund_method=method.value,
                refund_status=RefundStatus.PENDING.value,
                notes=notes,
                created_at=datetime.utcnow(),
            )
            row.deductions = [
                DepositDeductionItem(
                    category=d.category.value,
                    amount=d.amount,
                    description=d.description,
                    evidence_urls=list(d.evidence_urls),
                )
                for d in totals.deductions
            ]
            db.add(row)
            db.flush()

            audit_write(
                db,
                org_id=org_id,
                actor_user_id=actor_user_id,
                action="deposit_disposition.create",
                entity_type="DepositDisposition",
                entity_id=row.id,
                after=snapshot(row),
            )
            emit_workflow_event(
                db,
                org_id=org_id,
                actor_user_id=actor_user_id,
                event_type="deposit_disposition.created",
                lease_id=lease.id,
                payload={
                    "disposition_id": row.id,
                    "refund_amount": str(row.refund_amount),
                    "deductions": len(row.deductions),
                },
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        log.info(
            "deposit disposition created",
            extra={"org_id": org_id, "lease_id": lease.id, "disposition_id": row.id},
        )
        return self.get_disposition_by_id(db, org_id=org_id, disposition_id=row.id)

    # ---- evidence ----

    def upload_evidence(self, data: bytes, file_name: str, mime_type: str) -> UploadedEvidence:
        if self.store is None:
            raise UploadError("Failed to upload evidence: no evidence store configured")

        resource_type = evidence_resource_type(mime_type)
        try:
            stored = self.store.upload(
                data,
                file_name=file_name,
                mime_type=mime_type,
                resource_type=resource_type,
                folder=self.evidence_folder,
                public_id=evidence_public_id(file_name),
            )
        except UploadError:
            raise
        except Exception as e:
            log.warning("evidence upload failed: %s", e)
            raise UploadError(f"Failed to upload evidence: {e}") from e

        return UploadedEvidence(
            url=stored.url,
            public_id=stored.public_id,
            resource_type=resource_type,
            file_name=file_name,
        )

    # ---- reads ----

    def get_disposition_by_id(self, db: Session, *, org_id: int, disposition_id: int) -> Optional[DepositDisposition]:
        return db.scalar(
            select(DepositDisposition)
            .where(DepositDisposition.id == disposition_id, DepositDisposition.org_id == org_id)
            .options(selectinload(DepositDisposition.deductions))
            .execution_options(populate_existing=True)
        )

    def get_dispositions_for_lease(self, db: Session, *, org_id: int, lease_id: int) -> list[DepositDisposition]:
        q = (
            select(DepositDisposition)
            .where(DepositDisposition.lease_id == lease_id, DepositDisposition.org_id == org_id)
            .options(selectinload(DepositDisposition.deductions))
            .order_by(DepositDisposition.created_at.desc(), DepositDisposition.id.desc())
        )
        return list(db.scalars(q).all())

    # ---- refund ----

    def update_refund_status(
        self,
        db: Session,
        *,
        org_id: int,
        disposition_id: int,
        status: Any,
        processed_at: Optional[datetime] = None,
        actor_user_id: Optional[int] = None,
    ) -> DepositDisposition:
        row = must_get_disposition(db, org_id=org_id, disposition_id=disposition_id)
        nxt = ensure_refund_progression(row.refund_status, status)
        if nxt is None:
            return row

        before = snapshot(row)
        row.refund_status = nxt.value
        if nxt == RefundStatus.COMPLETED:
            row.processed_at = processed_at or datetime.utcnow()

        audit_write(
            db,
            org_id=org_id,
            actor_user_id=actor_user_id,
            action="deposit_disposition.refund_status",
            entity_type="DepositDisposition",
            entity_id=row.id,
            before=before,
            after=snapshot(row),
        )
        db.commit()
        log.info(
            "refund status -> %s",
            nxt.value,
            extra={"org_id": org_id, "lease_id": row.lease_id, "disposition_id": row.id},
        )
        return row

    def process_refund(
        self,
        db: Session,
        *,
        org_id: int,
        disposition_id: int,
        actor_user_id: Optional[int] = None,
    ) -> DepositDisposition:
        row = must_get_disposition(db, org_id=org_id, disposition_id=disposition_id)

        if row.refund_amount <= 0:
            return self.update_refund_status(
                db, org_id=org_id, disposition_id=row.id, status=RefundStatus.COMPLETED, actor_user_id=actor_user_id
            )

        self.update_refund_status(
            db, org_id=org_id, disposition_id=row.id, status=RefundStatus.PROCESSING, actor_user_id=actor_user_id
        )
        # a failed transfer leaves the row at processing; calling again retries it
        try:
            self.gateway.transfer(amount=Decimal(row.refund_amount), disposition=row)
        except Exception:
            log.exception(
                "refund transfer failed",
                extra={"org_id": org_id, "lease_id": row.lease_id, "disposition_id": row.id},
            )
            raise
        return self.update_refund_status(
            db, org_id=org_id, disposition_id=row.id, status=RefundStatus.COMPLETED, actor_user_id=actor_user_id
        )

    # ---- notifications ----

    def build_summary(self, db: Session, *, org_id: int, disposition_id: int) -> DispositionSummary:
        row = must_get_disposition(db, org_id=org_id, disposition_id=disposition_id)
        lease = must_get_lease(db, org_id=org_id, lease_id=row.lease_id)
        prop = lease.unit.property
        return DispositionSummary(
            disposition_id=row.id,
            tenant_email=lease.tenant.email,
            tenant_name=lease.tenant.full_name,
            property_name=prop.name,
            original_amount=row.original_amount,
            total_deductions=row.total_deductions,
            refund_amount=row.refund_amount,
            lines=tuple(f"{d.category}: ${d.amount} - {d.description}" for d in row.deductions),
        )

    def send_disposition_summary(self, db: Session, *, org_id: int, disposition_id: int) -> DispositionSummary:
        summary = self.build_summary(db, org_id=org_id, disposition_id=disposition_id)
        try:
            self.notifier.send_summary(summary)
        except Exception:
            log.exception("disposition summary delivery failed", extra={"disposition_id": disposition_id})
        return summary

    # ---- math ----

    @staticmethod
    def calculate_refund_after_balance(
        original_deposit: Any,
        deductions: Any,
        outstanding_balance: Any,
        apply_to_balance: bool,
    ) -> RefundAfterBalance:
        return calculate_refund_after_balance(original_deposit, deductions, outstanding_balance, apply_to_balance)
