from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import date

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from alumni_ledger.core.errors import InvalidStateError, NotFoundError, ValidationError
from alumni_ledger.models.audit import AuditLog
from alumni_ledger.models.enums import Bucket, ContributionType, EntryKind, EntryStatus
from alumni_ledger.models.ledger import LedgerEntryRecord
from alumni_ledger.services.audit import AuditLogEntry, log_audit, to_audit_entry
from alumni_ledger.services.entries import LedgerEntry
from alumni_ledger.utils.decimal_math import money, pct


logger = logging.getLogger("alumni_ledger.store")


def to_entry(row: LedgerEntryRecord) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,
        kind=row.kind,
        total_amount=money(row.amount),
        entry_date=row.entry_date,
        status=row.status,
        submitted_by=row.submitted_by_user_id,
        lift_amount=money(row.lift_amount),
        aa_amount=money(row.aa_amount),
        contribution_type=row.contribution_type,
        bucket=row.bucket,
        lift_pct=pct(row.lift_pct) if row.lift_pct is not None else None,
        aa_pct=pct(row.aa_pct) if row.aa_pct is not None else None,
        notes=row.notes,
        member_id=row.member_id,
        purpose=row.purpose,
        category=row.category,
        vendor=row.vendor,
        description=row.description,
        version=row.version,
    )


def _row_values(entry: LedgerEntry) -> dict:
    return {
        "kind": entry.kind,
        "contribution_type": entry.contribution_type,
        "bucket": entry.bucket,
        "status": entry.status,
        "amount": entry.total_amount,
        "lift_amount": entry.lift_amount,
        "aa_amount": entry.aa_amount,
        "lift_pct": entry.lift_pct,
        "aa_pct": entry.aa_pct,
        "entry_date": entry.entry_date,
        "notes": entry.notes,
        "purpose": entry.purpose,
        "category": entry.category,
        "vendor": entry.vendor,
        "description": entry.description,
        "member_id": entry.member_id,
        "submitted_by_user_id": entry.submitted_by,
    }


class LedgerStore:
    """Ledger entries and their audit trail on top of a SQLAlchemy session.

    The store never commits; the caller owns the transaction. ``save`` is a
    compare-and-set on ``version`` so two writers that loaded the same entry
    cannot both succeed.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _get_row(self, entry_id: str) -> LedgerEntryRecord | None:
        return self.db.scalar(
            select(LedgerEntryRecord)
            .where(LedgerEntryRecord.id == entry_id)
            .execution_options(populate_existing=True)
        )

    def load(self, entry_id: str, *, kind: EntryKind | None = None) -> LedgerEntry:
        row = self._get_row(entry_id)
        if row is None or (kind is not None and row.kind != kind):
            label = kind.value.lower() if kind is not None else "ledger entry"
            raise NotFoundError(f"{label.capitalize()} not found.", entry_id=entry_id)
        return to_entry(row)

    def save(self, entry: LedgerEntry) -> LedgerEntry:
        if entry.version == 0:
            row = LedgerEntryRecord(id=entry.id, version=1, **_row_values(entry))
            self.db.add(row)
            self.db.flush()
            return to_entry(row)

        result = self.db.execute(
            update(LedgerEntryRecord)
            .where(
                LedgerEntryRecord.id == entry.id,
                LedgerEntryRecord.version == entry.version,
            )
            .values(version=LedgerEntryRecord.version + 1, **_row_values(entry))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            if self._get_row(entry.id) is None:
                raise NotFoundError("Ledger entry not found.", entry_id=entry.id)
            logger.warning("Stale write rejected for ledger entry %s (version %s)", entry.id, entry.version)
            raise InvalidStateError(
                "Entry was changed by someone else. Reload and try again.",
                entry_id=entry.id,
            )
        return self.load(entry.id)

    def delete(self, entry_id: str) -> LedgerEntry:
        row = self._get_row(entry_id)
        if row is None:
            raise NotFoundError("Ledger entry not found.", entry_id=entry_id)
        if row.kind != EntryKind.expense:
            raise ValidationError("Contributions cannot be deleted.", entry_id=entry_id)
        entry = to_entry(row)
        self.db.delete(row)
        self.db.flush()
        logger.info("Deleted expense %s", entry_id)
        return entry

    def query(
        self,
        *,
        kind: EntryKind | None = None,
        status: EntryStatus | None = None,
        bucket: Bucket | None = None,
        contribution_type: ContributionType | None = None,
        submitted_by: int | None = None,
        member_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> Iterator[LedgerEntry]:
        stmt = select(LedgerEntryRecord)
        if kind is not None:
            stmt = stmt.where(LedgerEntryRecord.kind == kind)
        if status is not None:
            stmt = stmt.where(LedgerEntryRecord.status == status)
        if bucket is not None:
            # BASIC contributions have no single bucket but feed both.
            stmt = stmt.where(
                or_(
                    LedgerEntryRecord.bucket == bucket,
                    LedgerEntryRecord.contribution_type == ContributionType.basic,
                )
            )
        if contribution_type is not None:
            stmt = stmt.where(LedgerEntryRecord.contribution_type == contribution_type)
        if submitted_by is not None:
            stmt = stmt.where(LedgerEntryRecord.submitted_by_user_id == submitted_by)
        if member_id is not None:
            stmt = stmt.where(LedgerEntryRecord.member_id == member_id)
        if date_from is not None:
            stmt = stmt.where(LedgerEntryRecord.entry_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(LedgerEntryRecord.entry_date <= date_to)
        stmt = stmt.order_by(LedgerEntryRecord.entry_date.desc(), LedgerEntryRecord.created_at.desc())
        for row in self.db.scalars(stmt):
            yield to_entry(row)

    def pending_count(self, kind: EntryKind) -> int:
        return int(
            self.db.scalar(
                select(func.count())
                .select_from(LedgerEntryRecord)
                .where(
                    LedgerEntryRecord.kind == kind,
                    LedgerEntryRecord.status == EntryStatus.pending,
                )
            )
            or 0
        )

    def append_audit_log(self, record: AuditLogEntry) -> AuditLog:
        log = log_audit(self.db, record=record)
        self.db.flush()
        return log

    def append(self, record: AuditLogEntry) -> None:
        self.append_audit_log(record)

    def audit_log_for(self, entry_id: str, *, kind: EntryKind | None = None) -> list[AuditLogEntry]:
        stmt = select(AuditLog).where(AuditLog.ledger_entry_id == entry_id)
        if kind is not None:
            stmt = stmt.where(AuditLog.entity_type == kind)
        rows = self.db.scalars(
            stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        ).all()
        return [to_audit_entry(row) for row in rows]
