from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from alumni_ledger.core.errors import InvalidStateError, ValidationError
from alumni_ledger.models.enums import AuditAction, EntryKind, EntryStatus, RoleName
from alumni_ledger.services.audit import AuditLogEntry, AuditTrail
from alumni_ledger.services.entries import LedgerEntry, build_entry
from alumni_ledger.services.split_policy import SplitRatio


EDITABLE_FIELDS = frozenset(
    {
        "amount",
        "entry_date",
        "contribution_type",
        "bucket",
        "notes",
        "member_id",
        "purpose",
        "category",
        "vendor",
        "description",
    }
)
LOCKED_FIELDS = frozenset({"id", "kind", "status", "submitted_by", "version"})

# Fields compared when summarising an edit, keyed by the name used in the summary.
_AUDITED_FIELDS = {
    "amount": "total_amount",
    "entry_date": "entry_date",
    "contribution_type": "contribution_type",
    "bucket": "bucket",
    "lift_amount": "lift_amount",
    "aa_amount": "aa_amount",
    "notes": "notes",
    "member_id": "member_id",
    "purpose": "purpose",
    "category": "category",
    "vendor": "vendor",
    "description": "description",
}


@dataclass(frozen=True)
class ActingUser:
    id: int
    role: RoleName
    name: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or f"user {self.id}"


def _label(entry: LedgerEntry) -> str:
    return "Contribution" if entry.kind == EntryKind.contribution else "Expense"


def _assert_pending(entry: LedgerEntry, verb: str) -> None:
    if entry.status != EntryStatus.pending:
        raise InvalidStateError(
            f"Cannot {verb} a {entry.kind.value.lower()} that is {entry.status.value}.",
            entry_id=entry.id,
            status=entry.status.value,
        )


def _decide(
    entry: LedgerEntry,
    acting_user: ActingUser,
    audit_trail: AuditTrail,
    *,
    target: EntryStatus,
    action: AuditAction,
    verb: str,
    notes: str | None,
    now: datetime | None,
) -> LedgerEntry:
    _assert_pending(entry, verb)
    decided = replace(entry, status=target)
    audit_trail.append(
        AuditLogEntry(
            ledger_entry_id=entry.id,
            entity_type=entry.kind,
            action=action,
            acting_user_id=acting_user.id,
            timestamp=now or datetime.now(timezone.utc),
            notes=notes or f"{_label(entry)} {action.value.lower()} by {acting_user.display_name}",
        )
    )
    return decided


def approve(
    entry: LedgerEntry,
    acting_user: ActingUser,
    audit_trail: AuditTrail,
    *,
    notes: str | None = None,
    now: datetime | None = None,
) -> LedgerEntry:
    return _decide(
        entry,
        acting_user,
        audit_trail,
        target=EntryStatus.approved,
        action=AuditAction.approved,
        verb="approve",
        notes=notes,
        now=now,
    )


def reject(
    entry: LedgerEntry,
    acting_user: ActingUser,
    audit_trail: AuditTrail,
    *,
    notes: str | None = None,
    now: datetime | None = None,
) -> LedgerEntry:
    return _decide(
        entry,
        acting_user,
        audit_trail,
        target=EntryStatus.rejected,
        action=AuditAction.rejected,
        verb="reject",
        notes=notes,
        now=now,
    )


def _summary_value(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def summarize_changes(before: LedgerEntry, after: LedgerEntry) -> dict[str, list[Any]]:
    changes: dict[str, list[Any]] = {}
    for label, attribute in _AUDITED_FIELDS.items():
        old = getattr(before, attribute)
        new = getattr(after, attribute)
        if old != new:
            changes[label] = [_summary_value(old), _summary_value(new)]
    return changes


def edit(
    entry: LedgerEntry,
    updates: Mapping[str, Any],
    acting_user: ActingUser,
    audit_trail: AuditTrail,
    *,
    ratio: SplitRatio | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> LedgerEntry:
    """Apply ``updates`` to a PENDING entry and re-validate it as if new.

    BASIC entries keep the ratio stored on them; ``ratio`` is only consulted
    when the edit turns an ADDITIONAL contribution into a BASIC one.
    """
    _assert_pending(entry, "edit")
    if not updates:
        raise ValidationError("No fields to update.", entry_id=entry.id)
    locked = sorted(LOCKED_FIELDS.intersection(updates))
    if locked:
        raise ValidationError(
            f"Fields cannot be edited: {', '.join(locked)}.",
            entry_id=entry.id,
        )
    unknown = sorted(set(updates) - EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(unknown)}.", entry_id=entry.id)

    merged = {
        "amount": entry.total_amount,
        "entry_date": entry.entry_date,
        "contribution_type": entry.contribution_type,
        "bucket": entry.bucket,
        "notes": entry.notes,
        "member_id": entry.member_id,
        "purpose": entry.purpose,
        "category": entry.category,
        "vendor": entry.vendor,
        "description": entry.description,
    }
    merged.update(updates)

    edited = build_entry(
        entry_id=entry.id,
        kind=entry.kind,
        status=entry.status,
        submitted_by=entry.submitted_by,
        ratio=entry.stored_ratio or ratio,
        version=entry.version,
        **merged,
    )
    audit_trail.append(
        AuditLogEntry(
            ledger_entry_id=entry.id,
            entity_type=entry.kind,
            action=AuditAction.edited,
            acting_user_id=acting_user.id,
            timestamp=now or datetime.now(timezone.utc),
            notes=notes or f"{_label(entry)} edited by {acting_user.display_name}",
            changes=summarize_changes(entry, edited),
        )
    )
    return edited
