from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

from sqlalchemy.orm import Session

from alumni_ledger.models.audit import AuditLog
from alumni_ledger.models.enums import AuditAction, EntryKind


@dataclass(frozen=True)
class AuditLogEntry:
    ledger_entry_id: str
    entity_type: EntryKind
    action: AuditAction
    acting_user_id: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    notes: str | None = None
    changes: dict[str, Any] | None = None


class AuditTrail(Protocol):
    def append(self, record: AuditLogEntry) -> None: ...


class InMemoryAuditTrail:
    """Append-only audit trail held in memory. Records are never updated or removed."""

    def __init__(self) -> None:
        self._records: list[AuditLogEntry] = []

    def append(self, record: AuditLogEntry) -> None:
        self._records.append(record)

    def for_entry(self, ledger_entry_id: str) -> list[AuditLogEntry]:
        return [record for record in self._records if record.ledger_entry_id == ledger_entry_id]

    def __iter__(self) -> Iterator[AuditLogEntry]:
        return iter(tuple(self._records))

    def __len__(self) -> int:
        return len(self._records)


def log_audit(db: Session, *, record: AuditLogEntry) -> AuditLog:
    log = AuditLog(
        ledger_entry_id=record.ledger_entry_id,
        entity_type=record.entity_type,
        action=record.action,
        actor_user_id=record.acting_user_id,
        notes=record.notes,
        changes=record.changes,
        created_at=record.timestamp,
    )
    db.add(log)
    return log


def to_audit_entry(row: AuditLog) -> AuditLogEntry:
    return AuditLogEntry(
        ledger_entry_id=row.ledger_entry_id,
        entity_type=row.entity_type,
        action=row.action,
        acting_user_id=row.actor_user_id,
        timestamp=row.created_at,
        notes=row.notes,
        changes=row.changes,
    )
