from datetime import datetime

from pydantic import BaseModel

from alumni_ledger.models.enums import AuditAction, EntryKind


class AuditLogOut(BaseModel):
    ledger_entry_id: str
    entity_type: EntryKind
    action: AuditAction
    acting_user_id: int
    notes: str | None
    changes: dict | None
    timestamp: datetime
