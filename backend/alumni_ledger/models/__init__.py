from alumni_ledger.models.audit import AuditLog
from alumni_ledger.models.enums import (
    AuditAction,
    Bucket,
    ContributionType,
    EntryKind,
    EntryStatus,
    RoleName,
)
from alumni_ledger.models.ledger import LedgerEntryRecord
from alumni_ledger.models.setting import Setting
from alumni_ledger.models.user import User

__all__ = [
    "AuditLog",
    "AuditAction",
    "Bucket",
    "ContributionType",
    "EntryKind",
    "EntryStatus",
    "RoleName",
    "LedgerEntryRecord",
    "Setting",
    "User",
]
