from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from alumni_ledger.models.enums import Bucket, ContributionType, EntryKind, EntryStatus
from alumni_ledger.schemas.common import ORMModel
from alumni_ledger.services.entries import LedgerEntry


class ContributionCreateRequest(BaseModel):
    amount: Decimal
    contribution_type: ContributionType
    bucket: Bucket | None = None
    entry_date: date | None = None
    notes: str | None = Field(default=None, max_length=3000)
    member_id: int | None = Field(default=None, description="Admins may record on behalf of a member.")


class ContributionUpdateRequest(BaseModel):
    amount: Decimal | None = None
    contribution_type: ContributionType | None = None
    bucket: Bucket | None = None
    entry_date: date | None = None
    notes: str | None = Field(default=None, max_length=3000)
    member_id: int | None = None


class ExpenseCreateRequest(BaseModel):
    amount: Decimal
    bucket: Bucket
    purpose: str = Field(min_length=1, max_length=255)
    category: str = Field(min_length=1, max_length=100)
    entry_date: date
    vendor: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=3000)
    notes: str | None = Field(default=None, max_length=3000)


class ExpenseUpdateRequest(BaseModel):
    amount: Decimal | None = None
    bucket: Bucket | None = None
    purpose: str | None = Field(default=None, max_length=255)
    category: str | None = Field(default=None, max_length=100)
    entry_date: date | None = None
    vendor: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=3000)
    notes: str | None = Field(default=None, max_length=3000)


class ContributionBulkRequest(BaseModel):
    contributions: list[ContributionCreateRequest] = Field(min_length=1)


class ExpenseBulkRequest(BaseModel):
    expenses: list[ExpenseCreateRequest] = Field(min_length=1)


class DecisionRequest(BaseModel):
    notes: str | None = Field(default=None, max_length=1000)


class LedgerEntryOut(ORMModel):
    id: str
    kind: EntryKind
    contribution_type: ContributionType | None = None
    bucket: Bucket | None = None
    status: EntryStatus
    amount: Decimal
    lift_amount: Decimal
    aa_amount: Decimal
    lift_pct: Decimal | None = None
    aa_pct: Decimal | None = None
    entry_date: date
    notes: str | None = None
    member_id: int | None = None
    purpose: str | None = None
    category: str | None = None
    vendor: str | None = None
    description: str | None = None
    submitted_by: int
    version: int

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "LedgerEntryOut":
        return cls(
            id=entry.id,
            kind=entry.kind,
            contribution_type=entry.contribution_type,
            bucket=entry.bucket,
            status=entry.status,
            amount=entry.total_amount,
            lift_amount=entry.lift_amount,
            aa_amount=entry.aa_amount,
            lift_pct=entry.lift_pct,
            aa_pct=entry.aa_pct,
            entry_date=entry.entry_date,
            notes=entry.notes,
            member_id=entry.member_id,
            purpose=entry.purpose,
            category=entry.category,
            vendor=entry.vendor,
            description=entry.description,
            submitted_by=entry.submitted_by,
            version=entry.version,
        )


class MemberLedgerResponse(BaseModel):
    approved_total: Decimal
    pending_total: Decimal
    rejected_total: Decimal
    lift_total: Decimal
    aa_total: Decimal
    entries: list[LedgerEntryOut]
