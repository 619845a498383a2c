from __future__ import annotations

import uuid
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from alumni_ledger.core.errors import ValidationError
from alumni_ledger.models.enums import Bucket, ContributionType, EntryKind, EntryStatus
from alumni_ledger.services.split_policy import SplitRatio, SplitResult, compute_split
from alumni_ledger.utils.decimal_math import money, parse_money


@dataclass(frozen=True)
class EntryDraft:
    kind: EntryKind
    amount: Decimal | int | str
    entry_date: date | str
    submitted_by: int
    contribution_type: ContributionType | None = None
    bucket: Bucket | None = None
    notes: str | None = None
    member_id: int | None = None
    purpose: str | None = None
    category: str | None = None
    vendor: str | None = None
    description: str | None = None
    entry_id: str | None = None


@dataclass(frozen=True)
class LedgerEntry:
    """One contribution or expense, already split and validated.

    ``bucket`` is None only for BASIC contributions; those carry the ratio
    they were split with so a later ratio change never re-splits them.
    ``version`` is 0 until the entry has been stored.
    """

    id: str
    kind: EntryKind
    total_amount: Decimal
    entry_date: date
    status: EntryStatus
    submitted_by: int
    lift_amount: Decimal
    aa_amount: Decimal
    contribution_type: ContributionType | None = None
    bucket: Bucket | None = None
    lift_pct: Decimal | None = None
    aa_pct: Decimal | None = None
    notes: str | None = None
    member_id: int | None = None
    purpose: str | None = None
    category: str | None = None
    vendor: str | None = None
    description: str | None = None
    version: int = 0

    @property
    def is_split(self) -> bool:
        return self.kind == EntryKind.contribution and self.contribution_type == ContributionType.basic

    @property
    def stored_ratio(self) -> SplitRatio | None:
        if self.lift_pct is None:
            return None
        return SplitRatio(self.lift_pct)

    def allocations(self) -> Iterator[tuple[Bucket, Decimal]]:
        if self.is_split:
            yield Bucket.lift, self.lift_amount
            yield Bucket.alumni_association, self.aa_amount
        elif self.bucket is not None:
            yield self.bucket, self.total_amount

    def amount_for(self, bucket: Bucket) -> Decimal:
        for allocated_bucket, amount in self.allocations():
            if allocated_bucket == bucket:
                return amount
        return money(0)

    def touches(self, bucket: Bucket) -> bool:
        return any(allocated_bucket == bucket for allocated_bucket, _ in self.allocations())


def _clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _coerce_date(value: date | str | None) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValidationError("Invalid date format.", field="entry_date", value=value) from exc
    raise ValidationError("A valid calendar date is required.", field="entry_date")


def _coerce_enum(enum_cls, name: str, value):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid {name}.", field=name, value=value) from exc


def _allocate(
    kind: EntryKind,
    amount: Decimal,
    contribution_type: ContributionType | None,
    bucket: Bucket | None,
    ratio: SplitRatio | None,
) -> SplitResult:
    if kind == EntryKind.expense:
        if contribution_type is not None:
            raise ValidationError("Expenses do not have a contribution type.", field="contribution_type")
        if bucket is None:
            raise ValidationError("Expenses require a bucket.", field="bucket")
        return compute_split(amount, ContributionType.additional, bucket, SplitRatio(0))

    if contribution_type is None:
        raise ValidationError("Contributions require a type.", field="contribution_type")
    if contribution_type == ContributionType.basic:
        if ratio is None:
            raise ValidationError("A split ratio is required for BASIC contributions.", field="ratio")
        return compute_split(amount, contribution_type, None, ratio)
    return compute_split(amount, contribution_type, bucket, ratio or SplitRatio(0))


def build_entry(
    *,
    entry_id: str,
    kind: EntryKind,
    amount: object,
    entry_date: date | str | None,
    status: EntryStatus,
    submitted_by: int,
    contribution_type: ContributionType | str | None,
    bucket: Bucket | str | None,
    ratio: SplitRatio | None,
    notes: str | None = None,
    member_id: int | None = None,
    purpose: str | None = None,
    category: str | None = None,
    vendor: str | None = None,
    description: str | None = None,
    version: int = 0,
) -> LedgerEntry:
    """Validate every field and return a fully allocated entry.

    Shared by creation and edits so both enforce the same invariants.
    """
    kind = _coerce_enum(EntryKind, "kind", kind)
    if kind is None:
        raise ValidationError("Entry kind is required.", field="kind")
    contribution_type = _coerce_enum(ContributionType, "contribution_type", contribution_type)
    bucket = _coerce_enum(Bucket, "bucket", bucket)

    total = parse_money("amount", amount)
    if total <= money(0):
        raise ValidationError("Amount must be greater than 0.", field="amount", amount=total)
    parsed_date = _coerce_date(entry_date)

    purpose = _clean_text(purpose)
    category = _clean_text(category)
    if kind == EntryKind.expense:
        if purpose is None:
            raise ValidationError("Expenses require a purpose.", field="purpose")
        if category is None:
            raise ValidationError("Expenses require a category.", field="category")
        if member_id is not None:
            raise ValidationError("Expenses are not credited to a member.", field="member_id")

    split = _allocate(kind, total, contribution_type, bucket, ratio)
    return LedgerEntry(
        id=entry_id,
        kind=kind,
        total_amount=total,
        entry_date=parsed_date,
        status=status,
        submitted_by=submitted_by,
        lift_amount=split.lift_amount,
        aa_amount=split.aa_amount,
        contribution_type=contribution_type,
        bucket=split.bucket,
        lift_pct=split.lift_pct,
        aa_pct=split.aa_pct,
        notes=_clean_text(notes),
        member_id=member_id if kind == EntryKind.contribution else None,
        purpose=purpose,
        category=category,
        vendor=_clean_text(vendor),
        description=_clean_text(description),
        version=version,
    )


def create_ledger_entry(draft: EntryDraft, ratio: SplitRatio) -> LedgerEntry:
    """Build a new PENDING entry from raw input.

    BASIC contributions are split with ``ratio`` and keep it; other shapes
    ignore it. Persistence and any creation audit belong to the caller.
    """
    member_id = draft.member_id
    if member_id is None and draft.kind == EntryKind.contribution:
        member_id = draft.submitted_by
    return build_entry(
        entry_id=draft.entry_id or uuid.uuid4().hex,
        kind=draft.kind,
        amount=draft.amount,
        entry_date=draft.entry_date,
        status=EntryStatus.pending,
        submitted_by=draft.submitted_by,
        contribution_type=draft.contribution_type,
        bucket=draft.bucket,
        ratio=ratio,
        notes=draft.notes,
        member_id=member_id,
        purpose=draft.purpose,
        category=draft.category,
        vendor=draft.vendor,
        description=draft.description,
    )
