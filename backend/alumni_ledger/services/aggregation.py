from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from alumni_ledger.core.errors import ValidationError
from alumni_ledger.models.enums import Bucket, ContributionType, EntryKind, EntryStatus
from alumni_ledger.services.entries import LedgerEntry
from alumni_ledger.utils.decimal_math import money


@dataclass(frozen=True)
class BalanceFilter:
    bucket: Bucket | None = None
    date_from: date | None = None
    date_to: date | None = None

    def __post_init__(self) -> None:
        if self.date_from is not None and self.date_to is not None and self.date_from > self.date_to:
            raise ValidationError(
                "date_from must not be after date_to.",
                date_from=self.date_from,
                date_to=self.date_to,
            )

    @property
    def buckets(self) -> tuple[Bucket, ...]:
        if self.bucket is None:
            return tuple(Bucket)
        return (self.bucket,)

    def in_range(self, entry_date: date) -> bool:
        if self.date_from is not None and entry_date < self.date_from:
            return False
        if self.date_to is not None and entry_date > self.date_to:
            return False
        return True


@dataclass(frozen=True)
class BucketSummary:
    bucket: Bucket
    total_contributions: Decimal
    total_expenses: Decimal

    @property
    def balance(self) -> Decimal:
        return money(self.total_contributions - self.total_expenses)


def merge_summaries(
    left: dict[Bucket, BucketSummary],
    right: dict[Bucket, BucketSummary],
) -> dict[Bucket, BucketSummary]:
    """Combine two partial folds; order of arguments does not matter."""
    merged: dict[Bucket, BucketSummary] = {}
    for bucket in Bucket:
        parts = [summary for summary in (left.get(bucket), right.get(bucket)) if summary is not None]
        if not parts:
            continue
        merged[bucket] = BucketSummary(
            bucket=bucket,
            total_contributions=money(sum((part.total_contributions for part in parts), money(0))),
            total_expenses=money(sum((part.total_expenses for part in parts), money(0))),
        )
    return merged


def _counts(entry: LedgerEntry, balance_filter: BalanceFilter) -> bool:
    return entry.status == EntryStatus.approved and balance_filter.in_range(entry.entry_date)


def aggregate(
    entries: Iterable[LedgerEntry],
    balance_filter: BalanceFilter | None = None,
) -> dict[Bucket, BucketSummary]:
    """Fold approved entries into per-bucket totals in a single pass.

    ``entries`` may be any iterable, including a generator streaming rows from
    the store. Only APPROVED entries inside the filter's date range count; a
    BASIC contribution feeds both buckets.
    """
    balance_filter = balance_filter or BalanceFilter()
    selected = balance_filter.buckets
    contributions = {bucket: money(0) for bucket in selected}
    expenses = {bucket: money(0) for bucket in selected}

    for entry in entries:
        if not _counts(entry, balance_filter):
            continue
        totals = contributions if entry.kind == EntryKind.contribution else expenses
        for bucket, amount in entry.allocations():
            if bucket in totals:
                totals[bucket] = money(totals[bucket] + amount)

    return {
        bucket: BucketSummary(
            bucket=bucket,
            total_contributions=contributions[bucket],
            total_expenses=expenses[bucket],
        )
        for bucket in selected
    }


@dataclass(frozen=True)
class BudgetReport:
    total_contributions: Decimal
    total_expenses: Decimal
    buckets: dict[Bucket, BucketSummary]
    by_contribution_type: dict[ContributionType, Decimal]
    by_category: dict[str, Decimal]
    by_category_and_bucket: dict[tuple[str, Bucket], Decimal] = field(default_factory=dict)

    @property
    def remaining(self) -> Decimal:
        return money(self.total_contributions - self.total_expenses)


def build_budget_report(
    entries: Iterable[LedgerEntry],
    balance_filter: BalanceFilter | None = None,
) -> BudgetReport:
    """Budget overview: bucket balances plus type and category breakdowns.

    Totals count the part of each entry that lands in the selected buckets,
    so with a bucket filter the headline figures match that bucket's summary.
    """
    balance_filter = balance_filter or BalanceFilter()
    selected = set(balance_filter.buckets)
    total_contributions = money(0)
    total_expenses = money(0)
    by_type = {contribution_type: money(0) for contribution_type in ContributionType}
    by_category: dict[str, Decimal] = {}
    by_category_and_bucket: dict[tuple[str, Bucket], Decimal] = {}
    bucket_contributions = {bucket: money(0) for bucket in balance_filter.buckets}
    bucket_expenses = {bucket: money(0) for bucket in balance_filter.buckets}

    for entry in entries:
        if not _counts(entry, balance_filter):
            continue
        shares = [(bucket, amount) for bucket, amount in entry.allocations() if bucket in selected]
        share = money(sum((amount for _, amount in shares), money(0)))
        if share == money(0):
            continue
        per_bucket = bucket_contributions if entry.kind == EntryKind.contribution else bucket_expenses
        for bucket, amount in shares:
            per_bucket[bucket] = money(per_bucket[bucket] + amount)
        if entry.kind == EntryKind.contribution:
            total_contributions = money(total_contributions + share)
            if entry.contribution_type is not None:
                by_type[entry.contribution_type] = money(by_type[entry.contribution_type] + share)
            continue

        total_expenses = money(total_expenses + share)
        category = entry.category or "uncategorized"
        by_category[category] = money(by_category.get(category, money(0)) + share)
        key = (category, entry.bucket)
        by_category_and_bucket[key] = money(by_category_and_bucket.get(key, money(0)) + share)

    return BudgetReport(
        total_contributions=total_contributions,
        total_expenses=total_expenses,
        buckets={
            bucket: BucketSummary(
                bucket=bucket,
                total_contributions=bucket_contributions[bucket],
                total_expenses=bucket_expenses[bucket],
            )
            for bucket in balance_filter.buckets
        },
        by_contribution_type=by_type,
        by_category=by_category,
        by_category_and_bucket=by_category_and_bucket,
    )


@dataclass(frozen=True)
class MemberTotals:
    approved_total: Decimal
    pending_total: Decimal
    rejected_total: Decimal
    lift_total: Decimal
    aa_total: Decimal
    count: int


def member_totals(entries: Iterable[LedgerEntry]) -> MemberTotals:
    """Status totals for one member's own entries, with approved bucket shares."""
    by_status = {status: money(0) for status in EntryStatus}
    lift_total = money(0)
    aa_total = money(0)
    count = 0
    for entry in entries:
        count += 1
        by_status[entry.status] = money(by_status[entry.status] + entry.total_amount)
        if entry.status != EntryStatus.approved:
            continue
        lift_total = money(lift_total + entry.amount_for(Bucket.lift))
        aa_total = money(aa_total + entry.amount_for(Bucket.alumni_association))
    return MemberTotals(
        approved_total=by_status[EntryStatus.approved],
        pending_total=by_status[EntryStatus.pending],
        rejected_total=by_status[EntryStatus.rejected],
        lift_total=lift_total,
        aa_total=aa_total,
        count=count,
    )
