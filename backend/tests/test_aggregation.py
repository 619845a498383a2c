from dataclasses import replace
from datetime import date

import pytest

from alumni_ledger.core.errors import ValidationError
from alumni_ledger.models.enums import Bucket, ContributionType, EntryKind, EntryStatus
from alumni_ledger.services.aggregation import (
    BalanceFilter,
    aggregate,
    build_budget_report,
    member_totals,
    merge_summaries,
)
from alumni_ledger.services.entries import EntryDraft, LedgerEntry, create_ledger_entry
from alumni_ledger.services.split_policy import SplitRatio
from alumni_ledger.utils.decimal_math import money


def _basic(amount: str, *, on: date = date(2026, 5, 1), status: EntryStatus = EntryStatus.approved) -> LedgerEntry:
    entry = create_ledger_entry(
        EntryDraft(
            kind=EntryKind.contribution,
            amount=amount,
            entry_date=on,
            submitted_by=5,
            contribution_type=ContributionType.basic,
        ),
        SplitRatio(60),
    )
    return replace(entry, status=status)


def _additional(amount: str, bucket: Bucket, *, on: date = date(2026, 5, 2)) -> LedgerEntry:
    entry = create_ledger_entry(
        EntryDraft(
            kind=EntryKind.contribution,
            amount=amount,
            entry_date=on,
            submitted_by=5,
            contribution_type=ContributionType.additional,
            bucket=bucket,
        ),
        SplitRatio(60),
    )
    return replace(entry, status=EntryStatus.approved)


def _expense(
    amount: str,
    bucket: Bucket,
    *,
    category: str = "scholarships",
    on: date = date(2026, 5, 3),
    status: EntryStatus = EntryStatus.approved,
) -> LedgerEntry:
    entry = create_ledger_entry(
        EntryDraft(
            kind=EntryKind.expense,
            amount=amount,
            entry_date=on,
            submitted_by=1,
            bucket=bucket,
            purpose="Payout",
            category=category,
        ),
        SplitRatio(60),
    )
    return replace(entry, status=status)


def test_aggregate_splits_basic_across_both_buckets() -> None:
    entries = [_basic("1000.00"), _expense("200.00", Bucket.lift)]

    summaries = aggregate(entries)

    lift = summaries[Bucket.lift]
    assert (lift.total_contributions, lift.total_expenses, lift.balance) == (
        money("600.00"),
        money("200.00"),
        money("400.00"),
    )
    association = summaries[Bucket.alumni_association]
    assert (association.total_contributions, association.total_expenses, association.balance) == (
        money("400.00"),
        money(0),
        money("400.00"),
    )


def test_aggregate_ignores_pending_and_rejected_entries() -> None:
    entries = [
        _basic("1000.00"),
        _basic("500.00", status=EntryStatus.pending),
        _basic("700.00", status=EntryStatus.rejected),
        _expense("90.00", Bucket.alumni_association, status=EntryStatus.pending),
    ]

    summaries = aggregate(entries)

    assert summaries[Bucket.lift].total_contributions == money("600.00")
    assert summaries[Bucket.alumni_association].total_expenses == money(0)


def test_aggregate_is_idempotent_and_accepts_generators() -> None:
    entries = [_basic("1000.00"), _additional("150.00", Bucket.alumni_association), _expense("20.00", Bucket.lift)]

    first = aggregate(entries)
    second = aggregate(entries)
    streamed = aggregate(entry for entry in entries)

    assert first == second == streamed


def test_aggregate_with_no_entries_returns_zeroed_buckets() -> None:
    summaries = aggregate([])
    assert set(summaries) == {Bucket.lift, Bucket.alumni_association}
    assert all(summary.balance == money(0) for summary in summaries.values())


def test_bucket_filter_returns_only_that_bucket() -> None:
    entries = [_basic("1000.00"), _additional("150.00", Bucket.alumni_association)]

    summaries = aggregate(entries, BalanceFilter(bucket=Bucket.alumni_association))

    assert list(summaries) == [Bucket.alumni_association]
    assert summaries[Bucket.alumni_association].total_contributions == money("550.00")


def test_date_range_is_inclusive() -> None:
    entries = [
        _basic("100.00", on=date(2026, 1, 1)),
        _basic("200.00", on=date(2026, 1, 31)),
        _basic("400.00", on=date(2026, 2, 1)),
    ]

    summaries = aggregate(entries, BalanceFilter(date_from=date(2026, 1, 1), date_to=date(2026, 1, 31)))

    assert summaries[Bucket.lift].total_contributions == money("180.00")
    assert summaries[Bucket.alumni_association].total_contributions == money("120.00")


def test_inverted_date_range_is_rejected() -> None:
    with pytest.raises(ValidationError):
        BalanceFilter(date_from=date(2026, 2, 1), date_to=date(2026, 1, 1))


def test_balance_may_go_negative() -> None:
    summaries = aggregate([_expense("75.00", Bucket.lift)])
    assert summaries[Bucket.lift].balance == money("-75.00")


def test_merge_summaries_matches_single_pass() -> None:
    january = [_basic("1000.00", on=date(2026, 1, 5)), _expense("50.00", Bucket.lift, on=date(2026, 1, 9))]
    february = [_additional("300.00", Bucket.lift, on=date(2026, 2, 2)), _expense("80.00", Bucket.alumni_association)]

    merged = merge_summaries(aggregate(january), aggregate(february))

    assert merged == aggregate(january + february)
    assert merge_summaries(aggregate(february), aggregate(january)) == merged


def test_budget_report_breakdowns() -> None:
    entries = [
        _basic("1000.00"),
        _additional("100.00", Bucket.lift),
        _expense("200.00", Bucket.lift, category="scholarships"),
        _expense("50.00", Bucket.alumni_association, category="events"),
        _expense("30.00", Bucket.alumni_association, category="events"),
        _expense("999.00", Bucket.lift, status=EntryStatus.rejected),
    ]

    report = build_budget_report(entries)

    assert report.total_contributions == money("1100.00")
    assert report.total_expenses == money("280.00")
    assert report.remaining == money("820.00")
    assert report.by_contribution_type == {
        ContributionType.basic: money("1000.00"),
        ContributionType.additional: money("100.00"),
    }
    assert report.by_category == {"scholarships": money("200.00"), "events": money("80.00")}
    assert report.by_category_and_bucket[("events", Bucket.alumni_association)] == money("80.00")
    assert report.buckets == aggregate(entries)


def test_budget_report_with_bucket_filter_counts_only_that_share() -> None:
    entries = [_basic("1000.00"), _expense("200.00", Bucket.lift), _expense("40.00", Bucket.alumni_association)]

    report = build_budget_report(entries, BalanceFilter(bucket=Bucket.lift))

    assert report.total_contributions == money("600.00")
    assert report.total_expenses == money("200.00")
    assert report.by_category == {"scholarships": money("200.00")}
    assert list(report.buckets) == [Bucket.lift]


def test_member_totals_by_status() -> None:
    entries = [
        _basic("1000.00"),
        _basic("500.00", status=EntryStatus.pending),
        _basic("250.00", status=EntryStatus.rejected),
        _additional("100.00", Bucket.alumni_association),
    ]

    totals = member_totals(entries)

    assert totals.count == 4
    assert totals.approved_total == money("1100.00")
    assert totals.pending_total == money("500.00")
    assert totals.rejected_total == money("250.00")
    assert totals.lift_total == money("600.00")
    assert totals.aa_total == money("500.00")
