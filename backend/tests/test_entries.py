from dataclasses import replace
from datetime import date

import pytest

from alumni_ledger.core.errors import ValidationError
from alumni_ledger.models.enums import Bucket, ContributionType, EntryKind, EntryStatus
from alumni_ledger.services.entries import EntryDraft, create_ledger_entry
from alumni_ledger.services.split_policy import SplitRatio
from alumni_ledger.utils.decimal_math import money, pct


def _contribution(**overrides) -> EntryDraft:
    draft = EntryDraft(
        kind=EntryKind.contribution,
        amount="1000.00",
        entry_date=date(2026, 3, 1),
        submitted_by=7,
        contribution_type=ContributionType.basic,
    )
    return replace(draft, **overrides)


def _expense(**overrides) -> EntryDraft:
    draft = EntryDraft(
        kind=EntryKind.expense,
        amount="200.00",
        entry_date=date(2026, 3, 2),
        submitted_by=1,
        bucket=Bucket.lift,
        purpose="Scholarship payout",
        category="scholarships",
    )
    return replace(draft, **overrides)


def test_basic_contribution_is_pending_and_split() -> None:
    entry = create_ledger_entry(_contribution(), SplitRatio(60))
    assert entry.status == EntryStatus.pending
    assert entry.version == 0
    assert entry.lift_amount == money("600.00")
    assert entry.aa_amount == money("400.00")
    assert entry.lift_pct == pct(60)
    assert entry.bucket is None
    assert entry.member_id == 7
    assert dict(entry.allocations()) == {
        Bucket.lift: money("600.00"),
        Bucket.alumni_association: money("400.00"),
    }


def test_entry_ids_are_unique() -> None:
    first = create_ledger_entry(_contribution(), SplitRatio(50))
    second = create_ledger_entry(_contribution(), SplitRatio(50))
    assert first.id != second.id


def test_additional_contribution_keeps_bucket_and_no_ratio() -> None:
    entry = create_ledger_entry(
        _contribution(contribution_type=ContributionType.additional, bucket=Bucket.alumni_association),
        SplitRatio(50),
    )
    assert entry.bucket == Bucket.alumni_association
    assert entry.lift_pct is None
    assert entry.stored_ratio is None
    assert entry.touches(Bucket.lift) is False
    assert entry.amount_for(Bucket.alumni_association) == money("1000.00")


@pytest.mark.parametrize("amount", [0, -5, "0", "-0.01"])
def test_non_positive_amount_is_rejected(amount) -> None:
    with pytest.raises(ValidationError):
        create_ledger_entry(_contribution(amount=amount), SplitRatio(50))


def test_contribution_requires_type() -> None:
    with pytest.raises(ValidationError):
        create_ledger_entry(_contribution(contribution_type=None), SplitRatio(50))


def test_string_enums_and_iso_dates_are_accepted() -> None:
    entry = create_ledger_entry(
        _contribution(contribution_type="ADDITIONAL", bucket="LIFT", entry_date="2025-12-31"),
        SplitRatio(50),
    )
    assert entry.contribution_type == ContributionType.additional
    assert entry.bucket == Bucket.lift
    assert entry.entry_date == date(2025, 12, 31)


def test_invalid_date_is_rejected() -> None:
    with pytest.raises(ValidationError):
        create_ledger_entry(_contribution(entry_date="2026-13-40"), SplitRatio(50))
    with pytest.raises(ValidationError):
        create_ledger_entry(_contribution(entry_date=None), SplitRatio(50))


def test_backdated_entry_keeps_its_date() -> None:
    entry = create_ledger_entry(_contribution(entry_date=date(2019, 6, 1)), SplitRatio(50))
    assert entry.entry_date == date(2019, 6, 1)


def test_expense_goes_to_declared_bucket() -> None:
    entry = create_ledger_entry(_expense(vendor="  Campus Bookstore "), SplitRatio(50))
    assert entry.kind == EntryKind.expense
    assert entry.lift_amount == money("200.00")
    assert entry.aa_amount == money(0)
    assert entry.member_id is None
    assert entry.vendor == "Campus Bookstore"


@pytest.mark.parametrize(
    "overrides",
    [
        {"bucket": None},
        {"purpose": "   "},
        {"category": None},
        {"contribution_type": ContributionType.basic},
        {"member_id": 3},
    ],
)
def test_invalid_expense_is_rejected(overrides) -> None:
    with pytest.raises(ValidationError):
        create_ledger_entry(_expense(**overrides), SplitRatio(50))


def test_unknown_bucket_value_is_rejected() -> None:
    with pytest.raises(ValidationError):
        create_ledger_entry(_expense(bucket="ENDOWMENT"), SplitRatio(50))
