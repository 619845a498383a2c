from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from alumni_ledger.api.deps import get_current_user, get_db
from alumni_ledger.models.enums import Bucket, EntryStatus
from alumni_ledger.models.user import User
from alumni_ledger.schemas.reports import (
    BucketBalancesResponse,
    BucketSummaryOut,
    BudgetReportOut,
    CategoryTotal,
)
from alumni_ledger.services.aggregation import BalanceFilter, aggregate, build_budget_report
from alumni_ledger.services.store import LedgerStore


router = APIRouter(prefix="/reports", tags=["reports"])


def _approved_entries(db: Session, balance_filter: BalanceFilter):
    return LedgerStore(db).query(
        status=EntryStatus.approved,
        bucket=balance_filter.bucket,
        date_from=balance_filter.date_from,
        date_to=balance_filter.date_to,
    )


@router.get("/buckets", response_model=BucketBalancesResponse)
def bucket_balances(
    bucket: Bucket | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BucketBalancesResponse:
    balance_filter = BalanceFilter(bucket=bucket, date_from=date_from, date_to=date_to)
    summaries = aggregate(_approved_entries(db, balance_filter), balance_filter)
    return BucketBalancesResponse(
        date_from=date_from,
        date_to=date_to,
        buckets=[BucketSummaryOut.from_summary(summary) for summary in summaries.values()],
    )


@router.get("/budget", response_model=BudgetReportOut)
def budget_report(
    bucket: Bucket | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BudgetReportOut:
    balance_filter = BalanceFilter(bucket=bucket, date_from=date_from, date_to=date_to)
    report = build_budget_report(_approved_entries(db, balance_filter), balance_filter)
    return BudgetReportOut(
        total_contributions=report.total_contributions,
        total_expenses=report.total_expenses,
        remaining=report.remaining,
        buckets=[BucketSummaryOut.from_summary(summary) for summary in report.buckets.values()],
        by_contribution_type=report.by_contribution_type,
        by_category=[
            CategoryTotal(category=category, amount=amount)
            for category, amount in sorted(report.by_category.items())
        ],
        by_category_and_bucket=[
            CategoryTotal(category=category, bucket=category_bucket, amount=amount)
            for (category, category_bucket), amount in sorted(
                report.by_category_and_bucket.items(),
                key=lambda item: (item[0][0], item[0][1].value),
            )
        ],
    )
