from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from alumni_ledger.models.enums import Bucket, ContributionType
from alumni_ledger.services.aggregation import BucketSummary


class BucketSummaryOut(BaseModel):
    bucket: Bucket
    total_contributions: Decimal
    total_expenses: Decimal
    balance: Decimal

    @classmethod
    def from_summary(cls, summary: BucketSummary) -> "BucketSummaryOut":
        return cls(
            bucket=summary.bucket,
            total_contributions=summary.total_contributions,
            total_expenses=summary.total_expenses,
            balance=summary.balance,
        )


class BucketBalancesResponse(BaseModel):
    date_from: date | None
    date_to: date | None
    buckets: list[BucketSummaryOut]


class CategoryTotal(BaseModel):
    category: str
    bucket: Bucket | None = None
    amount: Decimal


class BudgetReportOut(BaseModel):
    total_contributions: Decimal
    total_expenses: Decimal
    remaining: Decimal
    buckets: list[BucketSummaryOut]
    by_contribution_type: dict[ContributionType, Decimal]
    by_category: list[CategoryTotal]
    by_category_and_bucket: list[CategoryTotal]
