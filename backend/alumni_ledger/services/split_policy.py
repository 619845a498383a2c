from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from alumni_ledger.core.errors import ValidationError
from alumni_ledger.models.enums import Bucket, ContributionType
from alumni_ledger.utils.decimal_math import HUNDRED, money, parse_money, parse_pct, pct


@dataclass(frozen=True)
class SplitRatio:
    """Share of a BASIC contribution that goes to LIFT; the rest goes to the association."""

    lift_pct: Decimal

    def __post_init__(self) -> None:
        value = parse_pct("lift_pct", self.lift_pct)
        if value < pct(0) or value > pct(HUNDRED):
            raise ValidationError("Split percentage must be between 0 and 100.", lift_pct=value)
        object.__setattr__(self, "lift_pct", value)

    @property
    def aa_pct(self) -> Decimal:
        return pct(HUNDRED - self.lift_pct)


@dataclass(frozen=True)
class SplitResult:
    lift_amount: Decimal
    aa_amount: Decimal
    lift_pct: Decimal | None = None
    aa_pct: Decimal | None = None
    bucket: Bucket | None = None

    @property
    def total(self) -> Decimal:
        return money(self.lift_amount + self.aa_amount)

    @property
    def is_split(self) -> bool:
        return self.bucket is None

    def amount_for(self, bucket: Bucket) -> Decimal:
        if bucket == Bucket.lift:
            return self.lift_amount
        return self.aa_amount


def compute_split(
    amount: Decimal | int | str,
    contribution_type: ContributionType,
    declared_bucket: Bucket | None,
    ratio: SplitRatio,
) -> SplitResult:
    total = parse_money("amount", amount)
    if total <= money(0):
        raise ValidationError("Amount must be greater than 0.", amount=total)

    if contribution_type == ContributionType.basic:
        # Round LIFT only; the association gets the exact remainder.
        lift_amount = money((total * ratio.lift_pct) / HUNDRED)
        return SplitResult(
            lift_amount=lift_amount,
            aa_amount=money(total - lift_amount),
            lift_pct=ratio.lift_pct,
            aa_pct=ratio.aa_pct,
        )

    if contribution_type == ContributionType.additional:
        if declared_bucket is None:
            raise ValidationError("ADDITIONAL contributions require a bucket.", field="bucket")
        return SplitResult(
            lift_amount=total if declared_bucket == Bucket.lift else money(0),
            aa_amount=total if declared_bucket == Bucket.alumni_association else money(0),
            bucket=declared_bucket,
        )

    raise ValidationError("Unknown contribution type.", contribution_type=contribution_type)
