from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from alumni_ledger.core.errors import ValidationError


MONEY_QUANT = Decimal("0.01")
PCT_QUANT = Decimal("0.000001")
HUNDRED = Decimal("100")
# Largest value a Numeric(14, 2) column holds.
MAX_AMOUNT = Decimal("999999999999.99")


def money(value: Decimal | int | float | str) -> Decimal:
    return Decimal(str(value)).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def pct(value: Decimal | int | float | str) -> Decimal:
    return Decimal(str(value)).quantize(PCT_QUANT, rounding=ROUND_HALF_UP)


def _parse_decimal(name: str, value: object) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{name} is required.", field=name)
    try:
        raw = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{name} must be a number.", field=name) from exc
    if not raw.is_finite():
        raise ValidationError(f"{name} must be a finite number.", field=name)
    return raw


def parse_money(name: str, value: object) -> Decimal:
    """Convert caller input into a money amount, rejecting anything non-numeric.

    Amounts must fit the stored column and carry at most two decimal places;
    nothing is rounded away silently.
    """
    raw = _parse_decimal(name, value)
    if abs(raw) > MAX_AMOUNT:
        raise ValidationError(f"{name} must not exceed {MAX_AMOUNT}.", field=name)
    try:
        amount = money(raw)
    except InvalidOperation as exc:
        raise ValidationError(f"{name} is out of range.", field=name) from exc
    if amount != raw:
        raise ValidationError(f"{name} must not have more than two decimal places.", field=name)
    return amount


def parse_pct(name: str, value: object) -> Decimal:
    raw = _parse_decimal(name, value)
    try:
        return pct(raw)
    except InvalidOperation as exc:
        raise ValidationError(f"{name} is out of range.", field=name) from exc
