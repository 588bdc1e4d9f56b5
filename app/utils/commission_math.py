"""
Commission arithmetic.

All amounts are integer cents. Commission is ``gross * rate`` rounded half-up
to a whole cent and net is whatever remains, so commission + net == gross
always holds exactly.
"""
import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from pydantic import BaseModel

from app.core.exceptions import InvalidAmountError

DEFAULT_COMMISSION_RATE = Decimal("0.10")


class CommissionSplit(BaseModel):
    """Result of splitting a gross amount."""
    gross_amount_cents: int
    commission_rate: Decimal
    commission_amount_cents: int
    net_amount_cents: int


def _check_rate(rate) -> Decimal:
    try:
        value = Decimal(str(rate))
    except InvalidOperation:
        raise InvalidAmountError(f"Invalid commission rate: {rate!r}", field="commission_rate")
    if not value.is_finite() or not (0 < value < 1):
        raise InvalidAmountError(
            f"Commission rate must be between 0 and 1, got {rate}",
            field="commission_rate"
        )
    return value


def _check_cents(amount, field: str = "gross_amount_cents") -> int:
    if isinstance(amount, bool):
        raise InvalidAmountError(f"Amount must be a number of cents, got {amount!r}", field=field)

    if isinstance(amount, int):
        cents = amount
    elif isinstance(amount, float):
        if not math.isfinite(amount) or not amount.is_integer():
            raise InvalidAmountError(f"Amount must be a finite whole number of cents, got {amount}", field=field)
        cents = int(amount)
    elif isinstance(amount, Decimal):
        if not amount.is_finite() or amount != amount.to_integral_value():
            raise InvalidAmountError(f"Amount must be a finite whole number of cents, got {amount}", field=field)
        cents = int(amount)
    else:
        raise InvalidAmountError(f"Amount must be a number of cents, got {amount!r}", field=field)

    if cents < 0:
        raise InvalidAmountError(f"Amount cannot be negative: {cents}", field=field)
    return cents


def calculate_commission(gross_amount_cents, rate=DEFAULT_COMMISSION_RATE) -> CommissionSplit:
    """
    Split a gross amount into platform commission and owner net.

    Raises InvalidAmountError for negative, non-finite or fractional cents,
    and for a rate outside (0, 1).
    """
    gross = _check_cents(gross_amount_cents)
    rate = _check_rate(rate)

    commission = int((Decimal(gross) * rate).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return CommissionSplit(
        gross_amount_cents=gross,
        commission_rate=rate,
        commission_amount_cents=commission,
        net_amount_cents=gross - commission
    )


def is_consistent_split(
    gross_amount_cents: int,
    commission_amount_cents: int,
    net_amount_cents: int,
    rate=DEFAULT_COMMISSION_RATE
) -> bool:
    """Check stored commission/net amounts against the commission rule."""
    try:
        expected = calculate_commission(gross_amount_cents, rate)
    except InvalidAmountError:
        return False
    return (
        expected.commission_amount_cents == commission_amount_cents
        and expected.net_amount_cents == net_amount_cents
    )


def to_cents(amount) -> int:
    """Convert a currency amount such as ``"100.00"`` to integer cents."""
    if isinstance(amount, bool):
        raise InvalidAmountError(f"Invalid amount: {amount!r}")
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise InvalidAmountError(f"Invalid amount: {amount!r}")

    if not value.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {amount}")
    if value < 0:
        raise InvalidAmountError(f"Amount cannot be negative: {amount}")

    cents = value * 100
    if cents != cents.to_integral_value():
        raise InvalidAmountError(f"Amount has more precision than one cent: {amount}")
    return int(cents)


def format_cents(cents: int) -> str:
    """10050 -> '100.50'"""
    sign = "-" if cents < 0 else ""
    cents = abs(cents)
    return f"{sign}{cents // 100}.{cents % 100:02d}"
