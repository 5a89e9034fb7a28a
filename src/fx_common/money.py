"""Decimal arithmetic utilities for multi-currency cash amounts.

All amounts, balances, rates and commissions use Decimal. No float.
Persisted money is always quantized to 2 decimal places with ROUND_HALF_UP,
at every site, so the computed figure and the stored figure never drift.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.fx_common.enums import FOREIGN_CURRENCIES, Currency
from src.fx_common.errors import InvalidAmountError, InvalidCurrencyError

_CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Decimal | int | str) -> Decimal:
    """Quantize to 2 dp, half-up: Decimal('16666.666') -> Decimal('16666.67')."""
    try:
        return Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(f"not a number: {value!r}") from None


def round_rate(value: Decimal) -> Decimal:
    """Rates are stored with 2 dp, same policy as money."""
    return to_money(value)


def require_positive(value: Decimal | int | str, field: str = "amount") -> Decimal:
    amount = to_money(value)
    if amount <= 0:
        raise InvalidAmountError(f"{field} must be > 0, got {amount}")
    return amount


def require_non_negative(value: Decimal | int | str, field: str = "amount") -> Decimal:
    amount = to_money(value)
    if amount < 0:
        raise InvalidAmountError(f"{field} must be >= 0, got {amount}")
    return amount


def parse_currency(value: str) -> Currency:
    try:
        return Currency(value.upper())
    except (ValueError, AttributeError):
        raise InvalidCurrencyError(str(value), [c.value for c in Currency]) from None


def parse_foreign_currency(value: str) -> Currency:
    currency = parse_currency(value)
    if currency not in FOREIGN_CURRENCIES:
        raise InvalidCurrencyError(currency.value, [c.value for c in FOREIGN_CURRENCIES])
    return currency


def money_to_display(amount: Decimal, currency: str) -> str:
    """10000000 XAF -> '10,000,000.00 XAF', -12.5 USD -> '-12.50 USD'."""
    return f"{to_money(amount):,.2f} {currency}"
