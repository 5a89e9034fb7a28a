"""Purchase pricing: gross amount, expense deductions and real rate.

Pure functions, no I/O. Expenses (transport, local market, note exchange)
are each paid from a held currency: either the purchased currency itself or
the currency the purchase is paid in. Every expense is converted into the
purchased currency before it is deducted from the gross amount.
"""

from dataclasses import dataclass
from decimal import Decimal

from src.fx_common.enums import Currency
from src.fx_common.errors import InvalidAmountError, InvalidCurrencyError
from src.fx_common.money import ZERO, round_rate, to_money


@dataclass(frozen=True)
class Expense:
    label: str            # "transport" | "local_market" | "note_exchange"
    amount: Decimal
    currency: Currency    # held currency the expense is paid from


@dataclass(frozen=True)
class PurchaseQuote:
    gross_foreign_amount: Decimal
    total_expenses_foreign: Decimal
    available_foreign_amount: Decimal
    real_rate: Decimal


def expense_in_target(
    expense: Expense, source: Currency, target: Currency, quoted_rate: Decimal
) -> Decimal:
    if expense.currency == target:
        return expense.amount
    if expense.currency == source:
        return expense.amount / quoted_rate
    raise InvalidCurrencyError(
        expense.currency.value, [source.value, target.value]
    )


def quote_purchase(
    source: Currency,
    source_amount: Decimal,
    target: Currency,
    quoted_rate: Decimal,
    expenses: list[Expense],
) -> PurchaseQuote:
    """10,000,000 XAF at 600 with no expenses -> 16,666.67 USD at real rate 600.00."""
    if quoted_rate <= ZERO:
        raise InvalidAmountError(f"quoted rate must be > 0, got {quoted_rate}")
    gross = source_amount / quoted_rate
    total_expenses = sum(
        (expense_in_target(e, source, target, quoted_rate) for e in expenses), ZERO
    )
    available = to_money(gross - total_expenses)
    if available <= ZERO:
        raise InvalidAmountError(
            f"expenses ({to_money(total_expenses)} {target.value}) consume the whole "
            f"purchase ({to_money(gross)} {target.value})"
        )
    return PurchaseQuote(
        gross_foreign_amount=to_money(gross),
        total_expenses_foreign=to_money(total_expenses),
        available_foreign_amount=available,
        real_rate=round_rate(source_amount / available),
    )
