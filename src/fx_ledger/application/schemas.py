"""Pydantic schemas for fx_ledger API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.fx_common.datetime_utils import isoformat_or_none
from src.fx_common.money import money_to_display
from src.fx_ledger.domain.models import BalanceAdjustment, CashAccount

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class AdjustBalanceRequest(BaseModel):
    owner: str | None = Field(None, description="Agency id; omit for the head office")
    currency: str
    new_balance: Decimal
    reason: str = Field(..., min_length=1, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AccountBalance(BaseModel):
    currency: str
    balance: Decimal
    balance_display: str
    last_rate: Decimal | None
    last_manual_motif: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, account: CashAccount) -> "AccountBalance":
        return cls(
            currency=account.currency,
            balance=account.balance,
            balance_display=money_to_display(account.balance, account.currency),
            last_rate=account.last_rate,
            last_manual_motif=account.last_manual_motif,
            updated_at=isoformat_or_none(account.updated_at),
        )


class BalancesResponse(BaseModel):
    owner: str
    balances: list[AccountBalance]


class AdjustBalanceResponse(BaseModel):
    owner: str
    currency: str
    previous_balance: Decimal
    new_balance: Decimal
    new_balance_display: str
    operation_id: int

    @classmethod
    def from_result(
        cls, adjustment: BalanceAdjustment, operation_id: int
    ) -> "AdjustBalanceResponse":
        account = adjustment.account
        return cls(
            owner=account.owner,
            currency=account.currency,
            previous_balance=adjustment.previous_balance,
            new_balance=account.balance,
            new_balance_display=money_to_display(account.balance, account.currency),
            operation_id=operation_id,
        )
