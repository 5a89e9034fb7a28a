"""Domain models for fx_ledger: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.fx_common.enums import HEAD_OFFICE


@dataclass
class CashAccount:
    owner: str                       # HEAD_OFFICE or an agency id
    currency: str                    # Currency value
    balance: Decimal                 # >= 0, 2 dp
    last_rate: Decimal | None = None  # last applied purchase rate (XAF per unit)
    last_manual_motif: str | None = None
    updated_by: str | None = None
    updated_at: datetime | None = None

    @property
    def is_head_office(self) -> bool:
        return self.owner == HEAD_OFFICE


@dataclass
class BalanceAdjustment:
    """Result of a manual balance override."""

    account: CashAccount
    previous_balance: Decimal


@dataclass
class ExchangeOperation:
    """Append-only audit record: never updated or deleted."""

    id: int                          # BIGSERIAL
    operation_type: str              # ExchangeOperationType value
    owner: str
    currency: str | None            # None for multi-currency replenishments
    amount: Decimal | None
    created_by: str
    rate: Decimal | None = None
    commission: Decimal | None = None
    motif: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None


@dataclass
class NewExchangeOperation:
    """Insert payload for the exchange_operations log."""

    operation_type: str
    owner: str
    currency: str | None
    amount: Decimal | None
    created_by: str
    rate: Decimal | None = None
    commission: Decimal | None = None
    motif: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
