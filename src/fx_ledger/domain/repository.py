"""Repository Protocol: dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.

Every mutating method is a single conditional statement executed inside the
caller's transaction; none of them commits.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_ledger.domain.models import (
    BalanceAdjustment,
    CashAccount,
    ExchangeOperation,
    NewExchangeOperation,
)


class CashAccountRepositoryProtocol(Protocol):
    async def get_account(
        self, db: AsyncSession, owner: str, currency: str
    ) -> CashAccount | None: ...

    async def list_accounts(self, db: AsyncSession, owner: str) -> list[CashAccount]: ...

    async def credit(
        self,
        db: AsyncSession,
        owner: str,
        currency: str,
        amount: Decimal,
        actor: str,
        last_rate: Decimal | None = None,
    ) -> CashAccount: ...

    async def debit(
        self, db: AsyncSession, owner: str, currency: str, amount: Decimal, actor: str
    ) -> CashAccount: ...

    async def set_balance(
        self,
        db: AsyncSession,
        owner: str,
        currency: str,
        new_balance: Decimal,
        motif: str | None,
        actor: str,
    ) -> BalanceAdjustment: ...

    async def record_operation(
        self, db: AsyncSession, op: NewExchangeOperation
    ) -> ExchangeOperation: ...

    async def list_operations(
        self,
        db: AsyncSession,
        owner: str | None,
        cursor_id: int | None,
        limit: int,
        operation_type: str | None,
    ) -> list[ExchangeOperation]: ...

    async def sum_sale_commissions(
        self, db: AsyncSession, owner: str | None
    ) -> dict[str, Decimal]: ...
