"""LedgerEngine: credit / debit / transfer / manual override over cash accounts.

The engine never commits. Every primitive runs inside the caller's
transaction, so an exchange operation composed of several legs either lands
completely or not at all when the caller commits or rolls back.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_common.enums import Currency, ExchangeOperationType
from src.fx_common.errors import InvalidAmountError
from src.fx_common.money import (
    ZERO,
    parse_currency,
    require_non_negative,
    require_positive,
)
from src.fx_ledger.domain.models import (
    BalanceAdjustment,
    CashAccount,
    ExchangeOperation,
    NewExchangeOperation,
)
from src.fx_ledger.domain.repository import CashAccountRepositoryProtocol
from src.fx_ledger.infrastructure.persistence import CashAccountRepository

logger = logging.getLogger(__name__)


class LedgerEngine:
    def __init__(self, repo: CashAccountRepositoryProtocol | None = None) -> None:
        self._repo: CashAccountRepositoryProtocol = repo or CashAccountRepository()

    @property
    def repo(self) -> CashAccountRepositoryProtocol:
        return self._repo

    async def credit(
        self,
        db: AsyncSession,
        owner: str,
        currency: str,
        amount: Decimal,
        actor: str,
        last_rate: Decimal | None = None,
    ) -> CashAccount:
        code = parse_currency(currency).value
        value = require_positive(amount)
        account = await self._repo.credit(db, owner, code, value, actor, last_rate)
        logger.info("credit %s %s %s by %s -> %s", owner, value, code, actor, account.balance)
        return account

    async def debit(
        self, db: AsyncSession, owner: str, currency: str, amount: Decimal, actor: str
    ) -> CashAccount:
        code = parse_currency(currency).value
        value = require_positive(amount)
        account = await self._repo.debit(db, owner, code, value, actor)
        logger.info("debit %s %s %s by %s -> %s", owner, value, code, actor, account.balance)
        return account

    async def transfer(
        self,
        db: AsyncSession,
        from_owner: str,
        to_owner: str,
        currency: str,
        amount: Decimal,
        actor: str,
    ) -> tuple[CashAccount, CashAccount]:
        """Debit then credit, same currency; both legs share one transaction."""
        if from_owner == to_owner:
            raise InvalidAmountError("source and destination accounts are the same")
        source = await self.debit(db, from_owner, currency, amount, actor)
        destination = await self.credit(db, to_owner, currency, amount, actor)
        return source, destination

    async def set_balance(
        self,
        db: AsyncSession,
        owner: str,
        currency: str,
        new_balance: Decimal,
        reason: str | None,
        actor: str,
    ) -> tuple[BalanceAdjustment, ExchangeOperation]:
        code = parse_currency(currency).value
        value = require_non_negative(new_balance, "new balance")
        adjustment = await self._repo.set_balance(db, owner, code, value, reason, actor)
        operation = await self._repo.record_operation(
            db,
            NewExchangeOperation(
                operation_type=ExchangeOperationType.MANUAL_ADJUSTMENT.value,
                owner=owner,
                currency=code,
                amount=value,
                created_by=actor,
                motif=reason,
                payload={
                    "previous_balance": adjustment.previous_balance,
                    "new_balance": adjustment.account.balance,
                    "delta": adjustment.account.balance - adjustment.previous_balance,
                },
            ),
        )
        logger.warning(
            "manual balance override %s/%s %s -> %s by %s (%s)",
            owner,
            code,
            adjustment.previous_balance,
            adjustment.account.balance,
            actor,
            reason,
        )
        return adjustment, operation

    async def get_balances(self, db: AsyncSession, owner: str) -> list[CashAccount]:
        """One entry per supported currency; accounts never touched read as zero."""
        existing = {a.currency: a for a in await self._repo.list_accounts(db, owner)}
        return [
            existing.get(c.value) or CashAccount(owner=owner, currency=c.value, balance=ZERO)
            for c in Currency
        ]
