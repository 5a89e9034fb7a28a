"""CashAccountRepository: concrete implementation of CashAccountRepositoryProtocol.

All balance-mutating operations use atomic PostgreSQL statements with
RETURNING. Accounts are created on first reference by an upsert inside the
same transaction as the mutation. A debit that returns 0 rows means the
balance would have gone negative.

Transaction ownership: The CALLER (application service) is responsible for
committing or rolling back the transaction.
"""

import json
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_common.enums import ExchangeOperationType
from src.fx_common.errors import InsufficientFundsError, InternalError
from src.fx_common.money import ZERO
from src.fx_ledger.domain.models import (
    BalanceAdjustment,
    CashAccount,
    ExchangeOperation,
    NewExchangeOperation,
)

_ACCOUNT_COLUMNS = "owner, currency, balance, last_rate, last_manual_motif, updated_by, updated_at"

# ---------------------------------------------------------------------------
# SQL: cash_accounts mutations
# ---------------------------------------------------------------------------

_ENSURE_ACCOUNT_SQL = text("""
    INSERT INTO cash_accounts (owner, currency, balance, updated_by)
    VALUES (:owner, :currency, 0, 'system')
    ON CONFLICT (owner, currency) DO NOTHING
""")

_CREDIT_SQL = text(f"""
    INSERT INTO cash_accounts (owner, currency, balance, last_rate, updated_by)
    VALUES (:owner, :currency, :amount, :last_rate, :actor)
    ON CONFLICT (owner, currency) DO UPDATE
    SET balance    = cash_accounts.balance + EXCLUDED.balance,
        last_rate  = COALESCE(EXCLUDED.last_rate, cash_accounts.last_rate),
        updated_by = EXCLUDED.updated_by,
        updated_at = NOW()
    RETURNING {_ACCOUNT_COLUMNS}
""")

_DEBIT_SQL = text(f"""
    UPDATE cash_accounts
    SET balance = balance - :amount,
        updated_by = :actor,
        updated_at = NOW()
    WHERE owner = :owner AND currency = :currency AND balance >= :amount
    RETURNING {_ACCOUNT_COLUMNS}
""")

_SET_BALANCE_SQL = text(f"""
    WITH prev AS (
        SELECT id, balance
        FROM cash_accounts
        WHERE owner = :owner AND currency = :currency
        FOR UPDATE
    )
    UPDATE cash_accounts c
    SET balance = :new_balance,
        last_manual_motif = :motif,
        updated_by = :actor,
        updated_at = NOW()
    FROM prev
    WHERE c.id = prev.id
    RETURNING c.owner, c.currency, c.balance, c.last_rate, c.last_manual_motif,
              c.updated_by, c.updated_at, prev.balance AS previous_balance
""")

_GET_ACCOUNT_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM cash_accounts
    WHERE owner = :owner AND currency = :currency
""")

_LIST_ACCOUNTS_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM cash_accounts
    WHERE owner = :owner
    ORDER BY currency
""")

# ---------------------------------------------------------------------------
# SQL: exchange_operations (append-only)
# ---------------------------------------------------------------------------

_OPERATION_COLUMNS = (
    "id, operation_type, owner, currency, amount, rate, commission, motif, "
    "payload, created_by, created_at"
)

_INSERT_OPERATION_SQL = text(f"""
    INSERT INTO exchange_operations
        (operation_type, owner, currency, amount, rate, commission, motif,
         payload, created_by)
    VALUES
        (:operation_type, :owner, :currency, :amount, :rate, :commission, :motif,
         CAST(:payload AS JSONB), :created_by)
    RETURNING {_OPERATION_COLUMNS}
""")

_LIST_OPERATIONS_SQL = text(f"""
    SELECT {_OPERATION_COLUMNS}
    FROM exchange_operations
    WHERE (CAST(:owner AS VARCHAR) IS NULL OR owner = :owner)
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
      AND (CAST(:operation_type AS VARCHAR) IS NULL OR operation_type = :operation_type)
    ORDER BY id DESC
    LIMIT :limit
""")

_SUM_SALE_COMMISSIONS_SQL = text("""
    SELECT currency, COALESCE(SUM(commission), 0) AS total
    FROM exchange_operations
    WHERE operation_type = :sale
      AND (CAST(:owner AS VARCHAR) IS NULL OR owner = :owner)
    GROUP BY currency
""")


def _json_default(value: object) -> str:
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _load_payload(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)


def _row_to_account(row: object) -> CashAccount:
    return CashAccount(
        owner=row.owner,  # type: ignore[attr-defined]
        currency=row.currency,  # type: ignore[attr-defined]
        balance=Decimal(row.balance),  # type: ignore[attr-defined]
        last_rate=row.last_rate,  # type: ignore[attr-defined]
        last_manual_motif=row.last_manual_motif,  # type: ignore[attr-defined]
        updated_by=row.updated_by,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_operation(row: object) -> ExchangeOperation:
    return ExchangeOperation(
        id=row.id,  # type: ignore[attr-defined]
        operation_type=row.operation_type,  # type: ignore[attr-defined]
        owner=row.owner,  # type: ignore[attr-defined]
        currency=row.currency,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        rate=row.rate,  # type: ignore[attr-defined]
        commission=row.commission,  # type: ignore[attr-defined]
        motif=row.motif,  # type: ignore[attr-defined]
        payload=_load_payload(row.payload),  # type: ignore[attr-defined]
        created_by=row.created_by,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class CashAccountRepository:
    """Concrete repository: all operations atomic at the SQL level."""

    async def get_account(
        self, db: AsyncSession, owner: str, currency: str
    ) -> CashAccount | None:
        result = await db.execute(_GET_ACCOUNT_SQL, {"owner": owner, "currency": currency})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def list_accounts(self, db: AsyncSession, owner: str) -> list[CashAccount]:
        result = await db.execute(_LIST_ACCOUNTS_SQL, {"owner": owner})
        return [_row_to_account(row) for row in result.fetchall()]

    async def credit(
        self,
        db: AsyncSession,
        owner: str,
        currency: str,
        amount: Decimal,
        actor: str,
        last_rate: Decimal | None = None,
    ) -> CashAccount:
        result = await db.execute(
            _CREDIT_SQL,
            {
                "owner": owner,
                "currency": currency,
                "amount": amount,
                "last_rate": last_rate,
                "actor": actor,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Credit upsert returned no rows: this should never happen")
        return _row_to_account(row)

    async def debit(
        self, db: AsyncSession, owner: str, currency: str, amount: Decimal, actor: str
    ) -> CashAccount:
        await db.execute(_ENSURE_ACCOUNT_SQL, {"owner": owner, "currency": currency})
        result = await db.execute(
            _DEBIT_SQL,
            {"owner": owner, "currency": currency, "amount": amount, "actor": actor},
        )
        row = result.fetchone()
        if row is None:
            current = await self.get_account(db, owner, currency)
            available = current.balance if current else ZERO
            raise InsufficientFundsError(owner, currency, amount, available)
        return _row_to_account(row)

    async def set_balance(
        self,
        db: AsyncSession,
        owner: str,
        currency: str,
        new_balance: Decimal,
        motif: str | None,
        actor: str,
    ) -> BalanceAdjustment:
        await db.execute(_ENSURE_ACCOUNT_SQL, {"owner": owner, "currency": currency})
        result = await db.execute(
            _SET_BALANCE_SQL,
            {
                "owner": owner,
                "currency": currency,
                "new_balance": new_balance,
                "motif": motif,
                "actor": actor,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError(f"Manual adjustment found no row for {owner}/{currency}")
        return BalanceAdjustment(
            account=_row_to_account(row),
            previous_balance=Decimal(row.previous_balance),
        )

    async def record_operation(
        self, db: AsyncSession, op: NewExchangeOperation
    ) -> ExchangeOperation:
        result = await db.execute(
            _INSERT_OPERATION_SQL,
            {
                "operation_type": op.operation_type,
                "owner": op.owner,
                "currency": op.currency,
                "amount": op.amount,
                "rate": op.rate,
                "commission": op.commission,
                "motif": op.motif,
                "payload": json.dumps(op.payload, default=_json_default),
                "created_by": op.created_by,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Operation insert returned no rows: this should never happen")
        return _row_to_operation(row)

    async def list_operations(
        self,
        db: AsyncSession,
        owner: str | None,
        cursor_id: int | None,
        limit: int,
        operation_type: str | None,
    ) -> list[ExchangeOperation]:
        result = await db.execute(
            _LIST_OPERATIONS_SQL,
            {
                "owner": owner,
                "cursor_id": cursor_id,
                "operation_type": operation_type,
                "limit": limit,
            },
        )
        return [_row_to_operation(row) for row in result.fetchall()]

    async def sum_sale_commissions(
        self, db: AsyncSession, owner: str | None
    ) -> dict[str, Decimal]:
        result = await db.execute(
            _SUM_SALE_COMMISSIONS_SQL,
            {"owner": owner, "sale": ExchangeOperationType.SALE.value},
        )
        return {row.currency: Decimal(row.total) for row in result.fetchall()}
