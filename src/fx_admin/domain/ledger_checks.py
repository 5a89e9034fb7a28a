"""Store-wide consistency checks over cash accounts and transfer requests."""

import logging
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_NEGATIVE_BALANCES_SQL = text("""
    SELECT owner, currency, balance
    FROM cash_accounts
    WHERE balance < 0
    ORDER BY owner, currency
""")
_CURRENCY_TOTALS_SQL = text("""
    SELECT currency, COALESCE(SUM(balance), 0) AS total
    FROM cash_accounts
    GROUP BY currency
    ORDER BY currency
""")
_NEGATIVE_COMMISSIONS_SQL = text("""
    SELECT 'operation' AS source, CAST(id AS TEXT) AS ref, commission
    FROM exchange_operations WHERE commission < 0
    UNION ALL
    SELECT 'transfer' AS source, id AS ref, commission
    FROM transfer_requests WHERE commission < 0
""")
_EXECUTOR_MISMATCH_SQL = text("""
    SELECT id, status, executor_id
    FROM transfer_requests
    WHERE (executor_id IS NOT NULL) <> (status IN ('validated', 'executed', 'completed'))
""")


async def currency_totals(db: AsyncSession) -> dict[str, Decimal]:
    rows = (await db.execute(_CURRENCY_TOTALS_SQL)).fetchall()
    return {row.currency: Decimal(row.total) for row in rows}


async def verify_ledger(db: AsyncSession) -> list[str]:
    """Return one violation string per broken rule; empty when consistent."""
    violations: list[str] = []
    for row in (await db.execute(_NEGATIVE_BALANCES_SQL)).fetchall():
        violations.append(f"negative balance: {row.owner}/{row.currency} = {row.balance}")
    for row in (await db.execute(_NEGATIVE_COMMISSIONS_SQL)).fetchall():
        violations.append(f"negative commission on {row.source} {row.ref}: {row.commission}")
    for row in (await db.execute(_EXECUTOR_MISMATCH_SQL)).fetchall():
        violations.append(
            f"transfer {row.id} in status {row.status} has executor {row.executor_id}"
        )
    for message in violations:
        logger.error(message)
    return violations
