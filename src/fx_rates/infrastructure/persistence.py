"""RateRepository: reference_rates table, one row per foreign currency."""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_common.errors import InternalError
from src.fx_rates.domain.models import ReferenceRate

_RATE_COLUMNS = "currency, reference_rate, buy_rate, sell_rate, updated_by, updated_at"

_GET_RATE_SQL = text(f"""
    SELECT {_RATE_COLUMNS}
    FROM reference_rates
    WHERE currency = :currency
""")

_LIST_RATES_SQL = text(f"""
    SELECT {_RATE_COLUMNS}
    FROM reference_rates
    ORDER BY currency
""")

_UPSERT_RATE_SQL = text(f"""
    INSERT INTO reference_rates (currency, reference_rate, buy_rate, sell_rate, updated_by)
    VALUES (:currency, :reference_rate, :buy_rate, :sell_rate, :actor)
    ON CONFLICT (currency) DO UPDATE
    SET reference_rate = EXCLUDED.reference_rate,
        buy_rate       = COALESCE(EXCLUDED.buy_rate, reference_rates.buy_rate),
        sell_rate      = COALESCE(EXCLUDED.sell_rate, reference_rates.sell_rate),
        updated_by     = EXCLUDED.updated_by,
        updated_at     = NOW()
    RETURNING {_RATE_COLUMNS}
""")


def _row_to_rate(row: object) -> ReferenceRate:
    return ReferenceRate(
        currency=row.currency,  # type: ignore[attr-defined]
        reference_rate=Decimal(row.reference_rate),  # type: ignore[attr-defined]
        buy_rate=row.buy_rate,  # type: ignore[attr-defined]
        sell_rate=row.sell_rate,  # type: ignore[attr-defined]
        updated_by=row.updated_by,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class RateRepository:
    async def get_rate(self, db: AsyncSession, currency: str) -> ReferenceRate | None:
        result = await db.execute(_GET_RATE_SQL, {"currency": currency})
        row = result.fetchone()
        return _row_to_rate(row) if row else None

    async def list_rates(self, db: AsyncSession) -> list[ReferenceRate]:
        result = await db.execute(_LIST_RATES_SQL)
        return [_row_to_rate(row) for row in result.fetchall()]

    async def upsert_rate(
        self,
        db: AsyncSession,
        currency: str,
        reference_rate: Decimal,
        buy_rate: Decimal | None,
        sell_rate: Decimal | None,
        actor: str,
    ) -> ReferenceRate:
        result = await db.execute(
            _UPSERT_RATE_SQL,
            {
                "currency": currency,
                "reference_rate": reference_rate,
                "buy_rate": buy_rate,
                "sell_rate": sell_rate,
                "actor": actor,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Rate upsert returned no rows")
        return _row_to_rate(row)
