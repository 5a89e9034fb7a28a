"""RateApplicationService: reference and day rates per foreign currency."""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_common.enums import LOCAL_CURRENCY
from src.fx_common.errors import RateNotFoundError
from src.fx_common.money import parse_currency, parse_foreign_currency, require_positive
from src.fx_gateway.auth.capabilities import Caller, Capability, require
from src.fx_rates.application.schemas import RateResponse, RatesResponse, SetRateRequest
from src.fx_rates.domain.repository import RateRepositoryProtocol
from src.fx_rates.infrastructure.persistence import RateRepository

logger = logging.getLogger(__name__)

_LOCAL_RATE = Decimal("1.00")


class RateApplicationService:
    def __init__(self, repo: RateRepositoryProtocol | None = None) -> None:
        self._repo: RateRepositoryProtocol = repo or RateRepository()

    async def get_rates(self, db: AsyncSession) -> RatesResponse:
        rates = await self._repo.list_rates(db)
        return RatesResponse(rates=[RateResponse.from_domain(r) for r in rates])

    async def set_rate(
        self, db: AsyncSession, caller: Caller, req: SetRateRequest
    ) -> RateResponse:
        require(caller, Capability.MANAGE_RATES)
        currency = parse_foreign_currency(req.currency)
        reference_rate = require_positive(req.reference_rate, "reference rate")
        buy_rate = require_positive(req.buy_rate, "buy rate") if req.buy_rate is not None else None
        sell_rate = (
            require_positive(req.sell_rate, "sell rate") if req.sell_rate is not None else None
        )
        try:
            rate = await self._repo.upsert_rate(
                db, currency.value, reference_rate, buy_rate, sell_rate, caller.name
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "reference rate %s set to %s by %s", currency.value, reference_rate, caller.name
        )
        return RateResponse.from_domain(rate)

    async def reference_rate(self, db: AsyncSession, currency: str) -> Decimal:
        """XAF per unit of `currency`; the local currency is always 1."""
        code = parse_currency(currency)
        if code == LOCAL_CURRENCY:
            return _LOCAL_RATE
        rate = await self._repo.get_rate(db, code.value)
        if rate is None:
            raise RateNotFoundError(code.value)
        return rate.reference_rate
