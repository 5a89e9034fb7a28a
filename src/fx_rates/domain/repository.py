"""Repository Protocol for reference rates."""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_rates.domain.models import ReferenceRate


class RateRepositoryProtocol(Protocol):
    async def get_rate(self, db: AsyncSession, currency: str) -> ReferenceRate | None: ...

    async def list_rates(self, db: AsyncSession) -> list[ReferenceRate]: ...

    async def upsert_rate(
        self,
        db: AsyncSession,
        currency: str,
        reference_rate: Decimal,
        buy_rate: Decimal | None,
        sell_rate: Decimal | None,
        actor: str,
    ) -> ReferenceRate: ...
