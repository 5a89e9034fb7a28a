"""Pydantic schemas for fx_rates API."""

from decimal import Decimal

from pydantic import BaseModel

from src.fx_common.datetime_utils import isoformat_or_none
from src.fx_rates.domain.models import ReferenceRate


class SetRateRequest(BaseModel):
    currency: str
    reference_rate: Decimal
    buy_rate: Decimal | None = None
    sell_rate: Decimal | None = None


class RateResponse(BaseModel):
    currency: str
    reference_rate: Decimal
    buy_rate: Decimal | None
    sell_rate: Decimal | None
    updated_by: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, rate: ReferenceRate) -> "RateResponse":
        return cls(
            currency=rate.currency,
            reference_rate=rate.reference_rate,
            buy_rate=rate.buy_rate,
            sell_rate=rate.sell_rate,
            updated_by=rate.updated_by,
            updated_at=isoformat_or_none(rate.updated_at),
        )


class RatesResponse(BaseModel):
    rates: list[RateResponse]
