"""Domain models for fx_rates: pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class ReferenceRate:
    currency: str                      # foreign Currency value
    reference_rate: Decimal            # XAF per unit, used by transfer audits
    buy_rate: Decimal | None = None    # day rates shown to cashiers
    sell_rate: Decimal | None = None
    updated_by: str | None = None
    updated_at: datetime | None = None
