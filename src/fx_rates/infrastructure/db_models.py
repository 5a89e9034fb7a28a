"""SQLAlchemy ORM model for reference_rates (created by Alembic migration 005)."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.fx_common.database import Base


class ReferenceRateORM(Base):
    __tablename__ = "reference_rates"

    currency: Mapped[str] = mapped_column(String(3), primary_key=True)
    reference_rate: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    buy_rate: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    sell_rate: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    updated_by: Mapped[str] = mapped_column(String(128), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
