"""SQLAlchemy ORM model for transfer_requests.

Maps to the table created by Alembic migration 006.
DO NOT add/remove columns here without a corresponding migration.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import DateTime, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.fx_common.database import Base


class TransferRequestORM(Base):
    __tablename__ = "transfer_requests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(20, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    beneficiary: Mapped[str | None] = mapped_column(String(200), nullable=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    reference_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    reference_rate: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    local_amount: Mapped[Decimal | None] = mapped_column(Numeric(20, 2), nullable=True)
    real_amount: Mapped[Decimal | None] = mapped_column(Numeric(20, 2), nullable=True)
    commission: Mapped[Decimal | None] = mapped_column(Numeric(20, 2), nullable=True)
    audited_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    audited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    executor_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    executed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    receipt_ref: Mapped[str | None] = mapped_column(String(200), nullable=True)
    executor_comment: Mapped[str | None] = mapped_column(String(500), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_by_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    agency_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
