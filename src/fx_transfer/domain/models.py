"""TransferRequest domain model: pure dataclass, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.fx_common.enums import TransferStatus


@dataclass
class TransferRequest:
    id: str                           # TRX-YYYYMMDD-HHMM-<snowflake>
    # As received by the cashier, fixed at creation
    amount: Decimal
    currency: str
    created_by: str                   # user id of the creator
    reference_currency: str           # currency the auditor confirms the real amount in
    status: str = TransferStatus.PENDING.value
    description: str | None = None
    beneficiary: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    created_by_name: str | None = None
    agency_id: str | None = None
    # Set once at audit, never recomputed
    local_amount: Decimal | None = None       # received amount valued in XAF
    reference_rate: Decimal | None = None
    real_amount: Decimal | None = None
    commission: Decimal | None = None
    audited_by: str | None = None
    audited_at: datetime | None = None
    rejection_reason: str | None = None
    # Execution
    executor_id: str | None = None
    executed_at: datetime | None = None
    receipt_ref: str | None = None
    executor_comment: str | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (TransferStatus.REJECTED.value, TransferStatus.COMPLETED.value)


@dataclass(frozen=True)
class AuditOutcome:
    """Figures computed when the auditor confirms the real amount."""

    status: TransferStatus
    local_amount: Decimal
    reference_rate: Decimal
    real_amount: Decimal
    commission: Decimal
