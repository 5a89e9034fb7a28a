"""Pydantic schemas for fx_transfer API."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from src.fx_common.datetime_utils import isoformat_or_none
from src.fx_transfer.domain.models import TransferRequest

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateTransferRequest(BaseModel):
    amount: Decimal
    currency: str = "XAF"
    description: str | None = Field(None, max_length=1000)
    beneficiary: str | None = Field(None, max_length=200)
    details: dict[str, Any] = Field(default_factory=dict)


class AuditTransferRequest(BaseModel):
    real_amount: Decimal = Field(..., description="Amount confirmed in the reference currency")


class RejectTransferRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class ExecuteTransferRequest(BaseModel):
    receipt_ref: str = Field(..., min_length=1, max_length=200)
    comment: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TransferResponse(BaseModel):
    id: str
    status: str
    amount: Decimal
    currency: str
    description: str | None
    beneficiary: str | None
    details: dict[str, Any]
    reference_currency: str
    reference_rate: Decimal | None
    local_amount: Decimal | None
    real_amount: Decimal | None
    commission: Decimal | None
    audited_by: str | None
    rejection_reason: str | None
    executor_id: str | None
    executed_at: str | None
    receipt_ref: str | None
    executor_comment: str | None
    completed_at: str | None
    created_by: str
    created_by_name: str | None
    agency_id: str | None
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, request: TransferRequest) -> "TransferResponse":
        return cls(
            id=request.id,
            status=request.status,
            amount=request.amount,
            currency=request.currency,
            description=request.description,
            beneficiary=request.beneficiary,
            details=request.details,
            reference_currency=request.reference_currency,
            reference_rate=request.reference_rate,
            local_amount=request.local_amount,
            real_amount=request.real_amount,
            commission=request.commission,
            audited_by=request.audited_by,
            rejection_reason=request.rejection_reason,
            executor_id=request.executor_id,
            executed_at=isoformat_or_none(request.executed_at),
            receipt_ref=request.receipt_ref,
            executor_comment=request.executor_comment,
            completed_at=isoformat_or_none(request.completed_at),
            created_by=request.created_by,
            created_by_name=request.created_by_name,
            agency_id=request.agency_id,
            created_at=isoformat_or_none(request.created_at),
            updated_at=isoformat_or_none(request.updated_at),
        )


class TransferListResponse(BaseModel):
    items: list[TransferResponse]
    next_cursor: str | None
    has_more: bool


class PurgeResponse(BaseModel):
    deleted: int
    status: str | None
