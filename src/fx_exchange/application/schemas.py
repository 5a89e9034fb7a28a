"""Pydantic schemas for fx_exchange API."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from src.fx_common.datetime_utils import isoformat_or_none
from src.fx_ledger.domain.models import ExchangeOperation

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ExpenseInput(BaseModel):
    amount: Decimal = Decimal("0")
    currency: str | None = Field(
        None, description="Held currency the expense is paid from; defaults to the target"
    )


class PurchaseRequest(BaseModel):
    source_currency: str = "XAF"
    source_amount: Decimal
    target_currency: str
    quoted_rate: Decimal
    transport: ExpenseInput = Field(default_factory=ExpenseInput)
    local_market: ExpenseInput = Field(default_factory=ExpenseInput)
    note_exchange: ExpenseInput = Field(default_factory=ExpenseInput)
    motif: str | None = Field(None, max_length=500)


class ClientIdentity(BaseModel):
    """Identity document of the walk-in client, kept on the operation record."""

    id_type: str | None = Field(None, max_length=30, description="e.g. cni, passport")
    id_type_label: str | None = Field(None, max_length=100)
    id_number: str | None = Field(None, max_length=64)
    phone: str | None = Field(None, max_length=32)


class SaleRequest(BaseModel):
    owner: str | None = Field(None, description="Agency id; omit for the head office")
    currency: str
    amount: Decimal
    day_rate: Decimal
    received_amount: Decimal
    beneficiary: str | None = Field(None, max_length=200)
    client: ClientIdentity = Field(default_factory=ClientIdentity)
    motif: str | None = Field(None, max_length=500)


class ClientPurchaseRequest(BaseModel):
    """An agency buys foreign notes from a client and pays out XAF."""

    owner: str | None = Field(None, description="Agency id; omit for the head office")
    currency: str
    amount: Decimal = Field(..., description="Foreign amount handed over by the client")
    rate: Decimal
    paid_amount: Decimal = Field(..., description="XAF paid to the client")
    client_name: str | None = Field(None, max_length=200)
    client: ClientIdentity = Field(default_factory=ClientIdentity)
    motif: str | None = Field(None, max_length=500)


class CessionRequest(BaseModel):
    from_owner: str | None = Field(None, description="Omit for the head office")
    to_owner: str = Field(..., min_length=1)
    currency: str
    amount: Decimal
    motif: str | None = Field(None, max_length=500)


class ReplenishmentLine(BaseModel):
    agency_id: str = Field(..., min_length=1)
    currency: str
    amount: Decimal


class ReplenishmentRequest(BaseModel):
    lines: list[ReplenishmentLine] = Field(..., min_length=1)
    motif: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PurchaseResponse(BaseModel):
    operation_id: int
    source_currency: str
    source_amount: Decimal
    target_currency: str
    quoted_rate: Decimal
    gross_foreign_amount: Decimal
    total_expenses_foreign: Decimal
    available_foreign_amount: Decimal
    real_rate: Decimal


class SaleResponse(BaseModel):
    operation_id: int
    owner: str
    currency: str
    amount: Decimal
    day_rate: Decimal
    received_amount: Decimal
    purchase_rate: Decimal
    commission: Decimal


class ClientPurchaseResponse(BaseModel):
    operation_id: int
    owner: str
    currency: str
    amount: Decimal
    rate: Decimal
    paid_amount: Decimal
    local_balance: Decimal
    foreign_balance: Decimal


class CessionResponse(BaseModel):
    operation_id: int
    from_owner: str
    to_owner: str
    currency: str
    amount: Decimal
    from_balance: Decimal
    to_balance: Decimal
    commission: Decimal = Decimal("0.00")


class ReplenishmentResponse(BaseModel):
    operation_id: int
    totals: dict[str, Decimal]
    lines_applied: int
    head_office_balances: dict[str, Decimal]


class OperationResponse(BaseModel):
    id: int
    operation_type: str
    owner: str
    currency: str | None
    amount: Decimal | None
    rate: Decimal | None
    commission: Decimal | None
    motif: str | None
    payload: dict[str, Any]
    created_by: str
    created_at: str | None

    @classmethod
    def from_domain(cls, op: ExchangeOperation) -> "OperationResponse":
        return cls(
            id=op.id,
            operation_type=op.operation_type,
            owner=op.owner,
            currency=op.currency,
            amount=op.amount,
            rate=op.rate,
            commission=op.commission,
            motif=op.motif,
            payload=op.payload,
            created_by=op.created_by,
            created_at=isoformat_or_none(op.created_at),
        )


class OperationListResponse(BaseModel):
    items: list[OperationResponse]
    next_cursor: str | None
    has_more: bool


class CommissionsResponse(BaseModel):
    owner: str | None
    commissions: dict[str, Decimal]
    total_local: Decimal
