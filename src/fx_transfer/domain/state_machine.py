"""Transfer request lifecycle.

    pending ──audit(commission >= floor)──> validated ──execute──> executed
       │                                                             │
       │                                                          complete
       │                                                             v
       │                                                         completed
       └──audit(commission < floor) / reject──> rejected

Every transition leaves exactly one source status; nothing ever moves back.
"""

from decimal import Decimal
from enum import Enum

from src.fx_common.enums import TransferStatus
from src.fx_common.errors import InvalidStateTransitionError
from src.fx_common.money import to_money
from src.fx_exchange.domain.commission import calc_commission
from src.fx_transfer.domain.models import AuditOutcome, TransferRequest


class TransferAction(str, Enum):
    VALIDATE = "validated"
    REJECT = "rejected"
    EXECUTE = "executed"
    COMPLETE = "completed"


# action -> (required current status, resulting status)
TRANSITIONS: dict[TransferAction, tuple[TransferStatus, TransferStatus]] = {
    TransferAction.VALIDATE: (TransferStatus.PENDING, TransferStatus.VALIDATED),
    TransferAction.REJECT: (TransferStatus.PENDING, TransferStatus.REJECTED),
    TransferAction.EXECUTE: (TransferStatus.VALIDATED, TransferStatus.EXECUTED),
    TransferAction.COMPLETE: (TransferStatus.EXECUTED, TransferStatus.COMPLETED),
}


def source_status(action: TransferAction) -> TransferStatus:
    return TRANSITIONS[action][0]


def target_status(action: TransferAction) -> TransferStatus:
    return TRANSITIONS[action][1]


def ensure_transition(request: TransferRequest, action: TransferAction) -> None:
    if request.status != source_status(action).value:
        raise InvalidStateTransitionError(request.id, request.status, action.value)


def evaluate_audit(
    request: TransferRequest,
    real_amount: Decimal,
    local_rate: Decimal,
    reference_rate: Decimal,
    commission_floor: Decimal,
) -> AuditOutcome:
    """Value the received amount in XAF and decide validate vs reject.

    500,000 XAF received, 750 EUR confirmed at 650 -> commission 12,500.00,
    validated with a 5,000 floor; 780 EUR -> commission 0.00, rejected.
    """
    local_amount = to_money(request.amount * local_rate)
    commission = calc_commission(local_amount, real_amount, reference_rate)
    status = (
        target_status(TransferAction.VALIDATE)
        if commission >= commission_floor
        else target_status(TransferAction.REJECT)
    )
    return AuditOutcome(
        status=status,
        local_amount=local_amount,
        reference_rate=reference_rate,
        real_amount=real_amount,
        commission=commission,
    )
