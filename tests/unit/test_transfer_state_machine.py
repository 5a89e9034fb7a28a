"""Tests for the transfer lifecycle table and the audit decision."""

from decimal import Decimal

import pytest

from src.fx_common.enums import TransferStatus
from src.fx_common.errors import InvalidStateTransitionError
from src.fx_transfer.domain.models import TransferRequest
from src.fx_transfer.domain.state_machine import (
    TRANSITIONS,
    TransferAction,
    ensure_transition,
    evaluate_audit,
)

FLOOR = Decimal("5000")


def _request(status: TransferStatus = TransferStatus.PENDING, **kw) -> TransferRequest:
    fields = {
        "id": "TRX-20250926-2202-1",
        "amount": Decimal("500000"),
        "currency": "XAF",
        "created_by": "cashier-1",
        "reference_currency": "EUR",
        "status": status.value,
    }
    fields.update(kw)
    return TransferRequest(**fields)


class TestTransitions:
    def test_only_forward_moves(self) -> None:
        order = [
            TransferStatus.PENDING,
            TransferStatus.VALIDATED,
            TransferStatus.EXECUTED,
            TransferStatus.COMPLETED,
        ]
        for source, target in TRANSITIONS.values():
            if target == TransferStatus.REJECTED:
                assert source == TransferStatus.PENDING
            else:
                assert order.index(target) == order.index(source) + 1

    @pytest.mark.parametrize(
        ("status", "action"),
        [
            (TransferStatus.PENDING, TransferAction.VALIDATE),
            (TransferStatus.PENDING, TransferAction.REJECT),
            (TransferStatus.VALIDATED, TransferAction.EXECUTE),
            (TransferStatus.EXECUTED, TransferAction.COMPLETE),
        ],
    )
    def test_allowed(self, status: TransferStatus, action: TransferAction) -> None:
        ensure_transition(_request(status), action)

    @pytest.mark.parametrize(
        ("status", "action"),
        [
            (TransferStatus.VALIDATED, TransferAction.VALIDATE),
            (TransferStatus.REJECTED, TransferAction.EXECUTE),
            (TransferStatus.PENDING, TransferAction.COMPLETE),
            (TransferStatus.COMPLETED, TransferAction.REJECT),
            (TransferStatus.EXECUTED, TransferAction.EXECUTE),
        ],
    )
    def test_refused(self, status: TransferStatus, action: TransferAction) -> None:
        with pytest.raises(InvalidStateTransitionError) as exc:
            ensure_transition(_request(status), action)
        assert exc.value.status == status.value
        assert exc.value.http_status == 409

    def test_terminal_statuses(self) -> None:
        assert _request(TransferStatus.REJECTED).is_terminal
        assert _request(TransferStatus.COMPLETED).is_terminal
        assert not _request(TransferStatus.EXECUTED).is_terminal


class TestEvaluateAudit:
    def test_commission_above_floor_validates(self) -> None:
        outcome = evaluate_audit(
            _request(), Decimal("750"), Decimal("1.00"), Decimal("650"), FLOOR
        )
        assert outcome.status == TransferStatus.VALIDATED
        assert outcome.local_amount == Decimal("500000.00")
        assert outcome.commission == Decimal("12500.00")

    def test_commission_below_floor_rejects(self) -> None:
        outcome = evaluate_audit(
            _request(), Decimal("780"), Decimal("1.00"), Decimal("650"), FLOOR
        )
        assert outcome.status == TransferStatus.REJECTED
        assert outcome.commission == Decimal("0.00")

    def test_commission_equal_to_floor_validates(self) -> None:
        # 500,000 - 761.54 x 650 = 4,999.00
        outcome = evaluate_audit(
            _request(), Decimal("761.54"), Decimal("1.00"), Decimal("650"), Decimal("4999")
        )
        assert outcome.commission == Decimal("4999.00")
        assert outcome.status == TransferStatus.VALIDATED

    def test_foreign_request_valued_in_local_currency(self) -> None:
        outcome = evaluate_audit(
            _request(amount=Decimal("1000"), currency="USD"),
            Decimal("900"),
            Decimal("600"),
            Decimal("650"),
            FLOOR,
        )
        assert outcome.local_amount == Decimal("600000.00")
        assert outcome.commission == Decimal("15000.00")
