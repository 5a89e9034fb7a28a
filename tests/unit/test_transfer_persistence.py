"""Unit tests for TransferRepository using MagicMock AsyncSession."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.fx_common.enums import TransferStatus
from src.fx_common.errors import InternalError
from src.fx_transfer.domain.models import AuditOutcome, TransferRequest
from src.fx_transfer.infrastructure.persistence import TransferRepository


def _make_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", "TRX-20250926-2202-1")
    row.amount = kwargs.get("amount", Decimal("500000.00"))
    row.currency = kwargs.get("currency", "XAF")
    row.description = kwargs.get("description")
    row.beneficiary = kwargs.get("beneficiary", "Supplier Ltd")
    row.details = kwargs.get("details", '{"iban": "CM21"}')
    row.status = kwargs.get("status", "pending")
    row.reference_currency = kwargs.get("reference_currency", "EUR")
    for name in (
        "reference_rate",
        "local_amount",
        "real_amount",
        "commission",
        "audited_by",
        "audited_at",
        "rejection_reason",
        "executor_id",
        "executed_at",
        "receipt_ref",
        "executor_comment",
        "completed_at",
        "agency_id",
    ):
        setattr(row, name, kwargs.get(name))
    row.created_by = kwargs.get("created_by", "cashier-1")
    row.created_by_name = kwargs.get("created_by_name", "Awa")
    row.created_at = kwargs.get("created_at", datetime.now(UTC))
    row.updated_at = kwargs.get("updated_at", datetime.now(UTC))
    return row


def _result(row: Any = None, rows: list[Any] | None = None) -> MagicMock:
    result = MagicMock()
    result.fetchone.return_value = row
    result.fetchall.return_value = rows or []
    return result


class TestTransferRepository:
    async def test_insert_returns_stored_request(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(_make_row())
        request = TransferRequest(
            id="TRX-20250926-2202-1",
            amount=Decimal("500000.00"),
            currency="XAF",
            created_by="cashier-1",
            reference_currency="EUR",
            details={"iban": "CM21"},
        )

        stored = await TransferRepository().insert(db, request)

        assert stored.details == {"iban": "CM21"}
        assert stored.status == "pending"
        params = db.execute.await_args.args[1]
        assert params["details"] == '{"iban": "CM21"}'

    async def test_insert_without_row_raises(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(None)
        request = TransferRequest(
            id="x", amount=Decimal("1"), currency="XAF", created_by="c", reference_currency="EUR"
        )
        with pytest.raises(InternalError):
            await TransferRepository().insert(db, request)

    async def test_get_missing_returns_none(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(None)
        assert await TransferRepository().get(db, "nope") is None

    async def test_audit_guards_on_pending(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(
            _make_row(status="validated", executor_id="exec-1", commission=Decimal("12500.00"))
        )
        outcome = AuditOutcome(
            status=TransferStatus.VALIDATED,
            local_amount=Decimal("500000.00"),
            reference_rate=Decimal("650"),
            real_amount=Decimal("750"),
            commission=Decimal("12500.00"),
        )

        updated = await TransferRepository().record_audit(
            db, "TRX-20250926-2202-1", outcome, "exec-1", "auditor-1"
        )

        assert updated is not None
        assert updated.executor_id == "exec-1"
        params = db.execute.await_args.args[1]
        assert params["expected"] == "pending"
        assert params["status"] == "validated"

    async def test_guard_miss_returns_none(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(None)
        assert await TransferRepository().mark_completed(db, "TRX-1") is None

    async def test_execute_requires_assignee(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(None)
        await TransferRepository().mark_executed(db, "TRX-1", "exec-2", "WU-1", None)
        params = db.execute.await_args.args[1]
        assert params["executor_id"] == "exec-2"
        assert params["expected"] == "validated"

    async def test_purge_returns_rowcount(self) -> None:
        db = AsyncMock()
        result = MagicMock()
        result.rowcount = 4
        db.execute.return_value = result
        assert await TransferRepository().purge(db, "rejected") == 4
