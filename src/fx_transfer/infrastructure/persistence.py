"""TransferRepository: raw SQL persistence for transfer_requests."""

import json
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_common.enums import TransferStatus
from src.fx_common.errors import InternalError
from src.fx_transfer.domain.models import AuditOutcome, TransferRequest

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, amount, currency, description, beneficiary, details, status,
    reference_currency, reference_rate, local_amount, real_amount, commission,
    audited_by, audited_at, rejection_reason,
    executor_id, executed_at, receipt_ref, executor_comment, completed_at,
    created_by, created_by_name, agency_id, created_at, updated_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO transfer_requests (id, amount, currency, description, beneficiary,
        details, status, reference_currency, created_by, created_by_name, agency_id)
    VALUES (:id, :amount, :currency, :description, :beneficiary,
        CAST(:details AS JSONB), :status, :reference_currency, :created_by,
        :created_by_name, :agency_id)
    RETURNING {_SELECT_COLUMNS}
""")

_GET_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM transfer_requests WHERE id = :id
""")

# Audit: commission and real amount are written here and nowhere else.
_RECORD_AUDIT_SQL = text(f"""
    UPDATE transfer_requests
    SET status = :status,
        local_amount = :local_amount,
        reference_rate = :reference_rate,
        real_amount = :real_amount,
        commission = :commission,
        executor_id = :executor_id,
        audited_by = :auditor,
        audited_at = NOW(),
        updated_at = NOW()
    WHERE id = :id AND status = :expected
    RETURNING {_SELECT_COLUMNS}
""")

_REJECT_SQL = text(f"""
    UPDATE transfer_requests
    SET status = :status,
        rejection_reason = :reason,
        audited_by = :auditor,
        audited_at = NOW(),
        updated_at = NOW()
    WHERE id = :id AND status = :expected
    RETURNING {_SELECT_COLUMNS}
""")

_EXECUTE_SQL = text(f"""
    UPDATE transfer_requests
    SET status = :status,
        receipt_ref = :receipt_ref,
        executor_comment = :comment,
        executed_at = NOW(),
        updated_at = NOW()
    WHERE id = :id AND status = :expected AND executor_id = :executor_id
    RETURNING {_SELECT_COLUMNS}
""")

_COMPLETE_SQL = text(f"""
    UPDATE transfer_requests
    SET status = :status,
        completed_at = NOW(),
        updated_at = NOW()
    WHERE id = :id AND status = :expected
    RETURNING {_SELECT_COLUMNS}
""")

_LIST_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM transfer_requests
    WHERE (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:created_by AS TEXT) IS NULL OR created_by = :created_by)
      AND (CAST(:executor_id AS TEXT) IS NULL OR executor_id = :executor_id)
      AND (CAST(:agency_id AS TEXT) IS NULL OR agency_id = :agency_id)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

_PURGE_SQL = text("""
    DELETE FROM transfer_requests
    WHERE (CAST(:status AS TEXT) IS NULL OR status = :status)
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _load_details(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)


def _row_to_request(row: Any) -> TransferRequest:
    return TransferRequest(
        id=row.id,
        amount=Decimal(row.amount),
        currency=row.currency,
        description=row.description,
        beneficiary=row.beneficiary,
        details=_load_details(row.details),
        status=row.status,
        reference_currency=row.reference_currency,
        reference_rate=row.reference_rate,
        local_amount=row.local_amount,
        real_amount=row.real_amount,
        commission=row.commission,
        audited_by=row.audited_by,
        audited_at=row.audited_at,
        rejection_reason=row.rejection_reason,
        executor_id=row.executor_id,
        executed_at=row.executed_at,
        receipt_ref=row.receipt_ref,
        executor_comment=row.executor_comment,
        completed_at=row.completed_at,
        created_by=row.created_by,
        created_by_name=row.created_by_name,
        agency_id=row.agency_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class TransferRepository:
    """Concrete implementation of TransferRepositoryProtocol using raw SQL."""

    async def insert(self, db: AsyncSession, request: TransferRequest) -> TransferRequest:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": request.id,
                "amount": request.amount,
                "currency": request.currency,
                "description": request.description,
                "beneficiary": request.beneficiary,
                "details": json.dumps(request.details, default=str),
                "status": request.status,
                "reference_currency": request.reference_currency,
                "created_by": request.created_by,
                "created_by_name": request.created_by_name,
                "agency_id": request.agency_id,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Transfer insert returned no rows")
        return _row_to_request(row)

    async def get(self, db: AsyncSession, transfer_id: str) -> TransferRequest | None:
        result = await db.execute(_GET_SQL, {"id": transfer_id})
        row = result.fetchone()
        return _row_to_request(row) if row else None

    async def record_audit(
        self,
        db: AsyncSession,
        transfer_id: str,
        outcome: AuditOutcome,
        executor_id: str | None,
        auditor: str,
    ) -> TransferRequest | None:
        result = await db.execute(
            _RECORD_AUDIT_SQL,
            {
                "id": transfer_id,
                "expected": TransferStatus.PENDING.value,
                "status": outcome.status.value,
                "local_amount": outcome.local_amount,
                "reference_rate": outcome.reference_rate,
                "real_amount": outcome.real_amount,
                "commission": outcome.commission,
                "executor_id": executor_id,
                "auditor": auditor,
            },
        )
        row = result.fetchone()
        return _row_to_request(row) if row else None

    async def reject(
        self, db: AsyncSession, transfer_id: str, reason: str, auditor: str
    ) -> TransferRequest | None:
        result = await db.execute(
            _REJECT_SQL,
            {
                "id": transfer_id,
                "expected": TransferStatus.PENDING.value,
                "status": TransferStatus.REJECTED.value,
                "reason": reason,
                "auditor": auditor,
            },
        )
        row = result.fetchone()
        return _row_to_request(row) if row else None

    async def mark_executed(
        self,
        db: AsyncSession,
        transfer_id: str,
        executor_id: str,
        receipt_ref: str,
        comment: str | None,
    ) -> TransferRequest | None:
        result = await db.execute(
            _EXECUTE_SQL,
            {
                "id": transfer_id,
                "expected": TransferStatus.VALIDATED.value,
                "status": TransferStatus.EXECUTED.value,
                "executor_id": executor_id,
                "receipt_ref": receipt_ref,
                "comment": comment,
            },
        )
        row = result.fetchone()
        return _row_to_request(row) if row else None

    async def mark_completed(
        self, db: AsyncSession, transfer_id: str
    ) -> TransferRequest | None:
        result = await db.execute(
            _COMPLETE_SQL,
            {
                "id": transfer_id,
                "expected": TransferStatus.EXECUTED.value,
                "status": TransferStatus.COMPLETED.value,
            },
        )
        row = result.fetchone()
        return _row_to_request(row) if row else None

    async def list_requests(
        self,
        db: AsyncSession,
        status: str | None,
        created_by: str | None,
        executor_id: str | None,
        agency_id: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[TransferRequest]:
        result = await db.execute(
            _LIST_SQL,
            {
                "status": status,
                "created_by": created_by,
                "executor_id": executor_id,
                "agency_id": agency_id,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_request(row) for row in result.fetchall()]

    async def purge(self, db: AsyncSession, status: str | None) -> int:
        result = await db.execute(_PURGE_SQL, {"status": status})
        return int(result.rowcount or 0)
