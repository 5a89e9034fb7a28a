"""Repository Protocols for transfer requests and executor assignment.

Every workflow transition is a conditional update guarded by the expected
current status. A method returning None means no row matched the guard.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_transfer.domain.models import AuditOutcome, TransferRequest


class TransferRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, request: TransferRequest) -> TransferRequest: ...

    async def get(self, db: AsyncSession, transfer_id: str) -> TransferRequest | None: ...

    async def record_audit(
        self,
        db: AsyncSession,
        transfer_id: str,
        outcome: AuditOutcome,
        executor_id: str | None,
        auditor: str,
    ) -> TransferRequest | None: ...

    async def reject(
        self, db: AsyncSession, transfer_id: str, reason: str, auditor: str
    ) -> TransferRequest | None: ...

    async def mark_executed(
        self,
        db: AsyncSession,
        transfer_id: str,
        executor_id: str,
        receipt_ref: str,
        comment: str | None,
    ) -> TransferRequest | None: ...

    async def mark_completed(
        self, db: AsyncSession, transfer_id: str
    ) -> TransferRequest | None: ...

    async def list_requests(
        self,
        db: AsyncSession,
        status: str | None,
        created_by: str | None,
        executor_id: str | None,
        agency_id: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[TransferRequest]: ...

    async def purge(self, db: AsyncSession, status: str | None) -> int: ...


class ExecutorPickerProtocol(Protocol):
    async def pick(self, db: AsyncSession, now: datetime) -> str | None:
        """Claim the least-recently-assigned active executor, or None."""
        ...
