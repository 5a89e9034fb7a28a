"""TransferApplicationService: the transfer request workflow.

Transitions are conditional updates on the expected status, each committed in
its own transaction. When an update matches no row the request is re-read to
tell a missing request from a wrong status. No transition touches the cash
ledger. Notifications go out only after commit.
"""

import logging
from decimal import Decimal
from typing import NoReturn

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.fx_common.datetime_utils import utc_now
from src.fx_common.enums import NotificationEvent, Role, TransferStatus
from src.fx_common.errors import (
    InvalidStateTransitionError,
    NoExecutorAvailableError,
    TransferNotFoundError,
    UnauthorizedError,
)
from src.fx_common.id_generator import generate_transfer_id
from src.fx_common.money import parse_currency, parse_foreign_currency, require_positive
from src.fx_common.pagination import cursor_decode_str, cursor_encode
from src.fx_gateway.auth.capabilities import Caller, Capability, require
from src.fx_notify.sink import NotificationSink, notify
from src.fx_rates.application.service import RateApplicationService
from src.fx_transfer.application.schemas import (
    AuditTransferRequest,
    CreateTransferRequest,
    ExecuteTransferRequest,
    PurgeResponse,
    RejectTransferRequest,
    TransferListResponse,
    TransferResponse,
)
from src.fx_transfer.domain.models import TransferRequest
from src.fx_transfer.domain.repository import (
    ExecutorPickerProtocol,
    TransferRepositoryProtocol,
)
from src.fx_transfer.domain.state_machine import (
    TransferAction,
    ensure_transition,
    evaluate_audit,
)
from src.fx_transfer.infrastructure.executor_picker import ExecutorPicker
from src.fx_transfer.infrastructure.persistence import TransferRepository

logger = logging.getLogger(__name__)

_STATUS_EVENTS = {
    TransferStatus.VALIDATED.value: NotificationEvent.TRANSFER_VALIDATED,
    TransferStatus.REJECTED.value: NotificationEvent.TRANSFER_REJECTED,
    TransferStatus.EXECUTED.value: NotificationEvent.TRANSFER_EXECUTED,
    TransferStatus.COMPLETED.value: NotificationEvent.TRANSFER_COMPLETED,
}


class TransferApplicationService:
    def __init__(
        self,
        repo: TransferRepositoryProtocol | None = None,
        picker: ExecutorPickerProtocol | None = None,
        rates: RateApplicationService | None = None,
        sink: NotificationSink | None = None,
        commission_floor: Decimal | None = None,
        reference_currency: str | None = None,
    ) -> None:
        self._repo: TransferRepositoryProtocol = repo or TransferRepository()
        self._picker: ExecutorPickerProtocol = picker or ExecutorPicker()
        self._rates = rates or RateApplicationService()
        self._sink = sink
        self._commission_floor = (
            commission_floor if commission_floor is not None else settings.TRANSFER_COMMISSION_MIN
        )
        self._reference_currency = parse_foreign_currency(
            reference_currency or settings.TRANSFER_REFERENCE_CURRENCY
        ).value

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create(
        self, db: AsyncSession, caller: Caller, req: CreateTransferRequest
    ) -> TransferResponse:
        require(caller, Capability.CREATE_TRANSFER)
        request = TransferRequest(
            id=generate_transfer_id(),
            amount=require_positive(req.amount),
            currency=parse_currency(req.currency).value,
            description=req.description,
            beneficiary=req.beneficiary,
            details=req.details,
            reference_currency=self._reference_currency,
            created_by=caller.user_id,
            created_by_name=caller.name,
            agency_id=caller.agency_id,
        )
        try:
            created = await self._repo.insert(db, request)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "transfer %s created by %s: %s %s",
            created.id,
            caller.name,
            created.amount,
            created.currency,
        )
        return await self._published(NotificationEvent.TRANSFER_CREATED, created)

    # ------------------------------------------------------------------
    # Audit / reject (auditor)
    # ------------------------------------------------------------------

    async def audit(
        self, db: AsyncSession, caller: Caller, transfer_id: str, req: AuditTransferRequest
    ) -> TransferResponse:
        require(caller, Capability.AUDIT_TRANSFER)
        real_amount = require_positive(req.real_amount, "real amount")
        try:
            current = await self._get_or_raise(db, transfer_id)
            ensure_transition(current, TransferAction.VALIDATE)
            local_rate = await self._rates.reference_rate(db, current.currency)
            reference_rate = await self._rates.reference_rate(db, current.reference_currency)
            outcome = evaluate_audit(
                current, real_amount, local_rate, reference_rate, self._commission_floor
            )
            executor_id = None
            if outcome.status == TransferStatus.VALIDATED:
                executor_id = await self._picker.pick(db, utc_now())
                if executor_id is None:
                    raise NoExecutorAvailableError()
            updated = await self._repo.record_audit(
                db, transfer_id, outcome, executor_id, caller.user_id
            )
            if updated is None:
                await self._raise_transition_failure(db, transfer_id, TransferAction.VALIDATE)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "transfer %s audited by %s: commission %s -> %s (executor %s)",
            transfer_id,
            caller.name,
            outcome.commission,
            updated.status,
            executor_id,
        )
        return await self._published(_STATUS_EVENTS[updated.status], updated)

    async def reject(
        self, db: AsyncSession, caller: Caller, transfer_id: str, req: RejectTransferRequest
    ) -> TransferResponse:
        require(caller, Capability.AUDIT_TRANSFER)
        try:
            updated = await self._repo.reject(db, transfer_id, req.reason, caller.user_id)
            if updated is None:
                await self._raise_transition_failure(db, transfer_id, TransferAction.REJECT)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("transfer %s rejected by %s: %s", transfer_id, caller.name, req.reason)
        return await self._published(NotificationEvent.TRANSFER_REJECTED, updated)

    # ------------------------------------------------------------------
    # Execute (assigned executor) / complete (creator or supervisor)
    # ------------------------------------------------------------------

    async def execute(
        self, db: AsyncSession, caller: Caller, transfer_id: str, req: ExecuteTransferRequest
    ) -> TransferResponse:
        require(caller, Capability.EXECUTE_TRANSFER)
        try:
            current = await self._get_or_raise(db, transfer_id)
            if current.executor_id != caller.user_id:
                raise UnauthorizedError(f"Transfer {transfer_id} is not assigned to {caller.name}")
            updated = await self._repo.mark_executed(
                db, transfer_id, caller.user_id, req.receipt_ref, req.comment
            )
            if updated is None:
                await self._raise_transition_failure(db, transfer_id, TransferAction.EXECUTE)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "transfer %s executed by %s (receipt %s)", transfer_id, caller.name, req.receipt_ref
        )
        return await self._published(NotificationEvent.TRANSFER_EXECUTED, updated)

    async def complete(
        self, db: AsyncSession, caller: Caller, transfer_id: str
    ) -> TransferResponse:
        require(caller, Capability.COMPLETE_TRANSFER)
        try:
            current = await self._get_or_raise(db, transfer_id)
            if current.created_by != caller.user_id and not caller.is_supervisor:
                raise UnauthorizedError(
                    f"Only the creator or a supervisor may complete transfer {transfer_id}"
                )
            updated = await self._repo.mark_completed(db, transfer_id)
            if updated is None:
                await self._raise_transition_failure(db, transfer_id, TransferAction.COMPLETE)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("transfer %s completed by %s", transfer_id, caller.name)
        return await self._published(NotificationEvent.TRANSFER_COMPLETED, updated)

    # ------------------------------------------------------------------
    # Queries and purge
    # ------------------------------------------------------------------

    async def get(self, db: AsyncSession, caller: Caller, transfer_id: str) -> TransferResponse:
        require(caller, Capability.VIEW_TRANSFERS)
        request = await self._get_or_raise(db, transfer_id)
        if not _can_see(caller, request):
            raise UnauthorizedError(f"Transfer {transfer_id} is outside the caller's scope")
        return TransferResponse.from_domain(request)

    async def list_requests(
        self,
        db: AsyncSession,
        caller: Caller,
        status: TransferStatus | None,
        created_by: str | None,
        executor_id: str | None,
        cursor: str | None,
        limit: int,
    ) -> TransferListResponse:
        require(caller, Capability.VIEW_TRANSFERS)
        agency_id = None
        if caller.role == Role.EXECUTOR:
            executor_id = caller.user_id
        elif caller.role == Role.CASHIER and caller.agency_id:
            agency_id = caller.agency_id
        elif caller.role == Role.CASHIER:
            created_by = caller.user_id
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        requests = await self._repo.list_requests(
            db,
            status.value if status else None,
            created_by,
            executor_id,
            agency_id,
            cursor_decode_str(cursor),
            limit + 1,
        )
        has_more = len(requests) > limit
        page = requests[:limit]
        return TransferListResponse(
            items=[TransferResponse.from_domain(r) for r in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )

    async def purge(
        self, db: AsyncSession, caller: Caller, status: TransferStatus | None
    ) -> PurgeResponse:
        require(caller, Capability.PURGE_TRANSFERS)
        try:
            deleted = await self._repo.purge(db, status.value if status else None)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.warning(
            "%d transfer requests purged by %s (status=%s)",
            deleted,
            caller.name,
            status.value if status else "any",
        )
        return PurgeResponse(deleted=deleted, status=status.value if status else None)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get_or_raise(self, db: AsyncSession, transfer_id: str) -> TransferRequest:
        request = await self._repo.get(db, transfer_id)
        if request is None:
            raise TransferNotFoundError(transfer_id)
        return request

    async def _raise_transition_failure(
        self, db: AsyncSession, transfer_id: str, action: TransferAction
    ) -> NoReturn:
        current = await self._get_or_raise(db, transfer_id)
        ensure_transition(current, action)
        # Status matched on re-read: another writer moved it in between.
        raise InvalidStateTransitionError(transfer_id, current.status, action.value)

    async def _published(
        self, event: NotificationEvent, request: TransferRequest
    ) -> TransferResponse:
        response = TransferResponse.from_domain(request)
        await notify(self._sink, event, response.model_dump(mode="json"))
        return response


def _can_see(caller: Caller, request: TransferRequest) -> bool:
    if caller.role == Role.EXECUTOR:
        return request.executor_id == caller.user_id
    if caller.role == Role.CASHIER:
        if caller.agency_id:
            return request.agency_id == caller.agency_id
        return request.created_by == caller.user_id
    return True
