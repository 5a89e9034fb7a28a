"""LedgerApplicationService: thin composition layer over LedgerEngine.

Read operations run without an explicit transaction. The manual override
commits on success and rolls back on any failure.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_common.enums import NotificationEvent
from src.fx_gateway.auth.capabilities import Caller, Capability, require, resolve_owner
from src.fx_ledger.application.schemas import (
    AccountBalance,
    AdjustBalanceRequest,
    AdjustBalanceResponse,
    BalancesResponse,
)
from src.fx_ledger.domain.engine import LedgerEngine
from src.fx_notify.sink import NotificationSink, notify


class LedgerApplicationService:
    def __init__(
        self,
        engine: LedgerEngine | None = None,
        sink: NotificationSink | None = None,
    ) -> None:
        self._engine = engine or LedgerEngine()
        self._sink = sink

    async def get_balances(
        self, db: AsyncSession, caller: Caller, owner: str | None
    ) -> BalancesResponse:
        require(caller, Capability.VIEW_CASH)
        target = resolve_owner(caller, owner)
        accounts = await self._engine.get_balances(db, target)
        return BalancesResponse(
            owner=target,
            balances=[AccountBalance.from_domain(a) for a in accounts],
        )

    async def adjust_balance(
        self, db: AsyncSession, caller: Caller, req: AdjustBalanceRequest
    ) -> AdjustBalanceResponse:
        require(caller, Capability.ADJUST_BALANCE)
        target = resolve_owner(caller, req.owner)
        try:
            adjustment, operation = await self._engine.set_balance(
                db, target, req.currency, req.new_balance, req.reason, caller.name
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        response = AdjustBalanceResponse.from_result(adjustment, operation.id)
        await notify(
            self._sink,
            NotificationEvent.BALANCE_ADJUSTED,
            response.model_dump(mode="json") | {"reason": req.reason, "actor": caller.name},
        )
        return response
