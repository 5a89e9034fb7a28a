"""fx_ledger REST API: cash balances and manual override."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_common.database import get_db_session
from src.fx_common.response import ApiResponse, success_response
from src.fx_gateway.auth.capabilities import Caller
from src.fx_gateway.auth.dependencies import get_current_caller
from src.fx_ledger.application.schemas import AdjustBalanceRequest
from src.fx_ledger.application.service import LedgerApplicationService
from src.fx_notify.sink import RedisNotificationSink

router = APIRouter(prefix="/cash", tags=["cash"])

_service = LedgerApplicationService(sink=RedisNotificationSink())


@router.get("/balances")
async def get_balances(
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    owner: str | None = Query(None, description="Agency id; omit for the head office"),
) -> ApiResponse:
    data = await _service.get_balances(db, caller, owner)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/accounts/adjust")
async def adjust_balance(
    body: AdjustBalanceRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.adjust_balance(db, caller, body)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    resp.message = "Balance adjusted"
    return resp
