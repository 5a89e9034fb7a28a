"""fx_rates REST API: read and set reference rates."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_common.database import get_db_session
from src.fx_common.response import ApiResponse, success_response
from src.fx_gateway.auth.capabilities import Caller
from src.fx_gateway.auth.dependencies import get_current_caller
from src.fx_rates.application.schemas import SetRateRequest
from src.fx_rates.application.service import RateApplicationService

router = APIRouter(prefix="/rates", tags=["rates"])

_service = RateApplicationService()


@router.get("")
async def get_rates(
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_rates(db)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.put("")
async def set_rate(
    body: SetRateRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.set_rate(db, caller, body)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    resp.message = "Rate updated"
    return resp
