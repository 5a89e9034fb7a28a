"""fx_exchange REST API: purchase, sale, client purchase, cession, replenishment, reporting."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_common.database import get_db_session
from src.fx_common.enums import ExchangeOperationType
from src.fx_common.response import ApiResponse, success_response
from src.fx_exchange.application.schemas import (
    CessionRequest,
    ClientPurchaseRequest,
    PurchaseRequest,
    ReplenishmentRequest,
    SaleRequest,
)
from src.fx_exchange.application.service import ExchangeApplicationService
from src.fx_gateway.auth.capabilities import Caller
from src.fx_gateway.auth.dependencies import get_current_caller
from src.fx_notify.sink import RedisNotificationSink

router = APIRouter(prefix="/exchange", tags=["exchange"])

_service = ExchangeApplicationService(sink=RedisNotificationSink())


def _wrap(data: object, request: Request, message: str = "success") -> ApiResponse:
    resp = success_response(data.model_dump(mode="json"))  # type: ignore[attr-defined]
    resp.message = message
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/purchase")
async def purchase(
    body: PurchaseRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.purchase(db, caller, body)
    return _wrap(data, request, "Purchase recorded")


@router.post("/sale")
async def sale(
    body: SaleRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.sale(db, caller, body)
    return _wrap(data, request, "Sale recorded")


@router.post("/client-purchase")
async def client_purchase(
    body: ClientPurchaseRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.client_purchase(db, caller, body)
    return _wrap(data, request, "Client purchase recorded")


@router.post("/cession")
async def cession(
    body: CessionRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.cession(db, caller, body)
    return _wrap(data, request, "Cession recorded")


@router.post("/replenishment")
async def replenishment(
    body: ReplenishmentRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.replenish(db, caller, body)
    return _wrap(data, request, "Agencies replenished")


@router.get("/operations")
async def list_operations(
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    owner: str | None = Query(None, description="Agency id or HEAD_OFFICE; omit for all"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    operation_type: ExchangeOperationType | None = Query(None),
) -> ApiResponse:
    data = await _service.list_operations(db, caller, owner, cursor, limit, operation_type)
    return _wrap(data, request)


@router.get("/commissions")
async def commissions_generated(
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    owner: str | None = Query(None, description="Agency id or HEAD_OFFICE; omit for all"),
) -> ApiResponse:
    data = await _service.commissions_generated(db, caller, owner)
    return _wrap(data, request)
