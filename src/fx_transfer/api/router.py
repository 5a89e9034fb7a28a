"""fx_transfer REST API: transfer request workflow."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_common.database import get_db_session
from src.fx_common.enums import TransferStatus
from src.fx_common.response import ApiResponse, success_response
from src.fx_gateway.auth.capabilities import Caller
from src.fx_gateway.auth.dependencies import get_current_caller
from src.fx_notify.sink import RedisNotificationSink
from src.fx_transfer.application.schemas import (
    AuditTransferRequest,
    CreateTransferRequest,
    ExecuteTransferRequest,
    RejectTransferRequest,
)
from src.fx_transfer.application.service import TransferApplicationService

router = APIRouter(prefix="/transfers", tags=["transfers"])

_service = TransferApplicationService(sink=RedisNotificationSink())


@router.post("", status_code=201)
async def create_transfer(
    body: CreateTransferRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create(db, caller, body)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_transfers(
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: TransferStatus | None = Query(None),
    created_by: str | None = Query(None),
    executor_id: str | None = Query(None),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_requests(db, caller, status, created_by, executor_id, cursor, limit)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("")
async def purge_transfers(
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: TransferStatus | None = Query(None, description="Only purge this status"),
) -> ApiResponse:
    data = await _service.purge(db, caller, status)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{transfer_id}")
async def get_transfer(
    transfer_id: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get(db, caller, transfer_id)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{transfer_id}/audit")
async def audit_transfer(
    transfer_id: str,
    body: AuditTransferRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.audit(db, caller, transfer_id, body)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{transfer_id}/reject")
async def reject_transfer(
    transfer_id: str,
    body: RejectTransferRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.reject(db, caller, transfer_id, body)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{transfer_id}/execute")
async def execute_transfer(
    transfer_id: str,
    body: ExecuteTransferRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.execute(db, caller, transfer_id, body)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{transfer_id}/complete")
async def complete_transfer(
    transfer_id: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.complete(db, caller, transfer_id)
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
