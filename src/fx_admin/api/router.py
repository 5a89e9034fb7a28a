"""Admin REST API."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_admin.application.service import AdminService
from src.fx_common.database import get_db_session
from src.fx_common.response import ApiResponse, success_response
from src.fx_gateway.auth.capabilities import Caller
from src.fx_gateway.auth.dependencies import get_current_caller

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


@router.get("/verify-ledger")
async def verify_ledger(
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.verify_ledger(db, caller)
    return success_response(result)
