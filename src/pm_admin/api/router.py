# src/pm_admin/api/router.py
"""Admin REST API."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_admin.application.service import AdminService
from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_caller_identity

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


@router.get("/markets/{market_id}/audit")
async def audit_market(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_caller_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.audit_market(market_id, db)
    return success_response(result, request)
