"""pm_market REST endpoints.

POST /markets                              — initialize a market (caller = creator)
GET  /markets                              — list with cursor pagination
GET  /markets/{market_id}                  — full detail
POST /markets/{market_id}/resolve          — creator declares the outcome
POST /markets/{market_id}/fees/withdraw    — creator withdraws accrued fees
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.enums import Outcome
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_caller_identity
from src.pm_market.application.schemas import (
    InitializeMarketRequest,
    ResolveMarketRequest,
    WithdrawFeesRequest,
)
from src.pm_market.application.service import MarketApplicationService

router = APIRouter(prefix="/markets", tags=["markets"])

_service = MarketApplicationService()


@router.post("", status_code=201)
async def initialize_market(
    body: InitializeMarketRequest,
    request: Request,
    caller: Annotated[str, Depends(get_caller_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.initialize_market(
        db,
        creator=caller,
        market_id=body.market_id,
        question=body.question,
        resolution_time=body.resolution_time,
        initial_liquidity=body.initial_liquidity,
    )
    return success_response(result.model_dump(), request)


@router.get("")
async def list_markets(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: Literal["OPEN", "RESOLVED", "ALL"] | None = Query(
        None, description="Filter by status. Default: OPEN. Use ALL for no filter."
    ),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    result = await _service.list_markets(db, status, cursor, limit)
    return success_response(result.model_dump(), request)


@router.get("/{market_id}")
async def get_market(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_market(db, market_id)
    return success_response(result.model_dump(), request)


@router.post("/{market_id}/resolve")
async def resolve_market(
    market_id: str,
    body: ResolveMarketRequest,
    request: Request,
    caller: Annotated[str, Depends(get_caller_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.resolve_market(db, caller, market_id, Outcome(body.outcome))
    return success_response(result.model_dump(), request)


@router.post("/{market_id}/fees/withdraw")
async def withdraw_fees(
    market_id: str,
    body: WithdrawFeesRequest,
    request: Request,
    caller: Annotated[str, Depends(get_caller_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.withdraw_fees(db, caller, market_id, body.amount)
    return success_response(result.model_dump(), request)
