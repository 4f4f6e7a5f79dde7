"""pm_position REST endpoints.

GET  /markets/{market_id}/quote           — price a deposit without placing it
POST /markets/{market_id}/predictions     — place the caller's prediction
GET  /markets/{market_id}/positions/me    — the caller's position
POST /markets/{market_id}/claim           — claim the caller's reward
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.enums import Outcome
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_caller_identity
from src.pm_position.application.schemas import PlacePredictionRequest
from src.pm_position.application.service import PredictionApplicationService

router = APIRouter(prefix="/markets", tags=["positions"])

_service = PredictionApplicationService()


@router.get("/{market_id}/quote")
async def quote_prediction(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    side: Literal["YES", "NO"] = Query(...),
    amount: int = Query(...),
) -> ApiResponse:
    result = await _service.quote(db, market_id, Outcome(side), amount)
    return success_response(result.model_dump(), request)


@router.post("/{market_id}/predictions", status_code=201)
async def place_prediction(
    market_id: str,
    body: PlacePredictionRequest,
    request: Request,
    caller: Annotated[str, Depends(get_caller_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.place_prediction(
        db, caller, market_id, Outcome(body.side), body.amount
    )
    return success_response(result.model_dump(), request)


@router.get("/{market_id}/positions/me")
async def get_my_position(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_caller_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_position(db, market_id, caller)
    return success_response(result.model_dump(), request)


@router.post("/{market_id}/claim")
async def claim_reward(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_caller_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.claim_reward(db, caller, market_id)
    return success_response(result.model_dump(), request)
