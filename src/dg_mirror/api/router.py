"""dg_mirror REST API — client-triggered sync, public and rate limited."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.dg_common.database import get_db_session
from src.dg_common.identifiers import parse_market_id, parse_wallet
from src.dg_common.response import ApiResponse, success_response
from src.dg_gateway.middleware.rate_limit import sync_rate_limit
from src.dg_mirror.application.schemas import PositionResponse, SyncRequest, SyncResponse
from src.dg_mirror.application.service import MirrorService

router = APIRouter(prefix="/sync", tags=["sync"])


def get_mirror_service() -> MirrorService:
    return MirrorService()


@router.post("", dependencies=[Depends(sync_rate_limit)])
async def sync_position(
    body: SyncRequest,
    service: Annotated[MirrorService, Depends(get_mirror_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    market_id = parse_market_id(body.market_id)
    wallet = parse_wallet(body.wallet)
    result = await service.sync(db, market_id, wallet, body.cost_basis_delta)
    return success_response(SyncResponse.from_result(result).model_dump(), request)


@router.get("/position")
async def get_position(
    service: Annotated[MirrorService, Depends(get_mirror_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    market_id: str = Query(..., description="Ledger market id"),
    wallet: str = Query(..., description="Base58 wallet address"),
) -> ApiResponse:
    position = await service.get_position(db, parse_market_id(market_id), parse_wallet(wallet))
    data = PositionResponse.from_domain(position).model_dump() if position else None
    return success_response(data, request)
