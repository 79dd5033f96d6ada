"""dg_settlement REST API — claim quotes and preflight checks, read-only."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.dg_common.database import get_db_session
from src.dg_common.identifiers import parse_market_id, parse_wallet
from src.dg_common.response import ApiResponse, success_response
from src.dg_settlement.application.service import SettlementService

router = APIRouter(prefix="/settlement", tags=["settlement"])


def get_settlement_service() -> SettlementService:
    return SettlementService()


@router.get("/markets/{market_id}/claims/{wallet}")
async def get_claim_quote(
    market_id: str,
    wallet: str,
    service: Annotated[SettlementService, Depends(get_settlement_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await service.get_claim_quote(db, parse_market_id(market_id), parse_wallet(wallet))
    return success_response(data.model_dump(), request)


@router.post("/markets/{market_id}/claims/{wallet}/preflight")
async def preflight_claim(
    market_id: str,
    wallet: str,
    service: Annotated[SettlementService, Depends(get_settlement_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await service.preflight_claim(db, parse_market_id(market_id), parse_wallet(wallet))
    return success_response(data.model_dump(), request)


@router.get("/markets/{market_id}/creator")
async def get_creator_payout(
    market_id: str,
    service: Annotated[SettlementService, Depends(get_settlement_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await service.get_creator_payout(db, parse_market_id(market_id))
    return success_response(data.model_dump(), request)
