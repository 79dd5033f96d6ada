# src/dg_admin/api/router.py
"""Admin REST API — operator-only, Bearer token with type=admin."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.dg_admin.application.service import AdminService
from src.dg_common.database import get_db_session
from src.dg_common.identifiers import parse_market_id
from src.dg_common.response import ApiResponse, success_response
from src.dg_gateway.auth.dependencies import require_admin

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service() -> AdminService:
    return AdminService()


@router.post("/resolution/sweep")
async def run_resolution_sweep(
    operator: Annotated[str, Depends(require_admin)],
    service: Annotated[AdminService, Depends(get_admin_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await service.run_sweep(db, operator)
    return success_response(result, request)


@router.post("/markets/{market_id}/resolve")
async def resolve_market(
    market_id: str,
    operator: Annotated[str, Depends(require_admin)],
    service: Annotated[AdminService, Depends(get_admin_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await service.resolve_market(db, parse_market_id(market_id), operator)
    return success_response(result, request)


@router.get("/markets/{market_id}/resolution-logs")
async def list_resolution_logs(
    market_id: str,
    operator: Annotated[str, Depends(require_admin)],
    service: Annotated[AdminService, Depends(get_admin_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(50, ge=1, le=200, description="Most recent rows first"),
) -> ApiResponse:
    logs = await service.list_resolution_logs(db, parse_market_id(market_id), limit)
    return success_response({"items": logs}, request)


@router.post("/ledger/config/sync")
async def sync_ledger_config(
    operator: Annotated[str, Depends(require_admin)],
    service: Annotated[AdminService, Depends(get_admin_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return success_response(await service.sync_config(db), request)


@router.post("/ledger/fee/update")
async def update_creation_fee(
    operator: Annotated[str, Depends(require_admin)],
    service: Annotated[AdminService, Depends(get_admin_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return success_response(await service.update_creation_fee(db, operator), request)
