"""Admin REST API — registrar only."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.rp_admin.application.service import AdminService
from src.rp_common.response import ApiResponse, respond
from src.rp_engine.application.service import get_ledger_engine
from src.rp_engine.engine.engine import LedgerEngine
from src.rp_gateway.auth.dependencies import get_current_participant

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


async def require_registrar(
    participant_id: Annotated[str, Depends(get_current_participant)],
    engine: Annotated[LedgerEngine, Depends(get_ledger_engine)],
) -> str:
    """Raises 403 (UnauthorizedRegistrarError) for non-registrars."""
    engine.pool.registry.require_registrar(participant_id)
    return participant_id


@router.get("/risk-state")
async def get_risk_state(
    registrar: Annotated[str, Depends(require_registrar)],
    engine: Annotated[LedgerEngine, Depends(get_ledger_engine)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_risk_state(engine)
    return respond(request, data)


@router.get("/invariants")
async def verify_invariants(
    registrar: Annotated[str, Depends(require_registrar)],
    engine: Annotated[LedgerEngine, Depends(get_ledger_engine)],
    request: Request,
) -> ApiResponse:
    data = await _service.verify_all_invariants(engine)
    return respond(request, data)
