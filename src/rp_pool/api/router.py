"""Capital-pool REST API — insurer and reinsurer endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rp_common.database import get_db_session
from src.rp_common.response import ApiResponse, respond
from src.rp_engine.application.service import get_ledger_engine
from src.rp_engine.engine.engine import LedgerEngine
from src.rp_gateway.auth.dependencies import get_current_participant
from src.rp_pool.application.schemas import (
    AddCapitalRequest,
    AllocationRequest,
    RegisterCapitalRequest,
)
from src.rp_pool.application.service import PoolApplicationService

router = APIRouter(prefix="/pools", tags=["pools"])

_service = PoolApplicationService()

Participant = Annotated[str, Depends(get_current_participant)]
Engine = Annotated[LedgerEngine, Depends(get_ledger_engine)]
Session = Annotated[AsyncSession | None, Depends(get_db_session)]


# ---------------------------------------------------------------------------
# Insurers
# ---------------------------------------------------------------------------


@router.post("/insurers")
async def register_insurer(
    body: RegisterCapitalRequest,
    participant_id: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.register_insurer(engine, db, participant_id, body.collateral)
    return respond(request, data)


@router.post("/insurers/capital")
async def add_insurer_capital(
    body: AddCapitalRequest,
    participant_id: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.add_insurer_capital(engine, db, participant_id, body.amount)
    return respond(request, data)


@router.post("/insurers/allocations")
async def allocate_to_event(
    body: AllocationRequest,
    participant_id: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.allocate(engine, db, participant_id, body.event_id, body.amount)
    return respond(request, data)


@router.post("/insurers/allocations/remove")
async def remove_from_event(
    body: AllocationRequest,
    participant_id: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.remove_allocation(engine, db, participant_id, body.event_id, body.amount)
    return respond(request, data)


@router.get("/insurers/{insurer_id}")
async def get_insurer(
    insurer_id: str,
    participant_id: Participant,
    engine: Engine,
    request: Request,
) -> ApiResponse:
    data = await _service.get_insurer(engine, insurer_id)
    return respond(request, data)


@router.get("/insurers/{insurer_id}/allocations/{event_id}")
async def get_allocation(
    insurer_id: str,
    event_id: int,
    participant_id: Participant,
    engine: Engine,
    request: Request,
) -> ApiResponse:
    data = await _service.get_allocation(engine, insurer_id, event_id)
    return respond(request, data)


# ---------------------------------------------------------------------------
# Reinsurers
# ---------------------------------------------------------------------------


@router.post("/reinsurers")
async def register_reinsurer(
    body: RegisterCapitalRequest,
    participant_id: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.register_reinsurer(engine, db, participant_id, body.collateral)
    return respond(request, data)


@router.post("/reinsurers/capital")
async def add_reinsurer_capital(
    body: AddCapitalRequest,
    participant_id: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.add_reinsurer_capital(engine, db, participant_id, body.amount)
    return respond(request, data)


@router.get("/reinsurers/{reinsurer_id}")
async def get_reinsurer(
    reinsurer_id: str,
    participant_id: Participant,
    engine: Engine,
    request: Request,
) -> ApiResponse:
    data = await _service.get_reinsurer(engine, reinsurer_id)
    return respond(request, data)
