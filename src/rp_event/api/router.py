"""Event REST API — registrar-guarded lifecycle plus public queries.

The registrar check lives in the EventRegistry; non-registrars get 403
(UnauthorizedRegistrarError) from the domain, not from the router.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rp_common.database import get_db_session
from src.rp_common.datetime_utils import now_ts
from src.rp_common.enums import EventStatus
from src.rp_common.response import ApiResponse, respond
from src.rp_engine.application.service import get_ledger_engine
from src.rp_engine.engine.engine import LedgerEngine
from src.rp_event.application.schemas import (
    GrantRegistrarRequest,
    RegisterEventRequest,
    RiskParametersRequest,
)
from src.rp_event.application.service import EventApplicationService
from src.rp_gateway.auth.dependencies import get_current_participant

router = APIRouter(prefix="/events", tags=["events"])

_service = EventApplicationService()

Participant = Annotated[str, Depends(get_current_participant)]
Engine = Annotated[LedgerEngine, Depends(get_ledger_engine)]
Session = Annotated[AsyncSession | None, Depends(get_db_session)]


@router.post("")
async def register_event(
    body: RegisterEventRequest,
    caller: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.register_event(engine, db, caller, body)
    return respond(request, data)


@router.get("")
async def list_events(
    engine: Engine,
    request: Request,
    status: EventStatus | None = Query(None, description="ACTIVE | INACTIVE | TRIGGERED"),
) -> ApiResponse:
    data = await _service.list_events(engine, status)
    return respond(request, data)


@router.post("/registrars")
async def grant_registrar(
    body: GrantRegistrarRequest,
    caller: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.grant_registrar(engine, db, caller, body.participant_id)
    return respond(request, data)


@router.get("/{event_id}")
async def get_event(event_id: int, engine: Engine, request: Request) -> ApiResponse:
    data = await _service.get_event(engine, event_id)
    return respond(request, data)


@router.post("/{event_id}/trigger")
async def trigger_event(
    event_id: int,
    caller: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.trigger_event(engine, db, caller, event_id, now_ts())
    return respond(request, data)


@router.post("/{event_id}/deactivate")
async def deactivate_event(
    event_id: int,
    caller: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.deactivate_event(engine, db, caller, event_id)
    return respond(request, data)


@router.post("/{event_id}/risk-parameters")
async def set_risk_parameters(
    event_id: int,
    body: RiskParametersRequest,
    caller: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.set_risk_parameters(
        engine, db, caller, event_id, body.expected_loss_ratio, body.total_loss_ratio
    )
    return respond(request, data)
