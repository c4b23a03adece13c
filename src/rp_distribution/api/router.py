"""Distribution REST API — premium collection, distribution and settlement."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rp_common.database import get_db_session
from src.rp_common.datetime_utils import now_ts
from src.rp_common.response import ApiResponse, respond
from src.rp_distribution.application.schemas import PeriodicDistributionRequest
from src.rp_distribution.application.service import DistributionApplicationService
from src.rp_engine.application.service import get_ledger_engine
from src.rp_engine.engine.engine import LedgerEngine
from src.rp_gateway.auth.dependencies import get_current_participant

router = APIRouter(prefix="/distribution", tags=["distribution"])

_service = DistributionApplicationService()

Participant = Annotated[str, Depends(get_current_participant)]
Engine = Annotated[LedgerEngine, Depends(get_ledger_engine)]
Session = Annotated[AsyncSession | None, Depends(get_db_session)]


@router.post("/{event_id}/collect")
async def collect_premiums(
    event_id: int,
    caller: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.collect(engine, db, event_id, now_ts())
    return respond(request, data)


@router.post("/{event_id}/distribute")
async def distribute_premiums(
    event_id: int,
    caller: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.distribute(engine, db, event_id, now_ts())
    return respond(request, data)


@router.post("/{event_id}/distribute-periodic")
async def distribute_periodically(
    event_id: int,
    body: PeriodicDistributionRequest,
    caller: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.distribute_periodically(
        engine, db, caller, event_id, body.interval, now_ts()
    )
    return respond(request, data)


@router.post("/{event_id}/settle")
async def settle_claims(
    event_id: int,
    caller: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.settle(engine, db, event_id, now_ts())
    return respond(request, data)
