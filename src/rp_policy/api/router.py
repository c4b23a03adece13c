"""Policy REST API — all endpoints act on the caller's own policies."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rp_common.database import get_db_session
from src.rp_common.datetime_utils import now_ts
from src.rp_common.response import ApiResponse, respond
from src.rp_engine.application.service import get_ledger_engine
from src.rp_engine.engine.engine import LedgerEngine
from src.rp_gateway.auth.dependencies import get_current_participant
from src.rp_policy.application.schemas import BuyPolicyRequest, QuoteRequest
from src.rp_policy.application.service import PolicyApplicationService

router = APIRouter(prefix="/policies", tags=["policies"])

_service = PolicyApplicationService()

Participant = Annotated[str, Depends(get_current_participant)]
Engine = Annotated[LedgerEngine, Depends(get_ledger_engine)]
Session = Annotated[AsyncSession | None, Depends(get_db_session)]


@router.post("/quote")
async def quote_premium(
    body: QuoteRequest,
    holder: Participant,
    engine: Engine,
    request: Request,
) -> ApiResponse:
    data = await _service.quote(engine, body.event_id, body.coverage)
    return respond(request, data)


@router.post("")
async def buy_policy(
    body: BuyPolicyRequest,
    holder: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.buy_policy(engine, db, holder, body, now_ts())
    return respond(request, data)


@router.get("")
async def list_policies(holder: Participant, engine: Engine, request: Request) -> ApiResponse:
    data = await _service.list_policies(engine, holder)
    return respond(request, data)


@router.get("/{policy_id}")
async def get_policy(
    policy_id: int,
    holder: Participant,
    engine: Engine,
    request: Request,
) -> ApiResponse:
    data = await _service.get_policy(engine, holder, policy_id)
    return respond(request, data)


@router.post("/{policy_id}/activate")
async def activate_policy(
    policy_id: int,
    holder: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.activate_policy(engine, db, holder, policy_id, now_ts())
    return respond(request, data)


@router.post("/{policy_id}/claim")
async def claim_policy(
    policy_id: int,
    holder: Participant,
    engine: Engine,
    db: Session,
    request: Request,
) -> ApiResponse:
    data = await _service.claim_policy(engine, db, holder, policy_id, now_ts())
    return respond(request, data)
