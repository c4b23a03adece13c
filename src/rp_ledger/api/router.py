"""Account REST API — 3 endpoints, all require JWT authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rp_common.database import get_db_session
from src.rp_common.response import ApiResponse, respond
from src.rp_engine.application.service import get_ledger_engine
from src.rp_engine.engine.engine import LedgerEngine
from src.rp_gateway.auth.dependencies import get_current_participant
from src.rp_ledger.application.schemas import DepositRequest, WithdrawRequest
from src.rp_ledger.application.service import AccountApplicationService

router = APIRouter(prefix="/account", tags=["account"])

_service = AccountApplicationService()


@router.get("/balance")
async def get_balance(
    participant_id: Annotated[str, Depends(get_current_participant)],
    engine: Annotated[LedgerEngine, Depends(get_ledger_engine)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(engine, participant_id)
    return respond(request, data)


@router.post("/deposit")
async def deposit(
    body: DepositRequest,
    participant_id: Annotated[str, Depends(get_current_participant)],
    engine: Annotated[LedgerEngine, Depends(get_ledger_engine)],
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.deposit(engine, db, participant_id, body.amount)
    return respond(request, data)


@router.post("/withdraw")
async def withdraw(
    body: WithdrawRequest,
    participant_id: Annotated[str, Depends(get_current_participant)],
    engine: Annotated[LedgerEngine, Depends(get_ledger_engine)],
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.withdraw(engine, db, participant_id, body.amount)
    return respond(request, data)
