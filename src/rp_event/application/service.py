"""EventApplicationService — registrar operations and event queries."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.rp_common.enums import EventStatus
from src.rp_engine.domain.risk_pool import RiskPool
from src.rp_engine.engine.engine import LedgerEngine
from src.rp_event.application.schemas import (
    EventListResponse,
    EventResponse,
    RegisterEventRequest,
    RegistrarResponse,
)
from src.rp_event.domain.models import Event


class EventApplicationService:
    async def register_event(
        self,
        engine: LedgerEngine,
        db: AsyncSession | None,
        caller: str,
        body: RegisterEventRequest,
    ) -> EventResponse:
        def _register(pool: RiskPool) -> Event:
            event_id = pool.registry.register_event(
                caller, body.name, body.description, body.trigger_threshold, body.base_premium
            )
            return pool.registry.get(event_id)

        return EventResponse.from_domain(await engine.execute(_register, db))

    async def trigger_event(
        self, engine: LedgerEngine, db: AsyncSession | None, caller: str, event_id: int, now: int
    ) -> EventResponse:
        event = await engine.execute(lambda pool: pool.trigger_event(caller, event_id, now), db)
        return EventResponse.from_domain(event)

    async def deactivate_event(
        self, engine: LedgerEngine, db: AsyncSession | None, caller: str, event_id: int
    ) -> EventResponse:
        event = await engine.execute(
            lambda pool: pool.distribution.deactivate_event(caller, event_id), db
        )
        return EventResponse.from_domain(event)

    async def set_risk_parameters(
        self,
        engine: LedgerEngine,
        db: AsyncSession | None,
        caller: str,
        event_id: int,
        expected_loss_ratio: int,
        total_loss_ratio: int,
    ) -> EventResponse:
        event = await engine.execute(
            lambda pool: pool.set_risk_parameters(
                caller, event_id, expected_loss_ratio, total_loss_ratio
            ),
            db,
        )
        return EventResponse.from_domain(event)

    async def grant_registrar(
        self, engine: LedgerEngine, db: AsyncSession | None, caller: str, participant_id: str
    ) -> RegistrarResponse:
        await engine.execute(lambda pool: pool.registry.grant_registrar(caller, participant_id), db)
        return RegistrarResponse(participant_id=participant_id, is_registrar=True)

    async def get_event(self, engine: LedgerEngine, event_id: int) -> EventResponse:
        return EventResponse.from_domain(engine.pool.registry.get(event_id))

    async def list_events(
        self, engine: LedgerEngine, status: EventStatus | None
    ) -> EventListResponse:
        events = engine.pool.registry.list_events()
        if status is not None:
            events = [e for e in events if e.status == status]
        return EventListResponse(items=[EventResponse.from_domain(e) for e in events])
