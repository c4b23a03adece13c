"""Pydantic schemas for the event API."""

from pydantic import BaseModel, Field

from src.rp_common.datetime_utils import ts_to_iso
from src.rp_event.domain.models import Event

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class RegisterEventRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    description: str = Field("", max_length=4096)
    trigger_threshold: int = Field(..., gt=0, le=10_000, description="bps")
    base_premium: int = Field(..., gt=0, le=10_000, description="Annual bps of coverage")


class RiskParametersRequest(BaseModel):
    expected_loss_ratio: int = Field(..., gt=0, le=10_000)
    total_loss_ratio: int = Field(..., gt=0)


class GrantRegistrarRequest(BaseModel):
    participant_id: str = Field(..., min_length=1, max_length=128)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class EventResponse(BaseModel):
    id: int
    name: str
    description: str
    status: str
    trigger_threshold: int
    base_premium: int
    is_active: bool
    is_triggered: bool
    trigger_time: int | None
    trigger_time_iso: str | None
    total_coverage: int
    total_premiums: int
    total_insurer_capital: int
    accumulated_premiums: int
    last_distribution_time: int | None
    total_payouts: int
    expected_loss_ratio: int
    total_loss_ratio: int
    max_premium: int

    @classmethod
    def from_domain(cls, event: Event) -> "EventResponse":
        return cls(
            id=event.id,
            name=event.name,
            description=event.description,
            status=event.status.value,
            trigger_threshold=event.trigger_threshold,
            base_premium=event.base_premium,
            is_active=event.is_active,
            is_triggered=event.is_triggered,
            trigger_time=event.trigger_time,
            trigger_time_iso=ts_to_iso(event.trigger_time),
            total_coverage=event.total_coverage,
            total_premiums=event.total_premiums,
            total_insurer_capital=event.total_insurer_capital,
            accumulated_premiums=event.accumulated_premiums,
            last_distribution_time=event.last_distribution_time,
            total_payouts=event.total_payouts,
            expected_loss_ratio=event.expected_loss_ratio,
            total_loss_ratio=event.total_loss_ratio,
            max_premium=event.max_premium,
        )


class EventListResponse(BaseModel):
    items: list[EventResponse]


class RegistrarResponse(BaseModel):
    participant_id: str
    is_registrar: bool
