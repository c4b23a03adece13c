"""Pydantic schemas for the distribution API."""

from pydantic import BaseModel, Field

from src.rp_distribution.domain.models import (
    CollectionResult,
    DistributionResult,
    SettlementResult,
)


class PeriodicDistributionRequest(BaseModel):
    interval: int = Field(..., gt=0, description="Seconds since the last distribution")


class CollectionResponse(BaseModel):
    event_id: int
    collected: int
    policies_charged: int
    policies_skipped: int

    @classmethod
    def from_result(cls, result: CollectionResult) -> "CollectionResponse":
        return cls(
            event_id=result.event_id,
            collected=result.collected,
            policies_charged=result.policies_charged,
            policies_skipped=result.policies_skipped,
        )


class DistributionResponse(BaseModel):
    event_id: int
    distributed: int
    gratification: int
    protocol_fee: int
    insurer_share: int
    reinsurer_share: int
    unassigned: int
    insurer_payouts: dict[str, int]
    reinsurer_payouts: dict[str, int]

    @classmethod
    def from_result(cls, result: DistributionResult) -> "DistributionResponse":
        return cls(
            event_id=result.event_id,
            distributed=result.distributed,
            gratification=result.gratification,
            protocol_fee=result.protocol_fee,
            insurer_share=result.insurer_share,
            reinsurer_share=result.reinsurer_share,
            unassigned=result.unassigned,
            insurer_payouts=dict(result.insurer_payouts),
            reinsurer_payouts=dict(result.reinsurer_payouts),
        )


class SettlementResponse(BaseModel):
    event_id: int
    total_payouts: int
    policies_settled: int
    insurer_consumed: int
    reinsurer_consumed: int
    deposits_refunded: int
    capital_released: int
    premiums_collected: int
    premiums_distributed: int
    claim_payouts: dict[int, int]

    @classmethod
    def from_result(cls, result: SettlementResult) -> "SettlementResponse":
        return cls(
            event_id=result.event_id,
            total_payouts=result.total_payouts,
            policies_settled=result.policies_settled,
            insurer_consumed=result.insurer_consumed,
            reinsurer_consumed=result.reinsurer_consumed,
            deposits_refunded=result.deposits_refunded,
            capital_released=result.capital_released,
            premiums_collected=result.premiums_collected,
            premiums_distributed=result.premiums_distributed,
            claim_payouts=dict(result.claim_payouts),
        )
