"""RiskPool — the aggregate that wires the ledger components together.

One RiskPool is the whole mutable state of the system. Components hold
references to their siblings through this object only, and every capital
change calls back into `recompute_risk_state` so the pricing aggregate is
always derived from live pool totals.

The aggregate is a plain object graph: LedgerEngine deep-copies it for each
mutation and swaps the copy in on success.
"""

from src.rp_common.fixed_point import BPS
from src.rp_common.pool_config import PoolConfig
from src.rp_distribution.domain.coordinator import DistributionCoordinator
from src.rp_event.domain.models import Event
from src.rp_event.domain.registry import EventRegistry
from src.rp_ledger.domain.ledger import Ledger
from src.rp_ledger.domain.models import ParticipantBalance
from src.rp_ledger.domain.payment import InMemoryPaymentAsset, PaymentAsset
from src.rp_policy.domain.book import PolicyBook
from src.rp_pool.domain.capital_pool import CapitalPool
from src.rp_pool.domain.reinsurance_pool import ReinsurancePool
from src.rp_pricing.domain.engine import RiskPricingEngine
from src.rp_pricing.domain.models import ReinsuranceState


class RiskPool:
    def __init__(
        self,
        config: PoolConfig | None = None,
        payment_asset: PaymentAsset | None = None,
    ) -> None:
        self.config = config or PoolConfig()
        self.ledger = Ledger(payment_asset or InMemoryPaymentAsset())
        self.registry = EventRegistry(self.config.registrar_ids)
        self.pricing = RiskPricingEngine(
            mu_bps=self.config.risk_mu_bps,
            reinsurer_claim_share_bps=BPS - self.config.insurer_claim_share_bps,
        )
        self.insurers = CapitalPool(
            self.ledger, self.registry, self.config.min_collateral, self.recompute_risk_state
        )
        self.reinsurers = ReinsurancePool(
            self.ledger, self.config.min_collateral, self.recompute_risk_state
        )
        self.book = PolicyBook(self.registry)
        self.distribution = DistributionCoordinator(
            ledger=self.ledger,
            registry=self.registry,
            insurers=self.insurers,
            reinsurers=self.reinsurers,
            book=self.book,
            pricing=self.pricing,
            config=self.config,
            on_capital_change=self.recompute_risk_state,
        )

    def recompute_risk_state(self) -> ReinsuranceState:
        return self.pricing.recompute(
            insurer_capital=self.insurers.total_collateral(),
            reinsurance_capital=self.reinsurers.total_collateral(),
            events=self.registry.list_events(),
        )

    def withdraw(self, participant_id: str, amount: int) -> ParticipantBalance:
        """Withdraw, keeping enough available to fund the holder's policies."""
        required = self.book.required_retained_balance(
            participant_id, self.config.retained_premium_period
        )
        return self.ledger.withdraw(participant_id, amount, required_retained=required)

    def trigger_event(self, caller: str, event_id: int, now: int) -> Event:
        """Trigger an event; it leaves the open set, so the aggregate shrinks."""
        event = self.registry.trigger(caller, event_id, now)
        self.recompute_risk_state()
        return event

    def set_risk_parameters(
        self, caller: str, event_id: int, expected_loss_ratio: int, total_loss_ratio: int
    ) -> Event:
        event = self.registry.set_risk_parameters(
            caller, event_id, expected_loss_ratio, total_loss_ratio
        )
        self.recompute_risk_state()
        return event
