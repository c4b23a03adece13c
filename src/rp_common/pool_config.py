"""Ledger constants passed into the domain components.

Domain code never reads `settings` directly; the composition root builds a
PoolConfig so tests can run with any parameters and no environment.
"""

from dataclasses import dataclass, field

from src.rp_common.errors import InvalidRiskParameterError
from src.rp_common.fixed_point import BPS


@dataclass(frozen=True)
class PoolConfig:
    min_collateral: int = 1_000
    lockup_period: int = 7 * 24 * 3600
    min_distribution_interval: int = 3600
    retained_premium_period: int = 30 * 24 * 3600
    gratification_bps: int = 100
    protocol_fee_bps: int = 100
    insurer_claim_share_bps: int = 7_000
    risk_mu_bps: int = 10_000
    registrar_ids: frozenset[str] = field(default_factory=lambda: frozenset({"registrar"}))

    def __post_init__(self) -> None:
        for name in ("gratification_bps", "protocol_fee_bps", "insurer_claim_share_bps"):
            value = getattr(self, name)
            if not (0 <= value <= BPS):
                raise InvalidRiskParameterError(f"{name}={value} outside [0, {BPS}]")
        if self.gratification_bps + self.protocol_fee_bps > BPS:
            raise InvalidRiskParameterError("gratification + protocol fee exceed 100%")
        if self.risk_mu_bps <= 0:
            raise InvalidRiskParameterError(f"risk_mu_bps={self.risk_mu_bps}")

    @classmethod
    def from_settings(cls) -> "PoolConfig":
        from config.settings import settings

        return cls(
            min_collateral=settings.MIN_COLLATERAL,
            lockup_period=settings.LOCKUP_PERIOD_SECONDS,
            min_distribution_interval=settings.MIN_DISTRIBUTION_INTERVAL_SECONDS,
            retained_premium_period=settings.RETAINED_PREMIUM_PERIOD_SECONDS,
            gratification_bps=settings.GRATIFICATION_BPS,
            protocol_fee_bps=settings.PROTOCOL_FEE_BPS,
            insurer_claim_share_bps=settings.INSURER_CLAIM_SHARE_BPS,
            risk_mu_bps=settings.RISK_MU_BPS,
            registrar_ids=frozenset(settings.REGISTRAR_IDS),
        )
