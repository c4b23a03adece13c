"""Global conservation and consistency checks over a RiskPool.

Run by LedgerEngine after every mutation, before the new state is swapped
in, and on demand through the admin API.
"""

import logging

from src.rp_engine.domain.risk_pool import RiskPool

logger = logging.getLogger(__name__)


def verify_global_invariants(pool: RiskPool) -> list[str]:
    """Return a list of violation strings; empty means consistent."""
    violations: list[str] = []
    ledger = pool.ledger

    balances = ledger.sum_balances()
    accumulated = sum(e.accumulated_premiums for e in pool.registry.events.values())
    held = balances + accumulated + ledger.protocol_fees
    if held != ledger.total_system_liquidity:
        violations.append(
            f"conservation: balances({balances}) + accumulated_premiums({accumulated}) "
            f"+ protocol_fees({ledger.protocol_fees}) = {held} "
            f"!= total_system_liquidity({ledger.total_system_liquidity})"
        )

    net_deposits = sum(b.total_deposited - b.total_withdrawn for b in ledger.balances.values())
    if net_deposits != ledger.total_system_liquidity:
        violations.append(
            f"net deposits({net_deposits}) != total_system_liquidity({ledger.total_system_liquidity})"
        )

    custody = ledger.payment_asset.custody_balance
    if custody != ledger.total_system_liquidity:
        violations.append(
            f"custody({custody}) != total_system_liquidity({ledger.total_system_liquidity})"
        )

    for pid, balance in ledger.balances.items():
        for name in (
            "available",
            "locked_as_insurer",
            "locked_as_reinsurer",
            "locked_as_policyholder_funds",
        ):
            if getattr(balance, name) < 0:
                violations.append(f"{pid}: negative {name}={getattr(balance, name)}")

    for pid, insurer in pool.insurers.accounts.items():
        locked = ledger.get_balance(pid).locked_as_insurer
        if locked != insurer.total_collateral:
            violations.append(
                f"insurer {pid}: locked_as_insurer({locked}) != collateral({insurer.total_collateral})"
            )
        allocated = sum(insurer.allocations.values())
        if allocated != insurer.consumed_capital:
            violations.append(
                f"insurer {pid}: Σ allocations({allocated}) != consumed({insurer.consumed_capital})"
            )
        if insurer.consumed_capital > insurer.total_collateral:
            violations.append(
                f"insurer {pid}: consumed({insurer.consumed_capital}) "
                f"> collateral({insurer.total_collateral})"
            )

    for pid, reinsurer in pool.reinsurers.accounts.items():
        locked = ledger.get_balance(pid).locked_as_reinsurer
        if locked != reinsurer.collateral:
            violations.append(
                f"reinsurer {pid}: locked_as_reinsurer({locked}) != collateral({reinsurer.collateral})"
            )

    for event in pool.registry.events.values():
        allocated = sum(pool.insurers.allocations_for_event(event.id).values())
        if allocated != event.total_insurer_capital:
            violations.append(
                f"event {event.id}: Σ allocations({allocated}) "
                f"!= total_insurer_capital({event.total_insurer_capital})"
            )

    deposits: dict[str, int] = {}
    for policy in pool.book.policies.values():
        if not policy.is_active and not policy.is_claimed:
            deposits[policy.holder] = deposits.get(policy.holder, 0) + policy.lockup_deposit
    for pid, balance in ledger.balances.items():
        expected = deposits.get(pid, 0)
        if balance.locked_as_policyholder_funds != expected:
            violations.append(
                f"{pid}: locked_as_policyholder_funds({balance.locked_as_policyholder_funds}) "
                f"!= Σ lockup deposits({expected})"
            )

    for msg in violations:
        logger.error("invariant violated: %s", msg)
    return violations
