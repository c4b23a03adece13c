"""Payment asset boundary — the custody collaborator behind deposit/withdraw.

The ledger only calls transfer_in on deposit and transfer_out on withdraw.
Reconciliation invariant: custody_balance == Σ transfer_in − Σ transfer_out
== total_system_liquidity.
"""

import logging
from typing import Protocol

from src.rp_common.errors import PaymentTransferError

logger = logging.getLogger(__name__)


class PaymentAsset(Protocol):
    def transfer_in(self, participant_id: str, amount: int) -> None:
        """Pull `amount` from the participant's wallet into custody.

        Raises PaymentTransferError on failure; nothing moved in that case.
        """
        ...

    def transfer_out(self, participant_id: str, amount: int) -> None:
        """Push `amount` from custody to the participant's wallet."""
        ...

    @property
    def custody_balance(self) -> int: ...


class InMemoryPaymentAsset:
    """Token stand-in for local runs and tests.

    `unlimited=True` lets any wallet fund deposits (dev mode); otherwise
    wallets must be minted first.
    """

    def __init__(self, unlimited: bool = True, custody: int = 0) -> None:
        self._unlimited = unlimited
        self._wallets: dict[str, int] = {}
        self._custody = custody

    @property
    def custody_balance(self) -> int:
        return self._custody

    def wallet_balance(self, participant_id: str) -> int:
        return self._wallets.get(participant_id, 0)

    def mint(self, participant_id: str, amount: int) -> None:
        self._wallets[participant_id] = self.wallet_balance(participant_id) + amount

    def transfer_in(self, participant_id: str, amount: int) -> None:
        if amount <= 0:
            raise PaymentTransferError(f"non-positive transfer_in {amount}")
        wallet = self.wallet_balance(participant_id)
        if not self._unlimited and wallet < amount:
            raise PaymentTransferError(
                f"wallet of {participant_id} holds {wallet}, needs {amount}"
            )
        if not self._unlimited:
            self._wallets[participant_id] = wallet - amount
        self._custody += amount
        logger.debug("transfer_in %s amount=%d custody=%d", participant_id, amount, self._custody)

    def transfer_out(self, participant_id: str, amount: int) -> None:
        if amount <= 0:
            raise PaymentTransferError(f"non-positive transfer_out {amount}")
        if self._custody < amount:
            raise PaymentTransferError(f"custody holds {self._custody}, needs {amount}")
        self._custody -= amount
        self._wallets[participant_id] = self.wallet_balance(participant_id) + amount
        logger.debug("transfer_out %s amount=%d custody=%d", participant_id, amount, self._custody)
