"""Unit tests for the Ledger and the in-memory payment asset."""

import pytest

from src.rp_common.errors import (
    InsufficientBalanceError,
    InsufficientBalanceForActivePoliciesError,
    InvalidAmountError,
    ParticipantNotFoundError,
    PaymentTransferError,
)
from src.rp_ledger.domain.ledger import Ledger
from src.rp_ledger.domain.models import LockBucket, ParticipantBalance
from src.rp_ledger.domain.payment import InMemoryPaymentAsset


@pytest.fixture
def ledger() -> Ledger:
    return Ledger(InMemoryPaymentAsset())


class TestParticipantBalance:
    def test_totals(self) -> None:
        balance = ParticipantBalance(
            "alice",
            available=10,
            locked_as_insurer=20,
            locked_as_reinsurer=30,
            locked_as_policyholder_funds=40,
        )
        assert balance.total_locked == 90
        assert balance.total == 100
        assert balance.locked(LockBucket.REINSURER) == 30


class TestDeposit:
    def test_deposit_credits_available_and_liquidity(self, ledger: Ledger) -> None:
        balance = ledger.deposit("alice", 500)
        assert balance.available == 500
        assert balance.total_deposited == 500
        assert ledger.total_system_liquidity == 500
        assert ledger.payment_asset.custody_balance == 500

    @pytest.mark.parametrize("amount", [0, -10])
    def test_non_positive_rejected(self, ledger: Ledger, amount: int) -> None:
        with pytest.raises(InvalidAmountError):
            ledger.deposit("alice", amount)
        assert ledger.total_system_liquidity == 0

    def test_failed_transfer_leaves_no_trace(self) -> None:
        ledger = Ledger(InMemoryPaymentAsset(unlimited=False))
        with pytest.raises(PaymentTransferError):
            ledger.deposit("alice", 100)
        assert "alice" not in ledger.balances
        assert ledger.total_system_liquidity == 0

    def test_minted_wallet_funds_deposit(self) -> None:
        asset = InMemoryPaymentAsset(unlimited=False)
        asset.mint("alice", 100)
        ledger = Ledger(asset)
        ledger.deposit("alice", 60)
        assert asset.wallet_balance("alice") == 40
        assert asset.custody_balance == 60


class TestWithdraw:
    def test_withdraw(self, ledger: Ledger) -> None:
        ledger.deposit("alice", 500)
        balance = ledger.withdraw("alice", 200)
        assert balance.available == 300
        assert balance.total_withdrawn == 200
        assert ledger.total_system_liquidity == 300
        assert ledger.payment_asset.wallet_balance("alice") == 200

    def test_cannot_overdraw(self, ledger: Ledger) -> None:
        ledger.deposit("alice", 100)
        with pytest.raises(InsufficientBalanceError):
            ledger.withdraw("alice", 101)

    def test_unknown_participant_has_nothing(self, ledger: Ledger) -> None:
        with pytest.raises(InsufficientBalanceError):
            ledger.withdraw("ghost", 1)
        assert "ghost" not in ledger.balances

    def test_retained_floor(self, ledger: Ledger) -> None:
        ledger.deposit("alice", 100)
        with pytest.raises(InsufficientBalanceForActivePoliciesError):
            ledger.withdraw("alice", 60, required_retained=50)
        assert ledger.get_balance("alice").available == 100
        ledger.withdraw("alice", 50, required_retained=50)
        assert ledger.get_balance("alice").available == 50

    def test_locked_funds_not_withdrawable(self, ledger: Ledger) -> None:
        ledger.deposit("alice", 100)
        ledger.lock("alice", 80, LockBucket.INSURER)
        with pytest.raises(InsufficientBalanceError):
            ledger.withdraw("alice", 30)


class TestInternalMoves:
    def test_lock_and_unlock(self, ledger: Ledger) -> None:
        ledger.deposit("alice", 100)
        ledger.lock("alice", 40, LockBucket.POLICYHOLDER)
        balance = ledger.get_balance("alice")
        assert balance.available == 60
        assert balance.locked_as_policyholder_funds == 40
        ledger.unlock("alice", 40, LockBucket.POLICYHOLDER)
        assert balance.available == 100
        assert balance.locked_as_policyholder_funds == 0
        assert ledger.total_system_liquidity == 100

    def test_lock_more_than_available(self, ledger: Ledger) -> None:
        ledger.deposit("alice", 10)
        with pytest.raises(InsufficientBalanceError):
            ledger.lock("alice", 11, LockBucket.INSURER)

    def test_debit_locked_wrong_bucket(self, ledger: Ledger) -> None:
        ledger.deposit("alice", 100)
        ledger.lock("alice", 50, LockBucket.INSURER)
        with pytest.raises(InsufficientBalanceError):
            ledger.debit_locked("alice", 10, LockBucket.REINSURER)

    def test_debit_locked_unknown_participant(self, ledger: Ledger) -> None:
        with pytest.raises(ParticipantNotFoundError):
            ledger.debit_locked("ghost", 1, LockBucket.INSURER)

    def test_credit_and_debit(self, ledger: Ledger) -> None:
        ledger.credit("bob", 30)
        ledger.debit("bob", 10)
        assert ledger.get_balance("bob").available == 20

    def test_zero_moves_are_noops(self, ledger: Ledger) -> None:
        ledger.credit("bob", 0)
        ledger.debit("bob", 0)
        ledger.accrue_protocol_fee(0)
        assert "bob" not in ledger.balances
        assert ledger.protocol_fees == 0

    def test_get_balance_does_not_create(self, ledger: Ledger) -> None:
        assert ledger.get_balance("nobody").total == 0
        assert "nobody" not in ledger.balances


class TestInMemoryPaymentAsset:
    def test_transfer_out_beyond_custody(self) -> None:
        asset = InMemoryPaymentAsset(custody=10)
        with pytest.raises(PaymentTransferError):
            asset.transfer_out("alice", 11)

    def test_non_positive_transfer(self) -> None:
        with pytest.raises(PaymentTransferError):
            InMemoryPaymentAsset().transfer_in("alice", 0)
