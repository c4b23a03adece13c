"""Unit tests for PolicyBook: lockup state machine and premium accrual."""

import pytest

from src.rp_common.enums import PolicyStatus
from src.rp_common.errors import (
    AlreadyActiveError,
    AlreadyClaimedError,
    InvalidAmountError,
    LockupNotExpiredError,
    NotPolicyHolderError,
    PolicyNotActiveError,
    PolicyNotFoundError,
)
from src.rp_event.domain.registry import EventRegistry
from src.rp_policy.domain.book import PolicyBook
from src.rp_policy.domain.models import Policy

T0 = 1_700_000_000
WEEK = 7 * 24 * 3600
YEAR = 365 * 24 * 3600


@pytest.fixture
def registry() -> EventRegistry:
    registry = EventRegistry(frozenset({"registrar"}))
    registry.register_event("registrar", "flood", "", 1_000, 500)
    return registry


@pytest.fixture
def book(registry: EventRegistry) -> PolicyBook:
    return PolicyBook(registry)


def _create(book: PolicyBook, holder: str = "alice", premium: int = 36_500) -> Policy:
    return book.create(
        holder=holder,
        event_id=1,
        coverage=10_000,
        annualized_premium=premium,
        now=T0,
        lockup_period=WEEK,
        lockup_deposit=700,
    )


class TestCreate:
    def test_new_policy_is_locked(self, book: PolicyBook) -> None:
        policy = _create(book)
        assert policy.id == 1
        assert policy.status == PolicyStatus.LOCKED
        assert policy.activation_time == T0 + WEEK
        assert policy.lockup_deposit == 700
        assert book.policies_for_event(1) == [policy]

    def test_ids_increase(self, book: PolicyBook) -> None:
        assert [_create(book).id for _ in range(3)] == [1, 2, 3]

    def test_zero_coverage(self, book: PolicyBook) -> None:
        with pytest.raises(InvalidAmountError):
            book.create("alice", 1, 0, 100, T0, WEEK, 0)

    def test_unknown(self, book: PolicyBook) -> None:
        with pytest.raises(PolicyNotFoundError):
            book.get(99)


class TestActivation:
    def test_exactly_at_lockup_end(self, book: PolicyBook) -> None:
        _create(book)
        with pytest.raises(LockupNotExpiredError):
            book.activate("alice", 1, T0 + WEEK - 1)
        policy = book.activate("alice", 1, T0 + WEEK)
        assert policy.status == PolicyStatus.ACTIVE
        assert policy.accrual_start == T0 + WEEK
        assert policy.last_collection_time == T0 + WEEK

    def test_only_once(self, book: PolicyBook) -> None:
        _create(book)
        book.activate("alice", 1, T0 + WEEK)
        with pytest.raises(AlreadyActiveError):
            book.activate("alice", 1, T0 + 2 * WEEK)

    def test_only_holder(self, book: PolicyBook) -> None:
        _create(book)
        with pytest.raises(NotPolicyHolderError):
            book.activate("mallory", 1, T0 + WEEK)


class TestAccrual:
    def test_premium_due_is_path_independent(self, book: PolicyBook) -> None:
        policy = _create(book, premium=YEAR * 3 + 7)
        book.activate("alice", 1, T0 + WEEK)
        start = T0 + WEEK

        once = book.premium_due(policy, start + 1_000)
        collected = 0
        for step in range(100, 1_001, 100):
            due = book.premium_due(policy, start + step)
            book.record_collection(policy.id, due, start + step)
            collected += due
        assert collected == once

    def test_negative_elapsed(self, book: PolicyBook) -> None:
        policy = _create(book)
        book.activate("alice", 1, T0 + WEEK)
        assert book.premium_due(policy, T0) == 0

    def test_year_of_accrual(self, book: PolicyBook) -> None:
        policy = _create(book)
        book.activate("alice", 1, T0 + WEEK)
        assert book.premium_due(policy, T0 + WEEK + YEAR) == 36_500

    def test_per_second_rate(self, book: PolicyBook) -> None:
        assert _create(book, premium=YEAR * 2).premium_per_second == 2


class TestClaim:
    def test_locked_policy_cannot_claim(self, book: PolicyBook) -> None:
        _create(book)
        with pytest.raises(PolicyNotActiveError):
            book.mark_claimed(1)

    def test_claim_once(self, book: PolicyBook) -> None:
        _create(book)
        book.activate("alice", 1, T0 + WEEK)
        assert book.mark_claimed(1).status == PolicyStatus.CLAIMED
        with pytest.raises(AlreadyClaimedError):
            book.mark_claimed(1)
        assert book.collectible(1) == []


class TestRetainedBalance:
    def test_counts_active_policies_on_open_events(
        self, book: PolicyBook, registry: EventRegistry
    ) -> None:
        _create(book)
        assert book.required_retained_balance("alice", 30 * 24 * 3600) == 0
        book.activate("alice", 1, T0 + WEEK)
        # 36500 * 30 / 365
        assert book.required_retained_balance("alice", 30 * 24 * 3600) == 3_000
        assert book.required_retained_balance("bob", 30 * 24 * 3600) == 0
        registry.trigger("registrar", 1, now=T0 + 2 * WEEK)
        assert book.required_retained_balance("alice", 30 * 24 * 3600) == 0


class TestLockupDeposit:
    def test_release_once(self, book: PolicyBook) -> None:
        _create(book)
        assert book.release_lockup_deposit(1) == 700
        assert book.release_lockup_deposit(1) == 0

    def test_active_policy_keeps_deposit(self, book: PolicyBook) -> None:
        _create(book)
        book.activate("alice", 1, T0 + WEEK)
        assert book.release_lockup_deposit(1) == 0

    def test_rebuild_index(self, book: PolicyBook) -> None:
        _create(book, holder="alice")
        _create(book, holder="bob")
        book._index = {}
        book.rebuild_index()
        assert [p.holder for p in book.policies_for_event(1)] == ["alice", "bob"]
