"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Validation (bad input, unknown ids)
  2xxx: State (already registered / active / claimed / triggered, lockup, too early)
  3xxx: Insufficient funds / collateral / allocation
  4xxx: Arithmetic (division by zero, overflow)
  5xxx: Fatal invariant violations — operator intervention required
  9xxx: System

Every error is raised before any mutation is applied; the engine discards
the working copy of the ledger on any exception, so no partial effect
survives a failed call.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


class ValidationError(AppError):
    """Bad input: zero amount, below minimum, nonexistent id."""


class StateError(AppError):
    """Operation not allowed in the current state of the target."""


class InsufficientFundsError(AppError):
    """Not enough balance, collateral or allocation."""


class LedgerArithmeticError(AppError):
    """Fixed-point arithmetic fault, never silently truncated or wrapped."""


class FatalInvariantViolation(AppError):
    """Surfaced to the operator, never auto-recovered."""


# --- 1xxx: Validation ---

class InvalidAmountError(ValidationError):
    def __init__(self, field: str, value: int) -> None:
        super().__init__(1001, f"Invalid {field}: {value} (must be > 0)", 422)


class BelowMinimumCollateralError(ValidationError):
    def __init__(self, collateral: int, minimum: int) -> None:
        super().__init__(
            1002, f"Collateral {collateral} is below the minimum of {minimum}", 422
        )


class ParticipantNotFoundError(ValidationError):
    def __init__(self, participant_id: str) -> None:
        super().__init__(1003, f"Participant not found: {participant_id}", 404)


class EventNotFoundError(ValidationError):
    def __init__(self, event_id: int) -> None:
        super().__init__(1004, f"Event not found: {event_id}", 404)


class PolicyNotFoundError(ValidationError):
    def __init__(self, policy_id: int) -> None:
        super().__init__(1005, f"Policy not found: {policy_id}", 404)


class InvalidIntervalError(ValidationError):
    def __init__(self, interval: int, minimum: int) -> None:
        super().__init__(
            1006, f"Distribution interval {interval}s is below the minimum of {minimum}s", 422
        )


class InvalidRiskParameterError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(1007, f"Invalid risk parameter: {detail}", 422)


class PremiumExceedsLimitError(ValidationError):
    def __init__(self, premium: int, limit: int) -> None:
        super().__init__(
            1008, f"Annualized premium {premium} exceeds max loss limit {limit}", 422
        )


# --- 2xxx: State ---

class AlreadyRegisteredError(StateError):
    def __init__(self, participant_id: str, role: str) -> None:
        super().__init__(2001, f"{participant_id} is already registered as {role}", 409)


class NotRegisteredError(StateError):
    def __init__(self, participant_id: str, role: str) -> None:
        super().__init__(2002, f"{participant_id} is not registered as {role}", 409)


class EventNotActiveError(StateError):
    def __init__(self, event_id: int) -> None:
        super().__init__(2003, f"Event is not active: {event_id}", 409)


class AlreadyTriggeredError(StateError):
    def __init__(self, event_id: int) -> None:
        super().__init__(2004, f"Event already triggered: {event_id}", 409)


class EventNotTriggeredError(StateError):
    def __init__(self, event_id: int) -> None:
        super().__init__(2005, f"Event has not been triggered: {event_id}", 409)


class LockupNotExpiredError(StateError):
    def __init__(self, policy_id: int, activation_time: int, now: int) -> None:
        super().__init__(
            2006,
            f"Policy {policy_id} lockup runs until {activation_time} (now={now})",
            409,
        )


class AlreadyActiveError(StateError):
    def __init__(self, policy_id: int) -> None:
        super().__init__(2007, f"Policy already active: {policy_id}", 409)


class AlreadyClaimedError(StateError):
    def __init__(self, policy_id: int) -> None:
        super().__init__(2008, f"Policy already claimed: {policy_id}", 409)


class TooEarlyError(StateError):
    def __init__(self, event_id: int, next_allowed: int) -> None:
        super().__init__(
            2009,
            f"Distribution for event {event_id} not allowed before {next_allowed}",
            409,
        )


class NoCapitalAllocatedError(StateError):
    def __init__(self, event_id: int) -> None:
        super().__init__(2010, f"No insurer capital allocated to event {event_id}", 409)


class NotPolicyHolderError(StateError):
    def __init__(self, policy_id: int, participant_id: str) -> None:
        super().__init__(2011, f"{participant_id} does not hold policy {policy_id}", 403)


class UnauthorizedRegistrarError(StateError):
    def __init__(self, participant_id: str) -> None:
        super().__init__(2012, f"{participant_id} lacks the registrar capability", 403)


class PolicyNotActiveError(StateError):
    def __init__(self, policy_id: int) -> None:
        super().__init__(2013, f"Policy is not active: {policy_id}", 409)


# --- 3xxx: Insufficient funds ---

class InsufficientBalanceError(InsufficientFundsError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            3001,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


class InsufficientBalanceForActivePoliciesError(InsufficientFundsError):
    def __init__(self, retained: int, required: int) -> None:
        super().__init__(
            3002,
            f"Withdrawal would leave {retained}, active policies require {required}",
            422,
        )


class InsufficientCollateralError(InsufficientFundsError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            3003,
            f"Insufficient collateral: required {required}, deployable {available}",
            422,
        )


class InsufficientAllocationError(InsufficientFundsError):
    def __init__(self, event_id: int, required: int, allocated: int) -> None:
        super().__init__(
            3004,
            f"Insufficient allocation to event {event_id}: required {required}, "
            f"allocated {allocated}",
            422,
        )


# --- 4xxx: Arithmetic ---

class DivisionByZeroError(LedgerArithmeticError):
    def __init__(self, context: str) -> None:
        super().__init__(4001, f"Division by zero in {context}", 422)


class ArithmeticOverflowError(LedgerArithmeticError):
    def __init__(self, context: str) -> None:
        super().__init__(4002, f"Arithmetic overflow in {context}", 422)


# --- 5xxx: Fatal ---

class InsufficientInsurerCapitalError(FatalInvariantViolation):
    def __init__(self, event_id: int, capital: int, payouts: int) -> None:
        super().__init__(
            5001,
            f"Event {event_id}: allocated insurer capital {capital} "
            f"cannot cover payouts {payouts}",
            500,
        )


class InvariantViolationError(FatalInvariantViolation):
    def __init__(self, detail: str) -> None:
        super().__init__(5002, f"Invariant violated: {detail}", 500)


# --- 9xxx: System ---

class PaymentTransferError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9001, f"Payment asset transfer failed: {detail}", 502)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class InvalidTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(9003, "Invalid or expired token", 401)
