"""Unit tests for error codes, HTTP statuses and error categories."""

import pytest

from src.rp_common.errors import (
    AlreadyClaimedError,
    AppError,
    DivisionByZeroError,
    FatalInvariantViolation,
    InsufficientBalanceError,
    InsufficientFundsError,
    InsufficientInsurerCapitalError,
    InvalidAmountError,
    InvalidTokenError,
    InvariantViolationError,
    LedgerArithmeticError,
    LockupNotExpiredError,
    NotPolicyHolderError,
    StateError,
    TooEarlyError,
    UnauthorizedRegistrarError,
    ValidationError,
)


class TestErrorCodes:
    @pytest.mark.parametrize(
        "error, code, status",
        [
            (InvalidAmountError("amount", 0), 1001, 422),
            (LockupNotExpiredError(1, 200, 100), 2006, 409),
            (AlreadyClaimedError(1), 2008, 409),
            (TooEarlyError(1, 500), 2009, 409),
            (NotPolicyHolderError(1, "bob"), 2011, 403),
            (UnauthorizedRegistrarError("bob"), 2012, 403),
            (InsufficientBalanceError(10, 5), 3001, 422),
            (DivisionByZeroError("beta"), 4001, 422),
            (InsufficientInsurerCapitalError(1, 10, 20), 5001, 500),
            (InvariantViolationError("x"), 5002, 500),
            (InvalidTokenError(), 9003, 401),
        ],
    )
    def test_code_and_status(self, error: AppError, code: int, status: int) -> None:
        assert error.code == code
        assert error.http_status == status

    def test_message_is_exception_text(self) -> None:
        err = InsufficientBalanceError(10, 5)
        assert str(err) == err.message
        assert "required 10" in err.message


class TestCategories:
    def test_validation(self) -> None:
        assert isinstance(InvalidAmountError("x", 0), ValidationError)

    def test_state(self) -> None:
        assert isinstance(AlreadyClaimedError(1), StateError)

    def test_insufficient_funds(self) -> None:
        assert isinstance(InsufficientBalanceError(1, 0), InsufficientFundsError)

    def test_arithmetic(self) -> None:
        assert isinstance(DivisionByZeroError("x"), LedgerArithmeticError)

    def test_fatal(self) -> None:
        assert isinstance(InsufficientInsurerCapitalError(1, 0, 1), FatalInvariantViolation)
        assert isinstance(InvariantViolationError("x"), FatalInvariantViolation)

    def test_all_are_app_errors(self) -> None:
        assert isinstance(TooEarlyError(1, 1), AppError)
