"""Vesting error hierarchy.

Every error carries the HTTP status code the API layer reports it with, so the
engines never import anything from the web stack.
"""


class VestingError(Exception):
    """Base class for all vesting engine errors."""

    status_code: int = 400

    def __init__(self, message: str = "", **context):
        super().__init__(message or self.__class__.__name__)
        self.context = context


class InvalidConfiguration(VestingError):
    """Raised when a schedule would be created with a zero duration or amount."""

    status_code = 400


class AlreadyInitialized(VestingError):
    """Raised when an asset schedule is initialized a second time."""

    status_code = 409


class NotInitialized(VestingError):
    """Raised when operating on an asset that has no schedule."""

    status_code = 404


class Unauthorized(VestingError):
    """Raised when the caller is not allowed to perform the operation."""

    status_code = 403


class NotRevocable(VestingError):
    status_code = 409


class InsufficientVested(VestingError):
    """Raised when a release finds nothing newly vested."""

    status_code = 409


class InsufficientBalance(VestingError):
    """Raised when an amount exceeds the caller's spendable balance."""

    status_code = 400


class InvalidIndex(VestingError):
    status_code = 404


class TransferFailed(VestingError):
    """Raised by the asset ledger when a transfer cannot be completed."""

    status_code = 502


class InvariantViolation(VestingError):
    """Raised when internal bookkeeping no longer adds up."""

    status_code = 500
