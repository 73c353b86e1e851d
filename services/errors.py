"""
Exception taxonomy for the escrow core.

Every failure a money-moving operation can report is an ``EscrowError``.
They subclass ``ValueError`` so code that treats business-rule failures as
``ValueError`` keeps working. Raising any of these inside an atomic
transaction rolls the whole transaction back.
"""

from services import error_codes


class EscrowError(ValueError):
    """Base class. ``code`` is a stable value from ``services.error_codes``."""

    default_code = error_codes.STATE_ERROR

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code or self.default_code


class ValidationError(EscrowError):
    """Malformed or out-of-range input, rejected before any state is read."""

    default_code = error_codes.VALIDATION_ERROR


class NotFoundError(EscrowError):
    default_code = error_codes.NOT_FOUND


class PreconditionError(EscrowError):
    """A state-machine guard failed: wrong status, wrong caller, stale proposal, closed window."""

    default_code = error_codes.STATE_ERROR


class InsufficientFundsError(EscrowError):
    default_code = error_codes.INSUFFICIENT_FUNDS


class AuthorizationError(EscrowError):
    """Caller lacks the required role or relationship to the entity."""

    default_code = error_codes.PERMISSION_DENIED


class SettlementAlreadyExecutedError(PreconditionError):
    """Idempotency guard tripped. Expected when the sweep races a manual settle."""

    default_code = error_codes.SETTLEMENT_ALREADY_EXECUTED


class StorageBusyError(EscrowError):
    """The write lock stayed taken past the busy timeout. Nothing was applied; safe to retry."""

    default_code = error_codes.STATE_ERROR
