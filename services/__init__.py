"""
Application services layer.

Services orchestrate business operations using repositories and domain models.
Concrete services are wired by ``infrastructure.service_container``.
"""

from services import error_codes
from services.errors import (
    AuthorizationError,
    EscrowError,
    InsufficientFundsError,
    NotFoundError,
    PreconditionError,
    SettlementAlreadyExecutedError,
    StorageBusyError,
    ValidationError,
)

# Result type for consistent error handling
from services.result import Result

__all__ = [
    "error_codes",
    # Result type
    "Result",
    # Errors
    "EscrowError",
    "ValidationError",
    "NotFoundError",
    "PreconditionError",
    "InsufficientFundsError",
    "AuthorizationError",
    "SettlementAlreadyExecutedError",
    "StorageBusyError",
]
