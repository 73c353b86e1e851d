"""
Result type returned at the escrow operation boundary.

Services raise ``EscrowError`` subclasses; ``services.escrow_operations``
turns them into ``Result`` values so callers (HTTP layer, payment webhooks,
admin tooling) never see a raw exception for an expected failure.

Usage:
    result = operations.join_match(user_id, match_id)
    if result:
        match = result.value
    else:
        print(f"Join failed ({result.error_code}): {result.error}")
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from services.errors import EscrowError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Success or failure of one escrow operation.

    Attributes:
        success: Whether the operation succeeded
        value: The return value if successful
        error: Error message if failed
        error_code: Stable code from ``services.error_codes`` if failed
    """

    success: bool
    value: T | None = None
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def ok(cls, value: T | None = None) -> "Result[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str, code: str | None = None) -> "Result[T]":
        return cls(success=False, error=error, error_code=code)

    @classmethod
    def from_error(cls, exc: EscrowError) -> "Result[T]":
        """Build a failure from a raised escrow error, keeping its code."""
        return cls.fail(str(exc), code=exc.code)

    def __bool__(self) -> bool:
        return self.success

    def unwrap(self) -> T:
        """
        Get the value, raising ValueError if the result is a failure.

        Raises:
            ValueError: If the result is a failure
        """
        if not self.success:
            raise ValueError(f"Cannot unwrap failed result: {self.error}")
        return self.value  # type: ignore

    def unwrap_or(self, default: T) -> T:
        return self.value if self.success else default  # type: ignore
