"""Error Values

Error codes and the Ok/Err result variants. Validation outcomes can be
lifted into a Result with ``ValidationOutcome.to_result`` and a
``ValidationError`` into an ``AppError`` with ``to_app_error``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, NoReturn, TypeVar, Union, final

T = TypeVar("T")
E = TypeVar("E")


class ErrorCode(Enum):
    """Hierarchical error code taxonomy.

    E2xxx: Validation errors
    E5xxx: Business logic errors
    E9xxx: Internal/Unknown errors
    """
    # Validation (E2xxx)
    E2000_VALIDATION_GENERIC = 2000
    E2001_REQUIRED_FIELD_MISSING = 2001
    E2002_INVALID_FORMAT = 2002
    E2003_OUT_OF_RANGE = 2003
    E2004_INVALID_TYPE = 2004
    E2005_CONSTRAINT_VIOLATION = 2005
    E2012_INVALID_DATE = 2012

    # Business Logic (E5xxx)
    E5004_INVARIANT_VIOLATED = 5004

    @property
    def category(self) -> str:
        """Human-readable error category."""
        return "validation" if 2000 <= self.value < 3000 else "business"


@dataclass(frozen=True, slots=True)
class AppError:
    """Application error value with code, message and structured metadata."""
    code: ErrorCode
    message: str
    metadata: dict = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message}"


@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success variant of Result."""
    value: T

    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure variant of Result."""
    error: E

    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        """Raises because Err has no value to unwrap."""
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_err(self) -> E:
        return self.error


Result = Union[Ok[T], Err[E]]
