"""Validation Options and Outcomes"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Generic, Mapping, NamedTuple, TypeVar

from fleet_common.config import settings
from fleet_common.errors import Err, Ok, Result

from .errors import ValidationError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ValidationOptions:
    """Per-call validation options. Defaults come from settings.

    - abort_early: stop at the first error instead of collecting all of them
    - allow_unknown: tolerate input keys the schema does not declare
    - strip_unknown: remove undeclared keys from the output value
    """
    abort_early: bool = field(default_factory=lambda: settings.VALIDATION_ABORT_EARLY)
    allow_unknown: bool = field(default_factory=lambda: settings.VALIDATION_ALLOW_UNKNOWN)
    strip_unknown: bool = field(default_factory=lambda: settings.VALIDATION_STRIP_UNKNOWN)

    def merge(self, other: ValidationOptions | Mapping[str, Any] | None) -> ValidationOptions:
        """Options with ``other`` laid over these. Mappings override only the keys they name."""
        if other is None:
            return self
        if isinstance(other, ValidationOptions):
            return other
        return replace(self, **dict(other))


class ValidationOutcome(NamedTuple, Generic[T]):
    """Either ``(error, None)`` or ``(None, value)``.

    Unpacks like a pair:
        error, value = validator.whole(payload)
    """
    error: ValidationError | None
    value: T | None

    @property
    def is_valid(self) -> bool:
        return self.error is None

    def to_result(self) -> Result[T, ValidationError]:
        return Ok(self.value) if self.error is None else Err(self.error)

    def raise_error(self) -> T:
        """Returns the value, or raises the carried ``ValidationError``."""
        if self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def success(cls, value: T) -> ValidationOutcome[T]:
        return cls(None, value)

    @classmethod
    def failure(cls, error: ValidationError) -> ValidationOutcome[T]:
        return cls(error, None)
