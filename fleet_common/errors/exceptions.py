"""Exception Taxonomy

Raised exceptions are reserved for programmer mistakes and unrecoverable
states. Expected failures (bad input data) travel as values instead, see
``fleet_common.validation.types.ValidationOutcome``.

- CriticalException: the process may be in an unstable state
- MinorException: recoverable, the caller can handle it
- InvalidArgumentException: a function received an unusable argument
"""
from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base exception carrying a message, optional details and a severity."""

    def __init__(
        self,
        message: str = "",
        details: Any = None,
        is_critical: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.is_critical = is_critical

    @property
    def severity(self) -> str:
        return "Critical" if self.is_critical else "Minor"

    def __str__(self) -> str:
        # Ex: [Critical] A big mess has happened!
        return f"[{self.severity}] {self.message}"


class CriticalException(AppException):
    """Represents a serious problem that may leave the system unstable."""

    def __init__(self, message: str = "", details: Any = None):
        super().__init__(message, details, is_critical=True)


class MinorException(AppException):
    """Represents an acceptable problem that can be handled."""

    def __init__(self, message: str = "", details: Any = None):
        super().__init__(message, details, is_critical=False)


class InvalidArgumentException(AppException):
    """The provided argument of a function or constructor is not as expected."""

    def __init__(self, arg_name: str, message: str | None = None):
        super().__init__(
            f'The argument "{arg_name}" is invalid! {message or ""}'.rstrip(),
            is_critical=False,
        )
        self.arg_name = arg_name


class NotImplementedException(AppException):
    """An unimplemented method is called."""

    def __init__(self, message: str = ""):
        super().__init__(message, is_critical=False)


class InternalErrorException(AppException):
    """An error whose origin is another system."""

    def __init__(self, message: str | None = None, details: Any = None):
        super().__init__(
            message or "An error occured on the 3rd-party side",
            details,
            is_critical=False,
        )
