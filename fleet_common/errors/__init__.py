"""Error Handling

Two channels:
- Exceptions (``exceptions``) for programmer mistakes and unrecoverable states
- Values (``Ok``/``Err``, ``AppError``) for expected failures

Usage:
    from fleet_common.errors import CriticalException, Ok, Err

    match validator.whole(payload).to_result():
        case Ok(model):
            save(model)
        case Err(error):
            log.warning("invalid_payload", errors=error.to_dict())
"""
from .exceptions import (
    AppException,
    CriticalException,
    MinorException,
    InvalidArgumentException,
    NotImplementedException,
    InternalErrorException,
)

from .types import (
    Result,
    Ok,
    Err,
    AppError,
    ErrorCode,
)

__all__ = [
    # Exceptions
    "AppException",
    "CriticalException",
    "MinorException",
    "InvalidArgumentException",
    "NotImplementedException",
    "InternalErrorException",
    # Values
    "Result",
    "Ok",
    "Err",
    "AppError",
    "ErrorCode",
]
