"""Validation Error System

Structured field errors built from pydantic error dicts, with messages worded
like a classic object-schema engine:

    "name" is required
    "address" is not allowed to be empty
    "age" must be larger than or equal to 15
    "tags[0]" must be a string

Error Format:
{
    "error": {
        "type": "validation_error",
        "message": "\"name\" is required. \"age\" must be a number",
        "error_count": 2,
        "errors": [
            {"message": "\"name\" is required", "path": ["name"], "value": null},
            {"message": "\"age\" must be a number", "path": ["age"], "value": "x"}
        ]
    }
}
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from fleet_common.errors import AppError, ErrorCode, MinorException

MESSAGES: dict[str, str] = {
    "missing": '"{label}" is required',
    "string_base": '"{label}" must be a string',
    "string_type": '"{label}" must be a string',
    "string_empty": '"{label}" is not allowed to be empty',
    "string_min": '"{label}" length must be at least {limit} characters long',
    "string_max": '"{label}" length must be less than or equal to {limit} characters long',
    "string_pattern": '"{label}" with value "{value}" fails to match the required pattern: /{pattern}/',
    "string_email": '"{label}" must be a valid email',
    "string_uri": '"{label}" must be a valid uri',
    "string_uri_scheme": '"{label}" must be a valid uri with a scheme matching the {scheme} pattern',
    "string_trim": '"{label}" must not have leading or trailing whitespace',
    "number_base": '"{label}" must be a number',
    "number_infinity": '"{label}" cannot be infinity',
    "number_min": '"{label}" must be larger than or equal to {limit}',
    "number_max": '"{label}" must be less than or equal to {limit}',
    "number_integer": '"{label}" must be an integer',
    "boolean_base": '"{label}" must be a boolean',
    "bigint_native": '"{label}" must be of BigInt type or a string that is convertible to BigInt',
    "bigint_convert": '"{label}": {value} cannot be converted to BigInt',
    "date_string_format": '"{label}" must be a date string compliant with W3C Date and Time Formats ({format})',
    "date_string_value": '"{label}" must have all components with valid values',
    "array_base": '"{label}" must be an array',
    "list_type": '"{label}" must be an array',
    "array_min": '"{label}" must contain at least {limit} items',
    "array_max": '"{label}" must contain less than or equal to {limit} items',
    "too_short": '"{label}" must contain at least {min_length} items',
    "too_long": '"{label}" must contain less than or equal to {max_length} items',
    "array_includes": '"{label}" does not match any of the allowed types',
    "any_only": '"{label}" must be one of [{valids}]',
    "object_unknown": '"{label}" is not allowed',
    "model_type": '"{label}" must be of type object',
    "dict_type": '"{label}" must be of type object',
}

# Error types mapped onto the shared error-code taxonomy
_CODES: dict[str, ErrorCode] = {
    "missing": ErrorCode.E2001_REQUIRED_FIELD_MISSING,
    "string_pattern": ErrorCode.E2002_INVALID_FORMAT,
    "string_email": ErrorCode.E2002_INVALID_FORMAT,
    "string_uri": ErrorCode.E2002_INVALID_FORMAT,
    "string_uri_scheme": ErrorCode.E2002_INVALID_FORMAT,
    "date_string_format": ErrorCode.E2012_INVALID_DATE,
    "date_string_value": ErrorCode.E2012_INVALID_DATE,
    "number_min": ErrorCode.E2003_OUT_OF_RANGE,
    "number_max": ErrorCode.E2003_OUT_OF_RANGE,
    "string_base": ErrorCode.E2004_INVALID_TYPE,
    "number_base": ErrorCode.E2004_INVALID_TYPE,
    "boolean_base": ErrorCode.E2004_INVALID_TYPE,
    "bigint_native": ErrorCode.E2004_INVALID_TYPE,
    "array_base": ErrorCode.E2004_INVALID_TYPE,
    "list_type": ErrorCode.E2004_INVALID_TYPE,
    "model_type": ErrorCode.E2004_INVALID_TYPE,
}


class _Context(dict):
    def __missing__(self, key: str) -> str:
        return "?"


def format_path(path: Sequence[str | int]) -> str:
    """Render a path as a label: ``value`` when empty, ``tags[0]`` for items."""
    if not path:
        return "value"
    parts: list[str] = []
    for segment in path:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        elif parts:
            parts.append(f".{segment}")
        else:
            parts.append(str(segment))
    return "".join(parts)


def render_message(error_type: str, path: Sequence[str | int], context: dict[str, Any] | None = None) -> str:
    """Render the message for ``error_type`` at ``path``."""
    template = MESSAGES.get(error_type, '"{label}" is invalid')
    return template.format_map(_Context(context or {}, label=format_path(path)))


@dataclass(frozen=True, slots=True)
class ValidationErrorItem:
    """One failed constraint: message, location and the offending value."""
    message: str
    path: tuple[str | int, ...] = ()
    value: Any = None
    error_type: str = "invalid"

    @property
    def label(self) -> str:
        return format_path(self.path)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "path": list(self.path), "value": self.value, "type": self.error_type}

    @classmethod
    def create(cls, error_type: str, path: Sequence[str | int] = (), value: Any = None,
               context: dict[str, Any] | None = None) -> ValidationErrorItem:
        path = tuple(path)
        return cls(render_message(error_type, path, context), path, value, error_type)

    @classmethod
    def from_pydantic_error(cls, error: dict[str, Any]) -> list[ValidationErrorItem]:
        """Items for one pydantic error dict. Combined violations expand to one item each."""
        loc = tuple(error.get("loc", ()))
        err_type = error.get("type", "invalid")
        ctx = error.get("ctx") or {}
        value = None if err_type == "missing" else error.get("input")
        if err_type == "multiple_violations":
            return [cls.create(kind, loc, value, context) for kind, context in ctx.get("violations", ())]
        return [cls.create(err_type, loc, value, {"value": value, **ctx})]


class ValidationError(MinorException):
    """Data validation failure carrying an ordered list of field items.

    Built from a message, a single item, or a list of items. The message is
    the items' messages joined when not given explicitly.
    """

    def __init__(
        self,
        items: str | ValidationErrorItem | Iterable[ValidationErrorItem] = (),
        message: str | None = None,
    ):
        if isinstance(items, str):
            message, items = message or items, [ValidationErrorItem(items)]
        elif isinstance(items, ValidationErrorItem):
            items = [items]
        self.items: list[ValidationErrorItem] = list(items)
        super().__init__(message or ". ".join(i.message for i in self.items) or "Validation failed", self.items)

    @classmethod
    def from_pydantic(cls, exc: Any, prefix: Sequence[str | int] = ()) -> ValidationError:
        """Create from a pydantic ``ValidationError``, optionally re-rooting paths."""
        items: list[ValidationErrorItem] = []
        for error in exc.errors():
            if prefix:
                error = {**error, "loc": (*prefix, *error.get("loc", ()))}
            items.extend(ValidationErrorItem.from_pydantic_error(error))
        return cls(items)

    @property
    def field_errors(self) -> dict[str, list[ValidationErrorItem]]:
        """Group items by rendered path."""
        result: dict[str, list[ValidationErrorItem]] = {}
        for item in self.items:
            result.setdefault(item.label, []).append(item)
        return result

    @property
    def first_error(self) -> ValidationErrorItem | None:
        return self.items[0] if self.items else None

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"type": "validation_error", "message": self.message,
                          "error_count": len(self.items), "errors": [i.to_dict() for i in self.items]}}

    def to_app_error(self) -> AppError:
        """Convert to an ``AppError`` value for the shared error system."""
        code = ErrorCode.E2000_VALIDATION_GENERIC
        if len(self.items) == 1:
            code = _CODES.get(self.items[0].error_type, ErrorCode.E2005_CONSTRAINT_VIOLATION)
        return AppError(code=code, message=self.message,
                        metadata={"error_count": len(self.items), "errors": [i.to_dict() for i in self.items]})


class BusinessInvariantError(ValidationError):
    """Raised by domain code when a cross-field business rule is violated."""

    def to_app_error(self) -> AppError:
        return AppError(code=ErrorCode.E5004_INVARIANT_VIOLATED, message=self.message,
                        metadata={"errors": [i.to_dict() for i in self.items]})
