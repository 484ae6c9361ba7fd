"""Primitive Kinds as Pydantic Core Schemas

Each kind is an ``Annotated`` metadata object supplying its own core schema,
so a compiled field reads like ``Annotated[Any, StringType(...), Constraints(...)]``.
Failures raise ``PydanticCustomError`` with the error types rendered by
``validation.errors``.

Usage:
    from typing import Annotated, Any
    from pydantic import TypeAdapter

    adapter = TypeAdapter(Annotated[Any, BigIntType(convert=True)])
    adapter.validate_python("12345678901234567890")  # 12345678901234567890
"""
from __future__ import annotations

import math
import re
from datetime import date, datetime, time
from typing import Any, Callable, Sequence

from pydantic import GetCoreSchemaHandler, TypeAdapter, ValidationError
from pydantic_core import CoreSchema, PydanticCustomError, core_schema

from .rules import Rule, Violation

# Matched with fullmatch; ASCII digits only
_BIGINT = re.compile(r"[+-]?[0-9]+")
_NUMBER = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

# Groups: year, month, day, hour, minute, second, offset sign, offset hours, offset minutes
_DATE_UTC = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})(?:T([0-9]{2}):([0-9]{2}):([0-9]{2})(?:\.[0-9]+)?Z)?")
_DATE_ZONED = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})"
    r"(?:T([0-9]{2}):([0-9]{2}):([0-9]{2})(?:\.[0-9]+)?([+-])([0-9]{2}):([0-9]{2}))?"
)
_FORMAT_UTC = "YYYY-MM-DD or YYYY-MM-DDThh:mm:ss.sZ"
_FORMAT_ZONED = "YYYY-MM-DD or YYYY-MM-DDThh:mm:ss.s+hh:mm or -hh:mm"


def fail(error_type: str, **context: Any) -> PydanticCustomError:
    """Build the custom error raised for ``error_type``."""
    return PydanticCustomError(error_type, error_type.replace("_", " "), context)


# ============================================================================
# Primitive kinds
# ============================================================================

class AnyType:
    """Accepts any value unchanged."""
    __slots__ = ()

    def __get_pydantic_core_schema__(self, source_type: Any, handler: GetCoreSchemaHandler) -> CoreSchema:
        return core_schema.any_schema()


class StringType:
    """String kind. Trims before the empty check when converting."""
    __slots__ = ("convert", "trim", "allow_empty")

    def __init__(self, convert: bool = True, trim: bool = False, allow_empty: bool = False):
        self.convert, self.trim, self.allow_empty = convert, trim, allow_empty

    def __get_pydantic_core_schema__(self, source_type: Any, handler: GetCoreSchemaHandler) -> CoreSchema:
        return core_schema.no_info_plain_validator_function(self._validate)

    def _validate(self, v: Any) -> str:
        if not isinstance(v, str):
            raise fail("string_base", value=v)
        if self.trim and self.convert:
            v = v.strip()
        if v == "" and not self.allow_empty:
            raise fail("string_empty", value=v)
        return v


class NumberType:
    """Number kind: int or float, never bool. Numeric strings parse when converting."""
    __slots__ = ("convert",)

    def __init__(self, convert: bool = True): self.convert = convert

    def __get_pydantic_core_schema__(self, source_type: Any, handler: GetCoreSchemaHandler) -> CoreSchema:
        return core_schema.no_info_plain_validator_function(self._validate)

    def _validate(self, v: Any) -> int | float:
        if isinstance(v, str) and self.convert:
            v = self._parse(v)
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise fail("number_base", value=v)
        if isinstance(v, float):
            if math.isnan(v):
                raise fail("number_base", value=v)
            if math.isinf(v):
                raise fail("number_infinity", value=v)
        return v

    @staticmethod
    def _parse(raw: str) -> Any:
        """Plain decimal notation only; anything else stays a string."""
        if _BIGINT.fullmatch(raw):
            return int(raw)
        if _NUMBER.fullmatch(raw):
            return float(raw)
        return raw


class BooleanType:
    """Boolean kind. ``"true"``/``"false"`` in any case parse when converting."""
    __slots__ = ("convert",)

    def __init__(self, convert: bool = True): self.convert = convert

    def __get_pydantic_core_schema__(self, source_type: Any, handler: GetCoreSchemaHandler) -> CoreSchema:
        return core_schema.no_info_plain_validator_function(self._validate)

    def _validate(self, v: Any) -> bool:
        if isinstance(v, bool):
            return v
        if self.convert and isinstance(v, str) and v.lower() in ("true", "false"):
            return v.lower() == "true"
        raise fail("boolean_base", value=v)


class BigIntType:
    """Big integer as ``int`` or a signed digit string.

    The value is kept as given; ``as_string`` renders ints as strings and
    ``convert`` parses digit strings into ``int``.
    """
    __slots__ = ("convert", "as_string")

    def __init__(self, convert: bool = False, as_string: bool = False):
        self.convert, self.as_string = convert, as_string

    def __get_pydantic_core_schema__(self, source_type: Any, handler: GetCoreSchemaHandler) -> CoreSchema:
        return core_schema.no_info_plain_validator_function(self._validate)

    def _validate(self, v: Any) -> int | str:
        if isinstance(v, bool):
            raise fail("bigint_native", value=v)
        if isinstance(v, int):
            return str(v) if self.as_string else v
        if isinstance(v, str):
            if not _BIGINT.fullmatch(v.strip()):
                if self.convert:
                    raise fail("bigint_convert", value=v)
                raise fail("bigint_native", value=v)
            return int(v) if self.convert else v
        raise fail("bigint_native", value=v)


class DateStringType:
    """W3C date string, UTC (``Z``) or zoned (``+hh:mm``) flavour.

    A syntactic match must also name a real calendar date and time. The string
    is passed through ``translator`` only when converting.
    """
    __slots__ = ("is_utc", "translator", "convert")

    def __init__(self, is_utc: bool = False, translator: Callable[[str], Any] | None = None, convert: bool = False):
        self.is_utc, self.translator, self.convert = is_utc, translator, convert

    def __get_pydantic_core_schema__(self, source_type: Any, handler: GetCoreSchemaHandler) -> CoreSchema:
        return core_schema.no_info_plain_validator_function(self._validate)

    def _validate(self, v: Any) -> Any:
        if not isinstance(v, str):
            raise fail("string_base", value=v)
        match = (_DATE_UTC if self.is_utc else _DATE_ZONED).fullmatch(v)
        if not match:
            raise fail("date_string_format", value=v, format=_FORMAT_UTC if self.is_utc else _FORMAT_ZONED)
        if not self._is_real(match.groups()):
            raise fail("date_string_value", value=v)
        if not self.convert:
            return v
        try:
            return (self.translator or datetime.fromisoformat)(v)
        except ValueError:
            raise fail("date_string_value", value=v) from None

    @staticmethod
    def _is_real(groups: Sequence[str | None]) -> bool:
        year, month, day, hour, minute, second = groups[:6]
        try:
            date(int(year), int(month), int(day))
            if hour is not None:
                time(int(hour), int(minute), int(second))
        except ValueError:
            return False
        if len(groups) > 6 and groups[7] is not None:
            return int(groups[7]) < 24 and int(groups[8]) < 60
        return True


class ArrayType:
    """List kind (tuples and sets accepted). Items must match one of ``items``.

    With ``single`` a lone non-collection value is wrapped into a one-item list.
    """
    __slots__ = ("items", "single")

    def __init__(self, items: Sequence[Any] = (), single: bool = False):
        self.items, self.single = tuple(items), single

    def __get_pydantic_core_schema__(self, source_type: Any, handler: GetCoreSchemaHandler) -> CoreSchema:
        if not self.items:
            item_schema = core_schema.any_schema()
        elif len(self.items) == 1:
            item_schema = handler.generate_schema(self.items[0])
        else:
            item_schema = core_schema.no_info_plain_validator_function(
                self._first_match([TypeAdapter(item) for item in self.items])
            )
        schema = core_schema.list_schema(item_schema)
        if self.single:
            return core_schema.no_info_before_validator_function(self._wrap, schema)
        return schema

    @staticmethod
    def _wrap(v: Any) -> Any:
        return v if v is None or isinstance(v, (list, tuple, set, frozenset)) else [v]

    @staticmethod
    def _first_match(adapters: list[TypeAdapter]) -> Callable[[Any], Any]:
        def validate(v: Any) -> Any:
            for adapter in adapters:
                try:
                    return adapter.validate_python(v)
                except ValidationError:
                    continue
            raise fail("array_includes", value=v)
        return validate


# ============================================================================
# Rule checks
# ============================================================================

class Constraints:
    """Runs every constraint rule against the value the kind accepted.

    All violations are collected: one raises its own error type, several raise
    ``multiple_violations`` carrying each of them. Allowed empty strings skip
    the checks.
    """
    __slots__ = ("checks", "skip_empty")

    def __init__(self, checks: Sequence[Rule], skip_empty: bool = False):
        self.checks, self.skip_empty = tuple(checks), skip_empty

    def __get_pydantic_core_schema__(self, source_type: Any, handler: GetCoreSchemaHandler) -> CoreSchema:
        return core_schema.no_info_after_validator_function(self._validate, handler(source_type))

    def _validate(self, v: Any) -> Any:
        if self.skip_empty and v == "":
            return v
        violations: list[Violation] = [found for rule in self.checks if (found := rule.check(v)) is not None]
        if len(violations) == 1:
            raise PydanticCustomError(violations[0].error_type, violations[0].error_type, violations[0].context)
        if violations:
            raise fail("multiple_violations", count=len(violations), violations=violations, value=v)
        return v
