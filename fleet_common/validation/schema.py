"""Schema Nodes

A ``SchemaNode`` describes how one value is validated: a primitive kind, the
kind's options, and the ordered rule transforms refined onto it. Nodes are
immutable; every fluent call returns a new node.

Usage:
    from fleet_common.validation import schema

    name = schema.string().pattern(r"^[\\w -]+$").max(10).min(3).required()
    age = schema.number().min(15).max(99).integer()
    gender = schema.only("male", "female")
    tags = schema.array(schema.string()).single().max(5)
"""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable

from .rules import (
    AllowEmpty,
    AllowNull,
    AsString,
    Convert,
    Default,
    Email,
    Integer,
    Maximum,
    MaxLength,
    Minimum,
    MinLength,
    NotRequired,
    Only,
    Pattern,
    Required,
    Rule,
    Single,
    Trim,
    Uri,
)


class SchemaKind(str, Enum):
    """Primitive kind a node validates."""
    ANY = "any"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    BIGINT = "bigint"
    DATE_STRING = "date_string"
    ARRAY = "array"


@dataclass(frozen=True, slots=True)
class SchemaNode:
    """Immutable description of a value's schema.

    ``convert`` is the node's initial conversion flag; ``Convert`` rules may
    toggle it later. ``items`` only applies to arrays, ``is_utc`` and
    ``translator`` only to date strings.
    """
    kind: SchemaKind = SchemaKind.ANY
    convert: bool = True
    is_utc: bool = False
    translator: Callable[[str], Any] | None = None
    items: tuple[SchemaNode, ...] = ()
    rules: tuple[Rule, ...] = ()

    def with_rule(self, rule: Rule) -> SchemaNode:
        return replace(self, rules=(*self.rules, rule))

    def has_rule(self, rule_type: type[Rule]) -> bool:
        return any(isinstance(r, rule_type) for r in self.rules)

    # Presence

    def required(self) -> SchemaNode:
        return Required()(self)

    def optional(self) -> SchemaNode:
        return NotRequired()(self)

    def allow_null(self) -> SchemaNode:
        return AllowNull()(self)

    def default(self, value: Any) -> SchemaNode:
        return Default(value)(self)

    # Constraints

    def min(self, limit: float) -> SchemaNode:
        """Minimum length for strings and arrays, minimum value for numbers."""
        return (Minimum(limit) if self.kind is SchemaKind.NUMBER else MinLength(int(limit)))(self)

    def max(self, limit: float) -> SchemaNode:
        """Maximum length for strings and arrays, maximum value for numbers."""
        return (Maximum(limit) if self.kind is SchemaKind.NUMBER else MaxLength(int(limit)))(self)

    def pattern(self, regex: str | re.Pattern) -> SchemaNode:
        return Pattern(regex)(self)

    def trim(self) -> SchemaNode:
        return Trim()(self)

    def email(self) -> SchemaNode:
        return Email()(self)

    def uri(self, *schemes: str | re.Pattern) -> SchemaNode:
        return Uri(tuple(schemes))(self)

    def integer(self) -> SchemaNode:
        return Integer()(self)

    def only(self, *values: Any) -> SchemaNode:
        return Only(tuple(values))(self)

    # Kind options

    def allow_empty(self, allowed: bool = True) -> SchemaNode:
        return AllowEmpty(allowed)(self)

    def single(self) -> SchemaNode:
        return Single()(self)

    def as_string(self) -> SchemaNode:
        return AsString()(self)

    def with_convert(self, enabled: bool = True) -> SchemaNode:
        return Convert(enabled)(self)


def any_value() -> SchemaNode:
    return SchemaNode(SchemaKind.ANY)


def string() -> SchemaNode:
    """String schema. The empty string is rejected unless ``allow_empty()``."""
    return SchemaNode(SchemaKind.STRING)


def number() -> SchemaNode:
    """Number schema; numeric strings are converted."""
    return SchemaNode(SchemaKind.NUMBER)


def boolean() -> SchemaNode:
    """Boolean schema; ``"true"``/``"false"`` strings are converted."""
    return SchemaNode(SchemaKind.BOOLEAN)


def bigint(convert: bool = False) -> SchemaNode:
    """Big integer as ``int`` or a string of digits.

    Values are kept as given unless ``convert`` turns digit strings into ``int``.
    """
    return SchemaNode(SchemaKind.BIGINT, convert=convert)


def date_string(
    is_utc: bool = False,
    translator: Callable[[str], Any] | None = None,
    convert: bool = False,
) -> SchemaNode:
    """W3C date/time string with at least year, month and day.

    With ``is_utc`` the time part must end in ``Z``; otherwise it must carry a
    numeric ``+hh:mm``/``-hh:mm`` offset. With ``convert`` the string is passed
    through ``translator`` (``datetime.fromisoformat`` by default).
    """
    return SchemaNode(SchemaKind.DATE_STRING, convert=convert, is_utc=is_utc, translator=translator)


def array(*items: SchemaNode) -> SchemaNode:
    """Array whose items match one of ``items`` (any item when empty)."""
    return SchemaNode(SchemaKind.ARRAY, items=tuple(items))


def only(*values: Any) -> SchemaNode:
    return any_value().only(*values)
