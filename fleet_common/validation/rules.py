"""Rule Transforms

A rule is a small immutable value that refines a schema node. Applying a rule
(``rule(node)``) returns a new node with the rule appended; the compiler
interprets the ordered rule list when it builds the final schema.

Constraint rules also know how to check a value once the primitive kind has
accepted it. A failing check returns a ``Violation`` naming the error type
and its context; rendering the message is left to ``validation.errors``.

Structural rules (``Required``, ``NotRequired``, ``AllowNull``, ``AllowEmpty``,
``Default``, ``Single``, ``AsString``, ``Convert``) change how the compiler
wires the field and never check values themselves.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Any, NamedTuple
from urllib.parse import urlparse

if TYPE_CHECKING:
    from .schema import SchemaNode


_EMAIL = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*$")


class Violation(NamedTuple):
    """A failed constraint: error type plus the context used to render it."""
    error_type: str
    context: dict[str, Any]


@lru_cache(maxsize=256)
def _compile(pattern: str | re.Pattern) -> re.Pattern:
    return pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class Rule:
    """Base rule. Calling a rule on a node returns the refined node."""

    def __call__(self, node: SchemaNode) -> SchemaNode:
        return node.with_rule(self)

    @property
    def key(self) -> Any:
        """Identity used when a later rule of the same kind replaces an earlier one."""
        return type(self).__name__

    def check(self, value: Any) -> Violation | None:
        return None


# ============================================================================
# Structural rules
# ============================================================================

@dataclass(frozen=True, slots=True)
class Required(Rule):
    """Property must be present."""


@dataclass(frozen=True, slots=True)
class NotRequired(Rule):
    """Property may be absent."""


@dataclass(frozen=True, slots=True)
class AllowNull(Rule):
    """``None`` is accepted as a value."""


@dataclass(frozen=True, slots=True)
class AllowEmpty(Rule):
    """Toggles whether the empty string is accepted."""
    allowed: bool = True


@dataclass(frozen=True, slots=True)
class Default(Rule):
    """Value used when the property is absent. Callables are called per use."""
    value: Any = None


@dataclass(frozen=True, slots=True)
class Single(Rule):
    """A non-list value is wrapped into a one-item list."""


@dataclass(frozen=True, slots=True)
class AsString(Rule):
    """Big integers given as ``int`` are converted to ``str``."""


@dataclass(frozen=True, slots=True)
class Convert(Rule):
    """Toggles input conversion for the node's primitive kind."""
    enabled: bool = True


# ============================================================================
# Constraint rules
# ============================================================================

@dataclass(frozen=True, slots=True)
class MinLength(Rule):
    limit: int

    def check(self, value: Any) -> Violation | None:
        if isinstance(value, str) and len(value) < self.limit:
            return Violation("string_min", {"limit": self.limit, "value": value})
        if isinstance(value, list) and len(value) < self.limit:
            return Violation("array_min", {"limit": self.limit, "value": value})
        return None


@dataclass(frozen=True, slots=True)
class MaxLength(Rule):
    limit: int

    def check(self, value: Any) -> Violation | None:
        if isinstance(value, str) and len(value) > self.limit:
            return Violation("string_max", {"limit": self.limit, "value": value})
        if isinstance(value, list) and len(value) > self.limit:
            return Violation("array_max", {"limit": self.limit, "value": value})
        return None


@dataclass(frozen=True, slots=True)
class Pattern(Rule):
    regex: str | re.Pattern

    @property
    def key(self) -> Any:
        # Several patterns may apply to the same string
        return ("Pattern", self.source)

    @property
    def source(self) -> str:
        return self.regex.pattern if isinstance(self.regex, re.Pattern) else self.regex

    def check(self, value: Any) -> Violation | None:
        if isinstance(value, str) and not _compile(self.regex).search(value):
            return Violation("string_pattern", {"pattern": self.source, "value": value})
        return None


@dataclass(frozen=True, slots=True)
class Trim(Rule):
    """No leading or trailing whitespace. Converting strings are trimmed before checks."""

    def check(self, value: Any) -> Violation | None:
        if isinstance(value, str) and value != value.strip():
            return Violation("string_trim", {"value": value})
        return None


@dataclass(frozen=True, slots=True)
class Email(Rule):

    def check(self, value: Any) -> Violation | None:
        if isinstance(value, str) and not _EMAIL.match(value):
            return Violation("string_email", {"value": value})
        return None


@dataclass(frozen=True, slots=True)
class Uri(Rule):
    """RFC 3986 style URI, optionally restricted to schemes (names or patterns)."""
    schemes: tuple[str | re.Pattern, ...] = ()

    def check(self, value: Any) -> Violation | None:
        if not isinstance(value, str):
            return None
        parsed = urlparse(value)
        if not parsed.scheme or not _SCHEME.match(parsed.scheme) or not (parsed.netloc or parsed.path):
            return Violation("string_uri", {"value": value})
        if self.schemes and not any(self._scheme_matches(s, parsed.scheme) for s in self.schemes):
            scheme = "|".join(s.pattern if isinstance(s, re.Pattern) else s for s in self.schemes)
            return Violation("string_uri_scheme", {"scheme": scheme, "value": value})
        return None

    @staticmethod
    def _scheme_matches(expected: str | re.Pattern, actual: str) -> bool:
        if isinstance(expected, re.Pattern):
            return expected.fullmatch(actual) is not None
        return expected.lower() == actual.lower()


@dataclass(frozen=True, slots=True)
class Minimum(Rule):
    limit: float

    def check(self, value: Any) -> Violation | None:
        if _is_number(value) and value < self.limit:
            return Violation("number_min", {"limit": self.limit, "value": value})
        return None


@dataclass(frozen=True, slots=True)
class Maximum(Rule):
    limit: float

    def check(self, value: Any) -> Violation | None:
        if _is_number(value) and value > self.limit:
            return Violation("number_max", {"limit": self.limit, "value": value})
        return None


@dataclass(frozen=True, slots=True)
class Integer(Rule):

    def check(self, value: Any) -> Violation | None:
        if isinstance(value, float) and not value.is_integer():
            return Violation("number_integer", {"value": value})
        return None


@dataclass(frozen=True, slots=True)
class Only(Rule):
    """Value must be one of ``values``."""
    values: tuple[Any, ...]

    def check(self, value: Any) -> Violation | None:
        if value not in self.values:
            valids = ", ".join(str(v) for v in self.values)
            return Violation("any_only", {"valids": valids, "value": value})
        return None
