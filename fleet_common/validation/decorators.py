"""Property Annotators

Builders that record validation intent for class properties in the metadata
store. Each builder returns a ``PropertyAnnotator``; place it in the
``Annotated`` metadata of a class attribute, or call it with the owner class
and property name.

Usage:
    from typing import Annotated
    from fleet_common.validation import ValidatedModel, validate_class
    from fleet_common.validation.decorators import pk, number, required, string, only

    class User(ValidatedModel):
        id: Annotated[int, pk()]
        name: Annotated[str, string(min_length=3, max_length=10), required()]
        age: Annotated[int, number(min_value=15, max_value=99)]
        gender: Annotated[str, string(), only("male", "female")]

    error, value = User.get_validator().whole({"name": "Alice"})

Annotators run in declaration order. A second type-defining annotator on
the same property replaces the first (last write wins) and logs a warning.
A raw schema from ``validate_prop`` always wins over every other annotator.
"""
from __future__ import annotations

import inspect
import re
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Mapping, Sequence, TypeVar, get_origin

from fleet_common.config import settings
from fleet_common.guard import Guard
from fleet_common.logging import validation_logger

from . import schema as s
from .metadata import ClassValidationMetadata, RawSchema, store
from .rules import AllowNull, Default, Only, Required, Rule
from .schema import SchemaNode
from .types import ValidationOptions

log = validation_logger()

C = TypeVar("C", bound=type)


@dataclass(frozen=True, slots=True)
class PropertyAnnotator:
    """Applies one builder's effect to ``owner.prop_name``."""
    kind: str
    apply: Callable[[ClassValidationMetadata, type, str], None]

    def __call__(self, owner: type, prop_name: str | None = None) -> None:
        Guard.assert_is_truthy(prop_name, "This decorator is for properties inside class")
        Guard.assert_is_truthy(isinstance(owner, type), "This decorator is for properties inside class")
        metadata = store.get(owner)
        self.apply(metadata, owner, prop_name)
        store.set(owner, metadata)


def apply_annotations(cls: type) -> None:
    """Run every ``PropertyAnnotator`` found in the class's own annotations."""
    for prop_name, hint in inspect.get_annotations(cls, eval_str=True).items():
        if get_origin(hint) is not Annotated:
            continue
        for annotator in hint.__metadata__:
            if isinstance(annotator, PropertyAnnotator):
                annotator(cls, prop_name)


def _typed(kind: str, type_init: SchemaNode) -> PropertyAnnotator:
    """Annotator setting the type initializer."""
    def apply(metadata: ClassValidationMetadata, owner: type, prop_name: str) -> None:
        current = metadata.get_prop(prop_name)
        if isinstance(current, RawSchema):
            log.debug("raw_schema_kept", model=owner.__name__, prop=prop_name, annotator=kind)
            return
        if current.type_init is not None and settings.WARN_ON_TYPE_OVERRIDE:
            log.warning(
                "type_initializer_overridden",
                model=owner.__name__,
                prop=prop_name,
                previous=current.type_init.kind.value,
                current=type_init.kind.value,
            )
        metadata.set_prop(prop_name, current.with_type(type_init))

    return PropertyAnnotator(kind, apply)


def _ruled(kind: str, *rules: Rule) -> PropertyAnnotator:
    """Annotator appending ``rules`` without touching the type."""

    def apply(metadata: ClassValidationMetadata, owner: type, prop_name: str) -> None:
        current = metadata.get_prop(prop_name)
        if isinstance(current, RawSchema):
            log.debug("raw_schema_kept", model=owner.__name__, prop=prop_name, annotator=kind)
            return
        metadata.set_prop(prop_name, current.with_rules(*rules))

    return PropertyAnnotator(kind, apply)


# ============================================================================
# Type-defining builders
# ============================================================================

def string(
    allow_empty: bool = True,
    email: bool = False,
    min_length: int | None = None,
    max_length: int | None = None,
    pattern: str | re.Pattern | None = None,
    trim: bool = False,
    uri: bool | str | re.Pattern | Sequence[str | re.Pattern] = False,
) -> PropertyAnnotator:
    """Property must be a string.

    Args:
        allow_empty: Accept ``''``. Default is True.
        email: Require a valid email address.
        min_length: Minimum string length.
        max_length: Maximum string length.
        pattern: Regular expression the value must match.
        trim: Require no surrounding whitespace; converting validators trim instead.
        uri: Require a valid URI. A scheme name or pattern, or a list of them,
            restricts the accepted schemes.
    """
    node = s.string().allow_empty(allow_empty)
    if email:
        node = node.email()
    if min_length is not None:
        node = node.min(min_length)
    if max_length is not None:
        node = node.max(max_length)
    if pattern is not None:
        node = node.pattern(pattern)
    if trim:
        node = node.trim()
    if uri:
        schemes = () if uri is True else (uri,) if isinstance(uri, (str, re.Pattern)) else tuple(uri)
        node = node.uri(*schemes)
    return _typed("string", node)


def number(
    min_value: float | None = None,
    max_value: float | None = None,
    convert: bool = True,
) -> PropertyAnnotator:
    """Property must be a number; numeric strings are converted unless ``convert`` is False."""
    node = s.number().with_convert(convert)
    if min_value is not None:
        node = node.min(min_value)
    if max_value is not None:
        node = node.max(max_value)
    return _typed("number", node)


def boolean(convert: bool = True) -> PropertyAnnotator:
    """Property must be a boolean."""
    return _typed("boolean", s.boolean().with_convert(convert))


def big_int(convert: bool = False) -> PropertyAnnotator:
    """Property must be a big integer. Kept as given unless ``convert`` is True."""
    return _typed("big_int", s.bigint(convert=convert))


def date_string(
    is_utc: bool = False,
    translator: Callable[[str], Any] | None = None,
    convert: bool = False,
) -> PropertyAnnotator:
    """Property must be a W3C date string.

    Args:
        is_utc: Require the UTC flavour (``Z`` suffix) instead of a numeric offset.
        translator: Converts the string. Defaults to ``datetime.fromisoformat``.
        convert: Apply ``translator``; otherwise the string is kept.
    """
    return _typed("date_string", s.date_string(is_utc, translator, convert))


def array(
    items: SchemaNode | Sequence[SchemaNode],
    allow_single: bool = True,
    min_length: int | None = None,
    max_length: int | None = None,
) -> PropertyAnnotator:
    """Property must be a list whose items match ``items`` (one node or several).

    With ``allow_single`` (the default) a lone value becomes a one-item list.
    """
    Guard.assert_arg_defined("items", items)
    item_nodes = (items,) if isinstance(items, SchemaNode) else tuple(items)
    node = s.array(*item_nodes)
    if min_length is not None:
        node = node.min(min_length)
    if max_length is not None:
        node = node.max(max_length)
    if allow_single:
        node = node.single().with_convert(True)
    return _typed("array", node)


# ============================================================================
# Rule builders
# ============================================================================

def default_as(value: Any) -> PropertyAnnotator:
    """Value used when the property is absent. Callables are called for each use."""
    return _ruled("default_as", Default(value))


def only(*values: Any) -> PropertyAnnotator:
    """Property must be one of ``values``. A single list argument is spread."""
    if len(values) == 1 and isinstance(values[0], (list, tuple, set, frozenset)):
        values = tuple(values[0])
    return _ruled("only", Only(tuple(values)))


def required(allow_null: bool = False) -> PropertyAnnotator:
    """Property must be present, and not None unless ``allow_null``."""
    return _ruled("required", Required(), AllowNull()) if allow_null else _ruled("required", Required())


def pk() -> PropertyAnnotator:
    """Marks the property as (part of) the primary key."""

    def apply(metadata: ClassValidationMetadata, owner: type, prop_name: str) -> None:
        metadata.add_pk(prop_name)

    return PropertyAnnotator("pk", apply)


def validate_prop(node: SchemaNode) -> PropertyAnnotator:
    """Sets a complete schema for the property, overriding every other annotator."""
    Guard.assert_arg_defined("schema", node)

    def apply(metadata: ClassValidationMetadata, owner: type, prop_name: str) -> None:
        metadata.set_prop(prop_name, RawSchema(node))

    return PropertyAnnotator("validate_prop", apply)


def validate_class(
    schema_map_model: Mapping[str, SchemaNode],
    *,
    schema_map_pk: Mapping[str, SchemaNode] | None = None,
    is_composite_pk: bool | None = None,
    options: ValidationOptions | Mapping[str, Any] | None = None,
) -> Callable[[C], C]:
    """Class decorator installing class-level schema maps and options.

    A non-empty ``schema_map_model`` replaces every property-derived model
    schema; a non-empty ``schema_map_pk`` replaces the ``pk()`` properties.
    """
    Guard.assert_arg_defined("schema_map_model", schema_map_model)

    def decorate(cls: C) -> C:
        Guard.assert_is_truthy(isinstance(cls, type), "This decorator is for classes")
        metadata = store.get(cls)
        metadata.schema_map_model = dict(schema_map_model)
        metadata.schema_map_pk = None if schema_map_pk is None else dict(schema_map_pk)
        metadata.is_composite_pk = is_composite_pk
        metadata.options = options
        store.set(cls, metadata)
        return cls

    return decorate
