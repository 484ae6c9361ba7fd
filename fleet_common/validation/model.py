"""Class-level Compilation

Builds a ``ModelValidator`` from the metadata a class accumulated. Each class
is compiled at most once: the metadata entry is deleted afterwards and the
validator (or None) is cached per class.
"""
from __future__ import annotations

from functools import reduce
from typing import Any, TypeVar

from fleet_common.logging import validation_logger

from . import schema as s
from .decorators import apply_annotations
from .metadata import ClassValidationMetadata, PropertySchema, RawSchema, store
from .schema import SchemaNode
from .validator import ModelValidator

log = validation_logger()

T = TypeVar("T")

_validators: dict[type, ModelValidator[Any] | None] = {}


def build_property_schema(prop: PropertySchema, is_pk: bool = False) -> SchemaNode:
    """Raw schema as is, else the rules folded over the type initializer.

    Untyped key properties default to a non-converting big integer, other
    untyped properties to a string.
    """
    if isinstance(prop, RawSchema):
        return prop.schema
    base = prop.type_init or (s.bigint(convert=False) if is_pk else s.string())
    return reduce(lambda node, rule: rule(node), prop.rules, base)


def build_schema_maps(metadata: ClassValidationMetadata) -> tuple[dict[str, SchemaNode], dict[str, SchemaNode]]:
    """Model and key schema maps. Non-empty class-level maps replace the derived ones."""
    pk_names = set(metadata.pk_props)
    model_map = {
        name: build_property_schema(prop)
        for name, prop in metadata.props.items()
        if name not in pk_names
    }
    pk_map = {name: build_property_schema(metadata.get_prop(name), is_pk=True) for name in metadata.pk_props}
    if metadata.schema_map_model:
        model_map = dict(metadata.schema_map_model)
    if metadata.schema_map_pk:
        pk_map = dict(metadata.schema_map_pk)
    return model_map, pk_map


def compile_class(cls: type[T]) -> ModelValidator[T] | None:
    """Compile the validator declared on ``cls`` and discard its metadata.

    Returns None when nothing was declared, so callers can tell a class that
    needs no validation from one that validates nothing.
    """
    metadata = store.get(cls)
    model_map, pk_map = build_schema_maps(metadata)
    store.delete(cls)
    if not model_map and not pk_map:
        log.debug("no_validator_declared", model=cls.__name__)
        return None
    is_composite_pk = len(pk_map) > 1 if metadata.is_composite_pk is None else metadata.is_composite_pk
    return ModelValidator(
        model_map,
        schema_map_pk=pk_map,
        is_composite_pk=is_composite_pk,
        options=metadata.options,
        name=cls.__name__,
    ).compile()


def get_validator(cls: type[T]) -> ModelValidator[T] | None:
    """The compiled validator for ``cls``, compiling on first use."""
    if cls not in _validators:
        _validators[cls] = compile_class(cls)
    return _validators[cls]


class ValidatedModel:
    """Base class applying ``Annotated`` property annotators at class creation.

        class Account(ValidatedModel):
            id: Annotated[int, pk()]
            email: Annotated[str, string(email=True), required()]

        error, value = Account.get_validator().whole(payload)
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        apply_annotations(cls)

    @classmethod
    def get_validator(cls) -> ModelValidator[Any] | None:
        return get_validator(cls)
