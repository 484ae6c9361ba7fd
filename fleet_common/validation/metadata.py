"""Validation Metadata Store

Accumulates validation intent per class while the class is being defined:
property schemas, primary-key property names and class-level overrides.
The compiler reads an entry once and deletes it.

Entries are keyed by the class object itself. Lookups never walk the MRO,
so a subclass starts with no metadata of its own.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Union

from .rules import Rule
from .schema import SchemaNode


@dataclass(frozen=True, slots=True)
class RawSchema:
    """A complete schema node given as is. Always wins over derived rules."""
    schema: SchemaNode


@dataclass(frozen=True, slots=True)
class DerivedSchema:
    """A type initializer plus ordered rule transforms folded over it.

    ``type_init`` is None until a type-defining annotation sets it; the
    compiler then falls back to the property's default kind.
    """
    type_init: SchemaNode | None = None
    rules: tuple[Rule, ...] = ()

    def with_type(self, type_init: SchemaNode) -> DerivedSchema:
        return replace(self, type_init=type_init)

    def with_rules(self, *rules: Rule) -> DerivedSchema:
        return replace(self, rules=(*self.rules, *rules))


PropertySchema = Union[RawSchema, DerivedSchema]


@dataclass(slots=True)
class ClassValidationMetadata:
    """Everything declared for one class before compilation."""
    props: dict[str, PropertySchema] = field(default_factory=dict)
    pk_props: list[str] = field(default_factory=list)
    schema_map_model: Mapping[str, SchemaNode] | None = None
    schema_map_pk: Mapping[str, SchemaNode] | None = None
    is_composite_pk: bool | None = None
    options: Any = None

    @property
    def is_empty(self) -> bool:
        return not (self.props or self.pk_props or self.schema_map_model or self.schema_map_pk)

    def get_prop(self, name: str) -> PropertySchema:
        return self.props.get(name) or DerivedSchema()

    def set_prop(self, name: str, prop: PropertySchema) -> None:
        self.props[name] = prop

    def add_pk(self, name: str) -> None:
        if name not in self.pk_props:
            self.pk_props.append(name)


class MetadataStore:
    """Process-wide registry of class metadata."""

    def __init__(self) -> None:
        self._entries: dict[type, ClassValidationMetadata] = {}

    def get(self, cls: type) -> ClassValidationMetadata:
        """Stored metadata for ``cls``, or a fresh empty entry (not stored)."""
        return self._entries.get(cls) or ClassValidationMetadata()

    def set(self, cls: type, metadata: ClassValidationMetadata) -> None:
        self._entries[cls] = metadata

    def delete(self, cls: type) -> None:
        self._entries.pop(cls, None)

    def contains(self, cls: type) -> bool:
        return cls in self._entries

    def __len__(self) -> int:
        return len(self._entries)


store = MetadataStore()
