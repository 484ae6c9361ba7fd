"""Declarative Model Validation

Classes declare per-property rules with annotators; the rules accumulate in a
metadata store, compile once into pydantic validators, and validate payloads
as a whole, as a partial patch, or by primary key.

Key Features:
- Property annotators (``string``, ``number``, ``big_int``, ``date_string``...)
- Class-level schema maps that replace property-derived rules
- Simple or composite primary keys
- Errors returned as values, never raised for bad data

Usage:
    from typing import Annotated
    from fleet_common.validation import (
        ValidatedModel, pk, string, number, required, schema,
    )

    class Person(ValidatedModel):
        id: Annotated[int, pk()]
        name: Annotated[str, string(min_length=3, max_length=10, pattern=r"^[\\w -]+$"), required()]
        address: Annotated[str, string(allow_empty=False), required()]
        age: Annotated[int, number(min_value=15, max_value=99)]

    validator = Person.get_validator()
    error, value = validator.whole({"name": "Alice", "address": "1 Main St"})
    error, value = validator.partial({"age": "20"})
    error, value = validator.id("123")
"""
from . import schema
from .compiler import CompiledObject, CompiledScalar, CompiledSchemas, compile_node, compile_object, compile_scalar, compile_schemas
from .decorators import (
    PropertyAnnotator,
    apply_annotations,
    array,
    big_int,
    boolean,
    date_string,
    default_as,
    number,
    only,
    pk,
    required,
    string,
    validate_class,
    validate_prop,
)
from .errors import BusinessInvariantError, ValidationError, ValidationErrorItem
from .metadata import ClassValidationMetadata, DerivedSchema, MetadataStore, PropertySchema, RawSchema, store
from .model import ValidatedModel, build_property_schema, build_schema_maps, compile_class, get_validator
from .schema import SchemaKind, SchemaNode
from .types import ValidationOptions, ValidationOutcome
from .validator import ModelValidator, default_pk_map

__all__ = [
    # Schema nodes
    "schema",
    "SchemaKind",
    "SchemaNode",
    # Annotators
    "PropertyAnnotator",
    "apply_annotations",
    "array",
    "big_int",
    "boolean",
    "date_string",
    "default_as",
    "number",
    "only",
    "pk",
    "required",
    "string",
    "validate_class",
    "validate_prop",
    # Metadata
    "ClassValidationMetadata",
    "DerivedSchema",
    "MetadataStore",
    "PropertySchema",
    "RawSchema",
    "store",
    # Compilation
    "CompiledObject",
    "CompiledScalar",
    "CompiledSchemas",
    "compile_node",
    "compile_object",
    "compile_scalar",
    "compile_schemas",
    "ValidatedModel",
    "build_property_schema",
    "build_schema_maps",
    "compile_class",
    "get_validator",
    # Validation
    "ModelValidator",
    "default_pk_map",
    "ValidationOptions",
    "ValidationOutcome",
    # Errors
    "ValidationError",
    "ValidationErrorItem",
    "BusinessInvariantError",
]
