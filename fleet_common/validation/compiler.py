"""Schema Compiler

Turns schema nodes into pydantic validators. A node's rules are folded left to
right into a ``Resolved`` description, which becomes an ``Annotated`` field
type. Object schemas become models built with ``create_model``; every
property is an aliased field ``f0, f1, ...`` so any property name is allowed.

    compiled = compile_schemas(model_map, pk_map, is_composite_pk=False, name="User")
    compiled.whole.run({"name": "Alice"}, ValidationOptions())
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any, Mapping, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, create_model
from pydantic import ValidationError as PydanticValidationError
from pydantic.fields import FieldInfo

from fleet_common.logging import validation_logger

from .errors import ValidationError, ValidationErrorItem
from .extended import (
    AnyType,
    ArrayType,
    BigIntType,
    BooleanType,
    Constraints,
    DateStringType,
    NumberType,
    StringType,
)
from .rules import (
    AllowEmpty,
    AllowNull,
    AsString,
    Convert,
    Default,
    NotRequired,
    Required,
    Rule,
    Single,
    Trim,
)
from .schema import SchemaKind, SchemaNode
from .types import ValidationOptions, ValidationOutcome

log = validation_logger()

_MISSING = object()

_MODEL_CONFIG = ConfigDict(extra="ignore", arbitrary_types_allowed=True)


@dataclass(slots=True)
class Resolved:
    """A node after folding its rules."""
    node: SchemaNode
    required: bool = False
    allow_null: bool = False
    allow_empty: bool = False
    default: Any = _MISSING
    single: bool = False
    as_string: bool = False
    trim: bool = False
    convert: bool = True
    checks: dict[Any, Rule] = field(default_factory=dict)

    @property
    def has_default(self) -> bool:
        return self.default is not _MISSING


def resolve(node: SchemaNode) -> Resolved:
    """Fold ``node.rules`` in order. A later rule of the same kind replaces an earlier one."""
    resolved = Resolved(node, convert=node.convert)
    for rule in node.rules:
        match rule:
            case Required():
                resolved.required = True
            case NotRequired():
                resolved.required = False
            case AllowNull():
                resolved.allow_null = True
            case AllowEmpty(allowed=allowed):
                resolved.allow_empty = allowed
            case Default(value=value):
                resolved.default = value
            case Single():
                resolved.single = True
            case AsString():
                resolved.as_string = True
            case Convert(enabled=enabled):
                resolved.convert = enabled
            case _:
                if isinstance(rule, Trim):
                    resolved.trim = True
                resolved.checks[rule.key] = rule
    return resolved


def _kind(resolved: Resolved) -> Any:
    node = resolved.node
    match node.kind:
        case SchemaKind.STRING:
            return StringType(resolved.convert, resolved.trim, resolved.allow_empty)
        case SchemaKind.NUMBER:
            return NumberType(resolved.convert)
        case SchemaKind.BOOLEAN:
            return BooleanType(resolved.convert)
        case SchemaKind.BIGINT:
            return BigIntType(resolved.convert, resolved.as_string)
        case SchemaKind.DATE_STRING:
            return DateStringType(node.is_utc, node.translator, resolved.convert)
        case SchemaKind.ARRAY:
            return ArrayType([annotation_for(item) for item in node.items], resolved.single)
        case _:
            return AnyType()


def annotation_for(node: SchemaNode | Resolved) -> Any:
    """The ``Annotated`` type validating values of ``node``. Presence rules are not part of it."""
    resolved = node if isinstance(node, Resolved) else resolve(node)
    metadata = [_kind(resolved)]
    if resolved.checks:
        skip_empty = resolved.allow_empty and resolved.node.kind is SchemaKind.STRING
        metadata.append(Constraints(list(resolved.checks.values()), skip_empty))
    annotation = Annotated[(Any, *metadata)]
    return Optional[annotation] if resolved.allow_null else annotation


def compile_node(
    node: SchemaNode,
    optional: bool = False,
    with_default: bool = True,
    alias: str | None = None,
) -> tuple[Any, FieldInfo]:
    """Field type and ``FieldInfo`` for one property.

    ``optional`` drops required-ness; ``with_default`` controls whether a
    declared default is injected for absent properties.
    """
    annotation, info, _ = _compile_field(resolve(node), optional, with_default, alias)
    return annotation, info


def _compile_field(
    resolved: Resolved, optional: bool, with_default: bool, alias: str | None
) -> tuple[Any, FieldInfo, bool]:
    annotation = annotation_for(resolved)
    if resolved.required and not optional:
        return annotation, Field(alias=alias), False
    if with_default and resolved.has_default:
        if callable(resolved.default):
            return annotation, Field(default_factory=resolved.default, alias=alias), True
        return annotation, Field(default=resolved.default, alias=alias), True
    # Absent optional property: never validated, left out of the output
    return annotation, Field(default=None, alias=alias), False


# ============================================================================
# Compiled validators
# ============================================================================

class CompiledObject:
    """Validates mappings against an object schema and rebuilds the output by property name."""

    def __init__(self, model: type[BaseModel], aliases: dict[str, str], defaults: frozenset[str]):
        self.model = model
        self.aliases = aliases
        self.defaults = defaults
        self.keys = frozenset(aliases.values())

    @property
    def name(self) -> str:
        return self.model.__name__

    def run(self, target: Any, options: ValidationOptions) -> ValidationOutcome[dict[str, Any]]:
        if not isinstance(target, Mapping):
            item = ValidationErrorItem.create("model_type", (), target)
            return ValidationOutcome.failure(ValidationError(item))

        items: list[ValidationErrorItem] = []
        instance = None
        try:
            instance = self.model.model_validate(dict(target))
        except PydanticValidationError as exc:
            items.extend(ValidationError.from_pydantic(exc).items)

        unknown = [key for key in target if key not in self.keys]
        if unknown and not options.strip_unknown and not options.allow_unknown:
            items.extend(ValidationErrorItem.create("object_unknown", (key,), target[key]) for key in unknown)

        if items:
            return ValidationOutcome.failure(ValidationError(items[:1] if options.abort_early else items))

        value = {
            alias: getattr(instance, name)
            for name, alias in self.aliases.items()
            if name in instance.model_fields_set or name in self.defaults
        }
        if not options.strip_unknown:
            value.update((key, target[key]) for key in unknown)
        return ValidationOutcome.success(value)


class CompiledScalar:
    """Validates a bare value, such as a simple primary key."""

    def __init__(self, adapter: TypeAdapter, required: bool, name: str = "value"):
        self.adapter = adapter
        self.required = required
        self.name = name

    def run(self, value: Any, options: ValidationOptions | None = None) -> ValidationOutcome[Any]:
        if value is None and self.required:
            return ValidationOutcome.failure(ValidationError(ValidationErrorItem.create("missing")))
        try:
            return ValidationOutcome.success(self.adapter.validate_python(value))
        except PydanticValidationError as exc:
            error = ValidationError.from_pydantic(exc)
            if options is not None and options.abort_early:
                error = ValidationError(error.items[:1])
            return ValidationOutcome.failure(error)


class CompiledSchemas(NamedTuple):
    whole: CompiledObject
    partial: CompiledObject
    pk: CompiledObject | CompiledScalar | None


def compile_object(
    schema_map: Mapping[str, SchemaNode],
    name: str,
    optional: bool = False,
    with_default: bool = True,
) -> CompiledObject:
    """Compile an object schema. Property names become field aliases."""
    fields: dict[str, Any] = {}
    aliases: dict[str, str] = {}
    defaults: set[str] = set()
    for index, (prop, node) in enumerate(schema_map.items()):
        field_name = f"f{index}"
        annotation, info, injects_default = _compile_field(resolve(node), optional, with_default, prop)
        fields[field_name] = (annotation, info)
        aliases[field_name] = prop
        if injects_default:
            defaults.add(field_name)
    model = create_model(name, __config__=_MODEL_CONFIG, **fields)
    return CompiledObject(model, aliases, frozenset(defaults))


def compile_scalar(node: SchemaNode, name: str = "value") -> CompiledScalar:
    resolved = resolve(node)
    return CompiledScalar(TypeAdapter(annotation_for(resolved)), resolved.required, name)


def _key_part(node: SchemaNode) -> SchemaNode:
    """Composite key parts are required unless explicitly made optional."""
    return node if node.has_rule(NotRequired) else node.required()


def compile_schemas(
    model_map: Mapping[str, SchemaNode],
    pk_map: Mapping[str, SchemaNode],
    is_composite_pk: bool | None = None,
    name: str = "Model",
) -> CompiledSchemas:
    """Compile the whole, partial and primary-key validators of one model.

    Whole validation checks model and key properties as declared. Partial
    validation checks the same properties with every one optional and no
    defaults injected. The key validator is an object over the key map when
    composite, with every part required, else the first key node as a bare
    scalar.
    """
    merged = {**model_map, **pk_map}
    whole = compile_object(merged, name)
    partial = compile_object(merged, f"{name}Partial", optional=True, with_default=False)

    composite = len(pk_map) > 1 if is_composite_pk is None else is_composite_pk
    pk: CompiledObject | CompiledScalar | None = None
    if pk_map and composite:
        pk = compile_object({prop: _key_part(node) for prop, node in pk_map.items()}, f"{name}Pk")
    elif pk_map:
        pk_name, pk_node = next(iter(pk_map.items()))
        pk = compile_scalar(pk_node, pk_name)

    log.debug(
        "schema_compiled",
        model=name,
        fields=len(model_map),
        pk_fields=list(pk_map),
        composite_pk=bool(pk_map) and composite,
    )
    return CompiledSchemas(whole, partial, pk)
