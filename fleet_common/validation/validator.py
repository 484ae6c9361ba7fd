"""Model Validator

Runtime entry point over compiled schemas. A validator starts uncompiled;
``compile()`` is a one-way transition after which ``id``, ``whole`` and
``partial`` run against the same compiled schemas on every call.

Usage:
    from fleet_common.validation import ModelValidator, schema

    validator = ModelValidator.create({
        "name": schema.string().min(3).max(10).required(),
        "age": schema.number().min(15).max(99),
    })

    error, value = validator.whole({"name": "Alice", "age": "20"})
    # value == {"name": "Alice", "age": 20}

    error, value = validator.partial({"age": 10})
    # error.items[0].message == '"age" must be larger than or equal to 15'
"""
from __future__ import annotations

from typing import Any, Generic, Mapping, TypeVar

from fleet_common.guard import Guard
from fleet_common.logging import validation_logger

from .compiler import CompiledSchemas, compile_schemas
from .schema import SchemaNode, bigint
from .types import ValidationOptions, ValidationOutcome

T = TypeVar("T")

log = validation_logger()

_NOT_COMPILED = "Must call `compile` before using this function!"


def default_pk_map(is_composite_pk: bool = False, require_pk: bool = False) -> dict[str, SchemaNode]:
    """Key map used when none is given: big integer ``id``, plus ``tenantId`` when composite."""
    node = bigint(convert=False)
    if require_pk:
        node = node.required()
    if is_composite_pk:
        return {"id": node, "tenantId": node}
    return {"id": node}


class ModelValidator(Generic[T]):
    """Validates model payloads: key only, whole model, or a partial patch.

    Args:
        schema_map_model: Schema node per model property.
        schema_map_pk: Schema node per key property. None for the default key
            map, an empty mapping for a model without key.
        is_composite_pk: Validate the key as an object over ``schema_map_pk``
            instead of a bare scalar.
        require_pk: Mark the default key nodes as required.
        options: Default validation options, laid over the settings defaults.
        name: Model name used for compiled schemas and logs.
    """

    def __init__(
        self,
        schema_map_model: Mapping[str, SchemaNode],
        *,
        schema_map_pk: Mapping[str, SchemaNode] | None = None,
        is_composite_pk: bool = False,
        require_pk: bool = False,
        options: ValidationOptions | Mapping[str, Any] | None = None,
        name: str = "Model",
    ):
        Guard.assert_arg_defined("schema_map_model", schema_map_model)
        self._schema_map_model = dict(schema_map_model)
        self._schema_map_pk = (
            default_pk_map(is_composite_pk, require_pk) if schema_map_pk is None else dict(schema_map_pk)
        )
        self._is_composite_pk = is_composite_pk
        self._default_options = ValidationOptions().merge(options)
        self._name = name
        self._compiled: CompiledSchemas | None = None

    @classmethod
    def create(
        cls,
        schema_map_model: Mapping[str, SchemaNode],
        **kwargs: Any,
    ) -> ModelValidator[T]:
        """Build and compile a validator in one step."""
        return cls(schema_map_model, **kwargs).compile()

    @property
    def schema_map_model(self) -> dict[str, SchemaNode]:
        return self._schema_map_model

    @property
    def schema_map_pk(self) -> dict[str, SchemaNode]:
        return self._schema_map_pk

    @property
    def is_composite_pk(self) -> bool:
        return self._is_composite_pk

    @property
    def is_compiled(self) -> bool:
        return self._compiled is not None

    @property
    def default_options(self) -> ValidationOptions:
        return self._default_options

    @property
    def name(self) -> str:
        return self._name

    def compile(self) -> ModelValidator[T]:
        """Compile the schemas. Repeat calls keep the first compilation."""
        if self._compiled is None:
            self._compiled = compile_schemas(
                self._schema_map_model,
                self._schema_map_pk,
                self._is_composite_pk,
                self._name,
            )
            log.debug("validator_compiled", model=self._name)
        return self

    def id(self, value: Any) -> ValidationOutcome[Any]:
        """Validates a key: a bare scalar, or an object when the key is composite."""
        Guard.assert_is_defined(self._compiled, _NOT_COMPILED)
        Guard.assert_is_defined(self._compiled.pk, f"Model {self._name} has no primary key to validate!")
        return self._compiled.pk.run(value, self._default_options)

    pk = id

    def whole(self, target: Any, options: ValidationOptions | Mapping[str, Any] | None = None) -> ValidationOutcome[T]:
        """Validates a complete model, honoring each property's required-ness."""
        Guard.assert_is_defined(self._compiled, _NOT_COMPILED)
        return self._compiled.whole.run(target, self._default_options.merge(options))

    def partial(
        self, target: Any, options: ValidationOptions | Mapping[str, Any] | None = None
    ) -> ValidationOutcome[dict[str, Any]]:
        """Validates only the properties present in ``target``."""
        Guard.assert_is_defined(self._compiled, _NOT_COMPILED)
        return self._compiled.partial.run(target, self._default_options.merge(options))
