"""Tests for validation errors and their rendering."""

import pytest
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from fleet_common.errors import ErrorCode, MinorException
from fleet_common.validation import BusinessInvariantError, ValidationError, ValidationErrorItem
from fleet_common.validation.compiler import annotation_for
from fleet_common.validation.errors import format_path, render_message
from fleet_common.validation import schema


class TestFormatPath:
    """Tests for path labels."""

    @pytest.mark.parametrize(
        "path, expected",
        [
            ((), "value"),
            (("name",), "name"),
            (("tags", 0), "tags[0]"),
            (("owner", "address", "city"), "owner.address.city"),
            (("rows", 2, "cells", 0), "rows[2].cells[0]"),
        ],
    )
    def test_labels(self, path, expected):
        assert format_path(path) == expected


class TestRenderMessage:
    """Tests for message templates."""

    def test_known_type(self):
        assert render_message("number_min", ("age",), {"limit": 15}) == '"age" must be larger than or equal to 15'

    def test_unknown_type(self):
        assert render_message("something_else", ("age",)) == '"age" is invalid'

    def test_missing_context_placeholder(self):
        assert render_message("string_min", ("name",)) == '"name" length must be at least ? characters long'


class TestValidationErrorItem:
    """Tests for single error items."""

    def test_create(self):
        item = ValidationErrorItem.create("missing", ("name",))
        assert item.message == '"name" is required'
        assert item.label == "name"
        assert item.to_dict() == {"message": '"name" is required', "path": ["name"], "value": None, "type": "missing"}

    def test_from_pydantic_error(self):
        error = {"type": "string_base", "loc": ("name",), "input": 1, "msg": "", "ctx": {}}
        (item,) = ValidationErrorItem.from_pydantic_error(error)
        assert item.message == '"name" must be a string'
        assert item.value == 1

    def test_missing_has_no_value(self):
        error = {"type": "missing", "loc": ("name",), "input": {"other": 1}, "msg": ""}
        (item,) = ValidationErrorItem.from_pydantic_error(error)
        assert item.value is None

    def test_combined_violations_expand(self):
        """One field failing several constraints yields one item per constraint."""
        adapter = TypeAdapter(annotation_for(schema.string().pattern(r"^\d+$").max(3)))
        with pytest.raises(PydanticValidationError) as exc_info:
            adapter.validate_python("abcdef")
        items = ValidationError.from_pydantic(exc_info.value, prefix=("code",)).items
        assert [i.error_type for i in items] == ["string_pattern", "string_max"]
        assert items[0].message == '"code" with value "abcdef" fails to match the required pattern: /^\\d+$/'
        assert items[1].message == '"code" length must be less than or equal to 3 characters long'


class TestValidationError:
    """Tests for the validation exception."""

    def test_is_minor(self):
        error = ValidationError("bad input")
        assert isinstance(error, MinorException)
        assert not error.is_critical
        assert str(error) == "[Minor] bad input"

    def test_from_message(self):
        error = ValidationError("bad input")
        assert [i.message for i in error.items] == ["bad input"]

    def test_from_single_item(self):
        item = ValidationErrorItem.create("missing", ("name",))
        assert ValidationError(item).items == [item]

    def test_message_joins_items(self):
        items = [ValidationErrorItem.create("missing", ("a",)), ValidationErrorItem.create("missing", ("b",))]
        assert ValidationError(items).message == '"a" is required. "b" is required'

    def test_explicit_message(self):
        item = ValidationErrorItem.create("missing", ("a",))
        assert ValidationError(item, message="Invalid user").message == "Invalid user"

    def test_field_errors_and_first(self, person_validator):
        error, _ = person_validator.whole({"age": "x"})
        assert set(error.field_errors) == {"name", "address", "age"}
        assert error.first_error.message == '"name" is required'

    def test_to_dict(self, person_validator):
        error, _ = person_validator.whole({"name": "Al", "address": "x"})
        payload = error.to_dict()["error"]
        assert payload["type"] == "validation_error"
        assert payload["error_count"] == 1
        assert payload["errors"][0]["path"] == ["name"]

    def test_to_app_error_single_item(self):
        error = ValidationError(ValidationErrorItem.create("missing", ("name",)))
        assert error.to_app_error().code is ErrorCode.E2001_REQUIRED_FIELD_MISSING

    def test_to_app_error_unmapped_constraint(self):
        error = ValidationError(ValidationErrorItem.create("any_only", ("gender",), context={"valids": "a"}))
        assert error.to_app_error().code is ErrorCode.E2005_CONSTRAINT_VIOLATION

    def test_to_app_error_several_items(self, person_validator):
        error, _ = person_validator.whole({})
        app_error = error.to_app_error()
        assert app_error.code is ErrorCode.E2000_VALIDATION_GENERIC
        assert app_error.metadata["error_count"] == 2
        assert app_error.code.category == "validation"

    def test_business_invariant(self):
        error = BusinessInvariantError("end date is before start date")
        assert isinstance(error, ValidationError)
        assert error.to_app_error().code is ErrorCode.E5004_INVARIANT_VIOLATED


def test_valid_person_passes(person_validator, valid_person):
    error, value = person_validator.whole(valid_person)
    assert error is None
    assert value == {"name": "Alice", "address": "1 Main St", "age": 30, "gender": "female", "id": "1"}
