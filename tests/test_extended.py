"""Tests for the primitive kinds and constraint checks."""

from datetime import datetime, timezone
from typing import Annotated, Any

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from fleet_common.validation.extended import (
    ArrayType,
    BigIntType,
    BooleanType,
    Constraints,
    DateStringType,
    NumberType,
    StringType,
)
from fleet_common.validation.rules import MaxLength, MinLength, Pattern


def adapter(*metadata):
    return TypeAdapter(Annotated[(Any, *metadata)])


def error_types(adapter_, value):
    with pytest.raises(PydanticValidationError) as exc_info:
        adapter_.validate_python(value)
    return [e["type"] for e in exc_info.value.errors()]


class TestStringType:
    """Tests for the string kind."""

    def test_accepts_strings(self):
        assert adapter(StringType()).validate_python("abc") == "abc"

    @pytest.mark.parametrize("value", [1, None, True, ["a"]])
    def test_rejects_non_strings(self, value):
        assert error_types(adapter(StringType()), value) == ["string_base"]

    def test_empty_rejected_by_default(self):
        assert error_types(adapter(StringType()), "") == ["string_empty"]

    def test_empty_allowed(self):
        assert adapter(StringType(allow_empty=True)).validate_python("") == ""

    def test_trims_when_converting(self):
        assert adapter(StringType(trim=True)).validate_python("  abc ") == "abc"

    def test_trim_then_empty_check(self):
        """A blank string trimmed to nothing is empty."""
        assert error_types(adapter(StringType(trim=True)), "   ") == ["string_empty"]


class TestNumberType:
    """Tests for the number kind."""

    @pytest.mark.parametrize("raw, expected", [(10, 10), (1.5, 1.5), ("10", 10), ("1.5", 1.5), ("-3", -3)])
    def test_converts_numeric_values(self, raw, expected):
        assert adapter(NumberType()).validate_python(raw) == expected

    @pytest.mark.parametrize("value", [True, "abc", "", None, [1], "Infinity", "nan", "0x10"])
    def test_rejects_non_numbers(self, value):
        assert error_types(adapter(NumberType()), value) == ["number_base"]

    def test_no_conversion(self):
        assert error_types(adapter(NumberType(convert=False)), "10") == ["number_base"]

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), "1e400"])
    def test_rejects_infinity(self, value):
        assert error_types(adapter(NumberType()), value) == ["number_infinity"]

    @pytest.mark.parametrize("value", ["1_000", "١٠", " 10", "10 ", "10\n", "1.5.2"])
    def test_rejects_loose_numeric_strings(self, value):
        """Only plain ASCII decimal notation converts."""
        assert error_types(adapter(NumberType()), value) == ["number_base"]

    @pytest.mark.parametrize("raw, expected", [("+7", 7), ("1e3", 1000.0), (".5", 0.5), ("2.", 2.0)])
    def test_decimal_notation(self, raw, expected):
        assert adapter(NumberType()).validate_python(raw) == expected

    @given(st.integers() | st.floats(allow_nan=False, allow_infinity=False))
    def test_numbers_pass_through(self, value):
        assert adapter(NumberType()).validate_python(value) == value


class TestBooleanType:
    """Tests for the boolean kind."""

    @pytest.mark.parametrize("raw, expected", [(True, True), (False, False), ("true", True), ("FALSE", False)])
    def test_accepts(self, raw, expected):
        assert adapter(BooleanType()).validate_python(raw) is expected

    @pytest.mark.parametrize("value", [1, "yes", None])
    def test_rejects(self, value):
        assert error_types(adapter(BooleanType()), value) == ["boolean_base"]

    def test_no_conversion(self):
        assert error_types(adapter(BooleanType(convert=False)), "true") == ["boolean_base"]


class TestBigIntType:
    """Tests for the big integer kind."""

    def test_keeps_digit_strings(self):
        assert adapter(BigIntType()).validate_python("9007199254740993") == "9007199254740993"

    def test_keeps_ints(self):
        assert adapter(BigIntType()).validate_python(2**70) == 2**70

    def test_converts_digit_strings(self):
        assert adapter(BigIntType(convert=True)).validate_python("-9007199254740993") == -9007199254740993

    def test_as_string(self):
        assert adapter(BigIntType(as_string=True)).validate_python(2**70) == str(2**70)

    @pytest.mark.parametrize("value", ["12.5", "abc", True, 1.0, None])
    def test_rejects_non_integers(self, value):
        assert error_types(adapter(BigIntType()), value) == ["bigint_native"]

    @pytest.mark.parametrize("value", ["١٢", "1_000"])
    def test_rejects_non_ascii_digits(self, value):
        assert error_types(adapter(BigIntType()), value) == ["bigint_native"]

    def test_conversion_failure(self):
        assert error_types(adapter(BigIntType(convert=True)), "12a") == ["bigint_convert"]

    @given(st.integers())
    def test_string_round_trip(self, value):
        assert adapter(BigIntType(convert=True)).validate_python(str(value)) == value


class TestDateStringType:
    """Tests for the W3C date string kind."""

    @pytest.mark.parametrize("value", ["2019-03-22", "2019-03-22T14:30:00+07:00", "2019-03-22T14:30:00.123-05:30"])
    def test_zoned_accepts(self, value):
        assert adapter(DateStringType()).validate_python(value) == value

    @pytest.mark.parametrize("value", ["2019-03-22T14:30:00Z", "2019-03-22T14:30:00", "22/03/2019", "2019-3-22"])
    def test_zoned_rejects(self, value):
        assert error_types(adapter(DateStringType()), value) == ["date_string_format"]

    @pytest.mark.parametrize("value", ["2019-03-22", "2019-03-22T14:30:00Z", "2019-03-22T14:30:00.5Z"])
    def test_utc_accepts(self, value):
        assert adapter(DateStringType(is_utc=True)).validate_python(value) == value

    @pytest.mark.parametrize("value", ["2019-03-22T14:30:00+07:00", "2019-03-22T14:30:00"])
    def test_utc_rejects(self, value):
        assert error_types(adapter(DateStringType(is_utc=True)), value) == ["date_string_format"]

    @pytest.mark.parametrize("value", ["2019-13-01", "2019-02-30", "2019-03-22T25:00:00Z", "2019-03-22T10:61:00Z"])
    def test_rejects_impossible_dates(self, value):
        assert error_types(adapter(DateStringType(is_utc=True)), value) == ["date_string_value"]

    @pytest.mark.parametrize("is_utc", [True, False])
    @pytest.mark.parametrize(
        "value",
        ["2020-01-01\n", "٢٠٢٠-٠١-٠١", "2020-01-01T10:00:00Z\n"],
    )
    def test_rejects_trailing_newline_and_non_ascii_digits(self, is_utc, value):
        assert error_types(adapter(DateStringType(is_utc=is_utc)), value) == ["date_string_format"]

    def test_rejects_impossible_offset(self):
        assert error_types(adapter(DateStringType()), "2019-03-22T10:00:00+24:00") == ["date_string_value"]

    def test_rejects_non_strings(self):
        assert error_types(adapter(DateStringType()), 20190322) == ["string_base"]

    def test_default_translator(self):
        value = adapter(DateStringType(is_utc=True, convert=True)).validate_python("2019-03-22T14:30:00Z")
        assert value == datetime(2019, 3, 22, 14, 30, tzinfo=timezone.utc)

    def test_custom_translator(self):
        value = adapter(DateStringType(translator=lambda s: s.split("-"), convert=True)).validate_python("2019-03-22")
        assert value == ["2019", "03", "22"]


class TestArrayType:
    """Tests for the array kind."""

    def test_any_items(self):
        assert adapter(ArrayType()).validate_python([1, "a", None]) == [1, "a", None]

    def test_tuples_accepted(self):
        assert adapter(ArrayType()).validate_python((1, 2)) == [1, 2]

    def test_single_item_type(self):
        ints = Annotated[Any, NumberType()]
        assert adapter(ArrayType([ints])).validate_python(["1", 2]) == [1, 2]

    def test_item_error_location(self):
        strings = Annotated[Any, StringType()]
        with pytest.raises(PydanticValidationError) as exc_info:
            adapter(ArrayType([strings])).validate_python(["a", 1])
        assert exc_info.value.errors()[0]["loc"] == (1,)

    def test_several_item_types(self):
        items = [Annotated[Any, BooleanType(convert=False)], Annotated[Any, NumberType(convert=False)]]
        assert adapter(ArrayType(items)).validate_python([True, 2]) == [True, 2]
        assert error_types(adapter(ArrayType(items)), ["x"]) == ["array_includes"]

    def test_rejects_non_lists(self):
        assert error_types(adapter(ArrayType()), "abc") == ["list_type"]

    def test_single_wraps_value(self):
        assert adapter(ArrayType(single=True)).validate_python("abc") == ["abc"]

    def test_single_keeps_sets_as_collections(self):
        assert sorted(adapter(ArrayType(single=True)).validate_python({"a", "b"})) == ["a", "b"]
        assert adapter(ArrayType(single=True)).validate_python(frozenset({1})) == [1]


class TestConstraints:
    """Tests for the rule check runner."""

    def test_one_violation_keeps_its_type(self):
        checked = adapter(StringType(), Constraints([MinLength(3)]))
        assert error_types(checked, "ab") == ["string_min"]

    def test_several_violations_are_combined(self):
        checked = adapter(StringType(), Constraints([Pattern(r"^\d+$"), MaxLength(3)]))
        with pytest.raises(PydanticValidationError) as exc_info:
            checked.validate_python("abcdef")
        error = exc_info.value.errors()[0]
        assert error["type"] == "multiple_violations"
        assert [v[0] for v in error["ctx"]["violations"]] == ["string_pattern", "string_max"]

    def test_allowed_empty_skips_checks(self):
        checked = adapter(StringType(allow_empty=True), Constraints([MinLength(3)], skip_empty=True))
        assert checked.validate_python("") == ""

    def test_runs_after_conversion(self):
        checked = adapter(StringType(trim=True), Constraints([MaxLength(3)]))
        assert checked.validate_python("  abc  ") == "abc"
