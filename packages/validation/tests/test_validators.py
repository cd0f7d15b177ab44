"""Tests for the synchronous validators and helper functions."""

import math
import re

import pytest

from dataknobs_validation import (
    COLLECTION_TOO_LARGE,
    FINITE_FLOAT,
    NON_EMPTY_STRING,
    NON_NEGATIVE_INT,
    FrozenSetValidator,
    FunctionValidator,
    Invalid,
    ListValidator,
    MapValidator,
    OptionalValidator,
    PassThroughValidator,
    SequenceValidator,
    SetValidator,
    TupleValidator,
    UnionValidator,
    Valid,
    ValidationConfig,
    ValidationError,
    Validator,
    as_validator,
    in_range,
    max_length,
    min_length,
    non_empty,
    one_of,
    option_validator,
    optional,
    regex_match,
    required,
    use_config,
)
from dataknobs_validation.helpers import INVALID_PATTERN
from dataknobs_validation.logic import CONTAINER_TYPE_MISMATCH


class CountingValidator(Validator[int]):
    """Accepts everything and counts its invocations."""

    def __init__(self):
        self.calls = 0

    def validate(self, value):
        self.calls += 1
        return Valid(value)


class TestScalars:
    """Test pass-through scalars and custom function validators."""

    @pytest.mark.parametrize("value", [0, -1, "", float("nan"), None, b"x"])
    def test_pass_through_accepts_everything(self, value):
        """Test that pass-through validators never fail."""
        result = PassThroughValidator("int").validate(value)
        assert result.is_valid
        assert result.value is value

    def test_function_validator_bool(self):
        """Test a boolean-returning function."""
        even = Validator.of(lambda v: v % 2 == 0, "must be even", code="even")
        assert even(4) == Valid(4)

        result = even(3)
        assert result.errors[0].message == "must be even"
        assert result.errors[0].code == "even"
        assert result.errors[0].actual == "3"

    def test_function_validator_result(self):
        """Test a function returning a ValidationResult."""
        v = FunctionValidator(lambda s: Valid(s.strip()))
        assert v.validate("  a ") == Valid("a")

    def test_as_validator_decorator(self):
        """Test both decorator forms."""

        @as_validator
        def positive(value):
            return value > 0

        @as_validator(error_message="Username is reserved", code="user.reserved")
        def username(value):
            return value not in {"admin", "root"}

        assert positive(1).is_valid
        assert not positive(0).is_valid
        assert username("root").errors[0].code == "user.reserved"

    def test_and_then_is_fail_fast(self):
        """Test that the second validator only runs on success."""
        digits = NON_EMPTY_STRING.and_then(Validator.of(str.isdigit, "digits only"))

        assert digits("12") == Valid("12")
        assert [e.message for e in digits("").errors] == ["String must not be empty"]
        assert [e.message for e in digits("x").errors] == ["digits only"]

    def test_map_errors(self):
        """Test rewriting every produced error."""
        v = NON_NEGATIVE_INT.map_errors(lambda e: e.with_field("age"))
        assert v(-1).errors[0].field_path == ("age",)
        assert v(1) == Valid(1)


class TestOptional:
    """Test OptionalValidator."""

    def test_none_is_valid(self):
        """Test that None never reaches the inner validator."""
        counter = CountingValidator()
        assert OptionalValidator(counter).validate(None) == Valid(None)
        assert counter.calls == 0

    def test_present_value_delegates(self):
        """Test that present values are validated."""
        v = OptionalValidator(NON_EMPTY_STRING)
        assert v.validate("a") == Valid("a")
        assert not v.validate("").is_valid


class TestCollections:
    """Test collection validators."""

    def test_all_valid_returns_equal_value(self):
        """Test that a valid collection is returned unchanged."""
        assert ListValidator(NON_NEGATIVE_INT).validate([1, 2, 3]) == Valid([1, 2, 3])
        assert TupleValidator(NON_NEGATIVE_INT).validate((1, 2)) == Valid((1, 2))
        assert SetValidator(NON_NEGATIVE_INT).validate({1, 2}) == Valid({1, 2})
        assert FrozenSetValidator(NON_NEGATIVE_INT).validate(frozenset({1})) == Valid(frozenset({1}))

    def test_sequence_keeps_tuple(self):
        """Test that tuples stay tuples through SequenceValidator."""
        assert SequenceValidator(NON_NEGATIVE_INT).validate((1, 2)) == Valid((1, 2))
        assert SequenceValidator(NON_NEGATIVE_INT).validate([1, 2]) == Valid([1, 2])

    def test_accumulates_every_element_error(self):
        """Test that there is no early exit per element."""
        result = ListValidator(NON_NEGATIVE_INT).validate([-1, 2, -3, -4])

        assert isinstance(result, Invalid)
        assert [e.actual for e in result.errors] == ["-1", "-3", "-4"]

    def test_size_limit_short_circuits(self):
        """Test that an oversized list never reaches the element validator."""
        counter = CountingValidator()
        result = ListValidator(counter, config=ValidationConfig.custom(10)).validate(list(range(11)))

        assert isinstance(result, Invalid)
        assert len(result.errors) == 1
        assert result.errors[0].code == COLLECTION_TOO_LARGE
        assert counter.calls == 0

    def test_size_limit_boundary(self):
        """Test that a collection exactly at the limit is validated."""
        counter = CountingValidator()
        result = ListValidator(counter, config=ValidationConfig.custom(10)).validate(list(range(10)))

        assert result.is_valid
        assert counter.calls == 10

    def test_ambient_config_applies(self):
        """Test that the ambient config is used when none is given."""
        counter = CountingValidator()
        validator = SetValidator(counter)

        with use_config(ValidationConfig.custom(2)):
            result = validator.validate({1, 2, 3})

        assert result.errors[0].message.startswith("Set size (3)")
        assert counter.calls == 0
        assert validator.validate({1, 2, 3}).is_valid

    @pytest.mark.parametrize("value", ["ab", ("a", "b"), 5])
    def test_list_rejects_other_types(self, value):
        """Test that a list validator rejects text, tuples and scalars."""
        counter = CountingValidator()
        result = ListValidator(counter).validate(value)

        assert isinstance(result, Invalid)
        assert len(result.errors) == 1
        assert result.errors[0].code == CONTAINER_TYPE_MISMATCH
        assert result.errors[0].actual == type(value).__name__
        assert counter.calls == 0

    def test_sequence_rejects_text(self):
        """Test that a string is not treated as a sequence of characters."""
        result = SequenceValidator(NON_EMPTY_STRING).validate("abc")
        assert result.errors[0].code == CONTAINER_TYPE_MISMATCH
        assert SequenceValidator(NON_EMPTY_STRING).validate(b"abc").errors[0].code == CONTAINER_TYPE_MISMATCH

    def test_tuple_and_set_containers(self):
        """Test that tuples and sets only accept their own kind."""
        assert TupleValidator(NON_NEGATIVE_INT).validate([1]).errors[0].code == CONTAINER_TYPE_MISMATCH
        assert SetValidator(NON_NEGATIVE_INT).validate([1]).errors[0].code == CONTAINER_TYPE_MISMATCH
        assert FrozenSetValidator(NON_NEGATIVE_INT).validate({1}).errors[0].code == CONTAINER_TYPE_MISMATCH

    def test_set_keeps_frozenset(self):
        """Test that a frozenset comes back as a frozenset."""
        result = SetValidator(NON_NEGATIVE_INT).validate(frozenset({1, 2}))
        assert isinstance(result.value, frozenset)
        assert result == Valid(frozenset({1, 2}))


class TestMap:
    """Test MapValidator."""

    def test_valid_map(self):
        """Test that a valid map is returned as an equal dict."""
        assert MapValidator(NON_EMPTY_STRING, NON_NEGATIVE_INT).validate({"a": 1}) == Valid({"a": 1})

    def test_bad_key_and_bad_value(self):
        """Test that one bad key and one bad value give two annotated errors."""
        result = MapValidator(NON_EMPTY_STRING, NON_NEGATIVE_INT).validate({"": 1, "b": -1})

        assert len(result.errors) == 2
        key_error, value_error = result.errors
        assert key_error.field_path == ("key",)
        assert key_error.message.startswith("Invalid field: key, field type: str:")
        assert value_error.field_path == ("value",)
        assert value_error.message.startswith("Invalid field: value, field type: int:")

    def test_bad_key_and_value_in_same_entry(self):
        """Test that both parts of one entry are reported."""
        result = MapValidator(NON_EMPTY_STRING, NON_NEGATIVE_INT).validate({"": -1})
        assert [e.field_path for e in result.errors] == [("key",), ("value",)]

    def test_size_limit(self):
        """Test the entry-count limit."""
        counter = CountingValidator()
        result = MapValidator(counter, counter, config=ValidationConfig.custom(1)).validate({1: 1, 2: 2})

        assert result.errors[0].message.startswith("Map size (2)")
        assert counter.calls == 0

    @pytest.mark.parametrize("value", [[("a", 1)], 5, "a"])
    def test_rejects_non_mapping(self, value):
        """Test that only mappings are accepted."""
        result = MapValidator(NON_EMPTY_STRING, NON_NEGATIVE_INT).validate(value)

        assert len(result.errors) == 1
        assert result.errors[0].code == CONTAINER_TYPE_MISMATCH
        assert result.errors[0].expected == "Map"


class TestIntersection:
    """Test intersection validators."""

    def test_both_must_pass(self):
        """Test that errors from both sides accumulate."""
        v = Validator.of(str.islower, "must be lowercase") & Validator.of(lambda s: len(s) <= 3, "too long")

        assert v("ab") == Valid("ab")
        assert [e.message for e in v("ABCD").errors] == ["must be lowercase", "too long"]
        assert [e.message for e in v("abcd").errors] == ["too long"]

    def test_returns_original_value(self):
        """Test that the original value is returned, not a pair."""
        v = PassThroughValidator() & PassThroughValidator()
        assert v.validate(5) == Valid(5)


class TestUnion:
    """Test UnionValidator."""

    def setup_method(self):
        self.validator = UnionValidator(NON_NEGATIVE_INT, int, NON_EMPTY_STRING, str)

    def test_first_branch(self):
        """Test a value valid for A only."""
        assert self.validator.validate(5) == Valid(5)

    def test_second_branch(self):
        """Test a value valid for B only."""
        assert self.validator.validate("x") == Valid("x")

    def test_prefers_first_when_both_valid(self):
        """Test that A's value wins when both branches succeed."""
        doubled = FunctionValidator(lambda v: Valid(v * 2))
        v = Validator.union(PassThroughValidator(), int, doubled, int)
        assert v.validate(3) == Valid(3)

    def test_both_fail(self):
        """Test that both branches' errors become children of one error."""
        result = self.validator.validate(-1)

        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.expected == "int | str"
        assert len(error.children) == 2
        assert error.children[0].message == "Int must be non-negative"
        assert error.children[1].message == "Value is not of type str"

    def test_children_count_law(self):
        """Test that children equal A's errors plus B's errors."""
        two_errors = FunctionValidator(lambda v: Invalid((ValidationError("a1"), ValidationError("a2"))))
        three_errors = FunctionValidator(
            lambda v: Invalid((ValidationError("b1"), ValidationError("b2"), ValidationError("b3")))
        )
        result = Validator.union(two_errors, int, three_errors, int).validate(1)
        assert [c.message for c in result.errors[0].children] == ["a1", "a2", "b1", "b2", "b3"]


class TestHelpers:
    """Test the opt-in constraint helpers."""

    def test_non_empty(self):
        """Test blank and None strings."""
        assert non_empty("a") == Valid("a")
        assert non_empty("   ").errors[0].expected == "non-empty string"
        assert non_empty(None).errors[0].actual == "None"

    def test_callable_message(self):
        """Test a message built from the value."""
        result = non_empty("", error_message=lambda v: f"got {v!r}")
        assert result.errors[0].message == "got ''"

    def test_finite_float(self):
        """Test NaN and infinity rejection."""
        assert FINITE_FLOAT(1.5) == Valid(1.5)
        assert not FINITE_FLOAT(math.inf).is_valid
        assert not FINITE_FLOAT(float("nan")).is_valid

    def test_lengths(self):
        """Test min_length and max_length."""
        assert min_length("abc", 2) == Valid("abc")
        assert min_length("a", 2).errors[0].expected == "length >= 2"
        assert max_length("abc", 3) == Valid("abc")
        assert max_length("abcd", 3).errors[0].actual == "4"
        assert max_length(None, 3).errors[0].actual == "None"

    def test_regex_match(self):
        """Test full-string regex matching."""
        assert regex_match("abc", r"[a-c]+") == Valid("abc")
        assert not regex_match("abcd", r"[a-c]+").is_valid
        assert regex_match("42", re.compile(r"\d+")) == Valid("42")

    def test_regex_invalid_pattern(self):
        """Test that a malformed pattern is an error, not an exception."""
        result = regex_match("abc", "(")
        assert result.errors[0].code == INVALID_PATTERN

    def test_in_range(self):
        """Test the inclusive range."""
        assert in_range(1, 1, 3) == Valid(1)
        assert in_range(3, 1, 3) == Valid(3)
        assert in_range(4, 1, 3).errors[0].expected == "[1, 3]"

    def test_one_of(self):
        """Test membership."""
        assert one_of("red", ["red", "green"]) == Valid("red")
        assert one_of("blue", ["red", "green"]).errors[0].message == "Must be one of 'red', 'green'"

    def test_required_and_optional(self):
        """Test the None-handling helpers."""
        assert required(0) == Valid(0)
        assert required(None).errors[0].actual == "None"
        assert optional(None, NON_NEGATIVE_INT) == Valid(None)
        assert not optional(-1, NON_NEGATIVE_INT).is_valid

    def test_option_validator(self):
        """Test validating a possibly missing value."""
        assert option_validator(None, non_empty) == Valid(None)
        assert not option_validator(None, non_empty, error_on_empty=True).is_valid
        assert not option_validator("", non_empty).is_valid
