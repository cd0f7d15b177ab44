"""Tests for ValidationError and the error accumulators."""

import pytest

from dataknobs_validation import (
    DEFAULT_ACCUMULATOR,
    ListAccumulator,
    SetAccumulator,
    TupleAccumulator,
    ValidationError,
)
from dataknobs_validation.accumulator import combine_all


class TestValidationError:
    """Test ValidationError construction and accessors."""

    def test_defaults(self):
        """Test that only the message is required."""
        error = ValidationError("bad")
        assert error.message == "bad"
        assert error.field_path == ()
        assert error.children == ()
        assert error.code is None
        assert error.severity is None
        assert error.expected is None
        assert error.actual is None

    def test_message_required(self):
        """Test that a None message is rejected."""
        with pytest.raises(ValueError):
            ValidationError(None)

    def test_field_path_is_tuple(self):
        """Test that any iterable path is stored as a tuple."""
        error = ValidationError("bad", field_path=["user", "name"])
        assert error.field_path == ("user", "name")

    def test_with_field_prepends(self):
        """Test that with_field prepends and leaves the original untouched."""
        error = ValidationError("bad", field_path=("name",))
        outer = error.with_field("user")

        assert outer.field_path == ("user", "name")
        assert error.field_path == ("name",)

    def test_annotate_field(self):
        """Test that annotate_field rewraps the message and prepends the path."""
        error = ValidationError("String must not be empty", code="c").annotate_field("name", "str")

        assert error.field_path == ("name",)
        assert error.message == "Invalid field: name, field type: str: String must not be empty"
        assert error.code == "c"

    def test_with_message_keeps_attributes(self):
        """Test that with_message only changes the message."""
        error = ValidationError("bad", field_path=("a",), code="c", expected="e", actual="x")
        changed = error.with_message("better")

        assert changed.message == "better"
        assert changed.field_path == ("a",)
        assert changed.code == "c"
        assert changed.expected == "e"
        assert changed.actual == "x"

    def test_nest_appends_children(self):
        """Test that nest appends children in order."""
        parent = ValidationError("parent", children=[ValidationError("a")])
        nested = parent.nest([ValidationError("b")])
        assert [c.message for c in nested.children] == ["a", "b"]

    def test_nest_field(self):
        """Test creating a field-level wrapper error."""
        error = ValidationError.nest_field("address", [ValidationError("bad street")])
        assert error.field_path == ("address",)
        assert error.children[0].message == "bad street"

    def test_equality_and_hash(self):
        """Test that errors compare by value."""
        a = ValidationError("bad", field_path=("x",), code="c")
        b = ValidationError("bad", field_path=("x",), code="c")

        assert a == b
        assert hash(a) == hash(b)
        assert a != ValidationError("bad", field_path=("y",), code="c")
        assert len({a, b}) == 1


class TestRendering:
    """Test compact and pretty rendering."""

    def test_show_plain(self):
        """Test a message without path or extras."""
        assert ValidationError("bad").show() == "bad"

    def test_show_with_path_and_extras(self):
        """Test the path prefix and the bracketed extras."""
        error = ValidationError(
            "too small",
            field_path=("user", "age"),
            code="range",
            severity="Error",
            expected=">= 0",
            actual="-1",
        )
        assert error.show() == "user.age: too small [range] <Error> (expected: >= 0) (got: -1)"

    def test_show_children(self):
        """Test that children appear on indented lines."""
        error = ValidationError("union", children=[ValidationError("a"), ValidationError("b")])
        assert error.show() == "union\n  a\n  b"

    def test_pretty_print_nested(self):
        """Test the indentation of nested children."""
        inner = ValidationError("inner", children=[ValidationError("leaf")])
        error = ValidationError("outer", children=[inner])

        assert error.pretty_print() == "outer\n  inner\n    leaf"
        assert error.pretty_print(2) == "  outer\n    inner\n      leaf"

    def test_str_is_show(self):
        """Test that str() uses the compact rendering."""
        error = ValidationError("bad", field_path=("x",))
        assert str(error) == error.show()

    def test_to_dict(self):
        """Test conversion to a plain dictionary."""
        error = ValidationError("outer", field_path=("a",), children=[ValidationError("inner")])
        data = error.to_dict()

        assert data["message"] == "outer"
        assert data["field_path"] == ["a"]
        assert data["children"][0]["message"] == "inner"
        assert data["code"] is None


class TestAccumulators:
    """Test the ErrorAccumulator instances."""

    def test_tuple_concatenates_in_order(self):
        """Test that the default accumulator keeps order and duplicates."""
        a, b = ValidationError("a"), ValidationError("b")
        assert DEFAULT_ACCUMULATOR.combine((a,), (b, a)) == (a, b, a)
        assert isinstance(DEFAULT_ACCUMULATOR, TupleAccumulator)

    def test_tuple_associative(self):
        """Test associativity of concatenation."""
        acc = TupleAccumulator()
        x, y, z = (ValidationError("x"),), (ValidationError("y"),), (ValidationError("z"),)
        assert acc.combine(acc.combine(x, y), z) == acc.combine(x, acc.combine(y, z))

    def test_list_accumulator(self):
        """Test that list combination returns a new list."""
        acc = ListAccumulator()
        left = [1]
        combined = acc.combine(left, [2, 3])

        assert combined == [1, 2, 3]
        assert left == [1]

    def test_set_accumulator_unions(self):
        """Test that set union collapses duplicates."""
        acc = SetAccumulator()
        a, b = ValidationError("a"), ValidationError("b")
        assert acc.combine(frozenset({a}), frozenset({a, b})) == frozenset({a, b})

    def test_combine_all(self):
        """Test folding several containers."""
        assert combine_all(ListAccumulator(), [[1], [2], [3]], []) == [1, 2, 3]
