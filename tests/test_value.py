"""Tests for literal values and their rendering."""

from __future__ import annotations

from decimal import Decimal

import pytest

from dynexpr.errors import UnknownAttributeValueError
from dynexpr.value import (
    Binary,
    BinarySet,
    Bool,
    List,
    Map,
    Null,
    Num,
    NumSet,
    Ref,
    Str,
    StringSet,
    binary_set,
    binary_value,
    bool_value,
    from_attribute_value,
    list_value,
    map_value,
    null_value,
    num_set,
    num_value,
    num_value_lower_exp,
    num_value_upper_exp,
    ref_value,
    string_set,
    string_value,
    to_value,
    to_value_or_ref,
)


@pytest.mark.parametrize(
    ("number", "fixed", "lower", "upper"),
    [
        (1000, "1000", "1e3", "1E3"),
        (1234, "1234", "1.234e3", "1.234E3"),
        (-7, "-7", "-7e0", "-7E0"),
        (0, "0", "0e0", "0E0"),
        (2.5, "2.5", "2.5e0", "2.5E0"),
        (0.001, "0.001", "1e-3", "1E-3"),
        (1.0, "1", "1e0", "1E0"),
        (1e-7, "0.0000001", "1e-7", "1E-7"),
        (Decimal("1.50"), "1.50", "1.5e0", "1.5E0"),
    ],
)
def test_number_formatting(number: int | float | Decimal, fixed: str, lower: str, upper: str) -> None:
    """Numbers should render in the notation chosen at construction."""
    assert str(num_value(number)) == fixed
    assert str(num_value_lower_exp(number)) == lower
    assert str(num_value_upper_exp(number)) == upper


def test_large_integers_keep_every_digit() -> None:
    """Integer text should not lose precision."""
    big = 12345678901234567890123456789012345
    assert Num.from_number(big).n == str(big)
    assert Num.lower_exp(10**40).n == "1e40"


@pytest.mark.parametrize("number", [True, "12", None])
def test_number_rejects_non_numbers(number: object) -> None:
    """Booleans and non-numeric inputs are not numbers."""
    with pytest.raises(TypeError):
        Num.from_number(number)  # type: ignore[arg-type]


@pytest.mark.parametrize("number", [float("nan"), float("inf"), Decimal("NaN"), Decimal("-Infinity")])
def test_number_rejects_non_finite(number: float | Decimal) -> None:
    """Only finite numbers can be rendered."""
    with pytest.raises(ValueError):
        Num.from_number(number)


def test_number_equality_uses_canonical_text() -> None:
    """Numbers compare by their stored text, not their numeric value."""
    assert num_value(1000) == Num("1000")
    assert num_value(1000) != num_value_lower_exp(1000)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (string_value("a"), '"a"'),
        (string_value('say "hi"'), '"say \\"hi\\""'),
        (string_value("żółw"), '"żółw"'),
        (bool_value(True), "true"),
        (bool_value(False), "false"),
        (binary_value(b"a"), '"YQ=="'),
        (null_value(), "NULL"),
        (string_set(["c", "a", "b", "a"]), '["a", "b", "c"]'),
        (num_set([42, -7, num_value_lower_exp(1000)]), '["-7", "1e3", "42"]'),
        (binary_set([b"c", b"a", b"b"]), '["YQ==", "Yg==", "Yw=="]'),
        (list_value([None, 8, "a string"]), '[NULL, 8, "a string"]'),
        (map_value({"s": "a string", "n": 8, "null": None}), '{n: 8, null: NULL, s: "a string"}'),
        (ref_value("prefix"), ":prefix"),
    ],
)
def test_value_display(value: object, expected: str) -> None:
    """Values should render as expression literals."""
    assert str(value) == expected


def test_sets_deduplicate_and_ignore_order() -> None:
    """Sets built from the same members in any order are equal."""
    assert string_set(["b", "a", "b"]) == string_set(["a", "b"])
    assert num_set([2, 1, 2]) == num_set([1, 2])
    assert binary_set([b"y", b"x"]) == BinarySet((b"x", b"y"))
    with pytest.raises(TypeError):
        string_set(["a", 1])  # type: ignore[list-item]


def test_set_factories_reject_single_items() -> None:
    """A bare str or bytes is not split into a set of characters or bytes."""
    with pytest.raises(TypeError, match="single str"):
        string_set("abc")
    with pytest.raises(TypeError, match="single bytes"):
        binary_set(b"abc")


def test_map_equality_ignores_insertion_order() -> None:
    """Maps with the same entries are equal and hash equally."""
    left = map_value([("a", 1), ("b", 2)])
    right = map_value({"b": 2, "a": 1})

    assert left == right
    assert hash(left) == hash(right)
    with pytest.raises(TypeError):
        Map(((1, Null()),))  # type: ignore[arg-type]


def test_nested_containers_are_converted() -> None:
    """Lists and maps should convert nested Python literals into values."""
    value = list_value([{"k": [1, "x"]}, b"\x00"])

    assert value == List((Map((("k", List((Num("1"), Str("x")))),)), Binary(b"\x00")))
    assert str(value) == '[{k: [1, "x"]}, "AA=="]'


@pytest.mark.parametrize(
    ("literal", "expected"),
    [
        ("x", Str("x")),
        (True, Bool(True)),
        (3, Num("3")),
        (0.5, Num("0.5")),
        (Decimal("10.25"), Num("10.25")),
        (b"ab", Binary(b"ab")),
        (bytearray(b"ab"), Binary(b"ab")),
        (None, Null()),
        ((1, 2), List((Num("1"), Num("2")))),
        ({"a": False}, Map((("a", Bool(False)),))),
        (StringSet(("a",)), StringSet(("a",))),
    ],
)
def test_to_value(literal: object, expected: object) -> None:
    """to_value should accept the supported Python literal types."""
    assert to_value(literal) == expected


def test_to_value_rejects_unsupported_types() -> None:
    """Unsupported objects and bare references are not values."""
    with pytest.raises(TypeError):
        to_value(object())
    with pytest.raises(TypeError):
        to_value(Ref("x"))
    assert to_value_or_ref(Ref("x")) == Ref("x")


def test_attribute_value_projection() -> None:
    """Values should convert to the low-level attribute value form."""
    value = map_value(
        {
            "name": "Jack",
            "age": 25,
            "tags": string_set(["b", "a"]),
            "scores": num_set([2, 1]),
            "blobs": binary_set([b"x"]),
            "raw": b"\x01",
            "items": [True, None],
        }
    )

    assert value.to_attribute_value() == {
        "M": {
            "age": {"N": "25"},
            "blobs": {"BS": [b"x"]},
            "items": {"L": [{"BOOL": True}, {"NULL": True}]},
            "name": {"S": "Jack"},
            "raw": {"B": b"\x01"},
            "scores": {"NS": ["1", "2"]},
            "tags": {"SS": ["a", "b"]},
        }
    }


def test_attribute_value_round_trip() -> None:
    """from_attribute_value should rebuild the original value."""
    value = list_value([map_value({"n": num_value_upper_exp(1000)}), string_set(["x"]), None])

    assert from_attribute_value(value.to_attribute_value()) == value


@pytest.mark.parametrize(
    "attribute_value",
    [
        {},
        {"X": "1"},
        {"S": 1},
        {"N": 1},
        {"NULL": False},
        {"S": "a", "N": "1"},
        {"L": [{"Q": 1}]},
        {"SS": ["a", 1]},
        "S",
    ],
)
def test_from_attribute_value_rejects_unknown_shapes(attribute_value: object) -> None:
    """Unknown attribute value shapes should raise a dedicated error."""
    with pytest.raises(UnknownAttributeValueError):
        from_attribute_value(attribute_value)  # type: ignore[arg-type]
