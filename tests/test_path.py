"""Tests for document path parsing and construction."""

from __future__ import annotations

import pytest

from dynexpr.errors import PathParseError
from dynexpr.path import MAX_INDEX, IndexedField, Name, Path, element, parse_path, to_path


@pytest.mark.parametrize(
    ("text", "elements"),
    [
        ("foo", (Name("foo"),)),
        ("foo[0]", (IndexedField(Name("foo"), (0,)),)),
        ("foo[3][7]", (IndexedField(Name("foo"), (3, 7)),)),
        ("foo.bar", (Name("foo"), Name("bar"))),
        (
            "foo[1].bar[2].baz",
            (
                IndexedField(Name("foo"), (1,)),
                IndexedField(Name("bar"), (2,)),
                Name("baz"),
            ),
        ),
        ("first name", (Name("first name"),)),
        (f"foo[{MAX_INDEX}]", (IndexedField(Name("foo"), (MAX_INDEX,)),)),
    ],
)
def test_parse_path_examples(text: str, elements: tuple[object, ...]) -> None:
    """Parser should split paths into name and indexed elements."""
    assert parse_path(text) == Path(elements)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "text",
    [
        "",
        "[0]",
        "foo[",
        "foo]",
        "foo][0]",
        "foo[]",
        "foo[9",
        "foo[0]bar",
        "foo[a]",
        "foo[-1]",
        "foo..bar",
        ".foo",
        "foo.",
        f"foo[{MAX_INDEX + 1}]",
    ],
)
def test_parse_path_rejects_malformed_text(text: str) -> None:
    """Malformed bracket sequences and empty names should be rejected."""
    with pytest.raises(PathParseError) as excinfo:
        parse_path(text)
    assert excinfo.value.text == text


@pytest.mark.parametrize(
    "text",
    ["foo", "foo[3][1]", "a.b.c", "foo[0].bar[12].baz", "my attr.x[4]"],
)
def test_path_display_round_trip(text: str) -> None:
    """Rendering a parsed path and parsing it again yields an equal path."""
    path = parse_path(text)
    assert str(path) == text
    assert parse_path(str(path)) == path


def test_leading_zero_index_is_normalized() -> None:
    """Indexes are stored as integers, so leading zeros do not survive."""
    assert str(parse_path("foo[007]")) == "foo[7]"


def test_element_without_indexes_collapses_to_name() -> None:
    """An element with no indexes should be a bare name."""
    assert element("foo", []) == Name("foo")
    assert element("foo", [2]) == IndexedField(Name("foo"), (2,))
    assert Path.indexed_field("foo", []) == Path((Name("foo"),))


@pytest.mark.parametrize("index", [-1, MAX_INDEX + 1, True, "1"])
def test_indexed_field_rejects_invalid_indexes(index: object) -> None:
    """Indexes must be unsigned 32-bit integers."""
    with pytest.raises(ValueError):
        IndexedField(Name("foo"), (index,))  # type: ignore[arg-type]


def test_path_name_is_not_parsed() -> None:
    """Path.name should keep dots and brackets as part of one literal name."""
    path = Path.name("a.b[0]")

    assert path.elements == (Name("a.b[0]"),)
    assert str(path) == "a.b[0]"
    assert path != parse_path("a.b[0]")


def test_join_and_add_concatenate_elements() -> None:
    """Joining paths should append elements in order."""
    joined = Path.join("foo", Name("bar"), parse_path("baz[1]"))

    assert str(joined) == "foo.bar.baz[1]"
    assert Path.name("foo") + "bar[2]" == parse_path("foo.bar[2]")


def test_is_empty() -> None:
    """Only a path without elements is empty."""
    assert Path().is_empty()
    assert Path.join().is_empty()
    assert not parse_path("foo").is_empty()


def test_to_path_coercions() -> None:
    """to_path should accept paths, elements, and path text."""
    path = parse_path("foo.bar")

    assert to_path(path) is path
    assert to_path("foo.bar") == path
    assert to_path(Name("foo")) == Path((Name("foo"),))
    assert to_path(IndexedField(Name("foo"), (1,))) == parse_path("foo[1]")
    with pytest.raises(TypeError):
        to_path(3)  # type: ignore[arg-type]


def test_paths_are_hashable_values() -> None:
    """Equal paths should hash equally so they can key dictionaries."""
    assert {parse_path("a.b[1]"): 1}[parse_path("a.b[1]")] == 1
