"""Document paths used to address item attributes in expressions."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from parsy import ParseError, Parser, eof, fail, regex, seq, string, success

from dynexpr.errors import PathParseError


if TYPE_CHECKING:
    from dynexpr.condition import Comparator, Condition, Size, TypeCode
    from dynexpr.key import Key
    from dynexpr.update import (
        Add,
        Assign,
        Delete,
        IfNotExistsBuilder,
        ListAppendBuilder,
        MathBuilder,
        Remove,
    )


MAX_INDEX = 2**32 - 1


@dataclass(frozen=True, slots=True)
class Name:
    """A single attribute name, e.g. `foo` in `foo.bar[3]`."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class IndexedField:
    """An attribute name with one or more list indexes, e.g. `foo[3][7]`."""

    name: Name
    indexes: tuple[int, ...]

    def __post_init__(self) -> None:
        for index in self.indexes:
            if isinstance(index, bool) or not isinstance(index, int):
                raise ValueError(f"Path index must be an integer, got {index!r}")
            if not 0 <= index <= MAX_INDEX:
                raise ValueError(f"Path index out of range: {index}")

    def __str__(self) -> str:
        return str(self.name) + "".join(f"[{index}]" for index in self.indexes)


type Element = Name | IndexedField


def element(name: str | Name, indexes: Iterable[int] = ()) -> Element:
    """Build a path element, collapsing an empty index list to a bare name."""
    if isinstance(name, str):
        name = Name(name)
    index_tuple = tuple(indexes)
    if not index_tuple:
        return name
    return IndexedField(name, index_tuple)


def _bounded_index(digits: str) -> Parser:
    """Accept an index token only when it fits an unsigned 32-bit integer."""
    index = int(digits)
    if index > MAX_INDEX:
        return fail(f"index <= {MAX_INDEX}")
    return success(index)


def _make_parser() -> Parser:
    """Create the document path parser."""
    identifier = regex(r"[^.\[\]]+").desc("attribute name")
    index = string("[") >> regex(r"[0-9]+").desc("index").bind(_bounded_index) << string("]")
    path_element = seq(identifier, index.many()).combine(element)
    return path_element.sep_by(string("."), min=1) << eof


PATH_PARSER = _make_parser()


@dataclass(frozen=True, slots=True)
class Path:
    """A document path: one or more elements joined by dots.

    Paths are immutable values. Every builder method returns a new condition,
    update action, or path and never modifies the receiver.
    """

    elements: tuple[Element, ...] = ()

    @classmethod
    def name(cls, name: str) -> Path:
        """Build a path from one literal attribute name without parsing it."""
        return cls((Name(name),))

    @classmethod
    def indexed_field(cls, name: str, indexes: Iterable[int]) -> Path:
        """Build a path from one attribute name and its list indexes."""
        return cls((element(name, indexes),))

    @classmethod
    def parse(cls, text: str) -> Path:
        """Parse document path text such as `foo.bar[3][1]`."""
        return parse_path(text)

    @classmethod
    def join(cls, *parts: PathLike) -> Path:
        """Concatenate paths, elements, and path text into one path."""
        elements: list[Element] = []
        for part in parts:
            elements.extend(to_path(part).elements)
        return cls(tuple(elements))

    def is_empty(self) -> bool:
        """Return whether the path has no elements."""
        return not self.elements

    def __add__(self, other: PathLike) -> Path:
        return Path.join(self, other)

    def __str__(self) -> str:
        return ".".join(str(item) for item in self.elements)

    # Conditions

    def comparison(self, cmp: Comparator, right: object) -> Condition:
        """Compare this path against another operand."""
        from dynexpr.condition import comparison

        return comparison(self, cmp, right)

    def equal(self, right: object) -> Condition:
        """Build `<path> = <right>`."""
        from dynexpr.condition import equal

        return equal(self, right)

    def not_equal(self, right: object) -> Condition:
        """Build `<path> <> <right>`."""
        from dynexpr.condition import not_equal

        return not_equal(self, right)

    def less_than(self, right: object) -> Condition:
        """Build `<path> < <right>`."""
        from dynexpr.condition import less_than

        return less_than(self, right)

    def less_than_or_equal(self, right: object) -> Condition:
        """Build `<path> <= <right>`."""
        from dynexpr.condition import less_than_or_equal

        return less_than_or_equal(self, right)

    def greater_than(self, right: object) -> Condition:
        """Build `<path> > <right>`."""
        from dynexpr.condition import greater_than

        return greater_than(self, right)

    def greater_than_or_equal(self, right: object) -> Condition:
        """Build `<path> >= <right>`."""
        from dynexpr.condition import greater_than_or_equal

        return greater_than_or_equal(self, right)

    def between(self, lower: object, upper: object) -> Condition:
        """Build `<path> BETWEEN <lower> AND <upper>`."""
        from dynexpr.condition import between

        return between(self, lower, upper)

    def in_(self, items: Iterable[object]) -> Condition:
        """Build `<path> IN (...)`, checking the item count."""
        from dynexpr.condition import in_

        return in_(self, items)

    def attribute_exists(self) -> Condition:
        """Build `attribute_exists(<path>)`."""
        from dynexpr.condition import AttributeExists

        return AttributeExists(self)

    def attribute_not_exists(self) -> Condition:
        """Build `attribute_not_exists(<path>)`."""
        from dynexpr.condition import AttributeNotExists

        return AttributeNotExists(self)

    def attribute_type(self, attribute_type: TypeCode | str) -> Condition:
        """Build `attribute_type(<path>, <type>)`."""
        from dynexpr.condition import attribute_type as build_attribute_type

        return build_attribute_type(self, attribute_type)

    def begins_with(self, prefix: object) -> Condition:
        """Build `begins_with(<path>, <prefix>)`."""
        from dynexpr.condition import begins_with

        return begins_with(self, prefix)

    def contains(self, operand: object) -> Condition:
        """Build `contains(<path>, <operand>)`."""
        from dynexpr.condition import contains

        return contains(self, operand)

    def size(self) -> Size:
        """Wrap this path in `size(<path>)` for use as an operand."""
        from dynexpr.condition import Size

        return Size(self)

    def key(self) -> Key:
        """Use this path as a primary key attribute in a key condition."""
        from dynexpr.key import Key

        return Key(self)

    # Updates

    def set(self, value: object) -> Assign:
        """Build the SET action `<path> = <value>`."""
        from dynexpr.update import Assign

        return Assign.new(self, value)

    def math(self) -> MathBuilder:
        """Start a SET action of the form `<path> = <src> +/- <num>`."""
        from dynexpr.update import MathBuilder

        return MathBuilder(self)

    def list_append(self) -> ListAppendBuilder:
        """Start a SET action using `list_append`."""
        from dynexpr.update import ListAppendBuilder

        return ListAppendBuilder(self)

    def if_not_exists(self) -> IfNotExistsBuilder:
        """Start a SET action using `if_not_exists`."""
        from dynexpr.update import IfNotExistsBuilder

        return IfNotExistsBuilder(self)

    def add(self, value: object) -> Add:
        """Build the ADD clause `ADD <path> <value>`."""
        from dynexpr.update import Add

        return Add.new(self, value)

    def delete(self, subset: object) -> Delete:
        """Build the DELETE clause `DELETE <path> <subset>`."""
        from dynexpr.update import Delete

        return Delete.new(self, subset)

    def remove(self) -> Remove:
        """Build the REMOVE clause `REMOVE <path>`."""
        from dynexpr.update import Remove

        return Remove((self,))


type PathLike = Path | Name | IndexedField | str


def parse_path(text: str) -> Path:
    """Parse document path text into a path."""
    try:
        elements = PATH_PARSER.parse(text)
    except ParseError as exc:
        raise PathParseError(text, f"invalid document path ({exc})") from exc
    return Path(tuple(elements))


def to_path(value: PathLike) -> Path:
    """Coerce a path, element, or path text into a path."""
    if isinstance(value, Path):
        return value
    if isinstance(value, Name | IndexedField):
        return Path((value,))
    if isinstance(value, str):
        return parse_path(value)
    raise TypeError(f"Expected a document path, got {type(value).__name__}")
