"""Condition AST nodes, combinators, and the functional construction API."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from dynexpr.errors import InListArityError
from dynexpr.path import IndexedField, Name, Path, PathLike, to_path
from dynexpr.value import Ref, Value, ValueOrRef, to_value, to_value_or_ref


MAX_IN_ITEMS = 100


class Comparator(StrEnum):
    """Comparison operators."""

    EQ = "="
    NE = "<>"
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="


class TypeCode(StrEnum):
    """Attribute type codes accepted by `attribute_type`."""

    S = "S"
    SS = "SS"
    N = "N"
    NS = "NS"
    B = "B"
    BS = "BS"
    BOOL = "BOOL"
    NULL = "NULL"
    L = "L"
    M = "M"


@dataclass(frozen=True, slots=True)
class Size:
    """The `size(<path>)` function used as an operand."""

    path: Path

    def __str__(self) -> str:
        return f"size({self.path})"


@dataclass(frozen=True, slots=True)
class Condition:
    """Base condition type.

    Combinators wrap the receiver in a new node and never simplify, so
    `a.not_().not_()` renders `NOT NOT a`.
    """

    def and_(self, other: Condition) -> Condition:
        """Combine with `AND`."""
        return And(self, other)

    def or_(self, other: Condition) -> Condition:
        """Combine with `OR`."""
        return Or(self, other)

    def not_(self) -> Condition:
        """Negate with `NOT`."""
        return Not(self)

    def parenthesize(self) -> Condition:
        """Wrap in parentheses."""
        return Parenthetical(self)

    def __and__(self, other: Condition) -> Condition:
        return self.and_(other)

    def __or__(self, other: Condition) -> Condition:
        return self.or_(other)

    def __invert__(self) -> Condition:
        return self.not_()


type Operand = Path | Size | Value | Ref | Condition


@dataclass(frozen=True, slots=True)
class AttributeExists(Condition):
    """`attribute_exists(<path>)`."""

    path: Path

    def __str__(self) -> str:
        return f"attribute_exists({self.path})"


@dataclass(frozen=True, slots=True)
class AttributeNotExists(Condition):
    """`attribute_not_exists(<path>)`."""

    path: Path

    def __str__(self) -> str:
        return f"attribute_not_exists({self.path})"


@dataclass(frozen=True, slots=True)
class AttributeType(Condition):
    """`attribute_type(<path>, <type>)`."""

    path: Path
    attribute_type: TypeCode

    def __str__(self) -> str:
        return f"attribute_type({self.path}, {self.attribute_type})"


@dataclass(frozen=True, slots=True)
class BeginsWith(Condition):
    """`begins_with(<path>, <prefix>)`."""

    path: Path
    prefix: ValueOrRef

    def __str__(self) -> str:
        return f"begins_with({self.path}, {self.prefix})"


@dataclass(frozen=True, slots=True)
class Contains(Condition):
    """`contains(<path>, <operand>)`."""

    path: Path
    operand: ValueOrRef

    def __str__(self) -> str:
        return f"contains({self.path}, {self.operand})"


@dataclass(frozen=True, slots=True)
class Between(Condition):
    """`<op> BETWEEN <lower> AND <upper>`."""

    op: Operand
    lower: Operand
    upper: Operand

    def __str__(self) -> str:
        return f"{self.op} BETWEEN {self.lower} AND {self.upper}"


@dataclass(frozen=True, slots=True)
class In(Condition):
    """`<op> IN (<item>,<item>,...)`.

    The item count is not checked here; use `in_` for a checked constructor.
    """

    op: Operand
    items: tuple[Operand, ...]

    def __str__(self) -> str:
        return f"{self.op} IN ({','.join(str(item) for item in self.items)})"


@dataclass(frozen=True, slots=True)
class Comparison(Condition):
    """`<left> <cmp> <right>`."""

    left: Operand
    cmp: Comparator
    right: Operand

    def __str__(self) -> str:
        return f"{self.left} {self.cmp} {self.right}"


@dataclass(frozen=True, slots=True)
class And(Condition):
    """`<left> AND <right>`."""

    left: Condition
    right: Condition

    def __str__(self) -> str:
        return f"{self.left} AND {self.right}"


@dataclass(frozen=True, slots=True)
class Or(Condition):
    """`<left> OR <right>`."""

    left: Condition
    right: Condition

    def __str__(self) -> str:
        return f"{self.left} OR {self.right}"


@dataclass(frozen=True, slots=True)
class Not(Condition):
    """`NOT <condition>`."""

    condition: Condition

    def __str__(self) -> str:
        return f"NOT {self.condition}"


@dataclass(frozen=True, slots=True)
class Parenthetical(Condition):
    """`(<condition>)`."""

    condition: Condition

    def __str__(self) -> str:
        return f"({self.condition})"


def to_operand(value: object) -> Operand:
    """Coerce a path, size, condition, reference, or literal into an operand.

    Bare strings are string values. Use a `Path` to refer to an attribute.
    """
    if isinstance(value, Path | Size | Value | Ref | Condition):
        return value
    if isinstance(value, Name | IndexedField):
        return Path((value,))
    return to_value(value)


def comparison(left: object, cmp: Comparator | str, right: object) -> Condition:
    """Build `<left> <cmp> <right>`."""
    return Comparison(to_operand(left), Comparator(cmp), to_operand(right))


def equal(left: object, right: object) -> Condition:
    """Build `<left> = <right>`."""
    return comparison(left, Comparator.EQ, right)


def not_equal(left: object, right: object) -> Condition:
    """Build `<left> <> <right>`."""
    return comparison(left, Comparator.NE, right)


def less_than(left: object, right: object) -> Condition:
    """Build `<left> < <right>`."""
    return comparison(left, Comparator.LT, right)


def less_than_or_equal(left: object, right: object) -> Condition:
    """Build `<left> <= <right>`."""
    return comparison(left, Comparator.LE, right)


def greater_than(left: object, right: object) -> Condition:
    """Build `<left> > <right>`."""
    return comparison(left, Comparator.GT, right)


def greater_than_or_equal(left: object, right: object) -> Condition:
    """Build `<left> >= <right>`."""
    return comparison(left, Comparator.GE, right)


def between(op: object, lower: object, upper: object) -> Condition:
    """Build `<op> BETWEEN <lower> AND <upper>`."""
    return Between(to_operand(op), to_operand(lower), to_operand(upper))


def in_(op: object, items: Iterable[object]) -> Condition:
    """Build `<op> IN (...)` with between 1 and `MAX_IN_ITEMS` items.

    Raises:
        InListArityError: If the item count is out of range. The error
            carries the rejected items.
    """
    item_tuple = tuple(items)
    if not 1 <= len(item_tuple) <= MAX_IN_ITEMS:
        raise InListArityError(item_tuple, MAX_IN_ITEMS)
    return In(to_operand(op), tuple(to_operand(item) for item in item_tuple))


def attribute_exists(path: PathLike) -> Condition:
    """Build `attribute_exists(<path>)`."""
    return AttributeExists(to_path(path))


def attribute_not_exists(path: PathLike) -> Condition:
    """Build `attribute_not_exists(<path>)`."""
    return AttributeNotExists(to_path(path))


def attribute_type(path: PathLike, type_code: TypeCode | str) -> Condition:
    """Build `attribute_type(<path>, <type>)`."""
    return AttributeType(to_path(path), TypeCode(type_code))


def begins_with(path: PathLike, prefix: object) -> Condition:
    """Build `begins_with(<path>, <prefix>)`."""
    return BeginsWith(to_path(path), to_value_or_ref(prefix))


def contains(path: PathLike, operand: object) -> Condition:
    """Build `contains(<path>, <operand>)`."""
    return Contains(to_path(path), to_value_or_ref(operand))


def size(path: PathLike) -> Size:
    """Build the `size(<path>)` operand."""
    return Size(to_path(path))


def _unwrap_parentheses(condition: Condition) -> Condition:
    while isinstance(condition, Parenthetical):
        condition = condition.condition
    return condition


def _normalize_operand(operand: Operand) -> Operand:
    if isinstance(operand, Condition):
        return normalize(operand)
    return operand


def normalize(condition: Condition) -> Condition:
    """Collapse double negation and nested parentheses.

    `NOT NOT x` and `NOT (NOT x)` become `x`; `((x))` becomes `(x)`. Rendering
    and expression building never call this.
    """
    match condition:
        case Not(condition=inner):
            normalized = normalize(inner)
            unwrapped = _unwrap_parentheses(normalized)
            if isinstance(unwrapped, Not):
                return unwrapped.condition
            return Not(normalized)
        case Parenthetical(condition=inner):
            return Parenthetical(_unwrap_parentheses(normalize(inner)))
        case And(left=left, right=right):
            return And(normalize(left), normalize(right))
        case Or(left=left, right=right):
            return Or(normalize(left), normalize(right))
        case Comparison(left=left, cmp=cmp, right=right):
            return Comparison(_normalize_operand(left), cmp, _normalize_operand(right))
        case Between(op=op, lower=lower, upper=upper):
            return Between(
                _normalize_operand(op),
                _normalize_operand(lower),
                _normalize_operand(upper),
            )
        case In(op=op, items=items):
            return In(_normalize_operand(op), tuple(_normalize_operand(item) for item in items))
    return condition
