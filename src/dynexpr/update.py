"""Update expression AST: SET, REMOVE, ADD, and DELETE clauses."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum

from dynexpr.path import Path, PathLike, to_path
from dynexpr.value import ValueOrRef, to_value_or_ref


@dataclass(frozen=True, slots=True)
class UpdatePart:
    """Base type for actions and clauses that combine into an `Update`."""

    def and_(self, other: UpdateLike) -> Update:
        """Combine with another action, clause, or update."""
        return to_update(self).and_(other)

    def __and__(self, other: UpdateLike) -> Update:
        return self.and_(other)


@dataclass(frozen=True, slots=True)
class SetAction(UpdatePart):
    """Base type for the actions of a SET clause."""


@dataclass(frozen=True, slots=True)
class Assign(SetAction):
    """`<dst> = <value>`."""

    dst: Path
    value: ValueOrRef

    @classmethod
    def new(cls, dst: PathLike, value: object) -> Assign:
        return cls(to_path(dst), to_value_or_ref(value))

    def __str__(self) -> str:
        return f"{self.dst} = {self.value}"


class MathOp(StrEnum):
    """Arithmetic operators for SET actions."""

    ADD = "+"
    SUB = "-"


@dataclass(frozen=True, slots=True)
class Math(SetAction):
    """`<dst> = <src> <op> <num>`, where `src` defaults to `dst`."""

    dst: Path
    src: Path | None
    op: MathOp
    num: ValueOrRef

    def __str__(self) -> str:
        src = self.src if self.src is not None else self.dst
        return f"{self.dst} = {src} {self.op} {self.num}"


@dataclass(frozen=True, slots=True)
class MathBuilder:
    """Builds a `Math` action for a destination path."""

    dst: Path
    source: Path | None = None

    def src(self, src: PathLike) -> MathBuilder:
        """Read the current value from `src` instead of the destination."""
        return MathBuilder(self.dst, to_path(src))

    def add(self, num: object) -> Math:
        """Build `<dst> = <src> + <num>`."""
        return Math(self.dst, self.source, MathOp.ADD, to_value_or_ref(num))

    def sub(self, num: object) -> Math:
        """Build `<dst> = <src> - <num>`."""
        return Math(self.dst, self.source, MathOp.SUB, to_value_or_ref(num))


@dataclass(frozen=True, slots=True)
class ListAppend(SetAction):
    """`<dst> = list_append(<src>, <list>)`.

    When `after` is false the new items go first:
    `<dst> = list_append(<list>, <src>)`.
    """

    dst: Path
    src: Path | None
    after: bool
    list: ValueOrRef

    def __str__(self) -> str:
        src = self.src if self.src is not None else self.dst
        if self.after:
            return f"{self.dst} = list_append({src}, {self.list})"
        return f"{self.dst} = list_append({self.list}, {src})"


@dataclass(frozen=True, slots=True)
class ListAppendBuilder:
    """Builds a `ListAppend` action. New items go after existing ones by default."""

    dst: Path
    source: Path | None = None
    append_after: bool = True

    def src(self, src: PathLike) -> ListAppendBuilder:
        """Read the existing list from `src` instead of the destination."""
        return ListAppendBuilder(self.dst, to_path(src), self.append_after)

    def before(self) -> ListAppendBuilder:
        """Place the new items before the existing ones."""
        return ListAppendBuilder(self.dst, self.source, False)

    def after(self) -> ListAppendBuilder:
        """Place the new items after the existing ones."""
        return ListAppendBuilder(self.dst, self.source, True)

    def list(self, items: object) -> ListAppend:
        """Build the action with the items to append."""
        return ListAppend(self.dst, self.source, self.append_after, to_value_or_ref(items))


@dataclass(frozen=True, slots=True)
class IfNotExists(SetAction):
    """`<dst> = if_not_exists(<src>, <value>)`, where `src` defaults to `dst`."""

    dst: Path
    src: Path | None
    value: ValueOrRef

    def __str__(self) -> str:
        src = self.src if self.src is not None else self.dst
        return f"{self.dst} = if_not_exists({src}, {self.value})"


@dataclass(frozen=True, slots=True)
class IfNotExistsBuilder:
    """Builds an `IfNotExists` action."""

    dst: Path
    source: Path | None = None

    def src(self, src: PathLike) -> IfNotExistsBuilder:
        """Check `src` for existence instead of the destination."""
        return IfNotExistsBuilder(self.dst, to_path(src))

    def value(self, value: object) -> IfNotExists:
        """Build the action with the value to use when the attribute is absent."""
        return IfNotExists(self.dst, self.source, to_value_or_ref(value))


@dataclass(frozen=True, slots=True)
class Set(UpdatePart):
    """`SET <action>, <action>, ...`."""

    actions: tuple[SetAction, ...]

    def __str__(self) -> str:
        return "SET " + ", ".join(str(action) for action in self.actions)


@dataclass(frozen=True, slots=True)
class Remove(UpdatePart):
    """`REMOVE <path>, <path>, ...`."""

    paths: tuple[Path, ...]

    @classmethod
    def new(cls, paths: Iterable[PathLike]) -> Remove:
        return cls(tuple(to_path(path) for path in paths))

    def __str__(self) -> str:
        return "REMOVE " + ", ".join(str(path) for path in self.paths)


@dataclass(frozen=True, slots=True)
class AddAction(UpdatePart):
    """`<path> <value>` inside an ADD clause."""

    path: Path
    value: ValueOrRef

    def __str__(self) -> str:
        return f"{self.path} {self.value}"


@dataclass(frozen=True, slots=True)
class Add(UpdatePart):
    """`ADD <path> <value>, ...` for numbers and sets."""

    actions: tuple[AddAction, ...]

    @classmethod
    def new(cls, path: PathLike, value: object) -> Add:
        return cls((AddAction(to_path(path), to_value_or_ref(value)),))

    def __str__(self) -> str:
        return "ADD " + ", ".join(str(action) for action in self.actions)


@dataclass(frozen=True, slots=True)
class DeleteAction(UpdatePart):
    """`<path> <subset>` inside a DELETE clause."""

    path: Path
    subset: ValueOrRef

    def __str__(self) -> str:
        return f"{self.path} {self.subset}"


@dataclass(frozen=True, slots=True)
class Delete(UpdatePart):
    """`DELETE <path> <subset>, ...` for removing items from sets."""

    actions: tuple[DeleteAction, ...]

    @classmethod
    def new(cls, path: PathLike, subset: object) -> Delete:
        return cls((DeleteAction(to_path(path), to_value_or_ref(subset)),))

    def __str__(self) -> str:
        return "DELETE " + ", ".join(str(action) for action in self.actions)


@dataclass(frozen=True, slots=True)
class Update:
    """A complete update expression.

    Each clause is optional. Combining two updates appends actions and paths
    clause by clause instead of nesting them.
    """

    set: Set | None = None
    remove: Remove | None = None
    add: Add | None = None
    delete: Delete | None = None

    def and_(self, other: UpdateLike) -> Update:
        """Append the clauses of another update to this one."""
        other = to_update(other)
        return Update(
            set=_merge(self.set, other.set, lambda a, b: Set(a.actions + b.actions)),
            remove=_merge(self.remove, other.remove, lambda a, b: Remove(a.paths + b.paths)),
            add=_merge(self.add, other.add, lambda a, b: Add(a.actions + b.actions)),
            delete=_merge(self.delete, other.delete, lambda a, b: Delete(a.actions + b.actions)),
        )

    def __and__(self, other: UpdateLike) -> Update:
        return self.and_(other)

    def is_empty(self) -> bool:
        """Return whether no clause is present."""
        return self.set is None and self.remove is None and self.add is None and self.delete is None

    def clauses(self) -> tuple[Set | Remove | Add | Delete, ...]:
        """Return the present clauses in rendering order."""
        return tuple(
            clause for clause in (self.set, self.remove, self.add, self.delete) if clause is not None
        )

    def __str__(self) -> str:
        return " ".join(str(clause) for clause in self.clauses())


def _merge[T](left: T | None, right: T | None, combine: Callable[[T, T], T]) -> T | None:
    if left is None:
        return right
    if right is None:
        return left
    return combine(left, right)


type UpdateLike = Update | UpdatePart


def to_update(value: UpdateLike) -> Update:
    """Lift an action or clause into an `Update`."""
    match value:
        case Update():
            return value
        case SetAction():
            return Update(set=Set((value,)))
        case Set():
            return Update(set=value)
        case Remove():
            return Update(remove=value)
        case AddAction():
            return Update(add=Add((value,)))
        case Add():
            return Update(add=value)
        case DeleteAction():
            return Update(delete=Delete((value,)))
        case Delete():
            return Update(delete=value)
    raise TypeError(f"Expected an update action or clause, got {type(value).__name__}")
