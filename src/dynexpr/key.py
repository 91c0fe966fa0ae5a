"""Key conditions for primary key range queries."""

from __future__ import annotations

from dataclasses import dataclass

from dynexpr.condition import (
    And,
    AttributeExists,
    BeginsWith,
    Between,
    Comparator,
    Comparison,
    Condition,
    Parenthetical,
    begins_with,
    between,
    comparison,
)
from dynexpr.errors import KeyConditionError
from dynexpr.path import Path


@dataclass(frozen=True, slots=True)
class KeyCondition:
    """A condition used as a key condition expression.

    Only comparisons, `BETWEEN`, `begins_with`, and `attribute_exists`, joined
    with `AND`, are accepted by the datastore. This is not enforced on
    construction; call `validate_key_condition` to check a tree explicitly.
    """

    condition: Condition

    def and_(self, other: KeyCondition) -> KeyCondition:
        """Combine with another key condition using `AND`."""
        return KeyCondition(And(self.condition, other.condition))

    def __and__(self, other: KeyCondition) -> KeyCondition:
        return self.and_(other)

    def __str__(self) -> str:
        return str(self.condition)


@dataclass(frozen=True, slots=True)
class Key:
    """A primary key attribute, used to build key conditions."""

    path: Path

    def _compare(self, cmp: Comparator, right: object) -> KeyCondition:
        return KeyCondition(comparison(self.path, cmp, right))

    def equal(self, right: object) -> KeyCondition:
        """Build `<key> = <right>`."""
        return self._compare(Comparator.EQ, right)

    def less_than(self, right: object) -> KeyCondition:
        """Build `<key> < <right>`."""
        return self._compare(Comparator.LT, right)

    def less_than_or_equal(self, right: object) -> KeyCondition:
        """Build `<key> <= <right>`."""
        return self._compare(Comparator.LE, right)

    def greater_than(self, right: object) -> KeyCondition:
        """Build `<key> > <right>`."""
        return self._compare(Comparator.GT, right)

    def greater_than_or_equal(self, right: object) -> KeyCondition:
        """Build `<key> >= <right>`."""
        return self._compare(Comparator.GE, right)

    def between(self, lower: object, upper: object) -> KeyCondition:
        """Build `<key> BETWEEN <lower> AND <upper>`."""
        return KeyCondition(between(self.path, lower, upper))

    def begins_with(self, prefix: object) -> KeyCondition:
        """Build `begins_with(<key>, <prefix>)`."""
        return KeyCondition(begins_with(self.path, prefix))


def _check(condition: Condition) -> None:
    match condition:
        case And(left=left, right=right):
            _check(left)
            _check(right)
        case Parenthetical(condition=inner):
            _check(inner)
        case Comparison(cmp=cmp) if cmp is not Comparator.NE:
            pass
        case Between() | BeginsWith() | AttributeExists():
            pass
        case _:
            raise KeyConditionError(f"not allowed in a key condition: {condition}")


def validate_key_condition(key_condition: KeyCondition | Condition) -> None:
    """Check that a key condition only uses operators valid on keys.

    Raises:
        KeyConditionError: If the tree contains `OR`, `NOT`, `IN`, `<>`, or
            a function other than `begins_with` and `attribute_exists`.
    """
    if isinstance(key_condition, KeyCondition):
        key_condition = key_condition.condition
    _check(key_condition)
