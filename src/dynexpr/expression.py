"""Expression builder that replaces attribute names and values with placeholders.

Every attached condition, key condition, update, filter, and projection is
rewritten as soon as it is attached. Names become `#N` placeholders and values
become `:N` placeholders, where `N` is the size of the corresponding table when
the literal is first seen. A literal seen again reuses its placeholder, so one
table entry is shared by every slot of the builder.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from dynexpr.condition import (
    And,
    AttributeExists,
    AttributeNotExists,
    AttributeType,
    BeginsWith,
    Between,
    Comparison,
    Condition,
    Contains,
    In,
    Not,
    Operand,
    Or,
    Parenthetical,
    Size,
)
from dynexpr.key import KeyCondition
from dynexpr.path import Element, IndexedField, Name, Path, PathLike, to_path
from dynexpr.update import (
    Add,
    AddAction,
    Assign,
    Delete,
    DeleteAction,
    IfNotExists,
    ListAppend,
    Math,
    Remove,
    Set,
    SetAction,
    Update,
    UpdateLike,
    to_update,
)
from dynexpr.value import AttributeValue, Ref, Value, ValueOrRef


logger = logging.getLogger("dynexpr")


@dataclass(frozen=True)
class Expression:
    """Rendered expressions and their placeholder tables.

    Absent slots are `None`. Empty tables are `None` as well, since the
    datastore rejects empty substitution maps.
    """

    condition_expression: str | None = None
    key_condition_expression: str | None = None
    update_expression: str | None = None
    filter_expression: str | None = None
    projection_expression: str | None = None
    expression_attribute_names: dict[str, str] | None = None
    expression_attribute_values: dict[str, Value] | None = None

    @classmethod
    def builder(cls) -> Builder:
        """Create an empty expression builder."""
        return Builder()

    def attribute_values(self) -> dict[str, AttributeValue] | None:
        """Return the value table in the low-level attribute value form."""
        if self.expression_attribute_values is None:
            return None
        return {
            placeholder: value.to_attribute_value()
            for placeholder, value in self.expression_attribute_values.items()
        }

    def to_dict(self) -> dict[str, object]:
        """Return the present fields as a JSON-serializable mapping.

        Keys follow the datastore request parameter names. Binary data is
        base64 encoded.
        """
        fields: dict[str, object | None] = {
            "ConditionExpression": self.condition_expression,
            "KeyConditionExpression": self.key_condition_expression,
            "UpdateExpression": self.update_expression,
            "FilterExpression": self.filter_expression,
            "ProjectionExpression": self.projection_expression,
            "ExpressionAttributeNames": self.expression_attribute_names,
            "ExpressionAttributeValues": _jsonable(self.attribute_values()),
        }
        return {key: value for key, value in fields.items() if value is not None}


def _jsonable(data: object) -> object:
    """Replace bytes with base64 text, recursively."""
    if isinstance(data, bytes):
        return base64.b64encode(data).decode("ascii")
    if isinstance(data, dict):
        return {key: _jsonable(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_jsonable(item) for item in data]
    return data


class Builder:
    """Chainable builder that interns names and values into placeholders.

    Attaching a slot twice replaces the earlier tree, but placeholders already
    assigned for it stay in the tables. The builder is not thread safe.
    """

    def __init__(self) -> None:
        self._names: dict[str, Name] = {}
        self._values: dict[Value, Ref] = {}
        self._condition: Condition | None = None
        self._key_condition: KeyCondition | None = None
        self._update: Update | None = None
        self._filter: Condition | None = None
        self._projection: tuple[Path, ...] | None = None

    def with_condition(self, condition: Condition) -> Builder:
        """Attach the condition expression."""
        self._condition = self._intern_condition(condition)
        logger.info("Condition expression: %s", self._condition)
        return self

    def with_key_condition(self, key_condition: KeyCondition | Condition) -> Builder:
        """Attach the key condition expression."""
        if isinstance(key_condition, KeyCondition):
            key_condition = key_condition.condition
        self._key_condition = KeyCondition(self._intern_condition(key_condition))
        logger.info("Key condition expression: %s", self._key_condition)
        return self

    def with_update(self, update: UpdateLike) -> Builder:
        """Attach the update expression. An update with no clauses is treated as absent."""
        interned = self._intern_update(to_update(update))
        self._update = None if interned.is_empty() else interned
        logger.info("Update expression: %s", self._update)
        return self

    def with_filter(self, condition: Condition) -> Builder:
        """Attach the filter expression."""
        self._filter = self._intern_condition(condition)
        logger.info("Filter expression: %s", self._filter)
        return self

    def with_projection(self, paths: Iterable[PathLike]) -> Builder:
        """Attach the projection. An empty projection is treated as absent."""
        projection = tuple(self._intern_path(to_path(path)) for path in paths)
        self._projection = projection or None
        logger.info("Projection expression: %s", _render_projection(self._projection))
        return self

    def build(self) -> Expression:
        """Render every attached slot together with the placeholder tables."""
        names = {placeholder.name: name for name, placeholder in self._names.items()}
        values = {str(placeholder): value for value, placeholder in self._values.items()}
        return Expression(
            condition_expression=_render(self._condition),
            key_condition_expression=_render(self._key_condition),
            update_expression=_render(self._update),
            filter_expression=_render(self._filter),
            projection_expression=_render_projection(self._projection),
            expression_attribute_names=names or None,
            expression_attribute_values=values or None,
        )

    # Interning

    def _intern_name(self, name: Name) -> Name:
        placeholder = self._names.get(name.name)
        if placeholder is None:
            placeholder = Name(f"#{len(self._names)}")
            self._names[name.name] = placeholder
            logger.debug("Name %s -> %s", name, placeholder)
        return placeholder

    def _intern_element(self, element: Element) -> Element:
        if isinstance(element, IndexedField):
            return IndexedField(self._intern_name(element.name), element.indexes)
        return self._intern_name(element)

    def _intern_path(self, path: Path) -> Path:
        return Path(tuple(self._intern_element(element) for element in path.elements))

    def _intern_optional_path(self, path: Path | None) -> Path | None:
        if path is None:
            return None
        return self._intern_path(path)

    def _intern_value(self, value: ValueOrRef) -> Ref:
        if isinstance(value, Ref):
            return value
        placeholder = self._values.get(value)
        if placeholder is None:
            placeholder = Ref(str(len(self._values)))
            self._values[value] = placeholder
            logger.debug("Value %s -> %s", value, placeholder)
        return placeholder

    def _intern_operand(self, operand: Operand) -> Operand:
        match operand:
            case Path():
                return self._intern_path(operand)
            case Size(path=path):
                return Size(self._intern_path(path))
            case Condition():
                return self._intern_condition(operand)
        return self._intern_value(operand)

    def _intern_condition(self, condition: Condition) -> Condition:
        match condition:
            case AttributeExists(path=path):
                return AttributeExists(self._intern_path(path))
            case AttributeNotExists(path=path):
                return AttributeNotExists(self._intern_path(path))
            case AttributeType(path=path, attribute_type=attribute_type):
                return AttributeType(self._intern_path(path), attribute_type)
            case BeginsWith(path=path, prefix=prefix):
                return BeginsWith(self._intern_path(path), self._intern_value(prefix))
            case Contains(path=path, operand=operand):
                return Contains(self._intern_path(path), self._intern_value(operand))
            case Between(op=op, lower=lower, upper=upper):
                return Between(
                    self._intern_operand(op),
                    self._intern_operand(lower),
                    self._intern_operand(upper),
                )
            case In(op=op, items=items):
                return In(
                    self._intern_operand(op),
                    tuple(self._intern_operand(item) for item in items),
                )
            case Comparison(left=left, cmp=cmp, right=right):
                return Comparison(self._intern_operand(left), cmp, self._intern_operand(right))
            case And(left=left, right=right):
                return And(self._intern_condition(left), self._intern_condition(right))
            case Or(left=left, right=right):
                return Or(self._intern_condition(left), self._intern_condition(right))
            case Not(condition=inner):
                return Not(self._intern_condition(inner))
            case Parenthetical(condition=inner):
                return Parenthetical(self._intern_condition(inner))
        raise TypeError(f"Unsupported condition node: {type(condition).__name__}")

    def _intern_set_action(self, action: SetAction) -> SetAction:
        match action:
            case Assign(dst=dst, value=value):
                return Assign(self._intern_path(dst), self._intern_value(value))
            case Math(dst=dst, src=src, op=op, num=num):
                return Math(
                    self._intern_path(dst),
                    self._intern_optional_path(src),
                    op,
                    self._intern_value(num),
                )
            case ListAppend(dst=dst, src=src, after=after, list=items):
                return ListAppend(
                    self._intern_path(dst),
                    self._intern_optional_path(src),
                    after,
                    self._intern_value(items),
                )
            case IfNotExists(dst=dst, src=src, value=value):
                return IfNotExists(
                    self._intern_path(dst),
                    self._intern_optional_path(src),
                    self._intern_value(value),
                )
        raise TypeError(f"Unsupported SET action: {type(action).__name__}")

    def _intern_update(self, update: Update) -> Update:
        set_clause = remove = add = delete = None
        if update.set is not None:
            set_clause = Set(tuple(self._intern_set_action(action) for action in update.set.actions))
        if update.remove is not None:
            remove = Remove(tuple(self._intern_path(path) for path in update.remove.paths))
        if update.add is not None:
            add = Add(
                tuple(
                    AddAction(self._intern_path(action.path), self._intern_value(action.value))
                    for action in update.add.actions
                )
            )
        if update.delete is not None:
            delete = Delete(
                tuple(
                    DeleteAction(self._intern_path(action.path), self._intern_value(action.subset))
                    for action in update.delete.actions
                )
            )
        return Update(set=set_clause, remove=remove, add=add, delete=delete)


def _render(node: object | None) -> str | None:
    if node is None:
        return None
    return str(node)


def _render_projection(projection: tuple[Path, ...] | None) -> str | None:
    if projection is None:
        return None
    return ", ".join(str(path) for path in projection)
