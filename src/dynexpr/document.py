"""Decode JSON expression documents into conditions, updates, and expressions.

A document is a JSON object with any of the keys `condition`, `key_condition`,
`filter`, `update`, and `projection`. Slots are attached to the builder in the
order they appear in the document, which decides placeholder numbering.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Callable
from typing import Any

from dynexpr.condition import (
    Comparator,
    Condition,
    Operand,
    Size,
    TypeCode,
    attribute_exists,
    attribute_not_exists,
    attribute_type,
    begins_with,
    between,
    comparison,
    contains,
    in_,
)
from dynexpr.errors import DocumentError, ExpressionError
from dynexpr.expression import Builder, Expression
from dynexpr.path import Path, parse_path
from dynexpr.update import (
    Add,
    Delete,
    MathOp,
    Remove,
    SetAction,
    Update,
    UpdatePart,
)
from dynexpr.value import Ref, Value, ValueOrRef, from_attribute_value, to_value


DOCUMENT_KEYS = ("condition", "key_condition", "filter", "update", "projection")
UPDATE_KEYS = ("set", "remove", "add", "delete")
SET_ACTION_KINDS = ("value", "math", "list_append", "if_not_exists")
SET_ACTION_KEYS: dict[str, frozenset[str]] = {
    "value": frozenset({"path", "value"}),
    "math": frozenset({"path", "math", "num", "src"}),
    "list_append": frozenset({"path", "list_append", "before", "src"}),
    "if_not_exists": frozenset({"path", "if_not_exists", "src"}),
}


def _fail(where: str, message: str) -> DocumentError:
    return DocumentError(f"{where}: {message}")


def _single_key(node: object, where: str) -> tuple[str, Any]:
    if not isinstance(node, dict) or len(node) != 1:
        raise _fail(where, "expected an object with exactly one key")
    ((key, body),) = node.items()
    return key, body


def _expect_list(node: object, where: str, length: int | None = None) -> list[Any]:
    if not isinstance(node, list):
        raise _fail(where, "expected a list")
    if length is not None and len(node) != length:
        raise _fail(where, f"expected {length} items, got {len(node)}")
    return node


def _expect_str(node: object, where: str) -> str:
    if not isinstance(node, str):
        raise _fail(where, "expected a string")
    return node


def _expect_object(node: object, where: str) -> dict[str, Any]:
    if not isinstance(node, dict):
        raise _fail(where, "expected an object")
    return node


def _path(node: object, where: str) -> Path:
    text = _expect_str(node, where)
    try:
        return parse_path(text)
    except ExpressionError as exc:
        raise _fail(where, str(exc)) from exc


def _wire_from_json(node: object) -> object:
    """Decode base64 binary payloads of a JSON attribute value mapping."""
    if not isinstance(node, dict) or len(node) != 1:
        return node
    ((kind, raw),) = node.items()
    match kind:
        case "B" if isinstance(raw, str):
            return {kind: base64.b64decode(raw, validate=True)}
        case "BS" if isinstance(raw, list):
            return {kind: [base64.b64decode(item, validate=True) for item in raw]}
        case "L" if isinstance(raw, list):
            return {kind: [_wire_from_json(item) for item in raw]}
        case "M" if isinstance(raw, dict):
            return {kind: {key: _wire_from_json(item) for key, item in raw.items()}}
    return node


def _attribute_value(node: object, where: str) -> ValueOrRef:
    try:
        return from_attribute_value(_wire_from_json(node))  # type: ignore[arg-type]
    except (ExpressionError, binascii.Error, TypeError) as exc:
        raise _fail(where, str(exc)) from exc


def _plain_value(node: object, where: str) -> Value:
    try:
        return to_value(node)
    except (TypeError, ValueError) as exc:
        raise _fail(where, str(exc)) from exc


def _value_or_ref(node: object, where: str) -> ValueOrRef:
    """Decode a value that may be given as a reference or a wire mapping."""
    if isinstance(node, dict) and len(node) == 1:
        ((key, body),) = node.items()
        if key == "ref":
            return Ref(_expect_str(body, f"{where}.ref"))
        if key == "attribute_value":
            return _attribute_value(body, f"{where}.attribute_value")
    return _plain_value(node, where)


def decode_operand(node: object, where: str = "operand") -> Operand:
    """Decode one operand node."""
    key, body = _single_key(node, where)
    location = f"{where}.{key}"
    match key:
        case "path":
            return _path(body, location)
        case "name":
            return Path.name(_expect_str(body, location))
        case "value":
            return _plain_value(body, location)
        case "attribute_value":
            return _attribute_value(body, location)
        case "ref":
            return Ref(_expect_str(body, location))
        case "size":
            return Size(_path(body, location))
    return decode_condition(node, where)


def _fold(items: list[Any], where: str, combine: Callable[[Condition, Condition], Condition]) -> Condition:
    if not items:
        raise _fail(where, "expected at least one condition")
    conditions = [decode_condition(item, f"{where}[{index}]") for index, item in enumerate(items)]
    result = conditions[0]
    for condition in conditions[1:]:
        result = combine(result, condition)
    return result


def decode_condition(node: object, where: str = "condition") -> Condition:
    """Decode one condition node."""
    key, body = _single_key(node, where)
    location = f"{where}.{key}"
    try:
        match key:
            case "and":
                return _fold(_expect_list(body, location), location, Condition.and_)
            case "or":
                return _fold(_expect_list(body, location), location, Condition.or_)
            case "not":
                return decode_condition(body, location).not_()
            case "parens":
                return decode_condition(body, location).parenthesize()
            case "compare":
                left, cmp, right = _expect_list(body, location, 3)
                return comparison(
                    decode_operand(left, f"{location}[0]"),
                    Comparator(_expect_str(cmp, f"{location}[1]")),
                    decode_operand(right, f"{location}[2]"),
                )
            case "between":
                op, lower, upper = _expect_list(body, location, 3)
                return between(
                    decode_operand(op, f"{location}[0]"),
                    decode_operand(lower, f"{location}[1]"),
                    decode_operand(upper, f"{location}[2]"),
                )
            case "in":
                op, items = _expect_list(body, location, 2)
                return in_(
                    decode_operand(op, f"{location}[0]"),
                    [
                        decode_operand(item, f"{location}[1][{index}]")
                        for index, item in enumerate(_expect_list(items, f"{location}[1]"))
                    ],
                )
            case "attribute_exists":
                return attribute_exists(_path(body, location))
            case "attribute_not_exists":
                return attribute_not_exists(_path(body, location))
            case "attribute_type":
                path, code = _expect_list(body, location, 2)
                return attribute_type(_path(path, f"{location}[0]"), TypeCode(_expect_str(code, f"{location}[1]")))
            case "begins_with":
                path, prefix = _expect_list(body, location, 2)
                return begins_with(_path(path, f"{location}[0]"), _value_or_ref(prefix, f"{location}[1]"))
            case "contains":
                path, operand = _expect_list(body, location, 2)
                return contains(_path(path, f"{location}[0]"), _value_or_ref(operand, f"{location}[1]"))
    except DocumentError:
        raise
    except (ExpressionError, ValueError) as exc:
        raise _fail(location, str(exc)) from exc
    raise _fail(where, f"unknown condition {key!r}")


def _set_action(node: object, where: str) -> SetAction:
    action = _expect_object(node, where)
    kinds = [kind for kind in SET_ACTION_KINDS if kind in action]
    if "path" not in action or len(kinds) != 1:
        raise _fail(where, f"expected 'path' and one of {', '.join(SET_ACTION_KINDS)}")
    unknown = sorted(set(action) - SET_ACTION_KEYS[kinds[0]])
    if unknown:
        raise _fail(where, f"unexpected keys for {kinds[0]}: {', '.join(unknown)}")
    dst = _path(action["path"], f"{where}.path")
    src = _path(action["src"], f"{where}.src") if "src" in action else None
    match kinds[0]:
        case "value":
            return dst.set(_value_or_ref(action["value"], f"{where}.value"))
        case "math":
            if "num" not in action:
                raise _fail(where, "expected 'num'")
            try:
                op = MathOp(_expect_str(action["math"], f"{where}.math"))
            except ValueError as exc:
                raise _fail(f"{where}.math", "expected '+' or '-'") from exc
            builder = dst.math() if src is None else dst.math().src(src)
            num = _value_or_ref(action["num"], f"{where}.num")
            return builder.add(num) if op is MathOp.ADD else builder.sub(num)
        case "list_append":
            list_builder = dst.list_append() if src is None else dst.list_append().src(src)
            before = action.get("before", False)
            if not isinstance(before, bool):
                raise _fail(f"{where}.before", "expected a boolean")
            if before:
                list_builder = list_builder.before()
            return list_builder.list(_value_or_ref(action["list_append"], f"{where}.list_append"))
    if_builder = dst.if_not_exists() if src is None else dst.if_not_exists().src(src)
    return if_builder.value(_value_or_ref(action["if_not_exists"], f"{where}.if_not_exists"))


def _path_value_pairs(node: object, where: str, build: Callable[[Path, ValueOrRef], UpdatePart]) -> Update:
    update = Update()
    for index, item in enumerate(_expect_list(node, where)):
        location = f"{where}[{index}]"
        entry = _expect_object(item, location)
        if set(entry) != {"path", "value"}:
            raise _fail(location, "expected 'path' and 'value'")
        path = _path(entry["path"], f"{location}.path")
        update = update.and_(build(path, _value_or_ref(entry["value"], f"{location}.value")))
    return update


def decode_update(node: object, where: str = "update") -> Update:
    """Decode an update document."""
    body = _expect_object(node, where)
    unknown = sorted(set(body) - set(UPDATE_KEYS))
    if unknown:
        raise _fail(where, f"unknown keys: {', '.join(unknown)}")

    update = Update()
    for index, item in enumerate(_expect_list(body.get("set", []), f"{where}.set")):
        update = update.and_(_set_action(item, f"{where}.set[{index}]"))
    remove = _expect_list(body.get("remove", []), f"{where}.remove")
    if remove:
        update = update.and_(
            Remove(tuple(_path(item, f"{where}.remove[{index}]") for index, item in enumerate(remove)))
        )
    update = update.and_(_path_value_pairs(body.get("add", []), f"{where}.add", Add.new))
    update = update.and_(_path_value_pairs(body.get("delete", []), f"{where}.delete", Delete.new))
    return update


def decode_projection(node: object, where: str = "projection") -> list[Path]:
    """Decode a projection list of path strings."""
    return [_path(item, f"{where}[{index}]") for index, item in enumerate(_expect_list(node, where))]


def build_expression(document: object) -> Expression:
    """Build an expression from a decoded JSON document."""
    body = _expect_object(document, "document")
    unknown = sorted(set(body) - set(DOCUMENT_KEYS))
    if unknown:
        raise _fail("document", f"unknown keys: {', '.join(unknown)}")

    builder = Builder()
    for key, node in body.items():
        match key:
            case "condition":
                builder.with_condition(decode_condition(node, key))
            case "key_condition":
                builder.with_key_condition(decode_condition(node, key))
            case "filter":
                builder.with_filter(decode_condition(node, key))
            case "update":
                builder.with_update(decode_update(node, key))
            case "projection":
                builder.with_projection(decode_projection(node, key))
    return builder.build()


def parse_document(text: str) -> Expression:
    """Parse JSON document text and build its expression."""
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocumentError(f"document: invalid JSON ({exc})") from exc
    except RecursionError as exc:
        raise DocumentError("document: too deeply nested") from exc
    try:
        return build_expression(document)
    except RecursionError as exc:
        raise DocumentError("document: too deeply nested") from exc
