"""Literal values used in conditions and update actions.

Values render the way they appear in expression text. Numbers keep their
canonical decimal text instead of a native numeric type so no precision is
lost between the caller and the datastore. Sets and maps are stored in a
sorted canonical order so that equal values render identically.
"""

from __future__ import annotations

import base64
import json
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal

from dynexpr.errors import UnknownAttributeValueError


type Number = int | float | Decimal
type AttributeValue = dict[str, object]


def _to_decimal(value: Number) -> Decimal:
    """Convert a numeric input into an exact decimal."""
    if isinstance(value, bool) or not isinstance(value, int | float | Decimal):
        raise TypeError(f"Expected a number, got {type(value).__name__}")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Numbers must be finite, got {value!r}")
        return Decimal(repr(value))
    if isinstance(value, Decimal) and not value.is_finite():
        raise ValueError(f"Numbers must be finite, got {value!r}")
    return Decimal(value)


def _format_fixed(value: Number) -> str:
    """Render a number in plain positional notation."""
    decimal = _to_decimal(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return format(decimal, "f")


def _format_exponent(value: Number, marker: str) -> str:
    """Render a number as `<mantissa><marker><exponent>`, e.g. `1.5e3`."""
    sign, digits, exponent = _to_decimal(value).as_tuple()
    assert isinstance(exponent, int)
    trimmed = list(digits)
    while len(trimmed) > 1 and trimmed[-1] == 0:
        trimmed.pop()
        exponent += 1
    if not any(trimmed):
        return f"0{marker}0"

    mantissa = str(trimmed[0])
    if len(trimmed) > 1:
        mantissa += "." + "".join(str(digit) for digit in trimmed[1:])
    power = exponent + len(trimmed) - 1
    return f"{'-' if sign else ''}{mantissa}{marker}{power}"


def _quote(text: str) -> str:
    """Quote text as a JSON string."""
    return json.dumps(text, ensure_ascii=False)


def _base64(data: bytes) -> str:
    """Encode bytes as standard padded base64."""
    return base64.b64encode(data).decode("ascii")


@dataclass(frozen=True, slots=True)
class Value:
    """Base type for literal values."""

    def to_attribute_value(self) -> AttributeValue:
        """Convert into the low-level attribute value mapping."""
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class Scalar(Value):
    """Base type for single values."""


@dataclass(frozen=True, slots=True)
class Str(Scalar):
    """String value."""

    value: str

    def __str__(self) -> str:
        return _quote(self.value)

    def to_attribute_value(self) -> AttributeValue:
        return {"S": self.value}


@dataclass(frozen=True, slots=True)
class Num(Scalar):
    """Number value stored as its canonical text."""

    n: str

    @classmethod
    def from_number(cls, value: Number) -> Num:
        """Build a number rendered in positional notation, e.g. `1000`."""
        return cls(_format_fixed(value))

    @classmethod
    def lower_exp(cls, value: Number) -> Num:
        """Build a number rendered in lowercase exponent notation, e.g. `1e3`."""
        return cls(_format_exponent(value, "e"))

    @classmethod
    def upper_exp(cls, value: Number) -> Num:
        """Build a number rendered in uppercase exponent notation, e.g. `1E3`."""
        return cls(_format_exponent(value, "E"))

    def __str__(self) -> str:
        return self.n

    def to_attribute_value(self) -> AttributeValue:
        return {"N": self.n}


@dataclass(frozen=True, slots=True)
class Bool(Scalar):
    """Boolean value."""

    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"

    def to_attribute_value(self) -> AttributeValue:
        return {"BOOL": self.value}


@dataclass(frozen=True, slots=True)
class Binary(Scalar):
    """Binary value, rendered as quoted base64."""

    value: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", bytes(self.value))

    def __str__(self) -> str:
        return _quote(_base64(self.value))

    def to_attribute_value(self) -> AttributeValue:
        return {"B": self.value}


@dataclass(frozen=True, slots=True)
class Null(Scalar):
    """Null value."""

    def __str__(self) -> str:
        return "NULL"

    def to_attribute_value(self) -> AttributeValue:
        return {"NULL": True}


@dataclass(frozen=True, slots=True)
class SetValue(Value):
    """Base type for homogeneous, deduplicated sets."""


@dataclass(frozen=True, slots=True)
class StringSet(SetValue):
    """Set of strings."""

    values: tuple[str, ...]

    def __post_init__(self) -> None:
        for item in self.values:
            if not isinstance(item, str):
                raise TypeError(f"String set items must be str, got {type(item).__name__}")
        object.__setattr__(self, "values", tuple(sorted(set(self.values))))

    def __str__(self) -> str:
        return "[" + ", ".join(_quote(item) for item in self.values) + "]"

    def to_attribute_value(self) -> AttributeValue:
        return {"SS": list(self.values)}


@dataclass(frozen=True, slots=True)
class NumSet(SetValue):
    """Set of numbers."""

    values: tuple[Num, ...]

    def __post_init__(self) -> None:
        nums = {item if isinstance(item, Num) else Num.from_number(item) for item in self.values}
        object.__setattr__(self, "values", tuple(sorted(nums, key=lambda num: num.n)))

    def __str__(self) -> str:
        return "[" + ", ".join(_quote(item.n) for item in self.values) + "]"

    def to_attribute_value(self) -> AttributeValue:
        return {"NS": [item.n for item in self.values]}


@dataclass(frozen=True, slots=True)
class BinarySet(SetValue):
    """Set of binary values."""

    values: tuple[bytes, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(sorted({bytes(item) for item in self.values})))

    def __str__(self) -> str:
        return "[" + ", ".join(_quote(_base64(item)) for item in self.values) + "]"

    def to_attribute_value(self) -> AttributeValue:
        return {"BS": list(self.values)}


@dataclass(frozen=True, slots=True)
class List(Value):
    """Ordered list of values of any type."""

    items: tuple[Value, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(to_value(item) for item in self.items))

    def __str__(self) -> str:
        return "[" + ", ".join(str(item) for item in self.items) + "]"

    def to_attribute_value(self) -> AttributeValue:
        return {"L": [item.to_attribute_value() for item in self.items]}


@dataclass(frozen=True, slots=True)
class Map(Value):
    """Map of attribute names to values.

    Entries are kept sorted by name, so two maps built from the same pairs in
    a different order are equal and render the same text.
    """

    entries: tuple[tuple[str, Value], ...]

    def __post_init__(self) -> None:
        raw = self.entries
        pairs = raw.items() if isinstance(raw, Mapping) else raw
        merged: dict[str, Value] = {}
        for key, item in pairs:
            if not isinstance(key, str):
                raise TypeError(f"Map keys must be str, got {type(key).__name__}")
            merged[key] = to_value(item)
        object.__setattr__(self, "entries", tuple(sorted(merged.items(), key=lambda e: e[0])))

    def __str__(self) -> str:
        return "{" + ", ".join(f"{key}: {item}" for key, item in self.entries) + "}"

    def to_attribute_value(self) -> AttributeValue:
        return {"M": {key: item.to_attribute_value() for key, item in self.entries}}


@dataclass(frozen=True, slots=True)
class Ref:
    """Reference to an expression attribute value declared elsewhere.

    `Ref("prefix")` renders as `:prefix` and is never interned.
    """

    name: str

    def __str__(self) -> str:
        return f":{self.name}"


type ValueOrRef = Value | Ref


def to_value(value: object) -> Value:
    """Convert a supported Python literal into a value."""
    result: Value
    if isinstance(value, Value):
        result = value
    elif isinstance(value, bool):
        result = Bool(value)
    elif isinstance(value, int | float | Decimal):
        result = Num.from_number(value)
    elif isinstance(value, str):
        result = Str(value)
    elif isinstance(value, bytes | bytearray):
        result = Binary(bytes(value))
    elif value is None:
        result = Null()
    elif isinstance(value, list | tuple):
        result = List(tuple(value))
    elif isinstance(value, dict):
        result = Map(tuple(value.items()))
    else:
        raise TypeError(f"Cannot convert {type(value).__name__} to a value")
    return result


def to_value_or_ref(value: object) -> ValueOrRef:
    """Convert a literal into a value, passing references through."""
    if isinstance(value, Ref):
        return value
    return to_value(value)


def string_value(value: str) -> Str:
    """Build a string value."""
    return Str(value)


def num_value(value: Number) -> Num:
    """Build a number value in positional notation."""
    return Num.from_number(value)


def num_value_lower_exp(value: Number) -> Num:
    """Build a number value in lowercase exponent notation."""
    return Num.lower_exp(value)


def num_value_upper_exp(value: Number) -> Num:
    """Build a number value in uppercase exponent notation."""
    return Num.upper_exp(value)


def bool_value(value: bool) -> Bool:
    """Build a boolean value."""
    return Bool(value)


def binary_value(value: bytes | bytearray) -> Binary:
    """Build a binary value."""
    return Binary(bytes(value))


def null_value() -> Null:
    """Build a null value."""
    return Null()


def string_set(values: Iterable[str]) -> StringSet:
    """Build a string set. A bare string is rejected rather than split into characters."""
    if isinstance(values, str):
        raise TypeError("Expected an iterable of strings, got a single str")
    return StringSet(tuple(values))


def num_set(values: Iterable[Number | Num]) -> NumSet:
    """Build a number set."""
    return NumSet(tuple(values))  # type: ignore[arg-type]


def binary_set(values: Iterable[bytes | bytearray]) -> BinarySet:
    """Build a binary set."""
    if isinstance(values, bytes | bytearray):
        raise TypeError("Expected an iterable of bytes, got a single bytes object")
    return BinarySet(tuple(bytes(item) for item in values))


def list_value(items: Iterable[object]) -> List:
    """Build a list value."""
    return List(tuple(items))  # type: ignore[arg-type]


def map_value(entries: Mapping[str, object] | Iterable[tuple[str, object]]) -> Map:
    """Build a map value."""
    pairs = entries.items() if isinstance(entries, Mapping) else entries
    return Map(tuple(pairs))  # type: ignore[arg-type]


def ref_value(name: str) -> Ref:
    """Build a reference to an already declared value placeholder."""
    return Ref(name)


def from_attribute_value(attribute_value: Mapping[str, object]) -> Value:
    """Convert a low-level attribute value mapping back into a value."""
    if not isinstance(attribute_value, Mapping) or len(attribute_value) != 1:
        raise UnknownAttributeValueError(attribute_value)

    ((kind, raw),) = attribute_value.items()
    try:
        return _decode_attribute_value(kind, raw)
    except (TypeError, ValueError) as exc:
        raise UnknownAttributeValueError(attribute_value) from exc


def _decode_attribute_value(kind: str, raw: object) -> Value:
    """Decode one tagged attribute value payload."""
    match kind:
        case "S" if isinstance(raw, str):
            return Str(raw)
        case "N" if isinstance(raw, str):
            return Num(raw)
        case "BOOL" if isinstance(raw, bool):
            return Bool(raw)
        case "B" if isinstance(raw, bytes | bytearray):
            return Binary(bytes(raw))
        case "NULL" if raw is True:
            return Null()
        case "SS" if isinstance(raw, list):
            return StringSet(tuple(raw))
        case "NS" if isinstance(raw, list) and all(isinstance(item, str) for item in raw):
            return NumSet(tuple(Num(item) for item in raw))
        case "BS" if isinstance(raw, list):
            return BinarySet(tuple(raw))
        case "L" if isinstance(raw, list):
            return List(tuple(from_attribute_value(item) for item in raw))
        case "M" if isinstance(raw, Mapping):
            return Map(tuple((key, from_attribute_value(item)) for key, item in raw.items()))
    raise UnknownAttributeValueError({kind: raw})
