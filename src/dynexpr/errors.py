"""Errors for expression construction and decoding."""

from __future__ import annotations


class ExpressionError(Exception):
    """Base exception for expression building failures."""


class PathParseError(ExpressionError):
    """Raised when document path text cannot be parsed."""

    def __init__(self, text: str, reason: str = "invalid document path") -> None:
        super().__init__(f"{reason}: {text!r}")
        self.text = text
        self.reason = reason


class InListArityError(ExpressionError):
    """Raised when a checked IN condition gets too few or too many items."""

    def __init__(self, items: tuple[object, ...], limit: int) -> None:
        super().__init__(f"IN requires between 1 and {limit} items, got {len(items)}")
        self.items = items
        self.limit = limit


class KeyConditionError(ExpressionError):
    """Raised when a key condition uses an operator not allowed on keys."""


class UnknownAttributeValueError(ExpressionError):
    """Raised when an attribute value mapping has no known value type."""

    def __init__(self, attribute_value: object) -> None:
        super().__init__(f"unknown attribute value: {attribute_value!r}")
        self.attribute_value = attribute_value


class DocumentError(ExpressionError):
    """Raised when an expression document cannot be decoded."""
