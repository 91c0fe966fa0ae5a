"""dynexpr - Build datastore expressions with name and value placeholders."""

from dynexpr.cli import main
from dynexpr.condition import (
    MAX_IN_ITEMS,
    And,
    AttributeExists,
    AttributeNotExists,
    AttributeType,
    BeginsWith,
    Between,
    Comparator,
    Comparison,
    Condition,
    Contains,
    In,
    Not,
    Or,
    Parenthetical,
    Size,
    TypeCode,
    normalize,
)
from dynexpr.errors import (
    DocumentError,
    ExpressionError,
    InListArityError,
    KeyConditionError,
    PathParseError,
    UnknownAttributeValueError,
)
from dynexpr.expression import Builder, Expression
from dynexpr.key import Key, KeyCondition, validate_key_condition
from dynexpr.path import IndexedField, Name, Path, parse_path
from dynexpr.update import (
    Add,
    Assign,
    Delete,
    IfNotExists,
    ListAppend,
    Math,
    MathOp,
    Remove,
    Set,
    Update,
    to_update,
)
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
    Value,
    from_attribute_value,
    to_value,
)


__version__ = "0.1.0"

__all__ = [
    "MAX_IN_ITEMS",
    "Add",
    "And",
    "Assign",
    "AttributeExists",
    "AttributeNotExists",
    "AttributeType",
    "BeginsWith",
    "Between",
    "Binary",
    "BinarySet",
    "Bool",
    "Builder",
    "Comparator",
    "Comparison",
    "Condition",
    "Contains",
    "Delete",
    "DocumentError",
    "Expression",
    "ExpressionError",
    "IfNotExists",
    "In",
    "InListArityError",
    "IndexedField",
    "Key",
    "KeyCondition",
    "KeyConditionError",
    "List",
    "ListAppend",
    "Map",
    "Math",
    "MathOp",
    "Name",
    "Not",
    "Null",
    "Num",
    "NumSet",
    "Or",
    "Parenthetical",
    "Path",
    "PathParseError",
    "Ref",
    "Remove",
    "Set",
    "Size",
    "Str",
    "StringSet",
    "TypeCode",
    "UnknownAttributeValueError",
    "Update",
    "Value",
    "__version__",
    "from_attribute_value",
    "main",
    "normalize",
    "parse_path",
    "to_update",
    "to_value",
    "validate_key_condition",
]
