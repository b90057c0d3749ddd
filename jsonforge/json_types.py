"""
JSON value kinds.

JSON values are held as native Python objects (None, bool, int, float, str,
list, dict). ``kind_of`` tags them so every consumer can dispatch over the
six variants and handle each one explicitly.
"""

from enum import Enum
from typing import Dict, List, Union

JsonValue = Union[None, bool, int, float, str, List["JsonValue"], Dict[str, "JsonValue"]]


class JsonKind(str, Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


def kind_of(value) -> JsonKind:
    """
    Classify a value as one of the JSON kinds.

    Raises:
        TypeError: If the value is not JSON-compatible
    """
    if value is None:
        return JsonKind.NULL
    # bool is a subclass of int and must be checked first
    if isinstance(value, bool):
        return JsonKind.BOOLEAN
    if isinstance(value, (int, float)):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, list):
        return JsonKind.ARRAY
    if isinstance(value, dict):
        return JsonKind.OBJECT
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


def nesting_depth(value) -> int:
    """Deepest array/object nesting level; scalars are 0. Iterative."""
    deepest = 0
    stack = [(value, 1)]
    while stack:
        node, level = stack.pop()
        kind = kind_of(node)
        if kind is JsonKind.ARRAY:
            children = node
        elif kind is JsonKind.OBJECT:
            children = node.values()
        else:
            continue
        deepest = max(deepest, level)
        stack.extend((child, level + 1) for child in children)
    return deepest
