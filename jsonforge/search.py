"""Case-insensitive literal search over the keys and leaves of a JSON tree."""

import json
from typing import List
from .json_types import JsonKind, JsonValue, kind_of
from .models import SearchMatch


def _escape_token(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def render_leaf(value: JsonValue) -> str:
    """Text of a scalar as the tree view shows it."""
    kind = kind_of(value)
    if kind is JsonKind.STRING:
        return value
    if kind in (JsonKind.NULL, JsonKind.BOOLEAN, JsonKind.NUMBER):
        return json.dumps(value)
    raise TypeError(f"Not a leaf: {kind.value}")


def find_matches(value: JsonValue, query: str) -> List[SearchMatch]:
    """
    Find every key and scalar leaf containing ``query``, in document order.

    Paths are JSON pointers (``/items/0/name``); the root leaf is ``""``.
    """
    if not query:
        return []
    needle = query.lower()
    matches = []

    def _check(path: str, target: str, text: str):
        count = text.lower().count(needle)
        if count:
            matches.append(SearchMatch(path=path, target=target, text=text, occurrences=count))

    # (path, node, owning key or None)
    stack = [("", value, None)]
    while stack:
        path, node, key = stack.pop()
        if key is not None:
            _check(path, "key", key)
        kind = kind_of(node)
        if kind is JsonKind.OBJECT:
            stack.extend(reversed([(f"{path}/{_escape_token(k)}", item, k) for k, item in node.items()]))
        elif kind is JsonKind.ARRAY:
            stack.extend(reversed([(f"{path}/{index}", item, None) for index, item in enumerate(node)]))
        else:
            _check(path, "value", render_leaf(node))
    return matches


def count_matches(value: JsonValue, query: str) -> int:
    return sum(match.occurrences for match in find_matches(value, query))
