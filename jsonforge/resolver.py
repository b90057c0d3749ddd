"""
Embedded JSON Resolver
Expands string fields that hold JSON documents (possibly encoded several
times over) into a single tree for display.

Depth counts decode rounds only: descending into arrays and objects is free,
and each successful decode of a string leaf consumes one unit of
``max_depth``. Strings that do not start with ``{`` or ``[``, or that fail
to parse, are kept as they are.
"""

import logging
from .json_types import JsonKind, JsonValue, kind_of
from .models import ResolveConfig
from .parser import parse_json

logger = logging.getLogger(__name__)

_NOT_EMBEDDED = object()


def _decode_embedded(text: str):
    """Return the document embedded in ``text``, or _NOT_EMBEDDED."""
    trimmed = text.strip()
    if not trimmed or trimmed[0] not in "{[":
        return _NOT_EMBEDDED
    outcome = parse_json(trimmed)
    if not outcome.valid:
        return _NOT_EMBEDDED
    return outcome.data


def resolve(value: JsonValue, depth: int, config: ResolveConfig) -> JsonValue:
    """
    Build a new tree with embedded JSON strings decoded, starting at ``depth``.

    The input is never mutated. Arrays and objects are rebuilt; scalars are
    shared. Traversal uses an explicit stack so structural nesting is not
    limited by the interpreter's recursion limit.

    Args:
        value: Parsed JSON value
        depth: Decode rounds already spent (0 at top level)
        config: Resolver settings

    Returns:
        The resolved tree
    """
    if depth >= config.max_depth:
        return value

    root = [None]
    # (node, depth, parent container, slot in parent)
    stack = [(value, depth, root, 0)]
    while stack:
        node, node_depth, parent, slot = stack.pop()
        kind = kind_of(node)

        if kind is JsonKind.STRING:
            decoded = _decode_embedded(node)
            if decoded is _NOT_EMBEDDED:
                parent[slot] = node
                continue
            logger.debug("Decoded embedded JSON at depth %d", node_depth + 1)
            if node_depth + 1 >= config.max_depth:
                parent[slot] = decoded
            else:
                stack.append((decoded, node_depth + 1, parent, slot))

        elif kind is JsonKind.ARRAY:
            items = [None] * len(node)
            parent[slot] = items
            for index, item in enumerate(node):
                stack.append((item, node_depth, items, index))

        elif kind is JsonKind.OBJECT:
            # Pre-filling keeps the source key order
            fields = dict.fromkeys(node)
            parent[slot] = fields
            for key, item in node.items():
                stack.append((item, node_depth, fields, key))

        else:
            parent[slot] = node

    return root[0]


def resolve_top_level(value: JsonValue, config: ResolveConfig) -> JsonValue:
    """Entry point for display: no traversal at all when resolving is off."""
    if not config.enabled:
        return value
    return resolve(value, 0, config)
