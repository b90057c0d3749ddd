"""
JSON Parser Module
Turns raw editor text into a ParseOutcome:
- Empty or whitespace-only text is a valid, empty document
- Standard JSON grammar (RFC 8259) through the json module
- Syntax errors are returned as values carrying the decoder's own message
Also provides the pretty/minified serializers the host uses.
"""

import json
from typing import Optional
from .config import JSON_INDENT, MAX_NESTING_DEPTH
from .json_types import JsonValue, nesting_depth
from .models import ParseOutcome


NESTING_ERROR = "Maximum nesting depth exceeded"


def _reject_constant(name: str):
    # json accepts NaN/Infinity by default; the grammar does not
    raise ValueError(f"Out of range float values are not JSON compliant: {name}")


def decode(text: str) -> JsonValue:
    """
    Strict json.loads.

    Raises:
        ValueError: On any grammar violation (JSONDecodeError is a subclass)
        RecursionError: If nesting exceeds the interpreter's recursion limit
    """
    return json.loads(text, parse_constant=_reject_constant)


def parse_json(raw: str) -> ParseOutcome:
    """
    Parse raw text into a ParseOutcome. Never raises for malformed input.

    Args:
        raw: Editor text of any length

    Returns:
        ParseOutcome: valid with data, valid and empty, or invalid with an error
    """
    if not raw.strip():
        return ParseOutcome.empty_input()

    try:
        return ParseOutcome.ok(decode(raw))
    except ValueError as e:
        return ParseOutcome.fail(str(e))
    except RecursionError:
        return ParseOutcome.fail(NESTING_ERROR)


def check_nesting(value: JsonValue) -> None:
    """
    Raises:
        ValueError: If the value nests deeper than MAX_NESTING_DEPTH
    """
    if nesting_depth(value) > MAX_NESTING_DEPTH:
        raise ValueError(NESTING_ERROR)


def _dumps(value: JsonValue, **kwargs) -> str:
    check_nesting(value)
    try:
        return json.dumps(value, ensure_ascii=False, **kwargs)
    except RecursionError as e:
        raise ValueError(NESTING_ERROR) from e


def format_json(value: JsonValue, indent: Optional[int] = None) -> str:
    """
    Pretty-print with a fixed indent width, keys in their existing order.

    Raises:
        ValueError: If the value is nested too deeply to serialize
    """
    if indent is None:
        indent = JSON_INDENT
    return _dumps(value, indent=indent)


def minify_json(value: JsonValue) -> str:
    return _dumps(value, separators=(",", ":"))
