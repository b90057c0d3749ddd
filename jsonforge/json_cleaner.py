"""
JSON Cleaner Module
Handles non-standard JSON before it is sent to the model for repair by:
- Removing JS-style comments (// ... and /* ... */) outside of strings
- Removing trailing commas before } or ]
- Removing stray control characters, escaping the ones inside strings
- Stripping whitespace
"""

from .parser import decode

_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t", "\b": "\\b", "\f": "\\f"}


def _strip_comments_and_controls(text: str) -> str:
    out = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            if ch == "\\" and i + 1 < n:
                out.append(text[i:i + 2])
                i += 2
                continue
            if ch == '"':
                in_string = False
            if ord(ch) < 0x20:
                out.append(_CONTROL_ESCAPES.get(ch, "\\u%04x" % ord(ch)))
            else:
                out.append(ch)
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif ord(ch) < 0x20 and ch not in "\t\n\r":
            i += 1
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _strip_trailing_commas(text: str) -> str:
    out = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            if ch == "\\" and i + 1 < n:
                out.append(text[i:i + 2])
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == ",":
            j = i + 1
            while j < n and text[j] in " \t\r\n":
                j += 1
            if j < n and text[j] in "}]":
                i += 1
                continue
        out.append(ch)
        i += 1
    return "".join(out)


def clean_json(text: str) -> str:
    """
    Cleans non-standard JSON text without validating it.

    Args:
        text: Raw JSON text (potentially malformed)

    Returns:
        Cleaned text, stripped of surrounding whitespace
    """
    text = _strip_comments_and_controls(text)
    text = _strip_trailing_commas(text)
    return text.strip()


def heal_json(raw_text: str) -> str:
    """
    Attempts to fix invalid JSON locally, before any model call.

    Args:
        raw_text: Potentially malformed JSON text

    Returns:
        Cleaned JSON text that parses

    Raises:
        ValueError: If the input is empty or still invalid after cleaning
    """
    if not raw_text.strip():
        raise ValueError("JSON input is empty")

    text = clean_json(raw_text)
    if not text:
        raise ValueError("JSON input is empty after cleaning (possibly contained only comments)")

    try:
        decode(text)
    except ValueError as e:
        raise ValueError(f"Still invalid JSON after cleaning: {e}") from e
    except RecursionError as e:
        raise ValueError("Still invalid JSON after cleaning: maximum nesting depth exceeded") from e

    return text
