"""
Pretty-printing and minification for JSON and XML text
"""

import json
import logging
import re
from decimal import Decimal
from typing import Any, List

from errors import ParseError

logger = logging.getLogger(__name__)

INDENT = "  "

# Lexical patterns for the permissive XML formatter
_BETWEEN_TAGS = re.compile(r'>\s*<')
_TAG_TOKEN = re.compile(r'(<[^>]+>)')
_CLOSING_TAG = re.compile(r'^</\w')
_OPENING_TAG = re.compile(r'^<\w[^>]*(?<!/)>$')
_SELF_CLOSING_TAG = re.compile(r'^<\w[^>]*/>$')


def _reject_constant(name: str):
    raise ValueError(f"{name} is not a valid JSON value")


def decode_json(text: str) -> Any:
    """Decode JSON text strictly, raising ParseError on any failure.

    Fractional and exponent numbers come back as Decimal so that values
    outside the float range (1e400) or below it (1e-400) survive a
    format round trip unchanged.
    """
    if text.startswith('\ufeff'):
        text = text[1:]
    try:
        return json.loads(text, parse_float=Decimal, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        logger.debug("JSON decode failed: %s", e)
        raise ParseError(e.msg, e.lineno, e.colno) from e
    except (ValueError, RecursionError) as e:
        logger.debug("JSON decode failed: %s", e)
        raise ParseError(str(e) or "Invalid JSON") from e


def _write_json(value: Any, depth: int, compact: bool, parts: List[str]):
    if isinstance(value, dict):
        items, opener, closer = list(value.items()), '{', '}'
    elif isinstance(value, (list, tuple)):
        items, opener, closer = list(value), '[', ']'
    elif isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"{value} is not a valid JSON value")
        parts.append(str(value))
        return
    else:
        parts.append(json.dumps(value, ensure_ascii=False, allow_nan=False))
        return

    if not items:
        parts.append(opener + closer)
        return

    inner = '' if compact else '\n' + INDENT * (depth + 1)
    parts.append(opener)
    for i, item in enumerate(items):
        parts.append(',' + inner if i else inner)
        if opener == '{':
            key, item = item
            if not isinstance(key, str):
                key = json.dumps(key)
            parts.append(json.dumps(key, ensure_ascii=False))
            parts.append(':' if compact else ': ')
        _write_json(item, depth + 1, compact, parts)
    if not compact:
        parts.append('\n' + INDENT * depth)
    parts.append(closer)


def dump_json(value: Any, compact: bool = False) -> str:
    """Serialize a decoded JSON value with 2-space indentation, or compactly"""
    parts = []
    try:
        _write_json(value, 0, compact, parts)
    except ValueError as e:
        raise ParseError(str(e)) from e
    except RecursionError as e:
        raise ParseError("Document is nested too deeply") from e
    return ''.join(parts)


def format_json(text: str) -> str:
    """Format JSON text with 2-space indentation, keeping key order"""
    return dump_json(decode_json(text))


def minify_json(text: str) -> str:
    """Remove all insignificant whitespace from JSON text"""
    return dump_json(decode_json(text), compact=True)


def count_json_nodes(value: Any) -> int:
    """Count values in a decoded JSON document, containers included"""
    count = 0
    pending = [value]
    while pending:
        current = pending.pop()
        count += 1
        if isinstance(current, dict):
            pending.extend(current.values())
        elif isinstance(current, (list, tuple)):
            pending.extend(current)
    return count


def format_xml(text: str) -> str:
    """Re-indent XML text by lexical tag nesting.

    This never rejects input: tokens it cannot classify as tags are emitted
    as trimmed text at the current depth. Use XmlService.parse when the
    document has to be well-formed.
    """
    lines = []
    depth = 0

    collapsed = _BETWEEN_TAGS.sub('><', text)

    for token in _TAG_TOKEN.split(collapsed):
        if not token.strip():
            continue

        if _CLOSING_TAG.match(token):
            depth = max(0, depth - 1)
            lines.append(INDENT * depth + token)
        elif _OPENING_TAG.match(token):
            lines.append(INDENT * depth + token)
            depth += 1
        elif _SELF_CLOSING_TAG.match(token):
            lines.append(INDENT * depth + token)
        else:
            lines.append(INDENT * depth + token.strip())

    return '\n'.join(lines).strip()


def minify_xml(text: str) -> str:
    """Drop whitespace between tags"""
    return _BETWEEN_TAGS.sub('><', text).strip()
