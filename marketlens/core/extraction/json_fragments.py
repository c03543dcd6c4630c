"""Capture values of named keys from JSON embedded in HTML.

Quote pages carry their data as JSON serialised inside a JavaScript string,
so keys appear either as ``"field":`` or escaped as ``\\"field\\":``. Each
occurrence is captured, unescaped and decoded independently.
"""

import json
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

_OPENERS = {"{": "}", "[": "]"}
_SCALAR_END = ",}]\n\r"


@dataclass(frozen=True)
class Fragment:
    """One captured occurrence."""

    start: int
    end: int
    text: str
    escaped: bool


@lru_cache(maxsize=512)
def _key_pattern(field: str) -> re.Pattern[str]:
    name = re.escape(field)
    return re.compile(rf'(\\?)"{name}\\?"\s*:\s*')


def _is_quote(text: str, index: int, escaped: bool) -> bool:
    """Whether ``text[index]`` delimits a string at the current nesting level."""
    if text[index] != '"':
        return False
    backslashes = 0
    i = index - 1
    while i >= 0 and text[i] == "\\":
        backslashes += 1
        i -= 1
    if escaped:
        return backslashes % 4 == 1
    return backslashes % 2 == 0


def _scan_block(text: str, start: int, escaped: bool) -> int | None:
    """Return the index just past the balanced block opening at ``start``."""
    stack = [_OPENERS[text[start]]]
    in_string = False
    i = start + 1
    while i < len(text):
        char = text[i]
        if char == '"' and _is_quote(text, i, escaped):
            in_string = not in_string
        elif not in_string:
            if char in _OPENERS:
                stack.append(_OPENERS[char])
            elif char in "}]":
                if char != stack[-1]:
                    return None
                stack.pop()
                if not stack:
                    return i + 1
        i += 1
    return None


def _scan_string(text: str, start: int, escaped: bool) -> int | None:
    i = start + 1
    while i < len(text):
        if text[i] == '"' and _is_quote(text, i, escaped):
            return i + 1
        i += 1
    return None


def _scan_scalar(text: str, start: int, escaped: bool) -> int:
    i = start
    while i < len(text) and text[i] not in _SCALAR_END:
        if escaped and text[i] == "\\":
            break
        i += 1
    return i


def _capture(text: str, start: int, escaped: bool) -> int | None:
    if start >= len(text):
        return None
    head = text[start]
    if head in _OPENERS:
        return _scan_block(text, start, escaped)
    if escaped and text.startswith('\\"', start):
        return _scan_string(text, start + 1, escaped)
    if head == '"':
        return _scan_string(text, start, escaped)
    end = _scan_scalar(text, start, escaped)
    return end if end > start else None


def find_fragments(text: str, field: str) -> list[Fragment]:
    """All captured value fragments of ``field`` in document order."""
    fragments = []
    for match in _key_pattern(field).finditer(text):
        escaped = match.group(1) == "\\"
        if escaped and not match.group(0).rstrip().rstrip(":").rstrip().endswith('\\"'):
            continue
        start = match.end()
        end = _capture(text, start, escaped)
        if end is None:
            continue
        fragments.append(Fragment(start=start, end=end, text=text[start:end].strip(), escaped=escaped))
    return fragments


def unescape(fragment: str) -> str:
    """Undo one level of JavaScript string escaping."""
    try:
        return json.loads(f'"{fragment}"')
    except json.JSONDecodeError:
        return fragment.replace('\\"', '"').replace("\\\\", "\\")


def decode_fragment(fragment: Fragment) -> Any:
    """Decode a fragment; raises ``ValueError`` when it is not valid JSON."""
    body = unescape(fragment.text) if fragment.escaped else fragment.text
    return json.loads(body)


def scoped_text(text: str, scope: str) -> str | None:
    """Text of the first object or array value following ``scope``."""
    for fragment in find_fragments(text, scope):
        if fragment.text[:1] in _OPENERS:
            return fragment.text
    return None


def extract_values(text: str, field: str, scope: str | None = None) -> list[Any]:
    """Decoded values of every occurrence of ``field``; undecodable ones are skipped."""
    if scope is not None:
        scoped = scoped_text(text, scope)
        if scoped is None:
            return []
        text = scoped
    values = []
    for fragment in find_fragments(text, field):
        try:
            values.append(decode_fragment(fragment))
        except ValueError:
            continue
    return values
