from __future__ import annotations

import re
from typing import Any

_TRAILING_SLASHES = re.compile(r"[/\s]+$")
_SLASH_RUNS = re.compile(r"/{3,}")
_SEGMENT_INDEX = re.compile(r"\[\d+\]$")


def normalize_xpath(xpath: Any) -> str:
    if not xpath or not isinstance(xpath, str):
        return ""

    trimmed = xpath.strip()
    if not trimmed:
        return ""

    without_trailing = _TRAILING_SLASHES.sub("", trimmed)
    return _SLASH_RUNS.sub("//", without_trailing)


def strip_segment_index(segment: str) -> str:
    return _SEGMENT_INDEX.sub("", segment)


def escape_xpath_string(value: str) -> str:
    """Quote ``value`` as an XPath string literal.

    Double quotes are preferred. Values holding both quote characters are
    split on ``"`` and rebuilt with ``concat()``.
    """
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"

    parts = value.split('"')
    pieces: list[str] = []
    for position, part in enumerate(parts):
        pieces.append(f'"{part}"' if part else '""')
        if position < len(parts) - 1:
            pieces.append("'\"'")
    return "concat(" + ", ".join(pieces) + ")"


def escape_css_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def build_attribute_selector(attribute: str, value: str) -> str:
    return f"//*[@{attribute}={escape_xpath_string(value)}]"
