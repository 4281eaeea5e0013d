from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Literal

from .errors import EmptySelectorError, UnsupportedSelectorError
from .selector_rules import escape_css_string, escape_xpath_string, normalize_xpath

logger = logging.getLogger("domxpath.converters")

Combinator = Literal["descendant", "child"]

CLASS_ATTRIBUTE_WRAPPER = "concat(' ', normalize-space(@class), ' ')"

_TAG_PATTERN = re.compile(r"^[a-zA-Z_][\w-]*")
_NAME_TOKEN_PATTERN = re.compile(r"^[^.#\[:]+")
_NTH_OF_TYPE_PATTERN = re.compile(r"^:nth-of-type\(\s*(\d+)\s*\)")
_ATTRIBUTE_BODY_PATTERN = re.compile(r"^([A-Za-z_][\w-]*)\s*(?:([*^$|~]?=)\s*(.*))?$", re.DOTALL)
_SEGMENT_PATTERN = re.compile(r"^([a-zA-Z_][\w-]*|\*)(.*)$", re.DOTALL)
_ATTRIBUTE_EQUALS_PATTERN = re.compile(r"""^@([A-Za-z_][\w-]*)\s*=\s*(?:"([^"]*)"|'([^']*)')$""")
_CLASS_CONTAINS_PATTERN = re.compile(
    r"^contains\(\s*concat\(\s*' '\s*,\s*normalize-space\(\s*@class\s*\)\s*,\s*' '\s*\)\s*,\s*' ([^'\s]+) '\s*\)$"
)
_POSITION_PATTERN = re.compile(r"^position\(\)\s*=\s*(\d+)$")
_CSS_SAFE_IDENTIFIER = re.compile(r"^-?[A-Za-z_][A-Za-z0-9_-]*$")
_WHITESPACE = " \t\n\r\f"


@dataclass(frozen=True, slots=True)
class SelectorToken:
    selector: str
    combinator: Combinator


def css_to_xpath(selector: str) -> str:
    """Convert a CSS selector into an equivalent XPath expression.

    Supports type, id, class and attribute selectors, ``:nth-of-type(n)``,
    and the descendant and child combinators. Comma separated groups become
    an XPath union. Groups that cannot be translated are dropped; when none
    can be translated ``UnsupportedSelectorError`` is raised.
    """
    trimmed = str(selector or "").strip()
    if not trimmed:
        raise EmptySelectorError("CSS selector cannot be empty.")

    expressions: list[str] = []
    for group in split_selectors(trimmed):
        try:
            expressions.append(convert_single_css_selector(group))
        except UnsupportedSelectorError as exc:
            logger.debug("Skipping CSS selector group %r: %s", group, exc)

    if not expressions:
        raise UnsupportedSelectorError(f'Unable to convert CSS selector "{selector}" to XPath.')
    return " | ".join(expressions)


def xpath_to_css(xpath: str) -> str | None:
    """Best-effort conversion from XPath back to CSS.

    Only child and descendant steps carrying id, attribute-equality, class
    and ``position()=n`` predicates are understood. Anything else returns
    ``None``.
    """
    normalized = normalize_xpath(xpath)
    if not normalized:
        return None

    selectors: list[str] = []
    for branch in _split_top_level(normalized, "|"):
        converted = _convert_xpath_path(branch.strip())
        if not converted:
            return None
        selectors.append(converted)
    return ", ".join(selectors)


def split_selectors(selector: str) -> list[str]:
    return [item.strip() for item in _split_top_level(selector, ",") if item.strip()]


def tokenize_selector(selector: str) -> list[SelectorToken]:
    tokens: list[SelectorToken] = []
    buffer: list[str] = []
    depth = 0
    pending: Combinator = "descendant"

    def flush() -> None:
        text = "".join(buffer).strip()
        if text:
            tokens.append(SelectorToken(text, pending))
        buffer.clear()

    index = 0
    while index < len(selector):
        ch = selector[index]
        index += 1
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth = max(0, depth - 1)
        elif depth == 0 and ch == ">":
            flush()
            pending = "child"
            continue
        elif depth == 0 and ch in _WHITESPACE:
            if buffer:
                flush()
                pending = "descendant"
            while index < len(selector) and selector[index] in _WHITESPACE:
                index += 1
            continue
        buffer.append(ch)
    flush()
    return tokens


def convert_single_css_selector(selector: str) -> str:
    tokens = tokenize_selector(selector)
    if not tokens:
        raise UnsupportedSelectorError(f"Empty selector group: {selector!r}")

    parts: list[str] = []
    for position, token in enumerate(tokens):
        simple = build_simple_selector_xpath(token.selector)
        if position == 0:
            parts.append(f"//{simple}")
        else:
            axis = "/" if token.combinator == "child" else "//"
            parts.append(f"{axis}{simple}")
    return "".join(parts)


def build_simple_selector_xpath(selector: str) -> str:
    remaining = selector
    tag = "*"
    predicates: list[str] = []

    tag_match = _TAG_PATTERN.match(remaining)
    if tag_match:
        tag = tag_match.group(0)
        remaining = remaining[len(tag):]
    elif remaining.startswith("*"):
        remaining = remaining[1:]

    while remaining:
        ch = remaining[0]
        if ch in "#.":
            name_match = _NAME_TOKEN_PATTERN.match(remaining[1:])
            if not name_match:
                raise UnsupportedSelectorError(f"Missing name after {ch!r} in {selector!r}")
            value = name_match.group(0)
            if ch == "#":
                predicates.append(f"@id={escape_xpath_string(value)}")
            else:
                predicates.append(f"contains({CLASS_ATTRIBUTE_WRAPPER}, ' {value} ')")
            remaining = remaining[len(value) + 1:]
            continue
        if ch == "[":
            closing = remaining.find("]")
            if closing == -1:
                raise UnsupportedSelectorError(f"Unclosed attribute selector in {selector!r}")
            predicates.append(parse_attribute_selector(remaining[1:closing].strip()))
            remaining = remaining[closing + 1:]
            continue
        if ch == ":":
            nth_match = _NTH_OF_TYPE_PATTERN.match(remaining)
            if nth_match:
                predicates.append(f"position()={nth_match.group(1)}")
                remaining = remaining[nth_match.end():]
                continue
            raise UnsupportedSelectorError(f"Unsupported pseudo-class in {selector!r}")
        raise UnsupportedSelectorError(f"Unsupported token {ch!r} in {selector!r}")

    predicate = f"[{' and '.join(predicates)}]" if predicates else ""
    return f"{tag}{predicate}"


def parse_attribute_selector(body: str) -> str:
    match = _ATTRIBUTE_BODY_PATTERN.match(body)
    if not match:
        raise UnsupportedSelectorError(f"Malformed attribute selector [{body}]")

    attr, operator, raw_value = match.groups()
    if not operator:
        return f"@{attr}"

    value = _unquote(raw_value or "")
    literal = escape_xpath_string(value)
    if operator == "=":
        return f"@{attr}={literal}"
    if operator == "^=":
        return f"starts-with(@{attr}, {literal})"
    if operator == "$=":
        return f"substring(@{attr}, string-length(@{attr}) - string-length({literal}) + 1) = {literal}"
    if operator == "*=":
        return f"contains(@{attr}, {literal})"
    if operator == "~=":
        token = f"' {value} '" if "'" not in value else escape_xpath_string(f" {value} ")
        return f"contains(concat(' ', normalize-space(@{attr}), ' '), {token})"
    return f"(@{attr}={literal} or starts-with(@{attr}, {escape_xpath_string(f'{value}-')}))"


def parse_xpath_axes(xpath: str) -> list[tuple[Combinator, str]]:
    segments: list[tuple[Combinator, str]] = []
    index = 0
    combinator: Combinator = "descendant"
    while index < len(xpath):
        if xpath[index] == "/":
            if xpath[index + 1:index + 2] == "/":
                combinator = "descendant"
                index += 2
            else:
                combinator = "child"
                index += 1

        buffer: list[str] = []
        depth = 0
        quote: str | None = None
        while index < len(xpath):
            ch = xpath[index]
            if quote:
                if ch == quote:
                    quote = None
            elif ch in "\"'":
                quote = ch
            elif ch == "/" and depth == 0:
                break
            elif ch == "[":
                depth += 1
            elif ch == "]":
                depth = max(0, depth - 1)
            buffer.append(ch)
            index += 1
        if buffer:
            segments.append((combinator, "".join(buffer)))
    return segments


def convert_xpath_segment_to_css(segment: str) -> str | None:
    match = _SEGMENT_PATTERN.match(segment.strip())
    if not match:
        return None

    tag, predicate_part = match.groups()
    predicates = _split_predicates(predicate_part)
    if predicates is None:
        return None

    css = "" if tag == "*" else tag
    for predicate in predicates:
        for condition in _split_top_level(predicate, " and "):
            converted = _convert_condition(condition.strip())
            if converted is None:
                return None
            css += converted
    return css or "*"


def is_css_safe_identifier(value: str) -> bool:
    return bool(_CSS_SAFE_IDENTIFIER.fullmatch(value))


def _convert_xpath_path(xpath: str) -> str | None:
    segments = parse_xpath_axes(xpath)
    if not segments:
        return None

    parts: list[str] = []
    for combinator, raw in segments:
        converted = convert_xpath_segment_to_css(raw)
        if not converted:
            return None
        if parts:
            parts.append(" > " if combinator == "child" else " ")
        parts.append(converted)
    return "".join(parts)


def _convert_condition(condition: str) -> str | None:
    attribute_match = _ATTRIBUTE_EQUALS_PATTERN.match(condition)
    if attribute_match:
        attr = attribute_match.group(1)
        value = attribute_match.group(2) if attribute_match.group(2) is not None else attribute_match.group(3)
        if attr == "id" and is_css_safe_identifier(value):
            return f"#{value}"
        return f'[{attr}="{escape_css_string(value)}"]'

    class_match = _CLASS_CONTAINS_PATTERN.match(condition)
    if class_match:
        value = class_match.group(1)
        if is_css_safe_identifier(value):
            return f".{value}"
        return f'[class~="{escape_css_string(value)}"]'

    position_match = _POSITION_PATTERN.match(condition)
    if position_match:
        return f":nth-of-type({position_match.group(1)})"
    return None


def _split_predicates(text: str) -> list[str] | None:
    predicates: list[str] = []
    index = 0
    while index < len(text):
        if text[index] != "[":
            return None
        depth = 0
        quote: str | None = None
        start = index
        while index < len(text):
            ch = text[index]
            if quote:
                if ch == quote:
                    quote = None
            elif ch in "\"'":
                quote = ch
            elif ch == "[":
                depth += 1
            elif ch == "]":
                depth -= 1
                if depth == 0:
                    break
            index += 1
        if index >= len(text):
            return None
        inner = text[start + 1:index].strip()
        if not inner:
            return None
        predicates.append(inner)
        index += 1
    return predicates


def _split_top_level(text: str, separator: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    quote: str | None = None
    start = 0
    index = 0
    while index < len(text):
        ch = text[index]
        if quote:
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch in "[(":
            depth += 1
        elif ch in "])":
            depth = max(0, depth - 1)
        elif depth == 0 and text.startswith(separator, index):
            parts.append(text[start:index])
            index += len(separator)
            start = index
            continue
        index += 1
    parts.append(text[start:])
    return parts


def _unquote(value: str) -> str:
    text = value.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return text[1:-1]
    return text.strip("\"'")
