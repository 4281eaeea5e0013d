from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from cssselect import GenericTranslator, SelectorError
from lxml import etree

from .dom import document_element, evaluate, is_document, is_element
from .models import Element, Scope
from .selector_rules import escape_css_string

logger = logging.getLogger("domxpath.validation")

_TRANSLATOR = GenericTranslator()


@dataclass(frozen=True, slots=True)
class LocatorValidation:
    unique: bool
    match_count: int
    message: str


def _scope_root(scope: Scope) -> Element | None:
    if is_document(scope):
        return document_element(scope)
    return scope if is_element(scope) else None


def count_attribute_matches(scope: Scope, attribute: str, value: str, limit: int | None = None) -> int:
    root = _scope_root(scope)
    if root is None:
        return 0

    count = 0
    stack: list[Element] = [root]
    while stack:
        current = stack.pop()
        if current.get(attribute) == value:
            count += 1
            if limit is not None and count >= limit:
                break
        stack.extend(child for child in current if is_element(child))
    return count


def _query_attribute_matches(root: Element, attribute: str, value: str) -> int:
    selector = f'[{attribute}="{escape_css_string(value)}"]'
    expression = _TRANSLATOR.css_to_xpath(selector)
    return sum(1 for item in evaluate(expression, root) if is_element(item))


def is_attribute_unique(node: Element, attribute: str, scope: Scope | None) -> bool:
    if scope is None:
        return False

    root = _scope_root(scope)
    if root is None:
        return False

    value = node.get(attribute)
    if value is None:
        return False

    try:
        count = _query_attribute_matches(root, attribute, value)
    except (SelectorError, etree.XPathError) as exc:
        logger.debug("Native query failed for [%s], counting manually: %s", attribute, exc)
        count = count_attribute_matches(root, attribute, value, limit=2)

    return count == 1


def count_xpath_matches(context: Scope, expression: str, namespaces: Mapping[str, str] | None = None) -> int:
    text = str(expression or "").strip()
    if not text:
        return 0
    try:
        return sum(1 for item in evaluate(text, context, namespaces) if is_element(item))
    except etree.XPathError:
        return 0


def validate_locator(
    context: Scope,
    expression: str,
    target: Any = None,
    namespaces: Mapping[str, str] | None = None,
) -> LocatorValidation:
    text = str(expression or "").strip()
    if not text:
        return LocatorValidation(False, 0, "Locator is empty.")
    try:
        matches = [item for item in evaluate(text, context, namespaces) if is_element(item)]
    except etree.XPathError:
        return LocatorValidation(False, 0, "Locator could not be evaluated.")

    if len(matches) != 1:
        return LocatorValidation(False, len(matches), "Locator is not unique in document.")
    if target is not None and matches[0] is not target:
        return LocatorValidation(False, 1, "Locator matches a different element.")
    return LocatorValidation(True, 1, "Locator is unique.")
