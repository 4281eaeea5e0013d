from __future__ import annotations

from typing import Any, Literal, Sequence

from cssselect import GenericTranslator, SelectorError
from lxml import etree

from .dom import (
    create_namespace_map,
    document_element,
    evaluate,
    get_document,
    is_document,
    is_element,
    iter_elements,
)
from .generator import XPathGenerator, create_xpath_generator
from .models import Document, Element, Scope, XPathOptions
from .selector_rules import escape_css_string, escape_xpath_string, normalize_xpath

MultipleMode = Literal["first", "all"]

_FORM_CONTROLS = ("input", "select", "textarea", "button")
_TRANSLATOR = GenericTranslator()


def _generator(generator: XPathGenerator | None, document: Document) -> XPathGenerator:
    return generator if generator is not None else create_xpath_generator(document=document)


def _xpaths_for(
    elements: Sequence[Element],
    document: Document,
    options: XPathOptions | None,
    multiple: MultipleMode,
    generator: XPathGenerator | None,
) -> str | list[str] | None:
    if not elements:
        return None
    active = _generator(generator, document)
    if multiple == "all":
        return [active.get_xpath_for_node(element, options) for element in elements]
    return active.get_xpath_for_node(elements[0], options)


def query_selector_all(scope: Scope, selector: str) -> list[Element]:
    root = document_element(scope) if is_document(scope) else scope
    if root is None:
        return []
    expression = _TRANSLATOR.css_to_xpath(selector)
    return [item for item in evaluate(expression, root) if is_element(item)]


def get_element_by_xpath(
    xpath: str,
    context: Scope,
    options: XPathOptions | None = None,
    generator: XPathGenerator | None = None,
) -> Element | None:
    return _generator(generator, get_document(context)).resolve_xpath(xpath, context, options)


def get_element_text(element: Element | None, trim: bool = True) -> str:
    if element is None:
        return ""
    text = "".join(element.itertext())
    return text.strip() if trim else text


def get_xpath_by_id(
    document: Document,
    element_id: str,
    options: XPathOptions | None = None,
    generator: XPathGenerator | None = None,
) -> str | None:
    matches = [item for item in evaluate(f"//*[@id={escape_xpath_string(element_id)}]", document) if is_element(item)]
    if not matches:
        return None
    return _generator(generator, document).get_xpath_for_node(matches[0], options)


def get_xpath_by_class(
    document: Document,
    class_name: str,
    options: XPathOptions | None = None,
    multiple: MultipleMode = "first",
    generator: XPathGenerator | None = None,
) -> str | list[str] | None:
    tokens = class_name.split()
    matches = [item for item in iter_elements(document) if set(tokens) <= set((item.get("class") or "").split())]
    return _xpaths_for(matches if tokens else [], document, options, multiple, generator)


def get_xpath_by_tag(
    document: Document,
    tag: str,
    options: XPathOptions | None = None,
    multiple: MultipleMode = "first",
    generator: XPathGenerator | None = None,
) -> str | list[str] | None:
    wanted = tag.strip()
    matches = [item for item in iter_elements(document) if wanted == "*" or etree.QName(item).localname == wanted]
    return _xpaths_for(matches, document, options, multiple, generator)


def get_xpath_by_label(
    document: Document,
    label_text: str,
    options: XPathOptions | None = None,
    multiple: MultipleMode = "first",
    generator: XPathGenerator | None = None,
) -> str | list[str] | None:
    labels = [item for item in iter_elements(document) if item.tag == "label" and get_element_text(item) == label_text]

    controls: list[Element] = []
    for label in labels:
        target_id = label.get("for")
        if target_id:
            target = evaluate(f"//*[@id={escape_xpath_string(target_id)}]", document)
            if target and is_element(target[0]):
                controls.append(target[0])
            continue
        nested = next(label.iter(*_FORM_CONTROLS), None)
        if nested is not None:
            controls.append(nested)

    return _xpaths_for(controls, document, options, multiple, generator)


def get_xpath_by_attribute(
    document: Document,
    attribute_name: str,
    attribute_value: str | None = None,
    options: XPathOptions | None = None,
    multiple: MultipleMode = "first",
    generator: XPathGenerator | None = None,
) -> str | list[str] | None:
    if attribute_value:
        selector = f'[{attribute_name}="{escape_css_string(attribute_value)}"]'
    else:
        selector = f"[{attribute_name}]"
    try:
        matches = query_selector_all(document, selector)
    except SelectorError:
        return None
    return _xpaths_for(matches, document, options, multiple, generator)


def get_xpath_by_selector(
    document: Document,
    selector: str,
    options: XPathOptions | None = None,
    multiple: MultipleMode = "first",
    generator: XPathGenerator | None = None,
) -> str | list[str] | None:
    """Generate XPath for the elements matched by a CSS ``selector``.

    Invalid selectors propagate ``cssselect.SelectorError``.
    """
    return _xpaths_for(query_selector_all(document, selector), document, options, multiple, generator)


def get_xpath_by_text(
    document: Document,
    text: str,
    exact: bool = True,
    options: XPathOptions | None = None,
    multiple: MultipleMode = "first",
    generator: XPathGenerator | None = None,
) -> str | list[str] | None:
    matches: list[Element] = []
    for element in iter_elements(document):
        content = get_element_text(element)
        if (content == text) if exact else (text in content):
            matches.append(element)
    return _xpaths_for(matches, document, options, multiple, generator)


def select(expression: str, context: Scope | None) -> list[Any]:
    """Evaluate ``expression`` and return every matching node in document order."""
    normalized = normalize_xpath(expression)
    if not normalized or context is None or get_document(context) is None:
        return []
    try:
        return evaluate(normalized, context, create_namespace_map(context))
    except etree.XPathError:
        return []


def select_one(expression: str, context: Scope | None) -> Any:
    nodes = select(expression, context)
    return nodes[0] if nodes else None


def is_xpath_syntax_valid(expression: str, context: Scope | None = None) -> bool:
    normalized = normalize_xpath(expression)
    if not normalized:
        return False
    try:
        etree.XPath(normalized, namespaces=create_namespace_map(context) if context is not None else None)
    except etree.XPathError:
        return False
    return True


def does_xpath_resolve_to_element(
    expression: str,
    context: Scope,
    options: XPathOptions | None = None,
    generator: XPathGenerator | None = None,
) -> bool:
    return get_element_by_xpath(expression, context, options, generator) is not None


def get_attribute_values(expression: str, context: Scope | None) -> list[str]:
    return [str(item) for item in select(expression, context) if getattr(item, "is_attribute", False)]


def get_attribute_value(expression: str, context: Scope | None) -> str | None:
    values = get_attribute_values(expression, context)
    return values[0] if values else None
