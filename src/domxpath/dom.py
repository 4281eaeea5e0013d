from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from lxml import etree

from .models import Document, Element, Scope, Settings


def is_element(node: Any) -> bool:
    return isinstance(node, etree._Element) and isinstance(node.tag, str)


def is_document(node: Any) -> bool:
    return isinstance(node, etree._ElementTree)


def get_document(context: Any) -> Document | None:
    if is_document(context):
        return context
    if isinstance(context, etree._Element):
        return context.getroottree()
    return None


def document_element(doc: Document | None) -> Element | None:
    if doc is None:
        return None
    root = doc.getroot()
    return root if is_element(root) else None


def tag_name(node: Element) -> str:
    qname = etree.QName(node)
    if qname.namespace and node.prefix:
        return f"{node.prefix}:{qname.localname}"
    return qname.localname


def parent_element(node: Any) -> Element | None:
    getparent = getattr(node, "getparent", None)
    if getparent is None:
        return None
    parent = getparent()
    return parent if is_element(parent) else None


def element_children(node: Element) -> list[Element]:
    return [child for child in node if is_element(child)]


def contains(ancestor: Element, node: Element) -> bool:
    if ancestor is node:
        return True
    return any(item is ancestor for item in node.iterancestors())


def get_root_element(node: Element, options: Settings, doc: Document | None) -> Element | None:
    if is_element(options.root):
        return options.root
    if is_document(options.root):
        return document_element(options.root)
    root = document_element(doc)
    if root is not None:
        return root
    return document_element(node.getroottree())


def get_containing_element(node: Any) -> Element | None:
    """Return the element that holds a selection boundary container.

    Elements map to themselves, documents to their root element and
    fragments (plain sequences of nodes) to their first element. Text
    results returned by lxml map to their owning element; tail text belongs
    to the parent of the element it trails.
    """
    if node is None:
        return None
    if is_element(node):
        return node
    if is_document(node):
        return document_element(node)
    if isinstance(node, Sequence) and not isinstance(node, str):
        return next((item for item in node if is_element(item)), None)
    if isinstance(node, str):
        if getattr(node, "is_attribute", False):
            return None
        owner = parent_element(node)
        if owner is not None and getattr(node, "is_tail", False):
            return parent_element(owner)
        return owner
    return parent_element(node)


def has_same_tag_siblings(node: Element) -> bool:
    parent = node.getparent()
    if parent is None:
        return False
    for sibling in parent:
        if sibling is node or not is_element(sibling):
            continue
        if sibling.tag == node.tag:
            return True
    return False


def get_element_index(node: Element) -> int:
    index = 1
    for sibling in node.itersiblings(preceding=True):
        if is_element(sibling) and sibling.tag == node.tag:
            index += 1
    return index


def find_common_ancestor_element(nodes: Sequence[Element]) -> Element | None:
    if not nodes:
        return None

    candidate: Element | None = nodes[0]
    while candidate is not None:
        current = candidate
        if all(contains(current, node) for node in nodes):
            return current
        candidate = parent_element(current)
    return None


def create_namespace_map(context: Scope) -> dict[str, str] | None:
    element = document_element(context) if is_document(context) else context
    if not is_element(element):
        return None
    mapping = {prefix: uri for prefix, uri in element.nsmap.items() if prefix}
    return mapping or None


def evaluate(expression: str, context: Scope, namespaces: Mapping[str, str] | None = None) -> list[Any]:
    """Evaluate ``expression`` and return its node-set as a list.

    Scalar results (numbers, strings, booleans) yield an empty list. lxml
    errors for malformed expressions propagate to the caller.
    """
    result = context.xpath(expression, namespaces=dict(namespaces) if namespaces else None)
    if isinstance(result, list):
        return result
    return []


def iter_elements(scope: Scope) -> Iterable[Element]:
    root = document_element(scope) if is_document(scope) else scope
    if root is None:
        return iter(())
    return (item for item in root.iter() if is_element(item))
