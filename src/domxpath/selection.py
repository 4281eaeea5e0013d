from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from .dom import (
    document_element,
    find_common_ancestor_element,
    get_containing_element,
    get_document,
    is_document,
    is_element,
    parent_element,
)
from .models import Element

# Boundary containers are elements, documents, or the text strings lxml
# returns from ``text()`` queries. Element offsets count child nodes the way
# the DOM does: a non-empty ``.text`` and every non-empty ``.tail`` each
# occupy one slot next to the child elements.

Slot = tuple[Any, ...]


@dataclass(slots=True)
class Range:
    start_container: Any
    start_offset: int = 0
    end_container: Any = None
    end_offset: int = 0

    def __post_init__(self) -> None:
        if self.end_container is None:
            self.end_container = self.start_container
            self.end_offset = max(self.end_offset, self.start_offset)

    @classmethod
    def around(cls, element: Element) -> Range:
        selected = cls(element)
        selected.select_node_contents(element)
        return selected

    @property
    def collapsed(self) -> bool:
        return self.start_container is self.end_container and self.start_offset == self.end_offset

    @property
    def common_ancestor_container(self) -> Element | None:
        elements = [
            item
            for item in (
                get_containing_element(self.start_container),
                get_containing_element(self.end_container),
            )
            if item is not None
        ]
        return find_common_ancestor_element(elements)

    def clone(self) -> Range:
        return Range(self.start_container, self.start_offset, self.end_container, self.end_offset)

    def select_node_contents(self, element: Element) -> None:
        self.start_container = element
        self.start_offset = 0
        self.end_container = element
        self.end_offset = len(child_slots(element))

    def set_start_before(self, element: Element) -> None:
        self.start_container, self.start_offset = _position_beside(element, after=False)

    def set_end_after(self, element: Element) -> None:
        self.end_container, self.end_offset = _position_beside(element, after=True)

    def to_string(self) -> str:
        root = _tree_root(self.start_container)
        if root is None:
            return ""

        tokens = list(_walk_tokens(root))
        start = _locate(tokens, self.start_container, self.start_offset)
        end = _locate(tokens, self.end_container, self.end_offset)
        if start is None or end is None or end < start:
            return ""

        (start_index, start_char), (end_index, end_char) = start, end
        pieces: list[str] = []
        for index in range(start_index, end_index + 1):
            token = tokens[index]
            if token[0] != "text":
                continue
            text = token[3]
            low = start_char if index == start_index else 0
            high = end_char if index == end_index else len(text)
            pieces.append(text[low:high])
        return "".join(pieces)

    def __str__(self) -> str:
        return self.to_string()


@dataclass(slots=True)
class Selection:
    ranges: list[Range] = field(default_factory=list)

    @property
    def range_count(self) -> int:
        return len(self.ranges)

    def get_range_at(self, index: int) -> Range:
        if index < 0 or index >= len(self.ranges):
            raise IndexError(f"Selection has no range at index {index}.")
        return self.ranges[index]

    def add_range(self, selected: Range) -> None:
        self.ranges.append(selected)

    def remove_all_ranges(self) -> None:
        self.ranges.clear()

    def to_string(self) -> str:
        return "".join(item.to_string() for item in self.ranges)

    def __str__(self) -> str:
        return self.to_string()


def child_slots(element: Element) -> list[Slot]:
    slots: list[Slot] = []
    if element.text:
        slots.append(("text", element, False))
    for child in element:
        slots.append(("start", child))
        if child.tail:
            slots.append(("text", child, True))
    return slots


def _position_beside(element: Element, *, after: bool) -> tuple[Any, int]:
    parent = parent_element(element)
    if parent is None:
        return element.getroottree(), 1 if after else 0
    slots = child_slots(parent)
    index = next(position for position, slot in enumerate(slots) if slot[0] == "start" and slot[1] is element)
    return parent, index + 1 if after else index


def _tree_root(container: Any) -> Element | None:
    if is_document(container):
        return document_element(container)
    element = get_containing_element(container)
    if element is None:
        return None
    return document_element(get_document(element))


def _walk_tokens(root: Element, node: Any = None) -> Iterator[Slot]:
    current = root if node is None else node
    yield ("start", current)
    if is_element(current) and current.text:
        yield ("text", current, False, current.text)
    for child in current:
        yield from _walk_tokens(root, child)
    yield ("end", current)
    if current is not root and current.tail:
        yield ("text", current, True, current.tail)


def _locate(tokens: list[Slot], container: Any, offset: int) -> tuple[int, int] | None:
    if is_document(container):
        root = document_element(container)
        if root is None:
            return None
        return _find_token(tokens, ("start", root) if offset <= 0 else ("end", root))

    if isinstance(container, str):
        owner = getattr(container, "getparent", lambda: None)()
        if owner is None:
            return None
        found = _find_token(tokens, ("text", owner, bool(getattr(container, "is_tail", False))))
        if found is None:
            return None
        index = found[0]
        return index, max(0, min(offset, len(tokens[index][3])))

    if not is_element(container):
        return None
    slots = child_slots(container)
    if 0 <= offset < len(slots):
        return _find_token(tokens, slots[offset])
    return _find_token(tokens, ("end", container))


def _find_token(tokens: list[Slot], key: Slot) -> tuple[int, int] | None:
    width = len(key)
    for index, token in enumerate(tokens):
        if token[0] != key[0] or token[1] is not key[1]:
            continue
        if width > 2 and token[2] != key[2]:
            continue
        return index, 0
    return None
