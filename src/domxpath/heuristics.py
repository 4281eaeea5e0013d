from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from .dom import document_element, is_document, is_element, tag_name
from .models import GenerationContext, Scope, SegmentContext, Settings
from .selector_rules import build_attribute_selector, escape_xpath_string
from .validation import is_attribute_unique

SelectorHook = Callable[[GenerationContext], "str | None"]
BeforeSegmentHook = Callable[[GenerationContext], None]
DecorateSegmentHook = Callable[[SegmentContext], "str | None"]
AfterGenerateHook = Callable[[GenerationContext, str], "str | None"]
AttributeVetoHook = Callable[[GenerationContext, str, str], "bool | None"]


@dataclass(frozen=True, slots=True)
class Heuristic:
    """A named strategy consulted while building an XPath.

    Every hook is optional. ``should_use_attribute`` is reserved for
    extensions and is not consulted by the built-in heuristics.
    """

    name: str
    provide_selector: SelectorHook | None = None
    before_segment: BeforeSegmentHook | None = None
    decorate_segment: DecorateSegmentHook | None = None
    after_generate: AfterGenerateHook | None = None
    should_use_attribute: AttributeVetoHook | None = None


class HeuristicRegistry:
    def __init__(self, initial: Iterable[Heuristic] | None = None) -> None:
        self._heuristics: list[Heuristic] = list(DEFAULT_HEURISTICS if initial is None else initial)

    def list(self) -> list[Heuristic]:
        return list(self._heuristics)

    def names(self) -> list[str]:
        return [item.name for item in self._heuristics]

    def register(self, *entries: Heuristic) -> None:
        for entry in entries:
            if any(existing.name == entry.name for existing in self._heuristics):
                continue
            self._heuristics.insert(0, entry)

    def __len__(self) -> int:
        return len(self._heuristics)


def create_heuristic_registry(initial: Iterable[Heuristic] | None = None) -> HeuristicRegistry:
    return HeuristicRegistry(initial)


def _uniqueness_scope(options: Settings, context: GenerationContext) -> Scope | None:
    if is_element(options.root) or is_document(options.root):
        return options.root
    return context.node.getroottree()


def _is_custom_root(context: GenerationContext) -> bool:
    root = context.options.root
    return is_element(root) and root is not document_element(context.doc)


def _provide_id_selector(context: GenerationContext) -> str | None:
    node = context.node
    options = context.options
    id_value = node.get("id")
    if not options.prefer_id or not id_value:
        return None
    # Id selectors are document-global and would escape a scoped root.
    if _is_custom_root(context):
        return None
    if not is_attribute_unique(node, "id", _uniqueness_scope(options, context)):
        return None
    return f"//*[@id={escape_xpath_string(id_value)}]"


def _provide_unique_attribute_selector(context: GenerationContext) -> str | None:
    node = context.node
    options = context.options
    if not options.prefer_unique_attributes or _is_custom_root(context):
        return None

    scope = _uniqueness_scope(options, context)
    for attribute in options.prefer_unique_attributes:
        value = node.get(attribute)
        if not value:
            continue
        if is_attribute_unique(node, attribute, scope):
            return build_attribute_selector(attribute, value)
    return None


def _provide_root_selector(context: GenerationContext) -> str | None:
    if context.node is context.root:
        return f"/{tag_name(context.node)}"
    return None


def _decorate_passthrough(context: SegmentContext) -> str | None:
    return context.segment


ID_HEURISTIC = Heuristic(name="default:id", provide_selector=_provide_id_selector)
UNIQUE_ATTRIBUTE_HEURISTIC = Heuristic(
    name="default:unique-attribute",
    provide_selector=_provide_unique_attribute_selector,
)
ROOT_HEURISTIC = Heuristic(name="default:root-element", provide_selector=_provide_root_selector)
SEGMENT_NORMALIZATION_HEURISTIC = Heuristic(
    name="default:segment-normalization",
    decorate_segment=_decorate_passthrough,
)

DEFAULT_HEURISTICS: tuple[Heuristic, ...] = (
    ID_HEURISTIC,
    UNIQUE_ATTRIBUTE_HEURISTIC,
    ROOT_HEURISTIC,
    SEGMENT_NORMALIZATION_HEURISTIC,
)
