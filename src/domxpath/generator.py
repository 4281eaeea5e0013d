from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Sequence

from lxml import etree

from .dom import (
    create_namespace_map,
    evaluate,
    find_common_ancestor_element,
    get_containing_element,
    get_document,
    get_element_index,
    get_root_element,
    has_same_tag_siblings,
    is_element,
    parent_element,
    tag_name,
)
from .errors import NodeOutsideRootError, RootResolutionError
from .heuristics import Heuristic, HeuristicRegistry
from .models import (
    Document,
    Element,
    GenerationContext,
    IndexingStrategy,
    Scope,
    SegmentContext,
    SelectionResult,
    SelectorResult,
    Settings,
    XPathOptions,
)
from .options import merge_options, normalize_options
from .selection import Selection
from .selector_rules import normalize_xpath, strip_segment_index
from .validation import validate_locator

logger = logging.getLogger("domxpath.generator")


@dataclass(frozen=True, slots=True)
class XPathGeneratorConfig:
    default_options: XPathOptions | None = None
    plugins: Sequence[Heuristic] = field(default_factory=tuple)
    document: Document | None = None


@dataclass(frozen=True, slots=True)
class EvaluationPlan:
    expression: str | None = None
    node: Element | None = None


def should_include_index(node: Element, strategy: IndexingStrategy) -> bool:
    if strategy == "always":
        return True
    if strategy == "never":
        return False
    return has_same_tag_siblings(node)


def build_segment(node: Element, options: Settings) -> str:
    segment = tag_name(node)
    if should_include_index(node, options.min_index):
        segment += f"[{get_element_index(node)}]"
    return segment


def build_evaluation_plan(xpath: str, context: Any) -> EvaluationPlan:
    if is_element(context):
        tag = tag_name(context)
        if xpath == f"/{tag}":
            return EvaluationPlan(node=context)
        if xpath.startswith(f"/{tag}/"):
            return EvaluationPlan(expression=f"./{xpath[len(tag) + 2:]}")
    return EvaluationPlan(expression=xpath)


def build_shortest_candidates(segments: Sequence[str]) -> list[str]:
    if not segments:
        return []

    stripped = [strip_segment_index(segment) for segment in segments]
    raw: list[str] = [
        "/" + "/".join(segments),
        "/" + "/".join(stripped),
    ]
    for start in range(len(segments)):
        raw.append("//" + "/".join(segments[start:]))
        raw.append("//" + "/".join(stripped[start:]))

    seen: set[str] = set()
    candidates: list[str] = []
    for item in raw:
        normalized = normalize_xpath(item)
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        candidates.append(normalized)
    return sorted(candidates, key=len)


class XPathGenerator:
    def __init__(self, config: XPathGeneratorConfig | None = None) -> None:
        self.config = config or XPathGeneratorConfig()
        self.registry = HeuristicRegistry()
        if self.config.plugins:
            self.registry.register(*self.config.plugins)

    @property
    def heuristics(self) -> list[Heuristic]:
        return self.registry.list()

    def register(self, *heuristics: Heuristic) -> None:
        self.registry.register(*heuristics)

    def normalize_xpath(self, xpath: str) -> str:
        return normalize_xpath(xpath)

    def _settings(self, options: XPathOptions | None) -> Settings:
        return normalize_options(merge_options(self.config.default_options, options))

    def resolve_xpath(
        self,
        xpath: str,
        context: Scope | None = None,
        options: XPathOptions | None = None,
    ) -> Element | None:
        normalized = normalize_xpath(xpath)
        if not normalized:
            return None

        settings = self._settings(options)
        eval_context = _first_present(settings.root, context, self.config.document)
        if eval_context is None or get_document(eval_context) is None:
            return None

        namespaces = settings.namespace_resolver or create_namespace_map(eval_context)
        plan = build_evaluation_plan(normalized, eval_context)
        if plan.node is not None:
            return plan.node

        try:
            matches = evaluate(plan.expression or normalized, eval_context, namespaces)
        except etree.XPathError as exc:
            logger.debug("XPath evaluation failed for %r: %s", normalized, exc)
            return None
        if not matches:
            return None
        first = matches[0]
        return first if is_element(first) else None

    def get_xpath_for_node(self, node: Element, options: XPathOptions | None = None) -> str:
        """Build a stable XPath for ``node``.

        Segments use the local name, prefixed when the element carries a
        namespace prefix. Elements in a default (unprefixed) namespace get a
        bare local name, so the result does not resolve back to them.
        """
        return self._build_selector(node, options).selector

    def get_shortest_unique_xpath(self, node: Element, options: XPathOptions | None = None) -> str:
        result = self._build_selector(node, options)
        if not result.segments:
            return result.selector

        settings = result.settings
        eval_context = _first_present(settings.root, result.root)
        namespaces = settings.namespace_resolver or create_namespace_map(eval_context)

        for candidate in build_shortest_candidates(result.segments):
            if self._matches_unique_node(candidate, eval_context, namespaces, node):
                logger.debug("Shortest unique XPath for <%s>: %s", tag_name(node), candidate)
                return candidate
        logger.debug("No shorter unique XPath for <%s>, using %s", tag_name(node), result.selector)
        return result.selector

    def find_common_ancestor_xpath(
        self,
        nodes: Iterable[Any],
        options: XPathOptions | None = None,
    ) -> str | None:
        elements = [node for node in (nodes or ()) if is_element(node)]
        if not elements:
            return None

        ancestor = find_common_ancestor_element(elements)
        if ancestor is None:
            return None
        return self.get_xpath_for_node(ancestor, options)

    def get_xpath_for_selection(
        self,
        selection: Selection | None = None,
        options: XPathOptions | None = None,
    ) -> SelectionResult:
        if selection is None or selection.range_count == 0:
            return SelectionResult.empty()

        selected_range = selection.get_range_at(0).clone()
        start_element = get_containing_element(selected_range.start_container)
        end_element = get_containing_element(selected_range.end_container)

        start_xpath = self.get_xpath_for_node(start_element, options) if start_element is not None else None
        end_xpath = self.get_xpath_for_node(end_element, options) if end_element is not None else None

        boundary_elements = [item for item in (start_element, end_element) if is_element(item)]
        common_xpath = self.find_common_ancestor_xpath(boundary_elements, options) if boundary_elements else None

        return SelectionResult(
            text=selection.to_string(),
            range=selected_range,
            start_xpath=start_xpath,
            end_xpath=end_xpath,
            common_xpath=common_xpath,
        )

    def is_xpath_match(
        self,
        node: Any,
        xpath: str,
        context: Scope | None = None,
        options: XPathOptions | None = None,
    ) -> bool:
        if not is_element(node):
            return False
        resolved = self.resolve_xpath(xpath, _first_present(context, node.getroottree()), options)
        return resolved is node

    def _resolve_root(self, node: Element, settings: Settings) -> Element:
        root = get_root_element(node, settings, get_document(node))
        if root is None:
            raise RootResolutionError("Unable to determine a document root for XPath computation.")
        return root

    def _build_selector(self, node: Element, options: XPathOptions | None) -> SelectorResult:
        if not is_element(node):
            raise TypeError("Expected an element to compute XPath.")

        settings = self._settings(options)
        doc = get_document(node)
        root = self._resolve_root(node, settings)

        ancestors: list[Element] = []
        walker: Element | None = node
        while walker is not None:
            ancestors.append(walker)
            if walker is root:
                break
            walker = parent_element(walker)
        if ancestors[-1] is not root:
            raise NodeOutsideRootError("The provided node does not belong to the configured root.")

        heuristics = self.registry.list()
        base_context = GenerationContext(
            node=node,
            doc=doc,
            root=root,
            options=settings,
            ancestors=tuple(ancestors),
        )

        for heuristic in heuristics:
            if heuristic.provide_selector is None:
                continue
            selector = heuristic.provide_selector(base_context)
            if selector:
                logger.debug("Heuristic %s supplied %s", heuristic.name, selector)
                return SelectorResult(selector=normalize_xpath(selector), settings=settings, root=root)

        segments: list[str] = []
        for current in ancestors:
            context = replace(base_context, node=current)
            for heuristic in heuristics:
                if heuristic.before_segment is not None:
                    heuristic.before_segment(context)

            segment = build_segment(current, settings)
            for heuristic in heuristics:
                if heuristic.decorate_segment is None:
                    continue
                decorated = heuristic.decorate_segment(
                    SegmentContext(node=current, segment=segment, index_strategy=settings.min_index)
                )
                if isinstance(decorated, str) and decorated:
                    segment = decorated
            segments.insert(0, segment)

        normalized = normalize_xpath("/" + "/".join(segments))
        finalized: tuple[str, ...] | None = tuple(segments)
        for heuristic in heuristics:
            if heuristic.after_generate is None:
                continue
            adjusted = heuristic.after_generate(base_context, normalized)
            if isinstance(adjusted, str) and adjusted:
                updated = normalize_xpath(adjusted)
                if updated != normalized:
                    finalized = None
                normalized = updated

        return SelectorResult(selector=normalized, settings=settings, root=root, segments=finalized)

    def _matches_unique_node(
        self,
        xpath: str,
        context: Scope,
        namespaces: Mapping[str, str] | None,
        target: Element,
    ) -> bool:
        plan = build_evaluation_plan(xpath, context)
        if plan.node is not None:
            return plan.node is target
        return validate_locator(context, plan.expression or xpath, target, namespaces).unique


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def create_xpath_generator(
    config: XPathGeneratorConfig | None = None,
    *,
    default_options: XPathOptions | None = None,
    plugins: Sequence[Heuristic] | None = None,
    document: Document | None = None,
) -> XPathGenerator:
    resolved = config or XPathGeneratorConfig()
    if default_options is not None or plugins or document is not None:
        resolved = replace(
            resolved,
            default_options=default_options if default_options is not None else resolved.default_options,
            plugins=tuple(plugins) if plugins else resolved.plugins,
            document=document if document is not None else resolved.document,
        )
    return XPathGenerator(resolved)
