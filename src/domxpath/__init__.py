from __future__ import annotations

from .converters import css_to_xpath, xpath_to_css
from .errors import (
    DocumentLoadError,
    DomXPathError,
    EmptySelectorError,
    NodeOutsideRootError,
    RootResolutionError,
    UnsupportedSelectorError,
)
from .generator import XPathGenerator, XPathGeneratorConfig, create_xpath_generator
from .heuristics import DEFAULT_HEURISTICS, Heuristic, HeuristicRegistry, create_heuristic_registry
from .models import GenerationContext, IndexingStrategy, SegmentContext, SelectionResult, Settings, XPathOptions
from .options import DEFAULT_OPTIONS, merge_options, normalize_options
from .selection import Range, Selection
from .selector_rules import normalize_xpath

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_HEURISTICS",
    "DEFAULT_OPTIONS",
    "DocumentLoadError",
    "DomXPathError",
    "EmptySelectorError",
    "GenerationContext",
    "Heuristic",
    "HeuristicRegistry",
    "IndexingStrategy",
    "NodeOutsideRootError",
    "Range",
    "RootResolutionError",
    "SegmentContext",
    "Selection",
    "SelectionResult",
    "Settings",
    "UnsupportedSelectorError",
    "XPathGenerator",
    "XPathGeneratorConfig",
    "XPathOptions",
    "create_heuristic_registry",
    "create_xpath_generator",
    "css_to_xpath",
    "merge_options",
    "normalize_options",
    "normalize_xpath",
    "xpath_to_css",
]
