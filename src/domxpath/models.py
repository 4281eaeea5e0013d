from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, Mapping, Sequence, Union

from lxml import etree

if TYPE_CHECKING:
    from .selection import Range

IndexingStrategy = Literal["auto", "always", "never"]

Element = etree._Element
Document = etree._ElementTree
Scope = Union[etree._Element, etree._ElementTree]


@dataclass(frozen=True, slots=True)
class XPathOptions:
    prefer_id: bool | None = None
    prefer_unique_attributes: Sequence[str] | None = None
    min_index: IndexingStrategy | None = None
    root: Scope | None = None
    namespace_resolver: Mapping[str, str] | None = None


@dataclass(frozen=True, slots=True)
class Settings:
    prefer_id: bool
    prefer_unique_attributes: tuple[str, ...]
    min_index: IndexingStrategy
    root: Scope | None
    namespace_resolver: Mapping[str, str] | None


@dataclass(frozen=True, slots=True)
class GenerationContext:
    node: Element
    doc: Document
    root: Element
    options: Settings
    ancestors: tuple[Element, ...]


@dataclass(frozen=True, slots=True)
class SegmentContext:
    node: Element
    segment: str
    index_strategy: IndexingStrategy


@dataclass(frozen=True, slots=True)
class SelectorResult:
    selector: str
    settings: Settings
    root: Element
    segments: tuple[str, ...] | None = None


@dataclass(frozen=True, slots=True)
class SelectionResult:
    text: str
    range: Range | None
    start_xpath: str | None
    end_xpath: str | None
    common_xpath: str | None

    @classmethod
    def empty(cls) -> SelectionResult:
        return cls(text="", range=None, start_xpath=None, end_xpath=None, common_xpath=None)

    def as_dict(self, include_range: bool = False) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "text": self.text,
            "startXPath": self.start_xpath,
            "endXPath": self.end_xpath,
            "commonXPath": self.common_xpath,
        }
        if include_range:
            payload["range"] = self.range
        return payload
