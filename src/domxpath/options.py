from __future__ import annotations

from dataclasses import replace

from .models import IndexingStrategy, Settings, XPathOptions

DEFAULT_UNIQUE_ATTRIBUTES = (
    "data-testid",
    "data-test",
    "aria-label",
    "aria-labelledby",
    "name",
    "class",
)

INDEXING_STRATEGIES: tuple[IndexingStrategy, ...] = ("auto", "always", "never")

DEFAULT_OPTIONS = Settings(
    prefer_id=True,
    prefer_unique_attributes=DEFAULT_UNIQUE_ATTRIBUTES,
    min_index="auto",
    root=None,
    namespace_resolver=None,
)


def normalize_index_strategy(value: str | None) -> IndexingStrategy:
    text = str(value or "").strip().lower()
    for strategy in INDEXING_STRATEGIES:
        if text == strategy:
            return strategy
    return DEFAULT_OPTIONS.min_index


def normalize_options(options: XPathOptions | None = None) -> Settings:
    if options is None:
        return DEFAULT_OPTIONS

    attributes = tuple(item for item in (options.prefer_unique_attributes or ()) if item)
    return Settings(
        prefer_id=DEFAULT_OPTIONS.prefer_id if options.prefer_id is None else bool(options.prefer_id),
        prefer_unique_attributes=attributes or DEFAULT_OPTIONS.prefer_unique_attributes,
        min_index=normalize_index_strategy(options.min_index),
        root=options.root,
        namespace_resolver=(
            options.namespace_resolver
            if options.namespace_resolver is not None
            else DEFAULT_OPTIONS.namespace_resolver
        ),
    )


def merge_options(defaults: XPathOptions | None, overrides: XPathOptions | None) -> XPathOptions | None:
    if defaults is None:
        return overrides
    if overrides is None:
        return defaults

    return replace(
        defaults,
        prefer_id=defaults.prefer_id if overrides.prefer_id is None else overrides.prefer_id,
        prefer_unique_attributes=(
            list(overrides.prefer_unique_attributes)
            if overrides.prefer_unique_attributes
            else defaults.prefer_unique_attributes
        ),
        min_index=overrides.min_index or defaults.min_index,
        root=defaults.root if overrides.root is None else overrides.root,
        namespace_resolver=(
            defaults.namespace_resolver if overrides.namespace_resolver is None else overrides.namespace_resolver
        ),
    )
