from __future__ import annotations


class DomXPathError(Exception):
    """Base class for errors raised by domxpath."""


class RootResolutionError(DomXPathError):
    """Raised when no root element can be determined for a node."""


class NodeOutsideRootError(DomXPathError):
    """Raised when the target node is not inside the configured root."""


class EmptySelectorError(DomXPathError, ValueError):
    """Raised when a CSS selector is blank."""


class UnsupportedSelectorError(DomXPathError, ValueError):
    """Raised when a CSS selector cannot be translated to XPath."""


class DocumentLoadError(DomXPathError):
    """Raised when a document cannot be read, fetched or parsed."""
