from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TextIO
from urllib.parse import urlparse

from lxml import etree
from lxml import html as lxml_html

from .browser import RenderedPage, render_url
from .errors import DocumentLoadError
from .models import Document

logger = logging.getLogger("domxpath.loader")

Renderer = Callable[[str], RenderedPage]


@dataclass(frozen=True, slots=True)
class LoadedDocument:
    document: Document
    html: str
    source: str


def parse_html(markup: str) -> Document:
    if not markup.strip():
        raise DocumentLoadError("Document is empty.")
    try:
        root = lxml_html.document_fromstring(markup)
    except (etree.ParserError, ValueError) as exc:
        raise DocumentLoadError(f"Unable to parse HTML: {exc}") from exc
    return root.getroottree()


def load_document(
    file: str | Path | None = None,
    url: str | None = None,
    *,
    allow_http: bool = False,
    stdin: TextIO | None = None,
    renderer: Renderer = render_url,
) -> LoadedDocument:
    if file:
        path = Path(file)
        try:
            markup = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise DocumentLoadError(f"Unable to read {path}: {exc}") from exc
        return LoadedDocument(parse_html(markup), markup, str(path))

    if url:
        scheme = urlparse(url).scheme.lower()
        if scheme not in {"http", "https"}:
            raise DocumentLoadError(f"Unsupported URL scheme: {scheme or '(none)'}")
        if scheme != "https" and not allow_http:
            raise DocumentLoadError("Refusing to fetch non-HTTPS resource without --allow-http flag.")
        rendered = renderer(url)
        logger.info("Loaded %s (status %s).", rendered.url, rendered.status)
        return LoadedDocument(parse_html(rendered.html), rendered.html, rendered.url)

    stream = stdin if stdin is not None else sys.stdin
    markup = stream.read()
    if not markup.strip():
        raise DocumentLoadError("No input provided. Supply --file, --url, or pipe HTML via stdin.")
    return LoadedDocument(parse_html(markup), markup, "<stdin>")
