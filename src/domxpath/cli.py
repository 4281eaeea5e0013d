from __future__ import annotations

import argparse
import json
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Callable, Sequence, TextIO

from cssselect import SelectorError

from .converters import css_to_xpath, xpath_to_css
from .element_helpers import query_selector_all
from .errors import DomXPathError
from .generator import XPathGenerator, create_xpath_generator
from .loader import LoadedDocument, load_document
from .models import Element, XPathOptions
from .options import INDEXING_STRATEGIES
from .selection import Range, Selection

logger = logging.getLogger("domxpath.cli")

Handler = Callable[[argparse.Namespace, TextIO], Any]


def _get_version() -> str:
    try:
        return version("domxpath")
    except PackageNotFoundError:  # pragma: no cover
        return "dev"


def configure_logging(verbose: bool = False) -> logging.Logger:
    root_logger = logging.getLogger("domxpath")
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if root_logger.handlers:
        return root_logger
    root_logger.propagate = False
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    root_logger.addHandler(handler)
    return root_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="domxpath",
        description="Generate, resolve and convert XPath expressions for HTML documents.",
        epilog=(
            "Examples:\n"
            "  domxpath --file page.html generate 'form button.primary'\n"
            "  curl -s https://example.com | domxpath resolve '//h1'\n"
            "  domxpath --url https://example.com shortest 'a[href]'\n"
            "  domxpath css-to-xpath '#header, .item'\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--file", help="Read HTML from file")
    parser.add_argument("--url", help="Render HTML from URL with Chromium (HTTPS by default)")
    parser.add_argument("--allow-http", action="store_true", help="Permit fetching non-HTTPS URLs")
    parser.add_argument("--json", action="store_true", help="Output JSON payloads")
    parser.add_argument("--verbose", action="store_true", help="Log debug details to stderr")
    parser.add_argument("--no-prefer-id", action="store_true", help="Do not shortcut to id based XPath")
    parser.add_argument(
        "--prefer-attr",
        action="append",
        default=[],
        metavar="NAME",
        help="Attribute to try for unique selectors (repeatable, priority order)",
    )
    parser.add_argument(
        "--min-index",
        choices=INDEXING_STRATEGIES,
        default=None,
        help="Positional index policy (default: auto)",
    )
    parser.add_argument("--root", metavar="CSS", help="CSS selector of the element to scope XPath generation to")
    parser.add_argument("--version", action="version", version=f"domxpath {_get_version()}")

    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate", help="Generate an XPath for the first match of a CSS selector")
    generate.add_argument("selector", help="CSS selector to locate an element")
    generate.set_defaults(handler=handle_generate)

    shortest = commands.add_parser("shortest", help="Generate the shortest unique XPath for a CSS selector match")
    shortest.add_argument("selector", help="CSS selector to locate an element")
    shortest.set_defaults(handler=handle_shortest)

    resolve = commands.add_parser("resolve", help="Resolve an XPath and show details about the matched node")
    resolve.add_argument("xpath", help="XPath expression to evaluate")
    resolve.set_defaults(handler=handle_resolve)

    inspect = commands.add_parser(
        "inspect-selection",
        help="Simulate a selection defined by start/end selectors and report XPath metadata",
    )
    inspect.add_argument("--start", required=True, help="CSS selector for start element")
    inspect.add_argument("--end", help="CSS selector for end element")
    inspect.set_defaults(handler=handle_inspect_selection)

    to_xpath = commands.add_parser("css-to-xpath", help="Convert a CSS selector to XPath")
    to_xpath.add_argument("selector", help="CSS selector")
    to_xpath.set_defaults(handler=handle_css_to_xpath)

    to_css = commands.add_parser("xpath-to-css", help="Convert a simple XPath to a CSS selector")
    to_css.add_argument("xpath", help="XPath expression")
    to_css.set_defaults(handler=handle_xpath_to_css)

    return parser


def _load(args: argparse.Namespace, stdin: TextIO) -> LoadedDocument:
    return load_document(args.file, args.url, allow_http=args.allow_http, stdin=stdin)


def _first_match(loaded: LoadedDocument, selector: str, label: str = "Selector") -> Element:
    matches = query_selector_all(loaded.document, selector)
    if not matches:
        raise DomXPathError(f"{label} did not match any elements: {selector}")
    return matches[0]


def _options(args: argparse.Namespace, loaded: LoadedDocument) -> XPathOptions:
    root = _first_match(loaded, args.root, "Root selector") if args.root else None
    return XPathOptions(
        prefer_id=False if args.no_prefer_id else None,
        prefer_unique_attributes=list(args.prefer_attr) or None,
        min_index=args.min_index,
        root=root,
    )


def _generator(loaded: LoadedDocument) -> XPathGenerator:
    return create_xpath_generator(document=loaded.document)


def handle_generate(args: argparse.Namespace, stdin: TextIO) -> dict[str, Any]:
    loaded = _load(args, stdin)
    element = _first_match(loaded, args.selector)
    xpath = _generator(loaded).get_xpath_for_node(element, _options(args, loaded))
    return {"selector": args.selector, "xpath": xpath}


def handle_shortest(args: argparse.Namespace, stdin: TextIO) -> dict[str, Any]:
    loaded = _load(args, stdin)
    element = _first_match(loaded, args.selector)
    xpath = _generator(loaded).get_shortest_unique_xpath(element, _options(args, loaded))
    return {"selector": args.selector, "xpath": xpath}


def handle_resolve(args: argparse.Namespace, stdin: TextIO) -> dict[str, Any]:
    loaded = _load(args, stdin)
    match = _generator(loaded).resolve_xpath(args.xpath, loaded.document, _options(args, loaded))
    if match is None:
        return {"xpath": args.xpath, "matched": False}
    return {
        "xpath": args.xpath,
        "matched": True,
        "tag": match.tag,
        "attributes": dict(match.attrib),
    }


def handle_inspect_selection(args: argparse.Namespace, stdin: TextIO) -> dict[str, Any]:
    loaded = _load(args, stdin)
    start = _first_match(loaded, args.start, "Start selector")
    end = _first_match(loaded, args.end, "End selector") if args.end else start

    selected = Range.around(start)
    if end is not start:
        selected.set_end_after(end)
    selection = Selection([selected])

    generator = _generator(loaded)
    options = _options(args, loaded)
    snapshot = generator.get_xpath_for_selection(selection, options)
    common = snapshot.common_xpath
    if common is None:
        common = generator.find_common_ancestor_xpath([start, end], options)
    return {
        "text": snapshot.text,
        "startXPath": snapshot.start_xpath,
        "endXPath": snapshot.end_xpath,
        "commonXPath": common,
    }


def handle_css_to_xpath(args: argparse.Namespace, stdin: TextIO) -> str:
    return css_to_xpath(args.selector)


def handle_xpath_to_css(args: argparse.Namespace, stdin: TextIO) -> dict[str, Any]:
    return {"xpath": args.xpath, "css": xpath_to_css(args.xpath)}


def print_output(data: Any, as_json: bool, stream: TextIO) -> None:
    if isinstance(data, str) and not as_json:
        stream.write(f"{data}\n")
        return
    stream.write(json.dumps(data, indent=2, ensure_ascii=False))
    stream.write("\n")


def main(
    argv: Sequence[str] | None = None,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else sys.argv[1:])
    configure_logging(args.verbose)

    out = stdout or sys.stdout
    err = stderr or sys.stderr
    handler: Handler = args.handler
    try:
        result = handler(args, stdin or sys.stdin)
    except (DomXPathError, SelectorError) as exc:
        logger.debug("Command %s failed.", args.command, exc_info=True)
        err.write(f"{exc}\n")
        return 2

    print_output(result, args.json, out)
    return 0
