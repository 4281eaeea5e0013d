from lxml import etree, html

from domxpath.generator import create_xpath_generator
from domxpath.models import XPathOptions

MARKUP = (
    "<html><head><title>Page</title></head><body>"
    '<div id="main"><p>First</p><p>Second</p></div>'
    '<form><input name="email"></form>'
    "</body></html>"
)


def _doc() -> etree._ElementTree:
    return html.document_fromstring(MARKUP).getroottree()


def test_resolve_returns_first_element_in_document_order() -> None:
    doc = _doc()
    generator = create_xpath_generator()
    assert generator.resolve_xpath("//p", doc) is doc.xpath("//p")[0]


def test_resolve_normalizes_the_expression() -> None:
    doc = _doc()
    generator = create_xpath_generator()
    assert generator.resolve_xpath("  ///html///body//  ", doc) is doc.xpath("//body")[0]


def test_resolve_returns_none_for_unusable_input() -> None:
    doc = _doc()
    generator = create_xpath_generator()

    assert generator.resolve_xpath("", doc) is None
    assert generator.resolve_xpath("//p[", doc) is None
    assert generator.resolve_xpath("//input/@name", doc) is None
    assert generator.resolve_xpath("count(//p)", doc) is None
    assert generator.resolve_xpath("//table", doc) is None
    assert generator.resolve_xpath("//p") is None


def test_resolve_uses_generator_document_when_no_context_given() -> None:
    doc = _doc()
    generator = create_xpath_generator(document=doc)
    assert generator.resolve_xpath("//title") is doc.xpath("//title")[0]


def test_resolve_relativizes_paths_to_element_context() -> None:
    doc = _doc()
    generator = create_xpath_generator()
    div = doc.xpath("//div")[0]

    assert generator.resolve_xpath("/div", div) is div
    assert generator.resolve_xpath("/div/p[2]", div) is doc.xpath("//p")[1]
    assert generator.resolve_xpath("/div/p[1]", doc, XPathOptions(root=div)) is doc.xpath("//p")[0]


def test_is_xpath_match() -> None:
    doc = _doc()
    generator = create_xpath_generator()
    second = doc.xpath("//p")[1]

    assert generator.is_xpath_match(second, "/html/body/div/p[2]")
    assert not generator.is_xpath_match(second, "/html/body/div/p[1]")
    assert not generator.is_xpath_match(second, "//p[")
    assert not generator.is_xpath_match("p", "//p")
