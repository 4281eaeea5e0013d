import pytest
from cssselect import SelectorError
from lxml import etree, html

from domxpath.element_helpers import (
    does_xpath_resolve_to_element,
    get_attribute_value,
    get_attribute_values,
    get_element_by_xpath,
    get_element_text,
    get_xpath_by_attribute,
    get_xpath_by_class,
    get_xpath_by_id,
    get_xpath_by_label,
    get_xpath_by_selector,
    get_xpath_by_tag,
    get_xpath_by_text,
    is_xpath_syntax_valid,
    query_selector_all,
    select,
    select_one,
)
from domxpath.models import XPathOptions

MARKUP = (
    "<html><body>"
    "<h1>  Welcome  </h1>"
    '<ul><li class="item">One</li><li class="item">Two</li></ul>'
    '<form><label for="email">Email</label><input id="email" type="email">'
    '<label>Name <input name="full-name"></label>'
    '<button type="submit">Send</button></form>'
    "</body></html>"
)


def _doc() -> etree._ElementTree:
    return html.document_fromstring(MARKUP).getroottree()


def test_get_xpath_by_id() -> None:
    doc = _doc()
    assert get_xpath_by_id(doc, "email") == '//*[@id="email"]'
    assert get_xpath_by_id(doc, "missing") is None


def test_get_xpath_by_class_first_and_all() -> None:
    doc = _doc()
    assert get_xpath_by_class(doc, "item") == "/html/body/ul/li[1]"
    assert get_xpath_by_class(doc, "item", multiple="all") == [
        "/html/body/ul/li[1]",
        "/html/body/ul/li[2]",
    ]
    assert get_xpath_by_class(doc, "absent") is None
    assert get_xpath_by_class(doc, "   ") is None


def test_get_xpath_by_tag_honours_options() -> None:
    doc = _doc()
    assert get_xpath_by_tag(doc, "h1") == "/html/body/h1"
    assert get_xpath_by_tag(doc, "h1", XPathOptions(min_index="always")) == "/html[1]/body[1]/h1[1]"
    assert get_xpath_by_tag(doc, "table") is None


def test_get_xpath_by_label() -> None:
    doc = _doc()
    assert get_xpath_by_label(doc, "Email") == '//*[@id="email"]'
    assert get_xpath_by_label(doc, "Name") == '//*[@name="full-name"]'
    assert get_xpath_by_label(doc, "Phone") is None


def test_get_xpath_by_attribute() -> None:
    doc = _doc()
    assert get_xpath_by_attribute(doc, "type", "submit") == "/html/body/form/button"
    assert get_xpath_by_attribute(doc, "type", multiple="all") == [
        '//*[@id="email"]',
        "/html/body/form/button",
    ]
    assert get_xpath_by_attribute(doc, "data-missing") is None


def test_get_xpath_by_selector() -> None:
    doc = _doc()
    assert get_xpath_by_selector(doc, "ul > li:nth-child(2)") == "/html/body/ul/li[2]"
    assert get_xpath_by_selector(doc, "table") is None
    with pytest.raises(SelectorError):
        get_xpath_by_selector(doc, "li[")


def test_get_xpath_by_text_exact_and_partial() -> None:
    doc = _doc()
    assert get_xpath_by_text(doc, "Welcome") == "/html/body/h1"
    assert get_xpath_by_text(doc, "Nonexistent Text") is None

    partial = get_xpath_by_text(doc, "Tw", exact=False, multiple="all")
    assert isinstance(partial, list)
    assert "/html/body/ul/li[2]" in partial


def test_get_element_by_xpath_and_text() -> None:
    doc = _doc()
    heading = get_element_by_xpath("//h1", doc)
    assert heading is doc.xpath("//h1")[0]
    assert get_element_text(heading) == "Welcome"
    assert get_element_text(heading, trim=False) == "  Welcome  "
    assert get_element_text(None) == ""
    assert get_element_by_xpath("//table", doc) is None


def test_select_helpers() -> None:
    doc = _doc()
    assert len(select("//li", doc)) == 2
    assert select("//li[", doc) == []
    assert select("", doc) == []
    assert select("//li", None) == []
    assert select_one("//li", doc) is doc.xpath("//li")[0]
    assert select_one("//table", doc) is None


def test_xpath_syntax_and_resolution_checks() -> None:
    doc = _doc()
    assert is_xpath_syntax_valid("//div[@id='x']")
    assert not is_xpath_syntax_valid("//div[")
    assert not is_xpath_syntax_valid("")
    assert does_xpath_resolve_to_element("//button", doc)
    assert not does_xpath_resolve_to_element("//table", doc)


def test_attribute_value_helpers() -> None:
    doc = _doc()
    assert get_attribute_values("//li/@class", doc) == ["item", "item"]
    assert get_attribute_value("//input/@type", doc) == "email"
    assert get_attribute_value("//li", doc) is None


def test_query_selector_all_uses_css() -> None:
    doc = _doc()
    assert [item.text for item in query_selector_all(doc, "li.item")] == ["One", "Two"]
