import pytest
from lxml import etree, html

from domxpath.converters import (
    css_to_xpath,
    split_selectors,
    tokenize_selector,
    xpath_to_css,
)
from domxpath.errors import EmptySelectorError, UnsupportedSelectorError

MARKUP = (
    "<html><body>"
    '<div id="main"><ul><li class="item">One</li><li class="item other">Two</li><li>Three</li></ul></div>'
    '<form><input name="q" type="text"><a href="https://example.com">Home</a></form>'
    "</body></html>"
)


def _doc() -> etree._ElementTree:
    return html.document_fromstring(MARKUP).getroottree()


def test_id_and_class_group_becomes_union() -> None:
    xpath = css_to_xpath("#header, .item")
    assert xpath.count("|") == 1
    assert xpath == (
        '//*[@id="header"] | '
        "//*[contains(concat(' ', normalize-space(@class), ' '), ' item ')]"
    )


def test_combinators() -> None:
    assert css_to_xpath("div > span") == "//div/span"
    assert css_to_xpath("div span") == "//div//span"
    assert css_to_xpath("div>span") == "//div/span"
    assert css_to_xpath("*") == "//*"


def test_attribute_operators() -> None:
    assert css_to_xpath("input[name='email']") == '//input[@name="email"]'
    assert css_to_xpath("[disabled]") == "//*[@disabled]"
    assert css_to_xpath("a[href^='https']") == '//a[starts-with(@href, "https")]'
    assert css_to_xpath("a[href*=example]") == '//a[contains(@href, "example")]'
    assert css_to_xpath('a[href$=".com"]') == (
        '//a[substring(@href, string-length(@href) - string-length(".com") + 1) = ".com"]'
    )
    assert css_to_xpath("[lang|=en]") == '//*[(@lang="en" or starts-with(@lang, "en-"))]'
    assert css_to_xpath("[rel~=next]") == "//*[contains(concat(' ', normalize-space(@rel), ' '), ' next ')]"
    assert css_to_xpath("[title~=\"it's\"]") == (
        "//*[contains(concat(' ', normalize-space(@title), ' '), \" it's \")]"
    )


def test_nth_of_type_and_compound_selectors() -> None:
    assert css_to_xpath("li:nth-of-type(2)") == "//li[position()=2]"
    assert css_to_xpath("div#main.card") == (
        "//div[@id=\"main\" and contains(concat(' ', normalize-space(@class), ' '), ' card ')]"
    )


def test_unsupported_groups_are_dropped() -> None:
    assert css_to_xpath("a:hover, b") == "//b"
    with pytest.raises(UnsupportedSelectorError):
        css_to_xpath("a:hover")
    with pytest.raises(UnsupportedSelectorError):
        css_to_xpath("div ~ span")


def test_empty_selector_raises() -> None:
    with pytest.raises(EmptySelectorError):
        css_to_xpath("   ")
    with pytest.raises(ValueError):
        css_to_xpath("")


def test_converted_selectors_match_expected_elements() -> None:
    doc = _doc()
    items = doc.xpath("//li")

    assert doc.xpath(css_to_xpath(".item")) == items[:2]
    assert doc.xpath(css_to_xpath("ul > li:nth-of-type(2)")) == [items[1]]
    assert doc.xpath(css_to_xpath("#main li.other")) == [items[1]]
    assert doc.xpath(css_to_xpath("form [name='q']")) == doc.xpath("//input")


def test_split_and_tokenize_respect_brackets() -> None:
    assert split_selectors("a[title='x,y'], b") == ["a[title='x,y']", "b"]
    tokens = tokenize_selector("form  >  input[placeholder='a b']")
    assert [(token.selector, token.combinator) for token in tokens] == [
        ("form", "descendant"),
        ("input[placeholder='a b']", "child"),
    ]


def test_xpath_to_css_simple_paths() -> None:
    assert xpath_to_css('//*[@id="main"]') == "#main"
    assert xpath_to_css("/html/body/div") == "html > body > div"
    assert xpath_to_css("//div//span") == "div span"
    assert xpath_to_css("//li[position()=2]") == "li:nth-of-type(2)"
    assert xpath_to_css('//input[@name="q" and @type="text"]') == 'input[name="q"][type="text"]'
    assert xpath_to_css("//div[contains(concat(' ', normalize-space(@class), ' '), ' item ')]") == "div.item"


def test_xpath_to_css_escapes_unsafe_identifiers() -> None:
    assert xpath_to_css('//*[@id="a b"]') == '[id="a b"]'
    assert xpath_to_css('//*[@id="1st"]') == '[id="1st"]'


def test_xpath_to_css_unions() -> None:
    assert xpath_to_css('//*[@id="a"] | //b') == "#a, b"


def test_xpath_to_css_returns_none_for_unsupported_expressions() -> None:
    assert xpath_to_css("") is None
    assert xpath_to_css("//p[2]") is None
    assert xpath_to_css("//a/@href") is None
    assert xpath_to_css("count(//p)") is None
    assert xpath_to_css("//p[text()='x']") is None


def test_css_round_trip() -> None:
    assert xpath_to_css(css_to_xpath("div.item > span")) == "div.item > span"
    assert xpath_to_css(css_to_xpath("#main li")) == "#main li"


def test_class_token_operator_round_trips_like_class_selector() -> None:
    assert xpath_to_css(css_to_xpath("[class~=foo]")) == ".foo"
    assert xpath_to_css(css_to_xpath("li[class~=item]")) == "li.item"
