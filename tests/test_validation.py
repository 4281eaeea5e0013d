from lxml import etree, html

from domxpath.validation import (
    count_attribute_matches,
    count_xpath_matches,
    is_attribute_unique,
    validate_locator,
)


def _doc() -> etree._ElementTree:
    markup = (
        "<html><body>"
        '<button data-testid="save">Save</button>'
        '<input name="email"><input name="email">'
        '<div id="outer"><span name="email">inside</span></div>'
        "</body></html>"
    )
    return html.document_fromstring(markup).getroottree()


def test_is_attribute_unique_for_single_match() -> None:
    doc = _doc()
    button = doc.xpath("//button")[0]
    assert is_attribute_unique(button, "data-testid", doc)


def test_is_attribute_unique_rejects_duplicates_and_missing_values() -> None:
    doc = _doc()
    first_input = doc.xpath("//input")[0]
    assert not is_attribute_unique(first_input, "name", doc)
    assert not is_attribute_unique(first_input, "data-testid", doc)
    assert not is_attribute_unique(first_input, "name", None)


def test_is_attribute_unique_respects_scope() -> None:
    doc = _doc()
    span = doc.xpath("//span")[0]
    outer = doc.xpath("//div")[0]
    assert not is_attribute_unique(span, "name", doc)
    assert is_attribute_unique(span, "name", outer)


def test_is_attribute_unique_falls_back_when_selector_engine_rejects_name() -> None:
    root = etree.fromstring('<root><item data-a.b="x"/><item data-a.b="y"/><item data-a.b="y"/></root>')
    first, second, _ = list(root)

    assert is_attribute_unique(first, "data-a.b", root)
    assert not is_attribute_unique(second, "data-a.b", root)


def test_count_attribute_matches_honours_limit() -> None:
    doc = _doc()
    assert count_attribute_matches(doc, "name", "email") == 3
    assert count_attribute_matches(doc, "name", "email", limit=2) == 2
    assert count_attribute_matches(doc, "name", "missing") == 0


def test_count_xpath_matches_ignores_invalid_expressions() -> None:
    doc = _doc()
    assert count_xpath_matches(doc, "//input") == 2
    assert count_xpath_matches(doc, "//input[") == 0
    assert count_xpath_matches(doc, "  ") == 0


def test_validate_locator_reports_uniqueness_and_target() -> None:
    doc = _doc()
    button = doc.xpath("//button")[0]
    span = doc.xpath("//span")[0]

    assert validate_locator(doc, "//button", button).unique
    wrong_target = validate_locator(doc, "//button", span)
    assert not wrong_target.unique
    assert wrong_target.message == "Locator matches a different element."

    duplicated = validate_locator(doc, "//input")
    assert not duplicated.unique
    assert duplicated.match_count == 2

    assert validate_locator(doc, "//input[").message == "Locator could not be evaluated."
    assert validate_locator(doc, "").message == "Locator is empty."
