import pytest

from hbhtml import HtmlDocument
from hbhtml.matcher import SelectorMatcher
from hbhtml.query import QueryResult
from hbhtml.selector import Selector, parse_selector


def _select(html, selector):
    return HtmlDocument(html).find(selector).nodes()


def _texts(html, selector):
    return [node.to_text() for node in _select(html, selector)]


# --- Combinators ---

def test_parent_and_ancestor():
    html = "<div><section><p>deep</p></section><p>direct</p></div>"
    assert _texts(html, "div > p") == ["direct"]
    assert _texts(html, "div p") == ["deep", "direct"]
    assert _texts(html, "section > p") == ["deep"]


def test_ancestor_matching_backtracks():
    """The closest `.b` ancestor fails `.a > .b`, but an outer one succeeds."""
    html = '<div class="a"><div class="b"><div class="b"><p class="c">x</p></div></div></div>'
    assert _texts(html, ".a > .b .c") == ["x"]
    assert _texts(html, ".a > .b > .c") == []


def test_sibling_combinators_skip_text_and_comments():
    html = "<h1></h1>text<p>1</p><!-- c --><p>2</p>"
    assert _texts(html, "h1 + p") == ["1"]
    assert _texts(html, "h1 ~ p") == ["1", "2"]
    assert _texts(html, "p + p") == ["2"]
    assert _texts(html, "p ~ h1") == []


def test_mixed_chain():
    html = "<ul><li>a</li><li class='x'>b</li><li>c</li></ul><ol><li class='x'>d</li><li>e</li></ol>"
    assert _texts(html, "ul > .x + li") == ["c"]
    assert _texts(html, "ul li.x ~ li") == ["c"]


# --- Items and attributes ---

def test_tag_names_are_case_sensitive():
    assert _select("<P>x</P>", "p") == []
    assert len(_select("<P>x</P>", "P")) == 1


def test_classes_and_ids():
    html = '<p class="a b" id="one">1</p><p class="a">2</p>'
    assert _texts(html, ".a") == ["1", "2"]
    assert _texts(html, ".a.b") == ["1"]
    assert _texts(html, "p#one") == ["1"]
    assert _texts(html, "#two") == []


@pytest.mark.parametrize(
    ("selector", "matched"),
    [
        ("[href]", True),
        ("[href='https://x.org/a.pdf']", True),
        ("[href^=https]", True),
        ('[href$=".pdf"]', True),
        ('[href*="x.org"]', True),
        ("[lang|=en]", True),
        ("[lang|=e]", False),
        ("[title~=two]", True),
        ("[title~=tw]", False),
        ("[href^='']", False),
        ("[class]", False),
        ("[id=main]", False),
        ("[id='main other']", True),
        ("[id~=other]", True),
        ("[nope]", False),
    ],
)
def test_attribute_operators(selector, matched):
    html = '<a id="main other" href="https://x.org/a.pdf" lang="en-US" title="one two">x</a>'
    assert bool(_select(html, selector)) is matched


# --- Refiners ---

FORM = (
    "<form>"
    '<input type="checkbox" checked="checked">'
    '<input type="text" disabled="disabled">'
    '<input type="radio" checked="false">'
    '<select required="required"><option selected="selected">a</option><option>b</option></select>'
    '<textarea readonly="readonly"></textarea>'
    '<div contenteditable="true"></div>'
    "<p></p>"
    "</form>"
)


def _names(selector):
    return [node.name for node in _select(FORM, selector)]


def test_checked_and_default():
    assert _names(":checked") == ["input", "option"]
    assert _names(":default") == ["input", "option"]
    assert [n.get("type") for n in _select(FORM, "input:checked")] == ["checkbox"]


def test_disabled_and_enabled():
    assert [n.get("type") for n in _select(FORM, ":disabled")] == ["text"]
    assert _names(":enabled") == ["input", "input", "select", "option", "option", "textarea"]


def test_required_and_optional():
    assert _names(":required") == ["select"]
    assert _names(":optional") == ["input", "input", "input", "textarea"]


def test_read_only_and_read_write():
    assert [n.get("type") for n in _select(FORM, "input:read-write")] == ["checkbox", "radio"]
    assert _names("textarea:read-only") == ["textarea"]
    assert _names("div:read-write") == ["div"]
    assert _names("p:read-only") == ["p"]


def test_empty():
    html = "<p></p><p> <!-- c --> </p><p>x</p><p><b></b></p>"
    assert len(_select(html, "p:empty")) == 2
    assert _select(html, "p:empty")[1].contents[1].name == "#comment"


def test_root():
    html = "<html><body><p></p></body></html><footer></footer>"
    assert [node.name for node in _select(html, ":root")] == ["html", "footer"]


LIST = "<ul><li>1</li> <li>2</li><li>3</li><li>4</li></ul>"


@pytest.mark.parametrize(
    ("selector", "expected"),
    [
        ("li:first-child", ["1"]),
        ("li:last-child", ["4"]),
        ("li:only-child", []),
        ("li:nth-child(2n)", ["2", "4"]),
        ("li:nth-child(odd)", ["1", "3"]),
        ("li:nth-child(-n+2)", ["1", "2"]),
        ("li:nth-child(3)", ["3"]),
        ("li:nth-last-child(1)", ["4"]),
        ("li:nth-last-child(2n)", ["1", "3"]),
        ("li:not(:first-child)", ["2", "3", "4"]),
        ("li:not(:not(:first-child))", ["1"]),
        ("li:not(:not(:not(:not(:last-child))))", ["4"]),
    ],
)
def test_positional_refiners(selector, expected):
    assert _texts(LIST, selector) == expected


TYPES = "<div><h2>h</h2><p>a</p><span>s</span><p>b</p><p>c</p></div>"


@pytest.mark.parametrize(
    ("selector", "expected"),
    [
        ("p:first-of-type", ["a"]),
        ("p:last-of-type", ["c"]),
        ("p:nth-of-type(2)", ["b"]),
        ("p:nth-last-of-type(3)", ["a"]),
        ("span:only-of-type", ["s"]),
        ("span:only-child", []),
        ("p:first-child", []),
        ("h2:first-child", ["h"]),
        ("div > :nth-of-type(1)", ["h", "a", "s"]),
    ],
)
def test_of_type_refiners(selector, expected):
    assert _texts(TYPES, selector) == expected


def test_nth_of_type_scenario():
    html = "<ul><li>one</li><li>two</li><li>three</li></ul>"
    assert _texts(html, "ul > li:nth-of-type(2n+1)") == ["one", "three"]


# --- Matcher directly ---

def test_only_tags_match():
    doc = HtmlDocument("<p>text</p>")
    text_result = QueryResult([(doc.nodes[0].contents, 0)])
    matcher = SelectorMatcher()
    assert matcher.matches(text_result, parse_selector("p")) is False
    assert matcher.matches(text_result, Selector.any()) is True


def test_selector_list_is_any_of():
    html = "<h1>t</h1><p>x</p><span>y</span>"
    assert _texts(html, "span, h1") == ["t", "y"]
