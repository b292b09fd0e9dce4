"""Tests for document parsing and node handles."""

from __future__ import annotations

import pytest

from html_rubric.document import (
    DocumentParseError,
    element_children,
    heading_level,
    opening_fragment,
    parent_element,
    parse,
)


@pytest.mark.parametrize("raw_text", ["", "   \n\t", "just some text"])
def test_parse_rejects_documents_without_markup(raw_text: str) -> None:
    with pytest.raises(DocumentParseError):
        parse(raw_text)


def test_parse_keeps_missing_body_missing() -> None:
    document = parse("<html><head><title>x</title></head></html>")
    assert document.first("head") is not None
    assert document.first("body") is None


def test_ref_records_tag_path_line_and_opening_fragment() -> None:
    document = parse("<div>\n<p class='a b' id=\"x\">text</p>\n</div>")
    paragraph = document.first("p")
    assert paragraph is not None

    ref = document.ref(paragraph)
    assert ref.tag == "p"
    assert ref.path == (0, 0)
    assert ref.line == 2
    assert ref.fragment == '<p class="a b" id="x">'
    assert ref.to_dict() == {
        "tag": "p",
        "path": [0, 0],
        "line": 2,
        "fragment": '<p class="a b" id="x">',
    }


def test_position_follows_document_order() -> None:
    document = parse("<html><head></head><body><p>x</p></body></html>")
    head = document.first("head")
    body = document.first("body")
    assert head is not None and body is not None
    assert document.position(head) < document.position(body)


def test_refs_skip_nodes_from_another_document() -> None:
    document = parse("<p>one</p>")
    other = parse("<p>two</p>")
    foreign = other.first("p")
    assert foreign is not None
    assert document.position(foreign) == -1
    assert document.refs([foreign]) == ()


def test_find_all_and_with_attribute() -> None:
    document = parse('<div><a href="a.html">a</a><img src="b.png"><h2>t</h2><h1>s</h1></div>')
    assert [tag.name for tag in document.find_all("h1", "h2")] == ["h2", "h1"]
    assert [tag.name for tag in document.with_attribute("src")] == ["img"]


def test_tree_helpers() -> None:
    document = parse("<ul>\n<li>a</li>\n<!-- note -->\n<li>b</li>\n</ul>")
    listing = document.first("ul")
    assert listing is not None

    items = element_children(listing)
    assert [item.name for item in items] == ["li", "li"]
    assert parent_element(items[0]) is listing
    assert parent_element(listing) is None
    assert opening_fragment(listing) == "<ul>"


def test_heading_level() -> None:
    document = parse("<h3>a</h3><p>b</p>")
    heading = document.first("h3")
    paragraph = document.first("p")
    assert heading is not None and paragraph is not None
    assert heading_level(heading) == 3
    assert heading_level(paragraph) is None
