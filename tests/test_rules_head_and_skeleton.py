"""Tests for head metadata, document skeleton and tag closure rules."""

from __future__ import annotations

from html_rubric.rules.head import DocumentTitlePresentRule, Utf8DeclaredRule, ViewportPresentRule
from html_rubric.rules.skeleton import (
    DoctypeAndSkeletonRule,
    TagClosureBalanceRule,
    count_closing_drift,
    tag_balance,
)
from tests.helpers_html import WELL_FORMED_HTML, detect, page


def test_title_must_exist_inside_head() -> None:
    outcome = detect(DocumentTitlePresentRule(), "<body><title>Out of place</title></body>")
    assert outcome.passed is False
    assert outcome.message == "No <title> element found in <head>."


def test_title_must_not_be_blank() -> None:
    outcome = detect(DocumentTitlePresentRule(), "<head><title>   </title></head>")
    assert outcome.passed is False
    assert outcome.message == "The <title> element is empty."
    assert [ref.tag for ref in outcome.matches] == ["title"]


def test_title_passes_with_text() -> None:
    outcome = detect(DocumentTitlePresentRule(), WELL_FORMED_HTML)
    assert outcome.passed is True
    assert outcome.message == 'The document has a valid title: "Portfolio".'


def test_utf8_accepts_charset_meta_in_any_case() -> None:
    assert detect(Utf8DeclaredRule(), '<head><meta charset="UTF-8"></head>').passed is True


def test_utf8_accepts_http_equiv_declaration() -> None:
    markup = '<head><meta http-equiv="Content-Type" content="text/html; charset=utf-8"></head>'
    outcome = detect(Utf8DeclaredRule(), markup)
    assert outcome.passed is True
    assert [ref.tag for ref in outcome.matches] == ["meta"]


def test_utf8_rejects_other_encodings() -> None:
    outcome = detect(Utf8DeclaredRule(), '<head><meta charset="iso-8859-1"></head>')
    assert outcome.passed is False
    assert outcome.message == "No UTF-8 encoding declaration found."


def test_viewport_missing_unconfigured_and_ok() -> None:
    missing = detect(ViewportPresentRule(), "<head><title>x</title></head>")
    assert missing.passed is False
    assert missing.message == "The viewport meta tag is missing."

    fixed = detect(ViewportPresentRule(), '<head><meta name="viewport" content="width=600"></head>')
    assert fixed.passed is False
    assert fixed.message == "The viewport meta tag has no responsive configuration."

    assert detect(ViewportPresentRule(), WELL_FORMED_HTML).passed is True


def test_skeleton_passes_for_well_formed_document() -> None:
    outcome = detect(DoctypeAndSkeletonRule(), WELL_FORMED_HTML)
    assert outcome.passed is True
    assert [ref.tag for ref in outcome.matches] == ["html", "head", "body"]


def test_skeleton_reports_missing_body() -> None:
    markup = "<!DOCTYPE html>\n<html>\n<head><title>x</title></head>\n</html>"
    outcome = detect(DoctypeAndSkeletonRule(), markup)
    assert outcome.passed is False
    assert outcome.message == "Critical error: missing <body> element."
    assert outcome.matches == ()


def test_skeleton_reports_missing_doctype_and_misordered_head() -> None:
    markup = "<html><body><p>x</p></body><head><title>t</title></head></html>"
    outcome = detect(DoctypeAndSkeletonRule(), markup)
    assert outcome.passed is False
    assert "missing <!DOCTYPE html> declaration" in outcome.message
    assert "<head> must come before <body>" in outcome.message


def test_skeleton_reports_closing_drift_beyond_tolerance() -> None:
    markup = page("<div><div><div><p>unclosed")
    outcome = detect(DoctypeAndSkeletonRule(), markup)
    assert outcome.passed is False
    assert outcome.message == "Critical error: possible malformed or unclosed tags."


def test_count_closing_drift_ignores_void_self_closing_and_comments() -> None:
    assert count_closing_drift('<p>x<br><img src="a.png"><span/></p>') == 0
    assert count_closing_drift("<div></div><!-- <section> -->") == 0
    assert count_closing_drift("<div><div></div>") == -1


def test_tag_closure_balance_reports_first_mismatches() -> None:
    outcome = detect(TagClosureBalanceRule(), "<div><p>text</div>")
    assert outcome.passed is False
    assert outcome.message == "Badly closed tags - <p>: 1 opened, 0 closed."


def test_tag_closure_balance_truncates_long_lists() -> None:
    outcome = detect(TagClosureBalanceRule(), "<h1><h2><h3><h4>x")
    assert outcome.passed is False
    assert outcome.message == (
        "Badly closed tags - <h1>: 1 opened, 0 closed, <h2>: 1 opened, 0 closed, "
        "<h3>: 1 opened, 0 closed...."
    )


def test_tag_closure_balance_does_not_confuse_prefixed_names() -> None:
    source = "<header><a href='x'>x</a><aside>y</aside></header><p>a</p><pre>b</pre>"
    assert tag_balance(source, "a") == (1, 1)
    assert tag_balance(source, "p") == (1, 1)
    assert detect(TagClosureBalanceRule(), source).passed is True


def test_tag_closure_balance_ignores_commented_markup() -> None:
    outcome = detect(TagClosureBalanceRule(), "<p>a</p><!-- <div> -->")
    assert outcome.passed is True
    assert outcome.message == "Tags are correctly closed."
