import pytest

from quotes_crawler.text import SITE_ORIGIN, clean_text, strip_quote_marks, to_abs


def test_clean_text_collapses_whitespace_and_straightens_quotes():
    raw = "  “It’s   a\n\ttest”  said ‘me’ "
    assert clean_text(raw) == "\"It's a test\" said 'me'"


@pytest.mark.parametrize("value", [None, "", 0])
def test_clean_text_absent_input_is_empty(value):
    assert clean_text(value) == ""


def test_clean_text_stringifies_non_strings():
    assert clean_text(42) == "42"


@pytest.mark.parametrize("raw", [
    "  plain  text ",
    "“quoted” ‘single’",
    "\n\n",
    "tabs\tand nbsp",
    "already clean",
])
def test_clean_text_is_idempotent(raw):
    once = clean_text(raw)
    assert clean_text(once) == once


def test_strip_quote_marks_removes_one_mark_each_side():
    assert strip_quote_marks('"hello"') == "hello"
    assert strip_quote_marks("'hello'") == "hello"
    assert strip_quote_marks('""double""') == '"double"'
    assert strip_quote_marks("no marks") == "no marks"
    assert strip_quote_marks("") == ""


def test_to_abs_resolves_relative_against_site_origin():
    assert to_abs("/quotes/1-x") == f"{SITE_ORIGIN}/quotes/1-x"


def test_to_abs_resolves_against_given_base():
    assert to_abs("?page=2", "https://www.goodreads.com/quotes/tag/life") == (
        "https://www.goodreads.com/quotes/tag/life?page=2"
    )


def test_to_abs_keeps_absolute_urls():
    assert to_abs("https://example.com/a") == "https://example.com/a"


@pytest.mark.parametrize("href", [None, "", "   ", "javascript:void(0)", "http://[::1", 12])
def test_to_abs_returns_none_for_unusable_input(href):
    assert to_abs(href) is None
