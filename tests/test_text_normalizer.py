"""Tests for pasted-text cleanup."""
import pytest

from corpus_tool.services.text_normalizer import (
    collapse_newlines,
    estimate_tokens,
    fix_punctuation_spacing,
    join_hyphenated_words,
    normalize,
    normalize_quotes,
    remove_citations,
    remove_emails,
    remove_urls,
    strip_page_numbers,
    text_stats,
    trim_lines,
)


@pytest.mark.parametrize("raw", [None, "", 42, ["text"]])
def test_normalize_non_text_returns_empty(raw) -> None:
    assert normalize(raw) == ""


def test_joins_hyphenated_line_wrap() -> None:
    assert normalize("exam-\nple") == "example"


def test_collapses_horizontal_whitespace() -> None:
    assert normalize("Hello   world") == "Hello world"
    assert normalize("Hello\t \tworld") == "Hello world"


def test_removes_citation_markers() -> None:
    assert remove_citations("See [1] and [23].") == "See and."
    assert normalize("See [1] and [23].") == "See and."


def test_citation_at_line_start_leaves_no_leading_space() -> None:
    assert remove_citations("[4] Footnote text") == "Footnote text"


def test_removes_urls_keeping_surrounding_words() -> None:
    assert normalize("Visit https://example.com now") == "Visit now"
    assert remove_urls("http://a.b/c?d=1 first") == "first"


def test_removes_email_addresses() -> None:
    assert normalize("Write to jane.doe@example.org today.") == "Write to today."
    assert remove_emails("a@b.co") == ""


def test_normalizes_smart_quotes_and_mangled_punctuation() -> None:
    assert normalize_quotes("\u201cHi,\u201d she said. \u2018Yes\u2019") == "\"Hi,\" she said. 'Yes'"
    assert normalize_quotes("wait \u00e2\u20ac\u00a6 now \u00e2\u20ac\u201d then \u00e2\u20ac\u201c done") == (
        "wait ... now -- then - done"
    )
    assert normalize_quotes("a\u2014b\u2013c\u2026") == "a--b-c..."


def test_composes_unicode() -> None:
    assert normalize("Cafe\u0301") == "Caf\u00e9"


def test_strips_page_number_lines() -> None:
    text = "end of page\n  12  \nnext page"
    assert strip_page_numbers(text) == "end of page\n\nnext page"
    assert normalize(text) == "end of page\n\nnext page"


def test_numbers_inside_text_are_kept() -> None:
    assert normalize("Chapter 12 begins") == "Chapter 12 begins"


def test_join_hyphenated_words_ignores_plain_hyphens() -> None:
    assert join_hyphenated_words("well-known fact") == "well-known fact"


def test_collapses_excess_newlines_to_paragraph_break() -> None:
    assert collapse_newlines("one\n\n\n\n\ntwo") == "one\n\ntwo"
    assert normalize("one\n\n\n\ntwo\n\nthree") == "one\n\ntwo\n\nthree"


def test_trims_each_line() -> None:
    assert trim_lines("  first  \n\tsecond\t") == "first\nsecond"


def test_punctuation_spacing() -> None:
    assert fix_punctuation_spacing("Hello , world !") == "Hello, world!"
    assert fix_punctuation_spacing("Really?!") == "Really? !"


def test_trims_whole_result() -> None:
    assert normalize("\n\n  text  \n\n") == "text"


@pytest.mark.parametrize(
    "raw",
    [
        "It was the best of times, it was the worst of times.",
        "See [1] and [23].",
        "Visit https://example.com now",
        "  Para one   with   spaces.\n\n\n\n Para two -\n continued [7]. ",
        "“Quoted” text … and more — with dashes",
        "Trailing ellipsis...",
    ],
)
def test_normalize_is_idempotent(raw: str) -> None:
    once = normalize(raw)
    assert normalize(once) == once


def test_normalize_is_deterministic() -> None:
    raw = "Some   text [3] with https://x.y and me@example.com."
    assert normalize(raw) == normalize(raw)


def test_text_stats() -> None:
    stats = text_stats("one two  three")
    assert stats.characters == 14
    assert stats.words == 3
    assert stats.tokens == 4


def test_estimate_tokens_rounds_up() -> None:
    assert estimate_tokens(0) == 0
    assert estimate_tokens(1) == 1
    assert estimate_tokens(400) == 100
    assert estimate_tokens(401) == 101


def test_removed_email_between_punctuation_is_respaced() -> None:
    once = normalize("x : b@c.de .")
    assert once == "x: ."
    assert normalize(once) == once
