"""
Clean pasted text before it enters the corpus.

Text copied out of PDFs and OCR output carries typographic quotes, mangled
byte sequences, page numbers, hyphenated line wraps and stray whitespace.
``normalize`` runs an ordered list of substitutions over it; each step works
on the output of the one before, so the order below matters.
"""
import math
import re
import unicodedata
from dataclasses import dataclass

# Horizontal whitespace: any whitespace except a newline
_HSPACE = r"[^\S\n]"

_QUOTE_REPLACEMENTS = [
    # Mis-decoded UTF-8 ellipsis, em dash and en dash. These run before the
    # curly quote rules, which would otherwise eat their last character.
    (re.compile("\u00e2\u20ac[\u00a6\u2026]"), "..."),
    (re.compile("\u00e2\u20ac[\u201d\u2014]"), "--"),
    (re.compile("\u00e2\u20ac[\u201c\u2013]"), "-"),
    (re.compile("[\u2018\u2019]"), "'"),
    (re.compile("[\u201c\u201d]"), '"'),
    (re.compile("\u2026"), "..."),
    (re.compile("\u2014"), "--"),
    (re.compile("\u2013"), "-"),
]

_PAGE_NUMBER_LINE = re.compile(r"^\s*\d+\s*$", re.MULTILINE)
_HYPHENATED_WRAP = re.compile(r"(\w+)-\s*\n\s*(\w+)")
_HORIZONTAL_RUN = re.compile(_HSPACE + "+")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_LINE_EDGE_SPACE = re.compile(r"^[ \t]+|[ \t]+$", re.MULTILINE)
_SPACE_BEFORE_PUNCT = re.compile(r"\s+([.,!?;:])")
_ADJACENT_PUNCT = re.compile(r"([.,!?;:])\s*([.,!?;:])")

_CITATION = r"\[\d+\]"
_URL = r"https?://\S+"
_EMAIL = r"[\w.-]+@[\w.-]+\.\w+"


def _token_remover(token: str):
    # A token at the start of a line takes the following spaces with it,
    # anywhere else it takes the preceding ones, so no double space is left.
    # Removal can bring two punctuation marks together; they are re-spaced.
    at_line_start = re.compile(rf"^{_HSPACE}*{token}{_HSPACE}*", re.MULTILINE)
    elsewhere = re.compile(rf"{_HSPACE}*{token}")

    def remove(text: str) -> str:
        text, at_start = at_line_start.subn("", text)
        text, inside = elsewhere.subn("", text)
        if at_start or inside:
            text = fix_punctuation_spacing(text)
        return text

    return remove


_remove_citations = _token_remover(_CITATION)
_remove_urls = _token_remover(_URL)
_remove_emails = _token_remover(_EMAIL)


def canonicalize_unicode(text: str) -> str:
    return unicodedata.normalize("NFC", text)


def normalize_quotes(text: str) -> str:
    """Replace typographic quotes, dashes and ellipses with ASCII."""
    for pattern, replacement in _QUOTE_REPLACEMENTS:
        text = pattern.sub(replacement, text)
    return text


def strip_page_numbers(text: str) -> str:
    return _PAGE_NUMBER_LINE.sub("", text)


def join_hyphenated_words(text: str) -> str:
    """Re-join words split across lines, e.g. ``"exam-\\nple"`` -> ``"example"``."""
    return _HYPHENATED_WRAP.sub(r"\1\2", text)


def collapse_spaces(text: str) -> str:
    return _HORIZONTAL_RUN.sub(" ", text)


def collapse_newlines(text: str) -> str:
    return _EXCESS_NEWLINES.sub("\n\n", text)


def trim_lines(text: str) -> str:
    return _LINE_EDGE_SPACE.sub("", text)


def remove_citations(text: str) -> str:
    """Drop numeric citation markers such as ``[1]`` or ``[23]``."""
    return _remove_citations(text)


def fix_punctuation_spacing(text: str) -> str:
    text = _SPACE_BEFORE_PUNCT.sub(r"\1", text)
    return _ADJACENT_PUNCT.sub(r"\1 \2", text)


def remove_urls(text: str) -> str:
    return _remove_urls(text)


def remove_emails(text: str) -> str:
    return _remove_emails(text)


PIPELINE = (
    canonicalize_unicode,
    normalize_quotes,
    strip_page_numbers,
    join_hyphenated_words,
    collapse_spaces,
    collapse_newlines,
    trim_lines,
    remove_citations,
    fix_punctuation_spacing,
    remove_urls,
    remove_emails,
    str.strip,
)


def normalize(raw) -> str:
    """Return a cleaned copy of ``raw``. Never raises; non-strings give ``""``."""
    if not raw or not isinstance(raw, str):
        return ""

    cleaned = raw
    for step in PIPELINE:
        cleaned = step(cleaned)
    return cleaned


@dataclass(frozen=True)
class TextStats:
    characters: int
    words: int
    tokens: int


def estimate_tokens(character_count: int) -> int:
    """Roughly four characters per token. An estimate, not a tokenizer."""
    return math.ceil(character_count / 4)


def text_stats(text: str) -> TextStats:
    """Character, word and estimated token counts for a piece of text."""
    characters = len(text)
    words = len(text.split())
    return TextStats(characters=characters, words=words, tokens=estimate_tokens(characters))
