"""Tokenization shared by index construction and query scoring.

Handles mixed Hebrew / English text: splits on whitespace, ASCII
punctuation and the right-to-left punctuation that shows up in Hebrew and
Arabic documents.
"""

import re

# Whitespace, ASCII punctuation, Arabic comma/semicolon/question mark,
# ideographic comma, Devanagari danda, Hebrew maqaf and sof pasuq, ZWNJ.
TOKEN_SPLIT = re.compile(r"[\s\-.,;:!?()\[\]{}'\"\u060c\u061b\u061f\u3001\u0964\u05be\u05c3\u200c]+")

MIN_TOKEN_LENGTH = 2


def _is_term(token: str) -> bool:
    if len(token) < MIN_TOKEN_LENGTH:
        return False
    # Pure punctuation / symbols are noise
    return any(ch.isalnum() for ch in token)


def split_terms(text: str) -> list[str]:
    """Return every term occurrence in text, lowercased, in order."""
    return [token for token in TOKEN_SPLIT.split(text.lower()) if _is_term(token)]


def tokenize(text: str) -> list[str]:
    """Return distinct terms, longest first.

    Longer terms are more specific, so they are considered first. Ties keep
    first-occurrence order.
    """
    unique = dict.fromkeys(split_terms(text))
    return sorted(unique, key=len, reverse=True)
