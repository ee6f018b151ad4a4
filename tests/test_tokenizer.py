"""Tests for query/index tokenization."""

from docrecall.retrieval.tokenizer import split_terms, tokenize


def test_tokenize_deduplicates_and_orders_by_length():
    assert tokenize("Leave policy: the annual leave") == ["policy", "annual", "leave", "the"]


def test_ties_keep_first_occurrence_order():
    assert tokenize("Hello, world! Hello") == ["hello", "world"]


def test_short_and_punctuation_only_tokens_dropped():
    assert tokenize("a b -- ?? ** 21 x1") == ["21", "x1"]


def test_split_terms_keeps_every_occurrence():
    assert split_terms("Leave leave LEAVE policy") == ["leave", "leave", "leave", "policy"]


def test_hebrew_terms():
    assert tokenize("חופשה שנתית, 21 ימים") == ["חופשה", "שנתית", "ימים", "21"]


def test_rtl_punctuation_splits():
    assert split_terms("שלום،עולם") == ["שלום", "עולם"]
    assert split_terms("בית־ספר") == ["בית", "ספר"]
    assert split_terms("notice\u200cperiod") == ["notice", "period"]


def test_mixed_script_text():
    assert split_terms("Notice period (הודעה מוקדמת) is 14 days.") == [
        "notice",
        "period",
        "הודעה",
        "מוקדמת",
        "is",
        "14",
        "days",
    ]


def test_empty_text():
    assert tokenize("") == []
    assert split_terms("   ") == []
