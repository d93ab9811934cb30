"""Tests for text normalization and identifier canonicalization."""

from src.recommender.text import canonical_id, tokenize


def test_tokenize_lowercases_and_splits_on_punctuation():
    assert tokenize("Red Shoes, size-42!") == ["red", "shoes", "size", "42"]


def test_tokenize_drops_single_character_tokens():
    assert tokenize("a b cd e fg") == ["cd", "fg"]


def test_tokenize_splits_decimal_prices():
    assert tokenize("Laptop 1000.00") == ["laptop", "1000", "00"]


def test_tokenize_keeps_duplicates_in_order():
    assert tokenize("shoes Shoes SHOES") == ["shoes", "shoes", "shoes"]


def test_tokenize_empty_text():
    assert tokenize("") == []
    assert tokenize("   ") == []
    assert tokenize("!!! ???") == []


def test_tokenize_accented_text_produces_tokens():
    tokens = tokenize("Tênis Café")
    assert len(tokens) >= 2
    assert all(len(token) >= 2 for token in tokens)


def test_canonical_id_trims_and_lowercases():
    assert canonical_id("  P001 ") == "p001"
    assert canonical_id("U42") == "u42"


def test_canonical_id_handles_none_and_numbers():
    assert canonical_id(None) == ""
    assert canonical_id(17) == "17"
