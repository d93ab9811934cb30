"""Text normalization for catalog documents and free-text queries."""

import re
import unicodedata
from typing import List

# Anything outside this set becomes a token separator
_DISALLOWED_CHARS = re.compile(r'[^a-z0-9\sáéíóúãõâêîôûç"]')
MIN_TOKEN_LENGTH = 2


def tokenize(text: str) -> List[str]:
    """Split text into lowercase comparable terms.

    The text is lowercased and NFKD-normalized, characters outside the allowed
    set are replaced by spaces, and single-character tokens are dropped.

    Args:
        text: Free text (product title, category names, query).

    Returns:
        List of tokens in their original order, duplicates kept.

    Example:
        >>> tokenize("Red Shoes, size-42!")
        ['red', 'shoes', 'size', '42']
    """
    if not text:
        return []

    normalized = unicodedata.normalize("NFKD", text.lower())
    cleaned = _DISALLOWED_CHARS.sub(" ", normalized)
    return [token for token in cleaned.split() if len(token) >= MIN_TOKEN_LENGTH]


def canonical_id(value: object) -> str:
    """Canonical form of a product or user identifier (trimmed, lowercased)."""
    if value is None:
        return ""
    return str(value).strip().lower()
