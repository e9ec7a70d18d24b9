"""
Keyword extraction and set similarity.

Deterministic bag-of-words helpers shared by the topic clusterer and the
calendar proximity detector:
- Lowercase word tokens of length >= 3
- Small English stopword list
- Jaccard similarity between keyword sets
"""

import re
from typing import AbstractSet, List, Set

from ..version import STOPLIST_VERSION

__all__ = [
    "STOPWORDS",
    "STOPLIST_VERSION",
    "MIN_KEYWORD_LENGTH",
    "tokenize",
    "extract_keywords",
    "keyword_similarity",
]

MIN_KEYWORD_LENGTH = 3

STOPWORDS = frozenset(
    {
        "the", "and", "for", "are", "but", "not", "you", "all", "can",
        "her", "was", "one", "our", "out", "day", "get", "has", "him",
        "his", "how", "its", "may", "now", "see", "than", "that", "this",
        "will", "with", "from",
    }
)

_NON_WORD = re.compile(r"[^\w\s]")


def tokenize(text: str) -> List[str]:
    """
    Split text into lowercase word tokens.

    Punctuation is replaced by whitespace before splitting, so
    ``"Q4-budget"`` yields ``["q4", "budget"]``.

    Examples:
        >>> tokenize("Re: Q4 budget, final!")
        ['re', 'q4', 'budget', 'final']
    """
    return _NON_WORD.sub(" ", text.lower()).split()


def extract_keywords(text: str) -> Set[str]:
    """
    Extract the keyword set of a text.

    Args:
        text: Any text (subject, body, event title...)

    Returns:
        Set of lowercase tokens with length >= 3, minus stopwords

    Examples:
        >>> sorted(extract_keywords("The Q4 budget review is due"))
        ['budget', 'due', 'review']
    """
    return {
        token
        for token in tokenize(text)
        if len(token) >= MIN_KEYWORD_LENGTH and token not in STOPWORDS
    }


def keyword_similarity(first: AbstractSet[str], second: AbstractSet[str]) -> float:
    """
    Jaccard similarity between two keyword sets.

    Returns 1.0 when both sets are empty, 0.0 when exactly one is empty,
    otherwise |intersection| / |union|.
    """
    if not first and not second:
        return 1.0
    if not first or not second:
        return 0.0
    return len(first & second) / len(first | second)
