"""
Levenshtein-based fuzzy matching for keyword patterns.
"""

from typing import Optional, Tuple

from rapidfuzz.distance import Levenshtein


def edit_distance(first: str, second: str) -> int:
    """
    Levenshtein distance between two strings.

    Examples:
        >>> edit_distance("urgent", "urgnet")
        2
    """
    return Levenshtein.distance(first, second)


def similarity_ratio(first: str, second: str) -> float:
    """``1 - distance / max_length``; two empty strings are identical."""
    return Levenshtein.normalized_similarity(first, second)


def fuzzy_find(
    text: str,
    keyword: str,
    threshold: float,
    max_distance: int,
    case_sensitive: bool = False,
) -> Optional[Tuple[str, Optional[int]]]:
    """
    Find ``keyword`` in ``text`` exactly or approximately.

    Exact substring match is tried first. Otherwise windows of 1, 2 and 3
    consecutive whitespace-separated words are compared with the keyword; a
    window matches when its edit distance is <= ``max_distance`` and its
    similarity ratio is >= ``threshold``.

    Returns:
        ``(matched_text, position)`` or None. ``position`` is None when the
        window cannot be located verbatim (collapsed whitespace).
    """
    search_text = text if case_sensitive else text.lower()
    search_keyword = keyword if case_sensitive else keyword.lower()

    index = search_text.find(search_keyword)
    if index != -1:
        return text[index:index + len(keyword)], index

    words = search_text.split()
    for i in range(len(words)):
        for size in (1, 2, 3):
            if i + size > len(words):
                break
            window = " ".join(words[i:i + size])
            if Levenshtein.distance(window, search_keyword, score_cutoff=max_distance) > max_distance:
                continue
            if similarity_ratio(window, search_keyword) < threshold:
                continue
            position = search_text.find(window)
            if position == -1:
                return window, None
            return text[position:position + len(window)], position

    return None
