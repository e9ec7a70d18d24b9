"""
Text utilities shared by detectors and the topic clusterer.

- keywords: tokenization, stopwords, keyword sets, Jaccard similarity
- subjects: reply/forward/tag prefix stripping
- fuzzy: Levenshtein distance and approximate keyword search
"""

from .fuzzy import edit_distance, fuzzy_find, similarity_ratio
from .keywords import STOPWORDS, extract_keywords, keyword_similarity, tokenize
from .subjects import normalize_subject

__all__ = [
    "STOPWORDS",
    "tokenize",
    "extract_keywords",
    "keyword_similarity",
    "normalize_subject",
    "edit_distance",
    "similarity_ratio",
    "fuzzy_find",
]
