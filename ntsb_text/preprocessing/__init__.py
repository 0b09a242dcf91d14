"""
Narrative preprocessing.

Usage:
    from ntsb_text.preprocessing import TextNormalizer

    normalizer = TextNormalizer()
    docs = normalizer.normalize_corpus(raw_narratives)
"""

from .normalizer import TextNormalizer, normalize_narrative
from .constants import (
    ENGLISH_STOPWORDS,
    EXTRA_EXCLUDED_WORDS,
    NORMALIZATION_STEPS,
)

__all__ = [
    "TextNormalizer",
    "normalize_narrative",
    "ENGLISH_STOPWORDS",
    "EXTRA_EXCLUDED_WORDS",
    "NORMALIZATION_STEPS",
]
