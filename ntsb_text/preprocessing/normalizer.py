"""
Narrative normalizer for NTSB probable-cause text.

Turns a raw narrative into a space-separated stream of normalized tokens.
The stages run in a fixed order; later stages see the output of earlier
ones (e.g. "16th" loses its digits and the leftover "th" is then removed).

Usage:
    from ntsb_text.preprocessing import TextNormalizer

    normalizer = TextNormalizer()
    normalizer.normalize("The engine lost power on the 16th.\\r\\nNo fuel.")
    # 'engine lost power fuel'
"""

import logging
import re
import unicodedata
from typing import Iterable, List, Optional

from .constants import (
    ASCII_PUNCTUATION,
    ENGLISH_STOPWORDS,
    ESCAPED_LINE_BREAK,
    EXTRA_EXCLUDED_WORDS,
    INTRA_WORD_DASH_PLACEHOLDER,
)

logger = logging.getLogger(__name__)

_INTRA_WORD_DASH = re.compile(r"(?<=\w)-(?=\w)")
_DIGITS = re.compile(r"\d+")
_DANGLING_DASHES = re.compile(r"(?<!\S)-+|-+(?!\S)")
_WHITESPACE = re.compile(r"\s+")


def _word_pattern(words: Iterable[str]) -> Optional[re.Pattern]:
    """Whole-word alternation, longest entries first so "i'm" wins over "i"."""
    unique = sorted({w.lower() for w in words if w}, key=lambda w: (-len(w), w))
    if not unique:
        return None
    return re.compile(r"\b(?:" + "|".join(re.escape(w) for w in unique) + r")\b")


def _is_punctuation(ch: str) -> bool:
    return ch in ASCII_PUNCTUATION or unicodedata.category(ch).startswith("P")


class TextNormalizer:
    """
    Deterministic narrative normalizer.

    Pipeline (strictly ordered):
    1. Replace escaped "\\r\\n" literals with a space
    2. Lowercase
    3. Remove stop words (whole words)
    4. Remove punctuation, keeping dashes between two word characters
    5. Remove digits
    6. Remove extra excluded words ("th")
    7. Trim dangling dashes, collapse whitespace, strip

    Missing values (None, NaN) normalize to an empty string.
    """

    def __init__(
        self,
        stopwords: Optional[Iterable[str]] = None,
        extra_excluded: Iterable[str] = EXTRA_EXCLUDED_WORDS,
    ):
        """
        Initialize the normalizer.

        Args:
            stopwords: Stop-word list (default: tm English list, 174 words)
            extra_excluded: Words removed after digit stripping
        """
        self.stopwords = frozenset(
            w.lower() for w in (ENGLISH_STOPWORDS if stopwords is None else stopwords)
        )
        self.extra_excluded = frozenset(w.lower() for w in extra_excluded)
        self._stopword_pattern = _word_pattern(self.stopwords)
        self._excluded_pattern = _word_pattern(self.extra_excluded)

        logger.debug(
            f"Initialized TextNormalizer with {len(self.stopwords)} stopwords, "
            f"{len(self.extra_excluded)} extra excluded words"
        )

    def normalize(self, text) -> str:
        """
        Normalize one narrative.

        Args:
            text: Raw narrative (None/NaN allowed)

        Returns:
            Space-separated normalized tokens ("" if nothing survives)
        """
        if not isinstance(text, str) or not text:
            return ""

        s = text.replace(ESCAPED_LINE_BREAK, " ")
        s = s.lower()
        s = self._remove_words(s, self._stopword_pattern)
        s = self._remove_punctuation(s)
        s = _DIGITS.sub("", s)
        s = self._remove_words(s, self._excluded_pattern)
        return self._strip_whitespace(s)

    def tokenize(self, text) -> List[str]:
        """Normalize and split into tokens."""
        return self.normalize(text).split()

    def normalize_corpus(self, texts: Iterable) -> List[str]:
        """
        Normalize a sequence of narratives, preserving order.

        Args:
            texts: Raw narratives

        Returns:
            Normalized narratives, one per input (empty strings kept in place)
        """
        normalized = [self.normalize(t) for t in texts]
        n_empty = sum(1 for doc in normalized if not doc)
        logger.info(
            f"Normalized {len(normalized)} narratives "
            f"({n_empty} empty after normalization)"
        )
        return normalized

    @staticmethod
    def _remove_words(text: str, pattern: Optional[re.Pattern]) -> str:
        if pattern is None:
            return text
        return pattern.sub("", text)

    @staticmethod
    def _remove_punctuation(text: str) -> str:
        protected = _INTRA_WORD_DASH.sub(INTRA_WORD_DASH_PLACEHOLDER, text)
        stripped = "".join(ch for ch in protected if not _is_punctuation(ch))
        return stripped.replace(INTRA_WORD_DASH_PLACEHOLDER, "-")

    @staticmethod
    def _strip_whitespace(text: str) -> str:
        text = _DANGLING_DASHES.sub("", text)
        return _WHITESPACE.sub(" ", text).strip()


def normalize_narrative(text, stopwords: Optional[Iterable[str]] = None) -> str:
    """
    Convenience function to normalize a single narrative.

    Args:
        text: Raw narrative
        stopwords: Optional stop-word list (default: tm English list)

    Returns:
        Normalized narrative
    """
    return TextNormalizer(stopwords=stopwords).normalize(text)
