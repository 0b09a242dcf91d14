"""
Narrative Normalization Constants

Stop-word list and literal patterns used by the text normalizer.
Changing ENGLISH_STOPWORDS changes every vocabulary built downstream.
"""

import string
from typing import Tuple

# ===========================
# Stop Words
# ===========================
# English stop-word list of the R `tm` package (`stopwords("english")`),
# 174 entries, in its original order.
ENGLISH_STOPWORDS: Tuple[str, ...] = (
    "i", "me", "my", "myself", "we", "our", "ours", "ourselves",
    "you", "your", "yours", "yourself", "yourselves",
    "he", "him", "his", "himself", "she", "her", "hers", "herself",
    "it", "its", "itself", "they", "them", "their", "theirs", "themselves",
    "what", "which", "who", "whom", "this", "that", "these", "those",
    "am", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "having", "do", "does", "did", "doing",
    "would", "should", "could", "ought",
    "i'm", "you're", "he's", "she's", "it's", "we're", "they're",
    "i've", "you've", "we've", "they've",
    "i'd", "you'd", "he'd", "she'd", "we'd", "they'd",
    "i'll", "you'll", "he'll", "she'll", "we'll", "they'll",
    "isn't", "aren't", "wasn't", "weren't", "hasn't", "haven't", "hadn't",
    "doesn't", "don't", "didn't", "won't", "wouldn't", "shan't", "shouldn't",
    "can't", "cannot", "couldn't", "mustn't",
    "let's", "that's", "who's", "what's", "here's", "there's",
    "when's", "where's", "why's", "how's",
    "a", "an", "the", "and", "but", "if", "or", "because", "as", "until", "while",
    "of", "at", "by", "for", "with", "about", "against", "between", "into",
    "through", "during", "before", "after", "above", "below", "to", "from",
    "up", "down", "in", "out", "on", "off", "over", "under",
    "again", "further", "then", "once", "here", "there", "when", "where",
    "why", "how", "all", "any", "both", "each", "few", "more", "most",
    "other", "some", "such", "no", "nor", "not", "only", "own", "same",
    "so", "than", "too", "very",
)

EXTRA_EXCLUDED_WORDS: Tuple[str, ...] = ("th",)
"""Ordinal residue left once digits are stripped ("16th" -> "th")"""

# ===========================
# Literal Patterns
# ===========================
ESCAPED_LINE_BREAK = "\\r\\n"
"""Backslash-escaped CR/LF pair as exported in the narrative text (4 characters)"""

ASCII_PUNCTUATION = string.punctuation

INTRA_WORD_DASH_PLACEHOLDER = "\x01"
"""Control character standing in for a protected dash during punctuation removal"""

# ===========================
# Pipeline Description
# ===========================
NORMALIZATION_STEPS: Tuple[str, ...] = (
    "replace_escaped_line_breaks",
    "lowercase",
    "remove_stopwords",
    "remove_punctuation_keep_intra_word_dashes",
    "remove_numbers",
    "remove_extra_excluded_words",
    "strip_whitespace",
)
