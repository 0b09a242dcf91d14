"""
Document-Term Matrix Constants

Defaults for vocabulary pruning and weighting labels.
"""

# ===========================
# Pruning Defaults
# ===========================
DEFAULT_MIN_FREQ = 0.01
"""Drop terms appearing in fewer than 1% of documents"""

DEFAULT_MAX_FREQ = 0.80
"""Drop terms appearing in more than 80% of documents"""

DEFAULT_MIN_WORD_LENGTH = 3
"""Shorter tokens never enter the vocabulary"""

FREQUENCY_TOLERANCE = 1e-9
"""Absorbs float noise when turning fractions into document counts (100 * 0.07)"""

# ===========================
# Weighting Labels
# ===========================
WEIGHTING_COUNT = "count"
WEIGHTING_TFIDF = "tfidf"
