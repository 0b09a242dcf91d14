"""
Document-term matrix construction and weighting.

Key Components:
- build_document_term_matrix: normalized narratives -> pruned count DTM
- DocumentTermMatrix: sparse matrix with record-id rows and term columns
- weight_tfidf: count DTM -> TF-IDF DTM

Usage:
    from ntsb_text.features.document_term import (
        build_document_term_matrix,
        weight_tfidf,
    )

    counts = build_document_term_matrix(docs, doc_ids=event_ids, min_freq=0.01, max_freq=0.8)
    tfidf = weight_tfidf(counts)
    X = tfidf.matrix            # rows align with tfidf.doc_ids
"""

from .builder import (
    DocumentTermMatrix,
    build_document_term_matrix,
    document_frequency_bounds,
)
from .tfidf import weight_tfidf
from .constants import (
    DEFAULT_MIN_FREQ,
    DEFAULT_MAX_FREQ,
    DEFAULT_MIN_WORD_LENGTH,
    WEIGHTING_COUNT,
    WEIGHTING_TFIDF,
)

__all__ = [
    "DocumentTermMatrix",
    "build_document_term_matrix",
    "document_frequency_bounds",
    "weight_tfidf",
    "DEFAULT_MIN_FREQ",
    "DEFAULT_MAX_FREQ",
    "DEFAULT_MIN_WORD_LENGTH",
    "WEIGHTING_COUNT",
    "WEIGHTING_TFIDF",
]
