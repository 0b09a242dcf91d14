"""
Vocabulary and document-term matrix construction.

Builds a sparse count matrix from normalized narratives, pruning terms by
document frequency. Rows keep the input order of the surviving documents;
documents with no surviving terms are reported in ``dropped_ids`` so callers
can still join them back to per-record metadata.

Usage:
    from ntsb_text.features.document_term import build_document_term_matrix

    dtm = build_document_term_matrix(normalized_docs, doc_ids=event_ids)
    dtm.matrix          # scipy CSR, documents x terms
    dtm.vocabulary      # column labels
    dtm.row_of("20080101X00001")
"""

import logging
import math
from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, FrozenSet, Hashable, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from gensim import corpora
from scipy import sparse

from ntsb_text.exceptions import DegenerateVocabularyError, InputError
from .constants import (
    DEFAULT_MAX_FREQ,
    DEFAULT_MIN_FREQ,
    DEFAULT_MIN_WORD_LENGTH,
    FREQUENCY_TOLERANCE,
    WEIGHTING_COUNT,
)

logger = logging.getLogger(__name__)


@dataclass
class DocumentTermMatrix:
    """
    Sparse document-term matrix with row and column identity.

    Attributes:
        matrix: CSR matrix, one row per surviving document
        vocabulary: Column labels (terms), sorted alphabetically
        doc_ids: Record identifier of each row, in row order
        dropped_ids: Record identifiers of documents with no surviving terms
        num_input_documents: Corpus size used to compute pruning bounds
        min_doc_freq: Absolute lower document-frequency bound applied
        max_doc_freq: Absolute upper document-frequency bound applied
        weighting: "count" or "tfidf"
    """
    matrix: sparse.csr_matrix
    vocabulary: List[str]
    doc_ids: List[Hashable]
    dropped_ids: List[Hashable] = field(default_factory=list)
    num_input_documents: int = 0
    min_doc_freq: int = 0
    max_doc_freq: int = 0
    weighting: str = WEIGHTING_COUNT

    def __post_init__(self):
        self.matrix = sparse.csr_matrix(self.matrix)
        n_rows, n_cols = self.matrix.shape
        if n_rows != len(self.doc_ids):
            raise InputError(
                f"Matrix has {n_rows} rows but {len(self.doc_ids)} document ids"
            )
        if n_cols != len(self.vocabulary):
            raise InputError(
                f"Matrix has {n_cols} columns but vocabulary has {len(self.vocabulary)} terms"
            )

    @property
    def shape(self) -> Tuple[int, int]:
        return self.matrix.shape

    @property
    def num_documents(self) -> int:
        return self.matrix.shape[0]

    @property
    def num_terms(self) -> int:
        return self.matrix.shape[1]

    @cached_property
    def term_index(self) -> Dict[str, int]:
        """Term -> column index."""
        return {term: j for j, term in enumerate(self.vocabulary)}

    @cached_property
    def row_index(self) -> Dict[Hashable, int]:
        """Record id -> row index (surviving documents only)."""
        return {doc_id: i for i, doc_id in enumerate(self.doc_ids)}

    def row_of(self, record_id: Hashable) -> Optional[int]:
        """Row position of a record, or None if it was dropped or never seen."""
        return self.row_index.get(record_id)

    @cached_property
    def dropped_index(self) -> FrozenSet[Hashable]:
        """Record ids of dropped documents, for O(1) lookups."""
        return frozenset(self.dropped_ids)

    def is_dropped(self, record_id: Hashable) -> bool:
        return record_id in self.dropped_index

    def document_frequencies(self) -> np.ndarray:
        """Number of rows with a non-zero entry, per column."""
        return np.asarray((self.matrix > 0).sum(axis=0)).ravel()

    def select_rows(self, positions: Sequence[int]) -> "DocumentTermMatrix":
        """
        Subset rows (e.g. for a train/held-out split).

        Vocabulary and pruning metadata are kept as-is.
        """
        positions = np.asarray(positions, dtype=np.int64)
        return DocumentTermMatrix(
            matrix=self.matrix[positions],
            vocabulary=list(self.vocabulary),
            doc_ids=[self.doc_ids[i] for i in positions],
            dropped_ids=list(self.dropped_ids),
            num_input_documents=self.num_input_documents,
            min_doc_freq=self.min_doc_freq,
            max_doc_freq=self.max_doc_freq,
            weighting=self.weighting,
        )

    def align_to(self, vocabulary: Sequence[str]) -> "DocumentTermMatrix":
        """
        Re-express this matrix in another vocabulary.

        Terms missing from ``vocabulary`` are discarded; terms missing from
        this matrix get zero columns. Rows left empty move to ``dropped_ids``.

        Args:
            vocabulary: Target column labels (e.g. a fitted model's vocabulary)

        Returns:
            New DocumentTermMatrix with columns in ``vocabulary`` order
        """
        target = list(vocabulary)
        pairs = [(self.term_index[t], j) for j, t in enumerate(target) if t in self.term_index]
        src = [p[0] for p in pairs]
        dst = [p[1] for p in pairs]
        selector = sparse.csr_matrix(
            (np.ones(len(pairs), dtype=self.matrix.dtype), (src, dst)),
            shape=(self.num_terms, len(target)),
        )
        aligned = (self.matrix @ selector).tocsr()
        aligned.eliminate_zeros()

        keep = np.flatnonzero(aligned.getnnz(axis=1) > 0)
        newly_dropped = [
            self.doc_ids[i] for i in np.flatnonzero(aligned.getnnz(axis=1) == 0)
        ]
        if newly_dropped:
            logger.info(
                f"{len(newly_dropped)} documents have no terms in the target vocabulary"
            )

        return DocumentTermMatrix(
            matrix=aligned[keep],
            vocabulary=target,
            doc_ids=[self.doc_ids[i] for i in keep],
            dropped_ids=list(self.dropped_ids) + newly_dropped,
            num_input_documents=self.num_input_documents,
            min_doc_freq=self.min_doc_freq,
            max_doc_freq=self.max_doc_freq,
            weighting=self.weighting,
        )

    def to_frame(self) -> pd.DataFrame:
        """Sparse DataFrame indexed by record id, one column per term."""
        return pd.DataFrame.sparse.from_spmatrix(
            self.matrix,
            index=pd.Index(self.doc_ids, name="record_id"),
            columns=self.vocabulary,
        )


def document_frequency_bounds(
    num_documents: int,
    min_freq: float,
    max_freq: float,
) -> Tuple[int, int]:
    """
    Convert fractional document-frequency bounds to absolute counts.

    Returns:
        (ceil(N * min_freq), floor(N * max_freq))
    """
    lower = max(0, math.ceil(num_documents * min_freq - FREQUENCY_TOLERANCE))
    upper = math.floor(num_documents * max_freq + FREQUENCY_TOLERANCE)
    return lower, upper


def _to_tokens(document, min_word_length: int) -> List[str]:
    if document is None:
        return []
    tokens = document.split() if isinstance(document, str) else list(document)
    return [t for t in tokens if len(t) >= min_word_length]


def _validate_bounds(min_freq: float, max_freq: float, min_word_length: int) -> None:
    if not (0.0 <= min_freq <= max_freq <= 1.0):
        raise InputError(
            f"Document-frequency bounds must satisfy 0 <= min_freq <= max_freq <= 1, "
            f"got min_freq={min_freq}, max_freq={max_freq}"
        )
    if min_word_length < 1:
        raise InputError(f"min_word_length must be >= 1, got {min_word_length}")


def build_document_term_matrix(
    documents: Iterable,
    doc_ids: Optional[Sequence[Hashable]] = None,
    min_freq: float = DEFAULT_MIN_FREQ,
    max_freq: float = DEFAULT_MAX_FREQ,
    min_word_length: int = DEFAULT_MIN_WORD_LENGTH,
) -> DocumentTermMatrix:
    """
    Build a pruned document-term count matrix.

    Args:
        documents: Normalized documents (whitespace-separated strings or token lists)
        doc_ids: Record identifier per document (default: positions 0..N-1)
        min_freq: Minimum document frequency, as a fraction of N
        max_freq: Maximum document frequency, as a fraction of N
        min_word_length: Tokens shorter than this are ignored

    Returns:
        DocumentTermMatrix with empty rows removed and reported in dropped_ids

    Raises:
        InputError: Empty corpus, invalid bounds, bad ids, or all documents empty
        DegenerateVocabularyError: No term within the document-frequency bounds
    """
    documents = list(documents)
    num_documents = len(documents)
    if num_documents == 0:
        raise InputError("Corpus is empty: no documents to build a document-term matrix from")

    _validate_bounds(min_freq, max_freq, min_word_length)

    if doc_ids is None:
        doc_ids = list(range(num_documents))
    else:
        doc_ids = list(doc_ids)
        if len(doc_ids) != num_documents:
            raise InputError(
                f"Got {len(doc_ids)} document ids for {num_documents} documents"
            )
        if len(set(doc_ids)) != num_documents:
            raise InputError("Document ids must be unique")

    token_docs = [_to_tokens(doc, min_word_length) for doc in documents]
    if not any(token_docs):
        raise InputError(
            f"All {num_documents} documents are empty after normalization"
        )

    # Step 1: Count terms and document frequencies
    dictionary = corpora.Dictionary()
    dictionary.add_documents(token_docs)

    # Step 2: Prune by document frequency
    min_doc_freq, max_doc_freq = document_frequency_bounds(num_documents, min_freq, max_freq)
    good_ids = [
        token_id for token_id, df in dictionary.dfs.items()
        if min_doc_freq <= df <= max_doc_freq
    ]
    if not good_ids:
        raise DegenerateVocabularyError(
            f"No term has document frequency in [{min_doc_freq}, {max_doc_freq}] "
            f"across {num_documents} documents ({len(dictionary)} candidate terms)"
        )
    dictionary.filter_tokens(good_ids=good_ids)

    vocabulary = sorted(dictionary.token2id)
    column = {dictionary.token2id[term]: j for j, term in enumerate(vocabulary)}

    # Step 3: Emit rows for documents that kept at least one term
    rows: List[int] = []
    cols: List[int] = []
    counts: List[int] = []
    kept_ids: List[Hashable] = []
    dropped_ids: List[Hashable] = []
    for doc_id, tokens in zip(doc_ids, token_docs):
        bow = dictionary.doc2bow(tokens)
        if not bow:
            dropped_ids.append(doc_id)
            continue
        row = len(kept_ids)
        kept_ids.append(doc_id)
        for token_id, count in bow:
            rows.append(row)
            cols.append(column[token_id])
            counts.append(count)

    matrix = sparse.csr_matrix(
        (np.asarray(counts, dtype=np.int64), (rows, cols)),
        shape=(len(kept_ids), len(vocabulary)),
    )
    matrix.sort_indices()

    logger.info(
        f"Vocabulary size: {len(vocabulary)} "
        f"(df bounds [{min_doc_freq}, {max_doc_freq}] over {num_documents} documents); "
        f"{len(kept_ids)} rows kept, {len(dropped_ids)} dropped"
    )

    return DocumentTermMatrix(
        matrix=matrix,
        vocabulary=vocabulary,
        doc_ids=kept_ids,
        dropped_ids=dropped_ids,
        num_input_documents=num_documents,
        min_doc_freq=min_doc_freq,
        max_doc_freq=max_doc_freq,
        weighting=WEIGHTING_COUNT,
    )
