"""
TF-IDF weighting of a count document-term matrix.

weight(d, t) = count(d, t) * ln(N / df(t))

N is the number of rows of the input matrix and df(t) the number of rows
containing t. No smoothing and no length normalization, so a term present
in every document gets weight 0.
"""

import logging
import math
from functools import partial
from typing import List, Tuple

import numpy as np
from gensim import matutils
from gensim.models import TfidfModel
from gensim.models.tfidfmodel import df2idf
from scipy import sparse

from ntsb_text.exceptions import InputError
from .builder import DocumentTermMatrix
from .constants import WEIGHTING_COUNT, WEIGHTING_TFIDF

logger = logging.getLogger(__name__)

natural_idf = partial(df2idf, log_base=math.e)
"""idf(t) = ln(N / df(t))"""


def _to_bow_corpus(matrix: sparse.csr_matrix) -> List[List[Tuple[int, int]]]:
    """CSR rows as gensim bag-of-words vectors."""
    corpus = []
    for i in range(matrix.shape[0]):
        start, end = matrix.indptr[i], matrix.indptr[i + 1]
        corpus.append([
            (int(term_id), int(count))
            for term_id, count in zip(matrix.indices[start:end], matrix.data[start:end])
        ])
    return corpus


def weight_tfidf(dtm: DocumentTermMatrix) -> DocumentTermMatrix:
    """
    Reweight a count DTM with TF-IDF.

    Args:
        dtm: Count document-term matrix

    Returns:
        DocumentTermMatrix of the same shape, rows and vocabulary, weighting="tfidf"

    Raises:
        InputError: If dtm is not a non-empty, non-negative count matrix
    """
    if dtm.weighting != WEIGHTING_COUNT:
        raise InputError(f"TF-IDF expects a count matrix, got weighting={dtm.weighting!r}")
    if dtm.num_documents == 0 or dtm.num_terms == 0:
        raise InputError(f"Cannot weight an empty document-term matrix (shape {dtm.shape})")
    if dtm.matrix.nnz and dtm.matrix.data.min() < 0:
        raise InputError("Document-term matrix contains negative counts")

    bow_corpus = _to_bow_corpus(dtm.matrix)
    model = TfidfModel(corpus=bow_corpus, wglobal=natural_idf, normalize=False)

    weighted = matutils.corpus2csc(
        model[bow_corpus],
        num_terms=dtm.num_terms,
        num_docs=dtm.num_documents,
        dtype=np.float64,
    ).T.tocsr()
    weighted.sort_indices()

    n_zero_idf = int(np.sum(dtm.document_frequencies() == dtm.num_documents))
    if n_zero_idf:
        logger.info(f"{n_zero_idf} terms occur in every document and get zero weight")
    logger.info(f"Computed TF-IDF weights for {dtm.num_documents} x {dtm.num_terms} matrix")

    return DocumentTermMatrix(
        matrix=weighted,
        vocabulary=list(dtm.vocabulary),
        doc_ids=list(dtm.doc_ids),
        dropped_ids=list(dtm.dropped_ids),
        num_input_documents=dtm.num_input_documents,
        min_doc_freq=dtm.min_doc_freq,
        max_doc_freq=dtm.max_doc_freq,
        weighting=WEIGHTING_TFIDF,
    )
