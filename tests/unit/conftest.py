"""
Lightweight fixtures for unit tests - NO real data dependencies.
All fixtures use synthetic matrices that run in well under a second.
"""

import numpy as np
import pytest
from scipy import sparse

from ntsb_text.features.document_term import DocumentTermMatrix


# =============================================================================
# Matrix Fixtures
# =============================================================================

@pytest.fixture
def small_counts() -> DocumentTermMatrix:
    """3 x 2 count matrix; both terms have document frequency 2."""
    return DocumentTermMatrix(
        matrix=sparse.csr_matrix(np.array([[2, 1], [1, 0], [0, 1]], dtype=np.int64)),
        vocabulary=["engine", "landing"],
        doc_ids=["a", "b", "c"],
        num_input_documents=3,
    )


@pytest.fixture
def random_counts() -> DocumentTermMatrix:
    """20 x 12 random count matrix with no empty rows."""
    rng = np.random.default_rng(7)
    dense = rng.poisson(0.8, size=(20, 12))
    dense[:, 0] += 1
    return DocumentTermMatrix(
        matrix=sparse.csr_matrix(dense.astype(np.int64)),
        vocabulary=[f"term{j:02d}" for j in range(12)],
        doc_ids=list(range(20)),
        num_input_documents=20,
    )
