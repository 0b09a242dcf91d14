"""
Unit tests for ntsb_text/features/document_term/tfidf.py

Tests TF-IDF weights against hand-computed values and the ordering
properties they must satisfy.
No real data dependencies - runs in <1 second.
"""

import math

import numpy as np
import pytest

from ntsb_text.exceptions import InputError
from ntsb_text.features.document_term import (
    DocumentTermMatrix,
    WEIGHTING_TFIDF,
    build_document_term_matrix,
    weight_tfidf,
)


class TestTfidfValues:
    """Tests for exact weights."""

    def test_small_matrix(self, small_counts: DocumentTermMatrix):
        """Both terms have df 2 of N 3, so idf = ln(1.5)."""
        idf = math.log(1.5)
        weighted = weight_tfidf(small_counts)
        np.testing.assert_allclose(
            weighted.matrix.toarray(),
            [[2 * idf, idf], [idf, 0.0], [0.0, idf]],
        )

    def test_three_narratives(self):
        counts = build_document_term_matrix(
            ["engine failure occurred", "failure landing", "smooth landing failure"],
            min_freq=0.0,
            max_freq=1.0,
        )
        ln3, ln15 = math.log(3.0), math.log(1.5)
        # columns: engine, failure, landing, occurred, smooth
        expected = [
            [ln3, 0.0, 0.0, ln3, 0.0],
            [0.0, 0.0, ln15, 0.0, 0.0],
            [0.0, 0.0, ln15, 0.0, ln3],
        ]
        np.testing.assert_allclose(weight_tfidf(counts).matrix.toarray(), expected)

    def test_term_in_every_document_gets_zero(self, random_counts: DocumentTermMatrix):
        weighted = weight_tfidf(random_counts).matrix.toarray()
        assert np.all(weighted[:, 0] == 0.0)

    def test_matches_count_times_natural_idf(self, random_counts: DocumentTermMatrix):
        counts = random_counts.matrix.toarray()
        df = random_counts.document_frequencies()
        idf = np.log(random_counts.num_documents / df)
        np.testing.assert_allclose(weight_tfidf(random_counts).matrix.toarray(), counts * idf)


class TestTfidfProperties:
    """Tests for non-negativity, sparsity pattern and monotonicity."""

    def test_non_negative(self, random_counts: DocumentTermMatrix):
        assert weight_tfidf(random_counts).matrix.toarray().min() >= 0.0

    def test_zero_count_gives_zero_weight(self, random_counts: DocumentTermMatrix):
        counts = random_counts.matrix.toarray()
        weighted = weight_tfidf(random_counts).matrix.toarray()
        assert np.all(weighted[counts == 0] == 0.0)

    def test_higher_count_higher_weight(self, small_counts: DocumentTermMatrix):
        weighted = weight_tfidf(small_counts).matrix.toarray()
        # "engine": count 2 in row a, 1 in row b
        assert weighted[0, 0] > weighted[1, 0]

    def test_rarer_term_higher_weight(self):
        counts = build_document_term_matrix(
            ["engine landing", "engine gear", "engine gear"], min_freq=0.0, max_freq=1.0
        )
        weighted = weight_tfidf(counts)
        row = weighted.matrix.toarray()[0]
        # equal counts in row 0; landing (df 1) outweighs engine (df 3)
        assert row[weighted.term_index["landing"]] > row[weighted.term_index["engine"]]


class TestTfidfMetadata:
    """Tests for shape, identity and weighting tag."""

    def test_rows_and_columns_preserved(self, random_counts: DocumentTermMatrix):
        weighted = weight_tfidf(random_counts)
        assert weighted.shape == random_counts.shape
        assert weighted.doc_ids == random_counts.doc_ids
        assert weighted.vocabulary == random_counts.vocabulary
        assert weighted.weighting == WEIGHTING_TFIDF

    def test_rejects_weighted_input(self, small_counts: DocumentTermMatrix):
        with pytest.raises(InputError):
            weight_tfidf(weight_tfidf(small_counts))
