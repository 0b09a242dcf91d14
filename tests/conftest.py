"""
Shared pytest fixtures for the narrative feature test suite.

This module provides common fixtures used across test modules:
- Raw and normalized narrative corpora
- Small count matrices with a known two-topic structure
- Normalizer instances

Usage:
    Fixtures are automatically discovered by pytest.
    Import them directly in test files - no explicit import needed.
"""

import sys
from pathlib import Path
from typing import List

import pandas as pd
import pytest

# Ensure the project root is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from ntsb_text.features.document_term import DocumentTermMatrix, build_document_term_matrix
from ntsb_text.preprocessing import TextNormalizer


# ===========================
# Normalizer Fixtures
# ===========================

@pytest.fixture(scope="session")
def normalizer() -> TextNormalizer:
    """Default normalizer (tm English stop words, 'th' excluded)."""
    return TextNormalizer()


# ===========================
# Sample Content Fixtures
# ===========================

@pytest.fixture(scope="session")
def three_narratives() -> List[str]:
    """The three-document corpus used to pin down the vocabulary."""
    return [
        "engine failure occurred",
        "failure during landing",
        "smooth landing no failure",
    ]


@pytest.fixture(scope="session")
def raw_narratives() -> pd.Series:
    """
    Probable-cause style narratives indexed by event id.

    ev004 is all stop words and must be dropped.
    """
    return pd.Series(
        {
            "ev001": "The pilot's failure to maintain airspeed during the approach.\\r\\nA stall resulted.",
            "ev002": "Total loss of engine power due to fuel exhaustion on the 16th.",
            "ev003": "The pilot's improper flare during landing, resulting in a hard landing.",
            "ev004": "The and of",
            "ev005": "Fuel starvation and loss of engine power during the climb.",
            "ev006": "Failure to maintain directional control during the landing roll.",
        },
        name="narr_cause",
    )


@pytest.fixture(scope="session")
def two_topic_documents() -> List[str]:
    """
    Ten normalized documents drawn from two disjoint word groups.

    Documents 0-4 use only engine words, 5-9 only landing words.
    """
    engine_words = ["engine", "fuel", "power"]
    landing_words = ["landing", "runway", "gear"]
    docs = []
    for i in range(5):
        docs.append(" ".join(engine_words[(i + j) % 3] for j in range(20)))
    for i in range(5):
        docs.append(" ".join(landing_words[(i + j) % 3] for j in range(20)))
    return docs


@pytest.fixture(scope="session")
def two_topic_dtm(two_topic_documents: List[str]) -> DocumentTermMatrix:
    """Count DTM of two_topic_documents (no pruning)."""
    return build_document_term_matrix(
        two_topic_documents,
        doc_ids=[f"doc{i}" for i in range(len(two_topic_documents))],
        min_freq=0.0,
        max_freq=1.0,
    )
