"""
NTSB accident narrative features.

Normalizes probable-cause narratives, builds pruned document-term and TF-IDF
matrices, and fits collapsed Gibbs LDA topic models for downstream
fatality regressions.
"""

__version__ = "0.1.0"
