"""
Narrative feature extraction: document-term matrices, TF-IDF and topics.

Usage:
    from ntsb_text.features import NarrativeFeaturePipeline

    features = NarrativeFeaturePipeline().run(narratives_by_event_id)
"""

from .document_term import DocumentTermMatrix, build_document_term_matrix, weight_tfidf
from .topic_modeling import GibbsLDA, TopicModelFit, perplexity, perplexity_sweep
from .pipeline import NarrativeFeaturePipeline, NarrativeFeatures, PipelineConfig

__all__ = [
    "DocumentTermMatrix",
    "build_document_term_matrix",
    "weight_tfidf",
    "GibbsLDA",
    "TopicModelFit",
    "perplexity",
    "perplexity_sweep",
    "NarrativeFeaturePipeline",
    "NarrativeFeatures",
    "PipelineConfig",
]
