"""Feature extraction configuration modules."""

from ntsb_text.config.features.document_term import DocumentTermConfig
from ntsb_text.config.features.topic_modeling import TopicModelingConfig

__all__ = [
    "DocumentTermConfig",
    "TopicModelingConfig",
]
