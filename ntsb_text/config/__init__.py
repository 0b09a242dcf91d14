"""
NTSB Narrative Features Configuration Package.

This module uses Pydantic Settings to:
1. Define the schema for all configuration
2. Load defaults from configs/config.yaml and configs/features/*.yaml
3. Automatically override with environment variables from .env

Usage:
    from ntsb_text.config import settings

    # Pruning bounds for the document-term matrix
    min_freq = settings.document_term.min_freq

    # Gibbs sampler settings
    iterations = settings.topic_modeling.model.iterations
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Core configs
from ntsb_text.config.paths import PathsConfig
from ntsb_text.config.preprocessing import PreprocessingConfig
from ntsb_text.config.testing import ReproducibilityConfig

# Feature configs
from ntsb_text.config.features import (
    DocumentTermConfig,
    TopicModelingConfig,
)


class Settings(BaseSettings):
    """
    Main settings class that combines all configuration sections.

    Usage:
        from ntsb_text.config import settings

        settings.paths.data_dir
        settings.document_term.max_freq
        settings.topic_modeling.model.num_topics
    """
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    paths: PathsConfig = Field(default_factory=PathsConfig)
    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    document_term: DocumentTermConfig = Field(default_factory=DocumentTermConfig)
    topic_modeling: TopicModelingConfig = Field(default_factory=TopicModelingConfig)
    reproducibility: ReproducibilityConfig = Field(default_factory=ReproducibilityConfig)


# ===========================
# Global Settings Instance
# ===========================

settings = Settings()


# ===========================
# Utility Functions
# ===========================

ensure_directories = settings.paths.ensure_directories


# ===========================
# Public API
# ===========================

__all__ = [
    # Main settings
    "settings",
    "Settings",
    # Utility
    "ensure_directories",
    # Core configs (for direct access if needed)
    "PathsConfig",
    "PreprocessingConfig",
    "ReproducibilityConfig",
    # Feature configs
    "DocumentTermConfig",
    "TopicModelingConfig",
]
