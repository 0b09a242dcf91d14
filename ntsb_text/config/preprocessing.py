"""Narrative normalization configuration."""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ntsb_text.config._loader import load_yaml_section


def _get_config() -> dict:
    return load_yaml_section("config.yaml", "preprocessing")


class PreprocessingConfig(BaseSettings):
    """Text normalization configuration settings."""
    model_config = SettingsConfigDict(
        env_prefix='PREPROCESSING_',
        case_sensitive=False
    )

    extra_excluded_words: List[str] = Field(
        default_factory=lambda: _get_config().get('extra_excluded_words', ["th"])
    )
    custom_stopwords: List[str] = Field(
        default_factory=lambda: _get_config().get('custom_stopwords', [])
    )
