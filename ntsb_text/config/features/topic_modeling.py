"""Topic modeling configuration."""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ntsb_text.config._loader import load_yaml_section


def _get_config(group: str) -> dict:
    return load_yaml_section("features/topic_modeling.yaml", "topic_modeling", group)


class TopicModelingModelConfig(BaseSettings):
    """Gibbs LDA sampler settings."""
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_MODEL_',
        case_sensitive=False
    )

    num_topics: int = Field(
        default_factory=lambda: _get_config('model').get('num_topics', 20)
    )
    iterations: int = Field(
        default_factory=lambda: _get_config('model').get('iterations', 500)
    )
    # None resolves to 50 / num_topics at fit time
    alpha: Optional[float] = Field(
        default_factory=lambda: _get_config('model').get('alpha', None)
    )
    eta: float = Field(
        default_factory=lambda: _get_config('model').get('eta', 0.1)
    )
    burn_in: int = Field(
        default_factory=lambda: _get_config('model').get('burn_in', 0)
    )
    thin: Optional[int] = Field(
        default_factory=lambda: _get_config('model').get('thin', None)
    )
    log_every: int = Field(
        default_factory=lambda: _get_config('model').get('log_every', 50)
    )


class TopicModelingEvaluationConfig(BaseSettings):
    """Model-order (K) selection settings."""
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_EVAL_',
        case_sensitive=False
    )

    k_values: List[int] = Field(
        default_factory=lambda: _get_config('evaluation').get(
            'k_values', [5, 10, 15, 20, 25, 30, 40, 50]
        )
    )
    held_out_fraction: float = Field(
        default_factory=lambda: _get_config('evaluation').get('held_out_fraction', 0.2)
    )
    max_workers: int = Field(
        default_factory=lambda: _get_config('evaluation').get('max_workers', 1)
    )


class TopicModelingOutputConfig(BaseSettings):
    """Output settings for topic modeling."""
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_OUT_',
        case_sensitive=False
    )

    num_top_terms: int = Field(
        default_factory=lambda: _get_config('output').get('num_top_terms', 10)
    )
    precision: int = Field(
        default_factory=lambda: _get_config('output').get('precision', 4)
    )


class TopicModelingConfig(BaseSettings):
    """
    Topic modeling configuration.
    Loads from configs/features/topic_modeling.yaml with environment variable overrides.
    """
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_',
        env_nested_delimiter='__',
        case_sensitive=False
    )

    model: TopicModelingModelConfig = Field(
        default_factory=TopicModelingModelConfig
    )
    evaluation: TopicModelingEvaluationConfig = Field(
        default_factory=TopicModelingEvaluationConfig
    )
    output: TopicModelingOutputConfig = Field(
        default_factory=TopicModelingOutputConfig
    )
