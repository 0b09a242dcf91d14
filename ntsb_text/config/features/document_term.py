"""Document-term matrix configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ntsb_text.config._loader import load_yaml_section


def _get_config() -> dict:
    return load_yaml_section("features/document_term.yaml", "document_term")


class DocumentTermConfig(BaseSettings):
    """
    Vocabulary pruning settings.

    min_freq / max_freq are document-frequency fractions; they are turned
    into absolute document counts from the corpus size at build time.
    """
    model_config = SettingsConfigDict(
        env_prefix='DOCUMENT_TERM_',
        case_sensitive=False
    )

    min_freq: float = Field(
        default_factory=lambda: _get_config().get('min_freq', 0.01)
    )
    max_freq: float = Field(
        default_factory=lambda: _get_config().get('max_freq', 0.80)
    )
    min_word_length: int = Field(
        default_factory=lambda: _get_config().get('min_word_length', 3)
    )
