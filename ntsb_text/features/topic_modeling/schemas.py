"""
Topic Modeling Schemas

Pydantic models summarizing fitted topic models and K sweeps.
"""

from typing import Dict, List, Optional, Tuple

import pandas as pd
from pydantic import BaseModel, Field, field_validator


class TopicTerms(BaseModel):
    """
    Top-weighted terms of one topic.

    Attributes:
        topic_id: Topic number (1 to num_topics)
        terms: (term, beta) pairs sorted by beta, descending
    """
    topic_id: int = Field(..., ge=1, description="Topic number")
    terms: List[Tuple[str, float]] = Field(default_factory=list, description="Top terms with weights")

    @field_validator('terms')
    @classmethod
    def validate_weights(cls, v: List[Tuple[str, float]]) -> List[Tuple[str, float]]:
        """Ensure each weight is a probability."""
        for term, weight in v:
            if not 0.0 <= weight <= 1.0:
                raise ValueError(f"Weight for '{term}' must be between 0.0 and 1.0, got {weight}")
        return v

    def label(self, num_words: int = 5) -> str:
        """Short human-readable label, e.g. 'Topic 3: fuel, engine, power'."""
        words = ", ".join(term for term, _ in self.terms[:num_words])
        return f"Topic {self.topic_id}: {words}"


class LDAModelInfo(BaseModel):
    """
    Information about a fitted Gibbs LDA model.

    Topic numbers carry no identity across fits: refitting with another
    seed may permute them.

    Attributes:
        num_topics: Number of topics
        num_documents: Number of rows the model was fitted on
        vocabulary_size: Size of vocabulary
        iterations: Gibbs sweeps
        burn_in: Sweeps discarded before sampling
        thin: Sweeps between kept samples (None = final state only)
        alpha: Document-topic prior
        eta: Topic-term prior
        random_state: Sampler seed
        log_likelihood: Final collapsed log-likelihood
        perplexity: In-sample perplexity
        topic_top_words: Top words for each topic
    """
    num_topics: int = Field(..., ge=1)
    num_documents: int = Field(..., ge=0)
    vocabulary_size: int = Field(..., ge=0)
    iterations: int = Field(..., ge=1)
    burn_in: int = Field(default=0, ge=0)
    thin: Optional[int] = Field(default=None, ge=1)
    alpha: float = Field(..., gt=0.0, description="Alpha hyperparameter")
    eta: float = Field(..., gt=0.0, description="Eta hyperparameter")
    random_state: int = Field(...)
    log_likelihood: Optional[float] = Field(default=None)
    perplexity: Optional[float] = Field(default=None)
    topic_top_words: Optional[Dict[int, List[Tuple[str, float]]]] = Field(
        default=None,
        description="Top words for each topic with probabilities"
    )

    def get_topic_description(self, topic_id: int, num_words: int = 10) -> str:
        """
        Get human-readable description of a topic.

        Args:
            topic_id: Topic number (1-based)
            num_words: Number of top words to include

        Returns:
            String description of the topic
        """
        label = f"Topic {topic_id}"

        if self.topic_top_words and topic_id in self.topic_top_words:
            words = self.topic_top_words[topic_id][:num_words]
            word_str = ", ".join([w[0] for w in words])
            return f"{label}: {word_str}"

        return label


class PerplexitySweep(BaseModel):
    """
    Perplexity of one fitted model per candidate K.

    Lower is better, but perplexity usually keeps falling as K grows;
    picking K is left to whoever reads the curve.

    Attributes:
        results: K -> perplexity
        held_out: True if scored on held-out documents
        num_documents: Rows used for fitting
        num_evaluated_documents: Rows perplexity was computed on
        random_state: Sampler seed shared by all fits
    """
    results: Dict[int, float] = Field(default_factory=dict)
    held_out: bool = Field(default=False)
    num_documents: int = Field(default=0, ge=0)
    num_evaluated_documents: int = Field(default=0, ge=0)
    random_state: Optional[int] = Field(default=None)

    @property
    def k_values(self) -> List[int]:
        return sorted(self.results)

    def as_series(self) -> pd.Series:
        """Perplexity indexed by K, ascending K (for plotting)."""
        return pd.Series(
            [self.results[k] for k in self.k_values],
            index=pd.Index(self.k_values, name="num_topics"),
            name="perplexity",
        )
