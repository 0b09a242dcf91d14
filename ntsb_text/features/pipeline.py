"""
Narrative Feature Pipeline

Orchestrates the complete text-to-features flow:
1. Normalize - raw narrative -> normalized token stream
2. Count     - normalized narratives -> pruned document-term matrix
3. Weight    - count matrix -> TF-IDF matrix (penalized regression input)
4. Topics    - count matrix -> Gibbs LDA theta/beta (topic regression input)

Every matrix carries the record ids of its rows; narratives that end up with
no surviving terms are listed in ``dropped_ids``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Mapping, Optional, Sequence

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from ntsb_text.config import settings
from ntsb_text.exceptions import InputError
from ntsb_text.preprocessing import TextNormalizer
from ntsb_text.preprocessing.constants import ENGLISH_STOPWORDS
from .document_term import DocumentTermMatrix, build_document_term_matrix, weight_tfidf
from .topic_modeling import (
    GibbsLDA,
    PerplexitySweep,
    TopicModelFit,
    perplexity_sweep,
    split_documents,
)

logger = logging.getLogger(__name__)


class PipelineConfig(BaseModel):
    """
    Configuration for the narrative feature pipeline (Pydantic V2)

    Fields left as None fall back to ``settings``.

    Attributes:
        min_freq: Minimum document-frequency fraction
        max_freq: Maximum document-frequency fraction
        min_word_length: Shortest token kept in the vocabulary
        extra_excluded_words: Words removed after digit stripping
        custom_stopwords: Added to the English stop-word list
        num_topics: Number of LDA topics
        iterations: Gibbs sweeps
        alpha: Document-topic prior (None = 50 / K)
        eta: Topic-term prior
        burn_in: Sweeps discarded before sampling
        thin: Sweeps between kept samples
        random_state: Sampler seed
    """
    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid',  # Raise error on unknown fields
    )

    # Vocabulary options
    min_freq: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    max_freq: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    min_word_length: Optional[int] = Field(default=None, ge=1)

    # Normalization options
    extra_excluded_words: Optional[List[str]] = Field(default=None)
    custom_stopwords: Optional[List[str]] = Field(default=None)

    # Topic model options
    num_topics: Optional[int] = Field(default=None, ge=1)
    iterations: Optional[int] = Field(default=None, ge=1)
    alpha: Optional[float] = Field(default=None, gt=0.0)
    eta: Optional[float] = Field(default=None, gt=0.0)
    burn_in: Optional[int] = Field(default=None, ge=0)
    thin: Optional[int] = Field(default=None, ge=1)
    random_state: Optional[int] = Field(default=None)


def _pick(value, default):
    return default if value is None else value


@dataclass
class NarrativeFeatures:
    """
    Feature matrices for one corpus.

    Attributes:
        normalized: Normalized narrative per record id (all input records)
        counts: Pruned count DTM
        tfidf: TF-IDF DTM (same rows and columns as counts)
        topics: Fitted topic model, if requested
    """
    normalized: pd.Series
    counts: DocumentTermMatrix
    tfidf: DocumentTermMatrix
    topics: Optional[TopicModelFit] = field(default=None)

    @property
    def doc_ids(self) -> List[Hashable]:
        return list(self.counts.doc_ids)

    @property
    def dropped_ids(self) -> List[Hashable]:
        return list(self.counts.dropped_ids)


class NarrativeFeaturePipeline:
    """
    Complete feature pipeline for accident narratives.

    Flow: Normalize → Count → TF-IDF → LDA

    Example:
        >>> pipeline = NarrativeFeaturePipeline(PipelineConfig(num_topics=20))
        >>> features = pipeline.run(df.set_index("ev_id")["narr_cause"])
        >>> X = features.tfidf.matrix                 # rows: features.doc_ids
        >>> theta = features.topics.theta_frame()     # indexed by ev_id
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        """
        Initialize the pipeline

        Args:
            config: Pipeline configuration. Uses settings if not provided.
        """
        self.config = config or PipelineConfig()

        stopwords = list(ENGLISH_STOPWORDS) + list(
            _pick(self.config.custom_stopwords, settings.preprocessing.custom_stopwords)
        )
        self.normalizer = TextNormalizer(
            stopwords=stopwords,
            extra_excluded=_pick(
                self.config.extra_excluded_words, settings.preprocessing.extra_excluded_words
            ),
        )

    @staticmethod
    def _split_input(narratives, record_ids: Optional[Sequence[Hashable]]):
        if isinstance(narratives, (pd.Series, Mapping)) and record_ids is not None:
            raise InputError(
                "record_ids cannot be combined with a Series or mapping; "
                "their index/keys are already the record ids"
            )
        if isinstance(narratives, pd.Series):
            return list(narratives.index), list(narratives.values)
        if isinstance(narratives, Mapping):
            return list(narratives.keys()), list(narratives.values())
        texts = list(narratives)
        ids = list(range(len(texts))) if record_ids is None else list(record_ids)
        return ids, texts

    def build_features(
        self,
        narratives,
        record_ids: Optional[Sequence[Hashable]] = None,
    ) -> NarrativeFeatures:
        """
        Normalize narratives and build count and TF-IDF matrices.

        Args:
            narratives: Sequence of strings, mapping id -> text, or pandas Series
                indexed by record id
            record_ids: Ids for a plain sequence (default: positions)

        Returns:
            NarrativeFeatures without topics
        """
        ids, texts = self._split_input(narratives, record_ids)
        logger.info(f"Building narrative features for {len(texts)} records")

        normalized = self.normalizer.normalize_corpus(texts)
        counts = build_document_term_matrix(
            normalized,
            doc_ids=ids,
            min_freq=_pick(self.config.min_freq, settings.document_term.min_freq),
            max_freq=_pick(self.config.max_freq, settings.document_term.max_freq),
            min_word_length=_pick(self.config.min_word_length, settings.document_term.min_word_length),
        )
        tfidf = weight_tfidf(counts)

        if counts.dropped_ids:
            logger.warning(
                f"{len(counts.dropped_ids)} narratives have no terms left and were dropped"
            )

        return NarrativeFeatures(
            normalized=pd.Series(normalized, index=pd.Index(ids, name="record_id"), name="normalized"),
            counts=counts,
            tfidf=tfidf,
        )

    def topic_model_params(self) -> Dict[str, Any]:
        """
        GibbsLDA keyword arguments other than num_topics.

        alpha stays None unless configured, so every K gets its own 50 / K.
        """
        model_settings = settings.topic_modeling.model
        return {
            "iterations": _pick(self.config.iterations, model_settings.iterations),
            "alpha": _pick(self.config.alpha, model_settings.alpha),
            "eta": _pick(self.config.eta, model_settings.eta),
            "random_state": _pick(self.config.random_state, settings.reproducibility.random_seed),
            "burn_in": _pick(self.config.burn_in, model_settings.burn_in),
            "thin": _pick(self.config.thin, model_settings.thin),
            "log_every": model_settings.log_every,
        }

    def make_topic_model(self, num_topics: Optional[int] = None) -> GibbsLDA:
        num_topics = _pick(num_topics, _pick(self.config.num_topics, settings.topic_modeling.model.num_topics))
        return GibbsLDA(num_topics=num_topics, **self.topic_model_params())

    def sweep_topics(
        self,
        features: NarrativeFeatures,
        k_values: Optional[Sequence[int]] = None,
        held_out_fraction: Optional[float] = None,
        max_workers: Optional[int] = None,
    ) -> PerplexitySweep:
        """
        Held-out perplexity for each candidate K.

        Uses the same sampler settings as fit_topics, so the curve describes
        the model that gets fitted.

        Args:
            features: Output of build_features
            k_values: Candidate topic counts (default: settings)
            held_out_fraction: Share of rows held out (default: settings)
            max_workers: Worker processes (default: settings)

        Returns:
            PerplexitySweep over k_values
        """
        evaluation = settings.topic_modeling.evaluation
        params = self.topic_model_params()
        train, held_out = split_documents(
            features.counts,
            held_out_fraction=_pick(held_out_fraction, evaluation.held_out_fraction),
            random_state=params["random_state"],
        )
        return perplexity_sweep(
            train,
            _pick(k_values, evaluation.k_values),
            held_out=held_out,
            max_workers=_pick(max_workers, evaluation.max_workers),
            **params,
        )

    def fit_topics(
        self,
        features: NarrativeFeatures,
        num_topics: Optional[int] = None,
    ) -> TopicModelFit:
        """Fit Gibbs LDA on the count matrix of ``features``."""
        fit = self.make_topic_model(num_topics).fit(features.counts)
        features.topics = fit
        return fit

    def run(
        self,
        narratives,
        record_ids: Optional[Sequence[Hashable]] = None,
        num_topics: Optional[int] = None,
    ) -> NarrativeFeatures:
        """
        Run the full pipeline.

        Returns:
            NarrativeFeatures with counts, tfidf and topics
        """
        features = self.build_features(narratives, record_ids)
        self.fit_topics(features, num_topics)
        return features
