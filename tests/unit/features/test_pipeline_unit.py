"""
Unit tests for ntsb_text/features/pipeline.py

Tests the end-to-end flow from raw narratives to count, TF-IDF and topic
features, and how record ids are carried through.
"""

from unittest.mock import patch

import numpy as np
import pandas as pd
import pytest
from pydantic import ValidationError

from ntsb_text.config import settings
from ntsb_text.exceptions import InputError
from ntsb_text.features import NarrativeFeaturePipeline, NarrativeFeatures, PipelineConfig
from ntsb_text.features.document_term import WEIGHTING_COUNT, WEIGHTING_TFIDF

EXPECTED_VOCABULARY = [
    "engine", "failure", "fuel", "landing", "loss", "maintain", "pilots", "power",
]


@pytest.fixture
def pipeline() -> NarrativeFeaturePipeline:
    return NarrativeFeaturePipeline(
        PipelineConfig(min_freq=0.3, max_freq=0.8, num_topics=2, iterations=20, random_state=3)
    )


class TestPipelineConfig:
    """Tests for PipelineConfig validation."""

    def test_defaults_are_unset(self):
        config = PipelineConfig()
        assert config.min_freq is None
        assert config.num_topics is None

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            PipelineConfig(unknown_option=1)

    @pytest.mark.parametrize("field,value", [
        ("min_freq", 1.5),
        ("num_topics", 0),
        ("eta", 0.0),
    ])
    def test_out_of_range_rejected(self, field: str, value):
        with pytest.raises(ValidationError):
            PipelineConfig(**{field: value})


class TestBuildFeatures:
    """Tests for normalization, counting and weighting."""

    def test_normalized_text(self, pipeline: NarrativeFeaturePipeline, raw_narratives: pd.Series):
        features = pipeline.build_features(raw_narratives)
        assert isinstance(features, NarrativeFeatures)
        assert features.normalized.index.name == "record_id"
        assert len(features.normalized) == 6
        assert features.normalized["ev002"] == "total loss engine power due fuel exhaustion"
        assert features.normalized["ev004"] == ""

    def test_vocabulary(self, pipeline: NarrativeFeaturePipeline, raw_narratives: pd.Series):
        features = pipeline.build_features(raw_narratives)
        assert features.counts.vocabulary == EXPECTED_VOCABULARY

    def test_all_stopword_record_dropped(self, pipeline: NarrativeFeaturePipeline, raw_narratives: pd.Series):
        features = pipeline.build_features(raw_narratives)
        assert features.doc_ids == ["ev001", "ev002", "ev003", "ev005", "ev006"]
        assert features.dropped_ids == ["ev004"]

    def test_tfidf_aligned_with_counts(self, pipeline: NarrativeFeaturePipeline, raw_narratives: pd.Series):
        features = pipeline.build_features(raw_narratives)
        assert features.counts.weighting == WEIGHTING_COUNT
        assert features.tfidf.weighting == WEIGHTING_TFIDF
        assert features.tfidf.shape == features.counts.shape
        assert features.tfidf.doc_ids == features.counts.doc_ids
        assert features.topics is None

    def test_mapping_input(self, pipeline: NarrativeFeaturePipeline, raw_narratives: pd.Series):
        features = pipeline.build_features(raw_narratives.to_dict())
        assert features.doc_ids == ["ev001", "ev002", "ev003", "ev005", "ev006"]

    def test_sequence_input_with_ids(self, pipeline: NarrativeFeaturePipeline, raw_narratives: pd.Series):
        ids = [f"id{i}" for i in range(len(raw_narratives))]
        features = pipeline.build_features(list(raw_narratives.values), record_ids=ids)
        assert features.dropped_ids == ["id3"]

    def test_sequence_input_defaults_to_positions(self, pipeline: NarrativeFeaturePipeline, raw_narratives: pd.Series):
        features = pipeline.build_features(list(raw_narratives.values))
        assert features.dropped_ids == [3]

    @pytest.mark.parametrize("as_mapping", [False, True])
    def test_record_ids_with_indexed_input_rejected(
        self, pipeline: NarrativeFeaturePipeline, raw_narratives: pd.Series, as_mapping: bool
    ):
        narratives = raw_narratives.to_dict() if as_mapping else raw_narratives
        ids = [f"id{i}" for i in range(len(raw_narratives))]
        with pytest.raises(InputError):
            pipeline.build_features(narratives, record_ids=ids)


class TestTopics:
    """Tests for topic fitting through the pipeline."""

    def test_run_attaches_topics(self, pipeline: NarrativeFeaturePipeline, raw_narratives: pd.Series):
        features = pipeline.run(raw_narratives)
        theta = features.topics.theta_frame()
        assert list(theta.index) == features.doc_ids
        assert list(theta.columns) == ["topic_1", "topic_2"]
        np.testing.assert_allclose(theta.sum(axis=1), 1.0, atol=1e-6)

    def test_run_is_reproducible(self, pipeline: NarrativeFeaturePipeline, raw_narratives: pd.Series):
        first = pipeline.run(raw_narratives)
        second = pipeline.run(raw_narratives)
        np.testing.assert_array_equal(first.topics.theta, second.topics.theta)

    def test_make_topic_model_uses_config(self):
        lda = NarrativeFeaturePipeline(PipelineConfig(num_topics=4, random_state=9)).make_topic_model()
        assert lda.num_topics == 4
        assert lda.alpha == pytest.approx(12.5)
        assert lda.random_state == 9

    def test_make_topic_model_override(self, pipeline: NarrativeFeaturePipeline):
        assert pipeline.make_topic_model(7).num_topics == 7

    def test_make_topic_model_falls_back_to_settings(self):
        lda = NarrativeFeaturePipeline().make_topic_model()
        assert lda.num_topics == settings.topic_modeling.model.num_topics
        assert lda.eta == settings.topic_modeling.model.eta
        assert lda.random_state == settings.reproducibility.random_seed


class TestTopicSweep:
    """Tests for the K sweep sharing sampler settings with the final fit."""

    def test_params_match_final_model(self):
        pipeline = NarrativeFeaturePipeline(PipelineConfig(iterations=30, burn_in=5, thin=5))
        params = pipeline.topic_model_params()
        assert params["burn_in"] == 5
        assert params["thin"] == 5
        assert params["alpha"] is None

        lda = pipeline.make_topic_model(4)
        assert (lda.iterations, lda.burn_in, lda.thin) == (30, 5, 5)
        assert lda.alpha == pytest.approx(12.5)

    def test_sweep_forwards_sampler_settings(self, raw_narratives: pd.Series):
        pipeline = NarrativeFeaturePipeline(
            PipelineConfig(min_freq=0.3, max_freq=0.8, iterations=30, burn_in=5, thin=5, random_state=3)
        )
        features = pipeline.build_features(raw_narratives)

        with patch("ntsb_text.features.pipeline.perplexity_sweep") as mock_sweep:
            pipeline.sweep_topics(features, k_values=[1, 2], max_workers=1)

        args, kwargs = mock_sweep.call_args
        assert args[1] == [1, 2]
        assert kwargs["held_out"] is not None
        assert kwargs["burn_in"] == 5
        assert kwargs["thin"] == 5
        assert kwargs["iterations"] == 30
        assert kwargs["random_state"] == 3
        # None lets each K use 50 / K
        assert kwargs["alpha"] is None

    def test_held_out_sweep(self, pipeline: NarrativeFeaturePipeline, raw_narratives: pd.Series):
        features = pipeline.build_features(raw_narratives)
        sweep = pipeline.sweep_topics(features, k_values=[1, 2], held_out_fraction=0.4, max_workers=1)
        assert sweep.k_values == [1, 2]
        assert sweep.held_out
        assert sweep.num_documents == 3
        assert sweep.num_evaluated_documents == 2
        assert sweep.random_state == 3
