"""
Unit tests for ntsb_text/preprocessing/normalizer.py

Tests TextNormalizer stage by stage (escaped line breaks, stop words,
punctuation and dashes, digits, "th") and the composed behaviour.
No real data dependencies - runs in <1 second.
"""

import pytest

from ntsb_text.preprocessing import (
    ENGLISH_STOPWORDS,
    NORMALIZATION_STEPS,
    TextNormalizer,
    normalize_narrative,
)


class TestStopwordList:
    """Tests for the bundled English stop-word list."""

    def test_has_174_entries(self):
        assert len(ENGLISH_STOPWORDS) == 174
        assert len(set(ENGLISH_STOPWORDS)) == 174

    def test_contains_negations_and_prepositions(self):
        """'no' and 'during' are removed, not kept as signal."""
        assert "no" in ENGLISH_STOPWORDS
        assert "during" in ENGLISH_STOPWORDS
        assert "don't" in ENGLISH_STOPWORDS

    def test_steps_are_ordered(self):
        assert NORMALIZATION_STEPS[0] == "replace_escaped_line_breaks"
        assert NORMALIZATION_STEPS[-1] == "strip_whitespace"


class TestNormalize:
    """Tests for the composed normalize() output."""

    @pytest.fixture
    def normalizer(self) -> TextNormalizer:
        return TextNormalizer()

    def test_reference_sentence(self, normalizer: TextNormalizer):
        """Stop words, punctuation, digits and ordinal residue all go."""
        result = normalizer.normalize("The engine lost power on the 16th.\\r\\nNo fuel.")
        assert result == "engine lost power fuel"

    def test_lowercases(self, normalizer: TextNormalizer):
        assert normalizer.normalize("ENGINE Failure") == "engine failure"

    def test_all_stopwords_gives_empty(self, normalizer: TextNormalizer):
        assert normalizer.normalize("The and of") == ""

    @pytest.mark.parametrize("value", [None, float("nan"), "", 42])
    def test_missing_values_give_empty(self, normalizer: TextNormalizer, value):
        assert normalizer.normalize(value) == ""

    def test_no_leading_trailing_or_double_spaces(self, normalizer: TextNormalizer):
        result = normalizer.normalize("  The   pilot ,  the   flare . ")
        assert result == "pilot flare"

    @pytest.mark.parametrize("text", [
        "The engine lost power on the 16th.\\r\\nNo fuel.",
        "The pilot's pre-flight inspection was inadequate.",
        "16-year-old pilot - left- and right-wing damage",
        "Fuel starvation; loss of engine power (total).",
    ])
    def test_idempotent(self, normalizer: TextNormalizer, text: str):
        once = normalizer.normalize(text)
        assert normalizer.normalize(once) == once

    def test_tokenize_splits_normalized_text(self, normalizer: TextNormalizer):
        assert normalizer.tokenize("The engine lost power") == ["engine", "lost", "power"]

    def test_tokens_have_no_dangling_dashes(self, normalizer: TextNormalizer):
        tokens = normalizer.tokenize("left- and -right wing - damage --")
        assert tokens
        for token in tokens:
            assert not token.startswith("-")
            assert not token.endswith("-")


class TestLineBreaks:
    """Escaped CR/LF literals become spaces before anything else."""

    @pytest.fixture
    def normalizer(self) -> TextNormalizer:
        return TextNormalizer()

    def test_escaped_pair_splits_words(self, normalizer: TextNormalizer):
        assert normalizer.normalize("engine\\r\\nfailure") == "engine failure"

    def test_real_line_break_is_whitespace(self, normalizer: TextNormalizer):
        assert normalizer.normalize("engine\r\nfailure") == "engine failure"


class TestStopwordRemoval:
    """Stop words are removed as whole words only."""

    @pytest.fixture
    def normalizer(self) -> TextNormalizer:
        return TextNormalizer()

    def test_substrings_are_kept(self, normalizer: TextNormalizer):
        """'another' contains 'an' and 'other' but is not a stop word."""
        assert normalizer.normalize("another nothing") == "another nothing"

    def test_contractions_removed_before_punctuation(self, normalizer: TextNormalizer):
        assert normalizer.normalize("I'm sure it's icing") == "sure icing"

    def test_custom_list_replaces_default(self):
        normalizer = TextNormalizer(stopwords=["engine"])
        assert normalizer.normalize("The engine failed") == "the failed"

    def test_empty_list_keeps_everything(self):
        normalizer = TextNormalizer(stopwords=[])
        assert normalizer.normalize("the engine") == "the engine"


class TestPunctuation:
    """Punctuation removal keeps dashes between two word characters."""

    @pytest.fixture
    def normalizer(self) -> TextNormalizer:
        return TextNormalizer()

    def test_apostrophe_removed(self, normalizer: TextNormalizer):
        result = normalizer.normalize("The pilot's pre-flight inspection was inadequate.")
        assert result == "pilots pre-flight inspection inadequate"

    def test_intra_word_dash_kept(self, normalizer: TextNormalizer):
        assert normalizer.normalize("right-wing") == "right-wing"

    def test_standalone_dash_removed(self, normalizer: TextNormalizer):
        assert normalizer.normalize("engine - failure") == "engine failure"

    def test_trailing_dash_removed(self, normalizer: TextNormalizer):
        assert normalizer.normalize("left- and right-wing") == "left right-wing"

    def test_dash_orphaned_by_digits_removed(self, normalizer: TextNormalizer):
        """'16-year-old' keeps both dashes until the digits go, then the lead dash is trimmed."""
        assert normalizer.normalize("16-year-old pilot") == "year-old pilot"

    def test_unicode_punctuation_removed(self, normalizer: TextNormalizer):
        assert normalizer.normalize("pilot’s “improper” flare") == "pilots improper flare"


class TestDigitsAndOrdinals:
    """Digit runs are removed; the 'th' they leave behind is removed after."""

    @pytest.fixture
    def normalizer(self) -> TextNormalizer:
        return TextNormalizer()

    def test_numbers_removed(self, normalizer: TextNormalizer):
        assert normalizer.normalize("runway 27 heading 270") == "runway heading"

    def test_ordinal_residue_removed(self, normalizer: TextNormalizer):
        assert normalizer.normalize("5th engine") == "engine"

    def test_th_inside_words_kept(self, normalizer: TextNormalizer):
        assert normalizer.normalize("thrust bath") == "thrust bath"

    def test_without_extra_exclusions_residue_stays(self):
        normalizer = TextNormalizer(extra_excluded=())
        assert normalizer.normalize("the 16th") == "th"


class TestNormalizeCorpus:
    """Tests for normalize_corpus() and the module-level helper."""

    def test_preserves_order_and_empties(self):
        normalizer = TextNormalizer()
        result = normalizer.normalize_corpus(["Engine failure", "the and of", None, "Hard landing"])
        assert result == ["engine failure", "", "", "hard landing"]

    def test_normalize_narrative_matches_class(self):
        text = "Loss of engine power due to fuel exhaustion."
        assert normalize_narrative(text) == TextNormalizer().normalize(text)
        assert normalize_narrative(text) == "loss engine power due fuel exhaustion"
