"""Error taxonomy for the narrative feature pipeline."""


class InputError(ValueError):
    """A precondition on the caller's input failed (empty corpus, K < 1, bad hyperparameters)."""


class DegenerateVocabularyError(ValueError):
    """No term survived document-frequency pruning."""


class SamplingError(RuntimeError):
    """The Gibbs sampler produced non-finite or non-positive weights."""


class NumericalWarning(RuntimeWarning):
    """Posterior rows drifted from summing to 1 before renormalization."""
