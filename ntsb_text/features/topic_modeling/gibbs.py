"""
Collapsed Gibbs sampling for Latent Dirichlet Allocation.

Each token's topic is resampled from

    p(z_i = k | z_-i, w) ∝ (n_dk + alpha) * (n_kw + eta) / (n_k + V * eta)

with the token's own assignment excluded from the counts. Posterior means of
theta (document-topic) and beta (topic-term) are averaged over the kept
sampler states and renormalized.

All randomness comes from one numpy Generator seeded with ``random_state``;
the same counts, K, priors and seed give identical theta and beta. Topic
numbers are arbitrary per fit (label switching): compare topics across fits
by their top terms only.

Usage:
    from ntsb_text.features.topic_modeling import GibbsLDA

    lda = GibbsLDA(num_topics=20, iterations=500, random_state=42)
    fit = lda.fit(counts)              # counts: DocumentTermMatrix
    fit.theta                          # documents x topics
    fit.top_terms(3, n=10)             # [(term, beta), ...]
"""

import logging
import math
import warnings
from bisect import bisect_right
from dataclasses import dataclass, field
from itertools import accumulate
from typing import Hashable, List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy import sparse
from scipy.special import gammaln

from ntsb_text.exceptions import InputError, NumericalWarning, SamplingError
from ntsb_text.features.document_term import DocumentTermMatrix, WEIGHTING_COUNT
from .constants import (
    DEFAULT_ALPHA_NUMERATOR,
    DEFAULT_BURN_IN,
    DEFAULT_ETA,
    DEFAULT_ITERATIONS,
    DEFAULT_LOG_EVERY,
    DEFAULT_NUM_TOP_TERMS,
    DEFAULT_RANDOM_STATE,
    ROW_SUM_TOLERANCE,
    TOPIC_FEATURE_PREFIX,
)
from .schemas import LDAModelInfo, TopicTerms

logger = logging.getLogger(__name__)


@dataclass
class TopicModelFit:
    """
    Result of a Gibbs LDA fit (or of folding new documents into one).

    Attributes:
        theta: Document-topic distributions, shape (documents, K)
        beta: Topic-term distributions, shape (K, terms)
        doc_ids: Record id of each theta row
        vocabulary: Term of each beta column
        num_topics: K
        alpha: Document-topic prior used
        eta: Topic-term prior used
        iterations: Gibbs sweeps run
        random_state: Sampler seed
        burn_in: Sweeps discarded before sampling
        thin: Sweeps between kept samples (None = final state only)
        log_likelihoods: (sweep, log p(w | z)) trace
        dropped_ids: Record ids with no row in theta
    """
    theta: np.ndarray
    beta: np.ndarray
    doc_ids: List[Hashable]
    vocabulary: List[str]
    num_topics: int
    alpha: float
    eta: float
    iterations: int
    random_state: int
    burn_in: int = 0
    thin: Optional[int] = None
    log_likelihoods: List[Tuple[int, float]] = field(default_factory=list)
    dropped_ids: List[Hashable] = field(default_factory=list)

    @property
    def topic_labels(self) -> List[str]:
        return [f"{TOPIC_FEATURE_PREFIX}{k}" for k in range(1, self.num_topics + 1)]

    @property
    def log_likelihood(self) -> Optional[float]:
        return self.log_likelihoods[-1][1] if self.log_likelihoods else None

    def _check_topic(self, topic: int) -> int:
        if not 1 <= topic <= self.num_topics:
            raise InputError(f"Topic must be in [1, {self.num_topics}], got {topic}")
        return topic - 1

    def top_terms(self, topic: int, n: int = DEFAULT_NUM_TOP_TERMS) -> List[Tuple[str, float]]:
        """
        Highest-beta terms of a topic.

        Args:
            topic: Topic number (1-based)
            n: Number of terms

        Returns:
            (term, beta) pairs sorted by beta, descending
        """
        row = self.beta[self._check_topic(topic)]
        order = np.argsort(-row, kind="stable")[:n]
        return [(self.vocabulary[j], float(row[j])) for j in order]

    def topic_terms(self, n: int = DEFAULT_NUM_TOP_TERMS) -> List[TopicTerms]:
        return [
            TopicTerms(topic_id=k, terms=self.top_terms(k, n))
            for k in range(1, self.num_topics + 1)
        ]

    def top_terms_table(self, n: int = DEFAULT_NUM_TOP_TERMS) -> pd.DataFrame:
        """Top n terms per topic, one column per topic."""
        return pd.DataFrame({
            label: [term for term, _ in self.top_terms(k, n)]
            for k, label in enumerate(self.topic_labels, start=1)
        })

    def theta_frame(self) -> pd.DataFrame:
        """Theta indexed by record id (join key for per-record metadata)."""
        return pd.DataFrame(
            self.theta,
            index=pd.Index(self.doc_ids, name="record_id"),
            columns=self.topic_labels,
        )

    def beta_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.beta, index=self.topic_labels, columns=self.vocabulary)

    def dominant_topics(self) -> np.ndarray:
        """Most probable topic (1-based) per document."""
        return np.argmax(self.theta, axis=1) + 1

    def model_info(
        self,
        num_words: int = DEFAULT_NUM_TOP_TERMS,
        perplexity: Optional[float] = None,
    ) -> LDAModelInfo:
        return LDAModelInfo(
            num_topics=self.num_topics,
            num_documents=self.theta.shape[0],
            vocabulary_size=len(self.vocabulary),
            iterations=self.iterations,
            burn_in=self.burn_in,
            thin=self.thin,
            alpha=self.alpha,
            eta=self.eta,
            random_state=self.random_state,
            log_likelihood=self.log_likelihood,
            perplexity=perplexity,
            topic_top_words={
                k: self.top_terms(k, num_words) for k in range(1, self.num_topics + 1)
            },
        )


# ===========================
# Input Handling
# ===========================

def _as_count_matrix(dtm) -> Tuple[sparse.csr_matrix, List[Hashable], List[str], List[Hashable]]:
    """Validate a count DTM and return (matrix, doc_ids, vocabulary, dropped_ids)."""
    if isinstance(dtm, DocumentTermMatrix):
        if dtm.weighting != WEIGHTING_COUNT:
            raise InputError(f"LDA needs raw counts, got weighting={dtm.weighting!r}")
        matrix = dtm.matrix
        doc_ids = list(dtm.doc_ids)
        vocabulary = list(dtm.vocabulary)
        dropped_ids = list(dtm.dropped_ids)
    else:
        matrix = sparse.csr_matrix(dtm)
        doc_ids = list(range(matrix.shape[0]))
        vocabulary = [str(j) for j in range(matrix.shape[1])]
        dropped_ids = []

    n_docs, n_terms = matrix.shape
    if n_docs == 0 or n_terms == 0:
        raise InputError(f"Document-term matrix is empty (shape {matrix.shape})")

    matrix = sparse.csr_matrix(matrix, copy=True)
    matrix.eliminate_zeros()
    data = matrix.data
    if not np.all(np.isfinite(data)) or np.any(data < 0) or np.any(data != np.round(data)):
        raise InputError("Document-term matrix must hold non-negative integer counts")

    empty_rows = np.flatnonzero(matrix.getnnz(axis=1) == 0)
    if len(empty_rows):
        examples = [doc_ids[i] for i in empty_rows[:5]]
        raise InputError(
            f"{len(empty_rows)} documents have no terms (e.g. {examples}); "
            f"drop empty rows before fitting"
        )

    return matrix.astype(np.int64), doc_ids, vocabulary, dropped_ids


def _expand_tokens(matrix: sparse.csr_matrix) -> Tuple[np.ndarray, np.ndarray]:
    """One (document, term) pair per token occurrence, in row then column order."""
    rows = np.repeat(np.arange(matrix.shape[0]), np.diff(matrix.indptr))
    docs = np.repeat(rows, matrix.data)
    words = np.repeat(matrix.indices, matrix.data)
    return docs.astype(np.int64), words.astype(np.int64)


# ===========================
# Sampler Internals
# ===========================

def _draw(weights, u: float) -> int:
    """Index drawn from unnormalized ``weights`` using the uniform ``u``."""
    cumulative = list(accumulate(weights))
    total = cumulative[-1]
    if not (math.isfinite(total) and total > 0.0):
        raise SamplingError(
            f"Gibbs conditional has invalid total weight {total}; "
            f"check alpha/eta (weights={list(weights)})"
        )
    k = bisect_right(cumulative, u * total)
    return k if k < len(cumulative) else len(cumulative) - 1


# Sweep state (z, ndk, nwk, nk, uniforms) is plain lists of Python scalars.
# Per-token work must stay at one length-K list plus accumulate/bisect.

def _collapsed_sweep(docs, words, z, ndk, nwk, nk, inv_nk, uniforms, alpha, eta, v_eta) -> None:
    """
    One pass over all tokens, updating assignments and counts in place.

    ``inv_nk[k]`` caches 1 / (nk[k] + V * eta) and is refreshed for the two
    topics whose totals change per token.
    """
    for i, d in enumerate(docs):
        nd = ndk[d]
        nw = nwk[words[i]]
        k = z[i]
        nd[k] -= 1
        nw[k] -= 1
        nk[k] -= 1
        inv_nk[k] = 1.0 / (nk[k] + v_eta)

        k = _draw(
            [(a + alpha) * (b + eta) * c for a, b, c in zip(nd, nw, inv_nk)],
            uniforms[i],
        )

        z[i] = k
        nd[k] += 1
        nw[k] += 1
        nk[k] += 1
        inv_nk[k] = 1.0 / (nk[k] + v_eta)


def _fold_in_sweep(docs, words, z, ndk, beta_wk, uniforms, alpha) -> None:
    """One pass with topic-term distributions held fixed."""
    for i, d in enumerate(docs):
        nd = ndk[d]
        k = z[i]
        nd[k] -= 1

        k = _draw([(a + alpha) * b for a, b in zip(nd, beta_wk[words[i]])], uniforms[i])

        z[i] = k
        nd[k] += 1


def _theta_estimate(ndk: np.ndarray, alpha: float) -> np.ndarray:
    num_topics = ndk.shape[1]
    return (ndk + alpha) / (ndk.sum(axis=1, keepdims=True) + num_topics * alpha)


def _beta_estimate(nwk: np.ndarray, nk: np.ndarray, eta: float) -> np.ndarray:
    num_terms = nwk.shape[0]
    return (nwk.T + eta) / (nk[:, None] + num_terms * eta)


def collapsed_log_likelihood(nwk: np.ndarray, nk: np.ndarray, eta: float) -> float:
    """log p(w | z) with topic-term distributions integrated out."""
    num_terms, num_topics = nwk.shape
    return float(
        num_topics * (gammaln(num_terms * eta) - num_terms * gammaln(eta))
        + gammaln(nwk + eta).sum()
        - gammaln(nk + num_terms * eta).sum()
    )


def _renormalize(matrix: np.ndarray, name: str) -> np.ndarray:
    """Rescale rows to sum to 1, warning if they had drifted."""
    if not np.all(np.isfinite(matrix)):
        raise SamplingError(f"{name} contains non-finite values")
    sums = matrix.sum(axis=1, keepdims=True)
    if np.any(sums <= 0):
        raise SamplingError(f"{name} has rows with non-positive mass")
    drift = float(np.max(np.abs(sums - 1.0)))
    if drift > ROW_SUM_TOLERANCE:
        message = f"{name} rows drifted from 1 by up to {drift:.3g} before renormalization"
        logger.warning(message)
        warnings.warn(message, NumericalWarning, stacklevel=3)
    return matrix / sums


class GibbsLDA:
    """
    LDA topic model fitted by collapsed Gibbs sampling.

    The sampler is single-threaded; it is the reference for reproducibility.

    Usage:
        lda = GibbsLDA(num_topics=10, iterations=500, random_state=1)
        fit = lda.fit(counts)
        held_out_fit = lda.transform(fit, new_counts)
    """

    def __init__(
        self,
        num_topics: int,
        iterations: int = DEFAULT_ITERATIONS,
        alpha: Optional[float] = None,
        eta: float = DEFAULT_ETA,
        random_state: int = DEFAULT_RANDOM_STATE,
        burn_in: int = DEFAULT_BURN_IN,
        thin: Optional[int] = None,
        log_every: int = DEFAULT_LOG_EVERY,
    ):
        """
        Initialize the sampler.

        Args:
            num_topics: Number of topics K (>= 1)
            iterations: Number of Gibbs sweeps
            alpha: Symmetric document-topic prior (default: 50 / K)
            eta: Symmetric topic-term prior
            random_state: Seed for the sampler's random generator
            burn_in: Sweeps discarded before posterior samples are kept
            thin: Keep a sample every `thin` sweeps after burn-in (None = final state only)
            log_every: Log the log-likelihood every N sweeps (0 = only at the end)

        Raises:
            InputError: On invalid K, iteration counts or priors
        """
        if isinstance(num_topics, bool) or not isinstance(num_topics, (int, np.integer)) or num_topics < 1:
            raise InputError(f"num_topics must be an integer >= 1, got {num_topics!r}")
        if not isinstance(iterations, (int, np.integer)) or iterations < 1:
            raise InputError(f"iterations must be an integer >= 1, got {iterations!r}")
        if burn_in < 0 or burn_in >= iterations:
            raise InputError(f"burn_in must be in [0, iterations), got {burn_in}")
        if thin is not None and thin < 1:
            raise InputError(f"thin must be >= 1, got {thin}")
        if log_every < 0:
            raise InputError(f"log_every must be >= 0, got {log_every}")

        alpha = DEFAULT_ALPHA_NUMERATOR / num_topics if alpha is None else alpha
        for name, value in (("alpha", alpha), ("eta", eta)):
            if not isinstance(value, (int, float, np.floating)) or not math.isfinite(value) or value <= 0:
                raise InputError(f"{name} must be a finite positive number, got {value!r}")

        self.num_topics = int(num_topics)
        self.iterations = int(iterations)
        self.alpha = float(alpha)
        self.eta = float(eta)
        self.random_state = random_state
        self.burn_in = int(burn_in)
        self.thin = thin
        self.log_every = int(log_every)

        logger.info(
            f"Initialized GibbsLDA with {self.num_topics} topics, {self.iterations} iterations, "
            f"alpha={self.alpha:.4g}, eta={self.eta:.4g}, seed={self.random_state}"
        )

    def _sample_iterations(self, iterations: int) -> List[int]:
        """Sweeps whose state contributes to the posterior means."""
        if self.thin is None:
            return [iterations]
        kept = list(range(self.burn_in + self.thin, iterations + 1, self.thin))
        return kept or [iterations]

    def fit(self, dtm) -> TopicModelFit:
        """
        Fit the model to a count matrix.

        Args:
            dtm: DocumentTermMatrix (counts) or any 2-D count matrix

        Returns:
            TopicModelFit with theta, beta and the log-likelihood trace

        Raises:
            InputError: Empty matrix, non-count entries or empty rows
            SamplingError: Non-finite sampling weights
        """
        matrix, doc_ids, vocabulary, dropped_ids = _as_count_matrix(dtm)
        n_docs, n_terms = matrix.shape
        num_topics = self.num_topics
        docs, words = _expand_tokens(matrix)
        n_tokens = len(docs)

        logger.info(
            f"Fitting LDA: {n_docs} documents, {n_terms} terms, {n_tokens} tokens, "
            f"{num_topics} topics"
        )

        rng = np.random.default_rng(self.random_state)
        z_init = rng.integers(0, num_topics, size=n_tokens)

        ndk_init = np.zeros((n_docs, num_topics), dtype=np.int64)
        nwk_init = np.zeros((n_terms, num_topics), dtype=np.int64)
        np.add.at(ndk_init, (docs, z_init), 1)
        np.add.at(nwk_init, (words, z_init), 1)

        z = z_init.tolist()
        ndk = ndk_init.tolist()
        nwk = nwk_init.tolist()
        nk = nwk_init.sum(axis=0).tolist()
        v_eta = n_terms * self.eta
        inv_nk = [1.0 / (n + v_eta) for n in nk]

        doc_list = docs.tolist()
        word_list = words.tolist()
        keep = set(self._sample_iterations(self.iterations))

        theta_sum = np.zeros((n_docs, num_topics))
        beta_sum = np.zeros((num_topics, n_terms))
        n_samples = 0
        log_likelihoods: List[Tuple[int, float]] = []

        for sweep in range(1, self.iterations + 1):
            uniforms = rng.random(n_tokens).tolist()
            _collapsed_sweep(doc_list, word_list, z, ndk, nwk, nk, inv_nk, uniforms,
                             self.alpha, self.eta, v_eta)

            if sweep in keep:
                theta_sum += _theta_estimate(np.asarray(ndk), self.alpha)
                beta_sum += _beta_estimate(np.asarray(nwk), np.asarray(nk), self.eta)
                n_samples += 1

            if (self.log_every and sweep % self.log_every == 0) or sweep == self.iterations:
                log_likelihood = collapsed_log_likelihood(np.asarray(nwk), np.asarray(nk), self.eta)
                log_likelihoods.append((sweep, log_likelihood))
                logger.info(f"Sweep {sweep}/{self.iterations}: log-likelihood {log_likelihood:.2f}")

        theta = _renormalize(theta_sum / n_samples, "theta")
        beta = _renormalize(beta_sum / n_samples, "beta")

        logger.info(f"LDA fit complete ({n_samples} posterior samples averaged)")

        return TopicModelFit(
            theta=theta,
            beta=beta,
            doc_ids=doc_ids,
            vocabulary=vocabulary,
            num_topics=num_topics,
            alpha=self.alpha,
            eta=self.eta,
            iterations=self.iterations,
            random_state=self.random_state,
            burn_in=self.burn_in,
            thin=self.thin,
            log_likelihoods=log_likelihoods,
            dropped_ids=dropped_ids,
        )

    def transform(
        self,
        fit: TopicModelFit,
        dtm,
        iterations: Optional[int] = None,
    ) -> TopicModelFit:
        """
        Infer theta for new documents with the fitted beta held fixed.

        Documents are first aligned to the fit's vocabulary; those left with
        no known terms are reported in ``dropped_ids``.

        Args:
            fit: A previous fit of this model
            dtm: Counts for the new documents
            iterations: Fold-in sweeps (default: self.iterations)

        Returns:
            TopicModelFit for the new documents (beta shared with ``fit``)
        """
        if fit.num_topics != self.num_topics:
            raise InputError(
                f"Fit has {fit.num_topics} topics but sampler is configured for {self.num_topics}"
            )
        iterations = self.iterations if iterations is None else iterations
        if iterations < 1 or self.burn_in >= iterations:
            raise InputError(f"iterations must be > burn_in ({self.burn_in}), got {iterations}")

        if isinstance(dtm, DocumentTermMatrix):
            dtm = dtm.align_to(fit.vocabulary)
            if dtm.num_documents == 0:
                raise InputError("No document shares any term with the fitted vocabulary")
        elif sparse.csr_matrix(dtm).shape[1] != len(fit.vocabulary):
            raise InputError(
                f"Matrix has {sparse.csr_matrix(dtm).shape[1]} columns, "
                f"fit has {len(fit.vocabulary)} terms"
            )

        matrix, doc_ids, _, dropped_ids = _as_count_matrix(dtm)
        docs, words = _expand_tokens(matrix)
        n_tokens = len(docs)
        num_topics = self.num_topics

        rng = np.random.default_rng(self.random_state)
        z_init = rng.integers(0, num_topics, size=n_tokens)
        ndk_init = np.zeros((matrix.shape[0], num_topics), dtype=np.int64)
        np.add.at(ndk_init, (docs, z_init), 1)

        z = z_init.tolist()
        ndk = ndk_init.tolist()
        beta_wk = fit.beta.T.tolist()
        doc_list = docs.tolist()
        word_list = words.tolist()
        keep = set(self._sample_iterations(iterations))

        theta_sum = np.zeros(ndk_init.shape)
        n_samples = 0
        for sweep in range(1, iterations + 1):
            uniforms = rng.random(n_tokens).tolist()
            _fold_in_sweep(doc_list, word_list, z, ndk, beta_wk, uniforms, self.alpha)
            if sweep in keep:
                theta_sum += _theta_estimate(np.asarray(ndk), self.alpha)
                n_samples += 1

        logger.info(f"Folded in {matrix.shape[0]} documents over {iterations} sweeps")

        return TopicModelFit(
            theta=_renormalize(theta_sum / n_samples, "theta"),
            beta=fit.beta,
            doc_ids=doc_ids,
            vocabulary=list(fit.vocabulary),
            num_topics=num_topics,
            alpha=self.alpha,
            eta=self.eta,
            iterations=iterations,
            random_state=self.random_state,
            burn_in=self.burn_in,
            thin=self.thin,
            dropped_ids=dropped_ids,
        )
