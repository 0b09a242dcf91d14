"""
Perplexity scoring and topic-count sweeps.

    perplexity = exp( - sum_{d,w} n_dw * log(sum_k theta_dk * beta_kw) / sum_{d,w} n_dw )

Lower is better. Scores are comparable only across models evaluated on the
same documents. Perplexity typically keeps decreasing as K grows, so the
sweep reports every K and leaves the choice to the caller.

Usage:
    from ntsb_text.features.topic_modeling import perplexity_sweep, split_documents

    train, held_out = split_documents(counts, held_out_fraction=0.2)
    sweep = perplexity_sweep(train, [5, 10, 20, 40], held_out=held_out, iterations=300)
    sweep.as_series().plot()
"""

import logging
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np
from scipy import sparse

from ntsb_text.exceptions import InputError
from ntsb_text.features.document_term import DocumentTermMatrix, WEIGHTING_COUNT
from ntsb_text.utils.parallel import ParallelProcessor
from .constants import DEFAULT_HELD_OUT_FRACTION, DEFAULT_RANDOM_STATE
from .gibbs import GibbsLDA
from .schemas import PerplexitySweep

logger = logging.getLogger(__name__)


def _counts_of(dtm) -> sparse.csr_matrix:
    if isinstance(dtm, DocumentTermMatrix):
        if dtm.weighting != WEIGHTING_COUNT:
            raise InputError(f"Perplexity needs raw counts, got weighting={dtm.weighting!r}")
        return dtm.matrix
    return sparse.csr_matrix(dtm)


def perplexity(theta, beta, dtm) -> float:
    """
    Per-token perplexity of counts under theta and beta.

    Args:
        theta: Document-topic matrix (documents x K), rows aligned with dtm
        beta: Topic-term matrix (K x terms), columns aligned with dtm
        dtm: Count matrix (DocumentTermMatrix, sparse matrix or ndarray)

    Returns:
        exp of the negative mean log-probability per token

    Raises:
        InputError: On shape mismatch, negative counts or an empty matrix
    """
    counts = _counts_of(dtm).tocoo()
    theta = np.asarray(theta, dtype=np.float64)
    beta = np.asarray(beta, dtype=np.float64)

    if theta.ndim != 2 or beta.ndim != 2:
        raise InputError("theta and beta must be 2-D")
    if theta.shape[1] != beta.shape[0]:
        raise InputError(
            f"theta has {theta.shape[1]} topics but beta has {beta.shape[0]}"
        )
    if counts.shape != (theta.shape[0], beta.shape[1]):
        raise InputError(
            f"Counts shape {counts.shape} does not match "
            f"theta/beta ({theta.shape[0]}, {beta.shape[1]})"
        )
    if counts.nnz and counts.data.min() < 0:
        raise InputError("Counts must be non-negative")

    total_tokens = float(counts.data.sum())
    if total_tokens <= 0:
        raise InputError("Cannot compute perplexity of a matrix with no tokens")

    token_probs = np.einsum("ij,ij->i", theta[counts.row], beta[:, counts.col].T)
    with np.errstate(divide="ignore"):
        log_probs = np.log(token_probs)

    return float(np.exp(-np.dot(counts.data, log_probs) / total_tokens))


def split_documents(
    dtm: DocumentTermMatrix,
    held_out_fraction: float = DEFAULT_HELD_OUT_FRACTION,
    random_state: int = DEFAULT_RANDOM_STATE,
) -> Tuple[DocumentTermMatrix, DocumentTermMatrix]:
    """
    Seeded train/held-out split of DTM rows (row order kept within each part).

    Returns:
        (train, held_out)
    """
    if not 0.0 < held_out_fraction < 1.0:
        raise InputError(f"held_out_fraction must be in (0, 1), got {held_out_fraction}")
    n_docs = dtm.num_documents
    if n_docs < 2:
        raise InputError(f"Need at least 2 documents to split, got {n_docs}")

    n_held_out = min(n_docs - 1, max(1, int(round(n_docs * held_out_fraction))))
    order = np.random.default_rng(random_state).permutation(n_docs)
    held_out_rows = np.sort(order[:n_held_out])
    train_rows = np.sort(order[n_held_out:])

    logger.info(f"Split {n_docs} documents into {len(train_rows)} train / {n_held_out} held out")
    return dtm.select_rows(train_rows), dtm.select_rows(held_out_rows)


def _fit_and_score(task: Tuple[int, Any, Optional[Any], Dict[str, Any]]) -> Dict[str, Any]:
    """Fit one model and score it (runs in a worker process when parallel)."""
    num_topics, dtm, held_out, lda_params = task
    lda = GibbsLDA(num_topics=num_topics, **lda_params)
    fit = lda.fit(dtm)

    if held_out is None:
        score = perplexity(fit.theta, fit.beta, dtm)
        num_evaluated = fit.theta.shape[0]
    else:
        held_out_fit = lda.transform(fit, held_out)
        aligned = held_out.align_to(fit.vocabulary) if isinstance(held_out, DocumentTermMatrix) else held_out
        score = perplexity(held_out_fit.theta, fit.beta, aligned)
        num_evaluated = held_out_fit.theta.shape[0]

    logger.info(f"K={num_topics}: perplexity {score:.3f}")
    return {"num_topics": num_topics, "perplexity": score, "num_evaluated": num_evaluated}


def perplexity_sweep(
    dtm,
    k_values: Sequence[int],
    held_out=None,
    max_workers: int = 1,
    **lda_params,
) -> PerplexitySweep:
    """
    Fit one model per candidate K and record its perplexity.

    Args:
        dtm: Counts to fit on
        k_values: Candidate topic counts
        held_out: Optional held-out counts; scored by fold-in if given,
            otherwise perplexity is in-sample
        max_workers: Worker processes (1 = sequential)
        **lda_params: Passed to GibbsLDA (iterations, alpha, eta, random_state, ...)

    Returns:
        PerplexitySweep mapping K -> perplexity
    """
    k_values = list(k_values)
    if not k_values:
        raise InputError("k_values must not be empty")
    if len(set(k_values)) != len(k_values):
        raise InputError(f"k_values must be unique, got {k_values}")
    if any(k < 1 for k in k_values):
        raise InputError(f"Every K must be >= 1, got {k_values}")

    logger.info(f"Perplexity sweep over K={k_values} ({'held-out' if held_out is not None else 'in-sample'})")

    tasks = [(k, dtm, held_out, lda_params) for k in k_values]

    def log_progress(idx: int, result: Dict[str, Any]) -> None:
        logger.info(
            f"Sweep progress {idx}/{len(tasks)}: "
            f"K={result['num_topics']} perplexity {result['perplexity']:.3f}"
        )

    results = ParallelProcessor(max_workers=max_workers).process_batch(
        tasks, _fit_and_score, progress_callback=log_progress
    )

    return PerplexitySweep(
        results={r["num_topics"]: r["perplexity"] for r in results},
        held_out=held_out is not None,
        num_documents=_counts_of(dtm).shape[0],
        num_evaluated_documents=results[0]["num_evaluated"],
        random_state=lda_params.get("random_state", DEFAULT_RANDOM_STATE),
    )
