"""
Topic Modeling Module

Collapsed Gibbs LDA over accident-narrative count matrices, plus perplexity
scoring for choosing the number of topics.

Key Components:
- GibbsLDA: Sampler (fit, fold-in transform)
- TopicModelFit: theta, beta, top terms, DataFrame views
- perplexity / perplexity_sweep / split_documents: Model-order selection
- LDAModelInfo, TopicTerms, PerplexitySweep: Pydantic summaries

Workflow:
1. Fit a model on the count DTM:
    ```python
    from ntsb_text.features.topic_modeling import GibbsLDA

    fit = GibbsLDA(num_topics=20, random_state=42).fit(counts)
    fit.theta_frame()          # join on record_id with fatality labels
    fit.top_terms_table(10)    # for labeling topics by hand
    ```

2. Compare candidate K:
    ```python
    from ntsb_text.features.topic_modeling import perplexity_sweep, split_documents

    train, held_out = split_documents(counts)
    sweep = perplexity_sweep(train, [5, 10, 20], held_out=held_out)
    ```

Topic numbers have no meaning across fits (label switching).
"""

from .gibbs import GibbsLDA, TopicModelFit, collapsed_log_likelihood
from .perplexity import perplexity, perplexity_sweep, split_documents
from .schemas import LDAModelInfo, PerplexitySweep, TopicTerms
from .constants import (
    TOPIC_MODELING_MODULE_VERSION,
    DEFAULT_NUM_TOPICS,
    DEFAULT_ITERATIONS,
    DEFAULT_ETA,
    DEFAULT_ALPHA_NUMERATOR,
    DEFAULT_RANDOM_STATE,
)

__all__ = [
    # Main classes
    "GibbsLDA",
    "TopicModelFit",
    "collapsed_log_likelihood",
    # Evaluation
    "perplexity",
    "perplexity_sweep",
    "split_documents",
    # Schemas
    "LDAModelInfo",
    "PerplexitySweep",
    "TopicTerms",
    # Constants
    "TOPIC_MODELING_MODULE_VERSION",
    "DEFAULT_NUM_TOPICS",
    "DEFAULT_ITERATIONS",
    "DEFAULT_ETA",
    "DEFAULT_ALPHA_NUMERATOR",
    "DEFAULT_RANDOM_STATE",
]

__version__ = TOPIC_MODELING_MODULE_VERSION
