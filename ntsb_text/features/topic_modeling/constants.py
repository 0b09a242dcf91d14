"""
Topic Modeling Constants and Configuration

This module defines constants for collapsed Gibbs LDA over
accident narrative document-term matrices.
"""

# ===========================
# Module Version
# ===========================
TOPIC_MODELING_MODULE_VERSION = "0.1.0"

# ===========================
# Default Gibbs LDA Parameters
# ===========================
DEFAULT_NUM_TOPICS = 20
"""Default number of topics; choose K from a perplexity sweep"""

DEFAULT_ITERATIONS = 500
"""Number of full Gibbs sweeps over all tokens"""

DEFAULT_RANDOM_STATE = 42
"""Random seed for reproducibility"""

DEFAULT_ALPHA_NUMERATOR = 50.0
"""Symmetric document-topic prior is alpha = 50 / K"""

DEFAULT_ETA = 0.1
"""Symmetric topic-term prior"""

DEFAULT_BURN_IN = 0
"""Sweeps discarded before posterior samples are kept"""

DEFAULT_LOG_EVERY = 50
"""Log the collapsed log-likelihood every N sweeps (0 disables)"""

# ===========================
# Numerical Tolerances
# ===========================
ROW_SUM_TOLERANCE = 1e-6
"""Posterior rows drifting further than this from 1 trigger a NumericalWarning"""

# ===========================
# Model Selection
# ===========================
DEFAULT_HELD_OUT_FRACTION = 0.2
"""Share of documents held out when scoring perplexity out of sample"""

# ===========================
# Feature Engineering
# ===========================
TOPIC_FEATURE_PREFIX = "topic_"
"""Prefix for topic columns (topic_1, topic_2, ...)"""

DEFAULT_NUM_TOP_TERMS = 10
"""Terms listed per topic for human labeling"""
