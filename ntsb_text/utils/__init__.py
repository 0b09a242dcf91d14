"""Shared utilities."""

from ntsb_text.utils.parallel import ParallelProcessor

__all__ = [
    'ParallelProcessor',
]
