"""Parallel processing utilities for independent model fits."""

import logging
import os
from concurrent.futures import ProcessPoolExecutor
from typing import Any, Callable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ParallelProcessor:
    """
    Manages parallel processing with ProcessPoolExecutor.

    Results come back in input order. A failing task re-raises its exception
    in the caller; nothing is retried.

    Usage:
        def worker_func(args):
            num_topics, counts = args
            return fit_and_score(num_topics, counts)

        processor = ParallelProcessor(max_workers=4)
        results = processor.process_batch(
            items=[(5, counts), (10, counts)],
            worker_func=worker_func,
        )
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        max_tasks_per_child: int = 50,
    ):
        """
        Initialize parallel processor.

        Args:
            max_workers: Number of parallel workers (default: auto-determine, 1 = sequential)
            max_tasks_per_child: Restart workers after N tasks (default: 50)
        """
        self.max_workers = max_workers
        self.max_tasks_per_child = max_tasks_per_child

    def should_use_parallel(self, num_items: int, max_workers: Optional[int] = None) -> bool:
        """
        Determine if parallel processing is beneficial.

        Args:
            num_items: Number of items to process
            max_workers: Max workers requested (None or 1 means sequential)

        Returns:
            True if should use parallel processing
        """
        return max_workers is not None and max_workers > 1 and num_items > 1

    def process_batch(
        self,
        items: List[T],
        worker_func: Callable[[T], Any],
        progress_callback: Optional[Callable[[int, Any], None]] = None,
    ) -> List[Any]:
        """
        Apply worker_func to every item.

        Args:
            items: List of items to process
            worker_func: Picklable function applied to each item
            progress_callback: Optional callback for progress updates (receives idx, result)

        Returns:
            List of results, in the same order as items
        """
        # Auto-determine max_workers
        if self.max_workers is None:
            max_workers = min(os.cpu_count() or 4, len(items))
        else:
            max_workers = self.max_workers

        if not self.should_use_parallel(len(items), max_workers):
            return self._process_sequential(items, worker_func, progress_callback)

        return self._process_parallel(items, worker_func, progress_callback, max_workers)

    def _process_sequential(
        self,
        items: List[T],
        worker_func: Callable,
        progress_callback: Optional[Callable],
    ) -> List[Any]:
        """Process items sequentially."""
        results = []

        for idx, item in enumerate(items, 1):
            result = worker_func(item)
            results.append(result)
            logger.debug(f"[{idx}/{len(items)}] done")

            if progress_callback:
                progress_callback(idx, result)

        return results

    def _process_parallel(
        self,
        items: List[T],
        worker_func: Callable,
        progress_callback: Optional[Callable],
        max_workers: int,
    ) -> List[Any]:
        """Process items in worker processes, preserving input order."""
        logger.info(f"Processing {len(items)} items with {max_workers} workers")

        with ProcessPoolExecutor(
            max_workers=max_workers,
            max_tasks_per_child=self.max_tasks_per_child
        ) as executor:
            futures = [executor.submit(worker_func, item) for item in items]

            results = []
            for idx, future in enumerate(futures, 1):
                # Re-raises the worker's exception
                result = future.result()
                results.append(result)
                logger.debug(f"[{idx}/{len(items)}] done")

                if progress_callback:
                    progress_callback(idx, result)

        return results
