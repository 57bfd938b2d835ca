"""
Search entry point for callers such as an HTTP handler.

run_search wraps one WorkerPool.run and flattens its PoolResult into a plain
dict. The probe must be picklable and free of shared state, since a copy runs
in every worker process.
"""

import logging
import threading
from typing import Optional

from saltrace.outcome import PoolResult
from saltrace.pool import WorkerPool
from saltrace.probe import default_probe

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 5
DEFAULT_UPPER_BOUND = 500_000


def run_search_result(
    worker_count: int = DEFAULT_WORKERS,
    upper_bound: int = DEFAULT_UPPER_BOUND,
    probe=None,
    deadline: Optional[float] = None,
    pool: Optional[WorkerPool] = None,
) -> PoolResult:
    """Run one search and return the full PoolResult.

    ``deadline`` is a number of seconds after which the search is cancelled;
    a cancelled search returns ``succeeded=False, cancelled=True``. The clock
    starts once the pool can accept a cancel, so a zero deadline cancels
    before any worker is spawned.
    """
    if probe is None:
        probe = default_probe()
    if pool is None:
        pool = WorkerPool()

    timer = None
    previous_on_start = pool.on_start
    if deadline is not None:
        timer = threading.Timer(deadline, pool.cancel)
        timer.daemon = True

        def arm_deadline():
            if previous_on_start:
                previous_on_start()
            if deadline <= 0:
                pool.cancel()
            else:
                timer.start()

        pool.on_start = arm_deadline
    try:
        result = pool.run(worker_count, upper_bound, probe)
    finally:
        pool.on_start = previous_on_start
        if timer is not None:
            timer.cancel()

    logger.info(
        "Search of %d candidates with %d workers finished in %.0f ms",
        upper_bound, worker_count, result.elapsed * 1000,
    )
    return result


def run_search(
    worker_count: int = DEFAULT_WORKERS,
    upper_bound: int = DEFAULT_UPPER_BOUND,
    probe=None,
    deadline: Optional[float] = None,
    pool: Optional[WorkerPool] = None,
) -> dict:
    """Run one search; returns {"found", "value", "derived"}."""
    result = run_search_result(worker_count, upper_bound, probe, deadline, pool)
    return {
        "found": result.succeeded,
        "value": result.value,
        "derived": result.derived,
    }
