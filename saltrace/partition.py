"""Interleaved partitioning of the integer keyspace across workers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SearchTask:
    """The slice of the keyspace owned by one worker.

    Worker ``worker_index`` scans worker_index, worker_index + stride, ...
    while below ``upper_bound``. Striding instead of contiguous ranges spreads
    uneven per-candidate cost across workers.
    """
    worker_index: int
    stride: int
    upper_bound: int

    def candidates(self) -> range:
        return range(self.worker_index, self.upper_bound, self.stride)

    def __len__(self) -> int:
        return len(self.candidates())


def partition(worker_index: int, worker_count: int, upper_bound: int) -> SearchTask:
    """Build the task for one worker out of ``worker_count``.

    Raises ValueError for a non-positive worker count, an index outside
    ``0..worker_count-1`` or a negative bound.
    """
    if worker_count < 1:
        raise ValueError(f"worker_count must be at least 1, got {worker_count}")
    if not 0 <= worker_index < worker_count:
        raise ValueError(
            f"worker_index {worker_index} out of range for {worker_count} workers"
        )
    if upper_bound < 0:
        raise ValueError(f"upper_bound cannot be negative, got {upper_bound}")
    return SearchTask(worker_index=worker_index, stride=worker_count, upper_bound=upper_bound)


def partition_all(worker_count: int, upper_bound: int) -> list[SearchTask]:
    """Tasks for every worker; disjoint, and together they cover [0, upper_bound)."""
    return [partition(i, worker_count, upper_bound) for i in range(worker_count)]
