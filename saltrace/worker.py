"""
Multiprocessing worker for partitioned keyspace search.

IMPORTANT: This module must contain only top-level importable functions.
With the 'spawn' and 'forkserver' start methods, worker targets and their
arguments are pickled and looked up by name in the child process.
"""

from saltrace.outcome import Found, NotFound, NOT_FOUND_EXHAUSTED
from saltrace.partition import SearchTask

DEFAULT_BATCH_SIZE = 1000


def search_worker(
    task: SearchTask,
    probe,
    conn,
    stop_event,
    batch_size: int = DEFAULT_BATCH_SIZE,
):
    """Worker process: probe every candidate of ``task`` until one matches.

    Sends exactly one Outcome over ``conn`` unless stopped early. A probe
    exception is not caught: the process exits non-zero without sending,
    which the coordinator records as a crash.

    Args:
        task: SearchTask describing this worker's partition.
        probe: Callable ``probe(candidate) -> str | bool | None``. If it has a
            ``compile()`` method, the returned callable is used instead.
        conn: Write end of a one-shot multiprocessing Pipe.
        stop_event: multiprocessing.Event set by the coordinator to stop.
        batch_size: Candidates to probe between stop_event checks.
    """
    check = probe.compile() if hasattr(probe, "compile") else probe
    checked = 0

    try:
        for candidate in task.candidates():
            derived = check(candidate)
            checked += 1

            if derived is not None and derived is not False:
                if derived is True:
                    derived = ""
                conn.send(Found(
                    value=candidate,
                    derived=str(derived),
                    worker_index=task.worker_index,
                    checked=checked,
                ))
                return

            if checked % batch_size == 0 and stop_event.is_set():
                return

        conn.send(NotFound(
            reason=NOT_FOUND_EXHAUSTED,
            worker_index=task.worker_index,
            checked=checked,
        ))
    finally:
        conn.close()
