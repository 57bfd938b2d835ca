"""
Pool coordinator: spawns one search process per partition, races their
outcomes and always stops every process before returning.
"""

import logging
import multiprocessing
import threading
import time
from dataclasses import dataclass, replace
from enum import Enum
from multiprocessing.connection import wait
from typing import Callable, Optional

from saltrace.outcome import (
    Found,
    InfrastructureFault,
    NotFound,
    Outcome,
    PoolResult,
    WorkerFault,
)
from saltrace.partition import SearchTask, partition_all
from saltrace.worker import DEFAULT_BATCH_SIZE, search_worker

logger = logging.getLogger(__name__)

DEFAULT_STOP_GRACE = 2.0


class WorkerState(Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"


@dataclass
class WorkerHandle:
    """Coordinator-side record of one worker process."""
    index: int
    task: SearchTask
    process: Optional[multiprocessing.process.BaseProcess] = None
    conn: Optional[multiprocessing.connection.Connection] = None
    state: WorkerState = WorkerState.RUNNING
    exitcode: Optional[int] = None
    fault: Optional[WorkerFault] = None


class WorkerPool:
    """Races N partitioned search workers to the first successful outcome.

    Usage:
        pool = WorkerPool()
        result = pool.run(worker_count=5, upper_bound=500_000, probe=probe)
        if result.succeeded:
            print(result.value, result.derived)

    ``cancel()`` may be called from another thread to stop a running search.
    ``on_start`` is called from ``run`` as soon as a cancel request can be
    accepted, before any worker is spawned; use it to arm deadlines.
    """

    def __init__(
        self,
        start_method: Optional[str] = None,
        stop_grace: float = DEFAULT_STOP_GRACE,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self._ctx = multiprocessing.get_context(start_method)
        self.stop_grace = stop_grace
        self.batch_size = batch_size

        # Callbacks
        self.on_start: Optional[Callable[[], None]] = None

        # Internal state
        self._handles: list[WorkerHandle] = []
        self._lock = threading.Lock()
        self._is_running = False
        self._cancel_reader = None
        self._cancel_writer = None

    @property
    def handles(self) -> tuple[WorkerHandle, ...]:
        """Handles of the current or most recent run."""
        return tuple(self._handles)

    @property
    def is_running(self) -> bool:
        return self._is_running

    def cancel(self) -> None:
        """Ask a running search to stop. No-op when idle.

        Takes effect even when called from ``on_start`` or while workers are
        still being spawned.
        """
        with self._lock:
            if self._cancel_writer is not None:
                self._cancel_writer.send(None)

    def run(self, worker_count: int, upper_bound: int, probe) -> PoolResult:
        """Search [0, upper_bound) with ``worker_count`` processes.

        Returns once every worker has been stopped. A search that finds
        nothing returns ``succeeded=False``; only a failure to start the
        workers raises (InfrastructureFault).
        """
        tasks = partition_all(worker_count, upper_bound)

        with self._lock:
            if self._is_running:
                raise RuntimeError("Pool is already running")
            self._cancel_reader, self._cancel_writer = self._ctx.Pipe(duplex=False)
            self._is_running = True

        self._handles = []
        stop_event = None
        start_time = time.time()
        try:
            if self.on_start:
                self.on_start()
            stop_event = self._ctx.Event()
            self._spawn(tasks, probe, stop_event)
            result = self._race()
        finally:
            self._stop_all(stop_event)
            with self._lock:
                self._cancel_reader.close()
                self._cancel_writer.close()
                self._cancel_reader = self._cancel_writer = None
                self._is_running = False

        return replace(result, elapsed=time.time() - start_time)

    def _spawn(self, tasks: list[SearchTask], probe, stop_event) -> None:
        for task in tasks:
            if self._cancel_reader.poll():
                logger.debug("Cancel requested, not starting worker %d", task.worker_index)
                return
            try:
                reader, writer = self._ctx.Pipe(duplex=False)
            except OSError as e:
                raise InfrastructureFault(
                    f"could not open channel for worker {task.worker_index}: {e}"
                ) from e

            process = self._ctx.Process(
                target=search_worker,
                args=(task, probe, writer, stop_event, self.batch_size),
                daemon=True,
                name=f"saltrace-worker-{task.worker_index}",
            )
            try:
                process.start()
            except Exception as e:
                reader.close()
                writer.close()
                raise InfrastructureFault(
                    f"could not start worker {task.worker_index}: {e}"
                ) from e
            # Only the child writes; dropping our copy lets a crash show up as EOF.
            writer.close()

            self._handles.append(WorkerHandle(
                index=task.worker_index, task=task, process=process, conn=reader,
            ))
            logger.debug(
                "Started worker %d (pid %s, %d candidates)",
                task.worker_index, process.pid, len(task),
            )

    def _race(self) -> PoolResult:
        remaining = {h.index: h for h in self._handles}
        failures = 0
        checked = 0
        faults: list[WorkerFault] = []

        if self._cancel_reader.poll():
            return self._cancelled(len(remaining), failures, faults, checked)

        while remaining:
            owners = {}
            for h in remaining.values():
                owners[h.conn] = h
                owners[h.process.sentinel] = h

            ready = wait([self._cancel_reader, *owners])

            if self._cancel_reader in ready:
                return self._cancelled(len(remaining), failures, faults, checked)

            done = sorted({owners[obj].index for obj in ready})
            for index in done:
                h = remaining.pop(index)
                outcome = self._collect(h)

                if isinstance(outcome, Found):
                    checked += outcome.checked
                    logger.info(
                        "Worker %d found %d after %d candidates",
                        h.index, outcome.value, outcome.checked,
                    )
                    return PoolResult(
                        succeeded=True,
                        outcome=outcome,
                        failure_count=failures,
                        faults=tuple(faults),
                        checked=checked,
                    )
                if isinstance(outcome, NotFound):
                    checked += outcome.checked
                    logger.debug("Worker %d: %s", h.index, outcome.reason)
                else:
                    logger.warning("%s", h.fault)
                    faults.append(h.fault)
                failures += 1

        logger.info("No match found (%d workers failed)", failures)
        return PoolResult(
            succeeded=False,
            failure_count=failures,
            faults=tuple(faults),
            checked=checked,
        )

    def _cancelled(self, running: int, failures: int, faults: list, checked: int) -> PoolResult:
        logger.info("Search cancelled with %d workers still running", running)
        return PoolResult(
            succeeded=False,
            failure_count=failures,
            faults=tuple(faults),
            cancelled=True,
            checked=checked,
        )

    def _collect(self, handle: WorkerHandle) -> Optional[Outcome]:
        """Read the single outcome of a finished worker, or record a fault."""
        handle.state = WorkerState.COMPLETED
        try:
            if handle.conn.poll():
                return handle.conn.recv()
            detail = "exited without reporting"
        except (EOFError, OSError) as e:
            detail = f"channel closed without outcome ({type(e).__name__})"

        handle.process.join(timeout=self.stop_grace)
        handle.fault = WorkerFault(handle.index, handle.process.exitcode, detail)
        return None

    def _stop_all(self, stop_event) -> None:
        if stop_event is not None:
            stop_event.set()

        for h in self._handles:
            h.process.join(timeout=self.stop_grace)
            if h.process.is_alive():
                logger.debug("Terminating worker %d", h.index)
                h.process.terminate()
                h.process.join(timeout=self.stop_grace)
            if h.process.is_alive():
                h.process.kill()
                h.process.join()

            h.exitcode = h.process.exitcode
            h.conn.close()
            h.process.close()
            h.state = WorkerState.STOPPED
        logger.debug("Stopped %d workers", len(self._handles))
