"""
Messages exchanged between search workers and the pool coordinator.

A worker reports exactly one Outcome per task. "No match in my partition" is
a NotFound message, not an exception. A worker that dies without sending
anything is recorded by the coordinator as a WorkerFault.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

NOT_FOUND_EXHAUSTED = "exhausted partition"


@dataclass(frozen=True)
class Found:
    """A worker hit a candidate accepted by the probe."""
    value: int
    derived: str
    worker_index: int = -1
    checked: int = 0


@dataclass(frozen=True)
class NotFound:
    """A worker scanned its whole partition without a match."""
    reason: str = NOT_FOUND_EXHAUSTED
    worker_index: int = -1
    checked: int = 0


Outcome = Union[Found, NotFound]


class SaltraceError(Exception):
    """Base class for saltrace errors."""


class WorkerFault(SaltraceError):
    """A worker terminated without reporting an Outcome.

    Recorded on the PoolResult; never raised by WorkerPool.run.
    """

    def __init__(self, worker_index: int, exitcode: Optional[int], detail: str = ""):
        self.worker_index = worker_index
        self.exitcode = exitcode
        self.detail = detail
        msg = f"worker {worker_index} exited with code {exitcode}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)

    def __reduce__(self):
        return (self.__class__, (self.worker_index, self.exitcode, self.detail))


class InfrastructureFault(SaltraceError):
    """The coordinator could not start the search at all."""


@dataclass(frozen=True)
class PoolResult:
    """Final result of one WorkerPool.run.

    ``checked`` sums the candidates reported by workers that finished before
    the run resolved. Losing workers stopped after a win do not report, so on
    success it is a lower bound on the work done.
    """
    succeeded: bool
    outcome: Optional[Outcome] = None
    failure_count: int = 0
    faults: tuple[WorkerFault, ...] = field(default_factory=tuple)
    cancelled: bool = False
    elapsed: float = 0.0
    checked: int = 0

    @property
    def value(self) -> Optional[int]:
        if isinstance(self.outcome, Found):
            return self.outcome.value
        return None

    @property
    def derived(self) -> Optional[str]:
        if isinstance(self.outcome, Found):
            return self.outcome.derived
        return None
