import time

from saltrace.core import keccak256
from saltrace.matcher import MatchMode
from saltrace.outcome import PoolResult
from saltrace.pool import WorkerPool, WorkerState
from saltrace.probe import AddressProbe
from saltrace.service import run_search, run_search_result

SALT0_ADDRESS = "0x4d1a2e2bb4f88f0250f26ffff098b0b30b26bf38"


class NeverMatch:
    def __call__(self, candidate):
        return None


class SlowNeverMatch:
    def __call__(self, candidate):
        time.sleep(0.001)
        return None


def exact_address_probe():
    return AddressProbe.from_hex(
        SALT0_ADDRESS,
        MatchMode.PREFIX,
        deployer="0x" + "00" * 20,
        init_code_hash="0x" + keccak256(b"\x00").hex(),
    )


def test_run_search_finds_salt():
    assert run_search(3, 10, exact_address_probe()) == {
        "found": True,
        "value": 0,
        "derived": SALT0_ADDRESS,
    }


def test_run_search_reports_not_found():
    assert run_search(2, 4, NeverMatch()) == {
        "found": False,
        "value": None,
        "derived": None,
    }


def test_deadline_cancels_search():
    pool = WorkerPool(batch_size=10)
    result = run_search_result(2, 10_000_000, SlowNeverMatch(), deadline=0.5, pool=pool)

    assert result.cancelled
    assert not result.succeeded
    assert all(h.state is WorkerState.STOPPED for h in pool.handles)


def test_zero_deadline_cancels_before_spawning():
    pool = WorkerPool(batch_size=10)
    result = run_search_result(2, 6000, SlowNeverMatch(), deadline=0.0, pool=pool)

    assert result.cancelled
    assert not result.succeeded
    assert result.checked == 0
    assert pool.handles == ()
    assert not pool.is_running


def test_short_deadline_still_cancels():
    pool = WorkerPool(batch_size=10)
    result = run_search_result(2, 6000, SlowNeverMatch(), deadline=0.001, pool=pool)

    assert result.cancelled
    assert result.checked < 6000
    assert all(h.state is WorkerState.STOPPED for h in pool.handles)


def test_on_start_callback_is_restored_and_chained():
    calls = []
    pool = WorkerPool()
    pool.on_start = lambda: calls.append("started")

    result = run_search_result(1, 3, NeverMatch(), deadline=30, pool=pool)

    assert not result.cancelled
    assert calls == ["started"]
    assert pool.on_start is not None
    pool.on_start()
    assert calls == ["started", "started"]


def test_default_probe_is_used():
    seen = {}

    class FakePool:
        on_start = None

        def run(self, worker_count, upper_bound, probe):
            seen["args"] = (worker_count, upper_bound, probe)
            return PoolResult(succeeded=False, failure_count=worker_count)

    assert run_search(pool=FakePool())["found"] is False
    count, bound, probe = seen["args"]
    assert (count, bound) == (5, 500_000)
    assert probe.pattern.pattern == "d3ad"
