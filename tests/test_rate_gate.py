from __future__ import annotations

import asyncio
import threading

import pytest

from spamguard.core.rate_gate import RateGate


def test_denies_after_ceiling_until_reset() -> None:
    gate = RateGate(max_calls=3, window_ms=60_000)

    assert [gate.try_admit() for _ in range(3)] == [True, True, True]
    assert gate.try_admit() is False
    assert gate.try_admit() is False
    assert gate.calls_this_window == 3

    gate.reset()

    assert gate.calls_this_window == 0
    assert gate.try_admit() is True
    assert gate.calls_this_window == 1


def test_default_ceiling_is_thirty() -> None:
    gate = RateGate()
    admitted = sum(gate.try_admit() for _ in range(40))
    assert admitted == 30


def test_rejects_non_positive_limits() -> None:
    with pytest.raises(ValueError):
        RateGate(max_calls=0)
    with pytest.raises(ValueError):
        RateGate(window_ms=0)


def test_concurrent_admission_never_exceeds_ceiling() -> None:
    gate = RateGate(max_calls=50, window_ms=60_000)
    results: list[bool] = []
    lock = threading.Lock()

    def worker() -> None:
        for _ in range(20):
            admitted = gate.try_admit()
            with lock:
                results.append(admitted)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sum(results) == 50
    assert gate.calls_this_window == 50


def test_timer_resets_window_independent_of_calls() -> None:
    async def scenario() -> list[bool]:
        gate = RateGate(max_calls=1, window_ms=20)
        gate.start()
        try:
            first = gate.try_admit()
            second = gate.try_admit()
            await asyncio.sleep(0.08)
            third = gate.try_admit()
        finally:
            await gate.stop()
        return [first, second, third]

    assert asyncio.run(scenario()) == [True, False, True]


def test_stop_without_start_is_noop() -> None:
    gate = RateGate()
    asyncio.run(gate.stop())
