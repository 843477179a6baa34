from __future__ import annotations

import threading
import time

import pytest

from npm_sentinel.core.errors import EmptyBatch
from npm_sentinel.framework.fanout import ItemResult, failures, fan_out, successes


def test_results_keep_input_order_and_length() -> None:
    delays = {"slow": 0.05, "fast": 0.0, "mid": 0.02}

    def fetch(name: str) -> str:
        time.sleep(delays[name])
        return name.upper()

    results = fan_out(["slow", "fast", "mid", "fast"], fetch)
    assert [result.name for result in results] == ["slow", "fast", "mid", "fast"]
    assert [result.value for result in results] == ["SLOW", "FAST", "MID", "FAST"]
    assert all(result.ok for result in results)


def test_one_failure_does_not_cancel_others() -> None:
    def fetch(name: str) -> int:
        if name == "bad":
            raise ValueError("No latest version found")
        return len(name)

    results = fan_out(["good", "bad", "also-good"], fetch)
    assert len(results) == 3
    assert results[1] == ItemResult.failure("bad", "No latest version found")
    assert [result.name for result in successes(results)] == ["good", "also-good"]
    assert [result.name for result in failures(results)] == ["bad"]


def test_items_run_concurrently() -> None:
    barrier = threading.Barrier(3, timeout=5)

    def fetch(name: str) -> str:
        barrier.wait()
        return name

    results = fan_out(["a", "b", "c"], fetch)
    assert [result.value for result in results] == ["a", "b", "c"]


def test_exception_without_message_uses_class_name() -> None:
    def fetch(name: str) -> None:
        raise KeyError()

    assert fan_out(["x"], fetch)[0].reason == "KeyError"


def test_empty_batch_raises() -> None:
    with pytest.raises(EmptyBatch, match="No package names provided"):
        fan_out([], lambda name: name)
