from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar

from npm_sentinel.core import logging as core_logging
from npm_sentinel.core.errors import EmptyBatch

T = TypeVar("T")

LOGGER = core_logging.get_logger("fanout")


@dataclass(frozen=True)
class ItemResult(Generic[T]):
    """Outcome for one input item: either a value or a failure reason."""

    name: str
    ok: bool
    value: Optional[T] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, name: str, value: T) -> "ItemResult[T]":
        return cls(name=name, ok=True, value=value)

    @classmethod
    def failure(cls, name: str, reason: str) -> "ItemResult[T]":
        return cls(name=name, ok=False, reason=reason)


def fan_out(items: Sequence[str], fetch: Callable[[str], T]) -> List[ItemResult[T]]:
    """Run ``fetch`` once per item concurrently and collect every outcome.

    Results come back in input order with exactly one entry per item. A
    failing item never cancels or hides the others.
    """
    names = list(items or [])
    if not names:
        raise EmptyBatch()
    executor = ThreadPoolExecutor(max_workers=len(names), thread_name_prefix="fanout")
    try:
        futures = [executor.submit(fetch, name) for name in names]
        return [_settle(name, future) for name, future in zip(names, futures)]
    finally:
        executor.shutdown(wait=True)


def _settle(name: str, future: Any) -> ItemResult[Any]:
    try:
        return ItemResult.success(name, future.result())
    except Exception as exc:  # noqa: BLE001
        reason = str(exc) or exc.__class__.__name__
        LOGGER.warning("fanout_item_failed", item=name, error=reason)
        return ItemResult.failure(name, reason)


def successes(results: Sequence[ItemResult[T]]) -> List[ItemResult[T]]:
    return [result for result in results if result.ok]


def failures(results: Sequence[ItemResult[T]]) -> List[ItemResult[T]]:
    return [result for result in results if not result.ok]
