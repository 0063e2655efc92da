"""Per-product serialization and bounded waits on the order source."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import TYPE_CHECKING

from editionsync.domain.ports import OrderSourceTimeoutError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


class ProductLockRegistry:
    """One lock per product id; unrelated products never wait on each other."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, product_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(product_id, threading.Lock())

    @contextmanager
    def hold(self, product_id: str) -> Iterator[None]:
        lock = self.lock_for(product_id)
        with lock:
            yield


PRODUCT_LOCKS = ProductLockRegistry()


def call_with_timeout[T](func: Callable[[], T], *, timeout: float, description: str) -> T:
    """Run ``func`` on a worker thread and give up after ``timeout`` seconds.

    The abandoned call keeps running in the background; its result is discarded.
    """

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="order-source")
    future = executor.submit(func)
    try:
        return future.result(timeout=timeout)
    except TimeoutError as exc:
        raise OrderSourceTimeoutError(f"{description} timed out after {timeout:g}s") from exc
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
