"""Background fetches for the snapshot and history CSV files.

Fetch and parse work runs on worker threads; results are only applied to the
:class:`CapacityStore` from the caller's thread inside :meth:`CapacityLoads.poll`.
"""
from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, Optional, Tuple

from services.capacity_store import CapacityStore, LoadTicket, parse_history, parse_snapshot

Fetcher = Callable[[], str]


class CapacityLoads:
    """Run the two resource loads without blocking the interaction thread."""

    def __init__(
        self,
        store: CapacityStore,
        *,
        fetch_snapshot: Fetcher,
        fetch_history: Fetcher,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self.store = store
        self._fetch_snapshot = fetch_snapshot
        self._fetch_history = fetch_history
        self._owns_executor = executor is None
        self._executor: Optional[ThreadPoolExecutor] = executor
        self._pending: Dict[str, Tuple[LoadTicket, Future]] = {}
        self._cancelled = False

    @property
    def pending(self) -> bool:
        return bool(self._pending)

    @property
    def worker_threads_alive(self) -> bool:
        """Whether this instance still holds an executor of its own."""

        return self._owns_executor and self._executor is not None

    def _submit(self, fn: Callable[[], object]) -> Future:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="capacity-load")
        return self._executor.submit(fn)

    def _release_executor(self) -> None:
        # Injected executors belong to the caller.
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    def start(self) -> None:
        """Issue both loads; the snapshot load may be skipped by the store."""

        if self._cancelled:
            return
        snapshot_ticket = self.store.begin_snapshot_load()
        if snapshot_ticket is not None:
            future = self._submit(lambda: parse_snapshot(self._fetch_snapshot()))
            self._pending["snapshot"] = (snapshot_ticket, future)

        history_ticket = self.store.begin_history_load()
        if history_ticket is not None:
            future = self._submit(lambda: parse_history(self._fetch_history()))
            self._pending["history"] = (history_ticket, future)

    def poll(self) -> bool:
        """Apply finished loads; return ``True`` while any load is outstanding."""

        for resource, (ticket, future) in list(self._pending.items()):
            if not future.done():
                continue
            del self._pending[resource]
            if self._cancelled or future.cancelled():
                continue
            error = future.exception()
            if resource == "snapshot":
                if error is not None:
                    self.store.fail_snapshot_load(ticket, error)
                else:
                    self.store.complete_snapshot_load(ticket, future.result())
            else:
                if error is not None:
                    self.store.fail_history_load(ticket, error)
                else:
                    self.store.complete_history_load(ticket, future.result())
        if not self._pending:
            self._release_executor()
        return self.pending

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block up to ``timeout`` seconds for outstanding loads, then poll."""

        futures = [future for _, future in self._pending.values()]
        if futures:
            wait(futures, timeout=timeout)
        return self.poll()

    def cancel(self) -> None:
        """Tear down: outstanding results are discarded and the store frozen."""

        self._cancelled = True
        for _, future in self._pending.values():
            future.cancel()
        self._pending.clear()
        self.store.teardown()
        self._release_executor()
