"""Lifecycle event dispatch via pluggy, inline or on a ThreadPoolExecutor.

Events are fire-and-forget from the caller's point of view. Failures are
collected and reported by :meth:`EventBus.drain`, which the CLI calls
before exiting so background work is never silently dropped.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gitwork.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class EventBus:
    """Dispatch lifecycle hooks to registered plugins.

    Parameters:
        plugin_manager: Loaded PluginManager for hook dispatch.
        sync: Dispatch inline (useful for testing / ``--sync``).
        max_workers: ThreadPoolExecutor worker count.
    """

    def __init__(
        self,
        plugin_manager: PluginManager,
        *,
        sync: bool = False,
        max_workers: int = 2,
    ) -> None:
        self._pm = plugin_manager
        self._sync = sync
        self._executor: ThreadPoolExecutor | None = (
            None if sync else ThreadPoolExecutor(max_workers=max_workers)
        )
        self._futures: list[Future[None]] = []
        self._failures: list[str] = []
        self._lock = threading.Lock()

    @property
    def sync(self) -> bool:
        return self._sync

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> None:
        """Invoke *hook_name* with *payload* inline (sync) or in the pool."""
        if self._sync or self._executor is None:
            self._execute_hook(hook_name, payload)
            return
        future = self._executor.submit(self._execute_hook, hook_name, payload)
        self._futures.append(future)

    def drain(self) -> list[str]:
        """Wait for in-flight events and return (then clear) failure messages."""
        for future in self._futures:
            future.result()
        self._futures.clear()
        with self._lock:
            failures, self._failures = self._failures, []
        return failures

    def shutdown(self) -> None:
        """Drain, then stop the worker pool."""
        self.drain()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _execute_hook(self, hook_name: str, payload: dict[str, Any]) -> None:
        hook = getattr(self._pm.hook, hook_name, None)
        if hook is None:
            self._record_failure(f"Unknown hook {hook_name}")
            return
        try:
            hook(**payload)
        except Exception as exc:
            logger.warning("Plugin hook %s failed", hook_name, exc_info=True)
            self._record_failure(f"Plugin hook {hook_name} failed: {exc}")

    def _record_failure(self, message: str) -> None:
        with self._lock:
            self._failures.append(message)
