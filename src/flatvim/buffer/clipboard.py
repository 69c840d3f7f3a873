"""Best-effort bridge between the ``+`` register and the system clipboard.

Clipboard calls run on a background executor. The command that triggered a
copy or refresh never waits on it; a refresh result only lands in the ``+``
register for later commands, and a failure is logged and otherwise ignored.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future, ThreadPoolExecutor
from threading import Lock
from typing import Callable, Optional, Protocol

import pyperclip

from flatvim.runtime import telemetry


class ClipboardBackend(Protocol):
    """Synchronous clipboard access; called only from the bridge's executor."""

    def copy(self, text: str) -> None: ...

    def paste(self) -> str: ...


class PyperclipBackend:
    """System clipboard through ``pyperclip``."""

    def copy(self, text: str) -> None:
        pyperclip.copy(text)

    def paste(self) -> str:
        return pyperclip.paste()


class ClipboardBridge:
    def __init__(
        self,
        backend: Optional[ClipboardBackend] = None,
        *,
        executor: Optional[Executor] = None,
        max_workers: int = 1,
        logger_name: str = "flatvim.clipboard",
    ) -> None:
        self.backend = backend or PyperclipBackend()
        self._executor = executor
        self._owns_executor = executor is None
        self._max_workers = max_workers
        self._logger_name = logger_name
        self._lock = Lock()

    def _ensure_executor(self) -> Executor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix="flatvim-clipboard",
                )
            return self._executor

    def push(self, text: str) -> Future:
        """Mirror ``text`` to the system clipboard without waiting for it."""

        future = self._ensure_executor().submit(self.backend.copy, text)
        future.add_done_callback(lambda done: self._report(done, "copy"))
        return future

    def pull(self, on_result: Callable[[str], None]) -> Future:
        """Read the system clipboard and hand the text to ``on_result`` when it arrives."""

        future = self._ensure_executor().submit(self.backend.paste)

        def _deliver(done: Future) -> None:
            if self._report(done, "paste"):
                on_result(done.result())

        future.add_done_callback(_deliver)
        return future

    def _report(self, done: Future, operation: str) -> bool:
        if done.cancelled():
            return False
        error = done.exception()
        if error is None:
            return True
        kind = (
            "clipboard_unavailable"
            if isinstance(error, pyperclip.PyperclipException)
            else type(error).__name__
        )
        telemetry.record_event(
            "clipboard.failure",
            level="warning",
            data={"operation": operation, "kind": kind, "error": str(error)},
            logger_name=self._logger_name,
        )
        return False

    def shutdown(self, *, wait: bool = False) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None and self._owns_executor:
            executor.shutdown(wait=wait)


__all__ = ["ClipboardBackend", "ClipboardBridge", "PyperclipBackend"]
