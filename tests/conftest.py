from __future__ import annotations

from concurrent.futures import Executor, Future
from typing import Callable, Iterator, List, Optional

import pytest

from flatvim import EngineConfig
from flatvim.buffer import ClipboardBridge, RegisterStore, reset_global_registers
from flatvim.session import Session

NO_CLIPBOARD = EngineConfig(clipboard_enabled=False)


class ImmediateExecutor(Executor):
    """Runs submitted work inline so clipboard results land before the call returns."""

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        try:
            result = fn(*args, **kwargs)
        except Exception as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)
        return future


class FakeClipboard:
    def __init__(self, initial: str = "", *, error: Optional[Exception] = None) -> None:
        self.value = initial
        self.error = error
        self.copied: List[str] = []

    def copy(self, text: str) -> None:
        if self.error is not None:
            raise self.error
        self.copied.append(text)
        self.value = text

    def paste(self) -> str:
        if self.error is not None:
            raise self.error
        return self.value


@pytest.fixture(autouse=True)
def fresh_registers() -> Iterator[RegisterStore]:
    store = reset_global_registers(RegisterStore())
    yield store
    reset_global_registers()


@pytest.fixture
def make_session() -> Callable[..., Session]:
    def _make(
        text: str = "",
        cursor: int = 0,
        mode: str = "normal",
        *,
        registers: Optional[RegisterStore] = None,
        config: EngineConfig = NO_CLIPBOARD,
    ) -> Session:
        return Session(
            text=text,
            cursor=cursor,
            initial_mode=mode,
            registers=registers,
            config=config,
        )

    return _make


@pytest.fixture
def clipboard_store() -> tuple[RegisterStore, FakeClipboard]:
    backend = FakeClipboard("from system")
    bridge = ClipboardBridge(backend, executor=ImmediateExecutor())
    return RegisterStore(clipboard=bridge), backend
