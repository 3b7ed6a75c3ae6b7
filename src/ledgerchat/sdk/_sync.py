"""Bridge from synchronous callers (the CLI, notebooks) into the async SDK.

``_run_sync()`` runs a coroutine to completion.  Outside an event loop that
is plain ``asyncio.run()``.  Inside a running loop (Jupyter, a GUI that
already drives asyncio) the coroutine is shipped to a private loop on a
daemon thread so the caller's loop is never re-entered.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Coroutine, TypeVar

T = TypeVar("T")


class _BackgroundLoop:
    """A lazily started event loop living on its own daemon thread."""

    def __init__(self) -> None:
        self._loop: asyncio.AbstractEventLoop | None = None
        self._guard = threading.Lock()

    def get(self) -> asyncio.AbstractEventLoop:
        with self._guard:
            if self._loop is None or self._loop.is_closed():
                self._loop = asyncio.new_event_loop()
                threading.Thread(
                    target=self._loop.run_forever,
                    name="ledgerchat-sync",
                    daemon=True,
                ).start()
            return self._loop


_background = _BackgroundLoop()


def _run_sync(coro: Coroutine[..., ..., T]) -> T:
    """Run *coro* from synchronous code and return its result."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    return asyncio.run_coroutine_threadsafe(coro, _background.get()).result()
