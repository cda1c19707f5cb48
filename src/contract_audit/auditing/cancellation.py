"""Cooperative cancellation for analysis calls."""

import asyncio


class CancelToken:
    """
    Caller-owned cancellation signal.

    `cancel()` must be called from the event loop running the analysis
    (a task, or a handler installed with `loop.add_signal_handler`).
    """

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()
