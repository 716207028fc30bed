"""
Run Cancellation

A cancellation token is honoured at every suspension point of a run: before
each HTTP call, before each batch write and inside every pause.
"""
import threading
import time
from typing import Optional

from src.tenement_sync.exceptions import SyncCancelledError


class CancellationToken:
    """Thread-safe cancellation flag shared between a run and its controller."""

    def __init__(self):
        self._event = threading.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "Sync cancelled") -> None:
        self.reason = reason
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise SyncCancelledError(self.reason or "Sync cancelled")

    def sleep(self, seconds: float) -> None:
        """
        Pause for ``seconds`` unless cancelled first.

        Raises:
            SyncCancelledError: if the token is cancelled before or during the pause
        """
        self.raise_if_cancelled()
        if seconds > 0 and self._event.wait(seconds):
            self.raise_if_cancelled()


def checkpoint(token: Optional[CancellationToken]) -> None:
    """Raise if an optional token has been cancelled."""
    if token is not None:
        token.raise_if_cancelled()


def pause(seconds: float, token: Optional[CancellationToken] = None, sleep=None) -> None:
    """Sleep through the token when given, otherwise through ``sleep`` (time.sleep)."""
    if token is not None:
        token.sleep(seconds)
        return
    if seconds > 0:
        (sleep or time.sleep)(seconds)
