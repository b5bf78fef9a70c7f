"""Cooperative cancellation for long-running training and rollout."""

import threading
from typing import Optional

from .exceptions import TrainingCancelled


class CancellationToken:
    """
    Cancellation signal checked at epoch and rollout-step boundaries.

    Nothing is interrupted forcefully: the running loop observes the flag at
    its next check and raises TrainingCancelled.
    """

    def __init__(self):
        self._event = threading.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, where: str = "") -> None:
        if self._event.is_set():
            location = f" during {where}" if where else ""
            raise TrainingCancelled(f"Run {self.reason or 'cancelled'}{location}")


def check_cancelled(token: Optional[CancellationToken], where: str = "") -> None:
    if token is not None:
        token.raise_if_cancelled(where)
