import time
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer


def monotonic_clock() -> float:
    """Seconds from an arbitrary origin; only differences are meaningful."""
    return time.monotonic()


class QtAdvanceTimer(QObject):
    """The single advance timer of a slideshow.

    Wraps one single-shot ``QTimer``: ``start`` restarts it, so there is
    never more than one pending advance.
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._callback: Optional[Callable[[], None]] = None
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._fire)

    def start(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._timer.start(max(0, int(delay_ms)))

    def stop(self) -> None:
        self._timer.stop()
        self._callback = None

    def _fire(self) -> None:
        callback, self._callback = self._callback, None
        if callback:
            callback()
