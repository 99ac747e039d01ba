from __future__ import annotations

import threading


class CancellationSignal:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._requested = False

    def request(self) -> None:
        with self._lock:
            self._requested = True

    def is_requested(self) -> bool:
        with self._lock:
            return self._requested
