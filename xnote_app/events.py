from __future__ import annotations

import threading
from collections import deque
from typing import Any

from xnote.clean import (
    DELETE_RESULT_EVENT,
    LOG_EVENT,
    PROGRESS_EVENT,
    SCAN_RESULT_EVENT,
    ProgressEvent,
)

_RESULT_EVENTS = {
    "scan-result": SCAN_RESULT_EVENT,
    "delete-result": DELETE_RESULT_EVENT,
}


class EventLog:
    """Bounded, sequence-numbered event buffer polled by the UI.

    Worker threads append; HTTP handlers read everything after a sequence
    number. Appends never block on readers beyond a short lock.
    """

    def __init__(self, maxlen: int = 2000) -> None:
        self._lock = threading.Lock()
        self._events: deque[dict[str, Any]] = deque(maxlen=max(1, int(maxlen)))
        self._seq = 0

    @property
    def last_seq(self) -> int:
        with self._lock:
            return self._seq

    def _append(self, event: str, payload: Any) -> None:
        with self._lock:
            self._seq += 1
            self._events.append({"seq": self._seq, "event": event, "payload": payload})

    def emit_log(self, text: str) -> None:
        self._append(LOG_EVENT, text)

    def emit_progress(self, event: ProgressEvent) -> None:
        self._append(PROGRESS_EVENT, event.to_dict())

    def emit_result(self, kind: str, payload: dict[str, Any]) -> None:
        self._append(_RESULT_EVENTS.get(kind, kind), payload)

    def since(self, after: int = 0) -> list[dict[str, Any]]:
        with self._lock:
            return [e for e in self._events if e["seq"] > after]
