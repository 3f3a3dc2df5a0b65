from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Protocol

LOG_EVENT = "clean-unused-images-log"
PROGRESS_EVENT = "clean-unused-images-progress"
SCAN_RESULT_EVENT = "clean-unused-images-result"
DELETE_RESULT_EVENT = "clean-unused-images-delete-result"

_LOG = logging.getLogger("xnote.clean")


class Phase(str, Enum):
    COLLECT_IMAGES = "collect_images"
    SCAN_REFS = "scan_refs"
    COMPUTE = "compute"
    DELETE = "delete"
    DONE = "done"
    CANCELLED = "cancelled"
    ERROR = "error"


@dataclass(frozen=True)
class ProgressEvent:
    phase: Phase
    current: int
    total: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "current": self.current,
            "total": self.total,
            "message": self.message,
        }


@dataclass(frozen=True)
class DeleteOutcome:
    deleted: int
    total: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class ProgressSink(Protocol):
    def emit_log(self, text: str) -> None: ...

    def emit_progress(self, event: ProgressEvent) -> None: ...


class EventSink(ProgressSink, Protocol):
    """Progress sink that also receives results of background jobs."""

    def emit_result(self, kind: str, payload: dict[str, Any]) -> None: ...


class MemorySink:
    """Capture events in memory.

    Safe to share between the caller and a worker thread.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.logs: list[str] = []
        self.progress: list[ProgressEvent] = []
        self.results: list[tuple[str, dict[str, Any]]] = []

    def emit_log(self, text: str) -> None:
        with self._lock:
            self.logs.append(text)

    def emit_progress(self, event: ProgressEvent) -> None:
        with self._lock:
            self.progress.append(event)

    def emit_result(self, kind: str, payload: dict[str, Any]) -> None:
        with self._lock:
            self.results.append((kind, payload))

    def phases(self) -> list[Phase]:
        with self._lock:
            return [e.phase for e in self.progress]


class LoggingSink:
    """Forward events to the `xnote.clean` logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or _LOG

    def emit_log(self, text: str) -> None:
        self.logger.info("%s", text)

    def emit_progress(self, event: ProgressEvent) -> None:
        self.logger.debug(
            "progress phase=%s current=%s total=%s message=%s",
            event.phase.value,
            event.current,
            event.total,
            event.message,
        )

    def emit_result(self, kind: str, payload: dict[str, Any]) -> None:
        summary = {k: (len(v) if isinstance(v, list) else v) for k, v in payload.items()}
        self.logger.info("result kind=%s %s", kind, summary)


class FanoutSink:
    def __init__(self, *sinks: EventSink) -> None:
        self.sinks = list(sinks)

    def emit_log(self, text: str) -> None:
        for s in self.sinks:
            s.emit_log(text)

    def emit_progress(self, event: ProgressEvent) -> None:
        for s in self.sinks:
            s.emit_progress(event)

    def emit_result(self, kind: str, payload: dict[str, Any]) -> None:
        for s in self.sinks:
            s.emit_result(kind, payload)


def progress(sink: ProgressSink, phase: Phase, current: int, total: int, message: str) -> None:
    sink.emit_progress(ProgressEvent(phase=phase, current=current, total=total, message=message))
