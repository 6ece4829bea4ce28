# diagnostics/events.py
"""
Diagnostic events raised on the failure paths of the frame pipeline.

A sink is any callable ``sink(event, **fields)``. Nothing in the pipeline
depends on what the sink does with an event.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)

DETECTION_FAILED = "detection_failed"
FACE_RECORD_INVALID = "face_record_invalid"
DRAW_FAILED = "draw_failed"
FRAME_OVER_BUDGET = "frame_over_budget"

EventSink = Callable[..., None]


class LoggingEventSink:
    def __init__(self, log: logging.Logger = None, level: int = logging.WARNING):
        self.log = log or logger
        self.level = level

    def __call__(self, event: str, **fields: Any) -> None:
        detail = " ".join(f"{k}={v}" for k, v in sorted(fields.items()))
        self.log.log(self.level, "[%s] %s", event, detail,
                     extra={"event": event, "fields": fields})


class RecordingEventSink:
    """Keeps every event in memory, in arrival order."""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def __call__(self, event: str, **fields: Any) -> None:
        self.events.append((event, fields))

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def count(self, event: str) -> int:
        return sum(1 for name, _ in self.events if name == event)

    def clear(self) -> None:
        self.events.clear()


def default_sink() -> EventSink:
    return LoggingEventSink()
