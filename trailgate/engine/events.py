"""
EventEmitter - Deliver analytics records to collaborator sinks.

Sinks are fire-and-forget: a failing sink is logged and never interrupts
the progression transition that produced the event.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from trailgate.schemas import AnalyticsEvent, EventType


logger = logging.getLogger(__name__)


class EventSink(Protocol):
    def record(self, event: AnalyticsEvent) -> None: ...


class InMemoryEventLog:
    """Keep events in a list (tests, demos, the learner app)."""

    def __init__(self):
        self.events: list[AnalyticsEvent] = []

    def record(self, event: AnalyticsEvent):
        self.events.append(event)

    def by_type(self, event_type: EventType) -> list[AnalyticsEvent]:
        return [e for e in self.events if e.event_type == event_type]

    def clear(self):
        self.events.clear()


class LoggingEventSink:
    """Write each event to a logger at INFO."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def record(self, event: AnalyticsEvent):
        self.log.info(f"[{event.trail_id}] {event.event_type.value} {event.data}")


class JsonlEventSink:
    """Append events as JSON lines to a file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def record(self, event: AnalyticsEvent):
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(event.to_record(), ensure_ascii=False) + "\n")


class EventEmitter:
    """Build one AnalyticsEvent per transition and fan it out to sinks."""

    def __init__(
        self,
        trail_id: str,
        sinks: Optional[list[EventSink]] = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.trail_id = trail_id
        self.sinks: list[EventSink] = list(sinks or [])
        self.now = now

    def add_sink(self, sink: EventSink):
        self.sinks.append(sink)

    def emit(self, event_type: EventType, **data: Any) -> AnalyticsEvent:
        event = AnalyticsEvent(
            trail_id=self.trail_id,
            event_type=event_type,
            data=data,
            timestamp=self.now(),
        )
        for sink in self.sinks:
            try:
                sink.record(event)
            except Exception:
                logger.exception(f"Analytics sink {type(sink).__name__} failed for {event_type.value}")
        return event

    # -------------------------------------------------------------------------
    # Typed helpers
    # -------------------------------------------------------------------------

    def trail_view(self, trail_title: str) -> AnalyticsEvent:
        return self.emit(EventType.TRAIL_VIEW, trailTitle=trail_title)

    def step_complete(self, step_index: int, title: str) -> AnalyticsEvent:
        return self.emit(EventType.STEP_COMPLETE, stepIndex=step_index, title=title)

    def video_watch(self, step_index: int, watched_percentage: float) -> AnalyticsEvent:
        return self.emit(
            EventType.VIDEO_WATCH,
            stepIndex=step_index,
            watchedPercentage=round(watched_percentage, 1),
        )

    def step_skip(self, step_index: int, to_index: int, cost: int) -> AnalyticsEvent:
        return self.emit(EventType.STEP_SKIP, stepIndex=step_index, toIndex=to_index, cost=cost)

    def tip_donated(self, amount: float) -> AnalyticsEvent:
        return self.emit(EventType.TIP_DONATED, amount=amount)

    def trail_complete(self) -> AnalyticsEvent:
        return self.emit(EventType.TRAIL_COMPLETE)
