"""Tests for analytics emission and sinks."""

import json
import logging
from datetime import datetime

from trailgate.engine import (
    EventEmitter,
    InMemoryEventLog,
    JsonlEventSink,
    LoggingEventSink,
    ProgressController,
)
from trailgate.schemas import EventType

from conftest import make_trail


FIXED_NOW = datetime(2024, 1, 15, 10, 30)


class FailingSink:
    def record(self, event):
        raise RuntimeError("analytics backend down")


class TestEventEmitter:

    def test_typed_helpers(self):
        log = InMemoryEventLog()
        emitter = EventEmitter("trail-1", [log], now=lambda: FIXED_NOW)
        emitter.trail_view("Intro")
        emitter.step_complete(0, "HTML")
        emitter.video_watch(0, 83.456)
        emitter.step_skip(1, 3, 100)
        emitter.tip_donated(5.0)
        emitter.trail_complete()

        assert [e.data for e in log.events] == [
            {"trailTitle": "Intro"},
            {"stepIndex": 0, "title": "HTML"},
            {"stepIndex": 0, "watchedPercentage": 83.5},
            {"stepIndex": 1, "toIndex": 3, "cost": 100},
            {"amount": 5.0},
            {},
        ]
        assert all(e.trail_id == "trail-1" for e in log.events)
        assert all(e.timestamp == FIXED_NOW for e in log.events)

    def test_failing_sink_does_not_interrupt(self, caplog):
        log = InMemoryEventLog()
        emitter = EventEmitter("trail-1", [FailingSink(), log])
        with caplog.at_level(logging.ERROR):
            event = emitter.trail_complete()
        assert log.events == [event]
        assert "FailingSink" in caplog.text

    def test_failing_sink_during_transition(self, tracker):
        trail = make_trail(kinds=("article", "article"))
        log = InMemoryEventLog()
        controller = ProgressController(trail, tracker, emitter=EventEmitter(trail.id, [FailingSink(), log]))
        controller.open()
        controller.advance()
        assert controller.frontier_index == 1
        assert len(log.by_type(EventType.STEP_COMPLETE)) == 1

    def test_add_sink(self):
        emitter = EventEmitter("trail-1")
        log = InMemoryEventLog()
        emitter.add_sink(log)
        emitter.trail_view("Intro")
        assert len(log.events) == 1


class TestSinks:

    def test_in_memory_by_type_and_clear(self):
        log = InMemoryEventLog()
        emitter = EventEmitter("trail-1", [log])
        emitter.trail_view("Intro")
        emitter.trail_complete()
        assert len(log.by_type(EventType.TRAIL_COMPLETE)) == 1
        log.clear()
        assert log.events == []

    def test_jsonl_sink(self, tmp_path):
        path = tmp_path / "events" / "log.jsonl"
        emitter = EventEmitter("trail-1", [JsonlEventSink(path)], now=lambda: FIXED_NOW)
        emitter.step_skip(0, 2, 100)
        emitter.tip_donated(10.0)

        lines = path.read_text(encoding="utf-8").splitlines()
        records = [json.loads(line) for line in lines]
        assert records[0] == {
            "trailId": "trail-1",
            "eventType": "step_skip",
            "data": {"stepIndex": 0, "toIndex": 2, "cost": 100},
            "timestamp": "2024-01-15T10:30:00",
        }
        assert records[1]["eventType"] == "tip_donated"

    def test_logging_sink(self, caplog):
        emitter = EventEmitter("trail-1", [LoggingEventSink()])
        with caplog.at_level(logging.INFO, logger="trailgate.engine.events"):
            emitter.trail_view("Intro")
        assert "[trail-1] trail_view" in caplog.text
