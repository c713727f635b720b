"""Shared fixtures: a deterministic clock, fake players and payment gates."""

from typing import Callable, Optional

import pytest

from trailgate.engine import (
    EventEmitter,
    InMemoryEventLog,
    ManualClock,
    PaymentOutcome,
    PollingScheduler,
    ProgressController,
    WatchTimeTracker,
)
from trailgate.schemas import Step, StepKind, Trail


def make_trail(kinds=("video", "video", "article"), trail_value=150.0, suggested_tip=None, trail_id="trail-1") -> Trail:
    return Trail(
        id=trail_id,
        title="Test Trail",
        creator="Jane Smith",
        steps=[
            Step(id=f"s{i}", title=f"Step {i}", kind=StepKind(kind))
            for i, kind in enumerate(kinds)
        ],
        trail_value=trail_value,
        suggested_tip=suggested_tip,
    )


class FakePlayer:
    """VideoPlayer driven by the test."""

    def __init__(self, duration: Optional[float] = 100.0):
        self.duration = duration
        self._callbacks: dict[str, Callable[[], None]] = {}

    def on_play(self, callback):
        self._callbacks["play"] = callback

    def on_pause(self, callback):
        self._callbacks["pause"] = callback

    def on_ended(self, callback):
        self._callbacks["ended"] = callback

    def get_duration_seconds(self):
        return self.duration

    def play(self):
        self._callbacks["play"]()

    def pause(self):
        self._callbacks["pause"]()

    def end(self):
        self._callbacks["ended"]()


class FakeGate:
    """PaymentGate returning a fixed outcome and recording charges."""

    def __init__(self, outcome=PaymentOutcome.SUCCESS):
        self.outcome = outcome
        self.charges: list[int] = []

    def initiate_skip_payment(self, amount: int):
        self.charges.append(amount)
        return self.outcome


class RaisingGate:
    def __init__(self, error: Exception):
        self.error = error

    def initiate_skip_payment(self, amount: int):
        raise self.error


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler(clock):
    return PollingScheduler(clock)


@pytest.fixture
def tracker(scheduler, clock):
    return WatchTimeTracker(scheduler, clock=clock, threshold=80.0, sample_interval=1.0)


@pytest.fixture
def event_log():
    return InMemoryEventLog()


@pytest.fixture
def trail():
    return make_trail()


@pytest.fixture
def controller(trail, tracker, event_log):
    ctrl = ProgressController(trail, tracker, emitter=EventEmitter(trail.id, [event_log]))
    ctrl.open()
    return ctrl


@pytest.fixture
def watch(clock, scheduler, tracker):
    """Play a step for `seconds` of simulated time, then pause it."""
    def _watch(step_index: int, seconds: float, duration: float = 100.0, pause: bool = True):
        tracker.on_player_event(step_index, "play", duration)
        for _ in range(int(seconds)):
            clock.advance(1)
            scheduler.run_pending()
        if pause:
            tracker.on_player_event(step_index, "pause", duration)
    return _watch
