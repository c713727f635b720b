"""
TrailGate Engine - Progression and monetized gating for a single trail.

This module provides:
- WatchTimeTracker: per-step watch time and completion flags
- skip_cost: skip pricing
- ProgressController: frontier, navigation, skips, completion
- TipFlow: post-completion tip decision
- EventEmitter: analytics records for each transition
"""

from .scheduling import (
    Scheduler,
    TimerHandle,
    ManualClock,
    AsyncioScheduler,
    PollingScheduler,
)

from .watch import (
    PlayerEvent,
    VideoPlayer,
    WatchState,
    WatchTimeTracker,
)

from .pricing import skip_cost

from .skip import (
    SkipKind,
    SkipPhase,
    SkipQuote,
    SkipFlow,
    PaymentOutcome,
    PaymentGate,
)

from .tipflow import (
    TipFlow,
    TipResolution,
    parse_tip_amount,
)

from .events import (
    EventSink,
    EventEmitter,
    InMemoryEventLog,
    LoggingEventSink,
    JsonlEventSink,
)

from .controller import (
    ProgressController,
    ProgressStore,
)

__all__ = [
    # Scheduling
    "Scheduler",
    "TimerHandle",
    "ManualClock",
    "AsyncioScheduler",
    "PollingScheduler",
    # Watch tracking
    "PlayerEvent",
    "VideoPlayer",
    "WatchState",
    "WatchTimeTracker",
    # Pricing and skips
    "skip_cost",
    "SkipKind",
    "SkipPhase",
    "SkipQuote",
    "SkipFlow",
    "PaymentOutcome",
    "PaymentGate",
    # Tips
    "TipFlow",
    "TipResolution",
    "parse_tip_amount",
    # Events
    "EventSink",
    "EventEmitter",
    "InMemoryEventLog",
    "LoggingEventSink",
    "JsonlEventSink",
    # Controller
    "ProgressController",
    "ProgressStore",
]
