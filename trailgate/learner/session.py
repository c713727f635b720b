"""
LearnerSession - Wire the engine components for one learner on one trail.
"""

from dataclasses import dataclass, field
from typing import Optional

from trailgate.config import Settings, get_settings
from trailgate.engine import (
    EventEmitter,
    EventSink,
    InMemoryEventLog,
    PollingScheduler,
    ProgressController,
    ProgressStore,
    Scheduler,
    WatchTimeTracker,
)

from .loader import TrailProvider


@dataclass
class LearnerSession:
    """Engine components for one learner on one trail."""
    controller: ProgressController
    tracker: WatchTimeTracker
    scheduler: Scheduler
    event_log: InMemoryEventLog = field(default_factory=InMemoryEventLog)

    @property
    def trail(self):
        return self.controller.trail

    def tick(self) -> int:
        """Run due samplers (polling schedulers only)."""
        if isinstance(self.scheduler, PollingScheduler):
            return self.scheduler.run_pending()
        return 0


def start_session(
    provider: TrailProvider,
    trail_id: str,
    store: Optional[ProgressStore] = None,
    scheduler: Optional[Scheduler] = None,
    sinks: Optional[list[EventSink]] = None,
    settings: Optional[Settings] = None,
) -> LearnerSession:
    """
    Load a trail and open a controller for it.

    Args:
        provider: Trail provider (loader or cached provider)
        trail_id: ID of the trail to follow
        store: Optional progress store to restore from and save to
        scheduler: Sampler timer source (default: PollingScheduler)
        sinks: Extra analytics sinks; an InMemoryEventLog is always attached
        settings: Engine settings (default: from environment)

    Returns:
        LearnerSession with the controller already opened
    """
    settings = settings or get_settings()
    trail = provider.get_trail(trail_id)
    scheduler = scheduler or PollingScheduler()
    clock = scheduler.clock if isinstance(scheduler, PollingScheduler) else None

    tracker_kwargs = dict(
        threshold=settings.completion_threshold,
        sample_interval=settings.sample_interval,
    )
    if clock is not None:
        tracker_kwargs["clock"] = clock
    tracker = WatchTimeTracker(scheduler, **tracker_kwargs)

    event_log = InMemoryEventLog()
    emitter = EventEmitter(trail.id, [event_log, *(sinks or [])])
    controller = ProgressController(
        trail,
        tracker,
        emitter=emitter,
        store=store,
        default_suggested_tip=settings.default_tip,
    )
    controller.open()
    return LearnerSession(
        controller=controller,
        tracker=tracker,
        scheduler=scheduler,
        event_log=event_log,
    )
