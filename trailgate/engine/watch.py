"""
WatchTimeTracker - Accumulate per-step video watch time.

Observes play/pause/ended signals from a video player and publishes a
watched percentage per step. Provides:
- Lazily created WatchState per step index
- One periodic sampler per step (cancelled before a new one starts)
- A monotonic "video-complete" flag once the threshold is reached
- VideoPlayer capability binding (attach/detach)
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

from trailgate.config import DEFAULT_COMPLETION_THRESHOLD, DEFAULT_SAMPLE_INTERVAL
from trailgate.errors import PlayerUnavailable

from .scheduling import Scheduler, TimerHandle


logger = logging.getLogger(__name__)


class PlayerEvent(str, Enum):
    PLAY = "play"
    PAUSE = "pause"
    ENDED = "ended"


class VideoPlayer(Protocol):
    """Capability set the tracker needs from any video player."""

    def on_play(self, callback: Callable[[], None]) -> None: ...

    def on_pause(self, callback: Callable[[], None]) -> None: ...

    def on_ended(self, callback: Callable[[], None]) -> None: ...

    def get_duration_seconds(self) -> Optional[float]: ...


@dataclass
class WatchState:
    """Session-scoped watch state for one step."""
    accumulated_seconds: float = 0.0
    is_playing: bool = False
    last_resume_at: Optional[float] = None
    duration_seconds: Optional[float] = None
    ended: bool = False

    @property
    def has_duration(self) -> bool:
        return bool(self.duration_seconds) and self.duration_seconds > 0

    @property
    def watched_percentage(self) -> float:
        if not self.has_duration:
            return 0.0
        if self.ended:
            return 100.0
        return min(100.0, self.accumulated_seconds / self.duration_seconds * 100)


@dataclass
class _Sampler:
    handle: TimerHandle
    player_id: Optional[int]


ProgressListener = Callable[[int, float], None]


class WatchTimeTracker:
    """
    Track watch time for the steps of one trail.

    The tracker owns all WatchState and sampler handles. It never touches
    progression state; listeners receive (step_index, watched_percentage)
    after every sample.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        clock: Callable[[], float] = time.monotonic,
        threshold: float = DEFAULT_COMPLETION_THRESHOLD,
        sample_interval: float = DEFAULT_SAMPLE_INTERVAL,
    ):
        """
        Initialize tracker.

        Args:
            scheduler: Source of periodic sampler timers
            clock: Monotonic time source in seconds
            threshold: Percentage at which a video step becomes complete
            sample_interval: Seconds between samples while playing
        """
        self.scheduler = scheduler
        self.clock = clock
        self.threshold = threshold
        self.sample_interval = sample_interval
        self._states: dict[int, WatchState] = {}
        self._samplers: dict[int, _Sampler] = {}
        self._complete: set[int] = set()
        self._players: dict[int, VideoPlayer] = {}
        self._listeners: list[ProgressListener] = []

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_state(self, step_index: int) -> Optional[WatchState]:
        return self._states.get(step_index)

    def watched_percentage(self, step_index: int) -> float:
        state = self._states.get(step_index)
        return state.watched_percentage if state else 0.0

    def is_video_complete(self, step_index: int) -> bool:
        return step_index in self._complete

    def is_sampling(self, step_index: int) -> bool:
        return step_index in self._samplers

    @property
    def active_samplers(self) -> list[int]:
        return sorted(self._samplers)

    def add_listener(self, listener: ProgressListener):
        self._listeners.append(listener)

    # -------------------------------------------------------------------------
    # Player signals
    # -------------------------------------------------------------------------

    def on_player_event(
        self,
        step_index: int,
        event: PlayerEvent,
        player_duration_seconds: Optional[float] = None,
        player_id: Optional[int] = None,
    ):
        """Process one play/pause/ended signal for a step, in arrival order."""
        event = PlayerEvent(event)
        state = self._states.get(step_index)

        if event == PlayerEvent.PLAY:
            if state is None:
                state = self._states[step_index] = WatchState()
            self._update_duration(step_index, state, player_duration_seconds)
            if state.is_playing:
                self.sample(step_index)
            self._cancel_sampler(step_index)
            state.is_playing = True
            state.last_resume_at = self.clock()
            handle = self.scheduler.call_every(
                self.sample_interval, lambda: self.sample(step_index)
            )
            self._samplers[step_index] = _Sampler(handle=handle, player_id=player_id)
            logger.debug(f"Step {step_index}: playing")
            return

        if state is None:
            if event == PlayerEvent.PAUSE:
                return  # nothing was watched
            # end of stream is authoritative even if tracking never started
            state = self._states[step_index] = WatchState()

        self._update_duration(step_index, state, player_duration_seconds)
        self.stop(step_index)

        if event == PlayerEvent.ENDED:
            if state.has_duration:
                state.ended = True
                self._record(step_index, state)
            else:
                logger.warning(f"Step {step_index}: ended without a known duration, not completable by watching")

    def sample(self, step_index: int) -> float:
        """Credit time elapsed since the last sample and publish the percentage."""
        state = self._states.get(step_index)
        if state is None:
            return 0.0
        if state.is_playing and state.last_resume_at is not None:
            now = self.clock()
            state.accumulated_seconds += max(0.0, now - state.last_resume_at)
            state.last_resume_at = now
        return self._record(step_index, state)

    def stop(self, step_index: int):
        """Stop tracking a step: credit pending time, cancel its sampler."""
        state = self._states.get(step_index)
        if state is not None and state.is_playing:
            self.sample(step_index)
            state.is_playing = False
            state.last_resume_at = None
        self._cancel_sampler(step_index)

    def stop_all(self):
        for step_index in list(self._samplers):
            self.stop(step_index)

    def reset(self):
        """Discard every WatchState and completion flag (trail restart)."""
        for sampler in self._samplers.values():
            sampler.handle.cancel()
        self._samplers.clear()
        self._states.clear()
        self._complete.clear()

    # -------------------------------------------------------------------------
    # Player binding
    # -------------------------------------------------------------------------

    def attach_player(self, step_index: int, player: VideoPlayer):
        """
        Bind a player to a step.

        A player already bound to the step is detached first so its sampler
        can never keep crediting time alongside the new one.
        """
        if step_index in self._players:
            self.detach_player(step_index)
        self._players[step_index] = player
        player_id = id(player)

        def forward(event: PlayerEvent):
            def callback():
                if self._players.get(step_index) is not player:
                    return  # stale callback from a replaced player
                self.on_player_event(step_index, event, self._read_duration(player), player_id)
            return callback

        player.on_play(forward(PlayerEvent.PLAY))
        player.on_pause(forward(PlayerEvent.PAUSE))
        player.on_ended(forward(PlayerEvent.ENDED))

    def detach_player(self, step_index: int):
        self._players.pop(step_index, None)
        self.stop(step_index)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _read_duration(self, player: VideoPlayer) -> Optional[float]:
        try:
            return player.get_duration_seconds()
        except PlayerUnavailable as e:
            logger.warning(f"Player duration unavailable: {e}")
            return None

    def _update_duration(self, step_index: int, state: WatchState, duration: Optional[float]):
        if duration and duration > 0:
            state.duration_seconds = float(duration)
        elif not state.has_duration:
            logger.warning(f"Step {step_index}: player reported no duration; skip remains available")

    def _cancel_sampler(self, step_index: int):
        sampler = self._samplers.pop(step_index, None)
        if sampler is not None:
            sampler.handle.cancel()

    def _record(self, step_index: int, state: WatchState) -> float:
        percentage = state.watched_percentage
        if percentage >= self.threshold and step_index not in self._complete:
            self._complete.add(step_index)
            logger.info(f"Step {step_index}: video complete at {percentage:.1f}%")
        for listener in self._listeners:
            listener(step_index, percentage)
        return percentage
