"""Tests for watch-time tracking and sampler scheduling."""

import asyncio

from trailgate.engine import AsyncioScheduler, ManualClock, PlayerEvent, PollingScheduler, WatchState
from trailgate.errors import PlayerUnavailable

from conftest import FakePlayer


class TestWatchState:

    def test_no_duration_is_zero(self):
        state = WatchState(accumulated_seconds=500)
        assert not state.has_duration
        assert state.watched_percentage == 0.0

    def test_percentage_capped(self):
        state = WatchState(accumulated_seconds=150, duration_seconds=100)
        assert state.watched_percentage == 100.0

    def test_ended_is_full(self):
        state = WatchState(accumulated_seconds=10, duration_seconds=100, ended=True)
        assert state.watched_percentage == 100.0


class TestPollingScheduler:

    def test_fires_when_due(self, clock, scheduler):
        calls = []
        scheduler.call_every(1.0, lambda: calls.append(clock()))
        assert scheduler.run_pending() == 0
        clock.advance(1)
        assert scheduler.run_pending() == 1
        assert calls == [1.0]

    def test_fires_once_per_missed_interval(self, clock, scheduler):
        calls = []
        scheduler.call_every(1.0, lambda: calls.append("a"))
        clock.advance(3)
        assert scheduler.run_pending() == 3
        assert len(calls) == 3

    def test_due_order(self, clock, scheduler):
        calls = []
        scheduler.call_every(2.0, lambda: calls.append("slow"))
        scheduler.call_every(1.0, lambda: calls.append("fast"))
        clock.advance(2)
        scheduler.run_pending()
        assert calls == ["fast", "slow", "fast"]

    def test_cancel(self, clock, scheduler):
        calls = []
        handle = scheduler.call_every(1.0, lambda: calls.append("a"))
        handle.cancel()
        clock.advance(5)
        assert scheduler.run_pending() == 0
        assert scheduler.active_count == 0
        assert calls == []


class TestAsyncioScheduler:

    def test_repeats_until_cancelled(self):
        calls = []

        async def run():
            handle = AsyncioScheduler().call_every(0.01, lambda: calls.append(1))
            await asyncio.sleep(0.05)
            handle.cancel()
            count = len(calls)
            await asyncio.sleep(0.03)
            return handle, count

        handle, count = asyncio.run(run())
        assert count >= 1
        assert len(calls) == count
        assert handle.cancelled


class TestWatchTimeTracker:

    def test_unknown_step_is_zero(self, tracker):
        assert tracker.watched_percentage(3) == 0.0
        assert not tracker.is_video_complete(3)
        assert tracker.get_state(3) is None

    def test_accumulates_while_playing(self, tracker, watch):
        watch(0, 40)
        assert tracker.watched_percentage(0) == 40.0
        assert not tracker.is_video_complete(0)

    def test_completes_at_threshold(self, tracker, watch):
        watch(0, 80)
        assert tracker.watched_percentage(0) == 80.0
        assert tracker.is_video_complete(0)

    def test_pause_credits_elapsed_time(self, clock, tracker):
        tracker.on_player_event(0, "play", 100)
        clock.advance(10)
        tracker.on_player_event(0, "pause", 100)
        assert tracker.watched_percentage(0) == 10.0

    def test_paused_time_not_credited(self, clock, scheduler, tracker, watch):
        watch(0, 10)
        clock.advance(50)
        scheduler.run_pending()
        assert tracker.watched_percentage(0) == 10.0
        assert not tracker.is_sampling(0)

    def test_resume_continues_accumulating(self, tracker, watch):
        watch(0, 30)
        watch(0, 30)
        assert tracker.watched_percentage(0) == 60.0

    def test_one_sampler_per_step(self, clock, scheduler, tracker):
        tracker.on_player_event(0, "play", 100)
        clock.advance(5)
        tracker.on_player_event(0, "play", 100)
        assert scheduler.active_count == 1
        assert tracker.active_samplers == [0]
        # the repeated play credited the time before restarting
        assert tracker.watched_percentage(0) == 5.0

    def test_ended_with_duration_completes(self, tracker, watch):
        watch(0, 10, pause=False)
        tracker.on_player_event(0, PlayerEvent.ENDED, 100)
        assert tracker.watched_percentage(0) == 100.0
        assert tracker.is_video_complete(0)
        assert not tracker.is_sampling(0)

    def test_ended_without_duration_does_not_complete(self, clock, tracker):
        tracker.on_player_event(0, "play", None)
        clock.advance(30)
        tracker.on_player_event(0, "ended", None)
        assert tracker.watched_percentage(0) == 0.0
        assert not tracker.is_video_complete(0)
        assert tracker.get_state(0).accumulated_seconds == 30.0

    def test_pause_before_play_is_ignored(self, tracker):
        tracker.on_player_event(0, "pause", 100)
        assert tracker.get_state(0) is None

    def test_ended_before_play_completes(self, scheduler, tracker):
        tracker.on_player_event(0, "ended", 100)
        assert tracker.is_video_complete(0)
        assert tracker.watched_percentage(0) == 100.0
        assert scheduler.active_count == 0

    def test_ended_before_play_without_duration(self, tracker):
        tracker.on_player_event(0, "ended", None)
        assert not tracker.is_video_complete(0)
        assert tracker.watched_percentage(0) == 0.0

    def test_completion_is_monotonic(self, tracker, watch):
        watch(0, 80)
        assert tracker.is_video_complete(0)
        # a longer reported duration lowers the percentage but not the flag
        tracker.on_player_event(0, "play", 1000)
        tracker.on_player_event(0, "pause", 1000)
        assert tracker.watched_percentage(0) == 8.0
        assert tracker.is_video_complete(0)

    def test_steps_tracked_independently(self, tracker, watch):
        watch(0, 20)
        watch(1, 50, duration=200)
        assert tracker.watched_percentage(0) == 20.0
        assert tracker.watched_percentage(1) == 25.0

    def test_listener_receives_samples(self, tracker, watch):
        seen = []
        tracker.add_listener(lambda index, pct: seen.append((index, pct)))
        watch(0, 2)
        assert seen[:2] == [(0, 1.0), (0, 2.0)]

    def test_stop_all(self, clock, scheduler, tracker):
        tracker.on_player_event(0, "play", 100)
        tracker.on_player_event(1, "play", 100)
        clock.advance(3)
        tracker.stop_all()
        assert scheduler.active_count == 0
        assert tracker.watched_percentage(0) == 3.0
        assert tracker.watched_percentage(1) == 3.0

    def test_reset(self, scheduler, tracker, watch):
        watch(0, 90, pause=False)
        tracker.reset()
        assert scheduler.active_count == 0
        assert tracker.get_state(0) is None
        assert not tracker.is_video_complete(0)

    def test_custom_threshold(self, clock, scheduler):
        from trailgate.engine import WatchTimeTracker

        tracker = WatchTimeTracker(scheduler, clock=clock, threshold=50.0)
        tracker.on_player_event(0, "play", 10)
        clock.advance(5)
        tracker.on_player_event(0, "pause", 10)
        assert tracker.is_video_complete(0)


class TestPlayerBinding:

    def test_attached_player_drives_tracker(self, clock, scheduler, tracker):
        player = FakePlayer(duration=100)
        tracker.attach_player(0, player)
        player.play()
        clock.advance(85)
        scheduler.run_pending()
        player.pause()
        assert tracker.watched_percentage(0) == 85.0
        assert tracker.is_video_complete(0)

    def test_replaced_player_is_ignored(self, clock, scheduler, tracker):
        old, new = FakePlayer(), FakePlayer()
        tracker.attach_player(0, old)
        old.play()
        clock.advance(10)
        tracker.attach_player(0, new)
        assert scheduler.active_count == 0
        old.play()
        clock.advance(10)
        scheduler.run_pending()
        assert scheduler.active_count == 0
        assert tracker.watched_percentage(0) == 10.0

    def test_detach_stops_sampler(self, clock, scheduler, tracker):
        player = FakePlayer()
        tracker.attach_player(0, player)
        player.play()
        clock.advance(4)
        tracker.detach_player(0)
        assert scheduler.active_count == 0
        assert tracker.watched_percentage(0) == 4.0

    def test_player_without_duration(self, clock, tracker):
        class BrokenPlayer(FakePlayer):
            def get_duration_seconds(self):
                raise PlayerUnavailable("metadata not loaded")

        player = BrokenPlayer()
        tracker.attach_player(0, player)
        player.play()
        clock.advance(10)
        player.end()
        assert tracker.watched_percentage(0) == 0.0
        assert not tracker.is_video_complete(0)


class TestManualClock:

    def test_advance_and_set(self):
        clock = ManualClock(5.0)
        assert clock() == 5.0
        clock.advance(2.5)
        assert clock() == 7.5
        clock.set(1.0)
        assert clock() == 1.0

    def test_polling_scheduler_uses_clock(self):
        clock = ManualClock()
        assert PollingScheduler(clock).clock is clock
