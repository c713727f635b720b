"""
Schema validation tests for TrailGate.

Tests all Pydantic models to ensure they validate correctly.
"""

import pytest
from datetime import datetime
from pydantic import ValidationError

from trailgate.schemas import (
    # Trail
    StepKind,
    Step,
    Trail,
    # Progress
    StepStatus,
    TrailState,
    ProgressState,
    # Events
    EventType,
    AnalyticsEvent,
)


class TestTrailSchemas:
    """Test trail and step schemas."""

    def test_step_defaults(self):
        step = Step(id="s1", title="Intro")
        assert step.kind == StepKind.VIDEO
        assert step.is_video
        assert step.duration_hint is None
        assert step.content == ""

    def test_step_kind_from_string(self):
        step = Step(id="s1", title="Read me", kind="article")
        assert step.kind == StepKind.ARTICLE
        assert not step.is_video

    def test_step_invalid_kind(self):
        with pytest.raises(ValidationError):
            Step(id="s1", title="Quiz", kind="quiz")

    def test_step_negative_duration(self):
        with pytest.raises(ValidationError):
            Step(id="s1", title="Intro", duration_hint=-1)

    def test_trail_valid(self):
        trail = Trail(
            id="web-basics",
            title="Introduction to Web Development",
            steps=[
                Step(id="a", title="HTML"),
                Step(id="b", title="CSS"),
                Step(id="c", title="Certificate", kind="reward"),
            ],
            trail_value=150,
        )
        assert trail.step_count == 3
        assert trail.last_index == 2
        assert trail.currency == "usd"
        assert trail.suggested_tip is None

    def test_trail_requires_steps(self):
        with pytest.raises(ValidationError):
            Trail(id="empty", title="Empty", steps=[])

    def test_trail_value_non_negative(self):
        with pytest.raises(ValidationError):
            Trail(id="t", title="T", steps=[Step(id="a", title="A")], trail_value=-5)

    def test_terminal_reward(self):
        trail = Trail(
            id="t",
            title="T",
            steps=[Step(id="a", title="A"), Step(id="r", title="R", kind="reward")],
        )
        assert trail.is_terminal_reward(1)
        assert not trail.is_terminal_reward(0)

    def test_reward_not_last_is_not_terminal(self):
        trail = Trail(
            id="t",
            title="T",
            steps=[Step(id="r", title="R", kind="reward"), Step(id="a", title="A")],
        )
        assert not trail.is_terminal_reward(0)
        assert not trail.is_terminal_reward(1)


class TestProgressSchemas:
    """Test progress tracking schemas."""

    def test_status_values(self):
        assert StepStatus.LOCKED.value == "locked"
        assert StepStatus.UNLOCKED_INCOMPLETE.value == "unlocked_incomplete"
        assert StepStatus.UNLOCKED_COMPLETE.value == "unlocked_complete"
        assert TrailState.TIP_RESOLVED.value == "tip_resolved"

    def test_progress_defaults(self):
        progress = ProgressState()
        assert progress.current_index == 0
        assert progress.frontier_index == 0
        assert progress.completed == set()

    def test_progress_negative_index(self):
        with pytest.raises(ValidationError):
            ProgressState(frontier_index=-1)

    def test_progress_completed_from_list(self):
        progress = ProgressState.model_validate(
            {"current_index": 1, "frontier_index": 2, "completed": [0, 1, 1]}
        )
        assert progress.completed == {0, 1}

    def test_clamp_within_bounds_is_unchanged(self):
        progress = ProgressState(current_index=1, frontier_index=2, completed={0, 1})
        clamped = progress.clamp(3)
        assert clamped == progress
        assert clamped is not progress

    def test_clamp_shrunk_trail(self):
        progress = ProgressState(current_index=4, frontier_index=5, completed={0, 1, 2, 3, 4})
        clamped = progress.clamp(3)
        assert clamped.frontier_index == 2
        assert clamped.current_index == 2
        assert clamped.completed == {0, 1, 2}


class TestEventSchemas:
    """Test analytics event schemas."""

    def test_event_types(self):
        assert {e.value for e in EventType} == {
            "trail_view",
            "step_complete",
            "video_watch",
            "step_skip",
            "tip_donated",
            "trail_complete",
        }

    def test_to_record(self):
        event = AnalyticsEvent(
            trail_id="web-basics",
            event_type=EventType.STEP_SKIP,
            data={"stepIndex": 1, "toIndex": 2, "cost": 50},
            timestamp=datetime(2024, 1, 15, 10, 30),
        )
        assert event.to_record() == {
            "trailId": "web-basics",
            "eventType": "step_skip",
            "data": {"stepIndex": 1, "toIndex": 2, "cost": 50},
            "timestamp": "2024-01-15T10:30:00",
        }

    def test_event_defaults(self):
        event = AnalyticsEvent(trail_id="t", event_type="trail_complete")
        assert event.data == {}
        assert isinstance(event.timestamp, datetime)
