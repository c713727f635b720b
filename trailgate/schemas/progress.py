"""
Progress tracking schemas for TrailGate.

Defines Pydantic models for learner progress including:
- Step and trail status
- Persisted progression state (navigation pointer, frontier, completed set)
"""

from pydantic import BaseModel, Field
from enum import Enum


class StepStatus(str, Enum):
    LOCKED = "locked"
    UNLOCKED_INCOMPLETE = "unlocked_incomplete"
    UNLOCKED_COMPLETE = "unlocked_complete"


class TrailState(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    TIP_RESOLVED = "tip_resolved"  # terminal until restart


class ProgressState(BaseModel):
    current_index: int = Field(0, ge=0)   # step being viewed
    frontier_index: int = Field(0, ge=0)  # furthest unlocked step
    completed: set[int] = set()

    def clamp(self, step_count: int) -> "ProgressState":
        """Return a copy that fits a trail of `step_count` steps."""
        last = max(step_count - 1, 0)
        frontier = min(self.frontier_index, last)
        return ProgressState(
            current_index=min(self.current_index, frontier),
            frontier_index=frontier,
            completed={i for i in self.completed if i <= frontier},
        )
