"""
Trail schemas for TrailGate.

Defines Pydantic models for creator-published content:
- Step kinds (video, article, reward)
- Steps with optional duration hints
- Trails with monetary value and suggested tip
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


class StepKind(str, Enum):
    VIDEO = "video"
    ARTICLE = "article"
    REWARD = "reward"


class Step(BaseModel):
    id: str
    title: str
    kind: StepKind = StepKind.VIDEO
    duration_hint: Optional[float] = Field(None, ge=0)  # minutes, display only
    source: Optional[str] = None  # video or article URL
    content: str = ""

    @property
    def is_video(self) -> bool:
        return self.kind == StepKind.VIDEO


class Trail(BaseModel):
    """
    An ordered sequence of steps with a monetary value.
    Steps are addressed by index; their order is fixed once published.
    """
    id: str
    title: str
    creator: str = ""
    description: str = ""
    steps: list[Step] = Field(..., min_length=1)
    trail_value: float = Field(0.0, ge=0)  # in units of `currency`
    currency: str = "usd"
    suggested_tip: Optional[float] = Field(None, ge=0)

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def last_index(self) -> int:
        return len(self.steps) - 1

    def is_terminal_reward(self, index: int) -> bool:
        """True for the last step when it is a reward."""
        return index == self.last_index and self.steps[index].kind == StepKind.REWARD
