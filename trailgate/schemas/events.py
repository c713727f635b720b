"""
Analytics event schemas for TrailGate.

One record is produced per meaningful progression transition and handed
to the analytics collaborator.
"""

from pydantic import BaseModel, Field
from typing import Any
from datetime import datetime
from enum import Enum


class EventType(str, Enum):
    TRAIL_VIEW = "trail_view"
    STEP_COMPLETE = "step_complete"
    VIDEO_WATCH = "video_watch"
    STEP_SKIP = "step_skip"
    TIP_DONATED = "tip_donated"
    TRAIL_COMPLETE = "trail_complete"


class AnalyticsEvent(BaseModel):
    trail_id: str
    event_type: EventType
    data: dict[str, Any] = {}
    timestamp: datetime = Field(default_factory=datetime.now)

    def to_record(self) -> dict[str, Any]:
        """Wire format expected by the analytics collaborator."""
        return {
            "trailId": self.trail_id,
            "eventType": self.event_type.value,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }
