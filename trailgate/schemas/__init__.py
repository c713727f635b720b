"""
TrailGate Schemas - Pydantic models for the trail progression engine.

This module exports all schema classes for:
- Trail: steps, step kinds, trail value
- Progress: persisted progression state, step and trail status
- Events: analytics records emitted on transitions
"""

# Trail schemas
from .trail import (
    StepKind,
    Step,
    Trail,
)

# Progress schemas
from .progress import (
    StepStatus,
    TrailState,
    ProgressState,
)

# Event schemas
from .events import (
    EventType,
    AnalyticsEvent,
)

__all__ = [
    # Trail
    'StepKind',
    'Step',
    'Trail',
    # Progress
    'StepStatus',
    'TrailState',
    'ProgressState',
    # Events
    'EventType',
    'AnalyticsEvent',
]
