"""
TrailGate Learner - Runtime collaborators for following a trail.

This module provides:
- TrailLoader: Load trail documents
- CachedTrailProvider: Fresh/stale cached trail access
- SQLiteProgressStore: Persist learner progress
- start_session: Wire a controller for one learner on one trail
"""

from .loader import (
    TrailLoader,
    TrailProvider,
    CachedTrailProvider,
    parse_trail,
    TRAIL_SUFFIXES,
)

from .progress import (
    SQLiteProgressStore,
    InMemoryProgressStore,
)

from .session import (
    LearnerSession,
    start_session,
)

__all__ = [
    # Loader
    "TrailLoader",
    "TrailProvider",
    "CachedTrailProvider",
    "parse_trail",
    "TRAIL_SUFFIXES",
    # Progress
    "SQLiteProgressStore",
    "InMemoryProgressStore",
    # Session
    "LearnerSession",
    "start_session",
]
