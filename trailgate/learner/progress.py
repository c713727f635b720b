"""
Progress stores - Persist learner progression in ~/.trailgate/progress.db.

Stores progression separately from trail content:
- Navigation pointer (current step)
- Unlock frontier
- Completed step set
- Last activity time
"""

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from trailgate.config import DEFAULT_PROGRESS_DB
from trailgate.schemas import ProgressState


class SQLiteProgressStore:
    """
    Save and load ProgressState in a SQLite database.

    Progress is stored separately from trails so that:
    - Trails can be re-published without losing progress
    - Progress is learner-specific, trails are shared
    """

    def __init__(self, db_path: Optional[Path] = None, learner_id: str = "default"):
        """
        Initialize progress store.

        Args:
            db_path: Path to progress.db (default: ~/.trailgate/progress.db)
            learner_id: Learner identifier for multi-user support
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_PROGRESS_DB
        self.learner_id = learner_id
        self._ensure_database()

    def _ensure_database(self):
        """Create database and tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS trail_progress (
                    learner_id TEXT NOT NULL,
                    trail_id TEXT NOT NULL,
                    current_index INTEGER NOT NULL DEFAULT 0,
                    frontier_index INTEGER NOT NULL DEFAULT 0,
                    completed TEXT NOT NULL DEFAULT '[]',
                    updated_at TEXT,
                    PRIMARY KEY (learner_id, trail_id)
                );

                CREATE INDEX IF NOT EXISTS idx_trail_progress_learner
                ON trail_progress(learner_id);
            """)
            conn.commit()
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def save_progress(self, trail_id: str, state: ProgressState):
        """Insert or replace the progress row for a trail."""
        conn = self._get_connection()
        try:
            now = datetime.now().isoformat()
            completed = json.dumps(sorted(state.completed))
            conn.execute(
                """INSERT INTO trail_progress
                       (learner_id, trail_id, current_index, frontier_index, completed, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?)
                   ON CONFLICT(learner_id, trail_id) DO UPDATE SET
                     current_index = ?,
                     frontier_index = ?,
                     completed = ?,
                     updated_at = ?""",
                (self.learner_id, trail_id, state.current_index, state.frontier_index, completed, now,
                 state.current_index, state.frontier_index, completed, now)
            )
            conn.commit()
        finally:
            conn.close()

    def load_progress(self, trail_id: str) -> Optional[ProgressState]:
        """Load saved progress for a trail, or None if never saved."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """SELECT current_index, frontier_index, completed
                   FROM trail_progress
                   WHERE learner_id = ? AND trail_id = ?""",
                (self.learner_id, trail_id)
            )
            row = cursor.fetchone()
            if not row:
                return None

            return ProgressState(
                current_index=row["current_index"],
                frontier_index=row["frontier_index"],
                completed=set(json.loads(row["completed"] or "[]")),
            )
        finally:
            conn.close()

    def get_last_activity(self, trail_id: str) -> Optional[datetime]:
        """Get the time progress was last saved for a trail."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """SELECT updated_at FROM trail_progress
                   WHERE learner_id = ? AND trail_id = ?""",
                (self.learner_id, trail_id)
            )
            row = cursor.fetchone()
            return datetime.fromisoformat(row["updated_at"]) if row and row["updated_at"] else None
        finally:
            conn.close()

    def list_trail_ids(self) -> list[str]:
        """Get IDs of trails with saved progress, most recent first."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """SELECT trail_id FROM trail_progress
                   WHERE learner_id = ?
                   ORDER BY updated_at DESC""",
                (self.learner_id,)
            )
            return [row["trail_id"] for row in cursor.fetchall()]
        finally:
            conn.close()

    def reset_progress(self, trail_id: str):
        """Forget saved progress for one trail."""
        conn = self._get_connection()
        try:
            conn.execute(
                "DELETE FROM trail_progress WHERE learner_id = ? AND trail_id = ?",
                (self.learner_id, trail_id)
            )
            conn.commit()
        finally:
            conn.close()

    def reset_all_progress(self):
        """Reset all progress for the current learner."""
        conn = self._get_connection()
        try:
            conn.execute(
                "DELETE FROM trail_progress WHERE learner_id = ?",
                (self.learner_id,)
            )
            conn.commit()
        finally:
            conn.close()


class InMemoryProgressStore:
    """Process-local progress store."""

    def __init__(self):
        self._saved: dict[str, ProgressState] = {}

    def save_progress(self, trail_id: str, state: ProgressState):
        self._saved[trail_id] = state.model_copy(deep=True)

    def load_progress(self, trail_id: str) -> Optional[ProgressState]:
        state = self._saved.get(trail_id)
        return state.model_copy(deep=True) if state else None

    def list_trail_ids(self) -> list[str]:
        return list(self._saved)

    def reset_progress(self, trail_id: str):
        self._saved.pop(trail_id, None)
