"""
TrailLoader - Load published trails from YAML or JSON documents.

Provides read-only access to:
- Trail documents (<trails_dir>/<trail_id>.yaml, .yml or .json)
- The list of available trails
- A cached provider with fresh/stale windows
"""

import json
import logging
from pathlib import Path
from typing import Callable, Optional, Protocol

import yaml

from trailgate.config import DEFAULT_TRAILS_DIR
from trailgate.errors import TrailNotFound
from trailgate.schemas import Trail
from trailgate.utils.cache import StaleCache


logger = logging.getLogger(__name__)

TRAIL_SUFFIXES = (".yaml", ".yml", ".json")


class TrailProvider(Protocol):
    def get_trail(self, trail_id: str) -> Trail: ...


def parse_trail(text: str, suffix: str = ".yaml") -> Trail:
    """
    Parse a trail document.

    Raises:
        pydantic.ValidationError: If the document does not describe a valid trail
    """
    if suffix == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    return Trail.model_validate(data)


class TrailLoader:
    """Load trails from a directory of documents."""

    def __init__(self, trails_dir: Optional[Path] = None):
        """
        Initialize loader.

        Args:
            trails_dir: Directory containing trail documents (default: trails/)
        """
        self.trails_dir = Path(trails_dir) if trails_dir else DEFAULT_TRAILS_DIR

    def _find_path(self, trail_id: str) -> Optional[Path]:
        # Sanitize trail_id for filename
        safe_id = trail_id.replace("/", "_").replace("\\", "_")
        for suffix in TRAIL_SUFFIXES:
            path = self.trails_dir / f"{safe_id}{suffix}"
            if path.exists():
                return path
        return None

    def get_trail(self, trail_id: str) -> Trail:
        """
        Load a trail by ID.

        Raises:
            TrailNotFound: If no document exists for the ID
        """
        path = self._find_path(trail_id)
        if path is None:
            raise TrailNotFound(f"Trail not found: {trail_id} (in {self.trails_dir})")

        with open(path, "r", encoding="utf-8") as f:
            trail = parse_trail(f.read(), path.suffix)
        logger.debug(f"Loaded trail {trail.id} from {path}")
        return trail

    def list_trail_ids(self) -> list[str]:
        """List the IDs of all trail documents, sorted."""
        if not self.trails_dir.exists():
            return []
        return sorted(
            p.stem for p in self.trails_dir.iterdir()
            if p.suffix in TRAIL_SUFFIXES
        )

    def get_all_trails(self) -> list[Trail]:
        return [self.get_trail(trail_id) for trail_id in self.list_trail_ids()]


class CachedTrailProvider:
    """
    Serve trails from a StaleCache in front of another provider.

    Subscribers are notified when a refresh returns a changed trail.
    """

    def __init__(self, provider: TrailProvider, cache: StaleCache):
        self.provider = provider
        self.cache = cache

    def get_trail(self, trail_id: str) -> Trail:
        return self.cache.get_or_load(trail_id, lambda: self.provider.get_trail(trail_id))

    def subscribe(self, callback: Callable[[str, Trail], None]) -> Callable[[], None]:
        return self.cache.subscribe(callback)

    def invalidate(self, trail_id: Optional[str] = None):
        self.cache.invalidate(trail_id)
