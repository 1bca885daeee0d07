"""
Persistent bot state - last seen build and recent build history.

The state lives in one JSON document:

    {
      "lastVersion": "1.20.4",
      "lastBuild": 11,
      "lastBuildsData": [
        {"version": "1.20.4", "build": 11, "changelog": [...],
         "time": "15/1/2025, 17:50:23", "downloadUrl": "https://..."}
      ]
    }

`StateStore` owns the single in-memory copy. The update detector is its only
writer; command handlers and the startup announcement only read it.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .errors import PersistenceError

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 5
NO_CHANGES_ENTRY = "⚠️ No change information available"

BuildId = Union[int, str]


@dataclass
class BuildRecord:
    """One detected build, as shown in announcements and history."""

    version: str
    build: BuildId
    changelog: List[str] = field(default_factory=lambda: [NO_CHANGES_ENTRY])
    time: str = ""
    download_url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "build": self.build,
            "changelog": list(self.changelog),
            "time": self.time,
            "downloadUrl": self.download_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildRecord":
        changelog = data.get("changelog")
        if not isinstance(changelog, list):
            changelog = [NO_CHANGES_ENTRY]
        return cls(
            version=str(data.get("version", "")),
            build=data.get("build", ""),
            changelog=[str(entry) for entry in changelog],
            time=str(data.get("time") or ""),
            download_url=str(data.get("downloadUrl") or ""),
        )


@dataclass
class PersistedState:
    """Everything the bot remembers between restarts."""

    last_version: str = ""
    last_build: BuildId = ""
    last_builds_data: List[BuildRecord] = field(default_factory=list)

    @property
    def latest(self) -> Optional[BuildRecord]:
        """Most recent history entry, if any."""
        return self.last_builds_data[0] if self.last_builds_data else None

    def is_known(self, version: str, build: BuildId) -> bool:
        """True if (version, build) is the last build already announced."""
        # Compared as text so a legacy file holding "11" matches an API 11.
        return str(version) == str(self.last_version) and str(build) == str(
            self.last_build
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lastVersion": self.last_version,
            "lastBuild": self.last_build,
            "lastBuildsData": [record.to_dict() for record in self.last_builds_data],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PersistedState":
        history = data.get("lastBuildsData")
        if not isinstance(history, list):
            history = []
        records = [
            BuildRecord.from_dict(item) for item in history if isinstance(item, dict)
        ]
        last_build = data.get("lastBuild", "")
        return cls(
            last_version=str(data.get("lastVersion") or ""),
            last_build="" if last_build is None else last_build,
            last_builds_data=records[:HISTORY_LIMIT],
        )


class StateStore:
    """
    Loads, holds and saves the bot's persisted state.

    `record_build` swaps in a whole new `PersistedState`, so a reader that
    grabbed `store.state` sees either the old or the new value, never a mix.
    """

    def __init__(self, path: Union[str, Path], state: Optional[PersistedState] = None):
        self.path = Path(path)
        self._state = state if state is not None else PersistedState()

    @property
    def state(self) -> PersistedState:
        return self._state

    def load(self) -> PersistedState:
        """
        Load state from disk.

        A missing file leaves the defaults in place. An unreadable file is
        logged and also leaves the defaults in place.
        """
        if not self.path.is_file():
            logger.info(f"No state file at {self.path}, starting empty")
            return self._state

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top-level JSON value is not an object")
        except (OSError, ValueError) as e:
            error = PersistenceError(str(self.path), e)
            logger.error(f"Failed to load persisted state: {error}")
            return self._state

        self._state = PersistedState.from_dict(data)
        logger.info(
            f"Loaded state from {self.path}: "
            f"{self._state.last_version or '-'} #{self._state.last_build or '-'}, "
            f"{len(self._state.last_builds_data)} history entries"
        )
        return self._state

    def save(self) -> None:
        """
        Write the full state to disk, pretty-printed.

        Raises:
            PersistenceError: If the file can't be written
        """
        try:
            if self.path.parent and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._state.to_dict(), f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(str(self.path), e) from e
        logger.info(f"Saved state to {self.path}")

    def record_build(self, record: BuildRecord) -> PersistedState:
        """Make `record` the latest build and push it onto the history."""
        history = [record] + list(self._state.last_builds_data)
        self._state = PersistedState(
            last_version=record.version,
            last_build=record.build,
            last_builds_data=history[:HISTORY_LIMIT],
        )
        return self._state
