"""
State Store - Per-repository amend bookkeeping.

Stored as JSON in ~/.vercommit/state.json:
{
    "repositories": {
        "/path/to/repo": {
            "lastCommitType": "PATCH",
            "lastCommitAt": "2024-05-01T10:00:00+02:00",
            "amendDate": "2024-05-01",
            "amendCount": 2
        }
    }
}

Writes replace the file atomically. Concurrent processes are not coordinated;
the last write wins.
"""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from vercommit.convention import AmendContext

logger = logging.getLogger(__name__)

DEFAULT_STATE_DIR = Path.home() / ".vercommit"
STATE_FILENAME = "state.json"


class StateError(Exception):
    """Raised when the state file cannot be written."""
    pass


def _now() -> datetime:
    return datetime.now().astimezone()


def _local_date(moment: datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date().isoformat()


class StateStore:
    """Tracks the last commit and today's amend count for each repository."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else DEFAULT_STATE_DIR / STATE_FILENAME

    def load(self) -> dict:
        """Read state, falling back to an empty state if missing or corrupt."""
        if not self.path.exists():
            return {"repositories": {}}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not read state %s: %s", self.path, e)
            return {"repositories": {}}
        if not isinstance(data, dict) or not isinstance(data.get("repositories"), dict):
            logger.warning("Ignoring malformed state file %s", self.path)
            return {"repositories": {}}
        return data

    def save(self, state: dict) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(state, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError as e:
            raise StateError(f"Could not write state {self.path}: {e}")

    def get(self, repo: str) -> Optional[dict]:
        return self.load()["repositories"].get(repo)

    def record_commit(self, repo: str, type_name: str, when: Optional[datetime] = None) -> dict:
        """Remember a fresh commit. Today's amend count is kept."""
        when = when or _now()
        state = self.load()
        entry = state["repositories"].setdefault(repo, {})
        entry["lastCommitType"] = type_name
        entry["lastCommitAt"] = when.isoformat()
        self.save(state)
        logger.debug("Recorded %s commit for %s", type_name, repo)
        return entry

    def record_amend(self, repo: str, type_name: str, when: Optional[datetime] = None) -> dict:
        """Count one amend. The count restarts on a new local day."""
        when = when or _now()
        today = _local_date(when)
        state = self.load()
        entry = state["repositories"].setdefault(repo, {})
        if entry.get("amendDate") == today:
            entry["amendCount"] = int(entry.get("amendCount", 0)) + 1
        else:
            entry["amendDate"] = today
            entry["amendCount"] = 1
        entry["lastCommitType"] = type_name
        entry["lastCommitAt"] = when.isoformat()
        self.save(state)
        logger.debug("Recorded amend #%d for %s", entry["amendCount"], repo)
        return entry

    def amend_count_today(self, repo: str, now: Optional[datetime] = None) -> int:
        entry = self.get(repo) or {}
        if entry.get("amendDate") != _local_date(now or _now()):
            return 0
        return int(entry.get("amendCount", 0))

    def amend_context(
        self,
        repo: str,
        proposed_type: str,
        now: Optional[datetime] = None,
        previous_type: Optional[str] = None,
        previous_timestamp: Optional[datetime] = None,
    ) -> Optional[AmendContext]:
        """Build the AmendContext for the policy check.

        previous_type / previous_timestamp override what the store remembers,
        e.g. when the caller read them from git. Returns None when the
        time of the previous commit is unknown.
        """
        entry = self.get(repo) or {}
        previous_type = previous_type or entry.get("lastCommitType") or ""
        if previous_timestamp is None and entry.get("lastCommitAt"):
            try:
                previous_timestamp = datetime.fromisoformat(entry["lastCommitAt"])
            except ValueError:
                logger.warning("Ignoring malformed lastCommitAt for %s", repo)
        if previous_timestamp is None:
            return None

        return AmendContext(
            previous_type=previous_type,
            previous_timestamp=previous_timestamp,
            amend_count_today=self.amend_count_today(repo, now),
            proposed_type=proposed_type,
            now=now,
        )

    def reset(self, repo: str) -> None:
        state = self.load()
        if state["repositories"].pop(repo, None) is not None:
            self.save(state)
