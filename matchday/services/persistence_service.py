"""
Persistence service for the Matchday engine.

The engine never writes anything itself. A store takes finished
MatchSnapshot values and makes them durable; failures are reported back
as ``False`` from :meth:`save` so the caller can surface them and retry.
"""
import json
import logging
import os
import tempfile
from typing import Dict, List, Optional, Protocol

from ..errors import PreconditionViolation
from ..models import MatchSnapshot

logger = logging.getLogger(__name__)


class MatchStore(Protocol):
    """Interface for snapshot persistence - the engine depends only on this."""

    def load(self, match_id: str) -> Optional[MatchSnapshot]:
        """Return the stored snapshot, or None if there is none."""
        ...

    def save(self, snapshot: MatchSnapshot) -> bool:
        """Durably store the snapshot; True on success."""
        ...

    def delete(self, match_id: str) -> bool:
        ...

    def list_match_ids(self) -> List[str]:
        ...


class InMemoryMatchStore:
    """Dictionary-backed store holding serialized records (used by tests and the dev server)."""

    def __init__(self):
        self._records: Dict[str, dict] = {}

    def load(self, match_id: str) -> Optional[MatchSnapshot]:
        record = self._records.get(match_id)
        return MatchSnapshot.from_json(record) if record is not None else None

    def save(self, snapshot: MatchSnapshot) -> bool:
        self._records[snapshot.match_id] = snapshot.to_json()
        return True

    def delete(self, match_id: str) -> bool:
        return self._records.pop(match_id, None) is not None

    def list_match_ids(self) -> List[str]:
        return sorted(self._records)


class JsonFileMatchStore:
    """
    Store each match as ``<directory>/<match_id>.json``.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a crash mid-write leaves the previous save intact.
    """

    SUFFIX = ".json"

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, match_id: str) -> str:
        if not match_id or os.sep in match_id or (os.altsep and os.altsep in match_id) or match_id.startswith("."):
            raise PreconditionViolation(f"Invalid match id for file storage: {match_id!r}")
        return os.path.join(self.directory, match_id + self.SUFFIX)

    def load(self, match_id: str) -> Optional[MatchSnapshot]:
        """
        Load a match snapshot.

        Returns:
            The snapshot, or None if the match was never saved

        Raises:
            PreconditionViolation: If the file exists but is not a valid record
        """
        file_path = self._path(match_id)
        if not os.path.exists(file_path):
            return None

        with open(file_path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise PreconditionViolation(f"Corrupt match file {file_path}: {exc}") from exc

        return MatchSnapshot.from_json(data)

    def save(self, snapshot: MatchSnapshot) -> bool:
        """
        Save a snapshot, replacing any previous save of the same match.

        Returns:
            True when the file was written, False on any filesystem error
        """
        file_path = self._path(snapshot.match_id)
        record = snapshot.to_json()
        try:
            os.makedirs(self.directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=self.SUFFIX)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(record, f, indent=2)
                os.replace(tmp_path, file_path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError:
            logger.warning("Failed to save match %s to %s", snapshot.match_id, file_path, exc_info=True)
            return False

        logger.debug("Saved match %s (%d events)", snapshot.match_id, len(snapshot.events))
        return True

    def delete(self, match_id: str) -> bool:
        file_path = self._path(match_id)
        try:
            os.remove(file_path)
        except FileNotFoundError:
            return False
        return True

    def list_match_ids(self, limit: Optional[int] = None) -> List[str]:
        """
        Stored match ids, most recently saved first.

        Args:
            limit: Maximum number of ids to return
        """
        if not os.path.isdir(self.directory):
            return []

        saves = []
        for filename in os.listdir(self.directory):
            if filename.endswith(self.SUFFIX) and not filename.startswith("."):
                file_path = os.path.join(self.directory, filename)
                if os.path.isfile(file_path):
                    saves.append((filename[: -len(self.SUFFIX)], os.path.getmtime(file_path)))

        # Sort by modification time, newest first
        saves.sort(key=lambda x: x[1], reverse=True)
        ids = [match_id for match_id, _ in saves]
        return ids[:limit] if limit is not None else ids
