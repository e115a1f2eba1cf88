"""
Autosave heartbeat for a live match.

The loop is handed its session and store explicitly; there is no global
"current match". Each tick captures a snapshot (in memory, under the
session lock) and only then writes it, outside any lock, so a slow disk
never holds up clock or event commands.
"""
import logging
import threading
from typing import Optional

from ..models import MatchSnapshot
from ..utils import AUTOSAVE_INTERVAL_SECONDS
from .match_session import MatchSession
from .persistence_service import MatchStore

logger = logging.getLogger(__name__)


class AutosaveLoop:
    """Periodically persist a session's snapshot while it changes."""

    def __init__(
        self,
        session: MatchSession,
        store: MatchStore,
        interval_seconds: float = AUTOSAVE_INTERVAL_SECONDS,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.session = session
        self.store = store
        self.interval_seconds = interval_seconds
        self.last_saved_digest: Optional[str] = None
        self.last_error: Optional[str] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def tick(self) -> bool:
        """
        Save the current snapshot if it differs from the last saved one.

        Returns:
            True if a write happened and succeeded
        """
        snapshot: MatchSnapshot = self.session.snapshot()
        digest = snapshot.digest()
        if digest == self.last_saved_digest:
            return False

        try:
            ok = self.store.save(snapshot)
        except Exception as exc:
            # Keep the heartbeat alive; the failure is reported through last_error
            logger.exception("Autosave of match %s raised", snapshot.match_id)
            self.last_error = str(exc)
            return False

        if not ok:
            self.last_error = f"Store refused snapshot for match {snapshot.match_id}"
            logger.warning(self.last_error)
            return False

        self.last_saved_digest = digest
        self.last_error = None
        return True

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name=f"autosave-{self.session.match_id}", daemon=True
        )
        self._thread.start()

    def stop(self, *, final_save: bool = True, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        if final_save:
            self.tick()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        logger.debug("Autosave started for match %s", self.session.match_id)
        while not self._stop.wait(self.interval_seconds):
            self.tick()
            if self.session.is_completed:
                break
        logger.debug("Autosave stopped for match %s", self.session.match_id)
