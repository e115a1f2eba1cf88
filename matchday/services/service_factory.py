"""
Service Factory for wiring match sessions to their collaborators.

Sessions never find their store or autosave loop through module globals;
everything they work with is handed to them here.
"""
from typing import Dict, Optional

from ..errors import NotFound
from ..models import MatchMetadata
from ..utils import AUTOSAVE_INTERVAL_SECONDS, DEFAULT_PLANNED_DURATION_MIN
from .autosave import AutosaveLoop
from .match_session import MatchSession
from .persistence_service import InMemoryMatchStore, JsonFileMatchStore, MatchStore
from .report_service import ExportServiceInterface, MatchReportExporter, ReportService


class ServiceFactory:
    """Factory for creating sessions, stores and loops with their dependencies injected."""

    def __init__(self, data_dir: Optional[str] = None):
        """
        Initialize factory.

        Args:
            data_dir: Directory for JSON match files; None keeps matches in memory
        """
        self.data_dir = data_dir
        self._store: Optional[MatchStore] = None
        self._export_service: Optional[ExportServiceInterface] = None

    def create_session(
        self,
        metadata: MatchMetadata,
        planned_duration_minutes: int = DEFAULT_PLANNED_DURATION_MIN,
    ) -> MatchSession:
        return MatchSession(metadata, planned_duration_minutes)

    def restore_session(self, match_id: str) -> MatchSession:
        """
        Rebuild a session from its last stored snapshot.

        Raises:
            NotFound: If the store has no record of the match
        """
        snapshot = self.get_store().load(match_id)
        if snapshot is None:
            raise NotFound("Match", match_id)
        return MatchSession.from_snapshot(snapshot)

    def create_autosave(
        self,
        session: MatchSession,
        interval_seconds: float = AUTOSAVE_INTERVAL_SECONDS,
    ) -> AutosaveLoop:
        return AutosaveLoop(session, self.get_store(), interval_seconds)

    def create_report_service(self, player_names: Optional[Dict[str, str]] = None) -> ReportService:
        return ReportService(player_names, self._get_export_service())

    def get_store(self) -> MatchStore:
        """Get singleton store."""
        if self._store is None:
            if self.data_dir:
                self._store = JsonFileMatchStore(self.data_dir)
            else:
                self._store = InMemoryMatchStore()
        return self._store

    def _get_export_service(self) -> ExportServiceInterface:
        """Get singleton export service."""
        if self._export_service is None:
            self._export_service = MatchReportExporter()
        return self._export_service

    def configure_custom_store(self, store: MatchStore) -> None:
        self._store = store

    def configure_custom_export_service(self, exporter: ExportServiceInterface) -> None:
        self._export_service = exporter
