"""Per-project analysis sessions and their registry."""

import asyncio
import logging
import threading
from collections.abc import Callable

from ..config import AnalysisSettings
from ..models.analysis_models import AnalysisResult, OverviewContext
from .analyze_project import run_analysis
from .fs_utilities import canonical_path

logger = logging.getLogger(__name__)

Listener = Callable[["AnalysisSession"], None]


class AnalysisSession:
    """Owns the cached results, refresh flag and listeners of one project root.

    Only one refresh runs at a time. A refresh requested while another is in
    flight returns immediately; listeners of the running refresh are notified
    once its results are installed and the flag is cleared.
    """

    def __init__(self, project_root: str, settings: AnalysisSettings | None = None):
        self.project_root = canonical_path(project_root)
        self.settings = settings or AnalysisSettings()
        self._lock = threading.Lock()
        self._refreshing = False
        self._results: list[AnalysisResult] = []
        self._overview = OverviewContext(path_to_project=self.project_root)
        self._listeners: list[Listener] = []
        self._has_run = False
        self._last_settings: AnalysisSettings | None = None

    @property
    def overview(self) -> OverviewContext:
        return self._overview

    @property
    def has_run(self) -> bool:
        return self._has_run

    @property
    def last_settings(self) -> AnalysisSettings | None:
        """Settings of the last completed run."""
        return self._last_settings

    def is_refreshing(self) -> bool:
        return self._refreshing

    def register_listener(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unregister_listener(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def refresh(self, settings: AnalysisSettings | None = None) -> bool:
        """Recompute the analysis from scratch.

        Args:
            settings: Settings for this run; the session settings when omitted

        Returns:
            True if this call ran the analysis, False if another run was in flight
        """
        with self._lock:
            if self._refreshing:
                logger.debug("Refresh of %s already in progress, skipping", self.project_root)
                return False
            self._refreshing = True

        run_settings = settings or self.settings
        try:
            results, overview = run_analysis(
                self.project_root,
                run_settings,
                OverviewContext(path_to_project=self.project_root),
            )
        except Exception as e:
            logger.exception("Analysis of %s failed", self.project_root)
            with self._lock:
                self._overview.add_error(f"Analysis failed: {e}")
                self._refreshing = False
            raise

        with self._lock:
            self._results = results
            self._overview = overview
            self._has_run = True
            self._last_settings = run_settings
            self._refreshing = False
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(self)
            except Exception:
                logger.exception("Analysis listener failed for %s", self.project_root)
        return True

    async def refresh_async(self, settings: AnalysisSettings | None = None) -> bool:
        """Run refresh() in a worker thread."""
        return await asyncio.to_thread(self.refresh, settings)

    def ensure_analyzed(self, settings: AnalysisSettings | None = None) -> None:
        """Run a first analysis if this session has never completed one."""
        if not self._has_run:
            self.refresh(settings)

    def get_results(self) -> list[AnalysisResult]:
        return list(self._results)

    def get_unused_exports(self) -> list[AnalysisResult]:
        """All results with a non-empty not-used list."""
        return [r for r in self._results if r.not_used_exports]

    def get_circular_imports(self) -> list[AnalysisResult]:
        """All results with a non-empty cycle chain."""
        return [r for r in self._results if r.circular_import_chain]


class SessionRegistry:
    """Maps canonical project roots to their sessions."""

    def __init__(self, settings_factory: Callable[[], AnalysisSettings] | None = None):
        self._settings_factory = settings_factory or AnalysisSettings.from_environment
        self._sessions: dict[str, AnalysisSession] = {}
        self._lock = threading.Lock()

    def get(self, project_root: str) -> AnalysisSession:
        """Get the session of a project root, creating it on first use."""
        key = canonical_path(project_root)
        with self._lock:
            session = self._sessions.get(key)
            if session is None:
                session = AnalysisSession(key, self._settings_factory())
                self._sessions[key] = session
                logger.debug("Created analysis session for %s", key)
            return session

    def remove(self, project_root: str) -> bool:
        with self._lock:
            return self._sessions.pop(canonical_path(project_root), None) is not None

    def roots(self) -> list[str]:
        with self._lock:
            return sorted(self._sessions)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
