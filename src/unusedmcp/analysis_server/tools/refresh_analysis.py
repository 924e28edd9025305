"""Refresh and overview tools, plus helpers shared by the analysis tools."""

import logging
import os

from .._security import get_project_root, validate_project_root
from ..config import AnalysisSettings
from ..models.response_models import AnalysisError, OverviewInfo, RefreshAnalysisResponse
from .analysis_session import AnalysisSession, SessionRegistry

logger = logging.getLogger(__name__)


def resolve_session(
    registry: SessionRegistry, project_root: str | None
) -> tuple[AnalysisSession | None, AnalysisError | None]:
    """Look up the session of a validated project root."""
    root = get_project_root(project_root)
    validation = validate_project_root(root)
    if not validation["valid"]:
        return None, AnalysisError(code="NOT_FOUND", message=validation["error"])
    return registry.get(str(validation["abs_path"])), None


def relative_path(session: AnalysisSession, path: str) -> str:
    return os.path.relpath(path, session.project_root).replace("\\", "/")


def ensure_current(session: AnalysisSession, settings: AnalysisSettings, refresh: bool) -> None:
    """Run the analysis when asked to, when it never ran, or when the settings changed."""
    if refresh or not session.has_run or session.last_settings != settings:
        if not session.refresh(settings):
            logger.info("Analysis of %s is already running, serving cached results", session.project_root)


def overview_info(session: AnalysisSession) -> OverviewInfo:
    """Serializable snapshot of a session's overview counters."""
    overview = session.overview
    return OverviewInfo(
        project_root=overview.path_to_project,
        is_refreshing=session.is_refreshing(),
        processed_files=overview.processed_files,
        files_having_imports_or_exports=overview.files_having_imports_or_exports,
        total_imports=overview.total_imports,
        total_exports=overview.total_exports,
        not_used_exports=overview.not_used_exports,
        found_circular_imports=overview.found_circular_imports,
        total_elapsed_time_ms=round(overview.total_elapsed_time_ms, 1),
        last_run=overview.last_run.isoformat() if overview.last_run else None,
        glob_include=dict(overview.count_glob_include),
        glob_exclude=list(overview.glob_exclude),
        num_default_exclude=overview.num_default_exclude,
        warnings=list(overview.errors),
        info=overview.info,
    )


async def refresh_analysis_impl(registry: SessionRegistry, project_root: str | None = None) -> RefreshAnalysisResponse:
    """Recompute the analysis of a project.

    Args:
        registry: Session registry of the server
        project_root: Project directory (defaults to MCP_FILE_ROOT)

    Returns:
        RefreshAnalysisResponse telling whether this call ran the analysis
    """
    session, error = resolve_session(registry, project_root)
    if error:
        return RefreshAnalysisResponse(started=False, overview=None, errors=[error], success=False)

    try:
        started = await session.refresh_async()
    except Exception as e:
        return RefreshAnalysisResponse(
            started=False,
            overview=overview_info(session),
            errors=[AnalysisError(code="OPERATION_FAILED", message=f"Failed to refresh analysis: {str(e)}")],
            success=False,
        )

    return RefreshAnalysisResponse(started=started, overview=overview_info(session), errors=[])


def get_analysis_overview_impl(registry: SessionRegistry, project_root: str | None = None) -> RefreshAnalysisResponse:
    """Report the counters of the last analysis without running a new one."""
    session, error = resolve_session(registry, project_root)
    if error:
        return RefreshAnalysisResponse(started=False, overview=None, errors=[error], success=False)

    return RefreshAnalysisResponse(started=False, overview=overview_info(session), errors=[])
