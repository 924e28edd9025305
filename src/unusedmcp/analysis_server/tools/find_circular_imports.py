"""Tool for listing circular import chains."""

import logging

from ...utils.pagination import paginate_response
from ..models.response_models import AnalysisError, CircularImportItem, FindCircularImportsResponse
from .analysis_session import SessionRegistry
from .refresh_analysis import ensure_current, overview_info, relative_path, resolve_session

logger = logging.getLogger(__name__)


def find_circular_imports_impl(
    registry: SessionRegistry,
    project_root: str | None = None,
    refresh: bool = False,
    cursor: str | None = None,
    max_tokens: int = 20000,
    detect_circular_imports: bool | None = True,
) -> FindCircularImportsResponse:
    """Find circular imports between files that export something in use.

    Args:
        registry: Session registry of the server
        project_root: Project directory (defaults to MCP_FILE_ROOT)
        refresh: Recompute instead of serving the cached analysis
        cursor: Cursor for pagination (None for first page)
        max_tokens: Maximum tokens per response
        detect_circular_imports: Override for cycle detection; None keeps the server setting

    Returns:
        FindCircularImportsResponse with one entry per cycle anchor file
    """
    if max_tokens <= 0:
        return FindCircularImportsResponse(
            cycles=[],
            detection_enabled=False,
            overview=None,
            errors=[AnalysisError(code="INVALID_INPUT", message=f"max_tokens must be positive, got: {max_tokens}")],
            success=False,
        )

    session, error = resolve_session(registry, project_root)
    if error:
        return FindCircularImportsResponse(
            cycles=[], detection_enabled=False, overview=None, errors=[error], success=False
        )

    try:
        settings = session.settings.with_overrides(detect_circular_imports=detect_circular_imports)
        ensure_current(session, settings, refresh)

        cycles = [
            CircularImportItem(
                file=relative_path(session, result.file),
                absolute_path=result.file,
                circular_imports=[relative_path(session, path) for path in result.circular_import_chain],
            )
            for result in session.get_circular_imports()
        ]
        response = FindCircularImportsResponse(
            cycles=cycles,
            detection_enabled=settings.detect_circular_imports,
            overview=overview_info(session),
            errors=[],
        )
        return paginate_response(
            response, "cycles", cursor_key=lambda item: item.file, cursor=cursor, max_tokens=max_tokens
        )

    except Exception as e:
        logger.exception("Failed to find circular imports in %s", session.project_root)
        return FindCircularImportsResponse(
            cycles=[],
            detection_enabled=False,
            overview=None,
            errors=[AnalysisError(code="OPERATION_FAILED", message=f"Failed to find circular imports: {str(e)}")],
            success=False,
        )
