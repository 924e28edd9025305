"""Tool for listing exports that no other file imports."""

import logging

from ...utils.pagination import paginate_response
from ..models.response_models import AnalysisError, FindUnusedExportsResponse, UnusedExportsItem
from .analysis_session import SessionRegistry
from .refresh_analysis import ensure_current, overview_info, relative_path, resolve_session

logger = logging.getLogger(__name__)


def find_unused_exports_impl(
    registry: SessionRegistry,
    project_root: str | None = None,
    refresh: bool = False,
    cursor: str | None = None,
    max_tokens: int = 20000,
    consider_main_exports_used: bool | None = None,
    show_ignored_exports: bool | None = None,
) -> FindUnusedExportsResponse:
    """Find unused exports of a project.

    Args:
        registry: Session registry of the server
        project_root: Project directory (defaults to MCP_FILE_ROOT)
        refresh: Recompute instead of serving the cached analysis
        cursor: Cursor for pagination (None for first page)
        max_tokens: Maximum tokens per response
        consider_main_exports_used: Override for the main-file policy
        show_ignored_exports: Override for the ignore-marker policy

    Returns:
        FindUnusedExportsResponse with one entry per file that has unused exports
    """
    if max_tokens <= 0:
        return FindUnusedExportsResponse(
            files=[],
            total_not_used_exports=0,
            overview=None,
            errors=[AnalysisError(code="INVALID_INPUT", message=f"max_tokens must be positive, got: {max_tokens}")],
            success=False,
        )

    session, error = resolve_session(registry, project_root)
    if error:
        return FindUnusedExportsResponse(files=[], total_not_used_exports=0, overview=None, errors=[error], success=False)

    try:
        # Cycle detection does not change unused exports, keep whatever ran last
        last = session.last_settings
        settings = session.settings.with_overrides(
            consider_main_exports_used=consider_main_exports_used,
            show_ignored_exports=show_ignored_exports,
            detect_circular_imports=last.detect_circular_imports if last else None,
        )
        ensure_current(session, settings, refresh)

        items = [
            UnusedExportsItem(
                file=relative_path(session, result.file),
                absolute_path=result.file,
                is_completely_unused=result.is_completely_unused,
                not_used_exports=list(result.not_used_exports),
            )
            for result in session.get_unused_exports()
        ]
        response = FindUnusedExportsResponse(
            files=items,
            total_not_used_exports=sum(len(item.not_used_exports) for item in items),
            overview=overview_info(session),
            errors=[],
        )
        return paginate_response(
            response, "files", cursor_key=lambda item: item.file, cursor=cursor, max_tokens=max_tokens
        )

    except Exception as e:
        logger.exception("Failed to find unused exports in %s", session.project_root)
        return FindUnusedExportsResponse(
            files=[],
            total_not_used_exports=0,
            overview=None,
            errors=[AnalysisError(code="OPERATION_FAILED", message=f"Failed to find unused exports: {str(e)}")],
            success=False,
        )
