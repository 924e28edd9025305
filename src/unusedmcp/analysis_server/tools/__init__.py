"""Analysis server tools implementations."""

from ..models.response_models import (
    FindCircularImportsResponse,
    FindUnusedExportsResponse,
    RefreshAnalysisResponse,
)
from .analysis_session import SessionRegistry
from .find_circular_imports import find_circular_imports_impl
from .find_unused_exports import find_unused_exports_impl
from .refresh_analysis import get_analysis_overview_impl, refresh_analysis_impl


def register_analysis_tools(mcp, registry: SessionRegistry | None = None) -> SessionRegistry:
    """Register unused exports analysis tools with the MCP server."""
    registry = registry or SessionRegistry()

    @mcp.tool
    def find_unused_exports(
        project_root: str | None = None,
        refresh: bool = False,
        cursor: str | None = None,
        max_tokens: int = 20000,
        consider_main_exports_used: bool | None = None,
        show_ignored_exports: bool | None = None,
    ) -> FindUnusedExportsResponse:
        """
        Find exported symbols of a JavaScript/TypeScript project that no other file imports.

        Use this tool when:
        - Looking for dead code before a cleanup or release
        - Checking whether an export can be removed safely
        - Finding files whose exports are all unused

        The first call analyzes the project; later calls serve the cached
        analysis unless refresh is set.

        Args:
            project_root: Project directory containing package.json (defaults to MCP_FILE_ROOT)
            refresh: Recompute the analysis instead of using the cached one
            cursor: Cursor for pagination (None for first page)
            max_tokens: Maximum tokens per page (default: 20000)
            consider_main_exports_used: Never report exports of the package.json "main" file
            show_ignored_exports: Report exports hidden by ignore-next-line-exports comments

        Example:
            find_unused_exports()
            → FindUnusedExportsResponse with files like
              {"file": "src/utils.ts", "not_used_exports": ["formatDate"], "is_completely_unused": false}
        """
        return find_unused_exports_impl(
            registry,
            project_root=project_root,
            refresh=refresh,
            cursor=cursor,
            max_tokens=max_tokens,
            consider_main_exports_used=consider_main_exports_used,
            show_ignored_exports=show_ignored_exports,
        )

    @mcp.tool
    def find_circular_imports(
        project_root: str | None = None,
        refresh: bool = False,
        cursor: str | None = None,
        max_tokens: int = 20000,
    ) -> FindCircularImportsResponse:
        """
        Find circular imports between files of a JavaScript/TypeScript project.

        Use this tool when:
        - Untangling module dependencies
        - Investigating initialization order bugs caused by import cycles

        Only files exporting something that is really used take part; each
        cycle is reported once, on the file where it was discovered.

        Args:
            project_root: Project directory containing package.json (defaults to MCP_FILE_ROOT)
            refresh: Recompute the analysis instead of using the cached one
            cursor: Cursor for pagination (None for first page)
            max_tokens: Maximum tokens per page (default: 20000)

        Example:
            find_circular_imports()
            → FindCircularImportsResponse with cycles like
              {"file": "src/a.ts", "circular_imports": ["src/b.ts", "src/c.ts"]}
        """
        return find_circular_imports_impl(
            registry,
            project_root=project_root,
            refresh=refresh,
            cursor=cursor,
            max_tokens=max_tokens,
        )

    @mcp.tool
    async def refresh_analysis(project_root: str | None = None) -> RefreshAnalysisResponse:
        """
        Recompute the unused exports analysis of a project.

        A refresh requested while another one is running for the same project
        is skipped and reported with started=false.

        Args:
            project_root: Project directory containing package.json (defaults to MCP_FILE_ROOT)
        """
        return await refresh_analysis_impl(registry, project_root=project_root)

    @mcp.tool
    def get_analysis_overview(project_root: str | None = None) -> RefreshAnalysisResponse:
        """
        Get the counters of the last analysis: processed files, imports, exports,
        unused exports, circular imports, elapsed time and configuration warnings.

        Args:
            project_root: Project directory containing package.json (defaults to MCP_FILE_ROOT)
        """
        return get_analysis_overview_impl(registry, project_root=project_root)

    return registry
