"""Dataclass models for analysis server MCP tool output schemas."""

from dataclasses import dataclass, field

# Standard cursor pagination fields for all paginated responses:
# - total: int - Total number of items across all pages
# - page_size: int | None - Number of items in current page
# - next_cursor: str | None - Cursor for next page (None if no more pages)
# - has_more: bool | None - Whether there are more pages


@dataclass
class AnalysisError:
    """Standard error information for analysis operations."""

    code: str  # "NOT_FOUND", "INVALID_INPUT", "OPERATION_FAILED"
    message: str
    file: str | None = None


@dataclass
class UnusedExportsItem:
    """Unused exports of one file."""

    file: str  # Path relative to the project root
    absolute_path: str
    is_completely_unused: bool
    not_used_exports: list[str]


@dataclass
class CircularImportItem:
    """Circular import chain anchored at one file."""

    file: str
    absolute_path: str
    circular_imports: list[str]  # Remainder of the cycle, relative paths


@dataclass
class OverviewInfo:
    """Serializable summary of the last analysis run."""

    project_root: str
    is_refreshing: bool
    processed_files: int
    files_having_imports_or_exports: int
    total_imports: int
    total_exports: int
    not_used_exports: int
    found_circular_imports: int
    total_elapsed_time_ms: float
    last_run: str | None
    glob_include: dict[str, int] = field(default_factory=dict)
    glob_exclude: list[str] = field(default_factory=list)
    num_default_exclude: int = 0
    warnings: list[str] = field(default_factory=list)
    info: str | None = None


@dataclass
class FindUnusedExportsResponse:
    """Response schema for find_unused_exports tool."""

    files: list[UnusedExportsItem]
    total_not_used_exports: int
    overview: OverviewInfo | None
    errors: list[AnalysisError]
    success: bool = True
    # Standard pagination fields
    total: int = 0
    page_size: int | None = None
    next_cursor: str | None = None
    has_more: bool | None = None


@dataclass
class FindCircularImportsResponse:
    """Response schema for find_circular_imports tool."""

    cycles: list[CircularImportItem]
    detection_enabled: bool
    overview: OverviewInfo | None
    errors: list[AnalysisError]
    success: bool = True
    # Standard pagination fields
    total: int = 0
    page_size: int | None = None
    next_cursor: str | None = None
    has_more: bool | None = None


@dataclass
class RefreshAnalysisResponse:
    """Response schema for refresh_analysis and get_analysis_overview tools."""

    started: bool
    overview: OverviewInfo | None
    errors: list[AnalysisError]
    success: bool = True
