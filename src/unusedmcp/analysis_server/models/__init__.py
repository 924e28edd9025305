"""Analysis server models."""

from .analysis_models import (
    DEFAULT_NAME,
    WILDCARD_NAME,
    AnalysisResult,
    AtomicExport,
    AtomicImport,
    FileRelation,
    ImportKind,
    OverviewContext,
    ParsedFile,
    ProjectConfig,
    RawExport,
    RawImport,
)
from .response_models import (
    AnalysisError,
    CircularImportItem,
    FindCircularImportsResponse,
    FindUnusedExportsResponse,
    OverviewInfo,
    RefreshAnalysisResponse,
    UnusedExportsItem,
)

__all__ = [
    "DEFAULT_NAME",
    "WILDCARD_NAME",
    "ImportKind",
    # Pipeline records
    "RawImport",
    "RawExport",
    "ParsedFile",
    "AtomicImport",
    "AtomicExport",
    "FileRelation",
    "AnalysisResult",
    "ProjectConfig",
    "OverviewContext",
    # Tool responses
    "AnalysisError",
    "UnusedExportsItem",
    "CircularImportItem",
    "OverviewInfo",
    "FindUnusedExportsResponse",
    "FindCircularImportsResponse",
    "RefreshAnalysisResponse",
]
