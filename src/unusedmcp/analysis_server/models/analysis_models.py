"""
Core records of the unused exports analysis.

These dataclasses flow through the pipeline in this order:
RawImport/RawExport (scanner) -> AtomicImport/AtomicExport (expander + resolver)
-> FileRelation (relation builder) -> AnalysisResult (report + circular imports).
File identities are canonical absolute paths (see fs_utilities.canonical_path).
"""

from dataclasses import dataclass, field
from datetime import datetime


class ImportKind:
    """Constants for the direction of a name expression."""
    IMPORT = "import"
    EXPORT = "export"


DEFAULT_NAME = "default"
WILDCARD_NAME = "*"


@dataclass
class RawImport:
    """Import declaration as captured from the cleaned source text."""

    name_expression: str  # "{a, b as c}", "React", "*"
    from_path: str  # Module specifier as written


@dataclass
class RawExport:
    """Export declaration as captured from the cleaned source text."""

    name_expression: str
    from_path: str | None = None  # Only set for re-exports


@dataclass
class ParsedFile:
    """Scan output for one source file."""

    path: str
    imports: list[RawImport] = field(default_factory=list)
    exports: list[RawExport] = field(default_factory=list)

    def has_declarations(self) -> bool:
        return bool(self.imports or self.exports)


@dataclass(frozen=True)
class AtomicImport:
    """One resolved, expanded import edge."""

    in_file: str
    symbol_name: str  # identifier, "default" or "*"
    from_file: str


@dataclass
class AtomicExport:
    """One resolved, expanded export of a file."""

    in_file: str
    symbol_name: str
    from_file: str | None = None  # Set for re-exports
    is_used: bool = False


@dataclass
class FileRelation:
    """Per-file aggregate of imports (grouped by target) and exports."""

    file: str
    imports: dict[str, list[str]] = field(default_factory=dict)
    exports_used: list[str] = field(default_factory=list)
    exports_not_used: list[str] = field(default_factory=list)

    def has_used_exports(self) -> bool:
        return len(self.exports_used) > 0


@dataclass
class AnalysisResult:
    """Externally visible result for one file."""

    file: str
    is_completely_unused: bool = False
    not_used_exports: list[str] = field(default_factory=list)
    circular_import_chain: list[str] | None = None


@dataclass
class ProjectConfig:
    """Configuration consumed by the analysis core for one project root."""

    project_root: str
    include: list[str] | None = None  # Glob patterns relative to project_root
    exclude: list[str] | None = None
    files: list[str] | None = None
    path_aliases: dict[str, list[str]] = field(default_factory=dict)
    alias_base_directory: str | None = None
    base_directory: str | None = None
    module_suffixes: list[str] = field(default_factory=lambda: [""])
    allow_js: bool = True
    main_entry_file: str | None = None
    ignored_files: set[str] = field(default_factory=set)
    num_default_exclude: int = 0


@dataclass
class OverviewContext:
    """Summary counters of the last analysis run of a project."""

    path_to_project: str
    workspace_name: str = ""
    processed_files: int = 0
    files_having_imports_or_exports: int = 0
    total_imports: int = 0
    total_exports: int = 0
    not_used_exports: int = 0
    found_circular_imports: int = 0
    total_elapsed_time_ms: float = 0.0
    last_run: datetime | None = None
    glob_include: list[str] = field(default_factory=list)
    count_glob_include: dict[str, int] = field(default_factory=dict)
    glob_exclude: list[str] = field(default_factory=list)
    num_default_exclude: int = 0
    errors: list[str] = field(default_factory=list)
    info: str | None = None

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_glob_include(self, glob: str, count: int) -> None:
        if glob not in self.glob_include:
            self.glob_include.append(glob)
        self.count_glob_include[glob] = max(self.count_glob_include.get(glob, 0), count)

    def reset_counters(self) -> None:
        """Clear everything a run recomputes."""
        self.processed_files = 0
        self.files_having_imports_or_exports = 0
        self.total_imports = 0
        self.total_exports = 0
        self.not_used_exports = 0
        self.found_circular_imports = 0
        self.total_elapsed_time_ms = 0.0
        self.glob_include = []
        self.count_glob_include = {}
        self.glob_exclude = []
        self.num_default_exclude = 0
        self.errors = []
        self.info = None
