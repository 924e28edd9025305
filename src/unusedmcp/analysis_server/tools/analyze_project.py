"""One full analysis run over a project root."""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from functools import partial

from ..config import AnalysisSettings
from ..models.analysis_models import AnalysisResult, OverviewContext, ParsedFile
from .circular_imports import detect_circular_imports
from .fs_utilities import canonical_path
from .lexical_scanner import scan_file
from .module_resolver import ModuleResolver
from .project_config import load_project_config
from .relation_builder import build_relations, collect_exports, collect_imports, get_not_used
from .source_discovery import get_source_files

logger = logging.getLogger(__name__)


class _StageTimer:
    """Logs how long each pipeline stage took."""

    def __init__(self):
        self.started = time.perf_counter()
        self.last = self.started

    def lap(self, label: str, value: int | None = None) -> None:
        now = time.perf_counter()
        elapsed_ms = (now - self.last) * 1000
        self.last = now
        if value is None:
            logger.debug("%s took %.1fms", label, elapsed_ms)
        else:
            logger.debug("%s: %d (%.1fms)", label, value, elapsed_ms)

    def total_ms(self) -> float:
        return (time.perf_counter() - self.started) * 1000


def scan_files(paths: list[str], settings: AnalysisSettings) -> list[ParsedFile]:
    """Read and scan files in parallel, dropping the unreadable ones."""
    scan = partial(scan_file, show_ignored_exports=settings.show_ignored_exports)
    with ThreadPoolExecutor(max_workers=settings.max_workers) as executor:
        parsed = list(executor.map(scan, paths))
    return [p for p in parsed if p is not None]


def run_analysis(
    project_root: str,
    settings: AnalysisSettings,
    overview: OverviewContext | None = None,
) -> tuple[list[AnalysisResult], OverviewContext]:
    """Analyze a project for unused exports and circular imports.

    Args:
        project_root: Directory of the project
        settings: Analysis toggles
        overview: Counters to refresh; a new one is created when omitted

    Returns:
        Tuple of (results sorted by file path, refreshed overview)
    """
    root = canonical_path(project_root)
    if overview is None:
        overview = OverviewContext(path_to_project=root)
    overview.reset_counters()
    overview.path_to_project = root
    overview.workspace_name = os.path.basename(root)

    timer = _StageTimer()
    logger.info("Analyzing project %s", root)

    config = load_project_config(root, overview)
    if config is None:
        overview.last_run = datetime.now()
        overview.total_elapsed_time_ms = timer.total_ms()
        return [], overview

    source_files = get_source_files(config, overview)
    timer.lap("Finding the sources")

    parsed_files = scan_files(source_files, settings)
    timer.lap("Parsing the files")
    timer.lap("Processed files", len(parsed_files))

    useful_files = [p for p in parsed_files if p.has_declarations()]
    timer.lap("Files having imports|exports", len(useful_files))

    resolver = ModuleResolver(config, known_files={p.path for p in parsed_files})
    imports = collect_imports(useful_files, resolver)
    timer.lap("Total imports", len(imports))
    exports = collect_exports(useful_files, resolver, imports)
    timer.lap("Total exports", len(exports))

    relations = build_relations(
        imports,
        exports,
        main_file=config.main_entry_file,
        ignored_files=config.ignored_files,
        consider_main_exports_used=settings.consider_main_exports_used,
    )
    timer.lap("Analysed files", len(relations))

    results = get_not_used(relations)
    not_used_count = sum(len(r.not_used_exports) for r in results)
    timer.lap("Not used exports", not_used_count)

    results, cycle_count = detect_circular_imports(relations, results, settings.detect_circular_imports)
    timer.lap("Found circular imports", cycle_count)
    results.sort(key=lambda r: r.file)

    overview.processed_files = len(parsed_files)
    overview.files_having_imports_or_exports = len(useful_files)
    overview.total_imports = len(imports)
    overview.total_exports = len(exports)
    overview.not_used_exports = not_used_count
    overview.found_circular_imports = cycle_count
    overview.total_elapsed_time_ms = timer.total_ms()
    overview.last_run = datetime.now()

    logger.info(
        "Analysis of %s done in %.0fms: %d files, %d imports, %d exports, %d not used, %d circular imports",
        root,
        overview.total_elapsed_time_ms,
        overview.processed_files,
        overview.total_imports,
        overview.total_exports,
        overview.not_used_exports,
        overview.found_circular_imports,
    )
    return results, overview
