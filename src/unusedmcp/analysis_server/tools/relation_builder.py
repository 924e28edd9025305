"""
Relation building: from scanned files to per-file usage aggregates.

Imports and exports are expanded into atomic names and resolved to file
identities. An export is used when some import names it exactly from its
file, or imports `*` from its file. Exports of the package's main file (when
configured) and of ignored files are left out of the not-used lists without
counting as used.
"""

import logging

from ..models.analysis_models import (
    WILDCARD_NAME,
    AnalysisResult,
    AtomicExport,
    AtomicImport,
    FileRelation,
    ImportKind,
    ParsedFile,
)
from .module_resolver import ModuleResolver
from .name_expander import expand_names

logger = logging.getLogger(__name__)


def collect_imports(parsed_files: list[ParsedFile], resolver: ModuleResolver) -> list[AtomicImport]:
    """Expand and resolve every raw import; unresolved targets are dropped."""
    imports = []
    for parsed in parsed_files:
        for raw in parsed.imports:
            target = resolver.resolve(parsed.path, raw.from_path)
            if target is None:
                continue
            for name in expand_names(raw.name_expression, ImportKind.IMPORT):
                imports.append(AtomicImport(in_file=parsed.path, symbol_name=name, from_file=target))
    return imports


def _own_export_names(parsed: ParsedFile) -> list[str]:
    """Export names of a file, leaving out its own `export *` forwards."""
    names = []
    for raw in parsed.exports:
        if raw.name_expression == WILDCARD_NAME:
            continue
        names.extend(n for n in expand_names(raw.name_expression, ImportKind.EXPORT) if n != WILDCARD_NAME)
    return names


def collect_exports(
    parsed_files: list[ParsedFile],
    resolver: ModuleResolver,
    imports: list[AtomicImport],
) -> list[AtomicExport]:
    """Expand and resolve every raw export and decide whether it is used.

    `export * from "./x"` is replaced by the names x exports itself, one
    level deep. When x cannot be resolved the `*` name is kept.
    """
    used_names = {(imp.from_file, imp.symbol_name) for imp in imports}
    wildcard_targets = {imp.from_file for imp in imports if imp.symbol_name == WILDCARD_NAME}
    by_path = {parsed.path: parsed for parsed in parsed_files}

    exports = []
    for parsed in parsed_files:
        for raw in parsed.exports:
            from_file = resolver.resolve(parsed.path, raw.from_path) if raw.from_path else None
            names = expand_names(raw.name_expression, ImportKind.EXPORT)

            if names == [WILDCARD_NAME] and from_file in by_path:
                forwarded = _own_export_names(by_path[from_file])
                if forwarded:
                    names = forwarded

            for name in names:
                is_used = (parsed.path, name) in used_names or parsed.path in wildcard_targets
                exports.append(
                    AtomicExport(in_file=parsed.path, symbol_name=name, from_file=from_file, is_used=is_used)
                )
    return exports


def build_relations(
    imports: list[AtomicImport],
    exports: list[AtomicExport],
    main_file: str | None = None,
    ignored_files: set[str] | None = None,
    consider_main_exports_used: bool = False,
) -> list[FileRelation]:
    """Aggregate atomic imports and exports per file.

    Args:
        imports: Resolved atomic imports
        exports: Resolved atomic exports with usage computed
        main_file: Canonical path of the package's main entry file
        ignored_files: Files whose exports are never reported
        consider_main_exports_used: Whether main file exports are never reported

    Returns:
        One FileRelation per file, in order of first appearance
    """
    ignored_files = ignored_files or set()
    relations: dict[str, FileRelation] = {}

    def entry(path: str) -> FileRelation:
        if path not in relations:
            relations[path] = FileRelation(file=path)
        return relations[path]

    for imp in imports:
        entry(imp.in_file).imports.setdefault(imp.from_file, []).append(imp.symbol_name)

    for exp in exports:
        relation = entry(exp.in_file)
        if exp.is_used:
            relation.exports_used.append(exp.symbol_name)
            continue

        if consider_main_exports_used and exp.in_file == main_file:
            logger.debug("Considering export %r of main file %s as used", exp.symbol_name, exp.in_file)
            continue

        if exp.in_file in ignored_files:
            logger.debug("Considering export %r of ignored file %s as used", exp.symbol_name, exp.in_file)
            continue

        # The same file matched by several globs yields the same export twice
        if exp.symbol_name not in relation.exports_not_used:
            relation.exports_not_used.append(exp.symbol_name)

    return list(relations.values())


def get_not_used(relations: list[FileRelation]) -> list[AnalysisResult]:
    """Unused-export results for every file with at least one unused export."""
    results = []
    for relation in relations:
        if not relation.exports_not_used:
            continue
        results.append(
            AnalysisResult(
                file=relation.file,
                is_completely_unused=not relation.has_used_exports(),
                not_used_exports=sorted(relation.exports_not_used),
            )
        )
    return results
