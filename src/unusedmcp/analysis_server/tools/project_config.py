"""
Configuration discovery for one project root.

Reads tsconfig.json (or jsconfig.json), package.json, .findUnusedExports.json
and the .vscode/find-unused-exports.json ignore list, and folds them into the
ProjectConfig consumed by the analysis core. Nothing here raises for malformed
input: problems become warnings on the OverviewContext.
"""

import logging
import os
from typing import Any

from ..models.analysis_models import OverviewContext, ProjectConfig
from .fs_utilities import canonical_path, is_dir, is_file, read_json_file

logger = logging.getLogger(__name__)

NO_PACKAGE_JSON_INFO = "No package.json found in workspace"

DEFAULT_EXCLUDE = [
    "node_modules/**/*",
    "bower_components/**/*",
    "jspm_packages/**/*",
]

IGNORE_LIST_FILE = ".vscode/find-unused-exports.json"


def _read_json(path: str, overview: OverviewContext) -> dict[str, Any] | None:
    """Read a JSON config file, recording a warning if it cannot be parsed."""
    if not is_file(path):
        return None

    try:
        data = read_json_file(path)
    except (OSError, ValueError) as e:
        message = f"Error parsing {path}: {e}"
        logger.warning(message)
        overview.add_error(message)
        return None

    if not isinstance(data, dict):
        message = f"Error parsing {path}: expected a JSON object"
        logger.warning(message)
        overview.add_error(message)
        return None

    return data


def _string_list(value: Any, label: str, overview: OverviewContext) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return value
    message = f"Ignoring malformed {label}: expected a list of strings"
    logger.warning(message)
    overview.add_error(message)
    return None


def _mix(*lists: list[str] | None) -> list[str] | None:
    """Concatenate the given lists, or None when none of them is present."""
    present = [lst for lst in lists if lst is not None]
    if not present:
        return None
    return [item for lst in present for item in lst]


def _glob_dir(base_dir: str, entry: str) -> str:
    """Turn an entry that names an existing directory into a recursive glob."""
    if is_dir(canonical_path(base_dir, entry)):
        return f"{entry.rstrip('/')}/**/*"
    return entry


def _rebase(prefix: str, pattern: str) -> str:
    if not prefix or prefix == ".":
        return pattern
    return f"{prefix}/{pattern.removeprefix('./')}"


def _find_compiler_config(root: str, overview: OverviewContext) -> tuple[dict[str, Any] | None, str | None, bool]:
    """Locate tsconfig.json, falling back to jsconfig.json.

    Returns:
        Tuple of (config, config path, whether JS is forced on)
    """
    tsconfig_path = canonical_path(root, "tsconfig.json")
    tsconfig = _read_json(tsconfig_path, overview)
    if tsconfig is not None:
        return tsconfig, tsconfig_path, False

    jsconfig_path = canonical_path(root, "jsconfig.json")
    jsconfig = _read_json(jsconfig_path, overview)
    if jsconfig is not None:
        return jsconfig, jsconfig_path, True

    return None, None, False


def _reference_config_path(config_dir: str, reference: Any) -> str | None:
    if not isinstance(reference, dict) or not isinstance(reference.get("path"), str):
        return None
    target = canonical_path(config_dir, reference["path"])
    if is_dir(target):
        target = canonical_path(target, "tsconfig.json")
    return target


def _collect_references(
    root: str,
    config_path: str,
    config: dict[str, Any],
    overview: OverviewContext,
    visited: set[str],
) -> tuple[list[str], list[str]]:
    """Follow project references recursively, rebasing their globs onto root.

    Returns:
        Tuple of (include patterns, exclude patterns) contributed by references
    """
    include: list[str] = []
    exclude: list[str] = []
    references = config.get("references")
    if not isinstance(references, list):
        return include, exclude

    config_dir = os.path.dirname(config_path)
    for reference in references:
        ref_path = _reference_config_path(config_dir, reference)
        if ref_path is None or ref_path in visited:
            continue
        visited.add(ref_path)

        ref_config = _read_json(ref_path, overview)
        if ref_config is None:
            logger.debug("Referenced project config not found: %s", ref_path)
            continue

        ref_dir = os.path.dirname(ref_path)
        prefix = os.path.relpath(ref_dir, root).replace("\\", "/")
        ref_include = _string_list(ref_config.get("include"), f"include in {ref_path}", overview)
        ref_exclude = _string_list(ref_config.get("exclude"), f"exclude in {ref_path}", overview)
        if ref_include is None:
            ref_include = ["**/*"]
        include.extend(_rebase(prefix, _glob_dir(ref_dir, p)) for p in ref_include)
        exclude.extend(_rebase(prefix, _glob_dir(ref_dir, p)) for p in ref_exclude or [])

        nested_include, nested_exclude = _collect_references(root, ref_path, ref_config, overview, visited)
        include.extend(nested_include)
        exclude.extend(nested_exclude)

    return include, exclude


def _path_aliases(paths: Any, overview: OverviewContext) -> dict[str, list[str]]:
    if paths is None:
        return {}
    if not isinstance(paths, dict):
        message = "Ignoring malformed compilerOptions.paths: expected an object"
        logger.warning(message)
        overview.add_error(message)
        return {}

    aliases = {}
    for pattern, targets in paths.items():
        if isinstance(targets, list) and all(isinstance(t, str) for t in targets):
            aliases[pattern] = targets
        else:
            message = f"Ignoring malformed path alias '{pattern}': expected a list of strings"
            logger.warning(message)
            overview.add_error(message)
    return aliases


def _ignored_files(root: str, overview: OverviewContext) -> set[str]:
    data = _read_json(canonical_path(root, IGNORE_LIST_FILE), overview)
    if data is None:
        return set()
    ignore = data.get("ignore")
    files = ignore.get("files") if isinstance(ignore, dict) else None
    entries = _string_list(files, f"ignore.files in {IGNORE_LIST_FILE}", overview) or []
    return {canonical_path(root, entry) for entry in entries}


def load_project_config(project_root: str, overview: OverviewContext) -> ProjectConfig | None:
    """Build the ProjectConfig of a project root.

    Args:
        project_root: Directory of the project to analyze
        overview: Receives configuration warnings and info messages

    Returns:
        ProjectConfig, or None when the root has no package.json
    """
    root = canonical_path(project_root)

    package_json_path = canonical_path(root, "package.json")
    if not is_file(package_json_path):
        logger.info("%s: %s", NO_PACKAGE_JSON_INFO, root)
        overview.info = NO_PACKAGE_JSON_INFO
        return None

    package_json = _read_json(package_json_path, overview) or {}
    compiler_config, config_path, force_js = _find_compiler_config(root, overview)

    if compiler_config is None:
        compiler_config = {}
    compiler_options = compiler_config.get("compilerOptions")
    if not isinstance(compiler_options, dict):
        # Without compiler options a plain JS project is assumed
        compiler_options = {"allowJs": True}
    allow_js = True if force_js else bool(compiler_options.get("allowJs", False))

    config_dir = os.path.dirname(config_path) if config_path else root

    base_url = compiler_options.get("baseUrl")
    base_directory = canonical_path(config_dir, base_url) if isinstance(base_url, str) else None

    module_suffixes = _string_list(compiler_options.get("moduleSuffixes"), "compilerOptions.moduleSuffixes", overview)
    out_dir = compiler_options.get("outDir")

    # Custom include/exclude rules from package.json and .findUnusedExports.json
    package_rules = package_json.get("findUnusedExports")
    if not isinstance(package_rules, dict):
        package_rules = {}
    extra_rules = _read_json(canonical_path(root, ".findUnusedExports.json"), overview) or {}

    include = _mix(
        _string_list(compiler_config.get("include"), "include", overview),
        _string_list(package_rules.get("include"), "findUnusedExports.include", overview),
        _string_list(extra_rules.get("include"), "include in .findUnusedExports.json", overview),
    )
    exclude = _mix(
        _string_list(compiler_config.get("exclude"), "exclude", overview),
        _string_list(package_rules.get("exclude"), "findUnusedExports.exclude", overview),
        _string_list(extra_rules.get("exclude"), "exclude in .findUnusedExports.json", overview),
    )

    if include is not None:
        include = [_glob_dir(root, entry) for entry in include]

    num_default_exclude = 0
    if exclude is not None:
        exclude = [_glob_dir(root, entry) for entry in exclude]
    else:
        exclude = list(DEFAULT_EXCLUDE)
        num_default_exclude = len(DEFAULT_EXCLUDE)
    if isinstance(out_dir, str) and out_dir:
        exclude.append(f"{out_dir.rstrip('/')}/**/*")

    if config_path:
        ref_include, ref_exclude = _collect_references(root, config_path, compiler_config, overview, {config_path})
        # Without own includes the whole root is scanned, which already covers references
        if include is not None:
            include.extend(ref_include)
        exclude.extend(ref_exclude)

    main = package_json.get("main")
    files = _string_list(compiler_config.get("files"), "files", overview)

    config = ProjectConfig(
        project_root=root,
        include=include,
        exclude=exclude,
        files=files,
        path_aliases=_path_aliases(compiler_options.get("paths"), overview),
        alias_base_directory=base_directory or config_dir,
        base_directory=base_directory,
        module_suffixes=module_suffixes or [""],
        allow_js=allow_js,
        main_entry_file=canonical_path(root, main) if isinstance(main, str) and main else None,
        ignored_files=_ignored_files(root, overview),
        num_default_exclude=num_default_exclude,
    )

    overview.glob_exclude = list(exclude)
    overview.num_default_exclude = num_default_exclude
    logger.debug(
        "Project config for %s: allow_js=%s include=%s exclude=%s aliases=%d",
        root,
        allow_js,
        include,
        exclude,
        len(config.path_aliases),
    )
    return config
