"""Source file enumeration for one project."""

import logging
import os
import re
from functools import lru_cache

from ..models.analysis_models import OverviewContext, ProjectConfig
from .fs_utilities import canonical_path, is_file

logger = logging.getLogger(__name__)

TYPED_EXTENSIONS = (".ts", ".tsx")
UNTYPED_EXTENSIONS = (".js", ".jsx")
DECLARATION_SUFFIX = ".d.ts"

ALL_FILES_PATTERN = "**/*"


def expand_brace_patterns(pattern: str) -> list[str]:
    """Expand brace patterns like {js,jsx,ts,tsx} into multiple patterns.

    Examples:
        "src/**/*.{js,jsx}" -> ["src/**/*.js", "src/**/*.jsx"]
        "src/{components,utils}/**/*.ts" -> ["src/components/**/*.ts", "src/utils/**/*.ts"]
        "src/**/*.ts" -> ["src/**/*.ts"]
    """
    if not pattern:
        return []

    if "{" not in pattern or "}" not in pattern or pattern.count("{") != pattern.count("}"):
        # No braces or malformed braces: literal pattern
        return [pattern]

    brace_pattern = re.compile(r"\{([^{}]+)\}")

    def expand_single_brace(text: str) -> list[str]:
        match = brace_pattern.search(text)
        if not match:
            return [text]

        options = [opt.strip() for opt in match.group(1).split(",")]
        options = [opt for opt in options if opt]
        if not options:
            return [text]

        results = []
        for option in options:
            expanded = text[: match.start()] + option + text[match.end() :]
            results.extend(expand_single_brace(expanded))
        return results

    return expand_single_brace(pattern)


@lru_cache(maxsize=512)
def compile_glob(pattern: str) -> re.Pattern:
    """Translate a glob over project-relative posix paths into a regex.

    `**/` matches zero or more directories, `*` and `?` never cross a `/`.
    """
    regex = []
    i = 0
    n = len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            regex.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            regex.append(".*")
            i += 2
        elif pattern[i] == "*":
            regex.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            regex.append("[^/]")
            i += 1
        elif pattern[i] == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                regex.append(re.escape(pattern[i]))
                i += 1
            else:
                body = pattern[i + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                regex.append(f"[{body}]")
                i = end + 1
        else:
            regex.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(regex) + r"\Z")


def _normalize_pattern(root: str, pattern: str) -> str:
    """Make a pattern relative to the project root with posix separators."""
    pattern = pattern.replace("\\", "/")
    if os.path.isabs(pattern):
        prefix = root.rstrip("/") + "/"
        normalized = canonical_path(pattern)
        pattern = normalized[len(prefix) :] if normalized.startswith(prefix) else normalized
    while pattern.startswith("./"):
        pattern = pattern[2:]
    return pattern


def _directory_prefix(pattern: str) -> str | None:
    """Directory part of an exclude pattern that covers a whole subtree."""
    for suffix in ("/**/*", "/**"):
        if pattern.endswith(suffix):
            return pattern[: -len(suffix)]
    return None


def _has_source_extension(rel_path: str, allow_js: bool) -> bool:
    if rel_path.endswith(DECLARATION_SUFFIX):
        return False
    extensions = TYPED_EXTENSIONS + UNTYPED_EXTENSIONS if allow_js else TYPED_EXTENSIONS
    return rel_path.endswith(extensions)


def _walk_candidates(root: str, exclude: list[str], allow_js: bool) -> list[str]:
    """List project-relative source paths that survive the exclude globs."""
    file_patterns = [compile_glob(p) for p in exclude]
    dir_patterns = [compile_glob(prefix) for p in exclude if (prefix := _directory_prefix(p)) is not None]

    candidates = []
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root).replace("\\", "/")
        rel_dir = "" if rel_dir == "." else rel_dir

        kept_dirs = []
        for name in sorted(dirnames):
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if any(p.match(rel) for p in dir_patterns):
                continue
            kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for name in sorted(filenames):
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if not _has_source_extension(rel, allow_js):
                continue
            if any(p.match(rel) for p in file_patterns):
                continue
            candidates.append(rel)

    return candidates


def get_source_files(config: ProjectConfig, overview: OverviewContext) -> list[str]:
    """Enumerate the source files of a project.

    Files listed explicitly are taken as-is, then every include glob
    contributes its matches. A file matched by several globs is listed once
    per glob.

    Args:
        config: Project configuration
        overview: Receives per-glob match counts

    Returns:
        Canonical absolute paths of the discovered source files
    """
    root = config.project_root
    exclude = [_normalize_pattern(root, p) for p in config.exclude or []]

    result = []
    for entry in config.files or []:
        path = canonical_path(root, entry)
        if is_file(path) and _has_source_extension(path, config.allow_js):
            result.append(path)

    if config.include is None and config.files:
        return result

    candidates = _walk_candidates(root, exclude, config.allow_js)
    includes = config.include if config.include is not None else [ALL_FILES_PATTERN]

    for include in includes:
        count = 0
        for expanded in expand_brace_patterns(_normalize_pattern(root, include)):
            regex = compile_glob(expanded)
            for rel in candidates:
                if regex.match(rel):
                    result.append(canonical_path(root, rel))
                    count += 1
        overview.add_glob_include(include, count)
        logger.debug("Include glob %s matched %d files", include, count)

    return result
