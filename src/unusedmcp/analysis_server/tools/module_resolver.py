"""Resolution of written module specifiers to project files."""

import logging
import os
import re

from cachetools import LRUCache

from ..models.analysis_models import ProjectConfig
from .fs_utilities import canonical_path, is_dir, is_file

logger = logging.getLogger(__name__)

TYPED_EXTENSIONS = [".ts", ".tsx"]
UNTYPED_EXTENSIONS = [".js", ".jsx"]

_MISS = ""


def _compile_alias(pattern: str) -> re.Pattern:
    return re.compile("^" + "(.*)".join(re.escape(part) for part in pattern.split("*")) + "$")


class ModuleResolver:
    """Resolves import specifiers the way a TypeScript module loader would.

    Strategies run in order and the first hit wins: path aliases, then the
    importer's directory, then the configured base directory. A hit that is
    not one of the discovered source files does not count.
    """

    def __init__(self, config: ProjectConfig, known_files: set[str], cache_size: int = 10000):
        self.config = config
        self.known_files = known_files
        self.extensions = TYPED_EXTENSIONS + UNTYPED_EXTENSIONS if config.allow_js else list(TYPED_EXTENSIONS)
        self.module_suffixes = config.module_suffixes or [""]
        self._aliases = [
            (_compile_alias(pattern), targets) for pattern, targets in config.path_aliases.items()
        ]
        self._probe_cache: LRUCache[str, str] = LRUCache(maxsize=cache_size)

    def resolve(self, importer: str, raw_path: str) -> str | None:
        """Resolve a module specifier written in `importer`.

        Args:
            importer: Canonical path of the importing file
            raw_path: Module specifier as written

        Returns:
            Canonical path of the target file, or None when unresolved
        """
        for candidate in self._candidates(importer, raw_path):
            found = self.probe(candidate)
            if found is not None and found in self.known_files:
                return found
        return None

    def _candidates(self, importer: str, raw_path: str):
        for regex, targets in self._aliases:
            match = regex.match(raw_path)
            if not match:
                continue
            captured = match.group(1) if regex.groups else ""
            base = self.config.alias_base_directory or self.config.project_root
            for target in targets:
                yield canonical_path(base, target.replace("*", captured, 1))

        yield canonical_path(os.path.dirname(importer), raw_path)

        if self.config.base_directory:
            yield canonical_path(self.config.base_directory, raw_path)

    def probe(self, candidate: str) -> str | None:
        """Find the file a candidate path denotes, trying extensions and index files."""
        cached = self._probe_cache.get(candidate)
        if cached is not None:
            return cached or None

        found = self._probe_uncached(candidate)
        self._probe_cache[candidate] = found if found is not None else _MISS
        return found

    def _probe_uncached(self, candidate: str) -> str | None:
        for suffix in self.module_suffixes:
            base = candidate + suffix
            if is_file(base):
                return base

            for ext in self.extensions:
                if is_file(base + ext):
                    return base + ext

            if is_dir(candidate):
                for ext in self.extensions:
                    index = f"{candidate}/index{suffix}{ext}"
                    if is_file(index):
                        return index

        return None
