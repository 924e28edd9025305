"""Tests for module specifier resolution."""

from unusedmcp.analysis_server.models import ProjectConfig
from unusedmcp.analysis_server.tools.fs_utilities import canonical_path
from unusedmcp.analysis_server.tools.module_resolver import ModuleResolver


def _write(root, rel_path, content="export const x = 1;\n"):
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return canonical_path(str(path))


def _resolver(root, files, **config_kwargs):
    config = ProjectConfig(project_root=canonical_path(str(root)), **config_kwargs)
    return ModuleResolver(config, known_files=set(files))


class TestModuleResolver:
    """Test cases for ModuleResolver."""

    def test_relative_with_extension_probe(self, tmp_path):
        """Test that ./b resolves to b.ts next to the importer."""
        a = _write(tmp_path, "src/a.ts")
        b = _write(tmp_path, "src/b.ts")

        assert _resolver(tmp_path, [a, b]).resolve(a, "./b") == b

    def test_exact_file(self, tmp_path):
        """Test a specifier that already names the file."""
        a = _write(tmp_path, "src/a.ts")
        b = _write(tmp_path, "src/b.tsx")

        assert _resolver(tmp_path, [a, b]).resolve(a, "./b.tsx") == b

    def test_directory_index(self, tmp_path):
        """Test that a directory resolves to its index file."""
        a = _write(tmp_path, "src/a.ts")
        index = _write(tmp_path, "src/lib/index.ts")

        assert _resolver(tmp_path, [a, index]).resolve(a, "./lib") == index

    def test_extension_order(self, tmp_path):
        """Test that .ts is preferred over .tsx."""
        a = _write(tmp_path, "a.ts")
        ts = _write(tmp_path, "button.ts")
        tsx = _write(tmp_path, "button.tsx")

        assert _resolver(tmp_path, [a, ts, tsx]).resolve(a, "./button") == ts

    def test_js_only_when_allowed(self, tmp_path):
        """Test that .js files are probed only when JS sources are allowed."""
        a = _write(tmp_path, "a.ts")
        c = _write(tmp_path, "c.js")

        assert _resolver(tmp_path, [a, c], allow_js=False).resolve(a, "./c") is None
        assert _resolver(tmp_path, [a, c], allow_js=True).resolve(a, "./c") == c

    def test_path_alias(self, tmp_path):
        """Test wildcard alias substitution."""
        a = _write(tmp_path, "src/features/a.ts")
        fmt = _write(tmp_path, "src/utils/format.ts")
        resolver = _resolver(
            tmp_path,
            [a, fmt],
            path_aliases={"@/*": ["src/*"]},
            alias_base_directory=canonical_path(str(tmp_path)),
        )

        assert resolver.resolve(a, "@/utils/format") == fmt

    def test_alias_tries_every_target(self, tmp_path):
        """Test that later alias targets are tried when earlier ones miss."""
        a = _write(tmp_path, "a.ts")
        shared = _write(tmp_path, "shared/api.ts")
        resolver = _resolver(
            tmp_path,
            [a, shared],
            path_aliases={"#api": ["missing/api", "shared/api"]},
            alias_base_directory=canonical_path(str(tmp_path)),
        )

        assert resolver.resolve(a, "#api") == shared

    def test_base_url(self, tmp_path):
        """Test resolution against the base directory."""
        a = _write(tmp_path, "other/a.ts")
        fmt = _write(tmp_path, "src/utils/format.ts")
        resolver = _resolver(tmp_path, [a, fmt], base_directory=canonical_path(str(tmp_path / "src")))

        assert resolver.resolve(a, "utils/format") == fmt

    def test_module_suffixes(self, tmp_path):
        """Test that module suffixes are tried in order."""
        a = _write(tmp_path, "a.ts")
        ios = _write(tmp_path, "button.ios.ts")
        plain = _write(tmp_path, "button.ts")

        resolver = _resolver(tmp_path, [a, ios, plain], module_suffixes=[".ios", ""])
        assert resolver.resolve(a, "./button") == ios

    def test_external_package_unresolved(self, tmp_path):
        """Test that package imports are not resolved."""
        a = _write(tmp_path, "a.ts")
        assert _resolver(tmp_path, [a]).resolve(a, "react") is None

    def test_undiscovered_target_dropped(self, tmp_path):
        """Test that files outside the discovered set do not count."""
        a = _write(tmp_path, "a.ts")
        _write(tmp_path, "excluded.ts")

        assert _resolver(tmp_path, [a]).resolve(a, "./excluded") is None

    def test_probe_cache(self, tmp_path):
        """Test that probe results, including misses, are memoized."""
        a = _write(tmp_path, "a.ts")
        resolver = _resolver(tmp_path, [a])
        candidate = canonical_path(str(tmp_path), "later")

        assert resolver.probe(candidate) is None
        _write(tmp_path, "later.ts")
        assert resolver.probe(candidate) is None
