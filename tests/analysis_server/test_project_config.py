"""Tests for project configuration discovery."""

import json

from unusedmcp.analysis_server.models import OverviewContext
from unusedmcp.analysis_server.tools.fs_utilities import canonical_path
from unusedmcp.analysis_server.tools.project_config import (
    DEFAULT_EXCLUDE,
    NO_PACKAGE_JSON_INFO,
    load_project_config,
)


def _write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


def _load(root):
    overview = OverviewContext(path_to_project=str(root))
    return load_project_config(str(root), overview), overview


class TestLoadProjectConfig:
    """Test cases for load_project_config."""

    def test_missing_package_json(self, tmp_path):
        """Test that a root without package.json is not analyzed."""
        (tmp_path / "tsconfig.json").write_text("{}")

        config, overview = _load(tmp_path)

        assert config is None
        assert overview.info == NO_PACKAGE_JSON_INFO

    def test_defaults_without_compiler_config(self, tmp_path):
        """Test a plain JS project without tsconfig or jsconfig."""
        _write_json(tmp_path / "package.json", {"name": "demo"})

        config, overview = _load(tmp_path)

        assert config.allow_js is True
        assert config.include is None
        assert config.exclude == DEFAULT_EXCLUDE
        assert config.num_default_exclude == 3
        assert config.module_suffixes == [""]
        assert config.main_entry_file is None
        assert overview.glob_exclude == DEFAULT_EXCLUDE
        assert overview.errors == []

    def test_tsconfig_with_comments_and_trailing_commas(self, tmp_path):
        """Test tsconfig parsing, base url and path aliases."""
        _write_json(tmp_path / "package.json", {"name": "demo"})
        (tmp_path / "tsconfig.json").write_text(
            """{
              // project settings
              "compilerOptions": {
                "baseUrl": "./src", /* resolved against the config */
                "paths": {"@/*": ["*"], "@docs": ["http://example.com//docs"],},
                "moduleSuffixes": [".ios", ""],
              },
            }"""
        )

        config, overview = _load(tmp_path)

        src = canonical_path(str(tmp_path), "src")
        assert overview.errors == []
        assert config.allow_js is False
        assert config.base_directory == src
        assert config.alias_base_directory == src
        assert config.path_aliases == {"@/*": ["*"], "@docs": ["http://example.com//docs"]}
        assert config.module_suffixes == [".ios", ""]

    def test_jsconfig_forces_allow_js(self, tmp_path):
        """Test that jsconfig.json always allows JS sources."""
        _write_json(tmp_path / "package.json", {"name": "demo"})
        _write_json(tmp_path / "jsconfig.json", {"compilerOptions": {"allowJs": False}})

        config, _ = _load(tmp_path)

        assert config.allow_js is True

    def test_malformed_tsconfig_is_a_warning(self, tmp_path):
        """Test that a broken tsconfig is reported and defaults are used."""
        _write_json(tmp_path / "package.json", {"name": "demo"})
        (tmp_path / "tsconfig.json").write_text("{ not json")

        config, overview = _load(tmp_path)

        assert config is not None
        assert config.allow_js is True
        assert len(overview.errors) == 1
        assert overview.errors[0].startswith("Error parsing")

    def test_malformed_paths_ignored(self, tmp_path):
        """Test that a non-object alias table is a warning."""
        _write_json(tmp_path / "package.json", {"name": "demo"})
        _write_json(tmp_path / "tsconfig.json", {"compilerOptions": {"paths": ["oops"]}})

        config, overview = _load(tmp_path)

        assert config.path_aliases == {}
        assert any("compilerOptions.paths" in e for e in overview.errors)

    def test_include_exclude_merging(self, tmp_path):
        """Test tsconfig, package.json and .findUnusedExports.json rules together."""
        (tmp_path / "src").mkdir()
        (tmp_path / "legacy").mkdir()
        _write_json(
            tmp_path / "package.json",
            {"name": "demo", "main": "src/index.ts", "findUnusedExports": {"include": ["scripts/*.ts"]}},
        )
        _write_json(
            tmp_path / "tsconfig.json",
            {"compilerOptions": {"outDir": "dist"}, "include": ["src"], "files": ["setup.ts"]},
        )
        _write_json(tmp_path / ".findUnusedExports.json", {"exclude": ["legacy"]})

        config, overview = _load(tmp_path)

        assert config.include == ["src/**/*", "scripts/*.ts"]
        assert config.exclude == ["legacy/**/*", "dist/**/*"]
        assert config.num_default_exclude == 0
        assert config.files == ["setup.ts"]
        assert config.main_entry_file == canonical_path(str(tmp_path), "src/index.ts")
        assert overview.glob_exclude == ["legacy/**/*", "dist/**/*"]

    def test_default_exclude_plus_out_dir(self, tmp_path):
        """Test that outDir is added to the default excludes."""
        _write_json(tmp_path / "package.json", {"name": "demo"})
        _write_json(tmp_path / "tsconfig.json", {"compilerOptions": {"outDir": "build/"}})

        config, _ = _load(tmp_path)

        assert config.exclude == DEFAULT_EXCLUDE + ["build/**/*"]
        assert config.num_default_exclude == 3

    def test_references_followed_without_looping(self, tmp_path):
        """Test recursive, cycle-safe project references."""
        (tmp_path / "src").mkdir()
        _write_json(tmp_path / "package.json", {"name": "demo"})
        _write_json(
            tmp_path / "tsconfig.json",
            {"include": ["src"], "references": [{"path": "./packages/a"}]},
        )
        _write_json(
            tmp_path / "packages/a/tsconfig.json",
            {"include": ["lib/**/*"], "references": [{"path": "../b"}]},
        )
        _write_json(
            tmp_path / "packages/b/tsconfig.json",
            {"include": ["lib/**/*"], "exclude": ["lib/**/*.test.ts"], "references": [{"path": "../a"}]},
        )

        config, _ = _load(tmp_path)

        assert config.include == ["src/**/*", "packages/a/lib/**/*", "packages/b/lib/**/*"]
        assert "packages/b/lib/**/*.test.ts" in config.exclude

    def test_missing_reference_is_skipped(self, tmp_path):
        """Test that a reference to a missing project is ignored."""
        _write_json(tmp_path / "package.json", {"name": "demo"})
        _write_json(tmp_path / "tsconfig.json", {"include": ["src/**/*"], "references": [{"path": "./nowhere"}]})

        config, overview = _load(tmp_path)

        assert config.include == ["src/**/*"]
        assert overview.errors == []

    def test_ignored_files(self, tmp_path):
        """Test the .vscode ignore list."""
        _write_json(tmp_path / "package.json", {"name": "demo"})
        _write_json(tmp_path / ".vscode/find-unused-exports.json", {"ignore": {"files": ["src/legacy.ts"]}})

        config, _ = _load(tmp_path)

        assert config.ignored_files == {canonical_path(str(tmp_path), "src/legacy.ts")}
