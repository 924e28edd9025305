"""End-to-end tests of the analysis pipeline on small projects."""

import json

from unusedmcp.analysis_server.config import AnalysisSettings
from unusedmcp.analysis_server.tools.analyze_project import run_analysis
from unusedmcp.analysis_server.tools.fs_utilities import canonical_path
from unusedmcp.analysis_server.tools.project_config import NO_PACKAGE_JSON_INFO

DEFAULT_TSCONFIG = {"include": ["src"]}


def _project(root, files, tsconfig=DEFAULT_TSCONFIG, package=None):
    """Write package.json, tsconfig.json and source files under root."""
    package = package if package is not None else {"name": "demo", "main": "src/index.ts"}
    (root / "package.json").write_text(json.dumps(package))
    if tsconfig is not None:
        (root / "tsconfig.json").write_text(json.dumps(tsconfig))
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


def _analyze(root, **settings):
    """Run the analysis and key the results by project-relative path."""
    results, overview = run_analysis(str(root), AnalysisSettings(**settings))
    prefix = canonical_path(str(root)) + "/"

    def rel(path):
        return path[len(prefix):]

    summary = {
        rel(r.file): {
            "unused": r.not_used_exports,
            "completely": r.is_completely_unused,
            "cycle": [rel(p) for p in r.circular_import_chain] if r.circular_import_chain else None,
        }
        for r in results
    }
    return summary, overview


class TestUnusedExports:
    """Unused export detection across files."""

    def test_basic_project(self, tmp_path):
        """Test used, unused and default exports."""
        _project(
            tmp_path,
            {
                "src/index.ts": 'import { used } from "./utils";\nexport const api = used();\n',
                "src/utils.ts": (
                    "export const used = () => 1;\n"
                    "export function unused() {}\n"
                    "export default class Thing {}\n"
                ),
            },
        )

        summary, overview = _analyze(tmp_path)

        assert summary == {
            "src/index.ts": {"unused": ["api"], "completely": True, "cycle": None},
            "src/utils.ts": {"unused": ["default", "unused"], "completely": False, "cycle": None},
        }
        assert overview.processed_files == 2
        assert overview.files_having_imports_or_exports == 2
        assert overview.total_imports == 1
        assert overview.total_exports == 4
        assert overview.not_used_exports == 3
        assert overview.found_circular_imports == 0
        assert overview.count_glob_include == {"src/**/*": 2}
        assert overview.last_run is not None

    def test_main_file_policy(self, tmp_path):
        """Test that the package main file is skipped only when enabled."""
        _project(tmp_path, {"src/index.ts": "export const api = 1;\n"})

        default, _ = _analyze(tmp_path)
        enabled, _ = _analyze(tmp_path, consider_main_exports_used=True)

        assert default == {"src/index.ts": {"unused": ["api"], "completely": True, "cycle": None}}
        assert enabled == {}

    def test_re_export_counts_as_use(self, tmp_path):
        """Test that a named re-export uses the export it forwards."""
        _project(
            tmp_path,
            {
                "src/helpers.ts": "export const helper = 1;\nexport const spare = 2;\n",
                "src/barrel.ts": 'export { helper } from "./helpers";\n',
                "src/app.ts": 'import { helper } from "./barrel";\nexport default helper;\n',
            },
        )

        summary, _ = _analyze(tmp_path)

        assert summary == {
            "src/app.ts": {"unused": ["default"], "completely": True, "cycle": None},
            "src/helpers.ts": {"unused": ["spare"], "completely": False, "cycle": None},
        }

    def test_wildcard_and_require(self, tmp_path):
        """Test that namespace imports and require() use every export."""
        _project(
            tmp_path,
            {
                "src/consumer.ts": 'import * as utils from "./utils";\nconst lib = require("./lib");\n',
                "src/utils.ts": "export const a = 1;\nexport const b = 2;\n",
                "src/lib.ts": "export function c() {}\n",
            },
        )

        summary, _ = _analyze(tmp_path)

        assert summary == {}

    def test_destructured_rename(self, tmp_path):
        """Test that destructured exports are named by their local binding."""
        _project(
            tmp_path,
            {
                "src/values.ts": "const obj = {a: 1, b: 2};\nexport const { a, b: renamed } = obj;\n",
                "src/consumer.ts": 'import { renamed } from "./values";\nconsole.log(renamed);\n',
            },
        )

        summary, _ = _analyze(tmp_path)

        assert summary == {"src/values.ts": {"unused": ["a"], "completely": False, "cycle": None}}

    def test_comments_and_strings_ignored(self, tmp_path):
        """Test that declarations inside comments and strings do not count."""
        _project(
            tmp_path,
            {
                "src/utils.ts": (
                    "// export const commented = 1;\n"
                    "/* export function blocked() {} */\n"
                    'const s = "export const inString = 1";\n'
                    "export const real = 1;\n"
                ),
            },
        )

        summary, _ = _analyze(tmp_path)

        assert summary == {"src/utils.ts": {"unused": ["real"], "completely": True, "cycle": None}}

    def test_ignore_marker(self, tmp_path):
        """Test that the ignore marker hides the next export line unless shown."""
        _project(
            tmp_path,
            {
                "src/utils.ts": (
                    "// find-unused-exports:ignore-next-line-exports\n"
                    "export const hidden = 1;\n"
                    "export const shown = 1;\n"
                ),
            },
        )

        hidden, _ = _analyze(tmp_path)
        shown, _ = _analyze(tmp_path, show_ignored_exports=True)

        assert hidden["src/utils.ts"]["unused"] == ["shown"]
        assert shown["src/utils.ts"]["unused"] == ["hidden", "shown"]

    def test_path_alias(self, tmp_path):
        """Test that imports through tsconfig paths resolve."""
        _project(
            tmp_path,
            {
                "src/features/page.ts": 'import { format } from "@/lib/format";\nformat();\n',
                "src/lib/format.ts": "export const format = () => '';\n",
            },
            tsconfig={"compilerOptions": {"baseUrl": ".", "paths": {"@/*": ["src/*"]}}, "include": ["src"]},
        )

        summary, _ = _analyze(tmp_path)

        assert summary == {}

    def test_js_project_without_tsconfig(self, tmp_path):
        """Test a JS project scanned from the root with node_modules excluded."""
        _project(
            tmp_path,
            {
                "index.js": 'import { helper } from "./lib";\n',
                "lib.js": "export const helper = 1;\nexport const extra = 2;\n",
                "node_modules/pkg/index.js": "export const ignored = 1;\n",
            },
            tsconfig=None,
            package={"name": "demo"},
        )

        summary, overview = _analyze(tmp_path)

        assert summary == {"lib.js": {"unused": ["extra"], "completely": False, "cycle": None}}
        assert overview.processed_files == 2
        assert overview.num_default_exclude == 3

    def test_no_package_json(self, tmp_path):
        """Test that a root without package.json yields nothing."""
        (tmp_path / "a.ts").write_text("export const a = 1;\n")

        summary, overview = _analyze(tmp_path)

        assert summary == {}
        assert overview.info == NO_PACKAGE_JSON_INFO
        assert overview.processed_files == 0
        assert overview.last_run is not None

    def test_idempotent(self, tmp_path):
        """Test that two runs over the same files agree."""
        _project(
            tmp_path,
            {
                "src/index.ts": 'import { used } from "./utils";\nexport const api = used();\n',
                "src/utils.ts": "export const used = 1;\nexport const unused = 2;\n",
            },
        )

        first, _ = _analyze(tmp_path, detect_circular_imports=True)
        second, _ = _analyze(tmp_path, detect_circular_imports=True)

        assert first == second


class TestCircularImports:
    """Circular import detection on real files."""

    def test_three_file_cycle(self, tmp_path):
        _project(
            tmp_path,
            {
                "src/a.ts": 'import { b } from "./b";\nexport const a = b;\n',
                "src/b.ts": 'import { c } from "./c";\nexport const b = c;\n',
                "src/c.ts": 'import { a } from "./a";\nexport const c = a;\n',
            },
        )

        summary, overview = _analyze(tmp_path, detect_circular_imports=True)

        assert summary == {"src/a.ts": {"unused": [], "completely": False, "cycle": ["src/b.ts", "src/c.ts"]}}
        assert overview.found_circular_imports == 1

    def test_disabled_by_default(self, tmp_path):
        _project(
            tmp_path,
            {
                "src/a.ts": 'import { b } from "./b";\nexport const a = b;\n',
                "src/b.ts": 'import { a } from "./a";\nexport const b = a;\n',
            },
        )

        summary, overview = _analyze(tmp_path)

        assert summary == {}
        assert overview.found_circular_imports == 0

    def test_cycle_through_unused_file_pruned(self, tmp_path):
        """Test that a file with no used exports breaks the cycle."""
        _project(
            tmp_path,
            {
                "src/a.ts": 'import { b } from "./b";\nexport const a = 1;\n',
                "src/b.ts": 'import { other } from "./a";\nexport const b = 2;\n',
            },
        )

        summary, overview = _analyze(tmp_path, detect_circular_imports=True)

        assert summary == {"src/a.ts": {"unused": ["a"], "completely": True, "cycle": None}}
        assert overview.found_circular_imports == 0

    def test_self_import(self, tmp_path):
        _project(tmp_path, {"src/a.ts": 'import { a } from "./a";\nexport const a = 1;\n'})

        summary, overview = _analyze(tmp_path, detect_circular_imports=True)

        assert summary == {}
        assert overview.found_circular_imports == 0

    def test_diamond(self, tmp_path):
        """Test that shared dependencies are not cycles."""
        _project(
            tmp_path,
            {
                "src/base.ts": "export const base = 1;\n",
                "src/left.ts": 'import { base } from "./base";\nexport const left = base;\n',
                "src/right.ts": 'import { base } from "./base";\nexport const right = base;\n',
                "src/top.ts": (
                    'import { left } from "./left";\n'
                    'import { right } from "./right";\n'
                    "export const top = left + right;\n"
                ),
            },
        )

        summary, overview = _analyze(tmp_path, detect_circular_imports=True)

        assert summary == {"src/top.ts": {"unused": ["top"], "completely": True, "cycle": None}}
        assert overview.found_circular_imports == 0
