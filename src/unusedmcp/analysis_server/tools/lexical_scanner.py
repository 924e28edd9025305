"""
Lexical scanner for import and export declarations.

The scanner works without a language parser. Source text is first cleaned by
a small state machine that drops comments and template literal bodies while
keeping quoted strings (their spans are remembered so that nothing matched
inside a string counts). Independent pattern classes then run over the
cleaned text, each producing raw declarations with the name expression
exactly as written.
"""

import bisect
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from ..models.analysis_models import WILDCARD_NAME, ParsedFile, RawExport, RawImport
from .fs_utilities import read_text

logger = logging.getLogger(__name__)

IGNORE_MARKER = "find-unused-exports:ignore-next-line-exports"

IDENT = r"[_$a-zA-Z0-9]+"
_NAMES = r"\{[^{}]*\}"
_STAR_AS = rf"\*\s*as\s+{IDENT}"
_BINDING = rf"(?:{_NAMES}|{_STAR_AS}|{IDENT})"
_FROM = r"""\s*from\s*(?P<quote>["'])(?P<path>[^"'\r\n]+)(?P=quote)"""
_START = r"(?<![\w$.])"

_IGNORE_MARKER_RE = re.compile(rf"//\s*{re.escape(IGNORE_MARKER)}\b")
_EXPORT_LINE_RE = re.compile(r"[ \t]*export\b")
_STAR_AS_RE = re.compile(_STAR_AS)

# Characters after which a `/` starts a regex literal rather than a division
_REGEX_PRECEDERS = set("(,=:[!&|?{};+-*%<>~^")
_REGEX_KEYWORDS = {
    "return", "typeof", "case", "do", "else", "in", "of", "new",
    "delete", "void", "throw", "instanceof", "yield", "await",
}
_TRAILING_WORD_RE = re.compile(r"([A-Za-z_$][\w$]*)\s*$")


@dataclass
class CleanedSource:
    """Source text with comments and template bodies removed."""

    text: str
    string_spans: list[tuple[int, int]] = field(default_factory=list)

    def in_string(self, offset: int) -> bool:
        """Whether an offset of the cleaned text lies inside a string literal."""
        index = bisect.bisect_right(self.string_spans, (offset, float("inf"))) - 1
        if index < 0:
            return False
        start, end = self.string_spans[index]
        return start <= offset < end


def _regex_allowed(out: list[str]) -> bool:
    tail = "".join(out[-16:]).rstrip()
    if not tail:
        return True
    if tail[-1] in _REGEX_PRECEDERS:
        return True
    word = _TRAILING_WORD_RE.search(tail)
    return bool(word and word.group(1) in _REGEX_KEYWORDS)


def _regex_literal_end(text: str, start: int) -> int | None:
    """End offset of a regex literal starting at `start`, or None if it is not one."""
    i = start + 1
    n = len(text)
    in_class = False
    while i < n:
        ch = text[i]
        if ch in "\r\n":
            return None
        if ch == "\\":
            i += 2
            continue
        if in_class:
            if ch == "]":
                in_class = False
        elif ch == "[":
            in_class = True
        elif ch == "/":
            i += 1
            while i < n and (text[i].isalnum() or text[i] in "_$"):
                i += 1
            return i
        i += 1
    return None


def clean_source(text: str, show_ignored_exports: bool = False) -> CleanedSource:
    """Remove comments and template literal bodies from source text.

    Quoted strings and regex literals are copied unchanged and their spans
    recorded. Unless `show_ignored_exports` is set, an ignore-marker comment
    also removes the export line that follows it.
    """
    out: list[str] = []
    length = 0
    spans: list[tuple[int, int]] = []
    i = 0
    n = len(text)

    def emit(chunk: str) -> None:
        nonlocal length
        out.append(chunk)
        length += len(chunk)

    while i < n:
        ch = text[i]

        if ch == "/" and i + 1 < n and text[i + 1] == "/":
            end = text.find("\n", i)
            end = n if end == -1 else end
            if not show_ignored_exports and _IGNORE_MARKER_RE.match(text, i):
                next_end = text.find("\n", end + 1)
                next_end = n if next_end == -1 else next_end
                if end < n and _EXPORT_LINE_RE.match(text, end + 1):
                    emit("\n")
                    end = next_end
            i = end
            continue

        if ch == "/" and i + 1 < n and text[i + 1] == "*":
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
            # Newlines survive so line-based patterns keep their anchors
            emit("\n" * text.count("\n", i, end) or " ")
            i = end
            continue

        if ch in "'\"":
            start = i
            i += 1
            while i < n:
                c = text[i]
                if c == "\\":
                    i += 2
                    continue
                if c == ch or c == "\n":
                    i += 1
                    break
                i += 1
            literal = text[start : min(i, n)]
            spans.append((length, length + len(literal)))
            emit(literal)
            continue

        if ch == "`":
            i += 1
            while i < n:
                c = text[i]
                if c == "\\":
                    i += 2
                    continue
                i += 1
                if c == "`":
                    break
            emit("``")
            continue

        if ch == "/" and _regex_allowed(out):
            end = _regex_literal_end(text, i)
            if end is not None:
                literal = text[i:end]
                spans.append((length, length + len(literal)))
                emit(literal)
                i = end
                continue

        emit(ch)
        i += 1

    return CleanedSource(text="".join(out), string_spans=spans)


def iter_matches(pattern: re.Pattern, source: CleanedSource) -> Iterator[re.Match]:
    """Yield matches of a pattern outside string literals.

    A match that does not advance is reported and skipped by one character so
    the loop always terminates.
    """
    text = source.text
    pos = 0
    while pos <= len(text):
        match = pattern.search(text, pos)
        if match is None:
            return
        if match.end() == match.start():
            logger.warning("Non-advancing match of /%s/ at offset %d", pattern.pattern, match.start())
            pos = match.start() + 1
            continue
        if source.in_string(match.start()):
            pos = match.start() + 1
            continue
        pos = match.end()
        yield match


# Pattern classes

_FROM_FORM_RE = re.compile(
    rf"{_START}(?P<kind>import|export)(?:\s+type\b)?\s*"
    rf"(?P<names>{_BINDING}(?:\s*,\s*{_BINDING})*){_FROM}"
)
_CALL_FORM_RE = re.compile(rf"""{_START}(?:import|require)\s*\(\s*(?P<quote>["'])(?P<path>[^"'\r\n]+)(?P=quote)\s*\)""")
_DEFAULT_EXPORT_RE = re.compile(rf"{_START}export\s+default\b")
_DECLARATION_EXPORT_RE = re.compile(
    rf"{_START}export\s+(?:declare\s+)?(?:abstract\s+)?(?:async\s+)?"
    rf"(?:(?:class|const\s+enum|const|let|var|enum|type|interface|namespace)\s+(?P<name>{IDENT})"
    rf"|function\s*\*?\s*(?P<function>{IDENT}))"
)
_DESTRUCTURED_EXPORT_RE = re.compile(
    rf"{_START}export\s+(?:declare\s+)?(?:const|let|var)\s*(?P<pattern>\{{[^{{}}]*\}}|\[[^\[\]]*\])\s*[=:;]"
)
_NAMED_LIST_EXPORT_RE = re.compile(rf"{_START}export(?:\s+type\b)?\s*(?P<names>{_NAMES})(?!\s*from\b)")
_AGGREGATED_EXPORT_RE = re.compile(rf"{_START}export(?:\s+type\b)?\s*\*{_FROM}")


def find_from_declarations(source: CleanedSource) -> Iterator[tuple[int, RawImport, RawExport | None]]:
    """`import <names> from "x"` and `export <names> from "x"`.

    A re-export is also an import of its source module, so both forms yield an
    import; re-exports additionally yield the export.
    """
    for match in iter_matches(_FROM_FORM_RE, source):
        names = match.group("names")
        path = match.group("path")
        imported = _STAR_AS_RE.sub(WILDCARD_NAME, names)
        raw_export = None
        if match.group("kind") == "export":
            exported = _STAR_AS_RE.sub(lambda m: m.group(0).split()[-1], names)
            raw_export = RawExport(name_expression=exported, from_path=path)
        yield match.start(), RawImport(name_expression=imported, from_path=path), raw_export


def find_call_imports(source: CleanedSource) -> Iterator[tuple[int, RawImport]]:
    """`import("x")` and `require("x")`, always a wildcard import."""
    for match in iter_matches(_CALL_FORM_RE, source):
        yield match.start(), RawImport(name_expression=WILDCARD_NAME, from_path=match.group("path"))


def find_declaration_exports(source: CleanedSource) -> Iterator[tuple[int, RawExport]]:
    """`export default`, `export class X`, `export function* x` and friends."""
    for match in iter_matches(_DEFAULT_EXPORT_RE, source):
        yield match.start(), RawExport(name_expression="default")
    for match in iter_matches(_DECLARATION_EXPORT_RE, source):
        name = match.group("name") or match.group("function")
        yield match.start(), RawExport(name_expression=name)


def _destructured_names(pattern: str) -> str:
    """Normalize a destructuring pattern into a brace list of bound names."""
    body = pattern[1:-1]
    entries = []
    for entry in body.split(","):
        entry = entry.split("=", 1)[0].strip()
        if entry.startswith("..."):
            entry = entry[3:].strip()
        if entry:
            entries.append(entry)
    return "{" + ", ".join(entries) + "}"


def find_destructured_exports(source: CleanedSource) -> Iterator[tuple[int, RawExport]]:
    """`export const {a, b: c} = obj` and `export const [a, b] = arr`."""
    for match in iter_matches(_DESTRUCTURED_EXPORT_RE, source):
        yield match.start(), RawExport(name_expression=_destructured_names(match.group("pattern")))


def find_named_list_exports(source: CleanedSource) -> Iterator[tuple[int, RawExport]]:
    """`export { a, b as c }` without a source module."""
    for match in iter_matches(_NAMED_LIST_EXPORT_RE, source):
        yield match.start(), RawExport(name_expression=match.group("names"))


def find_aggregated_exports(source: CleanedSource) -> Iterator[tuple[int, RawImport, RawExport]]:
    """`export * from "x"`: re-exports everything and uses everything of x."""
    for match in iter_matches(_AGGREGATED_EXPORT_RE, source):
        path = match.group("path")
        yield (
            match.start(),
            RawImport(name_expression=WILDCARD_NAME, from_path=path),
            RawExport(name_expression=WILDCARD_NAME, from_path=path),
        )


def scan_source(text: str, show_ignored_exports: bool = False) -> tuple[list[RawImport], list[RawExport]]:
    """Extract raw imports and exports from source text, in source order."""
    source = clean_source(text, show_ignored_exports)

    imports: list[tuple[int, RawImport]] = []
    exports: list[tuple[int, RawExport]] = []

    for pos, raw_import, raw_export in find_from_declarations(source):
        imports.append((pos, raw_import))
        if raw_export is not None:
            exports.append((pos, raw_export))
    for pos, raw_import, raw_export in find_aggregated_exports(source):
        imports.append((pos, raw_import))
        exports.append((pos, raw_export))
    imports.extend(find_call_imports(source))
    exports.extend(find_declaration_exports(source))
    exports.extend(find_destructured_exports(source))
    exports.extend(find_named_list_exports(source))

    imports.sort(key=lambda item: item[0])
    exports.sort(key=lambda item: item[0])
    return [item for _, item in imports], [item for _, item in exports]


def scan_file(path: str, show_ignored_exports: bool = False) -> ParsedFile | None:
    """Read and scan one source file, or None when it cannot be read."""
    text = read_text(path)
    if text is None:
        return None

    imports, exports = scan_source(text, show_ignored_exports)
    logger.debug("Scanned %s: %d imports, %d exports", path, len(imports), len(exports))
    return ParsedFile(path=path, imports=imports, exports=exports)
