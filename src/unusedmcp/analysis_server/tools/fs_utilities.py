"""File-system helpers shared by the analysis pipeline."""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_DRIVE_LETTER = re.compile(r"^([A-Z]):")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


def canonical_path(*parts: str) -> str:
    """Return the canonical identity of a path.

    Joins and normalizes the parts into an absolute path, uses forward
    slashes as separators and lowercases a Windows drive letter so the same
    file always maps to the same string.
    """
    resolved = os.path.abspath(os.path.join(*parts))
    resolved = resolved.replace("\\", "/")
    return _DRIVE_LETTER.sub(lambda m: m.group(1).lower() + ":", resolved)


def is_file(path: str) -> bool:
    try:
        return os.path.isfile(path)
    except (OSError, ValueError):
        return False


def is_dir(path: str) -> bool:
    try:
        return os.path.isdir(path)
    except (OSError, ValueError):
        return False


def read_text(path: str) -> str | None:
    """Read a file as UTF-8, or None when it cannot be read."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Skipping unreadable file %s: %s", path, e)
        return None


def strip_json_comments(text: str) -> str:
    """Remove // and /* */ comments from JSON text, leaving string values intact."""
    out = []
    i = 0
    n = len(text)
    in_string = False

    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        else:
            out.append(ch)
            i += 1

    return "".join(out)


def _strip_trailing_commas(text: str) -> str:
    # Runs on comment-free text; a comma followed by a closing bracket inside
    # a string value is left alone by walking string spans.
    out = []
    last = 0
    for match in re.finditer(r'"(?:[^"\\]|\\.)*"', text):
        out.append(_TRAILING_COMMA.sub(r"\1", text[last : match.start()]))
        out.append(match.group(0))
        last = match.end()
    out.append(_TRAILING_COMMA.sub(r"\1", text[last:]))
    return "".join(out)


def parse_json_with_comments(text: str) -> Any:
    """Parse JSON that may contain comments and trailing commas.

    Raises:
        ValueError: If the text is not valid JSON after cleanup
    """
    cleaned = _strip_trailing_commas(strip_json_comments(text))
    if not cleaned.strip():
        return {}
    return json.loads(cleaned)


def read_json_file(path: str) -> Any:
    """Read and parse a JSON-with-comments file.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the content is not valid JSON
    """
    with open(path, encoding="utf-8") as f:
        return parse_json_with_comments(f.read())
