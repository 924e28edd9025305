"""Expansion of raw name expressions into atomic symbol names."""

import re

from ..models.analysis_models import DEFAULT_NAME, WILDCARD_NAME, ImportKind

_IDENT = r"[_$a-zA-Z0-9]+"
_GROUP_RE = re.compile(rf"\*|\{{[^}}]*\}}|{_IDENT}")
_IDENT_RE = re.compile(rf"^{_IDENT}$")
_TYPE_QUALIFIER_RE = re.compile(r"^type\s+(?=\S)")
_RENAME_RE = re.compile(rf"^({_IDENT})\s*(?:\s+as\s+|:)\s*({_IDENT})$")


def _expand_group(group: str, kind: str) -> list[str]:
    """Names of a brace list like `{ a, type b, c as d, e: f }`."""
    names = []
    for entry in group[1:-1].split(","):
        entry = " ".join(entry.split())
        if not entry:
            continue
        entry = _TYPE_QUALIFIER_RE.sub("", entry)

        rename = _RENAME_RE.match(entry)
        if rename:
            # Imports name the source binding, exports the visible one
            names.append(rename.group(1) if kind == ImportKind.IMPORT else rename.group(2))
        elif _IDENT_RE.match(entry):
            names.append(entry)
    return names


def expand_names(expression: str, kind: str) -> list[str]:
    """Break a name expression into atomic symbol names.

    Args:
        expression: Raw expression such as `*`, `React`, `{a, b as c}` or
            `React, { useState }`
        kind: ImportKind.IMPORT or ImportKind.EXPORT

    Returns:
        Symbol names; a bare identifier imports the default binding
    """
    names = []
    for match in _GROUP_RE.finditer(expression):
        token = match.group(0)
        if token == WILDCARD_NAME:
            names.append(WILDCARD_NAME)
        elif token.startswith("{"):
            names.extend(_expand_group(token, kind))
        elif kind == ImportKind.IMPORT:
            names.append(DEFAULT_NAME)
        else:
            names.append(token)
    return names
