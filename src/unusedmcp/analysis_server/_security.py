"""Project root validation for analysis operations."""

import os
from pathlib import Path
from typing import Any


def get_project_root(project_root: str | None = None) -> str:
    """Get project root from environment or default.

    Args:
        project_root: Provided project root, if None or "." will use environment

    Returns:
        Project root directory path from MCP_FILE_ROOT environment variable,
        or current directory as fallback
    """
    if project_root is None or project_root == ".":
        return os.getenv("MCP_FILE_ROOT", ".")
    return project_root


def validate_project_root(project_root: str) -> dict[str, Any]:
    """Validate that the project root is an existing directory.

    Args:
        project_root: Directory to analyze

    Returns:
        Dictionary with validation result and the resolved path or error message
    """
    try:
        path = Path(project_root).expanduser()
        abs_path = path.resolve()
    except (OSError, RuntimeError) as e:
        return {"valid": False, "error": f"Invalid project root: {str(e)}"}

    if not abs_path.exists():
        return {"valid": False, "error": f"Project root directory does not exist: {project_root}"}

    if not abs_path.is_dir():
        return {"valid": False, "error": f"Project root is not a directory: {project_root}"}

    return {"valid": True, "abs_path": abs_path}
