"""UnusedMCP - unused export and circular import analysis for TypeScript/JavaScript projects."""

__version__ = "0.1.0"
