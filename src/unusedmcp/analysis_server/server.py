"""Analysis MCP Server - Unused exports and circular imports of JS/TS projects."""

import logging

from fastmcp import FastMCP

from .config import get_settings
from .tools import register_analysis_tools

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

# Initialize the Analysis MCP server
mcp = FastMCP(
    name="Unused Exports Analysis Server",
    version=__version__,
    instructions="""
        Analysis server finds dead exports and import cycles in JavaScript/TypeScript projects:

        Core Tools:
        - find_unused_exports: Exports that no other file imports
        - find_circular_imports: Import cycles between files with used exports
        - refresh_analysis: Recompute the analysis after files changed
        - get_analysis_overview: Counters and configuration warnings of the last run

        Project configuration is read from tsconfig.json/jsconfig.json and package.json
        (a project without package.json is not analyzed).

        Best Practices:
        - Call refresh_analysis (or pass refresh=true) after editing files
        - Check get_analysis_overview warnings when results look incomplete
    """,
)

# Register all analysis tools
registry = register_analysis_tools(mcp)


def main():
    """Entry point for the analysis server."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    settings = get_settings()
    logging.getLogger().setLevel(getattr(logging, settings.log_level))

    logger.info(
        "Starting analysis server: detect_circular_imports=%s consider_main_exports_used=%s",
        settings.detect_circular_imports,
        settings.consider_main_exports_used,
    )
    mcp.run()


if __name__ == "__main__":
    main()
