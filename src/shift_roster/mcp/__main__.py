"""Allow running the MCP server as a module.

Usage:
    python -m shift_roster.mcp        # starts the MCP server in stdio mode
"""

from shift_roster.mcp.server import mcp

if __name__ == "__main__":
    mcp.run()
