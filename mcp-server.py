#!/usr/bin/env -S uv run
"""
Gemini CLI MCP Server.

Exposes gemini-cli as MCP tools (googleSearch, chat, listSessions,
analyzeFile, executeTask).

Setup:
    claude mcp add --transport stdio gemini-cli -- uv run "$REPO_ROOT/mcp-server.py"

    # Fall back to npx when gemini is not installed
    claude mcp add --transport stdio gemini-cli -- uv run "$REPO_ROOT/mcp-server.py" --allow-npx
"""

from __future__ import annotations

from gemini_cli_mcp.mcp.server import main

if __name__ == '__main__':
    main()
