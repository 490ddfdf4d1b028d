#!/usr/bin/env python3
"""Lodgify MCP Server - Module Entry Point.

Allows running the server as: python -m lodgify_mcp
"""

import argparse
import asyncio

from lodgify_mcp import __version__


def main() -> None:
    """Main entry point for the Lodgify MCP server."""
    parser = argparse.ArgumentParser(
        description="Lodgify MCP Server",
        prog="lodgify-mcp",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information",
    )

    args = parser.parse_args()

    if args.version:
        print(f"Lodgify MCP Server v{__version__}")
        return

    from lodgify_mcp.main import main as server_main

    asyncio.run(server_main())


if __name__ == "__main__":
    main()
