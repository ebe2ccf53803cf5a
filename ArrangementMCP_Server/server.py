# server.py - ArrangementMCP
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from mcp.server.fastmcp import FastMCP

from ArrangementMCP_Server.config import get_settings
from ArrangementMCP_Server.connections.ableton import (
    close_ableton_connection,
    get_ableton_connection,
)
from ArrangementMCP_Server.tools import transform

# Configure logging
logging.basicConfig(level=getattr(logging, get_settings().log_level, logging.INFO),
                    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("ArrangementMCP")


@asynccontextmanager
async def server_lifespan(server: FastMCP) -> AsyncIterator[Dict[str, Any]]:
    """Manage server startup and shutdown lifecycle"""
    try:
        logger.info("ArrangementMCP server starting up")
        try:
            get_ableton_connection()
            logger.info("Successfully connected to Ableton on startup")
        except ConnectionError as e:
            logger.warning("Could not connect to Ableton on startup: %s", e)
            logger.warning("Make sure the ArrangementMCP Remote Script is running")
        yield {}
    finally:
        close_ableton_connection()
        logger.info("ArrangementMCP server shut down")


# Create the MCP server with lifespan support
mcp = FastMCP(
    "ArrangementMCP",
    lifespan=server_lifespan
)

transform.register_tools(mcp)


def main():
    """Run the MCP server"""
    mcp.run()


if __name__ == "__main__":
    main()
