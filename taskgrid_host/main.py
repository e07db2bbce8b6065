# taskgrid_host/main.py
import logging
import sys
from typing import Optional

from fastmcp import FastMCP
from pydantic import ValidationError

from taskgrid.config import Settings
from taskgrid.di import build_container
from taskgrid.logging import configure_logging
from taskgrid_host.tools.assistant import register_assistant_tools
from taskgrid_host.tools.context import register_context_tools
from taskgrid_host.tools.files import register_file_tools
from taskgrid_host.tools.system import register_system_tools

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastMCP:
    """
    Build DI container, create FastMCP host, and register tools.
    Keep the server (protocol) separate from tool/service logic.
    """
    container = build_container(settings)

    mcp = FastMCP(container.settings.SERVER_NAME, version="0.1.0")

    # Register tools (thin adapters)
    register_file_tools(mcp, container.fs_service)
    register_system_tools(mcp, container.fs_service)
    register_context_tools(mcp, container.context_service)
    register_assistant_tools(mcp, container.assistant_service)

    return mcp


def main() -> int:
    try:
        settings = Settings()
        configure_logging(settings.LOG_LEVEL)
        app = create_app(settings)
    except (ValidationError, OSError) as exc:
        # Startup failures are reported as an exit code, not raised
        configure_logging()
        logger.error("startup_failed %s: %s", type(exc).__name__, exc)
        return 1
    # stdio transport: the desktop shell launches this process and speaks JSON-RPC on stdin/stdout
    app.run(transport="stdio")
    return 0


if __name__ == "__main__":
    sys.exit(main())
