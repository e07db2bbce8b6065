# taskgrid_host/tools/system.py
from pydantic import BaseModel, Field
from fastmcp import FastMCP

from taskgrid_host.tools.files import as_tool_result


class BackendReadyIn(BaseModel):
    pass


class InitSandboxIn(BaseModel):
    working_dir: str = Field(..., description="Existing working directory to create .taskgrid in")


def register_system_tools(mcp: FastMCP, fs_service):
    @mcp.tool(name="backend_ready", description="Liveness check for the UI; always true")
    def backend_ready() -> bool:
        return True

    @mcp.tool(name="init_sandbox", description="Create <working_dir>/.taskgrid if missing and return its path")
    def init_sandbox(input: InitSandboxIn) -> str:
        return as_tool_result(fs_service.init_sandbox, input.working_dir)
