# taskgrid_host/tools/assistant.py
from __future__ import annotations
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field
from fastmcp import FastMCP

from taskgrid.services.assistant import assistant_tool_definitions


class ExecuteToolCallIn(BaseModel):
    working_dir: str = Field(..., description="User-chosen working directory")
    name: str = Field(..., description="Assistant tool name, e.g. 'write_file'")
    arguments: Union[str, Dict[str, Any]] = Field(
        ..., description="Tool arguments as a JSON string or object; 'path' is relative to .taskgrid"
    )


class LoadAssistantConfigIn(BaseModel):
    working_dir: str = Field(..., description="User-chosen working directory")


class AssistantToolsIn(BaseModel):
    pass


def register_assistant_tools(mcp: FastMCP, assistant_service):
    @mcp.tool(
        name="execute_tool_call",
        description="Run one assistant file tool call inside .taskgrid and return the FileOperation record",
    )
    def execute_tool_call(input: ExecuteToolCallIn) -> Dict[str, Any]:
        return assistant_service.execute(input.working_dir, input.name, input.arguments).model_dump()

    @mcp.tool(
        name="load_assistant_config",
        description="Read .taskgrid/config/openrouter.json; null when missing or invalid",
    )
    def load_assistant_config(input: LoadAssistantConfigIn) -> Optional[Dict[str, Any]]:
        config = assistant_service.load_config(input.working_dir)
        return None if config is None else config.model_dump()

    @mcp.tool(
        name="assistant_tool_definitions",
        description="Function-calling definitions of the assistant's file tools",
    )
    def assistant_tools() -> List[Dict[str, Any]]:
        return assistant_tool_definitions()
