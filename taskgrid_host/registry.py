# taskgrid_host/registry.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type
from pydantic import BaseModel

from taskgrid.di import Container, build_container
from taskgrid.logging import log_tool_call
from taskgrid.services.assistant import assistant_tool_definitions

# Import only the Pydantic input models from existing tool modules.
from taskgrid_host.tools.files import (
    CreateDirectoryIn,
    DeleteFileIn,
    ListDirectoryIn,
    ReadFileIn,
    WriteFileIn,
)
from taskgrid_host.tools.context import (
    CollectFilesIn,
    FileContextIn,
    FormatContextIn,
    build_context_text,
)
from taskgrid_host.tools.system import BackendReadyIn, InitSandboxIn
from taskgrid_host.tools.assistant import AssistantToolsIn, ExecuteToolCallIn, LoadAssistantConfigIn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: Type[BaseModel]
    handler: Callable[[BaseModel], Any]


class ToolHandlers:
    """
    Named handlers for each tool (no lambdas).
    Keeps all cross-cutting logic and observability in one place.
    Sandbox errors propagate to the transport, which decides how to render them.
    """
    def __init__(self, container: Container):
        self.container = container

    # ---- Sandboxed file operations
    def read_file_safe(self, args: ReadFileIn) -> str:
        log_tool_call(logger, "read_file_safe", args.model_dump())
        return self.container.fs_service.read_text(args.working_dir, args.file_path)

    def write_file_safe(self, args: WriteFileIn) -> str:
        log_tool_call(logger, "write_file_safe", args.model_dump())
        self.container.fs_service.write_text(args.working_dir, args.file_path, args.content)
        return "OK"

    def list_directory_safe(self, args: ListDirectoryIn) -> List[str]:
        log_tool_call(logger, "list_directory_safe", args.model_dump())
        return self.container.fs_service.list_dir(args.working_dir, args.dir_path)

    def delete_file_safe(self, args: DeleteFileIn) -> str:
        log_tool_call(logger, "delete_file_safe", args.model_dump())
        self.container.fs_service.delete_file(args.working_dir, args.file_path)
        return "OK"

    def create_directory_safe(self, args: CreateDirectoryIn) -> str:
        log_tool_call(logger, "create_directory_safe", args.model_dump())
        self.container.fs_service.make_dir(args.working_dir, args.dir_path)
        return "OK"

    # ---- Host
    def backend_ready(self, args: BackendReadyIn) -> bool:
        return True

    def init_sandbox(self, args: InitSandboxIn) -> str:
        log_tool_call(logger, "init_sandbox", args.model_dump())
        return self.container.fs_service.init_sandbox(args.working_dir)

    # ---- File context
    def get_file_context(self, args: FileContextIn) -> dict:
        log_tool_call(logger, "get_file_context", args.model_dump())
        return self.container.context_service.get_file_context(args.working_dir, args.path).model_dump()

    def collect_taskgrid_files(self, args: CollectFilesIn) -> list:
        log_tool_call(logger, "collect_taskgrid_files", args.model_dump())
        contexts = self.container.context_service.collect_files(
            args.working_dir, max_files=args.max_files, max_depth=args.max_depth
        )
        return [c.model_dump() for c in contexts]

    def format_file_context(self, args: FormatContextIn) -> str:
        log_tool_call(logger, "format_file_context", args.model_dump())
        return build_context_text(self.container.context_service, args)

    # ---- Assistant file tools
    def execute_tool_call(self, args: ExecuteToolCallIn) -> dict:
        log_tool_call(logger, "execute_tool_call", args.model_dump())
        op = self.container.assistant_service.execute(args.working_dir, args.name, args.arguments)
        return op.model_dump()

    def load_assistant_config(self, args: LoadAssistantConfigIn) -> Optional[dict]:
        log_tool_call(logger, "load_assistant_config", args.model_dump())
        config = self.container.assistant_service.load_config(args.working_dir)
        return None if config is None else config.model_dump()

    def assistant_tool_definitions(self, args: AssistantToolsIn) -> list:
        return assistant_tool_definitions()


def _schema_from_model(model: Type[BaseModel]) -> Dict[str, Any]:
    return model.model_json_schema()


def build_tool_registry(container: Optional[Container] = None) -> Dict[str, ToolSpec]:
    """
    Build a registry once at startup using DI.
    Transport layers (stdio/HTTP) read from this registry to expose tools.
    """
    handlers = ToolHandlers(container or build_container())

    specs = [
        ToolSpec(
            name="read_file_safe",
            description="Read a text file inside the .taskgrid sandbox",
            input_model=ReadFileIn,
            handler=handlers.read_file_safe,
        ),
        ToolSpec(
            name="write_file_safe",
            description="Write a text file inside the .taskgrid sandbox, creating parents",
            input_model=WriteFileIn,
            handler=handlers.write_file_safe,
        ),
        ToolSpec(
            name="list_directory_safe",
            description="List the immediate entries of a sandbox directory",
            input_model=ListDirectoryIn,
            handler=handlers.list_directory_safe,
        ),
        ToolSpec(
            name="delete_file_safe",
            description="Delete a single file inside the .taskgrid sandbox",
            input_model=DeleteFileIn,
            handler=handlers.delete_file_safe,
        ),
        ToolSpec(
            name="create_directory_safe",
            description="Create a directory inside the .taskgrid sandbox",
            input_model=CreateDirectoryIn,
            handler=handlers.create_directory_safe,
        ),
        ToolSpec(
            name="backend_ready",
            description="Liveness check for the UI; always true",
            input_model=BackendReadyIn,
            handler=handlers.backend_ready,
        ),
        ToolSpec(
            name="init_sandbox",
            description="Create <working_dir>/.taskgrid if missing and return its path",
            input_model=InitSandboxIn,
            handler=handlers.init_sandbox,
        ),
        ToolSpec(
            name="get_file_context",
            description="Read one sandbox file as prompt context",
            input_model=FileContextIn,
            handler=handlers.get_file_context,
        ),
        ToolSpec(
            name="collect_taskgrid_files",
            description="Collect up to max_files readable files from the .taskgrid sandbox",
            input_model=CollectFilesIn,
            handler=handlers.collect_taskgrid_files,
        ),
        ToolSpec(
            name="format_file_context",
            description="Render sandbox files as an 'Available Files' prompt section",
            input_model=FormatContextIn,
            handler=handlers.format_file_context,
        ),
        ToolSpec(
            name="execute_tool_call",
            description="Run one assistant file tool call inside .taskgrid and return the FileOperation record",
            input_model=ExecuteToolCallIn,
            handler=handlers.execute_tool_call,
        ),
        ToolSpec(
            name="load_assistant_config",
            description="Read .taskgrid/config/openrouter.json; null when missing or invalid",
            input_model=LoadAssistantConfigIn,
            handler=handlers.load_assistant_config,
        ),
        ToolSpec(
            name="assistant_tool_definitions",
            description="Function-calling definitions of the assistant's file tools",
            input_model=AssistantToolsIn,
            handler=handlers.assistant_tool_definitions,
        ),
    ]
    return {spec.name: spec for spec in specs}


def list_tools_payload(registry: Dict[str, ToolSpec]) -> Dict[str, Any]:
    """
    Produce the `tools/list` payload body as per MCP Tools spec.
    """
    tools = []
    for spec in registry.values():
        tools.append({
            "name": spec.name,
            "description": spec.description,
            "inputSchema": _schema_from_model(spec.input_model),
        })
    return {"tools": tools}


def dispatch_tool_call(registry: Dict[str, ToolSpec], name: str, arguments: Dict[str, Any]) -> Any:
    """
    Validate args with the tool's Pydantic model, then invoke the named handler.
    """
    if name not in registry:
        raise KeyError(f"Tool not found: {name}")
    spec = registry[name]
    args_obj = spec.input_model(**arguments)
    return spec.handler(args_obj)
