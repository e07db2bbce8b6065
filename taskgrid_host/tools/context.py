# taskgrid_host/tools/context.py
from __future__ import annotations
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from fastmcp import FastMCP

from taskgrid.services.context import FileContext


class FileContextIn(BaseModel):
    working_dir: str = Field(..., description="User-chosen working directory")
    path: str = Field(..., description="File inside the sandbox")


class CollectFilesIn(BaseModel):
    working_dir: str = Field(..., description="User-chosen working directory")
    max_files: Optional[int] = Field(None, ge=1, le=200, description="Stop after this many files")
    max_depth: Optional[int] = Field(None, ge=0, le=16, description="Directory depth below .taskgrid")


class FormatContextIn(BaseModel):
    working_dir: str = Field(..., description="User-chosen working directory")
    paths: Optional[List[str]] = Field(
        None, description="Explicit files to include; when omitted the sandbox is walked"
    )


def register_context_tools(mcp: FastMCP, context_service):
    @mcp.tool(name="get_file_context", description="Read one sandbox file as prompt context")
    def get_file_context(input: FileContextIn) -> Dict[str, Any]:
        return context_service.get_file_context(input.working_dir, input.path).model_dump()

    @mcp.tool(
        name="collect_taskgrid_files",
        description="Collect up to max_files readable files from the .taskgrid sandbox",
    )
    def collect_taskgrid_files(input: CollectFilesIn) -> List[Dict[str, Any]]:
        contexts = context_service.collect_files(
            input.working_dir, max_files=input.max_files, max_depth=input.max_depth
        )
        return [c.model_dump() for c in contexts]

    @mcp.tool(
        name="format_file_context",
        description="Render sandbox files as an 'Available Files' prompt section",
    )
    def format_file_context(input: FormatContextIn) -> str:
        return build_context_text(context_service, input)


def build_context_text(context_service, args: FormatContextIn) -> str:
    contexts: List[FileContext]
    if args.paths is None:
        contexts = context_service.collect_files(args.working_dir)
    else:
        contexts = context_service.files_from_paths(args.working_dir, args.paths)
    return context_service.format_for_llm(args.working_dir, contexts)
