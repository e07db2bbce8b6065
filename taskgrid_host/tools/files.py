# taskgrid_host/tools/files.py
from typing import Callable, List, TypeVar

from pydantic import BaseModel, Field
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from taskgrid.errors import SandboxError

T = TypeVar("T")


class ReadFileIn(BaseModel):
    working_dir: str = Field(..., description="User-chosen working directory (sandbox is <working_dir>/.taskgrid)")
    file_path: str = Field(..., description="File to read; relative paths are taken under the sandbox root")


class WriteFileIn(BaseModel):
    working_dir: str = Field(..., description="User-chosen working directory")
    file_path: str = Field(..., description="File to create or overwrite inside the sandbox")
    content: str = Field(..., description="UTF-8 text content to write")


class ListDirectoryIn(BaseModel):
    working_dir: str = Field(..., description="User-chosen working directory")
    dir_path: str = Field(..., description="Directory inside the sandbox to list (non-recursive)")


class DeleteFileIn(BaseModel):
    working_dir: str = Field(..., description="User-chosen working directory")
    file_path: str = Field(..., description="File inside the sandbox to delete")


class CreateDirectoryIn(BaseModel):
    working_dir: str = Field(..., description="User-chosen working directory")
    dir_path: str = Field(..., description="Directory inside the sandbox to create (idempotent)")


def as_tool_result(fn: Callable[..., T], *args) -> T:
    """Surface sandbox failures to the client as their human-readable message."""
    try:
        return fn(*args)
    except SandboxError as exc:
        raise ToolError(exc.message) from exc


def register_file_tools(mcp: FastMCP, fs_service):
    """
    Very thin tool adapters:
    - validate/deserialize inputs (Pydantic)
    - call the service (containment + the single OS action)
    - return the result
    """

    @mcp.tool(name="read_file_safe", description="Read a text file inside the .taskgrid sandbox")
    def read_file_safe(input: ReadFileIn) -> str:
        return as_tool_result(fs_service.read_text, input.working_dir, input.file_path)

    @mcp.tool(name="write_file_safe", description="Write a text file inside the .taskgrid sandbox, creating parents")
    def write_file_safe(input: WriteFileIn) -> str:
        as_tool_result(fs_service.write_text, input.working_dir, input.file_path, input.content)
        return "OK"

    @mcp.tool(name="list_directory_safe", description="List the immediate entries of a sandbox directory")
    def list_directory_safe(input: ListDirectoryIn) -> List[str]:
        return as_tool_result(fs_service.list_dir, input.working_dir, input.dir_path)

    @mcp.tool(name="delete_file_safe", description="Delete a single file inside the .taskgrid sandbox")
    def delete_file_safe(input: DeleteFileIn) -> str:
        as_tool_result(fs_service.delete_file, input.working_dir, input.file_path)
        return "OK"

    @mcp.tool(name="create_directory_safe", description="Create a directory inside the .taskgrid sandbox")
    def create_directory_safe(input: CreateDirectoryIn) -> str:
        as_tool_result(fs_service.make_dir, input.working_dir, input.dir_path)
        return "OK"
