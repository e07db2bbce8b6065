# taskgrid/services/assistant.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, Field, ValidationError

from taskgrid.errors import NotFoundError, SandboxError
from taskgrid.services.filesystem import SandboxFileService
from taskgrid.services.guard import PathLike, sandbox_root

logger = logging.getLogger(__name__)

CONFIG_RELATIVE_PATH = "config/openrouter.json"

OperationType = Literal["read", "write", "create_dir", "list", "delete"]


class OpenRouterConfig(BaseModel):
    apiKey: str = ""
    model: str = ""
    modelName: str = ""


class AssistantConfig(BaseModel):
    openrouter: OpenRouterConfig


class FileOperation(BaseModel):
    """Outcome of one assistant file tool call, shown in the UI and fed back to the model."""
    type: OperationType
    path: str
    content: Optional[str] = None
    success: bool
    message: Optional[str] = None

    def tool_response(self) -> Dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.message}
        if self.type == "read":
            return {"success": True, "path": self.path, "content": self.content}
        if self.type == "list":
            return {"success": True, "path": self.path, "directory_listing": self.message}
        return {"success": True, "message": self.message}


# ---------- Tool argument models (also the JSON schema offered to the model) ----------

class ReadFileArgs(BaseModel):
    path: str = Field(..., description='The relative path within .taskgrid folder (e.g., "tasks/my-task.md")')
    reason: str = Field(..., description="Brief explanation of why you need to read this file")


class WriteFileArgs(BaseModel):
    path: str = Field(..., description='The relative path within .taskgrid folder (e.g., "config/settings.json")')
    content: str = Field(..., description="The content to write to the file")
    reason: str = Field(..., description="Brief explanation of what file you are creating/updating and why")


class CreateDirectoryArgs(BaseModel):
    path: str = Field(..., description='The relative path within .taskgrid folder (e.g., "project/subfolder")')
    reason: str = Field(..., description="Brief explanation of what directory you are creating and why")


class ListDirectoryArgs(BaseModel):
    path: str = Field(..., description='The relative path within .taskgrid folder. Use "." to list the root.')
    reason: str = Field(..., description="Brief explanation of what directory you are listing and why")


class DeleteFileArgs(BaseModel):
    path: str = Field(..., description='The relative path within .taskgrid folder (e.g., "tasks/old-task.md")')
    reason: str = Field(..., description="Brief explanation of what file you are deleting and why")


@dataclass(frozen=True)
class _AssistantTool:
    op: OperationType
    description: str
    args_model: Type[BaseModel]


ASSISTANT_TOOLS: Dict[str, _AssistantTool] = {
    "read_file": _AssistantTool(
        "read", "Read the contents of a file in the .taskgrid folder.", ReadFileArgs
    ),
    "write_file": _AssistantTool(
        "write", "Create or overwrite a file in the .taskgrid folder.", WriteFileArgs
    ),
    "create_directory": _AssistantTool(
        "create_dir", "Create a new directory in the .taskgrid folder.", CreateDirectoryArgs
    ),
    "list_directory": _AssistantTool(
        "list", "List the contents of a directory in the .taskgrid folder.", ListDirectoryArgs
    ),
    "delete_file": _AssistantTool(
        "delete",
        "Delete a file in the .taskgrid folder. Only use this when explicitly requested by the user.",
        DeleteFileArgs,
    ),
}


def assistant_tool_definitions() -> List[Dict[str, Any]]:
    """Function-calling tool list in the chat-completions format."""
    return [
        {
            "type": "function",
            "function": {
                "name": name,
                "description": tool.description,
                "parameters": tool.args_model.model_json_schema(),
            },
        }
        for name, tool in ASSISTANT_TOOLS.items()
    ]


@dataclass
class AssistantToolService:
    """
    Sandbox-side half of the chat assistant: its config file and its file tools.

    Tool paths are always taken relative to .taskgrid and every call goes
    through the guarded file service. Failures come back as an unsuccessful
    FileOperation, never as an exception, so the chat loop can report them
    to the model.
    """
    fs: SandboxFileService

    def load_config(self, working_dir: PathLike) -> Optional[AssistantConfig]:
        try:
            text = self.fs.read_text(working_dir, CONFIG_RELATIVE_PATH)
        except NotFoundError:
            return None
        except SandboxError as exc:
            logger.error("assistant_config_unreadable %s", exc.message)
            return None
        try:
            return AssistantConfig.model_validate_json(text)
        except ValidationError as exc:
            logger.error("assistant_config_invalid %s", exc.errors(include_url=False, include_input=False))
            return None

    def execute(
        self, working_dir: PathLike, name: str, arguments: Union[str, Dict[str, Any]]
    ) -> FileOperation:
        tool = ASSISTANT_TOOLS.get(name)
        raw_path = ""
        try:
            args = json.loads(arguments) if isinstance(arguments, str) else dict(arguments)
            raw_path = str(args.get("path", "")) if isinstance(args, dict) else ""
            if tool is None:
                return FileOperation(
                    type="read", path=raw_path, success=False, message=f"Unknown tool: {name}"
                )
            parsed = tool.args_model.model_validate(args)
        except (ValueError, TypeError) as exc:
            # json.JSONDecodeError and pydantic ValidationError are both ValueErrors
            return FileOperation(
                type=tool.op if tool else "read",
                path=raw_path,
                success=False,
                message=f"Error executing {name}: invalid arguments: {exc}",
            )

        # String join, not Path join: an absolute tool path still lands under .taskgrid
        full_path = f"{sandbox_root(working_dir)}/{parsed.path}"
        try:
            return self._run(tool.op, working_dir, full_path, parsed)
        except SandboxError as exc:
            return FileOperation(
                type=tool.op,
                path=parsed.path,
                success=False,
                message=f"Error executing {name}: {exc.message}",
            )

    def _run(self, op: OperationType, working_dir: PathLike, full_path: str, args) -> FileOperation:
        path = args.path
        if op == "read":
            content = self.fs.read_text(working_dir, full_path)
            return FileOperation(
                type=op, path=path, content=content, success=True, message=f"Successfully read {path}"
            )
        if op == "write":
            self.fs.write_text(working_dir, full_path, args.content)
            return FileOperation(
                type=op, path=path, content=args.content, success=True,
                message=f"Successfully wrote {path}",
            )
        if op == "create_dir":
            self.fs.make_dir(working_dir, full_path)
            return FileOperation(
                type=op, path=path, success=True, message=f"Successfully created directory {path}"
            )
        if op == "list":
            entries = self.fs.list_dir(working_dir, full_path)
            listing = "\n".join(f"- {Path(e).name}" for e in entries)
            return FileOperation(
                type=op, path=path, success=True, message=f"Directory {path} contains:\n{listing}"
            )
        self.fs.delete_file(working_dir, full_path)
        return FileOperation(type=op, path=path, success=True, message=f"Successfully deleted {path}")
