# taskgrid/errors.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    INVALID_PATH = "invalid_path"
    CONFIG = "config"
    IO = "io"


class SandboxError(Exception):
    """
    Base for every failure of a sandboxed file operation.

    Carries a machine-matchable `kind` plus the human-readable message the UI
    already pattern-matches on (prefix + detail).
    """

    kind: ErrorKind = ErrorKind.IO
    prefix: str = ""

    def __init__(self, detail: str, *, prefix: Optional[str] = None):
        if prefix is not None:
            self.prefix = prefix
        self.detail = detail
        super().__init__(f"{self.prefix}{detail}")

    @property
    def message(self) -> str:
        return str(self)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message}


class NotFoundError(SandboxError):
    kind = ErrorKind.NOT_FOUND
    prefix = "File does not exist: "


class AccessDeniedError(SandboxError):
    kind = ErrorKind.ACCESS_DENIED
    prefix = "Access denied: "

    def __init__(self, detail: str = "Path is outside .taskgrid folder", **kwargs):
        super().__init__(detail, **kwargs)


class InvalidPathError(SandboxError):
    kind = ErrorKind.INVALID_PATH
    prefix = "Invalid path: "


class ConfigError(SandboxError):
    # Sandbox root missing or unresolvable
    kind = ErrorKind.CONFIG
    prefix = "Failed to canonicalize base path: "


class SandboxIOError(SandboxError):
    kind = ErrorKind.IO
