# taskgrid/services/filesystem.py
from __future__ import annotations

from pathlib import Path
from typing import List

from taskgrid.errors import InvalidPathError, NotFoundError, SandboxIOError
from taskgrid.services.guard import (
    PathLike,
    canonical_root,
    ensure_contained,
    ensure_pending_contained,
    nearest_existing_ancestor,
    checked_exists,
    sandbox_root,
)


def _checked_text(raw: PathLike) -> str:
    text = str(raw)
    if not text.strip():
        raise InvalidPathError("empty path")
    if "\x00" in text:
        raise InvalidPathError("path contains a NUL byte")
    return text


def root_for(working_dir: PathLike) -> Path:
    return sandbox_root(_checked_text(working_dir))


def resolve_candidate(root: Path, raw: PathLike) -> Path:
    """
    Turn a caller-supplied path into a Path; relative paths hang off the root.
    Nothing is resolved here, the guard does that.
    """
    p = Path(_checked_text(raw))
    return p if p.is_absolute() else root / p


def _is_anchor(path: Path) -> bool:
    return path.parent == path


class SandboxFileService:
    """
    Sandbox every file operation inside <working_dir>/.taskgrid.

    Stateless: the root is recomputed from `working_dir` on each call and
    validation always completes before the single OS action.
    """

    def read_text(self, working_dir: PathLike, file_path: PathLike) -> str:
        root = root_for(working_dir)
        p = resolve_candidate(root, file_path)
        if not checked_exists(p, "Failed to read file: "):
            raise NotFoundError(str(file_path))
        ensure_contained(root, p)
        try:
            return p.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SandboxIOError(str(exc), prefix="Failed to read file: ") from exc

    def write_text(self, working_dir: PathLike, file_path: PathLike, content: str) -> None:
        root = root_for(working_dir)
        p = resolve_candidate(root, file_path)
        if checked_exists(p, "Failed to write file: "):
            ensure_contained(root, p)
        else:
            if _is_anchor(p):
                raise InvalidPathError("no parent directory")
            anchor = nearest_existing_ancestor(p.parent, "Failed to write file: ")
            ensure_pending_contained(root, p, anchor)

        # Parents created here are left in place if the write below fails
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SandboxIOError(str(exc), prefix="Failed to create parent directory: ") from exc
        try:
            p.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise SandboxIOError(str(exc), prefix="Failed to write file: ") from exc

    def list_dir(self, working_dir: PathLike, dir_path: PathLike) -> List[str]:
        root = root_for(working_dir)
        p = resolve_candidate(root, dir_path)
        if not checked_exists(p, "Failed to list directory: "):
            raise NotFoundError(str(dir_path), prefix="Directory does not exist: ")
        ensure_contained(root, p)
        try:
            return [str(entry) for entry in p.iterdir()]
        except OSError as exc:
            raise SandboxIOError(str(exc), prefix="Failed to list directory: ") from exc

    def delete_file(self, working_dir: PathLike, file_path: PathLike) -> None:
        root = root_for(working_dir)
        p = resolve_candidate(root, file_path)
        if not checked_exists(p, "Failed to delete file: "):
            raise NotFoundError(str(file_path))
        ensure_contained(root, p)
        try:
            p.unlink()
        except OSError as exc:
            raise SandboxIOError(str(exc), prefix="Failed to delete file: ") from exc

    def make_dir(self, working_dir: PathLike, dir_path: PathLike) -> None:
        root = root_for(working_dir)
        p = resolve_candidate(root, dir_path)
        if _is_anchor(p):
            raise InvalidPathError("cannot create directory at root")
        if checked_exists(p, "Failed to create directory: "):
            ensure_contained(root, p)
            return

        parent = p.parent
        if not checked_exists(parent, "Failed to create directory: "):
            # A missing sandbox is a configuration problem, not a missing parent
            canonical_root(root)
            raise NotFoundError(str(parent), prefix="Directory does not exist: ")
        ensure_pending_contained(root, p, parent)
        try:
            p.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SandboxIOError(str(exc), prefix="Failed to create directory: ") from exc

    def init_sandbox(self, working_dir: PathLike) -> str:
        """Create <working_dir>/.taskgrid when missing; the working dir must exist."""
        wd = Path(_checked_text(working_dir))
        if not checked_exists(wd, "Failed to create directory: ") or not wd.is_dir():
            raise NotFoundError(str(working_dir), prefix="Directory does not exist: ")
        root = sandbox_root(wd)
        try:
            root.mkdir(exist_ok=True)
        except OSError as exc:
            raise SandboxIOError(str(exc), prefix="Failed to create directory: ") from exc
        return str(root)
