# taskgrid/services/context.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Set

from pydantic import BaseModel

from taskgrid.errors import SandboxError
from taskgrid.services.filesystem import SandboxFileService
from taskgrid.services.guard import PathLike, sandbox_root

logger = logging.getLogger(__name__)


class FileContext(BaseModel):
    path: str
    content: Optional[str] = None
    exists: bool


@dataclass
class FileContextService:
    """
    Gather sandbox files as prompt context for the UI's assistant.

    Every read goes through the guarded file service, so the walk can never
    leave .taskgrid. Unreadable entries are reported as missing rather than
    failing the whole batch.
    """
    fs: SandboxFileService
    max_files: int = 10
    max_depth: int = 2

    # ---------- Public API ----------

    def get_file_context(self, working_dir: PathLike, path: str) -> FileContext:
        try:
            content = self.fs.read_text(working_dir, path)
        except SandboxError as exc:
            logger.debug("file_context_unavailable path=%s reason=%s", path, exc.kind.value)
            return FileContext(path=path, exists=False)
        return FileContext(path=path, content=content, exists=True)

    def collect_files(
        self,
        working_dir: PathLike,
        *,
        max_files: Optional[int] = None,
        max_depth: Optional[int] = None,
    ) -> List[FileContext]:
        max_files = self.max_files if max_files is None else max_files
        max_depth = self.max_depth if max_depth is None else max_depth
        contexts: List[FileContext] = []
        visited: Set[str] = set()

        def walk(dir_path: str, depth: int) -> None:
            if depth > max_depth or len(contexts) >= max_files or dir_path in visited:
                return
            visited.add(dir_path)
            try:
                entries = self.fs.list_dir(working_dir, dir_path)
            except SandboxError as exc:
                logger.debug("context_walk_skipped dir=%s reason=%s", dir_path, exc.kind.value)
                return
            for entry in entries:
                if len(contexts) >= max_files:
                    break
                p = Path(entry)
                # lstat semantics: symlinks are neither file nor directory here
                if p.is_symlink():
                    continue
                if p.is_file():
                    ctx = self.get_file_context(working_dir, entry)
                    if ctx.exists:
                        contexts.append(ctx)
                elif p.is_dir():
                    walk(entry, depth + 1)

        walk(str(sandbox_root(working_dir)), 0)
        return contexts

    def files_from_paths(
        self, working_dir: PathLike, paths: Iterable[str], *, limit: Optional[int] = None
    ) -> List[FileContext]:
        limit = self.max_files if limit is None else limit
        contexts: List[FileContext] = []
        for path in paths:
            if len(contexts) >= limit:
                break
            if not path.strip():
                continue
            contexts.append(self.get_file_context(working_dir, path))
        return contexts

    def format_for_llm(self, working_dir: PathLike, contexts: List[FileContext]) -> str:
        if not contexts:
            return "No files available in context."

        root = sandbox_root(working_dir)
        sections: List[str] = []
        for ctx in contexts:
            rel = _relative_to(ctx.path, root)
            if ctx.exists and ctx.content is not None:
                sections.append(f"File: {rel}\n```\n{ctx.content}\n```")
            else:
                sections.append(f"File: {rel} (does not exist)")
        return "Available Files:\n\n" + "\n\n".join(sections)


def _relative_to(path: str, root: Path) -> str:
    try:
        return Path(path).relative_to(root).as_posix()
    except ValueError:
        return path
