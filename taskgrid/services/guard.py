# taskgrid/services/guard.py
from __future__ import annotations

import errno
import logging
from pathlib import Path
from typing import Union

from taskgrid.errors import (
    AccessDeniedError,
    ConfigError,
    InvalidPathError,
    NotFoundError,
    SandboxIOError,
)

logger = logging.getLogger(__name__)

SANDBOX_FOLDER_NAME = ".taskgrid"

PathLike = Union[str, Path]


def sandbox_root(working_dir: PathLike) -> Path:
    """Trusted boundary for one call: <working_dir>/.taskgrid (never cached)."""
    return Path(working_dir) / SANDBOX_FOLDER_NAME


def canonical_root(root: PathLike) -> Path:
    try:
        return Path(root).resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise ConfigError(str(exc)) from exc


def _within(path: Path, base: Path) -> bool:
    # Component-wise, so "/w/.taskgrid-evil" is not under "/w/.taskgrid"
    return path == base or base in path.parents


def is_contained(root: PathLike, candidate: PathLike) -> bool:
    """
    True iff `candidate` resolves (symlinks followed) to `root` or below it.

    Both sides are canonicalized first, so `..` segments and symlinks are
    judged by where they really point.
    Raises ConfigError if root cannot be resolved and NotFoundError if the
    candidate does not exist (validate its parent instead).
    """
    real_root = canonical_root(root)
    try:
        real = Path(candidate).resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise NotFoundError(str(candidate), prefix="Target path does not exist: ") from exc
    return _within(real, real_root)


def ensure_contained(root: PathLike, candidate: PathLike) -> Path:
    if not is_contained(root, candidate):
        logger.warning("sandbox_denied root=%s path=%s", root, candidate)
        raise AccessDeniedError()
    return Path(candidate).resolve(strict=True)


def checked_exists(path: Path, prefix: str) -> bool:
    """
    `Path.exists` that never leaks a raw OSError.

    Over-long names raise InvalidPathError; any other stat failure (EACCES on
    a parent, EIO) becomes a SandboxIOError with the operation's prefix.
    """
    try:
        return path.exists()
    except OSError as exc:
        if exc.errno == errno.ENAMETOOLONG:
            raise InvalidPathError(f"name too long: {path}") from exc
        raise SandboxIOError(str(exc), prefix=prefix) from exc


def nearest_existing_ancestor(path: Path, prefix: str = "Failed to write file: ") -> Path:
    for p in (path, *path.parents):
        if checked_exists(p, prefix):
            return p
    # Only reachable for a relative path whose cwd vanished
    raise NotFoundError(str(path), prefix="Directory does not exist: ")


def ensure_pending_contained(root: PathLike, path: Path, anchor: Path) -> None:
    """
    Validate a path that does not exist yet.

    `anchor` is an existing ancestor of `path` and goes through the regular
    check. The lenient resolution of the full path must also stay inside the
    root: a dangling symlink under the sandbox would otherwise let the final
    create land wherever the link points.
    """
    ensure_contained(root, anchor)
    try:
        target = path.resolve()
    except (OSError, RuntimeError) as exc:
        raise InvalidPathError(f"cannot resolve {path}") from exc
    if not _within(target, canonical_root(root)):
        logger.warning("sandbox_denied root=%s path=%s resolved=%s", root, path, target)
        raise AccessDeniedError()
