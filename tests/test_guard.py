# tests/test_guard.py
import errno
import os
from pathlib import Path

import pytest

from taskgrid.errors import (
    AccessDeniedError,
    ConfigError,
    InvalidPathError,
    NotFoundError,
    SandboxIOError,
)
from taskgrid.services.guard import (
    ensure_contained,
    ensure_pending_contained,
    is_contained,
    nearest_existing_ancestor,
    checked_exists,
    sandbox_root,
)


@pytest.fixture
def root(tmp_path: Path) -> Path:
    r = sandbox_root(tmp_path)
    r.mkdir()
    return r


def test_sandbox_root_is_fixed_subfolder(tmp_path: Path):
    assert sandbox_root(tmp_path) == tmp_path / ".taskgrid"
    assert sandbox_root(str(tmp_path)) == tmp_path / ".taskgrid"


def test_root_and_descendants_are_contained(root: Path):
    nested = root / "a" / "b"
    nested.mkdir(parents=True)
    (nested / "c.txt").write_text("x")

    assert is_contained(root, root) is True
    assert is_contained(root, root / "a") is True
    assert is_contained(root, nested / "c.txt") is True


def test_sibling_sharing_prefix_is_not_contained(tmp_path: Path, root: Path):
    evil = tmp_path / ".taskgrid-evil"
    evil.mkdir()
    assert is_contained(root, evil) is False


def test_parent_and_dotdot_are_not_contained(tmp_path: Path, root: Path):
    (root / "a").mkdir()
    assert is_contained(root, tmp_path) is False
    assert is_contained(root, str(root / "a" / ".." / "..")) is False


def test_symlink_pointing_outside_is_not_contained(tmp_path: Path, root: Path):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.txt").write_text("s")
    link = root / "link"
    os.symlink(outside, link)

    assert is_contained(root, link) is False
    assert is_contained(root, link / "secret.txt") is False


def test_symlink_pointing_inside_is_contained(root: Path):
    (root / "real").mkdir()
    os.symlink(root / "real", root / "alias")
    assert is_contained(root, root / "alias") is True


def test_missing_candidate_raises_not_found(root: Path):
    with pytest.raises(NotFoundError) as ei:
        is_contained(root, root / "nope.txt")
    assert str(ei.value).startswith("Target path does not exist: ")


def test_missing_root_raises_config_error(tmp_path: Path):
    (tmp_path / "f.txt").write_text("x")
    with pytest.raises(ConfigError):
        is_contained(tmp_path / ".taskgrid", tmp_path / "f.txt")


def test_ensure_contained_raises_access_denied(tmp_path: Path, root: Path):
    with pytest.raises(AccessDeniedError) as ei:
        ensure_contained(root, tmp_path)
    assert ei.value.message == "Access denied: Path is outside .taskgrid folder"


def test_nearest_existing_ancestor(root: Path):
    (root / "a").mkdir()
    assert nearest_existing_ancestor(root / "a" / "b" / "c.txt") == root / "a"
    assert nearest_existing_ancestor(root / "a") == root / "a"


def test_pending_path_behind_dangling_symlink_is_denied(tmp_path: Path, root: Path):
    target = tmp_path / "outside" / "new.txt"
    (tmp_path / "outside").mkdir()
    link = root / "dangling.txt"
    os.symlink(target, link)

    with pytest.raises(AccessDeniedError):
        ensure_pending_contained(root, link, root)


def test_pending_path_inside_root_is_accepted(root: Path):
    ensure_pending_contained(root, root / "x" / "y.txt", root)


def test_checked_exists_maps_name_too_long(root: Path, monkeypatch):
    def too_long(self, *args, **kwargs):
        raise OSError(errno.ENAMETOOLONG, "File name too long")

    monkeypatch.setattr(Path, "exists", too_long)
    with pytest.raises(InvalidPathError) as ei:
        checked_exists(root / ("n" * 300), "Failed to read file: ")
    assert ei.value.message.startswith("Invalid path: name too long")


def test_checked_exists_maps_other_os_errors(root: Path, monkeypatch):
    def broken(self, *args, **kwargs):
        raise OSError(errno.EIO, "Input/output error")

    monkeypatch.setattr(Path, "exists", broken)
    with pytest.raises(SandboxIOError) as ei:
        nearest_existing_ancestor(root / "x" / "y.txt")
    assert ei.value.message.startswith("Failed to write file: ")
