"""Tests for builder/archive.py — create_tar_archive."""
from __future__ import annotations

import io
import os
import socket
import stat
import tarfile
from pathlib import Path

import pytest

from container_service.builder.archive import create_tar_archive
from container_service.core.exceptions import ArchiveError


def _members(fileobj: io.IOBase) -> dict[str, tarfile.TarInfo]:
    with tarfile.open(fileobj=fileobj, mode="r") as tar:
        return {m.name: m for m in tar.getmembers()}


def _populate(root: Path) -> None:
    (root / "Dockerfile").write_text("FROM scratch\n")
    (root / "app").mkdir()
    (root / "app" / "main.py").write_text("print('hi')\n")
    script = root / "app" / "run.sh"
    script.write_text("#!/bin/sh\necho run\n")
    script.chmod(0o755)
    (root / "app" / "nested").mkdir()
    (root / "app" / "nested" / "data.txt").write_text("data")


# ---------------------------------------------------------------------------
# Contents
# ---------------------------------------------------------------------------


def test_archive_contains_every_file_with_relative_paths(source_dir: Path) -> None:
    _populate(source_dir)
    archive = create_tar_archive(source_dir)
    members = _members(archive)
    assert set(members) == {
        "Dockerfile",
        "app",
        "app/main.py",
        "app/run.sh",
        "app/nested",
        "app/nested/data.txt",
    }


def test_archive_file_set_matches_walk(source_dir: Path) -> None:
    _populate(source_dir)
    expected = {
        Path(dirpath, name).relative_to(source_dir).as_posix()
        for dirpath, dirnames, filenames in os.walk(source_dir)
        for name in dirnames + filenames
    }
    assert set(_members(create_tar_archive(source_dir))) == expected


def test_archive_preserves_permission_bits(source_dir: Path) -> None:
    _populate(source_dir)
    members = _members(create_tar_archive(source_dir))
    for name in ("Dockerfile", "app/main.py", "app/run.sh"):
        on_disk = stat.S_IMODE((source_dir / name).stat().st_mode)
        assert members[name].mode == on_disk
    assert members["app/run.sh"].mode & 0o111


def test_archive_preserves_file_contents(source_dir: Path) -> None:
    _populate(source_dir)
    archive = create_tar_archive(source_dir)
    with tarfile.open(fileobj=archive, mode="r") as tar:
        extracted = tar.extractfile("app/nested/data.txt")
        assert extracted is not None
        assert extracted.read() == b"data"


def test_archive_root_is_not_an_entry(source_dir: Path) -> None:
    (source_dir / "a.txt").write_text("a")
    members = _members(create_tar_archive(source_dir))
    assert "." not in members
    assert "" not in members


def test_archive_of_empty_directory_is_valid_and_empty(source_dir: Path) -> None:
    assert _members(create_tar_archive(source_dir)) == {}


def test_archive_keeps_symlinks_as_links(source_dir: Path) -> None:
    (source_dir / "target.txt").write_text("t")
    (source_dir / "link.txt").symlink_to("target.txt")
    members = _members(create_tar_archive(source_dir))
    assert members["link.txt"].issym()
    assert members["link.txt"].linkname == "target.txt"


def test_archive_is_rewound(source_dir: Path) -> None:
    (source_dir / "a.txt").write_text("a")
    archive = create_tar_archive(source_dir)
    assert archive.tell() == 0


def test_archive_writes_into_supplied_fileobj(source_dir: Path) -> None:
    (source_dir / "a.txt").write_text("a")
    buf = io.BytesIO()
    result = create_tar_archive(source_dir, buf)
    assert result is buf
    assert set(_members(buf)) == {"a.txt"}


def test_archive_order_is_stable(source_dir: Path) -> None:
    for name in ("b.txt", "a.txt", "c.txt"):
        (source_dir / name).write_text(name)
    with tarfile.open(fileobj=create_tar_archive(source_dir), mode="r") as tar:
        assert tar.getnames() == ["a.txt", "b.txt", "c.txt"]


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


def test_missing_directory_raises_archive_error(tmp_path: Path) -> None:
    missing = tmp_path / "nope"
    with pytest.raises(ArchiveError) as exc_info:
        create_tar_archive(missing)
    assert exc_info.value.path == str(missing)
    assert exc_info.value.code == "ARCHIVE_ERROR"


def test_file_instead_of_directory_raises_archive_error(tmp_path: Path) -> None:
    f = tmp_path / "file.txt"
    f.write_text("x")
    with pytest.raises(ArchiveError):
        create_tar_archive(f)


@pytest.mark.skipif(os.geteuid() == 0, reason="root can read any file")
def test_unreadable_file_names_failing_path(source_dir: Path) -> None:
    secret = source_dir / "secret.txt"
    secret.write_text("s")
    secret.chmod(0o000)
    try:
        with pytest.raises(ArchiveError) as exc_info:
            create_tar_archive(source_dir)
        assert exc_info.value.path == str(secret)
    finally:
        secret.chmod(0o644)


def test_fifo_entries_are_archived(source_dir: Path) -> None:
    os.mkfifo(source_dir / "pipe")
    members = _members(create_tar_archive(source_dir))
    assert members["pipe"].isfifo()


def test_socket_entry_aborts_instead_of_being_dropped(source_dir: Path) -> None:
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        try:
            sock.bind(str(source_dir / "s.sock"))
        except OSError:
            pytest.skip("cannot bind a unix socket here")
        with pytest.raises(ArchiveError) as exc_info:
            create_tar_archive(source_dir)
        assert exc_info.value.path == str(source_dir / "s.sock")
    finally:
        sock.close()
