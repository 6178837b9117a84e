"""Tar packaging of a source tree for the build engine."""

from __future__ import annotations

import os
import tarfile
import tempfile
from pathlib import Path
from typing import IO, Iterator

import structlog

from container_service.core.exceptions import ArchiveError

logger = structlog.get_logger(__name__)

# Archives larger than this spill from memory to a temporary file.
_SPOOL_MAX_BYTES = 64 * 1024 * 1024


def _raise_walk_error(exc: OSError) -> None:
    path = exc.filename if exc.filename is not None else "<unknown>"
    raise ArchiveError(
        f"cannot read directory {path}: {exc.strerror or exc}",
        path=str(path),
        code="ARCHIVE_ERROR",
    ) from exc


def _iter_entries(root: Path) -> Iterator[Path]:
    """Yield every entry below *root* in a stable, parent-first order."""
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames.sort()
        base = Path(dirpath)
        for name in sorted(dirnames + filenames):
            yield base / name


def _add_entry(tar: tarfile.TarFile, path: Path, arcname: str) -> None:
    try:
        tarinfo = tar.gettarinfo(str(path), arcname)
        if tarinfo is None:
            raise ArchiveError(
                f"unsupported file type: {path}",
                path=str(path),
                code="ARCHIVE_ERROR",
            )
        if tarinfo.isreg():
            with path.open("rb") as fh:
                tar.addfile(tarinfo, fh)
        else:
            tar.addfile(tarinfo)
    except OSError as exc:
        raise ArchiveError(
            f"cannot archive {path}: {exc.strerror or exc}",
            path=str(path),
            code="ARCHIVE_ERROR",
        ) from exc


def create_tar_archive(
    source_path: str | Path,
    fileobj: IO[bytes] | None = None,
) -> IO[bytes]:
    """Package every file and directory under *source_path* as a tar stream.

    Paths are stored relative to *source_path* (the root itself is not an
    entry); permission bits and symlinks are preserved. Nothing is skipped:
    an entry that cannot be stat'ed or read, or whose type tar cannot
    represent, aborts the whole archive.

    Args:
        source_path: Directory to package.
        fileobj: Optional binary file object to write into. When omitted a
            spooled temporary file is created; the caller owns closing it.

    Returns:
        The archive file object, rewound to offset 0.

    Raises:
        ArchiveError: If *source_path* is not a directory or any entry
            cannot be archived. ``path`` names the failing entry.
    """
    root = Path(source_path)
    if not root.is_dir():
        raise ArchiveError(
            f"source path is not a directory: {root}",
            path=str(root),
            code="ARCHIVE_ERROR",
        )

    out: IO[bytes] = (
        fileobj
        if fileobj is not None
        else tempfile.SpooledTemporaryFile(max_size=_SPOOL_MAX_BYTES)  # type: ignore[assignment]
    )
    entries = 0
    try:
        with tarfile.open(fileobj=out, mode="w") as tar:
            for path in _iter_entries(root):
                _add_entry(tar, path, path.relative_to(root).as_posix())
                entries += 1
    except BaseException:
        if fileobj is None:
            out.close()
        raise

    out.seek(0)
    logger.debug("archive_created", source_path=str(root), entries=entries)
    return out
