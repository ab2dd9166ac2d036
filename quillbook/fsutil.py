"""Filesystem helpers used while building a book."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path, PurePath
from typing import BinaryIO, Iterable

log = logging.getLogger(__name__)

_SEPARATORS = {sep for sep in (os.sep, os.altsep) if sep}


def normalize_path(path: str) -> str:
    """Replace every path separator of this platform with ``/``."""
    return "".join("/" if ch in _SEPARATORS else ch for ch in path)


def write_file(build_dir: str | os.PathLike, filename: str | os.PathLike, content: bytes) -> None:
    """Write ``content`` to ``build_dir/filename``, creating directories as needed."""
    with create_file(Path(build_dir) / filename) as handle:
        handle.write(content)


def path_to_root(path: str | os.PathLike) -> str:
    """Return just enough ``../`` to lead from ``path``'s directory back to its root.

    >>> path_to_root("some/relative/path")
    '../../'
    """
    raw = os.fspath(path)
    pure = PurePath(raw)
    if not raw or (pure.anchor and pure == pure.parent):
        raise ValueError(f"path {raw!r} has no parent directory")
    parent = pure.parent
    normal = [
        part
        for part in parent.parts
        if part not in (parent.anchor, "..", ".")
    ]
    return "../" * len(normal)


def create_file(path: str | os.PathLike) -> BinaryIO:
    """Create ``path`` for binary writing, creating missing parent directories first."""
    target = Path(path)
    log.debug("Creating %s", target)
    target.parent.mkdir(parents=True, exist_ok=True)
    return target.open("wb")


def remove_dir_content(directory: str | os.PathLike) -> None:
    """Remove everything inside ``directory`` but keep the directory itself."""
    for item in Path(directory).iterdir():
        if item.is_dir() and not item.is_symlink():
            shutil.rmtree(item)
        else:
            item.unlink()


def copy_files_except_ext(
    source: str | os.PathLike,
    destination: str | os.PathLike,
    recursive: bool,
    ext_blacklist: Iterable[str],
) -> None:
    """Copy the files of ``source`` into ``destination``.

    Files whose extension is in ``ext_blacklist`` are skipped. With
    ``recursive`` set, subdirectories are copied too, except ``destination``
    itself when it lies inside ``source``.
    """
    source = Path(source)
    destination = Path(destination)
    blacklist = set(ext_blacklist)
    log.debug(
        "Copying all files from %s to %s (blacklist: %s)", source, destination, sorted(blacklist)
    )

    if source == destination:
        return

    with os.scandir(source) as entries:
        for entry in entries:
            entry_path = Path(entry.path)
            target = destination / entry.name

            if entry.is_dir(follow_symlinks=False) and recursive:
                if entry_path == destination:
                    continue
                if not target.exists():
                    target.mkdir()
                copy_files_except_ext(entry_path, target, True, blacklist)
            elif entry.is_file(follow_symlinks=False):
                suffix = entry_path.suffix
                if suffix and suffix[1:] in blacklist:
                    continue
                log.debug("Copying %s to %s", entry_path, target)
                shutil.copy(entry_path, target)