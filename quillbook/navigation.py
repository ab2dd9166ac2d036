"""Finding the chapters before and after the current page."""

from __future__ import annotations

import enum
from pathlib import PurePath
from typing import Mapping, Sequence

from quillbook.fsutil import path_to_root


class NavigationError(Exception):
    """Raised when the chapter data cannot be used for navigation."""


class Target(enum.Enum):
    """Which neighbour of the current chapter to look for."""

    PREVIOUS = "previous"
    NEXT = "next"

    def find(
        self,
        base_path: str,
        current_path: str,
        current_item: Mapping[str, str],
        previous_item: Mapping[str, str],
    ) -> dict[str, str] | None:
        """Return the target if the pair of items locates it."""
        if self is Target.NEXT:
            previous_path = previous_item.get("path")
            if previous_path is None:
                raise NavigationError("No path found for chapter in JSON data")
            if previous_path == base_path:
                return dict(current_item)
        elif current_path == base_path:
            return dict(previous_item)
        return None


def _check_chapters(chapters: Sequence[Mapping[str, str]]) -> None:
    if not isinstance(chapters, (list, tuple)) or not all(
        isinstance(item, Mapping)
        and all(isinstance(k, str) and isinstance(v, str) for k, v in item.items())
        for item in chapters
    ):
        raise NavigationError("Could not decode the JSON data")


def _clean_base_path(base_path: str) -> str:
    if not isinstance(base_path, str):
        raise NavigationError("Type error for `path`, string expected")
    return base_path.replace('"', "")


def find_chapter(
    chapters: Sequence[Mapping[str, str]], base_path: str, target: Target
) -> dict[str, str] | None:
    """Return the chapter that is ``target`` of the one at ``base_path``, if any.

    Chapters without a path (such as separators) are passed over.
    """
    _check_chapters(chapters)
    base = _clean_base_path(base_path)

    previous: Mapping[str, str] | None = None
    for item in chapters:
        path = item.get("path")
        if not path:
            continue
        if previous is not None:
            found = target.find(base, path, item, previous)
            if found is not None:
                return found
        previous = item
    return None


def _html_link(path: str) -> str:
    pure = PurePath(path)
    if pure.name:
        pure = pure.with_suffix(".html")
    return str(pure).replace("\\", "/")


def link_context(chapter: Mapping[str, str], base_path: str) -> dict[str, str]:
    """Return the template values for a link to ``chapter`` from ``base_path``."""
    base = _clean_base_path(base_path)
    if "name" not in chapter:
        raise NavigationError("No title found for chapter in JSON data")
    if "path" not in chapter:
        raise NavigationError("No path found for chapter in JSON data")
    return {
        "path_to_root": path_to_root(base),
        "title": chapter["name"],
        "link": _html_link(chapter["path"]),
    }


def previous_chapter(
    chapters: Sequence[Mapping[str, str]], base_path: str
) -> dict[str, str] | None:
    """Link values for the chapter before ``base_path``, or None at the start."""
    found = find_chapter(chapters, base_path, Target.PREVIOUS)
    return None if found is None else link_context(found, base_path)


def next_chapter(
    chapters: Sequence[Mapping[str, str]], base_path: str
) -> dict[str, str] | None:
    """Link values for the chapter after ``base_path``, or None at the end."""
    found = find_chapter(chapters, base_path, Target.NEXT)
    return None if found is None else link_context(found, base_path)