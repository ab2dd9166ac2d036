"""Expanding ``{{#include}}`` and ``{{#playpen}}`` helpers in chapters."""

from __future__ import annotations

import logging
from pathlib import Path, PurePath
from typing import Any

from quillbook.linkparse import Link, LinkKind, find_links
from quillbook.preprocess import (
    PreprocessError,
    Preprocessor,
    PreprocessorContext,
    _iter_chapters,
    _source_dir,
)
from quillbook.textlines import take_anchored_lines, take_lines

log = logging.getLogger(__name__)

MAX_LINK_NESTED_DEPTH = 10


def _read(link: Link, target: Path) -> str:
    try:
        with open(target, encoding="utf-8", newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise PreprocessError(
            f"Could not read file for link {link.link_text} ({target})"
        ) from exc


def render_link(link: Link, base: str | Path) -> str:
    """Return the text that replaces ``link``, reading files relative to ``base``."""
    if link.kind is LinkKind.ESCAPED:
        return link.link_text[1:]

    target = Path(base) / link.path
    contents = _read(link, target)

    if link.kind is LinkKind.INCLUDE_RANGE:
        line_range = link.line_range
        return take_lines(contents, line_range.start, line_range.end)
    if link.kind is LinkKind.INCLUDE_ANCHOR:
        return take_anchored_lines(contents, link.anchor)

    ftype = "rust," if link.properties else "rust"
    return f"```{ftype}{','.join(link.properties)}\n{contents}\n```\n"


def replace_all(
    text: str, path: str | Path, source: str | PurePath, depth: int = 0
) -> str:
    """Expand every helper in ``text``, following included files up to a fixed depth.

    A helper whose file cannot be read is left in the text as written.
    """
    pieces: list[str] = []
    previous_end = 0

    for link in find_links(text):
        pieces.append(text[previous_end:link.start_index])
        try:
            new_content = render_link(link, path)
        except PreprocessError as exc:
            log.error('Error updating "%s", %s', link.link_text, exc)
            if exc.__cause__ is not None:
                log.warning("Caused By: %s", exc.__cause__)
            previous_end = link.start_index
            continue

        if depth < MAX_LINK_NESTED_DEPTH:
            rel_path = link.relative_path(path)
            if rel_path is not None:
                pieces.append(replace_all(new_content, rel_path, source, depth + 1))
            else:
                pieces.append(new_content)
        else:
            log.error("Stack depth exceeded in %s. Check for cyclic includes", source)
        previous_end = link.end_index

    pieces.append(text[previous_end:])
    return "".join(pieces)


class LinkPreprocessor(Preprocessor):
    """Expands the include and playpen helpers of every chapter."""

    name = "links"

    def process_chapter(
        self, content: str, chapter_path: str | PurePath, src_dir: str | Path
    ) -> str:
        """Expand the helpers in one chapter stored at ``chapter_path`` under ``src_dir``."""
        chapter_path = PurePath(chapter_path)
        if str(chapter_path) in ("", "."):
            raise ValueError("All book items have a parent")
        base = Path(src_dir) / chapter_path.parent
        return replace_all(content, base, chapter_path, 0)

    def run(self, ctx: PreprocessorContext, book: Any) -> Any:
        src_dir = _source_dir(ctx)
        for chapter in _iter_chapters(book):
            chapter["content"] = self.process_chapter(
                chapter["content"], chapter["path"], src_dir
            )
        return book