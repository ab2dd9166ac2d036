"""Preprocessors that rework a book after it is loaded and before it is rendered.

A book is handled in its JSON form: nested mappings and lists in which every
chapter is a mapping holding a ``"path"`` and a ``"content"`` string.
"""

from __future__ import annotations

import abc
import io
import json
import logging
import re
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Any, Iterator, TextIO

log = logging.getLogger(__name__)

_CALLER_VERSION = "0.3.1"
_README = re.compile("readme", re.IGNORECASE)


class PreprocessError(Exception):
    """Raised when a preprocessor cannot do its work."""


@dataclass
class PreprocessorContext:
    """What a preprocessor is told about the book it is working on."""

    root: Path
    config: dict[str, Any] = field(default_factory=dict)
    renderer: str = "html"
    mdbook_version: str = _CALLER_VERSION

    def __post_init__(self) -> None:
        self.root = Path(self.root)

    def to_json(self) -> dict[str, Any]:
        """Return the context as plain JSON data."""
        return {
            "root": str(self.root),
            "config": self.config,
            "renderer": self.renderer,
            "mdbook_version": self.mdbook_version,
        }


def _source_dir(ctx: PreprocessorContext) -> Path:
    book_table = ctx.config.get("book") or {}
    return ctx.root / book_table.get("src", "src")


def _iter_chapters(node: Any) -> Iterator[dict[str, Any]]:
    """Yield every chapter mapping in a book, parents before their sub-items."""
    if isinstance(node, dict):
        if isinstance(node.get("path"), str) and isinstance(node.get("content"), str):
            yield node
        for value in list(node.values()):
            yield from _iter_chapters(value)
    elif isinstance(node, list):
        for item in node:
            yield from _iter_chapters(item)


class Preprocessor(abc.ABC):
    """An operation run on a book before it is handed to a renderer."""

    name: str

    @abc.abstractmethod
    def run(self, ctx: PreprocessorContext, book: Any) -> Any:
        """Return the book, updated by this preprocessor."""

    def supports_renderer(self, renderer: str) -> bool:
        """Whether this preprocessor should run for ``renderer``; always true here."""
        return True


def is_readme_file(path: str | PurePath) -> bool:
    """Whether the file stem of ``path`` is ``readme``, in any letter case."""
    return _README.fullmatch(PurePath(path).stem) is not None


def _warn_readme_name_conflict(readme_path: PurePath, index_path: Path) -> None:
    file_name = readme_path.name
    parent_dir = index_path.parent
    log.warning(
        "It seems that there are both %r and index.md under \"%s\".", file_name, parent_dir
    )
    log.warning("mdbook converts %r into index.html by default. It may cause", file_name)
    log.warning("unexpected behavior if putting both files under the same directory.")
    log.warning("To solve the warning, try to rearrange the book structure or disable")
    log.warning('"index" preprocessor to stop the conversion.')


class IndexPreprocessor(Preprocessor):
    """Renames ``README.md`` chapters to ``index.md``."""

    name = "index"

    def rename_chapter_path(self, path: str | PurePath, src_dir: str | Path) -> PurePath:
        """Return the path a chapter should have, warning if ``index.md`` already exists."""
        path = PurePath(path)
        if not is_readme_file(path):
            return path
        renamed = path.with_name("index.md")
        index_md = Path(src_dir) / renamed
        if index_md.exists():
            _warn_readme_name_conflict(path, index_md)
        return renamed

    def run(self, ctx: PreprocessorContext, book: Any) -> Any:
        src_dir = _source_dir(ctx)
        for chapter in _iter_chapters(book):
            chapter["path"] = str(self.rename_chapter_path(chapter["path"], src_dir))
        return book


@dataclass
class CmdPreprocessor(Preprocessor):
    """A preprocessor run as an external command.

    ``run`` sends ``[context, book]`` as JSON on the command's stdin and reads
    the processed book as JSON from its stdout. ``supports_renderer`` runs the
    command with ``supports <renderer>`` and treats exit code 0 as yes.
    """

    name: str
    cmd: str

    @staticmethod
    def parse_input(reader: TextIO) -> tuple[PreprocessorContext, Any]:
        """Read the ``[context, book]`` pair a preprocessor is given on stdin."""
        try:
            raw_ctx, book = json.load(reader)
            ctx = PreprocessorContext(
                root=Path(raw_ctx["root"]),
                config=raw_ctx["config"],
                renderer=raw_ctx["renderer"],
                mdbook_version=raw_ctx["mdbook_version"],
            )
        except (ValueError, TypeError, KeyError) as exc:
            raise PreprocessError("Unable to parse the input") from exc
        return ctx, book

    def write_input(self, writer: TextIO, book: Any, ctx: PreprocessorContext) -> None:
        """Write the ``[context, book]`` pair as JSON to ``writer``."""
        json.dump([ctx.to_json(), book], writer)

    def command(self) -> list[str]:
        """Split the command string into the program and its arguments."""
        try:
            words = shlex.split(self.cmd)
        except ValueError as exc:
            raise PreprocessError(f"Unable to parse the command {self.cmd!r}") from exc
        if not words:
            raise PreprocessError("Command string was empty")
        return words

    def run(self, ctx: PreprocessorContext, book: Any) -> Any:
        args = self.command()
        payload = io.StringIO()
        self.write_input(payload, book, ctx)

        try:
            completed = subprocess.run(
                args,
                input=payload.getvalue().encode("utf-8"),
                stdout=subprocess.PIPE,
                check=False,
            )
        except OSError as exc:
            raise PreprocessError(
                f'Unable to start the "{self.name}" preprocessor. Is it installed?'
            ) from exc

        log.debug("%s exited with output: %r", self.cmd, completed)
        if completed.returncode != 0:
            raise PreprocessError("The preprocessor exited unsuccessfully")

        try:
            return json.loads(completed.stdout)
        except ValueError as exc:
            raise PreprocessError("Unable to parse the preprocessed book") from exc

    def supports_renderer(self, renderer: str) -> bool:
        log.debug('Checking if the "%s" preprocessor supports "%s"', self.name, renderer)
        try:
            args = self.command()
        except PreprocessError as exc:
            log.warning(
                'Unable to create the command for the "%s" preprocessor, %s', self.name, exc
            )
            return False

        try:
            completed = subprocess.run(
                [*args, "supports", renderer], stdin=subprocess.DEVNULL, check=False
            )
        except FileNotFoundError:
            log.warning(
                'The command wasn\'t found, is the "%s" preprocessor installed?', self.name
            )
            log.warning("\tCommand: %s", self.cmd)
            return False
        except OSError:
            return False
        return completed.returncode == 0