"""Renderers, which turn a loaded book into output, and the context they are given."""

from __future__ import annotations

import abc
import json
import logging
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, IO

log = logging.getLogger(__name__)

_CALLER_VERSION = "0.3.1"


class RenderError(Exception):
    """Raised when a renderer cannot produce its output."""


@dataclass
class RenderContext:
    """Everything a renderer needs to know about the book it renders."""

    root: Path
    book: Any
    config: dict[str, Any] = field(default_factory=dict)
    destination: Path = Path("book")
    version: str = _CALLER_VERSION

    def __post_init__(self) -> None:
        self.root = Path(self.root)
        self.destination = Path(self.destination)

    def source_dir(self) -> Path:
        """The directory holding the book's sources."""
        book_table = self.config.get("book") or {}
        return self.root / book_table.get("src", "src")

    @staticmethod
    def from_json(reader: IO[Any]) -> RenderContext:
        """Load a context from the JSON read from ``reader``."""
        try:
            raw = json.load(reader)
            return RenderContext(
                root=Path(raw["root"]),
                book=raw["book"],
                config=raw["config"],
                destination=Path(raw["destination"]),
                version=raw["version"],
            )
        except (ValueError, TypeError, KeyError) as exc:
            raise RenderError("Unable to deserialize the `RenderContext`") from exc

    def to_json(self) -> dict[str, Any]:
        """Return the context as plain JSON data."""
        return {
            "version": self.version,
            "root": str(self.root),
            "book": self.book,
            "config": self.config,
            "destination": str(self.destination),
        }


class Renderer(abc.ABC):
    """A backend that produces output from a book."""

    name: str

    @abc.abstractmethod
    def render(self, ctx: RenderContext) -> None:
        """Render the book described by ``ctx``."""


@dataclass
class CmdRenderer(Renderer):
    """A renderer run as an external command.

    The command is started in the destination directory and receives the
    render context as JSON on its stdin. A non-zero exit code means the
    rendering failed. A command that cannot be found is only warned about.
    """

    name: str
    cmd: str

    def compose_command(self) -> list[str]:
        """Split the command string into the program and its arguments."""
        try:
            words = shlex.split(self.cmd)
        except ValueError as exc:
            raise RenderError(f"Unable to parse the command {self.cmd!r}") from exc
        if not words:
            raise RenderError("Command string was empty")
        return words

    def render(self, ctx: RenderContext) -> None:
        log.info('Invoking the "%s" renderer', self.name)

        try:
            ctx.destination.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass

        args = self.compose_command()
        try:
            child = subprocess.Popen(args, stdin=subprocess.PIPE, cwd=ctx.destination)
        except FileNotFoundError:
            log.warning('The command wasn\'t found, is the "%s" backend installed?', self.name)
            log.warning("\tCommand: %s", self.cmd)
            return
        except OSError as exc:
            raise RenderError("Unable to start the backend") from exc

        payload = json.dumps(ctx.to_json()).encode("utf-8")
        try:
            child.stdin.write(payload)
        except OSError as exc:
            log.warning("Error writing the RenderContext to the backend, %s", exc)
        finally:
            try:
                child.stdin.close()
            except OSError:
                pass

        status = child.wait()
        log.debug("%s exited with status: %r", self.cmd, status)

        if status != 0:
            log.error("Renderer exited with non-zero return code.")
            raise RenderError(f'The "{self.name}" renderer failed')