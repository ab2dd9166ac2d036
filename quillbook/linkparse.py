"""Finding ``{{#include}}`` and ``{{#playpen}}`` helpers in chapter text."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Union

ESCAPE_CHAR = "\\"

_USIZE_LIMIT = 2**64
_UNSIGNED = re.compile(r"\+?[0-9]+")

_LINK_RE = re.compile(
    r"""
    \\\{\{\#.*\}\}              # escaped link
    |
    \{\{\s*                     # opening braces and whitespace
    \#([a-zA-Z0-9]+)            # link type
    \s+                         # separating whitespace
    ([a-zA-Z0-9\s_.\-:/\\]+)    # target path and space separated properties
    \s*\}\}                     # whitespace and closing braces
    """,
    re.VERBOSE,
)


class LinkKind(enum.Enum):
    """The kind of helper a link stands for."""

    ESCAPED = "escaped"
    INCLUDE_RANGE = "include_range"
    INCLUDE_ANCHOR = "include_anchor"
    PLAYPEN = "playpen"


@dataclass(frozen=True)
class LineRange:
    """Zero-based lines ``start`` (inclusive) to ``end`` (exclusive).

    ``None`` leaves that side of the range open.
    """

    start: int | None = None
    end: int | None = None


IncludeTarget = tuple[LinkKind, Path, Union[LineRange, str]]


@dataclass(frozen=True)
class Link:
    """A helper found in a chapter, with its position in the text.

    Positions are character offsets into the searched string.
    """

    start_index: int
    end_index: int
    kind: LinkKind
    link_text: str
    path: Path | None = None
    line_range: LineRange | None = None
    anchor: str | None = None
    properties: tuple[str, ...] = ()

    def relative_path(self, base: str | Path) -> Path | None:
        """Directory of the linked file when resolved against ``base``.

        Escaped links point at no file and give None.
        """
        if self.kind is LinkKind.ESCAPED or self.path is None:
            return None
        joined = Path(base) / self.path
        if joined == joined.parent and joined.anchor:
            raise ValueError("Included file should not be /")
        return joined.parent


def _parse_usize(text: str) -> int | None:
    if not _UNSIGNED.fullmatch(text):
        return None
    value = int(text)
    return value if value < _USIZE_LIMIT else None


def parse_include_path(path: str) -> IncludeTarget:
    """Split ``file:start:end`` or ``file:anchor`` into the include it describes.

    Returns ``(kind, file, detail)`` where ``detail`` is a :class:`LineRange`
    for ranged includes and the anchor name for anchored ones. Line numbers
    are one-based in the text and zero-based in the result.
    """
    parts = path.split(":", 3)
    file_path = Path(parts[0])
    start_text = parts[1] if len(parts) > 1 else None
    end_text = parts[2] if len(parts) > 2 else None

    start: int | None = None
    if start_text is not None and start_text != "":
        value = _parse_usize(start_text)
        if value is None:
            return LinkKind.INCLUDE_ANCHOR, file_path, start_text
        start = max(value - 1, 0)

    end = _parse_usize(end_text) if end_text is not None else None

    if start is not None:
        if end_text is None:
            line_range = LineRange(start, start + 1)
        else:
            line_range = LineRange(start, end)
    else:
        line_range = LineRange(None, end)
    return LinkKind.INCLUDE_RANGE, file_path, line_range


def _link_from_match(match: re.Match[str]) -> Link | None:
    kind_name, rest = match.group(1), match.group(2)
    text = match.group(0)
    common = {"start_index": match.start(), "end_index": match.end(), "link_text": text}

    if kind_name is not None and rest is not None:
        words = rest.split()
        if not words:
            return None
        file_arg, properties = words[0], tuple(words[1:])
        if kind_name == "include":
            kind, file_path, detail = parse_include_path(file_arg)
            if isinstance(detail, LineRange):
                return Link(kind=kind, path=file_path, line_range=detail, **common)
            return Link(kind=kind, path=file_path, anchor=detail, **common)
        if kind_name == "playpen":
            return Link(
                kind=LinkKind.PLAYPEN, path=Path(file_arg), properties=properties, **common
            )
        return None

    if text.startswith(ESCAPE_CHAR):
        return Link(kind=LinkKind.ESCAPED, **common)
    return None


def find_links(contents: str) -> Iterator[Link]:
    """Yield every recognised helper in ``contents``, in order."""
    for match in _LINK_RE.finditer(contents):
        link = _link_from_match(match)
        if link is not None:
            yield link