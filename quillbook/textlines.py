"""Selecting lines from text, by position or between named anchors."""

from __future__ import annotations

import re

_ANCHOR_START = re.compile(r"ANCHOR:\s*(?P<anchor_name>[\w_-]+)")
_ANCHOR_END = re.compile(r"ANCHOR_END:\s*(?P<anchor_name>[\w_-]+)")


def _lines(text: str) -> list[str]:
    """Split on newlines, dropping a trailing carriage return on each line.

    A final newline does not start an extra empty line.
    """
    if not text:
        return []
    parts = text.split("\n")
    if text.endswith("\n"):
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def take_lines(text: str, start: int | None = None, end: int | None = None) -> str:
    """Return the lines ``start`` (inclusive) to ``end`` (exclusive), joined by newlines.

    ``None`` for either bound leaves that side open.
    """
    first = start or 0
    lines = _lines(text)[first:]
    if end is not None:
        lines = lines[: max(end - first, 0)]
    return "\n".join(lines)


def take_anchored_lines(text: str, anchor: str) -> str:
    """Return the lines between ``ANCHOR: name`` and ``ANCHOR_END: name``.

    Lines that hold other anchor markers are left out.
    """
    retained: list[str] = []
    anchor_found = False

    for line in _lines(text):
        if anchor_found:
            end_match = _ANCHOR_END.search(line)
            if end_match is not None:
                if end_match["anchor_name"] == anchor:
                    break
            elif not _ANCHOR_START.search(line):
                retained.append(line)
        else:
            start_match = _ANCHOR_START.search(line)
            if start_match is not None and start_match["anchor_name"] == anchor:
                anchor_found = True

    return "\n".join(retained)