"""The table of contents shown in the sidebar of every page."""

from __future__ import annotations

from pathlib import PurePath
from typing import Mapping, Sequence

from markdown_it import MarkdownIt

from quillbook.fsutil import path_to_root

_NAME_PARSER = MarkdownIt("commonmark")
_NAME_TOKENS = {"text", "code_inline", "html_inline"}


def _check_chapters(chapters: Sequence[Mapping[str, str]]) -> None:
    if not isinstance(chapters, (list, tuple)) or not all(
        isinstance(item, Mapping)
        and all(isinstance(k, str) and isinstance(v, str) for k, v in item.items())
        for item in chapters
    ):
        raise ValueError("Could not decode the JSON data")


def _html_link(path: str) -> str:
    return str(PurePath(path).with_suffix(".html")).replace("\\", "/")


def _render_name(name: str) -> str:
    """Render only the text, inline code and inline HTML of a chapter name."""
    kept = [
        child
        for token in _NAME_PARSER.parse(name)
        if token.type == "inline" and token.children
        for child in token.children
        if child.type in _NAME_TOKENS
    ]
    return _NAME_PARSER.renderer.renderInline(kept, _NAME_PARSER.options, {})


def render_toc(
    chapters: Sequence[Mapping[str, str]], current: str, no_section_label: bool = False
) -> str:
    """Render the chapter list as nested ``<ol>`` HTML.

    ``current`` is the path of the page being rendered; its entry is marked
    active and links are made relative to it.
    """
    _check_chapters(chapters)
    if not isinstance(current, str):
        raise TypeError("Type error for `path`, string expected")
    current = current.replace('"', "")

    out = ['<ol class="chapter">']
    current_level = 1

    for item in chapters:
        if "spacer" in item:
            out.append('<li class="spacer"></li>')
            continue

        section = item.get("section")
        level = section.count(".") if section is not None else 1

        if level > current_level:
            while level > current_level:
                out.append('<li><ol class="section">')
                current_level += 1
            out.append("<li>")
        elif level < current_level:
            while level < current_level:
                out.append("</ol></li>")
                current_level -= 1
            out.append("<li>")
        else:
            out.append("<li>" if section is not None else '<li class="affix">')

        path = item.get("path")
        has_link = bool(path)
        if has_link:
            active = ' class="active"' if path == current else ""
            out.append(f'<a href="{path_to_root(current)}{_html_link(path)}"{active}>')

        if not no_section_label and section is not None:
            out.append(f'<strong aria-hidden="true">{section}</strong> ')

        name = item.get("name")
        if name is not None:
            out.append(_render_name(name))

        if has_link:
            out.append("</a>")
        out.append("</li>")

    while current_level > 1:
        out.append("</ol></li>")
        current_level -= 1

    out.append("</ol>")
    return "".join(out)