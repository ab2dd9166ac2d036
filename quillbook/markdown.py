"""Markdown rendering and the text helpers that go with it."""

from __future__ import annotations

import logging
import os
import re
from typing import Iterable

from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore
from markdown_it.token import Token

log = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s\s+")
_SCHEME_LINK = re.compile(r"^[a-z][a-z0-9+.-]*:")
_MD_LINK = re.compile(r"(?P<link>.*)\.md(?P<anchor>#.*)?")
_HTML_LINK = re.compile(r'(<(?:a|img) [^>]*?(?:src|href)=")([^"]+?)"')
_TASK_MARKER = re.compile(r"\[([ xX])\][ \t]+")

_STRIPPED_MARKUP = (
    "<em>",
    "</em>",
    "<code>",
    "</code>",
    "<strong>",
    "</strong>",
    "&lt;",
    "&gt;",
    "&amp;",
    "&#39;",
    "&quot;",
)


def collapse_whitespace(text: str) -> str:
    """Replace each run of two or more whitespace characters with one space."""
    return _WHITESPACE_RUN.sub(" ", text)


def normalize_id(content: str) -> str:
    """Turn ``content`` into an HTML element id without any whitespace."""
    chars = []
    for ch in content:
        if ch.isalnum() or ch in "_-":
            chars.append(ch.lower() if ch.isascii() else ch)
        elif ch.isspace():
            chars.append("-")
    return "".join(chars)


def id_from_content(content: str) -> str:
    """Derive an anchor id from header content, ignoring simple markup."""
    for sub in _STRIPPED_MARKUP:
        content = content.replace(sub, "")
    trimmed = content.strip().lstrip("#").strip()
    return normalize_id(trimmed)


def _task_lists(state: StateCore) -> None:
    """Turn a leading ``[ ]`` or ``[x]`` in a list item into a checkbox."""
    tokens = state.tokens
    for index, token in enumerate(tokens):
        if token.type != "inline" or index < 2 or not token.children:
            continue
        if tokens[index - 1].type != "paragraph_open":
            continue
        if tokens[index - 2].type != "list_item_open":
            continue
        first = token.children[0]
        if first.type != "text":
            continue
        match = _TASK_MARKER.match(first.content)
        if match is None:
            continue
        checked = ' checked=""' if match.group(1) in "xX" else ""
        checkbox = Token("html_inline", "", 0)
        checkbox.content = f'<input disabled="" type="checkbox"{checked}/>\n'
        first.content = first.content[match.end():]
        token.children.insert(0, checkbox)


def new_cmark_parser() -> MarkdownIt:
    """Return a Markdown parser with tables, strikethrough and task lists enabled."""
    parser = MarkdownIt("commonmark").enable(["table", "strikethrough"])
    parser.core.ruler.push("task_lists", _task_lists)
    return parser


_PARSER = new_cmark_parser()


def _fix_link(dest: str, path: str | os.PathLike | None) -> str:
    if dest.startswith("#"):
        if path is None:
            return dest
        base = os.fspath(path)
        if base.endswith(".md"):
            base = base[:-3] + ".html"
        return base + dest

    if _SCHEME_LINK.match(dest):
        return dest

    fixed = ""
    if path is not None:
        raw = os.fspath(path)
        if not raw:
            raise ValueError("path can't be empty")
        base = os.path.dirname(raw)
        if base:
            fixed = base + "/"

    match = _MD_LINK.search(dest)
    if match is not None:
        fixed += match["link"] + ".html" + (match["anchor"] or "")
    else:
        fixed += dest
    return fixed


def _fix_html(html: str, path: str | os.PathLike | None) -> str:
    return _HTML_LINK.sub(lambda m: f'{m.group(1)}{_fix_link(m.group(2), path)}"', html)


def _adjust_inline(
    children: Iterable[Token], path: str | os.PathLike | None, curly_quotes: bool
) -> None:
    for child in children:
        if child.type == "link_open":
            href = child.attrGet("href")
            if isinstance(href, str):
                child.attrSet("href", _fix_link(href, path))
        elif child.type == "image":
            src = child.attrGet("src")
            if isinstance(src, str):
                child.attrSet("src", _fix_link(src, path))
        elif child.type == "html_inline":
            child.content = _fix_html(child.content, path)
        elif child.type == "text" and curly_quotes:
            child.content = convert_quotes_to_curly(child.content)
        if child.children:
            _adjust_inline(child.children, path, curly_quotes)


def render_markdown_with_path(
    text: str, curly_quotes: bool, path: str | os.PathLike | None = None
) -> str:
    """Render Markdown to HTML, rewriting links relative to ``path``.

    Links to ``.md`` files become ``.html``. When ``path`` is given (as for
    the print page), relative links are prefixed with its directory and
    fragment-only links point at its page.
    """
    tokens = _PARSER.parse(text)
    for token in tokens:
        if token.type in ("fence", "code_block"):
            token.info = "".join(ch for ch in token.info if not ch.isspace())
        elif token.type == "html_block":
            token.content = _fix_html(token.content, path)
        elif token.type == "inline" and token.children:
            _adjust_inline(token.children, path, curly_quotes)
    return _PARSER.renderer.render(tokens, _PARSER.options, {})


def render_markdown(text: str, curly_quotes: bool) -> str:
    """Render Markdown to HTML for an ordinary page."""
    return render_markdown_with_path(text, curly_quotes, None)


def convert_quotes_to_curly(text: str) -> str:
    """Replace straight quotes by opening or closing curly ones.

    A quote after whitespace (or at the start) opens; any other closes.
    """
    preceded_by_whitespace = True
    converted = []
    for ch in text:
        if ch == "'":
            converted.append("\u2018" if preceded_by_whitespace else "\u2019")
        elif ch == '"':
            converted.append("\u201c" if preceded_by_whitespace else "\u201d")
        else:
            converted.append(ch)
        preceded_by_whitespace = ch.isspace()
    return "".join(converted)


def _cause_of(error: BaseException) -> BaseException | None:
    if error.__cause__ is not None:
        return error.__cause__
    if error.__context__ is not None and not error.__suppress_context__:
        return error.__context__
    return None


def log_error_chain(error: BaseException) -> list[str]:
    """Log ``error`` and each exception that caused it; return the lines logged."""
    lines = [f"Error: {error}"]
    seen = {id(error)}
    cause = _cause_of(error)
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        lines.append(f"\tCaused By: {cause}")
        cause = _cause_of(cause)
    for line in lines:
        log.error("%s", line)
    return lines