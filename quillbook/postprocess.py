"""Final touches applied to every rendered HTML page."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

from quillbook.headers import build_header_links

log = logging.getLogger(__name__)

_CODE_CLASS = re.compile(r'<code([^>]+)class="([^"]+)"([^>]*)>')
_CODE_BLOCK = re.compile(r'(<code[^>]?class="([^"]+)".*?>(.*?)</code>)', re.DOTALL)

_MAIN_TEMPLATE = (
    '<pre class="playpen"><code class="{classes}">\n'
    "# #![allow(unused_variables)]\n"
    "{attrs}#fn main() {{\n{code}#}}</code></pre>"
)


@dataclass(frozen=True)
class PlaypenConfig:
    """Settings for runnable code blocks on the rendered pages."""

    editable: bool = False
    copy_js: bool = True


def _lines(text: str) -> list[str]:
    if not text:
        return []
    parts = text.split("\n")
    if text.endswith("\n"):
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def fix_code_blocks(html: str) -> str:
    """Replace the commas in code block classes by spaces.

    ``rust,should_panic`` annotations thereby become separate HTML classes.
    """

    def _replace(match: re.Match[str]) -> str:
        before, classes, after = match.group(1), match.group(2), match.group(3)
        return f'<code{before}class="{classes.replace(",", " ")}"{after}>'

    return _CODE_CLASS.sub(_replace, html)


def partition_source(source: str) -> tuple[str, str]:
    """Split code into its leading header (blank and ``#![`` lines) and the rest.

    Every line of either part ends with a newline.
    """
    before: list[str] = []
    after: list[str] = []
    after_header = False

    for line in _lines(source):
        trimmed = line.strip()
        is_header = trimmed == "" or trimmed.startswith("#![")
        if not is_header or after_header:
            after_header = True
            after.append(line + "\n")
        else:
            before.append(line + "\n")

    return "".join(before), "".join(after)


def add_playpen_pre(html: str, playpen_config: PlaypenConfig) -> str:
    """Wrap runnable Rust code blocks in a playpen ``<pre>``.

    Blocks without a ``fn main`` get one injected around their body.
    """

    def _replace(match: re.Match[str]) -> str:
        text, classes, code = match.group(1), match.group(2), match.group(3)

        runnable = (
            "language-rust" in classes
            and "ignore" not in classes
            and "noplaypen" not in classes
        ) or "mdbook-runnable" in classes
        if not runnable:
            return text

        if (
            (playpen_config.editable and "editable" in classes)
            or "fn main" in text
            or "quick_main!" in text
        ):
            return f'<pre class="playpen">{text}</pre>'

        attrs, body = partition_source(code)
        return _MAIN_TEMPLATE.format(classes=classes, attrs=attrs, code=body)

    return _CODE_BLOCK.sub(_replace, html)


def post_process(rendered: str, playpen_config: PlaypenConfig) -> str:
    """Add header anchors, split code block classes and wrap playpen code."""
    rendered = build_header_links(rendered)
    rendered = fix_code_blocks(rendered)
    return add_playpen_pre(rendered, playpen_config)


def maybe_wrong_theme_dir(directory: str | os.PathLike) -> bool:
    """Whether ``directory`` looks like a theme directory placed inside the sources.

    It does when it exists and holds no Markdown files directly.
    """
    path = Path(directory)
    if not path.is_dir():
        return False

    with os.scandir(path) as entries:
        for entry in entries:
            try:
                is_file = entry.is_file(follow_symlinks=False)
            except OSError:
                continue
            if is_file and Path(entry.name).suffix == ".md":
                return False
    return True