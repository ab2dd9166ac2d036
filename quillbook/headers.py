"""Anchor links for the headers of rendered HTML."""

from __future__ import annotations

import re

from quillbook.markdown import id_from_content

_HEADER = re.compile(r"<h(\d)>(.*?)</h\d>")


def insert_link_into_header(level: int, content: str, id_counter: dict[str, int]) -> str:
    """Wrap header ``content`` in a self-link with an id unique within ``id_counter``.

    Repeated ids get ``-1``, ``-2`` and so on appended; ``id_counter`` is updated.
    """
    raw_id = id_from_content(content)
    count = id_counter.get(raw_id, 0)
    header_id = raw_id if count == 0 else f"{raw_id}-{count}"
    id_counter[raw_id] = count + 1
    return (
        f'<h{level}><a class="header" href="#{header_id}" id="{header_id}">'
        f"{content}</a></h{level}>"
    )


def build_header_links(html: str) -> str:
    """Give every header in ``html`` an anchor so sections can be linked to."""
    id_counter: dict[str, int] = {}
    return _HEADER.sub(
        lambda m: insert_link_into_header(int(m.group(1)), m.group(2), id_counter), html
    )