"""Building blocks for turning a tree of Markdown chapters into an HTML book.

Include expansion, README renaming, Markdown rendering, header anchors,
table of contents, navigation, and external preprocessors and renderers.
"""

__version__ = "0.1.0"