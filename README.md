# quillbook

Building blocks for turning a directory of Markdown chapters into an HTML
book: include-directive expansion, README-to-index renaming, Markdown
rendering with link fixing, header anchors, playpen code blocks, a table of
contents, navigation links, and a JSON protocol for handing a book to
external preprocessors and renderers.

## Installation

```
pip install quillbook
```

For running the test suite:

```
pip install "quillbook[test]"
```

## Including files in chapters

Chapters can pull in other files with `{{#include ...}}` and
`{{#playpen ...}}` directives:

```
{{#include file.rs}}          the whole file
{{#include file.rs:10}}       only line 10
{{#include file.rs:10:20}}    lines 10 to 20
{{#include file.rs:10:}}      from line 10 to the end
{{#include file.rs::20}}      up to line 20
{{#include file.rs:anchor}}   lines between ANCHOR: anchor and ANCHOR_END: anchor
{{#playpen example.rs editable}}
\{{#include file.rs}}         escaped, left as written
```

```python
from quillbook.links import replace_all

expanded = replace_all(chapter_text, "src/first", "first/chapter.md", 0)
```

Includes are expanded recursively, up to a nesting depth of ten. A directive
whose file cannot be read is logged and left in the text as written.

Parsing only, without touching the file system:

```python
from quillbook.linkparse import find_links, parse_include_path

for link in find_links(text):
    print(link.kind, link.start_index, link.end_index, link.link_text)
```

The line selection itself is in `quillbook.textlines`: `take_lines(text,
start, end)` and `take_anchored_lines(text, anchor)`.

## Preprocessing a book

Preprocessors work on a book in its JSON form: nested dicts and lists in
which every chapter is a dict with a `"path"` and a `"content"` string.

- `IndexPreprocessor` renames `README.md` chapters (any letter case, any
  extension) to `index.md`.
- `LinkPreprocessor` in `quillbook.links` expands the directives above in
  every chapter.
- `CmdPreprocessor(name, cmd)` runs an external command, writes
  `[context, book]` as JSON to its standard input and reads the processed
  book back from its standard output; a non-zero exit status raises
  `PreprocessError`. Its `supports_renderer(renderer)` runs
  `<command> supports <renderer>` and returns whether it exited with
  status 0. A command that is itself a preprocessor can read its input with
  `CmdPreprocessor.parse_input(sys.stdin)`.

```python
from quillbook.preprocess import IndexPreprocessor, PreprocessorContext
from quillbook.links import LinkPreprocessor

ctx = PreprocessorContext(root="my-book", config={"book": {"src": "src"}})
book = {"sections": [{"path": "README.md", "content": "{{#include a.txt}}"}]}
for preprocessor in (IndexPreprocessor(), LinkPreprocessor()):
    book = preprocessor.run(ctx, book)
```

## Rendering Markdown

```python
from quillbook.markdown import render_markdown, id_from_content

render_markdown("[example](example.md)", False)
# '<p><a href="example.html">example</a></p>\n'

render_markdown("'one'", True)   # curly quotes outside code
id_from_content("## Method-call expressions")
# 'method-call-expressions'
```

Tables, strikethrough and task lists are enabled. `render_markdown_with_path`
also prefixes relative links with the directory of the given page, as needed
for a single print page.

`build_header_links` in `quillbook.headers` adds a unique anchor to every
heading of a rendered page. `post_process` in `quillbook.postprocess` does
that too, turns comma-separated code-block classes into space-separated ones
and wraps runnable Rust code in playpen blocks, injecting a `fn main` where
the code has none.

## Table of contents and navigation

```python
from quillbook.toc import render_toc
from quillbook.navigation import previous_chapter, next_chapter

chapters = [
    {"name": "one", "path": "one.md", "section": "1."},
    {"name": "two", "path": "two.md", "section": "2."},
]
html = render_toc(chapters, "one.md", False)
next_chapter(chapters, "one.md")
# {'path_to_root': '', 'title': 'two', 'link': 'two.html'}
previous_chapter(chapters, "one.md")
# None
```

`theme_option(name, default_theme)` in `quillbook.theme_option` gives the
label for a theme picker entry, marked `(default)` for the default theme.

## External renderers

`CmdRenderer(name, cmd)` in `quillbook.renderer` runs a command in the
output directory and writes the `RenderContext` as JSON to its standard
input. A command that cannot be found is reported as a warning and skipped;
a non-zero exit status raises `RenderError`.

```python
from quillbook.renderer import RenderContext

with open("context.json") as reader:
    ctx = RenderContext.from_json(reader)
print(ctx.source_dir())
```

## What this package does not do

quillbook has no command-line program and does not load a book on its own:
it does not read a `SUMMARY.md` or a configuration file, and the caller
builds the book data and the configuration dict. It has no built-in HTML
page renderer: there are no page templates, no default theme files, and no
search index. The helpers above produce the pieces of such pages; putting
them into complete HTML files is left to the caller or to an external
renderer run through `CmdRenderer`.