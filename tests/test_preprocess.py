import io
import json
import logging
import shlex
import sys
from pathlib import Path, PurePath

import pytest

from quillbook.preprocess import (
    CmdPreprocessor,
    IndexPreprocessor,
    PreprocessError,
    PreprocessorContext,
    is_readme_file,
)

SCRIPT = """
import json, sys
if len(sys.argv) > 2 and sys.argv[1] == "supports":
    sys.exit(1 if sys.argv[2] == "not-supported" else 0)
ctx, book = json.load(sys.stdin)
options = ctx["config"].get("preprocessor", {}).get("nop", {})
if options.get("blow-up"):
    sys.exit(1)
if options.get("garbage"):
    sys.stdout.write("not json at all")
    sys.exit(0)
for section in book["sections"]:
    section["content"] = section["content"].upper()
json.dump(book, sys.stdout)
"""


def sample_book():
    return {
        "sections": [
            {"name": "Intro", "content": "hello", "path": "intro.md", "sub_items": []},
            {"name": "First", "content": "world", "path": "first/README.md", "sub_items": []},
        ]
    }


@pytest.fixture
def script_cmd(tmp_path):
    script = tmp_path / "nop.py"
    script.write_text(SCRIPT, encoding="utf-8")
    return f"{shlex.quote(sys.executable)} {shlex.quote(str(script))}"


def make_ctx(tmp_path, config=None):
    return PreprocessorContext(tmp_path, config or {}, "some-renderer")


@pytest.mark.parametrize(
    "path",
    [
        "path/to/Readme.md",
        "path/to/README.md",
        "path/to/rEaDmE.md",
        "path/to/README.markdown",
        "path/to/README",
    ],
)
def test_file_stem_matches_readme_case_insensitively(path):
    assert is_readme_file(path) is True


def test_readme_prefix_is_not_readme():
    assert is_readme_file("path/to/README-README.md") is False


def test_round_trip_write_and_parse_input(tmp_path):
    cmd = CmdPreprocessor("test", "test")
    ctx = make_ctx(tmp_path, {"book": {"title": "Dummy"}})
    book = sample_book()

    buffer = io.StringIO()
    cmd.write_input(buffer, book, ctx)
    buffer.seek(0)
    got_ctx, got_book = CmdPreprocessor.parse_input(buffer)

    assert got_book == book
    assert got_ctx == ctx


def test_parse_input_rejects_garbage():
    with pytest.raises(PreprocessError, match="Unable to parse the input"):
        CmdPreprocessor.parse_input(io.StringIO("{not json"))


def test_context_to_json(tmp_path):
    ctx = PreprocessorContext(tmp_path, {"a": 1}, "html", "1.0")
    assert ctx.to_json() == {
        "root": str(tmp_path),
        "config": {"a": 1},
        "renderer": "html",
        "mdbook_version": "1.0",
    }


def test_command_splits_words():
    cmd = CmdPreprocessor("x", "python 'some script.py' --flag")
    assert cmd.command() == ["python", "some script.py", "--flag"]


def test_empty_command_is_an_error():
    with pytest.raises(PreprocessError, match="Command string was empty"):
        CmdPreprocessor("x", "   ").command()


def test_run_processes_book(tmp_path, script_cmd):
    cmd = CmdPreprocessor("nop", script_cmd)
    got = cmd.run(make_ctx(tmp_path), sample_book())
    assert [s["content"] for s in got["sections"]] == ["HELLO", "WORLD"]


def test_run_fails_when_preprocessor_blows_up(tmp_path, script_cmd):
    cmd = CmdPreprocessor("nop", script_cmd)
    ctx = make_ctx(tmp_path, {"preprocessor": {"nop": {"blow-up": True}}})
    with pytest.raises(PreprocessError, match="exited unsuccessfully"):
        cmd.run(ctx, sample_book())


def test_run_fails_on_unparsable_output(tmp_path, script_cmd):
    cmd = CmdPreprocessor("nop", script_cmd)
    ctx = make_ctx(tmp_path, {"preprocessor": {"nop": {"garbage": True}}})
    with pytest.raises(PreprocessError, match="Unable to parse the preprocessed book"):
        cmd.run(ctx, sample_book())


def test_run_with_missing_program(tmp_path):
    cmd = CmdPreprocessor("missing", "trduyvbhijnorgevfuhn")
    with pytest.raises(PreprocessError, match="Is it installed"):
        cmd.run(make_ctx(tmp_path), sample_book())


def test_supports_whatever(script_cmd):
    assert CmdPreprocessor("nop", script_cmd).supports_renderer("whatever") is True


def test_doesnt_support_not_supported(script_cmd):
    assert CmdPreprocessor("nop", script_cmd).supports_renderer("not-supported") is False


def test_missing_program_supports_nothing():
    assert CmdPreprocessor("missing", "trduyvbhijnorgevfuhn").supports_renderer("html") is False


def test_empty_command_supports_nothing():
    assert CmdPreprocessor("empty", "").supports_renderer("html") is False


def test_index_renames_readme(tmp_path):
    pre = IndexPreprocessor()
    assert pre.rename_chapter_path("first/README.md", tmp_path) == PurePath("first/index.md")
    assert pre.rename_chapter_path("first/other.md", tmp_path) == PurePath("first/other.md")


def test_index_warns_on_conflict(tmp_path, caplog):
    (tmp_path / "first").mkdir()
    (tmp_path / "first" / "index.md").write_text("x", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        got = IndexPreprocessor().rename_chapter_path("first/README.md", tmp_path)
    assert got == PurePath("first/index.md")
    assert "both" in caplog.text


def test_index_run_renames_nested_chapters(tmp_path):
    book = sample_book()
    book["sections"][0]["sub_items"].append(
        {"name": "Sub", "content": "", "path": "intro/readme.md", "sub_items": []}
    )
    got = IndexPreprocessor().run(make_ctx(tmp_path), book)
    paths = [
        got["sections"][0]["path"],
        got["sections"][0]["sub_items"][0]["path"],
        got["sections"][1]["path"],
    ]
    assert paths == [
        "intro.md",
        str(Path("intro/index.md")),
        str(Path("first/index.md")),
    ]


def test_default_preprocessor_name_and_support():
    pre = IndexPreprocessor()
    assert pre.name == "index"
    assert pre.supports_renderer("anything") is True


def test_written_input_is_a_pair(tmp_path):
    buffer = io.StringIO()
    CmdPreprocessor("t", "t").write_input(buffer, {"sections": []}, make_ctx(tmp_path))
    data = json.loads(buffer.getvalue())
    assert data[1] == {"sections": []}
    assert data[0]["renderer"] == "some-renderer"