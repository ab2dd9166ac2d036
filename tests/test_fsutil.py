import os

import pytest

from quillbook.fsutil import (
    copy_files_except_ext,
    create_file,
    normalize_path,
    path_to_root,
    remove_dir_content,
    write_file,
)


def test_copy_files_except_ext(tmp_path):
    for name in ("file.txt", "file.md", "file.png"):
        (tmp_path / name).touch()
    (tmp_path / "sub_dir").mkdir()
    (tmp_path / "sub_dir" / "file.png").touch()
    (tmp_path / "sub_dir_exists").mkdir()
    (tmp_path / "sub_dir_exists" / "file.txt").touch()
    (tmp_path / "output").mkdir()
    (tmp_path / "output" / "sub_dir_exists").mkdir()

    copy_files_except_ext(tmp_path, tmp_path / "output", True, ["md"])

    assert (tmp_path / "output" / "file.txt").exists()
    assert not (tmp_path / "output" / "file.md").exists()
    assert (tmp_path / "output" / "file.png").exists()
    assert (tmp_path / "output" / "sub_dir" / "file.png").exists()
    assert (tmp_path / "output" / "sub_dir_exists" / "file.txt").exists()
    assert not (tmp_path / "output" / "output").exists()


def test_copy_non_recursive_skips_directories(tmp_path):
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    (src / "inner").mkdir(parents=True)
    (src / "inner" / "a.txt").write_text("x")
    (src / "b.txt").write_text("hello")
    dst.mkdir()

    copy_files_except_ext(src, dst, False, [])

    assert (dst / "b.txt").read_text() == "hello"
    assert not (dst / "inner").exists()


def test_copy_to_itself_does_nothing(tmp_path):
    (tmp_path / "a.txt").write_text("a")
    copy_files_except_ext(tmp_path, tmp_path, True, [])
    assert sorted(p.name for p in tmp_path.iterdir()) == ["a.txt"]


def test_path_to_root_example():
    assert path_to_root("some/relative/path") == "../../"


@pytest.mark.parametrize(
    ("path", "expected"),
    [("print.md", ""), ("first/index.md", "../"), ("two.path", "")],
)
def test_path_to_root_values(path, expected):
    assert path_to_root(path) == expected


def test_path_to_root_empty_path_raises():
    with pytest.raises(ValueError):
        path_to_root("")


def test_normalize_path_keeps_forward_slashes():
    assert normalize_path("a/b/c.html") == "a/b/c.html"


def test_normalize_path_replaces_native_separator():
    assert normalize_path(os.sep.join(["a", "b"])) == "a/b"


def test_write_file_creates_directories(tmp_path):
    write_file(tmp_path, "css/deep/general.css", b"body {}")
    assert (tmp_path / "css" / "deep" / "general.css").read_bytes() == b"body {}"


def test_create_file_returns_writable_handle(tmp_path):
    target = tmp_path / "x" / "y.bin"
    with create_file(target) as handle:
        handle.write(b"\x00\x01")
    assert target.read_bytes() == b"\x00\x01"


def test_remove_dir_content_keeps_directory(tmp_path):
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.txt").write_text("b")

    remove_dir_content(tmp_path)

    assert tmp_path.is_dir()
    assert list(tmp_path.iterdir()) == []


def test_remove_dir_content_missing_directory_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        remove_dir_content(tmp_path / "nope")