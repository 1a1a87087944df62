import os

import pytest

from kingfisher.enumerator import (
    DirectoryResult,
    FileResult,
    FilesystemEnumerator,
    IgnoreMatcher,
)
from kingfisher.options import ContentFilteringArgs


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "a.txt").write_bytes(b"hello")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.py").write_bytes(b"print(1)\n")
    (tmp_path / "sub" / "deep").mkdir()
    (tmp_path / "sub" / "deep" / "c.log").write_bytes(b"x" * 50)
    (tmp_path / ".hidden").write_bytes(b"h")
    return tmp_path


def _files(results):
    return {r.path for r in results if isinstance(r, FileResult)}


def _dirs(results):
    return {r.path for r in results if isinstance(r, DirectoryResult)}


def test_empty_inputs_rejected():
    with pytest.raises(ValueError):
        FilesystemEnumerator([])


def test_finds_all_files_and_directories(tree):
    results = list(FilesystemEnumerator([tree]).run())
    assert _files(results) == {
        tree / "a.txt",
        tree / "sub" / "b.py",
        tree / "sub" / "deep" / "c.log",
        tree / ".hidden",
    }
    assert _dirs(results) == {tree, tree / "sub", tree / "sub" / "deep"}


def test_file_sizes_and_options_propagate(tree):
    enumerator = FilesystemEnumerator([tree], extract_archives=False, extraction_depth=7)
    for result in enumerator.run():
        if isinstance(result, FileResult):
            assert result.num_bytes == result.path.stat().st_size
            assert result.extract_archives is False
            assert result.extraction_depth == 7


def test_order_is_stable(tree):
    first = list(FilesystemEnumerator([tree]).run())
    second = list(FilesystemEnumerator([tree]).run())
    assert first == second


def test_files_too_big_are_skipped(tree):
    results = list(FilesystemEnumerator([tree], max_file_size=10).run())
    assert tree / "sub" / "deep" / "c.log" not in _files(results)
    assert tree / "a.txt" in _files(results)


def test_file_at_limit_is_kept(tree):
    results = list(FilesystemEnumerator([tree], max_file_size=50).run())
    assert tree / "sub" / "deep" / "c.log" in _files(results)


def test_no_limit(tree):
    results = list(FilesystemEnumerator([tree], max_file_size=None).run())
    assert len(_files(results)) == 4


def test_single_file_input(tree):
    results = list(FilesystemEnumerator([tree / "a.txt"]).run())
    assert results == [FileResult(tree / "a.txt", 5, True, 2)]


def test_missing_input_yields_nothing(tmp_path):
    assert list(FilesystemEnumerator([tmp_path / "missing"]).run()) == []


def test_ignore_file_excludes(tree, tmp_path_factory):
    ignore_file = tmp_path_factory.mktemp("ign") / "ignore"
    ignore_file.write_text("*.log\n# comment\n\nsub/b.py\n")
    enumerator = FilesystemEnumerator([tree])
    enumerator.add_ignore(ignore_file)
    files = _files(enumerator.run())
    assert files == {tree / "a.txt", tree / ".hidden"}


def test_ignored_directory_is_pruned(tree, tmp_path_factory):
    ignore_file = tmp_path_factory.mktemp("ign") / "ignore"
    ignore_file.write_text("deep/\n")
    enumerator = FilesystemEnumerator([tree])
    enumerator.add_ignore(ignore_file)
    results = list(enumerator.run())
    assert tree / "sub" / "deep" not in _dirs(results)
    assert tree / "sub" / "deep" / "c.log" not in _files(results)


def test_missing_ignore_file_raises(tree):
    enumerator = FilesystemEnumerator([tree])
    with pytest.raises(OSError):
        enumerator.add_ignore(tree / "no-such-ignore")


def test_filter_entry(tree):
    enumerator = FilesystemEnumerator([tree])
    enumerator.filter_entry(lambda p: p.name != "sub")
    results = list(enumerator.run())
    assert _files(results) == {tree / "a.txt", tree / ".hidden"}
    assert _dirs(results) == {tree}


def test_symlinks_not_followed_by_default(tree):
    os.symlink(tree / "sub", tree / "link")
    results = list(FilesystemEnumerator([tree]).run())
    assert all("link" not in r.path.parts for r in results)


def test_symlinks_followed_when_enabled(tree):
    os.symlink(tree / "sub", tree / "link")
    results = list(FilesystemEnumerator([tree], follow_links=True).run())
    assert tree / "link" / "b.py" in _files(results)


def test_from_content_filtering(tree):
    filtering = ContentFilteringArgs(
        max_file_size_mb=1.0, no_extract_archives=True, extraction_depth=3
    )
    enumerator = FilesystemEnumerator.from_content_filtering([tree], filtering, no_dedup=True)
    assert enumerator.max_file_size == filtering.max_file_size_bytes()
    assert enumerator.extract_archives is False
    assert enumerator.extraction_depth == 3
    assert enumerator.no_dedup is True


@pytest.mark.parametrize(
    "lines, path, is_dir, expected",
    [
        (["*.log"], "x/y/z.log", False, True),
        (["*.log", "!keep.log"], "keep.log", False, False),
        (["/top.txt"], "nested/top.txt", False, False),
        (["/top.txt"], "top.txt", False, True),
        (["build/"], "build", False, False),
        (["build/"], "build", True, True),
        (["docs/**/*.md"], "docs/a/b/c.md", False, True),
        (["\\#name"], "#name", False, True),
        (["# comment"], "# comment", False, False),
    ],
)
def test_ignore_matcher(lines, path, is_dir, expected):
    matcher = IgnoreMatcher()
    for line in lines:
        matcher.add_line(line)
    assert matcher.is_ignored(path, is_dir) is expected


def test_ignore_matcher_skips_blank_and_comment_lines():
    matcher = IgnoreMatcher()
    matcher.add_line("")
    matcher.add_line("# nothing")
    matcher.add_line("*.tmp")
    assert len(matcher) == 1