"""Tests for filepatcher.core.parser and the normalizer it sits on."""

from filepatcher.core.diffgen import DiffGenerator
from filepatcher.core.normalizer import PatchInputNormalizer, split_lines
from filepatcher.core.parser import UnifiedDiffParser


def test_parses_generated_record_patch():
    text = DiffGenerator().generate_record_patch("a.txt", "hello\n", "hello world\n")
    ps = UnifiedDiffParser().parse_text(text)

    assert ps.dialect == PatchInputNormalizer.DIALECT_INDEX
    assert ps.total_files() == 1
    fp = ps.files[0]
    assert fp.display_path == "a.txt"
    assert fp.operation == "modify"
    assert fp.metadata["old_label"] == "original"
    assert fp.metadata["new_label"] == "modified"
    assert len(fp.hunks) == 1
    assert fp.hunks[0].lines == [("-", "hello\n"), ("+", "hello world\n")]


def test_no_newline_marker_strips_terminator():
    text = DiffGenerator().generate_record_patch("a.txt", "a", "b")
    hunk = UnifiedDiffParser().parse_text(text).files[0].hunks[0]
    assert hunk.lines == [("-", "a"), ("+", "b")]


def test_git_dialect_strips_prefixes():
    patch = (
        "diff --git a/data.json b/data.json\n"
        "index 123..456 100644\n"
        "--- a/data.json\n"
        "+++ b/data.json\n"
        "@@ -1 +1 @@\n"
        "-{\"b\": 2}\n"
        "+{\"b\": 3}\n"
    )
    ps = UnifiedDiffParser().parse_text(patch)
    assert ps.dialect == PatchInputNormalizer.DIALECT_GIT
    fp = ps.files[0]
    assert fp.old_path == "data.json"
    assert fp.metadata["index"] == "index 123..456 100644"
    assert fp.hunks[0].old_start == 1


def test_bom_crlf_and_trailing_noise_are_tolerated():
    patch = (
        "\ufeff--- f.txt\r\n"
        "+++ f.txt\r\n"
        "@@ -1,2 +1,2 @@\r\n"
        " keep\r\n"
        "-old\r\n"
        "+new\r\n"
        "\r\n"
        "some trailing commentary\r\n"
    )
    hunk = UnifiedDiffParser().parse_text(patch).files[0].hunks[0]
    assert hunk.lines == [(" ", "keep\n"), ("-", "old\n"), ("+", "new\n")]


def test_untagged_line_inside_hunk_is_context():
    patch = "--- f\n+++ f\n@@ -1,2 +1,2 @@\n\n-x\n+y\n"
    hunk = UnifiedDiffParser().parse_text(patch).files[0].hunks[0]
    assert hunk.lines[0] == (" ", "\n")


def test_headers_only_yields_file_without_hunks():
    ps = UnifiedDiffParser().parse_text("--- a.txt\toriginal\n+++ a.txt\tmodified\n")
    assert ps.total_files() == 1
    assert ps.total_hunks() == 0


def test_text_that_is_not_a_patch_yields_nothing():
    assert UnifiedDiffParser().parse_text("just some words\nand more\n").total_files() == 0


def test_dev_null_marks_create():
    patch = "--- /dev/null\n+++ b/new.txt\n@@ -0,0 +1,2 @@\n+alpha\n+beta\n"
    fp = UnifiedDiffParser().parse_text(patch).files[0]
    assert fp.operation == "create"
    assert fp.display_path == "new.txt"
    assert fp.hunks[0].old_count == 0


def test_split_lines_only_breaks_on_newline():
    assert split_lines("a\x0cb c\nd") == ["a\x0cb c\n", "d"]
    assert split_lines("a\n") == ["a\n"]
    assert split_lines("") == []
