"""Tests for filepatcher.core.applier."""

from filepatcher.core.applier import PatchApplier
from filepatcher.core.diffgen import DiffGenerator
from filepatcher.core.parser import UnifiedDiffParser


def file_patch(text):
    return UnifiedDiffParser().parse_text(text).files[0]


def numbered(n):
    return "".join(f"line {i}\n" for i in range(n))


CHANGE_C = "--- f\n+++ f\n@@ -2,3 +2,3 @@\n b\n-c\n+C\n d\n"


class TestExactApply:
    def test_single_hunk(self):
        res = PatchApplier().apply_text("a\nb\nc\nd\n", file_patch(CHANGE_C))
        assert res.success
        assert res.summary["output"] == "a\nb\nC\nd\n"
        assert res.summary["hunks_applied"] == 1
        assert res.summary["lines_added"] == 1
        assert res.summary["lines_removed"] == 1

    def test_generated_patch_round_trips(self):
        old = numbered(20)
        new = old.replace("line 2\n", "line two\n").replace("line 15\n", "line fifteen\n")
        patch = DiffGenerator().generate_record_patch("f", old, new)
        res = PatchApplier().apply_text(old, file_patch(patch))
        assert res.success
        assert res.summary["output"] == new

    def test_no_final_newline_round_trips(self):
        patch = DiffGenerator().generate_record_patch("f", "a\nb", "a\nb\nc")
        res = PatchApplier().apply_text("a\nb", file_patch(patch))
        assert res.summary["output"] == "a\nb\nc"

    def test_patch_without_hunks_is_a_no_op(self):
        fp = file_patch("--- f\toriginal\n+++ f\tmodified\n")
        res = PatchApplier().apply_text("unchanged\n", fp)
        assert res.success
        assert res.summary["output"] == "unchanged\n"

    def test_insert_into_empty_text(self):
        patch = DiffGenerator().generate_record_patch("f", "", "first\n")
        res = PatchApplier().apply_text("", file_patch(patch))
        assert res.summary["output"] == "first\n"


class TestDrift:
    def test_offset_within_window(self):
        res = PatchApplier().apply_text("x\nx\nx\na\nb\nc\nd\n", file_patch(CHANGE_C))
        assert res.success
        assert res.summary["output"] == "x\nx\nx\na\nb\nC\nd\n"
        decision = res.summary["diagnostics"][0]["decision"]
        assert decision["matched_at"] == 4
        assert any(entry["message"] == "Hunk applied with drift." for entry in res.logs)

    def test_offset_beyond_window_conflicts(self):
        text = "x\n" * 10 + "b\nc\nd\n"
        res = PatchApplier().apply_text(text, file_patch(CHANGE_C), {"fuzzy_window_size": 2})
        assert not res.success

    def test_later_hunks_follow_earlier_offset(self):
        old = numbered(30)
        new = old.replace("line 3\n", "line three\n").replace("line 25\n", "line twenty-five\n")
        patch = DiffGenerator().generate_record_patch("f", old, new)
        res = PatchApplier().apply_text("extra\nextra\n" + old, file_patch(patch))
        assert res.success
        assert res.summary["output"] == "extra\nextra\n" + new

    def test_closest_match_wins(self):
        text = "b\nc\nd\nq\nb\nc\nd\n"
        patch = "--- f\n+++ f\n@@ -5,3 +5,3 @@\n b\n-c\n+C\n d\n"
        res = PatchApplier().apply_text(text, file_patch(patch))
        assert res.summary["output"] == "b\nc\nd\nq\nb\nC\nd\n"


class TestFuzz:
    PATCH = "--- f\n+++ f\n@@ -1,3 +1,3 @@\n a\n-b\n+B\n c\n"

    def test_context_mismatch_within_fuzz(self):
        res = PatchApplier().apply_text("A\nb\nc\n", file_patch(self.PATCH), {"fuzz_factor": 1})
        assert res.success
        # context keeps the text's own line
        assert res.summary["output"] == "A\nB\nc\n"
        assert res.summary["diagnostics"][0]["decision"]["fuzz"] == 1

    def test_context_mismatch_without_fuzz_conflicts(self):
        res = PatchApplier().apply_text("A\nb\nc\n", file_patch(self.PATCH), {"fuzz_factor": 0})
        assert not res.success
        diag = res.summary["diagnostics"][0]
        assert diag["attempted_line_1b"] == 1
        assert diag["expected_excerpt"] == ["a", "b", "c"]
        assert diag["actual_excerpt"] == ["A", "b", "c"]

    def test_removed_line_must_match(self):
        res = PatchApplier().apply_text("a\nX\nc\n", file_patch(self.PATCH))
        assert not res.success
        assert "does not apply" in res.overall_message

    def test_whitespace_can_be_ignored(self):
        text = "a\n  b  \nc\n"
        assert not PatchApplier().apply_text(text, file_patch(self.PATCH)).success
        res = PatchApplier().apply_text(text, file_patch(self.PATCH), {"ignore_whitespace_differences": True})
        assert res.summary["output"] == "a\nB\nc\n"

    def test_hunk_longer_than_text_conflicts(self):
        res = PatchApplier().apply_text("a\n", file_patch(self.PATCH))
        assert not res.success
        assert res.summary["diagnostics"][0]["decision"]["reason"] == "Hunk is longer than the remaining text."


class TestLineSplitting:
    def test_form_feed_stays_inside_its_line(self):
        patch = "--- f\n+++ f\n@@ -1,2 +1,2 @@\n a\x0cb\n-c\n+C\n"
        res = PatchApplier().apply_text("a\x0cb\nc\n", file_patch(patch))
        assert res.success
        assert res.summary["output"] == "a\x0cb\nC\n"


class TestUnsupportedOperations:
    def test_create_patch_is_refused(self):
        fp = file_patch("--- /dev/null\n+++ b/new.txt\n@@ -0,0 +1 @@\n+alpha\n")
        res = PatchApplier().apply_text("", fp)
        assert not res.success
        assert "create patch" in res.overall_message
        assert res.logs[-1]["operation"] == "create"

    def test_delete_patch_is_refused(self):
        fp = file_patch("--- old.txt\n+++ /dev/null\n@@ -1 +0,0 @@\n-x\n")
        assert not PatchApplier().apply_text("x\n", fp).success
