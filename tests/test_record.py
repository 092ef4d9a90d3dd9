"""Tests for filepatcher.core.record."""

from pathlib import Path

from filepatcher.core.models import RecordState
from filepatcher.core.record import PatchRecord

from conftest import write


def test_layout_is_keyed_by_base_name():
    record = PatchRecord.for_file("patches", "/some/dir/a.txt")
    assert record.directory == Path("patches/a.txt")
    assert record.snapshot_path == Path("patches/a.txt/a.txt")
    assert record.original_path_file == Path("patches/a.txt/original-path.txt")
    assert record.patch_path == Path("patches/a.txt/a.txt.patch")
    assert record.patched_path == Path("patches/a.txt/a.txt.patched")
    assert record.backup_path == Path("patches/a.txt/a.txt.original.backup")


def test_state_is_derived_from_files(tmp_path):
    live = write(tmp_path / "a.txt", "x\n")
    record = PatchRecord.for_file(tmp_path / "store", live)
    assert record.state(live) is RecordState.UNTRACKED
    assert record.read_original_path() is None

    record.directory.mkdir(parents=True)
    write(record.patch_path, "")
    assert record.state(live) is RecordState.COMMITTED

    write(record.snapshot_path, "x\n")
    assert record.state(live) is RecordState.TRACKED

    write(record.patched_path, "y\n")
    write(record.backup_path, "x\n")
    live.unlink()
    live.symlink_to(record.patched_path)
    assert record.state(live) is RecordState.APPLIED
