"""file-patcher core: on-disk Patch Record layout for one tracked file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .models import RecordState

ORIGINAL_PATH_FILE = "original-path.txt"


@dataclass(frozen=True)
class PatchRecord:
    """
    All state for one tracked file lives in ``<root>/<name>/``, keyed by the
    file's base name only. Two files with the same name in different
    directories share a record.
    """

    root: Path
    name: str

    @classmethod
    def for_file(cls, root: Union[str, Path], file_path: Union[str, Path]) -> "PatchRecord":
        return cls(root=Path(root), name=Path(file_path).name)

    @property
    def directory(self) -> Path:
        return self.root / self.name

    @property
    def snapshot_path(self) -> Path:
        return self.directory / self.name

    @property
    def original_path_file(self) -> Path:
        return self.directory / ORIGINAL_PATH_FILE

    @property
    def patch_path(self) -> Path:
        return self.directory / f"{self.name}.patch"

    @property
    def patched_path(self) -> Path:
        return self.directory / f"{self.name}.patched"

    @property
    def backup_path(self) -> Path:
        return self.directory / f"{self.name}.original.backup"

    def read_original_path(self) -> Optional[str]:
        try:
            return self.original_path_file.read_text(encoding="utf-8").strip() or None
        except OSError:
            return None

    def state(self, live_path: Union[str, Path]) -> RecordState:
        if Path(live_path).is_symlink() and self.backup_path.exists():
            return RecordState.APPLIED
        if self.snapshot_path.exists():
            return RecordState.TRACKED
        if self.patch_path.exists():
            return RecordState.COMMITTED
        return RecordState.UNTRACKED
