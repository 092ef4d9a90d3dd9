"""file-patcher core: the patch lifecycle state machine.

Untracked -> Tracked (create) -> Committed (commit) -> Applied (apply)
-> Committed again (revert).

Every call rehydrates its state from the filesystem. Operations on the same
file are not locked against each other; callers must run them one at a time.
A process killed mid-operation can leave a torn record that is not repaired
automatically. Apply and revert keep that window to a single rename: all
replacement content is written and synced before the live path is swapped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from . import fsops
from .applier import PatchApplier, DEFAULT_APPLY_OPTIONS
from .diffgen import DiffGenerator
from .errors import ApplyConflictError, NotFoundError, PatchError, PatchStateError
from .models import ApplyResult, RecordState
from .parser import UnifiedDiffParser
from .record import PatchRecord

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_ROOT = "patches"

PathLike = Union[str, Path]


class PatchLifecycleManager:
    def __init__(self, storage_root: PathLike = DEFAULT_STORAGE_ROOT, options: Optional[Dict[str, Any]] = None):
        self.storage_root = Path(storage_root)
        self.options: Dict[str, Any] = dict(DEFAULT_APPLY_OPTIONS)
        self.options.update(options or {})
        self.parser = UnifiedDiffParser()
        self.applier = PatchApplier()
        self.generator = DiffGenerator()

    def record_for(self, file_path: PathLike) -> PatchRecord:
        return PatchRecord.for_file(self.storage_root, file_path)

    def status(self, file_path: PathLike) -> RecordState:
        return self.record_for(file_path).state(file_path)

    def create(self, file_path: PathLike) -> PatchRecord:
        """Snapshot ``file_path`` into its record; the user then edits the snapshot."""
        source = Path(file_path)
        if not source.is_file():
            raise NotFoundError(f"File not found: {source}")
        absolute = source.resolve()
        content = fsops.read_text(source)

        record = self.record_for(source)
        if record.state(source) is RecordState.APPLIED:
            raise PatchStateError(f"{source} has a patch applied; revert it before tracking it again")
        previous = record.read_original_path()
        if previous is not None and previous != str(absolute):
            logger.warning("Record %s was tracking %s; it now tracks %s", record.directory, previous, absolute)

        fsops.make_dirs(self.storage_root)
        fsops.make_dirs(record.directory)
        fsops.atomic_write_text(record.snapshot_path, content, eol=fsops.detect_eol(source))
        fsops.atomic_write_text(record.original_path_file, str(absolute))
        logger.info("Tracking %s in %s", absolute, record.directory)
        return record

    def commit_patch(self, file_path: PathLike) -> PatchRecord:
        """Diff the live file (original) against the edited snapshot (modified)."""
        live = Path(file_path)
        record = self.record_for(live)
        if live.is_symlink():
            raise PatchStateError(f"{live} has a patch applied; revert it before committing")

        original = fsops.read_text(live)
        modified = fsops.read_text(record.snapshot_path)

        patch_text = self.generator.generate_record_patch(record.name, original, modified)
        fsops.atomic_write_text(record.patch_path, patch_text)
        logger.info("Wrote %s", record.patch_path)

        # the snapshot has served its purpose
        fsops.remove_quietly(record.snapshot_path)
        return record

    def apply_patch(self, file_path: PathLike) -> ApplyResult:
        live = Path(file_path)
        record = self.record_for(live)

        if not record.patch_path.is_file():
            raise NotFoundError(f"No patch to apply for {live} (expected {record.patch_path})")
        if live.is_symlink():
            raise PatchStateError(f"{live} already has a patch applied")

        current = fsops.read_text(live)
        patchset = self.parser.parse_text(fsops.read_text(record.patch_path))
        if not patchset.files:
            raise ApplyConflictError(f"{record.patch_path} contains no file patch")

        result = self.applier.apply_text(current, patchset.files[0], self.options)
        self._forward_logs(result)
        if not result.success:
            raise ApplyConflictError(
                f"Failed to apply patch to {live}: {result.overall_message}",
                result.summary.get("diagnostics"),
            )

        fsops.atomic_write_text(record.patched_path, result.summary["output"], eol=fsops.detect_eol(live))
        try:
            fsops.durable_copy(live, record.backup_path)
            fsops.swap_in_symlink(live, record.patched_path.resolve())
        except PatchError:
            # live path untouched; drop the half-written apply state
            fsops.remove_quietly(record.backup_path)
            fsops.remove_quietly(record.patched_path)
            raise

        logger.info("Applied %s to %s (%d hunk(s))", record.patch_path, live, result.summary.get("hunks_applied", 0))
        return result

    def revert_patch(self, file_path: PathLike) -> bool:
        """Restore the pre-apply bytes. Returns False when nothing is applied."""
        live = Path(file_path)
        record = self.record_for(live)

        if not live.is_symlink():
            logger.info("%s is not patched; nothing to revert", live)
            return False
        if not record.backup_path.is_file():
            raise NotFoundError(f"No backup to restore for {live} (expected {record.backup_path})")

        fsops.durable_copy(record.backup_path, live)

        fsops.remove_quietly(record.backup_path)
        fsops.remove_quietly(record.patched_path)
        logger.info("Reverted %s", live)
        return True

    def _forward_logs(self, result: ApplyResult) -> None:
        for entry in result.logs:
            level = logging.getLevelName(entry.get("level", "INFO"))
            if not isinstance(level, int):
                level = logging.INFO
            fields = {k: v for k, v in entry.items() if k not in ("ts", "level", "message")}
            logger.log(level, "%s %s", entry.get("message", ""), fields)
