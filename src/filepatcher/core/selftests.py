"""file-patcher core: in-process self tests."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Tuple

from .errors import ApplyConflictError
from .lifecycle import PatchLifecycleManager
from .models import RecordState
from .parser import UnifiedDiffParser
from .applier import PatchApplier


class FilePatcherSelfTests:
    """
    Runs the full create/commit/apply/revert cycle in a temporary directory,
    plus a couple of parser/applier checks on embedded patch strings.
    """

    @staticmethod
    def run() -> Tuple[bool, str]:
        report_lines = []
        ok = True

        def fail(msg: str) -> None:
            nonlocal ok
            ok = False
            report_lines.append("FAIL: " + msg)

        def pass_(msg: str) -> None:
            report_lines.append("OK: " + msg)

        with tempfile.TemporaryDirectory() as td:
            root = Path(td).resolve()
            manager = PatchLifecycleManager(storage_root=root / "patches")
            live = root / "a.txt"
            live.write_text("hello\n", encoding="utf-8", newline="\n")

            # 1) create -> edit snapshot -> commit
            record = manager.create(live)
            if record.snapshot_path.read_text(encoding="utf-8") != "hello\n":
                fail("Snapshot does not match the tracked file.")
            else:
                pass_("Create snapshot.")
            record.snapshot_path.write_text("hello world\n", encoding="utf-8", newline="\n")
            manager.commit_patch(live)
            if not record.patch_path.is_file() or record.snapshot_path.exists():
                fail("Commit did not produce a patch or left the snapshot behind.")
            else:
                pass_("Commit patch.")

            # 2) apply swaps in a symlink to the patched result
            manager.apply_patch(live)
            if not os.path.islink(live) or live.read_text(encoding="utf-8") != "hello world\n":
                fail("Apply did not produce a symlink to the patched content.")
            else:
                pass_("Apply patch.")
            if manager.status(live) is not RecordState.APPLIED:
                fail("Status after apply is not applied.")

            # 3) revert restores the exact bytes
            manager.revert_patch(live)
            if os.path.islink(live) or live.read_bytes() != b"hello\n":
                fail("Revert did not restore the original bytes.")
            else:
                pass_("Revert patch.")
            if manager.revert_patch(live):
                fail("Second revert reported a change.")
            else:
                pass_("Revert without an applied patch is a no-op.")

            # 4) diverged live content is a conflict and leaves files alone
            live.write_text("goodbye\n", encoding="utf-8", newline="\n")
            try:
                manager.apply_patch(live)
            except ApplyConflictError:
                if os.path.islink(live) or live.read_text(encoding="utf-8") != "goodbye\n":
                    fail("Failed apply modified the live file.")
                else:
                    pass_("Conflicting apply leaves the live file untouched.")
            else:
                fail("Apply against diverged content did not conflict.")

        # 5) fuzzy offset: hunk recorded at line 2 found at line 5
        patch = (
            "--- f.txt\n"
            "+++ f.txt\n"
            "@@ -2,3 +2,3 @@\n"
            " b\n"
            "-c\n"
            "+C\n"
            " d\n"
        )
        ps = UnifiedDiffParser().parse_text(patch)
        res = PatchApplier().apply_text("x\nx\nx\na\nb\nc\nd\n", ps.files[0])
        if not res.success or res.summary["output"] != "x\nx\nx\na\nb\nC\nd\n":
            fail("Offset hunk was not located.")
        else:
            pass_("Offset hunk located within the fuzzy window.")

        return ok, "\n".join(report_lines)
