"""file-patcher core: lenient unified diff parsing (classic/git/index dialects)."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from .normalizer import PatchInputNormalizer
from .models import Hunk, FilePatch, PatchSet

NO_NEWLINE_MARKER = "\\ No newline at end of file"


class UnifiedDiffParser:
    """
    Parses normalized file blocks into PatchSet/FilePatch/Hunk.

    Parsing is best-effort: a block whose headers are missing still yields its
    hunks, and stray lines inside a hunk are read as context.
    """

    RE_DIFF_GIT = re.compile(r"^diff --git (\S+) (\S+)\s*$")
    RE_HUNK = re.compile(r"^@@\s+-(\d+)(?:,(\d+))?\s+\+(\d+)(?:,(\d+))?\s+@@(.*)$")

    GIT_METADATA = (
        ("index ", "index"),
        ("new file mode ", "new_file_mode"),
        ("deleted file mode ", "deleted_file_mode"),
        ("old mode ", "old_mode"),
        ("new mode ", "new_mode"),
    )

    def __init__(self, normalizer: Optional[PatchInputNormalizer] = None):
        self.normalizer = normalizer or PatchInputNormalizer()

    def parse_text(self, raw_text: str) -> PatchSet:
        _, dialect, blocks = self.normalizer.normalize(raw_text)
        return self.parse(dialect, blocks)

    def parse(self, dialect: str, file_blocks: List[Dict[str, Any]]) -> PatchSet:
        patchset = PatchSet(dialect=dialect, files=[])
        for block in file_blocks:
            fp = self._parse_block(block["text"].split("\n"), block.get("index_path"))
            if fp is not None:
                patchset.files.append(fp)
        return patchset

    def _strip_prefix_ab(self, p: str) -> str:
        p = p.strip()
        if p[:2] in ("a/", "b/") and len(p) > 2:
            return p[2:]
        return p

    def _parse_header(self, line: str) -> Tuple[str, str]:
        # "--- name<TAB>label": the path ends at the first TAB
        rest = line[4:]
        path, _, label = rest.partition("\t")
        path = path.strip()
        if path != "/dev/null":
            path = self._strip_prefix_ab(path)
        return path, label.strip()

    def _infer_operation(self, old_path: str, new_path: str, metadata: Dict[str, Any]) -> str:
        if metadata.get("new_file_mode") or old_path == "/dev/null":
            return "create"
        if metadata.get("deleted_file_mode") or new_path == "/dev/null":
            return "delete"
        return "modify"

    def _parse_block(self, lines: List[str], index_path: Optional[str]) -> Optional[FilePatch]:
        metadata: Dict[str, Any] = {}
        old_path = new_path = index_path or ""

        i = 0
        first_hunk = None
        while i < len(lines):
            ln = lines[i]
            m = self.RE_DIFF_GIT.match(ln)
            if m:
                metadata["diff_git"] = ln
                old_path = self._strip_prefix_ab(m.group(1))
                new_path = self._strip_prefix_ab(m.group(2))
            elif ln.startswith("--- "):
                old_path, metadata["old_label"] = self._parse_header(ln)
            elif ln.startswith("+++ "):
                new_path, metadata["new_label"] = self._parse_header(ln)
            elif self.RE_HUNK.match(ln):
                first_hunk = i
                break
            else:
                for prefix, key in self.GIT_METADATA:
                    if ln.startswith(prefix):
                        metadata[key] = ln.strip()
                        break
            i += 1

        if first_hunk is None and not (old_path or new_path):
            return None

        display = new_path if new_path not in ("", "/dev/null") else old_path
        fp = FilePatch(
            old_path=old_path,
            new_path=new_path,
            display_path=display,
            operation=self._infer_operation(old_path, new_path, metadata),
            hunks=[],
            metadata=metadata,
        )
        if first_hunk is not None:
            fp.hunks = self._parse_hunks_from(lines[first_hunk:])
        return fp

    def _parse_hunks_from(self, lines: List[str]) -> List[Hunk]:
        hunks: List[Hunk] = []
        current: Optional[Hunk] = None
        old_left = new_left = 0

        for ln in lines:
            m = self.RE_HUNK.match(ln)
            if m:
                old_count = int(m.group(2)) if m.group(2) is not None else 1
                new_count = int(m.group(4)) if m.group(4) is not None else 1
                current = Hunk(
                    old_start=int(m.group(1)),
                    old_count=old_count,
                    new_start=int(m.group(3)),
                    new_count=new_count,
                    header=ln.strip(),
                    lines=[],
                )
                hunks.append(current)
                old_left, new_left = old_count, new_count
                continue

            if current is None:
                continue
            if ln.startswith("\\"):
                # "\ No newline at end of file" applies to the line before it
                if current.lines:
                    tag, text = current.lines[-1]
                    current.lines[-1] = (tag, text.rstrip("\n"))
                continue
            if old_left <= 0 and new_left <= 0:
                # hunk body is complete; anything else is trailing noise
                continue

            tag = ln[:1]
            if tag not in (" ", "+", "-"):
                # best-effort: an empty or untagged line is context
                tag, body = " ", ln
            else:
                body = ln[1:]
            current.lines.append((tag, body + "\n"))
            if tag in (" ", "-"):
                old_left -= 1
            if tag in (" ", "+"):
                new_left -= 1

        return hunks
