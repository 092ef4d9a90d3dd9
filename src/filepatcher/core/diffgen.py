"""file-patcher core: generate unified diffs for a tracked file."""

from __future__ import annotations

import difflib
from typing import List

from .normalizer import split_lines
from .parser import NO_NEWLINE_MARKER

INDEX_SEPARATOR = "=" * 67


class DiffGenerator:
    """
    Render the patch document stored in a Patch Record:

        Index: <name>
        ===================================================================
        --- <name>\\t<old label>
        +++ <name>\\t<new label>
        @@ -a,b +c,d @@
        ...

    Lines without a trailing newline are followed by the
    "\\ No newline at end of file" marker so the document round-trips exactly.
    """

    def __init__(self, context_lines: int = 3):
        self.context_lines = context_lines

    def generate_unified_for_file(
        self,
        old_text: str,
        new_text: str,
        old_path: str,
        new_path: str,
        old_label: str = "",
        new_label: str = "",
    ) -> str:
        old_lines = split_lines(old_text.replace("\r\n", "\n").replace("\r", "\n"))
        new_lines = split_lines(new_text.replace("\r\n", "\n").replace("\r", "\n"))

        diff = difflib.unified_diff(
            old_lines,
            new_lines,
            fromfile=old_path,
            tofile=new_path,
            fromfiledate=old_label,
            tofiledate=new_label,
            n=self.context_lines,
            lineterm="\n",
        )
        buf: List[str] = []
        for line in diff:
            if line.endswith("\n"):
                buf.append(line)
            else:
                buf.append(line + "\n" + NO_NEWLINE_MARKER + "\n")
        if not buf:
            # identical sides still produce the file headers
            buf = [self._header("---", old_path, old_label), self._header("+++", new_path, new_label)]
        return "".join(buf)

    def generate_record_patch(self, name: str, old_text: str, new_text: str) -> str:
        body = self.generate_unified_for_file(old_text, new_text, name, name, "original", "modified")
        return f"Index: {name}\n{INDEX_SEPARATOR}\n{body}"

    def _header(self, prefix: str, path: str, label: str) -> str:
        return f"{prefix} {path}\t{label}\n" if label else f"{prefix} {path}\n"
