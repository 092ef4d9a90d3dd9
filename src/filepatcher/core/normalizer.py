"""file-patcher core: patch text normalization & dialect detection."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple


class PatchInputNormalizer:
    """
    Lenient intake for patch documents:
      - strip a UTF-8 BOM and normalize line endings to \\n
      - detect the dialect (classic, git, Index:)
      - split the text into per-file blocks for UnifiedDiffParser

    Nothing here raises on malformed input; text that does not look like a
    patch simply yields no blocks.
    """

    DIALECT_CLASSIC = "Classic Unified"
    DIALECT_GIT = "Git Unified"
    DIALECT_INDEX = "Index style"

    # how far past a "--- " line we look for its "+++ " partner
    HEADER_LOOKAHEAD = 60

    def normalize(self, raw_text: str) -> Tuple[str, str, List[Dict[str, Any]]]:
        """
        Returns (normalized_text, dialect, file_blocks); each block is
        {"text": str, "dialect": str, "index_path": Optional[str]}.
        """
        text = raw_text.lstrip("\ufeff")
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        lines = text.split("\n")

        if any(l.startswith("diff --git ") for l in lines):
            dialect = self.DIALECT_GIT
            blocks = self._split(lines, dialect, lambda i: lines[i].startswith("diff --git "))
        elif any(l.startswith("Index: ") for l in lines):
            dialect = self.DIALECT_INDEX
            blocks = self._split(lines, dialect, lambda i: lines[i].startswith("Index: "))
        else:
            dialect = self.DIALECT_CLASSIC
            blocks = self._split(lines, dialect, lambda i: self._is_classic_header(lines, i))
        return text, dialect, blocks

    def _is_classic_header(self, lines: List[str], i: int) -> bool:
        if not lines[i].startswith("--- "):
            return False
        # a "--- " line inside a hunk is a removed line starting with "-- "
        for j in range(i + 1, min(i + self.HEADER_LOOKAHEAD, len(lines))):
            if lines[j].startswith("+++ "):
                return True
            if lines[j].startswith("@@"):
                return False
        return False

    def _split(self, lines: List[str], dialect: str, starts_block: Callable[[int], bool]) -> List[Dict[str, Any]]:
        blocks: List[Dict[str, Any]] = []
        cur: List[str] = []
        index_path: Optional[str] = None

        def flush() -> None:
            if cur:
                blocks.append({"text": "\n".join(cur) + "\n", "dialect": dialect, "index_path": index_path})

        for i, line in enumerate(lines):
            if starts_block(i):
                flush()
                cur = [line]
                index_path = line[len("Index: "):].strip() if line.startswith("Index: ") else None
            elif cur:
                cur.append(line)
            # preamble before the first block is ignored
        flush()
        return blocks


def split_lines(text: str) -> List[str]:
    """
    Split on "\\n" only, keeping terminators. Unlike str.splitlines, form feeds
    and Unicode separators stay inside their line.
    """
    parts = text.split("\n")
    lines = [p + "\n" for p in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines
