"""file-patcher core: apply a parsed file patch to text in memory."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from .models import FilePatch, Hunk, ApplyResult
from .normalizer import split_lines

DEFAULT_APPLY_OPTIONS: Dict[str, Any] = {
    "fuzz_factor": 3,
    "fuzzy_window_size": 200,
    "ignore_whitespace_differences": False,
}


class PatchApplier:
    """
    Applies the hunks of one FilePatch to a text, tolerating drift:

      - a hunk may be located up to ``fuzzy_window_size`` lines away from the
        line number recorded in its header; the closest match wins
      - up to ``fuzz_factor`` context lines per hunk may differ from the text;
        removed lines must always match

    Exact matches anywhere in the window are preferred over fuzzy ones.
    Nothing is written to disk; the caller persists ``summary["output"]``.
    """

    def apply_text(self, base_text: str, fp: FilePatch, options: Optional[Dict[str, Any]] = None) -> ApplyResult:
        opts = dict(DEFAULT_APPLY_OPTIONS)
        opts.update(options or {})
        fuzz = max(0, int(opts["fuzz_factor"]))
        window = max(0, int(opts["fuzzy_window_size"]))
        ignore_ws = bool(opts["ignore_whitespace_differences"])

        display = fp.display_path
        res = ApplyResult(success=False, overall_message="Apply failed.")
        if fp.operation != "modify":
            res.overall_message = f"{display} is a {fp.operation} patch; only in-place modifications apply to a tracked file."
            res.add_log("ERROR", "Unsupported patch operation.", file=display, operation=fp.operation)
            return res
        base_text = base_text.replace("\r\n", "\n").replace("\r", "\n")
        out_lines = split_lines(base_text)

        stats = {"hunks_applied": 0, "lines_added": 0, "lines_removed": 0}
        details: List[Dict[str, Any]] = []
        line_offset = 0
        floor = 0

        for h_idx, h in enumerate(fp.hunks):
            recorded = h.old_start if h.old_count == 0 else h.old_start - 1
            expected = max(0, recorded + line_offset)
            apply_pos, decision = self._locate_hunk_position(out_lines, h, expected, floor, fuzz, window, ignore_ws)

            if apply_pos is None:
                details.append(self._build_mismatch_diag(out_lines, h, expected, decision, hunk_index=h_idx))
                res.per_file[display] = {"status": "Failed", "applied": False, "stats": stats}
                res.summary["diagnostics"] = details
                res.overall_message = f"Hunk #{h_idx + 1} ({h.header}) does not apply to {display}."
                res.add_log("ERROR", "Hunk application failed.", file=display, hunk=h_idx + 1, reason=decision.get("reason"))
                return res

            out_lines = self._apply_hunk_at(out_lines, h, apply_pos)
            drift = apply_pos - expected
            delta = h.count("+") - h.count("-")
            line_offset += drift + delta
            floor = apply_pos + h.count(" ") + h.count("+")

            stats["hunks_applied"] += 1
            stats["lines_added"] += h.count("+")
            stats["lines_removed"] += h.count("-")
            details.append({"hunk_index": h_idx, "hunk_header": h.header, "decision": decision})
            if drift or decision.get("fuzz"):
                res.add_log("INFO", "Hunk applied with drift.", file=display, hunk=h_idx + 1,
                            offset=drift, fuzz=decision.get("fuzz", 0))

        res.success = True
        res.overall_message = "Apply succeeded."
        res.per_file[display] = {"status": "OK", "applied": True, "stats": stats}
        res.summary.update(stats)
        res.summary["diagnostics"] = details
        res.summary["output"] = self._join(out_lines)
        return res

    def _normalize_match_line(self, s: str, ignore_ws: bool) -> str:
        s = s.rstrip("\r\n")
        if ignore_ws:
            s = re.sub(r"\s+", " ", s.strip())
        return s

    def _locate_hunk_position(
        self,
        lines: List[str],
        hunk: Hunk,
        expected_pos: int,
        floor: int,
        fuzz: int,
        window: int,
        ignore_ws: bool,
    ) -> Tuple[Optional[int], Dict[str, Any]]:
        """
        Returns (position or None, decision dict).
        Each fuzz level scans outward from the expected position; ties go to
        the earlier line.
        """
        decision: Dict[str, Any] = {"expected_pos": expected_pos}
        span = len(hunk.old_lines())
        last = len(lines) - span
        if last < floor:
            decision["reason"] = "Hunk is longer than the remaining text."
            return None, decision

        pos = min(max(expected_pos, floor), last)
        for level in range(fuzz + 1):
            for distance in range(window + 1):
                for p in (pos - distance, pos + distance):
                    if p < floor or p > last:
                        continue
                    if self._hunk_anchors_match(lines, hunk, p, level, ignore_ws):
                        decision.update({"matched_at": p, "fuzz": level, "delta_from_expected": p - pos})
                        return p, decision
                    if distance == 0:
                        break

        decision["reason"] = "No anchor match found within fuzz tolerance."
        return None, decision

    def _hunk_anchors_match(self, lines: List[str], hunk: Hunk, pos: int, fuzz: int, ignore_ws: bool) -> bool:
        misses = 0
        idx = pos
        for t, s in hunk.lines:
            if t == "+":
                continue
            if self._normalize_match_line(s, ignore_ws) != self._normalize_match_line(lines[idx], ignore_ws):
                if t == "-":
                    return False
                misses += 1
                if misses > fuzz:
                    return False
            idx += 1
        return True

    def _apply_hunk_at(self, lines: List[str], hunk: Hunk, pos: int) -> List[str]:
        out = list(lines[:pos])
        i = pos
        for t, s in hunk.lines:
            if t == " ":
                # context keeps the text's own line, which may differ under fuzz
                out.append(lines[i])
                i += 1
            elif t == "-":
                i += 1
            elif t == "+":
                out.append(s)
        out.extend(lines[i:])
        return out

    def _join(self, lines: List[str]) -> str:
        # a line that lost its EOL can end up in the middle after drifting hunks
        fixed = [ln if ln.endswith("\n") else ln + "\n" for ln in lines[:-1]]
        fixed.extend(lines[-1:])
        return "".join(fixed)

    def _build_mismatch_diag(
        self,
        lines: List[str],
        hunk: Hunk,
        attempted_pos: int,
        decision: Dict[str, Any],
        hunk_index: int,
    ) -> Dict[str, Any]:
        excerpt_start = max(0, attempted_pos - 2)
        excerpt_end = min(len(lines), attempted_pos + 3)
        return {
            "hunk_index": hunk_index,
            "hunk_header": hunk.header,
            "attempted_line_1b": attempted_pos + 1,
            "decision": decision,
            "expected_excerpt": [s.rstrip("\n") for s in hunk.old_lines()[:5]],
            "actual_excerpt": [s.rstrip("\n") for s in lines[excerpt_start:excerpt_end]],
        }
