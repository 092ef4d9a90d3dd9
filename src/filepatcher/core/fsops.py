"""file-patcher core: filesystem primitives used by the lifecycle."""

from __future__ import annotations

import logging
import os
import shutil
import time
from pathlib import Path

from .errors import NotFoundError, PatchIOError

logger = logging.getLogger(__name__)


def _tmp_sibling(path: Path) -> Path:
    return path.with_name(f".{path.name}.filepatcher_tmp_{os.getpid()}_{int(time.time() * 1000)}")


def _fsync(path: Path) -> None:
    with open(path, "rb") as f:
        os.fsync(f.fileno())


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise NotFoundError(f"File not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise NotFoundError(f"Cannot read {path}: {exc}") from exc


def detect_eol(path: Path) -> str:
    # Dominant EOL of an existing file; default \n.
    try:
        data = path.read_bytes()
    except OSError:
        return "\n"
    crlf = data.count(b"\r\n")
    lf = data.count(b"\n")
    if crlf > 0 and crlf >= (lf - crlf):
        return "\r\n"
    return "\n"


def atomic_write_text(path: Path, text: str, eol: str = "\n") -> None:
    """Write via a synced temp file renamed over ``path``."""
    data = text.replace("\n", eol) if eol != "\n" else text
    tmp = _tmp_sibling(path)
    try:
        with open(tmp, "w", encoding="utf-8", newline="") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except OSError as exc:
        remove_quietly(tmp)
        raise PatchIOError(f"Cannot write {path}: {exc}") from exc


def durable_copy(src: Path, dest: Path) -> None:
    """Byte-for-byte copy (with metadata) that is synced before it becomes visible at ``dest``."""
    if not src.exists():
        raise NotFoundError(f"File not found: {src}")
    tmp = _tmp_sibling(dest)
    try:
        shutil.copy2(src, tmp)
        _fsync(tmp)
        os.replace(tmp, dest)
    except OSError as exc:
        remove_quietly(tmp)
        raise PatchIOError(f"Cannot copy {src} to {dest}: {exc}") from exc


def swap_in_symlink(link_path: Path, target: Path) -> None:
    """Replace ``link_path`` with a symlink to ``target`` in a single rename."""
    tmp = _tmp_sibling(link_path)
    try:
        os.symlink(target, tmp)
        os.replace(tmp, link_path)
    except OSError as exc:
        remove_quietly(tmp)
        raise PatchIOError(f"Cannot link {link_path} -> {target}: {exc}") from exc


def make_dirs(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PatchIOError(f"Cannot create directory {path}: {exc}") from exc


def remove_quietly(path: Path) -> bool:
    # best-effort; never fails the calling operation
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as exc:
        logger.debug("Could not remove %s: %s", path, exc)
        return False
