"""file-patcher core: error kinds raised by the patch lifecycle."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class PatchError(Exception):
    """Base class for every failure the lifecycle reports to its caller."""


class NotFoundError(PatchError):
    """A required file is missing or unreadable at the point it is needed."""


class PatchIOError(PatchError):
    """A filesystem mutation (mkdir, write, copy, unlink, symlink, rename) failed."""


class PatchStateError(PatchError):
    """The live file is not in a state the requested operation accepts."""


class ApplyConflictError(PatchError):
    def __init__(self, message: str, diagnostics: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.diagnostics: List[Dict[str, Any]] = diagnostics or []
