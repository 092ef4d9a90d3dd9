from .errors import PatchError, NotFoundError, PatchIOError, PatchStateError, ApplyConflictError
from .models import Hunk, FilePatch, PatchSet, ApplyResult, RecordState
from .normalizer import PatchInputNormalizer
from .parser import UnifiedDiffParser
from .applier import PatchApplier, DEFAULT_APPLY_OPTIONS
from .diffgen import DiffGenerator
from .record import PatchRecord
from .lifecycle import PatchLifecycleManager, DEFAULT_STORAGE_ROOT
from .selftests import FilePatcherSelfTests

__all__ = [
    "PatchError","NotFoundError","PatchIOError","PatchStateError","ApplyConflictError",
    "Hunk","FilePatch","PatchSet","ApplyResult","RecordState",
    "PatchInputNormalizer","UnifiedDiffParser","PatchApplier","DEFAULT_APPLY_OPTIONS",
    "DiffGenerator","PatchRecord","PatchLifecycleManager","DEFAULT_STORAGE_ROOT",
    "FilePatcherSelfTests",
]
