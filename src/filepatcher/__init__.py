"""file-patcher: track, generate, apply and revert unified-diff patches for single files."""

__version__ = "1.0.0"
