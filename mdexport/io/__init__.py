"""I/O collaborators: destination prompts and byte writers."""

from .collaborators import (
    BLOCKED_PATHS,
    ByteWriter,
    CancelPrompt,
    FileFilter,
    FixedPathPrompt,
    LocalFileWriter,
    SavePrompt,
    TyperPrompt,
    is_blocked,
)

__all__ = [
    "BLOCKED_PATHS",
    "ByteWriter",
    "CancelPrompt",
    "FileFilter",
    "FixedPathPrompt",
    "LocalFileWriter",
    "SavePrompt",
    "TyperPrompt",
    "is_blocked",
]
