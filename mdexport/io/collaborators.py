"""Destination prompts and the byte writer used by the export dispatcher."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence, Tuple, Union

import typer

logger = logging.getLogger(__name__)

# Destinations that must never be overwritten by an export.
BLOCKED_PATHS: Tuple[str, ...] = (
    "/.ssh",
    "/.gnupg",
    "/.aws",
    "/.kube",
    "/.docker",
    "/.config/gcloud",
    "/.azure",
    "/etc/shadow",
    "/etc/passwd",
    "/.bash_history",
    "/.zsh_history",
    "/.node_repl_history",
    "/.npmrc",
    "/.pypirc",
    "/.config/gh",
    "/.config/hub",
    "\\.ssh",
    "\\.gnupg",
    "\\.aws",
    "\\.kube",
    "\\.docker",
    "\\.config\\gcloud",
    "\\.azure",
    "\\AppData\\Roaming\\gnupg",
    "\\.bash_history",
    "\\.npmrc",
    "\\.pypirc",
)


@dataclass(frozen=True)
class FileFilter:
    """Save-dialog filter, e.g. ``FileFilter("Word", ("docx",))``."""

    name: str
    extensions: Tuple[str, ...]


class SavePrompt(Protocol):
    def __call__(self, default_path: str, file_filter: FileFilter) -> Optional[str]:
        ...


class ByteWriter(Protocol):
    def __call__(self, path: str, data: bytes) -> None:
        ...


class FixedPathPrompt:
    """Non-interactive prompt answering with a preset path.

    With no preset path the suggested default is accepted.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = str(path) if path is not None else None

    def __call__(self, default_path: str, file_filter: FileFilter) -> Optional[str]:
        return self.path or default_path


class CancelPrompt:
    """Prompt that always declines; useful for dry runs."""

    def __call__(self, default_path: str, file_filter: FileFilter) -> Optional[str]:
        return None


class TyperPrompt:
    """Ask for the destination on the terminal.

    Pressing enter accepts the suggested path; a blank (spaces only) answer
    cancels the export.
    """

    def __call__(self, default_path: str, file_filter: FileFilter) -> Optional[str]:
        extensions = ", ".join(f".{ext}" for ext in file_filter.extensions)
        answer = typer.prompt(
            f"Export {file_filter.name} ({extensions}) to",
            default=default_path,
            show_default=True,
        )
        answer = answer.strip()
        return answer or None


def is_blocked(path: Union[str, Path], blocked: Sequence[str] = BLOCKED_PATHS) -> bool:
    text = str(path)
    return any(fragment in text for fragment in blocked)


class LocalFileWriter:
    """Write export bytes to the local filesystem in a single call.

    The parent directory must already exist; it is canonicalized before the
    blocked-path check so symlinks cannot route around it.
    """

    def __init__(self, blocked: Sequence[str] = BLOCKED_PATHS):
        self.blocked = tuple(blocked)

    def resolve(self, path: Union[str, Path]) -> Path:
        target = Path(path).expanduser()
        try:
            parent = target.parent.resolve(strict=True)
        except (OSError, RuntimeError) as exc:
            raise FileNotFoundError(f"Cannot access path: {target.parent}") from exc
        if not target.name:
            raise ValueError(f"Invalid filename: {path}")
        canonical = parent / target.name
        if is_blocked(canonical, self.blocked):
            raise PermissionError(f"Permission denied: {canonical}")
        return canonical

    def __call__(self, path: str, data: bytes) -> None:
        canonical = self.resolve(path)
        canonical.write_bytes(data)
        logger.info("Wrote %s bytes to %s", len(data), canonical)


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
