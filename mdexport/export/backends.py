"""Lazy loaders for the heavy format libraries.

Each loader imports its library on first use and is memoized for the lifetime
of the process, so importing ``mdexport`` stays cheap and an HTML export never
pays for python-docx, python-pptx, PyMuPDF or Playwright.
"""

from __future__ import annotations

import importlib
import logging
from functools import lru_cache
from types import ModuleType
from typing import Sequence

logger = logging.getLogger(__name__)


class BackendUnavailable(RuntimeError):
    """A format library required for the requested export is not installed."""


def _import(module: str, hint: str, submodules: Sequence[str] = ()) -> ModuleType:
    try:
        loaded = importlib.import_module(module)
        # importing submodules binds them as attributes of the package
        for name in submodules:
            importlib.import_module(f"{module}.{name}")
    except ImportError as exc:
        raise BackendUnavailable(f"{module} is not installed. {hint}") from exc
    logger.debug("Loaded export backend %s", module)
    return loaded


@lru_cache(maxsize=None)
def load_docx() -> ModuleType:
    return _import(
        "docx",
        "Install it via `pip install python-docx`.",
        submodules=("shared", "oxml", "oxml.ns", "enum.text"),
    )


@lru_cache(maxsize=None)
def load_pptx() -> ModuleType:
    return _import(
        "pptx",
        "Install it via `pip install python-pptx`.",
        submodules=("util", "dml.color", "enum.text", "oxml.ns"),
    )


@lru_cache(maxsize=None)
def load_fitz() -> ModuleType:
    return _import("fitz", "Install it via `pip install PyMuPDF`.")


@lru_cache(maxsize=None)
def load_playwright() -> ModuleType:
    return _import(
        "playwright.sync_api",
        "Install it via `pip install playwright` and run `playwright install chromium`.",
    )


__all__ = [
    "BackendUnavailable",
    "load_docx",
    "load_fitz",
    "load_playwright",
    "load_pptx",
]
