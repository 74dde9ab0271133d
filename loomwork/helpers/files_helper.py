"""
File helpers for whole-file writes.

Writes go through a temporary sibling file and ``os.replace`` so a reader never
sees a half-written file. Whole-file rewrites keep the line ending style of the
existing file. Marker edits read the raw text with read_raw and write it back
verbatim, so lines outside the edited block keep their exact bytes even in
files with mixed line endings.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

WRITE_CREATED = "created"
WRITE_MODIFIED = "modified"
WRITE_UNCHANGED = "unchanged"


def detect_eol(content: str) -> str:
    """Detect the line ending style used in content. Defaults to LF."""
    if "\r\n" in content:
        return "\r\n"
    if "\n" in content:
        return "\n"
    if "\r" in content:
        return "\r"
    return "\n"


def normalize_eol(text: str, target_eol: str) -> str:
    """Normalize line endings in text to target_eol."""
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    if target_eol == "\r\n":
        return normalized.replace("\n", "\r\n")
    if target_eol == "\r":
        return normalized.replace("\n", "\r")
    return normalized


def read_text(file_path: Path) -> tuple[str, str]:
    """
    Read a UTF-8 file and return (content with LF endings, original eol).

    Raises:
        FileNotFoundError: if the file does not exist
    """
    raw, eol = read_raw(file_path)
    return normalize_eol(raw, "\n"), eol


def read_raw(file_path: Path) -> tuple[str, str]:
    """
    Read a UTF-8 file untouched and return (content, dominant eol).

    Raises:
        FileNotFoundError: if the file does not exist
    """
    with open(file_path, encoding="utf-8", newline="") as f:
        raw = f.read()
    return raw, detect_eol(raw)


def atomic_write(file_path: Path, content: str, eol: str | None = None) -> None:
    """Write content to file_path atomically, normalized to eol when one is given."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    data = normalize_eol(content, eol) if eol else content
    fd, tmp_name = tempfile.mkstemp(prefix=f".{file_path.name}.", suffix=".tmp", dir=file_path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(data)
        os.replace(tmp_name, file_path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def write_if_changed(file_path: Path, content: str, dry_run: bool = False) -> str:
    """
    Write content unless the file already holds exactly that content.

    Returns:
        WRITE_CREATED, WRITE_MODIFIED or WRITE_UNCHANGED
    """
    if file_path.exists():
        existing, eol = read_text(file_path)
        if existing == normalize_eol(content, "\n"):
            return WRITE_UNCHANGED
        if not dry_run:
            atomic_write(file_path, content, eol)
        logger.debug(f"[files] Rewrote {file_path}")
        return WRITE_MODIFIED
    if not dry_run:
        atomic_write(file_path, content, "\n")
    logger.debug(f"[files] Created {file_path}")
    return WRITE_CREATED
