"""
Idempotent patch engine: ensure a marker block in a file on disk.

A second call with the same (scope, block id) replaces the block's content and
never duplicates it. Bytes outside the markers are never rewritten.
"""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from loomwork.components.patching.markers_comp import ensure_block_text, find_block, make_key, remove_block
from loomwork.helpers.dto.patch_dto import PATCH_INSERTED, PATCH_UNCHANGED, Anchor, PatchResult
from loomwork.helpers.exceptions import PatchTargetMissingError
from loomwork.helpers.files_helper import atomic_write, read_raw

if TYPE_CHECKING:
    from loomwork.components.patching.block_registry_comp import BlockRegistry

logger = logging.getLogger(__name__)


def ensure_block(
    file_path: Path,
    scope: str,
    block_id: str,
    language: str,
    content: str,
    anchor: Anchor | None = None,
    create: bool = False,
    registry: BlockRegistry | None = None,
    dry_run: bool = False,
) -> PatchResult:
    """
    Insert or update the (scope, block_id) block in file_path.

    Args:
        file_path: Target file
        scope: Owner of the block, usually the treadle name
        block_id: Block identifier, unique within the scope
        language: Comment language for the markers ("rust", "xml", "toml", ...)
        content: Block body; a trailing newline is optional
        anchor: Insert position for a new block (default: end of file)
        create: Create the file when it does not exist
        registry: Run registry to record the block in and lock the file with
        dry_run: Compute the result without writing

    Returns:
        PatchResult with status inserted, updated or unchanged

    Raises:
        PatchTargetMissingError: file missing and create is False
        MarkerCorruptionError: the file holds malformed markers
    """
    path = Path(file_path)
    key = make_key(scope, block_id)
    lock = registry.lock_for(path) if registry is not None else contextlib.nullcontext()
    with lock:
        if path.exists():
            text, eol = read_raw(path)
        elif create:
            text, eol = "", "\n"
        else:
            raise PatchTargetMissingError(str(path))

        new_text, status, anchor_found = ensure_block_text(text, key, language, content, anchor, str(path), eol)
        if not anchor_found:
            logger.warning(f"[patch] Anchor '{anchor.pattern}' not found in {path}; appended {key} at end of file")
        if status != PATCH_UNCHANGED and not dry_run:
            atomic_write(path, new_text)
        if registry is not None:
            registry.record(path, key)

    if status == PATCH_INSERTED:
        logger.debug(f"[patch] Inserted {key} into {path}")
    elif status != PATCH_UNCHANGED:
        logger.debug(f"[patch] Updated {key} in {path}")
    return PatchResult(file_path=str(path), key=key, status=status)


def remove_marker_block(
    file_path: Path,
    scope: str,
    block_id: str,
    registry: BlockRegistry | None = None,
) -> bool:
    """
    Remove one block from a file.

    Returns:
        True if the block existed and was removed
    """
    path = Path(file_path)
    if not path.exists():
        return False
    key = make_key(scope, block_id)
    lock = registry.lock_for(path) if registry is not None else contextlib.nullcontext()
    with lock:
        text, _ = read_raw(path)
        span = find_block(text, key, str(path))
        if span is None:
            return False
        atomic_write(path, remove_block(text, span))
    logger.debug(f"[patch] Removed {key} from {path}")
    return True
