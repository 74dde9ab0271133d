"""Shared plumbing for hookups: execution environment and result summaries."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from loomwork.helpers.dto.hookup_dto import HookupResult
from loomwork.helpers.dto.patch_dto import PatchResult

if TYPE_CHECKING:
    from loomwork.components.patching.block_registry_comp import BlockRegistry

_INVALID_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.\-]+")


@dataclass(frozen=True)
class HookupEnv:
    """Where and on whose behalf hookups write."""

    workspace_root: Path
    scope: str
    registry: BlockRegistry | None = None
    dry_run: bool = False

    def resolve(self, path: str) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self.workspace_root / p


def block_id_part(value: str) -> str:
    """Turn a free-form name (module path, permission) into a marker-safe id."""
    return _INVALID_KEY_CHARS.sub("_", value).strip("_").upper() or "_"


def summarize(path: str, kind: str, results: list[PatchResult], what: str) -> HookupResult:
    """Collapse patch results into one hookup result."""
    if any(r.changed for r in results):
        return HookupResult(path=path, kind=kind, status="applied", message=f"{what} written")
    return HookupResult(path=path, kind=kind, status="skipped", message=f"{what} already up to date")
