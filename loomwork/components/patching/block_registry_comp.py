"""
Run-scoped block registry and orphan sweep.

One BlockRegistry exists per weave invocation. Every block written or
confirmed during the run is recorded; at the end the registry is consumed
exactly once by sweep(), which deletes every marker block that the run did not
record from every file known to hold blocks. Known files are the ones listed
in the persisted manifest plus the ones touched in this run.

Each block is recorded with its owner, the task that wrote it. The manifest
keeps owners between runs so that a package-filtered run only sweeps blocks of
the tasks it selected.

The registry also hands out one lock per file so that concurrent tasks
patching the same file are serialized.
"""

from __future__ import annotations

import contextlib
import json
import logging
import threading
from collections.abc import Iterable, Iterator
from pathlib import Path

from loomwork.components.patching.markers_comp import remove_block, scan_blocks
from loomwork.helpers.dto.patch_dto import BlockKey, BlockSpan, SweepResult
from loomwork.helpers.exceptions import MarkerCorruptionError, RegistryConsumedError
from loomwork.helpers.files_helper import atomic_write, read_raw

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 2

# file -> {"SCOPE:BLOCK": owner or None}
Owners = dict[Path, dict[str, str | None]]


class BlockRegistry:
    """
    Blocks recorded during one weave run.

    Args:
        workspace_root: Root that manifest entries are relative to
        manifest_path: Manifest location relative to workspace_root (None disables persistence)
        dry_run: Sweep computes removals without writing
    """

    def __init__(self, workspace_root: Path, manifest_path: str | None = None, dry_run: bool = False) -> None:
        self.workspace_root = Path(workspace_root)
        self.manifest_file = self.workspace_root / manifest_path if manifest_path else None
        self.dry_run = dry_run
        self._touched: dict[Path, set[BlockKey]] = {}
        self._owners: Owners = {}
        self._active_scopes: set[str] = set()
        self._file_locks: dict[Path, threading.RLock] = {}
        self._guard = threading.Lock()
        self._local = threading.local()
        self._previous_owners: Owners = self._load_manifest()
        self._consumed = False

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def lock_for(self, file_path: Path) -> threading.RLock:
        """Lock serializing every write to file_path within this run."""
        key = self._normalize(file_path)
        with self._guard:
            lock = self._file_locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._file_locks[key] = lock
            return lock

    @contextlib.contextmanager
    def recording_for(self, owner: str) -> Iterator[None]:
        """Attribute every block recorded by the current thread to owner."""
        previous = getattr(self._local, "owner", None)
        self._local.owner = owner
        try:
            yield
        finally:
            self._local.owner = previous

    def record(self, file_path: Path, key: BlockKey, owner: str | None = None) -> None:
        """Mark a block as produced by this run."""
        self._check_open()
        path = self._normalize(file_path)
        owner = owner or getattr(self._local, "owner", None)
        with self._guard:
            self._touched.setdefault(path, set()).add(key)
            self._owners.setdefault(path, {})[str(key)] = owner
            self._active_scopes.add(key.scope)

    def activate_scope(self, scope: str) -> None:
        """Mark a scope as having run, even if it wrote no block."""
        with self._guard:
            self._active_scopes.add(scope.upper())

    def touched(self, file_path: Path) -> set[BlockKey]:
        with self._guard:
            return set(self._touched.get(self._normalize(file_path), set()))

    def owner_of(self, file_path: Path, key: BlockKey) -> str | None:
        """Owner of a block, from this run or else from the manifest."""
        path = self._normalize(file_path)
        with self._guard:
            if str(key) in self._owners.get(path, {}):
                return self._owners[path][str(key)]
        return self._previous_owners.get(path, {}).get(str(key))

    @property
    def active_scopes(self) -> set[str]:
        with self._guard:
            return set(self._active_scopes)

    @property
    def consumed(self) -> bool:
        return self._consumed

    # ------------------------------------------------------------------
    # Sweep
    # ------------------------------------------------------------------

    def sweep(
        self,
        scoped: bool = False,
        keep_scopes: Iterable[str] = (),
        owners: Iterable[str] | None = None,
    ) -> SweepResult:
        """
        Remove every block not recorded in this run, then persist the manifest.

        Args:
            scoped: The run was restricted by a package filter. A block is only
                removed when its owner is in owners; blocks with no known owner
                are only removed when their scope ran in this invocation
            keep_scopes: Scopes whose blocks are never removed (tasks that failed this run)
            owners: Owners of the tasks selected for this run

        Returns:
            SweepResult with per-file removed keys and per-file errors
        """
        self._check_open()
        self._consumed = True
        result = SweepResult()
        with self._guard:
            candidates = sorted(set(self._previous_owners) | set(self._touched))
            touched = {path: set(keys) for path, keys in self._touched.items()}
            recorded = {path: dict(entries) for path, entries in self._owners.items()}
            active = set(self._active_scopes)
        kept = {scope.upper() for scope in keep_scopes}
        selected = set(owners) if owners is not None else None
        manifest: Owners = {}

        def removable(path: Path, span: BlockSpan) -> bool:
            if span.key in touched.get(path, set()) or span.key.scope in kept:
                return False
            if not scoped:
                return True
            owner = self._previous_owners.get(path, {}).get(str(span.key))
            if owner is not None and selected is not None:
                return owner in selected
            return span.key.scope in active

        for path in candidates:
            if not path.exists():
                continue
            result.files_scanned += 1
            with self.lock_for(path):
                text, _ = read_raw(path)
                try:
                    spans = scan_blocks(text, str(path))
                except MarkerCorruptionError as e:
                    logger.error(f"[sweep] Skipping {path}: {e}")
                    result.errors.append((str(path), str(e)))
                    manifest[path] = {**self._previous_owners.get(path, {}), **recorded.get(path, {})}
                    continue
                removed: list[str] = []
                remaining: dict[str, str | None] = {}
                # Bottom-up so earlier spans keep their line numbers.
                for span in reversed(spans):
                    name = str(span.key)
                    if not removable(path, span):
                        remaining[name] = recorded.get(path, {}).get(name, self._previous_owners.get(path, {}).get(name))
                        continue
                    text = remove_block(text, span)
                    removed.append(name)
                if remaining:
                    manifest[path] = remaining
                if removed:
                    removed.reverse()
                    result.removed[self._display(path)] = removed
                    result.blocks_removed += len(removed)
                    result.files_modified += 1
                    if not self.dry_run:
                        atomic_write(path, text)
                    logger.info(f"[sweep] Removed {len(removed)} orphaned block(s) from {self._display(path)}")

        if not self.dry_run:
            self._save_manifest(manifest)
        return result

    # ------------------------------------------------------------------
    # Manifest
    # ------------------------------------------------------------------

    def _load_manifest(self) -> Owners:
        if self.manifest_file is None or not self.manifest_file.exists():
            return {}
        try:
            with open(self.manifest_file, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"[registry] Ignoring unreadable manifest {self.manifest_file}: {e}")
            return {}
        files = data.get("files", {}) if isinstance(data, dict) else {}
        if isinstance(files, list):
            # Version 1 manifests list files only; their owners are unknown.
            return {self._normalize(self.workspace_root / rel): {} for rel in files}
        return {
            self._normalize(self.workspace_root / rel): dict(entries or {})
            for rel, entries in files.items()
        }

    def _save_manifest(self, files: Owners) -> None:
        if self.manifest_file is None:
            return
        payload = {
            "version": MANIFEST_VERSION,
            "files": {self._display(path): dict(sorted(entries.items())) for path, entries in sorted(files.items())},
        }
        atomic_write(self.manifest_file, json.dumps(payload, indent=2) + "\n")

    def _normalize(self, file_path: Path) -> Path:
        path = Path(file_path)
        if not path.is_absolute():
            path = self.workspace_root / path
        return path.resolve()

    def _display(self, path: Path) -> str:
        try:
            return path.relative_to(self.workspace_root.resolve()).as_posix()
        except ValueError:
            return str(path)

    def _check_open(self) -> None:
        if self._consumed:
            raise RegistryConsumedError("Block registry already swept; create a new one per weave run")
