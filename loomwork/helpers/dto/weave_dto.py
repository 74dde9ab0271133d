"""Weave run configuration and aggregate result models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from loomwork.helpers.dto.hookup_dto import HookupResult

DEFAULT_MANIFEST_PATH = ".loomwork/blocks.json"


class WeaveConfig(BaseModel):
    """Configuration for one weave invocation."""

    workspace_root: Path = Field(description="Root that relative output and patch paths resolve against")
    package_filter: str | None = Field(
        default=None,
        description="Case-insensitive substring; only tasks whose export, type or package name contains it run",
    )
    verbose: bool = Field(default=False, description="Log unmatched edges, rejected tasks and per-file writes")
    max_workers: int = Field(default=1, ge=1, description="Tasks run concurrently when greater than 1")
    template_dirs: list[Path] = Field(default_factory=list, description="Directories searched for template files")
    manifest_path: str = Field(default=DEFAULT_MANIFEST_PATH, description="Block manifest, relative to workspace_root")
    dry_run: bool = Field(default=False, description="Compute results without writing any file")

    def resolve(self, path: str | Path) -> Path:
        """Resolve a workspace-relative path."""
        p = Path(path)
        return p if p.is_absolute() else self.workspace_root / p


class TaskError(BaseModel):
    """One recorded failure, tied to the task that produced it."""

    task: str = Field(description="Task label: export:outer->inner")
    phase: str = Field(description="generation, patch, hookup, sweep or dispatch")
    error_type: str = Field(description="Exception class name")
    message: str


class WeaveResult(BaseModel):
    """Aggregate result of a weave run."""

    files_generated: int = 0
    files_modified: int = 0
    files_unchanged: int = 0
    errors: list[TaskError] = Field(default_factory=list)
    tasks_run: int = 0
    tasks_skipped: int = 0
    blocks_removed: int = 0
    hookups: list[HookupResult] = Field(default_factory=list)

    def model_post_init(self, __context, /) -> None:
        """Validate result invariants."""
        for name in ("files_generated", "files_modified", "files_unchanged", "tasks_run", "tasks_skipped", "blocks_removed"):
            if getattr(self, name) < 0:
                msg = f"{name} cannot be negative"
                raise ValueError(msg)

    @property
    def ok(self) -> bool:
        return not self.errors
