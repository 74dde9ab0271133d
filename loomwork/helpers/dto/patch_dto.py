"""
Patch engine DTOs: marker pairs, anchors, block spans and patch results.
"""

from __future__ import annotations

from dataclasses import dataclass, field

PATCH_INSERTED = "inserted"
PATCH_UPDATED = "updated"
PATCH_UNCHANGED = "unchanged"


@dataclass(frozen=True)
class MarkerPair:
    """Rendered start/end marker lines (without indentation or newline)."""

    start: str
    end: str


@dataclass(frozen=True)
class BlockKey:
    """Identity of a marker block inside a file. Scope and id are upper-cased."""

    scope: str
    block_id: str

    @classmethod
    def of(cls, scope: str, block_id: str) -> BlockKey:
        return cls(scope.upper(), block_id.upper())

    def __str__(self) -> str:
        return f"{self.scope}:{self.block_id}"


@dataclass(frozen=True)
class Anchor:
    """
    Where a new block is inserted when its markers are not yet present.

    mode is "end" (default), "after" or "before". pattern is matched against
    each line's stripped text as a substring, or as a regex when regex=True;
    the first matching line wins.
    """

    mode: str = "end"
    pattern: str | None = None
    regex: bool = False

    @classmethod
    def end(cls) -> Anchor:
        return cls()

    @classmethod
    def after(cls, pattern: str, regex: bool = False) -> Anchor:
        return cls("after", pattern, regex)

    @classmethod
    def before(cls, pattern: str, regex: bool = False) -> Anchor:
        return cls("before", pattern, regex)


@dataclass(frozen=True)
class BlockSpan:
    """Location of one block in a list of lines (0-indexed, marker lines inclusive)."""

    key: BlockKey
    start_line: int
    end_line: int
    indent: str = ""


@dataclass(frozen=True)
class PatchResult:
    file_path: str
    key: BlockKey
    status: str

    @property
    def changed(self) -> bool:
        return self.status != PATCH_UNCHANGED


@dataclass
class SweepResult:
    """Outcome of the end-of-run orphan sweep."""

    files_scanned: int = 0
    files_modified: int = 0
    blocks_removed: int = 0
    removed: dict[str, list[str]] = field(default_factory=dict)
    errors: list[tuple[str, str]] = field(default_factory=list)
