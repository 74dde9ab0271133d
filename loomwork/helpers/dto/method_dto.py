"""
Method DTOs flowing through the method pipeline and the emitters.

PipelineMethod is the flat, capability-tagged form produced by method
collection. Transforms never mutate one; they return replaced copies.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from loomwork.helpers.dto.capability_dto import CapabilityLink, Reach, crud_operation_of


@dataclass(frozen=True)
class PipelineParam:
    name: str
    type: str
    optional: bool = False


@dataclass(frozen=True)
class PipelineMethod:
    """
    A capability method as seen by the pipeline.

    Attributes:
        name: Bind-point name; rewritten by prefixing transforms
        original_name: Name as declared, kept for human readable naming
        capability: Owning capability name, e.g. "BookmarkMgmt"
        entity: Capability entity, e.g. "Bookmark"
        prefix: Snake prefix of the capability, e.g. "bookmark"
        metadata: Transform annotations (crud.*, link.*, ...)
    """

    name: str
    original_name: str
    capability: str
    entity: str
    prefix: str
    reach: Reach
    params: tuple[PipelineParam, ...] = ()
    return_type: str = "void"
    is_collection: bool = False
    tags: frozenset[str] = frozenset()
    description: str = ""
    link: CapabilityLink | None = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def crud_operation(self) -> str | None:
        return crud_operation_of(self.tags)

    def with_metadata(self, values: dict[str, Any]) -> PipelineMethod:
        """Return a copy with values merged into metadata (keys like ``crud.operation``)."""
        merged = dict(self.metadata)
        merged.update(values)
        return replace(self, metadata=merged)


@dataclass(frozen=True)
class BoundMethod:
    """
    Names a method takes at each binding surface.

    bind_name is the snake name used by routing tables (``bookmark_add_bookmark``),
    impl_name is what the core implements (``add_bookmark``), js_name is the
    camel name exposed to UI code (``bookmarkAddBookmark``).
    """

    bind_name: str
    impl_name: str
    js_name: str
    service_name: str
    method: PipelineMethod


@dataclass(frozen=True)
class EmittedParam:
    name: str
    type: str
    optional: bool = False
    marshal_in: str | None = None


@dataclass(frozen=True)
class EmittedMethod:
    """A method rendered into one target's vocabulary, ready for a template."""

    name: str
    bind_name: str
    original_name: str
    capability: str
    params: tuple[EmittedParam, ...]
    return_type: str
    target: str
    marshal_out: str | None = None
    error_value: str | None = None
    description: str = ""
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
