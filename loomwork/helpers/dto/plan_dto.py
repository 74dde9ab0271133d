"""
Weaving plan DTOs.

Two distinct types model plan completeness:
- DraftPlan: being assembled by the plan builder. Only accepts additions.
  Any read of the graph-wide collections raises PlanNotFinalError.
- WeavingPlan: returned by DraftPlan.finalize(). Immutable, safe to traverse.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from loomwork.helpers.exceptions import PlanNotFinalError

if TYPE_CHECKING:
    from loomwork.helpers.dto.capability_dto import Capability, MethodEnrichment
    from loomwork.helpers.dto.ring_dto import Ring, RingEdge, RingKind


@dataclass(frozen=True, eq=False)
class RingNode:
    """A ring as placed in the plan, carrying its primary export name."""

    ring: Ring
    export_name: str
    depth: int

    @property
    def type_name(self) -> str:
        return self.ring.type_name

    @property
    def kind(self) -> RingKind:
        return self.ring.kind


@dataclass(frozen=True)
class GenerationTask:
    """
    One matched (outer type, inner type) edge to execute.

    ``generator`` is set only for direct tie-up tasks that bypass the matrix.
    """

    outer_type: str
    inner_type: str
    outer: RingNode
    inner: RingNode
    export_name: str
    generator: Callable[..., Any] | None = field(default=None, compare=False)
    config: dict[str, Any] | None = field(default=None, compare=False, hash=False)

    @property
    def label(self) -> str:
        return f"{self.export_name}:{self.outer_type}->{self.inner_type}"

    @property
    def owner(self) -> str:
        """Identity recorded against the marker blocks this task writes."""
        package = self.outer.ring.package_name
        return f"{self.label}@{package}" if package else self.label


class DraftPlan:
    """Plan under construction. Collections are write-only until finalize()."""

    def __init__(self) -> None:
        self._edges: list[RingEdge] = []
        self._nodes: list[RingNode] = []
        self._tasks: list[GenerationTask] = []
        self._finalized = False

    def add_node(self, node: RingNode) -> None:
        self._guard_open()
        self._nodes.append(node)

    def add_edge(self, edge: RingEdge) -> None:
        self._guard_open()
        self._edges.append(edge)

    def add_task(self, task: GenerationTask) -> None:
        self._guard_open()
        self._tasks.append(task)

    @property
    def edges(self) -> list[RingEdge]:
        raise PlanNotFinalError("edges read from a draft plan; call finalize() first")

    @property
    def nodes_by_kind(self) -> dict[RingKind, list[RingNode]]:
        raise PlanNotFinalError("node index read from a draft plan; call finalize() first")

    @property
    def tasks(self) -> list[GenerationTask]:
        raise PlanNotFinalError("tasks read from a draft plan; call finalize() first")

    def finalize(
        self,
        capabilities: list[Capability],
        enrichment: dict[tuple[str, str], MethodEnrichment] | None = None,
    ) -> WeavingPlan:
        """Seal the draft and return the immutable plan. A draft finalizes once."""
        self._guard_open()
        self._finalized = True
        by_kind: dict[RingKind, list[RingNode]] = {}
        by_type: dict[str, list[RingNode]] = {}
        for node in self._nodes:
            by_kind.setdefault(node.kind, []).append(node)
            by_type.setdefault(node.type_name, []).append(node)
        return WeavingPlan(
            edges=tuple(self._edges),
            nodes=tuple(self._nodes),
            nodes_by_kind=MappingProxyType({k: tuple(v) for k, v in by_kind.items()}),
            nodes_by_type=MappingProxyType({k: tuple(v) for k, v in by_type.items()}),
            capabilities=tuple(capabilities),
            tasks=tuple(self._tasks),
            enrichment=MappingProxyType(dict(enrichment or {})),
        )

    def _guard_open(self) -> None:
        if self._finalized:
            raise RuntimeError("DraftPlan already finalized")


@dataclass(frozen=True)
class WeavingPlan:
    """The finalized, immutable intermediate representation of one weave run."""

    edges: tuple[RingEdge, ...]
    nodes: tuple[RingNode, ...]
    nodes_by_kind: MappingProxyType
    nodes_by_type: MappingProxyType
    capabilities: tuple[Capability, ...]
    tasks: tuple[GenerationTask, ...]
    enrichment: MappingProxyType

    def rings(self) -> Iterator[Ring]:
        for node in self.nodes:
            yield node.ring

    def find_node(self, ring: Ring) -> RingNode | None:
        """Find the node for a ring by identity."""
        for node in self.nodes:
            if node.ring is ring:
                return node
        return None

    def export_name_for(self, ring: Ring) -> str | None:
        node = self.find_node(ring)
        return node.export_name if node else None
