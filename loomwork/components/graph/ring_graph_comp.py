"""
Ring graph traversal.

Walks every ring's inner rings once, deduplicating by identity. Root rings keep
the export name they were registered under; inner rings inherit the export
name of whichever ring discovered them first (unless the ring carries an
explicit export_name).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from loomwork.helpers.dto.plan_dto import RingNode
from loomwork.helpers.dto.ring_dto import Ring, RingEdge

logger = logging.getLogger(__name__)


@dataclass
class GraphWalk:
    """Nodes in discovery order and the distinct (outer, inner) edges."""

    nodes: list[RingNode] = field(default_factory=list)
    edges: list[RingEdge] = field(default_factory=list)

    def node_for(self, ring: Ring) -> RingNode | None:
        for node in self.nodes:
            if node.ring is ring:
                return node
        return None


def walk_graph(graph: Mapping[str, Ring]) -> GraphWalk:
    """
    Walk the ring graph from its named roots.

    Args:
        graph: Export name -> root ring

    Returns:
        GraphWalk with each distinct ring once and each distinct edge once
    """
    walk = GraphWalk()
    export_names: dict[int, str] = {}
    visited: set[int] = set()
    seen_pairs: set[tuple[int, int]] = set()

    for export_name, ring in graph.items():
        export_names.setdefault(id(ring), ring.export_name or export_name)

    def visit(ring: Ring, depth: int, discovered_by: str) -> None:
        key = id(ring)
        if key in visited:
            return
        visited.add(key)
        export_name = export_names.setdefault(key, ring.export_name or discovered_by)
        node = RingNode(ring=ring, export_name=export_name, depth=depth)
        walk.nodes.append(node)
        for inner in ring.inner:
            if (key, id(inner)) in seen_pairs:
                continue
            seen_pairs.add((key, id(inner)))
            walk.edges.append(RingEdge(outer=ring, inner=inner, export_name=export_name))
            visit(inner, depth + 1, export_name)

    for export_name, ring in graph.items():
        visit(ring, 0, export_name)

    logger.debug(f"[graph] Walked {len(walk.nodes)} rings, {len(walk.edges)} edges")
    return walk
