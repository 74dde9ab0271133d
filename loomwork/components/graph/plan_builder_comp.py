"""
Plan builder: ring graph + capabilities + matrix -> WeavingPlan.

The whole graph is walked into a DraftPlan first; only then is the draft
finalized. Nothing reads graph-wide collections before finalization, so names
derived from the full graph are never computed from partial data.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from loomwork.components.graph.generator_matrix_comp import GeneratorMatrix
from loomwork.components.graph.link_enrichment_comp import enrich_capabilities
from loomwork.components.graph.ring_graph_comp import walk_graph
from loomwork.helpers.dto.capability_dto import Capability
from loomwork.helpers.dto.plan_dto import DraftPlan, GenerationTask, WeavingPlan
from loomwork.helpers.dto.ring_dto import Ring

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TieUp:
    """
    A direct generator bound to one specific (outer, inner) ring pair.

    Tie-ups bypass the matrix; the rings need not be adjacent but both must be
    part of the graph.
    """

    outer: Ring
    inner: Ring
    generator: Callable[..., Any]
    config: dict[str, Any] | None = None


def build_plan(
    graph: Mapping[str, Ring],
    capabilities: Iterable[Capability],
    matrix: GeneratorMatrix,
    tieups: Iterable[TieUp] = (),
    verbose: bool = False,
) -> WeavingPlan:
    """
    Build the weaving plan for one run.

    Args:
        graph: Export name -> root ring
        capabilities: Declared capabilities, attached unfiltered
        matrix: Generator matrix used to match edges
        tieups: Direct tie-up generators
        verbose: Log unmatched edges at info level instead of debug

    Returns:
        Finalized WeavingPlan
    """
    capability_list = list(capabilities)
    draft = DraftPlan()
    walk = walk_graph(graph)

    for node in walk.nodes:
        draft.add_node(node)

    matched = 0
    for edge in walk.edges:
        draft.add_edge(edge)
        outer_node = walk.node_for(edge.outer)
        inner_node = walk.node_for(edge.inner)
        outer_type, inner_type = edge.outer.type_name, edge.inner.type_name
        if not matrix.has(outer_type, inner_type):
            log = logger.info if verbose else logger.debug
            log(f"[plan] No generator for {outer_type} -> {inner_type}")
            continue
        draft.add_task(
            GenerationTask(
                outer_type=outer_type,
                inner_type=inner_type,
                outer=outer_node,
                inner=inner_node,
                export_name=outer_node.export_name,
            )
        )
        matched += 1

    for tieup in tieups:
        outer_node = walk.node_for(tieup.outer)
        inner_node = walk.node_for(tieup.inner)
        if outer_node is None or inner_node is None:
            logger.warning(f"[plan] Tie-up {tieup.outer!r} -> {tieup.inner!r} references a ring outside the graph")
            continue
        draft.add_task(
            GenerationTask(
                outer_type=outer_node.type_name,
                inner_type=inner_node.type_name,
                outer=outer_node,
                inner=inner_node,
                export_name=outer_node.export_name,
                generator=tieup.generator,
                config=tieup.config,
            )
        )
        matched += 1

    plan = draft.finalize(capability_list, enrich_capabilities(capability_list))
    logger.info(
        f"[plan] {len(plan.nodes)} rings, {len(plan.edges)} edges, "
        f"{len(plan.capabilities)} capabilities, {matched} tasks"
    )
    return plan
