"""Unit tests for plan building over ring graphs."""

import logging

import pytest

from loomwork.components.graph.generator_matrix_comp import GeneratorMatrix
from loomwork.components.graph.plan_builder_comp import TieUp, build_plan
from loomwork.helpers.dto.ring_dto import RingKind, core_ring


def _noop(task, context):
    return []


@pytest.fixture
def full_matrix() -> GeneratorMatrix:
    matrix = GeneratorMatrix()
    matrix.register("AndroidSpiraler", "RustCore", _noop)
    matrix.register("TauriSpiraler", "RustCore", _noop)
    matrix.register("FrontAggregator", "AndroidSpiraler", _noop)
    matrix.register("FrontAggregator", "TauriSpiraler", _noop)
    return matrix


class TestSingleWrap:
    @pytest.mark.unit
    def test_one_edge_one_task(self, android, core, bookmark_capability) -> None:
        matrix = GeneratorMatrix()
        matrix.register("AndroidSpiraler", "RustCore", _noop)

        plan = build_plan({"app": android}, [bookmark_capability], matrix)

        assert len(plan.edges) == 1
        assert len(plan.tasks) == 1
        task = plan.tasks[0]
        assert (task.outer.ring, task.inner.ring) == (android, core)
        assert task.export_name == "app"
        assert task.inner.export_name == "app"
        assert plan.capabilities == (bookmark_capability,)

    @pytest.mark.unit
    def test_unmatched_edge_is_not_a_task(self, android) -> None:
        plan = build_plan({"app": android}, [], GeneratorMatrix())

        assert len(plan.edges) == 1
        assert plan.tasks == ()

    @pytest.mark.unit
    def test_verbose_logs_unmatched_at_info(self, android, caplog) -> None:
        with caplog.at_level(logging.INFO):
            build_plan({"app": android}, [], GeneratorMatrix(), verbose=True)

        assert "No generator for AndroidSpiraler -> RustCore" in caplog.text


class TestAggregation:
    @pytest.mark.unit
    def test_aggregator_over_two_platforms(self, aggregator, core, full_matrix) -> None:
        """Every distinct adjacency is one edge; the shared core is visited once."""
        plan = build_plan({"front": aggregator}, [], full_matrix)

        assert len(plan.nodes) == 4
        assert len(plan.edges) == 4
        assert len(plan.tasks) == 4
        pairs = {(t.outer_type, t.inner_type) for t in plan.tasks}
        assert pairs == set(full_matrix.pairs())
        assert [n.ring for n in plan.nodes_by_kind[RingKind.CORE]] == [core]

    @pytest.mark.unit
    def test_inner_rings_inherit_first_discoverer(self, android, tauri, core, full_matrix) -> None:
        plan = build_plan({"app": android, "desk": tauri}, [], full_matrix)

        assert plan.export_name_for(android) == "app"
        assert plan.export_name_for(tauri) == "desk"
        assert plan.export_name_for(core) == "app"
        assert len(plan.tasks) == 2

    @pytest.mark.unit
    def test_same_name_rings_stay_distinct(self, full_matrix) -> None:
        first = core_ring("core")
        second = core_ring("core")

        plan = build_plan({"a": first, "b": second}, [], full_matrix)

        assert len(plan.nodes) == 2


class TestTieUps:
    @pytest.mark.unit
    def test_tieup_task_carries_generator(self, aggregator, core) -> None:
        tieup = TieUp(outer=aggregator, inner=core, generator=_noop, config={"flavor": "debug"})

        plan = build_plan({"front": aggregator}, [], GeneratorMatrix(), tieups=[tieup])

        assert len(plan.tasks) == 1
        task = plan.tasks[0]
        assert task.generator is _noop
        assert task.config == {"flavor": "debug"}
        assert (task.outer_type, task.inner_type) == ("FrontAggregator", "RustCore")

    @pytest.mark.unit
    def test_tieup_outside_graph_is_dropped(self, android, caplog) -> None:
        stray = core_ring("stray")

        with caplog.at_level(logging.WARNING):
            plan = build_plan({"app": android}, [], GeneratorMatrix(), tieups=[TieUp(android, stray, _noop)])

        assert plan.tasks == ()
        assert "outside the graph" in caplog.text
