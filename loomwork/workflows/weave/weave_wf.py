"""
Weave workflow: one full generation pass over an architecture description.

This is a PURE WORKFLOW module. It builds the plan, executes every matched
task, sweeps orphaned marker blocks and aggregates one WeaveResult.

ORDER:
1. build_plan() runs to completion; tasks only ever see a finalized plan
2. a BlockRegistry is created for this run only
3. tasks run sequentially, or in a thread pool when max_workers > 1;
   a failing task is recorded and the run continues
4. the registry is consumed by its sweep; blocks of failed tasks are kept,
   and a package-filtered run only sweeps blocks owned by its selected tasks
5. per-file outcomes are folded into files_generated / modified / unchanged

ARCHITECTURE:
- Does NOT import services or interfaces. Callers pass the graph,
  capabilities, matrix and a WeaveConfig.

USAGE:
    from loomwork.workflows.weave.weave_wf import weave_workflow

    result = weave_workflow(RINGS, CAPABILITIES, MATRIX, WeaveConfig(workspace_root=root))
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from loomwork.components.emission.template_renderer_comp import TemplateRenderer
from loomwork.components.graph.generator_matrix_comp import GeneratorMatrix
from loomwork.components.graph.plan_builder_comp import TieUp, build_plan
from loomwork.components.patching.block_registry_comp import BlockRegistry
from loomwork.components.treadles.generation_output_comp import write_generated_file
from loomwork.helpers.dto.capability_dto import Capability
from loomwork.helpers.dto.hookup_dto import HookupResult
from loomwork.helpers.dto.patch_dto import PATCH_UNCHANGED
from loomwork.helpers.dto.plan_dto import GenerationTask, WeavingPlan
from loomwork.helpers.dto.ring_dto import Ring
from loomwork.helpers.dto.treadle_dto import GeneratedFile, GenerationOutcome, GeneratorContext
from loomwork.helpers.dto.weave_dto import TaskError, WeaveConfig, WeaveResult
from loomwork.helpers.exceptions import LoomworkError, PlanNotFinalError
from loomwork.helpers.files_helper import WRITE_CREATED, WRITE_MODIFIED, WRITE_UNCHANGED
from loomwork.helpers.logging_helper import clear_log_context, set_log_context

logger = logging.getLogger(__name__)

_STATUS_RANK = {WRITE_UNCHANGED: 0, WRITE_MODIFIED: 1, WRITE_CREATED: 2}


@dataclass
class TaskRun:
    """What one task left behind, before aggregation."""

    task: GenerationTask
    writes: dict[Path, str] = field(default_factory=dict)
    hookups: list[HookupResult] = field(default_factory=list)
    errors: list[TaskError] = field(default_factory=list)
    scope: str = ""
    rejected: bool = False

    def note(self, path: Path, status: str) -> None:
        previous = self.writes.get(path)
        if previous is None or _STATUS_RANK[status] > _STATUS_RANK[previous]:
            self.writes[path] = status


def task_matches_filter(task: GenerationTask, package_filter: str | None) -> bool:
    """Case-insensitive substring match on export name, ring types and outer package."""
    if not package_filter:
        return True
    needle = package_filter.lower()
    haystack = [
        task.export_name,
        task.outer_type,
        task.inner_type,
        task.outer.ring.package_name or "",
    ]
    return any(needle in value.lower() for value in haystack)


def _error(task: GenerationTask, phase: str, exc: BaseException) -> TaskError:
    return TaskError(task=task.label, phase=phase, error_type=type(exc).__name__, message=str(exc))


def execute_task(
    task: GenerationTask,
    plan: WeavingPlan,
    matrix: GeneratorMatrix,
    config: WeaveConfig,
    registry: BlockRegistry,
    renderer: TemplateRenderer,
) -> TaskRun:
    """
    Run one task's generator and collect its writes.

    Errors raised by the generator are recorded on the returned run, never
    raised, except PlanNotFinalError which always propagates.
    """
    run = TaskRun(task=task)
    generator = task.generator or matrix.get(task.outer_type, task.inner_type)
    if generator is None:
        # The matrix changed between planning and execution.
        run.errors.append(
            TaskError(task=task.label, phase="dispatch", error_type="LookupError", message="no generator registered")
        )
        return run

    context = GeneratorContext(
        task=task,
        plan=plan,
        workspace_root=config.workspace_root,
        registry=registry,
        renderer=renderer,
        config=config,
    )
    set_log_context(task=task.label)
    try:
        with registry.recording_for(task.owner):
            produced = generator(task, context)
        run.scope = context.scope
        if isinstance(produced, GenerationOutcome):
            _collect_outcome(run, produced, config)
        elif isinstance(produced, (list, tuple)):
            for item in produced:
                if not isinstance(item, GeneratedFile):
                    raise TypeError(f"Direct generator returned {type(item).__name__}, expected GeneratedFile")
                write = write_generated_file(context, item)
                run.note(config.resolve(write.path).resolve(), write.status)
        elif produced is not None:
            raise TypeError(f"Generator returned {type(produced).__name__}")
    except PlanNotFinalError:
        raise
    except LoomworkError as e:
        run.scope = context.scope
        logger.error(f"[weave] Task {task.label} failed during {e.phase or 'generation'}: {e}")
        run.errors.append(_error(task, e.phase or "generation", e))
    except Exception as e:
        run.scope = context.scope
        logger.exception(f"[weave] Task {task.label} crashed: {e}")
        run.errors.append(_error(task, "generation", e))
    finally:
        clear_log_context()
    return run


def _collect_outcome(run: TaskRun, outcome: GenerationOutcome, config: WeaveConfig) -> None:
    if outcome.rejected:
        run.rejected = True
        return
    for write in outcome.files:
        run.note(config.resolve(write.path).resolve(), write.status)
    for patch in outcome.patches:
        run.note(Path(patch.file_path).resolve(), WRITE_UNCHANGED if patch.status == PATCH_UNCHANGED else WRITE_MODIFIED)
    for failure in outcome.patch_failures:
        run.errors.append(
            TaskError(task=run.task.label, phase="patch", error_type=failure.error_type, message=failure.message)
        )
    for hookup in outcome.hookups:
        run.hookups.append(hookup)
        if hookup.status == "error":
            run.errors.append(
                TaskError(task=run.task.label, phase="hookup", error_type="HookupError", message=hookup.message)
            )
            continue
        run.note(
            config.resolve(hookup.path).resolve(),
            WRITE_MODIFIED if hookup.status == "applied" else WRITE_UNCHANGED,
        )


def weave_workflow(
    graph: Mapping[str, Ring],
    capabilities: Iterable[Capability],
    matrix: GeneratorMatrix,
    config: WeaveConfig,
    tieups: Iterable[TieUp] = (),
    renderer: TemplateRenderer | None = None,
) -> WeaveResult:
    """
    Run one weave over the architecture.

    Args:
        graph: Export name -> root ring
        capabilities: Declared capabilities
        matrix: Generator matrix
        config: Run configuration
        tieups: Direct tie-up generators
        renderer: Template renderer; built from config.template_dirs when omitted

    Returns:
        WeaveResult aggregating file counts, errors, hookups and swept blocks
    """
    plan = build_plan(graph, capabilities, matrix, tieups=tieups, verbose=config.verbose)
    renderer = renderer or TemplateRenderer(template_dirs=config.template_dirs)
    registry = BlockRegistry(config.workspace_root, config.manifest_path, dry_run=config.dry_run)

    selected = [t for t in plan.tasks if task_matches_filter(t, config.package_filter)]
    skipped = len(plan.tasks) - len(selected)
    if config.package_filter:
        logger.info(f"[weave] Package filter '{config.package_filter}': {len(selected)} task(s) selected, {skipped} skipped")
    logger.info(f"[weave] Executing {len(selected)} task(s) in {config.workspace_root}")

    if config.max_workers > 1 and len(selected) > 1:
        with ThreadPoolExecutor(max_workers=config.max_workers, thread_name_prefix="weave") as pool:
            futures = [pool.submit(execute_task, t, plan, matrix, config, registry, renderer) for t in selected]
            runs = [f.result() for f in futures]
    else:
        runs = [execute_task(t, plan, matrix, config, registry, renderer) for t in selected]

    failed_scopes = {run.scope for run in runs if run.errors and run.scope}
    if failed_scopes:
        logger.warning(f"[weave] Keeping existing blocks of failed scope(s): {', '.join(sorted(failed_scopes))}")
    sweep = registry.sweep(
        scoped=bool(config.package_filter),
        keep_scopes=failed_scopes,
        owners={run.task.owner for run in runs},
    )

    statuses: dict[Path, str] = {}
    errors: list[TaskError] = []
    hookups: list[HookupResult] = []
    rejected = 0
    for run in runs:
        rejected += int(run.rejected)
        errors.extend(run.errors)
        hookups.extend(run.hookups)
        for path, status in run.writes.items():
            previous = statuses.get(path)
            if previous is None or _STATUS_RANK[status] > _STATUS_RANK[previous]:
                statuses[path] = status
    for rel_path in sweep.removed:
        path = config.resolve(rel_path).resolve()
        if statuses.get(path) != WRITE_CREATED:
            statuses[path] = WRITE_MODIFIED
    for _path, message in sweep.errors:
        errors.append(TaskError(task="sweep", phase="sweep", error_type="MarkerCorruptionError", message=message))

    counts = {status: 0 for status in _STATUS_RANK}
    for status in statuses.values():
        counts[status] += 1

    result = WeaveResult(
        files_generated=counts[WRITE_CREATED],
        files_modified=counts[WRITE_MODIFIED],
        files_unchanged=counts[WRITE_UNCHANGED],
        errors=errors,
        tasks_run=len(runs) - rejected,
        tasks_skipped=skipped + rejected,
        blocks_removed=sweep.blocks_removed,
        hookups=hookups,
    )
    logger.info(
        f"[weave] Done: {result.files_generated} generated, {result.files_modified} modified, "
        f"{result.files_unchanged} unchanged, {result.blocks_removed} block(s) removed, {len(errors)} error(s)"
    )
    return result
