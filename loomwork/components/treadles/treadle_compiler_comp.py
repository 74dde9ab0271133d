"""
Declarative generator compiler.

define_treadle() validates a definition once, when it is authored.
compile_treadle() turns it into a generator callable of (task, context) that
runs, in this fixed order:

1. match check and optional validation callback
2. method pipeline, then the optional transform_methods hook
3. data bag assembly
4. generation: whole files from output specs
5. patches: marker blocks scoped to the treadle name
6. hookups: structured hookups, then the custom hookup callback

Errors escaping a phase are tagged with that phase for the caller.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import Any

from loomwork.components.emission.target_transform_comp import transform_for_target
from loomwork.components.emission.type_mapping_comp import TARGETS
from loomwork.components.hookups.hookup_env_comp import HookupEnv
from loomwork.components.hookups.hookup_router_comp import apply_hookup
from loomwork.components.patching.patch_engine_comp import ensure_block
from loomwork.components.pipeline.method_pipeline_comp import REACH_FILTERS, MethodPipeline
from loomwork.components.pipeline.method_query_comp import MethodQuery
from loomwork.components.treadles.generation_output_comp import (
    build_data_bag,
    resolve_output_path,
    substitute_placeholders,
    write_generated_file,
)
from loomwork.helpers.dto.method_dto import PipelineMethod
from loomwork.helpers.dto.plan_dto import GenerationTask
from loomwork.helpers.dto.treadle_dto import (
    GeneratedFile,
    GenerationOutcome,
    GeneratorContext,
    MatchPattern,
    MethodConfig,
    OutputSpec,
    PatchFailure,
    PatchSpec,
    TreadleDefinition,
)
from loomwork.helpers.exceptions import (
    GenerationFailure,
    LoomworkError,
    MarkerCorruptionError,
    PatchTargetMissingError,
    TreadleDefinitionError,
)

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Definition
# ----------------------------------------------------------------------


def _as_patterns(matches: Iterable[Any]) -> tuple[MatchPattern, ...]:
    patterns = []
    for match in matches:
        if isinstance(match, MatchPattern):
            pattern = match
        elif isinstance(match, dict):
            pattern = MatchPattern(outer=match.get("outer", ""), inner=match.get("inner", ""))
        else:
            outer, inner = match
            pattern = MatchPattern(outer=outer, inner=inner)
        if not pattern.outer or not pattern.inner:
            raise TreadleDefinitionError(f"Match pattern needs both outer and inner: {match!r}")
        patterns.append(pattern)
    return tuple(patterns)


def define_treadle(
    name: str,
    matches: Iterable[Any],
    methods: MethodConfig | None,
    outputs: Sequence[OutputSpec] | Callable[[GeneratorContext], Sequence[OutputSpec]] = (),
    patches: Sequence[PatchSpec] | Callable[[GeneratorContext], Sequence[PatchSpec]] = (),
    hookups: Sequence[Any] | Callable[[GeneratorContext], Sequence[Any]] = (),
    custom_hookup: Callable[..., None] | None = None,
    data: dict[str, Any] | Callable[[GeneratorContext], dict[str, Any]] | None = None,
    validate: Callable[[GenerationTask], bool] | None = None,
    transform_methods: Callable[[list[PipelineMethod], GeneratorContext], list[PipelineMethod]] | None = None,
) -> TreadleDefinition:
    """
    Build a validated treadle definition.

    Args:
        name: Treadle name, also the marker scope of its patches
        matches: (outer type, inner type) pairs, MatchPattern or {"outer", "inner"} dicts
        methods: Method selection and pipeline
        outputs: Output specs, or a callable of the context returning them

    Raises:
        TreadleDefinitionError: name, matches, methods or outputs missing
    """
    if not name or not name.strip():
        raise TreadleDefinitionError("Treadle name is required")
    patterns = _as_patterns(matches)
    if not patterns:
        raise TreadleDefinitionError(f"Treadle '{name}' needs at least one match pattern")
    if methods is None:
        raise TreadleDefinitionError(f"Treadle '{name}' needs a methods config")
    if methods.reach not in REACH_FILTERS:
        raise TreadleDefinitionError(
            f"Treadle '{name}' has unknown reach '{methods.reach}', expected one of {sorted(REACH_FILTERS)}"
        )
    if not callable(outputs) and len(outputs) == 0:
        raise TreadleDefinitionError(f"Treadle '{name}' needs at least one output")

    return TreadleDefinition(
        name=name,
        matches=patterns,
        methods=methods,
        outputs=outputs if callable(outputs) else tuple(outputs),
        patches=patches if callable(patches) else tuple(patches),
        hookups=hookups if callable(hookups) else tuple(hookups),
        custom_hookup=custom_hookup,
        data=data,
        validate=validate,
        transform_methods=transform_methods,
    )


# ----------------------------------------------------------------------
# Compiled generator
# ----------------------------------------------------------------------


class CompiledTreadle:
    """Executable form of a TreadleDefinition. Call with (task, context)."""

    def __init__(self, definition: TreadleDefinition) -> None:
        self.definition = definition
        self.name = definition.name

    def __repr__(self) -> str:
        return f"CompiledTreadle({self.name!r})"

    def __call__(self, task: GenerationTask, context: GeneratorContext) -> GenerationOutcome:
        definition = self.definition
        # Tie-up tasks carry their generator and skip the pattern check.
        if task.generator is None and not definition.matches_task(task.outer_type, task.inner_type):
            logger.debug(f"[treadle] {self.name} does not match {task.label}")
            return GenerationOutcome(rejected=True)
        if definition.validate is not None and not definition.validate(task):
            logger.debug(f"[treadle] {self.name} rejected {task.label}")
            return GenerationOutcome(rejected=True)

        context.scope = self.name
        if context.registry is not None:
            context.registry.activate_scope(self.name)

        with _phase("methods"):
            context.methods = self._select_methods(context)
            context.data = self._data_bag(task, context)

        outcome = GenerationOutcome()
        generated: list[GeneratedFile] = []
        with _phase("generation"):
            for spec in _resolve(definition.outputs, context):
                produced = self._render_output(spec, context)
                if produced is not None:
                    generated.append(produced)
                    outcome.files.append(write_generated_file(context, produced))
        with _phase("patch"):
            for spec in _resolve(definition.patches, context):
                try:
                    result = self._apply_patch(spec, context)
                except (MarkerCorruptionError, PatchTargetMissingError) as e:
                    # Only this file is skipped; the remaining targets and hookups still run.
                    logger.error(f"[treadle] {self.name} could not patch {e.file_path}: {e}")
                    outcome.patch_failures.append(
                        PatchFailure(file_path=e.file_path, error_type=type(e).__name__, message=str(e))
                    )
                    continue
                if result is not None:
                    outcome.patches.append(result)
        with _phase("hookup"):
            env = HookupEnv(
                workspace_root=context.workspace_root,
                scope=self.name,
                registry=context.registry,
                dry_run=context.config.dry_run,
            )
            for spec in _resolve(definition.hookups, context):
                outcome.hookups.append(apply_hookup(spec, env))
            if definition.custom_hookup is not None:
                definition.custom_hookup(context, generated, context.data)

        logger.debug(
            f"[treadle] {self.name} {task.label}: {len(outcome.files)} files, "
            f"{len(outcome.patches)} patches, {len(outcome.hookups)} hookups"
        )
        return outcome

    def _select_methods(self, context: GeneratorContext) -> list[PipelineMethod]:
        config = self.definition.methods
        pipeline = MethodPipeline(config.pipeline, config.filters)
        methods = pipeline.translate(context.plan.capabilities, config.reach, context.plan.enrichment)
        if self.definition.transform_methods is not None:
            methods = list(self.definition.transform_methods(methods, context))
        return methods

    def _data_bag(self, task: GenerationTask, context: GeneratorContext) -> dict[str, Any]:
        data = build_data_bag(task)
        if task.config:
            data.update(task.config)
        user = self.definition.data
        if callable(user):
            context.data = dict(data)
            user = user(context)
        if user:
            data.update(user)
        return data

    def _template_data(self, extra: dict[str, Any] | None, context: GeneratorContext) -> dict[str, Any]:
        """Data bag for one template, with a MethodQuery over the pipeline methods under ``query``."""
        return {**context.data, "query": MethodQuery(context.methods), **(extra or {})}

    def _methods_for(self, language: str, context: GeneratorContext) -> list[Any]:
        if language in TARGETS:
            return transform_for_target(context.methods, language)
        return list(context.methods)

    def _render_output(self, spec: OutputSpec, context: GeneratorContext) -> GeneratedFile | None:
        if spec.condition is not None and not spec.condition(context):
            logger.debug(f"[treadle] {self.name} skipped output {spec.path}: condition false")
            return None
        data = self._template_data(spec.context, context)
        path = substitute_placeholders(spec.path, data)
        content = context.renderer.render(
            spec.template,
            data,
            methods=self._methods_for(spec.language, context),
            language=spec.language,
            header=spec.header,
        )
        return GeneratedFile(path=path, content=content, language=spec.language)

    def _apply_patch(self, spec: PatchSpec, context: GeneratorContext):
        if spec.condition is not None and not spec.condition(context):
            logger.debug(f"[treadle] {self.name} skipped patch {spec.block_id}: condition false")
            return None
        data = self._template_data(spec.context, context)
        if spec.template is not None:
            content = context.renderer.render(
                spec.template, data, methods=self._methods_for(spec.language, context), language=spec.language
            )
        elif spec.content is not None:
            content = substitute_placeholders(spec.content, data)
        else:
            raise GenerationFailure(f"Patch {spec.block_id} in treadle '{self.name}' has neither template nor content")
        return ensure_block(
            resolve_output_path(context.workspace_root, substitute_placeholders(spec.file, data)),
            self.name,
            substitute_placeholders(spec.block_id, data),
            spec.language,
            content,
            anchor=spec.anchor,
            create=spec.create,
            registry=context.registry,
            dry_run=context.config.dry_run,
        )


def compile_treadle(definition: TreadleDefinition) -> CompiledTreadle:
    """Compile a definition into a generator for GeneratorMatrix.register()."""
    return CompiledTreadle(definition)


def _resolve(source: Any, context: GeneratorContext) -> list[Any]:
    specs = source(context) if callable(source) else source
    return list(specs or ())


@contextlib.contextmanager
def _phase(name: str) -> Iterator[None]:
    """Tag errors escaping the block with the phase name."""
    try:
        yield
    except LoomworkError as e:
        if e.phase is None:
            e.phase = name
        raise
    except Exception as e:
        failure = GenerationFailure(f"{type(e).__name__}: {e}")
        failure.phase = name
        raise failure from e
