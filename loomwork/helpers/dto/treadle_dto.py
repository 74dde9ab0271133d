"""
Declarative generator (treadle) DTOs.

A TreadleDefinition is authored once and compiled into a generator that runs
once per matching GenerationTask. Output, patch and hookup lists may be given
as callables of the generator context so that one definition can fan out into
a variable number of concrete specs (for example one output per entity).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

from loomwork.helpers.dto.method_dto import PipelineMethod

if TYPE_CHECKING:
    from loomwork.helpers.dto.patch_dto import Anchor, PatchResult
    from loomwork.helpers.dto.hookup_dto import HookupResult
    from loomwork.helpers.dto.plan_dto import GenerationTask, WeavingPlan
    from loomwork.helpers.dto.weave_dto import WeaveConfig

MethodTransform = Callable[[list[PipelineMethod]], list[PipelineMethod]]
MethodFilter = Callable[[PipelineMethod], bool]


@dataclass(frozen=True)
class MatchPattern:
    """Ordered (outer type, inner type) pair a treadle applies to."""

    outer: str
    inner: str


@dataclass(frozen=True)
class MethodConfig:
    """
    Method selection for a treadle.

    reach: "core", "platform" or "front"
    pipeline: transforms applied left to right
    filters: predicates applied after every transform
    """

    reach: str = "platform"
    pipeline: tuple[MethodTransform, ...] = ()
    filters: tuple[MethodFilter, ...] = ()


@dataclass(frozen=True)
class OutputSpec:
    """
    One whole file to generate.

    path may hold ``{placeholder}`` tokens resolved against the data bag.
    context is merged over the data bag for this output only.
    """

    template: str
    path: str
    language: str
    condition: Callable[[GeneratorContext], bool] | None = None
    context: dict[str, Any] | None = None
    header: bool = True


@dataclass(frozen=True)
class PatchSpec:
    """
    One marker block to ensure inside an existing file.

    Either template or content supplies the block body.
    """

    file: str
    block_id: str
    language: str
    template: str | None = None
    content: str | None = None
    anchor: Anchor | None = None
    create: bool = False
    condition: Callable[[GeneratorContext], bool] | None = None
    context: dict[str, Any] | None = None


SpecSource = Union[Sequence[Any], Callable[["GeneratorContext"], Sequence[Any]]]


@dataclass(frozen=True)
class TreadleDefinition:
    """Declarative generator definition. Build with define_treadle()."""

    name: str
    matches: tuple[MatchPattern, ...]
    methods: MethodConfig
    outputs: SpecSource = ()
    patches: SpecSource = ()
    hookups: SpecSource = ()
    custom_hookup: Callable[[GeneratorContext, list[GeneratedFile], dict[str, Any]], None] | None = None
    data: dict[str, Any] | Callable[[GeneratorContext], dict[str, Any]] | None = None
    validate: Callable[[GenerationTask], bool] | None = None
    transform_methods: Callable[[list[PipelineMethod], GeneratorContext], list[PipelineMethod]] | None = None

    def matches_task(self, outer_type: str, inner_type: str) -> bool:
        return any(m.outer == outer_type and m.inner == inner_type for m in self.matches)


@dataclass
class GeneratorContext:
    """
    Everything a generator may use while running one task.

    The registry and renderer are the ones owned by the current weave run.
    """

    task: GenerationTask
    plan: WeavingPlan
    workspace_root: Path
    registry: Any
    renderer: Any
    config: WeaveConfig
    scope: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    methods: list[PipelineMethod] = field(default_factory=list)

    @property
    def outer(self):
        return self.task.outer

    @property
    def inner(self):
        return self.task.inner


@dataclass(frozen=True)
class GeneratedFile:
    """A whole file produced by a generator, path relative to the workspace root."""

    path: str
    content: str
    language: str | None = None
    header: bool = False


@dataclass
class FileWrite:
    path: str
    status: str


@dataclass(frozen=True)
class PatchFailure:
    """A patch target that could not be patched; other targets of the task still are."""

    file_path: str
    error_type: str
    message: str


@dataclass
class GenerationOutcome:
    """What one task produced across its three phases."""

    files: list[FileWrite] = field(default_factory=list)
    patches: list[PatchResult] = field(default_factory=list)
    patch_failures: list[PatchFailure] = field(default_factory=list)
    hookups: list[HookupResult] = field(default_factory=list)
    rejected: bool = False
