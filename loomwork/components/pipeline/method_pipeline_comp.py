"""
Method pipeline: capability list -> reach-scoped flat method list -> transforms -> filters.

Transforms are pure ``list -> list`` functions composed by left-to-right
reduction. Filters are predicates and always run after the last transform,
so a filter decides on the final shape of a method, never an intermediate one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from functools import reduce

from loomwork.helpers.dto.capability_dto import Capability, MethodEnrichment, Reach
from loomwork.helpers.dto.method_dto import BoundMethod, PipelineMethod, PipelineParam
from loomwork.helpers.dto.treadle_dto import MethodFilter, MethodTransform
from loomwork.helpers.naming_helper import camel_case, snake_case

logger = logging.getLogger(__name__)

# Each wider level is a superset of the narrower one.
REACH_FILTERS: dict[str, frozenset[Reach]] = {
    "core": frozenset({Reach.PRIVATE, Reach.LOCAL, Reach.GLOBAL}),
    "platform": frozenset({Reach.LOCAL, Reach.GLOBAL}),
    "front": frozenset({Reach.GLOBAL}),
}


def collect_methods(
    capabilities: Iterable[Capability],
    reach_filter: str,
    enrichment: Mapping[tuple[str, str], MethodEnrichment] | None = None,
) -> list[PipelineMethod]:
    """
    Flatten capabilities visible at reach_filter into pipeline methods.

    Args:
        capabilities: Declared capabilities
        reach_filter: "core", "platform" or "front"
        enrichment: Optional link enrichment from the plan, copied into metadata

    Returns:
        Methods in declaration order
    """
    if reach_filter not in REACH_FILTERS:
        raise ValueError(f"Unknown reach filter '{reach_filter}', expected one of {sorted(REACH_FILTERS)}")
    allowed = REACH_FILTERS[reach_filter]
    methods: list[PipelineMethod] = []
    for capability in capabilities:
        if capability.reach not in allowed:
            continue
        for m in capability.methods:
            metadata = {}
            extra = (enrichment or {}).get((capability.name, m.name))
            if extra is not None:
                metadata = {
                    "link.use_result": extra.use_result,
                    "link.wrappers": extra.wrappers,
                    "link.field_name": extra.field_name,
                    "link.service_access": extra.service_access,
                }
            methods.append(
                PipelineMethod(
                    name=m.name,
                    original_name=m.name,
                    capability=capability.name,
                    entity=capability.entity,
                    prefix=capability.prefix,
                    reach=capability.reach,
                    params=tuple(PipelineParam(p.name, p.type, p.optional) for p in m.params),
                    return_type=m.return_type,
                    is_collection=m.is_collection,
                    tags=m.tags,
                    description=m.description,
                    link=capability.link,
                    metadata=metadata,
                )
            )
    return methods


class MethodPipeline:
    """Ordered transforms followed by filters."""

    def __init__(self, transforms: Sequence[MethodTransform] = (), filters: Sequence[MethodFilter] = ()) -> None:
        self.transforms = tuple(transforms)
        self.filters = tuple(filters)

    def then(self, transform: MethodTransform) -> MethodPipeline:
        """Return a new pipeline with transform appended."""
        return MethodPipeline((*self.transforms, transform), self.filters)

    def where(self, method_filter: MethodFilter) -> MethodPipeline:
        """Return a new pipeline with a filter appended."""
        return MethodPipeline(self.transforms, (*self.filters, method_filter))

    def process(self, methods: list[PipelineMethod]) -> list[PipelineMethod]:
        transformed = reduce(lambda acc, transform: transform(acc), self.transforms, list(methods))
        return [m for m in transformed if all(f(m) for f in self.filters)]

    def translate(
        self,
        capabilities: Iterable[Capability],
        reach_filter: str,
        enrichment: Mapping[tuple[str, str], MethodEnrichment] | None = None,
    ) -> list[PipelineMethod]:
        """collect_methods() followed by process()."""
        methods = collect_methods(capabilities, reach_filter, enrichment)
        result = self.process(methods)
        logger.debug(f"[pipeline] {reach_filter}: {len(methods)} collected, {len(result)} after pipeline")
        return result


def to_bound_method(method: PipelineMethod) -> BoundMethod:
    """
    Derive the names a method takes at each binding surface.

    ``bookmark_add_bookmark`` binds to impl ``add_bookmark`` and JS ``bookmarkAddBookmark``.
    impl_name always comes from the declared name, whatever prefixing ran.
    """
    bind_name = snake_case(method.name)
    impl_name = snake_case(method.original_name)
    return BoundMethod(
        bind_name=bind_name,
        impl_name=impl_name,
        js_name=camel_case(bind_name),
        service_name=f"{method.entity}Service",
        method=method,
    )
