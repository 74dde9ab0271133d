"""
Explicit capability declaration.

Architecture descriptions call declare_capability() for every capability and
hand the collected list to the weave. Nothing is discovered by reflection.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from loomwork.helpers.dto.capability_dto import (
    Capability,
    CapabilityLink,
    CapabilityMethod,
    CapabilityParam,
    Reach,
)

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """Ordered collection of declared capabilities. Names are unique."""

    def __init__(self) -> None:
        self._capabilities: dict[str, Capability] = {}

    def add(self, capability: Capability) -> Capability:
        if capability.name in self._capabilities:
            raise ValueError(f"Capability '{capability.name}' is already declared")
        self._capabilities[capability.name] = capability
        return capability

    def get(self, name: str) -> Capability | None:
        return self._capabilities.get(name)

    def remove(self, name: str) -> Capability | None:
        return self._capabilities.pop(name, None)

    def all(self) -> list[Capability]:
        return list(self._capabilities.values())

    def __iter__(self) -> Iterator[Capability]:
        return iter(self._capabilities.values())

    def __len__(self) -> int:
        return len(self._capabilities)


def param(name: str, type_: str, optional: bool = False) -> CapabilityParam:
    return CapabilityParam(name=name, type=type_, optional=optional)


def method(
    name: str,
    params: Iterable[CapabilityParam] = (),
    returns: str = "void",
    collection: bool = False,
    tags: Iterable[str] = (),
    crud: str | None = None,
    description: str = "",
) -> CapabilityMethod:
    """
    Declare one capability method.

    ``crud="create"`` is shorthand for adding the ``crud:create`` tag.
    """
    tag_set = set(tags)
    if crud:
        tag_set.add(f"crud:{crud}")
    return CapabilityMethod(
        name=name,
        params=tuple(params),
        return_type=returns,
        is_collection=collection,
        tags=frozenset(tag_set),
        description=description,
    )


def declare_capability(
    name: str,
    reach: Reach | str,
    methods: Iterable[CapabilityMethod],
    link: CapabilityLink | None = None,
    description: str = "",
    registry: CapabilityRegistry | None = None,
) -> Capability:
    """
    Declare a capability and optionally record it in a registry.

    Args:
        name: Capability name, conventionally ending in "Mgmt"
        reach: Reach or its string value ("private", "local", "global")
        methods: Declared methods
        link: Where the core implements it
        registry: Registry to record the declaration in

    Returns:
        The declared Capability
    """
    capability = Capability(
        name=name,
        reach=Reach(reach),
        methods=tuple(methods),
        link=link,
        description=description,
    )
    names = [m.name for m in capability.methods]
    duplicates = {n for n in names if names.count(n) > 1}
    if duplicates:
        raise ValueError(f"Capability '{name}' declares duplicate methods: {sorted(duplicates)}")
    if registry is not None:
        registry.add(capability)
    logger.debug(f"[capabilities] Declared {name} ({capability.reach.value}, {len(capability.methods)} methods)")
    return capability
