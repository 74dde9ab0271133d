"""
Ring graph DTOs.

A ring is one layer of the architecture: the core engine, a platform ring that
wraps exactly one inner ring, or an aggregating ring that wraps several. Rings
compare by identity, so two rings sharing a name are still distinct nodes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loomwork.helpers.exceptions import RingDefinitionError


class RingKind(str, Enum):
    """Closed set of ring kinds, fixed when the ring is constructed."""

    CORE = "core"
    WRAPPING = "wrapping"
    AGGREGATING = "aggregating"


@dataclass(frozen=True, eq=False)
class Ring:
    """
    One node of the architecture graph.

    Attributes:
        name: Human readable name (not an identity key)
        kind: Ring kind, drives arity validation
        type_name: Generator matrix key, e.g. "RustCore" or "AndroidSpiraler"
        inner: Rings this ring wraps
        export_name: Explicit export name; otherwise the plan assigns one
        metadata: Free-form values such as package name and package dir
    """

    name: str
    kind: RingKind
    type_name: str
    inner: tuple[Ring, ...] = ()
    export_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        count = len(self.inner)
        if self.kind is RingKind.CORE and count != 0:
            raise RingDefinitionError(f"Core ring '{self.name}' cannot wrap other rings")
        if self.kind is RingKind.WRAPPING and count != 1:
            raise RingDefinitionError(f"Wrapping ring '{self.name}' must wrap exactly one ring, got {count}")
        if self.kind is RingKind.AGGREGATING and count < 1:
            raise RingDefinitionError(f"Aggregating ring '{self.name}' must wrap at least one ring")

    @property
    def package_name(self) -> str | None:
        return self.metadata.get("package_name")

    @property
    def package_dir(self) -> str | None:
        return self.metadata.get("package_dir")

    def __repr__(self) -> str:
        return f"Ring({self.name!r}, {self.kind.value}, {self.type_name!r})"


@dataclass(frozen=True)
class RingEdge:
    """Ordered (outer, inner) adjacency discovered while walking the graph."""

    outer: Ring
    inner: Ring
    export_name: str


def core_ring(name: str, type_name: str = "RustCore", **metadata: Any) -> Ring:
    """Build a core ring."""
    return Ring(name=name, kind=RingKind.CORE, type_name=type_name, metadata=metadata)


def wrap_ring(name: str, type_name: str, inner: Ring, **metadata: Any) -> Ring:
    """Build a platform ring wrapping a single inner ring."""
    return Ring(name=name, kind=RingKind.WRAPPING, type_name=type_name, inner=(inner,), metadata=metadata)


def aggregate_rings(name: str, type_name: str, inner: list[Ring] | tuple[Ring, ...], **metadata: Any) -> Ring:
    """Build an aggregating ring over several inner rings."""
    return Ring(name=name, kind=RingKind.AGGREGATING, type_name=type_name, inner=tuple(inner), metadata=metadata)
