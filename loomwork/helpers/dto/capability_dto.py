"""
Capability DTOs.

A capability (a "Management") is a named bundle of methods plus the reach that
decides which rings receive glue for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from loomwork.helpers.naming_helper import entity_name, snake_case

CRUD_TAG_PREFIX = "crud:"
CRUD_OPERATIONS = ("create", "read", "update", "delete", "list")


def crud_operation_of(tags: frozenset[str]) -> str | None:
    for tag in sorted(tags):
        if tag.startswith(CRUD_TAG_PREFIX):
            op = tag[len(CRUD_TAG_PREFIX) :]
            if op in CRUD_OPERATIONS:
                return op
    return None


class Reach(str, Enum):
    """How far out from the core a capability is generated."""

    PRIVATE = "private"  # core only
    LOCAL = "local"  # core + direct wrapping rings
    GLOBAL = "global"  # every ring, UI-facing included


@dataclass(frozen=True)
class CapabilityParam:
    name: str
    type: str
    optional: bool = False


@dataclass(frozen=True)
class CapabilityMethod:
    """One declared method of a capability."""

    name: str
    params: tuple[CapabilityParam, ...] = ()
    return_type: str = "void"
    is_collection: bool = False
    tags: frozenset[str] = frozenset()
    description: str = ""

    @property
    def crud_operation(self) -> str | None:
        """The CRUD operation named by a ``crud:*`` tag, if any."""
        return crud_operation_of(self.tags)


@dataclass(frozen=True)
class CapabilityLink:
    """
    Where a capability is implemented inside the owning core structure.

    Attributes:
        struct_name: Owning structure, e.g. "Foundframe"
        field_name: Field holding the implementation, e.g. "bookmarks"
        wrappers: Wrapper semantics on that field, outermost first ("option", "mutex", "arc")
    """

    struct_name: str
    field_name: str
    wrappers: tuple[str, ...] = ()


@dataclass(frozen=True)
class Capability:
    """A named, reach-scoped bundle of methods."""

    name: str
    reach: Reach
    methods: tuple[CapabilityMethod, ...] = ()
    link: CapabilityLink | None = None
    description: str = ""

    @property
    def entity(self) -> str:
        """BookmarkMgmt -> Bookmark."""
        return entity_name(self.name)

    @property
    def prefix(self) -> str:
        """BookmarkMgmt -> bookmark."""
        return snake_case(self.entity)


@dataclass(frozen=True)
class MethodEnrichment:
    """Computed per-method data derived from a capability's link metadata."""

    use_result: bool
    wrappers: tuple[str, ...] = ()
    field_name: str | None = None
    service_access: str | None = None

