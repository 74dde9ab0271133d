"""Query helpers over a processed method list, for use in templates and hookups."""

from __future__ import annotations

from collections.abc import Iterator

from loomwork.helpers.dto.method_dto import PipelineMethod


class MethodQuery:
    """Read-only views of a method list."""

    def __init__(self, methods: list[PipelineMethod]) -> None:
        self._methods = list(methods)

    def all(self) -> list[PipelineMethod]:
        return list(self._methods)

    def by_capability(self, name: str) -> list[PipelineMethod]:
        return [m for m in self._methods if m.capability == name]

    def by_crud(self, operation: str) -> list[PipelineMethod]:
        return [m for m in self._methods if m.crud_operation == operation]

    def with_tag(self, tag: str) -> list[PipelineMethod]:
        return [m for m in self._methods if tag in m.tags]

    def creates(self) -> list[PipelineMethod]:
        return self.by_crud("create")

    def reads(self) -> list[PipelineMethod]:
        return self.by_crud("read")

    def updates(self) -> list[PipelineMethod]:
        return self.by_crud("update")

    def deletes(self) -> list[PipelineMethod]:
        return self.by_crud("delete")

    def lists(self) -> list[PipelineMethod]:
        return self.by_crud("list")

    def capabilities(self) -> list[str]:
        """Capability names in first-seen order."""
        seen: dict[str, None] = {}
        for m in self._methods:
            seen.setdefault(m.capability, None)
        return list(seen)

    def grouped_by_capability(self) -> dict[str, list[PipelineMethod]]:
        return {name: self.by_capability(name) for name in self.capabilities()}

    def __iter__(self) -> Iterator[PipelineMethod]:
        return iter(self._methods)

    def __len__(self) -> int:
        return len(self._methods)
