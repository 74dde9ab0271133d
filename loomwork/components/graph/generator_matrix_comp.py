"""
Generator matrix: dispatch from an ordered (outer type, inner type) pair to a generator.

Lookup is exact on immediate adjacency. There is no ancestor fallback and no
wildcard; an unmatched pair simply has no generator.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Generator = Callable[..., Any]


class GeneratorMatrix:
    """Ordered-pair dispatch table. (A, B) and (B, A) are different keys."""

    def __init__(self) -> None:
        self._pairs: dict[tuple[str, str], Generator] = {}

    def register(self, outer_type: str, inner_type: str, generator: Generator) -> None:
        key = (outer_type, inner_type)
        if key in self._pairs and self._pairs[key] is not generator:
            logger.warning(f"[matrix] Replacing generator for {outer_type} -> {inner_type}")
        self._pairs[key] = generator

    def get(self, outer_type: str, inner_type: str) -> Generator | None:
        return self._pairs.get((outer_type, inner_type))

    def has(self, outer_type: str, inner_type: str) -> bool:
        return (outer_type, inner_type) in self._pairs

    def pairs(self) -> list[tuple[str, str]]:
        return list(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)
