"""Unit tests for ring construction and arity validation."""

import pytest

from loomwork.helpers.dto.ring_dto import Ring, RingKind, aggregate_rings, core_ring, wrap_ring
from loomwork.helpers.exceptions import RingDefinitionError


class TestRingArity:
    @pytest.mark.unit
    def test_core_cannot_wrap(self) -> None:
        inner = core_ring("inner")
        with pytest.raises(RingDefinitionError, match="cannot wrap"):
            Ring(name="bad", kind=RingKind.CORE, type_name="RustCore", inner=(inner,))

    @pytest.mark.unit
    def test_wrapping_needs_exactly_one(self) -> None:
        a, b = core_ring("a"), core_ring("b")
        with pytest.raises(RingDefinitionError, match="exactly one"):
            Ring(name="bad", kind=RingKind.WRAPPING, type_name="AndroidSpiraler", inner=(a, b))
        with pytest.raises(RingDefinitionError):
            Ring(name="bad", kind=RingKind.WRAPPING, type_name="AndroidSpiraler")

    @pytest.mark.unit
    def test_aggregating_needs_at_least_one(self) -> None:
        with pytest.raises(RingDefinitionError, match="at least one"):
            aggregate_rings("front", "FrontAggregator", [])


class TestRingIdentity:
    @pytest.mark.unit
    def test_same_name_rings_are_distinct(self) -> None:
        """Rings compare by identity, not by name."""
        a = core_ring("core")
        b = core_ring("core")

        assert a != b
        assert len({a, b}) == 2

    @pytest.mark.unit
    def test_metadata_accessors(self) -> None:
        ring = wrap_ring("android", "AndroidSpiraler", core_ring("core"), package_name="com.example", package_dir="android")

        assert ring.package_name == "com.example"
        assert ring.package_dir == "android"
        assert ring.kind is RingKind.WRAPPING
        assert core_ring("core").package_name is None
