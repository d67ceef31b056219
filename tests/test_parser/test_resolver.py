"""Tests for specflat.parser.resolver."""

from __future__ import annotations

import pytest

from specflat.document import Parameter, ParameterLocation, Reference, Schema
from specflat.exceptions import (
    InvalidPointerError,
    NotConcreteError,
    RecursiveReferenceError,
    ReferenceError_,
    RefNotFoundError,
)
from specflat.parser.resolver import pointer_name, resolve


def _param(name: str = "limit") -> Parameter:
    return Parameter(name=name, in_=ParameterLocation.QUERY)


# ---------------------------------------------------------------------------
# pointer_name
# ---------------------------------------------------------------------------


class TestPointerName:
    def test_final_segment(self) -> None:
        assert pointer_name("#/components/schemas/Pet") == "Pet"

    def test_prefix_is_not_inspected(self) -> None:
        assert pointer_name("#/definitions/Pet") == "Pet"

    def test_no_separator_is_invalid(self) -> None:
        with pytest.raises(InvalidPointerError, match="Pet"):
            pointer_name("Pet")


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------


class TestResolveConcrete:
    """A concrete value never consults the registry."""

    def test_concrete_with_no_registry(self) -> None:
        param = _param()
        assert resolve(param, None) is param

    def test_concrete_with_empty_registry(self) -> None:
        param = _param()
        assert resolve(param, {}) is param

    def test_concrete_ignores_shadowing_entry(self) -> None:
        param = _param("limit")
        assert resolve(param, {"limit": _param("other")}) is param


class TestResolveReference:
    def test_found(self) -> None:
        target = _param()
        ref = Reference(ref="#/components/parameters/limit")
        assert resolve(ref, {"limit": target}) is target

    def test_no_registry(self) -> None:
        ref = Reference(ref="#/components/parameters/limit")
        with pytest.raises(NotConcreteError):
            resolve(ref, None)

    def test_not_found(self) -> None:
        ref = Reference(ref="#/components/parameters/missing")
        with pytest.raises(RefNotFoundError) as exc_info:
            resolve(ref, {"limit": _param()})
        assert exc_info.value.name == "missing"
        assert "missing" in str(exc_info.value)

    def test_invalid_pointer(self) -> None:
        with pytest.raises(InvalidPointerError):
            resolve(Reference(ref="limit"), {"limit": _param()})

    def test_reference_to_reference_is_recursive(self) -> None:
        registry = {
            "alias": Reference(ref="#/components/schemas/Pet"),
            "Pet": Schema(),
        }
        ref = Reference(ref="#/components/schemas/alias")
        with pytest.raises(RecursiveReferenceError):
            resolve(ref, registry)

    def test_self_reference_is_recursive(self) -> None:
        registry = {"Loop": Reference(ref="#/components/schemas/Loop")}
        with pytest.raises(RecursiveReferenceError):
            resolve(Reference(ref="#/components/schemas/Loop"), registry)

    def test_all_failures_share_base_class(self) -> None:
        for ref, registry in [
            (Reference(ref="#/x/a"), None),
            (Reference(ref="#/x/a"), {}),
            (Reference(ref="a"), {}),
            (Reference(ref="#/x/a"), {"a": Reference(ref="#/x/b")}),
        ]:
            with pytest.raises(ReferenceError_):
                resolve(ref, registry)
