"""Resolve ``MaybeRef`` values against a components registry.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/parameters/limit"}``) to avoid repetition. The
document model keeps such pointers as :class:`~specflat.document.Reference`
values; this module turns them back into the concrete objects they name.

Resolution is deliberately shallow:

* Only the final segment of the pointer is used as the lookup key, against a
  registry chosen by the caller (``components.parameters``,
  ``components.responses``, ...). The rest of the pointer is not inspected.
* A registry entry that is itself a ``$ref`` is rejected with
  :class:`~specflat.exceptions.RecursiveReferenceError` instead of being
  followed, so resolution can never loop.

Both public functions are pure.
"""

from __future__ import annotations

from typing import Mapping, Optional, TypeVar, Union

from specflat.document import Reference
from specflat.exceptions import (
    InvalidPointerError,
    NotConcreteError,
    RecursiveReferenceError,
    RefNotFoundError,
)

T = TypeVar("T")


def pointer_name(ref: str) -> str:
    """Return the registry key named by a ``$ref`` pointer.

    Args:
        ref: The pointer string (e.g., ``"#/components/schemas/Pet"``).

    Returns:
        The text after the last ``/`` (``"Pet"``).

    Raises:
        InvalidPointerError: If the pointer contains no ``/`` at all.
    """
    _, sep, name = ref.rpartition("/")
    if not sep:
        raise InvalidPointerError(ref)
    return name


def resolve(
    value: Union[Reference, T],
    registry: Optional[Mapping[str, Union[Reference, T]]] = None,
) -> T:
    """Return the concrete object behind *value*.

    A concrete *value* is returned as-is without looking at *registry*, so
    this always succeeds for inline objects, even when *registry* is
    ``None``.

    Args:
        value: Either a concrete object or a :class:`Reference`.
        registry: The kind-specific components mapping to resolve
            references against, or ``None`` when there is none.

    Returns:
        The concrete object.

    Raises:
        NotConcreteError: *value* is a reference and *registry* is ``None``.
        InvalidPointerError: The pointer has no ``/`` separator.
        RefNotFoundError: The pointer's name is not in *registry*.
        RecursiveReferenceError: The registry entry is itself a reference.

    Example::

        param = resolve(raw_param, components.parameters)
    """
    if not isinstance(value, Reference):
        return value

    if registry is None:
        raise NotConcreteError(value.ref)

    name = pointer_name(value.ref)
    if name not in registry:
        raise RefNotFoundError(name)

    target = registry[name]
    if isinstance(target, Reference):
        raise RecursiveReferenceError(value.ref)
    return target
