"""Infer native types from OpenAPI Schema Objects.

:func:`infer_type` collapses a (possibly ``$ref``) schema into the closed
:data:`~specflat.models.NativeType` algebra:

* a ``$ref`` becomes :class:`~specflat.models.NamedType` -- component
  schemas are nominal types and are never expanded inline;
* a schema with no ``type`` tag, or with ``type: object``, becomes
  :class:`~specflat.models.AnonymousType` carrying the raw schema;
* ``boolean``/``integer``/``number``/``string`` map to primitives, refined
  by ``format`` where the format is known;
* ``array`` recurses into every permissible item schema;
* the result is wrapped in :class:`~specflat.models.OptionalType` unless the
  caller says the value is required.

Format table (format -> required type tag -> primitive)::

    int32     integer  i32
    int64     integer  i64
    float     number   f32
    double    number   f64
    byte      string   string
    binary    string   string
    password  string   string
    date      string   date
    date-time string   date-time

A known format on any other type tag raises
:class:`~specflat.exceptions.FormatTypeMismatchError`. Formats outside the
table (``uuid``, ``email``, ...) are ignored.
"""

from __future__ import annotations

from typing import Mapping

from specflat.document import MaybeRef, MediaType, Reference, Schema, SchemaType
from specflat.exceptions import (
    AmbiguousTypeArrayError,
    FormatTypeMismatchError,
    MissingItemsError,
    NoTypeSpecifiedError,
    NullTypeUnsupportedError,
)
from specflat.models import (
    AnonymousType,
    ArrayType,
    NamedType,
    NativeType,
    OptionalType,
    Primitive,
)
from specflat.parser.resolver import pointer_name

_TYPE_PRIMITIVES: dict[SchemaType, Primitive] = {
    SchemaType.BOOLEAN: Primitive.BOOL,
    SchemaType.INTEGER: Primitive.I64,
    SchemaType.NUMBER: Primitive.F64,
    SchemaType.STRING: Primitive.STRING,
}

_FORMAT_PRIMITIVES: dict[str, tuple[SchemaType, Primitive]] = {
    "int32": (SchemaType.INTEGER, Primitive.I32),
    "int64": (SchemaType.INTEGER, Primitive.I64),
    "float": (SchemaType.NUMBER, Primitive.F32),
    "double": (SchemaType.NUMBER, Primitive.F64),
    "byte": (SchemaType.STRING, Primitive.STRING),
    "binary": (SchemaType.STRING, Primitive.STRING),
    "password": (SchemaType.STRING, Primitive.STRING),
    "date": (SchemaType.STRING, Primitive.DATE),
    "date-time": (SchemaType.STRING, Primitive.DATE_TIME),
}


def infer_type(schema: MaybeRef[Schema], required: bool) -> NativeType:
    """Infer the native type of *schema*.

    Args:
        schema: A concrete :class:`~specflat.document.Schema` or a
            :class:`~specflat.document.Reference` to a component schema.
        required: Whether the value is always present. ``False`` wraps the
            result in :class:`~specflat.models.OptionalType`.

    Returns:
        The inferred native type.

    Raises:
        InvalidPointerError: *schema* is a ``$ref`` without a ``/``.
        AmbiguousTypeArrayError: More than one ``type`` tag is declared.
        NullTypeUnsupportedError: The only ``type`` tag is ``null``.
        MissingItemsError: An ``array`` schema has no item schema.
        FormatTypeMismatchError: A known ``format`` disagrees with ``type``.

    Example::

        infer_type(Schema(type="integer", format="int64"), required=False)
        # OptionalType(inner=Primitive.I64)
    """
    native = _infer_required(schema, required)
    if required:
        return native
    return OptionalType(inner=native)


def _infer_required(schema: MaybeRef[Schema], required: bool) -> NativeType:
    if isinstance(schema, Reference):
        return NamedType(name=pointer_name(schema.ref))

    tags = schema.type or []
    if not tags:
        return AnonymousType(schema=schema)
    if len(tags) > 1:
        raise AmbiguousTypeArrayError(
            "Schema declares several types ("
            + ", ".join(tag.value for tag in tags)
            + "); exactly one is supported"
        )

    tag = tags[0]
    if tag is SchemaType.NULL:
        raise NullTypeUnsupportedError("Schema type 'null' cannot stand alone")

    from_format = _primitive_from_format(tag, schema.format)

    if tag is SchemaType.ARRAY:
        return _infer_array(schema, required)
    if tag is SchemaType.OBJECT:
        return AnonymousType(schema=schema)
    if from_format is not None:
        return from_format
    return _TYPE_PRIMITIVES[tag]


def _primitive_from_format(tag: SchemaType, fmt: str | None) -> Primitive | None:
    """Map a known *fmt* to a primitive, checking it agrees with *tag*."""
    if fmt is None or fmt not in _FORMAT_PRIMITIVES:
        return None
    expected, primitive = _FORMAT_PRIMITIVES[fmt]
    if tag is not expected:
        raise FormatTypeMismatchError(
            f"Format '{fmt}' requires type '{expected.value}', got '{tag.value}'"
        )
    return primitive


def _infer_array(schema: Schema, required: bool) -> ArrayType:
    if not schema.items:
        raise MissingItemsError("Array schema has no 'items'")
    return ArrayType(items=tuple(infer_type(item, required) for item in schema.items))


def first_media(content: Mapping[str, MediaType]) -> tuple[str, MaybeRef[Schema]]:
    """Pick the content entry a body or response is typed from.

    The first entry in ascending content-type order wins, so the choice does
    not depend on how the source document happened to order its keys.

    Args:
        content: A non-empty ``content`` map.

    Returns:
        ``(content_type, schema)`` for the chosen entry.

    Raises:
        NoTypeSpecifiedError: The chosen entry has no ``schema``.
    """
    content_type = min(content)
    media = content[content_type]
    if media.schema_ is None:
        raise NoTypeSpecifiedError(f"Media type '{content_type}' has no schema")
    return content_type, media.schema_


def describe_type(native: NativeType) -> str:
    """Render *native* compactly, e.g. ``Optional[Array[Pet]]``."""
    if isinstance(native, Primitive):
        return native.value
    if isinstance(native, NamedType):
        return native.name
    if isinstance(native, ArrayType):
        return "Array[" + " | ".join(describe_type(t) for t in native.items) + "]"
    if isinstance(native, OptionalType):
        return f"Optional[{describe_type(native.inner)}]"
    props = native.schema_.properties or {}
    return "{" + ", ".join(props) + "}"
