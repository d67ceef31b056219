"""Canonical Pydantic models shared across specflat modules.

The OpenAPI input tree lives in :mod:`specflat.document`. This module holds
everything specflat produces or is configured with:

**Configuration models** -- serialised as JSON in the user's config directory
or the project's ``specflat.json``:
    :class:`OutputConfig` and :class:`GlobalConfig`.

**Native types** -- the closed algebra that schema inference produces:
    :class:`Primitive`, :class:`NamedType`, :class:`ArrayType`,
    :class:`OptionalType`, :class:`AnonymousType`, joined as
    :data:`NativeType`.

**Extractor output models** -- one flattened record per API operation plus
the diagnostics recorded for anything that had to be dropped:
    :class:`Arg`, :class:`ResponseSpec`, :class:`BodySpec`,
    :class:`Entrypoint`, :class:`Diagnostic`, and :class:`ParsedSpec`.

Native types and entrypoints are frozen: they are created once by the
extractor and never mutated afterwards.
"""

from __future__ import annotations

import enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from specflat.document import HTTPMethod, Info, ParameterLocation, Schema, Server


# --- Config ---

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """Effective configuration, merged by :func:`~specflat.config.resolve_config`.

    Persisted at ``~/.config/specflat/config.json`` and optionally overridden
    by ``./specflat.json``, ``SPECFLAT_*`` environment variables and CLI flags.
    """

    strict: bool = Field(
        default=False,
        description="Reject unknown (non x-) fields while loading documents",
    )
    fail_on_diagnostics: bool = Field(
        default=False,
        description="Exit non-zero when extraction records any diagnostic",
    )
    log_level: LogLevel = Field(default="ERROR", description="Root logging level")
    output: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


# --- Native types ---


class Primitive(str, enum.Enum):
    """Scalar native types. ``DATE`` and ``DATE_TIME`` come only from formats."""

    I32 = "i32"
    I64 = "i64"
    F32 = "f32"
    F64 = "f64"
    BOOL = "bool"
    DATE = "date"
    DATE_TIME = "date-time"
    STRING = "string"


class NamedType(BaseModel):
    """A component schema referenced by name instead of being expanded."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["named"] = "named"
    name: str


class ArrayType(BaseModel):
    """An array whose elements may be any of ``items`` (never empty)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["array"] = "array"
    items: tuple[NativeType, ...] = Field(min_length=1)


class OptionalType(BaseModel):
    """``inner`` wrapped because the originating field was not required."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["optional"] = "optional"
    inner: NativeType


class AnonymousType(BaseModel):
    """An inline object (or untyped) schema, carried raw for a later expander."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["anonymous"] = "anonymous"
    schema_: Schema = Field(alias="schema")


NativeType = Union[Primitive, NamedType, ArrayType, OptionalType, AnonymousType]

ArrayType.model_rebuild()
OptionalType.model_rebuild()


# --- Extractor output ---


class Arg(BaseModel):
    """One typed argument of an :class:`Entrypoint`."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: NativeType
    location: ParameterLocation


class ResponseSpec(BaseModel):
    """One declared response. ``type`` and ``content_type`` are both ``None``
    when the response has no body."""

    model_config = ConfigDict(frozen=True)

    status_code: str
    type: Optional[NativeType] = None
    content_type: Optional[str] = None


class BodySpec(BaseModel):
    """The typed request body of an :class:`Entrypoint`."""

    model_config = ConfigDict(frozen=True)

    type: NativeType
    content_type: str
    required: bool = False


class Entrypoint(BaseModel):
    """A single flattened API operation (one route + HTTP method pair).

    Only operations with an ``operationId`` become entrypoints. ``args`` and
    ``responses`` hold whatever survived resolution and inference; dropped
    items are reported as :class:`Diagnostic` records instead.
    """

    model_config = ConfigDict(frozen=True)

    route: str
    method: HTTPMethod
    args: tuple[Arg, ...] = ()
    responses: tuple[ResponseSpec, ...] = ()
    operation_id: str
    request_body: Optional[BodySpec] = None
    summary: Optional[str] = None
    deprecated: bool = False
    tags: tuple[str, ...] = ()


class Diagnostic(BaseModel):
    """A non-fatal failure recorded for one dropped item or operation.

    ``target`` names what was affected (``operation``, ``parameter 'limit'``,
    ``response '200'``, ``request body``,
    ``operation-level parameter '#/components/parameters/Page'``) and
    ``error`` is the exception class name that caused it.
    """

    model_config = ConfigDict(frozen=True)

    route: str
    method: HTTPMethod
    target: str
    error: str
    message: str

    def __str__(self) -> str:
        return f"{self.method.value.upper()} {self.route} {self.target}: {self.message}"


class ParsedSpec(BaseModel):
    """Everything the CLI needs from one document.

    Produced by :func:`~specflat.parser.extractor.extract_spec`.
    """

    info: Info
    servers: list[Server] = Field(default_factory=list)
    entrypoints: list[Entrypoint] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    openapi_version: str = Field(
        description="Original OpenAPI version string (e.g., '3.0.3')"
    )
