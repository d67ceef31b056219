"""Pydantic models mirroring the OpenAPI 3.0 document tree.

These models are the input side of the extraction pipeline: the loader
validates a raw JSON/YAML mapping into an :class:`OpenAPIDocument`, and the
extractor walks it. Field aliases match the OpenAPI field names exactly
(``$ref``, ``operationId``, ``requestBody``, ``termsOfService``,
``securitySchemes``, ...).

Anywhere the specification allows an object to be replaced by a ``$ref``,
the field is typed ``MaybeRef[T]``: either a :class:`Reference` or a concrete
``T``. The branch is chosen by the presence of a ``$ref`` key, never by
trial validation, and consumers match on ``isinstance(value, Reference)``.

Unknown fields are kept in ``model_extra`` by default. Validating with
``context={"strict": True}`` rejects any unknown field that is not a
specification extension (``x-...``).
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, ClassVar, Iterator, Optional, TypeVar, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Discriminator,
    Field,
    Tag as BranchTag,
    ValidationInfo,
    field_validator,
    model_validator,
)

T = TypeVar("T")


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"


# Methods surfaced to the extractor, in precedence order.
EXTRACTED_METHODS: tuple[HTTPMethod, ...] = (
    HTTPMethod.GET,
    HTTPMethod.POST,
    HTTPMethod.PUT,
    HTTPMethod.PATCH,
    HTTPMethod.DELETE,
)


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


class SchemaType(str, enum.Enum):
    """Values allowed in a Schema Object's ``type`` field."""

    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    NUMBER = "number"
    STRING = "string"
    INTEGER = "integer"
    NULL = "null"


class DocumentObject(BaseModel):
    """Common base for every OpenAPI object model.

    Unknown keys are preserved in ``model_extra``. When validation runs with
    ``context={"strict": True}`` any unknown key that is neither a
    specification extension (``x-...``) nor listed in ``_permitted_extra``
    fails validation.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    _permitted_extra: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_unknown_fields(self, info: ValidationInfo) -> DocumentObject:
        if not (info.context and info.context.get("strict")) or not self.model_extra:
            return self
        unknown = sorted(
            key
            for key in self.model_extra
            if not key.startswith("x-") and key not in self._permitted_extra
        )
        if unknown:
            raise ValueError(
                f"unknown field(s) on {type(self).__name__}: {', '.join(unknown)}"
            )
        return self


class Reference(BaseModel):
    """A ``{"$ref": "#/components/<kind>/<name>"}`` pointer."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    ref: str = Field(alias="$ref")


def _ref_or_concrete(value: Any) -> str:
    """Pick the ``MaybeRef`` branch from a raw mapping or a built model."""
    if isinstance(value, dict):
        return "ref" if "$ref" in value else "concrete"
    return "ref" if isinstance(value, Reference) else "concrete"


MaybeRef = Annotated[
    Union[Annotated[Reference, BranchTag("ref")], Annotated[T, BranchTag("concrete")]],
    Discriminator(_ref_or_concrete),
]
"""Either a :class:`Reference` or a concrete ``T`` (``MaybeRef[Schema]``)."""


def _stringify_keys(value: Any) -> Any:
    # YAML reads unquoted status codes such as ``200:`` as integers.
    if isinstance(value, dict):
        return {str(key): item for key, item in value.items()}
    return value


def _stringify_scalar(value: Any) -> Any:
    # YAML reads unquoted ``version: 1.0`` as a float.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


# --- Metadata ---


class Contact(DocumentObject):
    name: Optional[str] = None
    url: Optional[str] = None
    email: Optional[str] = None


class License(DocumentObject):
    name: str
    url: Optional[str] = None


class Info(DocumentObject):
    """The document's *Info Object*."""

    title: str
    description: Optional[str] = None
    terms_of_service: Optional[str] = Field(default=None, alias="termsOfService")
    contact: Optional[Contact] = None
    license: Optional[License] = None
    version: Annotated[str, BeforeValidator(_stringify_scalar)]


class ExternalDocs(DocumentObject):
    description: Optional[str] = None
    url: str


class Tag(DocumentObject):
    name: str
    description: Optional[str] = None
    external_docs: Optional[ExternalDocs] = Field(default=None, alias="externalDocs")


class ServerVariable(DocumentObject):
    enum_: Optional[list[str]] = Field(default=None, alias="enum")
    default: str
    description: Optional[str] = None


class Server(DocumentObject):
    url: str
    description: Optional[str] = None
    variables: Optional[dict[str, ServerVariable]] = None


# --- Schemas ---


class Schema(DocumentObject):
    """A JSON-Schema-like *Schema Object*.

    ``type`` is stored as a tag set: a single string in the input becomes a
    one-element list, and an OpenAPI 3.1 style list is kept as given.
    ``items`` is stored as a list of permissible element schemas: a single
    mapping becomes a one-element list, a list keeps its order.

    Nested schemas (``properties``, ``items``, composition keywords) are
    owned by this model, so a schema tree can nest to any depth.
    """

    # JSON Schema validation keywords that carry no typing information here
    # but are legal in a strict document.
    _permitted_extra: ClassVar[frozenset[str]] = frozenset({
        "multipleOf", "maximum", "exclusiveMaximum", "minimum",
        "exclusiveMinimum", "maxLength", "minLength", "pattern", "maxItems",
        "minItems", "uniqueItems", "maxProperties", "minProperties", "not",
        "discriminator", "readOnly", "writeOnly", "xml", "externalDocs",
        "deprecated", "const", "examples",
    })

    required: Optional[list[str]] = None
    type: Optional[list[SchemaType]] = None
    format: Optional[str] = None
    properties: Optional[dict[str, MaybeRef[Schema]]] = None
    items: Optional[list[MaybeRef[Schema]]] = None
    additional_properties: Optional[Union[bool, MaybeRef[Schema]]] = Field(
        default=None, alias="additionalProperties"
    )
    all_of: Optional[list[MaybeRef[Schema]]] = Field(default=None, alias="allOf")
    one_of: Optional[list[MaybeRef[Schema]]] = Field(default=None, alias="oneOf")
    any_of: Optional[list[MaybeRef[Schema]]] = Field(default=None, alias="anyOf")
    title: Optional[str] = None
    description: Optional[str] = None
    enum_: Optional[list[Any]] = Field(default=None, alias="enum")
    default: Any = None
    nullable: bool = False
    example: Any = None

    @field_validator("type", mode="before")
    @classmethod
    def _type_as_tag_set(cls, value: Any) -> Any:
        if isinstance(value, (str, SchemaType)):
            return [value]
        return value

    @field_validator("items", mode="before")
    @classmethod
    def _items_as_list(cls, value: Any) -> Any:
        if isinstance(value, (dict, BaseModel)):
            return [value]
        return value


class Example(DocumentObject):
    summary: Optional[str] = None
    description: Optional[str] = None
    value: Any = None
    external_value: Optional[str] = Field(default=None, alias="externalValue")


class MediaType(DocumentObject):
    """A *Media Type Object* -- one entry of a ``content`` map."""

    schema_: Optional[MaybeRef[Schema]] = Field(default=None, alias="schema")
    example: Any = None
    examples: Optional[dict[str, MaybeRef[Example]]] = None
    encoding: Optional[dict[str, Any]] = None


class Header(DocumentObject):
    description: Optional[str] = None
    required: bool = False
    deprecated: bool = False
    schema_: Optional[MaybeRef[Schema]] = Field(default=None, alias="schema")
    example: Any = None
    examples: Optional[dict[str, MaybeRef[Example]]] = None
    content: Optional[dict[str, MediaType]] = None


# --- Operations ---


class Parameter(DocumentObject):
    """A *Parameter Object*.

    ``required`` defaults to ``False``; it is the sole source of the
    parameter's optionality when its native type is inferred.
    """

    name: str
    in_: ParameterLocation = Field(alias="in")
    description: Optional[str] = None
    required: bool = False
    deprecated: bool = False
    allow_empty_value: bool = Field(default=False, alias="allowEmptyValue")
    style: Optional[str] = None
    explode: Optional[bool] = None
    allow_reserved: bool = Field(default=False, alias="allowReserved")
    schema_: Optional[MaybeRef[Schema]] = Field(default=None, alias="schema")
    example: Any = None
    examples: Optional[dict[str, MaybeRef[Example]]] = None
    content: Optional[dict[str, MediaType]] = None


class RequestBody(DocumentObject):
    description: Optional[str] = None
    content: dict[str, MediaType] = Field(default_factory=dict)
    required: bool = False


class Response(DocumentObject):
    """A *Response Object*. A missing ``content`` map means "no body"."""

    description: str = ""
    headers: Optional[dict[str, MaybeRef[Header]]] = None
    content: Optional[dict[str, MediaType]] = None
    links: Optional[dict[str, Any]] = None


class Operation(DocumentObject):
    """An *Operation Object* -- one HTTP method on one path."""

    tags: list[str] = Field(default_factory=list)
    summary: Optional[str] = None
    description: Optional[str] = None
    external_docs: Optional[ExternalDocs] = Field(default=None, alias="externalDocs")
    operation_id: Optional[str] = Field(default=None, alias="operationId")
    parameters: list[MaybeRef[Parameter]] = Field(default_factory=list)
    request_body: Optional[MaybeRef[RequestBody]] = Field(
        default=None, alias="requestBody"
    )
    responses: Annotated[
        dict[str, MaybeRef[Response]], BeforeValidator(_stringify_keys)
    ]
    callbacks: Optional[dict[str, Any]] = None
    deprecated: bool = False
    security: Optional[list[dict[str, list[str]]]] = None
    servers: Optional[list[Server]] = None


class PathItem(DocumentObject):
    """A *Path Item Object* holding at most one operation per HTTP method."""

    ref: Optional[str] = Field(default=None, alias="$ref")
    summary: Optional[str] = None
    description: Optional[str] = None
    get: Optional[Operation] = None
    put: Optional[Operation] = None
    post: Optional[Operation] = None
    delete: Optional[Operation] = None
    options: Optional[Operation] = None
    head: Optional[Operation] = None
    patch: Optional[Operation] = None
    trace: Optional[Operation] = None
    servers: Optional[list[Server]] = None
    parameters: list[MaybeRef[Parameter]] = Field(default_factory=list)

    def operations(self) -> Iterator[tuple[HTTPMethod, Operation]]:
        """Yield the defined operations in GET, POST, PUT, PATCH, DELETE order.

        HEAD, OPTIONS and TRACE are part of the model but never yielded.
        """
        for method in EXTRACTED_METHODS:
            operation = getattr(self, method.value)
            if operation is not None:
                yield method, operation


# --- Document root ---


class Components(DocumentObject):
    """The document's registry of reusable, named objects.

    One mapping per object kind; every mapping defaults to empty so a
    ``$ref`` into a kind the document never declares fails with
    "not found" rather than "no registry".
    """

    schemas: dict[str, MaybeRef[Schema]] = Field(default_factory=dict)
    responses: Annotated[
        dict[str, MaybeRef[Response]], BeforeValidator(_stringify_keys)
    ] = Field(default_factory=dict)
    parameters: dict[str, MaybeRef[Parameter]] = Field(default_factory=dict)
    examples: dict[str, MaybeRef[Example]] = Field(default_factory=dict)
    request_bodies: dict[str, MaybeRef[RequestBody]] = Field(
        default_factory=dict, alias="requestBodies"
    )
    headers: dict[str, MaybeRef[Header]] = Field(default_factory=dict)
    security_schemes: dict[str, Any] = Field(
        default_factory=dict, alias="securitySchemes"
    )
    links: dict[str, Any] = Field(default_factory=dict)
    callbacks: dict[str, Any] = Field(default_factory=dict)


class OpenAPIDocument(DocumentObject):
    """Root of an OpenAPI 3.0 document."""

    openapi: Annotated[str, BeforeValidator(_stringify_scalar)]
    info: Info
    servers: list[Server] = Field(default_factory=list)
    paths: dict[str, PathItem] = Field(default_factory=dict)
    components: Optional[Components] = None
    security: Optional[list[dict[str, list[str]]]] = None
    tags: Optional[list[Tag]] = None
    external_docs: Optional[ExternalDocs] = Field(default=None, alias="externalDocs")
