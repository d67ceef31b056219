"""Flatten an OpenAPI document into typed entrypoints.

This module walks an :class:`~specflat.document.OpenAPIDocument` and emits
one :class:`~specflat.models.Entrypoint` per operation, with every argument,
request body and response resolved through
:func:`~specflat.parser.resolver.resolve` and typed through
:func:`~specflat.parser.inference.infer_type`.

The public entry points are :func:`extract_entrypoints` (document in,
``(entrypoints, diagnostics)`` out) and :func:`extract_spec` (raw mapping in,
:class:`~specflat.models.ParsedSpec` out).

Ordering is part of the contract:

* paths are visited in ascending route order;
* methods in GET, POST, PUT, PATCH, DELETE order (HEAD, OPTIONS and TRACE
  are never extracted);
* responses in ascending status-code order;
* the first content type in ascending order types a body or response.

Failures are contained at the smallest sensible unit. A parameter, request
body or response that cannot be resolved or typed is dropped and reported
as a :class:`~specflat.models.Diagnostic`; an operation without an
``operationId`` is dropped as a whole. Every diagnostic is also logged at
``WARNING`` on this module's logger.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they
share the same ``name`` and ``in`` values.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from specflat.document import (
    Components,
    HTTPMethod,
    MaybeRef,
    OpenAPIDocument,
    Operation,
    Parameter,
    ParameterLocation,
    Reference,
    Schema,
)
from specflat.exceptions import (
    MissingOperationIdError,
    NoTypeSpecifiedError,
    ReferenceError_,
    TypeError_,
)
from specflat.models import (
    Arg,
    BodySpec,
    Diagnostic,
    Entrypoint,
    ParsedSpec,
    ResponseSpec,
)
from specflat.parser.inference import first_media, infer_type
from specflat.parser.loader import parse_document
from specflat.parser.resolver import resolve

logger = logging.getLogger(__name__)

_ROUTE_ARG = re.compile(r"^\{(.+)\}$")


def extract_spec(
    raw_spec: dict[str, Any],
    openapi_version: Optional[str] = None,
    *,
    strict: bool = False,
) -> ParsedSpec:
    """Build a :class:`~specflat.models.ParsedSpec` from a raw OpenAPI dict.

    Args:
        raw_spec: The raw spec dictionary as returned by
            :func:`~specflat.parser.loader.load_spec`.
        openapi_version: The validated version string, as returned by
            :func:`~specflat.parser.loader.validate_openapi_version`.
            Defaults to the document's own ``openapi`` field.
        strict: Reject unknown (non ``x-``) fields while deserializing.

    Returns:
        The document's info and servers together with the extracted
        entrypoints and diagnostics.

    Raises:
        SpecParseError: If the mapping is not a structurally valid document.

    Example::

        raw = load_spec("petstore.yaml")
        parsed = extract_spec(raw, validate_openapi_version(raw))
        for ep in parsed.entrypoints:
            print(f"{ep.method.value.upper()} {ep.route} -> {ep.operation_id}")
    """
    document = parse_document(raw_spec, strict=strict)
    entrypoints, diagnostics = extract_entrypoints(document)
    return ParsedSpec(
        info=document.info,
        servers=document.servers,
        entrypoints=entrypoints,
        diagnostics=diagnostics,
        openapi_version=openapi_version or document.openapi,
    )


def extract_entrypoints(
    document: OpenAPIDocument,
) -> tuple[list[Entrypoint], list[Diagnostic]]:
    """Extract every operation of *document* as an :class:`Entrypoint`.

    Never raises because of a single bad operation: anything that has to be
    dropped is reported in the returned diagnostics list instead.

    Args:
        document: A deserialized OpenAPI document.

    Returns:
        ``(entrypoints, diagnostics)``, both in deterministic order.
    """
    components = document.components or Components()
    entrypoints: list[Entrypoint] = []
    diagnostics: list[Diagnostic] = []

    for route in sorted(document.paths):
        path_item = document.paths[route]
        for method, operation in path_item.operations():
            collector = _Collector(route, method, diagnostics)
            entrypoint = _build_entrypoint(
                route, method, operation, path_item.parameters, components, collector
            )
            if entrypoint is not None:
                entrypoints.append(entrypoint)

    logger.debug(
        "Extracted %d entrypoints with %d diagnostics",
        len(entrypoints),
        len(diagnostics),
    )
    return entrypoints, diagnostics


def extract_route_args(route: str) -> set[str]:
    """Return the placeholder names in *route*.

    A segment counts only when the whole segment is wrapped in braces, so
    ``/pets/{petId}/x{bogus}x`` yields ``{"petId"}``.
    """
    names: set[str] = set()
    for segment in route.split("/"):
        match = _ROUTE_ARG.match(segment)
        if match:
            names.add(match.group(1))
    return names


class _Collector:
    """Records diagnostics for one route + method pair."""

    def __init__(self, route: str, method: HTTPMethod, sink: list[Diagnostic]):
        self.route = route
        self.method = method
        self._sink = sink

    def add(self, target: str, exc: Exception) -> None:
        diagnostic = Diagnostic(
            route=self.route,
            method=self.method,
            target=target,
            error=type(exc).__name__,
            message=str(exc),
        )
        logger.warning("%s", diagnostic)
        self._sink.append(diagnostic)


def _build_entrypoint(
    route: str,
    method: HTTPMethod,
    operation: Operation,
    path_params: list[MaybeRef[Parameter]],
    components: Components,
    collector: _Collector,
) -> Optional[Entrypoint]:
    if not operation.operation_id:
        collector.add(
            "operation",
            MissingOperationIdError("Operation has no operationId; skipped"),
        )
        return None

    logger.debug("Extracting %s %s (%s)", method.value.upper(), route, operation.operation_id)

    parameters = _merge_parameters(path_params, operation.parameters, components, collector)
    args = _build_args(parameters, collector)
    _check_route_args(route, args)

    return Entrypoint(
        route=route,
        method=method,
        args=tuple(args),
        responses=tuple(_build_responses(operation, components, collector)),
        operation_id=operation.operation_id,
        request_body=_build_request_body(operation, components, collector),
        summary=operation.summary,
        deprecated=operation.deprecated,
        tags=tuple(operation.tags),
    )


def _merge_parameters(
    path_params: list[MaybeRef[Parameter]],
    op_params: list[MaybeRef[Parameter]],
    components: Components,
    collector: _Collector,
) -> list[Parameter]:
    """Resolve and merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field). Parameters that cannot be resolved are
    dropped with a diagnostic.
    """
    resolved_path = _resolve_parameters(path_params, "path-level", components, collector)
    resolved_op = _resolve_parameters(op_params, "operation-level", components, collector)

    overridden = {(param.name, param.in_) for param in resolved_op}
    merged = [
        param for param in resolved_path if (param.name, param.in_) not in overridden
    ]
    merged.extend(resolved_op)
    return merged


def _resolve_parameters(
    params: list[MaybeRef[Parameter]],
    level: str,
    components: Components,
    collector: _Collector,
) -> list[Parameter]:
    resolved: list[Parameter] = []
    for maybe in params:
        try:
            resolved.append(resolve(maybe, components.parameters))
        except ReferenceError_ as exc:
            pointer = maybe.ref if isinstance(maybe, Reference) else "?"
            collector.add(f"{level} parameter '{pointer}'", exc)
    return resolved


def _build_args(parameters: list[Parameter], collector: _Collector) -> list[Arg]:
    args: list[Arg] = []
    for param in parameters:
        try:
            native = infer_type(_parameter_schema(param), param.required)
        except (ReferenceError_, TypeError_) as exc:
            collector.add(f"parameter '{param.name}'", exc)
            continue
        args.append(Arg(name=param.name, type=native, location=param.in_))
    return args


def _parameter_schema(param: Parameter) -> MaybeRef[Schema]:
    """Return the schema a parameter is typed from.

    ``schema`` wins; a parameter described through ``content`` instead uses
    the schema of its first content entry.
    """
    if param.schema_ is not None:
        return param.schema_
    if param.content:
        _, schema = first_media(param.content)
        return schema
    raise NoTypeSpecifiedError(f"Parameter '{param.name}' has no schema or content")


def _check_route_args(route: str, args: list[Arg]) -> None:
    declared = {arg.name for arg in args if arg.location == ParameterLocation.PATH}
    for name in sorted(extract_route_args(route) - declared):
        logger.debug("%s: placeholder '{%s}' has no typed path argument", route, name)


def _build_request_body(
    operation: Operation,
    components: Components,
    collector: _Collector,
) -> Optional[BodySpec]:
    if operation.request_body is None:
        return None
    try:
        body = resolve(operation.request_body, components.request_bodies)
        if not body.content:
            raise NoTypeSpecifiedError("Request body has an empty content map")
        content_type, schema = first_media(body.content)
        native = infer_type(schema, body.required)
    except (ReferenceError_, TypeError_) as exc:
        collector.add("request body", exc)
        return None
    return BodySpec(type=native, content_type=content_type, required=body.required)


def _build_responses(
    operation: Operation,
    components: Components,
    collector: _Collector,
) -> list[ResponseSpec]:
    responses: list[ResponseSpec] = []
    for status_code in sorted(operation.responses):
        try:
            response = resolve(operation.responses[status_code], components.responses)
            if not response.content:
                responses.append(ResponseSpec(status_code=status_code))
                continue
            content_type, schema = first_media(response.content)
            native = infer_type(schema, required=True)
        except (ReferenceError_, TypeError_) as exc:
            collector.add(f"response '{status_code}'", exc)
            continue
        responses.append(
            ResponseSpec(status_code=status_code, type=native, content_type=content_type)
        )
    return responses
