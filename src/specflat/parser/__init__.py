"""OpenAPI parser -- load documents, resolve ``$ref`` pointers, infer types, extract entrypoints.

This sub-package turns an OpenAPI 3.0 document (JSON or YAML, local file or
remote URL) into a flat list of :class:`~specflat.models.Entrypoint` records.

Typical usage::

    from specflat.parser import load_document, extract_entrypoints

    document = load_document("petstore.yaml")
    entrypoints, diagnostics = extract_entrypoints(document)

Sub-modules:

* :mod:`~specflat.parser.loader` -- I/O layer (URL, file, stdin), format
  detection, version check and validation into the document model.
* :mod:`~specflat.parser.resolver` -- single-level ``$ref`` resolution
  against a components registry.
* :mod:`~specflat.parser.inference` -- schema to native type inference.
* :mod:`~specflat.parser.extractor` -- walks paths and operations and
  produces entrypoints plus diagnostics.
"""

from specflat.parser.extractor import extract_entrypoints, extract_route_args, extract_spec
from specflat.parser.inference import describe_type, infer_type
from specflat.parser.loader import (
    load_document,
    load_spec,
    parse_document,
    validate_openapi_version,
)
from specflat.parser.resolver import pointer_name, resolve

__all__ = [
    "describe_type",
    "extract_entrypoints",
    "extract_route_args",
    "extract_spec",
    "infer_type",
    "load_document",
    "load_spec",
    "parse_document",
    "pointer_name",
    "resolve",
    "validate_openapi_version",
]
