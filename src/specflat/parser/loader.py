"""Load OpenAPI documents from a file, a URL, or stdin.

This module is the I/O edge of specflat. It turns a source string into a
raw mapping (JSON or YAML, detected automatically), checks the declared
OpenAPI version, and validates the mapping into an
:class:`~specflat.document.OpenAPIDocument`.

Public functions:

* :func:`load_spec` -- read and parse a source into a raw ``dict``.
* :func:`validate_openapi_version` -- accept 3.x, reject Swagger 2.x.
* :func:`parse_document` -- validate a raw ``dict`` into the document model.
* :func:`load_document` -- all three in sequence.

Every failure is raised as :class:`~specflat.exceptions.SpecParseError`
(or :class:`~specflat.exceptions.ConnectionError_` for network failures),
which aborts the run before extraction starts.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml
from pydantic import ValidationError

from specflat.document import OpenAPIDocument
from specflat.exceptions import ConnectionError_, SpecParseError

logger = logging.getLogger(__name__)

_FETCH_TIMEOUT = 30.0


def load_spec(source: str) -> dict[str, Any]:
    """Read a raw OpenAPI mapping from a file path, URL, or ``-`` (stdin).

    Args:
        source: An ``http(s)://`` URL, a file path, or ``-``.

    Returns:
        The parsed mapping.

    Raises:
        SpecParseError: If the source cannot be read or parsed.
        ConnectionError_: If a URL cannot be reached.
    """
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        return _load_from_url(source)
    return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")
    return _parse_content(content)


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document over HTTP, using ``Content-Type`` as a format hint."""
    logger.debug("Fetching %s", url)
    try:
        response = httpx.get(url, timeout=_FETCH_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise ConnectionError_(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Read a local document; ``.json``/``.yaml``/``.yml`` pick the parser."""
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Document not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Document is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"
    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON, then YAML.

    JSON is tried first unless *hint* is ``"yaml"``; a ``"json"`` hint
    disables the YAML fallback.

    Raises:
        SpecParseError: If neither parser yields a mapping.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            json_error = exc

    try:
        return _require_mapping(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        msg = "Failed to parse document as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Document must be a JSON/YAML object (got {kind})")
    return result


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Return the document's ``openapi`` version string.

    Any 3.x version is accepted; the model is shaped after 3.0.

    Raises:
        SpecParseError: For Swagger 2.x, a missing ``openapi`` field, or a
            non-3.x version.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.x documents can be flattened."
        )

    version = spec.get("openapi")
    if version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise SpecParseError(f"Unsupported OpenAPI version: {version_str}")
    return version_str


def parse_document(raw: dict[str, Any], strict: bool = False) -> OpenAPIDocument:
    """Validate a raw mapping into an :class:`~specflat.document.OpenAPIDocument`.

    Args:
        raw: The mapping returned by :func:`load_spec`.
        strict: Reject unknown fields other than ``x-`` extensions.

    Raises:
        SpecParseError: If the mapping does not have the document's shape.
    """
    try:
        return OpenAPIDocument.model_validate(raw, context={"strict": strict})
    except ValidationError as exc:
        raise SpecParseError(
            f"Document does not match the OpenAPI object model "
            f"({exc.error_count()} error(s)):\n{exc}"
        ) from exc


def load_document(source: str, strict: bool = False) -> OpenAPIDocument:
    """Load, version-check and validate the document at *source*."""
    raw = load_spec(source)
    validate_openapi_version(raw)
    return parse_document(raw, strict=strict)
