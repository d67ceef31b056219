"""Tests for specflat.parser.loader."""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import patch

import httpx
import pytest

from specflat.document import OpenAPIDocument
from specflat.exceptions import ConnectionError_, SpecParseError
from specflat.parser.loader import (
    _load_from_url,
    _parse_content,
    load_document,
    load_spec,
    parse_document,
    validate_openapi_version,
)

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


# ---------------------------------------------------------------------------
# load_spec dispatch
# ---------------------------------------------------------------------------


class TestLoadSpec:
    """Test load_spec dispatcher routes to the correct loader."""

    def test_loads_from_file_json(self) -> None:
        result = load_spec(str(FIXTURES_DIR / "edge_cases.json"))
        assert result["openapi"] == "3.0.3"
        assert result["info"]["title"] == "Edge Cases"

    def test_loads_from_file_yaml(self) -> None:
        result = load_spec(str(FIXTURES_DIR / "petstore.yaml"))
        assert result["info"]["title"] == "Swagger Petstore"
        # Unquoted YAML status codes stay integers in the raw mapping.
        assert 201 in result["paths"]["/pets"]["post"]["responses"]

    def test_loads_from_yml_extension(self, tmp_path: Path) -> None:
        yml_file = tmp_path / "spec.yml"
        yml_file.write_text(
            textwrap.dedent("""\
                openapi: "3.0.2"
                info:
                  title: YML Extension
                  version: "2.0.0"
                paths: {}
            """),
            encoding="utf-8",
        )
        assert load_spec(str(yml_file))["openapi"] == "3.0.2"

    def test_loads_from_stdin(self) -> None:
        spec_json = json.dumps({"openapi": "3.0.3", "info": {"title": "stdin test", "version": "1.0"}})
        with patch("specflat.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO(spec_json)
            result = load_spec("-")
        assert result["info"]["title"] == "stdin test"

    def test_loads_from_url(self) -> None:
        spec = {"openapi": "3.0.3", "info": {"title": "URL test", "version": "1.0"}}
        mock_response = httpx.Response(
            status_code=200,
            json=spec,
            request=httpx.Request("GET", "https://example.com/spec.json"),
        )
        with patch("specflat.parser.loader.httpx.get", return_value=mock_response):
            result = load_spec("https://example.com/spec.json")
        assert result["info"]["title"] == "URL test"


class TestLoadFromFile:
    def test_file_not_found_raises(self) -> None:
        with pytest.raises(SpecParseError, match="Document not found"):
            load_spec("/nonexistent/openapi.yaml")

    def test_empty_file_raises(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty.json"
        empty.write_text("  \n", encoding="utf-8")
        with pytest.raises(SpecParseError, match="Document is empty"):
            load_spec(str(empty))

    def test_invalid_json_file_raises(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("openapi: 3.0.0", encoding="utf-8")
        with pytest.raises(SpecParseError, match="Invalid JSON"):
            load_spec(str(bad))


class TestLoadFromStdin:
    def test_empty_stdin_raises(self) -> None:
        with patch("specflat.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("   ")
            with pytest.raises(SpecParseError, match="No input received"):
                load_spec("-")

    def test_reads_yaml_from_stdin(self) -> None:
        with patch("specflat.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("openapi: '3.0.0'\ninfo:\n  title: Y\n  version: '1'\n")
            result = load_spec("-")
        assert result["info"]["title"] == "Y"


class TestLoadFromUrl:
    """Test loading documents from URLs."""

    def test_loads_yaml_from_url(self) -> None:
        yaml_body = textwrap.dedent("""\
            openapi: "3.0.0"
            info:
              title: YAML Remote
              version: "1.0"
        """)
        mock_response = httpx.Response(
            status_code=200,
            text=yaml_body,
            headers={"content-type": "application/x-yaml"},
            request=httpx.Request("GET", "https://example.com/spec.yaml"),
        )
        with patch("specflat.parser.loader.httpx.get", return_value=mock_response):
            result = _load_from_url("https://example.com/spec.yaml")
        assert result["info"]["title"] == "YAML Remote"

    def test_http_error_raises(self) -> None:
        mock_response = httpx.Response(
            status_code=404,
            request=httpx.Request("GET", "https://example.com/missing.json"),
        )
        with patch("specflat.parser.loader.httpx.get", return_value=mock_response):
            with pytest.raises(SpecParseError, match="HTTP 404"):
                _load_from_url("https://example.com/missing.json")

    def test_connection_error_raises(self) -> None:
        with patch(
            "specflat.parser.loader.httpx.get",
            side_effect=httpx.ConnectError("Connection refused"),
        ):
            with pytest.raises(ConnectionError_, match="Failed to fetch"):
                _load_from_url("https://unreachable.example.com/spec.json")


# ---------------------------------------------------------------------------
# _parse_content
# ---------------------------------------------------------------------------


class TestParseContent:
    """Test content parsing with format detection."""

    def test_parses_json(self) -> None:
        assert _parse_content('{"key": "value"}') == {"key": "value"}

    def test_parses_yaml(self) -> None:
        assert _parse_content("key: value\nnested:\n  a: 1") == {
            "key": "value",
            "nested": {"a": 1},
        }

    def test_json_hint_forces_json_only(self) -> None:
        with pytest.raises(SpecParseError, match="Invalid JSON"):
            _parse_content("not: valid: json: {{{", hint="json")

    def test_invalid_content_raises(self) -> None:
        with pytest.raises(SpecParseError, match="Failed to parse"):
            _parse_content("}{not valid at all][", hint="")

    def test_non_dict_content_raises(self) -> None:
        with pytest.raises(SpecParseError, match="must be a JSON/YAML object"):
            _parse_content('"just a string"')

    def test_null_yaml_raises(self) -> None:
        with pytest.raises(SpecParseError, match="must be a JSON/YAML object"):
            _parse_content("---\n", hint="yaml")


# ---------------------------------------------------------------------------
# validate_openapi_version
# ---------------------------------------------------------------------------


class TestValidateOpenAPIVersion:
    @pytest.mark.parametrize("version", ["3.0.0", "3.0.3", "3.1.0"])
    def test_accepts_3x(self, version: str) -> None:
        assert validate_openapi_version({"openapi": version}) == version

    def test_rejects_swagger_2_0(self) -> None:
        with pytest.raises(SpecParseError, match="Swagger 2.0 is not supported"):
            validate_openapi_version({"swagger": "2.0"})

    def test_rejects_missing_openapi_field(self) -> None:
        with pytest.raises(SpecParseError, match="Missing 'openapi'"):
            validate_openapi_version({"info": {}})

    def test_rejects_unsupported_version(self) -> None:
        with pytest.raises(SpecParseError, match="Unsupported OpenAPI version"):
            validate_openapi_version({"openapi": "4.0.0"})

    def test_version_as_number(self) -> None:
        assert validate_openapi_version({"openapi": 3.0}) == "3.0"


# ---------------------------------------------------------------------------
# parse_document / load_document
# ---------------------------------------------------------------------------


class TestParseDocument:
    def test_returns_document(self, petstore_raw: dict[str, Any]) -> None:
        doc = parse_document(petstore_raw)
        assert isinstance(doc, OpenAPIDocument)
        assert set(doc.paths) == {"/pets", "/pets/{petId}"}

    def test_shape_errors_become_spec_parse_error(self) -> None:
        with pytest.raises(SpecParseError, match="OpenAPI object model"):
            parse_document({"openapi": "3.0.0", "info": {"title": "No version"}})

    def test_strict_flag(self) -> None:
        raw = {"openapi": "3.0.0", "info": {"title": "T", "version": "1"}, "webhooks": {}}
        assert parse_document(raw).model_extra == {"webhooks": {}}
        with pytest.raises(SpecParseError, match="webhooks"):
            parse_document(raw, strict=True)

    def test_load_document(self) -> None:
        doc = load_document(str(FIXTURES_DIR / "petstore.yaml"))
        assert doc.components is not None
        assert set(doc.components.schemas) == {"Pet", "Pets", "Error"}

    def test_load_document_rejects_swagger(self, tmp_path: Path) -> None:
        path = tmp_path / "swagger.json"
        path.write_text(json.dumps({"swagger": "2.0", "info": {}}), encoding="utf-8")
        with pytest.raises(SpecParseError, match="Swagger"):
            load_document(str(path))
