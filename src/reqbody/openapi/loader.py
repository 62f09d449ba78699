"""Read OpenAPI documents from a URL, a local file, or stdin.

The ``reqbody parse`` command needs the operation whose request body it
loads. This module turns the document source into a plain dict; JSON and
YAML are both accepted and detected from the file extension, the response
``Content-Type`` or the content itself.

* :func:`load_spec` -- Load and parse a document from any supported source.
* :func:`validate_openapi_version` -- Reject Swagger 2.x and non-3.x
  documents.

Operation lookup lives in :mod:`reqbody.openapi.operations`.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from reqbody.exceptions import SpecParseError

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = (".yaml", ".yml")


def load_spec(source: str, timeout: float = 30.0) -> dict[str, Any]:
    """Load an OpenAPI document from a URL, a file path, or stdin (``-``).

    Args:
        source: An ``http(s)://`` URL, a file path, or ``-`` for stdin.
        timeout: Seconds to wait when fetching a URL.

    Returns:
        The document as a dictionary.

    Raises:
        SpecParseError: If the source cannot be read or is not a JSON/YAML
            object.
    """
    if source == "-":
        content, hint = _read_stdin(), None
    elif source.startswith(("http://", "https://")):
        content, hint = _fetch_url(source, timeout)
    else:
        content, hint = _read_file(source)
    logger.debug("Loaded OpenAPI document from %s (%d chars)", source, len(content))
    return _parse_content(content, hint)


def _read_stdin() -> str:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc
    if not content.strip():
        raise SpecParseError("No input received from stdin")
    return content


def _fetch_url(url: str, timeout: float) -> tuple[str, Optional[str]]:
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint: Optional[str] = None
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return response.text, hint


def _read_file(path: str) -> tuple[str, Optional[str]]:
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc
    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    if suffix == ".json":
        return content, "json"
    if suffix in _YAML_SUFFIXES:
        return content, "yaml"
    return content, None


def _parse_content(content: str, hint: Optional[str] = None) -> dict[str, Any]:
    """Parse *content* as JSON, falling back to YAML unless *hint* says JSON.

    Raises:
        SpecParseError: If the content parses as neither, or is not a mapping.
    """
    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc

    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise SpecParseError(f"Failed to parse spec as JSON or YAML: {exc}") from exc
    return _require_mapping(document)


def _require_mapping(document: Any) -> dict[str, Any]:
    if not isinstance(document, dict):
        kind = "empty document" if document is None else type(document).__name__
        raise SpecParseError(f"Spec must be a JSON/YAML object (got {kind})")
    return document


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Return the document's ``openapi`` version string.

    Any 3.x version is accepted; only ``requestBody`` is read from it, and
    that object has the same shape across 3.0 and 3.1.

    Raises:
        SpecParseError: For Swagger 2.x, a missing version or a non-3.x one.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.x documents declare requestBody."
        )

    version = spec.get("openapi")
    if version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise SpecParseError(f"Unsupported OpenAPI version: {version_str}")
    return version_str
