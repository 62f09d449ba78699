"""Find operations in a loaded OpenAPI document.

An operation is referenced either by its ``operationId`` or by
``"METHOD /path"`` (method case-insensitive). ``$ref`` pointers are not
resolved; a referenced ``requestBody`` reaches the resolver as-is and is
rejected there.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from reqbody.exceptions import SpecParseError
from reqbody.models import OperationSpec

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


def _iter_operations(spec: dict[str, Any]) -> Iterator[tuple[str, str, dict[str, Any]]]:
    paths = spec.get("paths") or {}
    if not isinstance(paths, dict):
        raise SpecParseError("'paths' must be an object")
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if isinstance(operation, dict):
                yield method, path, operation


def _to_operation_spec(method: str, path: str, operation: dict[str, Any]) -> OperationSpec:
    try:
        return OperationSpec.model_validate(
            {**operation, "method": method.upper(), "path": path}
        )
    except ValueError as exc:
        raise SpecParseError(f"Invalid operation {method.upper()} {path}: {exc}") from exc


def list_operations(spec: dict[str, Any]) -> list[OperationSpec]:
    """Return every operation in *spec*, in document order."""
    return [_to_operation_spec(*entry) for entry in _iter_operations(spec)]


def find_operation(spec: dict[str, Any], ref: str) -> OperationSpec:
    """Look up a single operation.

    Args:
        spec: A loaded OpenAPI document.
        ref: An ``operationId`` or ``"METHOD /path"``, e.g. ``"POST /pets"``.

    Returns:
        The matching operation with ``method`` and ``path`` filled in.

    Raises:
        SpecParseError: If no operation matches.
    """
    method_ref, _, path_ref = ref.strip().partition(" ")
    path_ref = path_ref.strip()

    for method, path, operation in _iter_operations(spec):
        if operation.get("operationId") == ref:
            return _to_operation_spec(method, path, operation)
        if path_ref and method == method_ref.lower() and path == path_ref:
            return _to_operation_spec(method, path, operation)

    raise SpecParseError(f"Operation not found: {ref}")
