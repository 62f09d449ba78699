"""OpenAPI document loading and operation lookup.

Typical usage::

    from reqbody.openapi import find_operation, load_spec

    spec = load_spec("openapi.yaml")
    operation = find_operation(spec, "POST /pets")
"""

from reqbody.openapi.loader import load_spec, validate_openapi_version
from reqbody.openapi.operations import find_operation, list_operations

__all__ = ["load_spec", "validate_openapi_version", "find_operation", "list_operations"]
