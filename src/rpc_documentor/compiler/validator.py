"""Structural checks on a compiled document.

These only check that the document hangs together (references resolve,
operations declare responses); they do not validate against the OpenAPI
meta-schema.
"""

from collections.abc import Iterator
from typing import Any

from rpc_documentor.compiler.assembler import OPENAPI_VERSION
from rpc_documentor.compiler.renderer import COMPONENT_PREFIX


def _iter_refs(node: Any, pointer: str) -> Iterator[tuple[str, str]]:
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "$ref" and isinstance(value, str):
                yield pointer, value
            else:
                escaped = str(key).replace("~", "~0").replace("/", "~1")
                yield from _iter_refs(value, f"{pointer}/{escaped}")
    elif isinstance(node, list):
        for index, value in enumerate(node):
            yield from _iter_refs(value, f"{pointer}/{index}")


def validate_version(document: dict[str, Any]) -> dict[str, str]:
    """Check the declared OpenAPI version."""
    if document.get("openapi") != OPENAPI_VERSION:
        return {"/openapi": f"expected {OPENAPI_VERSION}, got {document.get('openapi')!r}"}
    return {}


def validate_references(document: dict[str, Any]) -> dict[str, str]:
    """Check every ``$ref`` points at an existing component.

    Returns dict of {json_pointer: error_message} for unresolved references.
    """
    schemas = document.get("components", {}).get("schemas", {})
    errors = {}
    for pointer, ref in _iter_refs(document, ""):
        if not ref.startswith(COMPONENT_PREFIX):
            errors[pointer] = f"unsupported reference {ref}"
        elif ref[len(COMPONENT_PREFIX):] not in schemas:
            errors[pointer] = f"unresolved reference {ref}"
    return errors


def validate_operations(document: dict[str, Any]) -> dict[str, str]:
    """Check every operation declares at least one response."""
    errors = {}
    for path, methods in document.get("paths", {}).items():
        escaped = path.replace("~", "~0").replace("/", "~1")
        for method, operation in methods.items():
            if not operation.get("responses"):
                errors[f"/paths/{escaped}/{method}/responses"] = "operation declares no responses"
    return errors


def validate_document(document: dict[str, Any]) -> dict[str, str]:
    """Run all structural checks.

    Returns dict of {json_pointer: error_message}; empty when the document is sound.
    """
    errors = {}
    errors.update(validate_version(document))
    errors.update(validate_references(document))
    errors.update(validate_operations(document))
    return errors
