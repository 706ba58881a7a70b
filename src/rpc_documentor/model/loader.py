"""Route description file parser.

Parses a YAML (or JSON) route description into the declared type traits and
the route documents the compiler works on.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError

from rpc_documentor.compiler.registry import ReferenceRegistry, TypeTraits
from rpc_documentor.errors import ConfigurationError, MalformedRouteError
from rpc_documentor.model.base import RouteDocument
from rpc_documentor.model.routes import RouteBuilder

logger = logging.getLogger(__name__)


class RouteDescription(BaseModel):
    """Everything a route description file declares."""

    types: dict[str, TypeTraits] = {}
    routes: list[RouteDocument] = []

    def registry(self, shared: Iterable[str] = ()) -> ReferenceRegistry:
        return ReferenceRegistry(shared=shared, types=self.types)


def parse_route_description(file_path: Path) -> RouteDescription:
    """Parse a route description file."""
    text = file_path.read_text(encoding="utf-8")
    try:
        doc = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Route description is not valid YAML: {e}", path=file_path) from e

    if not isinstance(doc, dict):
        raise ConfigurationError("Route description must be a mapping", path=file_path)

    declared_types = doc.get("types") or {}
    if not isinstance(declared_types, dict):
        raise ConfigurationError("Route description 'types' must be a mapping", path=file_path)
    declared_routes = doc.get("routes") or []
    if not isinstance(declared_routes, list):
        raise ConfigurationError("Route description 'routes' must be a list", path=file_path)

    types = _parse_types(declared_types, file_path)
    routes = [_parse_route(index, entry, file_path) for index, entry in enumerate(declared_routes)]
    logger.info(f"Loaded {len(routes)} routes and {len(types)} types from {file_path}")

    return RouteDescription(types=types, routes=routes)


def _parse_types(types: dict, file_path: Path) -> dict[str, TypeTraits]:
    result = {}
    for identity, traits in types.items():
        try:
            result[str(identity)] = TypeTraits.model_validate(traits or {})
        except ValidationError as e:
            raise ConfigurationError(f"Type '{identity}' is malformed", errors=e.errors(), path=file_path) from e
    return result


def _parse_route(index: int, entry: dict, file_path: Path) -> RouteDocument:
    if not isinstance(entry, dict):
        raise MalformedRouteError(f"Route #{index} must be a mapping", path=file_path)

    entry = dict(entry)
    if "action" in entry:
        if "path" in entry:
            raise MalformedRouteError(f"Route #{index} declares both a path and an action", path=file_path)
        entry["path"] = RouteBuilder(entry.get("resource", "")).path_for(entry.pop("action"))

    try:
        return RouteDocument.model_validate(entry)
    except ValidationError as e:
        label = entry.get("path", "without path")
        raise MalformedRouteError(f"Route #{index} ({label}) is malformed", errors=e.errors(), path=file_path) from e
