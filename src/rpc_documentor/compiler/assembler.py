"""Assembles the OpenAPI document from route documents."""

import hashlib
import json
import logging
from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict

from rpc_documentor.compiler.collector import SchemaCollector
from rpc_documentor.compiler.registry import DEFAULT_SEPARATOR, ReferencePolicy, ReferenceRegistry
from rpc_documentor.compiler.renderer import Fragment, TypeRenderer
from rpc_documentor.errors import UnmappedStatusCodeError
from rpc_documentor.model.base import Response, RouteDocument

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.1.0"

CONTENT_TYPE = "application/json"

RESPONSE_DESCRIPTIONS = {
    200: "Ok, see content",
    201: "Resource created",
    202: "Accepted, action will be done in due time",
    204: "Call successful, nothing to output",
    400: "Bad request, see body for more info",
    401: "Authentication failed",
    403: "Forbidden to do this request",
    404: "Resource not found",
    405: "HTTP method not allowed",
    409: "Conflict, could not process request",
    422: "Given body is not valid",
    429: "Too many requests",
    500: "Internal error, try later or seek contact",
}


class Contact(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    email: str | None = None


class BaseInfo(BaseModel):
    """Service metadata placed in ``info`` and ``servers``."""

    model_config = ConfigDict(frozen=True)

    title: str
    contact: Contact
    base_uri: str


def compute_version(document: dict[str, Any]) -> str:
    """Digest of the compact JSON encoding of ``document``.

    The encoding is compact with slashes escaped as ``\\/``. It follows the
    older digest recipe only loosely: key order and number encoding can differ,
    so digests are not expected to match ones produced by other tools.
    """
    encoded = json.dumps(document, separators=(",", ":")).replace("/", "\\/")
    return hashlib.md5(encoded.encode("utf-8"), usedforsecurity=False).hexdigest()


class DocumentAssembler:
    """Builds the full document: metadata, tags, paths and components."""

    def __init__(self, renderer: TypeRenderer, collector: SchemaCollector, info: BaseInfo):
        self.renderer = renderer
        self.collector = collector
        self.info = info

    def assemble(self, routes: Iterable[RouteDocument]) -> dict[str, Any]:
        routes = list(routes)

        document: dict[str, Any] = {
            "openapi": OPENAPI_VERSION,
            "info": {
                "title": self.info.title,
                "contact": self.info.contact.model_dump(exclude_none=True),
            },
            "servers": [{"url": self.info.base_uri}],
            "tags": self._compose_tags(routes),
            "paths": self._compose_paths(routes),
            "components": {"schemas": self._compose_schema_components(routes)},
        }

        # the digest covers the document as it is before the version is added
        version = compute_version(document)
        logger.info(
            f"Assembled {len(document['paths'])} paths and "
            f"{len(document['components']['schemas'])} components (version {version})"
        )

        return {**document, "info": {**document["info"], "version": version}}

    def _compose_tags(self, routes: Sequence[RouteDocument]) -> list[dict[str, str]]:
        tags: dict[str, dict[str, str]] = {}
        for route in routes:
            if route.resource and route.resource not in tags:
                tags[route.resource] = {"name": route.resource}
        return list(tags.values())

    def _compose_paths(self, routes: Sequence[RouteDocument]) -> dict[str, dict[str, Fragment]]:
        paths: dict[str, dict[str, Fragment]] = {}
        for route in routes:
            logger.debug(f"Documenting {route.method.value.upper()} {route.path}")
            paths.setdefault(route.path, {})[route.method.value] = self._compose_operation(route)
        return paths

    def _compose_operation(self, route: RouteDocument) -> Fragment:
        return {
            "tags": [route.resource, route.category.value],
            "deprecated": route.is_deprecated,
            "requestBody": {
                "required": True,
                "content": {
                    CONTENT_TYPE: {"schema": self.renderer.render(route.input, use_ref=True)},
                },
            },
            "responses": self._compose_responses(route.responses),
        }

    def _compose_responses(self, responses: Sequence[Response]) -> dict[str, Fragment]:
        result: dict[str, Fragment] = {}
        for response in responses:
            if response.status not in RESPONSE_DESCRIPTIONS:
                raise UnmappedStatusCodeError(response.status)

            entry: Fragment = {"description": RESPONSE_DESCRIPTIONS[response.status]}
            if response.output is not None:
                entry["content"] = {
                    CONTENT_TYPE: {"schema": self.renderer.render(response.output, use_ref=True)},
                }
            result[str(response.status)] = entry
        return result

    def _compose_schema_components(self, routes: Sequence[RouteDocument]) -> dict[str, Fragment]:
        schemas: dict[str, Fragment] = {}
        for schema in self.collector.collect(routes):
            assert schema.reference is not None
            name = self.renderer.policy.short_name(schema.reference)
            schemas[name] = self.renderer.render(schema, use_ref=False)
        return schemas


def compile_document(
    routes: Iterable[RouteDocument],
    registry: ReferenceRegistry,
    info: BaseInfo,
    separator: str = DEFAULT_SEPARATOR,
) -> dict[str, Any]:
    """Compile ``routes`` into an OpenAPI document."""
    policy = ReferencePolicy.from_registry(registry, separator)
    assembler = DocumentAssembler(
        TypeRenderer(policy, registry),
        SchemaCollector(policy),
        info,
    )
    return assembler.assemble(routes)
