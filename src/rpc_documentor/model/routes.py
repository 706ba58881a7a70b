"""Builder for RPC route documents.

Every RPC route lives at ``/{resource}.{action}`` and is called with POST.
Builders are immutable: each ``with_*`` call returns a modified copy, so a
base builder can be shared between the routes of one resource.
"""

import copy

from rpc_documentor.errors import MalformedRouteError
from rpc_documentor.model.base import Category, Method, Response, RouteDocument, TypeDocumentVariant


class RouteBuilder:
    """Builds the route documents of a single resource."""

    def __init__(self, resource_name: str):
        if not resource_name:
            raise MalformedRouteError("A route builder needs a resource name")
        self.resource_name = resource_name
        self._input: TypeDocumentVariant | None = None
        self._responses: list[Response] = []
        self._deprecated: bool | str | None = None

    def _clone(self) -> "RouteBuilder":
        clone = copy.copy(self)
        clone._responses = list(self._responses)
        return clone

    def with_input(self, document: TypeDocumentVariant) -> "RouteBuilder":
        clone = self._clone()
        clone._input = document
        return clone

    def with_responses(self, responses: list[Response]) -> "RouteBuilder":
        clone = self._clone()
        clone._responses = list(responses)
        return clone

    def with_added_responses(self, responses: list[Response]) -> "RouteBuilder":
        return self.with_responses([*self._responses, *responses])

    def with_deprecated(self, notice: bool | str | None = True) -> "RouteBuilder":
        clone = self._clone()
        clone._deprecated = notice
        return clone

    def path_for(self, action: str) -> str:
        return f"/{self.resource_name}.{action}"

    def build_command_route(self, action: str) -> RouteDocument:
        return self.build_route(action, Category.COMMAND)

    def build_query_route(self, action: str) -> RouteDocument:
        return self.build_route(action, Category.QUERY)

    def build_route(self, action: str, category: Category) -> RouteDocument:
        """Build the route document for ``action``.

        Raises:
            MalformedRouteError: if no input document was given.
        """
        path = self.path_for(action)
        if self._input is None:
            raise MalformedRouteError(f"Route {path} is not bound to an input document")

        return RouteDocument(
            path=path,
            method=Method.POST,
            resource=self.resource_name,
            category=category,
            deprecated=self._deprecated,
            input=self._input,
            responses=self._responses,
        )
