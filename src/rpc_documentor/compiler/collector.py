"""Collects the type documents that become named components."""

from collections.abc import Iterable, Iterator

from rpc_documentor.compiler.registry import ReferencePolicy
from rpc_documentor.model.base import CollectionDocument, CompositeDocument, RouteDocument, TypeDocumentVariant


class SchemaCollector:
    """Walks route documents and yields every referenced type document.

    Children are visited before their parent. The same identity may be
    yielded more than once; callers key the result by short name.
    """

    def __init__(self, policy: ReferencePolicy):
        self.policy = policy

    def collect(self, routes: Iterable[RouteDocument]) -> Iterator[TypeDocumentVariant]:
        for route in routes:
            yield from self.iter_references(route.input)

            for response in route.responses:
                if response.output is not None:
                    yield from self.iter_references(response.output)

    def iter_references(self, document: TypeDocumentVariant) -> Iterator[TypeDocumentVariant]:
        if isinstance(document, CompositeDocument):
            for prop in document.properties.values():
                yield from self.iter_references(prop.type)
        elif isinstance(document, CollectionDocument):
            yield from self.iter_references(document.item)

        if self.policy.is_reference(document):
            yield document
