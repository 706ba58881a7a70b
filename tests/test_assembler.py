import copy
import hashlib

import pytest

from rpc_documentor.compiler.assembler import BaseInfo, Contact, compile_document, compute_version
from rpc_documentor.compiler.registry import ReferenceRegistry, TypeTraits
from rpc_documentor.errors import UnmappedStatusCodeError
from rpc_documentor.model.base import (
    BoolDocument,
    Category,
    CompositeDocument,
    Method,
    NumberDocument,
    Property,
    Response,
    RouteDocument,
    StringDocument,
)
from rpc_documentor.model.routes import RouteBuilder

INFO = BaseInfo(
    title="Library service",
    contact=Contact(name="Development", email="development@example.com"),
    base_uri="https://library.example.com",
)

IDENTIFIER = StringDocument(reference="Identifier")


def _make_registry() -> ReferenceRegistry:
    return ReferenceRegistry(
        shared=["Identifier"],
        types={"library.model.Book": TypeTraits(resource_model=True)},
    )


def _make_route(resource: str = "book", action: str = "get", **overrides) -> RouteDocument:
    defaults = dict(
        path=f"/{resource}.{action}",
        resource=resource,
        category=Category.QUERY,
        input=CompositeDocument(),
        responses=[Response(status=200)],
    )
    defaults.update(overrides)
    return RouteDocument(**defaults)


def _compile(routes) -> dict:
    return compile_document(routes, _make_registry(), INFO)


def _create_book_route() -> RouteDocument:
    return (
        RouteBuilder("book")
        .with_input(CompositeDocument(properties={
            "title": Property(type=StringDocument()),
            "year": Property(type=NumberDocument(precision=0), required=False, default=None),
        }))
        .with_responses([
            Response(status=201, output=CompositeDocument(properties={"id": Property(type=IDENTIFIER)})),
        ])
        .build_command_route("create")
    )


class TestEndToEnd:
    def test_create_book(self):
        document = _compile([_create_book_route()])

        operation = document["paths"]["/book.create"]["post"]
        assert operation["tags"] == ["book", "command"]
        assert operation["deprecated"] is False
        assert operation["requestBody"]["required"] is True
        assert operation["requestBody"]["content"]["application/json"]["schema"] == {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "title": {"type": "string"},
                "year": {"type": "integer", "multipleOf": 1, "default": None},
            },
            "required": ["title"],
        }

        created = operation["responses"]["201"]
        assert created["description"] == "Resource created"
        schema = created["content"]["application/json"]["schema"]
        assert schema["properties"]["id"] == {"$ref": "#/components/schemas/Identifier"}
        assert schema["required"] == ["id"]

        assert document["components"]["schemas"] == {"Identifier": {"type": "string"}}

    def test_document_layout(self):
        document = _compile([_create_book_route()])
        assert list(document) == ["openapi", "info", "servers", "tags", "paths", "components"]
        assert document["openapi"] == "3.1.0"
        assert list(document["info"]) == ["title", "contact", "version"]
        assert document["info"]["title"] == "Library service"
        assert document["info"]["contact"] == {"name": "Development", "email": "development@example.com"}
        assert document["servers"] == [{"url": "https://library.example.com"}]

    def test_contact_without_email(self):
        info = BaseInfo(title="t", contact=Contact(name="Development"), base_uri="https://x")
        document = compile_document([], _make_registry(), info)
        assert document["info"]["contact"] == {"name": "Development"}


class TestTags:
    def test_first_seen_order_without_repeats(self):
        routes = [
            _make_route("book", "get"),
            _make_route("author", "get"),
            _make_route("book", "list"),
        ]
        assert _compile(routes)["tags"] == [{"name": "book"}, {"name": "author"}]

    def test_empty_resource_has_no_tag(self):
        routes = [_make_route("", "ping", path="/ping"), _make_route("book", "get")]
        assert _compile(routes)["tags"] == [{"name": "book"}]


class TestPaths:
    def test_methods_grouped_per_path(self):
        routes = [
            _make_route("book", "get", method=Method.GET),
            _make_route("book", "get", method=Method.POST),
        ]
        paths = _compile(routes)["paths"]
        assert list(paths) == ["/book.get"]
        assert list(paths["/book.get"]) == ["get", "post"]

    def test_deprecated_notice(self):
        route = _make_route(deprecated="Use book.find")
        assert _compile([route])["paths"]["/book.get"]["post"]["deprecated"] is True

    def test_request_body_uses_reference(self):
        route = _make_route(input=IDENTIFIER)
        body = _compile([route])["paths"]["/book.get"]["post"]["requestBody"]
        assert body["content"]["application/json"]["schema"] == {"$ref": "#/components/schemas/Identifier"}


class TestResponses:
    def test_response_without_output(self):
        route = _make_route(responses=[Response(status=204), Response(status=404)])
        responses = _compile([route])["paths"]["/book.get"]["post"]["responses"]
        assert responses == {
            "204": {"description": "Call successful, nothing to output"},
            "404": {"description": "Resource not found"},
        }

    def test_response_with_output(self):
        route = _make_route(responses=[Response(status=200, output=BoolDocument())])
        responses = _compile([route])["paths"]["/book.get"]["post"]["responses"]
        assert responses["200"] == {
            "description": "Ok, see content",
            "content": {"application/json": {"schema": {"type": "boolean"}}},
        }

    def test_unmapped_status_is_fatal(self):
        route = _make_route(responses=[Response(status=418)])
        with pytest.raises(UnmappedStatusCodeError, match="418"):
            _compile([route])


class TestComponents:
    def test_shared_identity_deduplicated(self):
        routes = [
            _make_route("book", "get", input=IDENTIFIER),
            _make_route("author", "get", input=CompositeDocument(properties={"id": Property(type=IDENTIFIER)})),
        ]
        assert _compile(routes)["components"]["schemas"] == {"Identifier": {"type": "string"}}

    def test_component_body_is_expanded_with_nested_references(self):
        book = CompositeDocument(
            reference="library.model.Book",
            description="A book",
            properties={"id": Property(type=IDENTIFIER)},
        )
        route = _make_route(responses=[Response(status=200, output=book)])
        document = _compile([route])

        schemas = document["components"]["schemas"]
        assert list(schemas) == ["Identifier", "Book"]
        assert schemas["Book"] == {
            "type": "object",
            "additionalProperties": False,
            "properties": {"id": {"$ref": "#/components/schemas/Identifier"}},
            "required": ["id"],
            "description": "A book",
        }
        output = document["paths"]["/book.get"]["post"]["responses"]["200"]["content"]["application/json"]
        assert output["schema"] == {"$ref": "#/components/schemas/Book", "description": "A book"}

    def test_nullable_component_reference(self):
        route = _make_route(input=StringDocument(reference="Identifier", nullable=True))
        document = _compile([route])
        schema = document["paths"]["/book.get"]["post"]["requestBody"]["content"]["application/json"]["schema"]
        assert schema == {"anyOf": [{"$ref": "#/components/schemas/Identifier"}, {"type": "null"}]}
        assert document["components"]["schemas"]["Identifier"] == {"type": ["string", "null"]}


class TestVersion:
    def test_version_hashes_document_without_version(self):
        document = _compile([_create_book_route()])
        unversioned = copy.deepcopy(document)
        del unversioned["info"]["version"]
        assert document["info"]["version"] == compute_version(unversioned)

    def test_version_is_hex_digest(self):
        version = _compile([_create_book_route()])["info"]["version"]
        assert len(version) == 32
        int(version, 16)

    def test_identical_input_identical_output(self):
        assert _compile([_create_book_route()]) == _compile([_create_book_route()])

    def test_version_follows_content(self):
        first = _compile([_create_book_route()])["info"]["version"]
        second = _compile([_create_book_route(), _make_route()])["info"]["version"]
        assert first != second

    def test_slashes_escaped_before_hashing(self):
        assert compute_version({"url": "/x"}) == hashlib.md5(b'{"url":"\\/x"}').hexdigest()
