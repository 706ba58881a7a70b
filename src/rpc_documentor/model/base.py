"""Type and route documents consumed by the compiler.

A type document describes the shape of a value independent of the type
declaration it was derived from. A route document binds one RPC route to the
type documents of its input and of each response.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, JsonValue, NonNegativeInt, field_validator, model_validator


class Size(BaseModel):
    """Inclusive item count or string length bounds."""

    model_config = ConfigDict(frozen=True)

    minimal: int
    maximal: int

    @model_validator(mode="after")
    def _check_order(self) -> "Size":
        if self.minimal > self.maximal:
            raise ValueError(f"minimal {self.minimal} exceeds maximal {self.maximal}")
        return self


class Range(Size):
    """Inclusive numeric bounds."""

    minimal: int | float
    maximal: int | float


class TypeDocument(BaseModel):
    """Attributes shared by every kind of type document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    nullable: bool = False
    description: str | None = None
    deprecated: bool = False
    reference: str | None = None  # fully qualified name of the originating type


class BoolDocument(TypeDocument):
    kind: Literal["bool"] = "bool"


class CollectionDocument(TypeDocument):
    kind: Literal["collection"] = "collection"
    item: "AnyTypeDocument"
    size: Size | None = None


class Property(BaseModel):
    """A named slot of a composite."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: "AnyTypeDocument"
    required: bool = True
    default: JsonValue = None  # only rendered for optional properties


class CompositeDocument(TypeDocument):
    kind: Literal["composite"] = "composite"
    properties: dict[str, Property] = {}
    allow_extra_properties: bool = False


class EnumDocument(TypeDocument):
    kind: Literal["enum"] = "enum"
    cases: list[str]

    @field_validator("cases")
    @classmethod
    def _check_cases(cls, cases: list[str]) -> list[str]:
        if not cases:
            raise ValueError("an enum needs at least one case")
        if len(set(cases)) != len(cases):
            raise ValueError("enum cases must be unique")
        return cases


class NumberDocument(TypeDocument):
    kind: Literal["number"] = "number"
    precision: NonNegativeInt | None = None  # 0 means integral
    format: str | None = None
    range: Range | None = None


class StringDocument(TypeDocument):
    kind: Literal["string"] = "string"
    length: Size | None = None
    format: str | None = None


TypeDocumentVariant = Union[
    BoolDocument,
    CollectionDocument,
    CompositeDocument,
    EnumDocument,
    NumberDocument,
    StringDocument,
]

AnyTypeDocument = Annotated[TypeDocumentVariant, Field(discriminator="kind")]

CollectionDocument.model_rebuild()
Property.model_rebuild()
CompositeDocument.model_rebuild()


class Method(str, Enum):
    """HTTP methods, valued as OpenAPI path item keys."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"


class Category(str, Enum):
    """Whether a route changes state or only reads it."""

    COMMAND = "command"
    QUERY = "query"


class Response(BaseModel):
    """One possible outcome of a route."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: int
    output: AnyTypeDocument | None = None


class RouteDocument(BaseModel):
    """A single RPC route with the documents of its input and responses."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str  # /book.create
    method: Method = Method.POST
    resource: str = ""
    category: Category
    deprecated: bool | str | None = None  # deprecation notice or flag
    input: AnyTypeDocument
    responses: list[Response] = []

    @field_validator("method", "category", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.lower()
        return value

    @property
    def is_deprecated(self) -> bool:
        return self.deprecated is not None and self.deprecated is not False
