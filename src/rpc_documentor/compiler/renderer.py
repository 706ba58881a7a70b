"""Renders type documents into OpenAPI 3.1 schema fragments.

Fragments are plain dicts, built bottom-up and never modified once returned.

Nullability has two encodings. An inlined schema gets ``type: [T, "null"]``,
while a reference is wrapped as ``anyOf: [{$ref}, {type: null}]`` since
``$ref`` takes no sibling ``type`` keyword.
"""

from typing import Any, Never, NoReturn

from rpc_documentor.compiler.registry import ReferencePolicy, ReferenceRegistry
from rpc_documentor.errors import UnrenderableKindError
from rpc_documentor.model.base import (
    BoolDocument,
    CollectionDocument,
    CompositeDocument,
    EnumDocument,
    NumberDocument,
    StringDocument,
    TypeDocumentVariant,
)

COMPONENT_PREFIX = "#/components/schemas/"

Fragment = dict[str, Any]


def _unrenderable(document: Never) -> NoReturn:
    raise UnrenderableKindError(f"Cannot render type document {type(document).__name__}")


class TypeRenderer:
    """Turns a type document into a JSON-serializable schema fragment."""

    def __init__(self, policy: ReferencePolicy, registry: ReferenceRegistry):
        self.policy = policy
        self.registry = registry

    def render(self, document: TypeDocumentVariant, use_ref: bool) -> Fragment:
        """Render ``document``.

        With ``use_ref`` a document the policy marks as a reference becomes a
        ``$ref`` to its component; otherwise it is expanded in place.
        """
        if use_ref and self.policy.is_reference(document):
            fragment = self._render_reference(document)
        else:
            fragment = self._render_inline(document)
            if document.nullable:
                fragment = {**fragment, "type": [fragment["type"], "null"]}

        if document.description:
            fragment = {**fragment, "description": document.description}

        if document.deprecated:
            fragment = {**fragment, "deprecated": True}

        return fragment

    def reference_to(self, identity: str) -> str:
        return f"{COMPONENT_PREFIX}{self.policy.short_name(identity)}"

    def _render_reference(self, document: TypeDocumentVariant) -> Fragment:
        assert document.reference is not None
        fragment: Fragment = {"$ref": self.reference_to(document.reference)}

        if document.nullable:
            fragment = {"anyOf": [fragment, {"type": "null"}]}

        return fragment

    def _render_inline(self, document: TypeDocumentVariant) -> Fragment:
        match document:
            case BoolDocument():
                return {"type": "boolean"}
            case CollectionDocument():
                return self._render_collection(document)
            case CompositeDocument():
                return self._render_composite(document)
            case EnumDocument():
                return {"type": "string", "enum": list(document.cases)}
            case NumberDocument():
                return self._render_number(document)
            case StringDocument():
                return self._render_string(document)
            case _:
                _unrenderable(document)

    def _render_collection(self, document: CollectionDocument) -> Fragment:
        fragment: Fragment = {
            "type": "array",
            "items": self.render(document.item, use_ref=True),
        }

        if document.size:
            fragment["minItems"] = document.size.minimal
            fragment["maxItems"] = document.size.maximal

        return fragment

    def _render_composite(self, document: CompositeDocument) -> Fragment:
        properties: dict[str, Fragment] = {}
        required: list[str] = []

        for name, prop in document.properties.items():
            rendered = self.render(prop.type, use_ref=True)

            if prop.required:
                required.append(name)
            else:
                rendered = {**rendered, "default": prop.default}

            properties[name] = rendered

        return {
            "type": "object",
            "additionalProperties": document.allow_extra_properties,
            "properties": properties,
            "required": required,
        }

    def _render_number(self, document: NumberDocument) -> Fragment:
        fragment: Fragment = {"type": "integer" if document.precision == 0 else "number"}

        if document.precision is not None:
            fragment["multipleOf"] = 10 ** -document.precision

        if document.format:
            fragment["format"] = document.format

        if document.range:
            fragment["minimum"] = document.range.minimal
            fragment["maximum"] = document.range.maximal

        return fragment

    def _render_string(self, document: StringDocument) -> Fragment:
        fragment: Fragment = {"type": "string"}

        if document.length:
            fragment["minLength"] = document.length.minimal
            fragment["maxLength"] = document.length.maximal

        if document.format:
            fragment["format"] = document.format

        if document.reference is not None:
            traits = self.registry.traits_for(document.reference)

            if traits.pattern:
                fragment["pattern"] = traits.pattern

            # a declared format wins over the document's own
            if traits.format:
                fragment["format"] = traits.format

        return fragment
