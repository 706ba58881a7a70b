"""Reference identities and the policy deciding what becomes a component.

A reference identity is the fully qualified name of the type a document was
derived from. The registry knows which identities are shared between
services and what the originating types declare about themselves; the policy
uses it to decide between a ``$ref`` and an inlined schema.
"""

from collections.abc import Callable, Iterable, Mapping

from pydantic import BaseModel, ConfigDict

from rpc_documentor.errors import UnknownReferenceError
from rpc_documentor.model.base import TypeDocument

DEFAULT_SEPARATOR = "."


class TypeTraits(BaseModel):
    """What a referenced type declares about itself."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    resource_model: bool = False
    pattern: str | None = None  # canonical regexp of a pattern constrained string
    format: str | None = None


class ReferenceRegistry:
    """Read-only lookup of shared identities and declared type traits."""

    def __init__(self, shared: Iterable[str] = (), types: Mapping[str, TypeTraits] | None = None):
        self.shared = frozenset(shared)
        self.types = dict(types or {})

    def is_known(self, identity: str) -> bool:
        return identity in self.types or identity in self.shared

    def is_shared(self, identity: str) -> bool:
        return identity in self.shared

    def is_resource_model(self, identity: str) -> bool:
        traits = self.types.get(identity)
        return traits is not None and traits.resource_model

    def traits_for(self, identity: str) -> TypeTraits:
        """Return the declared traits, empty ones for a bare shared identity."""
        if not self.is_known(identity):
            raise UnknownReferenceError(identity)
        return self.types.get(identity, TypeTraits())

    def pattern_for(self, identity: str) -> str | None:
        return self.traits_for(identity).pattern

    def format_for(self, identity: str) -> str | None:
        return self.traits_for(identity).format


class ReferencePolicy:
    """Decides whether a type document renders as a named component."""

    def __init__(
        self,
        shared: frozenset[str],
        is_resource_model: Callable[[str], bool],
        separator: str = DEFAULT_SEPARATOR,
    ):
        self.shared = shared
        self._is_resource_model = is_resource_model
        self.separator = separator

    @classmethod
    def from_registry(cls, registry: ReferenceRegistry, separator: str = DEFAULT_SEPARATOR) -> "ReferencePolicy":
        return cls(registry.shared, registry.is_resource_model, separator)

    def is_reference(self, document: TypeDocument) -> bool:
        identity = document.reference
        return identity is not None and (identity in self.shared or self._is_resource_model(identity))

    def short_name(self, identity: str) -> str:
        return identity.rsplit(self.separator, 1)[-1]
