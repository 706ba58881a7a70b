"""Errors raised while compiling an API document.

None of these are recovered inside the compiler; they propagate to the
caller as a single generation failure.
"""

from pathlib import Path


class DocumentorError(Exception):
    """Base class for every generation failure."""


class ConfigurationError(DocumentorError):
    """Raised when the documentor configuration is invalid."""

    def __init__(
        self,
        message: str,
        errors: list[dict] | None = None,
        path: Path | None = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors or []
        self.path = path

    def __str__(self) -> str:
        msg = super().__str__()
        if self.path:
            msg = f"{msg} (file: {self.path})"
        if self.errors:
            details = []
            for err in self.errors[:5]:
                loc = ".".join(str(x) for x in err.get("loc", []))
                details.append(f"  - {loc}: {err.get('msg', 'Unknown error')}")
            if len(self.errors) > 5:
                details.append(f"  ... and {len(self.errors) - 5} more errors")
            msg = f"{msg}\n" + "\n".join(details)
        return msg


class MalformedRouteError(ConfigurationError):
    """A route entry could not be bound to a route document."""


class UnrenderableKindError(DocumentorError):
    """A type document of a kind the renderer does not know."""


class UnknownReferenceError(DocumentorError):
    """A reference identity that does not resolve to a declared type."""

    def __init__(self, reference: str) -> None:
        super().__init__(f"Reference '{reference}' unknown")
        self.reference = reference


class UnmappedStatusCodeError(DocumentorError):
    """A response status code without a fixed description."""

    def __init__(self, status: int) -> None:
        super().__init__(f"No response description for status code {status}")
        self.status = status
