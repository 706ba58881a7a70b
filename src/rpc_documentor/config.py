"""Documentor configuration.

Loaded from a YAML file whose values may reference environment variables
as ``${VAR}`` or ``${VAR:-default}``.
"""

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from rpc_documentor.compiler.assembler import BaseInfo, Contact
from rpc_documentor.compiler.registry import DEFAULT_SEPARATOR
from rpc_documentor.errors import ConfigurationError

CONFIG_ENV_VAR = "RPC_DOCUMENTOR_CONFIG"

ENV_PATTERN = re.compile(r"\$\{(\w+)(?::-?([^}]*))?\}")


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class ContactConfig(BaseModel):
    name: str = "Development"
    email: str | None = None


class DocumentorConfig(BaseModel):
    """Settings for one documentation run.

    Attributes:
        title: Service name, used as the document title
        base_uri: URL of the server the routes are mounted on
        file_location: Where the artifact is written
        contact: Contact published in the document info
        shared_references: Identities always rendered as components
        namespace_separator: Separator of the segments of an identity
        log_level: Level for the documentor loggers
    """

    title: str
    base_uri: str
    file_location: Path = Path("openapi.json")
    contact: ContactConfig = Field(default_factory=ContactConfig)
    shared_references: list[str] = []
    namespace_separator: str = DEFAULT_SEPARATOR
    log_level: LogLevel = LogLevel.WARNING

    @field_validator("namespace_separator")
    @classmethod
    def _check_separator(cls, value: str) -> str:
        if not value:
            raise ValueError("namespace separator cannot be empty")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    def base_info(self) -> BaseInfo:
        return BaseInfo(
            title=self.title,
            contact=Contact(name=self.contact.name, email=self.contact.email),
            base_uri=self.base_uri,
        )


def substitute_env(value: Any) -> Any:
    """Replace ``${VAR}`` references in every string of ``value``."""
    if isinstance(value, str):
        return ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ""), value)
    if isinstance(value, dict):
        return {k: substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute_env(v) for v in value]
    return value


def load_config(path: Path | None = None, **overrides: Any) -> DocumentorConfig:
    """Load and validate the configuration.

    Args:
        path: YAML file; falls back to ``$RPC_DOCUMENTOR_CONFIG``. Without
            either only ``overrides`` are used.
        overrides: Values taking precedence over the file; ``None`` values
            are ignored.

    Raises:
        ConfigurationError: if the file is unreadable or the result invalid
    """
    if path is None and os.environ.get(CONFIG_ENV_VAR):
        path = Path(os.environ[CONFIG_ENV_VAR])

    raw: dict[str, Any] = {}
    if path is not None:
        try:
            loaded = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except FileNotFoundError as e:
            raise ConfigurationError("Configuration file not found", path=path) from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Configuration is not valid YAML: {e}", path=path) from e
        if not isinstance(loaded, dict):
            raise ConfigurationError("Configuration must be a mapping", path=path)
        raw = substitute_env(loaded)

    raw.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return DocumentorConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError("Invalid configuration", errors=e.errors(), path=path) from e
