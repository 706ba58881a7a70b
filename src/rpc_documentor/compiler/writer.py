"""Serializes a compiled document and writes it as a single artifact."""

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def serialize(document: dict[str, Any]) -> str:
    """Pretty-print ``document`` as JSON. Forward slashes stay unescaped."""
    return json.dumps(document, indent=4)


def write_document(document: dict[str, Any], path: Path) -> Path:
    """Write ``document`` to ``path``, replacing any previous artifact.

    The JSON is written to a sibling temp file first and renamed into place,
    so a failed run never leaves a partial document behind.
    """
    content = serialize(document)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")

    try:
        tmp_path.write_text(content, encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        logger.error(f"Failed to write document: {e}")
        raise

    logger.info(f"Wrote {len(content)} bytes to {path}")
    return path
