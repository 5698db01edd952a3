"""
Document loading for cross-document references.

The resolver hands an absolute document path to a DocumentLoader and
gets back a parsed SchemaDocument or a ReferenceLoadError.
"""

from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlsplit

import yaml

from .errors import ReferenceLoadError, SchemaResolutionError
from .schema_ast.nodes import SchemaDocument
from .schema_ast.parser import SchemaParser

logger = logging.getLogger(__name__)


class DocumentLoader(ABC):
    """Loads and parses the document behind a resolved path."""

    @abstractmethod
    def load(self, url: str) -> SchemaDocument:
        """Load one document.

        Args:
            url: Resolved document path (plain path or URL)

        Returns:
            The parsed document, with `url` set to the given path

        Raises:
            ReferenceLoadError: If the document cannot be read or parsed
        """


def decode_document(text: str, url: str) -> Any:
    """Decode JSON or YAML text, choosing by extension."""
    path = urlsplit(url).path if "://" in url else url
    if path.endswith(".json"):
        return json.loads(text)
    return yaml.safe_load(text)


def url_to_path(url: str) -> Path:
    """Turn a plain path or file:// URL into a filesystem path."""
    parts = urlsplit(url)
    if parts.scheme == "file":
        return Path(unquote(parts.path))
    return Path(url)


class FileDocumentLoader(DocumentLoader):
    """Reads documents from the local filesystem.

    Every read is bounded by `timeout` seconds so an unreachable
    network mount cannot hang a generation run.
    """

    def __init__(self, timeout: float = 10.0, sections: list[str] | None = None):
        self.timeout = timeout
        self.sections = sections

    def load(self, url: str) -> SchemaDocument:
        scheme = urlsplit(url).scheme
        # A one-letter scheme is a Windows drive, not a URL
        if scheme not in ("", "file") and len(scheme) > 1:
            raise ReferenceLoadError(f"Cannot load '{scheme}' documents from the filesystem", doc_path=url)

        path = url_to_path(url)
        logger.debug("Loading schema document %s", path)

        text = self._read(path, url)
        try:
            raw = decode_document(text, url)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ReferenceLoadError(f"Failed to parse document: {e}", doc_path=url) from e

        try:
            return SchemaParser().parse_document(raw, url, self.sections)
        except SchemaResolutionError as e:
            raise ReferenceLoadError(f"Invalid schema document: {e.message}", doc_path=url) from e

    def _read(self, path: Path, url: str) -> str:
        outcome: dict[str, Any] = {}

        def read():
            try:
                outcome["text"] = path.read_text(encoding="utf-8")
            except Exception as e:
                outcome["error"] = e

        # A daemon worker cannot keep the interpreter alive on a hung read
        worker = threading.Thread(target=read, name=f"read {url}", daemon=True)
        worker.start()
        worker.join(self.timeout)
        if worker.is_alive():
            raise ReferenceLoadError(f"Timed out after {self.timeout}s reading document", doc_path=url)

        error = outcome.get("error")
        if isinstance(error, (OSError, UnicodeDecodeError)):
            raise ReferenceLoadError(f"Failed to read document: {error}", doc_path=url) from error
        if error is not None:
            raise error
        return outcome["text"]
