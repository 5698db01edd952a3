"""
Reference resolver for $ref resolution.

Locates the SchemaInfo a $ref points to, loading and registering
external documents on the way. Descending into the target is left to
the SchemaResolver.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlsplit, urlunsplit

from ..config import ResolverConfig
from ..errors import (
    MalformedPathError,
    ReferenceLoadError,
    RemoteReferenceDisallowedError,
    SchemaResolutionError,
    UnsupportedReferenceSchemeError,
)
from ..loader import DocumentLoader
from ..paths import normalize_doc_path, resolve_document
from .context import ResolutionContext

if TYPE_CHECKING:
    from ..registry import SchemaGen, SchemaInfo

logger = logging.getLogger(__name__)

REMOTE_SCHEMES = ("http", "https")


class ReferenceResolver:
    """Resolves $ref strings to registered schemas."""

    def __init__(self, registry: SchemaGen, config: ResolverConfig, loader: DocumentLoader):
        """
        Initialize the resolver.

        Args:
            registry: Registry that owns every known schema and document
            config: Resolution configuration (remote allow-list)
            loader: Collaborator used to load referenced documents
        """
        self.registry = registry
        self.config = config
        self.loader = loader

    def locate(self, field_name: str, reference: str, context: ResolutionContext) -> SchemaInfo | None:
        """
        Find the schema a reference points to.

        Args:
            field_name: Name of the referencing field (for error messages)
            reference: The raw $ref string
            context: Context of the referencing node

        Returns:
            The target SchemaInfo, or None when the reference does not name a registered schema

        Raises:
            MalformedPathError: If the reference is not a valid URI reference
            RemoteReferenceDisallowedError: If it targets a remote document that is not allow-listed
            UnsupportedReferenceSchemeError: If it uses any other scheme
            ReferenceLoadError: If the referenced document cannot be loaded
        """
        error_context = {"schema_name": context.schema_name, "doc_path": context.doc_path, "reference": reference}
        try:
            parts = urlsplit(reference)
        except ValueError as e:
            raise MalformedPathError(f"Invalid URI reference for field '{field_name}'", **error_context) from e

        fragment = unquote(parts.fragment)
        scheme = parts.scheme.lower()

        if scheme in REMOTE_SCHEMES:
            if not self._is_allowed(reference):
                raise RemoteReferenceDisallowedError(
                    f"Remote reference for field '{field_name}' is not allow-listed",
                    **error_context,
                )
            document = urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, ""))
            return self._locate_in_document(normalize_doc_path(document), fragment, reference, context)

        if scheme:
            raise UnsupportedReferenceSchemeError(
                f"Unsupported protocol '{parts.scheme}' for field '{field_name}', only relative, local, http or https references are valid",
                **error_context,
            )

        if parts.path:
            relative = urlunsplit(("", "", parts.path, parts.query, ""))
            try:
                document = resolve_document(context.doc_path, relative)
            except MalformedPathError as e:
                raise MalformedPathError(e.message, **error_context) from e
            return self._locate_in_document(document, fragment, reference, context)

        # Same document: it was registered before generation started
        return self.registry.lookup(context.doc_path, fragment)

    def _is_allowed(self, reference: str) -> bool:
        return any(reference.startswith(prefix) for prefix in self.config.allowed_remote_prefixes)

    def _locate_in_document(
        self,
        document: str,
        fragment: str,
        reference: str,
        context: ResolutionContext,
    ) -> SchemaInfo | None:
        if not self.registry.has_document(document):
            self._load(document, reference, context)
        if not fragment:
            logger.debug("Reference %s names a whole document, no schema to link", reference)
            return None
        return self.registry.lookup(document, fragment)

    def _load(self, document: str, reference: str, context: ResolutionContext) -> None:
        """Load a document and register its schemas."""
        try:
            parsed = self.loader.load(document)
        except SchemaResolutionError as e:
            raise ReferenceLoadError(
                f"Cannot load document referenced from {context.doc_path}: {e.message}",
                schema_name=context.schema_name,
                doc_path=document,
                reference=reference,
            ) from e
        except (OSError, ValueError) as e:
            raise ReferenceLoadError(
                f"Cannot load document referenced from {context.doc_path}: {e}",
                schema_name=context.schema_name,
                doc_path=document,
                reference=reference,
            ) from e

        parsed.url = document
        infos = self.registry.add_document(parsed)
        logger.debug("Registered %d schemas from %s", len(infos), document)
