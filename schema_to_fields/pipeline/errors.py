"""
Errors raised while registering and resolving schemas.

Every error carries enough context (schema name, document path,
reference string) to locate the offending declaration. The generation
driver catches them per schema so one failure never aborts the others.
"""

from __future__ import annotations


class SchemaResolutionError(Exception):
    """Base class for all resolution failures."""

    def __init__(
        self,
        message: str,
        schema_name: str | None = None,
        doc_path: str | None = None,
        reference: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.schema_name = schema_name
        self.doc_path = doc_path
        self.reference = reference

    def __str__(self) -> str:
        details = []
        if self.schema_name:
            details.append(f"schema={self.schema_name}")
        if self.doc_path:
            details.append(f"document={self.doc_path}")
        if self.reference:
            details.append(f"reference={self.reference}")
        if not details:
            return self.message
        return f"{self.message} ({', '.join(details)})"


class MalformedPathError(SchemaResolutionError):
    """A document, base or item path is not a valid URI reference."""


class UnsupportedReferenceSchemeError(SchemaResolutionError):
    """A $ref uses a scheme other than empty, http or https."""


class RemoteReferenceDisallowedError(SchemaResolutionError):
    """A $ref targets http(s) and is not allow-listed."""


class ReferenceLoadError(SchemaResolutionError):
    """A referenced document could not be read or parsed."""


class CyclicSchemaError(SchemaResolutionError):
    """Resolution revisited a node already being resolved on the current path."""

    def __init__(self, message: str, cycle: list[str] | None = None, **context):
        super().__init__(message, **context)
        self.cycle = cycle or []


class UnknownSchemaTypeError(SchemaResolutionError):
    """A schema node has no recognized type and no reference."""


class CompositionConflictError(SchemaResolutionError):
    """A oneOf/allOf entry collides with a field already produced at the same key."""


class SchemaParseError(SchemaResolutionError):
    """A raw schema tree cannot be turned into schema nodes."""
