"""
Pipeline - schema document to field model.

1. Phase 1 (Parser): Parse the decoded document into schema nodes
2. Phase 2 (Registry): Register named schemas per document
3. Phase 3 (Resolver): Resolve every schema into fields, following and
   registering $ref targets across documents
"""

from __future__ import annotations

from .config import MergePolicy, RemoteReferencePolicy, ResolverConfig, UnknownTypePolicy
from .errors import (
    CompositionConflictError,
    CyclicSchemaError,
    MalformedPathError,
    ReferenceLoadError,
    RemoteReferenceDisallowedError,
    SchemaParseError,
    SchemaResolutionError,
    UnknownSchemaTypeError,
    UnsupportedReferenceSchemeError,
)
from .generator import FieldModelGenerator
from .loader import DocumentLoader, FileDocumentLoader
from .registry import GenerationFailure, GenerationResult, SchemaGen, SchemaInfo

__all__ = [
    "FieldModelGenerator",
    "SchemaGen",
    "SchemaInfo",
    "GenerationResult",
    "GenerationFailure",
    "ResolverConfig",
    "MergePolicy",
    "RemoteReferencePolicy",
    "UnknownTypePolicy",
    "DocumentLoader",
    "FileDocumentLoader",
    "SchemaResolutionError",
    "MalformedPathError",
    "UnsupportedReferenceSchemeError",
    "RemoteReferenceDisallowedError",
    "ReferenceLoadError",
    "CyclicSchemaError",
    "UnknownSchemaTypeError",
    "CompositionConflictError",
    "SchemaParseError",
]
