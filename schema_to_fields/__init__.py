"""Schema to Fields

A Python package for resolving OpenAPI / JSON Schema documents into a
language-agnostic field model for code generation. Resolves $ref across
documents, flattens arrays onto their element fields and assigns
serialized names per content type.
"""

__version__ = "1.0.1"

from .pipeline import (
    FieldModelGenerator,
    GenerationResult,
    ResolverConfig,
    SchemaGen,
    SchemaInfo,
    SchemaResolutionError,
)

__all__ = [
    "FieldModelGenerator",
    "SchemaGen",
    "SchemaInfo",
    "GenerationResult",
    "ResolverConfig",
    "SchemaResolutionError",
]
