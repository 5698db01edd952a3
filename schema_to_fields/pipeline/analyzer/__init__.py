"""
Analyzer module.

Contains the field model, naming policy, reference resolution and the
type-dispatching resolver.
"""

from __future__ import annotations

from .context import ResolutionContext
from .ir_nodes import (
    JSON_CONTENT_TYPE,
    XML_CONTENT_TYPE,
    ArrayField,
    BooleanField,
    Field,
    FieldKind,
    NumberField,
    ObjectField,
    RefField,
    StringField,
    UnknownField,
)
from .name_resolver import NamingPolicy
from .reference_resolver import ReferenceResolver
from .resolver import MAX_FLOAT32, SchemaResolver

__all__ = [
    "Field",
    "FieldKind",
    "StringField",
    "NumberField",
    "BooleanField",
    "ArrayField",
    "ObjectField",
    "RefField",
    "UnknownField",
    "JSON_CONTENT_TYPE",
    "XML_CONTENT_TYPE",
    "NamingPolicy",
    "ResolutionContext",
    "ReferenceResolver",
    "SchemaResolver",
    "MAX_FLOAT32",
]
