"""
Schema AST module.

Contains the schema node definitions and the parser for decoded documents.
"""

from __future__ import annotations

from .nodes import XML, Schema, SchemaDocument
from .parser import DEFAULT_SCHEMA_SECTIONS, SchemaParser

__all__ = [
    "Schema",
    "SchemaDocument",
    "XML",
    "SchemaParser",
    "DEFAULT_SCHEMA_SECTIONS",
]
