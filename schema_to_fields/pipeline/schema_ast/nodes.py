"""
Schema node definitions.

These nodes represent one parsed OpenAPI / JSON Schema document before
any reference resolution. They are consumed, never mutated, by the
analyzer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class XML:
    """XML mapping annotation of a schema node."""

    name: str | None = None
    namespace: str | None = None
    prefix: str | None = None
    attribute: bool = False
    wrapped: bool = False


@dataclass
class Schema:
    """A single schema node."""

    # Declared type ("boolean", "integer", "number", "string", "array", "object")
    type: str | None = None

    # $ref directive, kept verbatim
    ref: str | None = None

    format: str | None = None
    description: str | None = None

    # Array element schema
    items: Schema | None = None

    # Object composition (properties keep declaration order)
    properties: dict[str, Schema] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    one_of: list[Schema] = field(default_factory=list)
    all_of: list[Schema] = field(default_factory=list)
    additional_properties: bool | Schema | None = None
    min_properties: int | None = None
    max_properties: int | None = None

    # Numeric constraints
    minimum: float | None = None
    maximum: float | None = None
    exclusive_minimum: float | None = None
    exclusive_maximum: float | None = None
    multiple_of: float | None = None

    # String constraints
    pattern: str | None = None
    min_length: int | None = None
    max_length: int | None = None

    # A null default is a value, so presence is tracked separately
    default: Any = None
    has_default: bool = False
    enum: list[Any] | None = None

    xml: XML | None = None

    # JSON pointer of this node inside its document (for error messages)
    source_path: str = ""


@dataclass
class SchemaDocument:
    """A parsed document holding named schemas."""

    url: str = ""
    # JSON pointer of the section the named schemas were read from
    section: str = ""
    schemas: dict[str, Schema] = field(default_factory=dict)

    # Raw decoded document for reference
    raw: dict[str, Any] = field(default_factory=dict)
