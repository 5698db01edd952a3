"""
Field model definitions.

These nodes are the output of resolution: one Field per schema node,
ready for code generation. Every variant shares the base Field and is
told apart by its `kind` discriminant.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar

JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "text/xml"


class FieldKind(Enum):
    """Kind of field in the model."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"  # Never produced by the resolver, arrays flatten onto their element
    OBJECT = "object"
    REFERENCE = "reference"
    UNKNOWN = "unknown"


@dataclass
class Field:
    """Attributes shared by every field variant."""

    kind: ClassVar[FieldKind]

    type: str = ""  # Resolved type tag, e.g. "string", "int64", "float32", "struct", "ref"
    name: str = ""  # Exported identifier
    var_name: str = ""  # Local identifier

    # Content type -> serialized name, always holds application/json
    target_names: dict[str, str] = field(default_factory=dict)

    required: bool = False
    is_array: bool = False

    # "<document>#<pointer>" of the source node
    path: str = ""

    description: str | None = None

    # XML serialization flags
    xml_attribute: bool = False
    xml_wrapped: bool = False
    xml_wrapper_name: str | None = None

    def is_required(self) -> bool:
        return self.required

    def target_name(self, content_type: str) -> str | None:
        """Serialized name for a content type, None when the field has no such representation."""
        return self.target_names.get(content_type)

    def to_dict(self) -> dict[str, Any]:
        """Convert the field (and nested fields) to plain data."""
        data: dict[str, Any] = {"kind": self.kind.value}
        for f in fields(self):
            data[f.name] = _to_plain(getattr(self, f.name))
        return data


def _to_plain(value: Any) -> Any:
    if isinstance(value, Field):
        return value.to_dict()
    if isinstance(value, dict):
        return {k: _to_plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_plain(v) for v in value]
    return value


@dataclass
class StringField(Field):
    kind: ClassVar[FieldKind] = FieldKind.STRING

    default: str | None = None
    pattern: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    format: str | None = None
    enum: list[Any] | None = None


@dataclass
class NumberField(Field):
    """Integer or floating point field. Unset bounds stay None, never 0."""

    kind: ClassVar[FieldKind] = FieldKind.NUMBER

    default: float | None = None
    min: float | None = None
    max: float | None = None
    min_exclusive: float | None = None
    max_exclusive: float | None = None
    multiple_of: float | None = None
    enum: list[Any] | None = None


@dataclass
class BooleanField(Field):
    kind: ClassVar[FieldKind] = FieldKind.BOOLEAN

    default: bool | None = None


@dataclass
class ArrayField(Field):
    kind: ClassVar[FieldKind] = FieldKind.ARRAY


@dataclass
class ObjectField(Field):
    kind: ClassVar[FieldKind] = FieldKind.OBJECT

    # Member name -> field, in declaration order
    members: dict[str, Field] = field(default_factory=dict)

    # Fields resolved from a schema-valued additionalProperties
    additional_properties: list[Field] = field(default_factory=list)
    allows_additional_properties: bool | None = None

    min_properties: int | None = None
    max_properties: int | None = None


@dataclass
class RefField(Field):
    kind: ClassVar[FieldKind] = FieldKind.REFERENCE

    reference: str = ""  # Raw $ref string

    # Registry key of the referenced schema, None when unresolved
    target: str | None = None
    resolved: bool = False

    # Field produced by resolving the referenced schema
    target_field: Field | None = None


@dataclass
class UnknownField(Field):
    kind: ClassVar[FieldKind] = FieldKind.UNKNOWN
