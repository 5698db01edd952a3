"""
Schema parser that builds schema nodes from decoded documents.

Turns the mapping produced by a JSON or YAML decoder into Schema nodes
without resolving any reference.
"""

from __future__ import annotations

from typing import Any

from ...utils import join_pointer, normalize_pointer, split_pointer
from ..errors import CyclicSchemaError, SchemaParseError, SchemaResolutionError
from .nodes import XML, Schema, SchemaDocument

DEFAULT_SCHEMA_SECTIONS = ["/components/schemas", "/$defs", "/definitions"]


class SchemaParser:
    """Parses decoded schema documents into Schema nodes."""

    def __init__(self):
        # ids of raw mappings on the current parse path (YAML anchors can alias a parent)
        self._parsing: set[int] = set()

    def parse_document(
        self,
        raw: Any,
        url: str = "",
        sections: list[str] | None = None,
    ) -> SchemaDocument:
        """
        Parse a decoded document.

        Args:
            raw: The decoded document
            url: Path of the document (kept on the result)
            sections: JSON pointers to look for named schemas, first match wins

        Returns:
            SchemaDocument with its named schemas in declaration order
        """
        if not isinstance(raw, dict):
            raise SchemaParseError("Document root must be a mapping", doc_path=url or None)

        document = SchemaDocument(url=url, raw=raw)
        for section in sections or DEFAULT_SCHEMA_SECTIONS:
            named = self._lookup(raw, section)
            if not isinstance(named, dict):
                continue

            document.section = normalize_pointer(section)
            for key, raw_schema in named.items():
                try:
                    name = self._key(key, document.section)
                    path = join_pointer(document.section, name)
                    document.schemas[name] = self.parse(raw_schema, path)
                except SchemaResolutionError as e:
                    e.schema_name = e.schema_name or str(key)
                    e.doc_path = e.doc_path or url or None
                    raise
            break

        return document

    def _lookup(self, raw: dict[str, Any], pointer: str) -> Any:
        """Follow a JSON pointer inside the raw document."""
        node: Any = raw
        for token in split_pointer(pointer):
            if not isinstance(node, dict) or token not in node:
                return None
            node = node[token]
        return node

    def parse(self, raw: Any, path: str = "") -> Schema:
        """
        Parse one schema node recursively.

        Args:
            raw: The schema mapping
            path: JSON pointer of the node in its document

        Returns:
            Schema node
        """
        if not isinstance(raw, dict):
            raise SchemaParseError(f"Schema at #{path} must be a mapping, got {type(raw).__name__}")

        if id(raw) in self._parsing:
            raise CyclicSchemaError(f"Schema at #{path} contains itself", cycle=[f"#{path}"])

        self._parsing.add(id(raw))
        try:
            return self._parse_node(raw, path)
        finally:
            self._parsing.discard(id(raw))

    def _parse_node(self, raw: dict[str, Any], path: str) -> Schema:
        schema = Schema(
            type=self._parse_type(raw, path),
            ref=self._optional_str(raw, "$ref", path),
            format=self._optional_str(raw, "format", path),
            description=self._optional_str(raw, "description", path),
            pattern=self._optional_str(raw, "pattern", path),
            min_length=self._optional_int(raw, "minLength", path),
            max_length=self._optional_int(raw, "maxLength", path),
            min_properties=self._optional_int(raw, "minProperties", path),
            max_properties=self._optional_int(raw, "maxProperties", path),
            minimum=self._optional_number(raw, "minimum", path),
            maximum=self._optional_number(raw, "maximum", path),
            multiple_of=self._optional_number(raw, "multipleOf", path),
            source_path=path,
        )

        schema.exclusive_minimum = self._exclusive_bound(raw, "exclusiveMinimum", schema.minimum, path)
        schema.exclusive_maximum = self._exclusive_bound(raw, "exclusiveMaximum", schema.maximum, path)

        if "default" in raw:
            schema.default = raw["default"]
            schema.has_default = True

        if "enum" in raw:
            if not isinstance(raw["enum"], list):
                raise SchemaParseError(f"'enum' at #{path} must be a list")
            schema.enum = list(raw["enum"])

        if "items" in raw:
            schema.items = self.parse(raw["items"], f"{path}/items")

        properties = raw.get("properties") or {}
        if not isinstance(properties, dict):
            raise SchemaParseError(f"'properties' at #{path} must be a mapping")
        for key, prop_schema in properties.items():
            prop_name = self._key(key, f"{path}/properties")
            schema.properties[prop_name] = self.parse(prop_schema, join_pointer(f"{path}/properties", prop_name))

        required = raw.get("required") or []
        if not isinstance(required, list):
            raise SchemaParseError(f"'required' at #{path} must be a list of property names")
        schema.required = [self._key(r, f"{path}/required") for r in required]

        schema.one_of = self._parse_list(raw, "oneOf", path)
        schema.all_of = self._parse_list(raw, "allOf", path)

        additional = raw.get("additionalProperties")
        if isinstance(additional, bool):
            schema.additional_properties = additional
        elif additional is not None:
            schema.additional_properties = self.parse(additional, f"{path}/additionalProperties")

        if "xml" in raw:
            schema.xml = self._parse_xml(raw["xml"], path)

        return schema

    def _parse_list(self, raw: dict[str, Any], key: str, path: str) -> list[Schema]:
        entries = raw.get(key) or []
        if not isinstance(entries, list):
            raise SchemaParseError(f"'{key}' at #{path} must be a list")
        return [self.parse(entry, f"{path}/{key}/{i}") for i, entry in enumerate(entries)]

    def _parse_xml(self, raw: Any, path: str) -> XML:
        if not isinstance(raw, dict):
            raise SchemaParseError(f"'xml' at #{path} must be a mapping")
        return XML(
            name=self._optional_str(raw, "name", path),
            namespace=self._optional_str(raw, "namespace", path),
            prefix=self._optional_str(raw, "prefix", path),
            attribute=bool(raw.get("attribute", False)),
            wrapped=bool(raw.get("wrapped", False)),
        )

    def _exclusive_bound(self, raw: dict[str, Any], key: str, bound: float | None, path: str) -> float | None:
        """Read an exclusive bound in either the OpenAPI 3.0 (flag) or 3.1 (number) form."""
        value = raw.get(key)
        if isinstance(value, bool):
            return bound if value else None
        return self._optional_number(raw, key, path)

    def _key(self, value: Any, path: str) -> str:
        """A schema or property name. YAML decodes keys such as `200` or `on` to scalars."""
        if isinstance(value, str):
            return value
        if isinstance(value, (bool, int, float)):
            return str(value)
        raise SchemaParseError(f"Name at #{path} must be a string, got {type(value).__name__}: {value!r}")

    def _optional_str(self, raw: dict[str, Any], key: str, path: str) -> str | None:
        value = raw.get(key)
        if value is not None and not isinstance(value, str):
            raise SchemaParseError(f"'{key}' at #{path} must be a string, got {type(value).__name__}")
        return value

    def _optional_int(self, raw: dict[str, Any], key: str, path: str) -> int | None:
        value = raw.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise SchemaParseError(f"'{key}' at #{path} must be an integer")
        return value

    def _optional_number(self, raw: dict[str, Any], key: str, path: str) -> float | None:
        value = raw.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise SchemaParseError(f"'{key}' at #{path} must be a number")
        return value

    def _parse_type(self, raw: dict[str, Any], path: str) -> str | None:
        """Read 'type', collapsing a JSON Schema type list such as ["string", "null"]."""
        value = raw.get("type")
        if isinstance(value, list):
            types = [t for t in value if t != "null"]
            if len(types) != 1 or not isinstance(types[0], str):
                raise SchemaParseError(f"'type' at #{path} must name a single non-null type, got {value}")
            return types[0]
        return self._optional_str(raw, "type", path)
