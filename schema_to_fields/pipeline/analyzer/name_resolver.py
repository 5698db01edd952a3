"""
Naming policy for resolved fields.

Maps a raw property name to the exported identifier, the local variable
identifier and the serialized name for each content type.
"""

from __future__ import annotations

from ...utils import snake_to_pascal_case
from ..schema_ast.nodes import XML
from .ir_nodes import JSON_CONTENT_TYPE, XML_CONTENT_TYPE


class NamingPolicy:
    """Deterministic naming of fields."""

    # Used when a raw name has no letters or digits at all
    FALLBACK_NAME = "Field"

    def __init__(self, reserved_words: list[str] | None = None):
        """
        Initialize the policy.

        Args:
            reserved_words: Variable names that must be escaped with a trailing underscore
        """
        self.reserved_words = set(reserved_words or [])

    def field_name(self, raw_name: str) -> str:
        """Exported identifier: PascalCase, never empty, never starting with a digit."""
        name = snake_to_pascal_case(raw_name) or self.FALLBACK_NAME
        if name[0].isdigit():
            name = "N" + name
        return name

    def var_name(self, raw_name: str) -> str:
        """Local identifier: camelCase version of the exported identifier."""
        exported = self.field_name(raw_name)
        name = exported[0].lower() + exported[1:]
        if name in self.reserved_words:
            name += "_"
        return name

    def xml_name(self, raw_name: str, xml: XML) -> str:
        """Qualified XML element or attribute name."""
        local_name = xml.name or raw_name
        if xml.prefix:
            return f"{xml.prefix}:{local_name}"
        return local_name

    def target_names(self, raw_name: str, xml: XML | None, xml_prefixes: dict[str, str]) -> dict[str, str]:
        """
        Serialized names per content type.

        Args:
            raw_name: The raw property name
            xml: XML annotation of the schema, if any
            xml_prefixes: Prefix -> namespace accumulator of the current top-level schema

        Returns:
            Mapping that always holds the JSON name and holds the XML name only for annotated schemas
        """
        names = {JSON_CONTENT_TYPE: raw_name}
        if xml is not None:
            names[XML_CONTENT_TYPE] = self.xml_name(raw_name, xml)
            if xml.namespace:
                # An unprefixed namespace is the default namespace
                xml_prefixes[xml.prefix or ""] = xml.namespace
        return names
