"""
Resolution context threaded through the recursive descent.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from ..schema_ast.nodes import XML
from .ir_nodes import Field


@dataclass(frozen=True)
class ResolutionContext:
    """Ambient parameters of one resolution step.

    The context is immutable: descending into a nested node derives a new
    context with `derive`, so a sibling never sees its neighbour's state.
    The scope and xml_prefixes containers are shared with the parent.

    Attributes:
        scope: Container the current node's Field is written into
        doc_path: Document the current node was declared in
        base_path: Pointer of the named-schema section inside that document
        schema_name: Registry key of the top-level schema being generated
        xml_prefixes: Prefix -> namespace accumulator for the top-level schema
        is_array: Whether the current node is the element of an array
        required_fields: Required property names of the enclosing object
        array_xml: XML annotation of the enclosing array schema
        resolving: Path of (doc_path, schema id) keys being resolved, with labels
    """

    scope: dict[str, Field]
    doc_path: str
    base_path: str
    schema_name: str
    xml_prefixes: dict[str, str] = field(default_factory=dict)
    is_array: bool = False
    required_fields: frozenset[str] = frozenset()
    array_xml: XML | None = None
    resolving: tuple[tuple[tuple[str, int], str], ...] = ()

    def derive(self, **changes) -> ResolutionContext:
        return replace(self, **changes)

    def is_resolving(self, key: tuple[str, int]) -> bool:
        return any(k == key for k, _ in self.resolving)

    def cycle_from(self, key: tuple[str, int], label: str) -> list[str]:
        """Labels of the cycle closed by revisiting `key`."""
        labels = [lbl for _, lbl in self.resolving]
        start = next(i for i, (k, _) in enumerate(self.resolving) if k == key)
        return labels[start:] + [label]
