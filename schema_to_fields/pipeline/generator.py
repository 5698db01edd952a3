"""
Pipeline generator: document in, field model out.

1. Parse the decoded document into schema nodes
2. Register its named schemas
3. Resolve every schema (loading referenced documents on the way)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .config import ResolverConfig
from .loader import DocumentLoader, FileDocumentLoader
from .registry import GenerationResult, SchemaGen
from .schema_ast.nodes import SchemaDocument
from .schema_ast.parser import SchemaParser


class FieldModelGenerator:
    """Resolves one schema document into the field model."""

    def __init__(
        self,
        document: dict[str, Any] | SchemaDocument,
        doc_path: str,
        config: ResolverConfig | None = None,
        loader: DocumentLoader | None = None,
    ):
        """
        Initialize the generator.

        Args:
            document: Decoded document, or an already parsed SchemaDocument
            doc_path: Path of the document, base for relative references
            config: Resolution configuration
            loader: Collaborator for referenced documents
        """
        self.config = config or ResolverConfig()
        if not isinstance(document, SchemaDocument):
            document = SchemaParser().parse_document(document, doc_path, self.config.schema_sections)
        document.url = doc_path
        self.document = document
        self.registry = SchemaGen(self.config, loader)

    @classmethod
    def from_file(cls, path: str | Path, config: ResolverConfig | None = None) -> FieldModelGenerator:
        """Load a JSON or YAML document from disk."""
        config = config or ResolverConfig()
        loader = FileDocumentLoader(config.load_timeout, config.schema_sections)
        doc_path = str(Path(path).resolve())
        return cls(loader.load(doc_path), doc_path, config, loader)

    def generate(self) -> GenerationResult:
        self.registry.add_document(self.document)
        return self.registry.generate()
