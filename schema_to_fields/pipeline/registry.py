"""
Schema registry and generation driver.

The registry indexes every named schema twice: by registry key (the
worklist for generation) and by (document path, item path) so that a
$ref resolved against a document finds its target. Schemas discovered
through references are registered while generation runs and are picked
up by a later pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .analyzer.context import ResolutionContext
from .analyzer.ir_nodes import Field
from .analyzer.reference_resolver import ReferenceResolver
from .analyzer.resolver import SchemaResolver
from .config import ResolverConfig
from .errors import MalformedPathError, SchemaResolutionError
from .loader import DocumentLoader, FileDocumentLoader
from .paths import item_path, normalize_base_path, normalize_doc_path
from .schema_ast.nodes import Schema, SchemaDocument

logger = logging.getLogger(__name__)


@dataclass
class SchemaInfo:
    """A registered schema and its generation identity."""

    name: str = ""
    schema: Schema | None = None
    doc_path: str = ""
    base_path: str = ""
    item_path: str = ""

    # Key in SchemaGen.schema_infos, the name unless another document owns it
    key: str = ""

    # Top-level field name -> resolved field, filled by its own resolution pass
    fields: dict[str, Field] = field(default_factory=dict)

    # Prefix -> namespace collected while resolving this schema
    xml_prefixes: dict[str, str] = field(default_factory=dict)

    generated: bool = False


@dataclass
class GenerationFailure:
    """A schema that could not be resolved."""

    schema_name: str
    doc_path: str
    error: SchemaResolutionError

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema": self.schema_name,
            "document": self.doc_path,
            "error": type(self.error).__name__,
            "message": str(self.error),
        }


@dataclass
class GenerationResult:
    """Output of one generation run."""

    schemas: dict[str, SchemaInfo] = field(default_factory=dict)
    failures: list[GenerationFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def succeeded(self) -> dict[str, SchemaInfo]:
        """Schemas that generated cleanly."""
        failed = {f.schema_name for f in self.failures}
        return {key: info for key, info in self.schemas.items() if key not in failed}

    def fields_by_schema(self) -> dict[str, dict[str, Field]]:
        return {key: info.fields for key, info in self.succeeded().items()}

    def xml_prefixes_by_schema(self) -> dict[str, dict[str, str]]:
        return {key: info.xml_prefixes for key, info in self.succeeded().items() if info.xml_prefixes}

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-ready data."""
        return {
            "schemas": {
                key: {
                    "name": info.name,
                    "document": info.doc_path,
                    "item_path": info.item_path,
                    "fields": {name: f.to_dict() for name, f in info.fields.items()},
                    "xml_prefixes": info.xml_prefixes,
                }
                for key, info in self.succeeded().items()
            },
            "failures": [f.to_dict() for f in self.failures],
        }


class SchemaGen:
    """Registry of named schemas across documents."""

    def __init__(self, config: ResolverConfig | None = None, loader: DocumentLoader | None = None):
        """
        Initialize the registry.

        Args:
            config: Resolution configuration
            loader: Collaborator for referenced documents (filesystem by default)
        """
        self.config = config or ResolverConfig()
        self.loader = loader or FileDocumentLoader(self.config.load_timeout, self.config.schema_sections)

        # Registry key -> SchemaInfo, in registration order
        self.schema_infos: dict[str, SchemaInfo] = {}

        # Document path -> item path -> SchemaInfo
        self.references: dict[str, dict[str, SchemaInfo]] = {}

        # Documents already loaded or registered, even those without schemas
        self._documents: set[str] = set()

        # Failures of every generation pass so far
        self.failures: list[GenerationFailure] = []

        self.resolver = SchemaResolver(self.config, ReferenceResolver(self, self.config, self.loader))

    def add(self, name: str, doc_path: str, base_path: str, schema: Schema) -> SchemaInfo:
        """
        Register a schema.

        Args:
            name: Schema name
            doc_path: Document the schema is declared in
            base_path: Pointer of its section within that document
            schema: The schema node

        Returns:
            The registered SchemaInfo (the existing one if this item was already registered)

        Raises:
            MalformedPathError: If doc_path, base_path or name cannot form a valid path
        """
        doc = normalize_doc_path(doc_path)
        base = normalize_base_path(base_path)
        item = item_path(base, name)

        existing = self.references.get(doc, {}).get(item)
        if existing is not None:
            return existing

        key = name
        if key in self.schema_infos:
            key = f"{doc}#{item}"
            logger.warning("Schema name '%s' is already registered, registering %s under '%s'", name, doc, key)

        info = SchemaInfo(
            name=name,
            schema=schema,
            doc_path=doc,
            base_path=base,
            item_path=item,
            key=key,
        )
        self.schema_infos[key] = info
        self.references.setdefault(doc, {})[item] = info
        self._documents.add(doc)
        logger.debug("Registered schema %s at %s#%s", key, doc, item)
        return info

    def add_document(self, document: SchemaDocument) -> list[SchemaInfo]:
        """
        Register every named schema of a parsed document.

        A name that cannot form a valid item path is recorded as a failure
        and the remaining schemas are still registered.

        Returns:
            The registered SchemaInfos
        """
        doc = normalize_doc_path(document.url)
        self._documents.add(doc)

        infos = []
        for name, schema in document.schemas.items():
            try:
                infos.append(self.add(name, doc, document.section, schema))
            except MalformedPathError as e:
                e.schema_name = e.schema_name or str(name)
                e.doc_path = e.doc_path or doc
                logger.error("Failed to register schema %r from %s: %s", name, doc, e)
                self.failures.append(GenerationFailure(schema_name=str(name), doc_path=doc, error=e))
        return infos

    def has_document(self, doc_path: str) -> bool:
        return normalize_doc_path(doc_path) in self._documents

    def lookup(self, doc_path: str, pointer: str) -> SchemaInfo | None:
        """Find the schema registered at a pointer of a document."""
        return self.references.get(normalize_doc_path(doc_path), {}).get(normalize_base_path(pointer))

    def generate(self) -> GenerationResult:
        """
        Resolve every registered schema.

        Schemas registered while generating (through external references)
        are resolved in a following pass. A failing schema is recorded and
        does not stop the others.

        Returns:
            GenerationResult with every schema and the collected failures
        """
        result = GenerationResult(schemas=self.schema_infos, failures=self.failures)

        while True:
            pending = [info for info in self.schema_infos.values() if not info.generated]
            if not pending:
                break

            for info in pending:
                info.generated = True
                failure = self._generate_one(info)
                if failure is not None:
                    result.failures.append(failure)

        return result

    def _generate_one(self, info: SchemaInfo) -> GenerationFailure | None:
        info.fields.clear()
        info.xml_prefixes = {}
        context = ResolutionContext(
            scope=info.fields,
            doc_path=info.doc_path,
            base_path=info.base_path,
            schema_name=info.key,
            xml_prefixes=info.xml_prefixes,
            is_array=False,
            resolving=(((info.doc_path, id(info.schema)), info.key),),
        )

        try:
            self.resolver.resolve(info.name, info.schema, context)
        except SchemaResolutionError as e:
            e.schema_name = e.schema_name or info.key
            e.doc_path = e.doc_path or info.doc_path
            logger.error("Failed to generate schema %s: %s", info.key, e)
            info.fields.clear()
            return GenerationFailure(schema_name=info.key, doc_path=info.doc_path, error=e)

        return None
