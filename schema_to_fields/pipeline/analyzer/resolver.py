"""
Schema resolver that turns schema nodes into fields.

Recursive descent over a schema tree: every call dispatches on the
node's declared type and writes exactly one Field into the context's
current scope.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from ..config import MergePolicy, RemoteReferencePolicy, ResolverConfig, UnknownTypePolicy
from ..errors import (
    CompositionConflictError,
    CyclicSchemaError,
    RemoteReferenceDisallowedError,
    UnknownSchemaTypeError,
)
from ..schema_ast.nodes import Schema
from .context import ResolutionContext
from .ir_nodes import (
    BooleanField,
    Field,
    NumberField,
    ObjectField,
    RefField,
    StringField,
    UnknownField,
)
from .name_resolver import NamingPolicy
from .reference_resolver import ReferenceResolver

logger = logging.getLogger(__name__)

# Largest finite IEEE-754 single precision value
MAX_FLOAT32 = 3.4028234663852886e38


class SchemaResolver:
    """Resolves schema nodes into the field model."""

    def __init__(self, config: ResolverConfig, references: ReferenceResolver):
        """
        Initialize the resolver.

        Args:
            config: Resolution configuration
            references: Resolver used for $ref nodes
        """
        self.config = config
        self.references = references
        self.naming = NamingPolicy(config.reserved_words)

        self._handlers = {
            "boolean": self._resolve_boolean,
            "integer": self._resolve_numeric,
            "number": self._resolve_numeric,
            "string": self._resolve_string,
            "array": self._resolve_array,
            "object": self._resolve_object,
        }

    def resolve(self, name: str, schema: Schema, context: ResolutionContext) -> None:
        """
        Resolve one schema node into `context.scope[name]`.

        Args:
            name: Raw name of the field
            schema: The schema node
            context: Current resolution context
        """
        if schema.ref is not None:
            self._resolve_reference(name, schema, context)
            return

        handler = self._handlers.get(self._effective_type(schema))
        if handler is None:
            self._resolve_unknown(name, schema, context, f"Schema for field '{name}' has no recognized type: {schema.type!r}")
            return
        handler(name, schema, context)

    def _effective_type(self, schema: Schema) -> str | None:
        if schema.type is not None or not self.config.infer_missing_types:
            return schema.type
        if schema.properties or schema.all_of or schema.one_of:
            return "object"
        if schema.items is not None:
            return "array"
        return None

    def _field_data(self, field: Field, name: str, schema: Schema, context: ResolutionContext) -> Field:
        """Fill the attributes shared by every variant."""
        xml = schema.xml
        if xml is None and context.array_xml is not None:
            # A wrapped array names its wrapper, the elements keep the field name
            xml = replace(context.array_xml, name=None) if context.array_xml.wrapped else context.array_xml

        field.name = self.naming.field_name(name)
        field.var_name = self.naming.var_name(name)
        field.target_names = self.naming.target_names(name, xml, context.xml_prefixes)
        field.required = name in context.required_fields
        field.is_array = context.is_array
        field.path = f"{context.doc_path}#{schema.source_path}"
        field.description = schema.description
        if xml is not None:
            field.xml_attribute = xml.attribute
        if context.array_xml is not None and context.array_xml.wrapped:
            field.xml_wrapped = True
            field.xml_wrapper_name = self.naming.xml_name(name, context.array_xml)
        return field

    def _store(self, name: str, field: Field, context: ResolutionContext) -> None:
        """Write a field into the current scope, applying the merge policy on collisions."""
        existing = context.scope.get(name)
        if existing is None:
            context.scope[name] = field
            return

        policy = self.config.all_of_merge_policy
        if policy == MergePolicy.LAST_WINS:
            logger.debug("Field '%s' in %s replaced by a later composition entry", name, context.schema_name)
            context.scope[name] = field
        elif policy == MergePolicy.MERGE:
            context.scope[name] = self._merge(name, existing, field, context)
        else:
            raise CompositionConflictError(
                f"Field '{name}' is produced more than once",
                schema_name=context.schema_name,
                doc_path=context.doc_path,
            )

    def _merge(self, name: str, existing: Field, field: Field, context: ResolutionContext) -> Field:
        """Union the members of two object fields written at the same key."""
        left = _object_view(existing)
        right = _object_view(field)
        if left is None or right is None:
            raise CompositionConflictError(
                f"Cannot merge field '{name}': {existing.type or existing.kind.value} and {field.type or field.kind.value} are not both objects",
                schema_name=context.schema_name,
                doc_path=context.doc_path,
            )

        members = dict(left.members)
        for member_name, member in right.members.items():
            previous = members.get(member_name)
            if previous is not None and previous.type != member.type:
                raise CompositionConflictError(
                    f"Cannot merge field '{name}': member '{member_name}' is {previous.type} and {member.type}",
                    schema_name=context.schema_name,
                    doc_path=context.doc_path,
                )
            members[member_name] = member

        merged = replace(right, members=members)
        base = field if isinstance(field, ObjectField) else existing
        # Keep the identity of the field written at this key
        merged.name, merged.var_name, merged.target_names = base.name, base.var_name, base.target_names
        merged.required = existing.required or field.required
        merged.is_array = existing.is_array or field.is_array
        return merged

    def _resolve_unknown(self, name: str, schema: Schema, context: ResolutionContext, message: str) -> None:
        policy = self.config.unknown_type_policy
        if policy == UnknownTypePolicy.ERROR:
            raise UnknownSchemaTypeError(
                f"{message} at #{schema.source_path}",
                schema_name=context.schema_name,
                doc_path=context.doc_path,
            )
        if policy == UnknownTypePolicy.SKIP:
            logger.debug("%s, skipped", message)
            return

        field = self._field_data(UnknownField(), name, schema, context)
        field.type = "unknown"
        self._store(name, field, context)

    def _resolve_reference(self, name: str, schema: Schema, context: ResolutionContext) -> None:
        field = self._field_data(RefField(), name, schema, context)
        field.type = "ref"
        field.reference = schema.ref

        try:
            target = self.references.locate(name, schema.ref, context)
        except RemoteReferenceDisallowedError as e:
            if self.config.remote_reference_policy != RemoteReferencePolicy.UNRESOLVED:
                raise
            logger.warning("Leaving reference unresolved: %s", e)
            self._store(name, field, context)
            return

        if target is None:
            logger.debug("Reference %s of field '%s' does not name a registered schema", schema.ref, name)
            self._store(name, field, context)
            return

        field.target = target.key
        key = (target.doc_path, id(target.schema))
        if context.is_resolving(key):
            if not self.config.allow_recursive_references:
                cycle = context.cycle_from(key, target.key)
                raise CyclicSchemaError(
                    f"Reference cycle detected: {' -> '.join(cycle)}",
                    cycle=cycle,
                    schema_name=context.schema_name,
                    doc_path=context.doc_path,
                    reference=schema.ref,
                )
            field.resolved = True
            self._store(name, field, context)
            return

        # The target is resolved into a scratch scope, its own fields belong to its own pass
        scratch: dict[str, Field] = {}
        target_context = context.derive(
            scope=scratch,
            doc_path=target.doc_path,
            base_path=target.base_path,
            is_array=False,
            required_fields=frozenset(),
            array_xml=None,
            resolving=context.resolving + ((key, target.key),),
        )
        self.resolve(target.name, target.schema, target_context)

        field.target_field = scratch.get(target.name)
        field.resolved = True
        self._store(name, field, context)

    def _resolve_boolean(self, name: str, schema: Schema, context: ResolutionContext) -> None:
        field = self._field_data(BooleanField(), name, schema, context)
        field.type = "bool"
        if schema.has_default:
            field.default = schema.default
        self._store(name, field, context)

    def _resolve_string(self, name: str, schema: Schema, context: ResolutionContext) -> None:
        field = self._field_data(StringField(), name, schema, context)
        field.type = "string"
        field.pattern = schema.pattern
        field.min_length = schema.min_length
        field.max_length = schema.max_length
        field.format = schema.format
        field.enum = schema.enum
        if schema.has_default:
            field.default = schema.default
        self._store(name, field, context)

    def _resolve_numeric(self, name: str, schema: Schema, context: ResolutionContext) -> None:
        field = self._field_data(NumberField(), name, schema, context)
        field.min = schema.minimum
        field.max = schema.maximum
        field.min_exclusive = schema.exclusive_minimum
        field.max_exclusive = schema.exclusive_maximum
        field.multiple_of = schema.multiple_of
        field.enum = schema.enum
        if schema.has_default:
            field.default = schema.default

        if self._effective_type(schema) == "integer":
            field.type = schema.format or "int64"
        elif schema.maximum is not None and schema.maximum <= MAX_FLOAT32:
            field.type = "float32"
        else:
            field.type = "float64"
        self._store(name, field, context)

    def _resolve_array(self, name: str, schema: Schema, context: ResolutionContext) -> None:
        """Arrays have no field of their own: the element is resolved under the same name."""
        if schema.items is None:
            self._resolve_unknown(name, schema, context.derive(is_array=True), f"Array field '{name}' declares no items")
            return

        array_context = context.derive(is_array=True, array_xml=schema.xml)
        self.resolve(name, schema.items, array_context)

    def _resolve_object(self, name: str, schema: Schema, context: ResolutionContext) -> None:
        key = (context.doc_path, id(schema))
        resolving = context.resolving
        if not resolving or resolving[-1][0] != key:
            if context.is_resolving(key):
                cycle = context.cycle_from(key, name)
                raise CyclicSchemaError(
                    f"Schema cycle detected: {' -> '.join(cycle)}",
                    cycle=cycle,
                    schema_name=context.schema_name,
                    doc_path=context.doc_path,
                )
            resolving = resolving + ((key, name),)

        members: dict[str, Field] = {}
        members_context = context.derive(
            scope=members,
            is_array=False,
            required_fields=frozenset(schema.required),
            array_xml=None,
            resolving=resolving,
        )

        for entry in schema.one_of:
            self.resolve(name, entry, members_context)

        for entry in schema.all_of:
            self.resolve(name, entry, members_context)

        for prop_name, prop_schema in schema.properties.items():
            self.resolve(prop_name, prop_schema, members_context)

        field = self._field_data(ObjectField(), name, schema, context)
        field.type = "struct"
        field.members = members
        field.min_properties = schema.min_properties
        field.max_properties = schema.max_properties

        if isinstance(schema.additional_properties, Schema):
            extra: dict[str, Field] = {}
            self.resolve(
                name,
                schema.additional_properties,
                members_context.derive(scope=extra, required_fields=frozenset()),
            )
            field.additional_properties = list(extra.values())
            field.allows_additional_properties = True
        else:
            field.allows_additional_properties = schema.additional_properties

        self._store(name, field, context)


def _object_view(field: Field) -> ObjectField | None:
    """The object a field stands for: itself, or the object its reference resolved to."""
    if isinstance(field, ObjectField):
        return field
    if isinstance(field, RefField) and isinstance(field.target_field, ObjectField):
        return field.target_field
    return None
