import json
from pathlib import Path

import pytest

from schema_to_fields.pipeline import (
    CompositionConflictError,
    CyclicSchemaError,
    MergePolicy,
    ResolverConfig,
    SchemaGen,
    UnknownSchemaTypeError,
    UnknownTypePolicy,
)
from schema_to_fields.pipeline.analyzer import (
    JSON_CONTENT_TYPE,
    XML_CONTENT_TYPE,
    FieldKind,
    ObjectField,
    RefField,
    StringField,
)
from schema_to_fields.pipeline.schema_ast import SchemaParser

DOC_PATH = "specs/test.yaml"
SECTION = "/components/schemas"


def load_test_data():
    """Load test cases from JSON file"""
    test_data_path = Path(__file__).parent / "test_data" / "field_resolution_tests.json"
    with open(test_data_path) as f:
        return json.load(f)


def generate(schemas: dict, config: ResolverConfig | None = None):
    """Register raw schemas in one in-memory document and generate them."""
    registry = SchemaGen(config)
    parser = SchemaParser()
    for name, raw in schemas.items():
        registry.add(name, DOC_PATH, SECTION, parser.parse(raw, f"{SECTION}/{name}"))
    return registry.generate()


def resolve_one(raw: dict, name: str = "value", config: ResolverConfig | None = None):
    result = generate({name: raw}, config)
    assert result.ok, [str(f.error) for f in result.failures]
    return result.schemas[name].fields[name]


@pytest.mark.parametrize("test_case", load_test_data(), ids=lambda tc: tc["name"])
def test_field_resolution(test_case):
    """Each schema resolves to a field with the expected attributes"""
    field = resolve_one(test_case["schema"])
    data = field.to_dict()
    for key, expected in test_case["expected"].items():
        assert data[key] == expected, f"{key}: expected {expected!r}, got {data[key]!r}"


class TestObjects:
    def test_required_propagation(self):
        field = resolve_one(
            {
                "type": "object",
                "required": ["a"],
                "properties": {"a": {"type": "string"}, "b": {"type": "string"}},
            },
            name="Thing",
        )
        assert isinstance(field, ObjectField)
        assert field.members["a"].required is True
        assert field.members["b"].required is False
        assert field.members["a"].is_required()

    def test_top_level_schema_is_not_required(self):
        field = resolve_one({"type": "object", "properties": {}}, name="Thing")
        assert field.required is False

    def test_members_keep_declaration_order(self):
        properties = {name: {"type": "string"} for name in ["zeta", "alpha", "mid", "beta"]}
        field = resolve_one({"type": "object", "properties": properties}, name="Thing")
        assert list(field.members) == ["zeta", "alpha", "mid", "beta"]

    def test_array_flattening_property(self):
        field = resolve_one(
            {"type": "object", "properties": {"tags": {"type": "array", "items": {"type": "string"}}}},
            name="Thing",
        )
        tags = field.members["tags"]
        assert isinstance(tags, StringField)
        assert tags.name == "Tags"
        assert tags.type == "string"
        assert tags.is_array is True
        assert list(field.members) == ["tags"]

    def test_members_of_array_element_are_not_arrays(self):
        field = resolve_one(
            {"type": "array", "items": {"type": "object", "properties": {"x": {"type": "integer"}}}},
        )
        assert field.kind == FieldKind.OBJECT
        assert field.is_array is True
        assert field.members["x"].is_array is False

    def test_nested_object_required_is_scoped(self):
        field = resolve_one(
            {
                "type": "object",
                "required": ["inner", "x"],
                "properties": {
                    "inner": {"type": "object", "properties": {"x": {"type": "string"}}},
                },
            },
            name="Outer",
        )
        inner = field.members["inner"]
        assert inner.required is True
        assert inner.members["x"].required is False

    def test_additional_properties_schema(self):
        field = resolve_one(
            {"type": "object", "additionalProperties": {"type": "integer", "format": "int32"}},
            name="Counts",
        )
        assert field.allows_additional_properties is True
        assert [f.type for f in field.additional_properties] == ["int32"]

    def test_paths_point_at_source_nodes(self):
        field = resolve_one(
            {"type": "object", "properties": {"a": {"type": "string"}}},
            name="Thing",
        )
        assert field.path == f"{DOC_PATH}#{SECTION}/Thing"
        assert field.members["a"].path == f"{DOC_PATH}#{SECTION}/Thing/properties/a"


class TestComposition:
    SCHEMA = {
        "type": "object",
        "allOf": [
            {"type": "object", "properties": {"id": {"type": "integer"}}},
            {"type": "object", "properties": {"name": {"type": "string"}}},
        ],
        "properties": {"extra": {"type": "boolean"}},
    }

    def test_last_wins_by_default(self):
        field = resolve_one(self.SCHEMA, name="Thing")
        composed = field.members["Thing"]
        assert list(composed.members) == ["name"]
        assert field.members["extra"].type == "bool"

    def test_merge_policy_unions_members(self):
        config = ResolverConfig(all_of_merge_policy=MergePolicy.MERGE)
        field = resolve_one(self.SCHEMA, name="Thing", config=config)
        composed = field.members["Thing"]
        assert list(composed.members) == ["id", "name"]
        assert composed.type == "struct"

    def test_merge_policy_rejects_conflicting_members(self):
        schema = {
            "type": "object",
            "allOf": [
                {"type": "object", "properties": {"id": {"type": "integer"}}},
                {"type": "object", "properties": {"id": {"type": "string"}}},
            ],
        }
        config = ResolverConfig(all_of_merge_policy=MergePolicy.MERGE)
        result = generate({"Thing": schema}, config)
        assert not result.ok
        assert isinstance(result.failures[0].error, CompositionConflictError)

    def test_merge_policy_expands_references(self):
        schemas = {
            "Base": {"type": "object", "properties": {"id": {"type": "integer"}}},
            "Pet": {
                "type": "object",
                "allOf": [
                    {"$ref": "#/components/schemas/Base"},
                    {"type": "object", "properties": {"name": {"type": "string"}}},
                ],
            },
        }
        config = ResolverConfig(all_of_merge_policy=MergePolicy.MERGE)
        result = generate(schemas, config)
        assert result.ok
        composed = result.schemas["Pet"].fields["Pet"].members["Pet"]
        assert list(composed.members) == ["id", "name"]

    def test_error_policy_rejects_overwrites(self):
        config = ResolverConfig(all_of_merge_policy=MergePolicy.ERROR)
        result = generate({"Thing": self.SCHEMA}, config)
        assert not result.ok
        error = result.failures[0].error
        assert isinstance(error, CompositionConflictError)
        assert error.schema_name == "Thing"

    def test_one_of_entries_resolve_under_outer_name(self):
        field = resolve_one(
            {"type": "object", "oneOf": [{"type": "string"}]},
            name="Choice",
        )
        assert isinstance(field.members["Choice"], StringField)


class TestUnknownTypes:
    def test_unknown_type_raises_by_default(self):
        result = generate({"Thing": {"type": "object", "properties": {"x": {"description": "untyped"}}}})
        assert not result.ok
        error = result.failures[0].error
        assert isinstance(error, UnknownSchemaTypeError)
        assert "x" in str(error)

    def test_unknown_policy_emits_unknown_field(self):
        config = ResolverConfig(unknown_type_policy=UnknownTypePolicy.UNKNOWN)
        field = resolve_one({"type": "object", "properties": {"x": {}}}, name="Thing", config=config)
        assert field.members["x"].kind == FieldKind.UNKNOWN
        assert field.members["x"].type == "unknown"

    def test_skip_policy_drops_field(self):
        config = ResolverConfig(unknown_type_policy=UnknownTypePolicy.SKIP)
        field = resolve_one({"type": "object", "properties": {"x": {"type": "null"}}}, name="Thing", config=config)
        assert field.members == {}

    def test_array_without_items(self):
        result = generate({"Thing": {"type": "array"}})
        assert isinstance(result.failures[0].error, UnknownSchemaTypeError)

    def test_missing_types_can_be_inferred(self):
        config = ResolverConfig(infer_missing_types=True)
        field = resolve_one(
            {"properties": {"tags": {"items": {"type": "string"}}}},
            name="Thing",
            config=config,
        )
        assert field.type == "struct"
        assert field.members["tags"].is_array is True


class TestXmlNaming:
    def test_prefixed_name_and_namespace(self):
        result = generate(
            {
                "Doc": {
                    "type": "object",
                    "properties": {
                        "tag": {
                            "type": "string",
                            "xml": {"name": "Tag", "prefix": "ns", "namespace": "urn:x"},
                        }
                    },
                }
            }
        )
        info = result.schemas["Doc"]
        tag = info.fields["Doc"].members["tag"]
        assert tag.target_names[XML_CONTENT_TYPE] == "ns:Tag"
        assert tag.target_names[JSON_CONTENT_TYPE] == "tag"
        assert info.xml_prefixes == {"ns": "urn:x"}
        assert result.xml_prefixes_by_schema() == {"Doc": {"ns": "urn:x"}}

    def test_no_xml_entry_without_annotation(self):
        field = resolve_one({"type": "string"})
        assert field.target_names == {JSON_CONTENT_TYPE: "value"}
        assert field.target_name(XML_CONTENT_TYPE) is None

    def test_prefixes_are_scoped_per_schema(self):
        result = generate(
            {
                "First": {"type": "string", "xml": {"prefix": "a", "namespace": "urn:a"}},
                "Second": {"type": "string"},
            }
        )
        assert result.schemas["First"].xml_prefixes == {"a": "urn:a"}
        assert result.schemas["Second"].xml_prefixes == {}

    def test_failed_schema_reports_no_prefixes(self):
        result = generate(
            {
                "Bad": {
                    "type": "object",
                    "properties": {
                        "tag": {"type": "string", "xml": {"prefix": "b", "namespace": "urn:b"}},
                        "broken": {"type": "widget"},
                    },
                },
                "Good": {"type": "string", "xml": {"prefix": "g", "namespace": "urn:g"}},
            }
        )
        assert [f.schema_name for f in result.failures] == ["Bad"]
        assert result.xml_prefixes_by_schema() == {"Good": {"g": "urn:g"}}

    def test_attribute_flag(self):
        field = resolve_one({"type": "integer", "xml": {"attribute": True}}, name="id")
        assert field.xml_attribute is True
        assert field.target_names[XML_CONTENT_TYPE] == "id"

    def test_wrapped_array(self):
        field = resolve_one(
            {"type": "array", "xml": {"name": "Items", "wrapped": True}, "items": {"type": "string"}},
            name="item",
        )
        assert field.xml_wrapped is True
        assert field.xml_wrapper_name == "Items"
        assert field.target_names[XML_CONTENT_TYPE] == "item"


class TestLocalReferences:
    def test_reference_links_registered_schema(self):
        result = generate(
            {
                "Pet": {"type": "object", "properties": {"category": {"$ref": "#/components/schemas/Category"}}},
                "Category": {"type": "object", "properties": {"label": {"type": "string"}}},
            }
        )
        assert result.ok
        category = result.schemas["Pet"].fields["Pet"].members["category"]
        assert isinstance(category, RefField)
        assert category.type == "ref"
        assert category.reference == "#/components/schemas/Category"
        assert category.target == "Category"
        assert category.resolved is True
        assert list(category.target_field.members) == ["label"]

    def test_target_fields_are_not_shared(self):
        result = generate(
            {
                "Pet": {"type": "object", "properties": {"category": {"$ref": "#/components/schemas/Category"}}},
                "Category": {"type": "object", "properties": {"label": {"type": "string"}}},
            }
        )
        category = result.schemas["Pet"].fields["Pet"].members["category"]
        assert category.target_field is not result.schemas["Category"].fields["Category"]

    def test_unknown_fragment_stays_unresolved(self):
        field = resolve_one({"$ref": "#/components/schemas/Nowhere"})
        assert isinstance(field, RefField)
        assert field.resolved is False
        assert field.target is None

    def test_reference_cycle_raises(self):
        result = generate(
            {
                "A": {"type": "object", "properties": {"b": {"$ref": "#/components/schemas/B"}}},
                "B": {"type": "object", "properties": {"a": {"$ref": "#/components/schemas/A"}}},
            }
        )
        assert len(result.failures) == 2
        errors = {f.schema_name: f.error for f in result.failures}
        assert isinstance(errors["A"], CyclicSchemaError)
        assert errors["A"].cycle == ["A", "B", "A"]
        assert "A -> B -> A" in str(errors["A"])

    def test_self_reference_through_array(self):
        result = generate(
            {
                "Node": {
                    "type": "object",
                    "properties": {"children": {"type": "array", "items": {"$ref": "#/components/schemas/Node"}}},
                }
            }
        )
        assert isinstance(result.failures[0].error, CyclicSchemaError)

    def test_alias_cycle_terminates(self):
        result = generate(
            {
                "A": {"$ref": "#/components/schemas/B"},
                "B": {"$ref": "#/components/schemas/A"},
            }
        )
        assert all(isinstance(f.error, CyclicSchemaError) for f in result.failures)
        assert len(result.failures) == 2

    def test_recursive_references_can_be_allowed(self):
        config = ResolverConfig(allow_recursive_references=True)
        result = generate(
            {
                "Node": {
                    "type": "object",
                    "properties": {"children": {"type": "array", "items": {"$ref": "#/components/schemas/Node"}}},
                }
            },
            config,
        )
        assert result.ok
        children = result.schemas["Node"].fields["Node"].members["children"]
        assert children.is_array is True
        assert children.target == "Node"
        assert children.target_field is None

    def test_repeated_non_cyclic_reference_is_fine(self):
        result = generate(
            {
                "Line": {
                    "type": "object",
                    "properties": {
                        "start": {"$ref": "#/components/schemas/Point"},
                        "end": {"$ref": "#/components/schemas/Point"},
                    },
                },
                "Point": {"type": "object", "properties": {"x": {"type": "number"}}},
            }
        )
        assert result.ok
        members = result.schemas["Line"].fields["Line"].members
        assert members["start"].resolved and members["end"].resolved


class TestDeterminism:
    SCHEMAS = {
        "Pet": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "xml": {"prefix": "p", "namespace": "urn:p"}},
                "tags": {"type": "array", "items": {"type": "string"}},
                "category": {"$ref": "#/components/schemas/Category"},
            },
        },
        "Category": {"type": "object", "properties": {"id": {"type": "integer", "format": "int32"}}},
    }

    def test_same_input_same_output(self):
        first = generate(self.SCHEMAS).to_dict()
        second = generate(self.SCHEMAS).to_dict()
        assert first == second

    def test_registration_order_does_not_change_fields(self):
        forward = generate(self.SCHEMAS)
        backward = generate(dict(reversed(list(self.SCHEMAS.items()))))
        for name in self.SCHEMAS:
            assert forward.schemas[name].fields[name].to_dict() == backward.schemas[name].fields[name].to_dict()


if __name__ == "__main__":
    pytest.main([__file__])
