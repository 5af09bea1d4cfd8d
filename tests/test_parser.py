"""Tests for schema loading."""

import json

import pytest
from graphql import build_schema, introspection_from_schema

from gql_querygen.core.errors import SchemaIntegrityError
from gql_querygen.core.ir import TypeKind
from gql_querygen.core.parser import SchemaParser


@pytest.fixture
def introspection(library_sdl):
    return introspection_from_schema(build_schema(library_sdl))


class TestFromIntrospection:
    """Tests for SchemaParser.from_introspection."""

    def test_root_types(self, introspection):
        schema = SchemaParser().from_introspection(introspection)
        assert schema.query_type == "Query"
        assert schema.mutation_type == "Mutation"
        assert schema.subscription_type is None
        assert schema.root_types == [("query", "Query"), ("mutation", "Mutation")]

    def test_accepts_data_envelope(self, introspection):
        schema = SchemaParser().from_introspection({"data": introspection})
        assert schema.get_type("User") is not None

    def test_type_kinds(self, introspection):
        schema = SchemaParser().from_introspection(introspection)
        assert schema.get_type("Node").kind is TypeKind.INTERFACE
        assert schema.get_type("SearchResult").kind is TypeKind.UNION
        assert schema.get_type("Status").kind is TypeKind.ENUM
        assert schema.get_type("UserFilter").kind is TypeKind.INPUT_OBJECT
        assert schema.get_type("DateTime").kind is TypeKind.SCALAR

    def test_fields_and_arguments(self, introspection):
        schema = SchemaParser().from_introspection(introspection)
        friends = schema.get_type("User").get_field("friends")
        assert [arg.name for arg in friends.arguments] == ["first", "after"]
        assert friends.type.kind is TypeKind.NON_NULL
        assert friends.type.named_type.name == "User"

    def test_default_values_and_required_arguments(self, introspection):
        schema = SchemaParser().from_introspection(introspection)
        users = schema.get_type("Query").get_field("users")
        limit = users.arguments[1]
        assert limit.default_value == "10"
        assert not limit.is_required
        node = schema.get_type("Query").get_field("node")
        assert node.requires_arguments

    def test_deprecation(self, introspection):
        schema = SchemaParser().from_introspection(introspection)
        legacy = schema.get_type("User").get_field("legacyName")
        assert legacy.is_deprecated
        assert legacy.deprecation_reason == "Use name"

    def test_interfaces_and_possible_types(self, introspection):
        schema = SchemaParser().from_introspection(introspection)
        assert schema.get_type("User").interfaces == ["Node", "Named"]
        assert set(schema.get_type("SearchResult").possible_types) == {"User", "Post"}

    def test_enum_values(self, introspection):
        schema = SchemaParser().from_introspection(introspection)
        values = [v.name for v in schema.get_type("Status").enum_values]
        assert values == ["ACTIVE", "INACTIVE", "UNKNOWN"]

    def test_introspection_types_are_not_named_types(self, introspection):
        schema = SchemaParser().from_introspection(introspection)
        assert "__Schema" in schema.types
        assert all(not t.name.startswith("__") for t in schema.named_types())

    def test_directives(self, introspection):
        schema = SchemaParser().from_introspection(introspection)
        assert "deprecated" in {d.name for d in schema.directives}

    def test_missing_schema_raises(self):
        with pytest.raises(SchemaIntegrityError, match="__schema"):
            SchemaParser().from_introspection({"data": {}})

    def test_malformed_type_raises(self):
        with pytest.raises(SchemaIntegrityError):
            SchemaParser().from_introspection({"__schema": {"types": [{"kind": "BOGUS", "name": "X"}]}})


class TestFromFiles:
    """Tests for loading schemas from disk."""

    def test_json_file(self, tmp_path, introspection):
        path = tmp_path / "schema.json"
        path.write_text(json.dumps({"data": introspection}))
        schema = SchemaParser().from_path(str(path))
        assert schema.get_type("Post") is not None

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "schema.json"
        path.write_text("{not json")
        with pytest.raises(SchemaIntegrityError):
            SchemaParser().from_path(str(path))

    def test_sdl_directory(self, tmp_path):
        (tmp_path / "query.graphqls").write_text("type Query { item: Item }")
        (tmp_path / "nested").mkdir()
        (tmp_path / "nested" / "item.graphql").write_text("type Item { id: ID! }")
        (tmp_path / "notes.txt").write_text("ignored")
        schema = SchemaParser().from_path(str(tmp_path))
        assert schema.get_type("Item").get_field("id") is not None

    def test_empty_directory_raises(self, tmp_path):
        with pytest.raises(SchemaIntegrityError, match="No schema files"):
            SchemaParser().from_path(str(tmp_path))

    def test_invalid_sdl_raises(self):
        with pytest.raises(SchemaIntegrityError, match="Invalid schema definition"):
            SchemaParser().from_sdl("type Query { broken: Missing }")
