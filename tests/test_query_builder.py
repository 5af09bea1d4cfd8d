"""Tests for the runtime query builder and literal rendering."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

import pytest
from graphql import Lexer, Source, TokenKind, parse, parse_value, value_from_ast_untyped
from pydantic import BaseModel, Field

from gql_querygen.core.errors import QueryBuilderError, UnsupportedValueError
from gql_querygen.core.query_builder import (
    ArgumentInfo,
    FieldMetadata,
    Formatting,
    GraphQLInputObject,
    GraphQLQueryBuilder,
    GraphQLQueryParameter,
    IncludeDirective,
    InputProperty,
    QueryBuilderParameter,
    SkipDirective,
    build_value,
)


# =============================================================================
# Hand-written builders shaped like generated ones
# =============================================================================


class Color(str, Enum):
    RED = "RED"
    DARK_BLUE = "DARK_BLUE"


class ItemFilter(GraphQLInputObject):
    name = InputProperty("name")
    created_after = InputProperty("createdAfter", format_mask="%Y-%m-%d")
    limit = InputProperty("limit")


class ItemQueryBuilder(GraphQLQueryBuilder):
    _type_name = "Item"

    @classmethod
    def all_fields(cls):
        return (
            FieldMetadata("id"),
            FieldMetadata("name"),
            FieldMetadata("tags", requires_parameters=True),
        )

    def with_id(self, *, alias=None, include=None, skip=None):
        return self._with_scalar_field("id", alias, [include, skip])

    def with_name(self, *, alias=None, include=None, skip=None):
        return self._with_scalar_field("name", alias, [include, skip])


class WrapperQueryBuilder(GraphQLQueryBuilder):
    _type_name = "Wrapper"

    @classmethod
    def all_fields(cls):
        return (FieldMetadata("child", query_builder_type=ItemQueryBuilder),)


class RootQueryBuilder(GraphQLQueryBuilder):
    _type_name = "Query"
    _operation_type = "query"

    @classmethod
    def all_fields(cls):
        return (
            FieldMetadata("version"),
            FieldMetadata("item", query_builder_type=ItemQueryBuilder),
            FieldMetadata("search", query_builder_type=ItemQueryBuilder, requires_parameters=True),
            FieldMetadata("wrapper", query_builder_type=WrapperQueryBuilder),
        )

    def with_version(self, *, alias=None, include=None, skip=None):
        return self._with_scalar_field("version", alias, [include, skip])

    def except_version(self):
        return self._except_field("version")

    def with_item(self, builder, id=None, filter=None, *, alias=None, include=None, skip=None):
        args = []
        if id is not None:
            args.append(ArgumentInfo("id", id))
        if filter is not None:
            args.append(ArgumentInfo("filter", filter))
        return self._with_object_field("item", builder, alias, [include, skip], args)

    def with_item_fragment(self, builder):
        return self._with_fragment(builder)


class MutationQueryBuilder(GraphQLQueryBuilder):
    _type_name = "Mutation"
    _operation_type = "mutation"

    def with_reset(self):
        return self._with_scalar_field("reset")


# =============================================================================
# Literal rendering
# =============================================================================


class TestBuildValue:
    """Tests for build_value."""

    @pytest.mark.parametrize("value,expected", [
        (None, "null"),
        (True, "true"),
        (False, "false"),
        (42, "42"),
        (-7, "-7"),
        (1.5, "1.5"),
        (Decimal("1.10"), "1.10"),
        ("plain", '"plain"'),
        ('quote " and \\ and \n', '"quote \\" and \\\\ and \\n"'),
        ("żółw", '"żółw"'),
        (Color.DARK_BLUE, "DARK_BLUE"),
        (UUID("12345678-1234-5678-1234-567812345678"), '"12345678-1234-5678-1234-567812345678"'),
        (datetime(2024, 1, 15, 10, 30), '"2024-01-15T10:30:00"'),
        (date(2024, 1, 15), '"2024-01-15"'),
        ([1, 2, 3], "[1,2,3]"),
        ((Color.RED, None), "[RED,null]"),
        ({"a": 1, "b": "x"}, '{a:1,b:"x"}'),
    ])
    def test_compact_literals(self, value, expected):
        assert build_value(value) == expected

    def test_indented_collections(self):
        assert build_value([1, 2], Formatting.INDENTED) == "[1, 2]"
        assert build_value({"a": 1, "b": [True]}, Formatting.INDENTED) == "{a: 1, b: [true]}"

    def test_format_mask(self):
        assert build_value(datetime(2024, 1, 15, 10, 30), format_mask="%d.%m.%Y") == '"15.01.2024"'

    def test_format_mask_applies_to_list_items(self):
        value = [date(2024, 1, 1), date(2024, 2, 1)]
        assert build_value(value, format_mask="%m/%d") == '["01/01","02/01"]'

    def test_inline_parameter(self):
        assert build_value(QueryBuilderParameter(date(2024, 3, 5), format_mask="%Y%m%d")) == '"20240305"'

    def test_variable_parameter(self):
        assert build_value(GraphQLQueryParameter("when", "Date")) == "$when"

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), Decimal("NaN")])
    def test_non_finite_numbers_unsupported(self, value):
        with pytest.raises(UnsupportedValueError):
            build_value(value)

    def test_unknown_kind_unsupported(self):
        with pytest.raises(UnsupportedValueError) as exc_info:
            build_value(object())
        assert isinstance(exc_info.value, TypeError)
        assert isinstance(exc_info.value, QueryBuilderError)

    def test_pydantic_model_renders_set_fields(self):
        class Person(BaseModel):
            first_name: str = Field(alias="firstName")
            age: int | None = None

        assert build_value(Person(firstName="Ann")) == '{firstName:"Ann"}'


class TestInputObject:
    """Tests for GraphQLInputObject assigned/absent tracking."""

    def test_only_assigned_properties_render(self):
        assert build_value(ItemFilter(name="x")) == '{name:"x"}'

    def test_explicit_none_renders_null(self):
        item_filter = ItemFilter(name="x")
        item_filter.limit = None
        assert build_value(item_filter) == '{name:"x",limit:null}'

    def test_declaration_order(self):
        item_filter = ItemFilter(limit=3)
        item_filter.name = "y"
        assert build_value(item_filter) == '{name:"y",limit:3}'

    def test_property_format_mask(self):
        assert build_value(ItemFilter(created_after=date(2024, 1, 15))) == '{createdAfter:"2024-01-15"}'

    def test_delete_returns_to_absent(self):
        item_filter = ItemFilter(name="x", limit=1)
        del item_filter.limit
        assert not item_filter.is_set("limit")
        assert item_filter.limit is None
        assert build_value(item_filter) == '{name:"x"}'

    def test_unknown_field_raises(self):
        with pytest.raises(TypeError, match="no input field"):
            ItemFilter(color="red")

    def test_to_dict(self):
        item_filter = ItemFilter(name="x", created_after=date(2024, 1, 15))
        assert item_filter.to_dict() == {"name": "x", "createdAfter": "2024-01-15"}

    def test_equality(self):
        assert ItemFilter(name="x") == ItemFilter(name="x")
        assert ItemFilter(name="x") != ItemFilter(name="x", limit=None)


# =============================================================================
# Document rendering
# =============================================================================


class TestBuild:
    """Tests for GraphQLQueryBuilder.build."""

    def test_scalar_field(self):
        assert RootQueryBuilder().with_version().build() == "{version}"

    def test_nested_object_with_argument(self):
        builder = RootQueryBuilder().with_item(ItemQueryBuilder().with_id().with_name(), id=5)
        assert builder.build() == "{item(id:5){id,name}}"

    def test_indented_nested_object(self):
        builder = RootQueryBuilder().with_item(ItemQueryBuilder().with_id().with_name(), id=5)
        assert builder.build(Formatting.INDENTED) == " {\n  item(id: 5) {\n    id\n    name\n  }\n}"

    def test_indent_size(self):
        builder = RootQueryBuilder().with_version().with_item(ItemQueryBuilder().with_id())
        assert builder.build(Formatting.INDENTED, indent_size=4) == (
            " {\n    version\n    item {\n        id\n    }\n}"
        )

    def test_alias_and_directives(self):
        builder = RootQueryBuilder().with_version(alias="v", skip=SkipDirective(False))
        assert builder.build() == "{v:version@skip(if:false)}"

    def test_builder_alias_and_directives_apply_to_nested_field(self):
        nested = ItemQueryBuilder("first", include=IncludeDirective(True)).with_id()
        assert RootQueryBuilder().with_item(nested).build() == "{first:item@include(if:true){id}}"

    def test_same_field_twice_under_different_aliases(self):
        builder = (
            RootQueryBuilder()
            .with_item(ItemQueryBuilder().with_id(), id=1, alias="a")
            .with_item(ItemQueryBuilder().with_name(), id=2, alias="b")
        )
        assert builder.build() == "{a:item(id:1){id},b:item(id:2){name}}"

    def test_input_object_argument(self):
        builder = RootQueryBuilder().with_item(ItemQueryBuilder().with_id(), filter=ItemFilter(name="n"))
        assert builder.build() == '{item(filter:{name:"n"}){id}}'

    def test_fragment(self):
        builder = RootQueryBuilder().with_item_fragment(ItemQueryBuilder().with_id())
        assert builder.build() == "{...on Item{id}}"
        assert builder.build(Formatting.INDENTED) == " {\n  ...on Item {\n    id\n  }\n}"

    def test_except_field(self):
        builder = RootQueryBuilder().with_version().with_version(alias="again").except_version()
        assert builder.build() == "{}"

    def test_with_all_fields(self):
        assert RootQueryBuilder().with_all_fields().build() == "{version,item{id,name},wrapper{__typename}}"

    def test_with_all_scalar_fields(self):
        assert ItemQueryBuilder().with_all_scalar_fields().build() == "{id,name}"

    def test_with_type_name(self):
        assert ItemQueryBuilder().with_type_name().build() == "{__typename}"

    def test_operation_name(self):
        assert RootQueryBuilder().with_version().build(operation_name="GetVersion") == "query GetVersion{version}"

    def test_mutation_keyword(self):
        assert MutationQueryBuilder().with_reset().build() == "mutation{reset}"
        assert MutationQueryBuilder().with_reset().build(Formatting.INDENTED) == "mutation {\n  reset\n}"

    def test_build_does_not_mutate(self):
        builder = RootQueryBuilder().with_item(ItemQueryBuilder().with_id(), id=GraphQLQueryParameter("id", "Int"))
        assert builder.build() == builder.build()

    def test_clear_keeps_identity(self):
        builder = ItemQueryBuilder("alias").with_id()
        builder.with_parameter(GraphQLQueryParameter("unused", "Int"))
        builder.clear()
        assert builder.build() == "{}"
        assert builder.alias == "alias"
        assert builder.type_name == "Item"

    def test_invalid_alias_raises(self):
        with pytest.raises(QueryBuilderError):
            RootQueryBuilder().with_version(alias="not valid")

    def test_invalid_variable_name_raises(self):
        with pytest.raises(QueryBuilderError):
            GraphQLQueryParameter("1bad", "Int")

    def test_str_renders_compact(self):
        assert str(RootQueryBuilder().with_version()) == "{version}"


class TestVariables:
    """Tests for variable collection and the operation header."""

    def test_variable_reference(self):
        builder = RootQueryBuilder().with_item(ItemQueryBuilder().with_id(), id=GraphQLQueryParameter("itemId", "Int!"))
        assert builder.build() == "query($itemId:Int!){item(id:$itemId){id}}"

    def test_variable_with_value(self):
        parameter = GraphQLQueryParameter("itemId", "Int!", 5)
        builder = RootQueryBuilder().with_item(ItemQueryBuilder().with_id(), id=parameter)
        assert builder.build() == "query($itemId:Int!=5){item(id:$itemId){id}}"
        assert builder.build(Formatting.INDENTED) == (
            "query($itemId: Int! = 5) {\n  item(id: $itemId) {\n    id\n  }\n}"
        )
        assert builder.variables() == {"itemId": 5}

    def test_variable_declared_once(self):
        parameter = GraphQLQueryParameter("itemId", "Int")
        builder = (
            RootQueryBuilder()
            .with_item(ItemQueryBuilder().with_id(), id=parameter, alias="a")
            .with_item(ItemQueryBuilder().with_id(), id=parameter, alias="b")
        )
        assert builder.build() == "query($itemId:Int){a:item(id:$itemId){id},b:item(id:$itemId){id}}"

    def test_variable_in_directive(self):
        flag = GraphQLQueryParameter("withVersion", "Boolean!")
        builder = RootQueryBuilder().with_version(include=IncludeDirective(flag))
        assert builder.build() == "query($withVersion:Boolean!){version@include(if:$withVersion)}"

    def test_variable_inside_input_object(self):
        builder = RootQueryBuilder().with_item(
            ItemQueryBuilder().with_id(), filter=ItemFilter(name=GraphQLQueryParameter("n", "String"))
        )
        assert builder.build() == "query($n:String){item(filter:{name:$n}){id}}"

    def test_variable_in_nested_builder(self):
        nested = ItemQueryBuilder("deep", include=IncludeDirective(GraphQLQueryParameter("show", "Boolean!")))
        builder = RootQueryBuilder().with_item(nested.with_id())
        assert builder.build() == "query($show:Boolean!){deep:item@include(if:$show){id}}"

    def test_explicit_parameters_come_first(self):
        builder = (
            RootQueryBuilder()
            .with_item(ItemQueryBuilder().with_id(), id=GraphQLQueryParameter("itemId", "Int"))
            .with_parameter(GraphQLQueryParameter("extra", "String", "x"))
        )
        assert builder.build() == 'query($extra:String="x",$itemId:Int){item(id:$itemId){id}}'

    def test_conflicting_types_raise(self):
        builder = (
            RootQueryBuilder()
            .with_item(ItemQueryBuilder().with_id(), id=GraphQLQueryParameter("v", "Int"), alias="a")
            .with_item(ItemQueryBuilder().with_id(), id=GraphQLQueryParameter("v", "String"), alias="b")
        )
        with pytest.raises(QueryBuilderError, match=r"\$v"):
            builder.build()

    def test_variables_convert_values(self):
        parameter = GraphQLQueryParameter("filter", "ItemFilter", ItemFilter(created_after=date(2024, 1, 2)))
        builder = RootQueryBuilder().with_item(ItemQueryBuilder().with_id(), filter=parameter)
        assert builder.variables() == {"filter": {"createdAfter": "2024-01-02"}}


def graphql_tokens(text: str) -> list[tuple]:
    lexer = Lexer(Source(text))
    tokens = []
    token = lexer.advance()
    while token.kind is not TokenKind.EOF:
        tokens.append((token.kind, token.value))
        token = lexer.advance()
    return tokens


class TestRenderingProperties:
    """Properties that hold for any tree."""

    @pytest.fixture
    def tree(self):
        return (
            RootQueryBuilder()
            .with_version(alias="v", include=IncludeDirective(GraphQLQueryParameter("on", "Boolean!", True)))
            .with_item(ItemQueryBuilder().with_id().with_name(), id=3, filter=ItemFilter(name="a b", limit=None))
            .with_item_fragment(ItemQueryBuilder().with_type_name())
        )

    def test_compact_and_indented_share_tokens(self, tree):
        compact = tree.build()
        indented = tree.build(Formatting.INDENTED, indent_size=3)
        assert graphql_tokens(compact) == graphql_tokens(indented)

    def test_output_parses_as_graphql(self, tree):
        document = parse(tree.build())
        assert document.definitions[0].operation.value == "query"

    def test_rendering_is_pure(self, tree):
        assert tree.build(Formatting.INDENTED) == tree.build(Formatting.INDENTED)
        assert tree.build() == tree.build()

    @pytest.mark.parametrize("value,restore", [
        ("line\nbreak \"quoted\" \\ tab\t", str),
        ("żółw \u0001", str),
        (-12, int),
        (0.25, float),
        (True, bool),
        (Color.DARK_BLUE, Color),
        (UUID("12345678-1234-5678-1234-567812345678"), UUID),
        (date(2024, 2, 29), date.fromisoformat),
        (datetime(2024, 1, 15, 10, 30, 5), datetime.fromisoformat),
    ])
    def test_literal_round_trip(self, value, restore):
        parsed = value_from_ast_untyped(parse_value(build_value(value)))
        assert restore(parsed) == value

    def test_structured_literal_round_trip(self):
        value = {"name": "x", "tags": ["a", None], "nested": {"n": 1}}
        assert value_from_ast_untyped(parse_value(build_value(value))) == value
