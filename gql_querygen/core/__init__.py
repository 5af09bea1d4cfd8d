"""Core modules for GraphQL query builder generation."""

from .builder_generator import QueryBuilderGenerator
from .config import (
    GeneratorConfiguration,
    JsonPropertyGeneration,
    MemberVisibility,
    PropertyGeneration,
    TargetProfile,
)
from .errors import (
    ConfigurationError,
    GeneratorError,
    NameCollisionError,
    QueryBuilderError,
    SchemaIntegrityError,
    UnsupportedValueError,
)
from .generator import GraphQLGenerator
from .introspection import GraphQLError, IntrospectionClient
from .ir import (
    Schema,
    SchemaArgument,
    SchemaDirective,
    SchemaEnumValue,
    SchemaField,
    SchemaType,
    TypeKind,
    TypeRef,
)
from .models import GraphQLModel, GraphQLPolymorphicModel
from .naming import ClassNameResolver
from .parser import SchemaParser
from .query_builder import (
    ArgumentInfo,
    FieldMetadata,
    Formatting,
    GraphQLDirective,
    GraphQLInputObject,
    GraphQLQueryBuilder,
    GraphQLQueryParameter,
    IncludeDirective,
    InputProperty,
    QueryBuilderParameter,
    SkipDirective,
)
from .scalars import (
    BooleanTypeMapping,
    DateHandler,
    DateTimeHandler,
    FloatTypeMapping,
    IdTypeMapping,
    IntegerTypeMapping,
    JSONHandler,
    ScalarFieldTypeDescription,
    ScalarHandler,
    ScalarRegistry,
    UUIDHandler,
)
from .types import ResolvedType, resolve_type, wrap_type

__all__ = [
    # Configuration
    "GeneratorConfiguration",
    "JsonPropertyGeneration",
    "MemberVisibility",
    "PropertyGeneration",
    "TargetProfile",
    # Errors
    "ConfigurationError",
    "GeneratorError",
    "NameCollisionError",
    "QueryBuilderError",
    "SchemaIntegrityError",
    "UnsupportedValueError",
    # Scalars
    "BooleanTypeMapping",
    "FloatTypeMapping",
    "IdTypeMapping",
    "IntegerTypeMapping",
    "ScalarFieldTypeDescription",
    "ScalarHandler",
    "ScalarRegistry",
    "DateTimeHandler",
    "DateHandler",
    "UUIDHandler",
    "JSONHandler",
    # Schema model
    "Schema",
    "SchemaArgument",
    "SchemaDirective",
    "SchemaEnumValue",
    "SchemaField",
    "SchemaType",
    "TypeKind",
    "TypeRef",
    "ResolvedType",
    "resolve_type",
    "wrap_type",
    # Loading
    "SchemaParser",
    "GraphQLError",
    "IntrospectionClient",
    # Generation
    "ClassNameResolver",
    "GraphQLGenerator",
    "QueryBuilderGenerator",
    # Runtime
    "ArgumentInfo",
    "FieldMetadata",
    "Formatting",
    "GraphQLDirective",
    "GraphQLInputObject",
    "GraphQLModel",
    "GraphQLPolymorphicModel",
    "GraphQLQueryBuilder",
    "GraphQLQueryParameter",
    "IncludeDirective",
    "InputProperty",
    "QueryBuilderParameter",
    "SkipDirective",
]
