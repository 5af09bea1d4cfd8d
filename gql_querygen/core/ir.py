"""In-memory model of an introspected GraphQL schema.

This module defines dataclasses that mirror the standard introspection
result shape: named types with their fields, arguments, enum values and
possible types, plus the wrapping type references used on fields.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TypeKind(Enum):
    """Kinds reported by the ``__Type.kind`` introspection field."""
    SCALAR = "SCALAR"
    OBJECT = "OBJECT"
    INTERFACE = "INTERFACE"
    UNION = "UNION"
    ENUM = "ENUM"
    INPUT_OBJECT = "INPUT_OBJECT"
    LIST = "LIST"
    NON_NULL = "NON_NULL"

    @property
    def is_wrapper(self) -> bool:
        return self in (TypeKind.LIST, TypeKind.NON_NULL)

    @property
    def is_composite(self) -> bool:
        """True for kinds that need a selection set."""
        return self in (TypeKind.OBJECT, TypeKind.INTERFACE, TypeKind.UNION)


@dataclass(frozen=True)
class TypeRef:
    """Reference to a type from a field, argument or input field.

    Named references carry ``name``; LIST and NON_NULL wrappers carry the
    wrapped reference in ``of_type``.
    """
    kind: TypeKind
    name: str | None = None
    of_type: "TypeRef | None" = None

    @classmethod
    def named(cls, kind: TypeKind, name: str) -> "TypeRef":
        return cls(kind=kind, name=name)

    @classmethod
    def list_of(cls, of_type: "TypeRef") -> "TypeRef":
        return cls(kind=TypeKind.LIST, of_type=of_type)

    @classmethod
    def non_null(cls, of_type: "TypeRef") -> "TypeRef":
        return cls(kind=TypeKind.NON_NULL, of_type=of_type)

    @property
    def named_type(self) -> "TypeRef":
        """The innermost named reference."""
        ref = self
        while ref.of_type is not None:
            ref = ref.of_type
        return ref


@dataclass
class SchemaArgument:
    """An argument of a field or directive, or a field of an input object."""
    name: str
    type: TypeRef
    default_value: str | None = None
    description: str | None = None
    is_deprecated: bool = False
    deprecation_reason: str | None = None

    @property
    def is_required(self) -> bool:
        """Non-null without a default, so a value must always be supplied."""
        return self.type.kind is TypeKind.NON_NULL and self.default_value is None


@dataclass
class SchemaField:
    """A field of an object or interface type."""
    name: str
    type: TypeRef
    arguments: list[SchemaArgument] = field(default_factory=list)
    description: str | None = None
    is_deprecated: bool = False
    deprecation_reason: str | None = None

    @property
    def requires_arguments(self) -> bool:
        return any(arg.is_required for arg in self.arguments)


@dataclass
class SchemaEnumValue:
    """A single value of an enum type."""
    name: str
    description: str | None = None
    is_deprecated: bool = False
    deprecation_reason: str | None = None


@dataclass
class SchemaType:
    """A named type of the schema."""
    name: str
    kind: TypeKind
    description: str | None = None
    fields: list[SchemaField] = field(default_factory=list)
    input_fields: list[SchemaArgument] = field(default_factory=list)
    interfaces: list[str] = field(default_factory=list)
    possible_types: list[str] = field(default_factory=list)
    enum_values: list[SchemaEnumValue] = field(default_factory=list)

    @property
    def is_introspection_type(self) -> bool:
        return self.name.startswith("__")

    def get_field(self, name: str) -> SchemaField | None:
        for schema_field in self.fields:
            if schema_field.name == name:
                return schema_field
        return None


@dataclass
class SchemaDirective:
    """A directive declared by the schema."""
    name: str
    locations: list[str] = field(default_factory=list)
    arguments: list[SchemaArgument] = field(default_factory=list)
    description: str | None = None
    is_repeatable: bool = False


@dataclass
class Schema:
    """Complete model of an introspected schema.

    ``types`` keeps the order in which the introspection result lists the
    types; generated output follows that order.
    """
    types: dict[str, SchemaType] = field(default_factory=dict)
    query_type: str | None = None
    mutation_type: str | None = None
    subscription_type: str | None = None
    directives: list[SchemaDirective] = field(default_factory=list)
    description: str | None = None

    def get_type(self, name: str) -> SchemaType | None:
        return self.types.get(name)

    def named_types(self, *kinds: TypeKind) -> list[SchemaType]:
        """Non-introspection types, optionally restricted to ``kinds``."""
        return [
            schema_type
            for schema_type in self.types.values()
            if not schema_type.is_introspection_type
            and (not kinds or schema_type.kind in kinds)
        ]

    @property
    def root_types(self) -> list[tuple[str, str]]:
        """(operation type, type name) for each declared root."""
        roots = [
            ("query", self.query_type),
            ("mutation", self.mutation_type),
            ("subscription", self.subscription_type),
        ]
        return [(operation, name) for operation, name in roots if name]

    def operation_type_of(self, type_name: str) -> str | None:
        for operation, name in self.root_types:
            if name == type_name:
                return operation
        return None

    def stats(self) -> dict[str, Any]:
        """Type counts per kind, used for logging."""
        counts: dict[str, Any] = {}
        for schema_type in self.named_types():
            key = schema_type.kind.value.lower()
            counts[key] = counts.get(key, 0) + 1
        return counts
