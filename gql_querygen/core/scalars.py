"""Scalar type mapping for GraphQL code generation.

Decides which Python type a GraphQL scalar leaf receives in generated code.
Built-in scalars follow the mapping options of the configuration; custom
scalars go through the registered handlers and fall back to ``str``.

Example usage:
    from gql_querygen.core.scalars import ScalarFieldTypeDescription

    def money_mapping(base_type, resolved, name):
        if resolved.name == "Money":
            return ScalarFieldTypeDescription(
                "Decimal", import_statement="from decimal import Decimal"
            )
        return config.default_scalar_field_type_mapping(base_type, resolved, name)

    config = GeneratorConfiguration(scalar_field_type_mapping=money_mapping)
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .errors import ConfigurationError

if TYPE_CHECKING:
    from .config import GeneratorConfiguration
    from .ir import SchemaType
    from .types import ResolvedType


class IntegerTypeMapping(Enum):
    INT = "int"
    CUSTOM = "custom"


class FloatTypeMapping(Enum):
    FLOAT = "float"
    DECIMAL = "decimal"
    CUSTOM = "custom"


class BooleanTypeMapping(Enum):
    BOOL = "bool"
    CUSTOM = "custom"


class IdTypeMapping(Enum):
    STR = "str"
    UUID = "uuid"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ScalarFieldTypeDescription:
    """Python representation chosen for a scalar field or argument.

    Attributes:
        type_name: Python type expression used in annotations.
        format_mask: ``strftime`` pattern applied when a temporal value of
            this field is rendered as a literal.
        import_statement: import the generated module needs for the type.
    """
    type_name: str
    format_mask: str | None = None
    import_statement: str | None = None


@runtime_checkable
class ScalarHandler(Protocol):
    """Protocol for custom scalar handlers.

    Attributes:
        python_type: The Python type name (e.g., "datetime", "Decimal")
        import_statement: The import needed for this type
    """

    python_type: str
    import_statement: str


class DateTimeHandler:
    """Handler for DateTime scalars using ISO 8601 format."""

    python_type = "datetime"
    import_statement = "from datetime import datetime"


class DateHandler:
    """Handler for Date scalars using ISO 8601 date format."""

    python_type = "date"
    import_statement = "from datetime import date"


class UUIDHandler:
    python_type = "UUID"
    import_statement = "from uuid import UUID"


class JSONHandler:
    """Handler for JSON scalars; values pass through untyped."""

    python_type = "Any"
    import_statement = "from typing import Any"


class ScalarRegistry:
    """Registry for custom scalar handlers.

    Manages the mapping between GraphQL scalar names and their handlers.

    Example:
        registry = ScalarRegistry()
        registry.register("Money", MoneyHandler())
    """

    def __init__(self):
        self._handlers: dict[str, ScalarHandler] = {}
        self._register_defaults()

    def _register_defaults(self):
        self.register("DateTime", DateTimeHandler())
        self.register("Date", DateHandler())
        self.register("UUID", UUIDHandler())
        self.register("JSON", JSONHandler())
        self.register("JSONObject", JSONHandler())

    def register(self, scalar_name: str, handler: ScalarHandler):
        """Register a handler for a scalar type."""
        self._handlers[scalar_name] = handler

    def get(self, scalar_name: str) -> ScalarHandler | None:
        """Get the handler for a scalar type, or None if not registered."""
        return self._handlers.get(scalar_name)


STRING_TYPE = ScalarFieldTypeDescription("str")


def _custom_option_error(scalar_name: str) -> ConfigurationError:
    return ConfigurationError(
        f"{scalar_name} is mapped as CUSTOM; scalar_field_type_mapping must handle it"
    )


def default_scalar_field_type_mapping(
    config: "GeneratorConfiguration",
    base_type: "SchemaType",
    resolved: "ResolvedType",
    value_name: str,
) -> ScalarFieldTypeDescription:
    """Map a scalar leaf to its default Python representation.

    Args:
        config: Generator configuration holding the mapping options
        base_type: Type declaring the field, argument or input field
        resolved: Resolved type of the field or argument
        value_name: GraphQL name of the field or argument

    Raises:
        ConfigurationError: if the scalar's option is CUSTOM.
    """
    name = resolved.name
    if name == "Int":
        if config.integer_type_mapping is IntegerTypeMapping.CUSTOM:
            raise _custom_option_error(name)
        return ScalarFieldTypeDescription("int")
    if name == "Float":
        if config.float_type_mapping is FloatTypeMapping.CUSTOM:
            raise _custom_option_error(name)
        if config.float_type_mapping is FloatTypeMapping.DECIMAL:
            return ScalarFieldTypeDescription("Decimal", import_statement="from decimal import Decimal")
        return ScalarFieldTypeDescription("float")
    if name == "Boolean":
        if config.boolean_type_mapping is BooleanTypeMapping.CUSTOM:
            raise _custom_option_error(name)
        return ScalarFieldTypeDescription("bool")
    if name == "ID":
        if config.id_type_mapping is IdTypeMapping.CUSTOM:
            raise _custom_option_error(name)
        if config.id_type_mapping is IdTypeMapping.UUID:
            return ScalarFieldTypeDescription("UUID", import_statement=UUIDHandler.import_statement)
        return STRING_TYPE
    if name == "String":
        return STRING_TYPE

    handler = config.scalar_registry.get(name)
    if handler is not None:
        return ScalarFieldTypeDescription(handler.python_type, import_statement=handler.import_statement)
    return STRING_TYPE
