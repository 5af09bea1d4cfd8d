"""Exceptions raised during code generation and query rendering."""


class GeneratorError(Exception):
    """Base class for errors that abort a generation run."""


class SchemaIntegrityError(GeneratorError):
    """The schema references a type it does not define, or is malformed."""


class ConfigurationError(GeneratorError):
    """The generator configuration cannot be used as given."""


class NameCollisionError(ConfigurationError):
    """No unique identifier could be assigned to a schema type.

    Resolve it with an explicit entry in ``custom_class_name_mapping``.
    """


class QueryBuilderError(ValueError):
    """A query builder cannot be rendered or was given invalid input."""


class UnsupportedValueError(QueryBuilderError, TypeError):
    """A bound value has no GraphQL literal representation."""

    def __init__(self, value):
        self.value = value
        super().__init__(
            f"Cannot render value of type {type(value).__name__!r} as a GraphQL literal"
        )
