"""Runtime query builder used by generated GraphQL clients.

Generated ``*QueryBuilder`` classes subclass :class:`GraphQLQueryBuilder`
and add one ``with_<field>`` method per schema field. The builder keeps an
ordered selection tree; :meth:`GraphQLQueryBuilder.build` renders it to
GraphQL request text without mutating it.

Example:
    builder = QueryQueryBuilder().with_test_field(value_int32=4)
    builder.build()                      # '{testField(valueInt32:4)}'

    builder = QueryQueryBuilder().with_test_field(
        value_int32=GraphQLQueryParameter("intParam", "Int")
    )
    builder.build()                      # 'query($intParam:Int){testField(valueInt32:$intParam)}'
"""

import json
import math
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar, Union
from uuid import UUID

from pydantic import BaseModel

from .errors import QueryBuilderError, UnsupportedValueError

T = TypeVar("T")

NAME_PATTERN = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")


class Formatting(Enum):
    """Output layout of :meth:`GraphQLQueryBuilder.build`."""
    NONE = "none"          # compact, no inert whitespace
    INDENTED = "indented"


class _Unset:
    """Marker for a value that was never supplied."""

    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET: Any = _Unset()


def _validate_name(name: str, what: str) -> str:
    if not isinstance(name, str) or not NAME_PATTERN.match(name):
        raise QueryBuilderError(f"Invalid GraphQL {what}: {name!r}")
    return name


class QueryBuilderParameter(Generic[T]):
    """A value bound inline to an argument, rendered as a literal."""

    def __init__(self, value: T, format_mask: str | None = None):
        self.value = value
        self.format_mask = format_mask

    @property
    def is_variable(self) -> bool:
        return False

    def __repr__(self):
        return f"{type(self).__name__}({self.value!r})"


class GraphQLQueryParameter(QueryBuilderParameter[T]):
    """A value bound to a named variable.

    Rendered as ``$name`` where it is used and declared once in the
    operation header as ``$name:Type``, followed by ``=value`` when a value
    was supplied.
    """

    def __init__(
        self,
        name: str,
        graphql_type_name: str,
        value: Any = UNSET,
        format_mask: str | None = None,
    ):
        super().__init__(value, format_mask)
        self.name = _validate_name(name, "variable name")
        self.graphql_type_name = graphql_type_name

    @property
    def is_variable(self) -> bool:
        return True

    @property
    def has_value(self) -> bool:
        return self.value is not UNSET

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r}, {self.graphql_type_name!r})"


# Generated signatures accept either a plain value or a bound parameter.
ParameterValue = Union[T, QueryBuilderParameter[T]]


@dataclass(frozen=True)
class InputPropertyInfo:
    """An assigned input-object property."""
    name: str
    value: Any
    format_mask: str | None = None


class InputProperty(Generic[T]):
    """Descriptor for one field of a generated input object.

    Assigning records the value, including ``None``, which renders as
    ``null``. A property that was never assigned, or was deleted, is absent
    and is left out of the rendered object.
    """

    def __init__(self, name: str, format_mask: str | None = None):
        self.name = name
        self.format_mask = format_mask
        self.attribute_name = name

    def __set_name__(self, owner, attribute_name):
        self.attribute_name = attribute_name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        info = instance._assigned.get(self.name)
        return None if info is None else info.value

    def __set__(self, instance, value):
        instance._assigned[self.name] = InputPropertyInfo(self.name, value, self.format_mask)

    def __delete__(self, instance):
        instance._assigned.pop(self.name, None)


class GraphQLInputObject:
    """Base class of generated input object types."""

    _input_properties: ClassVar[tuple[InputProperty, ...]] = ()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        properties: dict[str, InputProperty] = {}
        for klass in reversed(cls.__mro__):
            for attribute in vars(klass).values():
                if isinstance(attribute, InputProperty):
                    properties[attribute.name] = attribute
        cls._input_properties = tuple(properties.values())

    def __init__(self, **values: Any):
        self._assigned: dict[str, InputPropertyInfo] = {}
        attributes = {prop.attribute_name for prop in self._input_properties}
        for attribute_name, value in values.items():
            if attribute_name not in attributes:
                raise TypeError(f"{type(self).__name__} has no input field {attribute_name!r}")
            setattr(self, attribute_name, value)

    def get_property_values(self) -> Iterator[InputPropertyInfo]:
        """Assigned properties in declaration order."""
        for prop in self._input_properties:
            info = self._assigned.get(prop.name)
            if info is not None:
                yield info

    def is_set(self, attribute_name: str) -> bool:
        for prop in self._input_properties:
            if prop.attribute_name == attribute_name:
                return prop.name in self._assigned
        raise AttributeError(attribute_name)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping of the assigned properties, for request variables."""
        return {
            info.name: to_json_value(info.value, info.format_mask)
            for info in self.get_property_values()
        }

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return list(self.get_property_values()) == list(other.get_property_values())

    def __repr__(self):
        values = ", ".join(f"{info.name}={info.value!r}" for info in self.get_property_values())
        return f"{type(self).__name__}({values})"


def _format_temporal(value: date | time, format_mask: str | None) -> str:
    if format_mask:
        return value.strftime(format_mask)
    return value.isoformat()


def _enum_literal(value: Enum) -> str:
    return value.value if isinstance(value.value, str) else value.name


def to_json_value(value: Any, format_mask: str | None = None) -> Any:
    """Convert a bound value to its JSON form for the ``variables`` payload."""
    if isinstance(value, QueryBuilderParameter):
        inner = value.value
        return None if inner is UNSET else to_json_value(inner, value.format_mask or format_mask)
    if isinstance(value, GraphQLInputObject):
        return value.to_dict()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_unset=True)
    if isinstance(value, Enum):
        return _enum_literal(value)
    if isinstance(value, (datetime, date, time)):
        return _format_temporal(value, format_mask)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Mapping):
        return {str(key): to_json_value(item, format_mask) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(item, format_mask) for item in value]
    return value


def _separators(formatting: Formatting) -> tuple[str, str]:
    if formatting is Formatting.INDENTED:
        return ": ", ", "
    return ":", ","


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _build_number(value: int | float | Decimal) -> str:
    if isinstance(value, float):
        if not math.isfinite(value):
            raise UnsupportedValueError(value)
        return repr(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise UnsupportedValueError(value)
        return str(value)
    return str(value)


def _build_object(entries, formatting: Formatting) -> str:
    colon, comma = _separators(formatting)
    rendered = [
        f"{name}{colon}{build_value(value, formatting, format_mask)}"
        for name, value, format_mask in entries
    ]
    return "{" + comma.join(rendered) + "}"


def build_value(value: Any, formatting: Formatting = Formatting.NONE, format_mask: str | None = None) -> str:
    """Render a value as a GraphQL literal.

    Raises:
        UnsupportedValueError: for value kinds without a literal form.
    """
    if isinstance(value, GraphQLQueryParameter):
        return f"${value.name}"
    if isinstance(value, QueryBuilderParameter):
        return build_value(value.value, formatting, value.format_mask or format_mask)
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return _enum_literal(value)
    if isinstance(value, (int, float, Decimal)):
        return _build_number(value)
    if isinstance(value, (datetime, date, time)):
        return _quote(_format_temporal(value, format_mask))
    if isinstance(value, UUID):
        return _quote(str(value))
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, GraphQLInputObject):
        return _build_object(
            ((info.name, info.value, info.format_mask) for info in value.get_property_values()),
            formatting,
        )
    if isinstance(value, BaseModel):
        value = value.model_dump(by_alias=True, exclude_unset=True)
    if isinstance(value, Mapping):
        return _build_object(((str(key), item, None) for key, item in value.items()), formatting)
    if isinstance(value, (list, tuple)):
        _, comma = _separators(formatting)
        return "[" + comma.join(build_value(item, formatting, format_mask) for item in value) + "]"
    raise UnsupportedValueError(value)


@dataclass
class GraphQLDirective:
    """A directive attached to a selected field, e.g. ``@include(if:true)``."""
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)

    def build(self, formatting: Formatting = Formatting.NONE) -> str:
        if not self.arguments:
            return f"@{self.name}"
        colon, comma = _separators(formatting)
        arguments = comma.join(
            f"{name}{colon}{build_value(value, formatting)}" for name, value in self.arguments.items()
        )
        return f"@{self.name}({arguments})"


class IncludeDirective(GraphQLDirective):
    def __init__(self, condition: "bool | QueryBuilderParameter[bool]"):
        super().__init__("include", {"if": condition})


class SkipDirective(GraphQLDirective):
    def __init__(self, condition: "bool | QueryBuilderParameter[bool]"):
        super().__init__("skip", {"if": condition})


@dataclass(frozen=True)
class ArgumentInfo:
    """An argument bound to a selected field."""
    name: str
    value: Any
    format_mask: str | None = None


@dataclass(frozen=True)
class FieldMetadata:
    """Static description of a field, used by the ``with_all_*`` methods."""
    name: str
    query_builder_type: "type[GraphQLQueryBuilder] | None" = None
    requires_parameters: bool = False

    @property
    def is_complex(self) -> bool:
        return self.query_builder_type is not None


@dataclass
class _FieldCriteria:
    name: str
    alias: str | None = None
    arguments: list[ArgumentInfo] = field(default_factory=list)
    directives: list[GraphQLDirective] = field(default_factory=list)
    builder: "GraphQLQueryBuilder | None" = None

    def build(self, formatting: Formatting, level: int, indent_size: int) -> str:
        indented = formatting is Formatting.INDENTED
        colon, comma = _separators(formatting)
        space = " " if indented else ""
        parts = []
        if self.alias:
            parts.append(f"{self.alias}{colon}")
        parts.append(self.name)
        if self.arguments:
            arguments = comma.join(
                f"{argument.name}{colon}{build_value(argument.value, formatting, argument.format_mask)}"
                for argument in self.arguments
            )
            parts.append(f"({arguments})")
        for directive in self.directives:
            parts.append(space + directive.build(formatting))
        if self.builder is not None:
            parts.append(space + self.builder._build_selection_set(formatting, level, indent_size))
        return "".join(parts)


@dataclass
class _FragmentCriteria:
    builder: "GraphQLQueryBuilder"
    name: str = "..."
    arguments: tuple = ()
    directives: tuple = ()

    def build(self, formatting: Formatting, level: int, indent_size: int) -> str:
        space = " " if formatting is Formatting.INDENTED else ""
        block = self.builder._build_selection_set(formatting, level, indent_size)
        return f"...on {self.builder.type_name}{space}{block}"


def _register_parameter(found: dict[str, GraphQLQueryParameter], parameter: GraphQLQueryParameter):
    existing = found.get(parameter.name)
    if existing is None:
        found[parameter.name] = parameter
    elif existing.graphql_type_name != parameter.graphql_type_name:
        raise QueryBuilderError(
            f"Variable ${parameter.name} is bound as both {existing.graphql_type_name} "
            f"and {parameter.graphql_type_name}"
        )


def _collect_value_parameters(value: Any, found: dict[str, GraphQLQueryParameter]):
    if isinstance(value, GraphQLQueryParameter):
        _register_parameter(found, value)
    elif isinstance(value, QueryBuilderParameter):
        _collect_value_parameters(value.value, found)
    elif isinstance(value, GraphQLInputObject):
        for info in value.get_property_values():
            _collect_value_parameters(info.value, found)
    elif isinstance(value, Mapping):
        for item in value.values():
            _collect_value_parameters(item, found)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _collect_value_parameters(item, found)


def _directive_list(directives) -> list[GraphQLDirective]:
    return [directive for directive in directives or () if directive is not None]


class GraphQLQueryBuilder:
    """Selection tree for one GraphQL type.

    Subclasses set ``_type_name`` and, for root types, ``_operation_type``
    and override :meth:`all_fields`.
    """

    _type_name: ClassVar[str] = ""
    _operation_type: ClassVar[str] = "query"

    def __init__(
        self,
        alias: str | None = None,
        *,
        include: IncludeDirective | None = None,
        skip: SkipDirective | None = None,
    ):
        self.alias = _validate_name(alias, "alias") if alias is not None else None
        self.directives = _directive_list([include, skip])
        self._field_criteria: dict[str, _FieldCriteria | _FragmentCriteria] = {}
        self._parameters: dict[str, GraphQLQueryParameter] = {}

    @property
    def type_name(self) -> str:
        return self._type_name

    @classmethod
    def all_fields(cls) -> tuple[FieldMetadata, ...]:
        return ()

    def clear(self):
        """Drop every selection and variable; type, alias and directives stay."""
        self._field_criteria.clear()
        self._parameters.clear()

    def with_parameter(self, parameter: GraphQLQueryParameter):
        """Declare a variable explicitly, ahead of the ones found in the tree."""
        _register_parameter(self._parameters, parameter)
        return self

    def with_type_name(self, alias: str | None = None):
        return self._with_scalar_field("__typename", alias)

    def with_all_scalar_fields(self):
        for metadata in self.all_fields():
            if not metadata.is_complex and not metadata.requires_parameters:
                self._with_scalar_field(metadata.name)
        return self

    def with_all_fields(self):
        """Select every scalar field plus the scalar fields of each object field."""
        for metadata in self.all_fields():
            if metadata.requires_parameters:
                continue
            if not metadata.is_complex:
                self._with_scalar_field(metadata.name)
                continue
            builder = metadata.query_builder_type()
            builder.with_all_scalar_fields()
            if not builder._field_criteria:
                builder.with_type_name()
            self._with_object_field(metadata.name, builder)
        return self

    def _with_scalar_field(self, name: str, alias: str | None = None, directives=None, arguments=None):
        if alias is not None:
            _validate_name(alias, "alias")
        self._field_criteria[alias or name] = _FieldCriteria(
            name=name,
            alias=alias,
            arguments=list(arguments or ()),
            directives=_directive_list(directives),
        )
        return self

    def _with_object_field(
        self, name: str, builder: "GraphQLQueryBuilder", alias: str | None = None, directives=None, arguments=None
    ):
        if not isinstance(builder, GraphQLQueryBuilder):
            raise QueryBuilderError(f"Field {name!r} needs a query builder for its selection")
        if alias is None:
            alias = builder.alias
        elif alias is not None:
            _validate_name(alias, "alias")
        directives = _directive_list(directives) or list(builder.directives)
        self._field_criteria[alias or name] = _FieldCriteria(
            name=name,
            alias=alias,
            arguments=list(arguments or ()),
            directives=directives,
            builder=builder,
        )
        return self

    def _with_fragment(self, builder: "GraphQLQueryBuilder"):
        self._field_criteria[f"...on {builder.type_name}"] = _FragmentCriteria(builder)
        return self

    def _except_field(self, name: str):
        for key in [key for key, criteria in self._field_criteria.items() if criteria.name == name]:
            del self._field_criteria[key]
        return self

    def _collect_tree_parameters(self, found: dict[str, GraphQLQueryParameter]):
        for parameter in self._parameters.values():
            _register_parameter(found, parameter)
        for criteria in self._field_criteria.values():
            for argument in criteria.arguments:
                _collect_value_parameters(argument.value, found)
            for directive in criteria.directives:
                _collect_value_parameters(list(directive.arguments.values()), found)
            if criteria.builder is not None:
                criteria.builder._collect_tree_parameters(found)

    def _collect_parameters(self) -> list[GraphQLQueryParameter]:
        found: dict[str, GraphQLQueryParameter] = {}
        self._collect_tree_parameters(found)
        return list(found.values())

    def variables(self) -> dict[str, Any]:
        """JSON-ready values of the declared variables that carry one."""
        return {
            parameter.name: to_json_value(parameter.value, parameter.format_mask)
            for parameter in self._collect_parameters()
            if parameter.has_value
        }

    def _build_header(self, parameters, formatting: Formatting, operation_name: str | None) -> str:
        keyword = self._operation_type or "query"
        if keyword == "query" and not parameters and not operation_name:
            return ""
        header = keyword
        if operation_name:
            header += f" {operation_name}"
        if parameters:
            colon, comma = _separators(formatting)
            equals = " = " if formatting is Formatting.INDENTED else "="
            declarations = []
            for parameter in parameters:
                declaration = f"${parameter.name}{colon}{parameter.graphql_type_name}"
                if parameter.has_value:
                    declaration += equals + build_value(parameter.value, formatting, parameter.format_mask)
                declarations.append(declaration)
            header += f"({comma.join(declarations)})"
        return header

    def _build_selection_set(self, formatting: Formatting, level: int, indent_size: int) -> str:
        fields = [
            criteria.build(formatting, level + 1, indent_size)
            for criteria in self._field_criteria.values()
        ]
        if formatting is not Formatting.INDENTED:
            return "{" + ",".join(fields) + "}"
        child_indent = " " * (indent_size * (level + 1))
        lines = "".join(f"\n{child_indent}{text}" for text in fields)
        return "{" + lines + "\n" + " " * (indent_size * level) + "}"

    def build(
        self,
        formatting: Formatting = Formatting.NONE,
        indent_size: int = 2,
        operation_name: str | None = None,
    ) -> str:
        """Render the tree as a GraphQL request document.

        Raises:
            QueryBuilderError: if a variable is bound to conflicting types.
            UnsupportedValueError: if a bound value has no literal form.
        """
        if operation_name is not None:
            _validate_name(operation_name, "operation name")
        parameters = self._collect_parameters()
        header = self._build_header(parameters, formatting, operation_name)
        body = self._build_selection_set(formatting, 0, indent_size)
        if formatting is Formatting.INDENTED:
            return f"{header} {body}"
        return header + body

    def __str__(self):
        return self.build()

    def __repr__(self):
        return f"<{type(self).__name__} {self.build()!r}>"
