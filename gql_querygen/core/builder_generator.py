"""Query builder class generator.

Emits one ``<Type>QueryBuilder`` class per object, interface and union type
reachable from the schema's root operation types, e.g.:

    class QueryQueryBuilder(GraphQLQueryBuilder):
        _type_name: ClassVar[str] = "Query"
        _operation_type: ClassVar[str] = "query"

        def with_test_field(self, value_int32: ... = None, *, alias=None, ...):
            ...
"""

import logging

from .config import GeneratorConfiguration
from .errors import SchemaIntegrityError
from .ir import Schema, SchemaArgument, SchemaField, SchemaType, TypeKind
from .naming import ClassNameResolver, UniqueNameAllocator, safe_docstring, snake_case
from .query_builder import GraphQLQueryBuilder
from .types import TypeAnnotator

logger = logging.getLogger(__name__)

# Parameter names used by every generated method.
RESERVED_PARAMETER_NAMES = frozenset({"self", "builder", "alias", "include", "skip", "args"})

RESERVED_METHOD_NAMES = frozenset(
    name for name in dir(GraphQLQueryBuilder) if not name.startswith("__")
)


class QueryBuilderGenerator:
    """Generates query builder classes for a schema."""

    def __init__(
        self,
        schema: Schema,
        config: GeneratorConfiguration,
        names: ClassNameResolver,
        annotator: TypeAnnotator,
    ):
        self.schema = schema
        self.config = config
        self.names = names
        self.annotator = annotator
        self.builder_names: list[str] = []

    def reachable_types(self) -> list[SchemaType]:
        """Composite types reachable from the root types, in schema order."""
        reached: set[str] = set()
        pending = [name for _, name in self.schema.root_types]
        while pending:
            name = pending.pop()
            if name in reached:
                continue
            schema_type = self.schema.get_type(name)
            if schema_type is None:
                raise SchemaIntegrityError(f"Type {name!r} is referenced but not defined in the schema")
            if not schema_type.kind.is_composite:
                continue
            reached.add(name)
            for schema_field in self._visible_fields(schema_type):
                pending.append(schema_field.type.named_type.name)
            pending.extend(schema_type.possible_types)
        return [t for t in self.schema.named_types() if t.name in reached]

    def generate_blocks(self) -> list[str]:
        """Source of every builder class, one string per class."""
        blocks = []
        self.builder_names = []
        for schema_type in self.reachable_types():
            blocks.append("\n".join(self._generate_class(schema_type)))
            self.builder_names.append(self.names.builder_name(schema_type.name))
        logger.debug("Generated %d query builders", len(blocks))
        return blocks

    def _visible_fields(self, schema_type: SchemaType) -> list[SchemaField]:
        if self.config.include_deprecated_fields:
            return list(schema_type.fields)
        return [f for f in schema_type.fields if not f.is_deprecated]

    def _optional(self, text: str) -> str:
        return self.annotator.optional(text)

    def _generate_class(self, schema_type: SchemaType) -> list[str]:
        class_name = self.names.builder_name(schema_type.name)
        lines = []
        if not self.config.generate_partial_classes:
            lines.append("@final")
        lines.append(f"class {class_name}(GraphQLQueryBuilder):")
        if self.config.code_summary_comments and schema_type.description:
            lines.append(f'    """{safe_docstring(schema_type.description)}"""')
            lines.append("")
        lines.append(f"    _type_name: ClassVar[str] = {schema_type.name!r}")
        operation_type = self.schema.operation_type_of(schema_type.name)
        if operation_type:
            lines.append(f"    _operation_type: ClassVar[str] = {operation_type!r}")

        fields = self._visible_fields(schema_type)
        lines.extend(self._generate_all_fields(fields))

        methods = UniqueNameAllocator(RESERVED_METHOD_NAMES)
        for schema_field in fields:
            lines.extend(self._generate_with_method(schema_type, class_name, schema_field, methods))
            lines.extend(self._generate_except_method(class_name, schema_field, methods))

        if schema_type.kind in (TypeKind.INTERFACE, TypeKind.UNION):
            for member_name in schema_type.possible_types:
                lines.extend(self._generate_fragment_method(class_name, member_name, methods))
        return lines

    def _generate_all_fields(self, fields: list[SchemaField]) -> list[str]:
        lines = [
            "",
            "    @classmethod",
            "    def all_fields(cls) -> tuple[FieldMetadata, ...]:",
        ]
        if not fields:
            lines.append("        return ()")
            return lines
        lines.append("        return (")
        for schema_field in fields:
            arguments = [repr(schema_field.name)]
            named = self.schema.get_type(schema_field.type.named_type.name)
            if named is not None and named.kind.is_composite:
                arguments.append(f"query_builder_type={self.names.builder_name(named.name)}")
            if schema_field.requires_arguments:
                arguments.append("requires_parameters=True")
            lines.append(f"            FieldMetadata({', '.join(arguments)}),")
        lines.append("        )")
        return lines

    def _argument_parameter(
        self, owner: SchemaType, argument: SchemaArgument, parameters: UniqueNameAllocator
    ) -> tuple[str, str, str | None, bool]:
        """(parameter name, annotation, format mask, required) of one argument."""
        annotation, _, format_mask = self.annotator.annotation(owner, argument.type, argument.name)
        name = parameters.allocate(snake_case(argument.name).lstrip("_") or "value")
        return name, f"ParameterValue[{annotation}]", format_mask, argument.is_required

    def _generate_with_method(
        self,
        owner: SchemaType,
        class_name: str,
        schema_field: SchemaField,
        methods: UniqueNameAllocator,
    ) -> list[str]:
        method_name = methods.allocate(f"with_{snake_case(schema_field.name).lstrip('_')}")
        named = self.schema.get_type(schema_field.type.named_type.name)
        if named is None:
            raise SchemaIntegrityError(
                f"Field {owner.name}.{schema_field.name} references undefined type "
                f"{schema_field.type.named_type.name!r}"
            )
        is_object = named.kind.is_composite

        parameters = UniqueNameAllocator(RESERVED_PARAMETER_NAMES)
        arguments = [
            (argument, *self._argument_parameter(owner, argument, parameters))
            for argument in schema_field.arguments
        ]
        # Required arguments first, the rest default to None.
        arguments.sort(key=lambda item: not item[4])

        signature = ["        self,"]
        if is_object:
            signature.append(f"        builder: {self.names.builder_name(named.name)},")
        for _, name, annotation, _, required in arguments:
            if required:
                signature.append(f"        {name}: {annotation},")
            else:
                signature.append(f"        {name}: {self._optional(annotation)} = None,")
        signature.extend([
            "        *,",
            f"        alias: {self._optional('str')} = None,",
            f"        include: {self._optional('IncludeDirective')} = None,",
            f"        skip: {self._optional('SkipDirective')} = None,",
        ])

        lines = [""]
        if schema_field.is_deprecated:
            reason = schema_field.deprecation_reason or "Deprecated"
            lines.append(f"    @deprecated({reason!r})")
        lines.append(f"    def {method_name}(")
        lines.extend(signature)
        lines.append(f"    ) -> {class_name}:")
        if self.config.code_summary_comments and schema_field.description:
            lines.append(f'        """{safe_docstring(schema_field.description)}"""')

        call_arguments = f"{schema_field.name!r}, "
        if is_object:
            call_arguments += "builder, "
        call_arguments += "alias, [include, skip]"
        if arguments:
            lines.append("        args = []")
            for argument, name, _, format_mask, required in arguments:
                info = f"ArgumentInfo({argument.name!r}, {name}"
                info += f", format_mask={format_mask!r})" if format_mask else ")"
                if required:
                    lines.append(f"        args.append({info})")
                else:
                    lines.append(f"        if {name} is not None:")
                    lines.append(f"            args.append({info})")
            call_arguments += ", args"

        helper = "_with_object_field" if is_object else "_with_scalar_field"
        lines.append(f"        return self.{helper}({call_arguments})")
        return lines

    def _generate_except_method(
        self, class_name: str, schema_field: SchemaField, methods: UniqueNameAllocator
    ) -> list[str]:
        method_name = methods.allocate(f"except_{snake_case(schema_field.name).lstrip('_')}")
        return [
            "",
            f"    def {method_name}(self) -> {class_name}:",
            f"        return self._except_field({schema_field.name!r})",
        ]

    def _generate_fragment_method(
        self, class_name: str, member_name: str, methods: UniqueNameAllocator
    ) -> list[str]:
        method_name = methods.allocate(f"with_{snake_case(member_name).lstrip('_')}_fragment")
        member_builder = self.names.builder_name(member_name)
        return [
            "",
            f"    def {method_name}(self, builder: {member_builder}) -> {class_name}:",
            "        return self._with_fragment(builder)",
        ]
