"""Code generator for GraphQL schemas.

Renders Jinja2 templates to produce a single Python module from a
:class:`Schema`: enums, pydantic response models, input objects and the
query builders emitted by :class:`QueryBuilderGenerator`.

Supports custom templates via the template_dir parameter:
    generator = GraphQLGenerator(config, template_dir="./my_templates")

Template lookup order:
1. User's template directory (if provided)
2. Package default templates
"""

import ast
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from .. import __version__
from .builder_generator import QueryBuilderGenerator
from .config import (
    GeneratorConfiguration,
    JsonPropertyGeneration,
    MemberVisibility,
    PropertyGeneration,
    TargetProfile,
)
from .errors import GeneratorError, SchemaIntegrityError
from .ir import Schema, SchemaField, SchemaType, TypeKind
from .models import GraphQLPolymorphicModel
from .naming import ClassNameResolver, UniqueNameAllocator, safe_comment, safe_docstring, snake_case
from .query_builder import GraphQLInputObject
from .types import TypeAnnotator, type_ref_to_graphql

logger = logging.getLogger(__name__)

# Names already bound by the generated module header.
HEADER_IMPORTS = frozenset({"from typing import Any"})

MODEL_RESERVED_NAMES = frozenset(
    {name for name in dir(GraphQLPolymorphicModel) if not name.startswith("_")}
    | {"typename", "graphql_type_name"}
)

INPUT_RESERVED_NAMES = frozenset(
    name for name in dir(GraphQLInputObject) if not name.startswith("_")
)

ENUM_RESERVED_NAMES = frozenset({"name", "value", "mro"})

# Model attributes live in the namespace pydantic evaluates annotations in,
# so they must not rebind a name an annotation or default refers to.
ANNOTATION_HELPERS = frozenset({"Optional", "List", "Any", "ClassVar", "Field"})
IDENTIFIER = re.compile(r"[A-Za-z_]\w*")


@dataclass
class FieldView:
    attribute: str
    annotation: str
    declaration: str
    docstring: str = ""
    property_name: str | None = None


@dataclass
class ModelView:
    class_name: str
    type_name: str
    bases: list[str]
    fields: list[FieldView] = field(default_factory=list)
    docstring: str = ""
    final: bool = False


@dataclass
class InputView:
    class_name: str
    fields: list[FieldView] = field(default_factory=list)
    docstring: str = ""
    final: bool = False


@dataclass
class EnumMemberView:
    name: str
    value: str
    docstring: str = ""


@dataclass
class EnumView:
    class_name: str
    members: list[EnumMemberView]
    unknown_name: str
    unknown_value: str
    docstring: str = ""


@dataclass
class GenerationState:
    """Per-run state shared by both emitters."""
    schema: Schema
    names: ClassNameResolver
    annotator: TypeAnnotator
    exports: list[str] = field(default_factory=list)
    models: list[str] = field(default_factory=list)
    annotation_names: frozenset[str] = frozenset()


class GraphQLGenerator:
    """Generates a typed Python client module from a schema.

    Available templates to override:
        - module.py.j2: module header, ``__all__`` and model rebuilds
        - enum.py.j2: one enum class
        - model.py.j2: one response model
        - input.py.j2: one input object

    Example:
        generator = GraphQLGenerator(GeneratorConfiguration(class_postfix="Dto"))
        source = generator.generate(schema)
    """

    def __init__(self, config: GeneratorConfiguration | None = None, template_dir: str | None = None):
        """Initialize the code generator.

        Args:
            config: Generation options; validated immediately.
            template_dir: Optional directory with custom Jinja2 templates.
                          Templates here override the built-in templates.

        Raises:
            ConfigurationError: if the configuration cannot be used.
        """
        self.config = config or GeneratorConfiguration()
        self.config.validate()

        loaders = []
        if template_dir:
            template_path = Path(template_dir)
            if template_path.is_dir():
                loaders.append(FileSystemLoader(str(template_path)))
        loaders.append(PackageLoader("gql_querygen", "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["repr"] = repr
        self.env.filters["safe_docstring"] = safe_docstring
        self.env.filters["safe_comment"] = safe_comment
        self.env.filters["snake_case"] = snake_case

    def generate(self, schema: Schema) -> str:
        """Generate the complete client module."""
        state = self._start(schema)
        blocks = self._data_class_blocks(state)
        builders = QueryBuilderGenerator(schema, self.config, state.names, state.annotator)
        blocks.extend(builders.generate_blocks())
        state.exports.extend(builders.builder_names)

        source = self._render("module.py.j2", {
            "docstring": "Generated GraphQL client types and query builders.",
            "version": __version__,
            "scalar_imports": sorted(state.annotator.imports - HEADER_IMPORTS),
            "exports": state.exports if self.config.member_visibility is MemberVisibility.PUBLIC else [],
            "blocks": blocks,
            "rebuild": state.models,
        })
        self._validate(source, "module")
        logger.debug(
            "Generated %d data classes and %d query builders",
            len(state.exports) - len(builders.builder_names), len(builders.builder_names),
        )
        return source

    def generate_data_classes(self, schema: Schema) -> str:
        """Enums, models and input objects, without module header."""
        source = "\n\n\n".join(self._data_class_blocks(self._start(schema)))
        self._validate(source, "data classes")
        return source

    def generate_query_builders(self, schema: Schema) -> str:
        """Query builder classes, without module header."""
        state = self._start(schema)
        source = "\n\n\n".join(
            QueryBuilderGenerator(schema, self.config, state.names, state.annotator).generate_blocks()
        )
        self._validate(source, "query builders")
        return source

    def _start(self, schema: Schema) -> GenerationState:
        logger.debug("Generating from schema: %s", schema.stats())
        names = ClassNameResolver(self.config).resolve_all(schema)
        return GenerationState(schema=schema, names=names, annotator=TypeAnnotator(schema, self.config, names))

    def _render(self, template_name: str, context: dict[str, Any]) -> str:
        return self.env.get_template(template_name).render(context).rstrip("\n") + "\n"

    @staticmethod
    def _validate(source: str, what: str):
        try:
            ast.parse(source)
        except SyntaxError as e:
            raise GeneratorError(f"Generated invalid Python for {what}: {e}") from e

    def _docstring(self, text: str | None) -> str:
        if not self.config.code_summary_comments:
            return ""
        return safe_docstring(text)

    def _visible_fields(self, schema_type: SchemaType) -> list[SchemaField]:
        if self.config.include_deprecated_fields:
            return list(schema_type.fields)
        return [f for f in schema_type.fields if not f.is_deprecated]

    # Data classes

    def _data_class_blocks(self, state: GenerationState) -> list[str]:
        schema = state.schema
        blocks = []
        for schema_type in schema.named_types(TypeKind.ENUM):
            blocks.append(self._render("enum.py.j2", {"enum": self._enum_view(state, schema_type)}).rstrip("\n"))
            state.exports.append(state.names.resolve(schema_type.name))

        model_types = (
            self._ordered_interfaces(schema)
            + schema.named_types(TypeKind.UNION)
            + schema.named_types(TypeKind.OBJECT)
        )
        state.annotation_names = self._annotation_names(state, model_types)
        for schema_type in model_types:
            view = self._model_view(state, schema_type)
            blocks.append(self._render("model.py.j2", {"model": view}).rstrip("\n"))
            state.exports.append(view.class_name)
            state.models.append(view.class_name)

        for schema_type in schema.named_types(TypeKind.INPUT_OBJECT):
            view = self._input_view(state, schema_type)
            blocks.append(self._render("input.py.j2", {"input": view}).rstrip("\n"))
            state.exports.append(view.class_name)
        return blocks

    def _enum_view(self, state: GenerationState, schema_type: SchemaType) -> EnumView:
        names = UniqueNameAllocator(ENUM_RESERVED_NAMES)
        members = []
        for value in schema_type.enum_values:
            docstring = self._docstring(value.description)
            if value.is_deprecated and self.config.code_summary_comments:
                reason = safe_docstring(value.deprecation_reason) or "No longer supported"
                docstring = f"{docstring} Deprecated: {reason}".strip()
            member_name = value.name if not value.name.startswith("_") else f"VALUE{value.name}"
            members.append(EnumMemberView(names.allocate(member_name), value.name, docstring))
        values = UniqueNameAllocator(v.name for v in schema_type.enum_values)
        return EnumView(
            class_name=state.names.resolve(schema_type.name),
            members=members,
            unknown_name=names.allocate("UNKNOWN"),
            unknown_value=values.allocate("UNKNOWN"),
            docstring=self._docstring(schema_type.description),
        )

    def _ordered_interfaces(self, schema: Schema) -> list[SchemaType]:
        """Interfaces with every implemented interface ahead of its implementers."""
        ordered: list[SchemaType] = []
        seen: set[str] = set()

        def visit(schema_type: SchemaType):
            if schema_type.name in seen:
                return
            seen.add(schema_type.name)
            for parent_name in schema_type.interfaces:
                parent = schema.get_type(parent_name)
                if parent is None:
                    raise SchemaIntegrityError(
                        f"{schema_type.name} implements undefined interface {parent_name!r}"
                    )
                visit(parent)
            ordered.append(schema_type)

        for schema_type in schema.named_types(TypeKind.INTERFACE):
            visit(schema_type)
        return ordered

    @staticmethod
    def _interface_ancestors(schema: Schema, name: str) -> set[str]:
        found: set[str] = set()
        pending = [name]
        while pending:
            schema_type = schema.get_type(pending.pop())
            if schema_type is None:
                continue
            for parent in schema_type.interfaces:
                if parent not in found:
                    found.add(parent)
                    pending.append(parent)
        return found

    def _base_classes(self, state: GenerationState, schema_type: SchemaType) -> list[str]:
        schema = state.schema
        interfaces = schema_type.interfaces
        # Only the most derived interfaces are listed; the rest come through the MRO.
        inherited = set()
        for name in interfaces:
            inherited |= self._interface_ancestors(schema, name)
        parents = [name for name in interfaces if name not in inherited]
        if schema_type.kind is TypeKind.OBJECT:
            parents += [
                union.name
                for union in schema.named_types(TypeKind.UNION)
                if schema_type.name in union.possible_types
            ]
        if parents:
            return [state.names.resolve(name) for name in parents]
        if schema_type.kind is TypeKind.OBJECT:
            return ["GraphQLModel"]
        return ["GraphQLPolymorphicModel"]

    def _union_fields(self, state: GenerationState, union: SchemaType) -> list[SchemaField]:
        """Fields every member declares with the same name and type."""
        members = []
        for name in union.possible_types:
            member = state.schema.get_type(name)
            if member is None:
                raise SchemaIntegrityError(f"Union {union.name} has undefined member {name!r}")
            members.append(member)
        if not members:
            return []
        shared = []
        for candidate in self._visible_fields(members[0]):
            type_text = type_ref_to_graphql(candidate.type)
            if all(
                (other := member.get_field(candidate.name)) is not None
                and type_ref_to_graphql(other.type) == type_text
                and other in self._visible_fields(member)
                for member in members[1:]
            ):
                shared.append(candidate)
        return shared

    def _model_fields(self, state: GenerationState, schema_type: SchemaType) -> list[SchemaField]:
        if schema_type.kind is TypeKind.UNION:
            return self._union_fields(state, schema_type)
        return self._visible_fields(schema_type)

    def _annotation_names(self, state: GenerationState, model_types: list[SchemaType]) -> frozenset[str]:
        """Every identifier a model field annotation will mention.

        Collected across all models so a field keeps the same attribute
        name in an interface and in the types implementing it.
        """
        found = set(ANNOTATION_HELPERS)
        for schema_type in model_types:
            for schema_field in self._model_fields(state, schema_type):
                annotation, _, _ = state.annotator.annotation(schema_type, schema_field.type, schema_field.name)
                found.update(IDENTIFIER.findall(annotation))
        return frozenset(found)

    def _member_name(
        self, wire_name: str, allocator: UniqueNameAllocator, shadowed: frozenset[str] = frozenset()
    ) -> tuple[str, str | None]:
        """Attribute name for a wire name, and the alias it needs (if any)."""
        mode = self.config.json_property_generation
        base = wire_name if mode is JsonPropertyGeneration.NEVER else snake_case(wire_name)
        base = base.lstrip("_") or "field"
        if base in MODEL_RESERVED_NAMES or base in shadowed:
            base = f"{base}_"
        attribute = allocator.allocate(base)
        if mode is JsonPropertyGeneration.ALWAYS or attribute != wire_name:
            return attribute, wire_name
        return attribute, None

    def _model_field(
        self, state: GenerationState, owner: SchemaType, schema_field: SchemaField, allocator: UniqueNameAllocator
    ) -> FieldView:
        annotation, resolved, _ = state.annotator.annotation(owner, schema_field.type, schema_field.name)
        property_name = None
        if self.config.property_generation is PropertyGeneration.BACKING_FIELD:
            property_name, _ = self._member_name(schema_field.name, allocator, state.annotation_names)
            attribute = allocator.allocate(f"{property_name}_")
            alias = schema_field.name
        else:
            attribute, alias = self._member_name(schema_field.name, allocator, state.annotation_names)

        required = (
            self.config.target_profile is TargetProfile.NEWEST_STRICT_NULLABILITY
            and not resolved.is_nullable
        )
        if not required and not resolved.is_nullable:
            # Unselected fields stay None.
            annotation = state.annotator.optional(annotation)
        arguments = [] if required else ["default=None"]
        if alias:
            arguments.append(f"alias={alias!r}")
        if self.config.description_attributes and schema_field.description:
            arguments.append(f"description={schema_field.description!r}")
        if schema_field.is_deprecated:
            arguments.append(f"deprecated={schema_field.deprecation_reason or True!r}")

        if not arguments:
            declaration = f"{attribute}: {annotation}"
        elif arguments == ["default=None"]:
            declaration = f"{attribute}: {annotation} = None"
        else:
            declaration = f"{attribute}: {annotation} = Field({', '.join(arguments)})"
        return FieldView(
            attribute=attribute,
            annotation=annotation,
            declaration=declaration,
            docstring=self._docstring(schema_field.description),
            property_name=property_name,
        )

    def _model_view(self, state: GenerationState, schema_type: SchemaType) -> ModelView:
        schema_fields = self._model_fields(state, schema_type)
        allocator = UniqueNameAllocator(MODEL_RESERVED_NAMES | state.annotation_names)
        return ModelView(
            class_name=state.names.resolve(schema_type.name),
            type_name=schema_type.name,
            bases=self._base_classes(state, schema_type),
            fields=[self._model_field(state, schema_type, f, allocator) for f in schema_fields],
            docstring=self._docstring(schema_type.description),
            # Interface and union models are subclassed by their members.
            final=not self.config.generate_partial_classes and schema_type.kind is TypeKind.OBJECT,
        )

    def _input_view(self, state: GenerationState, schema_type: SchemaType) -> InputView:
        allocator = UniqueNameAllocator(INPUT_RESERVED_NAMES)
        fields = []
        for input_field in schema_type.input_fields:
            if input_field.is_deprecated and not self.config.include_deprecated_fields:
                continue
            annotation, _, format_mask = state.annotator.annotation(schema_type, input_field.type, input_field.name)
            if self.config.json_property_generation is JsonPropertyGeneration.NEVER:
                base = input_field.name
            else:
                base = snake_case(input_field.name)
            attribute = allocator.allocate(base.lstrip("_") or "field")
            arguments = repr(input_field.name)
            if format_mask:
                arguments += f", format_mask={format_mask!r}"
            fields.append(FieldView(
                attribute=attribute,
                annotation=annotation,
                declaration=f"{attribute}: InputProperty[{annotation}] = InputProperty({arguments})",
                docstring=self._docstring(input_field.description),
            ))
        return InputView(
            class_name=state.names.resolve(schema_type.name),
            fields=fields,
            docstring=self._docstring(schema_type.description),
            final=not self.config.generate_partial_classes,
        )
