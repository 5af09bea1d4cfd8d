"""Unwrapping of LIST / NON_NULL type references.

A reference such as ``[String!]`` is resolved into its base named type and
a nullability vector holding one flag per nesting level, outermost first:

    NonNull(List(NonNull(String)))  ->  String, (False, False)
    List(String)                    ->  String, (True, True)
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .errors import SchemaIntegrityError
from .ir import Schema, SchemaType, TypeKind, TypeRef

if TYPE_CHECKING:
    from .config import GeneratorConfiguration
    from .naming import ClassNameResolver


@dataclass(frozen=True)
class ResolvedType:
    """Base named type of a reference plus per-level nullability."""
    base: SchemaType
    nullability: tuple[bool, ...]

    @property
    def list_depth(self) -> int:
        return len(self.nullability) - 1

    @property
    def is_list(self) -> bool:
        return self.list_depth > 0

    @property
    def is_nullable(self) -> bool:
        """Nullability of the outermost level."""
        return self.nullability[0]

    @property
    def element_nullable(self) -> bool:
        """Nullability of the innermost (named type) level."""
        return self.nullability[-1]

    @property
    def kind(self) -> TypeKind:
        return self.base.kind

    @property
    def name(self) -> str:
        return self.base.name


def resolve_type(schema: Schema, type_ref: TypeRef) -> ResolvedType:
    """Unwrap ``type_ref`` and look up its named type in ``schema``.

    Raises:
        SchemaIntegrityError: if the named type is not part of the schema
            or a wrapper has no inner type.
    """
    nullability: list[bool] = []
    nullable = True
    ref = type_ref
    while True:
        if ref is None:
            raise SchemaIntegrityError(f"Wrapper type without inner type in {type_ref!r}")
        if ref.kind is TypeKind.NON_NULL:
            nullable = False
            ref = ref.of_type
            continue
        nullability.append(nullable)
        nullable = True
        if ref.kind is TypeKind.LIST:
            ref = ref.of_type
            continue
        break

    base = schema.get_type(ref.name) if ref.name else None
    if base is None:
        raise SchemaIntegrityError(f"Type {ref.name!r} is referenced but not defined in the schema")
    return ResolvedType(base=base, nullability=tuple(nullability))


def wrap_type(resolved: ResolvedType) -> TypeRef:
    """Rebuild the type reference described by ``resolved``."""
    ref = TypeRef.named(resolved.base.kind, resolved.base.name)
    innermost = len(resolved.nullability) - 1
    for level in range(innermost, -1, -1):
        if level < innermost:
            ref = TypeRef.list_of(ref)
        if not resolved.nullability[level]:
            ref = TypeRef.non_null(ref)
    return ref


def type_ref_to_graphql(type_ref: TypeRef) -> str:
    """Render a reference as GraphQL type text, e.g. ``[ID!]!``."""
    if type_ref.kind is TypeKind.NON_NULL:
        return f"{type_ref_to_graphql(type_ref.of_type)}!"
    if type_ref.kind is TypeKind.LIST:
        return f"[{type_ref_to_graphql(type_ref.of_type)}]"
    return type_ref.name or ""


class TypeAnnotator:
    """Turns type references into Python annotations for emitted code.

    Scalar leaves go through the configured scalar mapping; every other
    named type is referenced by its resolved class name. Import statements
    required by mapped scalars are collected in :attr:`imports`.
    """

    def __init__(self, schema: Schema, config: "GeneratorConfiguration", names: "ClassNameResolver"):
        self.schema = schema
        self.config = config
        self.names = names
        self.imports: set[str] = set()

    def optional(self, text: str) -> str:
        if self.config.target_profile.uses_union_operator:
            return f"{text} | None"
        return f"Optional[{text}]"

    def list_of(self, text: str) -> str:
        if self.config.target_profile.uses_union_operator:
            return f"list[{text}]"
        return f"List[{text}]"

    def element_type(self, owner: SchemaType, resolved: ResolvedType, value_name: str) -> tuple[str, str | None]:
        """Python type of the named type, plus the scalar format mask if any."""
        if resolved.kind is TypeKind.SCALAR:
            description = self.config.map_scalar(owner, resolved, value_name)
            if description.import_statement:
                self.imports.add(description.import_statement)
            return description.type_name, description.format_mask
        return self.names.resolve(resolved.name), None

    def wrap(self, resolved: ResolvedType, element: str) -> str:
        text = element
        innermost = len(resolved.nullability) - 1
        for level in range(innermost, -1, -1):
            if level < innermost:
                text = self.list_of(text)
            if resolved.nullability[level]:
                text = self.optional(text)
        return text

    def annotation(self, owner: SchemaType, type_ref: TypeRef, value_name: str) -> tuple[str, ResolvedType, str | None]:
        """Annotation text, resolved type and format mask of a field or argument."""
        resolved = resolve_type(self.schema, type_ref)
        element, format_mask = self.element_type(owner, resolved, value_name)
        return self.wrap(resolved, element), resolved, format_mask
