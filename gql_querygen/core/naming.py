"""Identifier helpers and the class name resolver.

Every named schema type that becomes a Python class gets one identifier per
generation run. The table is computed up front by
:meth:`ClassNameResolver.resolve_all` and frozen, so both emitters read the
same, stable mapping.
"""

import keyword
import logging
import re

from .config import GeneratorConfiguration
from .errors import NameCollisionError, SchemaIntegrityError
from .ir import Schema, TypeKind

logger = logging.getLogger(__name__)

MAX_SUFFIX_ATTEMPTS = 100

BUILDER_SUFFIX = "QueryBuilder"

# Names the generated module imports or relies on; no class may shadow them.
RESERVED_MODULE_NAMES = frozenset({
    "annotations",
    "Any", "ClassVar", "List", "Optional", "Union", "final", "deprecated",
    "Enum", "Field",
    "GraphQLModel", "GraphQLPolymorphicModel",
    "ArgumentInfo", "FieldMetadata", "GraphQLInputObject", "GraphQLQueryBuilder",
    "GraphQLQueryParameter", "IncludeDirective", "InputProperty", "ParameterValue",
    "QueryBuilderParameter", "SkipDirective",
    "date", "datetime", "time", "Decimal", "UUID",
    "str", "int", "float", "bool", "list", "dict", "object", "type",
})


def snake_case(name: str) -> str:
    """Convert PascalCase or camelCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def safe_identifier(name: str) -> str:
    """Make a name usable as a Python identifier by suffixing keywords."""
    if keyword.iskeyword(name):
        return f"{name}_"
    return name


def safe_docstring(text: str | None) -> str:
    """Escape text for use in docstrings."""
    text = (text or "").strip()
    if not text:
        return ""
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return text


def safe_comment(text: str | None) -> str:
    """Make text safe for a single-line Python comment."""
    if not text:
        return ""
    text = text.replace("\n", " ").replace("\r", "")
    text = re.sub(r"\s+", " ", text)
    if len(text) > 120:
        text = text[:117] + "..."
    return text.strip()


class UniqueNameAllocator:
    """Hands out identifiers unique within one scope (a class or an enum).

    A taken name gets a numeric suffix, the same rule the class name
    resolver applies.
    """

    def __init__(self, reserved=()):
        self._taken: set[str] = set(reserved)

    def __contains__(self, name: str) -> bool:
        return name in self._taken

    def reserve(self, name: str):
        self._taken.add(name)

    def allocate(self, name: str) -> str:
        name = safe_identifier(name)
        if name not in self._taken:
            self._taken.add(name)
            return name
        for attempt in range(1, MAX_SUFFIX_ATTEMPTS + 1):
            candidate = f"{name}{attempt}"
            if candidate not in self._taken:
                self._taken.add(candidate)
                return candidate
        raise NameCollisionError(f"Could not find a unique name for {name!r}")


class ClassNameResolver:
    """Maps schema type names to class identifiers.

    Precedence: explicit ``custom_class_name_mapping`` entries, then the raw
    schema name, then the raw name with a numeric suffix. The class postfix
    is appended in every case. Object, interface and union types also claim
    their query builder name, so data classes and builders never collide.
    """

    def __init__(self, config: GeneratorConfiguration):
        self.config = config
        self._class_names: dict[str, str] = {}
        self._builder_names: dict[str, str] = {}
        self._taken: set[str] = set(RESERVED_MODULE_NAMES)
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def resolve_all(self, schema: Schema) -> "ClassNameResolver":
        """Assign identifiers to every generated type and freeze the table."""
        if self._frozen:
            return self
        types = [t for t in schema.named_types() if t.kind is not TypeKind.SCALAR]
        mapping = self.config.custom_class_name_mapping

        for schema_type in types:
            if schema_type.name in mapping:
                base = mapping[schema_type.name]
                if not self._try_claim(schema_type.name, base, schema_type.kind.is_composite):
                    raise NameCollisionError(
                        f"Class name {base!r} mapped for {schema_type.name!r} is already in use"
                    )

        for schema_type in types:
            if schema_type.name in mapping:
                continue
            base = safe_identifier(schema_type.name)
            composite = schema_type.kind.is_composite
            if self._try_claim(schema_type.name, base, composite):
                continue
            for attempt in range(1, MAX_SUFFIX_ATTEMPTS + 1):
                if self._try_claim(schema_type.name, f"{base}{attempt}", composite):
                    logger.debug(
                        "Class name for %s collided, using %s",
                        schema_type.name, self._class_names[schema_type.name],
                    )
                    break
            else:
                raise NameCollisionError(
                    f"No unique class name for {schema_type.name!r} after "
                    f"{MAX_SUFFIX_ATTEMPTS} attempts; add it to custom_class_name_mapping"
                )

        self._frozen = True
        return self

    def _try_claim(self, type_name: str, base: str, composite: bool) -> bool:
        postfix = self.config.class_postfix
        class_name = f"{base}{postfix}"
        builder_name = f"{base}{BUILDER_SUFFIX}{postfix}" if composite else None
        if class_name in self._taken or builder_name in self._taken:
            return False
        self._taken.add(class_name)
        self._class_names[type_name] = class_name
        if builder_name:
            self._taken.add(builder_name)
            self._builder_names[type_name] = builder_name
        return True

    def resolve(self, type_name: str) -> str:
        """Class name of a schema type."""
        try:
            return self._class_names[type_name]
        except KeyError:
            raise SchemaIntegrityError(f"No class name resolved for type {type_name!r}") from None

    def builder_name(self, type_name: str) -> str:
        """Query builder class name of an object, interface or union type."""
        try:
            return self._builder_names[type_name]
        except KeyError:
            raise SchemaIntegrityError(f"No query builder resolved for type {type_name!r}") from None

    def all_class_names(self) -> list[str]:
        return list(self._class_names.values())
