"""Configuration of a generation run."""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from .errors import ConfigurationError
from .scalars import (
    BooleanTypeMapping,
    FloatTypeMapping,
    IdTypeMapping,
    IntegerTypeMapping,
    ScalarFieldTypeDescription,
    ScalarRegistry,
    default_scalar_field_type_mapping,
)

if TYPE_CHECKING:
    from .ir import SchemaType
    from .types import ResolvedType

ScalarFieldTypeMapping = Callable[["SchemaType", "ResolvedType", str], ScalarFieldTypeDescription]


class MemberVisibility(Enum):
    PUBLIC = "public"      # every generated name listed in __all__
    INTERNAL = "internal"  # empty __all__


class PropertyGeneration(Enum):
    PROPERTY = "property"
    BACKING_FIELD = "backing_field"


class JsonPropertyGeneration(Enum):
    NEVER = "never"
    CASE_INSENSITIVE = "case_insensitive"
    ALWAYS = "always"


class TargetProfile(Enum):
    """Python syntax level of the generated module."""
    COMPATIBLE = "compatible"
    NEWEST = "newest"
    NEWEST_STRICT_NULLABILITY = "newest_strict_nullability"

    @property
    def uses_union_operator(self) -> bool:
        return self is not TargetProfile.COMPATIBLE


@dataclass
class GeneratorConfiguration:
    """Options controlling what the generator emits.

    Attributes:
        custom_class_name_mapping: schema type name -> emitted class name
        class_postfix: appended to every emitted class name
        scalar_field_type_mapping: replaces the default scalar mapping; may
            delegate to :meth:`default_scalar_field_type_mapping`
        code_summary_comments: emit descriptions as docstrings
        description_attributes: emit descriptions as ``Field(description=...)``
    """
    custom_class_name_mapping: dict[str, str] = field(default_factory=dict)
    class_postfix: str = ""
    integer_type_mapping: IntegerTypeMapping = IntegerTypeMapping.INT
    float_type_mapping: FloatTypeMapping = FloatTypeMapping.FLOAT
    boolean_type_mapping: BooleanTypeMapping = BooleanTypeMapping.BOOL
    id_type_mapping: IdTypeMapping = IdTypeMapping.STR
    scalar_field_type_mapping: ScalarFieldTypeMapping | None = None
    scalar_registry: ScalarRegistry = field(default_factory=ScalarRegistry)
    member_visibility: MemberVisibility = MemberVisibility.PUBLIC
    generate_partial_classes: bool = True
    code_summary_comments: bool = True
    description_attributes: bool = False
    property_generation: PropertyGeneration = PropertyGeneration.PROPERTY
    json_property_generation: JsonPropertyGeneration = JsonPropertyGeneration.CASE_INSENSITIVE
    include_deprecated_fields: bool = False
    target_profile: TargetProfile = TargetProfile.NEWEST

    def validate(self):
        """Fail fast on option combinations that cannot generate code."""
        custom_options = [
            name
            for name, option in (
                ("Int", self.integer_type_mapping),
                ("Float", self.float_type_mapping),
                ("Boolean", self.boolean_type_mapping),
                ("ID", self.id_type_mapping),
            )
            if option.value == "custom"
        ]
        if custom_options and self.scalar_field_type_mapping is None:
            raise ConfigurationError(
                f"CUSTOM mapping selected for {', '.join(custom_options)} "
                "but no scalar_field_type_mapping was supplied"
            )
        if self.class_postfix and not ("A" + self.class_postfix).isidentifier():
            raise ConfigurationError(f"Invalid class postfix: {self.class_postfix!r}")
        for source, target in self.custom_class_name_mapping.items():
            if not target.isidentifier():
                raise ConfigurationError(f"Invalid class name {target!r} mapped for {source!r}")

    def default_scalar_field_type_mapping(
        self, base_type: "SchemaType", resolved: "ResolvedType", value_name: str
    ) -> ScalarFieldTypeDescription:
        return default_scalar_field_type_mapping(self, base_type, resolved, value_name)

    def map_scalar(
        self, base_type: "SchemaType", resolved: "ResolvedType", value_name: str
    ) -> ScalarFieldTypeDescription:
        """Apply the override when present, otherwise the default table."""
        if self.scalar_field_type_mapping is not None:
            return self.scalar_field_type_mapping(base_type, resolved, value_name)
        return self.default_scalar_field_type_mapping(base_type, resolved, value_name)
