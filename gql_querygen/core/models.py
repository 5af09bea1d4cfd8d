"""Base classes of generated response models."""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class GraphQLModel(BaseModel):
    """Base of every generated object, interface and union model.

    Fields are populated either by wire name (alias) or by attribute name.
    """

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    graphql_type_name: ClassVar[str] = ""


class GraphQLPolymorphicModel(GraphQLModel):
    """Base of interface and union models.

    Carries the ``__typename`` discriminator so that a payload can be
    validated into the concrete member model.
    """

    typename: str | None = Field(default=None, alias="__typename")

    @classmethod
    def _members(cls) -> list[type["GraphQLModel"]]:
        found = []
        pending = list(cls.__subclasses__())
        while pending:
            subclass = pending.pop(0)
            if subclass not in found:
                found.append(subclass)
                pending.extend(subclass.__subclasses__())
        return found

    @classmethod
    def validate_member(cls, data: Any) -> "GraphQLModel":
        """Validate ``data`` into the subclass named by its ``__typename``.

        Falls back to this class when the payload carries no typename or
        names a type without a generated model.
        """
        if isinstance(data, GraphQLModel):
            return data
        type_name = data.get("__typename") if isinstance(data, dict) else None
        if type_name:
            for member in cls._members():
                if member.graphql_type_name == type_name:
                    return member.model_validate(data)
        return cls.model_validate(data)
