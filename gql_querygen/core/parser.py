"""Schema loading.

Builds a :class:`Schema` from a standard introspection result. SDL files
(.graphql / .graphqls) are converted to an introspection result with
graphql-core first, so both inputs go through the same code path.
"""

import json
import logging
import os
from typing import Any

from graphql import GraphQLError, build_schema, introspection_from_schema

from .errors import SchemaIntegrityError
from .ir import (
    Schema,
    SchemaArgument,
    SchemaDirective,
    SchemaEnumValue,
    SchemaField,
    SchemaType,
    TypeKind,
    TypeRef,
)

logger = logging.getLogger(__name__)

SDL_EXTENSIONS = (".graphql", ".graphqls")


class SchemaParser:
    """Parses introspection results and SDL into the schema model."""

    def from_introspection(self, result: dict[str, Any]) -> Schema:
        """Build a schema from ``{"__schema": ...}`` or ``{"data": {"__schema": ...}}``.

        Raises:
            SchemaIntegrityError: if the payload is not an introspection result.
        """
        if not isinstance(result, dict):
            raise SchemaIntegrityError("Introspection result must be a JSON object")
        if "data" in result and isinstance(result["data"], dict):
            result = result["data"]
        raw_schema = result.get("__schema")
        if not isinstance(raw_schema, dict):
            raise SchemaIntegrityError("Introspection result has no '__schema' object")

        try:
            schema = Schema(
                types={},
                query_type=self._root_name(raw_schema.get("queryType")),
                mutation_type=self._root_name(raw_schema.get("mutationType")),
                subscription_type=self._root_name(raw_schema.get("subscriptionType")),
                description=raw_schema.get("description"),
            )
            for raw_type in raw_schema.get("types") or []:
                schema_type = self._parse_type(raw_type)
                schema.types[schema_type.name] = schema_type
            schema.directives = [
                self._parse_directive(raw) for raw in raw_schema.get("directives") or []
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise SchemaIntegrityError(f"Malformed introspection result: {e}") from e

        logger.debug("Parsed schema: %s", schema.stats())
        return schema

    def from_json_file(self, path: str) -> Schema:
        """Load an introspection result stored as JSON."""
        with open(path, encoding="utf-8") as f:
            try:
                result = json.load(f)
            except json.JSONDecodeError as e:
                raise SchemaIntegrityError(f"{os.path.basename(path)} is not valid JSON: {e}") from e
        return self.from_introspection(result)

    def from_sdl(self, sdl: str) -> Schema:
        """Build a schema from SDL text."""
        try:
            graphql_schema = build_schema(sdl)
        except (GraphQLError, TypeError) as e:
            # graphql-core reports SDL validation failures as TypeError.
            raise SchemaIntegrityError(f"Invalid schema definition: {e}") from e
        return self.from_introspection(introspection_from_schema(graphql_schema))

    def from_path(self, schema_path: str) -> Schema:
        """Load a JSON file, an SDL file, or a directory of SDL files."""
        if os.path.isfile(schema_path) and schema_path.endswith(".json"):
            return self.from_json_file(schema_path)
        schema_files = self._collect_schema_files(schema_path)
        if not schema_files:
            raise SchemaIntegrityError(f"No schema files found at {schema_path}")
        parts = []
        for file_path in schema_files:
            logger.debug("Reading %s", file_path)
            with open(file_path, encoding="utf-8") as f:
                parts.append(f.read())
        return self.from_sdl("\n".join(parts))

    @staticmethod
    def _collect_schema_files(schema_path: str) -> list[str]:
        """Collect all SDL files from path."""
        files = []
        if os.path.isfile(schema_path):
            if schema_path.endswith(SDL_EXTENSIONS):
                files.append(schema_path)
        else:
            for root, _, filenames in os.walk(schema_path):
                for filename in filenames:
                    if filename.endswith(SDL_EXTENSIONS):
                        files.append(os.path.join(root, filename))
        return sorted(files)

    @staticmethod
    def _root_name(raw: dict[str, Any] | None) -> str | None:
        return raw.get("name") if raw else None

    def _parse_type_ref(self, raw: dict[str, Any]) -> TypeRef:
        if raw is None:
            raise SchemaIntegrityError("Missing type reference")
        kind = TypeKind(raw["kind"])
        if kind.is_wrapper:
            return TypeRef(kind=kind, of_type=self._parse_type_ref(raw.get("ofType")))
        return TypeRef.named(kind, raw["name"])

    def _parse_argument(self, raw: dict[str, Any]) -> SchemaArgument:
        return SchemaArgument(
            name=raw["name"],
            type=self._parse_type_ref(raw["type"]),
            default_value=raw.get("defaultValue"),
            description=raw.get("description"),
            is_deprecated=bool(raw.get("isDeprecated", False)),
            deprecation_reason=raw.get("deprecationReason"),
        )

    def _parse_field(self, raw: dict[str, Any]) -> SchemaField:
        return SchemaField(
            name=raw["name"],
            type=self._parse_type_ref(raw["type"]),
            arguments=[self._parse_argument(arg) for arg in raw.get("args") or []],
            description=raw.get("description"),
            is_deprecated=bool(raw.get("isDeprecated", False)),
            deprecation_reason=raw.get("deprecationReason"),
        )

    def _parse_type(self, raw: dict[str, Any]) -> SchemaType:
        kind = TypeKind(raw["kind"])
        if kind.is_wrapper:
            raise SchemaIntegrityError(f"Named type {raw.get('name')!r} has wrapper kind {kind.value}")
        return SchemaType(
            name=raw["name"],
            kind=kind,
            description=raw.get("description"),
            fields=[self._parse_field(f) for f in raw.get("fields") or []],
            input_fields=[self._parse_argument(f) for f in raw.get("inputFields") or []],
            interfaces=[i["name"] for i in raw.get("interfaces") or []],
            possible_types=[t["name"] for t in raw.get("possibleTypes") or []],
            enum_values=[
                SchemaEnumValue(
                    name=v["name"],
                    description=v.get("description"),
                    is_deprecated=bool(v.get("isDeprecated", False)),
                    deprecation_reason=v.get("deprecationReason"),
                )
                for v in raw.get("enumValues") or []
            ],
        )

    def _parse_directive(self, raw: dict[str, Any]) -> SchemaDirective:
        return SchemaDirective(
            name=raw["name"],
            locations=list(raw.get("locations") or []),
            arguments=[self._parse_argument(arg) for arg in raw.get("args") or []],
            description=raw.get("description"),
            is_repeatable=bool(raw.get("isRepeatable", False)),
        )
