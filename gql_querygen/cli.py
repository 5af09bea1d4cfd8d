"""Command-line interface for gql-querygen."""

import asyncio
import logging
from pathlib import Path

import click
import httpx
from rich.logging import RichHandler

from . import __version__
from .core.config import (
    GeneratorConfiguration,
    JsonPropertyGeneration,
    MemberVisibility,
    PropertyGeneration,
    TargetProfile,
)
from .core.errors import GeneratorError
from .core.generator import GraphQLGenerator
from .core.introspection import GraphQLError, IntrospectionClient
from .core.parser import SchemaParser
from .core.scalars import FloatTypeMapping, IdTypeMapping


def _choice(enum_type) -> click.Choice:
    return click.Choice([member.value for member in enum_type], case_sensitive=False)


def _parse_class_name_mapping(ctx, param, values) -> dict[str, str]:
    mapping = {}
    for value in values:
        source, sep, target = value.partition("=")
        if not sep or not source or not target:
            raise click.BadParameter(f"expected SCHEMA_TYPE=ClassName, got {value!r}", ctx=ctx, param=param)
        mapping[source.strip()] = target.strip()
    return mapping


def _configure_logging(verbose: bool):
    if not verbose:
        return
    handler = RichHandler(rich_tracebacks=True, show_time=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)


@click.group()
@click.version_option(__version__)
def main():
    """Typed GraphQL query builder generator for Python.

    Generate query builders and response models from a GraphQL schema.
    """
    pass


@main.command()
@click.option(
    "--schema",
    "-s",
    type=click.Path(exists=True),
    help="Introspection JSON file, SDL file, or directory of .graphql/.graphqls files.",
)
@click.option("--service-url", "-u", help="GraphQL endpoint to introspect instead of --schema.")
@click.option("--authorization", help="Authorization header value sent with --service-url.")
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(dir_okay=False),
    help="Output file for the generated module (e.g., client.py).",
)
@click.option("--class-postfix", default="", help="Suffix appended to every generated class name.")
@click.option(
    "--class-name-mapping",
    "-m",
    multiple=True,
    callback=_parse_class_name_mapping,
    help="Explicit class name, as SCHEMA_TYPE=ClassName. May be repeated.",
)
@click.option(
    "--target-profile",
    type=_choice(TargetProfile),
    default=TargetProfile.NEWEST.value,
    show_default=True,
    help="Python syntax level of the generated code.",
)
@click.option(
    "--member-visibility",
    type=_choice(MemberVisibility),
    default=MemberVisibility.PUBLIC.value,
    show_default=True,
    help="Export generated names in __all__ (public) or not (internal).",
)
@click.option(
    "--partial-classes/--final-classes",
    default=True,
    help="Leave generated classes open for subclassing, or mark them @final.",
)
@click.option("--include-deprecated-fields", is_flag=True, help="Also emit deprecated fields.")
@click.option(
    "--json-property-generation",
    type=_choice(JsonPropertyGeneration),
    default=JsonPropertyGeneration.CASE_INSENSITIVE.value,
    show_default=True,
    help="How attribute names relate to wire names.",
)
@click.option(
    "--property-generation",
    type=_choice(PropertyGeneration),
    default=PropertyGeneration.PROPERTY.value,
    show_default=True,
    help="Plain model fields, or aliased backing fields with properties.",
)
@click.option(
    "--code-summary-comments/--no-code-summary-comments",
    default=True,
    help="Emit schema descriptions as docstrings.",
)
@click.option("--description-attributes", is_flag=True, help="Emit schema descriptions as Field(description=...).")
@click.option(
    "--id-type",
    type=click.Choice([IdTypeMapping.STR.value, IdTypeMapping.UUID.value]),
    default=IdTypeMapping.STR.value,
    show_default=True,
    help="Python type of ID fields.",
)
@click.option(
    "--float-type",
    type=click.Choice([FloatTypeMapping.FLOAT.value, FloatTypeMapping.DECIMAL.value]),
    default=FloatTypeMapping.FLOAT.value,
    show_default=True,
    help="Python type of Float fields.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
def generate(
    schema: str | None,
    service_url: str | None,
    authorization: str | None,
    output: str,
    class_postfix: str,
    class_name_mapping: dict[str, str],
    target_profile: str,
    member_visibility: str,
    partial_classes: bool,
    include_deprecated_fields: bool,
    json_property_generation: str,
    property_generation: str,
    code_summary_comments: bool,
    description_attributes: bool,
    id_type: str,
    float_type: str,
    verbose: bool,
):
    """Generate a Python client module from a GraphQL schema.

    Examples:

        gql-querygen generate --schema ./schema.json --output ./client.py

        gql-querygen generate -s ./schema -o ./client.py --class-postfix Dto

        gql-querygen generate -u https://api.example.com/graphql --authorization "Bearer <token>" -o client.py
    """
    _configure_logging(verbose)
    if bool(schema) == bool(service_url):
        raise click.UsageError("Pass exactly one of --schema or --service-url.")

    output_path = Path(output).resolve()
    config = GeneratorConfiguration(
        custom_class_name_mapping=class_name_mapping,
        class_postfix=class_postfix,
        float_type_mapping=FloatTypeMapping(float_type),
        id_type_mapping=IdTypeMapping(id_type),
        member_visibility=MemberVisibility(member_visibility.lower()),
        generate_partial_classes=partial_classes,
        code_summary_comments=code_summary_comments,
        description_attributes=description_attributes,
        property_generation=PropertyGeneration(property_generation.lower()),
        json_property_generation=JsonPropertyGeneration(json_property_generation.lower()),
        include_deprecated_fields=include_deprecated_fields,
        target_profile=TargetProfile(target_profile.lower()),
    )

    try:
        if service_url:
            click.echo(f"Fetching schema from {service_url}...")
            parsed = asyncio.run(IntrospectionClient(service_url, authorization).fetch_schema())
        else:
            click.echo("Parsing schema...")
            parsed = SchemaParser().from_path(str(Path(schema).resolve()))

        if verbose:
            for kind, count in sorted(parsed.stats().items()):
                click.echo(f"  {kind}: {count}")

        click.echo("Generating code...")
        code = GraphQLGenerator(config).generate(parsed)
    except (GeneratorError, GraphQLError, httpx.HTTPError) as e:
        raise click.ClickException(str(e)) from e

    output_path.parent.mkdir(parents=True, exist_ok=True)
    click.echo(f"Writing to {output_path}...")
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(code)

    click.echo(f"Done! Generated {code.count('class ')} classes.")


if __name__ == "__main__":
    main()
