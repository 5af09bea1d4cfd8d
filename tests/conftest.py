"""Shared fixtures: SDL schemas and a loader for generated modules."""

import sys
import types

import pytest

from gql_querygen.core.parser import SchemaParser

SIMPLE_SDL = """
type Query {
  testField(valueInt32: Int): String
}
"""

LIBRARY_SDL = '''
"""A thing with an id."""
interface Node {
  id: ID!
}

interface Named implements Node {
  id: ID!
  name: String
}

enum Status {
  ACTIVE
  INACTIVE
  UNKNOWN
}

scalar DateTime

type User implements Node & Named {
  id: ID!
  "Display name"
  name: String
  status: Status
  createdAt: DateTime
  friends(first: Int, after: String): [User!]!
  legacyName: String @deprecated(reason: "Use name")
}

type Post implements Node {
  id: ID!
  title: String!
  author: User
}

union SearchResult = User | Post

input UserFilter {
  name: String
  status: Status
  createdAfter: DateTime
  tags: [String!]
}

type Query {
  node(id: ID!): Node
  users(filter: UserFilter, limit: Int = 10): [User]
  search(text: String!): [SearchResult!]!
}

type Mutation {
  renameUser(id: ID!, name: String!): User
}
'''


@pytest.fixture
def parse_sdl():
    """Build a Schema from SDL text."""
    parser = SchemaParser()
    return parser.from_sdl


@pytest.fixture
def simple_schema(parse_sdl):
    return parse_sdl(SIMPLE_SDL)


@pytest.fixture
def library_schema(parse_sdl):
    return parse_sdl(LIBRARY_SDL)


@pytest.fixture
def load_module(monkeypatch):
    """Execute generated source as a registered module.

    The module must be importable by name so pydantic can resolve the
    postponed annotations of the generated models.
    """
    counter = iter(range(1_000_000))

    def _load(source: str):
        name = f"generated_client_{next(counter)}"
        module = types.ModuleType(name)
        monkeypatch.setitem(sys.modules, name, module)
        exec(compile(source, f"<{name}>", "exec"), module.__dict__)
        return module

    return _load


@pytest.fixture
def library_sdl():
    return LIBRARY_SDL
