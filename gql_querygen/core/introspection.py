"""Fetching a schema from a running GraphQL service.

Posts the standard introspection query and hands the result to
:class:`SchemaParser`.
"""

import logging
from typing import Any

import httpx
from graphql import get_introspection_query

from .ir import Schema
from .parser import SchemaParser

logger = logging.getLogger(__name__)


class GraphQLError(Exception):
    """Exception raised for GraphQL errors."""

    def __init__(self, message: str, errors: list[dict[str, Any]]):
        self.message = message
        self.errors = errors
        super().__init__(message)


class IntrospectionClient:
    """Retrieves introspection results over HTTP.

    Examples:
        client = IntrospectionClient(url, authorization="Bearer <token>")
        schema = await client.fetch_schema()
    """

    def __init__(
        self,
        url: str,
        authorization: str | None = None,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            url: GraphQL endpoint URL
            authorization: Value of the Authorization header, if any
            timeout: Request timeout in seconds
            transport: Optional httpx transport, e.g. a MockTransport in tests
        """
        self.url = url
        self.timeout = timeout
        self._headers = {"Content-Type": "application/json"}
        if authorization:
            self._headers["Authorization"] = authorization
        self._transport = transport

    async def fetch_introspection(self) -> dict[str, Any]:
        """Execute the introspection query and return the ``data`` portion.

        Raises:
            GraphQLError: If the response contains errors
            httpx.HTTPStatusError: On a non-success HTTP status
        """
        payload = {"query": get_introspection_query(descriptions=True), "operationName": "IntrospectionQuery"}
        async with httpx.AsyncClient(
            timeout=self.timeout, headers=self._headers, transport=self._transport
        ) as client:
            logger.debug("Fetching introspection from %s", self.url)
            response = await client.post(self.url, json=payload)
            response.raise_for_status()
            result = response.json()

        if result.get("errors"):
            error_messages = "; ".join(e.get("message", str(e)) for e in result["errors"])
            raise GraphQLError(f"GraphQL errors: {error_messages}", result["errors"])

        return result.get("data", {})

    async def fetch_schema(self) -> Schema:
        return SchemaParser().from_introspection(await self.fetch_introspection())
