"""
Request logging for the GraphQL endpoint.

Each request gets an id, echoed back in ``X-Request-ID``. For /graphql the
operation is bound into the logging context so resolver logs carry it, and
the variables are logged with passwords and tokens masked.
"""

import json
from collections.abc import Callable
from typing import Any

from fastapi import Request, Response
from graphql import FieldNode, GraphQLSyntaxError, OperationDefinitionNode, parse
from starlette.middleware.base import BaseHTTPMiddleware

from .logging import bind_operation, bind_request, clear_request_context, get_logger, redact

logger = get_logger(__name__)

GRAPHQL_PATH = "/graphql"


async def read_graphql_payload(request: Request) -> dict[str, Any] | None:
    """The ``query``/``operationName``/``variables`` payload of a /graphql request."""
    if request.url.path != GRAPHQL_PATH:
        return None

    if request.method == "GET":
        payload: dict[str, Any] = dict(request.query_params)
        if "variables" in payload:
            try:
                payload["variables"] = json.loads(payload["variables"])
            except json.JSONDecodeError:
                payload["variables"] = None
        return payload

    if request.method == "POST":
        body = await request.body()
        try:
            data = json.loads(body) if body else None
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
        return data if isinstance(data, dict) else None

    return None


def describe_operation(payload: dict[str, Any]) -> str | None:
    """Label a GraphQL payload as ``<type>:<name>``, e.g. ``mutation:addToCart``.

    Anonymous operations are named after their root fields.
    """
    query = payload.get("query")
    if not isinstance(query, str) or not query.strip():
        return None
    try:
        document = parse(query)
    except GraphQLSyntaxError:
        return "invalid"

    wanted = payload.get("operationName")
    for definition in document.definitions:
        if not isinstance(definition, OperationDefinitionNode):
            continue
        if definition.name is not None:
            name = definition.name.value
        else:
            name = ",".join(
                field.name.value
                for field in definition.selection_set.selections
                if isinstance(field, FieldNode)
            )
        if wanted and name != wanted:
            continue
        return f"{definition.operation.value}:{name or 'anonymous'}"
    return None


class LoggingContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = bind_request(request.headers.get("x-request-id"))
        try:
            payload = await read_graphql_payload(request)
            if payload is not None:
                bind_operation(describe_operation(payload))
                variables = payload.get("variables")
                if variables:
                    logger.info("GraphQL variables", variables=redact(variables))

            logger.info(
                "Request started",
                method=request.method,
                path=request.url.path,
                remote_addr=request.client.host if request.client else None,
            )
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            logger.info("Request completed", status_code=response.status_code)
            return response

        except Exception as e:
            logger.error("Request failed", method=request.method, path=request.url.path, error=str(e))
            raise

        finally:
            clear_request_context()
