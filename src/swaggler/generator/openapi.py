"""OpenAPI 3.0 document generator.

Builds a single-operation OpenAPI document from a ParsedRequest and an
example response body.
"""

import json
import logging
import re
from typing import Any
from urllib.parse import parse_qsl

from pydantic import BaseModel, Field

from swaggler.generator.schema import (
    MAX_DEPTH,
    REF_PREFIX,
    SchemaRegistry,
    capitalize,
    infer_schema,
    openapi_type,
)
from swaggler.parser.base import JSON_CONTENT, ParsedRequest, is_urlencoded

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.0.0"
DEFAULT_INFO = {"title": "API Documentation", "version": "1.0.0"}


class OpenAPIOptions(BaseModel):
    """Caller-supplied options for one generation run."""

    operation_name: str | None = None
    url_template: str | None = None  # /users/{id} or /users/:id
    tags: list[str] = Field(default_factory=list)
    output_path: str | None = None
    append_path: str | None = None
    summary: str | None = None


def normalize_template(template: str) -> str:
    """Rewrite ``:param`` segments as ``{param}`` and ensure a leading slash."""
    template = re.sub(r"(?<=/):(\w+)", r"{\1}", template)
    if not template.startswith("/"):
        template = "/" + template
    return template


def path_parameter_names(path: str) -> list[str]:
    return re.findall(r"\{([^}]+)\}", path)


def resolve_path(request: ParsedRequest, url_template: str | None = None) -> str:
    """Return the documented path: the template if given, else the request path."""
    if url_template:
        return normalize_template(url_template)
    path = re.sub(r"^https?://[^/]+", "", request.url.split("?")[0])
    return normalize_template(path) if path else "/"


def generate_operation_id(method: str, path: str) -> str:
    """Derive an operation id such as ``get_users_id`` from method and path."""
    segments = [re.sub(r"[{}]", "", segment).lstrip(":") for segment in path.split("/")]
    parts = [method.lower()] + [segment for segment in segments if segment]
    return "_".join(parts).strip("_")


def generate_parameters(
    request: ParsedRequest,
    path_name: str,
    url_template: str | None = None,
) -> list[dict[str, Any]]:
    """Build the parameter list: path, then query, then header parameters."""
    template = normalize_template(url_template) if url_template else path_name
    path_params = path_parameter_names(template)

    parameters: list[dict[str, Any]] = [
        {"name": name, "in": "path", "required": True, "schema": {"type": "string"}}
        for name in path_params
    ]

    for key, value in request.query_params.items():
        if key in path_params:
            continue
        schema, example = _query_schema(value)
        parameters.append(
            {"name": key, "in": "query", "required": False, "schema": schema, "example": example}
        )

    for name, value in request.headers.items():
        parameters.append(
            {"name": name, "in": "header", "required": False, "schema": {"type": "string"}, "example": value}
        )

    return parameters


def _query_schema(value: str) -> tuple[dict[str, Any], Any]:
    """Refine a query value's schema when it holds a JSON array or object."""
    try:
        parsed = json.loads(value)
    except ValueError:
        return {"type": "string"}, value
    if isinstance(parsed, list):
        item_type = openapi_type(parsed[0]) if parsed else "string"
        return {"type": "array", "items": {"type": item_type}}, parsed
    if isinstance(parsed, dict):
        return {"type": "object", "properties": {}}, parsed
    return {"type": "string"}, value


def generate_openapi(
    request: ParsedRequest,
    response_example: Any,
    options: OpenAPIOptions | None = None,
    max_depth: int = MAX_DEPTH,
) -> dict[str, Any]:
    """Generate an OpenAPI document describing one operation.

    The response, request body and query parameters each get a top-level
    component schema (``<Prefix>Response``, ``<Prefix>Request``,
    ``<Prefix>Query``); nested objects and array items are registered as
    their own components and referenced.
    """
    options = options or OpenAPIOptions()
    path_name = resolve_path(request, options.url_template)
    operation_id = options.operation_name or generate_operation_id(request.method, path_name)
    prefix = capitalize(operation_id)

    registry = SchemaRegistry()
    response_name = registry.claim(f"{prefix}Response")
    request_name = registry.claim(f"{prefix}Request")
    query_name = registry.claim(f"{prefix}Query")

    response_schema = infer_schema(response_example, prefix, registry, max_depth=max_depth)

    request_schema = None
    if request.has_body:
        body = request.data
        if isinstance(body, str) and is_urlencoded(request.content_type):
            body = dict(parse_qsl(body, keep_blank_values=True))
        request_schema = infer_schema(body, request_name, registry, max_depth=max_depth)

    path_params = path_parameter_names(path_name)
    query = {key: value for key, value in request.query_params.items() if key not in path_params}
    query_schema = infer_schema(query, query_name, registry, max_depth=max_depth) if query else None

    schemas = {response_name: response_schema.to_openapi()}
    if request_schema is not None:
        schemas[request_name] = request_schema.to_openapi()
    if query_schema is not None:
        schemas[query_name] = query_schema.to_openapi()
    schemas.update(registry.to_openapi())

    if options.summary:
        summary = options.summary
    elif options.operation_name:
        summary = capitalize(options.operation_name)
    else:
        summary = f"{request.method} {path_name}"

    operation: dict[str, Any] = {
        "operationId": operation_id,
        "summary": summary,
        "tags": [capitalize(tag) for tag in options.tags],
        "parameters": generate_parameters(request, path_name, options.url_template),
    }
    if request_schema is not None:
        operation["requestBody"] = {
            "required": True,
            "content": {
                request.content_type or JSON_CONTENT: {"schema": {"$ref": f"{REF_PREFIX}{request_name}"}},
            },
        }
    operation["responses"] = {
        "200": {
            "description": "Successful response",
            "content": {
                JSON_CONTENT: {"schema": {"$ref": f"{REF_PREFIX}{response_name}"}},
            },
        },
    }

    logger.info("Generated operation %s (%s %s) with %d schemas", operation_id, request.method, path_name, len(schemas))
    return {
        "openapi": OPENAPI_VERSION,
        "info": dict(DEFAULT_INFO),
        "paths": {path_name: {request.method.lower(): operation}},
        "components": {"schemas": schemas},
    }
