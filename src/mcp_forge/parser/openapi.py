"""OpenAPI 3.x document parser.

Parses an OpenAPI 3.0/3.1 document (JSON or YAML text) into a
``ParsedSpec``. All ``$ref`` pointers and ``allOf`` compositions are
resolved, so downstream stages never see document indirection.
Structural problems are returned as ``ParseError`` entries; nothing is
raised across this boundary.
"""

import logging
from typing import Any

from .base import (
    HTTP_METHODS,
    ParsedEndpoint,
    ParsedParameter,
    ParsedRequestBody,
    ParsedResponse,
    ParsedSpec,
    ParseError,
    ParseResult,
    SecurityRequirement,
    SecurityScheme,
    ServerInfo,
)
from .detect import load_document
from .refs import RefResolver, flatten_all_of

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled API"
DEFAULT_VERSION = "1.0.0"
DEFAULT_BASE_URL = "https://api.example.com"


def parse_openapi(text: str) -> ParseResult:
    """Parse an OpenAPI 3.x document into a ParseResult."""
    try:
        doc = load_document(text)
    except ValueError as e:
        return _failure("", f"Failed to parse input: {e}")

    if not isinstance(doc, dict):
        return _failure("", "Failed to parse input: document root must be a mapping")

    openapi = str(doc.get("openapi") or "")
    if not openapi.startswith("3."):
        if "swagger" in doc:
            message = f'Swagger {doc["swagger"]} documents are not supported. Convert to OpenAPI 3.0 or 3.1 first.'
        else:
            message = f'Unsupported OpenAPI version: "{openapi}". OpenAPI 3.0 or 3.1 is required.'
        return _failure("openapi", message)

    paths = doc.get("paths")
    if not isinstance(paths, dict):
        if paths is None and "paths" in doc:
            paths = {}
        else:
            return _failure("paths", "Missing or invalid 'paths' object")

    resolver = RefResolver(doc)
    warnings: list[str] = []

    info = doc.get("info") or {}
    servers = _parse_servers(doc.get("servers") or [])
    components = doc.get("components") or {}
    security_schemes = _parse_security_schemes(components.get("securitySchemes") or {}, resolver)
    schemas = {
        str(name): _resolve_schema(schema, resolver)
        for name, schema in (components.get("schemas") or {}).items()
    }

    endpoints: list[ParsedEndpoint] = []
    for path, path_item in paths.items():
        path_item = resolver.resolve(path_item)
        if not isinstance(path_item, dict):
            continue
        path_params = _parse_parameters(path_item.get("parameters") or [], resolver)
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue
            endpoints.append(
                _parse_endpoint(str(path), method, operation, path_params, resolver, doc)
            )

    if not endpoints:
        warnings.append("No endpoints found in the spec. The generated MCP server will have no tools.")

    for message in resolver.warnings:
        if message not in warnings:
            warnings.append(message)

    spec = ParsedSpec(
        title=str(info.get("title") or DEFAULT_TITLE),
        description=str(info.get("description") or ""),
        version=str(info.get("version") or DEFAULT_VERSION),
        base_url=servers[0].url if servers and servers[0].url else DEFAULT_BASE_URL,
        servers=servers,
        endpoints=endpoints,
        security_schemes=security_schemes,
        schemas=schemas,
    )
    logger.debug("Parsed %s: %d endpoints, %d warnings", spec.title, len(endpoints), len(warnings))
    return ParseResult(success=True, spec=spec, warnings=warnings)


def _failure(path: str, message: str) -> ParseResult:
    return ParseResult(success=False, errors=[ParseError(path=path, message=message)])


def _opt_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _resolve_schema(schema: Any, resolver: RefResolver) -> dict[str, Any]:
    if not isinstance(schema, dict):
        return {"type": "object"}
    resolved = flatten_all_of(resolver.resolve(schema))
    return resolved if isinstance(resolved, dict) else {"type": "object"}


def _parse_servers(servers: list) -> list[ServerInfo]:
    result = []
    for s in servers:
        if not isinstance(s, dict):
            continue
        result.append(ServerInfo(url=str(s.get("url") or ""), description=_opt_str(s.get("description"))))
    return result


def _parse_security_schemes(raw: dict, resolver: RefResolver) -> list[SecurityScheme]:
    schemes = []
    for name, definition in raw.items():
        d = resolver.resolve(definition)
        if not isinstance(d, dict):
            continue
        scheme_type = str(d.get("type") or "")
        fields: dict[str, Any] = {"name": str(name), "type": scheme_type, "description": _opt_str(d.get("description"))}
        if scheme_type == "http":
            fields["scheme"] = str(d.get("scheme") or "").lower() or None
            fields["bearer_format"] = _opt_str(d.get("bearerFormat"))
        elif scheme_type == "apiKey":
            fields["location"] = _opt_str(d.get("in"))
            fields["param_name"] = _opt_str(d.get("name"))
        elif scheme_type == "oauth2":
            fields["flows"] = d.get("flows") if isinstance(d.get("flows"), dict) else None
        elif scheme_type == "openIdConnect":
            fields["open_id_connect_url"] = _opt_str(d.get("openIdConnectUrl"))
        schemes.append(SecurityScheme(**fields))
    return schemes


def _parameter_schema(param: dict, resolver: RefResolver) -> dict[str, Any]:
    if "schema" in param:
        return _resolve_schema(param["schema"], resolver)
    # OpenAPI 3 allows `content` instead of `schema`; use the first media type.
    content = param.get("content")
    if isinstance(content, dict) and content:
        media = next(iter(content.values())) or {}
        if "schema" in media:
            return _resolve_schema(media["schema"], resolver)
    return {"type": "string"}


def _parse_parameters(raw: list, resolver: RefResolver) -> list[ParsedParameter]:
    params = []
    for p in raw:
        p = resolver.resolve(p)
        if not isinstance(p, dict) or not p.get("name"):
            continue
        location = str(p.get("in") or "query")
        params.append(
            ParsedParameter(
                name=str(p["name"]),
                location=location,
                description=_opt_str(p.get("description")),
                required=True if location == "path" else bool(p.get("required", False)),
                schema_object=_parameter_schema(p, resolver),
                example=p.get("example"),
            )
        )
    return params


def _parse_request_body(raw: Any, resolver: RefResolver) -> ParsedRequestBody | None:
    body = resolver.resolve(raw)
    if not isinstance(body, dict):
        return None
    content = body.get("content") or {}
    content_type = next(iter(content), "application/json")
    media = content.get(content_type) or {}
    return ParsedRequestBody(
        description=_opt_str(body.get("description")),
        required=bool(body.get("required", False)),
        content_type=str(content_type),
        schema_object=_resolve_schema(media.get("schema") or {}, resolver),
    )


def _parse_responses(raw: dict, resolver: RefResolver) -> dict[str, ParsedResponse]:
    responses = {}
    for code, resp in raw.items():
        resp = resolver.resolve(resp)
        if not isinstance(resp, dict):
            continue
        content = resp.get("content") or {}
        content_type = _opt_str(next(iter(content), None))
        schema = None
        if content_type is not None:
            schema = _resolve_schema((content.get(content_type) or {}).get("schema") or {}, resolver)
        responses[str(code)] = ParsedResponse(
            status_code=str(code),
            description=str(resp.get("description") or ""),
            content_type=content_type,
            schema_object=schema,
        )
    return responses


def _parse_security(requirements: Any) -> list[SecurityRequirement]:
    result = []
    for req in requirements or []:
        if not isinstance(req, dict):
            continue
        for scheme_name, scopes in req.items():
            result.append(SecurityRequirement(scheme_name=str(scheme_name), scopes=list(scopes or [])))
    return result


def _merge_parameters(
    path_params: list[ParsedParameter], op_params: list[ParsedParameter]
) -> list[ParsedParameter]:
    """Merge path-level and operation-level parameters keyed by (in, name)."""
    merged: dict[tuple[str, str], ParsedParameter] = {}
    for p in path_params + op_params:
        merged[(p.location, p.name)] = p
    return list(merged.values())


def _parse_endpoint(
    path: str,
    method: str,
    operation: dict,
    path_params: list[ParsedParameter],
    resolver: RefResolver,
    doc: dict,
) -> ParsedEndpoint:
    op_params = _parse_parameters(operation.get("parameters") or [], resolver)

    request_body = None
    if operation.get("requestBody"):
        request_body = _parse_request_body(operation["requestBody"], resolver)

    security = operation["security"] if "security" in operation else doc.get("security")

    return ParsedEndpoint(
        path=path,
        method=method,
        operation_id=_opt_str(operation.get("operationId")),
        summary=_opt_str(operation.get("summary")),
        description=_opt_str(operation.get("description")),
        tags=[str(t) for t in operation.get("tags") or []],
        parameters=_merge_parameters(path_params, op_params),
        request_body=request_body,
        responses=_parse_responses(operation.get("responses") or {}, resolver),
        security=_parse_security(security),
        deprecated=bool(operation.get("deprecated", False)),
    )
