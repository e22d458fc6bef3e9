"""Map a parsed OpenAPI spec to an MCP server configuration.

Each non-deprecated endpoint becomes one tool with a flat input schema
and an HTTP handler describing how to call the upstream API.
"""

import logging
import re

from mcp_forge.parser.base import ParsedEndpoint, ParsedSpec

from .auth import describe_auth_env_var, map_auth
from .models import (
    BODY_OBJECT,
    DEFAULT_BASE_URL_ENV_VAR,
    EnvVar,
    MCPInputSchema,
    MCPProperty,
    MCPServerConfig,
    MCPTool,
    ToolHandler,
    ToolSource,
)
from .naming import (
    build_tool_name,
    deduplicate_tool_names,
    method_to_human_verb,
    sanitize_server_name,
)
from .schema import SchemaKind, classify_schema, schema_to_property

logger = logging.getLogger(__name__)


def map_spec_to_server(spec: ParsedSpec) -> MCPServerConfig:
    """Map a ParsedSpec to an MCPServerConfig."""
    tools: list[MCPTool] = []
    env_vars: dict[str, EnvVar] = {
        DEFAULT_BASE_URL_ENV_VAR: EnvVar(
            name=DEFAULT_BASE_URL_ENV_VAR,
            description=f"Base URL for the {spec.title} API",
            required=True,
            example=spec.base_url,
        )
    }

    for endpoint in spec.endpoints:
        if endpoint.deprecated:
            logger.debug("Skipping deprecated endpoint %s %s", endpoint.method.upper(), endpoint.path)
            continue

        tool = map_endpoint_to_tool(endpoint, spec)
        tools.append(tool)

        for auth in tool.handler.auth:
            if auth.env_var not in env_vars:
                env_vars[auth.env_var] = EnvVar(
                    name=auth.env_var,
                    description=describe_auth_env_var(auth.scheme),
                    required=True,
                )

    names = deduplicate_tool_names([t.name for t in tools])
    for tool, name in zip(tools, names):
        if tool.name != name:
            logger.debug("Renamed duplicate tool %s to %s", tool.name, name)
            tool.name = name

    return MCPServerConfig(
        name=sanitize_server_name(spec.title),
        version=spec.version,
        description=spec.description or f"MCP server for {spec.title}",
        base_url=spec.base_url,
        tools=tools,
        env_vars=list(env_vars.values()),
    )


def map_endpoint_to_tool(endpoint: ParsedEndpoint, spec: ParsedSpec) -> MCPTool:
    input_schema, handler = _build_handler(endpoint, spec)
    return MCPTool(
        name=build_tool_name(endpoint.method, endpoint.path, endpoint.operation_id),
        description=build_tool_description(endpoint),
        input_schema=input_schema,
        handler=handler,
        source=ToolSource(
            path=endpoint.path,
            method=endpoint.method,
            operation_id=endpoint.operation_id,
        ),
        enabled=True,
    )


def build_tool_description(endpoint: ParsedEndpoint) -> str:
    if endpoint.summary and endpoint.description:
        return f"{endpoint.summary}. {endpoint.description}"
    if endpoint.summary:
        return endpoint.summary
    if endpoint.description:
        return endpoint.description

    literal = [p for p in endpoint.path.split("/") if p and not p.startswith("{")]
    resource = literal[-1] if literal else "resource"
    return f"{method_to_human_verb(endpoint.method)} {resource}"


def header_property_name(name: str) -> str:
    return "header_" + re.sub(r"[^a-z0-9_]", "_", name.lower().replace("-", "_"))


def _build_handler(endpoint: ParsedEndpoint, spec: ParsedSpec) -> tuple[MCPInputSchema, ToolHandler]:
    properties: dict[str, MCPProperty] = {}
    required: list[str] = []
    path_params: list[str] = []
    query_params: list[str] = []
    header_params: list[str] = []

    for param in endpoint.parameters:
        if param.location == "cookie":
            continue
        prop_name = header_property_name(param.name) if param.location == "header" else param.name
        properties[prop_name] = schema_to_property(param.schema_object, param.description)
        if param.required and prop_name not in required:
            required.append(prop_name)

        if param.location == "path":
            path_params.append(param.name)
        elif param.location == "query":
            query_params.append(param.name)
        elif param.location == "header":
            header_params.append(prop_name)

    body_param = None
    body = endpoint.request_body
    if body is not None:
        schema = body.schema_object
        if classify_schema(schema) is SchemaKind.OBJECT and schema.get("properties"):
            # Body fields are hoisted into the tool inputs; a name shared with
            # a parameter is overwritten by the body field.
            for name, sub in schema["properties"].items():
                properties[str(name)] = schema_to_property(sub if isinstance(sub, dict) else {})
            for name in schema.get("required", []):
                if name not in required:
                    required.append(name)
            body_param = BODY_OBJECT
        else:
            properties["body"] = schema_to_property(schema, body.description)
            if body.required and "body" not in required:
                required.append("body")
            body_param = "body"

    handler = ToolHandler(
        method=endpoint.method.upper(),
        path=endpoint.path,
        base_url=spec.base_url,
        content_type=body.content_type if body is not None else "application/json",
        path_params=path_params,
        query_params=query_params,
        header_params=header_params,
        body_param=body_param,
        auth=map_auth(endpoint.security, spec.security_schemes),
    )
    return MCPInputSchema(properties=properties, required=required), handler
