"""Compose multiple OpenAPI specs into a single MCP server config.

Each API's tools are prefixed with its name to avoid collisions, and its
environment variables (base URL and credentials) are prefixed the same
way, so two APIs using the same auth scheme type never share a variable.
"""

import logging
from typing import Any

from pydantic import BaseModel

from mcp_forge.mapper.models import EnvVar, MCPServerConfig, MCPTool
from mcp_forge.mapper.naming import (
    MAX_SERVER_NAME_LENGTH,
    MAX_TOOL_NAME_LENGTH,
    sanitize_prefix,
    sanitize_server_name,
)
from mcp_forge.mapper.tool_mapper import map_spec_to_server
from mcp_forge.parser.openapi import parse_openapi

logger = logging.getLogger(__name__)

MAX_APIS = 20
COMPOSED_VERSION = "1.0.0"


class APISource(BaseModel):
    """One API to compose."""

    name: str  # short identifier, e.g. "weather"
    spec: str  # OpenAPI document as JSON or YAML text
    prefix: str | None = None  # defaults to name
    disabled_tools: list[str] = []


class ComposeError(BaseModel):
    api: str
    message: str
    details: Any = None


class ComposeResult(BaseModel):
    config: MCPServerConfig
    errors: list[ComposeError] = []
    warnings: list[str] = []
    composed_apis: list[str] = []  # names of the APIs that made it into config

    @property
    def success(self) -> bool:
        return bool(self.composed_apis)


def compose_apis(
    apis: list[APISource],
    server_name: str | None = None,
    server_description: str | None = None,
) -> ComposeResult:
    """Compose several APIs into one MCPServerConfig.

    A failing API is recorded as an error and skipped; the remaining APIs
    are still composed.
    """
    if not apis:
        return _rejected("*", "No APIs provided", server_name)
    if len(apis) > MAX_APIS:
        return _rejected("*", f"Too many APIs (max {MAX_APIS})", server_name)

    prefixes: list[str] = []
    for api in apis:
        prefix = sanitize_prefix(api.prefix or api.name)
        if prefix in prefixes:
            return _rejected(api.name, f'Duplicate API name "{prefix}"', server_name)
        prefixes.append(prefix)

    errors: list[ComposeError] = []
    warnings: list[str] = []
    tools: list[MCPTool] = []
    env_vars: dict[str, EnvVar] = {}
    used_tool_names: set[str] = set()
    composed: list[tuple[str, str]] = []

    for api, prefix in zip(apis, prefixes):
        result = parse_openapi(api.spec)
        if not result.success or result.spec is None:
            logger.debug("Skipping API %s: %s", api.name, result.errors)
            errors.append(
                ComposeError(
                    api=api.name,
                    message="Failed to parse OpenAPI spec",
                    details=[e.model_dump() for e in result.errors],
                )
            )
            continue

        for w in result.warnings:
            warnings.append(f"[{api.name}] {w}")

        config = map_spec_to_server(result.spec)
        env_prefix = prefix.upper()

        for tool in config.tools:
            name = f"{prefix}_{tool.name}"[:MAX_TOOL_NAME_LENGTH]
            if name in used_tool_names:
                warnings.append(f"[{api.name}] Skipped duplicate tool: {name}")
                continue
            used_tool_names.add(name)
            tools.append(_prefix_tool(tool, name, api, env_prefix))

        for env_var in config.env_vars:
            name = f"{env_prefix}_{env_var.name}"
            if name in env_vars:
                continue
            env_vars[name] = env_var.model_copy(
                update={"name": name, "description": f"[{api.name}] {env_var.description}"}
            )

        composed.append((api.name, prefix))

    if not composed:
        return ComposeResult(config=_empty_config(server_name), errors=errors, warnings=warnings)

    if server_name:
        name = sanitize_server_name(server_name, default="composed-server")
    else:
        name = "composed-" + "-".join(p for _, p in composed)
        name = name[:MAX_SERVER_NAME_LENGTH]

    description = server_description or (
        "Composed MCP server combining: " + ", ".join(n for n, _ in composed)
    )

    return ComposeResult(
        config=MCPServerConfig(
            name=name,
            version=COMPOSED_VERSION,
            description=description,
            base_url="",  # each tool carries its own base URL
            tools=tools,
            env_vars=list(env_vars.values()),
        ),
        errors=errors,
        warnings=warnings,
        composed_apis=[n for n, _ in composed],
    )


def _is_disabled(tool: MCPTool, disabled: list[str]) -> bool:
    return any(
        d == tool.name or d.lower() == tool.name or d == tool.source.operation_id
        for d in disabled
    )


def _prefix_tool(tool: MCPTool, name: str, api: APISource, env_prefix: str) -> MCPTool:
    composed = tool.model_copy(deep=True)
    composed.name = name
    composed.description = f"[{api.name}] {tool.description}"
    composed.enabled = tool.enabled and not _is_disabled(tool, api.disabled_tools)
    composed.handler.base_url_env_var = f"{env_prefix}_API_BASE_URL"
    for auth in composed.handler.auth:
        auth.env_var = f"{env_prefix}_{auth.env_var}"
    return composed


def _empty_config(name: str | None) -> MCPServerConfig:
    return MCPServerConfig(
        name=sanitize_server_name(name, default="composed-server") if name else "composed-server",
        version=COMPOSED_VERSION,
        description="Composed MCP server",
        base_url="",
    )


def _rejected(api: str, message: str, server_name: str | None) -> ComposeResult:
    return ComposeResult(
        config=_empty_config(server_name),
        errors=[ComposeError(api=api, message=message)],
    )
