"""Intermediate representation: an MCP server described as a set of tools.

``MCPServerConfig`` is the contract shared by the composer, the differ,
the code generators and anything persisting server definitions. Its JSON
form (``to_json_dict``) uses camelCase keys.
"""

from typing import Any

from mcp_forge.parser.base import CamelModel, SecurityScheme

# Sentinel body_param: rebuild the request body from the flattened inputs.
BODY_OBJECT = "__body_object__"
DEFAULT_BASE_URL_ENV_VAR = "API_BASE_URL"


class MCPProperty(CamelModel):
    """A JSON-Schema-like description of one tool input."""

    type: str
    description: str | None = None
    enum: list[Any] | None = None
    default: Any = None
    items: "MCPProperty | None" = None
    properties: "dict[str, MCPProperty] | None" = None
    required: list[str] | None = None
    minimum: int | float | None = None
    maximum: int | float | None = None
    format: str | None = None


MCPProperty.model_rebuild()


class MCPInputSchema(CamelModel):
    type: str = "object"
    properties: dict[str, MCPProperty] = {}
    required: list[str] = []


class ToolAuth(CamelModel):
    scheme: SecurityScheme
    env_var: str


class ToolHandler(CamelModel):
    """How a tool calls the underlying API."""

    method: str  # uppercase
    path: str  # with {param} placeholders
    base_url: str
    base_url_env_var: str | None = None
    content_type: str = "application/json"
    path_params: list[str] = []
    query_params: list[str] = []
    header_params: list[str] = []
    body_param: str | None = None  # None, "body" or BODY_OBJECT
    auth: list[ToolAuth] = []

    @property
    def effective_base_url_env_var(self) -> str:
        return self.base_url_env_var or DEFAULT_BASE_URL_ENV_VAR


class ToolSource(CamelModel):
    path: str
    method: str
    operation_id: str | None = None


class MCPTool(CamelModel):
    name: str
    description: str
    input_schema: MCPInputSchema
    handler: ToolHandler
    source: ToolSource
    enabled: bool = True


class EnvVar(CamelModel):
    name: str
    description: str
    required: bool = True
    example: str | None = None


class MCPServerConfig(CamelModel):
    name: str
    version: str
    description: str
    base_url: str
    tools: list[MCPTool] = []
    env_vars: list[EnvVar] = []

    def enabled_tools(self) -> list[MCPTool]:
        return [t for t in self.tools if t.enabled]

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
