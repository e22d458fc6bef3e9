"""Data models for a parsed OpenAPI document.

The parser converts raw JSON/YAML into these models. Schemas are kept
as plain dicts, already free of ``$ref`` and ``allOf``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

HTTP_METHODS = ("get", "post", "put", "patch", "delete", "head", "options")


class CamelModel(BaseModel):
    """Base model whose JSON shape uses camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ServerInfo(CamelModel):
    url: str
    description: str | None = None


class SecurityScheme(CamelModel):
    """A named entry of ``components.securitySchemes``."""

    name: str
    type: str  # apiKey / http / oauth2 / openIdConnect
    scheme: str | None = None  # bearer / basic / digest ... (http only)
    bearer_format: str | None = None
    location: str | None = Field(default=None, alias="in")  # query / header / cookie (apiKey only)
    param_name: str | None = None
    flows: dict[str, Any] | None = None
    open_id_connect_url: str | None = None
    description: str | None = None


class SecurityRequirement(CamelModel):
    scheme_name: str
    scopes: list[str] = []


class ParsedParameter(CamelModel):
    """A single operation parameter (query, path, header, or cookie)."""

    name: str
    location: str = Field(default="query", alias="in")
    description: str | None = None
    required: bool = False
    schema_object: dict[str, Any] = Field(default_factory=lambda: {"type": "string"}, alias="schema")
    example: Any = None


class ParsedRequestBody(CamelModel):
    description: str | None = None
    required: bool = False
    content_type: str = "application/json"
    schema_object: dict[str, Any] = Field(default_factory=dict, alias="schema")


class ParsedResponse(CamelModel):
    status_code: str
    description: str = ""
    content_type: str | None = None
    schema_object: dict[str, Any] | None = Field(default=None, alias="schema")


class ParsedEndpoint(CamelModel):
    """One HTTP operation. ``path`` keeps its ``{param}`` placeholders."""

    path: str
    method: str  # lowercase: get / post / put / patch / delete / head / options
    operation_id: str | None = None
    summary: str | None = None
    description: str | None = None
    tags: list[str] = []
    parameters: list[ParsedParameter] = []
    request_body: ParsedRequestBody | None = None
    responses: dict[str, ParsedResponse] = {}
    security: list[SecurityRequirement] = []
    deprecated: bool = False


class ParsedSpec(CamelModel):
    """A fully resolved OpenAPI document."""

    title: str
    description: str = ""
    version: str = "1.0.0"
    base_url: str
    servers: list[ServerInfo] = []
    endpoints: list[ParsedEndpoint] = []
    security_schemes: list[SecurityScheme] = []
    schemas: dict[str, dict[str, Any]] = {}


class ParseError(BaseModel):
    """A structural problem that made the document unusable."""

    path: str
    message: str


class ParseResult(BaseModel):
    success: bool
    spec: ParsedSpec | None = None
    errors: list[ParseError] = []
    warnings: list[str] = []
