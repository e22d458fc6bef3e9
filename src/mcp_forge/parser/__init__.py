from .base import (
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
from .openapi import parse_openapi

__all__ = [
    "ParsedEndpoint",
    "ParsedParameter",
    "ParsedRequestBody",
    "ParsedResponse",
    "ParsedSpec",
    "ParseError",
    "ParseResult",
    "SecurityRequirement",
    "SecurityScheme",
    "ServerInfo",
    "parse_openapi",
]
