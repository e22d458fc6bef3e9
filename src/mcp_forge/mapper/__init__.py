from .models import (
    BODY_OBJECT,
    EnvVar,
    MCPInputSchema,
    MCPProperty,
    MCPServerConfig,
    MCPTool,
    ToolAuth,
    ToolHandler,
    ToolSource,
)
from .schema import SchemaKind, classify_schema
from .tool_mapper import map_spec_to_server

__all__ = [
    "BODY_OBJECT",
    "EnvVar",
    "MCPInputSchema",
    "MCPProperty",
    "MCPServerConfig",
    "MCPTool",
    "SchemaKind",
    "ToolAuth",
    "ToolHandler",
    "ToolSource",
    "classify_schema",
    "map_spec_to_server",
]
