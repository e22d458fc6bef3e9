"""mcp-forge: turn OpenAPI descriptions into MCP servers."""

__version__ = "0.1.0"
