"""Rendering helpers shared by the code generators."""

import re

from mcp_forge.mapper.models import MCPServerConfig, MCPTool
from mcp_forge.mapper.naming import python_identifier

GENERATOR_NAME = "mcp-forge"
TOOL_DESCRIPTION_LIMIT = 200
PARAM_DESCRIPTION_LIMIT = 100

_JS_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def enabled_tools(config: MCPServerConfig) -> list[MCPTool]:
    return config.enabled_tools()


def escape_ts(s: str) -> str:
    """Escape text for a single-quoted or template JS/TS string literal."""
    return (
        s.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("`", "\\`")
        .replace("$", "\\$")
        .replace("\r", "\\r")
        .replace("\n", "\\n")
    )


def ts_str(s: str) -> str:
    return f"'{escape_ts(s)}'"


def js_key(name: str) -> str:
    """Object key as written in JS source: bare when it is an identifier."""
    return name if _JS_IDENTIFIER.match(name) else ts_str(name)


def js_access(obj: str, name: str) -> str:
    return f"{obj}.{name}" if _JS_IDENTIFIER.match(name) else f"{obj}[{ts_str(name)}]"


def escape_docstring(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"')


def header_name(property_name: str) -> str:
    """Recover an HTTP header name from its ``header_`` tool input name."""
    return property_name.removeprefix("header_").replace("_", "-")


def unique_identifiers(names: list[str], reserved: set[str] | frozenset[str] = frozenset()) -> dict[str, str]:
    """Map each name to a distinct Python identifier avoiding ``reserved``."""
    taken = set(reserved)
    result: dict[str, str] = {}
    for name in names:
        base = python_identifier(name)
        ident = base if base not in taken else f"{base}_"
        n = 2
        while ident in taken:
            ident = f"{base}_{n}"
            n += 1
        taken.add(ident)
        result[name] = ident
    return result


def render_env_example(config: MCPServerConfig) -> str:
    lines = [
        f"# {config.name} MCP Server - Environment Variables",
        "# Copy this to .env and fill in your values",
        "",
    ]
    for env_var in config.env_vars:
        lines.append("# " + " ".join(env_var.description.split()))
        lines.append(f"{env_var.name}={env_var.example or ''}")
        lines.append("")
    return "\n".join(lines)


def render_tool_list(config: MCPServerConfig) -> str:
    return "\n".join(f"- **{t.name}** - {t.description}" for t in enabled_tools(config))


def render_env_var_list(config: MCPServerConfig) -> str:
    return "\n".join(
        f"- `{v.name}` - {v.description}{' (required)' if v.required else ''}"
        for v in config.env_vars
    )


def render_desktop_env(config: MCPServerConfig, indent: int) -> str:
    pad = " " * indent
    return ",\n".join(f'{pad}"{v.name}": "your-value-here"' for v in config.env_vars)
