"""Python code generator: MCPServerConfig -> FastMCP server project."""

import json

from mcp_forge.mapper.models import BODY_OBJECT, MCPProperty, MCPServerConfig, MCPTool

from .common import (
    GENERATOR_NAME,
    enabled_tools,
    escape_docstring,
    header_name,
    render_desktop_env,
    render_env_example,
    render_env_var_list,
    render_tool_list,
    unique_identifiers,
)

# Module-level names in the generated server.py that tool functions and
# parameters must not shadow.
_RESERVED_NAMES = frozenset(
    {
        "os",
        "json",
        "quote",
        "httpx",
        "mcp",
        "main",
        "Any",
        "Literal",
        "FastMCP",
        "REQUEST_TIMEOUT",
        "_env",
        "_build_url",
        "_compact",
        "_request",
    }
)

_PY_TYPES = {
    "string": "str",
    "number": "float",
    "boolean": "bool",
    "array": "list",
    "object": "dict",
}


class PythonGenerator:
    """Generates a Python MCP server built on FastMCP and httpx."""

    language = "python"

    def generate(self, config: MCPServerConfig) -> dict[str, str]:
        """Generate the project files.

        Returns a dict of {filename: content}. Only enabled tools are emitted.
        """
        return {
            "pyproject.toml": self._render_pyproject(config),
            "server.py": self._render_server(config),
            ".env.example": render_env_example(config),
            "Dockerfile": self._render_dockerfile(),
            "README.md": self._render_readme(config),
        }

    def _render_pyproject(self, config: MCPServerConfig) -> str:
        return f"""[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "mcp-{config.name}"
version = {json.dumps(config.version)}
description = {json.dumps(config.description)}
requires-python = ">=3.10"
dependencies = [
    "mcp[cli]>=1.2.0",
    "httpx>=0.27",
]

[project.scripts]
mcp-{config.name} = "server:main"

[tool.setuptools]
py-modules = ["server"]
"""

    def _render_server(self, config: MCPServerConfig) -> str:
        tools = enabled_tools(config)
        function_names = unique_identifiers([t.name for t in tools], _RESERVED_NAMES)
        rendered = "\n\n".join(self._render_tool(t, function_names[t.name]) for t in tools)
        return f'''"""{escape_docstring(config.name)} MCP server.

Generated by {GENERATOR_NAME}.
"""

import json
import os
from typing import Any, Literal
from urllib.parse import quote

import httpx
from mcp.server.fastmcp import FastMCP

REQUEST_TIMEOUT = 30.0

mcp = FastMCP({json.dumps(config.name)})


def _env(name: str) -> str:
    return os.environ.get(name, "")


def _build_url(env_var: str, default: str, path: str, path_params: dict[str, Any]) -> str:
    base_url = os.environ.get(env_var) or default
    for name, value in path_params.items():
        path = path.replace("{{" + name + "}}", quote(str(value), safe=""))
    return base_url.rstrip("/") + path


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {{k: v for k, v in values.items() if v is not None}}


async def _request(
    method: str,
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, Any] | None = None,
    body: Any = None,
    form: bool = False,
) -> str:
    request_headers = {{"Accept": "application/json"}}
    request_headers.update({{k: str(v) for k, v in _compact(headers or {{}}).items()}})
    query = {{k: str(v).lower() if isinstance(v, bool) else v for k, v in _compact(params or {{}}).items()}}

    kwargs: dict[str, Any] = {{}}
    if body is not None:
        kwargs["data" if form else "json"] = body

    async with httpx.AsyncClient() as client:
        response = await client.request(
            method,
            url,
            params=query,
            headers=request_headers,
            timeout=REQUEST_TIMEOUT,
            **kwargs,
        )

    if response.is_error:
        raise RuntimeError(
            f"API request failed: {{response.status_code}} {{response.reason_phrase}} - {{response.text}}"
        )
    if "application/json" in response.headers.get("content-type", ""):
        return json.dumps(response.json(), indent=2)
    return response.text


{rendered}


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
'''

    def _render_tool(self, tool: MCPTool, function_name: str) -> str:
        h = tool.handler
        schema = tool.input_schema
        idents = unique_identifiers(list(schema.properties), _RESERVED_NAMES | {function_name})

        required = [n for n in schema.properties if n in schema.required]
        optional = [n for n in schema.properties if n not in schema.required]
        signature = [f"{idents[n]}: {self._py_type(schema.properties[n])}" for n in required]
        signature += [f"{idents[n]}: {self._py_type(schema.properties[n])} | None = None" for n in optional]

        decorator = "@mcp.tool()" if function_name == tool.name else f"@mcp.tool(name={json.dumps(tool.name)})"
        args = [json.dumps(h.method.upper())]

        path_values = ", ".join(f"{json.dumps(n)}: {idents[n]}" for n in h.path_params if n in idents)
        args.append(
            f"_build_url({json.dumps(h.effective_base_url_env_var)}, {json.dumps(h.base_url)}, "
            f"{json.dumps(h.path)}, {{{path_values}}})"
        )

        query = [f"{json.dumps(n)}: {idents[n]}" for n in h.query_params if n in idents]
        headers = [f"{json.dumps(header_name(n))}: {idents[n]}" for n in h.header_params if n in idents]
        for key, value, placement in self._auth_entries(tool):
            (query if placement == "query" else headers).append(f"{json.dumps(key)}: {value}")
        if query:
            args.append(f"params={{{', '.join(query)}}}")
        if headers:
            args.append(f"headers={{{', '.join(headers)}}}")

        if h.body_param == BODY_OBJECT:
            claimed = {*h.path_params, *h.query_params, *h.header_params}
            fields = ", ".join(f"{json.dumps(n)}: {idents[n]}" for n in schema.properties if n not in claimed)
            args.append(f"body=_compact({{{fields}}})")
        elif h.body_param and h.body_param in idents:
            args.append(f"body={idents[h.body_param]}")
        if h.body_param and h.content_type == "application/x-www-form-urlencoded":
            args.append("form=True")

        call = ",\n        ".join(args)
        return f'''{decorator}
async def {function_name}({", ".join(signature)}) -> str:
    """{escape_docstring(tool.description)}"""
    return await _request(
        {call},
    )'''

    def _py_type(self, prop: MCPProperty) -> str:
        if prop.enum and all(isinstance(v, (str, int, bool)) for v in prop.enum):
            return f"Literal[{', '.join(repr(v) for v in prop.enum)}]"
        return _PY_TYPES.get(prop.type, "str")

    def _auth_entries(self, tool: MCPTool) -> list[tuple[str, str, str]]:
        """(name, value expression, "header" | "query") for each auth scheme.

        The first scheme that sets a given header or query name wins.
        """
        entries: dict[tuple[str, str], tuple[str, str, str]] = {}
        for auth in tool.handler.auth:
            scheme = auth.scheme
            env = f"_env({json.dumps(auth.env_var)})"
            if scheme.type in ("oauth2", "openIdConnect") or (scheme.type == "http" and scheme.scheme == "bearer"):
                entry = ("Authorization", f'"Bearer " + {env}', "header")
            elif scheme.type == "http" and scheme.scheme == "basic":
                entry = ("Authorization", f'"Basic " + {env}', "header")
            elif scheme.type == "http":
                entry = ("Authorization", env, "header")
            elif scheme.type == "apiKey" and scheme.location == "query":
                entry = (scheme.param_name or "api_key", env, "query")
            elif scheme.type == "apiKey" and scheme.location == "cookie":
                cookie = scheme.param_name or scheme.name
                entry = ("Cookie", f"{json.dumps(cookie + '=')} + {env}", "header")
            elif scheme.type == "apiKey":
                entry = (scheme.param_name or "X-API-Key", env, "header")
            else:
                continue
            key = entry[0] if entry[2] == "query" else entry[0].lower()
            entries.setdefault((entry[2], key), entry)
        return list(entries.values())

    def _render_dockerfile(self) -> str:
        return """FROM python:3.12-slim
WORKDIR /app
COPY pyproject.toml server.py ./
RUN pip install --no-cache-dir .
CMD ["python", "server.py"]
"""

    def _render_readme(self, config: MCPServerConfig) -> str:
        return f"""# {config.name} MCP Server

{config.description}

> Generated by {GENERATOR_NAME}

## Quick Start

```bash
pip install -e .
cp .env.example .env
# Edit .env with your API credentials
python server.py
```

## Tools

{render_tool_list(config)}

## Environment Variables

{render_env_var_list(config)}

## Usage with Claude Desktop

Add to your `claude_desktop_config.json`:

```json
{{
  "mcpServers": {{
    "{config.name}": {{
      "command": "python",
      "args": ["server.py"],
      "env": {{
{render_desktop_env(config, 8)}
      }}
    }}
  }}
}}
```

## Docker

```bash
docker build -t mcp-{config.name} .
docker run -i --env-file .env mcp-{config.name}
```
"""
