"""TypeScript code generator: MCPServerConfig -> MCP SDK server project."""

import json

from mcp_forge.mapper.models import BODY_OBJECT, MCPInputSchema, MCPProperty, MCPServerConfig, MCPTool

from .common import (
    GENERATOR_NAME,
    PARAM_DESCRIPTION_LIMIT,
    TOOL_DESCRIPTION_LIMIT,
    enabled_tools,
    escape_ts,
    header_name,
    js_access,
    js_key,
    render_desktop_env,
    render_env_example,
    render_env_var_list,
    render_tool_list,
    ts_str,
)


def _env(name: str) -> str:
    """Bracket access, since env var names may start with a digit."""
    return f"process.env[{ts_str(name)}]"


class TypeScriptGenerator:
    """Generates a Node/TypeScript MCP server using the official SDK and zod."""

    language = "typescript"

    def generate(self, config: MCPServerConfig) -> dict[str, str]:
        """Generate the project files.

        Returns a dict of {filename: content}. Only enabled tools are emitted.
        """
        return {
            "package.json": self._render_package_json(config),
            "tsconfig.json": self._render_tsconfig(),
            "src/index.ts": self._render_index(config),
            "src/tools.ts": self._render_tools(config),
            "src/http-client.ts": self._render_http_client(),
            ".env.example": render_env_example(config),
            "Dockerfile": self._render_dockerfile(),
            "README.md": self._render_readme(config),
        }

    def _render_package_json(self, config: MCPServerConfig) -> str:
        pkg = {
            "name": f"mcp-{config.name}",
            "version": config.version,
            "description": config.description,
            "type": "module",
            "main": "dist/index.js",
            "scripts": {
                "build": "tsc",
                "start": "node dist/index.js",
                "dev": "tsx src/index.ts",
            },
            "dependencies": {
                "@modelcontextprotocol/sdk": "^1.0.0",
                "zod": "^3.23.0",
            },
            "devDependencies": {
                "typescript": "^5.7.0",
                "@types/node": "^22.0.0",
                "tsx": "^4.19.0",
            },
        }
        return json.dumps(pkg, indent=2) + "\n"

    def _render_tsconfig(self) -> str:
        tsconfig = {
            "compilerOptions": {
                "target": "ES2022",
                "module": "NodeNext",
                "moduleResolution": "NodeNext",
                "outDir": "./dist",
                "rootDir": "./src",
                "strict": True,
                "esModuleInterop": True,
                "skipLibCheck": True,
                "declaration": True,
            },
            "include": ["src/**/*"],
        }
        return json.dumps(tsconfig, indent=2) + "\n"

    def _render_index(self, config: MCPServerConfig) -> str:
        name = escape_ts(config.name)
        return f"""import {{ McpServer }} from '@modelcontextprotocol/sdk/server/mcp.js';
import {{ StdioServerTransport }} from '@modelcontextprotocol/sdk/server/stdio.js';
import {{ registerTools }} from './tools.js';

const server = new McpServer({{
  name: '{name}',
  version: '{escape_ts(config.version)}',
}});

registerTools(server);

async function main() {{
  const transport = new StdioServerTransport();
  await server.connect(transport);
  console.error('{name} MCP server running on stdio');
}}

main().catch((error) => {{
  console.error('Fatal error:', error);
  process.exit(1);
}});
"""

    def _render_tools(self, config: MCPServerConfig) -> str:
        registrations = "\n\n".join(self._render_tool(t) for t in enabled_tools(config))
        return f"""import {{ McpServer }} from '@modelcontextprotocol/sdk/server/mcp.js';
import {{ z }} from 'zod';
import {{ apiRequest }} from './http-client.js';

export function registerTools(server: McpServer) {{
{registrations}
}}
"""

    def _render_tool(self, tool: MCPTool) -> str:
        return f"""  // {tool.source.method.upper()} {tool.source.path}
  server.tool(
    {ts_str(tool.name)},
    {ts_str(tool.description[:TOOL_DESCRIPTION_LIMIT])},
    {{
{self._render_zod_shape(tool.input_schema)}
    }},
    async (params) => {{
{self._render_handler_body(tool)}
    }}
  );"""

    def _render_zod_shape(self, schema: MCPInputSchema) -> str:
        lines = []
        for name, prop in schema.properties.items():
            zod = self._zod_type(prop)
            if prop.description:
                zod += f".describe({ts_str(prop.description[:PARAM_DESCRIPTION_LIMIT])})"
            if name not in schema.required:
                zod += ".optional()"
            lines.append(f"      {js_key(name)}: {zod},")
        return "\n".join(lines)

    def _zod_type(self, prop: MCPProperty) -> str:
        if prop.enum:
            if all(isinstance(v, str) for v in prop.enum):
                return f"z.enum([{', '.join(ts_str(v) for v in prop.enum)}])"
            literals = [f"z.literal({self._ts_literal(v)})" for v in prop.enum]
            if len(literals) == 1:
                return literals[0]
            return f"z.union([{', '.join(literals)}])"
        if prop.type == "string":
            return "z.string()"
        if prop.type == "number":
            return "z.number()"
        if prop.type == "boolean":
            return "z.boolean()"
        if prop.type == "array":
            if prop.items is not None:
                return f"z.array({self._zod_type(prop.items)})"
            return "z.array(z.unknown())"
        if prop.type == "object":
            return "z.object({}).passthrough()"
        return "z.string()"

    def _ts_literal(self, value: object) -> str:
        if isinstance(value, str):
            return ts_str(value)
        if value is None:
            return "null"
        return json.dumps(value)

    def _render_handler_body(self, tool: MCPTool) -> str:
        h = tool.handler
        lines = []

        path = escape_ts(h.path)
        for name in h.path_params:
            path = path.replace(
                "{" + escape_ts(name) + "}",
                "${encodeURIComponent(String(" + js_access("params", name) + "))}",
            )

        lines.append(
            f"      const baseUrl = {_env(h.effective_base_url_env_var)} || {ts_str(h.base_url)};"
        )
        lines.append(f"      const url = `${{baseUrl}}{path}`;")

        query_auth = [a for a in h.auth if a.scheme.type == "apiKey" and a.scheme.location == "query"]
        if h.query_params or query_auth:
            lines.append("      const queryParams = new URLSearchParams();")
            for qp in h.query_params:
                value = js_access("params", qp)
                lines.append(
                    f"      if ({value} !== undefined) queryParams.set({ts_str(qp)}, String({value}));"
                )
            for auth in query_auth:
                key = auth.scheme.param_name or "api_key"
                lines.append(
                    f"      queryParams.set({ts_str(key)}, {_env(auth.env_var)} || '');"
                )
            lines.append("      const fullUrl = queryParams.toString() ? `${url}?${queryParams}` : url;")
        else:
            lines.append("      const fullUrl = url;")

        body_expr = None
        if h.body_param == BODY_OBJECT:
            excluded = ", ".join(ts_str(n) for n in [*h.path_params, *h.query_params, *h.header_params])
            lines.append("      const excluded: string[] = [" + excluded + "];")
            lines.append("      const body = Object.fromEntries(")
            lines.append(
                "        Object.entries(params).filter(([k, v]) => !excluded.includes(k) && v !== undefined)"
            )
            lines.append("      );")
            body_expr = "body"
        elif h.body_param:
            body_expr = js_access("params", h.body_param)

        headers = self._render_auth_headers(tool)
        for hp in h.header_params:
            value = js_access("params", hp)
            headers.append(
                f"        ...({value} !== undefined ? {{ {ts_str(header_name(hp))}: String({value}) }} : {{}})"
            )

        lines.append("      const result = await apiRequest({")
        lines.append(f"        method: {ts_str(h.method.upper())},")
        lines.append("        url: fullUrl,")
        if body_expr:
            lines.append(f"        body: {body_expr},")
        if headers:
            lines.append("        headers: {")
            lines.append(",\n".join(headers))
            lines.append("        },")
        lines.append("      });")
        lines.append("")
        lines.append("      return {")
        lines.append("        content: [{")
        lines.append("          type: 'text' as const,")
        lines.append("          text: typeof result === 'string' ? result : JSON.stringify(result, null, 2),")
        lines.append("        }],")
        lines.append("      };")
        return "\n".join(lines)

    def _render_auth_headers(self, tool: MCPTool) -> list[str]:
        """One header entry per header name; the first scheme that sets it wins."""
        entries: dict[str, tuple[str, str]] = {}
        for auth in tool.handler.auth:
            scheme = auth.scheme
            env = f"{_env(auth.env_var)} || ''"
            if scheme.type in ("oauth2", "openIdConnect") or (scheme.type == "http" and scheme.scheme == "bearer"):
                key, value = "Authorization", f"`Bearer ${{{env}}}`"
            elif scheme.type == "http" and scheme.scheme == "basic":
                key, value = "Authorization", f"`Basic ${{{env}}}`"
            elif scheme.type == "http":
                key, value = "Authorization", env
            elif scheme.type == "apiKey" and scheme.location == "cookie":
                cookie = escape_ts(scheme.param_name or scheme.name)
                key, value = "Cookie", f"`{cookie}=${{{env}}}`"
            elif scheme.type == "apiKey" and scheme.location != "query":
                key, value = scheme.param_name or "X-API-Key", env
            else:
                continue
            entries.setdefault(key.lower(), (key, value))
        return [f"        {ts_str(key)}: {value}" for key, value in entries.values()]

    def _render_http_client(self) -> str:
        return """interface RequestOptions {
  method: string;
  url: string;
  body?: unknown;
  headers?: Record<string, string>;
}

export async function apiRequest(options: RequestOptions): Promise<unknown> {
  const headers: Record<string, string> = {
    'Content-Type': 'application/json',
    'Accept': 'application/json',
    ...options.headers,
  };

  const response = await fetch(options.url, {
    method: options.method,
    headers,
    body: options.body !== undefined ? JSON.stringify(options.body) : undefined,
  });

  const contentType = response.headers.get('content-type') || '';

  if (!response.ok) {
    const errorText = await response.text();
    throw new Error(`API request failed: ${response.status} ${response.statusText} - ${errorText}`);
  }

  if (contentType.includes('application/json')) {
    return response.json();
  }

  return response.text();
}
"""

    def _render_dockerfile(self) -> str:
        return """FROM node:22-slim AS builder
WORKDIR /app
COPY package.json ./
RUN npm install
COPY . .
RUN npm run build

FROM node:22-slim
WORKDIR /app
COPY --from=builder /app/dist ./dist
COPY --from=builder /app/package.json ./
COPY --from=builder /app/node_modules ./node_modules
CMD ["node", "dist/index.js"]
"""

    def _render_readme(self, config: MCPServerConfig) -> str:
        return f"""# {config.name} MCP Server

{config.description}

> Generated by {GENERATOR_NAME}

## Quick Start

```bash
npm install
cp .env.example .env
# Edit .env with your API credentials
npm run dev
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
      "command": "node",
      "args": ["dist/index.js"],
      "env": {{
{render_desktop_env(config, 8)}
      }}
    }}
  }}
}}
```

## Build

```bash
npm run build
npm start
```

## Docker

```bash
docker build -t mcp-{config.name} .
docker run -i --env-file .env mcp-{config.name}
```
"""
