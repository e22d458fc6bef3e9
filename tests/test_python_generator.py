import ast
from pathlib import Path

from mcp_forge.generator import PythonGenerator, validate_files
from mcp_forge.mapper import MCPProperty, ToolAuth, map_spec_to_server
from mcp_forge.parser import SecurityScheme, parse_openapi

FIXTURES = Path(__file__).parent / "fixtures"


def _config(name: str):
    return map_spec_to_server(parse_openapi((FIXTURES / name).read_text(encoding="utf-8")).spec)


def _functions(source: str) -> dict[str, ast.AsyncFunctionDef]:
    tree = ast.parse(source)
    return {node.name: node for node in tree.body if isinstance(node, ast.AsyncFunctionDef)}


class TestPythonGenerator:
    def setup_method(self):
        self.files = PythonGenerator().generate(_config("weather.json"))
        self.server = self.files["server.py"]

    def test_generates_all_files(self):
        assert sorted(self.files) == sorted(["pyproject.toml", "server.py", ".env.example", "Dockerfile", "README.md"])

    def test_pyproject(self):
        pyproject = self.files["pyproject.toml"]
        assert 'name = "mcp-weather-api"' in pyproject
        assert "mcp[cli]" in pyproject
        assert "httpx" in pyproject

    def test_server_setup(self):
        assert "from mcp.server.fastmcp import FastMCP" in self.server
        assert 'mcp = FastMCP("weather-api")' in self.server
        assert "httpx.AsyncClient()" in self.server
        assert self.server.count("@mcp.tool()") == 3

    def test_tool_functions(self):
        functions = _functions(self.server)
        assert {"getforecast", "getalerts", "submitreport"} <= set(functions)
        assert ast.get_docstring(functions["getforecast"]) == "Get weather forecast"

    def test_signatures(self):
        assert "async def getforecast(city: str, units: Literal['metric', 'imperial'] | None = None, days: float | None = None) -> str:" in self.server
        assert "labels: list | None = None" in self.server
        assert "async def getalerts(region: str) -> str:" in self.server

    def test_path_substitution(self):
        assert '"/alerts/{region}", {"region": region})' in self.server

    def test_query_and_auth(self):
        assert 'params={"city": city, "units": units, "days": days}' in self.server
        assert '"X-Weather-Key": _env("API_KEY_X_WEATHER_KEY")' in self.server
        assert '"Authorization": "Bearer " + _env("API_BEARER_TOKEN")' in self.server

    def test_body_object(self):
        assert 'body=_compact({"location": location, "temperature": temperature, "labels": labels})' in self.server

    def test_base_url_env(self):
        assert '_build_url("API_BASE_URL", "https://api.weather.io/v2"' in self.server

    def test_dockerfile(self):
        assert "FROM python:" in self.files["Dockerfile"]

    def test_files_validate(self):
        assert validate_files(self.files) == {}


class TestPythonEdgeCases:
    def test_keyword_params_and_query_api_key(self):
        server = PythonGenerator().generate(_config("calendar.yaml"))["server.py"]
        assert "async def listevents(from_: str | None = None) -> str:" in server
        assert 'params={"from": from_, "api_key": _env("API_KEY_API_KEY")}' in server
        assert validate_files({"server.py": server}) == {}

    def test_header_param_and_required_order(self):
        server = PythonGenerator().generate(_config("petstore.yaml"))["server.py"]
        assert "async def deletepet(petId: str, header_x_request_id: str | None = None) -> str:" in server
        assert 'headers={"x-request-id": header_x_request_id, "Authorization": "Bearer " + _env("API_BEARER_TOKEN")}' in server

    def test_hyphenated_tool_name(self):
        config = _config("petstore.yaml")
        config.tools[0].name = "list-pets"
        server = PythonGenerator().generate(config)["server.py"]
        assert '@mcp.tool(name="list-pets")' in server
        assert "async def list_pets(" in server

    def test_colliding_identifiers(self):
        config = _config("petstore.yaml")
        schema = config.tools[0].input_schema
        schema.properties["json"] = MCPProperty(type="string")
        schema.properties["a-b"] = MCPProperty(type="string")
        schema.properties["a_b"] = MCPProperty(type="string")
        server = PythonGenerator().generate(config)["server.py"]
        assert "json_: str | None = None" in server
        assert "a_b: str | None = None, a_b_: str | None = None" in server
        assert validate_files({"server.py": server}) == {}

    def test_quotes_in_descriptions(self):
        config = _config("petstore.yaml")
        config.tools[0].description = 'Say "hi" \\ bye"'
        config.description = 'The "best" store'
        files = PythonGenerator().generate(config)
        assert validate_files(files) == {}

    def test_disabled_tools_not_emitted(self):
        config = _config("weather.json")
        config.tools[0].enabled = False
        server = PythonGenerator().generate(config)["server.py"]
        assert "getforecast" not in server
        assert "async def getalerts" in server

    def test_no_tools(self):
        config = _config("weather.json")
        for tool in config.tools:
            tool.enabled = False
        assert validate_files(PythonGenerator().generate(config)) == {}

    def test_openid_connect_sends_bearer(self):
        config = _config("weather.json")
        tool = config.tools[0]
        tool.handler.auth = [
            ToolAuth(scheme=SecurityScheme(name="oidc", type="openIdConnect"), env_var="API_AUTH_OIDC")
        ]
        server = PythonGenerator().generate(config)["server.py"]
        assert '"Authorization": "Bearer " + _env("API_AUTH_OIDC")' in server

    def test_single_authorization_header_for_alternative_schemes(self):
        server = PythonGenerator().generate(_config("multi_auth.yaml"))["server.py"]
        assert server.count('"Authorization":') == 1
        assert 'headers={"Authorization": "Bearer " + _env("API_BEARER_TOKEN")}' in server
        assert validate_files({"server.py": server}) == {}
