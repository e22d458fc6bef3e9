import re
from pathlib import Path

from mcp_forge.mapper import BODY_OBJECT, SchemaKind, classify_schema, map_spec_to_server
from mcp_forge.mapper.auth import auth_env_var, map_auth
from mcp_forge.mapper.schema import schema_to_property
from mcp_forge.parser import ParsedEndpoint, ParsedSpec, SecurityRequirement, SecurityScheme, parse_openapi

FIXTURES = Path(__file__).parent / "fixtures"


def _config(name: str):
    result = parse_openapi((FIXTURES / name).read_text(encoding="utf-8"))
    return map_spec_to_server(result.spec)


def _tool(config, name: str):
    return [t for t in config.tools if t.name == name][0]


class TestSchemaConversion:
    def test_classify(self):
        assert classify_schema({"type": "string"}) is SchemaKind.SCALAR
        assert classify_schema({"type": "string", "enum": ["a"]}) is SchemaKind.ENUM
        assert classify_schema({"properties": {"a": {}}}) is SchemaKind.OBJECT
        assert classify_schema({"items": {"type": "string"}}) is SchemaKind.ARRAY
        assert classify_schema({"oneOf": [{"type": "string"}, {"type": "number"}]}) is SchemaKind.UNRESOLVED

    def test_integer_maps_to_number(self):
        prop = schema_to_property({"type": "integer", "minimum": 1, "maximum": 10, "default": 5})
        assert prop.type == "number"
        assert (prop.minimum, prop.maximum, prop.default) == (1, 10, 5)

    def test_nullable_type_list(self):
        assert schema_to_property({"type": ["null", "boolean"]}).type == "boolean"

    def test_polymorphic_falls_back_to_string(self):
        assert schema_to_property({"anyOf": [{"type": "string"}, {"type": "integer"}]}).type == "string"

    def test_array_items_and_nested_object(self):
        prop = schema_to_property(
            {
                "type": "array",
                "items": {"type": "object", "required": ["id"], "properties": {"id": {"type": "string"}}},
            }
        )
        assert prop.type == "array"
        assert prop.items.type == "object"
        assert prop.items.properties["id"].type == "string"
        assert prop.items.required == ["id"]

    def test_enum_kept(self):
        prop = schema_to_property({"type": "string", "enum": ["a", "b"]}, "Pick one")
        assert prop.enum == ["a", "b"]
        assert prop.description == "Pick one"


class TestAuthMapping:
    def test_env_var_names(self):
        assert auth_env_var(SecurityScheme(name="b", type="http", scheme="bearer")) == "API_BEARER_TOKEN"
        assert auth_env_var(SecurityScheme(name="b", type="http", scheme="basic")) == "API_BASIC_AUTH"
        assert auth_env_var(SecurityScheme(name="k", type="apiKey", location="header", param_name="X-Api-Key")) == "API_KEY_X_API_KEY"
        assert auth_env_var(SecurityScheme(name="o", type="oauth2")) == "API_OAUTH_TOKEN"
        assert auth_env_var(SecurityScheme(name="oidc", type="openIdConnect")) == "API_AUTH_OIDC"

    def test_unknown_scheme_skipped_and_duplicates_dropped(self):
        schemes = [SecurityScheme(name="bearer", type="http", scheme="bearer")]
        reqs = [
            SecurityRequirement(scheme_name="missing"),
            SecurityRequirement(scheme_name="bearer"),
            SecurityRequirement(scheme_name="bearer"),
        ]
        auth = map_auth(reqs, schemes)
        assert [a.env_var for a in auth] == ["API_BEARER_TOKEN"]


class TestMapPetstore:
    def setup_method(self):
        self.config = _config("petstore.yaml")

    def test_server_metadata(self):
        assert self.config.name == "petstore-api"
        assert self.config.version == "1.0.0"
        assert self.config.description == "A sample pet store"
        assert self.config.base_url == "https://petstore.example.com/v1"

    def test_tool_names(self):
        assert [t.name for t in self.config.tools] == ["listpets", "createpet", "getpet", "deletepet"]
        for tool in self.config.tools:
            assert re.match(r"^[a-z0-9_-]{1,64}$", tool.name)
            assert tool.enabled is True

    def test_query_params(self):
        tool = _tool(self.config, "listpets")
        assert tool.description == "List all pets"
        assert tool.handler.method == "GET"
        assert tool.handler.query_params == ["limit", "status"]
        assert tool.input_schema.required == []
        assert tool.input_schema.properties["status"].enum == ["available", "pending", "sold"]
        assert tool.input_schema.properties["limit"].type == "number"

    def test_object_body_is_hoisted(self):
        tool = _tool(self.config, "createpet")
        assert tool.handler.body_param == BODY_OBJECT
        assert set(tool.input_schema.properties) == {"name", "tag"}
        assert tool.input_schema.required == ["name"]

    def test_path_and_header_params(self):
        tool = _tool(self.config, "deletepet")
        assert tool.handler.path_params == ["petId"]
        assert tool.handler.header_params == ["header_x_request_id"]
        assert tool.input_schema.required == ["petId"]
        assert tool.source.operation_id == "deletePet"

    def test_env_vars(self):
        assert [e.name for e in self.config.env_vars] == ["API_BASE_URL", "API_BEARER_TOKEN"]
        assert self.config.env_vars[0].example == "https://petstore.example.com/v1"

    def test_auth_attached(self):
        tool = _tool(self.config, "getpet")
        assert tool.handler.auth[0].env_var == "API_BEARER_TOKEN"
        assert tool.handler.auth[0].scheme.scheme == "bearer"


class TestMapEdgeCases:
    def _spec(self, *endpoints: ParsedEndpoint) -> ParsedSpec:
        return ParsedSpec(title="Edge", base_url="https://edge.test", endpoints=list(endpoints))

    def test_deprecated_endpoints_skipped(self):
        spec = self._spec(
            ParsedEndpoint(path="/old", method="get", deprecated=True),
            ParsedEndpoint(path="/new", method="get"),
        )
        assert [t.name for t in map_spec_to_server(spec).tools] == ["get_new"]

    def test_duplicate_names_suffixed(self):
        spec = self._spec(
            ParsedEndpoint(path="/a", method="get", operation_id="fetch"),
            ParsedEndpoint(path="/b", method="get", operation_id="fetch"),
        )
        assert [t.name for t in map_spec_to_server(spec).tools] == ["fetch", "fetch_2"]

    def test_description_fallbacks(self):
        spec = self._spec(
            ParsedEndpoint(path="/pets/{id}", method="delete"),
            ParsedEndpoint(path="/a", method="get", summary="Sum", description="Desc"),
        )
        tools = map_spec_to_server(spec).tools
        assert tools[0].description == "Delete pets"
        assert tools[1].description == "Sum. Desc"

    def test_non_object_body_uses_body_param(self):
        text = (
            "openapi: 3.0.0\npaths:\n  /tags:\n    post:\n      requestBody:\n        required: true\n"
            "        content:\n          application/json:\n            schema:\n              type: array\n"
            "              items:\n                type: string\n"
        )
        tool = map_spec_to_server(parse_openapi(text).spec).tools[0]
        assert tool.handler.body_param == "body"
        assert tool.input_schema.properties["body"].type == "array"
        assert tool.input_schema.required == ["body"]

    def test_cookie_params_are_not_inputs(self):
        text = (
            "openapi: 3.0.0\npaths:\n  /me:\n    get:\n      parameters:\n"
            "        - {name: session, in: cookie, schema: {type: string}}\n"
        )
        tool = map_spec_to_server(parse_openapi(text).spec).tools[0]
        assert tool.input_schema.properties == {}
