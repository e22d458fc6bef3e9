import json
from pathlib import Path

import yaml

from mcp_forge.parser import parse_openapi

FIXTURES = Path(__file__).parent / "fixtures"


def _load(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


def _minimal(**overrides) -> str:
    doc = {"openapi": "3.0.0", "info": {"title": "Mini", "version": "0.1.0"}, "paths": {}}
    doc.update(overrides)
    return json.dumps(doc)


class TestParseInput:
    def test_invalid_text_is_reported(self):
        result = parse_openapi('{"openapi": ')
        assert result.success is False
        assert result.errors[0].path == ""
        assert result.errors[0].message.startswith("Failed to parse input")

    def test_non_mapping_root(self):
        result = parse_openapi("- a\n- b\n")
        assert result.success is False

    def test_swagger_2_rejected(self):
        result = parse_openapi(json.dumps({"swagger": "2.0", "paths": {}}))
        assert result.success is False
        assert result.errors[0].path == "openapi"
        assert "Swagger" in result.errors[0].message

    def test_missing_version_rejected(self):
        result = parse_openapi(json.dumps({"info": {}, "paths": {}}))
        assert result.success is False
        assert result.errors[0].path == "openapi"

    def test_missing_paths_is_an_error(self):
        result = parse_openapi(json.dumps({"openapi": "3.0.0", "info": {"title": "x"}}))
        assert result.success is False
        assert result.errors[0].path == "paths"

    def test_empty_paths_is_a_warning(self):
        result = parse_openapi(_minimal())
        assert result.success is True
        assert result.spec.endpoints == []
        assert any("No endpoints found" in w for w in result.warnings)

    def test_defaults(self):
        result = parse_openapi(json.dumps({"openapi": "3.1.0", "paths": {}}))
        assert result.spec.title == "Untitled API"
        assert result.spec.version == "1.0.0"
        assert result.spec.base_url == "https://api.example.com"

    def test_yaml_and_json_parse_identically(self):
        text = _load("petstore.yaml")
        as_json = json.dumps(yaml.safe_load(text))
        assert parse_openapi(text).spec == parse_openapi(as_json).spec


class TestParsePetstore:
    def setup_method(self):
        result = parse_openapi(_load("petstore.yaml"))
        assert result.success, result.errors
        self.spec = result.spec

    def _endpoint(self, method: str, path: str):
        return [e for e in self.spec.endpoints if e.method == method and e.path == path][0]

    def test_info(self):
        assert self.spec.title == "Petstore API"
        assert self.spec.version == "1.0.0"
        assert self.spec.base_url == "https://petstore.example.com/v1"
        assert self.spec.servers[0].url == "https://petstore.example.com/v1"

    def test_endpoint_count_and_order(self):
        assert [(e.method, e.path) for e in self.spec.endpoints] == [
            ("get", "/pets"),
            ("post", "/pets"),
            ("get", "/pets/{petId}"),
            ("delete", "/pets/{petId}"),
        ]

    def test_query_parameters(self):
        list_pets = self._endpoint("get", "/pets")
        assert list_pets.operation_id == "listPets"
        assert [p.name for p in list_pets.parameters] == ["limit", "status"]
        limit = list_pets.parameters[0]
        assert limit.location == "query"
        assert limit.required is False
        assert limit.schema_object["maximum"] == 100

    def test_path_level_parameters_merged(self):
        delete_pet = self._endpoint("delete", "/pets/{petId}")
        assert [(p.location, p.name) for p in delete_pet.parameters] == [
            ("path", "petId"),
            ("header", "X-Request-Id"),
        ]
        assert delete_pet.parameters[0].required is True

    def test_request_body_ref_resolved(self):
        create_pet = self._endpoint("post", "/pets")
        body = create_pet.request_body
        assert body.required is True
        assert body.content_type == "application/json"
        assert body.schema_object["required"] == ["name"]
        assert set(body.schema_object["properties"]) == {"name", "tag"}

    def test_all_of_flattened_in_components(self):
        pet = self.spec.schemas["Pet"]
        assert "allOf" not in pet
        assert pet["type"] == "object"
        assert set(pet["properties"]) == {"name", "tag", "id"}
        assert pet["required"] == ["name", "id"]

    def test_response_schema_resolved(self):
        resp = self._endpoint("get", "/pets").responses["200"]
        assert resp.content_type == "application/json"
        assert resp.schema_object["items"]["properties"]["id"]["format"] == "int64"

    def test_global_security_applies(self):
        list_pets = self._endpoint("get", "/pets")
        assert [s.scheme_name for s in list_pets.security] == ["bearerAuth"]
        scheme = self.spec.security_schemes[0]
        assert scheme.type == "http"
        assert scheme.scheme == "bearer"
        assert scheme.bearer_format == "JWT"


class TestParseEdgeCases:
    def test_operation_security_overrides_global(self):
        text = _minimal(
            security=[{"key": []}],
            paths={"/open": {"get": {"security": [], "responses": {}}}},
            components={"securitySchemes": {"key": {"type": "apiKey", "in": "header", "name": "X-Key"}}},
        )
        endpoint = parse_openapi(text).spec.endpoints[0]
        assert endpoint.security == []

    def test_api_key_scheme_fields(self):
        text = _minimal(components={"securitySchemes": {"key": {"type": "apiKey", "in": "query", "name": "token"}}})
        scheme = parse_openapi(text).spec.security_schemes[0]
        assert scheme.location == "query"
        assert scheme.param_name == "token"

    def test_path_parameter_forced_required(self):
        text = _minimal(paths={"/a/{id}": {"get": {"parameters": [{"name": "id", "in": "path"}]}}})
        param = parse_openapi(text).spec.endpoints[0].parameters[0]
        assert param.required is True
        assert param.schema_object == {"type": "string"}

    def test_parameter_content_instead_of_schema(self):
        param = {"name": "filter", "in": "query", "content": {"application/json": {"schema": {"type": "object"}}}}
        text = _minimal(paths={"/a": {"get": {"parameters": [param]}}})
        assert parse_openapi(text).spec.endpoints[0].parameters[0].schema_object == {"type": "object"}

    def test_non_string_operation_id_is_coerced(self):
        text = "openapi: 3.0.0\npaths:\n  /a:\n    get:\n      operationId: 123\n"
        assert parse_openapi(text).spec.endpoints[0].operation_id == "123"

    def test_unresolvable_ref_becomes_warning(self):
        body = {"content": {"application/json": {"schema": {"$ref": "#/components/schemas/Missing"}}}}
        text = _minimal(paths={"/a": {"post": {"requestBody": body}}})
        result = parse_openapi(text)
        assert result.success is True
        assert "Unresolvable reference: #/components/schemas/Missing" in result.warnings

    def test_circular_schema_parses(self):
        components = {
            "schemas": {
                "Category": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "parent": {"$ref": "#/components/schemas/Category"},
                    },
                }
            }
        }
        body = {"content": {"application/json": {"schema": {"$ref": "#/components/schemas/Category"}}}}
        text = _minimal(components=components, paths={"/c": {"post": {"requestBody": body}}})
        result = parse_openapi(text)
        assert result.success is True
        parent = result.spec.endpoints[0].request_body.schema_object["properties"]["parent"]
        assert parent["type"] == "object"

    def test_deprecated_flag(self):
        text = _minimal(paths={"/old": {"get": {"deprecated": True}}})
        assert parse_openapi(text).spec.endpoints[0].deprecated is True
