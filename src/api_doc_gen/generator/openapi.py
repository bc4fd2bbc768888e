"""OpenAPI 3.0.3 document renderer, built on top of the Swagger 2 operations."""

from typing import Any

from api_doc_gen.config import DocSettings
from api_doc_gen.docs.endpoint import CONSUME_JSON, CONSUME_MULTIPART, EndpointDescriptor
from api_doc_gen.docs.schema_registry import SchemaRegistry
from api_doc_gen.generator.base import to_json, to_yaml
from api_doc_gen.generator.converter import OpenApiConverter

SWAGGER_PREFIX = "#/definitions/"
OPENAPI_PREFIX = "#/components/schemas/"

_BODY_LOCATIONS = ("formData", "body")
_SCHEMA_KEYS = ("items", "enum", "minimum", "maximum", "minLength", "maxLength", "pattern", "default", "example")


def rewrite_refs(value: Any) -> Any:
    """Copy of ``value`` with every ``$ref`` moved from definitions to components, at any depth."""
    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            if key == "$ref" and isinstance(item, str) and item.startswith(SWAGGER_PREFIX):
                result[key] = OPENAPI_PREFIX + item[len(SWAGGER_PREFIX):]
            else:
                result[key] = rewrite_refs(item)
        return result
    if isinstance(value, list):
        return [rewrite_refs(item) for item in value]
    return value


def _param_schema(parameter: dict[str, Any]) -> dict[str, Any]:
    if parameter.get("type") == "file":
        schema: dict[str, Any] = {"type": "string", "format": "binary"}
    else:
        schema = {"type": parameter.get("type", "string")}
    for key in _SCHEMA_KEYS:
        if key in parameter:
            schema[key] = parameter[key]
    return rewrite_refs(schema)


class OpenApi3Renderer:
    def __init__(self, settings: DocSettings):
        self.settings = settings
        self.converter = OpenApiConverter(settings)

    def security_schemes(self) -> dict[str, dict[str, Any]]:
        schemes = {}
        for header in self.settings.auth_headers:
            name = self.converter.scheme_name(header.name)
            description = header.description or header.name
            if header.type == "bearer":
                schemes[name] = {"type": "http", "scheme": "bearer", "bearerFormat": "JWT", "description": description}
            else:
                schemes[name] = {"type": "apiKey", "in": "header", "name": header.name, "description": description}
        return schemes

    def convert_operation(self, operation: dict[str, Any]) -> dict[str, Any]:
        """Swagger 2 operation -> OpenAPI 3 operation."""
        converted: dict[str, Any] = {
            "tags": operation["tags"],
            "summary": operation["summary"],
            "description": operation["description"],
            "operationId": operation["operationId"],
        }
        parameters = []
        properties: dict[str, Any] = {}
        required: list[str] = []
        for parameter in operation["parameters"]:
            if parameter["in"] in _BODY_LOCATIONS:
                properties[parameter["name"]] = {"description": parameter.get("description", ""), **_param_schema(parameter)}
                if parameter.get("required") and parameter["name"] not in required:
                    required.append(parameter["name"])
                continue
            parameters.append({
                "name": parameter["name"],
                "in": parameter["in"],
                "required": parameter.get("required", False),
                "description": parameter.get("description", ""),
                "schema": _param_schema(parameter),
            })
        if parameters:
            converted["parameters"] = parameters
        if properties:
            schema: dict[str, Any] = {"type": "object", "properties": properties}
            if required:
                schema["required"] = required
            media = CONSUME_MULTIPART if CONSUME_MULTIPART in operation.get("consumes", []) else CONSUME_JSON
            converted["requestBody"] = {"required": bool(required), "content": {media: {"schema": schema}}}

        converted["responses"] = {}
        for status, response in operation["responses"].items():
            entry: dict[str, Any] = {"description": response["description"]}
            if "schema" in response or "examples" in response:
                content: dict[str, Any] = {}
                if "schema" in response:
                    content["schema"] = rewrite_refs(response["schema"])
                if "examples" in response:
                    content["example"] = response["examples"].get(CONSUME_JSON)
                entry["content"] = {CONSUME_JSON: content}
            converted["responses"][status] = entry

        if operation.get("security"):
            converted["security"] = operation["security"]
        if operation.get("deprecated"):
            converted["deprecated"] = True
        if "x-rateLimit" in operation:
            converted["x-rateLimit"] = operation["x-rateLimit"]
        return converted

    def render(self, endpoints: list[EndpointDescriptor], schemas: SchemaRegistry) -> dict[str, Any]:
        info = self.settings.api_info
        server = self.settings.servers[0].description if self.settings.servers else "Current Server"
        paths = {
            path: {method: self.convert_operation(operation) for method, operation in operations.items()}
            for path, operations in self.converter.paths(endpoints).items()
        }
        return {
            "openapi": "3.0.3",
            "info": {"title": info.title, "description": info.description, "version": info.version},
            "servers": [{"url": self.settings.server_url + self.settings.base_path, "description": server}],
            "paths": paths,
            "components": {
                "securitySchemes": self.security_schemes(),
                "schemas": rewrite_refs(schemas.snapshot()),
            },
        }

    def files(self, document: dict[str, Any]) -> dict[str, str]:
        return {"openapi.json": to_json(document), "openapi.yml": to_yaml(document)}
