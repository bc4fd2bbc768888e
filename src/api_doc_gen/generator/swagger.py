"""Swagger 2.0 document renderer."""

from typing import Any

from api_doc_gen.config import DocSettings
from api_doc_gen.docs.endpoint import CONSUME_JSON, EndpointDescriptor
from api_doc_gen.docs.schema_registry import SchemaRegistry
from api_doc_gen.generator.base import to_json, to_yaml
from api_doc_gen.generator.converter import OpenApiConverter, parse_server


class Swagger2Renderer:
    def __init__(self, settings: DocSettings):
        self.settings = settings
        self.converter = OpenApiConverter(settings)

    def security_definitions(self) -> dict[str, dict[str, Any]]:
        definitions = {}
        for header in self.settings.auth_headers:
            definitions[self.converter.scheme_name(header.name)] = {
                "type": "apiKey",
                "name": header.name,
                "in": "header",
                "description": header.description or header.name,
            }
        return definitions

    def render(self, endpoints: list[EndpointDescriptor], schemas: SchemaRegistry) -> dict[str, Any]:
        info = self.settings.api_info
        host, schemes = parse_server(self.settings.server_url)
        return {
            "swagger": "2.0",
            "info": {"title": info.title, "description": info.description, "version": info.version},
            "host": host,
            "basePath": self.settings.base_path,
            "schemes": schemes,
            "consumes": [CONSUME_JSON],
            "produces": [CONSUME_JSON],
            "paths": self.converter.paths(endpoints),
            "securityDefinitions": self.security_definitions(),
            "definitions": schemas.snapshot(),
        }

    def files(self, document: dict[str, Any]) -> dict[str, str]:
        return {"swagger.json": to_json(document), "swagger.yml": to_yaml(document)}
