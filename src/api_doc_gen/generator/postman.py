"""Postman Collection v2.1 and environment builder.

The collection is derived from the rendered Swagger 2 document, so both
always describe the same operations.
"""

import re
import uuid
from typing import Any

from api_doc_gen.config import DocSettings
from api_doc_gen.docs.naming import variable_name
from api_doc_gen.generator.base import to_json

SCHEMA_URL = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"
BASE_URL_VARIABLE = "base_url"

_NAMESPACE = uuid.UUID("6ba7b811-9dad-11d1-80b4-00c04fd430c8")
_PATH_VARIABLE = re.compile(r"\{(\w+)\}")


def stable_id(*parts: str) -> str:
    return str(uuid.uuid5(_NAMESPACE, "/".join(parts)))


class PostmanCollectionBuilder:
    def __init__(self, settings: DocSettings):
        self.settings = settings

    def base_url(self) -> str:
        prefix = self.settings.base_path.strip("/")
        return self.settings.server_url + ("/" + prefix if prefix else "")

    def build_from_swagger(self, swagger: dict[str, Any]) -> dict[str, Any]:
        title = swagger.get("info", {}).get("title", "API")
        groups: dict[str, list[dict[str, Any]]] = {}
        for path, operations in swagger.get("paths", {}).items():
            for method, operation in operations.items():
                tag = (operation.get("tags") or ["General"])[0]
                groups.setdefault(tag, []).append(self.build_item(path, method, operation))

        return {
            "info": {
                "_postman_id": stable_id("collection", title),
                "name": title,
                "description": swagger.get("info", {}).get("description", ""),
                "schema": SCHEMA_URL,
            },
            "item": [{"name": tag, "item": items} for tag, items in groups.items()],
            "variable": self.variables(),
        }

    def build_item(self, path: str, method: str, operation: dict[str, Any]) -> dict[str, Any]:
        parameters = operation.get("parameters", [])
        request: dict[str, Any] = {
            "method": method.upper(),
            "header": self.headers(),
            "url": self.build_url(path, parameters),
            "description": operation.get("description", ""),
        }
        body = {
            parameter["name"]: parameter.get("example", parameter.get("default", ""))
            for parameter in parameters
            if parameter["in"] in ("formData", "body")
        }
        if body:
            request["body"] = {"mode": "raw", "raw": to_json(body), "options": {"raw": {"language": "json"}}}
        return {
            "id": stable_id(method.upper(), path),
            "name": operation.get("summary") or path,
            "request": request,
            "response": [],
        }

    def build_url(self, path: str, parameters: list[dict[str, Any]]) -> dict[str, Any]:
        postman_path = _PATH_VARIABLE.sub(r":\1", path)
        url: dict[str, Any] = {
            "raw": "{{" + BASE_URL_VARIABLE + "}}" + postman_path,
            "host": ["{{" + BASE_URL_VARIABLE + "}}"],
            "path": [segment for segment in postman_path.split("/") if segment],
        }
        query = [
            {"key": parameter["name"], "value": str(parameter.get("example", "")), "description": parameter.get("description", ""), "disabled": not parameter.get("required", False)}
            for parameter in parameters
            if parameter["in"] == "query"
        ]
        if query:
            url["query"] = query
        variables = [
            {"key": parameter["name"], "value": str(parameter.get("example", "")), "description": parameter.get("description", "")}
            for parameter in parameters
            if parameter["in"] == "path"
        ]
        if variables:
            url["variable"] = variables
        return url

    def headers(self) -> list[dict[str, str]]:
        headers = [{"key": header.name, "value": header.value, "type": "text"} for header in self.settings.default_headers]
        for header in self.settings.auth_headers:
            value = "{{" + variable_name(header.name) + "}}"
            if header.type == "bearer":
                value = "Bearer " + value
            headers.append({"key": header.name, "value": value, "type": "text"})
        return headers

    def variables(self) -> list[dict[str, str]]:
        variables = [{"key": BASE_URL_VARIABLE, "value": self.base_url(), "type": "string"}]
        for header in self.settings.auth_headers:
            variables.append({"key": variable_name(header.name), "value": str(header.example or ""), "type": "string"})
        return variables

    def build_environment(self) -> dict[str, Any]:
        title = self.settings.api_info.title
        values = [{"key": BASE_URL_VARIABLE, "value": self.base_url(), "type": "default", "enabled": True}]
        for header in self.settings.auth_headers:
            values.append({"key": variable_name(header.name), "value": str(header.example or ""), "type": "secret", "enabled": True})
        return {
            "id": stable_id("environment", title),
            "name": f"{title} Environment",
            "values": values,
            "_postman_variable_scope": "environment",
        }

    def files(self, collection: dict[str, Any]) -> dict[str, str]:
        return {
            "postman_collection.json": to_json(collection),
            "postman_environment.json": to_json(self.build_environment()),
        }
