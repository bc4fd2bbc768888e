"""Turns endpoint descriptors into Swagger 2 operations.

The OpenAPI 3 renderer converts these operations further, so everything
dialect-independent (placement of parameters, default responses, description
notes, path keys) lives here.
"""

import re
from typing import Any
from urllib.parse import urlparse

from api_doc_gen.config import DocSettings
from api_doc_gen.docs.builder import DEFAULT_HEADERS_BLOCK
from api_doc_gen.docs.endpoint import CONSUME_JSON, CONSUME_MULTIPART, EndpointDescriptor
from api_doc_gen.docs.naming import security_scheme_name
from api_doc_gen.docs.param import Param, ParamLocation
from api_doc_gen.docs.schema_registry import ref

_PATH_TOKEN = re.compile(r"\{(\w+)(?::\w+)?\??\}|<(?:\w+:)?(\w+)>")
_QUERY_METHODS = ("get", "head")


def normalise_path_tokens(path: str) -> str:
    """``<int:id>``, ``{id:int}`` and ``{id?}`` all become ``{id}``."""
    return _PATH_TOKEN.sub(lambda match: "{" + (match.group(1) or match.group(2)) + "}", path)


def path_suffix(route: str, base_path: str) -> str:
    """Route relative to the base path, always with exactly one leading slash."""
    relative = route.lstrip("/")
    prefix = base_path.strip("/")
    if prefix and relative.startswith(prefix):
        relative = relative[len(prefix):]
    return normalise_path_tokens("/" + relative.lstrip("/"))


def parse_server(url: str) -> tuple[str, list[str]]:
    """Host (with port) and schemes for a server URL."""
    parsed = urlparse(url)
    if not parsed.hostname:
        return "", ["https", "http"]
    host = parsed.hostname + (f":{parsed.port}" if parsed.port else "")
    return host, [parsed.scheme] if parsed.scheme else ["https", "http"]


def define_blocks(endpoints: list[EndpointDescriptor]) -> dict[str, EndpointDescriptor]:
    return {call.define.title: call for call in endpoints if call.define is not None}


def unique_endpoints(endpoints: list[EndpointDescriptor], base_path: str) -> list[EndpointDescriptor]:
    """Routed descriptors; a later one for the same path and method replaces an earlier one in place."""
    unique: dict[tuple[str, str], EndpointDescriptor] = {}
    for call in endpoints:
        if not call.route or call.is_define:
            continue
        unique[(path_suffix(call.route, base_path), call.method.upper())] = call
    return list(unique.values())


class OpenApiConverter:
    def __init__(self, settings: DocSettings):
        self.settings = settings

    def scheme_name(self, header_name: str) -> str:
        header = self.settings.auth_header(header_name)
        if header is not None and header.security_scheme:
            return header.security_scheme
        return security_scheme_name(header_name)

    def security(self, call: EndpointDescriptor) -> list[dict[str, list]]:
        schemes = [self.scheme_name(header.name) for header in self.settings.auth_headers]
        if call.security is not None:
            schemes = [scheme for scheme in schemes if scheme in call.security]
        return [{scheme: []} for scheme in schemes]

    def merged(
        self, call: EndpointDescriptor, blocks: dict[str, EndpointDescriptor], skip_default: bool = True
    ) -> tuple[list[Param], list[Param]]:
        """Headers and body params including those of used define blocks; the endpoint's own win.

        The built-in default headers block is skipped unless ``skip_default`` is off:
        OpenAPI documents carry it as security schemes and ``produces``.
        """
        headers: dict[str, Param] = {}
        params: dict[str, Param] = {}
        for title in call.use:
            block = blocks.get(title)
            if block is None or (skip_default and title == DEFAULT_HEADERS_BLOCK):
                continue
            headers.update({header.name: header for header in block.headers})
            params.update({param.name: param for param in block.params})
        headers.update({header.name: header for header in call.headers})
        params.update({param.name: param for param in call.params})
        return list(headers.values()), list(params.values())

    def build_parameters(self, call: EndpointDescriptor, blocks: dict[str, EndpointDescriptor] | None = None) -> list[dict[str, Any]]:
        method = call.method.lower()
        parameters: list[dict[str, Any]] = []
        seen: set[tuple[str, str]] = set()

        # first occurrence wins: path and query params come before merged ones
        def add(param: Param, location: str) -> None:
            key = (param.name, location)
            if key in seen:
                return
            seen.add(key)
            parameters.append(self.build_param_data(param, location))

        for param in call.path_params:
            add(param, ParamLocation.PATH.value)
        for param in call.query_params:
            add(param, ParamLocation.QUERY.value)
        headers, params = self.merged(call, blocks or {})
        for param in [*headers, *params]:
            location = param.location
            if location is None or location is ParamLocation.BODY:
                location = ParamLocation.QUERY if method in _QUERY_METHODS else ParamLocation.FORM
            add(param, location.value)
        return parameters

    def build_param_data(self, param: Param, location: str) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": param.name,
            "in": location,
            "required": True if location == ParamLocation.PATH.value else param.required,
            "description": param.description,
            "type": param.type.to_swagger(),
        }
        if param.items is not None:
            data["items"] = param.items
            if param.collection_format:
                data["collectionFormat"] = param.collection_format
        data.update(param.constraints())
        if param.default is not None:
            data["default"] = param.default
        if param.example is not None:
            data["example"] = param.example
        return data

    def build_responses(self, call: EndpointDescriptor) -> dict[str, dict[str, Any]]:
        responses: dict[str, dict[str, Any]] = {}
        if call.success_examples:
            for status, data in sorted(call.success_examples.items()):
                responses[str(status)] = {"description": data.description, "examples": {CONSUME_JSON: data.example}}
                if call.success_schema:
                    responses[str(status)]["schema"] = ref(call.success_schema)
        else:
            responses["200"] = {"description": "Successful response"}
            if call.success_schema:
                responses["200"]["schema"] = ref(call.success_schema)

        if call.error_examples:
            for status, data in sorted(call.error_examples.items()):
                responses[str(status)] = {"description": data.description, "examples": {CONSUME_JSON: data.example}}
                if call.error_schema:
                    responses[str(status)]["schema"] = ref(call.error_schema)
        else:
            responses["401"] = {"description": "Unauthorized"}
            responses["422"] = {"description": "Validation error"}
        return responses

    def build_description(self, call: EndpointDescriptor) -> str:
        description = call.description or ""
        if call.rate_limit is not None:
            description += f"\n\n**Rate Limit:** {call.rate_limit.limit} requests per {call.rate_limit.period}"
        if call.deprecated is not None:
            description = f"**DEPRECATED:** {call.deprecated}\n\n" + description
        if call.possible_errors:
            description += "\n\n**Possible Errors:**\n"
            for status, text in call.possible_errors.items():
                description += f"- `{status}`: {text}\n"
        return description

    def operation(self, call: EndpointDescriptor, blocks: dict[str, EndpointDescriptor] | None = None) -> dict[str, Any]:
        consumes = [CONSUME_MULTIPART] if call.has_file_uploads else [CONSUME_JSON]
        data: dict[str, Any] = {
            "tags": call.effective_tags(),
            "summary": call.name,
            "description": self.build_description(call),
            "operationId": call.resolved_operation_id(),
            "consumes": consumes,
            "produces": [CONSUME_JSON],
            "parameters": self.build_parameters(call, blocks),
            "security": self.security(call),
            "responses": self.build_responses(call),
        }
        if call.deprecated is not None:
            data["deprecated"] = True
        if call.rate_limit is not None:
            data["x-rateLimit"] = call.rate_limit.model_dump()
        return data

    def paths(self, endpoints: list[EndpointDescriptor]) -> dict[str, dict[str, Any]]:
        """Path-keyed operations; a later descriptor for the same path and method replaces an earlier one."""
        blocks = define_blocks(endpoints)
        paths: dict[str, dict[str, Any]] = {}
        for call in unique_endpoints(endpoints, self.settings.base_path):
            key = path_suffix(call.route, self.settings.base_path)
            paths.setdefault(key, {})[call.method.lower()] = self.operation(call, blocks)
        return paths
