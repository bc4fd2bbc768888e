"""TypeScript SDK stub: schema interfaces, request interfaces and a fetch-based client."""

import re
from typing import Any

from api_doc_gen.config import DocSettings
from api_doc_gen.docs.endpoint import EndpointDescriptor
from api_doc_gen.docs.naming import lcfirst, studly
from api_doc_gen.docs.param import Param
from api_doc_gen.docs.schema_registry import SchemaRegistry
from api_doc_gen.generator.converter import define_blocks, OpenApiConverter, path_suffix, unique_endpoints

_JSON_TYPES = {
    "integer": "number",
    "number": "number",
    "boolean": "boolean",
    "string": "string",
    "file": "Blob",
    "object": "Record<string, unknown>",
}


def ts_type(schema: dict[str, Any]) -> str:
    """TypeScript type for a JSON-schema fragment."""
    if "$ref" in schema:
        return schema["$ref"].rsplit("/", 1)[-1]
    if "enum" in schema and schema["enum"]:
        return " | ".join(f"'{value}'" if isinstance(value, str) else str(value) for value in schema["enum"])
    kind = schema.get("type", "string")
    if kind == "array":
        inner = ts_type(schema.get("items") or {"type": "string"})
        return f"({inner})[]" if " | " in inner else f"{inner}[]"
    if kind == "object" and schema.get("properties"):
        fields = "; ".join(f"{name}: {ts_type(prop)}" for name, prop in schema["properties"].items())
        return "{ " + fields + " }"
    result = _JSON_TYPES.get(kind, "unknown")
    if schema.get("nullable"):
        result += " | null"
    return result


def _property_name(name: str) -> str:
    return name if name.isidentifier() else f"'{name}'"


def _identifier(value: str) -> str:
    return re.sub(r"\W", "", studly(value))


def _object_literal(names: list[str]) -> str:
    if not names:
        return "undefined"
    fields = [f"{name}: params.{name}" if name.isidentifier() else f"'{name}': params['{name}']" for name in names]
    return "{ " + ", ".join(fields) + " }"


class TypeScriptRenderer:
    def __init__(self, settings: DocSettings):
        self.settings = settings
        self.converter = OpenApiConverter(settings)

    def render(self, endpoints: list[EndpointDescriptor], schemas: SchemaRegistry) -> str:
        blocks = define_blocks(endpoints)
        calls = unique_endpoints(endpoints, self.settings.base_path)
        sections = [f"// {self.settings.api_info.title} {self.settings.api_info.version}\n// Generated file, do not edit.\n"]
        sections.extend(self.schema_interface(name, schema) for name, schema in schemas.all().items())
        for call in calls:
            request = self.request_interface(call, blocks)
            if request:
                sections.append(request)
        sections.append(self.client(calls, blocks))
        return "\n".join(sections)

    def schema_interface(self, name: str, schema: dict[str, Any]) -> str:
        required = set(schema.get("required", []))
        lines = [f"export interface {name} {{"]
        for prop, definition in schema.get("properties", {}).items():
            optional = "" if prop in required else "?"
            lines.append(f"  {_property_name(prop)}{optional}: {ts_type(definition)};")
        lines.append("}\n")
        return "\n".join(lines)

    def request_name(self, call: EndpointDescriptor) -> str:
        return _identifier(call.resolved_operation_id()) + "Request"

    def request_params(self, call: EndpointDescriptor, blocks: dict[str, EndpointDescriptor]) -> list[Param]:
        _, params = self.converter.merged(call, blocks)
        return [*call.path_params, *call.query_params, *params]

    def request_interface(self, call: EndpointDescriptor, blocks: dict[str, EndpointDescriptor]) -> str:
        params = self.request_params(call, blocks)
        if not params:
            return ""
        lines = []
        if call.name:
            lines.append(f"/** {call.name} */")
        lines.append(f"export interface {self.request_name(call)} {{")
        for param in params:
            optional = "" if param.required else "?"
            lines.append(f"  {_property_name(param.name)}{optional}: {ts_type(param.to_schema())};")
        lines.append("}\n")
        return "\n".join(lines)

    def client(self, calls: list[EndpointDescriptor], blocks: dict[str, EndpointDescriptor]) -> str:
        lines = [
            "export class ApiClient {",
            "  constructor(private baseUrl: string, private headers: Record<string, string> = {}) {}",
            "",
            "  private async request<T>(method: string, path: string, query?: Record<string, unknown>, body?: unknown): Promise<T> {",
            "    const url = new URL(this.baseUrl.replace(/\\/$/, '') + path);",
            "    Object.entries(query ?? {}).forEach(([key, value]) => {",
            "      if (value !== undefined) url.searchParams.append(key, String(value));",
            "    });",
            "    const response = await fetch(url.toString(), {",
            "      method,",
            "      headers: { 'Content-Type': 'application/json', Accept: 'application/json', ...this.headers },",
            "      body: body === undefined ? undefined : JSON.stringify(body),",
            "    });",
            "    if (!response.ok) throw new Error(`${method} ${path} failed with ${response.status}`);",
            "    return response.json() as Promise<T>;",
            "  }",
        ]
        seen: set[str] = set()
        for call in calls:
            method_name = lcfirst(_identifier(call.resolved_operation_id()))
            if method_name in seen:
                continue
            seen.add(method_name)
            lines.append("")
            lines.extend(self.client_method(method_name, call, blocks))
        lines.append("}\n")
        return "\n".join(lines)

    def client_method(self, method_name: str, call: EndpointDescriptor, blocks: dict[str, EndpointDescriptor]) -> list[str]:
        params = self.request_params(call, blocks)
        path = path_suffix(call.route or "", self.settings.base_path)
        for param in call.path_params:
            path = path.replace("{" + param.name + "}", "${params." + param.name + "}")
        _, body_params = self.converter.merged(call, blocks)
        query_names = [param.name for param in call.query_params]
        if call.method == "GET":
            query_names += [param.name for param in body_params]
            body_params = []

        response = call.success_schema or "unknown"
        signature = f"params: {self.request_name(call)}" if params else ""
        query = _object_literal(query_names)
        body = _object_literal([param.name for param in body_params])
        lines = []
        if call.name:
            lines.append(f"  /** {call.method} {path_suffix(call.route or '', self.settings.base_path)}: {call.name} */")
        lines.append(f"  {method_name}({signature}): Promise<{response}> {{")
        lines.append(f"    return this.request<{response}>('{call.method}', `{path}`, {query}, {body});")
        lines.append("  }")
        return lines

    def files(self, document: str) -> dict[str, str]:
        return {self.settings.output.typescript.file: document}
