"""GitHub-flavoured Markdown reference for the documented API."""

import json
import re
from typing import Any

from api_doc_gen.config import DocSettings
from api_doc_gen.docs.endpoint import EndpointDescriptor
from api_doc_gen.docs.param import Param
from api_doc_gen.docs.schema_registry import SchemaRegistry
from api_doc_gen.generator import code_examples
from api_doc_gen.generator.converter import OpenApiConverter, define_blocks, unique_endpoints

YES = "✅"
NO = "❌"


def slugify(text: str | None) -> str:
    return re.sub(r"[^a-zA-Z0-9]+", "-", text or "").lower()


def _fence(language: str, body: str) -> str:
    return f"```{language}\n{body}\n```\n\n"


def _json(data: Any) -> str:
    return json.dumps(data, indent=4, ensure_ascii=False)


def _param_table(params: list[Param]) -> str:
    md = "| Name | Type | Required | Description |\n"
    md += "|------|------|----------|-------------|\n"
    for param in params:
        md += f"| `{param.name}` | {param.type.value} | {YES if param.required else NO} | {param.description or ''} |\n"
    return md + "\n"


class MarkdownRenderer:
    filename = "API.md"

    def __init__(self, settings: DocSettings):
        self.settings = settings
        self.converter = OpenApiConverter(settings)
        self.include_curl = settings.output.markdown.include_curl
        self.include_fetch = settings.output.markdown.include_fetch

    @property
    def base_url(self) -> str:
        return self.settings.server_url + self.settings.base_path.rstrip("/")

    def render(self, endpoints: list[EndpointDescriptor], schemas: SchemaRegistry) -> str:
        blocks = define_blocks(endpoints)
        documented = unique_endpoints(endpoints, self.settings.base_path)
        grouped: dict[str, list[EndpointDescriptor]] = {}
        for call in documented:
            grouped.setdefault(call.group or "General", []).append(call)

        md = self.header()
        md += self.table_of_contents(grouped)
        md += "## Endpoints\n\n"
        for group, calls in grouped.items():
            md += f"### {group}\n\n"
            for call in calls:
                md += self.endpoint(call, blocks)
        md += self.schemas(schemas)
        return md

    def header(self) -> str:
        info = self.settings.api_info
        md = f"# {info.title}\n\n"
        md += f"> {info.description}\n\n"
        md += f"**Version:** `{info.version}`  \n"
        md += f"**Base URL:** `{self.base_url}`\n\n"
        return md + "---\n\n"

    def table_of_contents(self, grouped: dict[str, list[EndpointDescriptor]]) -> str:
        md = "## Table of Contents\n\n"
        for group, calls in grouped.items():
            md += f"- [{group}](#{slugify(group)})\n"
            for call in calls:
                md += f"  - [{call.method}] [{call.name}](#{slugify(call.name)})\n"
        return md + "\n---\n\n"

    def endpoint(self, call: EndpointDescriptor, blocks: dict[str, EndpointDescriptor]) -> str:
        route = "/" + (call.route or "").lstrip("/")
        md = f"#### {call.name}\n\n"
        md += _fence("http", f"{call.method} {route}")
        description = self.converter.build_description(call)
        if description:
            md += f"{description.rstrip()}\n\n"

        headers, params = self.converter.merged(call, blocks, skip_default=False)
        if headers:
            md += "**Headers:**\n\n" + _param_table(headers)
        if call.path_params:
            md += "**Path Parameters:**\n\n" + _param_table(call.path_params)
        if call.query_params:
            md += "**Query Parameters:**\n\n" + _param_table(call.query_params)
        if params:
            md += "**Parameters:**\n\n" + _param_table(params)

        request_example = call.request_example_or_default()
        if request_example:
            md += "**Request Body:**\n\n" + _fence("json", _json(request_example))

        for title, examples in (("Success Response", call.success_examples), ("Error Response", call.error_examples)):
            if not examples:
                continue
            md += f"**{title}:**\n\n"
            for status, example in sorted(examples.items()):
                md += f"`{status}` {example.description}\n\n"
                if example.example is not None:
                    md += _fence("json", _json(example.example))

        if self.include_curl or self.include_fetch:
            md += self.code_examples(call, route, headers, request_example)
        return md + "---\n\n"

    def code_examples(self, call: EndpointDescriptor, route: str, headers: list[Param], body: dict[str, Any]) -> str:
        example_headers = {"Content-Type": "application/json", "Accept": "application/json"}
        for header in headers:
            value = header.example if header.example is not None else header.default
            example_headers[header.name] = str(value) if value is not None else "{{" + header.name + "}}"
        url = self.settings.server_url + route
        payload = body or None

        md = "**Code Examples:**\n\n"
        if self.include_curl:
            snippet = code_examples.curl(call.method, url, example_headers, payload)
            md += f"<details>\n<summary>curl</summary>\n\n{_fence('bash', snippet)}</details>\n\n"
        if self.include_fetch:
            snippet = code_examples.fetch(call.method, url, example_headers, payload)
            md += f"<details>\n<summary>JavaScript (fetch)</summary>\n\n{_fence('javascript', snippet)}</details>\n\n"
        return md

    def schemas(self, schemas: SchemaRegistry) -> str:
        """Property tables for every registered schema except response envelopes."""
        entries = {name: schema for name, schema in schemas.all().items() if not name.endswith("Response")}
        if not entries:
            return ""
        md = "## Schemas\n\n"
        for name, schema in entries.items():
            md += f"### {name}\n\n"
            md += "| Property | Type | Required | Description |\n"
            md += "|----------|------|----------|-------------|\n"
            required = schema.get("required", [])
            for prop, definition in schema.get("properties", {}).items():
                kind = definition.get("type", "string")
                if "$ref" in definition:
                    kind = definition["$ref"].rsplit("/", 1)[-1]
                md += f"| `{prop}` | {kind} | {YES if prop in required else NO} | {definition.get('description', '')} |\n"
            md += "\n"
        return md

    def files(self, document: str) -> dict[str, str]:
        return {self.filename: document}
