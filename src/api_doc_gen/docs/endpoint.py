"""Endpoint descriptor: everything known about one documented route."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from api_doc_gen.config import AuthHeader
from api_doc_gen.docs.examples import ExampleGenerator
from api_doc_gen.docs.naming import operation_id as derive_operation_id, ucfirst
from api_doc_gen.docs.param import Param, ParamLocation

CONSUME_JSON = "application/json"
CONSUME_MULTIPART = "multipart/form-data"

DEFAULT_ERROR_DESCRIPTIONS = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    422: "Validation Error",
    500: "Server Error",
}

_examples = ExampleGenerator()


class ResponseExample(BaseModel):
    description: str
    example: Any = None


class RateLimit(BaseModel):
    limit: int = 60
    period: str = "minute"


class DefineBlock(BaseModel):
    """A reusable block other endpoints pull in by title through ``use``."""

    title: str
    description: str = ""


def auth_header_param(header: AuthHeader) -> Param:
    param = Param.header(header.name, header.description or ucfirst(header.name.replace("-", " ").replace("_", " ")))
    if header.example is not None:
        param.set_default(header.example)
    if not header.required:
        param.optional()
    return param


class EndpointDescriptor(BaseModel):
    route: str | None = None
    method: str = "GET"
    group: str | None = None
    name: str | None = None
    description: str | None = None
    version: str = "1.0.0"
    tags: list[str] = Field(default_factory=list)
    headers: list[Param] = Field(default_factory=list)
    params: list[Param] = Field(default_factory=list)
    query_params: list[Param] = Field(default_factory=list)
    path_params: list[Param] = Field(default_factory=list)
    success_params: list[Param] = Field(default_factory=list)
    request_example: dict[str, Any] = Field(default_factory=dict)
    success_examples: dict[int, ResponseExample] = Field(default_factory=dict)
    error_examples: dict[int, ResponseExample] = Field(default_factory=dict)
    deprecated: str | None = None
    rate_limit: RateLimit | None = None
    possible_errors: dict[int, str] = Field(default_factory=dict)
    success_schema: str | None = None
    error_schema: str | None = None
    operation_id: str | None = None
    define: DefineBlock | None = None
    use: list[str] = Field(default_factory=list)
    add_default_headers: bool = True
    consumes: list[str] = Field(default_factory=list)
    security: list[str] | None = None
    success_object: str | None = None
    success_paginated_object: str | None = None
    success_message_only: bool = False

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return (value or "GET").upper()

    @property
    def is_define(self) -> bool:
        return self.define is not None

    @property
    def is_deprecated(self) -> bool:
        return self.deprecated is not None

    @property
    def has_file_uploads(self) -> bool:
        return CONSUME_MULTIPART in self.consumes

    def resolved_operation_id(self) -> str:
        return self.operation_id or derive_operation_id(self.group, self.name)

    def effective_tags(self) -> list[str]:
        if self.tags:
            return list(self.tags)
        return [self.group or "General"]

    def add_params(self, params: list[Param]) -> "EndpointDescriptor":
        """Route params into the body, query or path container by location."""
        for param in params:
            if param.location is ParamLocation.QUERY:
                self.query_params.append(param)
            elif param.location is ParamLocation.PATH:
                self.path_params.append(param)
            elif param.location is ParamLocation.HEADER:
                self.headers.append(param)
            else:
                self.params.append(param)
        return self

    def request_example_or_default(self) -> dict[str, Any]:
        if self.request_example or not self.params:
            return self.request_example
        example = {}
        for param in self.params:
            if param.name:
                example[param.name] = param.example if param.example is not None else _examples.for_field(param.name, param.type.value)
        return example

    def set_success_example(self, example: Any, status: int = 200, description: str | None = None) -> "EndpointDescriptor":
        self.success_examples[status] = ResponseExample(description=description or "Successful response", example=example)
        return self

    def set_error_example(self, example: Any, status: int = 400, description: str | None = None) -> "EndpointDescriptor":
        description = description or DEFAULT_ERROR_DESCRIPTIONS.get(status, "Error")
        self.error_examples[status] = ResponseExample(description=description, example=example)
        return self

    def with_default_headers(self, auth_headers: list[AuthHeader]) -> "EndpointDescriptor":
        headers = [Param.header("Accept", "Response content type").set_default(CONSUME_JSON)]
        headers.extend(auth_header_param(header) for header in auth_headers)
        self.headers = headers
        return self

    def with_config_headers(self, names: list[str], auth_headers: list[AuthHeader]) -> "EndpointDescriptor":
        """Append the configured auth headers named in ``names``; unknown names become plain headers."""
        known = {header.name: header for header in auth_headers}
        for name in names:
            if any(existing.name == name for existing in self.headers):
                continue
            if name in known:
                self.headers.append(auth_header_param(known[name]))
            else:
                self.headers.append(Param.header(name))
        return self
