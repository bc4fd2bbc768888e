"""Documentation decorators for handler classes and methods.

Decorators only record metadata; nothing runs until discovery reads it::

    @doc_group(group="Users", headers=["x-api-key"])
    class UserController:
        @doc_api(name="List users", success_paginated_object="app.models.User")
        @doc_param(name="page", type="integer", location="query", required=False)
        def index(self, request):
            ...
"""

from typing import Any, Callable, TypeVar

from pydantic import BaseModel, Field

ATTRIBUTE_TABLE = "__api_doc__"

F = TypeVar("F", bound=Callable[..., Any])


class DocAPI(BaseModel):
    name: str | None = None
    group: str | None = None
    description: str | None = None
    success_object: Any = None
    success_paginated_object: Any = None
    success_message_only: bool = False
    operation_id: str | None = None
    version: str = "1.0.0"
    tags: list[str] = Field(default_factory=list)
    deprecated: str | None = None
    rate_limit: dict[str, Any] | None = None
    consumes: list[str] = Field(default_factory=list)
    add_default_headers: bool = True
    headers: list[str] = Field(default_factory=list)
    params: list[dict[str, Any]] = Field(default_factory=list)
    request_example: dict[str, Any] = Field(default_factory=dict)
    success_params: list[dict[str, Any]] = Field(default_factory=list)
    define: dict[str, str] | None = None
    use: list[str] | str = Field(default_factory=list)
    possible_errors: dict[int, str] = Field(default_factory=dict)
    success_schema: str | None = None
    error_schema: str | None = None


class DocGroup(BaseModel):
    group: str | None = None
    version: str = "1.0.0"
    tags: list[str] = Field(default_factory=list)
    consumes: list[str] = Field(default_factory=lambda: ["application/json"])
    description_prefix: str | None = None
    add_default_headers: bool = True
    headers: list[str] = Field(default_factory=list)
    rate_limit: dict[str, Any] | None = None
    possible_errors: dict[int, str] = Field(default_factory=dict)
    security: list[str] = Field(default_factory=list)


class DocParam(BaseModel):
    name: str | None = None
    type: str = "string"
    description: str | None = None
    example: Any = None
    required: bool = True
    default: Any = None
    enum: list[Any] | None = None
    min: float | int | None = None
    max: float | int | None = None
    pattern: str | None = None
    location: str = "body"
    template: str | None = None


class DocHeader(BaseModel):
    name: str
    description: str | None = None
    example: str | None = None
    required: bool = True
    default: str | None = None


class DocResponse(BaseModel):
    status: int
    description: str | None = None
    example: Any = Field(default_factory=dict)
    is_error: bool = False


class DocError(BaseModel):
    preset: str
    description: str | None = None
    example: Any = None


class DocRequest(BaseModel):
    request_class: Any


def _record(target: Any, attribute: BaseModel) -> None:
    table = target.__dict__.get(ATTRIBUTE_TABLE) if isinstance(target, type) else getattr(target, ATTRIBUTE_TABLE, None)
    if table is None:
        table = []
        setattr(target, ATTRIBUTE_TABLE, table)
    # decorators apply bottom-up; keep the order they are written in
    table.insert(0, attribute)


def _decorator(attribute: BaseModel) -> Callable[[F], F]:
    def decorator(target: F) -> F:
        _record(target, attribute)
        return target

    return decorator


def doc_api(**fields: Any) -> Callable[[F], F]:
    return _decorator(DocAPI(**fields))


def doc_group(**fields: Any) -> Callable[[F], F]:
    return _decorator(DocGroup(**fields))


def doc_param(name: str | None = None, **fields: Any) -> Callable[[F], F]:
    return _decorator(DocParam(name=name, **fields) if name is not None else DocParam(**fields))


def doc_header(name: str, **fields: Any) -> Callable[[F], F]:
    return _decorator(DocHeader(name=name, **fields))


def doc_response(status: int, **fields: Any) -> Callable[[F], F]:
    return _decorator(DocResponse(status=status, **fields))


def doc_error(preset: str, **fields: Any) -> Callable[[F], F]:
    return _decorator(DocError(preset=preset, **fields))


def doc_request(request_class: Any) -> Callable[[F], F]:
    return _decorator(DocRequest(request_class=request_class))


def read_attributes(target: Any, kind: type[BaseModel]) -> list[Any]:
    """Attributes of ``kind`` recorded directly on ``target`` (not inherited for classes)."""
    if isinstance(target, type):
        table = target.__dict__.get(ATTRIBUTE_TABLE, [])
    else:
        table = getattr(target, ATTRIBUTE_TABLE, [])
    return [attribute for attribute in table if isinstance(attribute, kind)]
