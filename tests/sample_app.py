"""A small documented application used across the tests."""

from pydantic import BaseModel

from api_doc_gen.config import DocSettings
from api_doc_gen.discovery.attributes import doc_api, doc_error, doc_group, doc_header, doc_param, doc_request, doc_response
from api_doc_gen.discovery.context import DiscoveryContext, ProbeRequest, document
from api_doc_gen.discovery.orchestrator import RouteDiscoveryService
from api_doc_gen.discovery.routes import StaticRouteRegistry
from api_doc_gen.docs.endpoint import EndpointDescriptor
from api_doc_gen.docs.schema_type import SchemaType


class User(BaseModel):
    id: int
    name: str
    email: str
    password: str
    age: int | None = None


class Post(BaseModel):
    id: int
    title: str
    body: str

    @classmethod
    def add_extra_api_columns(cls):
        return {"author": SchemaType.make().model(User).required()}


class StoreUserRequest(ProbeRequest):
    def rules(self):
        return {"email": "required|email", "age": "integer|min:18", "tags.*": "string"}


class UpdateUserRequest(ProbeRequest):
    def rules(self):
        return {"name": "required|string|max:255", "role": "in:admin,member"}


@doc_group(group="Users", possible_errors={404: "User not found"})
class UserController:
    calls = 0

    @doc_api(name="List users", success_paginated_object=User)
    @doc_param(name="page", type="integer", location="query", required=False)
    def index(self, request: ProbeRequest):
        UserController.calls += 1
        return []

    def store(self, request: StoreUserRequest):
        document(lambda: EndpointDescriptor(name="Create a user"))
        UserController.calls += 1

    @doc_api(name="Update a user", success_object=User)
    @doc_request(UpdateUserRequest)
    @doc_header("X-Request-Id", required=False, example="abc-123")
    @doc_response(200, example={"id": 1, "name": "John Doe"})
    @doc_error("not_found")
    def update(self, request: ProbeRequest, id: int):
        UserController.calls += 1

    def show(self, request: ProbeRequest, id: int):
        UserController.calls += 1
        return {"id": id}

    def destroy(self, request: ProbeRequest, id: int):
        raise RuntimeError("database unavailable")


class PostController:
    @doc_api(name="Publish a post", success_message_only=True, deprecated="Use the v2 endpoint")
    @doc_param(name="title", required=True)
    @doc_param(name="attachment", type="file", required=False)
    def publish(self, request: ProbeRequest):
        raise AssertionError("documented handlers are never invoked")


class HomeController:
    def home(self, request: ProbeRequest):
        return "home"


def build_registry() -> StaticRouteRegistry:
    registry = StaticRouteRegistry()
    registry.get("/api/v1/users", (UserController, "index"))
    registry.post("/api/v1/users", (UserController, "store"))
    registry.get("/api/v1/users/{id}", (UserController, "show"))
    registry.put("/api/v1/users/{id}", (UserController, "update"))
    registry.delete("/api/v1/users/{id}", (UserController, "destroy"))
    registry.post("/api/v1/posts/publish", (PostController, "publish"))
    registry.get("/home", (HomeController, "home"))
    return registry


routes = build_registry()


def collect(settings: DocSettings | None = None, registry=None) -> DiscoveryContext:
    """Discover the sample routes into a fresh context, default headers block included."""
    context = DiscoveryContext(settings or DocSettings())
    builder = context.builder
    builder.register(builder.default_headers_definition(context.settings.auth_headers))
    RouteDiscoveryService(context).discover(registry or build_registry())
    return context
