"""Per-run discovery state and the ``document()`` helper used inside handlers.

A handler documents itself by calling ``document`` with a callback that
builds its descriptor::

    def store(self, request: ProbeRequest):
        document(lambda: EndpointDescriptor(name="Create a widget", group="Widgets"))
        ...

Outside a discovery run ``document`` does nothing. During a probe it
registers the descriptor and raises DocumentationModeEnabled so the rest
of the handler never executes.
"""

import contextlib
import contextvars
from typing import Any, Callable, Iterator

from pydantic import BaseModel, Field

from api_doc_gen.config import DocSettings
from api_doc_gen.discovery.container import Container, SimpleContainer
from api_doc_gen.discovery.models import DefaultModelIntrospector, ModelIntrospector
from api_doc_gen.docs.builder import DocBuilder
from api_doc_gen.docs.endpoint import EndpointDescriptor
from api_doc_gen.docs.examples import ExampleGenerator
from api_doc_gen.docs.schema_registry import SchemaRegistry
from api_doc_gen.errors import DocumentationModeEnabled, ProbeReentryError


class ProbeRequest(BaseModel):
    """Synthetic request handed to handlers that ask for one while being probed."""

    method: str = "GET"
    path: str = "/"
    query: dict[str, Any] = Field(default_factory=dict)
    body: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)


class DiscoveryContext:
    """Everything one documentation run shares: settings, collector, schemas, container."""

    def __init__(
        self,
        settings: DocSettings | None = None,
        container: Container | None = None,
        introspector: ModelIntrospector | None = None,
        request_type: type = ProbeRequest,
    ):
        self.settings = settings or DocSettings()
        self.container = container or SimpleContainer()
        self.introspector = introspector or DefaultModelIntrospector()
        self.request_type = request_type
        self.builder = DocBuilder()
        self.schemas = SchemaRegistry(
            introspector=self.introspector,
            examples=ExampleGenerator() if self.settings.generate_examples else None,
            response_wrapper=self.settings.response_wrapper,
        )
        self.documentation_mode = False

    def reset(self) -> None:
        self.builder.reset()
        self.schemas.clear()


_active: contextvars.ContextVar[DiscoveryContext | None] = contextvars.ContextVar("api_doc_context", default=None)


def current_context() -> DiscoveryContext | None:
    return _active.get()


@contextlib.contextmanager
def activate(context: DiscoveryContext) -> Iterator[DiscoveryContext]:
    token = _active.set(context)
    try:
        yield context
    finally:
        _active.reset(token)


@contextlib.contextmanager
def documentation_mode(context: DiscoveryContext) -> Iterator[DiscoveryContext]:
    """Turn documentation mode on for ``context`` within the current thread or task."""
    if context.documentation_mode:
        raise ProbeReentryError("Documentation mode is already active for this discovery context")
    context.documentation_mode = True
    try:
        with activate(context):
            yield context
    finally:
        context.documentation_mode = False


def is_documentation_mode() -> bool:
    context = current_context()
    return context is not None and context.documentation_mode


def document(callback: Callable[[], EndpointDescriptor]) -> None:
    context = current_context()
    if context is None or not context.documentation_mode:
        return
    context.builder.register(callback())
    raise DocumentationModeEnabled()
