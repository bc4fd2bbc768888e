"""Walks the route table and turns every documentable route into descriptors."""

import logging

from pydantic import BaseModel

from api_doc_gen.discovery.context import DiscoveryContext
from api_doc_gen.discovery.models import discover_model_classes
from api_doc_gen.discovery.probe import HandlerProber
from api_doc_gen.discovery.reader import AttributeReader
from api_doc_gen.discovery.routes import ResolvedHandler, Route, RouteRegistry, resolve_handler, select_routes
from api_doc_gen.docs.endpoint import EndpointDescriptor
from api_doc_gen.docs.naming import group_from_class
from api_doc_gen.errors import ConfigurationError

logger = logging.getLogger(__name__)


class DiscoveryReport(BaseModel):
    selected: int = 0
    documented: int = 0
    skipped: int = 0


class RouteDiscoveryService:
    def __init__(self, context: DiscoveryContext):
        self.context = context
        self.reader = AttributeReader(context)
        self.prober = HandlerProber(context)

    def discover_models(self) -> int:
        settings = self.context.settings
        if not settings.auto_discover_models or not settings.model_modules:
            return 0
        models = discover_model_classes(settings.model_modules, self.context.introspector)
        return self.context.schemas.discover_models(models)

    def discover(self, registry: RouteRegistry, base_path: str | None = None) -> DiscoveryReport:
        """Document every route under ``base_path``, in route-table order.

        Routes whose handler cannot be resolved or whose probe fails are
        skipped; ConfigurationError aborts the run.
        """
        base_path = self.context.settings.base_path if base_path is None else base_path
        routes = select_routes(registry.list(), base_path)
        logger.info("Found %d API routes to document", len(routes))

        report = DiscoveryReport(selected=len(routes))
        for route in routes:
            before = len(self.context.builder)
            try:
                self.document_route(route)
            except ConfigurationError:
                raise
            except Exception as exc:
                logger.debug("Skipping %s %s: %s", route.method, route.path, exc)
            if len(self.context.builder) > before:
                report.documented += 1
            else:
                report.skipped += 1
        return report

    def document_route(self, route: Route) -> None:
        handler = resolve_handler(route)
        if handler is None:
            logger.debug("No resolvable handler for %s", route.path)
            return

        call = self.reader.read(handler.handler_class, handler.method_name)
        if call is not None:
            self._register_attributed(route, handler, call)
            return

        self.prober.probe(route, handler)

    def _register_attributed(self, route: Route, handler: ResolvedHandler, call: EndpointDescriptor) -> None:
        call.route = route.uri
        call.method = route.method
        if not call.group:
            call.group = group_from_class(handler.class_name)
        self.context.builder.register(call)
