"""Runtime probing: invoke a handler in documentation mode to capture its ``document()`` call.

This is the compatibility path for handlers that document themselves in
their body instead of through decorators.
"""

import asyncio
import enum
import inspect
import logging
import types
import typing
from typing import Any, Callable

from pydantic import BaseModel, Field

from api_doc_gen.discovery.context import DiscoveryContext, documentation_mode
from api_doc_gen.discovery.reader import resolve_rules
from api_doc_gen.discovery.routes import ResolvedHandler, Route
from api_doc_gen.docs.endpoint import EndpointDescriptor
from api_doc_gen.errors import DocumentationModeEnabled

logger = logging.getLogger(__name__)


class ProbeOutcome(str, enum.Enum):
    REGISTERED = "registered"
    COMPLETED = "completed"


class ProbeResult(BaseModel):
    outcome: ProbeOutcome
    descriptors: list[EndpointDescriptor] = Field(default_factory=list)


class ParamKind(str, enum.Enum):
    PRIMITIVE = "primitive"
    REQUEST = "request"
    RESOLVABLE = "resolvable"
    UNKNOWN = "unknown"


_PRIMITIVE_DEFAULTS: dict[type, Callable[[], Any]] = {
    bool: lambda: True,
    int: lambda: 1,
    float: lambda: 1.0,
    str: lambda: "test",
    list: list,
    tuple: tuple,
    set: set,
    dict: dict,
}


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        nullable = len(args) < len(typing.get_args(annotation))
        if len(args) == 1:
            return args[0], nullable
        return annotation, nullable
    return annotation, False


def _type_hints(function: Callable[..., Any]) -> dict[str, Any]:
    try:
        return typing.get_type_hints(function)
    except Exception:
        return {}


class ArgumentSynthesizer:
    """Builds call arguments for a handler from its signature."""

    def __init__(self, context: DiscoveryContext):
        self.context = context

    def kind_of(self, annotation: Any) -> ParamKind:
        if annotation is inspect.Parameter.empty:
            return ParamKind.PRIMITIVE
        base = typing.get_origin(annotation) or annotation
        if base in _PRIMITIVE_DEFAULTS:
            return ParamKind.PRIMITIVE
        if not inspect.isclass(base):
            return ParamKind.UNKNOWN
        if issubclass(base, self.context.request_type):
            return ParamKind.REQUEST
        return ParamKind.RESOLVABLE

    def value_for(self, parameter: inspect.Parameter, annotation: Any, request: Any) -> Any:
        annotation, nullable = _unwrap_optional(annotation)
        nullable = nullable or parameter.default is None
        kind = self.kind_of(annotation)

        if kind is ParamKind.PRIMITIVE:
            if parameter.default is not inspect.Parameter.empty:
                return parameter.default
            base = typing.get_origin(annotation) or annotation
            return _PRIMITIVE_DEFAULTS.get(base, _PRIMITIVE_DEFAULTS[str])()
        if kind is ParamKind.REQUEST:
            return request
        if kind is ParamKind.RESOLVABLE:
            try:
                return self.context.container.resolve(annotation)
            except Exception:
                if nullable:
                    return None
            try:
                return annotation()
            except Exception:
                return None
        return None

    def arguments(
        self, function: Callable[..., Any], request: Any, hints: dict[str, Any] | None = None
    ) -> tuple[list[Any], dict[str, Any]]:
        hints = _type_hints(function) if hints is None else hints
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for name, parameter in inspect.signature(function).parameters.items():
            if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            value = self.value_for(parameter, hints.get(name, parameter.annotation), request)
            if parameter.kind is inspect.Parameter.KEYWORD_ONLY:
                kwargs[name] = value
            else:
                args.append(value)
        return args, kwargs

    def construct(self, cls: type, request: Any) -> Any:
        """Instance of ``cls`` built from synthesized constructor arguments."""
        if cls.__init__ is object.__init__:
            return cls()
        args, kwargs = self.arguments(cls, request, hints=_type_hints(cls.__init__))
        return cls(*args, **kwargs)


def rule_sources(function: Callable[..., Any]) -> list[type]:
    """Parameter types of ``function`` that declare validation ``rules()``."""
    sources = []
    for name, annotation in _type_hints(function).items():
        if name == "return":
            continue
        annotation, _ = _unwrap_optional(annotation)
        if inspect.isclass(annotation) and callable(getattr(annotation, "rules", None)):
            sources.append(annotation)
    return sources


class HandlerProber:
    def __init__(self, context: DiscoveryContext):
        self.context = context
        self.synthesizer = ArgumentSynthesizer(context)

    def request_rules(self, handler: ResolvedHandler) -> dict[str, Any]:
        rules: dict[str, Any] = {}
        for source in rule_sources(handler.function):
            rules.update(resolve_rules(source, self.context))
        return rules

    def _instance(self, handler: ResolvedHandler, request: Any) -> Any:
        try:
            return self.context.container.resolve(handler.handler_class)
        except Exception:
            return self.synthesizer.construct(handler.handler_class, request)

    def probe(self, route: Route, handler: ResolvedHandler) -> ProbeResult:
        """Invoke the handler in documentation mode.

        Handler exceptions other than the documentation sentinel propagate.
        Whatever happens, a handler that registered nothing is given a
        synthesized descriptor when ``auto_generate`` is on.
        """
        builder = self.context.builder
        builder.set_interceptor(route.method, route.uri, handler.label, self.request_rules(handler), handler.class_name)
        initial = len(builder)
        outcome = ProbeOutcome.COMPLETED
        request = self.context.request_type(method=route.method, path="/" + route.uri)
        try:
            bound = getattr(self._instance(handler, request), handler.method_name)
            args, kwargs = self.synthesizer.arguments(bound, request)
            with documentation_mode(self.context):
                try:
                    result = bound(*args, **kwargs)
                    if inspect.iscoroutine(result):
                        asyncio.run(result)
                except DocumentationModeEnabled:
                    outcome = ProbeOutcome.REGISTERED
        finally:
            if len(builder) == initial and self.context.settings.auto_generate:
                builder.auto_register()
                logger.info("Auto-generated: %s", route.uri)
            builder.clear_interceptor()
        return ProbeResult(outcome=outcome, descriptors=builder.api_calls[initial:])
