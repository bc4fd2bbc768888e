"""Collects endpoint descriptors and back-fills what handlers leave out."""

import logging
import re
from typing import Any

from pydantic import BaseModel, Field

from api_doc_gen.config import AuthHeader
from api_doc_gen.docs.endpoint import DefineBlock, EndpointDescriptor, auth_header_param
from api_doc_gen.docs.naming import group_from_class, snake, synthesize_default_name
from api_doc_gen.docs.param import Param, ParamLocation, ParamType
from api_doc_gen.docs.rules import rules_to_params
from api_doc_gen.errors import MissingRouteError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS_BLOCK = "default_headers"

_PATH_TOKEN = re.compile(r"\{(\w+)(?::(\w+))?\??\}|<(?:(\w+):)?(\w+)>")
_INTEGER_CONVERTERS = {"int", "integer"}


class Interceptor(BaseModel):
    """What discovery knows about the route currently being probed."""

    method: str
    uri: str
    action: str
    class_name: str | None = None
    rules: dict[str, Any] = Field(default_factory=dict)


def path_tokens(route: str) -> list[tuple[str, ParamType]]:
    """``/users/{id}`` or ``/users/<int:id>`` -> ``[("id", ...)]``."""
    tokens = []
    for match in _PATH_TOKEN.finditer(route):
        if match.group(1):
            name, converter = match.group(1), match.group(2)
        else:
            name, converter = match.group(4), match.group(3)
        kind = ParamType.INTEGER if converter in _INTEGER_CONVERTERS else ParamType.STRING
        tokens.append((name, kind))
    return tokens


class DocBuilder:
    def __init__(self):
        self.api_calls: list[EndpointDescriptor] = []
        self.interceptor: Interceptor | None = None

    def reset(self) -> None:
        self.api_calls = []
        self.interceptor = None

    def __len__(self) -> int:
        return len(self.api_calls)

    def set_interceptor(self, method: str, uri: str, action: str, rules: dict[str, Any] | None = None, class_name: str | None = None) -> None:
        self.interceptor = Interceptor(method=method, uri=uri, action=action, rules=rules or {}, class_name=class_name)

    def clear_interceptor(self) -> None:
        self.interceptor = None

    def register(self, call: EndpointDescriptor) -> EndpointDescriptor:
        """Add ``call`` to the collection, filling gaps from the interceptor.

        Raises MissingRouteError when neither the descriptor nor the
        interceptor knows the route.
        """
        if call.is_define:
            if not call.group:
                call.group = snake(call.define.title)
            self.api_calls.append(call)
            return call

        if call.add_default_headers and DEFAULT_HEADERS_BLOCK not in call.use:
            call.use.append(DEFAULT_HEADERS_BLOCK)

        interceptor = self.interceptor
        if not call.route:
            if interceptor is None or not interceptor.uri:
                raise MissingRouteError("The route must be set for the API call")
            call.route = interceptor.uri

        if call.method == "GET" and interceptor is not None and interceptor.method:
            call.method = interceptor.method.upper()

        if not call.group and interceptor is not None and interceptor.class_name:
            call.group = group_from_class(interceptor.class_name)

        if not call.name:
            action = interceptor.action if interceptor is not None else None
            call.name = synthesize_default_name(call.method, call.group, action)

        if not call.group:
            call.group = "Misc"

        if not call.params and interceptor is not None and interceptor.rules:
            call.params = rules_to_params(interceptor.rules)

        self._add_path_params(call)
        self.api_calls.append(call)
        logger.debug("Registered %s %s", call.method, call.route)
        return call

    def _add_path_params(self, call: EndpointDescriptor) -> None:
        declared = {param.name for param in call.path_params}
        for name, kind in path_tokens(call.route or ""):
            if name not in declared:
                call.path_params.append(Param.make(name, kind).set_location(ParamLocation.PATH))

    def auto_register(self) -> EndpointDescriptor:
        """Register an empty descriptor; register() derives everything from the interceptor."""
        return self.register(EndpointDescriptor())

    def find_by_definition(self, title: str) -> EndpointDescriptor | None:
        for call in self.api_calls:
            if call.define is not None and call.define.title == title:
                return call
        return None

    def endpoints(self) -> list[EndpointDescriptor]:
        return [call for call in self.api_calls if not call.is_define]

    def default_headers_definition(self, auth_headers: list[AuthHeader]) -> EndpointDescriptor:
        headers = [Param.header("Accept", "Set to `application/json`").set_default("application/json")]
        headers.extend(auth_header_param(header) for header in auth_headers)
        return EndpointDescriptor(define=DefineBlock(title=DEFAULT_HEADERS_BLOCK), headers=headers)

    def dump(self) -> list[dict[str, Any]]:
        return [call.model_dump(mode="json") for call in self.api_calls]

    def load(self, calls: list[dict[str, Any] | EndpointDescriptor]) -> None:
        self.api_calls = [call if isinstance(call, EndpointDescriptor) else EndpointDescriptor.model_validate(call) for call in calls]
