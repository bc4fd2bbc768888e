"""Build endpoint descriptors from documentation decorators."""

import inspect
import logging
from typing import Any

from api_doc_gen.discovery.attributes import (
    DocAPI,
    DocError,
    DocGroup,
    DocHeader,
    DocParam,
    DocRequest,
    DocResponse,
    read_attributes,
)
from api_doc_gen.discovery.context import DiscoveryContext
from api_doc_gen.discovery.models import import_object
from api_doc_gen.docs.endpoint import DefineBlock, EndpointDescriptor, RateLimit
from api_doc_gen.docs.param import Param, ParamLocation
from api_doc_gen.docs.rules import rules_to_params
from api_doc_gen.errors import InvalidDocAttributeError

logger = logging.getLogger(__name__)

REQUEST_RULES_DESCRIPTION = "Auto-generated from request rules"


def _rate_limit(value: dict[str, Any]) -> RateLimit:
    return RateLimit(limit=value.get("limit", 60), period=value.get("period", "minute"))


def resolve_rules(request_class: Any, context: DiscoveryContext) -> dict[str, Any]:
    """``rules()`` of a request class built through the container; ``{}`` on any failure."""
    if isinstance(request_class, str):
        try:
            request_class = import_object(request_class)
        except ImportError:
            return {}
    if not inspect.isclass(request_class) or not callable(getattr(request_class, "rules", None)):
        return {}
    try:
        try:
            instance = context.container.resolve(request_class)
        except Exception:
            instance = request_class()
        rules = instance.rules()
    except Exception as exc:
        logger.debug("Cannot read rules from %s: %s", request_class.__name__, exc)
        return {}
    return rules if isinstance(rules, dict) else {}


class AttributeReader:
    def __init__(self, context: DiscoveryContext):
        self.context = context

    @property
    def settings(self):
        return self.context.settings

    def has_doc_api(self, handler_class: type, method_name: str) -> bool:
        function = getattr(handler_class, method_name, None)
        return function is not None and bool(read_attributes(function, DocAPI))

    def read(self, handler_class: type, method_name: str) -> EndpointDescriptor | None:
        """Descriptor for the decorated method, or None when it carries no ``doc_api``."""
        function = getattr(handler_class, method_name, None)
        if function is None:
            return None
        doc_apis = read_attributes(function, DocAPI)
        if not doc_apis:
            return None
        doc_api: DocAPI = doc_apis[0]

        call = EndpointDescriptor()
        groups = read_attributes(handler_class, DocGroup)
        if groups:
            self._apply_group(call, groups[0])
        self._apply_doc_api(call, doc_api)

        self._apply_params(call, read_attributes(function, DocParam))
        for request in read_attributes(function, DocRequest):
            self._apply_request(call, request)
        self._apply_headers(call, read_attributes(function, DocHeader))
        self._apply_responses(call, read_attributes(function, DocResponse))
        self._apply_errors(call, read_attributes(function, DocError))
        self._apply_success_object(call)
        return call

    def _apply_group(self, call: EndpointDescriptor, group: DocGroup) -> None:
        if group.group:
            call.group = group.group
        call.version = group.version
        call.tags = list(group.tags)
        call.consumes = list(group.consumes)
        call.add_default_headers = group.add_default_headers
        if group.headers:
            call.with_config_headers(group.headers, self.settings.auth_headers)
        if group.rate_limit is not None:
            call.rate_limit = _rate_limit(group.rate_limit)
        call.possible_errors = dict(group.possible_errors)
        if group.security:
            call.security = list(group.security)
        if group.description_prefix:
            call.description = group.description_prefix

    def _apply_doc_api(self, call: EndpointDescriptor, doc_api: DocAPI) -> None:
        explicit = doc_api.model_fields_set
        for field in ("name", "group", "operation_id", "version", "success_schema", "error_schema", "deprecated"):
            if field in explicit and getattr(doc_api, field) is not None:
                setattr(call, field, getattr(doc_api, field))
        if doc_api.description:
            call.description = f"{call.description} {doc_api.description}" if call.description else doc_api.description
        if doc_api.tags:
            call.tags = list(doc_api.tags)
        if doc_api.consumes:
            call.consumes = list(doc_api.consumes)
        if "add_default_headers" in explicit:
            call.add_default_headers = doc_api.add_default_headers
        if doc_api.rate_limit is not None:
            call.rate_limit = _rate_limit(doc_api.rate_limit)
        if doc_api.possible_errors:
            call.possible_errors = {**call.possible_errors, **doc_api.possible_errors}
        if doc_api.success_object is not None:
            call.success_object = self._reference(doc_api.success_object)
        if doc_api.success_paginated_object is not None:
            call.success_paginated_object = self._reference(doc_api.success_paginated_object)
        call.success_message_only = doc_api.success_message_only
        if doc_api.request_example:
            call.request_example = dict(doc_api.request_example)
        call.success_params = [
            Param.model_validate(definition) for definition in doc_api.success_params if definition.get("name")
        ]
        if doc_api.define and doc_api.define.get("title"):
            call.define = DefineBlock(title=doc_api.define["title"], description=doc_api.define.get("description", ""))
        uses = [doc_api.use] if isinstance(doc_api.use, str) else doc_api.use
        call.use.extend(uses)
        if doc_api.headers:
            call.headers = []
            call.with_config_headers(doc_api.headers, self.settings.auth_headers)
        if doc_api.params:
            call.add_params([Param.model_validate(definition) for definition in doc_api.params])

    def _reference(self, model: Any) -> str:
        """Model references are kept as import paths so descriptors stay serialisable."""
        if inspect.isclass(model):
            self.context.schemas.register_model(model)
            return model.__name__
        return str(model)

    def resolve_param(self, doc_param: DocParam) -> Param:
        """Merge a ``doc_param`` with its template; explicit values win field by field."""
        template: dict[str, Any] | None = None
        if doc_param.template is not None:
            template = self.settings.param_templates.get(doc_param.template)

        name = doc_param.name
        if not name and template is not None:
            name = template.get("name") or doc_param.template
        if not name:
            raise InvalidDocAttributeError.for_attribute(
                "DocParam", f"a parameter needs a name or a known template (got template {doc_param.template!r})"
            )

        values: dict[str, Any] = {"required": True, "location": "body"}
        values.update({key: value for key, value in (template or {}).items() if key != "name"})
        explicit = doc_param.model_dump(include=doc_param.model_fields_set - {"name", "template"})
        if "required" in explicit:
            explicit["required"] = explicit["required"] and values.get("required", True)
        values.update(explicit)
        values["name"] = name

        location = ParamLocation.parse(values.pop("location", "body")) or ParamLocation.BODY
        return Param.model_validate(values).set_location(location)

    def _apply_params(self, call: EndpointDescriptor, doc_params: list[DocParam]) -> None:
        call.add_params([self.resolve_param(doc_param) for doc_param in doc_params])

    def _apply_request(self, call: EndpointDescriptor, request: DocRequest) -> None:
        rules = resolve_rules(request.request_class, self.context)
        call.add_params(rules_to_params(rules, REQUEST_RULES_DESCRIPTION))

    def _apply_headers(self, call: EndpointDescriptor, doc_headers: list[DocHeader]) -> None:
        for doc_header in doc_headers:
            header = Param.header(doc_header.name, doc_header.description)
            default = doc_header.default if doc_header.default is not None else doc_header.example
            if default is not None:
                header.set_default(default)
            if doc_header.example is not None:
                header.set_example(doc_header.example)
            if not doc_header.required:
                header.optional()
            call.headers.append(header)

    def _apply_responses(self, call: EndpointDescriptor, responses: list[DocResponse]) -> None:
        for response in responses:
            if not 100 <= response.status <= 599:
                raise InvalidDocAttributeError.for_attribute(
                    "DocResponse", f"status code must be between 100 and 599, got {response.status}"
                )
            if response.is_error:
                call.set_error_example(response.example, response.status, response.description)
            else:
                call.set_success_example(response.example, response.status, response.description)

    def _apply_errors(self, call: EndpointDescriptor, errors: list[DocError]) -> None:
        for error in errors:
            preset = self.settings.error_presets.get(error.preset)
            if preset is None:
                logger.debug("Unknown error preset %s", error.preset)
                continue
            example = error.example if error.example is not None else preset.example
            call.set_error_example(example, preset.status, error.description or preset.description)

    def _apply_success_object(self, call: EndpointDescriptor) -> None:
        schemas = self.context.schemas
        if call.success_object:
            name = schemas.ensure_schema_exists(call.success_object)
            schemas.define_all_responses(name)
            call.success_schema = call.success_schema or f"{name}Response"
        if call.success_paginated_object:
            name = schemas.ensure_schema_exists(call.success_paginated_object)
            schemas.define_all_responses(name)
            call.success_schema = call.success_schema or f"{name}PaginatedResponse"
        if call.success_message_only and not call.success_schema:
            call.success_schema = schemas.define_message_response()
