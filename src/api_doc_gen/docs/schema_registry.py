"""Named, reusable object schemas and their response envelopes.

Schemas are stored with Swagger 2 references (``#/definitions/Name``);
renderers for other dialects rewrite them on output.
"""

import copy
import logging
from typing import Any

from api_doc_gen.discovery.models import DefaultModelIntrospector, ModelIntrospector, resolve_model
from api_doc_gen.docs.examples import ExampleGenerator
from api_doc_gen.docs.naming import humanize
from api_doc_gen.docs.param import Param, ParamType
from api_doc_gen.docs.schema_type import SchemaType, model_schema_name

logger = logging.getLogger(__name__)

DATA_PLACEHOLDER = "__DATA__"
DEFAULT_EXCLUDE = ("password", "remember_token")
REQUIRED_COLUMNS = ("id", "uuid", "created_at", "updated_at")
TIMESTAMP_COLUMNS = ("created_at", "updated_at")

_STORAGE_TYPES = {
    "int": "integer",
    "integer": "integer",
    "bigint": "integer",
    "smallint": "integer",
    "tinyint": "integer",
    "mediumint": "integer",
    "float": "number",
    "double": "number",
    "decimal": "number",
    "real": "number",
    "numeric": "number",
    "bool": "boolean",
    "boolean": "boolean",
    "json": "object",
    "jsonb": "object",
    "array": "array",
}

PAGINATION_META = {
    "type": "object",
    "properties": {
        "current_page": {"type": "integer", "example": 1},
        "from": {"type": "integer", "example": 1},
        "last_page": {"type": "integer", "example": 10},
        "per_page": {"type": "integer", "example": 15},
        "to": {"type": "integer", "example": 15},
        "total": {"type": "integer", "example": 150},
    },
}

PAGINATION_LINKS = {
    "type": "object",
    "properties": {
        "first": {"type": "string"},
        "last": {"type": "string"},
        "prev": {"type": "string", "nullable": True},
        "next": {"type": "string", "nullable": True},
    },
}


def storage_type_to_param_type(storage_type: str) -> str:
    """Map a column storage type (``bigint``, ``varchar``, ``jsonb``...) to a schema type."""
    return _STORAGE_TYPES.get(storage_type.lower(), "string")


def ref(name: str) -> dict[str, str]:
    return {"$ref": f"#/definitions/{name}"}


def _example_type(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    return "string"


class SchemaRegistry:
    def __init__(
        self,
        introspector: ModelIntrospector | None = None,
        examples: ExampleGenerator | None = None,
        response_wrapper: dict[str, Any] | None = None,
    ):
        self.introspector = introspector or DefaultModelIntrospector()
        self.examples = examples
        self.response_wrapper = response_wrapper
        self.models: dict[str, type] = {}
        self._schemas: dict[str, dict[str, Any]] = {}

    def define(self, name: str, properties: dict[str, Any] | list[Param]) -> dict[str, Any]:
        """Define (or replace) an object schema.

        ``properties`` maps field names to a type name or a full property
        dict; a list of Params may be given instead, in which case required
        params land in ``required``.
        """
        schema: dict[str, Any] = {"type": "object", "properties": {}, "required": []}
        items = properties.items() if isinstance(properties, dict) else ((param.name, param) for param in properties)
        for key, value in items:
            if isinstance(value, Param):
                field = value.name or key
                schema["properties"][field] = value.to_schema()
                if value.required and field not in schema["required"]:
                    schema["required"].append(field)
            elif isinstance(value, str):
                schema["properties"][key] = {"type": ParamType.parse(value).to_swagger()}
            elif isinstance(value, dict):
                schema["properties"][key] = value
        self._schemas[name] = schema
        return schema

    def define_with_example(self, name: str, properties: dict[str, Any] | list[Param], example: Any) -> dict[str, Any]:
        schema = self.define(name, properties)
        schema["example"] = example
        return schema

    def get(self, name: str) -> dict[str, Any] | None:
        return self._schemas.get(name)

    def all(self) -> dict[str, dict[str, Any]]:
        return self._schemas

    def has(self, name: str) -> bool:
        return name in self._schemas

    def clear(self) -> None:
        self._schemas = {}

    def snapshot(self) -> dict[str, dict[str, Any]]:
        return copy.deepcopy(self._schemas)

    def load(self, schemas: dict[str, dict[str, Any]]) -> None:
        self._schemas = copy.deepcopy(schemas)

    def register_model(self, model: type, name: str | None = None) -> None:
        """Make ``model`` resolvable by its short name without importing it."""
        self.models[name or model.__name__] = model

    def _example(self, column: str, type_name: str) -> dict[str, Any]:
        if self.examples is None:
            return {}
        return {"example": self.examples.for_field(column, type_name)}

    def from_model(
        self,
        model: Any,
        name: str | None = None,
        exclude: tuple[str, ...] | list[str] = DEFAULT_EXCLUDE,
        include: dict[str, Any] | None = None,
    ) -> str:
        """Derive a schema from a model's columns and extra API fields; returns its name."""
        model = resolve_model(model, self.models)
        name = name or model.__name__
        self.register_model(model, name)

        properties: dict[str, Any] = {}
        required: list[str] = []
        for column in self.introspector.columns(model):
            if column.name in exclude:
                continue
            type_name = storage_type_to_param_type(column.storage_type)
            properties[column.name] = {
                "type": type_name,
                "description": humanize(column.name),
                **self._example(column.name, type_name),
            }
            if column.name in REQUIRED_COLUMNS:
                required.append(column.name)
            else:
                properties[column.name]["nullable"] = True

        properties.update(include or {})

        # placeholder so self-referencing extra fields do not recurse forever
        self._schemas.setdefault(name, {"type": "object", "properties": {}, "required": []})
        extra = self.introspector.extra_fields(model)
        if extra:
            self._merge_extra_fields(properties, required, extra)

        self._schemas[name] = {"type": "object", "properties": properties, "required": required}
        return name

    def _merge_extra_fields(self, properties: dict[str, Any], required: list[str], extra: dict[str, Any]) -> None:
        for field, definition in extra.items():
            if isinstance(definition, SchemaType):
                if definition.model_class is not None and not self.has(definition.schema_name):
                    self.from_model(definition.model_class)
                properties[field] = definition.to_schema()
                if definition.is_required and field not in required:
                    required.append(field)
            elif isinstance(definition, dict):
                properties[field] = definition
            elif isinstance(definition, str):
                properties[field] = {"type": storage_type_to_param_type(definition), "description": humanize(field)}

    def from_models(self, models: list[Any]) -> list[str]:
        return [self.from_model(model) for model in models]

    def from_model_fillable(self, model: Any, name: str | None = None) -> str:
        """Input schema (``{Model}Input``) from the model's ``__fillable__`` columns."""
        model = resolve_model(model, self.models)
        name = name or f"{model.__name__}Input"
        columns = {column.name: column for column in self.introspector.columns(model)}
        fillable = getattr(model, "__fillable__", None) or [
            column for column in columns if column not in REQUIRED_COLUMNS
        ]
        properties = {}
        for column in fillable:
            storage_type = columns[column].storage_type if column in columns else "string"
            properties[column] = {"type": storage_type_to_param_type(storage_type), "description": humanize(column)}
        self.define(name, properties)
        return name

    def _relation_target(self, config: Any, exclude: tuple[str, ...] | list[str]) -> tuple[str, str]:
        if isinstance(config, dict):
            related, kind = config["model"], config.get("type", "has_many")
        else:
            related, kind = config, "has_many"
        related_name = model_schema_name(related)
        if not self.has(related_name):
            self.from_model(related, related_name, exclude)
        return related_name, kind

    def from_model_with_relations(
        self,
        model: Any,
        relations: dict[str, Any],
        name: str | None = None,
        exclude: tuple[str, ...] | list[str] = DEFAULT_EXCLUDE,
    ) -> str:
        """Model schema plus relation properties.

        ``relations`` maps a property name to a model (has-many) or to
        ``{"model": ..., "type": "has_one" | "belongs_to" | "has_many"}``.
        """
        name = self.from_model(model, name, exclude)
        properties = self._schemas[name]["properties"]
        for relation, config in relations.items():
            related_name, kind = self._relation_target(config, exclude)
            if kind == "has_many":
                properties[relation] = {"type": "array", "items": ref(related_name), "description": humanize(relation)}
            else:
                properties[relation] = {**ref(related_name), "description": humanize(relation)}
        return name

    def define_resource(
        self,
        name: str,
        model: Any,
        relations: dict[str, Any] | None = None,
        additional_fields: dict[str, Any] | None = None,
    ) -> str:
        base_name = model_schema_name(model)
        if not self.has(base_name):
            self.from_model(model)
        properties = copy.deepcopy(self._schemas[base_name]["properties"])
        for relation, config in (relations or {}).items():
            related_name, kind = self._relation_target(config, DEFAULT_EXCLUDE)
            properties[relation] = {"type": "array", "items": ref(related_name)} if kind == "has_many" else ref(related_name)
        for field, definition in (additional_fields or {}).items():
            properties[field] = {"type": storage_type_to_param_type(definition)} if isinstance(definition, str) else definition
        self._schemas[name] = {"type": "object", "properties": properties, "required": []}
        return name

    def ensure_schema_exists(self, model: Any) -> str:
        """Name of the schema for ``model``, deriving it on first use."""
        if isinstance(model, str) and self.has(model):
            return model
        name = model_schema_name(model)
        if not self.has(name):
            self.from_model(model)
        return name

    def define_paginated(self, items_name: str) -> str:
        name = f"Paginated{items_name}"
        self.define(
            name,
            {
                "data": {"type": "array", "items": ref(items_name)},
                "meta": {
                    "type": "object",
                    "properties": {key: {"type": "integer"} for key in PAGINATION_META["properties"]},
                },
                "links": copy.deepcopy(PAGINATION_LINKS),
            },
        )
        return name

    def define_error_response(self) -> str:
        self.define(
            "ErrorResponse",
            {
                "success": {"type": "boolean", "example": False},
                "message": {"type": "string", "example": "The given data was invalid."},
                "errors": {
                    "type": "object",
                    "additionalProperties": {"type": "array", "items": {"type": "string"}},
                },
            },
        )
        return "ErrorResponse"

    def define_success_response(self) -> str:
        self.define(
            "SuccessResponse",
            {
                "success": {"type": "boolean", "example": True},
                "message": {"type": "string", "example": "Operation completed successfully."},
                "data": {"type": "object"},
            },
        )
        return "SuccessResponse"

    def define_message_response(self) -> str:
        self.define(
            "MessageResponse",
            {
                "success": {"type": "boolean", "example": True},
                "message": {"type": "string", "example": "Operation successful"},
            },
        )
        self._schemas["MessageResponse"]["required"] = ["success", "message"]
        return "MessageResponse"

    def define_response_wrapper(self, name: str, data_name: str, is_array: bool = False) -> str:
        data = {"type": "array", "items": ref(data_name)} if is_array else ref(data_name)
        self.define(
            name,
            {
                "success": {"type": "boolean", "example": True},
                "message": {"type": "string", "example": "Success"},
                "data": data,
            },
        )
        return name

    def _wrap(self, data: dict[str, Any]) -> dict[str, Any]:
        properties = {}
        for key, example in (self.response_wrapper or {}).items():
            if example == DATA_PLACEHOLDER:
                properties[key] = copy.deepcopy(data)
            else:
                properties[key] = {"type": _example_type(example), "example": example}
        return properties

    def define_success_response_for(self, name: str, is_collection: bool = False) -> str:
        schema_name = f"{name}CollectionResponse" if is_collection else f"{name}Response"
        data = {"type": "array", "items": ref(name)} if is_collection else ref(name)
        if self.response_wrapper:
            self._schemas[schema_name] = {"type": "object", "properties": self._wrap(data)}
        else:
            self._schemas[schema_name] = {
                "type": "object",
                "properties": {
                    "success": {"type": "boolean", "example": True},
                    "message": {"type": "string", "example": "Operation successful"},
                    "data": data,
                },
                "required": ["success", "data"],
            }
        return schema_name

    def define_paginated_response_for(self, name: str) -> str:
        schema_name = f"{name}PaginatedResponse"
        data = {"type": "array", "items": ref(name)}
        if self.response_wrapper:
            properties = self._wrap(data)
            properties["meta"] = copy.deepcopy(PAGINATION_META)
            properties["links"] = copy.deepcopy(PAGINATION_LINKS)
            self._schemas[schema_name] = {"type": "object", "properties": properties}
        else:
            self._schemas[schema_name] = {
                "type": "object",
                "properties": {
                    "success": {"type": "boolean", "example": True},
                    "message": {"type": "string"},
                    "data": data,
                    "meta": copy.deepcopy(PAGINATION_META),
                    "links": copy.deepcopy(PAGINATION_LINKS),
                },
                "required": ["success", "data", "meta"],
            }
        return schema_name

    def define_all_responses(self, name: str) -> list[str]:
        return [
            self.define_success_response_for(name),
            self.define_success_response_for(name, is_collection=True),
            self.define_paginated_response_for(name),
        ]

    def discover_models(self, models: list[type]) -> int:
        """Register every given model; failures are logged and skipped."""
        registered = 0
        for model in models:
            try:
                self.from_model(model)
                registered += 1
            except Exception as exc:
                logger.warning("Failed to register model %s: %s", model.__name__, exc)
        return registered
