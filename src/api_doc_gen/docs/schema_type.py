"""Fluent builder for extra schema columns declared on models.

Models add computed or related fields to their schema by returning
SchemaType instances from ``add_extra_api_columns``::

    @classmethod
    def add_extra_api_columns(cls):
        return {
            "author": SchemaType.make().model(User).required(),
            "tags": SchemaType.make().of("app.models.Tag"),
            "contact": SchemaType.make("email").nullable(),
        }
"""

from typing import Any

FORMAT_TYPES = {
    "email": ("string", "email"),
    "url": ("string", "uri"),
    "uri": ("string", "uri"),
    "uuid": ("string", "uuid"),
    "date": ("string", "date"),
    "datetime": ("string", "date-time"),
    "date-time": ("string", "date-time"),
    "time": ("string", "time"),
    "password": ("string", "password"),
    "byte": ("string", "byte"),
    "binary": ("string", "binary"),
    "ipv4": ("string", "ipv4"),
    "ipv6": ("string", "ipv6"),
    "phone": ("string", "phone"),
}

_NORMALISED = {
    "int": "integer",
    "integer": "integer",
    "float": "number",
    "double": "number",
    "decimal": "number",
    "number": "number",
    "bool": "boolean",
    "boolean": "boolean",
    "array": "array",
    "object": "object",
}

_UNSET = object()


def model_schema_name(model: Any) -> str:
    """Schema name of a model class or dotted import path."""
    if isinstance(model, str):
        return model.rsplit(".", 1)[-1].rsplit(":", 1)[-1]
    return model.__name__


class SchemaType:
    def __init__(self, type: str = "string"):
        self.type = type
        self.format: str | None = None
        if type.lower() in FORMAT_TYPES:
            self.type, self.format = FORMAT_TYPES[type.lower()]
        self.description: str | None = None
        self.example: Any = None
        self.model_class: Any = None
        self.is_array = False
        self.is_nullable = False
        self.is_required = False
        self.is_deprecated = False
        self.enum_values: list[Any] | None = None
        self.default_value: Any = _UNSET
        self.min_length: int | None = None
        self.max_length: int | None = None
        self.minimum: float | None = None
        self.maximum: float | None = None
        self.regex: str | None = None

    @classmethod
    def make(cls, type: str = "string") -> "SchemaType":
        return cls(type)

    def describe(self, description: str) -> "SchemaType":
        self.description = description
        return self

    def with_example(self, example: Any) -> "SchemaType":
        self.example = example
        return self

    def model(self, model_class: Any) -> "SchemaType":
        self.type = "object"
        self.model_class = model_class
        return self

    def of(self, model_class: Any) -> "SchemaType":
        self.type = "array"
        self.is_array = True
        self.model_class = model_class
        return self

    def nullable(self) -> "SchemaType":
        self.is_nullable = True
        return self

    def required(self) -> "SchemaType":
        self.is_required = True
        return self

    def with_format(self, format: str) -> "SchemaType":
        self.format = format
        return self

    def deprecated(self) -> "SchemaType":
        self.is_deprecated = True
        return self

    def enum(self, values: list[Any]) -> "SchemaType":
        self.enum_values = list(values)
        return self

    def default(self, value: Any) -> "SchemaType":
        self.default_value = value
        return self

    def length(self, min_length: int | None = None, max_length: int | None = None) -> "SchemaType":
        self.min_length = min_length
        self.max_length = max_length
        return self

    def min(self, value: float) -> "SchemaType":
        self.minimum = value
        return self

    def max(self, value: float) -> "SchemaType":
        self.maximum = value
        return self

    def pattern(self, regex: str) -> "SchemaType":
        self.regex = regex
        return self

    @property
    def schema_name(self) -> str | None:
        return model_schema_name(self.model_class) if self.model_class is not None else None

    def to_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {}
        if self.model_class is not None:
            ref = {"$ref": f"#/definitions/{self.schema_name}"}
            if self.is_array:
                schema["type"] = "array"
                schema["items"] = ref
            else:
                schema.update(ref)
        else:
            schema["type"] = _NORMALISED.get(self.type.lower(), "string")

        optional = {
            "description": self.description,
            "example": self.example,
            "format": self.format,
            "enum": self.enum_values,
            "minLength": self.min_length,
            "maxLength": self.max_length,
            "minimum": self.minimum,
            "maximum": self.maximum,
            "pattern": self.regex,
        }
        schema.update({key: value for key, value in optional.items() if value is not None})
        if self.is_nullable:
            schema["nullable"] = True
        if self.default_value is not _UNSET:
            schema["default"] = self.default_value
        if self.is_deprecated:
            schema["deprecated"] = True
        return schema
