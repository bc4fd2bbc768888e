"""Parameter model shared by every documented endpoint and schema."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, model_validator

from api_doc_gen.docs.naming import humanize


class ParamLocation(str, Enum):
    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"
    BODY = "body"
    FORM = "formData"

    @classmethod
    def parse(cls, value: "str | ParamLocation | None") -> "ParamLocation | None":
        if value is None or isinstance(value, ParamLocation):
            return value
        for member in cls:
            if member.value.lower() == str(value).lower():
                return member
        return None


class ParamType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    FILE = "file"
    OBJECT = "object"

    @classmethod
    def parse(cls, name: "str | ParamType | None") -> "ParamType":
        """Normalise a loose type name; unknown names become ``string``."""
        if isinstance(name, ParamType):
            return name
        return _LOOSE_NAMES.get(str(name or "").lower(), cls.STRING)

    def to_swagger(self) -> str:
        return self.value

    def to_openapi(self) -> dict[str, str]:
        if self is ParamType.FILE:
            return {"type": "string", "format": "binary"}
        return {"type": self.value}

    def to_typescript(self) -> str:
        return {
            ParamType.INTEGER: "number",
            ParamType.NUMBER: "number",
            ParamType.BOOLEAN: "boolean",
            ParamType.ARRAY: "unknown[]",
            ParamType.FILE: "Blob",
            ParamType.OBJECT: "Record<string, unknown>",
        }.get(self, "string")

    @property
    def is_numeric(self) -> bool:
        return self in (ParamType.INTEGER, ParamType.NUMBER)


_LOOSE_NAMES = {
    "string": ParamType.STRING,
    "str": ParamType.STRING,
    "int": ParamType.INTEGER,
    "integer": ParamType.INTEGER,
    "float": ParamType.NUMBER,
    "double": ParamType.NUMBER,
    "decimal": ParamType.NUMBER,
    "number": ParamType.NUMBER,
    "bool": ParamType.BOOLEAN,
    "boolean": ParamType.BOOLEAN,
    "array": ParamType.ARRAY,
    "list": ParamType.ARRAY,
    "object": ParamType.OBJECT,
    "model": ParamType.OBJECT,
    "dict": ParamType.OBJECT,
    "file": ParamType.FILE,
}


class Param(BaseModel):
    """A single documented field: request parameter, header or schema property.

    Setters mutate in place and return the instance so calls can be chained::

        Param.make("email").set_example("user@example.com").optional()
    """

    name: str | None = None
    type: ParamType = ParamType.STRING
    description: str = ""
    required: bool = True
    default: Any = None
    example: Any = None
    enum: list[Any] | None = None
    min: float | int | None = None
    max: float | int | None = None
    pattern: str | None = None
    location: ParamLocation | None = None
    items: dict[str, Any] | None = None
    collection_format: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalise(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            if "type" in data:
                data["type"] = ParamType.parse(data["type"])
            if data.get("location") is not None:
                data["location"] = ParamLocation.parse(data["location"])
            if not data.get("description") and data.get("name"):
                data["description"] = humanize(data["name"])
        return data

    @model_validator(mode="after")
    def _array_items(self) -> "Param":
        if self.type is ParamType.ARRAY and self.items is None:
            self.items = {"type": ParamType.STRING.value}
            self.collection_format = self.collection_format or "multi"
        return self

    @classmethod
    def make(cls, name: str | None = None, type: "str | ParamType" = ParamType.STRING, description: str | None = None) -> "Param":
        return cls(name=name, type=type, description=description or "")

    @classmethod
    def header(cls, name: str, description: str | None = None) -> "Param":
        return cls(name=name, description=description or "", location=ParamLocation.HEADER)

    def mark_required(self) -> "Param":
        self.required = True
        return self

    def optional(self) -> "Param":
        self.required = False
        return self

    def set_type(self, type: "str | ParamType") -> "Param":
        self.type = ParamType.parse(type)
        if self.type is ParamType.ARRAY:
            self.set_array_type(ParamType.STRING)
        return self

    def set_description(self, description: str | None) -> "Param":
        self.description = description or ""
        return self

    def set_default(self, value: Any) -> "Param":
        self.default = value
        return self

    def set_example(self, value: Any) -> "Param":
        self.example = value
        return self

    def set_enum(self, values: list[Any]) -> "Param":
        self.enum = list(values)
        return self

    def set_min(self, value: float | int) -> "Param":
        self.min = value
        return self

    def set_max(self, value: float | int) -> "Param":
        self.max = value
        return self

    def set_pattern(self, regex: str) -> "Param":
        self.pattern = regex
        return self

    def set_location(self, location: "str | ParamLocation") -> "Param":
        self.location = ParamLocation.parse(location)
        return self

    def set_array_type(self, item_type: "str | ParamType") -> "Param":
        self.items = {"type": ParamType.parse(item_type).value}
        self.collection_format = self.collection_format or "multi"
        return self

    def constraints(self) -> dict[str, Any]:
        """Enum, bounds and pattern in Swagger/JSON-schema spelling."""
        result: dict[str, Any] = {}
        if self.enum is not None:
            result["enum"] = self.enum
        low, high = ("minimum", "maximum") if self.type.is_numeric else ("minLength", "maxLength")
        if self.min is not None:
            result[low] = self.min if self.type.is_numeric else int(self.min)
        if self.max is not None:
            result[high] = self.max if self.type.is_numeric else int(self.max)
        if self.pattern is not None:
            result["pattern"] = self.pattern
        return result

    def to_schema(self) -> dict[str, Any]:
        """Schema property for this field, as stored in the schema registry."""
        schema: dict[str, Any] = {"type": self.type.to_swagger()}
        if self.description:
            schema["description"] = self.description
        if self.items is not None:
            schema["items"] = self.items
        schema.update(self.constraints())
        if self.default is not None:
            schema["default"] = self.default
        if self.example is not None:
            schema["example"] = self.example
        return schema
