import dataclasses
import datetime

import pytest

from api_doc_gen.docs.examples import ExampleGenerator
from api_doc_gen.docs.param import Param
from api_doc_gen.docs.schema_registry import SchemaRegistry, storage_type_to_param_type
from api_doc_gen.errors import ModelNotFoundError
from sample_app import Post, User


class Invoice:
    __columns__ = {"id": "bigint", "total": "decimal", "meta": "jsonb", "created_at": "timestamp"}


@dataclasses.dataclass
class Tag:
    id: int
    label: str
    created_at: datetime.datetime


class Plain:
    pass


class TestStorageTypes:
    def test_mapping(self):
        assert storage_type_to_param_type("BIGINT") == "integer"
        assert storage_type_to_param_type("decimal") == "number"
        assert storage_type_to_param_type("jsonb") == "object"
        assert storage_type_to_param_type("varchar") == "string"


class TestDefine:
    def test_from_type_names(self):
        schema = SchemaRegistry().define("Login", {"email": "string", "remember": "bool"})
        assert schema["properties"] == {"email": {"type": "string"}, "remember": {"type": "boolean"}}
        assert schema["required"] == []

    def test_from_params(self):
        registry = SchemaRegistry()
        registry.define("Login", [Param.make("email"), Param.make("email"), Param.make("remember", "boolean").optional()])
        assert registry.get("Login")["required"] == ["email"]

    def test_snapshot_is_a_copy(self):
        registry = SchemaRegistry()
        registry.define("Login", {"email": "string"})
        snapshot = registry.snapshot()
        snapshot["Login"]["properties"].clear()
        assert registry.get("Login")["properties"] == {"email": {"type": "string"}}


class TestFromModel:
    def test_pydantic_model(self):
        registry = SchemaRegistry()
        assert registry.from_model(User) == "User"

        schema = registry.get("User")
        assert "password" not in schema["properties"]
        assert schema["required"] == ["id"]
        assert schema["properties"]["id"] == {"type": "integer", "description": "Id"}
        assert schema["properties"]["age"] == {"type": "integer", "description": "Age", "nullable": True}

    def test_examples(self):
        registry = SchemaRegistry(examples=ExampleGenerator())
        registry.from_model(User)
        assert registry.get("User")["properties"]["email"]["example"] == "user@example.com"

    def test_declared_columns(self):
        registry = SchemaRegistry()
        registry.from_model(Invoice)
        schema = registry.get("Invoice")
        assert {name: prop["type"] for name, prop in schema["properties"].items()} == {
            "id": "integer",
            "total": "number",
            "meta": "object",
            "created_at": "string",
        }
        assert schema["required"] == ["id", "created_at"]

    def test_dataclass(self):
        registry = SchemaRegistry()
        registry.from_model(Tag, exclude=["label"])
        assert list(registry.get("Tag")["properties"]) == ["id", "created_at"]

    def test_extra_columns(self):
        registry = SchemaRegistry()
        registry.from_model(Post)
        schema = registry.get("Post")
        assert schema["properties"]["author"] == {"$ref": "#/definitions/User"}
        assert schema["required"] == ["id", "author"]
        assert registry.has("User")

    def test_dotted_path(self):
        registry = SchemaRegistry()
        assert registry.ensure_schema_exists("sample_app.User") == "User"
        assert registry.ensure_schema_exists("User") == "User"

    def test_registered_short_name(self):
        registry = SchemaRegistry()
        registry.register_model(Invoice)
        assert registry.from_model("Invoice") == "Invoice"

    def test_missing_model(self):
        with pytest.raises(ModelNotFoundError):
            SchemaRegistry().from_model("missing.module.Thing")

    def test_relations(self):
        registry = SchemaRegistry()
        registry.from_model_with_relations(Invoice, {"tags": Tag, "owner": {"model": User, "type": "belongs_to"}})
        properties = registry.get("Invoice")["properties"]
        assert properties["tags"]["items"] == {"$ref": "#/definitions/Tag"}
        assert properties["owner"]["$ref"] == "#/definitions/User"

    def test_fillable(self):
        registry = SchemaRegistry()
        assert registry.from_model_fillable(Invoice) == "InvoiceInput"
        assert list(registry.get("InvoiceInput")["properties"]) == ["total", "meta"]

    def test_with_example(self):
        registry = SchemaRegistry()
        schema = registry.define_with_example("Point", {"x": "int", "y": "int"}, {"x": 1, "y": 2})
        assert schema["example"] == {"x": 1, "y": 2}
        assert registry.get("Point") is schema

    def test_from_models(self):
        registry = SchemaRegistry()
        assert registry.from_models([Invoice, Tag]) == ["Invoice", "Tag"]
        assert registry.get("Tag")["required"] == ["id", "created_at"]

    def test_resource(self):
        registry = SchemaRegistry()
        name = registry.define_resource("InvoiceResource", Invoice, relations={"tags": Tag}, additional_fields={"currency": "varchar"})
        assert name == "InvoiceResource"
        properties = registry.get("InvoiceResource")["properties"]
        assert list(properties) == ["id", "total", "meta", "created_at", "tags", "currency"]
        assert properties["tags"] == {"type": "array", "items": {"$ref": "#/definitions/Tag"}}
        assert properties["currency"] == {"type": "string"}
        assert registry.has("Invoice")
        assert "tags" not in registry.get("Invoice")["properties"]

    def test_discover_models_skips_failures(self):
        registry = SchemaRegistry()
        assert registry.discover_models([User, Plain]) == 1
        assert registry.has("User")
        assert not registry.has("Plain")


class TestEnvelopes:
    def test_all_responses(self):
        registry = SchemaRegistry()
        names = registry.define_all_responses("User")
        assert names == ["UserResponse", "UserCollectionResponse", "UserPaginatedResponse"]
        assert registry.get("UserResponse")["properties"]["data"] == {"$ref": "#/definitions/User"}
        assert registry.get("UserCollectionResponse")["properties"]["data"]["items"] == {"$ref": "#/definitions/User"}

    def test_pagination_meta(self):
        registry = SchemaRegistry()
        registry.define_paginated_response_for("User")
        meta = registry.get("UserPaginatedResponse")["properties"]["meta"]["properties"]
        assert len(meta) == 6
        assert all(prop["type"] == "integer" for prop in meta.values())

    def test_response_wrapper(self):
        registry = SchemaRegistry(response_wrapper={"status": "ok", "code": 200, "payload": "__DATA__"})
        registry.define_success_response_for("User", is_collection=True)
        properties = registry.get("UserCollectionResponse")["properties"]
        assert properties["status"] == {"type": "string", "example": "ok"}
        assert properties["code"] == {"type": "integer", "example": 200}
        assert properties["payload"]["type"] == "array"

    def test_message_response(self):
        registry = SchemaRegistry()
        assert registry.define_message_response() == "MessageResponse"
        assert registry.get("MessageResponse")["required"] == ["success", "message"]

    def test_generic_envelopes(self):
        registry = SchemaRegistry()
        assert registry.define_error_response() == "ErrorResponse"
        assert registry.get("ErrorResponse")["properties"]["errors"]["additionalProperties"]["type"] == "array"
        assert registry.define_success_response() == "SuccessResponse"
        assert registry.get("SuccessResponse")["properties"]["success"]["example"] is True

    def test_wrapper_and_paginated(self):
        registry = SchemaRegistry()
        registry.define_response_wrapper("TagList", "Tag", is_array=True)
        assert registry.get("TagList")["properties"]["data"] == {"type": "array", "items": {"$ref": "#/definitions/Tag"}}
        assert registry.define_paginated("Tag") == "PaginatedTag"
        assert set(registry.get("PaginatedTag")["properties"]) == {"data", "meta", "links"}


class TestExampleGenerator:
    def test_container_examples_are_fresh(self):
        examples = ExampleGenerator()
        first = examples.for_field("tags", "array")
        first.append("mutated")
        assert examples.for_field("tags", "array") == []
        assert examples.for_field("meta", "object") is not examples.for_field("meta", "object")
