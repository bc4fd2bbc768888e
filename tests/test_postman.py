import json

from api_doc_gen.config import AuthHeader, DocSettings
from api_doc_gen.generator.postman import SCHEMA_URL, PostmanCollectionBuilder, stable_id
from api_doc_gen.generator.swagger import Swagger2Renderer
from sample_app import collect

SETTINGS = DocSettings(
    auth_headers=[
        AuthHeader(name="Authorization", type="bearer", example="token"),
        AuthHeader(name="X-Api-Key"),
    ]
)


def _collection() -> dict:
    context = collect(SETTINGS)
    swagger = Swagger2Renderer(SETTINGS).render(context.builder.api_calls, context.schemas)
    return PostmanCollectionBuilder(SETTINGS).build_from_swagger(swagger)


def _items(collection: dict) -> dict:
    return {item["name"]: item for folder in collection["item"] for item in folder["item"]}


class TestCollection:
    def test_info(self):
        collection = _collection()
        assert collection["info"]["schema"] == SCHEMA_URL
        assert collection["info"]["name"] == "API Documentation"
        assert collection["info"]["_postman_id"] == _collection()["info"]["_postman_id"]

    def test_folders_by_tag(self):
        folders = {folder["name"]: [item["name"] for item in folder["item"]] for folder in _collection()["item"]}
        assert folders == {
            "Users": ["List users", "Update a user"],
            "User": ["Create a user"],
            "Post": ["Publish a post"],
        }

    def test_path_variables_and_body(self):
        item = _items(_collection())["Update a user"]
        request = item["request"]
        assert item["id"] == stable_id("PUT", "/users/{id}")
        assert request["method"] == "PUT"
        assert request["url"]["raw"] == "{{base_url}}/users/:id"
        assert request["url"]["host"] == ["{{base_url}}"]
        assert request["url"]["path"] == ["users", ":id"]
        assert request["url"]["variable"] == [{"key": "id", "value": "", "description": "Id"}]
        assert request["body"]["mode"] == "raw"
        assert json.loads(request["body"]["raw"]) == {"name": "", "role": ""}

    def test_optional_query_is_disabled(self):
        request = _items(_collection())["List users"]["request"]
        assert request["url"]["query"] == [{"key": "page", "value": "", "description": "Page", "disabled": True}]
        assert "body" not in request

    def test_headers(self):
        headers = _items(_collection())["List users"]["request"]["header"]
        assert [(h["key"], h["value"]) for h in headers] == [
            ("Accept", "application/json"),
            ("Content-Type", "application/json"),
            ("Authorization", "Bearer {{authorization}}"),
            ("X-Api-Key", "{{x_api_key}}"),
        ]

    def test_variables(self):
        variables = {v["key"]: v["value"] for v in _collection()["variable"]}
        assert variables == {"base_url": "http://localhost/api/v1", "authorization": "token", "x_api_key": ""}


class TestEnvironment:
    def test_environment(self):
        environment = PostmanCollectionBuilder(SETTINGS).build_environment()
        assert environment["name"] == "API Documentation Environment"
        assert environment["_postman_variable_scope"] == "environment"
        assert environment["values"][0] == {"key": "base_url", "value": "http://localhost/api/v1", "type": "default", "enabled": True}
        assert [v["type"] for v in environment["values"][1:]] == ["secret", "secret"]

    def test_base_url_without_prefix(self):
        assert PostmanCollectionBuilder(DocSettings(base_path="/")).base_url() == "http://localhost"

    def test_files(self):
        builder = PostmanCollectionBuilder(SETTINGS)
        files = builder.files(_collection())
        assert set(files) == {"postman_collection.json", "postman_environment.json"}
        assert json.loads(files["postman_environment.json"])["name"] == "API Documentation Environment"
