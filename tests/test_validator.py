from api_doc_gen.generator.validator import validate_document, validate_files, validate_path_params, validate_refs


class TestValidateRefs:
    def test_resolved(self):
        doc = {
            "swagger": "2.0",
            "paths": {"/users": {"get": {"responses": {"200": {"schema": {"$ref": "#/definitions/User"}}}}}},
            "definitions": {"User": {"type": "object"}},
        }
        assert validate_refs(doc) == {}

    def test_unresolved(self):
        doc = {"swagger": "2.0", "definitions": {"Page": {"properties": {"data": {"items": {"$ref": "#/definitions/User"}}}}}}
        errors = validate_refs(doc)
        assert errors == {"#/definitions/Page/properties/data/items": "Unresolved reference: #/definitions/User"}

    def test_openapi_components(self):
        doc = {
            "openapi": "3.0.3",
            "components": {"schemas": {"User": {}, "Page": {"properties": {"a": {"$ref": "#/components/schemas/User"}}}}},
        }
        assert validate_refs(doc) == {}

    def test_foreign_prefix(self):
        doc = {"openapi": "3.0.3", "components": {"schemas": {"Page": {"properties": {"a": {"$ref": "#/definitions/User"}}}}}}
        [message] = validate_refs(doc).values()
        assert message.startswith("Foreign reference")


class TestValidatePathParams:
    def test_declared(self):
        doc = {"paths": {"/users/{id}": {"get": {"parameters": [{"name": "id", "in": "path"}]}}}}
        assert validate_path_params(doc) == {}

    def test_undeclared(self):
        doc = {"paths": {"/users/{id}/posts/{post}": {"get": {"parameters": [{"name": "id", "in": "query"}]}}}}
        errors = validate_path_params(doc)
        assert errors == {"GET /users/{id}/posts/{post}": "Undeclared path parameters: id, post"}


class TestValidateDocument:
    def test_combines_checks(self):
        doc = {
            "swagger": "2.0",
            "paths": {"/users/{id}": {"get": {"responses": {"200": {"schema": {"$ref": "#/definitions/User"}}}}}},
            "definitions": {},
        }
        assert len(validate_document(doc)) == 2


class TestValidateFiles:
    def test_all_valid(self):
        files = {
            "swagger.json": '{"swagger": "2.0"}',
            "swagger.yml": "swagger: '2.0'\n",
            "API.md": "# API",
        }
        assert validate_files(files) == {}

    def test_json_error_caught(self):
        errors = validate_files({"openapi.json": '{"openapi": '})
        assert errors["openapi.json"].startswith("JSONDecodeError")

    def test_yaml_error_caught(self):
        errors = validate_files({"openapi.json": "{}", "bad.yaml": "key: [invalid\n"})
        assert list(errors) == ["bad.yaml"]
