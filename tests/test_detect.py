import json

from api_doc_gen.generator.detect import detect_dialect, detect_file, load_document


class TestDetectDialect:
    def test_swagger(self):
        assert detect_dialect({"swagger": "2.0"}) == "swagger2"

    def test_openapi(self):
        assert detect_dialect({"openapi": "3.0.3"}) == "openapi3"

    def test_postman(self):
        assert detect_dialect({"info": {"_postman_id": "x"}}) == "postman"
        assert detect_dialect({"info": {"schema": "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"}}) == "postman"

    def test_unknown(self):
        assert detect_dialect({"openapi": "2.0"}) == "unknown"
        assert detect_dialect(["swagger"]) == "unknown"


class TestDetectFile:
    def test_json(self, tmp_path):
        path = tmp_path / "swagger.json"
        path.write_text(json.dumps({"swagger": "2.0"}))
        assert detect_file(path) == "swagger2"
        assert load_document(path) == {"swagger": "2.0"}

    def test_yaml(self, tmp_path):
        path = tmp_path / "openapi.yml"
        path.write_text("openapi: 3.0.3\ninfo:\n  title: API\n")
        assert detect_file(path) == "openapi3"

    def test_broken(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{nope")
        assert detect_file(path) == "unknown"
