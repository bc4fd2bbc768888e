import json
from unittest.mock import MagicMock

import pytest
import sample_app

from api_doc_gen.config import DocSettings
from api_doc_gen.discovery.routes import StaticRouteRegistry
from api_doc_gen.errors import ConfigurationError
from api_doc_gen.generator.apidoc import SOURCE_DIR
from api_doc_gen.generator.base import FileSystemSink, MemorySink
from api_doc_gen.pipeline import DocumentationGenerator
from api_doc_gen.process import ProcessResult

ALL_FORMATS = ["swagger2", "openapi3", "postman", "markdown", "typescript", "apidoc"]


@pytest.fixture
def settings(tmp_path):
    return DocSettings(cache_file=tmp_path / "cache.json")


@pytest.fixture
def generator(settings):
    return DocumentationGenerator(settings, sink=MemorySink())


class TestRun:
    def test_all_formats(self, generator):
        result = generator.run(sample_app.build_registry(), formats=ALL_FORMATS, compile_apidoc=False)

        assert result.report.selected == 6
        assert result.report.documented == 4
        assert result.report.skipped == 2
        files = generator.sink.files
        for name in (
            "swagger.json",
            "swagger.yml",
            "openapi.json",
            "openapi.yml",
            "postman_collection.json",
            "postman_environment.json",
            "API.md",
            "types.ts",
        ):
            assert name in files
        assert f"{SOURCE_DIR}/users.coffee" in files
        assert f"{SOURCE_DIR}/default_headers.coffee" in files
        assert result.warnings == []

        swagger = json.loads(files["swagger.json"])
        assert "/users" in swagger["paths"]
        labels = {generated.label for generated in result.files}
        assert {"Swagger v2 (JSON)", "Swagger v2 (YAML)", "Postman Environment", "Markdown Docs"} <= labels

    def test_unknown_format(self, generator):
        with pytest.raises(ConfigurationError, match="Unknown output format"):
            generator.run(sample_app.build_registry(), formats=["swagger2", "raml"])

    def test_empty_registry_warns(self, generator):
        result = generator.run(StaticRouteRegistry(), formats=["swagger2"])
        assert result.report.selected == 0
        assert "No API calls documented" in result.warnings

    def test_reset_is_idempotent(self, generator):
        registry = sample_app.build_registry()
        generator.run(registry, formats=["swagger2"])
        generator.run(registry, formats=["swagger2"], reset=True)
        first = generator.render("swagger2")
        generator.run(registry, formats=["swagger2"], reset=True)
        assert generator.render("swagger2") == first
        assert len(generator.context.builder.endpoints()) == 4

    def test_auto_generate(self, generator):
        result = generator.run(sample_app.build_registry(), formats=["swagger2"], auto=True)
        assert result.report.documented == 6
        assert generator.settings.auto_generate is True


class TestDefaults:
    def test_default_formats(self):
        assert DocumentationGenerator(DocSettings()).default_formats() == [
            "swagger2",
            "openapi3",
            "postman",
            "typescript",
            "apidoc",
        ]

    def test_disabled_extras(self):
        settings = DocSettings(output={"formats": ["markdown"], "typescript": {"enabled": False}}, apidoc={"enabled": False})
        assert DocumentationGenerator(settings).default_formats() == ["markdown"]

    def test_label(self):
        assert DocumentationGenerator.label("openapi3", "openapi.yml") == "OpenAPI 3.0 (YAML)"
        assert DocumentationGenerator.label("postman", "postman_collection.json") == "Postman Collection"
        assert DocumentationGenerator.label("typescript", "types.ts") == "TypeScript SDK"


class TestCache:
    def test_round_trip(self, generator, settings):
        generator.run(sample_app.build_registry(), formats=["swagger2"])
        assert settings.cache_file.exists()
        expected = generator.render("swagger2")

        restored = DocumentationGenerator(settings, sink=MemorySink())
        assert restored.load_cache() is True
        assert restored.render("swagger2") == expected

    def test_missing_cache(self, generator):
        assert generator.load_cache() is False

    def test_clear(self, generator):
        generator.write_cache()
        assert generator.clear_cache() is True
        assert generator.clear_cache() is False


class TestCompileApiDoc:
    def make(self, tmp_path, runner):
        settings = DocSettings(cache_file=tmp_path / "cache.json")
        return DocumentationGenerator(settings, sink=FileSystemSink(tmp_path / "docs"), runner=runner)

    def test_not_installed(self, tmp_path):
        runner = MagicMock()
        runner.run.return_value = ProcessResult(success=False, stderr="not found")
        result = self.make(tmp_path, runner).run(sample_app.build_registry(), formats=["apidoc"])

        assert any("ApiDoc.js is not installed" in warning for warning in result.warnings)
        assert runner.run.call_count == 1
        assert (tmp_path / "docs" / SOURCE_DIR / "users.coffee").exists()

    def test_compiled(self, tmp_path):
        runner = MagicMock()
        runner.run.return_value = ProcessResult(success=True)
        result = self.make(tmp_path, runner).run(sample_app.build_registry(), formats=["apidoc"])

        assert "ApiDoc HTML" in [generated.label for generated in result.files]
        command = runner.run.call_args.args[0]
        assert command[:3] == ["apidoc", "--input", str(tmp_path / "docs" / SOURCE_DIR)]

    def test_memory_sink_skips_compilation(self, generator):
        generator.runner = MagicMock()
        generator.run(sample_app.build_registry(), formats=["apidoc"])
        generator.runner.run.assert_not_called()
