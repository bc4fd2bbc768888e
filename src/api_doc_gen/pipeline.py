"""End-to-end documentation run: discover routes, render every format, write files."""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from api_doc_gen.config import FORMATS, DocSettings
from api_doc_gen.discovery.container import Container
from api_doc_gen.discovery.context import DiscoveryContext
from api_doc_gen.discovery.models import ModelIntrospector
from api_doc_gen.discovery.orchestrator import DiscoveryReport, RouteDiscoveryService
from api_doc_gen.discovery.routes import RouteRegistry
from api_doc_gen.docs.builder import DEFAULT_HEADERS_BLOCK
from api_doc_gen.errors import ConfigurationError
from api_doc_gen.generator.apidoc import HTML_DIR, INSTALL_INSTRUCTIONS, ApiDocCompiler, ApiDocRenderer
from api_doc_gen.generator.base import DocumentSink, FileSystemSink
from api_doc_gen.generator.markdown import MarkdownRenderer
from api_doc_gen.generator.openapi import OpenApi3Renderer
from api_doc_gen.generator.postman import PostmanCollectionBuilder
from api_doc_gen.generator.swagger import Swagger2Renderer
from api_doc_gen.generator.typescript import TypeScriptRenderer
from api_doc_gen.generator.validator import validate_document, validate_files
from api_doc_gen.process import ProcessRunner

logger = logging.getLogger(__name__)


class GeneratedFile(BaseModel):
    label: str
    path: Path


class GenerationResult(BaseModel):
    report: DiscoveryReport = Field(default_factory=DiscoveryReport)
    files: list[GeneratedFile] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class DocumentationGenerator:
    def __init__(
        self,
        settings: DocSettings | None = None,
        sink: DocumentSink | None = None,
        runner: ProcessRunner | None = None,
        container: Container | None = None,
        introspector: ModelIntrospector | None = None,
    ):
        self.settings = settings or DocSettings()
        self.sink = sink or FileSystemSink(self.settings.output.path)
        self.runner = runner or ProcessRunner()
        self.context = DiscoveryContext(self.settings, container=container, introspector=introspector)
        self.discovery = RouteDiscoveryService(self.context)

    def default_formats(self) -> list[str]:
        formats = list(self.settings.output.formats)
        if self.settings.output.typescript.enabled and "typescript" not in formats:
            formats.append("typescript")
        if self.settings.apidoc.enabled and "apidoc" not in formats:
            formats.append("apidoc")
        return formats

    def reset(self) -> None:
        self.context.reset()

    def define_default_headers(self) -> None:
        builder = self.context.builder
        if builder.find_by_definition(DEFAULT_HEADERS_BLOCK) is None:
            builder.register(builder.default_headers_definition(self.settings.auth_headers))

    def run(
        self,
        registry: RouteRegistry,
        formats: list[str] | None = None,
        reset: bool = False,
        auto: bool | None = None,
        compile_apidoc: bool = True,
    ) -> GenerationResult:
        """Discover every route in ``registry`` and write the requested formats.

        ConfigurationError propagates; everything else that goes wrong after
        discovery is reported in ``GenerationResult.warnings``.
        """
        formats = formats or self.default_formats()
        unknown = [fmt for fmt in formats if fmt not in FORMATS]
        if unknown:
            raise ConfigurationError(f"Unknown output format(s): {', '.join(unknown)}. Use: {', '.join(FORMATS)}")
        if reset:
            self.reset()
        if auto is not None:
            self.settings.auto_generate = auto

        result = GenerationResult()
        self.define_default_headers()
        models = self.discovery.discover_models()
        if models:
            logger.info("Registered %d model schemas", models)
        result.report = self.discovery.discover(registry)

        if not self.context.builder.endpoints():
            result.warnings.append("No API calls documented")
            logger.warning("No API calls documented")

        for fmt in formats:
            files = self.render_files(fmt)
            for problem, message in validate_files(files).items():
                result.warnings.append(f"{problem}: {message}")
            for filename, content in files.items():
                path = self.sink.write(filename, content)
                result.files.append(GeneratedFile(label=self.label(fmt, filename), path=path))

        if "apidoc" in formats and compile_apidoc:
            self.compile_apidoc(result)

        self.write_cache()
        return result

    def render(self, fmt: str) -> Any:
        """The rendered document for one format: a dict for the JSON dialects, text otherwise."""
        endpoints = self.context.builder.api_calls
        schemas = self.context.schemas
        if fmt == "swagger2":
            return Swagger2Renderer(self.settings).render(endpoints, schemas)
        if fmt == "openapi3":
            return OpenApi3Renderer(self.settings).render(endpoints, schemas)
        if fmt == "postman":
            return PostmanCollectionBuilder(self.settings).build_from_swagger(self.render("swagger2"))
        if fmt == "markdown":
            return MarkdownRenderer(self.settings).render(endpoints, schemas)
        if fmt == "typescript":
            return TypeScriptRenderer(self.settings).render(endpoints, schemas)
        if fmt == "apidoc":
            return ApiDocRenderer().render_files(endpoints)
        raise ConfigurationError(f"Unknown output format: {fmt}")

    def render_files(self, fmt: str) -> dict[str, str]:
        document = self.render(fmt)
        if fmt in ("swagger2", "openapi3"):
            for location, message in validate_document(document).items():
                logger.warning("%s %s: %s", fmt, location, message)
        if fmt == "swagger2":
            return Swagger2Renderer(self.settings).files(document)
        if fmt == "openapi3":
            return OpenApi3Renderer(self.settings).files(document)
        if fmt == "postman":
            return PostmanCollectionBuilder(self.settings).files(document)
        if fmt == "markdown":
            return MarkdownRenderer(self.settings).files(document)
        if fmt == "typescript":
            return TypeScriptRenderer(self.settings).files(document)
        return document

    @staticmethod
    def label(fmt: str, filename: str) -> str:
        labels = {
            "swagger2": "Swagger v2",
            "openapi3": "OpenAPI 3.0",
            "markdown": "Markdown Docs",
            "typescript": "TypeScript SDK",
            "apidoc": "ApiDoc Source",
        }
        if fmt == "postman":
            return "Postman Environment" if "environment" in filename else "Postman Collection"
        suffix = Path(filename).suffix.lstrip(".").upper()
        if fmt in ("swagger2", "openapi3"):
            return f"{labels[fmt]} ({'YAML' if suffix == 'YML' else suffix})"
        return labels[fmt]

    def compile_apidoc(self, result: GenerationResult) -> None:
        if not self.settings.apidoc.enabled or not isinstance(self.sink, FileSystemSink):
            return
        compiler = ApiDocCompiler(self.settings.apidoc, self.runner)
        if not compiler.is_installed():
            logger.warning("apidoc is not installed; skipping HTML generation")
            result.warnings.append("ApiDoc.js is not installed" + INSTALL_INSTRUCTIONS)
            return
        outcome = compiler.compile(self.sink.root)
        if outcome.success:
            result.files.append(GeneratedFile(label="ApiDoc HTML", path=self.sink.root / HTML_DIR))
        else:
            logger.warning("ApiDoc compilation failed: %s", outcome.stderr)
            result.warnings.append(f"ApiDoc compilation had warnings: {outcome.stderr}")

    def write_cache(self, path: Path | None = None) -> Path:
        target = Path(path or self.settings.cache_file)
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = {"endpoints": self.context.builder.dump(), "schemas": self.context.schemas.snapshot()}
        target.write_text(json.dumps(payload, indent=4, ensure_ascii=False), encoding="utf-8")
        return target

    def load_cache(self, path: Path | None = None) -> bool:
        """Restore descriptors and schemas from the cache; False when there is none."""
        target = Path(path or self.settings.cache_file)
        if not target.exists():
            return False
        payload = json.loads(target.read_text(encoding="utf-8"))
        self.context.builder.load(payload.get("endpoints", []))
        self.context.schemas.load(payload.get("schemas", {}))
        return True

    def clear_cache(self, path: Path | None = None) -> bool:
        target = Path(path or self.settings.cache_file)
        if not target.exists():
            return False
        target.unlink()
        return True
