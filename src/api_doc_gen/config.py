"""Settings for documentation generation, loaded from YAML and the environment."""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiInfo(BaseModel):
    title: str = "API Documentation"
    description: str = "API Documentation"
    version: str = "1.0.0"


class AuthHeader(BaseModel):
    """An authentication header every documented endpoint may carry."""

    name: str
    type: Literal["api_key", "bearer", "custom"] = "api_key"
    description: str | None = None
    required: bool = True
    security_scheme: str | None = None
    example: str | None = None


class DefaultHeader(BaseModel):
    name: str
    value: str
    description: str = ""


class ErrorPreset(BaseModel):
    status: int = 500
    description: str | None = None
    example: Any = None


class ServerSettings(BaseModel):
    url: str = "http://localhost"
    description: str = "Current Server"


class TypeScriptSettings(BaseModel):
    enabled: bool = True
    file: str = "types.ts"


class MarkdownSettings(BaseModel):
    include_curl: bool = True
    include_fetch: bool = True


class OutputSettings(BaseModel):
    path: Path = Path("docs")
    formats: list[str] = Field(default_factory=lambda: ["swagger2", "openapi3", "postman"])
    typescript: TypeScriptSettings = Field(default_factory=TypeScriptSettings)
    markdown: MarkdownSettings = Field(default_factory=MarkdownSettings)


class ApiDocSettings(BaseModel):
    enabled: bool = True
    command: str = "apidoc"
    timeout: int = 60


class ChangelogSettings(BaseModel):
    path: Path = Path("storage/api-doc/versions")
    keep: int = Field(5, ge=0)


def _default_error_presets() -> dict[str, ErrorPreset]:
    return {
        "validation": ErrorPreset(
            status=422,
            description="Validation Error",
            example={"message": "The given data was invalid.", "errors": {"field": ["The field is required."]}},
        ),
        "unauthenticated": ErrorPreset(status=401, description="Unauthorized", example={"message": "Unauthenticated."}),
        "unauthorized": ErrorPreset(status=403, description="Forbidden", example={"message": "This action is unauthorized."}),
        "not_found": ErrorPreset(status=404, description="Not Found", example={"message": "Resource not found."}),
        "rate_limit": ErrorPreset(status=429, description="Too Many Requests", example={"message": "Too Many Attempts."}),
        "server_error": ErrorPreset(status=500, description="Server Error", example={"message": "Server Error"}),
    }


FORMATS = ("swagger2", "openapi3", "postman", "markdown", "typescript", "apidoc")


class DocSettings(BaseSettings):
    """All generator settings.

    Values come from the keyword arguments (usually a YAML file, see
    load_settings) and fall back to ``APIDOC_*`` environment variables.
    """

    api_info: ApiInfo = Field(default_factory=ApiInfo, description="Title, description and version of the API.")
    base_path: str = Field("/api/v1", description="Route prefix selecting the documented routes.")
    auth_headers: list[AuthHeader] = Field(default_factory=list, description="Reusable authentication headers.")
    default_headers: list[DefaultHeader] = Field(
        default_factory=lambda: [
            DefaultHeader(name="Accept", value="application/json", description="Response content type"),
            DefaultHeader(name="Content-Type", value="application/json", description="Request content type"),
        ],
        description="Headers sent with every request of the Postman collection.",
    )
    param_templates: dict[str, dict[str, Any]] = Field(default_factory=dict, description="Named parameter templates.")
    error_presets: dict[str, ErrorPreset] = Field(default_factory=_default_error_presets, description="Named error responses.")
    response_wrapper: dict[str, Any] | None = Field(None, description="Response envelope template using '__DATA__'.")
    output: OutputSettings = Field(default_factory=OutputSettings)
    auto_discover_models: bool = Field(True, description="Register models found in model_modules as schemas.")
    model_modules: list[str] = Field(default_factory=list, description="Modules scanned for models.")
    auto_generate: bool = Field(False, description="Synthesize docs for routes that document nothing.")
    servers: list[ServerSettings] = Field(default_factory=lambda: [ServerSettings()])
    apidoc: ApiDocSettings = Field(default_factory=ApiDocSettings)
    changelog: ChangelogSettings = Field(default_factory=ChangelogSettings)
    cache_file: Path = Field(Path(".api-doc-cache.json"), description="Where discovered endpoints are cached.")
    generate_examples: bool = Field(True, description="Fill schema properties with example values.")

    model_config = SettingsConfigDict(env_prefix="APIDOC_", env_nested_delimiter="__", extra="ignore")

    @property
    def server_url(self) -> str:
        return self.servers[0].url.rstrip("/") if self.servers else "http://localhost"

    def auth_header(self, name: str) -> AuthHeader | None:
        for header in self.auth_headers:
            if header.name == name:
                return header
        return None


def load_settings(path: Path | None = None, **overrides: Any) -> DocSettings:
    """Load settings from a YAML file; keyword overrides win over the file."""
    data: dict[str, Any] = {}
    if path is not None:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        if isinstance(loaded, dict):
            data.update(loaded)
    data.update(overrides)
    return DocSettings(**data)
