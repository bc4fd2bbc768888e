"""apiDoc source blocks and compilation through the external ``apidoc`` tool."""

import json
from pathlib import Path

from api_doc_gen.config import ApiDocSettings
from api_doc_gen.docs.endpoint import EndpointDescriptor
from api_doc_gen.docs.naming import snake, ucwords
from api_doc_gen.docs.param import Param
from api_doc_gen.errors import InvalidDocAttributeError
from api_doc_gen.process import ProcessResult, ProcessRunner

SOURCE_DIR = "apidoc/auto_generated"
HTML_DIR = "api"
FILE_HEADER = "# AUTO-GENERATED. DO NOT EDIT THIS FILE."

INSTALL_INSTRUCTIONS = """
  apidoc is not installed, so the HTML documentation will not be generated.

  Install it with one of:
    npm install -g apidoc
    npm install --save-dev apidoc

  Swagger, OpenAPI and Postman files are generated either way.
"""


def _field(tag: str, param: Param) -> str:
    if not param.name:
        raise InvalidDocAttributeError("The parameters requires a fieldname")
    name = param.name if param.required else f"[{param.name}]"
    return f"{tag} {{{param.type.value}}} {name} {param.description or ''}".rstrip()


class ApiDocRenderer:
    def render(self, endpoint: EndpointDescriptor) -> str:
        """One ``###``-delimited apiDoc comment block for ``endpoint``."""
        lines = ["###"]
        if endpoint.define is not None:
            lines.append(f"@apiDefine {endpoint.define.title} {endpoint.define.description}".rstrip())
        if endpoint.description:
            lines.append(f"@apiDescription {endpoint.description}")
        lines.append(f"@apiVersion {endpoint.version}")
        lines.append(f"@api {{{endpoint.method}}} {endpoint.route or ''} {endpoint.name or ''}".rstrip())
        lines.append(f"@apiGroup {ucwords(endpoint.group or 'General')}")

        lines.extend(_field("@apiParam", param) for param in [*endpoint.path_params, *endpoint.query_params, *endpoint.params])
        lines.extend(_field("@apiSuccess", param) for param in endpoint.success_params)
        lines.extend(_field("@apiHeader", param) for param in endpoint.headers)
        lines.extend(f"@apiUse {title}" for title in endpoint.use)

        if endpoint.request_example:
            lines.append("@apiParamExample {json} Request Example")
            lines.append(json.dumps(endpoint.request_example, indent=4))
        for status, example in endpoint.success_examples.items():
            lines.append(f"@apiSuccessExample {{json}} {status} {example.description}")
            lines.append(json.dumps(example.example, indent=4))
        for status, example in endpoint.error_examples.items():
            lines.append(f"@apiErrorExample {{json}} {status} {example.description}")
            lines.append(json.dumps(example.example, indent=4))

        lines.append("###")
        return "\r\n".join(lines)

    def render_files(self, endpoints: list[EndpointDescriptor]) -> dict[str, str]:
        """Blocks grouped into one ``.coffee`` file per endpoint group."""
        files: dict[str, str] = {}
        for endpoint in endpoints:
            filename = f"{SOURCE_DIR}/{snake(endpoint.group or 'General')}.coffee"
            files[filename] = files.get(filename, "") + "\r\n".join([FILE_HEADER, self.render(endpoint), ""])
        return files


class ApiDocCompiler:
    def __init__(self, settings: ApiDocSettings, runner: ProcessRunner | None = None):
        self.settings = settings
        self.runner = runner or ProcessRunner()

    def is_installed(self) -> bool:
        return self.runner.run([self.settings.command, "--help"], timeout=self.settings.timeout).success

    def compile(self, output_root: Path) -> ProcessResult:
        command = [
            self.settings.command,
            "--input",
            str(output_root / SOURCE_DIR),
            "--output",
            str(output_root / HTML_DIR),
        ]
        return self.runner.run(command, timeout=self.settings.timeout)
