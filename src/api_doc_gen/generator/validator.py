"""Structural checks for rendered documents and output files."""

import json
import re
from typing import Any

import yaml

from api_doc_gen.generator.detect import detect_dialect

_PATH_PARAM = re.compile(r"\{(\w+)\}")


def _collect_refs(value: Any, location: str, found: list[tuple[str, str]]) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            if key == "$ref" and isinstance(item, str):
                found.append((location, item))
            else:
                _collect_refs(item, f"{location}/{key}", found)
    elif isinstance(value, list):
        for index, item in enumerate(value):
            _collect_refs(item, f"{location}/{index}", found)


def validate_refs(document: dict[str, Any]) -> dict[str, str]:
    """Check that every ``$ref`` points at a defined schema.

    Returns dict of {location: error_message} for unresolved references.
    """
    if detect_dialect(document) == "openapi3":
        prefix, defined = "#/components/schemas/", document.get("components", {}).get("schemas", {})
    else:
        prefix, defined = "#/definitions/", document.get("definitions", {})

    refs: list[tuple[str, str]] = []
    _collect_refs(document, "#", refs)
    errors = {}
    for location, target in refs:
        if not target.startswith(prefix):
            errors[location] = f"Foreign reference: {target}"
        elif target[len(prefix):] not in defined:
            errors[location] = f"Unresolved reference: {target}"
    return errors


def validate_path_params(document: dict[str, Any]) -> dict[str, str]:
    """Check that every ``{token}`` in a path is declared as a path parameter.

    Returns dict of {location: error_message} for undeclared tokens.
    """
    errors = {}
    for path, operations in document.get("paths", {}).items():
        tokens = _PATH_PARAM.findall(path)
        for method, operation in operations.items():
            declared = {p["name"] for p in operation.get("parameters", []) if p.get("in") == "path"}
            missing = [token for token in tokens if token not in declared]
            if missing:
                errors[f"{method.upper()} {path}"] = "Undeclared path parameters: " + ", ".join(missing)
    return errors


def validate_document(document: dict[str, Any]) -> dict[str, str]:
    """Run all structural validations on a Swagger 2 or OpenAPI 3 document."""
    errors = {}
    errors.update(validate_refs(document))
    errors.update(validate_path_params(document))
    return errors


def validate_files(files: dict[str, str]) -> dict[str, str]:
    """Check JSON and YAML output files for format errors.

    Returns dict of {filename: error_message} for files with errors.
    """
    errors = {}
    for filename, content in files.items():
        if filename.endswith(".json"):
            try:
                json.loads(content)
            except json.JSONDecodeError as e:
                errors[filename] = f"JSONDecodeError: {e.msg} (line {e.lineno})"
        elif filename.endswith((".yaml", ".yml")):
            try:
                yaml.safe_load(content)
            except yaml.YAMLError as e:
                errors[filename] = f"YAMLError: {e}"
    return errors
