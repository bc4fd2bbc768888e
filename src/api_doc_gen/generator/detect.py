"""Detect which dialect a rendered API document is written in."""

import json
from pathlib import Path
from typing import Any

import yaml


def detect_dialect(document: Any) -> str:
    """Return 'swagger2', 'openapi3', 'postman' or 'unknown'."""
    if not isinstance(document, dict):
        return "unknown"
    if str(document.get("swagger", "")).startswith("2"):
        return "swagger2"
    if str(document.get("openapi", "")).startswith("3"):
        return "openapi3"
    info = document.get("info")
    if isinstance(info, dict) and ("_postman_id" in info or "getpostman.com" in str(info.get("schema", ""))):
        return "postman"
    return "unknown"


def load_document(file_path: Path) -> Any:
    """Parse a JSON or YAML document from disk."""
    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def detect_file(file_path: Path) -> str:
    try:
        return detect_dialect(load_document(file_path))
    except (json.JSONDecodeError, yaml.YAMLError):
        return "unknown"
