"""Serialisation helpers and the output sink shared by all renderers."""

import json
from pathlib import Path
from typing import Any, Protocol

import yaml


def to_json(document: Any) -> str:
    return json.dumps(document, indent=4, ensure_ascii=False)


def to_yaml(document: Any) -> str:
    return yaml.safe_dump(document, default_flow_style=False, sort_keys=False, allow_unicode=True)


class DocumentSink(Protocol):
    def write(self, path: str, content: str) -> Path: ...


class FileSystemSink:
    """Writes rendered documents below ``root``, creating directories as needed."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def write(self, path: str, content: str) -> Path:
        target = self.root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target


class MemorySink:
    """Keeps rendered documents in a dict; used by ``--no-files-output`` and tests."""

    def __init__(self):
        self.files: dict[str, str] = {}

    def write(self, path: str, content: str) -> Path:
        self.files[path] = content
        return Path(path)
