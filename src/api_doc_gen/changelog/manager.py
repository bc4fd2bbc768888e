"""Versioned snapshots of a rendered API document and structural diffs between them."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from pydantic import BaseModel, Field

from api_doc_gen.errors import VersionNotFoundError

logger = logging.getLogger(__name__)

SNAPSHOT_PREFIX = "v_"
HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VersionInfo(BaseModel):
    version: str
    timestamp: str | None = None
    path: Path


class ChangeSet(BaseModel):
    endpoints: list[str] = Field(default_factory=list)
    schemas: list[str] = Field(default_factory=list)
    fields: dict[str, list[str]] = Field(default_factory=dict)

    @property
    def empty(self) -> bool:
        return not (self.endpoints or self.schemas or self.fields)


class SchemaDiff(BaseModel):
    added: ChangeSet = Field(default_factory=ChangeSet)
    removed: ChangeSet = Field(default_factory=ChangeSet)
    modified: ChangeSet = Field(default_factory=ChangeSet)

    @property
    def has_changes(self) -> bool:
        return not (self.added.empty and self.removed.empty and self.modified.empty)


def endpoint_operations(document: dict[str, Any]) -> dict[str, Any]:
    """``{"METHOD /path": operation}`` for every operation of a Swagger/OpenAPI document."""
    operations = {}
    for path, methods in (document.get("paths") or {}).items():
        for method, operation in methods.items():
            if method.lower() in HTTP_METHODS:
                operations[f"{method.upper()} {path}"] = operation
    return operations


def schema_definitions(document: dict[str, Any]) -> dict[str, Any]:
    if "definitions" in document:
        return document["definitions"] or {}
    return (document.get("components") or {}).get("schemas") or {}


class ChangelogManager:
    def __init__(self, path: Path, current: dict[str, Any] | None = None, now: Callable[[], datetime] = _utcnow):
        self.path = Path(path)
        self.current = current or {}
        self.now = now

    def set_current(self, document: dict[str, Any]) -> "ChangelogManager":
        self.current = document
        return self

    def _snapshot_path(self, version: str) -> Path:
        return self.path / f"{SNAPSHOT_PREFIX}{version}.json"

    def save(self, version: str | None = None) -> Path:
        """Persist the current document as a snapshot; the version defaults to a timestamp."""
        self.path.mkdir(parents=True, exist_ok=True)
        moment = self.now()
        version = version or moment.strftime("%Y-%m-%d_%H-%M-%S")
        target = self._snapshot_path(version)
        snapshot = {"version": version, "timestamp": moment.isoformat(), "schema": self.current}
        target.write_text(json.dumps(snapshot, indent=4, ensure_ascii=False), encoding="utf-8")
        logger.info("Saved API snapshot %s", version)
        return target

    def get_versions(self) -> list[VersionInfo]:
        """Saved versions, newest first."""
        if not self.path.is_dir():
            return []
        versions = []
        for file in self.path.glob(f"{SNAPSHOT_PREFIX}*.json"):
            try:
                content = json.loads(file.read_text(encoding="utf-8"))
            except json.JSONDecodeError:
                logger.warning("Ignoring unreadable snapshot %s", file)
                continue
            versions.append(VersionInfo(
                version=content.get("version") or file.stem[len(SNAPSHOT_PREFIX):],
                timestamp=content.get("timestamp"),
                path=file,
            ))
        versions.sort(key=lambda info: (info.timestamp or "", info.version), reverse=True)
        return versions

    def latest(self) -> VersionInfo | None:
        versions = self.get_versions()
        return versions[0] if versions else None

    def load(self, version: str) -> dict[str, Any] | None:
        path = self._snapshot_path(version)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable snapshot %s", path)
            return None

    def compare_with(self, version: str) -> SchemaDiff:
        snapshot = self.load(version)
        if snapshot is None:
            raise VersionNotFoundError(version)
        return self.diff(snapshot.get("schema") or {}, self.current)

    def compare_with_latest(self) -> SchemaDiff:
        latest = self.latest()
        if latest is None:
            raise VersionNotFoundError(None)
        return self.compare_with(latest.version)

    def diff(self, old: dict[str, Any], new: dict[str, Any]) -> SchemaDiff:
        diff = SchemaDiff()

        old_operations, new_operations = endpoint_operations(old), endpoint_operations(new)
        diff.added.endpoints = [key for key in new_operations if key not in old_operations]
        diff.removed.endpoints = [key for key in old_operations if key not in new_operations]
        diff.modified.endpoints = [
            key for key in new_operations if key in old_operations and new_operations[key] != old_operations[key]
        ]

        old_schemas, new_schemas = schema_definitions(old), schema_definitions(new)
        diff.added.schemas = [name for name in new_schemas if name not in old_schemas]
        diff.removed.schemas = [name for name in old_schemas if name not in new_schemas]

        for name in new_schemas:
            if name not in old_schemas:
                continue
            old_props = old_schemas[name].get("properties") or {}
            new_props = new_schemas[name].get("properties") or {}
            added = [prop for prop in new_props if prop not in old_props]
            removed = [prop for prop in old_props if prop not in new_props]
            modified = [prop for prop in new_props if prop in old_props and new_props[prop] != old_props[prop]]
            if added:
                diff.added.fields[name] = added
            if removed:
                diff.removed.fields[name] = removed
            if modified:
                diff.modified.fields[name] = modified
        return diff

    def generate_changelog(self, diff: SchemaDiff) -> str:
        md = "# API Changelog\n\n"
        md += f"Generated: {self.now().strftime('%Y-%m-%d %H:%M:%S')}\n\n"

        if not diff.added.empty:
            md += "## ➕ Added\n\n"
            md += _section("New Endpoints", diff.added.endpoints, "`{}`")
            md += _section("New Schemas", diff.added.schemas, "`{}`")
            md += _field_section("New Fields", diff.added.fields, "`{}`")
        if not diff.removed.empty:
            md += "## ➖ Removed\n\n"
            md += _section("Removed Endpoints", diff.removed.endpoints, "~~`{}`~~")
            md += _section("Removed Schemas", diff.removed.schemas, "~~`{}`~~")
            md += _field_section("Removed Fields", diff.removed.fields, "~~`{}`~~")
        if not diff.modified.empty:
            md += "## ✏️ Modified\n\n"
            md += _section("Modified Endpoints", diff.modified.endpoints, "`{}`")
            md += _field_section("Modified Fields", diff.modified.fields, "`{}`")
        if not diff.has_changes:
            md += "> No changes detected.\n"
        return md

    def prune(self, keep: int = 5) -> int:
        """Delete all but the ``keep`` newest snapshots; returns how many were deleted."""
        if keep < 0:
            raise ValueError(f"keep must be zero or more, got {keep}")
        stale = self.get_versions()[keep:]
        for info in stale:
            info.path.unlink()
        return len(stale)

    def clear(self) -> int:
        return self.prune(keep=0)


def _section(title: str, items: list[str], template: str) -> str:
    if not items:
        return ""
    return f"### {title}\n" + "".join(f"- {template.format(item)}\n" for item in items) + "\n"


def _field_section(title: str, fields: dict[str, list[str]], template: str) -> str:
    if not fields:
        return ""
    md = f"### {title}\n"
    for schema, names in fields.items():
        md += f"**{schema}:**\n" + "".join(f"- {template.format(name)}\n" for name in names)
    return md + "\n"
