import json
from datetime import datetime, timedelta, timezone

import pytest

from api_doc_gen.changelog.manager import ChangelogManager, endpoint_operations, schema_definitions
from api_doc_gen.errors import VersionNotFoundError

OLD = {
    "swagger": "2.0",
    "paths": {
        "/users": {"get": {"summary": "List users"}},
        "/users/{id}": {"delete": {"summary": "Delete a user"}, "parameters": []},
    },
    "definitions": {
        "User": {"properties": {"id": {"type": "integer"}, "name": {"type": "string"}}},
        "Legacy": {"properties": {}},
    },
}

NEW = {
    "swagger": "2.0",
    "paths": {
        "/users": {"get": {"summary": "List all users"}, "post": {"summary": "Create a user"}},
    },
    "definitions": {
        "User": {"properties": {"id": {"type": "string"}, "email": {"type": "string"}}},
        "Post": {"properties": {}},
    },
}


class Clock:
    def __init__(self):
        self.moment = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.moment

    def tick(self) -> None:
        self.moment += timedelta(minutes=1)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def manager(tmp_path, clock):
    return ChangelogManager(tmp_path / "versions", now=clock)


class TestHelpers:
    def test_endpoint_operations(self):
        assert list(endpoint_operations(OLD)) == ["GET /users", "DELETE /users/{id}"]

    def test_schema_definitions(self):
        assert list(schema_definitions(NEW)) == ["User", "Post"]
        assert list(schema_definitions({"components": {"schemas": {"A": {}}}})) == ["A"]
        assert schema_definitions({}) == {}


class TestSnapshots:
    def test_save(self, manager):
        path = manager.set_current(OLD).save("1.0.0")
        assert path.name == "v_1.0.0.json"
        content = json.loads(path.read_text())
        assert content["version"] == "1.0.0"
        assert content["timestamp"] == "2024-01-01T12:00:00+00:00"
        assert content["schema"] == OLD

    def test_default_version_is_timestamp(self, manager):
        assert manager.save().name == "v_2024-01-01_12-00-00.json"

    def test_versions_newest_first(self, manager, clock):
        manager.save("a")
        clock.tick()
        manager.save("b")
        assert [info.version for info in manager.get_versions()] == ["b", "a"]
        assert manager.latest().version == "b"

    def test_unreadable_snapshot_is_ignored(self, manager):
        manager.save("good")
        (manager.path / "v_bad.json").write_text("{not json")
        assert [info.version for info in manager.get_versions()] == ["good"]

    def test_no_directory(self, tmp_path):
        manager = ChangelogManager(tmp_path / "missing")
        assert manager.get_versions() == []
        assert manager.latest() is None
        assert manager.load("1.0.0") is None

    def test_prune(self, manager, clock):
        for version in ("a", "b", "c"):
            manager.save(version)
            clock.tick()
        assert manager.prune(keep=1) == 2
        assert [info.version for info in manager.get_versions()] == ["c"]
        assert manager.clear() == 1
        assert manager.get_versions() == []

    def test_prune_rejects_negative_keep(self, manager):
        manager.save("a")
        with pytest.raises(ValueError, match="keep"):
            manager.prune(keep=-1)
        assert [info.version for info in manager.get_versions()] == ["a"]


class TestCompare:
    def test_no_versions(self, manager):
        with pytest.raises(VersionNotFoundError, match="No previous versions found"):
            manager.compare_with_latest()

    def test_missing_version(self, manager):
        with pytest.raises(VersionNotFoundError, match="Version 9.9 not found"):
            manager.compare_with("9.9")

    def test_corrupt_snapshot(self, manager):
        manager.path.mkdir(parents=True)
        (manager.path / "v_broken.json").write_text("{not json")
        assert manager.load("broken") is None
        with pytest.raises(VersionNotFoundError, match="Version broken not found"):
            manager.compare_with("broken")

    def test_compare_with_latest(self, manager):
        manager.set_current(OLD).save("1.0.0")
        diff = manager.set_current(NEW).compare_with_latest()
        assert diff.added.endpoints == ["POST /users"]
        assert diff.removed.endpoints == ["DELETE /users/{id}"]
        assert diff.modified.endpoints == ["GET /users"]

    def test_schema_changes(self, manager):
        diff = manager.diff(OLD, NEW)
        assert diff.added.schemas == ["Post"]
        assert diff.removed.schemas == ["Legacy"]
        assert diff.added.fields == {"User": ["email"]}
        assert diff.removed.fields == {"User": ["name"]}
        assert diff.modified.fields == {"User": ["id"]}
        assert diff.has_changes

    def test_identical(self, manager):
        diff = manager.diff(OLD, OLD)
        assert not diff.has_changes


class TestChangelogMarkdown:
    def test_changes(self, manager):
        md = manager.generate_changelog(manager.diff(OLD, NEW))
        assert md.startswith("# API Changelog\n\nGenerated: 2024-01-01 12:00:00\n")
        assert "## ➕ Added" in md
        assert "- `POST /users`" in md
        assert "## ➖ Removed" in md
        assert "- ~~`DELETE /users/{id}`~~" in md
        assert "**User:**\n- ~~`name`~~" in md
        assert "## ✏️ Modified" in md
        assert "> No changes detected." not in md

    def test_no_changes(self, manager):
        md = manager.generate_changelog(manager.diff(OLD, OLD))
        assert md.endswith("> No changes detected.\n")
        assert "## ➕ Added" not in md
