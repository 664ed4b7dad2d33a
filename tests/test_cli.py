"""Smoke tests for the sitecontent CLI."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from sitecontent.cache import STORAGE_KEY, LocalCache
from sitecontent.cli import app
from sitecontent.errors import RemoteStoreError
from sitecontent.models import SiteContent
from sitecontent.store import ContentPersistence


class _FakeRemote:
    def __init__(self, document=None, *, read_error=None, write_ok=True):
        self.document = document
        self.read_error = read_error
        self.write_ok = write_ok
        self.writes: list[SiteContent] = []

    def read_document(self):
        if self.read_error is not None:
            raise self.read_error
        return self.document

    def write_document(self, content):
        self.writes.append(content)
        return self.write_ok


_DOC = SiteContent.model_validate(
    {
        "siteName": "CLI",
        "blocks": [
            {"id": "videos", "title": "Videos", "type": "videos", "order": 1},
            {"id": "hero", "title": "Hero", "type": "hero", "order": 2},
        ],
    }
)


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def cache(tmp_path: Path) -> LocalCache:
    return LocalCache(tmp_path / "cache")


@pytest.fixture
def remote() -> _FakeRemote:
    return _FakeRemote()


@pytest.fixture(autouse=True)
def _wire_store(monkeypatch, tmp_path, cache, remote):
    """Route every CLI command to the fake remote and a temp cache."""
    for key in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "ADMIN_SECRET", "SITECONTENT_CACHE_DIR"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("sitecontent.config.GLOBAL_CONFIG_PATH", tmp_path / "missing.toml")

    def _from_config(cls, config, notifier=None):
        return ContentPersistence(remote, cache, notifier=notifier, save_delay=0)

    monkeypatch.setattr(ContentPersistence, "from_config", classmethod(_from_config))


class TestCLI:
    def test_main_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "load" in result.output
        assert "sync" in result.output

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "sitecontent" in result.output


class TestLoadCommands:
    def test_load_from_database(self, runner, remote, cache):
        remote.document = _DOC
        result = runner.invoke(app, ["load"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        orders = {b["id"]: b["order"] for b in data["blocks"]}
        assert orders == {"videos": 50, "hero": 1}
        assert cache.get_item(STORAGE_KEY) is not None

    def test_load_local_ignores_database(self, runner, remote):
        remote.document = _DOC
        result = runner.invoke(app, ["load-local"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert "siteName" in data
        assert data["siteName"] != "CLI"

    def test_pull_overwrites_cache(self, runner, remote, cache):
        remote.document = _DOC
        result = runner.invoke(app, ["pull"])
        assert result.exit_code == 0
        assert json.loads(cache.get_item(STORAGE_KEY))["siteName"] == "CLI"


class TestSaveCommand:
    def test_save_success(self, runner, remote, cache, tmp_path):
        src = tmp_path / "doc.json"
        src.write_text(_DOC.to_json(), encoding="utf-8")
        result = runner.invoke(app, ["save", str(src)])
        assert result.exit_code == 0
        assert remote.writes == [_DOC]
        assert cache.get_item(STORAGE_KEY) == _DOC.to_json()

    def test_save_remote_failure_exits_nonzero(self, runner, remote, cache, tmp_path):
        remote.write_ok = False
        src = tmp_path / "doc.json"
        src.write_text(_DOC.to_json(), encoding="utf-8")
        result = runner.invoke(app, ["save", str(src)])
        assert result.exit_code == 1
        assert cache.get_item(STORAGE_KEY) == _DOC.to_json()

    def test_save_malformed_file(self, runner, remote, tmp_path):
        src = tmp_path / "bad.json"
        src.write_text("{nope", encoding="utf-8")
        result = runner.invoke(app, ["save", str(src)])
        assert result.exit_code == 1
        assert remote.writes == []


class TestImportExport:
    def test_export_to_file(self, runner, cache, tmp_path):
        cache.set_item(STORAGE_KEY, _DOC.to_json())
        out = tmp_path / "backup.json"
        result = runner.invoke(app, ["export", "--output", str(out)])
        assert result.exit_code == 0
        assert json.loads(out.read_text(encoding="utf-8"))["siteName"] == "CLI"

    def test_import_malformed(self, runner, tmp_path):
        src = tmp_path / "bad.json"
        src.write_text("not json", encoding="utf-8")
        result = runner.invoke(app, ["import", str(src)])
        assert result.exit_code == 1

    def test_import_without_save_touches_nothing(self, runner, remote, cache, tmp_path):
        src = tmp_path / "doc.json"
        src.write_text(_DOC.to_json(indent=2), encoding="utf-8")
        result = runner.invoke(app, ["import", str(src)])
        assert result.exit_code == 0
        assert remote.writes == []
        assert cache.get_item(STORAGE_KEY) is None

    def test_import_with_save(self, runner, remote, tmp_path):
        src = tmp_path / "doc.json"
        src.write_text(_DOC.to_json(indent=2), encoding="utf-8")
        result = runner.invoke(app, ["import", str(src), "--save"])
        assert result.exit_code == 0
        assert remote.writes == [_DOC]

    def test_import_with_save_remote_failure_exits_nonzero(self, runner, remote, cache, tmp_path):
        remote.write_ok = False
        src = tmp_path / "doc.json"
        src.write_text(_DOC.to_json(indent=2), encoding="utf-8")
        result = runner.invoke(app, ["import", str(src), "--save"])
        assert result.exit_code == 1
        assert cache.get_item(STORAGE_KEY) == _DOC.to_json()


class TestDatabaseCommands:
    def test_reset(self, runner, cache):
        cache.set_item(STORAGE_KEY, _DOC.to_json())
        result = runner.invoke(app, ["reset"])
        assert result.exit_code == 0
        assert cache.get_item(STORAGE_KEY) is None

    def test_sync_failure(self, runner, remote):
        remote.write_ok = False
        result = runner.invoke(app, ["sync"])
        assert result.exit_code == 1

    def test_sync_success(self, runner, remote):
        result = runner.invoke(app, ["sync"])
        assert result.exit_code == 0
        assert len(remote.writes) == 1

    def test_check_reachable(self, runner):
        assert runner.invoke(app, ["check"]).exit_code == 0

    def test_check_unreachable(self, runner, remote):
        remote.read_error = RemoteStoreError("down")
        assert runner.invoke(app, ["check"]).exit_code == 1

    def test_status(self, runner, remote):
        remote.read_error = RemoteStoreError("down")
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "Database reachable" in result.output
        assert "Local cache usable" in result.output
