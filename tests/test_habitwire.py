"""Tests for the HabitWire CLI skill."""

from __future__ import annotations

import json
import sys

import httpx
import pytest

from habitwire_skill import cli
from habitwire_skill.client import ApiError, ConfigError, HabitWireClient, UsageError
from habitwire_skill.keys import ApiKey, KeyService
from habitwire_skill.system import export, health

BASE_URL = "https://habits.test/api"


def _client(handler) -> HabitWireClient:
    return HabitWireClient(BASE_URL, "hw-key", transport=httpx.MockTransport(handler))


@pytest.fixture
def run_cli(monkeypatch, capsys):
    def _run(handler, *argv: str):
        monkeypatch.setattr(cli, "_create_client", lambda: _client(handler))
        code = 0
        try:
            cli.main(list(argv))
        except SystemExit as exc:
            code = exc.code
        captured = capsys.readouterr()
        return code, captured.out, captured.err

    return _run


class TestKeys:
    def test_lean_key(self):
        assert ApiKey(id="k1", name="ci", created_at="x").to_lean() == {"id": "k1", "name": "ci"}
        assert ApiKey(id="k1", name="ci", key="hw_abc").to_lean() == {
            "id": "k1",
            "name": "ci",
            "key": "hw_abc",
        }

    def test_list(self, run_cli):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[{"id": "k1", "name": "ci", "last_used": "today"}])

        code, out, _ = run_cli(handler, "keys", "list")
        assert code == 0
        assert json.loads(out) == [{"id": "k1", "name": "ci"}]
        assert seen[0].url.path == "/api/keys"
        assert seen[0].headers["Authorization"] == "Bearer hw-key"

    def test_create_shows_key(self, run_cli):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={"id": "k2", "name": "laptop", "key": "hw_secret"})

        code, out, _ = run_cli(handler, "keys", "create", "--name", "laptop")
        assert code == 0
        assert bodies == [{"name": "laptop"}]
        assert json.loads(out)["key"] == "hw_secret"

    def test_create_requires_name(self, run_cli):
        code, _, err = run_cli(lambda r: httpx.Response(500), "keys", "create")
        assert code == 1
        assert "--name" in json.loads(err)["error"]

    def test_delete_uses_string_id(self, run_cli):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(204)

        code, out, _ = run_cli(handler, "keys", "delete", "c0ffee-uuid")
        assert code == 0
        assert seen[0].method == "DELETE"
        assert seen[0].url.path == "/api/keys/c0ffee-uuid"
        assert json.loads(out) == {"deleted": True}

    def test_service_rejects_empty_name(self):
        with pytest.raises(UsageError, match="--name is required"):
            KeyService(_client(lambda r: httpx.Response(500))).create("")


class TestHealth:
    def test_health(self):
        client = _client(lambda r: httpx.Response(200, json={"status": "ok", "version": "1.4.0", "db": "up"}))
        assert health(client).to_lean() == {"status": "ok", "version": "1.4.0"}

    def test_health_without_version(self, run_cli):
        code, out, _ = run_cli(lambda r: httpx.Response(200, json={"status": "ok"}), "health")
        assert code == 0
        assert out == '{"status":"ok"}\n'

    def test_server_error(self, run_cli):
        code, _, err = run_cli(lambda r: httpx.Response(503, text="maintenance"), "health")
        assert code == 1
        assert json.loads(err) == {"error": "API error (status 503): maintenance"}


class TestExport:
    def test_json_sections(self):
        payload = {"habits": [{"id": 1}], "categories": [], "checkins": [{"habit": 1}], "meta": {}}
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=payload)

        data = export(_client(handler))
        assert data == {"habits": [{"id": 1}], "categories": [], "checkins": [{"habit": 1}]}
        assert seen[0].url.params["format"] == "json"

    def test_csv_is_raw(self, run_cli):
        csv_text = "habit,date\nread,2025-01-01"
        code, out, _ = run_cli(lambda r: httpx.Response(200, text=csv_text), "export", "--format", "csv")
        assert code == 0
        assert out == csv_text + "\n"

    def test_unparseable_json_is_raw(self):
        client = _client(lambda r: httpx.Response(200, text="not-json"))
        assert export(client, "json") == "not-json"

    def test_invalid_format(self, run_cli):
        code, _, err = run_cli(lambda r: httpx.Response(200), "export", "--format", "xml")
        assert code == 1
        assert "invalid choice" in json.loads(err)["error"]


class TestEntryPoint:
    def test_from_env_missing(self, monkeypatch):
        monkeypatch.delenv("HABITWIRE_URL", raising=False)
        with pytest.raises(ConfigError, match="HABITWIRE_URL environment variable is required"):
            HabitWireClient.from_env()

    def test_help_without_env(self, monkeypatch, capsys):
        monkeypatch.delenv("HABITWIRE_URL", raising=False)
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--help"])
        assert exc_info.value.code == 0
        assert "keys" in capsys.readouterr().out

    def test_missing_env_reports_json_error(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", [str(tmp_path / "habitwire")])
        monkeypatch.setenv("HABITWIRE_URL", BASE_URL)
        monkeypatch.delenv("HABITWIRE_API_KEY", raising=False)
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["health"])
        assert exc_info.value.code == 1
        assert json.loads(capsys.readouterr().err) == {
            "error": "HABITWIRE_API_KEY environment variable is required"
        }

    def test_api_error_message(self):
        assert str(ApiError(401, "bad key")) == "API error (status 401): bad key"
