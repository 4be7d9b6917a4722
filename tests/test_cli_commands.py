"""Tests for the config, auth and record command groups."""

from __future__ import annotations

import json
from functools import partial
from pathlib import Path

import httpx
import pytest
import yaml
from click.testing import CliRunner

from batchup.cli.main import cli
from batchup.core.auth import AuthManager
from batchup.core.client import ApiClient

URL = "https://materials.example.edu"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def configured(runner, isolated_home: Path) -> Path:
    result = runner.invoke(cli, ["config", "init", "--url", URL + "/"])
    assert result.exit_code == 0, result.output
    return isolated_home


# =============================================================================
# Main
# =============================================================================


class TestMain:
    """Tests for the top-level group."""

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "batchup" in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])
        for name in ("upload", "record", "auth", "config"):
            assert name in result.output


# =============================================================================
# Config Commands
# =============================================================================


class TestConfigCommands:
    """Tests for `batchup config`."""

    def test_init_writes_profile(self, configured: Path):
        data = yaml.safe_load((configured / "config.yaml").read_text())

        assert data["default_profile"] == "default"
        assert data["profiles"]["default"]["url"] == URL
        assert data["profiles"]["default"]["transfer_deadline"] == 60

    def test_init_rejects_bad_url(self, runner, isolated_home):
        result = runner.invoke(cli, ["config", "init", "--url", "materials.example.edu"])

        assert result.exit_code == 1
        assert "scheme" in result.output

    def test_init_existing_profile_needs_force(self, runner, configured):
        result = runner.invoke(cli, ["config", "init", "--url", URL])
        assert result.exit_code == 1
        assert "--force" in result.output

    def test_add_use_and_remove_profile(self, runner, configured: Path):
        result = runner.invoke(
            cli,
            [
                "config",
                "add-profile",
                "staging",
                "--url",
                "https://staging.example.edu",
                "--transfer-deadline",
                "120",
                "--visibility",
                "public",
            ],
        )
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, ["config", "use-context", "staging"])
        assert result.exit_code == 0, result.output

        data = yaml.safe_load((configured / "config.yaml").read_text())
        assert data["default_profile"] == "staging"
        assert data["profiles"]["staging"]["transfer_deadline"] == 120
        assert data["profiles"]["staging"]["default_visibility"] == "public"

        result = runner.invoke(cli, ["config", "remove-profile", "staging", "--yes"])
        assert result.exit_code == 1
        assert "default profile" in result.output

        runner.invoke(cli, ["config", "use-context", "default"])
        result = runner.invoke(cli, ["config", "remove-profile", "staging", "--yes"])
        assert result.exit_code == 0, result.output

    def test_use_unknown_context(self, runner, configured):
        result = runner.invoke(cli, ["config", "use-context", "ghost"])
        assert result.exit_code == 1
        assert "Available profiles: default" in result.output

    def test_show_json(self, runner, configured):
        result = runner.invoke(cli, ["config", "show", "-o", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["profile_details"]["default"]["url"] == URL

    def test_show_without_config(self, runner, isolated_home):
        result = runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 1


# =============================================================================
# Auth Commands
# =============================================================================


class TestAuthCommands:
    """Tests for `batchup auth`."""

    def test_login_with_token(self, runner, configured: Path):
        result = runner.invoke(cli, ["auth", "login", "--token", "abc123", "-u", "ada"])

        assert result.exit_code == 0, result.output
        session = AuthManager(cache_file=configured / ".session").load_session(URL)
        assert session.token == "abc123"
        assert session.username == "ada"

    def test_login_prompts_for_token(self, runner, configured: Path):
        result = runner.invoke(cli, ["auth", "login"], input="prompted\n")

        assert result.exit_code == 0, result.output
        assert AuthManager(cache_file=configured / ".session").load_session().token == "prompted"

    def test_status_and_logout(self, runner, configured: Path):
        runner.invoke(cli, ["auth", "login", "--token", "abc123"])

        result = runner.invoke(cli, ["auth", "status", "-o", "json"])
        assert result.exit_code == 0, result.output
        status = json.loads(result.stdout)
        assert status["session_cached"] is True
        assert "abc123" not in result.output

        result = runner.invoke(cli, ["auth", "logout"])
        assert result.exit_code == 0
        assert not (configured / ".session").exists()

    def test_login_unknown_profile(self, runner, configured):
        result = runner.invoke(cli, ["auth", "login", "-p", "ghost", "--token", "x"])
        assert result.exit_code == 1


# =============================================================================
# Record Commands
# =============================================================================


def _record_api(request: httpx.Request) -> httpx.Response:
    if request.method == "GET" and request.url.path == "/api/materials":
        return httpx.Response(
            200, json={"data": [{"_id": "r1", "name": "Syllabus", "filename": "r1.pdf"}]}
        )
    if request.url.path == "/api/materials/download-url/r1":
        minutes = request.url.params["expiryMinutes"]
        return httpx.Response(200, json={"data": {"url": f"https://s3/r1?ttl={minutes}"}})
    if request.method == "DELETE" and request.url.path == "/api/materials/r1":
        return httpx.Response(200, json={"success": True})
    return httpx.Response(404, text="Material not found")


class TestRecordCommands:
    """Tests for `batchup record`."""

    @pytest.fixture(autouse=True)
    def wired(self, runner, configured, monkeypatch: pytest.MonkeyPatch):
        runner.invoke(cli, ["auth", "login", "--token", "abc123"])
        monkeypatch.setattr(
            "batchup.cli.common.ApiClient",
            partial(ApiClient, transport=httpx.MockTransport(_record_api)),
        )

    def test_list(self, runner):
        result = runner.invoke(cli, ["record", "list", "-o", "json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)[0]["id"] == "r1"

    def test_list_quiet(self, runner):
        result = runner.invoke(cli, ["record", "list", "-q"])
        assert result.stdout.strip() == "r1"

    def test_url(self, runner):
        result = runner.invoke(cli, ["record", "url", "r1", "--expiry-minutes", "5", "-q"])

        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "https://s3/r1?ttl=5"

    def test_url_expiry_out_of_range(self, runner):
        result = runner.invoke(cli, ["record", "url", "r1", "--expiry-minutes", "90"])
        assert result.exit_code == 2

    def test_delete(self, runner):
        result = runner.invoke(cli, ["record", "delete", "r1", "--yes"])

        assert result.exit_code == 0, result.output
        assert "Deleted record r1" in result.output

    def test_delete_not_found(self, runner):
        result = runner.invoke(cli, ["record", "delete", "missing", "--yes"])

        assert result.exit_code == 1
        assert "404" in result.output

    def test_delete_declined(self, runner):
        result = runner.invoke(cli, ["record", "delete", "r1"], input="n\n")
        assert result.exit_code == 1
