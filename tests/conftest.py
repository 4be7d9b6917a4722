"""Pytest configuration and fixtures for batchup tests."""

from __future__ import annotations

import asyncio
import itertools
import json
import tempfile
from pathlib import Path
from typing import Generator

import httpx
import pytest

from batchup.core.client import CONFIRM_UPLOAD_PATH, UPLOAD_URL_PATH

BASE_URL = "https://materials.example.edu"
STORAGE_HOST = "storage.example.com"
TOKEN = "test-token"


# =============================================================================
# Fake backend
# =============================================================================


class FakeBackend:
    """Metadata service and object storage behind two MockTransports.

    Storage URLs end in the item's display name, so failures can be
    injected per item by name.
    """

    base_url = BASE_URL
    token = TOKEN

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.calls: list[tuple[str, str]] = []
        self.stored: dict[str, bytes] = {}
        self.credential_responses: dict[str, httpx.Response] = {}
        self.confirm_status: dict[str, int] = {}
        self.put_status: dict[str, int] = {}
        self.put_delay: dict[str, float] = {}
        self.put_error: dict[str, Exception] = {}
        self.in_flight = 0
        self.max_in_flight = 0
        self._ids = itertools.count(101)
        self._names: dict[str, str] = {}

    @property
    def api_transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.api)

    @property
    def storage_transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.storage)

    def storage_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == STORAGE_HOST]

    def api_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host != STORAGE_HOST]

    def _enter(self, request: httpx.Request) -> None:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)

    async def api(self, request: httpx.Request) -> httpx.Response:
        self._enter(request)
        try:
            await asyncio.sleep(0)
            body = json.loads(request.content) if request.content else {}

            if request.method == "POST" and request.url.path == UPLOAD_URL_PATH:
                name = body["name"]
                self.calls.append(("credentials", name))
                if name in self.credential_responses:
                    return self.credential_responses[name]
                record_id = str(next(self._ids))
                self._names[record_id] = name
                return httpx.Response(
                    200,
                    json={
                        "success": True,
                        "data": {
                            "uploadUrl": (
                                f"https://{STORAGE_HOST}/bucket/{name}"
                                "?X-Amz-Credential=abc&X-Amz-Signature=secret"
                            ),
                            "recordId": record_id,
                            "storedFilename": f"{record_id}-{name}.{body['extension']}",
                            "expiresIn": 900,
                        },
                    },
                )

            if request.method == "POST" and request.url.path == CONFIRM_UPLOAD_PATH:
                record_id = body["recordId"]
                name = self._names.get(record_id, "?")
                self.calls.append(("confirm", name))
                status = self.confirm_status.get(name, 200)
                if status >= 400:
                    return httpx.Response(status, text="Record not found")
                return httpx.Response(
                    200,
                    json={
                        "data": {
                            "_id": record_id,
                            "name": body["name"],
                            "description": body["description"],
                            "filename": f"{record_id}-{name}",
                            "visibility": "private",
                        }
                    },
                )

            return httpx.Response(404, text="Not found")
        finally:
            self.in_flight -= 1

    async def storage(self, request: httpx.Request) -> httpx.Response:
        self._enter(request)
        try:
            name = request.url.path.rsplit("/", 1)[-1]
            self.calls.append(("put", name))
            if name in self.put_delay:
                await asyncio.sleep(self.put_delay[name])
            if name in self.put_error:
                raise self.put_error[name]
            status = self.put_status.get(name, 200)
            if status >= 400:
                return httpx.Response(status, text="<Error><Code>AccessDenied</Code></Error>")
            self.stored[name] = request.content
            return httpx.Response(200)
        finally:
            self.in_flight -= 1


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


# =============================================================================
# Filesystem and config
# =============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
default_profile: test
output_format: table

profiles:
  test:
    url: https://materials-test.example.edu
    verify_ssl: false
    timeout: 30
    transfer_deadline: 45

  production:
    url: https://materials.example.edu
    verify_ssl: true
    timeout: 60
    default_visibility: public
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's BATCHUP_* variables out of tests."""
    for var in (
        "BATCHUP_URL",
        "BATCHUP_TOKEN",
        "BATCHUP_PROFILE",
        "BATCHUP_VERIFY_SSL",
        "BATCHUP_TIMEOUT",
        "BATCHUP_TRANSFER_DEADLINE",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def isolated_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config file and session cache at a temporary directory."""
    config_file = temp_dir / "config" / "config.yaml"
    session_file = temp_dir / "config" / ".session"
    monkeypatch.setattr("batchup.core.config.CONFIG_FILE", config_file)
    monkeypatch.setattr("batchup.cli.config_cmd.CONFIG_FILE", config_file)
    monkeypatch.setattr("batchup.core.auth.SESSION_CACHE_FILE", session_file)
    return temp_dir / "config"
