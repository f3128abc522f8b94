"""
Shared fixtures for GitMaster tests.
"""

import json
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest
import requests

from gitmaster.config import reset_config_manager
from gitmaster.credentials import CredentialCell, CredentialStore
from gitmaster.dispatcher import ActionDispatcher
from gitmaster.models import ActionResult, RemoteCredential
from gitmaster.repository import GitHubGateway
from gitmaster.runner import ProcessRunner

TOKEN = "ghp_exampletoken1234"


def make_response(
    status_code: int = 200,
    json_body: Any = None,
    headers: Optional[Dict[str, str]] = None,
    content: Optional[bytes] = None,
    url: str = "https://api.github.com/"
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.encoding = "utf-8"
    response.headers.update(headers or {})
    if content is None:
        content = b"" if json_body is None else json.dumps(json_body).encode("utf-8")
    response._content = content
    return response


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep the process environment and the global config manager out of tests."""
    for name in (
        "GITHUB_TOKEN", "GITHUB_API_URL", "GITHUB_TIMEOUT",
        "GITMASTER_GIT_EXECUTABLE", "GITMASTER_WORKING_DIR", "GITMASTER_DEFAULT_BRANCH",
        "GITMASTER_GIT_TIMEOUT", "GITMASTER_CREDENTIALS_FILE",
        "LOG_LEVEL", "LOG_FILE", "GITMASTER_AUDIT_LOG"
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config_manager()
    yield
    reset_config_manager()


@pytest.fixture
def credential():
    return RemoteCredential(token=TOKEN)


@pytest.fixture
def session():
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def github(session):
    return GitHubGateway(session=session)


@pytest.fixture
def store(tmp_path):
    return CredentialStore(tmp_path / "github_config.json")


@pytest.fixture
def runner():
    runner = MagicMock(spec=ProcessRunner)
    runner.run.return_value = ActionResult.success("ok\n", exit_code=0)
    return runner


@pytest.fixture
def gateway():
    return MagicMock(spec=GitHubGateway)


@pytest.fixture
def dispatcher(runner, gateway, store, credential):
    return ActionDispatcher(runner, gateway, store, CredentialCell(credential))


@pytest.fixture
def disconnected(runner, gateway, store):
    return ActionDispatcher(runner, gateway, store, CredentialCell())
