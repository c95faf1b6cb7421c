from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pytest
from fastapi.testclient import TestClient

from napi.config import Settings
from napi.core.errors import ExecutionError
from napi.core.executor import CommandExecutor
from napi.webui.app import create_app

USERNAME = "admin"
PASSWORD = "s3cret-pass"
VERSION = "1.2.3"


class FakeExecutor(CommandExecutor):
    """Records every command instead of spawning a process.

    outputs maps a shell command line (or a space-joined argv) to its stdout;
    any command containing one of fail_on raises ExecutionError.
    """

    def __init__(self, outputs: Optional[Dict[str, str]] = None, fail_on: Iterable[str] = ()):
        super().__init__()
        self.outputs = outputs or {}
        self.fail_on = tuple(fail_on)
        self.calls: List[Tuple[str, object]] = []

    def run(self, command_line: str) -> str:
        self.calls.append(("shell", command_line))
        return self._result(command_line)

    def run_args(self, argv: Sequence[str]) -> str:
        self.calls.append(("argv", list(argv)))
        return self._result(" ".join(argv))

    def _result(self, display: str) -> str:
        if any(marker in display for marker in self.fail_on):
            raise ExecutionError(command=display, returncode=1)
        return self.outputs.get(display, "")


def make_settings(**overrides) -> Settings:
    values = dict(
        username=USERNAME,
        password=PASSWORD,
        version=VERSION,
        session_key="test-session-signing-key",
        server_user="alice",
        secure_cookies=False,
        log_file=None,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def app(settings, executor):
    return create_app(settings, executor=executor)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_client(executor):
    """Build clients over apps with overridden settings, sharing the executor"""
    opened = []

    def factory(**overrides) -> TestClient:
        test_client = TestClient(create_app(make_settings(**overrides), executor=executor))
        test_client.__enter__()
        opened.append(test_client)
        return test_client

    yield factory

    for test_client in opened:
        test_client.__exit__(None, None, None)


@pytest.fixture
def credentials() -> Dict[str, str]:
    return {"username": USERNAME, "password": PASSWORD}


@pytest.fixture
def auth_client(client, credentials):
    """Client holding an authenticated session cookie"""
    response = client.post("/login", json=credentials)
    assert response.status_code == 200
    return client
