from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from napi.core.executor import CommandExecutor
from napi.core.systemd import LIST_SERVICES_COMMAND, LIST_SOCKETS_COMMAND
from napi.webui.app import create_app

SERVICES_OUT = """\
  UNIT              LOAD   ACTIVE SUB     DESCRIPTION
  web.service       loaded active running Web  frontend
  worker.service    loaded failed failed  Queue worker

2 loaded units listed.
"""

SOCKETS_OUT = """\
  UNIT          LOAD   ACTIVE SUB       DESCRIPTION
  api.socket    loaded active listening API socket
"""


# ==================== Services ====================

def test_list_services(auth_client, executor) -> None:
    executor.outputs[LIST_SERVICES_COMMAND] = SERVICES_OUT
    executor.outputs[LIST_SOCKETS_COMMAND] = SOCKETS_OUT

    response = auth_client.get("/system/services")

    assert response.status_code == 200
    assert response.json() == {
        "services": [
            {"UNIT": "web.service", "LOAD": "loaded", "ACTIVE": "active",
             "SUB": "running", "DESCRIPTION": "Web frontend"},
            {"UNIT": "worker.service", "LOAD": "loaded", "ACTIVE": "failed",
             "SUB": "failed", "DESCRIPTION": "Queue worker"},
        ],
        "sockets": [
            {"UNIT": "api.socket", "LOAD": "loaded", "ACTIVE": "active",
             "SUB": "listening", "DESCRIPTION": "API socket"},
        ],
    }


def test_list_services_empty(auth_client) -> None:
    response = auth_client.get("/system/services")

    assert response.json() == {"services": [], "sockets": []}


@pytest.mark.parametrize(
    "failing,message",
    [
        ("--type=service", "Error fetching services\n"),
        ("--type=socket", "Error fetching sockets\n"),
    ],
)
def test_list_services_failure_returns_no_partial_result(auth_client, executor, failing, message) -> None:
    executor.outputs[LIST_SERVICES_COMMAND] = SERVICES_OUT
    executor.fail_on = (failing,)

    response = auth_client.get("/system/services")

    assert response.status_code == 500
    assert response.text == message


@pytest.mark.parametrize(
    "verb,past",
    [("start", "started"), ("stop", "stopped"), ("restart", "restarted")],
)
def test_lifecycle_verbs(auth_client, executor, verb, past) -> None:
    response = auth_client.post(f"/system/services/{verb}", params={"target": "web.service"})

    assert response.status_code == 200
    assert response.json() == {"message": f"Service web.service {past} successfully"}
    assert executor.calls == [("argv", ["systemctl", "--user", verb, "web.service"])]


@pytest.mark.parametrize(
    "verb,gerund",
    [("start", "starting"), ("stop", "stopping"), ("restart", "restarting")],
)
def test_lifecycle_failure(auth_client, executor, verb, gerund) -> None:
    executor.fail_on = ("web.service",)

    response = auth_client.post(f"/system/services/{verb}", params={"target": "web.service"})

    assert response.status_code == 500
    assert response.text == f"Error {gerund} service web.service\n"


@pytest.mark.parametrize("verb", ["start", "stop", "restart"])
@pytest.mark.parametrize("params", [{}, {"target": ""}])
def test_lifecycle_requires_target(auth_client, executor, verb, params) -> None:
    response = auth_client.post(f"/system/services/{verb}", params=params)

    assert response.status_code == 400
    assert response.text == "Service name is required\n"
    assert executor.calls == []


# ==================== Files ====================

def test_write_then_read(auth_client, tmp_path: Path) -> None:
    content = "PORT=8080\r\nNAME=ünïcode app\n\ttabbed"

    written = auth_client.post(
        "/system/write",
        params={"filename": "app.env", "filepath": str(tmp_path), "filecontent": content},
    )
    assert written.status_code == 200
    assert written.json() == {"message": f"File app.env saved successfully at {tmp_path}"}

    read = auth_client.get("/system/read", params={"filename": "app.env", "filepath": str(tmp_path)})
    assert read.status_code == 200
    assert read.json() == {"content": content}


@pytest.mark.parametrize(
    "params",
    [
        {"filepath": "/tmp", "filecontent": "x"},
        {"filename": "a.txt", "filecontent": "x"},
        {"filename": "a.txt", "filepath": "/tmp"},
        {"filename": "a.txt", "filepath": "/tmp", "filecontent": ""},
    ],
)
def test_write_requires_all_params(auth_client, params) -> None:
    response = auth_client.post("/system/write", params=params)

    assert response.status_code == 400
    assert response.text == "Filename, filepath, and filecontent are required\n"


def test_write_missing_param_creates_nothing(auth_client, tmp_path: Path) -> None:
    auth_client.post("/system/write", params={"filename": "a.txt", "filepath": str(tmp_path)})

    assert list(tmp_path.iterdir()) == []


def test_write_failure(auth_client, tmp_path: Path) -> None:
    missing_dir = tmp_path / "nope"

    response = auth_client.post(
        "/system/write",
        params={"filename": "a.txt", "filepath": str(missing_dir), "filecontent": "x"},
    )

    assert response.status_code == 500
    assert response.text == f"Error saving file a.txt at {missing_dir}\n"


@pytest.mark.parametrize("params", [{"filepath": "/tmp"}, {"filename": "a.txt"}, {}])
def test_read_requires_params(auth_client, params) -> None:
    response = auth_client.get("/system/read", params=params)

    assert response.status_code == 400
    assert response.text == "Filename and filepath are required\n"


def test_read_missing_file(auth_client, tmp_path: Path) -> None:
    response = auth_client.get("/system/read", params={"filename": "ghost.txt", "filepath": str(tmp_path)})

    assert response.status_code == 500
    assert response.text == f"Error reading file ghost.txt at {tmp_path}\n"


def test_file_root_rejects_escape(make_client, credentials, tmp_path: Path) -> None:
    root = tmp_path / "root"
    root.mkdir()
    client = make_client(file_root=root)
    client.post("/login", json=credentials)

    response = client.post(
        "/system/write",
        params={"filename": "../escape.txt", "filepath": str(root), "filecontent": "x"},
    )

    assert response.status_code == 403
    assert not (tmp_path / "escape.txt").exists()

    inside = client.post(
        "/system/write",
        params={"filename": "ok.txt", "filepath": str(root), "filecontent": "x"},
    )
    assert inside.status_code == 200


# ==================== Scheduling ====================

def test_schedule_task(auth_client, executor) -> None:
    response = auth_client.post(
        "/system/at",
        params={"time": "now + 1 minute", "command": "systemctl --user restart web.service"},
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Task scheduled at now + 1 minute"}
    assert executor.calls == [
        ("shell", 'echo "systemctl --user restart web.service" | at now + 1 minute'),
    ]


@pytest.mark.parametrize("params", [{"time": "now"}, {"command": "ls"}, {"time": "", "command": "ls"}])
def test_schedule_requires_params(auth_client, executor, params) -> None:
    response = auth_client.post("/system/at", params=params)

    assert response.status_code == 400
    assert response.text == "Both time and command are required\n"
    assert executor.calls == []


def test_schedule_failure(auth_client, executor) -> None:
    executor.fail_on = ("| at",)

    response = auth_client.post("/system/at", params={"time": "whenever", "command": "ls"})

    assert response.status_code == 500
    assert response.text == "Error scheduling task at whenever\n"


def test_strict_mode_rejects_metacharacters(make_client, credentials, executor) -> None:
    client = make_client(strict_commands=True)
    client.post("/login", json=credentials)

    response = client.post("/system/at", params={"time": "now", "command": "ls; rm -rf ~"})

    assert response.status_code == 400
    assert executor.calls == []


# ==================== Access ====================

@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", "/system/services"),
        ("POST", "/system/services/start?target=web.service"),
        ("POST", "/system/write?filename=a&filepath=/tmp&filecontent=x"),
        ("GET", "/system/read?filename=a&filepath=/tmp"),
        ("POST", "/system/at?time=now&command=ls"),
    ],
)
def test_system_routes_require_session(client, executor, method, path) -> None:
    response = client.request(method, path)

    assert response.status_code == 401
    assert response.text == "Unauthorized\n"
    assert executor.calls == []


def test_system_gate_can_be_disabled(make_client, executor) -> None:
    client = make_client(require_session_for_system=False)

    response = client.post("/system/services/restart", params={"target": "web.service"})

    assert response.status_code == 200
    assert executor.calls == [("argv", ["systemctl", "--user", "restart", "web.service"])]


def test_version_stays_gated_when_system_gate_disabled(make_client) -> None:
    client = make_client(require_session_for_system=False)

    assert client.get("/version").status_code == 401


# ==================== NUL bytes and undecodable files ====================

@pytest.fixture
def real_client(settings, credentials):
    """Authenticated client over an app that spawns real processes"""
    with TestClient(create_app(settings, executor=CommandExecutor())) as test_client:
        assert test_client.post("/login", json=credentials).status_code == 200
        yield test_client


def _assert_hardened(response) -> None:
    assert response.headers["content-security-policy"] == "default-src 'self'"
    assert response.headers["x-frame-options"] == "DENY"


def test_read_with_nul_in_filename(auth_client, tmp_path: Path) -> None:
    response = auth_client.get("/system/read", params={"filename": "a\x00b", "filepath": str(tmp_path)})

    assert response.status_code == 500
    assert response.text == f"Error reading file a\x00b at {tmp_path}\n"
    _assert_hardened(response)


def test_write_with_nul_in_filepath(auth_client, tmp_path: Path) -> None:
    response = auth_client.post(
        "/system/write",
        params={"filename": "a.txt", "filepath": f"{tmp_path}\x00x", "filecontent": "x"},
    )

    assert response.status_code == 500
    assert response.text == f"Error saving file a.txt at {tmp_path}\x00x\n"
    _assert_hardened(response)


def test_lifecycle_with_nul_in_target(real_client) -> None:
    response = real_client.post("/system/services/start", params={"target": "a\x00b"})

    assert response.status_code == 500
    assert response.text == "Error starting service a\x00b\n"
    _assert_hardened(response)


def test_schedule_with_nul_in_command(real_client) -> None:
    response = real_client.post("/system/at", params={"time": "now", "command": "ls\x00rm"})

    assert response.status_code == 500
    assert response.text == "Error scheduling task at now\n"
    _assert_hardened(response)


def test_read_replaces_invalid_utf8(auth_client, tmp_path: Path) -> None:
    (tmp_path / "blob.bin").write_bytes(b"head\xfftail")

    response = auth_client.get("/system/read", params={"filename": "blob.bin", "filepath": str(tmp_path)})

    assert response.status_code == 200
    assert response.json() == {"content": "head\ufffdtail"}
