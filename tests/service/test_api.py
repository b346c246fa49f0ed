"""
Service-level test for the FastAPI application.

Runs a relay runtime (file source -> channel -> file sink) behind the app and
drives it through the admin endpoints.
"""

import time

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.runtime import ConnectorRuntime
from app.utils.config import FileSinkSettings, FileSourceSettings, Settings


@pytest.fixture
def dirs(tmp_path):
    source_dir = tmp_path / "input"
    sink_dir = tmp_path / "output"
    source_dir.mkdir()
    return source_dir, sink_dir


@pytest.fixture
def client(dirs):
    source_dir, sink_dir = dirs
    runtime = ConnectorRuntime(
        Settings(source_enabled=True, sink_enabled=True, send_timeout=1),
        source_settings=FileSourceSettings(
            directory=source_dir,
            # only manual polls in these tests
            trigger={"fixed_delay": 1, "time_unit": "HOURS", "initial_delay": 1},
        ),
        sink_settings=FileSinkSettings(
            directory=sink_dir, name_expression="headers.file_name", binary=True
        ),
    )
    app = create_app()
    app.state.runtime = runtime
    with TestClient(app) as test_client:
        yield test_client


def wait_for(path, timeout=10.0):
    deadline = time.monotonic() + timeout
    while not path.exists() and time.monotonic() < deadline:
        time.sleep(0.05)
    return path.exists()


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "operational"


def test_health_reports_components(client):
    body = client.get("/health").json()

    assert body["status"] == "healthy"
    assert body["components"]["source"]["running"] is True
    assert body["components"]["sink"]["running"] is True


def test_poll_relays_file_to_sink(client, dirs):
    source_dir, sink_dir = dirs
    (source_dir / "report.csv").write_bytes(b"a,b\n1,2\n")

    response = client.post("/admin/source/poll")

    assert response.status_code == 200
    assert response.json()["messages_sent"] == 1
    assert wait_for(sink_dir / "report.csv")
    assert (sink_dir / "report.csv").read_bytes() == b"a,b\n1,2\n"

    assert client.post("/admin/source/poll").json()["messages_sent"] == 0

    stats = client.get("/admin/stats").json()
    assert stats["source"]["files_emitted"] == 1
    assert stats["source"]["seen"] == 1


def test_reset_seen_reemits(client, dirs):
    source_dir, _ = dirs
    (source_dir / "a.txt").write_text("a")
    client.post("/admin/source/poll")

    response = client.delete("/admin/source/seen")

    assert response.json()["cleared"] == 1
    assert client.post("/admin/source/poll").json()["messages_sent"] == 1


def test_source_endpoints_404_when_disabled(dirs):
    _, sink_dir = dirs
    app = create_app()
    app.state.runtime = ConnectorRuntime(
        Settings(source_enabled=False, sink_enabled=True),
        sink_settings=FileSinkSettings(directory=sink_dir),
    )
    with TestClient(app) as test_client:
        assert test_client.post("/admin/source/poll").status_code == 404
        assert test_client.get("/health").json()["components"]["source"]["enabled"] is False
