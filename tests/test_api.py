from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from helpdesk_metrics import api_server as api_server_module
from helpdesk_metrics.api_server import create_app
from helpdesk_metrics.config import Settings


def _settings(**overrides) -> Settings:
    values = {
        "host": "127.0.0.1",
        "port": 2222,
        "server_name": "fastapi",
        "static_dir": None,
        "log_level": "INFO",
        "cors_origins": ["*"],
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app(_settings()))


def _upload(client: TestClient, text: str, name: str = "tickets.csv"):
    return client.post("/api/sessions", files=[("file", (name, text.encode("utf-8"), "text/csv"))])


def test_health(client) -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["server"] == "fastapi"
    assert payload["port"] == 2222
    assert "time" in payload


def test_upload_csv_acknowledgement(client) -> None:
    response = client.post("/api/upload-csv", json={"file_name": "tickets.csv", "size": 10})

    assert response.status_code == 200
    assert response.json() == {"message": "CSV upload endpoint ready", "received": True}


def test_upload_csv_acknowledgement_without_body(client) -> None:
    response = client.post("/api/upload-csv")
    assert response.json()["received"] is True


@pytest.mark.parametrize(
    "body",
    [b"[1, 2]", b'"hello"', b'{"size": "big"}', b"{not json", b"plain text"],
)
def test_upload_csv_acknowledgement_ignores_any_body(client, body) -> None:
    response = client.post("/api/upload-csv", content=body, headers={"Content-Type": "application/json"})

    assert response.status_code == 200
    assert response.json() == {"message": "CSV upload endpoint ready", "received": True}


def test_session_end_to_end(client, sample_csv) -> None:
    created = _upload(client, sample_csv)
    assert created.status_code == 200
    payload = created.json()
    assert payload["tickets"] == 5
    assert payload["metrics"]["resolved_tickets"] == 2
    assert payload["metrics"]["avg_time_to_close"]["priority_order"] == ["none", "medium", "high"]
    session_id = payload["session_id"]

    metrics_response = client.get(f"/api/sessions/{session_id}/metrics")
    assert metrics_response.status_code == 200
    metrics_payload = metrics_response.json()
    assert metrics_payload["metrics"]["open_backlog"] == 2
    assert metrics_payload["metrics"]["summary"]["resolution_rate"] == 40.0
    assert "backlog_by_age" in metrics_payload["figures"]

    backlog_response = client.get(f"/api/sessions/{session_id}/backlog")
    assert backlog_response.status_code == 200
    backlog = backlog_response.json()
    assert backlog["total"] == 3
    assert [row["id"] for row in backlog["rows"]] == ["T3", "T5", "T2"]
    assert backlog["rows"][0]["created_at"] == "2025-12-20 12:00:00"

    export_response = client.get(f"/api/sessions/{session_id}/export/backlog.csv")
    assert export_response.status_code == 200
    assert export_response.text.splitlines()[0].startswith("id,url,subject")

    tickets_response = client.get(f"/api/sessions/{session_id}/export/tickets.csv")
    assert tickets_response.status_code == 200
    assert len(tickets_response.text.strip().splitlines()) == 6

    cleared = client.delete(f"/api/sessions/{session_id}")
    assert cleared.status_code == 200
    assert session_id not in api_server_module.SESSION_STORE

    missing = client.get(f"/api/sessions/{session_id}/metrics")
    assert missing.status_code == 404
    assert "Please upload a CSV file first" in missing.json()["detail"]


def test_empty_upload_returns_400(client) -> None:
    response = _upload(client, "")

    assert response.status_code == 400
    assert "empty" in response.json()["detail"].lower()


def test_whitespace_upload_returns_400(client) -> None:
    response = _upload(client, "   \n  ")
    assert response.status_code == 400


def test_unknown_session_returns_404(client) -> None:
    assert client.get("/api/sessions/does-not-exist/backlog").status_code == 404
    assert client.delete("/api/sessions/does-not-exist").status_code == 404


def test_static_directory_is_served(tmp_path: Path) -> None:
    (tmp_path / "index.html").write_text("<h1>Upload</h1>", encoding="utf-8")
    client = TestClient(create_app(_settings(static_dir=tmp_path)))

    response = client.get("/")
    assert response.status_code == 200
    assert "Upload" in response.text
    assert client.get("/api/health").json()["status"] == "ok"
