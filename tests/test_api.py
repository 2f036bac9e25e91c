from __future__ import annotations

import base64
from typing import Generator

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client(pipeline) -> Generator[TestClient, None, None]:
    from genpipe.server.main import create_app

    @pipeline.flows.flow("explode")
    async def explode(ctx, value):
        raise RuntimeError("backend on fire")

    with TestClient(create_app(pipeline)) as c:
        yield c


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_list_flows_and_specs(client):
    r = client.get("/flows")
    assert r.status_code == 200
    assert r.json()["flows"] == ["describeImageFlow", "explode", "shortTerrorFlow"]

    r = client.get("/flow-specs")
    assert r.status_code == 200
    specs = {s["name"]: s for s in r.json()["flows"]}
    assert specs["shortTerrorFlow"]["input_schema"] == {"type": "string"}
    assert "image_b64" in specs["describeImageFlow"]["input_schema"]["properties"]


def test_list_models(client):
    r = client.get("/models")
    assert r.status_code == 200
    [model] = r.json()["models"]
    assert model["name"] == "llava"
    assert model["capabilities"]["media"] is True


def test_run_flow(client):
    r = client.post("/flows/shortTerrorFlow", json={"input": "pumpkins"})
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "completed"
    assert body["output"] == "Write a small terror-based paragraph themed on pumpkins"
    assert body["logs"][0]["message"] == "Starting flow shortTerrorFlow"


def test_run_multimodal_flow(client, jpeg_bytes):
    r = client.post(
        "/flows/describeImageFlow",
        json={"input": {"image_b64": base64.b64encode(jpeg_bytes).decode("ascii"), "question": "Who is this?"}},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "completed"
    assert body["output"] == "Who is this?"


def test_multimodal_flow_does_not_read_server_files(client, pipeline, tmp_path):
    secret = tmp_path / "secret.txt"
    secret.write_bytes(b"TOP-SECRET")
    r = client.post("/flows/describeImageFlow", json={"input": {"path": str(secret)}})
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "failed"
    assert body["error_type"] == "ValidationError"
    assert len(pipeline.backends[0].requests) == 0


def test_failed_flow_reports_error(client):
    r = client.post("/flows/explode", json={"input": None})
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "failed"
    assert body["error"] == "backend on fire"
    assert body["error_type"] == "RuntimeError"


def test_unknown_flow_404(client):
    r = client.post("/flows/doesNotExist", json={"input": "x"})
    assert r.status_code == 404
