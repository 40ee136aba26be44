from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient


def test_error_envelope_for_http_exception(app: FastAPI) -> None:
    @app.get("/boom")
    def boom():  # type: ignore[no-redef]
        raise HTTPException(status_code=409, detail="busy")

    r = TestClient(app).get("/boom")
    assert r.status_code == 409
    err = r.json()["error"]
    assert err["code"] == "conflict"
    assert err["message"] == "busy"
    assert err["type"] == "client_error"
    assert err["request_id"]


def test_unhandled_exception_is_internal_error(app: FastAPI) -> None:
    @app.get("/crash")
    def crash():  # type: ignore[no-redef]
        raise RuntimeError("kaboom")

    r = TestClient(app, raise_server_exceptions=False).get("/crash")
    assert r.status_code == 500
    err = r.json()["error"]
    assert err["code"] == "internal_error"
    assert err["type"] == "server_error"
    assert "kaboom" not in err["message"]


def test_validation_error_envelope(client: TestClient) -> None:
    game_id = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{game_id}/move", json={})
    assert r.status_code == 422
    err = r.json()["error"]
    assert err["code"] == "unprocessable_entity"
    assert any(fe["field"].endswith("move") for fe in err["field_errors"])


def test_unknown_game_is_404(client: TestClient) -> None:
    for method, path in (
        ("get", "/api/games/nope/state"),
        ("post", "/api/games/nope/ai-move"),
        ("post", "/api/games/nope/undo"),
        ("get", "/api/games/nope/evaluate"),
    ):
        r = getattr(client, method)(path)
        assert r.status_code == 404
        assert r.json()["error"]["code"] == "not_found"
