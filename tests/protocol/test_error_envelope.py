from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from pentago.protocol.http.app import create_app


def test_error_envelope_for_http_exception() -> None:
    app: FastAPI = create_app()

    @app.get("/boom")
    def boom():  # type: ignore[no-redef]
        raise HTTPException(status_code=400, detail="oops")

    client = TestClient(app)
    r = client.get("/boom")
    assert r.status_code == 400
    body = r.json()
    assert "error" in body
    err = body["error"]
    assert err["code"] == "bad_request"
    assert err["message"] == "oops"
    assert err["type"] == "client_error"
    assert err["request_id"]


def test_value_error_maps_to_bad_request() -> None:
    app: FastAPI = create_app()

    @app.get("/bad-value")
    def bad_value():  # type: ignore[no-redef]
        raise ValueError("cell 7 is already occupied")

    client = TestClient(app)
    r = client.get("/bad-value")
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "bad_request"
    assert err["message"] == "cell 7 is already occupied"


def test_unhandled_exception_is_internal_error() -> None:
    app: FastAPI = create_app()

    @app.get("/crash")
    def crash():  # type: ignore[no-redef]
        raise RuntimeError("kaboom")

    client = TestClient(app, raise_server_exceptions=False)
    r = client.get("/crash")
    assert r.status_code == 500
    err = r.json()["error"]
    assert err["code"] == "internal_error"
    assert err["type"] == "server_error"
    assert "kaboom" not in err["message"]


def test_validation_error_lists_fields() -> None:
    client = TestClient(create_app())
    game_id = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{game_id}/place", json={})
    assert r.status_code == 422
    err = r.json()["error"]
    assert err["code"] == "unprocessable_entity"
    assert any(fe["field"].endswith("cell") for fe in err["field_errors"])


def test_conflict_code() -> None:
    client = TestClient(create_app())
    game_id = client.post("/api/games", json={"ai_player": "white"}).json()["game_id"]
    r = client.post(f"/api/games/{game_id}/ai")
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "conflict"
