from __future__ import annotations

from fastapi.testclient import TestClient

from pentago.engine.game import STARTPOS
from pentago.protocol.http.app import create_app


def test_undo_steps_back_one_action() -> None:
    client = TestClient(create_app())
    game_id = client.post("/api/games").json()["game_id"]

    client.post(f"/api/games/{game_id}/place", json={"cell": "d4"})
    client.post(f"/api/games/{game_id}/rotate", json={"rotation": "3cw"})

    r = client.post(f"/api/games/{game_id}/undo")
    assert r.status_code == 200
    state = r.json()
    assert state["phase"] == "rotate"
    assert state["move_history"] == ["d4"]

    r = client.post(f"/api/games/{game_id}/undo")
    assert r.json()["position"] == STARTPOS


def test_undo_on_fresh_game_is_bad_request() -> None:
    client = TestClient(create_app())
    game_id = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{game_id}/undo")
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"
