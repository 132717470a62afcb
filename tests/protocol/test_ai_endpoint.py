from __future__ import annotations

from fastapi.testclient import TestClient

from pentago.protocol.http.app import create_app


def _client() -> TestClient:
    return TestClient(create_app())


def test_ai_answers_a_human_turn() -> None:
    client = _client()
    r = client.post("/api/games", json={"ai_player": "white", "difficulty": "easy", "seed": 5})
    game_id = r.json()["game_id"]
    client.post(f"/api/games/{game_id}/place", json={"cell": "c3"})
    client.post(f"/api/games/{game_id}/rotate", json={"rotation": "1ccw"})

    r = client.post(f"/api/games/{game_id}/ai")
    assert r.status_code == 200
    data = r.json()
    assert "/" in data["played"]
    assert [d["kind"] for d in data["decisions"]] == ["place", "rotate"]
    assert data["decisions"][0]["state"]
    assert data["game"]["current_player"] == "black"
    assert data["game"]["move_history"][2:] == data["played"].split("/")


def test_ai_is_seeded_per_game() -> None:
    played = []
    for _ in range(2):
        client = _client()
        game_id = client.post("/api/games", json={"ai_player": "black", "seed": 9}).json()[
            "game_id"
        ]
        played.append(client.post(f"/api/games/{game_id}/ai").json()["played"])
    assert played[0] == played[1]


def test_analysis_mode_plays_for_side_to_move() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{game_id}/ai")
    assert r.status_code == 200
    assert r.json()["game"]["current_player"] == "white"


def test_ai_on_finished_game_is_rejected() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    position = "bbbbb./....../....../....../....../...... w place"
    client.post(f"/api/games/{game_id}/position", json={"position": position})
    r = client.post(f"/api/games/{game_id}/ai")
    assert r.status_code == 400


def test_invalid_create_request() -> None:
    client = _client()
    r = client.post("/api/games", json={"ai_player": "green"})
    assert r.status_code == 422
