from __future__ import annotations

from fastapi.testclient import TestClient

from chessai.engine.board import STARTPOS_FEN


MATE_IN_ONE = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"
PROMOTION = "8/4P3/8/8/8/8/k7/4K3 w - - 0 1"


def _new_game(client: TestClient, **body) -> dict:
    r = client.post("/api/games", json=body) if body else client.post("/api/games")
    assert r.status_code == 200
    return r.json()


def test_create_game_and_get_state(client: TestClient) -> None:
    state = _new_game(client)
    game_id = state["game_id"]
    assert state["fen"] == STARTPOS_FEN
    assert state["mode"] == "two_player"
    assert state["side_to_move"] == "white"
    assert state["status"] == "in_progress"
    assert len(state["legal_moves"]) == 20
    assert state["opening_name"] == "Caro-Kann Defense: Advance Variation"

    r = client.get(f"/api/games/{game_id}/state")
    assert r.status_code == 200
    assert r.json() == state


def test_move_and_capture_tracking(client: TestClient) -> None:
    game_id = _new_game(client)["game_id"]
    for uci in ("e2e4", "d7d5", "e4d5"):
        r = client.post(f"/api/games/{game_id}/move", json={"move": uci})
        assert r.status_code == 200, r.text
    state = r.json()
    assert state["move_history"] == ["e2e4", "d7d5", "e4d5"]
    assert state["last_move"] == "e4d5"
    assert state["captured"] == {"white": ["p"], "black": []}
    assert state["side_to_move"] == "black"


def test_bad_and_illegal_moves(client: TestClient) -> None:
    game_id = _new_game(client)["game_id"]
    r = client.post(f"/api/games/{game_id}/move", json={"move": "zz"})
    assert r.status_code == 400
    r = client.post(f"/api/games/{game_id}/move", json={"move": "e2e5"})
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "illegal move"


def test_promotion_requires_a_piece(client: TestClient) -> None:
    game_id = _new_game(client)["game_id"]
    assert client.post(f"/api/games/{game_id}/position", json={"fen": PROMOTION}).status_code == 200
    r = client.post(f"/api/games/{game_id}/move", json={"move": "e7e8"})
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "promotion required"
    r = client.post(f"/api/games/{game_id}/move", json={"move": "e7e8q"})
    assert r.status_code == 200
    assert r.json()["fen"].startswith("4Q3/")


def test_moves_from_square(client: TestClient) -> None:
    game_id = _new_game(client)["game_id"]
    r = client.get(f"/api/games/{game_id}/moves", params={"square": "e2"})
    assert r.status_code == 200
    assert sorted(r.json()["moves"]) == ["e2e3", "e2e4"]
    r = client.get(f"/api/games/{game_id}/moves", params={"square": "z9"})
    assert r.status_code == 400
    r = client.get(f"/api/games/{game_id}/moves")
    assert r.status_code == 422


def test_evaluate_endpoint(client: TestClient) -> None:
    game_id = _new_game(client)["game_id"]
    r = client.get(f"/api/games/{game_id}/evaluate")
    assert r.status_code == 200
    assert r.json() == {"score": 0, "material": 0, "tension": 0, "activity": 0, "positional": 0}


def test_set_position_validation(client: TestClient) -> None:
    game_id = _new_game(client)["game_id"]
    r = client.post(f"/api/games/{game_id}/position", json={"fen": ""})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"
    r = client.post(f"/api/games/{game_id}/position", json={"fen": MATE_IN_ONE})
    assert r.status_code == 200
    assert r.json()["fen"] == MATE_IN_ONE
    assert r.json()["opening_name"] is None


def test_undo_and_reset(client: TestClient) -> None:
    game_id = _new_game(client)["game_id"]
    client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"})
    r = client.post(f"/api/games/{game_id}/undo")
    assert r.status_code == 200
    assert r.json()["fen"] == STARTPOS_FEN
    r = client.post(f"/api/games/{game_id}/undo")
    assert r.status_code == 400

    client.post(f"/api/games/{game_id}/move", json={"move": "d2d4"})
    r = client.post(f"/api/games/{game_id}/reset")
    assert r.status_code == 200
    assert r.json()["fen"] == STARTPOS_FEN
    assert r.json()["move_history"] == []


def test_checkmate_ends_the_game(client: TestClient) -> None:
    game_id = _new_game(client)["game_id"]
    client.post(f"/api/games/{game_id}/position", json={"fen": MATE_IN_ONE})
    r = client.post(f"/api/games/{game_id}/move", json={"move": "a1a8"})
    state = r.json()
    assert state["status"] == "checkmate"
    assert state["status_side"] == "black"
    assert state["game_over"] is True
    assert state["legal_moves"] == []

    r = client.post(f"/api/games/{game_id}/move", json={"move": "g8h8"})
    assert r.status_code == 409
    r = client.post(f"/api/games/{game_id}/ai-move")
    assert r.status_code == 409
