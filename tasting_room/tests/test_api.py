"""
Tests for API layer.

Tests:
- API service methods
- Session lifecycle via HTTP
- Error handling
"""

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.service import APIService
from ..engine_core.errors import SessionNotFound, ValidationError
from ..engine_core.state import GamePhase


BOTTLES = [
    {"varietal": "Sangiovese", "producer": "Antinori", "year": "2018", "country": "Italy"},
    {"varietal": "Tempranillo", "producer": "Muga", "year": "2015", "country": "Spain"},
]


class TestAPIService:
    """Tests for APIService."""

    @pytest.fixture
    def service(self):
        """Create a fresh API service."""
        return APIService()

    @pytest.fixture
    def session_id(self, service):
        session = service.create_session()
        result = service.setup_game(session.session_id, ["Ana", "Ben"], BOTTLES)
        assert result.success
        return session.session_id

    def test_setup_game(self, service, session_id):
        state = service.get_session(session_id).state

        assert state.phase == GamePhase.TASTING
        assert [b.bottle_id for b in state.bottles] == [1, 2]

    def test_setup_invalid_roster(self, service):
        session = service.create_session()

        with pytest.raises(ValidationError):
            service.setup_game(session.session_id, [], BOTTLES)
        assert service.get_session(session.session_id).phase == GamePhase.SETUP

    def test_record_guesses_uses_current_bottle(self, service, session_id):
        service.submit_round(session_id)
        service.next_round(session_id)

        state = service.record_guesses(session_id, [("Ana", [3, 3, 3, 3, 3], "Rioja", "")])

        assert state.get_player("Ana").guesses[0].bottle_id == 2

    def test_record_duplicate_player_rejected(self, service, session_id):
        with pytest.raises(ValidationError, match="Duplicate guess"):
            service.record_guesses(session_id, [
                ("Ana", [3, 3, 3, 3, 3], "", ""),
                ("Ana", [4, 4, 4, 4, 4], "", ""),
            ])

    def test_record_after_last_bottle_rejected(self, service, session_id):
        service.next_round(session_id)
        service.next_round(session_id)

        with pytest.raises(ValidationError, match="No bottle"):
            service.record_guesses(session_id, [("Ana", [3, 3, 3, 3, 3], "", "")])

    def test_final_score_derives_tie(self, service, session_id):
        service.final_reveal(session_id)

        result = service.final_score(session_id, scores={"Ana": 2, "Ben": 2})

        assert result.success
        assert result.new_state.phase == GamePhase.TIE_BREAKER

    def test_final_score_explicit_tie_flag_wins(self, service, session_id):
        service.final_reveal(session_id)

        result = service.final_score(session_id, scores={"Ana": 2, "Ben": 2}, tie_detected=False)

        assert result.new_state.phase == GamePhase.FINAL

    def test_snapshot_and_restore(self, service, session_id):
        service.submit_round(session_id)
        snapshot = service.snapshot(session_id)

        restored = service.restore(snapshot)

        assert restored.session_id != session_id
        assert restored.state == service.get_session(session_id).state

    def test_get_nonexistent_session(self, service):
        with pytest.raises(SessionNotFound):
            service.get_session("nonexistent-id")

    def test_end_session(self, service, session_id):
        assert service.end_session(session_id)
        assert session_id not in service.list_sessions()


class TestHTTPFlow:
    """End-to-end game over HTTP."""

    @pytest.fixture
    def client(self):
        return TestClient(create_app(APIService()))

    @pytest.fixture
    def session_id(self, client):
        response = client.post("/api/v1/sessions")
        assert response.status_code == 200
        return response.json()["session_id"]

    def test_full_game(self, client, session_id):
        base = f"/api/v1/sessions/{session_id}"

        response = client.post(f"{base}/setup", json={"players": ["Ana", "Ben"], "bottles": BOTTLES})
        assert response.status_code == 200
        state = response.json()["state"]
        assert state["phase"] == "tasting"
        assert state["current_bottle_id"] == 1
        assert state["missing_guesses"] == ["Ana", "Ben"]
        # labels stay hidden while tasting
        assert state["bottles"][0]["varietal"] is None

        response = client.post(f"{base}/guesses", json={"guesses": [
            {"player": "Ana", "ratings": [4, 4, 3, 3, 4], "guess_varietal": "Sangiovese"},
            {"player": "Ben", "ratings": [3, 3, 3, 2, 3], "guess_varietal": "Merlot"},
        ]})
        assert response.status_code == 200
        assert response.json()["missing_guesses"] == []

        response = client.post(f"{base}/submit-round")
        assert response.json()["state"]["is_discussion_phase"] is True

        response = client.post(f"{base}/next-round")
        assert response.json()["state"]["current_round"] == 1

        client.post(f"{base}/submit-round")
        response = client.post(f"{base}/reveal")
        state = response.json()["state"]
        assert state["phase"] == "reveal"
        assert state["bottles"][1]["varietal"] == "Tempranillo"

        response = client.post(f"{base}/score", json={"scores": {"Ana": 3, "Ben": 1}})
        state = response.json()["state"]
        assert state["phase"] == "final"
        assert state["players"][0]["score"] == 3

        response = client.get(base)
        assert response.json()["is_active"] is False

    def test_score_without_body(self, client, session_id):
        base = f"/api/v1/sessions/{session_id}"
        client.post(f"{base}/setup", json={"players": ["Ana"], "bottles": BOTTLES[:1]})
        client.post(f"{base}/reveal")

        response = client.post(f"{base}/score")

        assert response.status_code == 200
        assert response.json()["state"]["phase"] == "final"

    def test_invalid_phase_is_409(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/next-round")

        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_PHASE"

    def test_second_setup_is_409(self, client, session_id):
        payload = {"players": ["Ana"], "bottles": BOTTLES}
        client.post(f"/api/v1/sessions/{session_id}/setup", json=payload)

        response = client.post(f"/api/v1/sessions/{session_id}/setup", json=payload)

        assert response.status_code == 409

    def test_validation_error_is_422(self, client, session_id):
        response = client.post(
            f"/api/v1/sessions/{session_id}/setup",
            json={"players": ["Ana", "Ana"], "bottles": BOTTLES},
        )

        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert "Duplicate" in data["error"]

    def test_bad_ratings_are_422(self, client, session_id):
        base = f"/api/v1/sessions/{session_id}"
        client.post(f"{base}/setup", json={"players": ["Ana"], "bottles": BOTTLES})

        response = client.post(f"{base}/guesses", json={"guesses": [
            {"player": "Ana", "ratings": [9, 3, 3, 3, 3]},
        ]})

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_unknown_session_is_404(self, client):
        response = client.get("/api/v1/sessions/missing/state")

        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

    def test_undo(self, client, session_id):
        base = f"/api/v1/sessions/{session_id}"
        client.post(f"{base}/setup", json={"players": ["Ana"], "bottles": BOTTLES})
        client.post(f"{base}/submit-round")

        response = client.post(f"{base}/undo")

        assert response.status_code == 200
        assert response.json()["is_discussion_phase"] is False

    def test_snapshot_restore(self, client, session_id):
        base = f"/api/v1/sessions/{session_id}"
        client.post(f"{base}/setup", json={"players": ["Ana", "Ben"], "bottles": BOTTLES})
        client.post(f"{base}/submit-round")
        snapshot = client.get(f"{base}/snapshot").json()["snapshot"]

        response = client.post("/api/v1/sessions/restore", json={"snapshot": snapshot})

        assert response.status_code == 200
        restored = response.json()
        assert restored["session_id"] != session_id
        assert restored["phase"] == "tasting"
        state = client.get(f"/api/v1/sessions/{restored['session_id']}/state").json()
        assert state["is_discussion_phase"] is True

    def test_restore_corrupt_snapshot(self, client):
        response = client.post("/api/v1/sessions/restore", json={"snapshot": {"phase": "tasting"}})

        assert response.status_code == 422

    def test_restore_non_string_name(self, client, session_id):
        base = f"/api/v1/sessions/{session_id}"
        client.post(f"{base}/setup", json={"players": ["Ana", "Ben"], "bottles": BOTTLES})
        snapshot = client.get(f"{base}/snapshot").json()["snapshot"]
        snapshot["players"][0]["name"] = 5

        response = client.post("/api/v1/sessions/restore", json={"snapshot": snapshot})

        assert response.status_code == 422
        assert "player name" in response.text

    def test_end_and_list(self, client, session_id):
        assert client.get("/api/v1/sessions").json()["count"] == 1

        response = client.delete(f"/api/v1/sessions/{session_id}")

        assert response.json()["success"] is True
        assert client.get("/api/v1/sessions").json()["count"] == 0

    def test_health(self, client):
        response = client.get("/health")

        assert response.json()["status"] == "healthy"
