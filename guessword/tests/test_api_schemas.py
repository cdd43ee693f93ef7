"""
Tests for API Pydantic schemas and the HTTP layer.

Validates that:
- Request/response models serialize correctly
- Error codes are properly structured
- Endpoints map engine errors to status codes
- The WebSocket pushes state
"""

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from ..api.app import create_app
from ..api.service import APIService
from ..config import RoundConfig
from ..engine_core.timer import ManualScheduler


@pytest.fixture
def api(scheduler, short_config):
    """Service on a virtual clock, wrapped in an app."""
    service = APIService(scheduler=scheduler, config=short_config)
    return create_app(service)


@pytest.fixture
def client(api):
    return TestClient(api)


@pytest.fixture
def session_id(client):
    response = client.post("/api/v1/sessions", json={"seed": 3})
    assert response.status_code == 201
    return response.json()["session_id"]


class TestPydanticSchemas:
    """Tests for Pydantic schema validation."""

    def test_round_state_defaults(self):
        from ..api.schemas import RoundStateInfo, BuzzName

        state = RoundStateInfo()

        data = state.model_dump(mode="json")
        assert data["word"] is None
        assert data["remaining_text"] == "00:00"
        assert data["buzz"] == BuzzName.NO_BUZZ.value

    def test_create_session_request_validation(self):
        from ..api.schemas import CreateSessionRequest

        request = CreateSessionRequest()
        assert request.countdown_seconds is None
        assert request.seed is None

        with pytest.raises(ValidationError):
            CreateSessionRequest(countdown_seconds=0)
        with pytest.raises(ValidationError):
            CreateSessionRequest(panic_seconds=-1)

    def test_error_response_schema(self):
        from ..api.schemas import ErrorResponse, ErrorCode

        response = ErrorResponse(
            error="Session abc not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
            details={"session_id": "abc"},
        )

        data = response.model_dump(mode="json")
        assert data["error_code"] == "SESSION_NOT_FOUND"
        assert data["details"]["session_id"] == "abc"

    def test_buzz_names_match_engine(self):
        from ..api.schemas import BuzzName
        from ..engine_core.events import BuzzType

        assert {b.value for b in BuzzName} == {b.value for b in BuzzType}


class TestRoundConfig:
    """Tests for round timing validation."""

    def test_canonical_defaults(self):
        config = RoundConfig()

        assert config.countdown_seconds == 60
        assert config.tick_seconds == 1
        assert config.panic_seconds == 10
        assert config.tick_count == 60

    def test_countdown_must_be_multiple_of_tick(self):
        with pytest.raises(ValidationError):
            RoundConfig(countdown_seconds=10, tick_seconds=3)

    def test_panic_cannot_exceed_countdown(self):
        with pytest.raises(ValidationError):
            RoundConfig(countdown_seconds=5, panic_seconds=10)

    def test_config_is_frozen(self):
        config = RoundConfig()
        with pytest.raises(ValidationError):
            config.countdown_seconds = 5

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("GUESSWORD_COUNTDOWN_SECONDS", "20")
        monkeypatch.setenv("GUESSWORD_PANIC_SECONDS", "5")

        config = RoundConfig.from_env()

        assert config.countdown_seconds == 20
        assert config.tick_seconds == 1
        assert config.panic_seconds == 5


class TestErrorCodes:
    """Tests for error code coverage."""

    def test_all_error_codes_defined(self):
        from ..api.schemas import ErrorCode

        required_codes = [
            "SESSION_NOT_FOUND",
            "ROUND_NOT_ACTIVE",
            "ROUND_ALREADY_RUNNING",
            "ROUND_OVER_PENDING",
            "VALIDATION_ERROR",
        ]

        for code in required_codes:
            assert hasattr(ErrorCode, code), f"Missing error code: {code}"
            assert ErrorCode[code].value == code

    def test_error_code_values_are_strings(self):
        """Error codes are string enums for JSON serialization."""
        from ..api.schemas import ErrorCode

        for code in ErrorCode:
            assert isinstance(code.value, str)
            assert code.value == code.value.upper()


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    def test_response_models_in_schema(self, api):
        from fastapi.openapi.utils import get_openapi

        schema = get_openapi(title=api.title, version=api.version, routes=api.routes)
        schemas = schema["components"]["schemas"]

        for name in [
            "SessionResponse",
            "RoundStateResponse",
            "BuzzQueueResponse",
            "VocabularyResponse",
            "ErrorResponse",
        ]:
            assert name in schemas, f"Missing schema: {name}"

    def test_endpoints_have_response_models(self, api):
        from fastapi.openapi.utils import get_openapi

        paths = get_openapi(title=api.title, version=api.version, routes=api.routes)["paths"]

        assert "201" in paths["/api/v1/sessions"]["post"]["responses"]
        assert "200" in paths["/api/v1/sessions/{session_id}/state"]["get"]["responses"]
        assert "409" in paths["/api/v1/sessions/{session_id}/correct"]["post"]["responses"]


class TestEndpoints:
    """Tests for the HTTP endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "guessword"

    def test_words(self, client):
        data = client.get("/api/v1/words").json()
        assert data["count"] == 21

    def test_create_session_without_body(self, client):
        response = client.post("/api/v1/sessions")

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "playing"
        assert data["state"]["remaining_seconds"] == 10

    def test_create_session_invalid_timing(self, client):
        response = client.post(
            "/api/v1/sessions",
            json={"countdown_seconds": 10, "tick_seconds": 3},
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_round_through_http(self, client, scheduler, session_id):
        assert client.post(f"/api/v1/sessions/{session_id}/correct").json()["state"]["score"] == 1
        assert client.post(f"/api/v1/sessions/{session_id}/skip").json()["state"]["score"] == 0

        scheduler.advance(10)

        data = client.get(f"/api/v1/sessions/{session_id}/state").json()
        assert data["status"] == "score"
        assert data["result"]["final_score"] == 0

        buzzes = client.get(f"/api/v1/sessions/{session_id}/buzzes").json()["buzzes"]
        assert [b["buzz"] for b in buzzes] == [
            "correct",
            "countdown_panic",
            "countdown_panic",
            "game_over",
        ]
        assert buzzes[-1]["pattern"] == [0, 2000]

        again = client.post(f"/api/v1/sessions/{session_id}/play-again")
        assert again.status_code == 200
        assert again.json()["state"]["round_number"] == 2

    def test_unknown_session_is_404(self, client):
        response = client.get("/api/v1/sessions/missing/state")

        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"
        assert response.json()["details"]["session_id"] == "missing"

    def test_correct_after_round_over_is_409(self, client, scheduler, session_id):
        scheduler.advance(10)

        response = client.post(f"/api/v1/sessions/{session_id}/correct")

        assert response.status_code == 409
        assert response.json()["error_code"] == "ROUND_NOT_ACTIVE"
        assert response.json()["details"]["operation"] == "correct"

    def test_play_again_during_round_is_409(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/play-again")

        assert response.status_code == 409
        assert response.json()["error_code"] == "ROUND_ALREADY_RUNNING"

    def test_end_session(self, client, scheduler, session_id):
        response = client.delete(f"/api/v1/sessions/{session_id}")

        assert response.json() == {"success": True, "session_id": session_id}
        assert scheduler.active_timers == []
        assert client.get("/api/v1/sessions").json()["count"] == 0


class TestWebSocket:
    """Tests for the state WebSocket."""

    def test_initial_state_and_ping(self, client, session_id):
        with client.websocket_connect(f"/api/v1/sessions/{session_id}/ws") as websocket:
            message = websocket.receive_json()
            assert message["type"] == "state_update"
            assert message["payload"]["state"]["remaining_seconds"] == 10

            websocket.send_text('{"type": "ping"}')
            assert websocket.receive_json() == {"type": "pong"}

    def test_push_on_correct(self, client, session_id):
        with client.websocket_connect(f"/api/v1/sessions/{session_id}/ws") as websocket:
            websocket.receive_json()

            client.post(f"/api/v1/sessions/{session_id}/correct")

            message = websocket.receive_json()
            assert message["type"] == "state_update"
            assert message["payload"]["state"]["score"] == 1

    def test_buzz_cues_pushed(self, client, session_id):
        with client.websocket_connect(f"/api/v1/sessions/{session_id}/ws") as websocket:
            websocket.receive_json()

            client.post(f"/api/v1/sessions/{session_id}/correct")

            messages = [websocket.receive_json() for _ in range(3)]
            assert [m["type"] for m in messages] == ["state_update", "buzz", "state_update"]
            buzzes = messages[1]["payload"]["buzzes"]
            assert [b["buzz"] for b in buzzes] == ["correct"]
            assert buzzes[0]["pattern"] == [100, 100, 100, 100, 100, 100]

        # Already delivered over the socket
        assert client.get(f"/api/v1/sessions/{session_id}/buzzes").json()["buzzes"] == []

    @pytest.mark.parametrize("text", ["[1]", "5", "not json"])
    def test_malformed_message_keeps_socket_open(self, client, session_id, text):
        with client.websocket_connect(f"/api/v1/sessions/{session_id}/ws") as websocket:
            websocket.receive_json()

            websocket.send_text(text)
            message = websocket.receive_json()
            assert message["type"] == "error"
            assert message["payload"]["error_code"] == "VALIDATION_ERROR"

            websocket.send_text('{"type": "ping"}')
            assert websocket.receive_json() == {"type": "pong"}

    def test_unknown_session(self, client):
        with client.websocket_connect("/api/v1/sessions/missing/ws") as websocket:
            message = websocket.receive_json()
            assert message["type"] == "error"
            assert message["payload"]["error_code"] == "SESSION_NOT_FOUND"


class TestDefaultApp:
    """The module-level app used by uvicorn."""

    def test_module_app_serves_health(self):
        from ..api.app import app

        assert TestClient(app).get("/health").status_code == 200

    def test_service_on_app_state(self):
        service = APIService(scheduler=ManualScheduler())
        app = create_app(service)

        assert app.state.service is service
