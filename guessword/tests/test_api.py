"""
Tests for API layer.

Tests:
- API service methods
- Session lifecycle via API
- Error handling
"""

import pytest
from pydantic import ValidationError

from ..api.schemas import (
    BuzzName,
    CreateSessionRequest,
    SessionStatus,
)
from ..api.service import APIService
from ..config import RoundConfig
from ..engine_core.errors import RoundAlreadyRunning, RoundNotActive, SessionNotFound
from ..engine_core.timer import ManualScheduler


class TestAPIService:
    """Tests for APIService."""

    @pytest.fixture
    def service(self, scheduler, short_config):
        """Fresh API service on a virtual clock."""
        return APIService(scheduler=scheduler, config=short_config)

    @pytest.fixture
    def session_id(self, service):
        return service.create_session(CreateSessionRequest()).session_id

    def test_create_session(self, service):
        """Creating a session starts the first round with the service timing."""
        response = service.create_session(CreateSessionRequest())

        assert response.session_id
        assert response.status == SessionStatus.PLAYING
        assert response.countdown_seconds == 10
        assert response.panic_seconds == 3
        assert response.state.remaining_seconds == 10
        assert response.state.remaining_text == "00:10"
        assert response.state.score == 0
        assert response.state.phase == "playing"
        assert response.state.round_number == 1
        assert response.result is None
        assert response.history == []

    def test_create_session_overrides_timing(self, service):
        response = service.create_session(CreateSessionRequest(countdown_seconds=60))

        assert response.countdown_seconds == 60
        assert response.tick_seconds == 1
        assert response.panic_seconds == 3
        assert response.state.remaining_text == "01:00"

    def test_create_session_with_invalid_timing(self, service):
        """Panic threshold longer than the round is rejected."""
        with pytest.raises(ValidationError):
            service.create_session(CreateSessionRequest(countdown_seconds=5, panic_seconds=10))

    def test_get_session(self, service, session_id):
        response = service.get_session(session_id)

        assert response.session_id == session_id
        assert response.countdown_seconds == 10

    def test_get_nonexistent_session(self, service):
        with pytest.raises(SessionNotFound):
            service.get_session("nonexistent-id")

    def test_correct_and_skip(self, service, session_id):
        response = service.correct(session_id)
        assert response.state.score == 1
        assert response.status == SessionStatus.PLAYING

        response = service.skip(session_id)
        response = service.skip(session_id)
        assert response.state.score == -1

    def test_buzzes_are_drained(self, service, session_id):
        service.correct(session_id)

        response = service.get_buzzes(session_id)
        assert [b.buzz for b in response.buzzes] == [BuzzName.CORRECT]
        assert response.buzzes[0].pattern == [100, 100, 100, 100, 100, 100]

        assert service.get_buzzes(session_id).buzzes == []

    def test_round_end(self, service, scheduler, session_id):
        service.correct(session_id)
        scheduler.advance(10)

        response = service.get_state(session_id)

        assert response.status == SessionStatus.SCORE
        assert response.result.final_score == 1
        assert response.state.remaining_seconds == 0
        assert response.state.remaining_text == "00:00"
        assert response.state.phase == "over"
        buzzes = [b.buzz for b in service.get_buzzes(session_id).buzzes]
        assert buzzes == [
            BuzzName.CORRECT,
            BuzzName.COUNTDOWN_PANIC,
            BuzzName.COUNTDOWN_PANIC,
            BuzzName.GAME_OVER,
        ]

    def test_actions_after_round_end_fail(self, service, scheduler, session_id):
        scheduler.advance(10)

        with pytest.raises(RoundNotActive):
            service.correct(session_id)

    def test_play_again(self, service, scheduler, session_id):
        service.skip(session_id)
        scheduler.advance(10)

        response = service.play_again(session_id)

        assert response.status == SessionStatus.PLAYING
        assert response.state.score == 0
        assert response.state.round_number == 2
        assert response.result is None
        assert [r.final_score for r in service.get_session(session_id).history] == [-1]

    def test_play_again_during_round_fails(self, service, session_id):
        with pytest.raises(RoundAlreadyRunning):
            service.play_again(session_id)

    def test_end_session(self, service, scheduler, session_id):
        assert service.end_session(session_id)
        assert scheduler.active_timers == []
        assert service.end_session(session_id) is False

        with pytest.raises(SessionNotFound):
            service.get_state(session_id)

    def test_list_sessions(self, service):
        first = service.create_session(CreateSessionRequest())
        second = service.create_session(CreateSessionRequest())

        sessions = service.list_sessions()
        assert first.session_id in sessions
        assert second.session_id in sessions

    def test_vocabulary(self, service):
        response = service.get_vocabulary()
        assert response.count == 21
        assert "zebra" in response.words

    def test_default_config_from_env(self, monkeypatch):
        monkeypatch.setenv("GUESSWORD_COUNTDOWN_SECONDS", "20")
        service = APIService(scheduler=ManualScheduler())

        assert service.config.countdown_seconds == 20


class TestMultipleSessions:
    """Tests for multiple concurrent sessions."""

    def test_sessions_are_independent(self, scheduler):
        service = APIService(scheduler=scheduler, config=RoundConfig())
        first = service.create_session(CreateSessionRequest(seed=1)).session_id
        second = service.create_session(CreateSessionRequest(countdown_seconds=20, seed=2)).session_id

        service.correct(first)
        service.correct(first)
        service.skip(second)
        scheduler.advance(20)

        assert service.get_state(first).status == SessionStatus.PLAYING
        assert service.get_state(first).state.score == 2
        assert service.get_state(first).state.remaining_seconds == 40
        assert service.get_state(second).status == SessionStatus.SCORE
        assert service.get_state(second).result.final_score == -1
